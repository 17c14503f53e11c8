import pytest

from lox.interpreter import Interpreter, run_file, run_program
from lox.parser import parse_program


def run(source, capsys):
    reporter = run_program(source)
    captured = capsys.readouterr()
    return captured.out.splitlines(), captured.err, reporter


@pytest.mark.parametrize('source, expected', [
    ('print 1;', '1'),
    ('print 2.5;', '2.5'),
    ('print 10 / 4;', '2.5'),
    ('print 7 - 10;', '-3'),
    ('print -0;', '-0'),
    ('print 1 / 0;', 'inf'),
    ('print -1 / 0;', '-inf'),
    ('print 0 / 0 == 0 / 0;', 'false'),
    ('print "a" + "b";', 'ab'),
    ('print nil;', 'nil'),
    ('print true;', 'true'),
    ('print !true;', 'false'),
    ('print !0;', 'false'),
    ('print !"";', 'false'),
    ('print 1 < 2;', 'true'),
    ('print 2 <= 2;', 'true'),
    ('print 1 > 2;', 'false'),
    ('print 3 >= 4;', 'false'),
    ('print nil == nil;', 'true'),
    ('print nil == false;', 'false'),
    ('print 1 == true;', 'false'),
    ('print 1 == 1.0;', 'true'),
    ('print "x" == "x";', 'true'),
    ('print "1" == 1;', 'false'),
    ('print 1 != 2;', 'true'),
    ('print clock;', '<native fn>'),
    ('fun f() {} print f;', '<fn f>'),
    ('fun f() {} print f();', 'nil'),
    ('fun f() {} print f == f;', 'true'),
])
def test_expression_results(source, expected, capsys):
    out, err, reporter = run(source, capsys)
    assert not reporter.had_error and not reporter.had_runtime_error, err
    assert out == [expected]


def test_logical_operators_return_operands(capsys):
    out, _, _ = run('print nil or 2; print 1 or 2; print nil and 2; print 1 and "b";', capsys)
    assert out == ['2', '1', 'nil', 'b']


def test_short_circuit_skips_side_effects(capsys):
    source = '''
    var hits = 0;
    fun bump() { hits = hits + 1; return true; }
    var a = true or bump();
    var b = false and bump();
    print hits;
    var c = false or bump();
    print hits;
    '''
    out, _, _ = run(source, capsys)
    assert out == ['0', '1']


def test_binary_operands_evaluate_left_to_right(capsys):
    source = '''
    fun say(x) { print x; return x; }
    print say(1) + say(2);
    '''
    out, _, _ = run(source, capsys)
    assert out == ['1', '2', '3']


def test_block_scoping_and_shadowing(capsys):
    source = '''
    var a = "outer";
    {
      var a = "inner";
      print a;
    }
    print a;
    '''
    out, _, _ = run(source, capsys)
    assert out == ['inner', 'outer']


def test_if_else_and_while(capsys):
    source = '''
    var i = 0;
    while (i < 3) {
      if (i == 1) print "one"; else print i;
      i = i + 1;
    }
    '''
    out, _, _ = run(source, capsys)
    assert out == ['0', 'one', '2']


def test_for_loop_matches_while_form(capsys):
    for_out, _, _ = run('for (var i = 0; i < 3; i = i + 1) print i;', capsys)
    while_out, _, _ = run('{ var i = 0; while (i < 3) { print i; i = i + 1; } }', capsys)
    assert for_out == while_out == ['0', '1', '2']


def test_for_loop_variable_is_scoped_to_loop(capsys):
    out, err, reporter = run('for (var i = 0; i < 1; i = i + 1) {} print i;', capsys)
    assert reporter.had_runtime_error
    assert err == "Undefined variable 'i'.\n[line 1]\n"


def test_closures_capture_by_reference(capsys):
    source = '''
    var get;
    var set;
    {
      var shared = 1;
      fun g() { return shared; }
      fun s(v) { shared = v; }
      get = g;
      set = s;
    }
    set(42);
    print get();
    '''
    out, _, _ = run(source, capsys)
    assert out == ['42']


def test_return_unwinds_through_loops(capsys):
    source = '''
    fun find() {
      var i = 0;
      while (true) {
        { if (i == 3) return i; }
        i = i + 1;
      }
    }
    print find();
    '''
    out, _, _ = run(source, capsys)
    assert out == ['3']


def test_recursion(capsys):
    out, _, _ = run('fun fact(n) { if (n <= 1) return 1; return n * fact(n - 1); } print fact(10);', capsys)
    assert out == ['3628800']


def test_deep_recursion_is_not_an_overflow(capsys):
    source = 'fun sum(n) { if (n == 0) return 0; return n + sum(n - 1); } print sum(1000);'
    out, err, reporter = run(source, capsys)
    assert not reporter.had_runtime_error, err
    assert out == ['500500']


def test_deeply_nested_expression_runs(capsys):
    depth = 300
    out, err, reporter = run('print ' + '(' * depth + '1' + ')' * depth + ';', capsys)
    assert not reporter.had_error, err
    assert out == ['1']


def test_clock_returns_seconds(capsys):
    out, _, reporter = run('var t = clock(); print t > 0;', capsys)
    assert not reporter.had_runtime_error
    assert out == ['true']


@pytest.mark.parametrize('source, message, line', [
    ('print -"a";', 'Operand must be a number.', 1),
    ('print 1 - "a";', 'Operands must be numbers.', 1),
    ('print "a" < 1;', 'Operands must be numbers.', 1),
    ('print 1 + "a";', 'Operands must be two numbers or two strings.', 1),
    ('print nope;', "Undefined variable 'nope'.", 1),
    ('nope = 1;', "Undefined variable 'nope'.", 1),
    ('"str"();', 'Can only call functions and classes.', 1),
    ('fun f(a) {}\nf(1, 2);', 'Expected 1 arguments but got 2.', 2),
    ('clock(1);', 'Expected 0 arguments but got 1.', 1),
    ('var x = 1; print x.y;', 'Only instances have properties.', 1),
    ('var x = 1; x.y = 2;', 'Only instances have fields.', 1),
    ('var NotAClass = 1;\nclass A < NotAClass {}', 'Superclass must be a class.', 2),
    ('fun f() { f(); }\nf();', 'Stack overflow.', 1),
])
def test_runtime_errors(source, message, line, capsys):
    out, err, reporter = run(source, capsys)
    assert reporter.had_runtime_error
    assert not reporter.had_error
    assert err == f"{message}\n[line {line}]\n"


def test_runtime_error_stops_execution(capsys):
    out, _, reporter = run('print 1; print nil + 1; print 2;', capsys)
    assert reporter.had_runtime_error
    assert out == ['1']


def test_static_error_prevents_execution(capsys):
    out, err, reporter = run('print "before";\nprint 1 +;', capsys)
    assert reporter.had_error
    assert out == []
    assert err == "[line 2] Error at ';': Expect expression.\n"


def test_resolver_error_prevents_execution(capsys):
    out, _, reporter = run('print "before"; return;', capsys)
    assert reporter.had_error
    assert out == []


def test_empty_program(capsys):
    out, err, reporter = run('', capsys)
    assert out == [] and err == ''
    assert not reporter.had_error and not reporter.had_runtime_error


def test_globals_persist_between_runs(capsys):
    interp = Interpreter()
    interp.run('var a = 1; fun inc() { a = a + 1; }')
    interp.run('inc(); inc();')
    interp.run('print a;')
    assert capsys.readouterr().out == '3\n'


def test_interpreter_recovers_after_runtime_error(capsys):
    interp = Interpreter()
    interp.run('fun boom() { { var local = 1; return nil + 1; } }')
    interp.run('boom();')
    assert interp.reporter.had_runtime_error
    assert interp.environment is interp.globals
    interp.reporter.reset()
    assert interp.reporter.messages == []
    interp.run('var ok = "fine"; print ok;')
    assert capsys.readouterr().out == 'fine\n'


def test_debug_trace_written_when_verbose(tmp_path, capsys):
    trace = tmp_path / 'trace.txt'
    interp = Interpreter(debug_level=3, debug_file=str(trace))
    interp.run('var a = 1; fun f(x) { return x; } if (a) f(a);')
    interp.close()
    text = trace.read_text(encoding='utf-8')
    assert 'parsed 3 statements' in text
    assert 'declare a: number = 1' in text
    assert 'define function f' in text
    assert 'call f(1)' in text


def test_run_file(tmp_path, capsys):
    script = tmp_path / 'hello.lox'
    script.write_text('var greeting = "hello";\nprint greeting + " file";\n', encoding='utf-8')
    interp = run_file(str(script))
    assert capsys.readouterr().out == 'hello file\n'
    assert not interp.reporter.had_error
    assert interp.debug_fp is None


def test_overflow_outside_any_call_is_a_runtime_error(capsys):
    chain = ' + '.join(['1'] * 20000)
    statements = parse_program(f'print "first";\nprint {chain};')
    interp = Interpreter()
    interp.interpret(statements)
    captured = capsys.readouterr()
    assert captured.out == 'first\n'
    assert captured.err == 'Stack overflow.\n[line 2]\n'
    assert interp.environment is interp.globals
