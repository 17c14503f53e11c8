from pathlib import Path

from lox.interpreter import Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_4_fields_and_this(capsys):
    with open(EXAMPLES / 'program_4.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    interp = Interpreter()
    reporter = interp.run(source)
    assert not reporter.had_error and not reporter.had_runtime_error
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['The German chocolate cake is delicious!']
