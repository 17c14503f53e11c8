from pathlib import Path

from lox.interpreter import Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_9_initializers(capsys):
    with open(EXAMPLES / 'program_9.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    interp = Interpreter()
    reporter = interp.run(source)
    assert not reporter.had_error and not reporter.had_runtime_error
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['6.5', 'Point3 instance', 'Point3', 'true', '15']
