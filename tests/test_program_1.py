from pathlib import Path

from trilang.rho import eval_rho
from trilang.runtime import Runtime

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_1(capsys):
    with open(EXAMPLES / 'program_1.rho', 'r', encoding='utf-8') as f:
        source = f.read()
    runtime = Runtime()
    eval_rho(source, runtime)
    out = capsys.readouterr().out.strip()
    assert out == 'total 10'
