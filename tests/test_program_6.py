from pathlib import Path

import pytest

from trilang.__main__ import main

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_6_nested_blocks(capsys):
    main([str(EXAMPLES / 'program_6.rho')])
    out = capsys.readouterr().out.strip()
    assert out == '3'


def test_missing_program_file(capsys, tmp_path):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / 'nope.rho')])
    assert exc.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_rho_runtime_error_exits(capsys, tmp_path):
    program = tmp_path / 'bad.rho'
    program.write_text('x = 1\nx / 0\n', encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main([str(program)])
    assert exc.value.code == 1
    assert 'Runtime error: ArithmeticError: division by zero' in capsys.readouterr().err


def test_rho_prints_final_value(capsys, tmp_path):
    program = tmp_path / 'calc.rho'
    program.write_text('3 + 4\n', encoding='utf-8')
    main([str(program)])
    assert capsys.readouterr().out.strip() == 'Num(7.0)'


def test_lang_flag_overrides_extension(capsys, tmp_path):
    program = tmp_path / 'calc.txt'
    program.write_text('3 4 *\n', encoding='utf-8')
    main(['--lang', 'pi', str(program)])
    assert capsys.readouterr().out.strip() == 'Num(12.0)'


def test_debug_file_receives_stack_traffic(tmp_path):
    program = tmp_path / 'stack.rho'
    program.write_text('resume\nbreak\n', encoding='utf-8')
    log = tmp_path / 'debug.txt'
    main(['-v', '--debug-file', str(log), str(program)])
    text = log.read_text(encoding='utf-8')
    assert 'resume: stack empty' in text
    assert 'break: dropping 0 continuations' in text
