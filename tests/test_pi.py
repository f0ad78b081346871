import pytest

from trilang.environment import Environment
from trilang.errors import TrilangError
from trilang.pi import eval_pi
from trilang.runtime import Runtime
from trilang.types import UNIT, Color, ColorVal, NumVal, BoolVal, StrVal, ContinuationVal


def run(line, env=None, runtime=None):
    return eval_pi(line, runtime or Runtime(), env)


def test_arithmetic_uses_operand_order():
    assert run('3 4 +') == NumVal(7.0)
    assert run('10 4 -') == NumVal(6.0)
    assert run('10 2 /') == NumVal(5.0)
    assert run('2 3 4 * +') == NumVal(14.0)
    assert run('1 2 <') == BoolVal(True)


def test_assignment_leaves_value_on_stack():
    env = Environment()
    assert run('5 "x" =', env) == NumVal(5.0)
    assert env.get('x') == NumVal(5.0)
    assert run('x 2 *', env) == NumVal(10.0)


def test_assignment_needs_string_name():
    with pytest.raises(TrilangError, match='variable name must be a string'):
        run('5 6 =')


def test_empty_line_is_unit():
    assert run('') == UNIT


def test_stack_errors():
    with pytest.raises(TrilangError) as exc:
        run('+')
    assert exc.value.err.name == 'StackError'
    assert exc.value.message == 'not enough operands for +'
    with pytest.raises(TrilangError, match='stack has 2 values remaining'):
        run('1 2')
    with pytest.raises(TrilangError, match='no value to print'):
        run('-->')


def test_print_array(capsys):
    assert run('[1,2,3] -->') == UNIT
    assert capsys.readouterr().out == 'Num(1.0) Num(2.0) Num(3.0)\n'
    # anything else passes through untouched
    assert run('4 -->') == NumVal(4.0)


def test_colors():
    assert run('color(255,0,0) color(0,0,255) blend') == ColorVal(Color(127, 0, 127))
    assert run('color(100,50,200) 2 scale') == ColorVal(Color(200, 100, 255))
    with pytest.raises(TrilangError, match='scale factor must be a number'):
        run('color(1,2,3) "a" scale')


def test_get():
    assert run('[10,20,30] 1 get') == NumVal(20.0)
    assert run('{"a":1} "a" get') == NumVal(1.0)


def test_unknown_token():
    with pytest.raises(TrilangError) as exc:
        run('bogus')
    assert exc.value.err.name == 'SyntaxError'
    assert exc.value.message == 'cannot parse value: bogus'


def test_type_errors_surface():
    with pytest.raises(TrilangError, match='cannot add Num and Str'):
        run('1 "a" +')


def test_control_words():
    rt = Runtime()
    rt.cont_stack.push(ContinuationVal(lambda: StrVal('ran')))
    assert run('resume', runtime=rt) == StrVal('ran')
    assert run('resume', runtime=rt) == UNIT
    rt.cont_stack.push(ContinuationVal(lambda: StrVal('never')))
    assert run('break', runtime=rt) == UNIT
    assert rt.cont_stack.is_empty()


def test_backslash_string_token():
    env = Environment()
    assert run('"a\\"', env) == StrVal('a\\')
    assert run('"C:\\dir" "path" =', env) == StrVal('C:\\dir')
    assert env.get('path') == StrVal('C:\\dir')
