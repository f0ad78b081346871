import pytest

from trilang.ast import Literal, Compose, Choice, BinaryOp, Resume, Break, Continue, Suspend, Assign, Var
from trilang.environment import Environment
from trilang.errors import TrilangError
from trilang.runtime import Runtime
from trilang.types import UNIT, NumVal, StrVal, ContinuationVal


def recorder(log, name):
    def body():
        log.append(name)
        return StrVal(name)
    return ContinuationVal(body)


def test_resume_runs_top_continuation():
    rt = Runtime()
    rt.cont_stack.push(ContinuationVal(lambda: NumVal(42.0)))
    assert rt.resume() == NumVal(42.0)
    assert rt.cont_stack.is_empty()


def test_resume_on_empty_stack_is_unit():
    rt = Runtime()
    assert rt.resume() == UNIT
    rt.cont_stack.push(ContinuationVal.empty())
    assert rt.resume() == UNIT


def test_break_discards_everything():
    rt = Runtime()
    log = []
    for name in ('a', 'b', 'c'):
        rt.cont_stack.push(recorder(log, name))
    assert rt.break_flow() == UNIT
    assert rt.cont_stack.is_empty()
    assert rt.resume() == UNIT
    assert log == []


def test_continue_runs_immediately():
    rt = Runtime()
    log = []
    assert rt.continue_with(recorder(log, 'now')) == StrVal('now')
    assert log == ['now']
    assert rt.cont_stack.is_empty()


def test_continue_ignores_other_values():
    rt = Runtime()
    rt.cont_stack.push(ContinuationVal(lambda: NumVal(1.0)))
    assert rt.continue_with(NumVal(3.0)) == UNIT
    assert len(rt.cont_stack) == 1


def test_compose_runs_left_before_right():
    rt = Runtime()
    log = []
    node = Compose(Literal(recorder(log, 'c1')), Literal(recorder(log, 'c2')))
    assert rt.evaluate(node) == UNIT
    assert len(rt.cont_stack) == 2
    assert rt.resume() == StrVal('c1')
    assert rt.resume() == StrVal('c2')
    assert rt.resume() == UNIT
    assert log == ['c1', 'c2']


def test_compose_requires_two_continuations():
    rt = Runtime()
    node = Compose(Literal(ContinuationVal.empty()), Literal(NumVal(1.0)))
    with pytest.raises(TrilangError) as exc:
        rt.evaluate(node)
    assert exc.value.err.name == 'TypeError'
    assert exc.value.message == 'compose requires two continuations, got Continuation and Num'
    assert rt.cont_stack.is_empty()


def test_choice_takes_left_unless_unit():
    rt = Runtime()
    assert rt.evaluate(Choice(Literal(UNIT), Literal(NumVal(1.0)))) == NumVal(1.0)
    # right side is not evaluated when the left produced a value
    failing = BinaryOp('/', Literal(NumVal(1.0)), Literal(NumVal(0.0)))
    assert rt.evaluate(Choice(Literal(NumVal(5.0)), failing)) == NumVal(5.0)


def test_choice_falls_back_when_nothing_resumes():
    rt = Runtime()
    assert rt.evaluate(Choice(Resume(), Literal(StrVal('fallback')))) == StrVal('fallback')
    rt.cont_stack.push(ContinuationVal(lambda: NumVal(9.0)))
    assert rt.evaluate(Choice(Resume(), Literal(StrVal('fallback')))) == NumVal(9.0)


def test_break_node_then_resume():
    rt = Runtime()
    log = []
    rt.evaluate(Compose(Literal(recorder(log, 'a')), Literal(recorder(log, 'b'))))
    assert rt.evaluate(Break()) == UNIT
    assert rt.evaluate(Resume()) == UNIT
    assert log == []


def test_suspended_body_sees_its_environment():
    rt = Runtime()
    env = Environment()
    env.set('x', NumVal(1.0))
    cont = rt.evaluate(Suspend(Assign('x', BinaryOp('+', Var('x'), Literal(NumVal(10.0))))), env)
    assert isinstance(cont, ContinuationVal)
    # nothing runs until the continuation is resumed
    assert env.get('x') == NumVal(1.0)
    assert rt.evaluate(Continue(Literal(cont)), env) == NumVal(11.0)
    assert env.get('x') == NumVal(11.0)


def test_error_inside_resumed_continuation_propagates():
    rt = Runtime()
    failing = Suspend(BinaryOp('/', Literal(NumVal(1.0)), Literal(NumVal(0.0))))
    rt.cont_stack.push(rt.evaluate(failing))
    with pytest.raises(TrilangError, match='division by zero'):
        rt.resume()
    assert rt.cont_stack.is_empty()


def test_debug_output_goes_to_file(capsys, tmp_path):
    rt = Runtime(debug_level=1, debug_file=str(tmp_path / 'debug.txt'))
    rt.resume()
    rt.close()
    assert 'resume: stack empty' in (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert capsys.readouterr().out == ''
