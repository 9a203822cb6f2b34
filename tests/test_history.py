import pytest

from history import HISTORY_CAPACITY, HistoryStack
from models import Document


def _doc(i):
    return Document(data=f"pdf-{i}".encode(), name="a.pdf")


def test_default_capacity_is_six():
    assert HISTORY_CAPACITY == 6
    assert HistoryStack().capacity == 6


def test_pop_returns_most_recent_first():
    stack = HistoryStack()
    for i in range(3):
        stack.push(_doc(i))
    assert [stack.pop().data for _ in range(3)] == [b"pdf-2", b"pdf-1", b"pdf-0"]
    assert stack.pop() is None


def test_push_on_full_stack_evicts_oldest():
    stack = HistoryStack(capacity=6)
    for i in range(7):
        stack.push(_doc(i))
    assert len(stack) == 6
    assert [d.data for d in stack.entries()] == [f"pdf-{i}".encode() for i in range(1, 7)]
    assert stack.peek().data == b"pdf-6"


def test_empty_stack_is_falsy():
    stack = HistoryStack()
    assert not stack
    assert stack.peek() is None
    stack.push(_doc(0))
    assert stack
    stack.clear()
    assert len(stack) == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        HistoryStack(capacity=0)
