"""Unit tests for :mod:`smock.doubles` - call recording and dispatch."""

from __future__ import annotations

import dataclasses as dc
import typing as t

import pytest

from smock.doubles import UNKNOWN_MOCK_NAME, Call, Mock, is_mock, make_mock
from smock.errors import UsageError


@dc.dataclass
class FakeBehaviour:
    """Minimal behaviour accepting calls whose first argument is ``key``."""

    key: object
    result: object
    invoked: list[Call] = dc.field(default_factory=list)

    def handles(self, call: Call) -> bool:
        return bool(call.args) and call.args[0] == self.key

    def invoke(self, call: Call) -> object:
        self.invoked.append(call)
        return self.result


class Shape:
    """Example template object."""

    colour = "red"

    def area(self) -> int:
        return 0


class Square(Shape):
    """Template whose members are partly inherited."""

    def __init__(self) -> None:
        self.side = 2

    def perimeter(self) -> int:
        return 8


def test_mock_records_calls_verbatim() -> None:
    """Every call is appended with its positional and keyword arguments."""
    m = make_mock("recorder")
    payload = [1, 2]
    m("a", payload, flag=True)
    m()

    calls = m.received_calls()
    assert calls == [Call(("a", payload), {"flag": True}), Call()]
    assert calls[0].args[1] is payload


def test_received_calls_returns_a_copy() -> None:
    """Mutating the returned list does not alter the history."""
    m = make_mock("copy")
    m(1)
    m.received_calls().clear()
    assert len(m.received_calls()) == 1


def test_call_kwargs_are_read_only() -> None:
    """Captured keyword arguments cannot be changed after the call."""
    kwargs = {"x": 1}
    call = Call.capture((), kwargs)
    kwargs["x"] = 2
    assert call.kwargs["x"] == 1
    with pytest.raises(TypeError):
        call.kwargs["x"] = 3  # type: ignore[index]


def test_unmatched_call_returns_none() -> None:
    """Calls that no behaviour handles are silent and return ``None``."""
    m = make_mock("silent")
    m._mock_behaviours.append(FakeBehaviour("other", "value"))
    assert m("unmatched") is None
    assert len(m.received_calls()) == 1


def test_most_recent_matching_behaviour_wins() -> None:
    """Dispatch scans behaviours from last registered to first."""
    m = make_mock("dispatch")
    first = FakeBehaviour("k", "first")
    second = FakeBehaviour("k", "second")
    other = FakeBehaviour("z", "other")
    m._mock_behaviours.extend([first, second, other])

    assert m("k") == "second"
    assert m("z") == "other"
    assert first.invoked == []
    assert len(second.invoked) == 1


def test_call_accepts_self_keyword() -> None:
    """A keyword argument named ``self`` is recorded like any other."""
    m = make_mock("kw")
    m(self=1)
    assert m.received_calls() == [Call((), {"self": 1})]


@pytest.mark.parametrize(
    ("name", "expected"),
    [("greeter", "<mock: greeter>"), (None, f"<mock: {UNKNOWN_MOCK_NAME}>")],
)
def test_mock_display(name: str | None, expected: str) -> None:
    """Mocks render as ``<mock: NAME>``."""
    m = make_mock(name)
    assert repr(m) == expected
    assert str(m) == expected


@pytest.mark.parametrize(
    ("template", "children"),
    [
        (["save", "load"], {"save", "load"}),
        (("save",), {"save"}),
        ("save", {"save"}),
        ({"save": 1, "load": 2}, {"save", "load"}),
    ],
)
def test_template_names_create_children(
    template: object, children: set[str]
) -> None:
    """Name lists, single names and mappings each prime child mocks."""
    m = make_mock("parent", template)
    for child in children:
        value = getattr(m, child)
        assert is_mock(value)
        assert repr(value) == f"<mock: {child}>"


def test_object_template_includes_inherited_members() -> None:
    """Own and inherited members become children; root members do not."""
    m = make_mock("square", Square())
    for child in ("side", "perimeter", "area", "colour"):
        assert is_mock(getattr(m, child))
    assert not is_mock(m.__init__)
    assert not is_mock(getattr(m, "__dict__", None))


def test_mock_name_property() -> None:
    """``name`` exposes the display name and cannot be reassigned."""
    m = make_mock("greeter")
    assert m.name == "greeter"
    assert make_mock().name == UNKNOWN_MOCK_NAME
    with pytest.raises(AttributeError):
        m.name = "other"  # type: ignore[misc]


def test_mock_template_copies_children_only() -> None:
    """A mock used as a template contributes its children, not its internals."""
    original = make_mock("a", ["save"])
    m = make_mock("b", original)

    assert m("x") is None
    assert m.received_calls() == [Call(("x",))]
    assert m.name == "b"
    assert is_mock(m.save)
    assert m.save is not original.save
    assert original.received_calls() == []


@pytest.mark.parametrize(
    "template",
    [["received_calls"], "name", {"_mock_calls": 1}, ("save", "__call__")],
)
def test_explicit_template_names_may_not_shadow_mock_members(
    template: object,
) -> None:
    """Listing a name the mock itself uses is rejected."""
    with pytest.raises(UsageError, match="clash with mock members"):
        make_mock("b", template)


def test_object_template_skips_mock_members() -> None:
    """An example object's attributes named like mock members are skipped."""

    class Record:
        name = "row"
        received_calls = ()

        def save(self) -> None:
            pass

    m = make_mock("record", Record())
    assert m.name == "record"
    assert m.received_calls() == []
    assert is_mock(m.save)


def test_object_template_children_are_independent() -> None:
    """Each child mock has its own call history."""
    m = make_mock("shape", Shape())
    t.cast("Mock", m.area)(1)
    assert len(t.cast("Mock", m.area).received_calls()) == 1
    assert t.cast("Mock", m.colour).received_calls() == []
    assert m.received_calls() == []


@pytest.mark.parametrize(
    "value", [None, 0, "<mock: x>", object(), lambda: None, Call()]
)
def test_is_mock_rejects_other_values(value: object) -> None:
    """Only Mock instances are mocks, whatever they look like."""
    assert not is_mock(value)


def test_is_mock_for_fresh_mock() -> None:
    """A mock with no calls or behaviours is still recognised."""
    assert is_mock(Mock())
