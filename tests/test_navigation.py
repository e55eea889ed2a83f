from __future__ import annotations

import pytest

from stepscene.model.navigation import SelectionNavigator


ORDER = ["a", "b", "c"]


def test_next_moves_forward_and_stops_at_end() -> None:
    nav = SelectionNavigator(ORDER)
    assert nav.next("a") == "b"
    assert nav.next("b") == "c"
    assert nav.next("c") == "c"


def test_previous_moves_back_and_stops_at_start() -> None:
    nav = SelectionNavigator(ORDER)
    assert nav.previous("c") == "b"
    assert nav.previous("a") == "a"


def test_next_without_selection_picks_first_step() -> None:
    nav = SelectionNavigator(ORDER)
    assert nav.next(None) == "a"
    assert nav.previous(None) is None


def test_empty_sequence_is_inert() -> None:
    nav = SelectionNavigator([])
    assert nav.next(None) is None
    assert nav.previous(None) is None
    assert not nav.can_go_next(None)
    assert nav.counter(None) == (0, 0)


def test_off_sequence_selection_is_left_alone() -> None:
    # A selected sub-step is not part of the top-level walk
    nav = SelectionNavigator(ORDER)
    assert nav.next("sub") == "sub"
    assert nav.previous("sub") == "sub"
    assert nav.counter("sub") == (0, 3)


def test_can_go_and_counter() -> None:
    nav = SelectionNavigator(ORDER)
    assert nav.can_go_next("a") and not nav.can_go_previous("a")
    assert nav.can_go_previous("c") and not nav.can_go_next("c")
    assert nav.counter("b") == (2, 3)


@pytest.mark.parametrize(
    "remaining, deleted_index, expected",
    [
        ([], 0, None),
        (["b"], 0, "b"),
        (["a"], 1, "a"),
        (["a", "c", "d", "e"], 1, "c"),
        (["a", "b", "c", "d"], 4, "d"),
    ],
)
def test_after_delete(remaining, deleted_index, expected) -> None:
    assert SelectionNavigator.after_delete(remaining, deleted_index) == expected
