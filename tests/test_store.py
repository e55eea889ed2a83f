from __future__ import annotations

import pytest

from stepscene.controller.store import StepGraphStore
from stepscene.model.errors import ValidationError
from stepscene.model.geometry_primitives import Vector
from stepscene.model.nodes import ShapeKind


def _add_steps(store: StepGraphStore, count: int) -> list[str]:
    return [store.add_step().id for _ in range(count)]


# ---- steps ----

def test_add_steps_are_spaced_along_x_and_newest_selected(store: StepGraphStore) -> None:
    ids = _add_steps(store, 3)

    assert [s.position.x for s in store.steps()] == [0.0, 3.0, 6.0]
    assert [s.title for s in store.steps()] == ["Step 1", "Step 2", "Step 3"]
    assert store.selected_id == ids[2]
    assert store.state.next_position == Vector(9.0, 0.0, 0.0)
    store.state.check_invariants()


def test_new_step_defaults(store: StepGraphStore) -> None:
    step = store.add_step()
    assert step.shape == ShapeKind.CUBE
    assert step.size == 1.0
    assert step.children == []
    assert step.parent_id is None


def test_delete_unselected_step_keeps_selection(store: StepGraphStore) -> None:
    a, b, c = _add_steps(store, 3)
    store.delete_step(b)

    assert store.state.order == [a, c]
    assert store.selected_id == c
    # Cursor is not rewound
    assert store.state.next_position.x == 9.0


@pytest.mark.parametrize(
    "count, delete_index, expected_index",
    [(1, 0, None), (2, 0, 0), (2, 1, 0), (5, 2, 2), (5, 4, 3)],
)
def test_deleting_selected_step_moves_selection(store, count, delete_index, expected_index) -> None:
    ids = _add_steps(store, count)
    store.select_step(ids[delete_index])
    store.delete_step(ids[delete_index])

    remaining = store.state.order
    expected = None if expected_index is None else remaining[expected_index]
    assert store.selected_id == expected
    store.state.check_invariants()


def test_delete_on_empty_store_is_noop(store: StepGraphStore, recorder) -> None:
    store.delete_step("missing")
    assert store.selected_id is None
    assert recorder == []


def test_delete_unselected_sub_step_keeps_selection(store: StepGraphStore) -> None:
    parent = store.add_step()
    first = store.add_sub_step(parent.id)
    second = store.add_sub_step(parent.id)
    assert store.selected_id == second.id

    store.delete_sub_step(parent.id, first.id)
    assert store.selected_id == second.id

    store.select_step(parent.id)
    store.delete_node(second.id)
    assert store.selected_id == parent.id
    store.state.check_invariants()


def test_delete_other_step_keeps_selected_sub_step(store: StepGraphStore) -> None:
    a, b = _add_steps(store, 2)
    sub = store.add_sub_step(b)
    assert store.selected_id == sub.id

    store.delete_step(a)
    assert store.selected_id == sub.id
    store.state.check_invariants()


def test_delete_step_removes_sub_steps_and_their_connections(store: StepGraphStore) -> None:
    a, b = _add_steps(store, 2)
    sub = store.add_sub_step(a)
    store.add_connection(sub.id, b)
    store.add_connection(b, sub.id)

    store.delete_step(a)

    assert sub.id not in store.state
    assert store.connections() == []
    store.state.check_invariants()


def test_delete_step_rewires_connections_through_it(store: StepGraphStore) -> None:
    a, b, c = _add_steps(store, 3)
    kept = store.add_connection(a, b, "into b")
    store.add_connection(b, c)

    store.delete_step(b)

    conns = store.connections()
    assert len(conns) == 1
    assert (conns[0].id, conns[0].from_id, conns[0].to_id) == (kept.id, a, c)
    assert conns[0].description == "into b"


def test_update_step_validates_before_applying(store: StepGraphStore) -> None:
    step = store.add_step()
    with pytest.raises(ValidationError):
        store.update_step(step.id, {"title": "Renamed", "color": "red"})
    assert store.find(step.id).title == "Step 1"

    updated = store.update_step(step.id, {"title": "Renamed", "shape": "sphere", "position": [1, 2, 3]})
    assert updated.title == "Renamed"
    assert updated.shape == ShapeKind.SPHERE
    assert updated.position == Vector(1.0, 2.0, 3.0)


@pytest.mark.parametrize("color", ["#fff", "#a1B2c3"])
def test_color_accepted(store: StepGraphStore, color: str) -> None:
    step = store.add_step()
    assert store.update_step(step.id, {"color": color}).color == color


@pytest.mark.parametrize("color", ["red", "#12345", "fff", "#ggg"])
def test_color_rejected(store: StepGraphStore, color: str) -> None:
    step = store.add_step()
    with pytest.raises(ValidationError):
        store.update_step(step.id, {"color": color})


@pytest.mark.parametrize("patch", [{"size": 0}, {"size": -1}, {"size": float("inf")}, {"size": float("nan")}, {"shape": "pyramid"}, {"position": [1, 2]}, {"id": "x"}])
def test_invalid_patches_rejected(store: StepGraphStore, patch: dict) -> None:
    step = store.add_step()
    with pytest.raises(ValidationError):
        store.update_step(step.id, patch)


def test_update_unknown_step_is_noop(store: StepGraphStore, recorder) -> None:
    assert store.update_step("missing", {"title": "x"}) is None
    assert recorder == []


# ---- sub-steps ----

def test_sub_steps_are_placed_under_parent(store: StepGraphStore) -> None:
    _, parent_id = _add_steps(store, 2)
    first = store.add_sub_step(parent_id)
    second = store.add_sub_step(parent_id)

    assert first.position == Vector(3.0, -2.0, 0.0)
    assert second.position == Vector(3.0, -2.0, 2.0)
    assert [s.title for s in store.sub_steps(parent_id)] == ["Substep 1", "Substep 2"]
    assert store.selected_id == second.id
    # Sub-steps do not move the step cursor
    assert store.state.next_position.x == 6.0


def test_sub_steps_cannot_nest(store: StepGraphStore) -> None:
    parent = store.add_step()
    sub = store.add_sub_step(parent.id)
    with pytest.raises(ValidationError):
        store.add_sub_step(sub.id)


def test_add_sub_step_unknown_parent(store: StepGraphStore) -> None:
    assert store.add_sub_step("missing") is None


def test_delete_selected_sub_step_selects_parent(store: StepGraphStore) -> None:
    parent = store.add_step()
    sub = store.add_sub_step(parent.id)
    store.delete_sub_step(parent.id, sub.id)

    assert store.find(parent.id).children == []
    assert store.selected_id == parent.id
    store.state.check_invariants()


def test_sub_step_operations_require_matching_parent(store: StepGraphStore) -> None:
    a, b = _add_steps(store, 2)
    sub = store.add_sub_step(a)

    assert store.update_sub_step(b, sub.id, {"title": "x"}) is None
    store.delete_sub_step(b, sub.id)
    assert sub.id in store.state


def test_update_and_delete_node_route_by_kind(store: StepGraphStore) -> None:
    step = store.add_step()
    sub = store.add_sub_step(step.id)

    assert store.update_node(sub.id, {"title": "Inner"}).title == "Inner"
    assert store.update_node(step.id, {"title": "Outer"}).title == "Outer"

    store.delete_node(sub.id)
    assert sub.id not in store.state
    store.delete_node(step.id)
    assert store.steps() == []


# ---- connections ----

def test_self_connection_rejected(store: StepGraphStore) -> None:
    step = store.add_step()
    with pytest.raises(ValidationError):
        store.add_connection(step.id, step.id)
    assert store.connections() == []


def test_connection_to_unknown_node_is_ignored(store: StepGraphStore) -> None:
    step = store.add_step()
    assert store.add_connection(step.id, "missing") is None


def test_connection_update_and_delete(store: StepGraphStore) -> None:
    a, b, c = _add_steps(store, 3)
    conn = store.add_connection(a, b)

    assert store.update_connection(conn.id, {"to_id": c, "description": "skip"}).to_id == c
    with pytest.raises(ValidationError):
        store.update_connection(conn.id, {"to_id": a})
    with pytest.raises(ValidationError):
        store.update_connection(conn.id, {"to_id": "missing"})

    store.delete_connection(conn.id)
    assert store.connections() == []


# ---- selection & signals ----

def test_select_unknown_id_is_ignored(store: StepGraphStore) -> None:
    step = store.add_step()
    store.select_step("missing")
    assert store.selected_id == step.id
    store.select_step(None)
    assert store.selected_id is None


def test_next_previous_walk_top_level(store: StepGraphStore) -> None:
    a, b, c = _add_steps(store, 3)
    store.select_step(None)
    store.next_step()
    assert store.selected_id == a
    store.next_step()
    store.next_step()
    store.next_step()
    assert store.selected_id == c
    store.previous_step()
    assert store.selected_id == b


def test_signals_on_add(store: StepGraphStore, recorder) -> None:
    step = store.add_step()
    assert recorder == [("graph",), ("selection", step.id)]


def test_selection_signal_only_on_change(store: StepGraphStore, recorder) -> None:
    step = store.add_step()
    recorder.clear()
    store.select_step(step.id)
    assert recorder == []


def test_viewer_mode_does_not_block_store(store: StepGraphStore, recorder) -> None:
    store.set_viewer_mode(True)
    store.set_viewer_mode(True)
    assert recorder == [("viewer", True)]

    # The store itself accepts edits; refusing them is the session's job
    store.add_step()
    assert len(store.steps()) == 1

    store.toggle_viewer_mode()
    assert store.viewer_mode is False


def test_reset_clears_everything(store: StepGraphStore) -> None:
    store.add_step()
    store.update_metadata(title="Lamp", description="Assembly")
    store.reset()

    assert store.steps() == []
    assert store.state.title == "Untitled Model"
    assert store.state.next_position == Vector.origin()
    assert store.selected_id is None


def test_step_ids_are_distinct(store: StepGraphStore) -> None:
    ids = _add_steps(store, 20)
    assert len(set(ids)) == 20
