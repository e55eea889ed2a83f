from __future__ import annotations

import math

import numpy as np
import pytest

from stepscene.model.errors import NotFoundError, ValidationError
from stepscene.model.geometry_primitives import Vector
from stepscene.model.nodes import Node, ShapeKind, validate_node_patch
from stepscene.model.state import GraphState


def test_vector_from_sequence_accepts_numpy_and_tuples() -> None:
    assert Vector.from_sequence(np.array([1, 2, 3])) == Vector(1.0, 2.0, 3.0)
    assert Vector.from_sequence((0.5, 0, -1)) == Vector(0.5, 0.0, -1.0)


@pytest.mark.parametrize("values", [[1, 2], [1, 2, 3, 4], ["a", 1, 2], [math.nan, 0, 0], None])
def test_vector_from_sequence_rejects_bad_input(values) -> None:
    with pytest.raises(ValidationError):
        Vector.from_sequence(values)


def test_vector_addition_and_with_x() -> None:
    a = Vector(1.0, 2.0, 3.0)
    assert a + Vector(0.0, -2.0, 4.0) == Vector(1.0, 0.0, 7.0)
    assert a.with_x(9.0) == Vector(9.0, 2.0, 3.0)


def test_node_from_dict_defaults() -> None:
    node = Node.from_dict({"id": 7})
    assert node.id == "7"
    assert node.shape == ShapeKind.CUBE
    assert node.position == Vector.origin()
    assert not node.is_sub_step


def test_node_from_dict_requires_id() -> None:
    with pytest.raises(ValidationError):
        Node.from_dict({"title": "No id"})


def test_patch_normalizes_text_fields() -> None:
    assert validate_node_patch({"title": None, "description": 5}) == {"title": "", "description": "5"}


def test_strict_lookup_raises_not_found() -> None:
    state = GraphState()
    with pytest.raises(NotFoundError) as info:
        state.node("missing")
    assert str(info.value) == "Node 'missing' does not exist."
    # Still a KeyError for callers that catch the builtin
    assert isinstance(info.value, KeyError)


def test_check_invariants_reports_dangling_references() -> None:
    state = GraphState()
    state.nodes["a"] = Node(id="a")
    state.order.append("a")
    state.check_invariants()

    state.selected_id = "ghost"
    with pytest.raises(ValidationError):
        state.check_invariants()

    state.selected_id = None
    state.nodes["orphan"] = Node(id="orphan")
    with pytest.raises(ValidationError):
        state.check_invariants()
