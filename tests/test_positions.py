from __future__ import annotations

import pytest

from stepscene.model.geometry_primitives import Vector
from stepscene.model.nodes import Node, is_valid_color
from stepscene.model.positions import PositionAllocator, palette_color
from stepscene.model.state import GraphState


def test_next_step_returns_cursor_and_advances_along_x() -> None:
    state = GraphState(next_position=Vector(6.0, 1.0, -2.0))
    position, cursor = PositionAllocator.next_step(state)
    assert position == Vector(6.0, 1.0, -2.0)
    assert cursor == Vector(9.0, 1.0, -2.0)
    # The allocator does not move the cursor itself
    assert state.next_position == Vector(6.0, 1.0, -2.0)


def test_sub_step_fans_out_along_z_by_sibling_count() -> None:
    parent = Node(id="p", position=Vector(3.0, 0.0, 1.0))
    assert PositionAllocator.sub_step(parent) == Vector(3.0, -2.0, 1.0)

    parent.children.extend(["a", "b"])
    assert PositionAllocator.sub_step(parent) == Vector(3.0, -2.0, 5.0)


def test_cursor_after_load_follows_last_step() -> None:
    state = GraphState()
    assert PositionAllocator.cursor_after_load(state) == Vector.origin()

    for i, x in enumerate([0.0, 10.0, 4.0]):
        node = Node(id=f"s{i}", position=Vector(x, 5.0, 7.0))
        state.nodes[node.id] = node
        state.order.append(node.id)
    # Only the x of the last step in order counts; y and z reset
    assert PositionAllocator.cursor_after_load(state) == Vector(7.0, 0.0, 0.0)


@pytest.mark.parametrize("index", [0, 1, 2, 7, 100])
def test_palette_color_is_valid_hex(index: int) -> None:
    assert is_valid_color(palette_color(index))
    assert len(palette_color(index)) == 7


def test_palette_colors_differ_between_neighbours() -> None:
    colors = [palette_color(i) for i in range(8)]
    assert len(set(colors)) == len(colors)
