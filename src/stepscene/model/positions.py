"""
Default placement and colors for newly created nodes.
"""
from __future__ import annotations

import colorsys

from stepscene.config import STEP_SPACING, SUBSTEP_DROP, SUBSTEP_SPREAD
from stepscene.model.geometry_primitives import Vector
from stepscene.model.nodes import Node
from stepscene.model.state import GraphState

GOLDEN_RATIO_CONJUGATE = 0.618033988749895


class PositionAllocator:
    """
    Pure placement rules. The only memory is `GraphState.next_position`,
    which belongs to the state and is advanced by the caller.
    """

    @staticmethod
    def next_step(state: GraphState) -> tuple[Vector, Vector]:
        """
        Returns:
            (position for the new step, advanced cursor). y and z are kept.
        """
        position = state.next_position
        return position, position.with_x(position.x + STEP_SPACING)

    @staticmethod
    def sub_step(parent: Node) -> Vector:
        """Below the parent, fanned out along z by the current sibling count."""
        sibling_index = len(parent.children)
        return parent.position + Vector(0.0, -SUBSTEP_DROP, sibling_index * SUBSTEP_SPREAD)

    @staticmethod
    def cursor_after_load(state: GraphState) -> Vector:
        if not state.order:
            return Vector.origin()
        last = state.nodes[state.order[-1]]
        return Vector(last.position.x + STEP_SPACING, 0.0, 0.0)


def palette_color(index: int) -> str:
    """
    Distinguishable color for the index-th created node.

    Hues walk around the wheel by the golden ratio so neighbours never share
    a similar tint.
    """
    hue = (0.58 + index * GOLDEN_RATIO_CONJUGATE) % 1.0
    r, g, b = colorsys.hsv_to_rgb(hue, 0.65, 0.9)
    return "#{:02x}{:02x}{:02x}".format(round(r * 255), round(g * 255), round(b * 255))
