"""
Scene projection: turns the graph into flat render descriptions.

The view only ever draws what this module returns, so the implicit adjacency
rules live here and can be tested without a renderer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from stepscene.model.geometry_primitives import Vector
from stepscene.model.nodes import ShapeKind
from stepscene.model.state import GraphState


@dataclass(frozen=True)
class ShapeSpec:
    node_id: str
    shape: ShapeKind
    position: Vector
    color: str
    size: float
    selected: bool = False
    is_sub_step: bool = False


@dataclass(frozen=True)
class LinkSpec:
    """A line between two nodes. Explicit links carry their connection id."""
    from_id: str
    to_id: str
    start: Vector
    end: Vector
    explicit: bool = False
    connection_id: Optional[str] = None
    description: str = ""


@dataclass
class SceneDescription:
    shapes: list[ShapeSpec] = field(default_factory=list)
    links: list[LinkSpec] = field(default_factory=list)

    @property
    def implicit_links(self) -> list[LinkSpec]:
        return [link for link in self.links if not link.explicit]

    @property
    def explicit_links(self) -> list[LinkSpec]:
        return [link for link in self.links if link.explicit]


def display_label(state: GraphState, node_id: str) -> str:
    """'2. Title' for steps, '2.1 Title' for sub-steps, '' for unknown ids."""
    node = state.find(node_id)
    if node is None:
        return ""
    if node.parent_id is None:
        return f"{state.top_index(node_id) + 1}. {node.title}"
    parent = state.nodes[node.parent_id]
    sub_index = parent.children.index(node_id) + 1
    return f"{state.top_index(parent.id) + 1}.{sub_index} {node.title}"


def _implicit(state: GraphState, a: str, b: str) -> LinkSpec:
    return LinkSpec(a, b, state.nodes[a].position, state.nodes[b].position)


def project_scene(state: GraphState) -> SceneDescription:
    scene = SceneDescription()

    for node in state.walk():
        scene.shapes.append(ShapeSpec(
            node_id=node.id,
            shape=node.shape,
            position=node.position,
            color=node.color,
            size=node.size,
            selected=node.id == state.selected_id,
            is_sub_step=node.is_sub_step,
        ))

    # Consecutive top-level steps
    for a, b in zip(state.order, state.order[1:]):
        scene.links.append(_implicit(state, a, b))

    # Parent -> first sub-step, then sub-steps in sequence
    for node in state.walk():
        if node.children:
            scene.links.append(_implicit(state, node.id, node.children[0]))
            for a, b in zip(node.children, node.children[1:]):
                scene.links.append(_implicit(state, a, b))

    for conn in state.connections:
        start = state.find(conn.from_id)
        end = state.find(conn.to_id)
        if start is None or end is None:
            continue
        scene.links.append(LinkSpec(
            from_id=conn.from_id,
            to_id=conn.to_id,
            start=start.position,
            end=end.position,
            explicit=True,
            connection_id=conn.id,
            description=conn.description,
        ))

    return scene
