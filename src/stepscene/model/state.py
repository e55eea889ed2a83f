"""
Graph State (Data Model)
========================
This module defines the central data structure for an open step document.

Why is this file needed?
------------------------
1. State Management: It holds the steps, their sub-steps, the explicit
   connections and the selection in one place.
2. Persistence: This object is what gets serialized when saving a model.
3. Decoupling: Views read from this object; the store is the only writer.

Nodes live in a flat arena keyed by id. Top-level order is kept in `order`,
sub-step order in each parent's `children` list.

Classes:
    GraphState: The main container class.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
import logging
from typing import Iterator, Optional

from stepscene.config import DEFAULT_TITLE
from stepscene.model.connections import ConnectionRegistry
from stepscene.model.errors import NotFoundError, ValidationError
from stepscene.model.geometry_primitives import Vector
from stepscene.model.nodes import Node

logger = logging.getLogger(__name__)


@dataclass
class GraphState:
    title: str = DEFAULT_TITLE
    description: str = ""

    nodes: dict[str, Node] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    connections: ConnectionRegistry = field(default_factory=ConnectionRegistry)

    selected_id: Optional[str] = None
    next_position: Vector = field(default_factory=Vector.origin)
    viewer_mode: bool = False

    # ---- lookups ----

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def find(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def node(self, node_id: str) -> Node:
        """Strict lookup used where absence is a programming error."""
        try:
            return self.nodes[node_id]
        except KeyError:
            raise NotFoundError(f"Node '{node_id}' does not exist.") from None

    def steps(self) -> list[Node]:
        return [self.nodes[i] for i in self.order]

    def sub_steps(self, parent_id: str) -> list[Node]:
        parent = self.nodes.get(parent_id)
        if parent is None:
            return []
        return [self.nodes[i] for i in parent.children]

    def walk(self) -> Iterator[Node]:
        """Depth-first display order: each step followed by its sub-steps."""
        stack = list(reversed(self.order))
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def subtree_ids(self, node_id: str) -> list[str]:
        """The node and all its descendants, parent first."""
        out: list[str] = []
        stack = [node_id]
        while stack:
            current = stack.pop()
            out.append(current)
            stack.extend(reversed(self.nodes[current].children))
        return out

    def top_index(self, node_id: Optional[str]) -> int:
        """Index in the top-level sequence, -1 for sub-steps and unknown ids."""
        try:
            return self.order.index(node_id)
        except ValueError:
            return -1

    def copy(self) -> GraphState:
        return GraphState(
            title=self.title,
            description=self.description,
            nodes=copy.deepcopy(self.nodes),
            order=list(self.order),
            connections=self.connections.copy(),
            selected_id=self.selected_id,
            next_position=self.next_position,
            viewer_mode=self.viewer_mode,
        )

    def check_invariants(self) -> None:
        """
        Check that every id reference resolves. Run on freshly loaded models.

        Raises:
            ValidationError: On a node reachable twice or not at all, a child
                whose parent link disagrees, a dangling selection or a
                dangling connection.
        """
        seen: set[str] = set()
        for node in self.walk():
            if node.id in seen:
                raise ValidationError(f"Node {node.id} is reachable twice.")
            seen.add(node.id)
            for child_id in node.children:
                child = self.nodes.get(child_id)
                if child is None or child.parent_id != node.id:
                    raise ValidationError(f"Bad parent link on {child_id}.")
        if seen != set(self.nodes):
            raise ValidationError("Arena holds unreachable nodes.")
        if self.selected_id is not None and self.selected_id not in self.nodes:
            raise ValidationError(f"Dangling selection {self.selected_id}.")
        for conn in self.connections:
            if conn.from_id not in self.nodes or conn.to_id not in self.nodes:
                raise ValidationError(f"Dangling connection {conn.id}.")
