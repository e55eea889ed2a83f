from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional

from PySide6.QtCore import QObject, Signal

from stepscene.model.errors import ValidationError
from stepscene.model.navigation import SelectionNavigator
from stepscene.model.nodes import (
    Connection, Node, apply_node_patch, validate_connection_patch, validate_node_patch
)
from stepscene.model.positions import PositionAllocator, palette_color
from stepscene.model.state import GraphState

logger = logging.getLogger(__name__)


def new_node_id() -> str:
    return uuid.uuid4().hex


class StepGraphStore(QObject):
    """
    Central state store for one step document, with signals for view sync.

    Every public method is one complete transition: inputs are validated
    first, the state is changed, and only then are signals emitted. Unknown
    ids are silent no-ops; invalid input raises ValidationError untouched.
    """
    graph_changed = Signal()
    selection_changed = Signal(object)
    viewer_mode_changed = Signal(bool)

    def __init__(self, state: Optional[GraphState] = None) -> None:
        super().__init__()
        self._state = state or GraphState()
        self._created = len(self._state.nodes)

    # ------------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------------

    @property
    def state(self) -> GraphState:
        return self._state

    @property
    def selected_id(self) -> Optional[str]:
        return self._state.selected_id

    @property
    def viewer_mode(self) -> bool:
        return self._state.viewer_mode

    @property
    def navigator(self) -> SelectionNavigator:
        return SelectionNavigator(self._state.order)

    def find(self, node_id: Optional[str]) -> Optional[Node]:
        return self._state.find(node_id)

    def steps(self) -> list[Node]:
        return self._state.steps()

    def sub_steps(self, parent_id: str) -> list[Node]:
        return self._state.sub_steps(parent_id)

    def selected(self) -> Optional[Node]:
        return self._state.find(self._state.selected_id)

    def connections(self) -> list[Connection]:
        return list(self._state.connections)

    # ------------------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------------------

    def add_step(self) -> Node:
        state = self._state
        position, cursor = PositionAllocator.next_step(state)
        node = Node(
            id=new_node_id(),
            title=f"Step {len(state.order) + 1}",
            color=palette_color(self._created),
            position=position,
        )
        state.nodes[node.id] = node
        state.order.append(node.id)
        state.next_position = cursor
        self._created += 1
        logger.info(f"Step added: {node.id} at {position.to_list()}")

        self._commit(select=node.id)
        return node

    def update_step(self, step_id: str, patch: Mapping[str, Any]) -> Optional[Node]:
        clean = validate_node_patch(patch)
        if step_id not in self._state.order:
            logger.debug(f"update_step: no step {step_id}")
            return None
        return self._apply(step_id, clean)

    def delete_step(self, step_id: str) -> None:
        state = self._state
        index = state.top_index(step_id)
        if index < 0:
            logger.debug(f"delete_step: no step {step_id}")
            return

        removed = state.subtree_ids(step_id)
        for node_id in removed:
            state.connections.detach(node_id, doomed=removed)
        for node_id in removed:
            del state.nodes[node_id]
        state.order.pop(index)

        select = state.selected_id
        if select in removed:
            select = SelectionNavigator.after_delete(state.order, index)
        logger.info(f"Step deleted: {step_id} ({len(removed) - 1} sub-steps)")

        self._commit(select=select)

    # ------------------------------------------------------------------------------
    # Sub-steps
    # ------------------------------------------------------------------------------

    def add_sub_step(self, parent_id: str) -> Optional[Node]:
        state = self._state
        parent = state.find(parent_id)
        if parent is None:
            logger.debug(f"add_sub_step: no parent {parent_id}")
            return None
        if parent.is_sub_step:
            raise ValidationError("Sub-steps cannot have sub-steps of their own.")

        node = Node(
            id=new_node_id(),
            title=f"Substep {len(parent.children) + 1}",
            color=palette_color(self._created),
            position=PositionAllocator.sub_step(parent),
            parent_id=parent.id,
        )
        state.nodes[node.id] = node
        parent.children.append(node.id)
        self._created += 1
        logger.info(f"Sub-step added: {node.id} under {parent.id}")

        self._commit(select=node.id)
        return node

    def update_sub_step(self, parent_id: str, sub_step_id: str, patch: Mapping[str, Any]) -> Optional[Node]:
        clean = validate_node_patch(patch)
        if not self._is_child(parent_id, sub_step_id):
            logger.debug(f"update_sub_step: no sub-step {sub_step_id} under {parent_id}")
            return None
        return self._apply(sub_step_id, clean)

    def delete_sub_step(self, parent_id: str, sub_step_id: str) -> None:
        state = self._state
        if not self._is_child(parent_id, sub_step_id):
            logger.debug(f"delete_sub_step: no sub-step {sub_step_id} under {parent_id}")
            return

        removed = state.subtree_ids(sub_step_id)
        for node_id in removed:
            state.connections.detach(node_id, doomed=removed)
        for node_id in removed:
            del state.nodes[node_id]
        state.nodes[parent_id].children.remove(sub_step_id)

        select = state.selected_id
        if select in removed:
            select = parent_id
        logger.info(f"Sub-step deleted: {sub_step_id}")

        self._commit(select=select)

    def update_node(self, node_id: str, patch: Mapping[str, Any]) -> Optional[Node]:
        """Route to update_step or update_sub_step depending on where node_id sits."""
        node = self._state.find(node_id)
        if node is None:
            validate_node_patch(patch)
            return None
        if node.parent_id is None:
            return self.update_step(node_id, patch)
        return self.update_sub_step(node.parent_id, node_id, patch)

    def delete_node(self, node_id: str) -> None:
        node = self._state.find(node_id)
        if node is None:
            return
        if node.parent_id is None:
            self.delete_step(node_id)
        else:
            self.delete_sub_step(node.parent_id, node_id)

    # ------------------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------------------

    def add_connection(self, from_id: str, to_id: str, description: str = "") -> Optional[Connection]:
        if from_id == to_id:
            raise ValidationError("A connection cannot link a step to itself.")
        if from_id not in self._state or to_id not in self._state:
            logger.debug(f"add_connection: unknown endpoint {from_id} -> {to_id}")
            return None

        conn = Connection(id=new_node_id(), from_id=from_id, to_id=to_id, description=description or "")
        self._state.connections.add(conn)
        logger.info(f"Connection added: {from_id} -> {to_id}")
        self._commit()
        return conn

    def update_connection(self, connection_id: str, patch: Mapping[str, Any]) -> Optional[Connection]:
        clean = validate_connection_patch(patch)
        current = self._state.connections.get(connection_id)
        if current is None:
            logger.debug(f"update_connection: no connection {connection_id}")
            return None

        from_id = clean.get("from_id", current.from_id)
        to_id = clean.get("to_id", current.to_id)
        if from_id == to_id:
            raise ValidationError("A connection cannot link a step to itself.")
        if from_id not in self._state or to_id not in self._state:
            raise ValidationError("A connection must link two existing steps.")

        updated = self._state.connections.update(connection_id, clean)
        self._commit()
        return updated

    def delete_connection(self, connection_id: str) -> None:
        if self._state.connections.remove(connection_id) is None:
            logger.debug(f"delete_connection: no connection {connection_id}")
            return
        logger.info(f"Connection deleted: {connection_id}")
        self._commit()

    # ------------------------------------------------------------------------------
    # Selection & modes
    # ------------------------------------------------------------------------------

    def select_step(self, node_id: Optional[str]) -> None:
        if node_id is not None and node_id not in self._state:
            logger.debug(f"select_step: ignoring unknown id {node_id}")
            return
        self._set_selection(node_id)

    def next_step(self) -> None:
        self._set_selection(self.navigator.next(self._state.selected_id))

    def previous_step(self) -> None:
        self._set_selection(self.navigator.previous(self._state.selected_id))

    def set_viewer_mode(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if enabled == self._state.viewer_mode:
            return
        self._state.viewer_mode = enabled
        logger.info(f"Viewer mode {'on' if enabled else 'off'}.")
        self.viewer_mode_changed.emit(enabled)

    def toggle_viewer_mode(self) -> None:
        self.set_viewer_mode(not self._state.viewer_mode)

    def update_metadata(self, title: Optional[str] = None, description: Optional[str] = None) -> None:
        if title is not None:
            self._state.title = title
        if description is not None:
            self._state.description = description
        self.graph_changed.emit()

    # ------------------------------------------------------------------------------
    # Whole-document transitions
    # ------------------------------------------------------------------------------

    def reset(self) -> None:
        """Clear all data for a new model."""
        self.replace(GraphState())
        logger.info("Step model has been reset.")

    def replace(self, state: GraphState) -> None:
        was_viewing = self._state.viewer_mode
        self._state = state
        self._created = len(state.nodes)
        self.graph_changed.emit()
        self.selection_changed.emit(state.selected_id)
        if state.viewer_mode != was_viewing:
            self.viewer_mode_changed.emit(state.viewer_mode)

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def _is_child(self, parent_id: str, node_id: str) -> bool:
        parent = self._state.find(parent_id)
        return parent is not None and node_id in parent.children

    def _apply(self, node_id: str, clean: Mapping[str, Any]) -> Node:
        updated = apply_node_patch(self._state.nodes[node_id], clean)
        self._state.nodes[node_id] = updated
        self._commit()
        return updated

    def _set_selection(self, node_id: Optional[str]) -> None:
        if node_id == self._state.selected_id:
            return
        self._state.selected_id = node_id
        logger.debug(f"Selected: {node_id}")
        self.selection_changed.emit(node_id)

    def _commit(self, select: Any = ...) -> None:
        """Finish a mutation: move the selection if asked, then notify."""
        previous = self._state.selected_id
        if select is not ...:
            self._state.selected_id = select
        self.graph_changed.emit()
        if self._state.selected_id != previous:
            self.selection_changed.emit(self._state.selected_id)
