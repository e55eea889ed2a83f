"""
Editor Session
==============
The caller layer between widgets and the store.

Why is this file needed?
------------------------
1. Authority: The store accepts every mutation it is given. Viewer mode is
   read-only, so something above the store has to refuse edits while it is
   on. Widgets talk to this class, never to the store's mutators directly.
2. Workflow: Save/load/clear touch both the store and the model library and
   carry their own validation rules (a model needs a title and a step).
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from stepscene.controller.store import StepGraphStore
from stepscene.model.errors import ValidationError
from stepscene.model.io import ModelLibrary, ModelSummary
from stepscene.model.nodes import Connection, Node

logger = logging.getLogger(__name__)


class EditorSession:
    def __init__(self, store: StepGraphStore, library: ModelLibrary) -> None:
        self.store = store
        self.library = library

    @property
    def editable(self) -> bool:
        return not self.store.viewer_mode

    def _refuse(self, action: str) -> bool:
        """True (and a warning) when the call must be dropped."""
        if self.store.viewer_mode:
            logger.warning(f"'{action}' ignored: viewer mode is read-only.")
            return True
        return False

    # ---- authoring ----

    def add_step(self) -> Optional[Node]:
        if self._refuse("add step"):
            return None
        return self.store.add_step()

    def update_step(self, step_id: str, patch: Mapping[str, Any]) -> Optional[Node]:
        if self._refuse("update step"):
            return None
        return self.store.update_step(step_id, patch)

    def delete_step(self, step_id: str) -> None:
        if self._refuse("delete step"):
            return
        self.store.delete_step(step_id)

    def add_sub_step(self, parent_id: str) -> Optional[Node]:
        if self._refuse("add sub-step"):
            return None
        return self.store.add_sub_step(parent_id)

    def update_sub_step(self, parent_id: str, sub_step_id: str, patch: Mapping[str, Any]) -> Optional[Node]:
        if self._refuse("update sub-step"):
            return None
        return self.store.update_sub_step(parent_id, sub_step_id, patch)

    def delete_sub_step(self, parent_id: str, sub_step_id: str) -> None:
        if self._refuse("delete sub-step"):
            return
        self.store.delete_sub_step(parent_id, sub_step_id)

    def update_node(self, node_id: str, patch: Mapping[str, Any]) -> Optional[Node]:
        if self._refuse("update"):
            return None
        return self.store.update_node(node_id, patch)

    def delete_node(self, node_id: str) -> None:
        if self._refuse("delete"):
            return
        self.store.delete_node(node_id)

    def add_connection(self, from_id: str, to_id: str, description: str = "") -> Optional[Connection]:
        if self._refuse("add connection"):
            return None
        return self.store.add_connection(from_id, to_id, description)

    def update_connection(self, connection_id: str, patch: Mapping[str, Any]) -> Optional[Connection]:
        if self._refuse("update connection"):
            return None
        return self.store.update_connection(connection_id, patch)

    def delete_connection(self, connection_id: str) -> None:
        if self._refuse("delete connection"):
            return
        self.store.delete_connection(connection_id)

    def update_metadata(self, title: Optional[str] = None, description: Optional[str] = None) -> None:
        if self._refuse("edit model details"):
            return
        self.store.update_metadata(title=title, description=description)

    # ---- always allowed ----

    def select_step(self, node_id: Optional[str]) -> None:
        self.store.select_step(node_id)

    def next_step(self) -> None:
        self.store.next_step()

    def previous_step(self) -> None:
        self.store.previous_step()

    def set_viewer_mode(self, enabled: bool) -> None:
        self.store.set_viewer_mode(enabled)

    # ---- persistence ----

    def list_models(self) -> list[ModelSummary]:
        return self.library.list()

    def save_model(self) -> Optional[str]:
        if self._refuse("save"):
            return None
        state = self.store.state
        if not state.title.strip():
            raise ValidationError("Please enter a model title.")
        if not state.order:
            raise ValidationError("Please add at least one step before saving.")
        return self.library.save(state)

    def load_model(self, model_id: str) -> bool:
        state = self.library.load(model_id)
        if state is None:
            return False
        self.store.replace(state)
        return True

    def delete_model(self, model_id: str) -> bool:
        return self.library.delete(model_id)

    def clear_model(self) -> None:
        if self._refuse("new model"):
            return
        self.store.reset()
