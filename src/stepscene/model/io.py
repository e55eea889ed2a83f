"""
Input/Output Manager (HDF5)
Handles saving and loading step models to a single .h5 collection file.

Each saved model is one group named by its model id. The group carries the
title and timestamp as attributes (for fast listing) and the full model as a
JSON blob, stored as an attribute or, when large, as an opaque dataset.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
import os
import shutil
import tempfile
import time
import uuid
from typing import Any, Dict, Optional

import h5py
import numpy as np

from stepscene.model.errors import PersistenceError, ValidationError
from stepscene.model.nodes import Connection, Node
from stepscene.model.positions import PositionAllocator
from stepscene.model.state import GraphState

logger = logging.getLogger(__name__)

# HDF5 attributes are limited to 64KB
ATTRIBUTE_LIMIT = 60000


@dataclass(frozen=True)
class ModelSummary:
    id: str
    title: str
    step_count: int
    saved_at: str


def new_model_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}"


# ---- blob codec ----

def _node_to_blob(state: GraphState, node: Node) -> Dict[str, Any]:
    data = node.to_dict()
    data["subSteps"] = [_node_to_blob(state, state.nodes[c]) for c in node.children]
    return data


def state_to_blob(state: GraphState, model_id: str, saved_at: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": model_id,
        "title": state.title,
        "description": state.description,
        "steps": [_node_to_blob(state, n) for n in state.steps()],
        "connections": [c.to_dict() for c in state.connections],
        "savedAt": saved_at or datetime.now(timezone.utc).isoformat(),
    }


def _entries_are_records(entries: Any) -> bool:
    """True for a missing list or a list of dicts whose subSteps are the same."""
    if entries is None:
        return True
    if not isinstance(entries, list):
        return False
    return all(isinstance(e, dict) and _entries_are_records(e.get("subSteps")) for e in entries)


def is_model_blob(blob: Any) -> bool:
    """Shape check only: an object whose steps and connections are lists of records."""
    return (
        isinstance(blob, dict)
        and _entries_are_records(blob.get("steps"))
        and _entries_are_records(blob.get("connections"))
    )


def blob_to_state(blob: Dict[str, Any]) -> GraphState:
    """
    Rebuild a state from a saved blob.

    The result is ready to use: first step selected, cursor placed after the
    last step, viewer mode off.

    Raises:
        PersistenceError: If the blob is structurally broken (wrong container
            types, duplicate ids, bad field values).
    """
    if not is_model_blob(blob):
        raise PersistenceError("Saved model is malformed: steps and connections must be lists of objects.")

    state = GraphState(
        title=str(blob.get("title", "")),
        description=str(blob.get("description", "")),
    )
    legacy_links: list[tuple[str, str]] = []

    def add(entry: Dict[str, Any], parent_id: Optional[str]) -> str:
        node = Node.from_dict(entry, parent_id=parent_id)
        if node.id in state.nodes:
            raise PersistenceError(f"Duplicate node id '{node.id}' in saved model.")
        state.nodes[node.id] = node

        # Older single-link format: the step points at the one it continues from
        if entry.get("connections") not in (None, "", []):
            legacy_links.append((node.id, str(entry["connections"])))

        for child in entry.get("subSteps") or []:
            node.children.append(add(child, node.id))
        return node.id

    try:
        for entry in blob.get("steps") or []:
            state.order.append(add(entry, None))

        for entry in blob.get("connections") or []:
            conn = Connection.from_dict(entry)
            if conn.from_id not in state.nodes or conn.to_id not in state.nodes:
                logger.warning(f"Dropping connection {conn.id} with a missing endpoint.")
                continue
            state.connections.add(conn)
    except (ValidationError, TypeError, AttributeError) as e:
        raise PersistenceError(f"Saved model is malformed: {e}") from e

    for from_id, to_id in legacy_links:
        if to_id in state.nodes and to_id != from_id:
            state.connections.add(Connection(id=uuid.uuid4().hex, from_id=from_id, to_id=to_id))

    state.selected_id = state.order[0] if state.order else None
    state.next_position = PositionAllocator.cursor_after_load(state)
    state.viewer_mode = False
    try:
        state.check_invariants()
    except ValidationError as e:
        raise PersistenceError(f"Saved model is inconsistent: {e}") from e
    return state


# ---- collection ----

class ModelLibrary:
    """Durable collection of named models in one HDF5 file."""

    def __init__(self, filepath: str) -> None:
        self.filepath = filepath

    def list(self) -> list[ModelSummary]:
        out = []
        for model_id, blob in self._read_collection().items():
            out.append(ModelSummary(
                id=model_id,
                title=str(blob.get("title", "")),
                step_count=len(blob.get("steps") or []),
                saved_at=str(blob.get("savedAt", "")),
            ))
        return out

    def save(self, state: GraphState) -> str:
        model_id = new_model_id()
        blob = state_to_blob(state, model_id)
        logger.info(f"Saving model '{state.title}' as {model_id} to: {self.filepath}")

        collection = self._read_collection()
        collection[model_id] = blob
        self._write_collection(collection)
        return model_id

    def load(self, model_id: str) -> Optional[GraphState]:
        blob = self._read_collection().get(model_id)
        if blob is None:
            logger.warning(f"Model {model_id} not found in {self.filepath}.")
            return None
        try:
            state = blob_to_state(blob)
        except PersistenceError as e:
            logger.error(f"Failed to load model {model_id}: {e}")
            return None
        logger.info(f"Model {model_id} loaded ({len(state.order)} steps).")
        return state

    def delete(self, model_id: str) -> bool:
        collection = self._read_collection()
        if model_id not in collection:
            return False
        del collection[model_id]
        self._write_collection(collection)
        logger.info(f"Model {model_id} deleted.")
        return True

    # ---- HDF5 helpers ----

    def _read_collection(self) -> Dict[str, Dict[str, Any]]:
        """All blobs keyed by id, oldest first. Unreadable data counts as empty."""
        if not os.path.exists(self.filepath):
            return {}
        try:
            return self._read_all()
        except PersistenceError as e:
            logger.error(f"Saved models are unreadable, treating collection as empty: {e}")
            return {}

    def _read_all(self) -> Dict[str, Dict[str, Any]]:
        if not h5py.is_hdf5(self.filepath):
            raise PersistenceError(f"File '{self.filepath}' is not a valid HDF5 file.")

        collection: Dict[str, Dict[str, Any]] = {}
        try:
            with h5py.File(self.filepath, "r") as f:
                for model_id in f.keys():
                    grp = f[model_id]
                    if "model_json" in grp:
                        # Large blob stored as dataset
                        raw = bytes(grp["model_json"][()])
                    else:
                        raw = grp.attrs.get("model_json", b"")
                    if isinstance(raw, bytes):
                        raw = raw.decode("utf-8")
                    try:
                        blob = json.loads(raw)
                    except json.JSONDecodeError as e:
                        logger.error(f"Skipping saved model {model_id}: {e}")
                        continue
                    if not is_model_blob(blob):
                        logger.error(f"Skipping saved model {model_id}: not a model object")
                        continue
                    collection[model_id] = blob
        except OSError as e:
            raise PersistenceError(f"Could not read '{self.filepath}': {e}") from e
        return collection

    def _write_collection(self, collection: Dict[str, Dict[str, Any]]) -> None:
        """
        Rewrite the whole collection to a temp file next to the target, then
        swap it in, so a failed write never leaves a half-written library.
        """
        directory = os.path.dirname(os.path.abspath(self.filepath))
        os.makedirs(directory, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(suffix=".h5", dir=directory)
        os.close(fd)

        try:
            with h5py.File(temp_path, "w", track_order=True) as f:
                for model_id, blob in collection.items():
                    grp = f.create_group(model_id)
                    grp.attrs["title"] = str(blob.get("title", ""))
                    grp.attrs["saved_at"] = str(blob.get("savedAt", ""))

                    blob_json = json.dumps(blob)
                    if len(blob_json) > ATTRIBUTE_LIMIT:
                        logger.info(f"Model {model_id} is large ({len(blob_json)} bytes), using dataset")
                        grp.create_dataset("model_json", data=np.void(blob_json.encode("utf-8")))
                    else:
                        grp.attrs["model_json"] = blob_json

            if os.path.exists(self.filepath) and not h5py.is_hdf5(self.filepath):
                # Keep the unreadable original around instead of silently losing it
                shutil.copy2(self.filepath, self.filepath + ".corrupt")

            os.replace(temp_path, self.filepath)
            logger.debug(f"Wrote {len(collection)} models to {self.filepath}")

        except OSError as e:
            logger.exception(f"Failed to write saved models: {e}")
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise PersistenceError(f"Could not write '{self.filepath}': {e}") from e
