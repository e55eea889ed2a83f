"""
Step / Sub-step / Connection records
====================================
Plain data records of the step graph plus the validation rules applied to
user input before it reaches the store.

A Step and a Sub-step share one schema (Node). Nesting is expressed through
`parent_id` and the ordered `children` id list; the records themselves never
hold references to each other.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
import logging
import math
import re
from typing import Any, Dict, Mapping, Optional

from stepscene.config import DEFAULT_NODE_SIZE
from stepscene.model.errors import ValidationError
from stepscene.model.geometry_primitives import Vector

logger = logging.getLogger(__name__)

HEX_COLOR_PATTERN = re.compile(r"^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")


class ShapeKind(StrEnum):
    CUBE = "cube"
    SPHERE = "sphere"
    CYLINDER = "cylinder"
    CONE = "cone"


def is_valid_color(value: Any) -> bool:
    """True for '#rgb' and '#rrggbb' hex strings."""
    return isinstance(value, str) and HEX_COLOR_PATTERN.match(value) is not None


def validate_color(value: Any) -> str:
    if not is_valid_color(value):
        raise ValidationError(f"Invalid color '{value}'. Use #rgb or #rrggbb.")
    return value


def validate_shape(value: Any) -> ShapeKind:
    try:
        return ShapeKind(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ShapeKind)
        raise ValidationError(f"Unknown shape '{value}'. Expected one of: {allowed}.") from None


def validate_size(value: Any) -> float:
    try:
        size = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Size must be a number, got {value!r}.") from None
    if not math.isfinite(size) or size <= 0.0:
        raise ValidationError(f"Size must be a positive finite number, got {size}.")
    return size


@dataclass(kw_only=True)
class Node:
    """A step or sub-step: one positioned shape in the scene."""
    id: str
    title: str = ""
    description: str = ""
    shape: ShapeKind = ShapeKind.CUBE
    color: str = "#4a90e2"
    size: float = DEFAULT_NODE_SIZE
    position: Vector = field(default_factory=Vector.origin)
    parent_id: Optional[str] = None
    children: list[str] = field(default_factory=list)

    @property
    def is_sub_step(self) -> bool:
        return self.parent_id is not None

    def to_dict(self) -> Dict[str, Any]:
        """Field dict without nesting; sub-steps are serialized by the caller."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "shape": self.shape.value,
            "color": self.color,
            "size": self.size,
            "position": self.position.to_list(),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any], parent_id: Optional[str] = None) -> Node:
        """
        Build a node from a saved-blob entry.

        Older blobs used 'shapeType' for the shape and numeric ids; both are accepted.
        """
        if "id" not in data:
            raise ValidationError("Saved node has no id.")
        return Node(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            shape=validate_shape(data.get("shape", data.get("shapeType", ShapeKind.CUBE))),
            color=validate_color(data.get("color", "#4a90e2")),
            size=validate_size(data.get("size", DEFAULT_NODE_SIZE)),
            position=Vector.from_sequence(data.get("position", (0.0, 0.0, 0.0))),
            parent_id=parent_id,
        )


NODE_PATCH_FIELDS = ("title", "description", "shape", "color", "size", "position")


def validate_node_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Check and normalize a partial node update.

    Returns:
        A new dict with normalized values, safe to apply with `apply_node_patch`.

    Raises:
        ValidationError: On any unknown field or invalid value. Nothing is applied.
    """
    unknown = set(patch) - set(NODE_PATCH_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}.")

    clean: Dict[str, Any] = {}
    for key, value in patch.items():
        if key in ("title", "description"):
            clean[key] = "" if value is None else str(value)
        elif key == "shape":
            clean[key] = validate_shape(value)
        elif key == "color":
            clean[key] = validate_color(value)
        elif key == "size":
            clean[key] = validate_size(value)
        elif key == "position":
            clean[key] = Vector.from_sequence(value)
    return clean


def apply_node_patch(node: Node, clean_patch: Mapping[str, Any]) -> Node:
    """Return a copy of node with the validated patch merged in."""
    return replace(node, **clean_patch)


@dataclass(kw_only=True)
class Connection:
    """An explicit, user-authored edge between any two nodes."""
    id: str
    from_id: str
    to_id: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "from": self.from_id,
            "to": self.to_id,
            "description": self.description,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Connection:
        try:
            return Connection(
                id=str(data["id"]),
                from_id=str(data["from"]),
                to_id=str(data["to"]),
                description=str(data.get("description") or ""),
            )
        except KeyError as e:
            raise ValidationError(f"Saved connection is missing '{e.args[0]}'.") from None


CONNECTION_PATCH_FIELDS = ("from_id", "to_id", "description")


def validate_connection_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
    unknown = set(patch) - set(CONNECTION_PATCH_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}.")
    clean: Dict[str, Any] = {}
    for key, value in patch.items():
        if key == "description":
            clean[key] = "" if value is None else str(value)
        else:
            clean[key] = str(value)
    return clean
