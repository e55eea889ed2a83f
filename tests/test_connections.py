from __future__ import annotations

import pytest

from stepscene.model.connections import ConnectionRegistry
from stepscene.model.errors import ValidationError
from stepscene.model.nodes import Connection, validate_connection_patch


def _registry(*links: tuple[str, str]) -> ConnectionRegistry:
    return ConnectionRegistry(
        Connection(id=f"c{i}", from_id=a, to_id=b) for i, (a, b) in enumerate(links)
    )


def _pairs(registry: ConnectionRegistry) -> list[tuple[str, str]]:
    return [(c.from_id, c.to_id) for c in registry]


def test_incoming_is_redirected_to_first_outgoing_target() -> None:
    reg = _registry(("x", "d"), ("d", "y"), ("d", "z"))
    rewired, dropped = reg.detach("d")
    assert (rewired, dropped) == (1, 2)
    assert _pairs(reg) == [("x", "y")]
    # The redirected connection keeps its id
    assert reg.get("c0").to_id == "y"


def test_incoming_is_dropped_without_outgoing() -> None:
    reg = _registry(("x", "d"), ("w", "d"), ("x", "w"))
    assert reg.detach("d") == (0, 2)
    assert _pairs(reg) == [("x", "w")]


def test_redirect_that_would_loop_is_dropped() -> None:
    reg = _registry(("x", "d"), ("d", "x"), ("w", "d"))
    reg.detach("d")
    assert _pairs(reg) == [("w", "x")]


def test_redirect_into_doomed_node_is_dropped() -> None:
    reg = _registry(("x", "d"), ("d", "child"))
    reg.detach("d", doomed=["d", "child"])
    assert len(reg) == 0


def test_touching_and_update() -> None:
    reg = _registry(("a", "b"), ("b", "c"), ("c", "d"))
    assert [c.id for c in reg.touching("b")] == ["c0", "c1"]

    updated = reg.update("c2", {"description": "then"})
    assert updated.description == "then"
    assert reg.update("missing", {"description": "x"}) is None


def test_copy_is_independent() -> None:
    reg = _registry(("a", "b"))
    clone = reg.copy()
    assert clone == reg
    clone.remove("c0")
    assert "c0" in reg and "c0" not in clone


def test_connection_dict_uses_from_to_keys() -> None:
    conn = Connection(id="c", from_id="a", to_id="b", description="next")
    assert conn.to_dict() == {"id": "c", "from": "a", "to": "b", "description": "next"}
    assert Connection.from_dict(conn.to_dict()) == conn


def test_connection_from_dict_requires_endpoints() -> None:
    with pytest.raises(ValidationError):
        Connection.from_dict({"id": "c", "from": "a"})


def test_connection_patch_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        validate_connection_patch({"id": "other"})
    assert validate_connection_patch({"description": None}) == {"description": ""}
