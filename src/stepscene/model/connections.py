"""
Explicit connections between nodes.

The registry only knows ids; it never checks that endpoints exist. Callers
(the store) validate endpoints before adding and call `detach` when a node is
removed, so no connection outlives either of its endpoints.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from stepscene.model.nodes import Connection

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    def __init__(self, connections: Iterable[Connection] = ()) -> None:
        self._items: Dict[str, Connection] = {}
        for conn in connections:
            self._items[conn.id] = conn

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConnectionRegistry):
            return NotImplemented
        return list(self._items.values()) == list(other._items.values())

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._items.get(connection_id)

    def add(self, connection: Connection) -> None:
        self._items[connection.id] = connection

    def remove(self, connection_id: str) -> Optional[Connection]:
        return self._items.pop(connection_id, None)

    def update(self, connection_id: str, clean_patch: Mapping[str, Any]) -> Optional[Connection]:
        current = self._items.get(connection_id)
        if current is None:
            return None
        updated = replace(current, **clean_patch)
        self._items[connection_id] = updated
        return updated

    def touching(self, node_id: str) -> list[Connection]:
        return [c for c in self._items.values() if node_id in (c.from_id, c.to_id)]

    def copy(self) -> ConnectionRegistry:
        return ConnectionRegistry(replace(c) for c in self._items.values())

    def detach(self, node_id: str, doomed: Iterable[str] = ()) -> tuple[int, int]:
        """
        Resolve every connection that touches a node being removed.

        Incoming connections X -> node are redirected to the target of the
        node's first outgoing connection (node -> Y gives X -> Y). Outgoing
        connections are dropped. An incoming connection is dropped instead
        when there is no outgoing target, when the redirect would loop back
        to X, or when Y is also being removed (listed in `doomed`).

        Returns:
            (rewired, dropped) counts.
        """
        doomed_ids = set(doomed) | {node_id}
        outgoing = [c for c in self._items.values() if c.from_id == node_id]
        bridge_to = outgoing[0].to_id if outgoing else None
        if bridge_to in doomed_ids:
            bridge_to = None

        rewired = dropped = 0
        for conn in list(self._items.values()):
            if conn.from_id == node_id:
                del self._items[conn.id]
                dropped += 1
            elif conn.to_id == node_id:
                if bridge_to is None or bridge_to == conn.from_id:
                    del self._items[conn.id]
                    dropped += 1
                else:
                    self._items[conn.id] = replace(conn, to_id=bridge_to)
                    rewired += 1

        if rewired or dropped:
            logger.debug(f"Detached node {node_id}: {rewired} rewired, {dropped} dropped.")
        return rewired, dropped
