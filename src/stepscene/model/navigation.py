"""
Sequential navigation over the top-level steps.

Sub-steps are reachable by direct selection only; previous/next walk the
top-level sequence. Every method is total and returns the id that should be
selected, which is the current one whenever a boundary is hit.
"""
from __future__ import annotations

from typing import Optional, Sequence


class SelectionNavigator:
    def __init__(self, order: Sequence[str]) -> None:
        self.order = order

    def _index(self, selected: Optional[str]) -> int:
        if selected is None:
            return -1
        try:
            return list(self.order).index(selected)
        except ValueError:
            return -1

    def next(self, selected: Optional[str]) -> Optional[str]:
        if not self.order:
            return selected
        if selected is None:
            return self.order[0]
        i = self._index(selected)
        if 0 <= i < len(self.order) - 1:
            return self.order[i + 1]
        return selected

    def previous(self, selected: Optional[str]) -> Optional[str]:
        i = self._index(selected)
        if i > 0:
            return self.order[i - 1]
        return selected

    def can_go_next(self, selected: Optional[str]) -> bool:
        return self.next(selected) != selected

    def can_go_previous(self, selected: Optional[str]) -> bool:
        return self.previous(selected) != selected

    def counter(self, selected: Optional[str]) -> tuple[int, int]:
        """(1-based position, total) for display; position 0 when off-sequence."""
        return self._index(selected) + 1, len(self.order)

    @staticmethod
    def after_delete(remaining: Sequence[str], deleted_index: int) -> Optional[str]:
        """
        Selection after removing the selected step at deleted_index.

        The step that slid into the freed slot wins, then the one before it.
        """
        if not remaining:
            return None
        if deleted_index < len(remaining):
            return remaining[deleted_index]
        return remaining[-1]
