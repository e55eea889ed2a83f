"""
Geometric Primitives for node placement and the viewer camera.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING
import numpy as np

from stepscene.model.errors import ValidationError

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Vector:
    """
    A vector (or point) in 3D space.

    Immutable, so a position can be shared between the allocator cursor and
    a node without aliasing surprises.
    """
    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def with_x(self, x: float) -> Vector:
        return Vector(x, self.y, self.z)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z])

    def to_list(self) -> list[float]:
        return [self.x, self.y, self.z]

    @classmethod
    def origin(cls) -> Vector:
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> Vector:
        """
        Build a vector from any 3-item sequence (list, tuple, numpy array).

        Raises:
            ValidationError: If the input does not hold exactly three finite numbers.
        """
        if isinstance(values, Vector):
            return values
        try:
            arr = np.asarray(values, dtype=np.float64).reshape(-1)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Position must be three numbers, got {values!r}.") from e

        if arr.shape != (3,):
            raise ValidationError(f"Position must be three numbers, got {values!r}.")
        if not np.all(np.isfinite(arr)):
            raise ValidationError(f"Position must be finite, got {values!r}.")

        return cls(float(arr[0]), float(arr[1]), float(arr[2]))
