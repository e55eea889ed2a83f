"""
Camera follow for viewer mode.

The controller owns a private camera pose and, once per rendered frame,
moves it a fixed fraction of the way towards a pose derived from the selected
node. It never touches the store; the host render loop calls `tick` and
copies the returned pose onto its real camera.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Sequence, TYPE_CHECKING

import numpy as np

from stepscene.config import CAMERA_DAMPING, CAMERA_OFFSET
from stepscene.model.state import GraphState

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def damp_towards(
    current: npt.NDArray[np.float64],
    desired: npt.NDArray[np.float64],
    factor: float
) -> npt.NDArray[np.float64]:
    """One smoothing step: cover `factor` of the remaining distance."""
    current = np.asarray(current, dtype=np.float64)
    desired = np.asarray(desired, dtype=np.float64)
    return current + (desired - current) * factor


def resolve_target(state: GraphState) -> Optional[npt.NDArray[np.float64]]:
    """Position of the selected node: top-level steps first, then sub-steps."""
    selected = state.selected_id
    if selected is None:
        return None
    for step in state.steps():
        if step.id == selected:
            return step.position.to_array()
    for step in state.steps():
        for sub in state.sub_steps(step.id):
            if sub.id == selected:
                return sub.position.to_array()
    return None


@dataclass
class CameraPose:
    position: npt.NDArray[np.float64]
    focal_point: npt.NDArray[np.float64]


class CameraFollowController:
    def __init__(
        self,
        offset: Sequence[float] = CAMERA_OFFSET,
        damping: float = CAMERA_DAMPING,
        initial: Optional[CameraPose] = None
    ) -> None:
        if not 0.0 < damping <= 1.0:
            raise ValueError(f"Damping must be in (0, 1], got {damping}.")
        self.offset = np.asarray(offset, dtype=np.float64)
        self.damping = damping
        self.pose = initial or CameraPose(
            position=np.array([10.0, 10.0, 10.0]),
            focal_point=np.zeros(3),
        )
        self.desired: Optional[CameraPose] = None

    def sync(self, position: Sequence[float], focal_point: Sequence[float]) -> None:
        """Adopt the host camera's current pose so following starts without a jump."""
        self.pose = CameraPose(
            position=np.asarray(position, dtype=np.float64),
            focal_point=np.asarray(focal_point, dtype=np.float64),
        )

    def tick(self, viewer_mode: bool, target: Optional[Sequence[float]]) -> Optional[CameraPose]:
        """
        Advance one frame.

        Returns:
            The new pose, or None when the controller is inert (not in viewer
            mode, or nothing to follow). An inert tick leaves the pose as is.
        """
        if not viewer_mode or target is None:
            return None

        target = np.asarray(target, dtype=np.float64)
        self.desired = CameraPose(position=target + self.offset, focal_point=target)
        self.pose = CameraPose(
            position=damp_towards(self.pose.position, self.desired.position, self.damping),
            focal_point=damp_towards(self.pose.focal_point, self.desired.focal_point, self.damping),
        )
        return self.pose

    def settled(self, tolerance: float = 1e-3) -> bool:
        if self.desired is None:
            return True
        return bool(
            np.linalg.norm(self.pose.position - self.desired.position) < tolerance
            and np.linalg.norm(self.pose.focal_point - self.desired.focal_point) < tolerance
        )
