from __future__ import annotations

import numpy as np
import pytest

from stepscene.controller.camera import CameraFollowController, CameraPose, damp_towards, resolve_target
from stepscene.controller.store import StepGraphStore


def test_damp_towards_covers_fraction_of_distance() -> None:
    result = damp_towards(np.array([0.0, 0.0, 0.0]), np.array([10.0, -10.0, 20.0]), 0.1)
    np.testing.assert_allclose(result, [1.0, -1.0, 2.0])


def test_tick_is_inert_outside_viewer_mode() -> None:
    follower = CameraFollowController()
    before = follower.pose.position.copy()
    assert follower.tick(False, [1.0, 2.0, 3.0]) is None
    assert follower.tick(True, None) is None
    np.testing.assert_allclose(follower.pose.position, before)


def test_tick_moves_towards_offset_pose() -> None:
    follower = CameraFollowController(
        offset=(5.0, 5.0, 5.0),
        damping=0.5,
        initial=CameraPose(position=np.zeros(3), focal_point=np.zeros(3)),
    )
    pose = follower.tick(True, [2.0, 0.0, 0.0])

    np.testing.assert_allclose(pose.position, [3.5, 2.5, 2.5])
    np.testing.assert_allclose(pose.focal_point, [1.0, 0.0, 0.0])


def test_repeated_ticks_converge() -> None:
    follower = CameraFollowController()
    target = [6.0, 0.0, 0.0]
    for _ in range(400):
        follower.tick(True, target)

    assert follower.settled()
    np.testing.assert_allclose(follower.pose.position, [11.0, 5.0, 5.0], atol=1e-3)
    np.testing.assert_allclose(follower.pose.focal_point, target, atol=1e-3)


def test_full_damping_snaps() -> None:
    follower = CameraFollowController(damping=1.0)
    pose = follower.tick(True, [1.0, 1.0, 1.0])
    np.testing.assert_allclose(pose.position, [6.0, 6.0, 6.0])


@pytest.mark.parametrize("damping", [0.0, -0.1, 1.5])
def test_damping_out_of_range(damping: float) -> None:
    with pytest.raises(ValueError):
        CameraFollowController(damping=damping)


def test_sync_adopts_live_pose() -> None:
    follower = CameraFollowController()
    follower.sync((1.0, 2.0, 3.0), (0.0, 0.0, 1.0))
    np.testing.assert_allclose(follower.pose.position, [1.0, 2.0, 3.0])
    np.testing.assert_allclose(follower.pose.focal_point, [0.0, 0.0, 1.0])


def test_resolve_target(store: StepGraphStore) -> None:
    assert resolve_target(store.state) is None

    store.add_step()
    step = store.add_step()
    np.testing.assert_allclose(resolve_target(store.state), [3.0, 0.0, 0.0])

    sub = store.add_sub_step(step.id)
    assert store.selected_id == sub.id
    np.testing.assert_allclose(resolve_target(store.state), [3.0, -2.0, 0.0])
