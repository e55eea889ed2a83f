"""
3D Scene Widget (PyVista Wrapper)
Draws one actor per step shape plus the link tubes, and drives the viewer
camera from a frame timer.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from PySide6.QtWidgets import QWidget, QVBoxLayout
from PySide6.QtCore import QTimer

from pyvistaqt import QtInteractor
import pyvista as pv

from stepscene.config import FRAME_INTERVAL_MS
from stepscene.controller.camera import CameraFollowController, resolve_target
from stepscene.controller.session import EditorSession
from stepscene.model.nodes import ShapeKind
from stepscene.model.scene import LinkSpec, ShapeSpec, project_scene
from stepscene.view.widgets.grid_manager import GridManager

logger = logging.getLogger(__name__)

BACKGROUND = "#1a1a1a"
IMPLICIT_LINK_COLOR = "#888888"
EXPLICIT_LINK_COLOR = "#ffd000"
SPIN_DEGREES_PER_FRAME = 0.6


def build_shape_mesh(shape_spec: ShapeSpec) -> pv.PolyData:
    """Unit-sized primitive for the shape, scaled by the node size."""
    center = shape_spec.position.to_list()
    s = shape_spec.size
    if shape_spec.shape == ShapeKind.CUBE:
        return pv.Cube(center=center, x_length=s, y_length=s, z_length=s)
    elif shape_spec.shape == ShapeKind.SPHERE:
        return pv.Sphere(radius=0.6 * s, center=center, theta_resolution=32, phi_resolution=32)
    elif shape_spec.shape == ShapeKind.CYLINDER:
        return pv.Cylinder(center=center, direction=(0, 1, 0), radius=0.5 * s, height=s, resolution=32)
    elif shape_spec.shape == ShapeKind.CONE:
        return pv.Cone(center=center, direction=(0, 1, 0), height=s, radius=0.6 * s, resolution=32)
    raise ValueError(f"Unhandled shape kind: {shape_spec.shape}")


def build_link_mesh(link: LinkSpec) -> Optional[pv.PolyData]:
    start, end = link.start.to_array(), link.end.to_array()
    if np.allclose(start, end):
        return None
    radius = 0.05 if link.explicit else 0.03
    return pv.Line(start, end).tube(radius=radius, n_sides=8)


class Scene3DWidget(QWidget):
    def __init__(self, session: EditorSession, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.session = session
        self.store = session.store

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self.plotter: QtInteractor = QtInteractor(self)
        self.layout_box.addWidget(self.plotter)
        self._init_plotter()

        self._grid_manager = GridManager(self.plotter)
        self.follower = CameraFollowController()

        # --- Actors state ---
        self._shape_actors: dict[str, pv.Actor] = {}
        self._outline_actor: Optional[pv.Actor] = None
        self._link_actors: list[pv.Actor] = []
        self._actor_to_node: dict[int, str] = {}

        self.store.graph_changed.connect(self.refresh)
        self.store.selection_changed.connect(lambda *_: self.refresh())
        self.store.viewer_mode_changed.connect(self._on_viewer_mode_changed)

        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._on_frame)
        self._frame_timer.start()

        self.refresh()
        self.plotter.reset_camera()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def refresh(self) -> None:
        """Re-project the store and rebuild every actor."""
        self._clear_scene()
        scene = project_scene(self.store.state)

        for shape_spec in scene.shapes:
            mesh = build_shape_mesh(shape_spec)
            actor = self.plotter.add_mesh(
                mesh,
                color=shape_spec.color,
                smooth_shading=shape_spec.shape != ShapeKind.CUBE,
                pickable=True,
                reset_camera=False,
            )
            self._shape_actors[shape_spec.node_id] = actor
            self._actor_to_node[id(actor)] = shape_spec.node_id

            if shape_spec.selected:
                self._outline_actor = self.plotter.add_mesh(
                    mesh, style="wireframe", color="white", line_width=1,
                    pickable=False, reset_camera=False,
                )

        for link in scene.links:
            tube = build_link_mesh(link)
            if tube is None:
                continue
            color = EXPLICIT_LINK_COLOR if link.explicit else IMPLICIT_LINK_COLOR
            self._link_actors.append(
                self.plotter.add_mesh(tube, color=color, pickable=False, reset_camera=False)
            )

        points = np.array([s.position.to_list() for s in scene.shapes]).reshape(-1, 3)
        self._grid_manager.update_grid(points)
        self.plotter.render()

    def shutdown(self) -> None:
        self._frame_timer.stop()
        self.plotter.close()

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def _init_plotter(self) -> None:
        self.plotter.set_background(BACKGROUND)
        self.plotter.add_light(pv.Light(position=(10, 10, 5), light_type="scene light", intensity=1.0))
        self.plotter.add_light(pv.Light(position=(-10, -10, -5), light_type="scene light", intensity=0.5))
        self.plotter.camera.position = (10.0, 10.0, 10.0)
        self.plotter.camera.focal_point = (0.0, 0.0, 0.0)
        self.plotter.camera.up = (0.0, 1.0, 0.0)
        self.plotter.enable_mesh_picking(
            callback=self._on_actor_picked, use_actor=True, show=False, left_clicking=True,
        )

    def _on_actor_picked(self, actor: Optional[pv.Actor]) -> None:
        node_id = self._actor_to_node.get(id(actor)) if actor is not None else None
        if node_id is not None:
            self.session.select_step(node_id)

    def _on_viewer_mode_changed(self, enabled: bool) -> None:
        if enabled:
            cam = self.plotter.camera
            self.follower.sync(cam.position, cam.focal_point)

    def _on_frame(self) -> None:
        selected = self._shape_actors.get(self.store.selected_id)
        if selected is not None:
            # Spin around the shape's own center
            selected.origin = selected.center
            selected.rotate_y(SPIN_DEGREES_PER_FRAME)
            if self._outline_actor is not None:
                self._outline_actor.origin = selected.origin
                self._outline_actor.orientation = selected.orientation

        pose = self.follower.tick(self.store.viewer_mode, resolve_target(self.store.state))
        if pose is not None:
            cam = self.plotter.camera
            cam.position = tuple(pose.position)
            cam.focal_point = tuple(pose.focal_point)
            self.plotter.reset_camera_clipping_range()

        if selected is not None or pose is not None:
            self.plotter.render()

    def _clear_scene(self) -> None:
        """Remove all shape and link actors."""
        for act in list(self._shape_actors.values()) + self._link_actors:
            self.plotter.remove_actor(act)
        if self._outline_actor is not None:
            self.plotter.remove_actor(self._outline_actor)
        self._shape_actors.clear()
        self._link_actors.clear()
        self._actor_to_node.clear()
        self._outline_actor = None
