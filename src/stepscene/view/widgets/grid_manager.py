"""
Grid Manager
Handles the floor grid under the step shapes.
"""
from typing import Optional
import numpy as np
import pyvista as pv


class GridManager:
    def __init__(self, plotter: pv.Plotter) -> None:
        self.plotter = plotter
        self.major_spacing: float = 5.0
        self.minor_spacing: float = 1.0
        self.floor_gap: float = 1.0
        self.min_half_extent: float = 15.0

        self._grid_major_actor: Optional[pv.Actor] = None
        self._grid_minor_actor: Optional[pv.Actor] = None
        self._last_bounds: Optional[tuple[float, ...]] = None

    def update_grid(self, points: np.ndarray) -> None:
        """Re-build the floor grid so it covers all given (N, 3) points with a margin."""
        if self.plotter is None: return

        bounds = self._grid_extent(points)
        floor_y = self._floor_height(points)
        if bounds + (floor_y,) == self._last_bounds:
            return

        grid_minor = self._build_xz_grid_polydata(bounds, self.minor_spacing, floor_y)
        grid_major = self._build_xz_grid_polydata(bounds, self.major_spacing, floor_y)

        self.clear_actors()
        self._last_bounds = bounds + (floor_y,)

        self._grid_minor_actor = self.plotter.add_mesh(
            grid_minor, color="#444444", line_width=1, opacity=0.5, pickable=False
        )
        self._grid_major_actor = self.plotter.add_mesh(
            grid_major, color="#666666", line_width=1, opacity=0.8, pickable=False
        )

    def _floor_height(self, points: np.ndarray) -> float:
        """Just below the lowest shape, never above y = 0."""
        if len(points) == 0:
            return -self.floor_gap
        lowest = float(np.asarray(points, dtype=float).reshape(-1, 3)[:, 1].min())
        return min(0.0, lowest) - self.floor_gap

    def _grid_extent(self, points: np.ndarray) -> tuple[float, float, float, float]:
        """Square-ish (x_min, x_max, z_min, z_max) snapped to the major spacing."""
        if len(points) == 0:
            cx, cz = 0.0, 0.0
            half = self.min_half_extent
        else:
            pts = np.asarray(points, dtype=float).reshape(-1, 3)
            x_min, z_min = pts[:, 0].min(), pts[:, 2].min()
            x_max, z_max = pts[:, 0].max(), pts[:, 2].max()
            cx, cz = (x_min + x_max) / 2, (z_min + z_max) / 2
            half = max(self.min_half_extent, 0.5 * max(x_max - x_min, z_max - z_min) + self.major_spacing)

        s = self.major_spacing
        return (
            float(np.floor((cx - half) / s) * s),
            float(np.ceil((cx + half) / s) * s),
            float(np.floor((cz - half) / s) * s),
            float(np.ceil((cz + half) / s) * s),
        )

    @staticmethod
    def _build_xz_grid_polydata(bounds, spacing, y) -> pv.PolyData:
        """
        Create a grid in the XZ plane (the floor, y up) with the given bounds and spacing.

        Args:
            bounds: (x_min, x_max, z_min, z_max)
            spacing: Grid spacing in both directions.
            y: Height of the floor plane.

        Returns:
            A PyVista PolyData grid object.
        """
        x_min, x_max, z_min, z_max = bounds
        xs = np.arange(x_min, x_max + spacing / 2, spacing)
        zs = np.arange(z_min, z_max + spacing / 2, spacing)

        n_lines = len(xs) + len(zs)
        if n_lines == 0: return pv.PolyData()

        points = np.empty((n_lines * 2, 3), dtype=float)
        cells = np.empty(n_lines * 3, dtype=int)

        pid, cid = 0, 0
        for x in xs:
            points[pid] = (x, y, z_min)
            points[pid + 1] = (x, y, z_max)
            cells[cid:cid + 3] = (2, pid, pid + 1)
            pid += 2
            cid += 3
        for z in zs:
            points[pid] = (x_min, y, z)
            points[pid + 1] = (x_max, y, z)
            cells[cid:cid + 3] = (2, pid, pid + 1)
            pid += 2
            cid += 3

        return pv.PolyData(points, lines=cells)

    def clear_actors(self) -> None:
        """Clears both grid actors from the plotter."""
        if self._grid_minor_actor: self.plotter.remove_actor(self._grid_minor_actor)
        if self._grid_major_actor: self.plotter.remove_actor(self._grid_major_actor)
        self._grid_minor_actor = None
        self._grid_major_actor = None
        self._last_bounds = None
