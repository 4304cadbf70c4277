'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Adapter from puzzle state to a renderer: pose tables and a matplotlib 3D view.

'''
from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from cubelayers.unit_cube import R_axis_angle

Pose = Tuple[np.ndarray, np.ndarray]

# Sticker colour of each body face, fixed to the cube itself so it travels
# with the orientation.
FACE_COLORS = {
    'F': (1.0, 0.0, 0.0),   # +z red
    'B': (1.0, 0.65, 0.0),  # -z orange
    'U': (1.0, 1.0, 1.0),   # +y white
    'D': (1.0, 1.0, 0.0),   # -y yellow
    'R': (0.0, 0.0, 1.0),   # +x blue
    'L': (0.0, 1.0, 0.0),   # -x green
}


def _unit_cube_quads(size: float = 0.94) -> dict[str, np.ndarray]:
    """Axis-aligned cube at origin; returns 6 face quads (4×3 each), CCW seen from outside."""
    s = size / 2.0
    return {
        'U': np.array([[-s, +s, +s], [+s, +s, +s], [+s, +s, -s], [-s, +s, -s]]),
        'D': np.array([[-s, -s, -s], [+s, -s, -s], [+s, -s, +s], [-s, -s, +s]]),
        'F': np.array([[-s, -s, +s], [+s, -s, +s], [+s, +s, +s], [-s, +s, +s]]),
        'B': np.array([[+s, -s, -s], [-s, -s, -s], [-s, +s, -s], [+s, +s, -s]]),
        'R': np.array([[+s, -s, +s], [+s, -s, -s], [+s, +s, -s], [+s, +s, +s]]),
        'L': np.array([[-s, -s, -s], [-s, -s, +s], [-s, +s, +s], [-s, +s, -s]]),
    }


def group_transform(config) -> np.ndarray:
    """Scale · Rx(tilt_x) · Ry(tilt_y): the puzzle group's placement in the view."""
    Rx = R_axis_angle((1.0, 0.0, 0.0), config.tilt_x)
    Ry = R_axis_angle((0.0, 1.0, 0.0), config.tilt_y)
    return config.scale * (Rx @ Ry)


def poses_frame(puzzle) -> pd.DataFrame:
    """
    Tabulate every cube's pose, one row per cube in creation order.

    Columns: cube_id, x, y, z, home, orientation (3×3 array), selected.
    """
    rows = []
    for cube in puzzle.cubes:
        R, t = cube.world_pose()
        rows.append({
            "cube_id": cube.cube_id,
            "x": float(t[0]),
            "y": float(t[1]),
            "z": float(t[2]),
            "home": cube.home,
            "orientation": R,
            "selected": cube is puzzle.selected,
        })
    return pd.DataFrame(rows, columns=["cube_id", "x", "y", "z", "home", "orientation", "selected"])


def cube_polygons(R: np.ndarray, t: np.ndarray, G: np.ndarray) -> Dict[str, np.ndarray]:
    """Face quads of one cube at pose (R, t), mapped through the group transform G."""
    return {name: (G @ (t + quad @ R.T).T).T for name, quad in _unit_cube_quads().items()}


def plot_3d(
    puzzle,
    ax: plt.Axes | None = None,
    pose_override: Optional[Dict[int, Pose]] = None,
    figsize: tuple[int, int] = (6, 6),
    edgecolor: str = "k",
    show: bool = True,
) -> plt.Axes:
    """
    Render the puzzle in a 3D matplotlib view.

    Args:
        puzzle: A RubiksCube.
        ax: Optional 3D axis to plot on. If None, creates a new figure.
        pose_override: {cube_id: (R, t)} poses to draw instead of the
            settled ones (used by the animator for in-between frames).
        figsize: Size of the figure (if created internally).
        edgecolor: Edge colour for face outlines.
        show: Call plt.show() when the figure was created here.

    Returns:
        The axis drawn on.
    """
    pose_override = pose_override or {}
    fig = None
    if ax is None:
        fig = plt.figure(figsize=figsize)
        ax = fig.add_subplot(111, projection="3d")
    ax.set_box_aspect([1, 1, 1])

    G = group_transform(puzzle.config)
    for cube in puzzle.cubes:
        R, t = pose_override.get(cube.cube_id, cube.world_pose())
        alpha = puzzle.config.highlight_opacity if cube is puzzle.selected else 1.0
        for name, quad in cube_polygons(R, t, G).items():
            poly = Poly3DCollection([quad])
            poly.set_facecolor((*FACE_COLORS[name], alpha))
            poly.set_edgecolor(edgecolor)
            ax.add_collection3d(poly)

    ax.set_axis_off()
    lim = puzzle.config.scale * puzzle.size.value
    ax.set_xlim(-lim, lim)
    ax.set_ylim(-lim, lim)
    ax.set_zlim(-lim, lim)
    if fig is not None and show:
        plt.show()
    return ax
