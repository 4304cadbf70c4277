"""
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: A single unit cube of the puzzle, a position plus an explicit orientation.

"""

from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

# Tolerance used to decide whether a rotation matrix is a signed permutation
# (an axis-aligned quarter/half turn) and can be snapped to exact integers.
_SNAP_TOL = 1e-9


def R_axis_angle(axis: Sequence[float], angle: float) -> np.ndarray:
    """
    Rotation matrix for a right-handed rotation of `angle` radians about `axis`.

    Rodrigues' formula: R = I + sinθ·K + (1 - cosθ)·K², with K the cross-product
    matrix of the unit axis. Axis-aligned quarter turns come out as exact
    integer matrices.

    Args:
        axis: Rotation axis; normalised here, must be non-zero.
        angle: Angle in radians.

    Returns:
        A 3×3 float array.
    """
    k = np.asarray(axis, dtype=float)
    k = k / np.linalg.norm(k)
    K = np.array([
        [0.0, -k[2], k[1]],
        [k[2], 0.0, -k[0]],
        [-k[1], k[0], 0.0],
    ])
    R = np.eye(3) + np.sin(angle) * K + (1.0 - np.cos(angle)) * (K @ K)
    snapped = np.rint(R)
    if np.allclose(R, snapped, atol=_SNAP_TOL):
        return snapped
    return R


def is_axis_aligned(R: np.ndarray, atol: float = 1e-6) -> bool:
    """True if R is a signed permutation matrix with determinant +1 (one of the 24 cube rotations)."""
    snapped = np.rint(R)
    if not np.allclose(R, snapped, atol=atol):
        return False
    if not np.all(np.abs(snapped).sum(axis=0) == 1) or not np.all(np.abs(snapped).sum(axis=1) == 1):
        return False
    return bool(round(np.linalg.det(snapped)) == 1)


@dataclass(eq=False)
class UnitCube:
    """
    One unit cube ("cubie") of an N×N×N puzzle.

    A unit cube is a plain geometric record:
        - `cube_id`: stable handle, independent of where the cube currently sits
        - `position`: centre in puzzle-local space (lattice point, spacing 1)
        - `orientation`: 3×3 rotation composing every turn ever applied
        - `home`: the lattice point the cube was created at

    The only mutation is `apply_world_rotation`; everything else is derived.
    """
    cube_id: int
    position: np.ndarray
    orientation: np.ndarray = field(default_factory=lambda: np.eye(3))
    home: Tuple[float, float, float] | None = None

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=float).reshape(3)
        self.orientation = np.asarray(self.orientation, dtype=float).reshape(3, 3)
        if self.home is None:
            self.home = tuple(float(v) for v in self.position)

    def apply_world_rotation(
        self,
        axis: Sequence[float],
        angle: float,
        pivot: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> None:
        """
        Rotate this cube about a world axis through `pivot`, in place.

            position'    = pivot + R (position - pivot)
            orientation' = R @ orientation      (pre-multiplied: world frame)

        Args:
            axis: Unit rotation axis in puzzle-local space.
            angle: Rotation angle in radians (the engine only issues ±π/2).
            pivot: Fixed point of the rotation, the puzzle centre by default.
        """
        R = R_axis_angle(axis, angle)
        p = np.asarray(pivot, dtype=float)
        self.position = p + R @ (self.position - p)
        self.orientation = R @ self.orientation

    def world_pose(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return copies of (orientation, position) for renderers."""
        return self.orientation.copy(), self.position.copy()

    def coordinate(self, axis_idx: int) -> float:
        return float(self.position[axis_idx])

    def lattice_key(self, decimals: int = 6) -> Tuple[float, float, float]:
        """Position rounded for set/dict comparisons against the lattice."""
        return tuple(float(v) for v in np.round(self.position, decimals) + 0.0)

    def is_home(self, atol: float = 1e-6) -> bool:
        """True if the cube sits at its creation point with identity orientation."""
        return bool(
            np.allclose(self.position, self.home, atol=atol)
            and np.allclose(self.orientation, np.eye(3), atol=atol)
        )

    def __repr__(self) -> str:
        x, y, z = self.position
        return f"UnitCube: id={self.cube_id} pos=({x:g}, {y:g}, {z:g}) home={self.home}"
