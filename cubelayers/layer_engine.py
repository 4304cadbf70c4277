"""
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Layer selection and rotation composition on a collection of unit cubes.

"""
from __future__ import annotations

import logging
from itertools import product
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from cubelayers.moves import Command, AXES
from cubelayers.unit_cube import UnitCube, is_axis_aligned

logger = logging.getLogger(__name__)

PUZZLE_CENTER = (0.0, 0.0, 0.0)

Lattice = List[Tuple[float, float, float]]


class GeometryInvariantError(AssertionError):
    """The cube collection no longer matches the lattice, or a layer has the wrong size."""


def lattice_positions(n: int, include_core: bool = True) -> Lattice:
    """
    Lattice points of an n×n×n puzzle centred on the origin, spacing 1.

    Coordinates are k - (n-1)/2 for k = 0..n-1: integers for odd n,
    half-integers for even n. Ordered front (z max) to back, top row first,
    left to right, matching the layout cubes are created in.

    Args:
        n: Edge length in unit cubes.
        include_core: If False, drop the interior points (the hidden centre of a 3×3×3).
    """
    if n < 1:
        raise ValueError(f"puzzle edge length must be positive, got {n}")
    coords = [k - (n - 1) / 2.0 for k in range(n)]
    lo, hi = coords[0], coords[-1]
    points = []
    for z, y, x in product(reversed(coords), reversed(coords), coords):
        on_surface = lo in (x, y, z) or hi in (x, y, z)
        if include_core or on_surface:
            points.append((x, y, z))
    return points


class LayerEngine:
    """
    Stateless layer-turn engine.

    The engine borrows a cube collection for the duration of one call; it
    owns no cubes itself. A layer is the set of cubes whose coordinate along
    the turn's grouping axis is within `epsilon` of the reference cube's.

    Attributes
    ----------
    epsilon : float
        Membership tolerance in lattice units (half the spacing by default).
    pivot : tuple[float, float, float]
        Fixed point of every turn, the puzzle centre.
    """

    def __init__(self, epsilon: float = 0.5, pivot: Sequence[float] = PUZZLE_CENTER):
        self.epsilon = float(epsilon)
        self.pivot = tuple(float(v) for v in pivot)

    def in_same_layer(self, cube: UnitCube, reference: UnitCube, axis_idx: int) -> bool:
        c = cube.coordinate(axis_idx)
        r = reference.coordinate(axis_idx)
        return r - self.epsilon < c < r + self.epsilon

    def select_layer(self, cubes: Iterable[UnitCube], reference: UnitCube, command: Command) -> List[UnitCube]:
        """
        Return the cubes sharing the reference cube's layer for `command`.

        Collection order is preserved. The reference cube is always a member.
        """
        axis_idx = command.turn.group_axis
        return [c for c in cubes if self.in_same_layer(c, reference, axis_idx)]

    def expected_layer_size(self, lattice: Lattice, reference: UnitCube, command: Command) -> int:
        """Number of lattice points in the reference cube's layer (4 or 9 for full puzzles)."""
        axis_idx = command.turn.group_axis
        r = reference.coordinate(axis_idx)
        return sum(1 for p in lattice if abs(p[axis_idx] - r) < self.epsilon)

    def check_layer(self, layer: Sequence[UnitCube], expected: int, command: Command) -> None:
        """
        Raise GeometryInvariantError if the layer does not hold `expected` cubes.

        A short layer means positions have drifted off the lattice; rotating it
        anyway would split the puzzle permanently.
        """
        if len(layer) != expected:
            msg = (f"layer for {command.value} on {AXES[command.turn.group_axis]} "
                   f"holds {len(layer)} cubes, expected {expected}")
            logger.error(msg)
            raise GeometryInvariantError(msg)

    def apply_rotation(
        self,
        cubes: Sequence[UnitCube],
        reference: UnitCube,
        command: Command,
        expected: int | None = None,
    ) -> List[UnitCube]:
        """
        Turn the reference cube's layer by the command's axis and angle.

        Membership is computed and (if `expected` is given) validated before
        any cube is touched, so the turn is all-or-nothing. Non-members are
        never mutated.

        Args:
            cubes: The full cube collection of one puzzle.
            reference: The currently selected cube.
            command: Which face turn to perform.
            expected: Required layer size. None only logs a warning when the
                layer differs from what the cubes' home points predict.

        Returns:
            The rotated member cubes, in collection order.
        """
        layer = self.select_layer(cubes, reference, command)
        if expected is not None:
            self.check_layer(layer, expected, command)
        else:
            # the cubes' home points are the lattice they were created on
            homes = [c.home for c in cubes]
            inferred = self.expected_layer_size(homes, reference, command)
            if len(layer) != inferred:
                logger.warning("layer for %s on %s holds %d cubes, expected %d; turning anyway",
                               command.value, AXES[command.turn.group_axis], len(layer), inferred)
        turn = command.turn
        axis = turn.axis_vector()
        for cube in layer:
            cube.apply_world_rotation(axis, turn.angle, self.pivot)
        logger.debug("%s turned %d cubes about %s", command.value, len(layer), turn.axis)
        return layer

    @staticmethod
    def check_bijection(cubes: Sequence[UnitCube], lattice: Lattice) -> None:
        """
        Raise GeometryInvariantError unless the cube positions cover the
        lattice exactly once and every orientation is axis-aligned.
        """
        keys = [c.lattice_key() for c in cubes]
        expected = {tuple(float(v) for v in np.round(p, 6) + 0.0) for p in lattice}
        problems = []
        if len(set(keys)) != len(keys):
            dupes = sorted({k for k in keys if keys.count(k) > 1})
            problems.append(f"positions shared by several cubes: {dupes}")
        if set(keys) != expected:
            off = sorted(set(keys) - expected)
            empty = sorted(expected - set(keys))
            if off:
                problems.append(f"positions off the lattice: {off}")
            if empty:
                problems.append(f"unoccupied lattice points: {empty}")
        skewed = [c.cube_id for c in cubes if not is_axis_aligned(c.orientation)]
        if skewed:
            problems.append(f"non axis-aligned orientation on cubes {skewed}")
        if problems:
            msg = "; ".join(problems)
            logger.error(msg)
            raise GeometryInvariantError(msg)
