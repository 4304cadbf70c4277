"""
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: A puzzle instance: owns its unit cubes, the selected reference cube and
the rotation guard, and records every applied turn.

"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from cubelayers.config import PuzzleConfig, PuzzleSize
from cubelayers.layer_engine import LayerEngine, lattice_positions
from cubelayers.moves import Command, key_text, parse_command
from cubelayers.unit_cube import UnitCube

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = ["step", "command", "reference", "layer_size", "animated"]


@dataclass(frozen=True)
class RotationEvent:
    """
    Outbound notification for one applied turn.

    The geometry is already settled when listeners receive it; `animated`
    tells an animator whether to tween it (and drive the guard hooks).
    """
    command: Command
    axis: Tuple[float, float, float]
    angle: float
    pivot: Tuple[float, float, float]
    members: Tuple[int, ...]
    reference: int
    animated: bool


Listener = Callable[["RubiksCube", RotationEvent], None]


def track_history(method: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator for RubiksCube.rotate: logs every applied turn into `self._history`
    unless history is disabled. Dropped or ignored commands (None result) are
    not recorded.
    """
    @wraps(method)
    def wrapper(self, command, no_animation: bool = False) -> Any:
        event = method(self, command, no_animation)
        if event is None or not self._history_enabled:
            return event
        step = int(self._history.shape[0])
        self._history.loc[step] = {
            "step": step,
            "command": event.command.value,
            "reference": event.reference,
            "layer_size": len(event.members),
            "animated": event.animated,
        }
        return event
    return wrapper


class RubiksCube:
    """
    One puzzle instance built from explicit UnitCube objects.

    Design principles
    -----------------
    • The unit cubes are the only geometric state; they are created once and
      only their position/orientation ever change.

    • Layer turns are logically atomic: `rotate` applies the whole quarter turn
      immediately. Animation is external and only toggles the guard through
      `on_rotation_start` / `on_rotation_settle`.

    • While the guard is set, new turns are silently dropped (never queued).
      Selecting a reference cube stays allowed, it does not touch geometry.

    Attributes
    ----------
    size : PuzzleSize
        2×2×2 or 3×3×3.
    cubes : list[UnitCube]
        Every unit cube, in creation order (front to back, top row first).
    config : PuzzleConfig
        Engine tolerance and view parameters.

    Example
    -------
        p = RubiksCube(PuzzleSize.CUBE_3X3)
        p.select_reference(0)
        p.rotate("rotate-up")
    """

    def __init__(self, size: PuzzleSize | int | str = PuzzleSize.CUBE_3X3, config: Optional[PuzzleConfig] = None):
        self.size = PuzzleSize.parse(size)
        self.config = config or PuzzleConfig()
        self.engine = LayerEngine(epsilon=self.config.epsilon)
        self.lattice = lattice_positions(self.size.value, include_core=self.config.include_core)
        self.cubes: List[UnitCube] = [
            UnitCube(cube_id=i, position=np.array(p)) for i, p in enumerate(self.lattice)
        ]
        self._by_id: Dict[int, UnitCube] = {c.cube_id: c for c in self.cubes}
        self._selected: UnitCube = self.cubes[0]
        self._rotating = False
        self._listeners: List[Listener] = []
        self._history_enabled = True
        self._history = pd.DataFrame(columns=HISTORY_COLUMNS)

    # ---------- selection ----------
    @property
    def selected(self) -> UnitCube:
        return self._selected

    def cube(self, cube_id: int) -> UnitCube:
        return self._by_id[cube_id]

    def select_reference(self, criterion: int | UnitCube | Callable[[UnitCube], bool]) -> UnitCube:
        """
        Set the reference cube layer membership is computed against.

        Args:
            criterion: A cube id, a UnitCube of this puzzle, or a predicate;
                the first cube (creation order) satisfying it is selected.

        Raises:
            KeyError: No cube of this puzzle matches.
        """
        if isinstance(criterion, UnitCube):
            if self._by_id.get(criterion.cube_id) is not criterion:
                raise KeyError(f"{criterion!r} does not belong to this puzzle")
            cube = criterion
        elif callable(criterion):
            cube = next((c for c in self.cubes if criterion(c)), None)
            if cube is None:
                raise KeyError("no cube satisfies the selection predicate")
        else:
            try:
                cube = self._by_id[int(criterion)]
            except (TypeError, ValueError):
                raise KeyError(f"no cube with id {criterion!r}") from None
        self._selected = cube
        logger.debug("selected %r", cube)
        return cube

    def pick(self, origin: Sequence[float], direction: Sequence[float]) -> Optional[UnitCube]:
        """
        Select the nearest cube hit by a ray, like a pointer raycast.

        Each cube is treated as an axis-aligned unit box around its position
        (slab test). Returns the selected cube, or None (selection unchanged)
        if the ray misses every cube.
        """
        o = np.asarray(origin, dtype=float)
        d = np.asarray(direction, dtype=float)
        norm = np.linalg.norm(d)
        if norm == 0.0:
            return None
        d = d / norm
        with np.errstate(divide="ignore", invalid="ignore"):
            inv = np.where(d != 0.0, 1.0 / d, np.inf)
        best, best_t = None, np.inf
        for cube in self.cubes:
            lo = cube.position - 0.5
            hi = cube.position + 0.5
            with np.errstate(invalid="ignore"):
                t1 = (lo - o) * inv
                t2 = (hi - o) * inv
            # axes parallel to the ray: inside the slab -> unbounded, outside -> miss
            parallel = d == 0.0
            if np.any(parallel & ((o < lo) | (o > hi))):
                continue
            t1 = np.where(parallel, -np.inf, t1)
            t2 = np.where(parallel, np.inf, t2)
            t_near = np.max(np.minimum(t1, t2))
            t_far = np.min(np.maximum(t1, t2))
            if t_near <= t_far and t_far >= 0.0:
                t_hit = max(t_near, 0.0)
                if t_hit < best_t:
                    best, best_t = cube, t_hit
        if best is not None:
            self.select_reference(best)
        return best

    # ---------- guard hooks ----------
    @property
    def rotating(self) -> bool:
        return self._rotating

    def on_rotation_start(self) -> None:
        """Called by the animator when a turn's tween begins."""
        self._rotating = True

    def on_rotation_settle(self) -> None:
        """Called by the animator when a turn's tween completes or is stopped."""
        self._rotating = False

    # ---------- listeners ----------
    def add_listener(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---------- turns ----------
    def layer(self, command: Command | str) -> List[UnitCube]:
        """Cubes that `command` would turn with the current reference cube."""
        cmd = parse_command(command)
        if cmd is None:
            return []
        return self.engine.select_layer(self.cubes, self._selected, cmd)

    @track_history
    def rotate(self, command: Command | str, no_animation: bool = False) -> Optional[RotationEvent]:
        """
        Apply a face turn to the reference cube's layer.

        Args:
            command: A Command, command name or bound key.
            no_animation: Mark the turn as not to be tweened (scripted moves).

        Returns:
            The RotationEvent sent to listeners, or None when the command was
            unrecognised or dropped because a turn is still in flight.

        Raises:
            GeometryInvariantError: The layer or lattice is corrupted; when
                raised before the turn, no cube has been moved.
        """
        cmd = parse_command(command)
        if cmd is None:
            logger.debug("ignoring unknown command %r", command)
            return None
        if self._rotating:
            logger.debug("dropping %s: rotation in progress", cmd.value)
            return None

        expected = None
        if self.config.check_invariants:
            expected = self.engine.expected_layer_size(self.lattice, self._selected, cmd)
        members = self.engine.apply_rotation(self.cubes, self._selected, cmd, expected=expected)
        if self.config.check_invariants:
            self.engine.check_bijection(self.cubes, self.lattice)

        turn = cmd.turn
        event = RotationEvent(
            command=cmd,
            axis=turn.axis,
            angle=turn.angle,
            pivot=self.engine.pivot,
            members=tuple(c.cube_id for c in members),
            reference=self._selected.cube_id,
            animated=not no_animation,
        )
        for listener in list(self._listeners):
            listener(self, event)
        return event

    def on_key_down(self, key: str, no_animation: bool = False) -> Optional[RotationEvent]:
        """Keyboard front door: w/s/a/d/q/e map to the six face turns."""
        if self._rotating:
            return None
        if self.config.console_debug and key_text(key):
            logger.info(key_text(key))
        return self.rotate(key, no_animation)

    def apply_sequence(self, commands: Iterable[Command | str], no_animation: bool = True) -> List[RotationEvent]:
        """Apply scripted turns in order; returns the events of the turns actually applied."""
        events = []
        for command in commands:
            event = self.rotate(command, no_animation)
            if event is not None:
                events.append(event)
        return events

    # ---------- state views ----------
    def snapshot(self) -> Dict[int, Tuple[np.ndarray, np.ndarray]]:
        """{cube_id: (position, orientation)} copies of the current state."""
        return {c.cube_id: (c.position.copy(), c.orientation.copy()) for c in self.cubes}

    def assert_invariants(self) -> None:
        """
        Verify the puzzle is a valid permutation of the solved lattice.

        Raises:
            GeometryInvariantError: duplicated or off-lattice positions, or a
                non axis-aligned orientation.
        """
        self.engine.check_bijection(self.cubes, self.lattice)

    def is_solved(self) -> bool:
        return all(c.is_home() for c in self.cubes)

    # ---------- history ----------
    @contextmanager
    def no_history(self):
        """Temporarily disable history recording."""
        prev = self._history_enabled
        self._history_enabled = False
        try:
            yield
        finally:
            self._history_enabled = prev

    def clear_history(self) -> None:
        self._history = pd.DataFrame(columns=HISTORY_COLUMNS)

    def get_history(self) -> pd.DataFrame:
        """
        Return a copy of the turn history.

        Columns:
            step (int)        : 0-based turn index
            command (str)     : command name, e.g. 'rotate-up'
            reference (int)   : id of the reference cube
            layer_size (int)  : number of cubes turned
            animated (bool)   : False for scripted / skip-animation turns
        """
        return self._history.copy()

    def __repr__(self) -> str:
        return f"RubiksCube(size={self.size.name}, cubes={len(self.cubes)}, selected={self._selected.cube_id})"
