"""
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Puzzle construction parameters.

"""
from __future__ import annotations

from dataclasses import dataclass, asdict, fields
from enum import Enum
from typing import Any, Dict

import numpy as np


class PuzzleSize(Enum):
    """Supported puzzle configurations; the value is the edge length in unit cubes."""
    CUBE_2X2 = 2
    CUBE_3X3 = 3

    @classmethod
    def parse(cls, value) -> "PuzzleSize":
        """Accept a PuzzleSize, an edge length (2, 3) or a name ('cube3x3', 'CUBE_3X3')."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            key = value.strip().upper().replace("CUBE", "CUBE_", 1).replace("__", "_")
            if key in cls.__members__:
                return cls[key]
            if value.isdigit():
                return cls(int(value))
        raise ValueError(f"Unsupported puzzle size: {value!r}")


@dataclass
class PuzzleConfig:
    """
    Configuration for a puzzle instance and its viewer.

    Geometry fields are read by the engine; view fields only by the
    matplotlib adapter and animator.
    """

    epsilon: float = 0.5
    # Layer-membership tolerance in lattice units. Half the cube spacing:
    # selects exactly one layer, never a neighbouring one.

    include_core: bool = True
    # Whether the inert centre cube of odd puzzles is modelled (27 vs 26 cubes).

    check_invariants: bool = True
    # Validate the layer size before, and the lattice bijection after, every turn.

    console_debug: bool = True
    # Log the label of every key handled by on_key_down.

    highlight_opacity: float = 0.5
    # Alpha of the selected cube in the 3D view; others are drawn opaque.

    scale: float = 20.0
    # World scale of the whole puzzle group (view only).

    tilt_x: float = np.pi / 7
    tilt_y: float = -np.pi / 4
    # Initial tilt of the puzzle group in the view (radians).

    tween_ms: int = 300
    # Duration of one animated quarter turn.

    fps: int = 30
    # Frames per second of the animator.

    def __post_init__(self) -> None:
        if not 0.0 < self.epsilon < 1.0:
            raise ValueError(f"epsilon must lie in (0, 1), got {self.epsilon}")
        if not 0.0 <= self.highlight_opacity <= 1.0:
            raise ValueError(f"highlight_opacity must lie in [0, 1], got {self.highlight_opacity}")
        if self.tween_ms <= 0 or self.fps <= 0:
            raise ValueError("tween_ms and fps must be positive")

    @property
    def frames_per_turn(self) -> int:
        return max(1, int(round(self.tween_ms * self.fps / 1000.0)))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PuzzleConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
