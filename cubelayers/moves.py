"""
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Face-turn commands, their axis table and keyboard bindings.

"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

import numpy as np

AXES = ("x", "y", "z")


class Command(Enum):
    """The six face-turn commands. Values are the external command names."""
    ROTATE_UP = "rotate-up"
    ROTATE_DOWN = "rotate-down"
    ROTATE_LEFT = "rotate-left"
    ROTATE_RIGHT = "rotate-right"
    FACE_LEFT = "face-left"
    FACE_RIGHT = "face-right"

    @property
    def turn(self) -> "FaceTurn":
        return TURN_TABLE[self]

    @property
    def opposite(self) -> "Command":
        return OPPOSITES[self]


@dataclass(frozen=True)
class FaceTurn:
    """
    One row of the face-turn table.

    group_axis: index (0=x, 1=y, 2=z) of the coordinate that must match the
        reference cube for layer membership; always the rotation axis.
    axis: unit rotation axis in puzzle-local space.
    angle: rotation angle in radians.
    """
    group_axis: int
    axis: Tuple[float, float, float]
    angle: float

    def axis_vector(self) -> np.ndarray:
        return np.array(self.axis, dtype=float)


# Opposite commands share a grouping axis and flip the rotation axis, so
# each pair cancels and four of the same command is the identity.
TURN_TABLE: Dict[Command, FaceTurn] = {
    Command.ROTATE_UP: FaceTurn(0, (-1.0, 0.0, 0.0), np.pi / 2),
    Command.ROTATE_DOWN: FaceTurn(0, (1.0, 0.0, 0.0), np.pi / 2),
    Command.ROTATE_LEFT: FaceTurn(1, (0.0, -1.0, 0.0), np.pi / 2),
    Command.ROTATE_RIGHT: FaceTurn(1, (0.0, 1.0, 0.0), np.pi / 2),
    Command.FACE_LEFT: FaceTurn(2, (0.0, 0.0, 1.0), np.pi / 2),
    Command.FACE_RIGHT: FaceTurn(2, (0.0, 0.0, -1.0), np.pi / 2),
}

OPPOSITES: Dict[Command, Command] = {
    Command.ROTATE_UP: Command.ROTATE_DOWN,
    Command.ROTATE_DOWN: Command.ROTATE_UP,
    Command.ROTATE_LEFT: Command.ROTATE_RIGHT,
    Command.ROTATE_RIGHT: Command.ROTATE_LEFT,
    Command.FACE_LEFT: Command.FACE_RIGHT,
    Command.FACE_RIGHT: Command.FACE_LEFT,
}

KEY_BINDINGS: Dict[str, Command] = {
    "w": Command.ROTATE_UP,
    "s": Command.ROTATE_DOWN,
    "a": Command.ROTATE_LEFT,
    "d": Command.ROTATE_RIGHT,
    "q": Command.FACE_LEFT,
    "e": Command.FACE_RIGHT,
}

TEXT_MAPPING: Dict[str, str] = {
    "w": "W: rotate up",
    "s": "S: rotate down",
    "a": "A: rotate left",
    "d": "D: rotate right",
    "q": "Q: rotate face left",
    "e": "E: rotate face right",
}


def key_text(key: str) -> str:
    """Human-readable label for a bound key, '' if the key is unbound."""
    return TEXT_MAPPING.get(key, "")


def parse_command(token) -> Command | None:
    """
    Resolve free-form input into a Command.

    Accepts a Command, a command name ("rotate-up"), an enum name
    ("ROTATE_UP") or a bound key ("w"). Anything else yields None, so callers
    can ignore unrecognised input without raising.
    """
    if isinstance(token, Command):
        return token
    if not isinstance(token, str):
        return None
    if token in KEY_BINDINGS:
        return KEY_BINDINGS[token]
    try:
        return Command(token.lower())
    except ValueError:
        pass
    return Command.__members__.get(token.upper())
