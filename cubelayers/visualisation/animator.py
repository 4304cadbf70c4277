'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Tween layer turns with matplotlib and drive the puzzle's rotation guard.

'''

import logging
from typing import Iterable, Optional

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation, FFMpegWriter, PillowWriter

from cubelayers.moves import Command
from cubelayers.puzzle import RubiksCube, RotationEvent
from cubelayers.unit_cube import R_axis_angle
from cubelayers.visualisation.render import plot_3d

logger = logging.getLogger(__name__)


def ease_quadratic_in_out(alpha: float) -> float:
    """Quadratic in/out easing on [0, 1]."""
    alpha = min(1.0, max(0.0, alpha))
    if alpha < 0.5:
        return 2.0 * alpha * alpha
    return 1.0 - (-2.0 * alpha + 2.0) ** 2 / 2.0


class CubeAnimator:
    """
    Animate layer turns as a puzzle listener.

    The puzzle applies every turn at once; this animator only shows it. On an
    animated RotationEvent it sets the guard (`on_rotation_start`), draws the
    turning layer rotated back by the not-yet-shown part of the angle, and
    clears the guard (`on_rotation_settle`) after the last frame. Turns made
    with `no_animation` are drawn settled and never touch the guard.
    """

    def __init__(
        self,
        puzzle: RubiksCube,
        frames_per_turn: Optional[int] = None,
        fps: Optional[int] = None,
        ax: Optional[plt.Axes] = None,
    ):
        self.puzzle = puzzle
        self.frames_per_turn = frames_per_turn or puzzle.config.frames_per_turn
        self.fps = fps or puzzle.config.fps

        if ax is None:
            self.fig = plt.figure(figsize=(5.5, 5.5))
            self.ax = self.fig.add_subplot(111, projection='3d')
        else:
            self.fig = ax.figure
            self.ax = ax

        # Rolling state for animation
        self.sequence: list[Command | str] = []
        self.active_event: Optional[RotationEvent] = None
        self.active_frame_idx: int = 0

        puzzle.add_listener(self._on_rotation)

    def close(self) -> None:
        """Detach from the puzzle; an in-flight tween is stopped."""
        self.stop()
        self.puzzle.remove_listener(self._on_rotation)

    def queue(self, commands: Iterable[Command | str]) -> None:
        """Commands to issue one after another, each once the previous one settled."""
        self.sequence.extend(commands)

    def _on_rotation(self, puzzle: RubiksCube, event: RotationEvent) -> None:
        if not event.animated:
            return
        self.active_event = event
        self.active_frame_idx = 0
        puzzle.on_rotation_start()

    def stop(self) -> None:
        """Jump an in-flight tween to its end and release the guard."""
        if self.active_event is not None:
            self.active_event = None
            self.active_frame_idx = 0
            self.puzzle.on_rotation_settle()

    def _intermediate_poses(self, event: RotationEvent, theta: float):
        """
        Build pose_override for the current tween angle theta (radians in [0, angle]).

        The cubes already sit at their settled pose, so each member is drawn
        rotated back by (angle - theta) about the turn axis through the pivot.
        """
        R = R_axis_angle(event.axis, theta - event.angle)
        center = np.asarray(event.pivot, dtype=float)

        pose_override: dict[int, tuple[np.ndarray, np.ndarray]] = {}
        for cube_id in event.members:
            R0, t0 = self.puzzle.cube(cube_id).world_pose()
            # p' = center + R*(p - center) ; R' = R * R0
            pose_override[cube_id] = (R @ R0, center + R @ (t0 - center))
        return pose_override

    # ---------- Matplotlib animation glue ----------

    def _draw_frame(self, frame_idx: int):
        """Called by FuncAnimation for each global frame index."""
        self.ax.clear()

        if self.active_event is None and self.sequence:
            command = self.sequence.pop(0)
            if self.puzzle.rotate(command) is None:
                logger.debug("skipping %r: not applied", command)

        event = self.active_event
        if event is None:
            plot_3d(self.puzzle, self.ax)
            return

        alpha = min(1.0, self.active_frame_idx / self.frames_per_turn)
        theta = ease_quadratic_in_out(alpha) * event.angle
        plot_3d(self.puzzle, self.ax, pose_override=self._intermediate_poses(event, theta))

        self.active_frame_idx += 1
        if self.active_frame_idx > self.frames_per_turn:
            self.active_event = None
            self.active_frame_idx = 0
            self.puzzle.on_rotation_settle()

    def animate(self, outfile: str | None = None, duration_s: float | None = None):
        """
        If outfile is provided (.mp4 or .gif), save to disk. Otherwise show() live.
        If duration_s is given, cap total frames.
        """
        if duration_s is not None:
            max_frames = int(duration_s * self.fps)
        else:
            pending = len(self.sequence) + (self.active_event is not None)
            max_frames = (pending + 1) * (self.frames_per_turn + 1) + self.fps

        anim = FuncAnimation(
            self.fig,
            self._draw_frame,
            frames=max_frames,
            interval=1000 / self.fps,
            blit=False,
            repeat=False
        )

        if outfile:
            if outfile.endswith(".mp4"):
                writer = FFMpegWriter(fps=self.fps, bitrate=4000)
            elif outfile.endswith(".gif"):
                writer = PillowWriter(fps=self.fps)
            else:
                raise ValueError("outfile must end with .mp4 or .gif")
            anim.save(outfile, writer=writer)
            return outfile
        plt.show()
        return None
