'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Animator drives the rotation guard; render adapter tables and polygons.

'''

import unittest
import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from cubelayers.config import PuzzleConfig
from cubelayers.puzzle import RubiksCube
from cubelayers.visualisation.animator import CubeAnimator, ease_quadratic_in_out
from cubelayers.visualisation.render import poses_frame, cube_polygons, plot_3d


class TestCubeAnimator(unittest.TestCase):

    def setUp(self):
        self.puzzle = RubiksCube(2)
        self.animator = CubeAnimator(self.puzzle, frames_per_turn=4)

    def tearDown(self):
        self.animator.close()
        plt.close("all")

    def test_easing(self):
        self.assertEqual(ease_quadratic_in_out(0.0), 0.0)
        self.assertEqual(ease_quadratic_in_out(1.0), 1.0)
        self.assertAlmostEqual(ease_quadratic_in_out(0.5), 0.5)
        self.assertLess(ease_quadratic_in_out(0.25), 0.25)

    def test_animated_turn_holds_guard_until_last_frame(self):
        event = self.puzzle.rotate("w")
        self.assertIs(self.animator.active_event, event)
        self.assertTrue(self.puzzle.rotating)
        self.assertIsNone(self.puzzle.rotate("s"))
        for i in range(4):
            self.animator._draw_frame(i)
            self.assertTrue(self.puzzle.rotating)
        self.animator._draw_frame(4)
        self.assertFalse(self.puzzle.rotating)
        self.assertIsNone(self.animator.active_event)
        self.assertIsNotNone(self.puzzle.rotate("s"))

    def test_skip_animation_never_sets_guard(self):
        self.puzzle.rotate("w", no_animation=True)
        self.assertFalse(self.puzzle.rotating)
        self.assertIsNone(self.animator.active_event)

    def test_intermediate_poses_span_the_turn(self):
        before = self.puzzle.snapshot()
        event = self.puzzle.rotate("q")
        start = self.animator._intermediate_poses(event, 0.0)
        end = self.animator._intermediate_poses(event, event.angle)
        self.assertEqual(set(start), set(event.members))
        for cube_id in event.members:
            np.testing.assert_allclose(start[cube_id][1], before[cube_id][0], atol=1e-12)
            np.testing.assert_allclose(start[cube_id][0], before[cube_id][1], atol=1e-12)
            np.testing.assert_allclose(end[cube_id][1], self.puzzle.cube(cube_id).position, atol=1e-12)

    def test_queue_issues_after_settle(self):
        self.animator.queue(["a", "d"])
        self.animator._draw_frame(0)
        self.assertTrue(self.puzzle.rotating)
        self.assertEqual(len(self.animator.sequence), 1)
        for i in range(1, 5):
            self.animator._draw_frame(i)
        self.assertFalse(self.puzzle.rotating)
        self.animator._draw_frame(5)
        self.assertEqual(self.animator.sequence, [])
        for i in range(6, 11):
            self.animator._draw_frame(i)
        self.assertTrue(self.puzzle.is_solved())
        self.assertEqual(list(self.puzzle.get_history()["command"]), ["rotate-left", "rotate-right"])

    def test_stop_releases_guard(self):
        self.puzzle.rotate("e")
        self.animator.stop()
        self.assertFalse(self.puzzle.rotating)

    def test_close_detaches(self):
        self.animator.close()
        self.puzzle.rotate("w")
        self.assertFalse(self.puzzle.rotating)


class TestRender(unittest.TestCase):

    def tearDown(self):
        plt.close("all")

    def test_poses_frame(self):
        puzzle = RubiksCube(3)
        puzzle.select_reference(4)
        df = poses_frame(puzzle)
        self.assertEqual(df.shape, (27, 7))
        self.assertEqual(int(df["selected"].sum()), 1)
        self.assertEqual(int(df.loc[df["selected"], "cube_id"].iloc[0]), 4)
        self.assertEqual((df.loc[0, "x"], df.loc[0, "y"], df.loc[0, "z"]), (-1.0, 1.0, 1.0))

    def test_cube_polygons_follow_orientation(self):
        t = np.array([0.0, 0.0, 1.0])
        quads = cube_polygons(np.eye(3), t, np.eye(3))
        self.assertEqual(len(quads), 6)
        np.testing.assert_allclose(quads['F'][:, 2], 1.47)
        R = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0], [0.0, -1.0, 0.0]])  # front face turned up
        quads = cube_polygons(R, t, np.eye(3))
        np.testing.assert_allclose(quads['F'][:, 1], 0.47)

    def test_plot_3d_draws_every_face(self):
        puzzle = RubiksCube(2, PuzzleConfig(scale=1.0))
        fig = plt.figure()
        ax = fig.add_subplot(111, projection="3d")
        plot_3d(puzzle, ax)
        self.assertEqual(len(ax.collections), 8 * 6)


class TestLauncher(unittest.TestCase):

    def tearDown(self):
        plt.close("all")

    def test_scripted_turns_and_gif(self):
        import os
        import tempfile
        from cubelayers.launcher_scripts.launch_viewer import main

        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "turns.gif")
            result = main(["--size", "2", "--scripted", "w", "rotate-left", "--moves", "q",
                           "--tween-ms", "100", "--fps", "10", "--out", out])
            self.assertEqual(result, out)
            self.assertTrue(os.path.getsize(out) > 0)


if __name__ == "__main__":
    unittest.main()
