'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Layer membership, turn application and lattice invariants.

'''

import unittest
import numpy as np

from cubelayers.layer_engine import LayerEngine, GeometryInvariantError, lattice_positions
from cubelayers.moves import Command
from cubelayers.unit_cube import UnitCube


def _make_cubes(n: int, include_core: bool = True):
    return [UnitCube(cube_id=i, position=np.array(p)) for i, p in enumerate(lattice_positions(n, include_core))]


class TestLattice(unittest.TestCase):

    def test_counts(self):
        self.assertEqual(len(lattice_positions(2)), 8)
        self.assertEqual(len(lattice_positions(3)), 27)
        self.assertEqual(len(lattice_positions(3, include_core=False)), 26)

    def test_coordinates(self):
        self.assertEqual({p[0] for p in lattice_positions(2)}, {-0.5, 0.5})
        self.assertEqual({p[2] for p in lattice_positions(3)}, {-1.0, 0.0, 1.0})
        self.assertNotIn((0.0, 0.0, 0.0), lattice_positions(3, include_core=False))

    def test_creation_order_front_top_left_first(self):
        pts = lattice_positions(3)
        self.assertEqual(pts[0], (-1.0, 1.0, 1.0))
        self.assertEqual(pts[2], (1.0, 1.0, 1.0))
        self.assertEqual(pts[-1], (1.0, -1.0, -1.0))
        self.assertEqual(lattice_positions(2)[0], (-0.5, 0.5, 0.5))

    def test_bad_size(self):
        with self.assertRaises(ValueError):
            lattice_positions(0)


class TestLayerEngine(unittest.TestCase):

    def setUp(self):
        self.engine = LayerEngine()
        self.cubes3 = _make_cubes(3)
        self.cubes2 = _make_cubes(2)

    def test_layer_size_every_reference_and_command(self):
        for cubes, size in [(self.cubes3, 9), (self.cubes2, 4)]:
            for ref in cubes:
                for cmd in Command:
                    layer = self.engine.select_layer(cubes, ref, cmd)
                    self.assertEqual(len(layer), size, (ref, cmd))
                    self.assertIn(ref, layer)

    def test_grouping_axis(self):
        ref = self.cubes3[0]  # (-1, 1, 1)
        self.assertTrue(all(c.position[0] == -1.0 for c in self.engine.select_layer(self.cubes3, ref, Command.ROTATE_UP)))
        self.assertTrue(all(c.position[1] == 1.0 for c in self.engine.select_layer(self.cubes3, ref, Command.ROTATE_RIGHT)))
        self.assertTrue(all(c.position[2] == 1.0 for c in self.engine.select_layer(self.cubes3, ref, Command.FACE_LEFT)))

    def test_expected_layer_size(self):
        lattice = lattice_positions(3, include_core=False)
        cubes = _make_cubes(3, include_core=False)
        middle = next(c for c in cubes if c.home == (0.0, 1.0, 0.0))
        self.assertEqual(self.engine.expected_layer_size(lattice, middle, Command.ROTATE_UP), 8)
        self.assertEqual(self.engine.expected_layer_size(lattice, middle, Command.ROTATE_LEFT), 9)

    def test_rotate_up_scenario(self):
        ref = self.cubes3[0]
        before = {c.cube_id: c.position.copy() for c in self.cubes3}
        layer = self.engine.apply_rotation(self.cubes3, ref, Command.ROTATE_UP, expected=9)
        self.assertEqual(len(layer), 9)
        np.testing.assert_allclose(ref.position, [-1.0, 1.0, -1.0], atol=1e-12)
        R = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0], [0.0, -1.0, 0.0]])
        for c in self.cubes3:
            if before[c.cube_id][0] == -1.0:
                np.testing.assert_allclose(c.position, R @ before[c.cube_id], atol=1e-12)
                np.testing.assert_allclose(c.orientation, R, atol=1e-12)
            else:
                np.testing.assert_array_equal(c.position, before[c.cube_id])
                np.testing.assert_array_equal(c.orientation, np.eye(3))

    def test_opposites_cancel(self):
        for cmd in Command:
            ref = self.cubes3[4]
            self.engine.apply_rotation(self.cubes3, ref, cmd)
            self.engine.apply_rotation(self.cubes3, ref, cmd.opposite)
            self.assertTrue(all(c.is_home() for c in self.cubes3), cmd)

    def test_four_turns_identity(self):
        for cmd in Command:
            for _ in range(4):
                self.engine.apply_rotation(self.cubes2, self.cubes2[3], cmd)
            self.assertTrue(all(c.is_home() for c in self.cubes2), cmd)

    def test_short_layer_is_rejected_before_any_move(self):
        ref = self.cubes3[0]
        self.cubes3[1].position = np.array([0.0, 1.0, 0.3])  # drifted out of the front layer
        before = {c.cube_id: c.position.copy() for c in self.cubes3}
        with self.assertRaises(GeometryInvariantError):
            self.engine.apply_rotation(self.cubes3, ref, Command.FACE_LEFT, expected=9)
        for c in self.cubes3:
            np.testing.assert_array_equal(c.position, before[c.cube_id])
            np.testing.assert_array_equal(c.orientation, np.eye(3))

    def test_short_layer_warns_without_expected_size(self):
        ref = self.cubes3[0]
        self.cubes3[1].position = np.array([0.0, 1.0, 0.3])
        with self.assertLogs("cubelayers", level="WARNING") as logs:
            layer = self.engine.apply_rotation(self.cubes3, ref, Command.FACE_LEFT)
        self.assertEqual(len(layer), 8)
        self.assertIn("expected 9", logs.output[0])

    def test_full_layer_does_not_warn(self):
        cubes = _make_cubes(3, include_core=False)
        ref = next(c for c in cubes if c.home == (0.0, 1.0, 0.0))
        with self.assertNoLogs("cubelayers", level="WARNING"):
            layer = self.engine.apply_rotation(cubes, ref, Command.FACE_LEFT)
        self.assertEqual(len(layer), 8)

    def test_check_bijection(self):
        lattice = lattice_positions(3)
        LayerEngine.check_bijection(self.cubes3, lattice)
        self.cubes3[1].position = self.cubes3[0].position.copy()
        with self.assertRaises(GeometryInvariantError):
            LayerEngine.check_bijection(self.cubes3, lattice)

    def test_check_bijection_orientation(self):
        lattice = lattice_positions(2)
        self.cubes2[0].orientation = np.diag([1.0, -1.0, -1.0]) @ np.array(
            [[1.0, 0.0, 0.0], [0.0, np.cos(0.1), -np.sin(0.1)], [0.0, np.sin(0.1), np.cos(0.1)]])
        with self.assertRaises(GeometryInvariantError):
            LayerEngine.check_bijection(self.cubes2, lattice)

    def test_invariant_error_is_assertion(self):
        self.assertTrue(issubclass(GeometryInvariantError, AssertionError))


if __name__ == "__main__":
    unittest.main()
