#!/usr/bin/env python3
"""
Unit tests for molecular orientation, shape classification and symmetry numbers.
"""

import unittest
import numpy as np
import sys
from pathlib import Path

# Add parent directory to path for package imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from x2zmat import (MolecularGeometry, MolecularOrientation, MoleculeType, CompareMode,
                    Tolerance, StructureTooComplexError, compare)


def methane():
    a = 0.629
    return MolecularGeometry(['C', 'H', 'H', 'H', 'H'],
                             [[0.0, 0.0, 0.0], [a, a, a], [-a, -a, a], [-a, a, -a], [a, -a, -a]])


def water():
    return MolecularGeometry(['O', 'H', 'H'],
                             [[0.0, 0.0, 0.1173], [0.0, 0.7572, -0.4692], [0.0, -0.7572, -0.4692]])


def ammonia():
    return MolecularGeometry(['N', 'H', 'H', 'H'],
                             [[0.0, 0.0, 0.0],
                              [0.9377, 0.0, -0.3816],
                              [-0.46885, 0.812072, -0.3816],
                              [-0.46885, -0.812072, -0.3816]])


def carbon_dioxide():
    return MolecularGeometry(['O', 'C', 'O'], [[0.0, 0.0, -1.16], [0.0, 0.0, 0.0], [0.0, 0.0, 1.16]])


def hydrogen_cyanide():
    return MolecularGeometry(['H', 'C', 'N'], [[0.0, 0.0, -1.066], [0.0, 0.0, 0.0], [0.0, 0.0, 1.156]])


def benzene():
    symbols = ['C'] * 6 + ['H'] * 6
    coords = []
    for radius in (1.39, 2.47):
        for k in range(6):
            angle = np.radians(60.0 * k)
            coords.append([radius * np.cos(angle), radius * np.sin(angle), 0.0])
    return MolecularGeometry(symbols, coords)


def bromochlorofluoromethane():
    directions = np.array([[1.0, 1.0, 1.0], [-1.0, -1.0, 1.0], [-1.0, 1.0, -1.0], [1.0, -1.0, -1.0]]) / np.sqrt(3.0)
    lengths = [1.09, 1.35, 1.77, 1.94]
    coords = [[0.0, 0.0, 0.0]] + [list(d * r) for d, r in zip(directions, lengths)]
    return MolecularGeometry(['C', 'H', 'F', 'Cl', 'Br'], coords)


def random_rotation(seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    q, r = np.linalg.qr(rng.normal(size=(3, 3)))
    q = q @ np.diag(np.sign(np.diag(r)))
    if np.linalg.det(q) < 0.0:
        q[:, 0] = -q[:, 0]
    return q


class TestClassification(unittest.TestCase):
    """Test linear / planar / nonlinear classification."""

    def test_linear(self):
        self.assertTrue(MolecularOrientation(carbon_dioxide()).is_linear())
        self.assertTrue(MolecularOrientation(hydrogen_cyanide()).is_linear())

    def test_diatomic_is_linear(self):
        geom = MolecularGeometry(['H', 'H'], [[0.0, 0.0, 0.0], [0.74, 0.0, 0.0]])
        self.assertEqual(MolecularOrientation(geom).molecule_type, MoleculeType.LINEAR)

    def test_plane(self):
        self.assertTrue(MolecularOrientation(water()).is_plane())
        self.assertTrue(MolecularOrientation(benzene()).is_plane())

    def test_nonlinear(self):
        orientation = MolecularOrientation(methane())
        self.assertEqual(orientation.molecule_type, MoleculeType.NONLINEAR)
        self.assertFalse(orientation.is_linear())
        self.assertFalse(orientation.is_plane())

    def test_nearly_linear_within_tolerance(self):
        # O-C-O bent by 2 degrees is still linear with the default 5 degree tolerance
        bend = np.radians(1.0)
        geom = MolecularGeometry(['O', 'C', 'O'],
                                 [[1.16 * np.sin(bend), 0.0, -1.16 * np.cos(bend)],
                                  [0.0, 0.0, 0.0],
                                  [1.16 * np.sin(bend), 0.0, 1.16 * np.cos(bend)]])
        self.assertTrue(MolecularOrientation(geom).is_linear())
        self.assertFalse(MolecularOrientation(geom, Tolerance(angle=0.5)).is_linear())


class TestOrientation(unittest.TestCase):
    """Test the principal-axes frame."""

    def test_input_not_modified(self):
        geom = water()
        before = geom.coords
        MolecularOrientation(geom)
        np.testing.assert_allclose(geom.coords, before)

    def test_centered_and_distances_preserved(self):
        geom = methane().rotate(random_rotation(1)).translate([3.0, -2.0, 1.0])
        oriented = MolecularOrientation(geom).geometry()
        np.testing.assert_allclose(oriented.center_of_mass(), np.zeros(3), atol=1e-10)
        np.testing.assert_allclose(oriented.distance_matrix(), geom.distance_matrix(), atol=1e-10)

    def test_linear_molecule_along_first_axis(self):
        positions = MolecularOrientation(carbon_dioxide()).positions
        np.testing.assert_allclose(positions[:, 1:], np.zeros((3, 2)), atol=1e-10)

    def test_reference_atoms(self):
        orientation = MolecularOrientation(water())
        ref = orientation.reference_atoms
        self.assertEqual(len(ref), 3)
        self.assertEqual(len(set(ref)), 3)
        self.assertEqual(len(orientation.signature), 3)


class TestSymmetryNumber(unittest.TestCase):
    """Test rotational symmetry numbers of reference molecules."""

    def test_methane(self):
        self.assertEqual(MolecularOrientation(methane()).sym_num(), 12)

    def test_water(self):
        self.assertEqual(MolecularOrientation(water()).sym_num(), 2)

    def test_ammonia(self):
        self.assertEqual(MolecularOrientation(ammonia()).sym_num(), 3)

    def test_benzene(self):
        self.assertEqual(MolecularOrientation(benzene()).sym_num(), 12)

    def test_linear_symmetric(self):
        self.assertEqual(MolecularOrientation(carbon_dioxide()).sym_num(), 2)

    def test_linear_asymmetric(self):
        self.assertEqual(MolecularOrientation(hydrogen_cyanide()).sym_num(), 1)

    def test_asymmetric(self):
        self.assertEqual(MolecularOrientation(bromochlorofluoromethane()).sym_num(), 1)

    def test_ethylene(self):
        geom = MolecularGeometry(['C', 'C', 'H', 'H', 'H', 'H'],
                                 [[0.6695, 0.0, 0.0], [-0.6695, 0.0, 0.0],
                                  [1.2321, 0.9289, 0.0], [1.2321, -0.9289, 0.0],
                                  [-1.2321, 0.9289, 0.0], [-1.2321, -0.9289, 0.0]])
        orientation = MolecularOrientation(geom)
        self.assertFalse(orientation.positions.flags.writeable)
        self.assertEqual(orientation.sym_num(), 4)
        # the principal frame stays untouched by the search
        np.testing.assert_allclose(orientation.positions, MolecularOrientation(geom).positions)

    def test_invariant_under_rigid_motion(self):
        geom = ammonia().rotate(random_rotation(7)).translate([1.0, 2.0, 3.0])
        self.assertEqual(MolecularOrientation(geom).sym_num(), 3)

    def test_too_many_candidates(self):
        with self.assertRaises(StructureTooComplexError):
            MolecularOrientation(methane(), Tolerance(max_symmetry_candidates=2)).sym_num()


class TestCompare(unittest.TestCase):
    """Test superposition of two oriented molecules."""

    def test_rotated_copy_matches(self):
        a = MolecularOrientation(water())
        b = MolecularOrientation(water().rotate(random_rotation(3)))
        self.assertEqual(compare(a, b, CompareMode.TEST), 1)
        self.assertEqual(compare(a, b, CompareMode.SYMNUM), 2)

    def test_different_molecules(self):
        a = MolecularOrientation(water())
        b = MolecularOrientation(MolecularGeometry(['S', 'H', 'H'],
                                                   [[0.0, 0.0, 0.1], [0.0, 0.96, -0.8], [0.0, -0.96, -0.8]]))
        self.assertEqual(compare(a, b, CompareMode.TEST), 0)

    def test_different_sizes(self):
        a = MolecularOrientation(water())
        b = MolecularOrientation(methane())
        self.assertEqual(compare(a, b, CompareMode.SYMNUM), 0)


class TestChirality(unittest.TestCase):
    """Test enantiomer detection."""

    def test_chiral(self):
        self.assertTrue(MolecularOrientation(bromochlorofluoromethane()).is_enantiomer())

    def test_achiral(self):
        self.assertFalse(MolecularOrientation(methane()).is_enantiomer())
        self.assertFalse(MolecularOrientation(ammonia()).is_enantiomer())

    def test_planar_and_linear_are_achiral(self):
        self.assertFalse(MolecularOrientation(water()).is_enantiomer())
        self.assertFalse(MolecularOrientation(carbon_dioxide()).is_enantiomer())

    def test_mirror_image_is_not_superimposable(self):
        a = MolecularOrientation(bromochlorofluoromethane())
        b = MolecularOrientation(bromochlorofluoromethane().reflect())
        self.assertEqual(compare(a, b, CompareMode.TEST), 0)


if __name__ == '__main__':
    unittest.main()
