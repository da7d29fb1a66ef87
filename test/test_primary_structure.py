#!/usr/bin/env python3
"""
Unit tests for the connectivity graph (PrimaryStructure).
"""

import unittest
import numpy as np
import sys
from pathlib import Path

# Add parent directory to path for package imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from x2zmat import MolecularGeometry, PrimaryStructure, Tolerance


def ethane():
    return MolecularGeometry(
        ['C', 'C', 'H', 'H', 'H', 'H', 'H', 'H'],
        [[0.0, 0.0, 0.765], [0.0, 0.0, -0.765],
         [1.018, 0.0, 1.157], [-0.509, 0.8816, 1.157], [-0.509, -0.8816, 1.157],
         [-1.018, 0.0, -1.157], [0.509, -0.8816, -1.157], [0.509, 0.8816, -1.157]])


def cyclopropane():
    carbons = [[0.0, 0.8718, 0.0], [0.755, -0.4359, 0.0], [-0.755, -0.4359, 0.0]]
    symbols = ['C', 'C', 'C']
    coords = list(carbons)
    for c in carbons:
        outward = np.array(c) / np.linalg.norm(c)
        for z in (0.91, -0.91):
            coords.append(list(np.array(c) + 0.55 * outward + [0.0, 0.0, z]))
            symbols.append('H')
    return MolecularGeometry(symbols, coords)


def acetylene():
    return MolecularGeometry(['H', 'C', 'C', 'H'],
                             [[0.0, 0.0, -1.663], [0.0, 0.0, -0.603], [0.0, 0.0, 0.603], [0.0, 0.0, 1.663]])


def water_dimer():
    return MolecularGeometry(
        ['O', 'H', 'H', 'O', 'H', 'H'],
        [[0.0, 0.0, 0.1173], [0.0, 0.7572, -0.4692], [0.0, -0.7572, -0.4692],
         [0.0, 0.0, 3.0173], [0.0, 0.7572, 2.4308], [0.0, -0.7572, 2.4308]])


class TestBondPerception(unittest.TestCase):
    """Test bond detection from interatomic distances."""

    def test_ethane_bonds(self):
        primary = PrimaryStructure(ethane())
        self.assertEqual(primary.bonds(), [(0, 1), (0, 2), (0, 3), (0, 4), (1, 5), (1, 6), (1, 7)])
        self.assertEqual(primary.degree(0), 4)
        self.assertEqual(primary.neighbors(1), [0, 5, 6, 7])

    def test_adjacency_symmetric_and_read_only(self):
        adjacency = PrimaryStructure(ethane()).adjacency
        np.testing.assert_array_equal(adjacency, adjacency.T)
        with self.assertRaises(ValueError):
            adjacency[0, 1] = 0

    def test_deterministic(self):
        a = PrimaryStructure(cyclopropane())
        b = PrimaryStructure(cyclopropane())
        np.testing.assert_array_equal(a.adjacency, b.adjacency)

    def test_bond_scale(self):
        # C-C at 1.53 A exceeds 0.76 * 2 * 0.9 + 0.05
        primary = PrimaryStructure(ethane(), tolerance=Tolerance(bond_scale=0.9))
        self.assertFalse(primary.is_bonded(0, 1))
        self.assertTrue(PrimaryStructure(ethane()).is_bonded(0, 1))

    def test_self_connection(self):
        primary = PrimaryStructure(ethane())
        self.assertTrue(primary.is_bonded(3, 3))
        self.assertFalse(primary.is_bonded(2, 5))

    def test_bonded_to_group(self):
        primary = PrimaryStructure(ethane())
        self.assertTrue(primary.is_bonded_to_group(0, [5, 6, 1]))
        self.assertFalse(primary.is_bonded_to_group(2, [1, 5, 6]))

    def test_input_not_modified(self):
        geom = ethane()
        before = geom.coords
        PrimaryStructure(geom).geometry.translate([1.0, 0.0, 0.0])
        np.testing.assert_allclose(geom.coords, before)


class TestComponentsAndRings(unittest.TestCase):
    """Test connected components, ring bonds and linear atoms."""

    def test_single_component(self):
        primary = PrimaryStructure(ethane())
        self.assertTrue(primary.is_connected())
        self.assertEqual(len(primary.connected_group()), 1)

    def test_excluded_bond_splits_molecule(self):
        groups = PrimaryStructure(ethane()).connected_group(exclude_bond=(0, 1))
        self.assertEqual([sorted(g) for g in groups], [[0, 2, 3, 4], [1, 5, 6, 7]])

    def test_two_components(self):
        primary = PrimaryStructure(water_dimer())
        self.assertFalse(primary.is_connected())
        self.assertEqual([sorted(g) for g in primary.connected_group()], [[0, 1, 2], [3, 4, 5]])
        self.assertEqual(primary.fragment_labels(), ['H2O', 'H2O'])

    def test_ring_bonds(self):
        primary = PrimaryStructure(cyclopropane())
        self.assertTrue(primary.is_ring(0, 1))
        self.assertTrue(primary.is_ring(1, 2))
        self.assertFalse(primary.is_ring(0, 3))

    def test_chain_bonds_are_not_ring(self):
        primary = PrimaryStructure(ethane())
        self.assertFalse(primary.is_ring(0, 1))
        # not bonded at all
        self.assertFalse(primary.is_ring(2, 5))

    def test_linear_atoms(self):
        primary = PrimaryStructure(acetylene())
        self.assertEqual([primary.is_linear(i) for i in range(4)], [False, True, True, False])
        self.assertFalse(PrimaryStructure(ethane()).is_linear(0))


class TestFragments(unittest.TestCase):
    """Test declared fragments."""

    def test_close_contact_between_fragments_is_not_a_bond(self):
        geom = MolecularGeometry(['O', 'H', 'H', 'O', 'H', 'H'],
                                 [[0.0, 0.0, 0.0], [0.96, 0.0, 0.0], [-0.24, 0.93, 0.0],
                                  [1.9, 0.0, 0.0], [2.2, 0.9, 0.0], [2.2, -0.9, 0.0]])
        # the H...O contact at 0.94 A is a bond unless the molecules are declared apart
        unrestricted = PrimaryStructure(geom)
        self.assertTrue(unrestricted.is_bonded(1, 3))
        restricted = PrimaryStructure(geom, fragments=[[0, 1, 2], [3, 4, 5]])
        self.assertFalse(restricted.is_bonded(1, 3))
        self.assertTrue(restricted.is_bonded(0, 1))
        self.assertEqual(restricted.fragment_of(4), 1)
        self.assertEqual(restricted.fragments, [[0, 1, 2], [3, 4, 5]])


class TestStoicheometry(unittest.TestCase):
    """Test chemical formulas."""

    def test_formula(self):
        self.assertEqual(PrimaryStructure(ethane()).stoicheometry(), 'C2H6')
        self.assertEqual(PrimaryStructure(cyclopropane()).stoicheometry(), 'C3H6')

    def test_group_formula(self):
        primary = PrimaryStructure(ethane())
        self.assertEqual(primary.group_stoicheometry([0, 2, 3, 4]), 'CH3')
        self.assertEqual(primary.group_stoicheometry([2]), 'H')

    def test_atom_properties(self):
        primary = PrimaryStructure(ethane())
        self.assertEqual(primary.symbol(0), 'C')
        self.assertEqual(primary.valence(0), 4)
        self.assertEqual(primary.atom_name(2).lower(), 'hydrogen')
        self.assertEqual(primary.size(), 8)


if __name__ == '__main__':
    unittest.main()
