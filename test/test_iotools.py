#!/usr/bin/env python3
"""
Unit tests for IOTools module.

Tests XYZ reading and writing, Z-matrix file output, and the command-line
interface built on top of them.
"""

import io
import os
import tempfile
import unittest
import numpy as np
import sys
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

# Add parent directory to path for package imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from x2zmat import IOTools, MolecularGeometry, PrimaryStructure, MolecularStructure, UnknownElementError
from x2zmat.__main__ import main


ETHANE_XYZ = """8
ethane, staggered
C     0.000000   0.000000   0.765000
C     0.000000   0.000000  -0.765000
H     1.018000   0.000000   1.157000
H    -0.509000   0.881600   1.157000
H    -0.509000  -0.881600   1.157000
H    -1.018000   0.000000  -1.157000
H     0.509000  -0.881600  -1.157000
H     0.509000   0.881600  -1.157000
"""

WATER_DIMER_XYZ = """6

O   0.0  0.0     0.1173
H   0.0  0.7572 -0.4692
H   0.0 -0.7572 -0.4692
O   0.0  0.0     3.0173
H   0.0  0.7572  2.4308
H   0.0 -0.7572  2.4308
"""


class TestReadXYZ(unittest.TestCase):
    """Test XYZ parsing."""

    def test_read_string(self):
        geom = IOTools.read_xyz_string(ETHANE_XYZ)
        self.assertEqual(len(geom), 8)
        self.assertEqual(geom.symbols[:3], ['C', 'C', 'H'])
        np.testing.assert_allclose(geom.position(2), [1.018, 0.0, 1.157])

    def test_extra_columns_and_empty_comment(self):
        text = "2\n\nH 0.0 0.0 0.0 0.1\nH 0.0 0.0 0.74 0.1\n"
        geom = IOTools.read_xyz_string(text)
        self.assertAlmostEqual(geom.distance(0, 1), 0.74)

    def test_lowercase_symbols(self):
        geom = IOTools.read_xyz_string("1\ncomment\ncl 0.0 0.0 0.0\n")
        self.assertEqual(geom.symbols, ['Cl'])

    def test_empty(self):
        with self.assertRaises(ValueError):
            IOTools.read_xyz_string("")

    def test_bad_count(self):
        with self.assertRaises(ValueError) as cm:
            IOTools.read_xyz_string("two\n\nH 0 0 0\nH 0 0 1\n")
        self.assertIn("number of atoms", str(cm.exception))

    def test_truncated(self):
        with self.assertRaises(ValueError) as cm:
            IOTools.read_xyz_string("3\n\nH 0 0 0\nH 0 0 1\n")
        self.assertIn("expected 3 atoms", str(cm.exception))

    def test_bad_coordinate(self):
        with self.assertRaises(ValueError):
            IOTools.read_xyz_string("1\n\nH 0.0 x 0.0\n")

    def test_unknown_element(self):
        with self.assertRaises(UnknownElementError):
            IOTools.read_xyz_string("1\n\nXq 0.0 0.0 0.0\n")

    def test_read_file(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.xyz', delete=False) as f:
            f.write(ETHANE_XYZ)
            temp_path = f.name
        try:
            geom = IOTools.read_xyz_file(temp_path)
            self.assertEqual(len(geom), 8)
        finally:
            os.unlink(temp_path)

    def test_read_file_error_names_file(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.xyz', delete=False) as f:
            f.write("5\n\nH 0 0 0\n")
            temp_path = f.name
        try:
            with self.assertRaises(ValueError) as cm:
                IOTools.read_xyz_file(temp_path)
            self.assertIn(os.path.basename(temp_path), str(cm.exception))
        finally:
            os.unlink(temp_path)


class TestWriteFiles(unittest.TestCase):
    """Test XYZ and Z-matrix file output."""

    def test_write_xyz_file(self):
        geom = IOTools.read_xyz_string(ETHANE_XYZ)
        with tempfile.NamedTemporaryFile(mode='w', suffix='.xyz', delete=False) as f:
            temp_path = f.name
        try:
            IOTools.write_xyz_file(geom.coords, geom.symbols, temp_path, comment="test")
            with open(temp_path, 'r') as f:
                lines = f.readlines()
            self.assertEqual(lines[0].strip(), "8")
            self.assertEqual(lines[1].strip(), "test")
            self.assertEqual(len(lines), 10)
            reread = IOTools.read_xyz_file(temp_path)
            np.testing.assert_allclose(reread.coords, geom.coords, atol=1e-6)
        finally:
            os.unlink(temp_path)

    def test_write_xyz_file_append_mode(self):
        coords = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 0.74]])
        with tempfile.NamedTemporaryFile(mode='w', suffix='.xyz', delete=False) as f:
            temp_path = f.name
        try:
            IOTools.write_xyz_file(coords, ['H', 'H'], temp_path, comment="frame 1")
            IOTools.write_xyz_file(coords, ['H', 'H'], temp_path, comment="frame 2", append=True)
            with open(temp_path, 'r') as f:
                lines = f.readlines()
            self.assertEqual(len(lines), 8)
            self.assertEqual(lines[5].strip(), "frame 2")
        finally:
            os.unlink(temp_path)

    def test_write_zmatrix_file(self):
        structure = MolecularStructure(PrimaryStructure(IOTools.read_xyz_string(ETHANE_XYZ)))
        with tempfile.NamedTemporaryFile(mode='w', suffix='.zmat', delete=False) as f:
            temp_path = f.name
        try:
            IOTools.write_zmatrix_file(structure, temp_path)
            with open(temp_path, 'r') as f:
                content = f.read()
            self.assertEqual(content, structure.zmatrix())
            self.assertIn('Variables:', content)
        finally:
            os.unlink(temp_path)


class TestCommandLine(unittest.TestCase):
    """Test the x2zmat command."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.ethane = os.path.join(self.tmpdir.name, 'ethane.xyz')
        with open(self.ethane, 'w') as f:
            f.write(ETHANE_XYZ)
        self.dimer = os.path.join(self.tmpdir.name, 'dimer.xyz')
        with open(self.dimer, 'w') as f:
            f.write(WATER_DIMER_XYZ)

    def tearDown(self):
        self.tmpdir.cleanup()

    def run_main(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_report(self):
        output = os.path.join(self.tmpdir.name, 'ethane.zmat')
        code, out, _ = self.run_main(['-i', self.ethane, '-o', output])
        self.assertEqual(code, 0)
        self.assertIn('Stoichiometry: C2H6', out)
        self.assertIn('Symmetry number: 6', out)
        self.assertIn('Rotational bonds: 1', out)
        self.assertIn('1-2', out)
        self.assertTrue(os.path.exists(output))

    def test_fragments(self):
        code, out, _ = self.run_main(['-i', self.dimer, '--fragment', '1', '2', '3', '--fragment', '4', '5', '6'])
        self.assertEqual(code, 0)
        self.assertIn('Fragments: H2O, H2O', out)

    def test_disconnected_fails(self):
        code, _, err = self.run_main(['-i', self.dimer])
        self.assertEqual(code, 1)
        self.assertIn('not connected', err)

    def test_symmetry_search_limit(self):
        code, _, err = self.run_main(['-i', self.ethane, '--max-symmetry-candidates', '2'])
        self.assertEqual(code, 1)
        self.assertIn('Symmetry search exceeded 2', err)

    def test_search_limits_must_be_positive(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                main(['-i', self.ethane, '--max-symmetry-candidates', '0'])

    def test_missing_file(self):
        code, _, err = self.run_main(['-i', os.path.join(self.tmpdir.name, 'missing.xyz')])
        self.assertEqual(code, 1)
        self.assertIn('Error', err)


if __name__ == '__main__':
    unittest.main()
