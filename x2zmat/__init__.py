"""
x2zmat

This package derives chemical structure information from Cartesian coordinates:
- connectivity, rings and linear atoms
- shape, rotational symmetry number and chirality
- resonance structures, radical sites, rotational and beta-scission bonds
- a Z-matrix (internal coordinates) with free variables and constants
"""

__version__ = "1.0.0"

# Import main classes for easier access
from .Tolerance import Tolerance
from .Exceptions import (X2ZError, UnknownElementError, DisconnectedStructureError,
                         StructureTooComplexError, DegenerateGeometryError)
from .MolecularGeometry import Atom, MolecularGeometry
from .MolecularOrientation import MolecularOrientation, MoleculeType, CompareMode, compare
from .PrimaryStructure import PrimaryStructure
from .MolecularStructure import MolecularStructure, ConnectivityRecord, BetaRecord, BondAttribute
from .ZMatrix import ZMatrix
from . import IOTools
from .IOTools import read_xyz_file, read_xyz_string, write_xyz_file, write_zmatrix_file
from .CoordinateConversion import zmatrix_to_cartesian, cartesian_to_zmatrix

__all__ = [
    'Tolerance',
    'X2ZError',
    'UnknownElementError',
    'DisconnectedStructureError',
    'StructureTooComplexError',
    'DegenerateGeometryError',
    'Atom',
    'MolecularGeometry',
    'MolecularOrientation',
    'MoleculeType',
    'CompareMode',
    'compare',
    'PrimaryStructure',
    'MolecularStructure',
    'ConnectivityRecord',
    'BetaRecord',
    'BondAttribute',
    'ZMatrix',
    'IOTools',
    'read_xyz_file',
    'read_xyz_string',
    'write_xyz_file',
    'write_zmatrix_file',
    'zmatrix_to_cartesian',
    'cartesian_to_zmatrix',
]
