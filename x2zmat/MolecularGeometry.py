#!/usr/bin/env python3
"""
Molecular Geometry Container

This module provides the Atom and MolecularGeometry classes. A MolecularGeometry is
an ordered sequence of atoms (element symbol and Cartesian position in Angstroms).
The atom index is the stable identifier used by every downstream structure.

Rigid transformations (rotate, translate, scale) modify the geometry in place and
are visible to every alias; use copy() to preserve the original.
No validation is performed here.

Classes:
    Atom: Element symbol and position of a single atom
    MolecularGeometry: Ordered list of atoms supporting rigid transformations
"""

from typing import Iterable, Iterator, List, Sequence

import numpy as np
from scipy.spatial.distance import cdist

from . import Elements


class Atom:
    """
    Immutable atom: element symbol and 3D position.

    Attributes
    ----------
    symbol : str
        Element symbol (normalized capitalization)
    position : np.ndarray
        Read-only 3D position in Angstroms
    """

    def __init__(self, symbol: str, position: Sequence[float]):
        self._symbol = Elements.normalize_symbol(symbol)
        self._position = np.array(position, dtype=float)
        self._position.setflags(write=False)

    def __repr__(self) -> str:
        x, y, z = self._position
        return f"Atom({self._symbol}, [{x:.6f}, {y:.6f}, {z:.6f}])"

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def position(self) -> np.ndarray:
        return self._position

    @property
    def valence(self) -> int:
        return Elements.get_valence(self._symbol)

    @property
    def name(self) -> str:
        return Elements.get_name(self._symbol)

    @property
    def mass(self) -> float:
        return Elements.get_mass(self._symbol)

    @property
    def atomic_number(self) -> int:
        return Elements.get_atomic_number(self._symbol)


class MolecularGeometry:
    """
    Ordered sequence of atoms.

    Parameters
    ----------
    symbols : Iterable[str]
        Element symbols
    coords : array-like
        Nx3 Cartesian coordinates in Angstroms

    Examples
    --------
    >>> geom = MolecularGeometry(['O', 'H', 'H'], [[0, 0, 0.12], [0, 0.76, -0.47], [0, -0.76, -0.47]])
    >>> len(geom)
    3
    >>> geom.translate(-geom.center_of_mass()).scale(2.0)
    """

    def __init__(self, symbols: Iterable[str], coords):
        self._symbols = [Elements.normalize_symbol(s) for s in symbols]
        self._coords = np.array(coords, dtype=float).reshape(len(self._symbols), 3)

    @classmethod
    def from_atoms(cls, atoms: Iterable[Atom]) -> 'MolecularGeometry':
        """Create a geometry from a sequence of Atom objects."""
        atoms = list(atoms)
        return cls([a.symbol for a in atoms], [a.position for a in atoms])

    def __len__(self) -> int:
        return len(self._symbols)

    def __getitem__(self, index: int) -> Atom:
        return Atom(self._symbols[index], self._coords[index])

    def __iter__(self) -> Iterator[Atom]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        return f"MolecularGeometry(n_atoms={len(self)})"

    @property
    def symbols(self) -> List[str]:
        """Element symbols (copy)."""
        return list(self._symbols)

    @property
    def coords(self) -> np.ndarray:
        """Nx3 Cartesian coordinates (copy)."""
        return self._coords.copy()

    def position(self, index: int) -> np.ndarray:
        """Position of one atom (copy)."""
        return self._coords[index].copy()

    def copy(self) -> 'MolecularGeometry':
        return MolecularGeometry(self._symbols, self._coords)

    # -------------------------------------------------------------------------
    # Rigid transformations (in place)
    # -------------------------------------------------------------------------

    def rotate(self, matrix) -> 'MolecularGeometry':
        """
        Apply a 3x3 orthogonal matrix to every atom position.

        Parameters
        ----------
        matrix : array-like
            3x3 matrix; each position r becomes matrix @ r

        Returns
        -------
        MolecularGeometry
            self
        """
        matrix = np.asarray(matrix, dtype=float)
        self._coords = self._coords @ matrix.T
        return self

    def translate(self, vector) -> 'MolecularGeometry':
        """Shift every atom position by a vector."""
        self._coords = self._coords + np.asarray(vector, dtype=float)
        return self

    def scale(self, factor: float) -> 'MolecularGeometry':
        """Multiply every atom position by a scalar."""
        self._coords = self._coords * factor
        return self

    def reflect(self) -> 'MolecularGeometry':
        """Mirror the geometry through the xy plane."""
        self._coords[:, 2] = -self._coords[:, 2]
        return self

    # -------------------------------------------------------------------------
    # Geometric properties
    # -------------------------------------------------------------------------

    def masses(self) -> np.ndarray:
        return np.array([Elements.get_mass(s) for s in self._symbols])

    def center_of_mass(self) -> np.ndarray:
        masses = self.masses()
        return masses @ self._coords / masses.sum()

    def distance(self, i: int, j: int) -> float:
        return float(np.linalg.norm(self._coords[i] - self._coords[j]))

    def distance_matrix(self) -> np.ndarray:
        """NxN matrix of interatomic distances."""
        return cdist(self._coords, self._coords)
