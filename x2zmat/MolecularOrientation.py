#!/usr/bin/env python3
"""
Molecular Orientation and Symmetry

This module classifies the shape of a molecule (linear, planar, nonlinear) and
computes its rotational symmetry number and chirality.

The molecule is copied, translated to its centre of mass and rotated into the
principal frame of its inertia tensor. Two oriented molecules are compared by
enumerating the ordered atom triples of one molecule that can be the images of
three reference atoms of the other one (same elements, same distances from the
centre of mass, same pairwise distances), fitting the rotation that maps the
reference atoms onto each candidate triple, and checking that the rotation maps
every atom onto a distinct atom of the same element.

Preconditions (not checked): at least three atoms for a meaningful symmetry
number, no coincident atoms, positive tolerances.

Classes:
    MoleculeType: LINEAR, PLANE, NONLINEAR
    CompareMode: SYMNUM (count proper rotations), TEST (single yes/no check)
    MolecularOrientation: Oriented molecule with symmetry properties

Functions:
    compare: Count the proper rotations superimposing one molecule on another
"""

from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
from scipy.spatial.distance import cdist
from scipy.spatial.transform import Rotation

from .Exceptions import StructureTooComplexError
from .MolecularGeometry import MolecularGeometry
from .Tolerance import Tolerance


class MoleculeType(Enum):
    LINEAR = 'linear'
    PLANE = 'plane'
    NONLINEAR = 'nonlinear'


class CompareMode(Enum):
    SYMNUM = 'symnum'
    TEST = 'test'


class MolecularOrientation:
    """
    Molecule in its principal-axes frame with shape and symmetry properties.

    The geometry passed in is never modified.

    Parameters
    ----------
    geometry : MolecularGeometry
        Input geometry
    tolerance : Tolerance, optional
        Numerical accuracies (default: Tolerance())
    """

    def __init__(self, geometry: MolecularGeometry, tolerance: Optional[Tolerance] = None):
        self._tolerance = tolerance if tolerance is not None else Tolerance()

        geom = geometry.copy()
        geom.translate(-geom.center_of_mass())
        geom.rotate(_principal_axes(geom).T)
        self._geometry = geom
        self._positions = geom.coords
        self._positions.setflags(write=False)
        self._radii = np.linalg.norm(self._positions, axis=1)

        self._type = self._classify()
        self._reference_atoms = self._choose_reference_atoms()
        ref = self._reference_atoms
        self._signature = tuple(
            float(np.linalg.norm(self._positions[ref[i]] - self._positions[ref[j]]))
            for i, j in ((0, 1), (0, 2), (1, 2))
        ) if len(ref) == 3 else ()

    def __repr__(self) -> str:
        return f"MolecularOrientation(n_atoms={self.size()}, type={self._type.value})"

    # -------------------------------------------------------------------------
    # Read-only interface used by compare()
    # -------------------------------------------------------------------------

    @property
    def tolerance(self) -> Tolerance:
        return self._tolerance

    @property
    def molecule_type(self) -> MoleculeType:
        return self._type

    @property
    def positions(self) -> np.ndarray:
        """Nx3 positions in the principal frame (read-only)."""
        return self._positions

    @property
    def radii(self) -> np.ndarray:
        """Distances of the atoms from the centre of mass."""
        return self._radii

    @property
    def reference_atoms(self) -> Tuple[int, ...]:
        """Indices of the three atoms whose distances form the signature."""
        return self._reference_atoms

    @property
    def signature(self) -> Tuple[float, ...]:
        """Pairwise distances (r0-r1, r0-r2, r1-r2) of the reference atoms."""
        return self._signature

    def size(self) -> int:
        return len(self._geometry)

    def symbol(self, index: int) -> str:
        return self._geometry[index].symbol

    def symbols(self) -> List[str]:
        return self._geometry.symbols

    def geometry(self) -> MolecularGeometry:
        """Copy of the oriented geometry."""
        return self._geometry.copy()

    # -------------------------------------------------------------------------
    # Shape and symmetry
    # -------------------------------------------------------------------------

    def is_linear(self) -> bool:
        return self._type == MoleculeType.LINEAR

    def is_plane(self) -> bool:
        return self._type == MoleculeType.PLANE

    def sym_num(self) -> int:
        """Rotational symmetry number (number of proper rotations including identity)."""
        return compare(self, self, CompareMode.SYMNUM)

    def is_enantiomer(self) -> bool:
        """Whether the molecule is not superimposable on its mirror image."""
        if self._type != MoleculeType.NONLINEAR:
            return False
        mirror = MolecularOrientation(self._geometry.copy().reflect(), self._tolerance)
        return compare(self, mirror, CompareMode.TEST) == 0

    def _classify(self) -> MoleculeType:
        pos = self._positions
        n = len(pos)
        if n < 3:
            return MoleculeType.LINEAR

        sin_tol = self._tolerance.sine()
        dist = cdist(pos, pos)
        i, j = np.unravel_index(np.argmax(dist), dist.shape)
        axis = (pos[j] - pos[i]) / dist[i, j]

        vectors = pos - pos[i]
        lengths = np.linalg.norm(vectors, axis=1)
        perp = np.linalg.norm(np.cross(vectors, axis), axis=1)
        off_axis = [k for k in range(n)
                    if lengths[k] > self._tolerance.distance and perp[k] / lengths[k] > sin_tol]
        if not off_axis:
            return MoleculeType.LINEAR

        k = max(off_axis, key=lambda m: perp[m])
        normal = np.cross(axis, vectors[k])
        normal /= np.linalg.norm(normal)
        for m in range(n):
            if lengths[m] > self._tolerance.distance and abs(np.dot(vectors[m], normal)) / lengths[m] > sin_tol:
                return MoleculeType.NONLINEAR
        return MoleculeType.PLANE

    def _choose_reference_atoms(self) -> Tuple[int, ...]:
        n = self.size()
        if self._type == MoleculeType.LINEAR or n < 3:
            return ()
        r0 = int(np.argmax(self._radii))
        direction = self._positions[r0] / self._radii[r0]
        perp = np.linalg.norm(np.cross(self._positions, direction), axis=1)
        perp[r0] = -1.0
        r1 = int(np.argmax(perp))
        r2 = next(k for k in range(n) if k not in (r0, r1))
        return (r0, r1, r2)


def _principal_axes(geometry: MolecularGeometry) -> np.ndarray:
    """
    Eigenvectors (columns) of the inertia tensor of a geometry centred at its centre
    of mass, ordered by increasing moment and forming a right-handed frame.
    """
    coords = geometry.coords
    masses = geometry.masses()
    r2 = np.sum(coords ** 2, axis=1)
    inertia = np.eye(3) * np.sum(masses * r2) - (coords * masses[:, None]).T @ coords
    _, axes = np.linalg.eigh(inertia)
    if np.linalg.det(axes) < 0.0:
        axes[:, 2] = -axes[:, 2]
    return axes


def _match_atoms(moved: np.ndarray, symbols: List[str], target: MolecularOrientation) -> Optional[Tuple[int, ...]]:
    """
    Map every moved atom onto a distinct atom of the target with the same element
    lying within distance tolerance.

    Returns
    -------
    Optional[Tuple[int, ...]]
        The permutation (target index for every atom), or None if no match exists
    """
    dist = cdist(moved, target.positions)
    used = set()
    perm = []
    for i, symbol in enumerate(symbols):
        best = None
        for j in np.argsort(dist[i], kind='stable'):
            if dist[i, j] >= target.tolerance.distance:
                break
            if j not in used and target.symbol(j) == symbol:
                best = int(j)
                break
        if best is None:
            return None
        used.add(best)
        perm.append(best)
    return tuple(perm)


def compare(a: MolecularOrientation, b: MolecularOrientation, mode: CompareMode) -> int:
    """
    Compare two oriented molecules.

    Parameters
    ----------
    a, b : MolecularOrientation
        Molecules to compare (a is rotated onto b)
    mode : CompareMode
        SYMNUM: count every distinct proper rotation mapping a onto b.
        TEST: stop at the first one.

    Returns
    -------
    int
        Number of proper rotations found (in TEST mode, 1 or 0)

    Raises
    ------
    StructureTooComplexError
        If the number of candidate superpositions exceeds the configured bound
    """
    tol = a.tolerance
    n = a.size()
    if n != b.size() or sorted(a.symbols()) != sorted(b.symbols()):
        return 0
    if a.molecule_type != b.molecule_type:
        return 0

    symbols = a.symbols()
    found = set()

    if a.is_linear():
        # the only proper rotations of a linear molecule are identity and the flip
        for flip in (1.0, -1.0):
            perm = _match_atoms(a.positions * flip, symbols, b)
            if perm is not None:
                if mode == CompareMode.TEST:
                    return 1
                found.add(perm)
        return len(found)

    r0, r1, r2 = a.reference_atoms
    d01, d02, d12 = a.signature
    source = a.positions[[r0, r1, r2]]
    b_dist = cdist(b.positions, b.positions)

    def candidates(ref: int) -> List[int]:
        return [k for k in range(n)
                if b.symbol(k) == symbols[ref] and tol.are_distances_equal(b.radii[k], a.radii[ref])]

    count = 0
    for p in candidates(r0):
        for q in candidates(r1):
            if q == p or not tol.are_distances_equal(b_dist[p, q], d01):
                continue
            for s in candidates(r2):
                if s in (p, q) or not tol.are_distances_equal(b_dist[p, s], d02) \
                        or not tol.are_distances_equal(b_dist[q, s], d12):
                    continue
                count += 1
                if count > tol.max_symmetry_candidates:
                    raise StructureTooComplexError(
                        f"Symmetry search exceeded {tol.max_symmetry_candidates} candidate superpositions")
                rotation, rssd = Rotation.align_vectors(b.positions[[p, q, s]], source)
                if rssd > 3.0 * tol.distance:
                    continue
                perm = _match_atoms(rotation.apply(np.array(a.positions)), symbols, b)
                if perm is None:
                    continue
                if mode == CompareMode.TEST:
                    return 1
                found.add(perm)
    return len(found)
