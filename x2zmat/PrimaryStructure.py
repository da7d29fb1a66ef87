#!/usr/bin/env python3
"""
Primary Structure (Connectivity Graph)

This module infers the bonding graph of a molecule from its Cartesian coordinates.
Two atoms are bonded if their distance does not exceed the maximum bond length of
their element pair (sum of covalent radii times the bond scale) plus the distance
tolerance. Atoms listed in different user-declared fragments are never bonded.

The adjacency matrix holds bond orders (0 = not bonded, 1 = bonded); it is symmetric
and its diagonal is unused.

Classes:
    PrimaryStructure: Connectivity graph with ring and linearity perception
"""

from collections import Counter, deque
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from . import Elements
from .CoordinateConversion import _calc_angle
from .MolecularGeometry import MolecularGeometry
from .Tolerance import Tolerance


class PrimaryStructure:
    """
    Bonding graph of a molecular geometry.

    Parameters
    ----------
    geometry : MolecularGeometry
        Input geometry (not modified)
    fragments : Iterable[Iterable[int]], optional
        Groups of atom indices (0-based) that must not be bonded to each other,
        e.g., the molecules of a van der Waals complex
    tolerance : Tolerance, optional
        Numerical accuracies (default: Tolerance())

    Raises
    ------
    UnknownElementError
        If an element pair has no bond length data
    """

    def __init__(self, geometry: MolecularGeometry,
                 fragments: Iterable[Iterable[int]] = (),
                 tolerance: Optional[Tolerance] = None):
        self._tolerance = tolerance if tolerance is not None else Tolerance()
        self._geometry = geometry.copy()
        self._fragments = [sorted(set(group)) for group in fragments]
        self._fragment_of: Dict[int, int] = {}
        for k, group in enumerate(self._fragments):
            for atom in group:
                self._fragment_of[atom] = k

        n = len(self._geometry)
        symbols = self._geometry.symbols
        dist = self._geometry.distance_matrix()
        self._adjacency = np.zeros((n, n), dtype=int)
        for i in range(n):
            for j in range(i + 1, n):
                if self._is_excluded(i, j):
                    continue
                if dist[i, j] <= self._tolerance.max_bond_length(symbols[i], symbols[j]) + self._tolerance.distance:
                    self._adjacency[i, j] = self._adjacency[j, i] = 1
        self._adjacency.setflags(write=False)

        self._neighbors = [[int(j) for j in np.flatnonzero(self._adjacency[i])] for i in range(n)]

        # linear attribute: exactly two neighbours forming a straight angle
        coords = self._geometry.coords
        self._linear = []
        for i in range(n):
            nbrs = self._neighbors[i]
            linear = False
            if len(nbrs) == 2:
                angle = _calc_angle(coords[nbrs[0]], coords[i], coords[nbrs[1]])
                linear = self._tolerance.is_angle_linear(angle)
            self._linear.append(linear)

    def __repr__(self) -> str:
        return f"PrimaryStructure(n_atoms={self.size()}, n_bonds={len(self.bonds())})"

    def _is_excluded(self, i: int, j: int) -> bool:
        fi = self._fragment_of.get(i)
        fj = self._fragment_of.get(j)
        return fi is not None and fj is not None and fi != fj

    # -------------------------------------------------------------------------
    # Atoms
    # -------------------------------------------------------------------------

    @property
    def tolerance(self) -> Tolerance:
        return self._tolerance

    @property
    def geometry(self) -> MolecularGeometry:
        """Copy of the geometry."""
        return self._geometry.copy()

    @property
    def fragments(self) -> List[List[int]]:
        return [list(group) for group in self._fragments]

    @property
    def adjacency(self) -> np.ndarray:
        """Symmetric NxN bond matrix (read-only)."""
        return self._adjacency

    def size(self) -> int:
        return len(self._geometry)

    def symbol(self, atom: int) -> str:
        return self._geometry[atom].symbol

    def atom_name(self, atom: int) -> str:
        return self._geometry[atom].name

    def valence(self, atom: int) -> int:
        return self._geometry[atom].valence

    def fragment_of(self, atom: int) -> Optional[int]:
        """Index of the declared fragment containing the atom, or None."""
        return self._fragment_of.get(atom)

    # -------------------------------------------------------------------------
    # Connectivity
    # -------------------------------------------------------------------------

    def neighbors(self, atom: int) -> List[int]:
        """Bonded atoms in ascending index order."""
        return list(self._neighbors[atom])

    def degree(self, atom: int) -> int:
        return len(self._neighbors[atom])

    def bonds(self) -> List[Tuple[int, int]]:
        """All bonds as sorted (i, j) pairs with i < j."""
        return [(i, j) for i in range(self.size()) for j in self._neighbors[i] if i < j]

    def is_bonded(self, atom0: int, atom1: int) -> bool:
        """Whether two atoms are bonded; an atom is connected to itself."""
        if atom0 == atom1:
            return True
        return bool(self._adjacency[atom0, atom1])

    def is_bonded_to_group(self, atom: int, group: Iterable[int]) -> bool:
        """Whether an atom is bonded to any atom of a group."""
        return any(self._adjacency[atom, other] for other in group)

    def connected_group(self, exclude_bond: Optional[Tuple[int, int]] = None) -> List[List[int]]:
        """
        Partition the atoms into connected components.

        Parameters
        ----------
        exclude_bond : Tuple[int, int], optional
            Bond treated as absent

        Returns
        -------
        List[List[int]]
            Components in order of their lowest atom, atoms in discovery order
        """
        n = self.size()
        excluded = set(exclude_bond) if exclude_bond is not None else set()
        visited = [False] * n
        groups = []
        for start in range(n):
            if visited[start]:
                continue
            visited[start] = True
            group = [start]
            queue = deque([start])
            while queue:
                atom = queue.popleft()
                for nbr in self._neighbors[atom]:
                    if visited[nbr] or (len(excluded) == 2 and {atom, nbr} == excluded):
                        continue
                    visited[nbr] = True
                    group.append(nbr)
                    queue.append(nbr)
            groups.append(group)
        return groups

    def is_connected(self) -> bool:
        """Whether the whole molecule forms a single connected component."""
        return len(self.connected_group()) == 1

    def is_ring(self, atom0: int, atom1: int) -> bool:
        """Whether the bond atom0-atom1 lies on a cycle."""
        if atom0 == atom1 or not self._adjacency[atom0, atom1]:
            return False
        visited = {atom0}
        queue = deque([atom0])
        while queue:
            atom = queue.popleft()
            for nbr in self._neighbors[atom]:
                if atom == atom0 and nbr == atom1:
                    continue
                if nbr == atom1:
                    return True
                if nbr not in visited:
                    visited.add(nbr)
                    queue.append(nbr)
        return False

    def is_linear(self, atom: int) -> bool:
        """Whether the atom has two neighbours forming a straight angle."""
        return self._linear[atom]

    # -------------------------------------------------------------------------
    # Labels
    # -------------------------------------------------------------------------

    def group_stoicheometry(self, group: Sequence[int]) -> str:
        """
        Chemical formula of a group of atoms (e.g., 'CH4', 'H2O').

        Elements are ordered carbon, hydrogen, then alphabetically; counts of one are omitted.
        """
        counts = Counter(self.symbol(atom) for atom in group)
        formula = ''
        for symbol in sorted(counts, key=Elements.element_order_key):
            formula += symbol
            if counts[symbol] > 1:
                formula += str(counts[symbol])
        return formula

    def stoicheometry(self) -> str:
        """Chemical formula of the whole molecule."""
        return self.group_stoicheometry(range(self.size()))

    def fragment_labels(self) -> List[str]:
        """Chemical formula of every connected component."""
        return [self.group_stoicheometry(group) for group in self.connected_group()]
