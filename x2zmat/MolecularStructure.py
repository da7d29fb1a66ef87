#!/usr/bin/env python3
"""
Molecular Structure

This module derives the chemical structure and the Z-matrix of a molecule from its
connectivity graph:

    - resonance structures: bond orders satisfying the atomic valences, with the
      fewest possible unpaired valences; several structures are kept
    - radical sites: atoms with unpaired valence in at least one resonance structure
    - beta-scission bonds: bonds between the neighbour of a radical site (primary)
      and a further atom (secondary)
    - rotational bonds: single, non-ring bonds whose removal splits the molecule into
      two groups of more than one atom
    - connectivity path: depth-first spanning tree rooted at the most connected atom;
      its pre-order is the Z-matrix row order
    - Z-matrix coordinates: distance to the parent, angle with the parent's parent,
      dihedral with a non-collinear previously placed atom

Classes:
    BondAttribute: Flags describing a spanning tree edge
    ConnectivityRecord: Spanning tree entry of one atom
    BetaRecord: Radical, primary and secondary atoms of a beta-scission bond
    MolecularStructure: Structural analysis and Z-matrix of a molecule
"""

import math
import sys
from enum import IntFlag
from typing import Dict, Iterable, List, Optional, TextIO, Tuple

import numpy as np

from .CoordinateConversion import _calc_angle, _calc_dihedral, _calc_distance
from .Exceptions import DegenerateGeometryError, DisconnectedStructureError, StructureTooComplexError
from .PrimaryStructure import PrimaryStructure
from .ZMatrix import ZMatrix


MAX_BOND_ORDER = 3


class BondAttribute(IntFlag):
    GENERIC = 0     # generic bond
    LINEAR = 1      # bond to a linear atom
    ROTATIONAL = 2  # rotational bond
    BETA = 4        # beta-scission bond


class ConnectivityRecord:
    """
    Spanning tree entry of one (non-root) atom.

    Attributes
    ----------
    atom : int
        Atom index
    cref : int
        Parent atom index (up the tree)
    begin : int
        Row of the first atom of the subtree below this atom
    end : int
        Row following the last atom of the subtree; range(begin, end) are the descendants
    attr : BondAttribute
        Attributes of the bond atom-cref
    """

    def __init__(self, atom: int, cref: int, begin: int = -1, end: int = -1,
                 attr: BondAttribute = BondAttribute.GENERIC):
        self.atom = atom
        self.cref = cref
        self.begin = begin
        self.end = end
        self.attr = attr

    def __repr__(self) -> str:
        return (f"ConnectivityRecord(atom={self.atom}, cref={self.cref}, "
                f"begin={self.begin}, end={self.end}, attr={self.attr!r})")


class BetaRecord:
    """
    Beta-scission bond: the bond primary-secondary next to the radical site.
    """

    def __init__(self, radical: int, primary: int, secondary: int, is_ring: bool):
        self.radical = radical
        self.primary = primary
        self.secondary = secondary
        self.is_ring = is_ring

    def bond(self) -> Tuple[int, int]:
        """The breaking bond as a sorted atom pair."""
        return (min(self.primary, self.secondary), max(self.primary, self.secondary))

    def __eq__(self, other) -> bool:
        if not isinstance(other, BetaRecord):
            return NotImplemented
        return (self.radical, self.primary, self.secondary, self.is_ring) == \
               (other.radical, other.primary, other.secondary, other.is_ring)

    def __repr__(self) -> str:
        return (f"BetaRecord(radical={self.radical}, primary={self.primary}, "
                f"secondary={self.secondary}, is_ring={self.is_ring})")


class MolecularStructure:
    """
    Chemical structure and Z-matrix of a molecule.

    All derived data is computed at construction and is read-only afterwards.

    Parameters
    ----------
    primary : PrimaryStructure
        Connectivity graph
    fragments : Iterable[Iterable[int]], optional
        Declared fragments (default: those of the connectivity graph). Fragments
        that are not bonded to each other are joined in the spanning tree through
        their closest atom pair.
    verbose : bool
        Print search statistics

    Raises
    ------
    DisconnectedStructureError
        If the atoms cannot be spanned by a single tree
    StructureTooComplexError
        If the resonance enumeration exceeds its bound
    DegenerateGeometryError
        If no reference atom can be found for a Z-matrix row
    """

    DISTANCE = 0
    POLAR = 1
    DIHEDRAL = 2

    def __init__(self, primary: PrimaryStructure,
                 fragments: Optional[Iterable[Iterable[int]]] = None,
                 verbose: bool = False):
        self._primary = primary
        self._tolerance = primary.tolerance
        self._fragments = primary.fragments if fragments is None else [sorted(set(g)) for g in fragments]
        self._verbose = verbose

        self._bonds = primary.bonds()
        self._resonance = self._enumerate_resonance()
        self._unpaired = [self._unpaired_valences(orders) for orders in self._resonance]

        self._build_connectivity_path()
        self._rotvar = self._find_rotation_bonds()
        self._betvar = {}
        for i, j in self._bonds:
            beta = self.is_beta(i, j)
            if beta is not None:
                self._betvar[(i, j)] = beta
        self._set_path_attributes()
        self._build_zmatrix()

        if self._verbose:
            print(f"  Resonance structures: {len(self._resonance)}")
            print(f"  Radical sites: {self.radical_sites()}")
            print(f"  Spanning tree root: {self._order[0]}")
            print(f"  Rotational bonds: {len(self._rotvar)}, beta-scission bonds: {len(self._betvar)}")

    def __repr__(self) -> str:
        return (f"MolecularStructure(n_atoms={self.size()}, "
                f"n_resonance={len(self._resonance)}, n_rotors={len(self._rotvar)})")

    # -------------------------------------------------------------------------
    # Connectivity graph
    # -------------------------------------------------------------------------

    @property
    def primary(self) -> PrimaryStructure:
        return self._primary

    def size(self) -> int:
        return self._primary.size()

    def is_bonded(self, atom0: int, atom1: int) -> bool:
        return self._primary.is_bonded(atom0, atom1)

    def is_ring(self, atom0: int, atom1: int) -> bool:
        return self._primary.is_ring(atom0, atom1)

    def is_linear(self, atom: int) -> bool:
        return self._primary.is_linear(atom)

    def group_stoicheometry(self, group: Iterable[int]) -> str:
        return self._primary.group_stoicheometry(list(group))

    # -------------------------------------------------------------------------
    # Resonance structures
    # -------------------------------------------------------------------------

    def _effective_valence(self, atom: int) -> int:
        # hypervalent atoms keep their single bonds and nothing more
        return max(self._primary.valence(atom), self._primary.degree(atom))

    def _unpaired_valences(self, orders: np.ndarray) -> List[int]:
        return [self._effective_valence(i) - int(orders[i].sum()) for i in range(self.size())]

    def _enumerate_resonance(self) -> List[np.ndarray]:
        """
        Enumerate the bond order assignments with the fewest unpaired valences.

        Depth-first search always expanding the lowest index atom with free valence:
        first raise the order of its bond to every neighbour that also has free valence
        (ascending index), then leave its free valence unpaired. Branches whose number
        of unpaired valences exceeds the best found so far are pruned.

        Returns
        -------
        List[np.ndarray]
            Bond order matrices sorted so that multiple bonds come first on the
            lowest bonds (descending tuple of orders over the sorted bond list)
        """
        n = self.size()
        primary = self._primary
        neighbors = [primary.neighbors(i) for i in range(n)]
        free = [self._effective_valence(i) - primary.degree(i) for i in range(n)]
        orders = np.array(primary.adjacency, dtype=int)

        limit = self._tolerance.max_resonance_nodes
        state = {'nodes': 0, 'best': math.inf}
        found: Dict[Tuple[int, ...], np.ndarray] = {}

        def search(unpaired: int):
            state['nodes'] += 1
            if state['nodes'] > limit:
                raise StructureTooComplexError(
                    f"Resonance enumeration exceeded {limit} search nodes: structure too complex")
            if unpaired > state['best']:
                return
            atom = next((i for i in range(n) if free[i] > 0), None)
            if atom is None:
                if unpaired < state['best']:
                    state['best'] = unpaired
                    found.clear()
                key = tuple(int(orders[i, j]) for i, j in self._bonds)
                if key not in found:
                    found[key] = orders.copy()
                return
            for nbr in neighbors[atom]:
                if free[nbr] > 0 and orders[atom, nbr] < MAX_BOND_ORDER:
                    free[atom] -= 1
                    free[nbr] -= 1
                    orders[atom, nbr] += 1
                    orders[nbr, atom] += 1
                    search(unpaired)
                    orders[atom, nbr] -= 1
                    orders[nbr, atom] -= 1
                    free[atom] += 1
                    free[nbr] += 1
            left = free[atom]
            free[atom] = 0
            search(unpaired + left)
            free[atom] = left

        search(0)

        if self._verbose:
            print(f"  Resonance search: {state['nodes']} nodes, {len(found)} structures, "
                  f"{state['best']} unpaired valences")

        structures = [found[key] for key in sorted(found, reverse=True)]
        for orders in structures:
            orders.setflags(write=False)
        return structures

    def resonance_count(self) -> int:
        return len(self._resonance)

    def resonance_structure(self, index: int) -> np.ndarray:
        """Bond order matrix of one resonance structure (copy)."""
        return self._resonance[index].copy()

    def bond_order(self, atom0: int, atom1: int) -> int:
        """Bond order in the canonical (first) resonance structure, 0 if not bonded."""
        if atom0 == atom1:
            return 0
        return int(self._resonance[0][atom0, atom1])

    def mean_bond_order(self, atom0: int, atom1: int) -> float:
        """Bond order averaged over all resonance structures."""
        if atom0 == atom1:
            return 0.0
        return float(np.mean([orders[atom0, atom1] for orders in self._resonance]))

    def is_single(self, atom0: int, atom1: int) -> bool:
        """Whether the atoms are bonded by a single bond in every resonance structure."""
        if atom0 == atom1 or not self._primary.is_bonded(atom0, atom1):
            return False
        return all(orders[atom0, atom1] == 1 for orders in self._resonance)

    def is_radical(self, atom: int) -> bool:
        """Whether the atom has unpaired valence in at least one resonance structure."""
        return any(unpaired[atom] > 0 for unpaired in self._unpaired)

    def radical_sites(self) -> List[int]:
        return [i for i in range(self.size()) if self.is_radical(i)]

    def unpaired_valences(self, index: int = 0) -> List[int]:
        """Unpaired valence of every atom in one resonance structure."""
        return list(self._unpaired[index])

    # -------------------------------------------------------------------------
    # Beta-scission and rotational bonds
    # -------------------------------------------------------------------------

    def is_beta(self, atom0: int, atom1: int) -> Optional[BetaRecord]:
        """
        Check whether a bond is a beta-scission bond.

        Returns
        -------
        Optional[BetaRecord]
            The radical, primary and secondary atoms (the primary atom is the bond
            end next to the radical site), or None
        """
        if atom0 == atom1 or not self._primary.is_bonded(atom0, atom1):
            return None
        for primary, secondary in ((atom0, atom1), (atom1, atom0)):
            if not self.is_single(primary, secondary):
                continue
            for radical in self._primary.neighbors(primary):
                if radical != secondary and self.is_radical(radical):
                    return BetaRecord(radical, primary, secondary, self.is_ring(primary, secondary))
        return None

    def beta_bonds(self) -> Dict[Tuple[int, int], BetaRecord]:
        """Beta-scission bonds keyed by sorted atom pair."""
        return dict(self._betvar)

    def _subtree(self, atom: int) -> List[int]:
        pos = self._atom_map[atom]
        if pos == 0:
            return list(self._order)
        record = self._path[pos - 1]
        return self._order[pos:record.end]

    def _find_rotation_bonds(self) -> Dict[Tuple[int, int], List[List[int]]]:
        rotvar = {}
        n = self.size()
        for i, j in self._bonds:
            if not self.is_single(i, j) or self.is_ring(i, j):
                continue
            # both sides of the bond counted on the bonds only, without contact edges
            sides = [g for g in self._primary.connected_group(exclude_bond=(i, j)) if i in g or j in g]
            if any(len(g) < 2 for g in sides):
                continue
            # a non-ring bond is a bridge, hence a spanning tree edge
            child = j if self._parent[j] == i else i
            moving = set(self._subtree(child))
            group_i = sorted(moving) if i in moving else sorted(set(range(n)) - moving)
            group_j = sorted(moving) if j in moving else sorted(set(range(n)) - moving)
            rotvar[(i, j)] = [group_i, group_j]
        return rotvar

    def rotation_bonds(self) -> Dict[Tuple[int, int], List[List[int]]]:
        """
        Rotational bonds keyed by sorted atom pair (i, j); the value holds the group
        of atoms on the side of i and the group on the side of j.
        """
        return {bond: [list(g) for g in groups] for bond, groups in self._rotvar.items()}

    def torsion_variable(self, atom0: int, atom1: int) -> Optional[str]:
        """
        Name of the dihedral coordinate describing the rotation about a rotational
        bond, or None if the rotation only changes the orientation of the frame.
        """
        bond = (min(atom0, atom1), max(atom0, atom1))
        if bond not in self._rotvar:
            return None
        side = set(self._rotvar[bond][0])
        for row in range(3, len(self._order)):
            data = self._zmat[row]
            axis = {self._order[data[ZMatrix.FIELD_BOND_REF]], self._order[data[ZMatrix.FIELD_ANGLE_REF]]}
            # the row atom and its dihedral reference must sit on opposite sides of the bond
            if axis == set(bond) and \
                    (self._order[row] in side) != (self._order[data[ZMatrix.FIELD_DIHEDRAL_REF]] in side):
                return ZMatrix.variable_name(row, self.DIHEDRAL)
        return None

    # -------------------------------------------------------------------------
    # Connectivity path (spanning tree)
    # -------------------------------------------------------------------------

    def _tree_neighbors(self) -> List[List[int]]:
        """
        Bond graph plus the contact edges joining declared fragments.

        Raises
        ------
        DisconnectedStructureError
            If a component is not a declared fragment, or a fragment is split
        """
        primary = self._primary
        n = self.size()
        neighbors = [primary.neighbors(i) for i in range(n)]
        components = primary.connected_group()
        if len(components) == 1:
            return neighbors

        if not self._fragments:
            raise DisconnectedStructureError(
                f"Molecule is not connected: {len(components)} groups "
                f"({', '.join(primary.fragment_labels())})")

        fragment_of = {}
        for k, group in enumerate(self._fragments):
            for atom in group:
                fragment_of[atom] = k
        owners = set()
        for comp in components:
            ids = {fragment_of[a] for a in comp if a in fragment_of}
            if len(ids) != 1:
                raise DisconnectedStructureError(
                    f"Atoms {sorted(comp)} are not connected to the rest of the molecule "
                    f"and do not form a declared fragment")
            owner = ids.pop()
            if owner in owners:
                raise DisconnectedStructureError(f"Fragment {self._fragments[owner]} is not connected")
            owners.add(owner)

        coords = primary.geometry.coords
        joined = list(components[0])
        remaining = [list(comp) for comp in components[1:]]
        while remaining:
            best = None
            for c, comp in enumerate(remaining):
                for a in joined:
                    for b in comp:
                        d = _calc_distance(coords[a], coords[b])
                        if best is None or d < best[0]:
                            best = (d, a, b, c)
            _, a, b, c = best
            neighbors[a] = sorted(neighbors[a] + [b])
            neighbors[b] = sorted(neighbors[b] + [a])
            joined.extend(remaining.pop(c))
        return neighbors

    def _build_connectivity_path(self):
        n = self.size()
        tree_neighbors = self._tree_neighbors()

        # root: most connected atom, lowest index on ties
        degrees = [self._primary.degree(i) for i in range(n)]
        root = degrees.index(max(degrees))

        parent: Dict[int, Optional[int]] = {root: None}
        order = []
        stack = [root]
        while stack:
            atom = stack.pop()
            order.append(atom)
            children = [nbr for nbr in tree_neighbors[atom] if nbr not in parent]
            for child in children:
                parent[child] = atom
            stack.extend(reversed(children))

        subtree_size = {atom: 1 for atom in order}
        for atom in reversed(order[1:]):
            subtree_size[parent[atom]] += subtree_size[atom]

        self._order = order
        self._parent = parent
        self._atom_map = {atom: pos for pos, atom in enumerate(order)}
        self._path = [ConnectivityRecord(atom, parent[atom], pos + 1, pos + subtree_size[atom])
                      for pos, atom in enumerate(order) if pos > 0]

    def _set_path_attributes(self):
        for record in self._path:
            bond = (min(record.atom, record.cref), max(record.atom, record.cref))
            if not self._primary.is_bonded(*bond):
                continue
            if self.is_linear(record.atom) or self.is_linear(record.cref):
                record.attr |= BondAttribute.LINEAR
            if bond in self._rotvar:
                record.attr |= BondAttribute.ROTATIONAL
            if bond in self._betvar:
                record.attr |= BondAttribute.BETA

    def connectivity_path(self) -> List[ConnectivityRecord]:
        """Spanning tree records in Z-matrix row order (the root has no record)."""
        return [ConnectivityRecord(r.atom, r.cref, r.begin, r.end, r.attr) for r in self._path]

    def atom_ordering(self) -> List[int]:
        """Original atom index of every Z-matrix row."""
        return list(self._order)

    def atom_map(self, atom: int) -> int:
        """Z-matrix row of an original atom index."""
        return self._atom_map[atom]

    # -------------------------------------------------------------------------
    # Z-matrix
    # -------------------------------------------------------------------------

    def _angle_reference(self, atom: int, pivot: int, tree_neighbors_placed: List[int]) -> int:
        grand = self._parent[pivot]
        if grand is not None:
            return grand
        for other in tree_neighbors_placed:
            if other != atom:
                return other
        raise DegenerateGeometryError(f"No angle reference available for atom {atom}")

    def _dihedral_reference(self, atom: int, pivot: int, angle_ref: int,
                            coords: np.ndarray) -> Tuple[int, bool]:
        """
        Dihedral reference atom, and whether it is non-collinear with pivot-angle_ref.

        Candidates: parent of the angle reference, placed neighbours of the pivot,
        placed neighbours of the angle reference, then every placed atom by atom index.
        """
        row = self._atom_map[atom]
        placed = self._order[:row]

        def _placed_tree_neighbors(center: int) -> List[int]:
            nbrs = [a for a in placed if self._parent.get(a) == center]
            if self._parent[center] is not None:
                nbrs.append(self._parent[center])
            return sorted(nbrs, key=self._atom_map.get)

        candidates = []
        if self._parent[angle_ref] is not None:
            candidates.append(self._parent[angle_ref])
        candidates.extend(_placed_tree_neighbors(pivot))
        candidates.extend(_placed_tree_neighbors(angle_ref))
        candidates.extend(sorted(placed))
        candidates = [c for c in candidates if c not in (atom, pivot, angle_ref)]
        if not candidates:
            raise DegenerateGeometryError(f"No dihedral reference available for atom {atom}")

        for candidate in candidates:
            angle = _calc_angle(coords[pivot], coords[angle_ref], coords[candidate])
            if not self._tolerance.is_angle_degenerate(angle):
                return candidate, True
        return candidates[0], False

    def _build_zmatrix(self):
        coords = self._primary.geometry.coords
        symbols = self._primary.geometry.symbols
        n = self.size()
        rows = []
        constants = set()
        coval = np.full((n, 3), np.nan)

        for row, atom in enumerate(self._order):
            data = {ZMatrix.FIELD_ID: row,
                    ZMatrix.FIELD_ATOM: atom,
                    ZMatrix.FIELD_ELEMENT: symbols[atom]}
            if row >= 1:
                pivot = self._parent[atom]
                data[ZMatrix.FIELD_BOND_REF] = self._atom_map[pivot]
                data[ZMatrix.FIELD_BOND_LENGTH] = _calc_distance(coords[atom], coords[pivot])
            if row >= 2:
                placed = self._order[:row]
                placed_children = [a for a in placed if self._parent.get(a) == pivot]
                angle_ref = self._angle_reference(atom, pivot, placed_children)
                angle = _calc_angle(coords[atom], coords[pivot], coords[angle_ref])
                data[ZMatrix.FIELD_ANGLE_REF] = self._atom_map[angle_ref]
                data[ZMatrix.FIELD_ANGLE] = angle
                linear = self._tolerance.is_angle_linear(angle)
                if linear:
                    constants.add(ZMatrix.variable_name(row, self.POLAR))
            if row >= 3:
                dihedral_ref, defined = self._dihedral_reference(atom, pivot, angle_ref, coords)
                data[ZMatrix.FIELD_DIHEDRAL_REF] = self._atom_map[dihedral_ref]
                # measured even for a nearly collinear reference, 0 only when exactly collinear
                data[ZMatrix.FIELD_DIHEDRAL] = _calc_dihedral(
                    coords[atom], coords[pivot], coords[angle_ref], coords[dihedral_ref])
                if linear or not defined:
                    constants.add(ZMatrix.variable_name(row, self.DIHEDRAL))
            for dof in range(min(row, 3)):
                coval[row, dof] = data[ZMatrix.DOF_NAMES[dof]]
            rows.append(data)

        bonds = [(self._atom_map[i], self._atom_map[j], self.bond_order(i, j)) for i, j in self._bonds]
        self._zmat = ZMatrix(rows, bonds, constants)
        self._coval = coval
        self._coval.setflags(write=False)
        self._zmat_text = self._zmat.to_text()

    @staticmethod
    def var_name(kind: int) -> str:
        """Prefix of the coordinate names of a kind (DISTANCE, POLAR, DIHEDRAL)."""
        return ZMatrix.DOF_PREFIXES[kind]

    def to_zmatrix(self) -> ZMatrix:
        return self._zmat.copy()

    def zmatrix(self) -> str:
        """Z-matrix text."""
        return self._zmat_text

    def zmat_coval(self) -> np.ndarray:
        """Nx3 coordinate values (distance, angle, dihedral) by row; nan where undefined."""
        return self._coval

    def const_var(self) -> List[str]:
        """Names of the constant coordinates."""
        return self._zmat.constants

    def free_var(self) -> List[str]:
        """Names of the free coordinates."""
        return list(self._zmat.free_variables())

    def variables(self) -> Dict[str, float]:
        """All coordinate values by name."""
        return self._zmat.variables()

    def print(self, stream: Optional[TextIO] = None, prefix: str = '') -> None:
        """Write the Z-matrix text to a stream (default: standard output)."""
        if stream is None:
            stream = sys.stdout
        stream.write(self._zmat.to_text(prefix))
