#!/usr/bin/env python3
"""
Z-Matrix Data Structure

This module provides the ZMatrix class for encapsulating Z-matrix (internal coordinate)
data together with the names of its coordinates and the partition of those coordinates
into free variables and constants.

Conventions:
    - Row 1: no coordinates
    - Row 2: bond length
    - Row 3: bond length and bond angle
    - Row 4+: bond length, bond angle and dihedral angle
    - Coordinate names: R<row>, A<row>, D<row> with 1-based rows (e.g., 'R2', 'A3', 'D4')
    - All reference indices are 0-based rows internally
    - 'atom' is the index of the atom in the original geometry

Classes:
    ZMatrix: Encapsulates Z-matrix rows, bonds, variable names and constants
"""

import copy
from typing import Dict, List, Optional, Set, Tuple


class ZMatrix:
    """
    Encapsulates Z-matrix data structure.

    Attributes
    ----------
    atoms : List[Dict]
        List of row dictionaries containing Z-matrix data:
        - 'id': row index (0-based)
        - 'atom': index of the atom in the original geometry
        - 'element': element symbol
        - 'bond_ref': reference row for bond (0-based, optional)
        - 'bond_length': bond length in Angstroms (optional)
        - 'angle_ref': reference row for angle (0-based, optional)
        - 'angle': bond angle in degrees (optional)
        - 'dihedral_ref': reference row for dihedral (0-based, optional)
        - 'dihedral': dihedral angle in degrees (optional)
    bonds : List[Tuple[int, int, int]]
        Bonds as (row1, row2, bond_order) tuples (0-based rows)
    constants : Set[str]
        Names of the coordinates that are held fixed

    Examples
    --------
    >>> zmat = ZMatrix(atoms=[...], bonds=[...], constants={'A4'})
    >>> zmat[3]['dihedral']
    >>> zmat.variables()
    {'R2': 1.09, ...}
    """

    FIELD_ID = 'id'
    FIELD_ATOM = 'atom'
    FIELD_ELEMENT = 'element'
    FIELD_BOND_REF = 'bond_ref'
    FIELD_BOND_LENGTH = 'bond_length'
    FIELD_ANGLE_REF = 'angle_ref'
    FIELD_ANGLE = 'angle'
    FIELD_DIHEDRAL_REF = 'dihedral_ref'
    FIELD_DIHEDRAL = 'dihedral'

    # DOF names mapping: 0=bond_length, 1=angle, 2=dihedral
    DOF_NAMES = [FIELD_BOND_LENGTH, FIELD_ANGLE, FIELD_DIHEDRAL]
    DOF_REFS = [FIELD_BOND_REF, FIELD_ANGLE_REF, FIELD_DIHEDRAL_REF]
    DOF_PREFIXES = ['R', 'A', 'D']

    def __init__(self, atoms: List[Dict], bonds: List[Tuple[int, int, int]],
                 constants: Optional[Set[str]] = None):
        """
        Initialize Z-matrix from rows and bonds.

        Parameters
        ----------
        atoms : List[Dict]
            List of row dictionaries with Z-matrix data (0-based indices)
        bonds : List[Tuple[int, int, int]]
            List of bonds as (row1, row2, bond_order) tuples (0-based indices)
        constants : Set[str], optional
            Names of the fixed coordinates

        Raises
        ------
        ValueError
            If rows, bonds or constants contain invalid data
        """
        self._atoms = copy.deepcopy(atoms)
        self._bonds = copy.deepcopy(bonds)
        self._constants = set(constants) if constants else set()
        self._validate()

    def _validate(self) -> None:
        """Validate Z-matrix data integrity."""
        if not isinstance(self._atoms, list):
            raise ValueError("atoms must be a list")
        if not isinstance(self._bonds, list):
            raise ValueError("bonds must be a list")

        for i, atom in enumerate(self._atoms):
            if not isinstance(atom, dict):
                raise ValueError(f"Row {i} must be a dictionary")
            if self.FIELD_ID in atom and atom[self.FIELD_ID] != i:
                raise ValueError(f"Row {i} has inconsistent id: {atom[self.FIELD_ID]} (expected {i})")
            atom[self.FIELD_ID] = i

            # References must point to earlier rows
            for dof, ref_key in enumerate(self.DOF_REFS):
                if i > dof and ref_key not in atom:
                    raise ValueError(f"Row {i} is missing {ref_key}")
                if ref_key in atom:
                    ref_idx = atom[ref_key]
                    if not isinstance(ref_idx, int):
                        raise ValueError(f"Row {i} {ref_key} must be an integer")
                    if ref_idx < 0 or ref_idx >= i:
                        raise ValueError(f"Row {i} {ref_key} index {ref_idx} out of range [0, {i - 1}]")

        for bond_idx, (row1, row2, _) in enumerate(self._bonds):
            if not isinstance(row1, int) or not isinstance(row2, int):
                raise ValueError(f"Bond {bond_idx} row indices must be integers")
            for row in (row1, row2):
                if row < 0 or row >= len(self._atoms):
                    raise ValueError(f"Bond {bond_idx} row index {row} out of range [0, {len(self._atoms) - 1}]")

        known = set(self.variable_names())
        unknown = self._constants - known
        if unknown:
            raise ValueError(f"Unknown constant coordinates: {sorted(unknown)}")

    def __len__(self) -> int:
        """Return number of rows."""
        return len(self._atoms)

    def __getitem__(self, index: int) -> Dict:
        """Get row by index (returns reference, not copy)."""
        return self._atoms[index]

    def __iter__(self):
        """Iterate over rows."""
        return iter(self._atoms)

    def __repr__(self) -> str:
        return (f"ZMatrix(n_atoms={len(self._atoms)}, n_bonds={len(self._bonds)}, "
                f"n_constants={len(self._constants)})")

    @property
    def atoms(self) -> List[Dict]:
        """Get list of rows (returns copy)."""
        return copy.deepcopy(self._atoms)

    @property
    def bonds(self) -> List[Tuple[int, int, int]]:
        """Get list of bonds (returns copy)."""
        return copy.deepcopy(self._bonds)

    @property
    def constants(self) -> List[str]:
        """Names of the fixed coordinates in row order."""
        return [name for name in self.variable_names() if name in self._constants]

    def copy(self) -> 'ZMatrix':
        return ZMatrix(self._atoms, self._bonds, self._constants)

    def to_list(self) -> List[Dict]:
        """List of row dictionaries (deep copy)."""
        return copy.deepcopy(self._atoms)

    def get_elements(self) -> List[str]:
        """Element symbols in row order."""
        return [atom[self.FIELD_ELEMENT] for atom in self._atoms]

    def get_atom_indices(self) -> List[int]:
        """Original geometry index of every row."""
        return [atom.get(self.FIELD_ATOM, i) for i, atom in enumerate(self._atoms)]

    # -------------------------------------------------------------------------
    # Coordinates
    # -------------------------------------------------------------------------

    @classmethod
    def variable_name(cls, row: int, dof_type: int) -> str:
        """
        Name of a coordinate.

        Parameters
        ----------
        row : int
            Row index (0-based)
        dof_type : int
            0=bond_length, 1=angle, 2=dihedral
        """
        return f"{cls.DOF_PREFIXES[dof_type]}{row + 1}"

    def variable_names(self) -> List[str]:
        """Names of all coordinates in row order."""
        return [self.variable_name(i, dof) for i in range(len(self._atoms)) for dof in range(min(i, 3))]

    def get_dof(self, atom_idx: int, dof_type: int) -> float:
        """
        Get a degree of freedom value.

        Raises
        ------
        IndexError
            If atom_idx is out of range
        ValueError
            If dof_type is invalid or the row has no such coordinate
        """
        if atom_idx < 0 or atom_idx >= len(self._atoms):
            raise IndexError(f"Row index {atom_idx} out of range [0, {len(self._atoms) - 1}]")
        if dof_type < 0 or dof_type >= len(self.DOF_NAMES):
            raise ValueError(f"DOF type {dof_type} must be in [0, {len(self.DOF_NAMES) - 1}]")

        dof_name = self.DOF_NAMES[dof_type]
        if dof_name not in self._atoms[atom_idx]:
            raise ValueError(f"Row {atom_idx} does not have {dof_name}")
        return self._atoms[atom_idx][dof_name]

    def update_dof(self, atom_idx: int, dof_type: int, value: float):
        """Update a degree of freedom value (same checks as get_dof)."""
        self.get_dof(atom_idx, dof_type)
        self._atoms[atom_idx][self.DOF_NAMES[dof_type]] = value

    def is_constant(self, atom_idx: int, dof_type: int) -> bool:
        return self.variable_name(atom_idx, dof_type) in self._constants

    def variables(self) -> Dict[str, float]:
        """All coordinate values by name, in row order."""
        values = {}
        for i, atom in enumerate(self._atoms):
            for dof in range(min(i, 3)):
                values[self.variable_name(i, dof)] = atom[self.DOF_NAMES[dof]]
        return values

    def free_variables(self) -> Dict[str, float]:
        """Values of the coordinates that are not constants."""
        return {name: value for name, value in self.variables().items() if name not in self._constants}

    def constant_values(self) -> Dict[str, float]:
        """Values of the constant coordinates."""
        return {name: value for name, value in self.variables().items() if name in self._constants}

    # -------------------------------------------------------------------------
    # Text representation
    # -------------------------------------------------------------------------

    def to_text(self, prefix: str = '') -> str:
        """
        Z-matrix in text form.

        Each row gives the element symbol followed by (reference row, coordinate name)
        pairs; reference rows are 1-based. A 'Variables:' block with the values of the
        free coordinates follows, then a 'Constants:' block if any coordinate is fixed.

        Parameters
        ----------
        prefix : str
            String prepended to every line
        """
        lines = []
        for i, atom in enumerate(self._atoms):
            line = f"{atom[self.FIELD_ELEMENT]:<3s}"
            for dof in range(min(i, 3)):
                ref = atom[self.DOF_REFS[dof]] + 1
                line += f" {ref:4d} {self.variable_name(i, dof):<6s}"
            lines.append(line.rstrip())

        def _format(name: str, value: float) -> str:
            if name.startswith('R'):
                return f"{name:<6s} = {value:12.6f}"
            return f"{name:<6s} = {value:12.4f}"

        lines.append('')
        lines.append('Variables:')
        lines.extend(_format(name, value) for name, value in self.free_variables().items())
        constants = self.constant_values()
        if constants:
            lines.append('Constants:')
            lines.extend(_format(name, value) for name, value in constants.items())
        return ''.join(f"{prefix}{line}\n" for line in lines)
