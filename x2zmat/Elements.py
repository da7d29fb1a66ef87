#!/usr/bin/env python3
"""
Element Data

This module provides the element properties needed to perceive chemical structure
from Cartesian coordinates: default valence, covalent radius, mass, atomic number
and name. Valences and covalent radii are tabulated here; atomic numbers, names
and masses come from the OpenMM element database.

Covalent radii (Angstrom) are those of Cordero et al., Dalton Trans. 2008, 2832.
"""

from typing import Dict, Tuple

import openmm.unit as unit
from openmm.app import Element

from .Exceptions import UnknownElementError


# symbol: (default valence, covalent radius)
ELEMENT_DATA: Dict[str, Tuple[int, float]] = {
    'H': (1, 0.31), 'He': (0, 0.28),
    'Li': (1, 1.28), 'Be': (2, 0.96), 'B': (3, 0.84), 'C': (4, 0.76),
    'N': (3, 0.71), 'O': (2, 0.66), 'F': (1, 0.57), 'Ne': (0, 0.58),
    'Na': (1, 1.66), 'Mg': (2, 1.41), 'Al': (3, 1.21), 'Si': (4, 1.11),
    'P': (3, 1.07), 'S': (2, 1.05), 'Cl': (1, 1.02), 'Ar': (0, 1.06),
    'K': (1, 2.03), 'Ca': (2, 1.76),
    'Ge': (4, 1.20), 'As': (3, 1.19), 'Se': (2, 1.20), 'Br': (1, 1.20), 'Kr': (0, 1.16),
    'Sn': (4, 1.39), 'Sb': (3, 1.39), 'Te': (2, 1.38), 'I': (1, 1.39), 'Xe': (0, 1.40),
}


def normalize_symbol(symbol: str) -> str:
    """
    Normalize the capitalization of an element symbol (e.g., 'CL' -> 'Cl').

    Raises
    ------
    UnknownElementError
        If the symbol is not in the element table
    """
    s = symbol.strip()
    s = s[:1].upper() + s[1:].lower()
    if s not in ELEMENT_DATA:
        raise UnknownElementError(f"Unknown element: '{symbol}'")
    return s


def _get_openmm_element(symbol: str) -> Element:
    try:
        return Element.getBySymbol(normalize_symbol(symbol))
    except KeyError:
        raise UnknownElementError(f"Element '{symbol}' not found in the OpenMM element database")


def get_valence(symbol: str) -> int:
    """Default valence (maximum number of bonds) of an element."""
    return ELEMENT_DATA[normalize_symbol(symbol)][0]


def get_covalent_radius(symbol: str) -> float:
    """Covalent radius of an element in Angstroms."""
    return ELEMENT_DATA[normalize_symbol(symbol)][1]


def get_atomic_number(symbol: str) -> int:
    """Atomic number of an element."""
    return _get_openmm_element(symbol).atomic_number


def get_mass(symbol: str) -> float:
    """Standard atomic mass in Daltons."""
    return _get_openmm_element(symbol).mass.value_in_unit(unit.dalton)


def get_name(symbol: str) -> str:
    """Full element name (e.g., 'carbon')."""
    return _get_openmm_element(symbol).name


def element_order_key(symbol: str) -> Tuple[int, str]:
    """
    Sorting key for chemical formulas: carbon first, hydrogen second,
    everything else alphabetically.
    """
    if symbol == 'C':
        return (0, symbol)
    if symbol == 'H':
        return (1, symbol)
    return (2, symbol)
