#!/usr/bin/env python3
"""
I/O Tools for Molecular Structure Files

This module provides functions for reading XYZ geometries and for writing XYZ
coordinates and Z-matrix text files.
"""

from os.path import basename
from typing import List

import numpy as np

from .MolecularGeometry import MolecularGeometry


def read_xyz_string(text: str) -> MolecularGeometry:
    """
    Parse XYZ data.

    Line 1: number of atoms
    Line 2: comment (ignored)
    Subsequent lines: element x y z (Angstroms); extra columns are ignored

    Parameters
    ----------
    text : str
        XYZ file content

    Returns
    -------
    MolecularGeometry
        Geometry in file order

    Raises
    ------
    ValueError
        If the data is not valid XYZ
    UnknownElementError
        If an element symbol is not known
    """
    lines = text.splitlines()
    if not lines or not lines[0].strip():
        raise ValueError("Invalid XYZ data: missing number of atoms")

    try:
        num_atoms = int(lines[0].split()[0])
    except ValueError:
        raise ValueError(f"Invalid XYZ data: bad number of atoms '{lines[0].strip()}'")
    if num_atoms < 1:
        raise ValueError(f"Invalid number of atoms in XYZ data: {num_atoms}")
    if len(lines) < num_atoms + 2:
        raise ValueError(f"Invalid XYZ data: expected {num_atoms} atoms, found {max(len(lines) - 2, 0)}")

    symbols = []
    coords = []
    for i in range(2, num_atoms + 2):
        parts = lines[i].split()
        if len(parts) < 4:
            raise ValueError(f"Invalid XYZ data: line {i + 1} must contain element x y z")
        try:
            coords.append([float(parts[1]), float(parts[2]), float(parts[3])])
        except ValueError:
            raise ValueError(f"Invalid XYZ data: non-numeric coordinate on line {i + 1}")
        symbols.append(parts[0])

    return MolecularGeometry(symbols, np.array(coords))


def read_xyz_file(pathname: str) -> MolecularGeometry:
    """
    Read a geometry from an XYZ file.

    Parameters
    ----------
    pathname : str
        Path to XYZ file

    Returns
    -------
    MolecularGeometry
        Geometry in file order
    """
    with open(pathname, 'r') as f:
        text = f.read()
    try:
        return read_xyz_string(text)
    except ValueError as e:
        raise ValueError(f"{basename(pathname)}: {e}") from e


def write_xyz_file(coords: np.ndarray, elements: List[str], filepath: str, comment: str = "", append: bool = False) -> None:
    """
    Write XYZ file.

    Parameters
    ----------
    coords : np.ndarray
        Coordinates of the atoms (Nx3 array) in Angstroms
    elements : List[str]
        Elements of the atoms
    filepath : str
        Output file path
    comment : str
        Comment line for XYZ file
    append : bool
        If True, append to existing file instead of overwriting (default: False)
    """
    mode = 'a' if append else 'w'
    with open(filepath, mode) as f:
        f.write(f"{len(elements)}\n")
        f.write(f"{comment}\n")
        for element, coord in zip(elements, coords):
            f.write(f"{element:<4s} {coord[0]:12.6f} {coord[1]:12.6f} {coord[2]:12.6f}\n")


def write_zmatrix_file(structure, filepath: str, prefix: str = '') -> None:
    """
    Write the Z-matrix of a molecular structure to a text file.

    Parameters
    ----------
    structure : MolecularStructure
        Analysed molecule
    filepath : str
        Output file path
    prefix : str
        String prepended to every line
    """
    with open(filepath, 'w') as f:
        structure.print(f, prefix)
