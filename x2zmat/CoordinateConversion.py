#!/usr/bin/env python3
"""
Coordinate Conversion Utilities

This module provides utilities for converting between internal coordinates (Z-matrix)
and Cartesian coordinates.

Conventions:
    - Row 1 at origin
    - Row 2 along +Z axis
    - Row 3 in XZ plane
    - Row 4+: natural extension reference frame (bond, angle, dihedral)
    - Dihedral: IUPAC sign convention, degrees
    - Bond: bond length in Angstroms
    - Angle: bond angle in degrees, 180 allowed

When the three reference atoms of a row are collinear the dihedral angle has no
meaning; the atom is then placed in an arbitrary plane containing the reference
axis. This only happens when every previously placed atom lies on that axis, so
the choice amounts to a rigid rotation of the molecule.

Main Functions:
    zmatrix_to_cartesian: Convert Z-matrix to Cartesian coordinates
    cartesian_to_zmatrix: Recompute Z-matrix values from Cartesian coordinates

Helper Functions:
    _calc_distance: Calculate distance between two points
    _calc_angle: Calculate angle between three points
    _calc_dihedral: Calculate dihedral angle between four points (atan2 method)
    _place_atom: Position of a new atom from three references and internal coordinates
"""

from typing import Optional

import numpy as np

from .ZMatrix import ZMatrix


# =============================================================================
# Geometry Calculation Helpers
# =============================================================================

def _calc_distance(p1: np.ndarray, p2: np.ndarray) -> float:
    """
    Calculate distance between two points.

    Parameters
    ----------
    p1, p2 : np.ndarray
        3D points

    Returns
    -------
    float
        Distance in same units as input
    """
    return float(np.linalg.norm(p2 - p1))


def _calc_angle(p1: np.ndarray, p2: np.ndarray, p3: np.ndarray) -> float:
    """
    Calculate angle at p2 between p1-p2-p3.

    Parameters
    ----------
    p1, p2, p3 : np.ndarray
        3D points

    Returns
    -------
    float
        Angle in degrees
    """
    v1 = p1 - p2
    v2 = p3 - p2
    norm1 = np.linalg.norm(v1)
    norm2 = np.linalg.norm(v2)

    # Handle degenerate cases (zero-length vectors)
    if norm1 < 1e-10 or norm2 < 1e-10:
        return 0.0

    cos_angle = np.dot(v1, v2) / (norm1 * norm2)
    cos_angle = np.clip(cos_angle, -1.0, 1.0)
    return float(np.degrees(np.arccos(cos_angle)))


def _calc_dihedral(p1: np.ndarray, p2: np.ndarray, p3: np.ndarray, p4: np.ndarray) -> float:
    """
    Calculate dihedral angle for atoms p1-p2-p3-p4 (IUPAC sign convention).

    Parameters
    ----------
    p1, p2, p3, p4 : np.ndarray
        3D points defining the dihedral

    Returns
    -------
    float
        Dihedral angle in degrees, 0.0 if undefined
    """
    b1 = p2 - p1
    b2 = p3 - p2
    b3 = p4 - p3

    n1 = np.cross(b1, b2)
    n2 = np.cross(b2, b3)

    norm_n1 = np.linalg.norm(n1)
    norm_n2 = np.linalg.norm(n2)
    norm_b2 = np.linalg.norm(b2)

    # Check for degenerate cases (collinear atoms or zero-length bonds)
    if norm_n1 > 1e-8 and norm_n2 > 1e-8 and norm_b2 > 1e-8:
        n1 = n1 / norm_n1
        n2 = n2 / norm_n2
        m1 = np.cross(n1, b2 / norm_b2)
        x = np.dot(n1, n2)
        y = np.dot(m1, n2)
        return float(-np.degrees(np.arctan2(y, x)))
    return 0.0


def _any_perpendicular(axis: np.ndarray) -> np.ndarray:
    """Unit vector perpendicular to a unit axis."""
    trial = np.zeros(3)
    trial[np.argmin(np.abs(axis))] = 1.0
    perp = np.cross(axis, trial)
    return perp / np.linalg.norm(perp)


def _place_atom(p_bond: np.ndarray, p_angle: np.ndarray, p_dihedral: Optional[np.ndarray],
                bond_length: float, angle: float, dihedral: float) -> np.ndarray:
    """
    Position of an atom given its references and internal coordinates.

    Parameters
    ----------
    p_bond, p_angle : np.ndarray
        Positions of the bond and angle reference atoms
    p_dihedral : np.ndarray or None
        Position of the dihedral reference atom (None: no dihedral reference)
    bond_length : float
        Distance to the bond reference (Angstrom)
    angle : float
        Angle atom-p_bond-p_angle (degrees)
    dihedral : float
        Dihedral atom-p_bond-p_angle-p_dihedral (degrees)

    Returns
    -------
    np.ndarray
        3D position
    """
    axis = p_bond - p_angle
    axis = axis / np.linalg.norm(axis)

    normal = None
    if p_dihedral is not None:
        normal = np.cross(p_angle - p_dihedral, axis)
        norm = np.linalg.norm(normal)
        normal = normal / norm if norm > 1e-8 else None
    if normal is None:
        normal = _any_perpendicular(axis)
    in_plane = np.cross(normal, axis)

    theta = np.deg2rad(angle)
    phi = np.deg2rad(dihedral)
    local = np.array([-bond_length * np.cos(theta),
                      bond_length * np.sin(theta) * np.cos(phi),
                      bond_length * np.sin(theta) * np.sin(phi)])
    return p_bond + local[0] * axis + local[1] * in_plane + local[2] * normal


def zmatrix_to_cartesian(zmatrix: ZMatrix) -> np.ndarray:
    """
    Convert Z-matrix to Cartesian coordinates.

    Parameters
    ----------
    zmatrix : ZMatrix
        Z-matrix representation (all reference indices are 0-based rows)

    Returns
    -------
    np.ndarray
        Nx3 array of Cartesian coordinates in Angstroms, in row order
    """
    num_atoms = len(zmatrix)
    coords = np.zeros((num_atoms, 3))

    if num_atoms < 2:
        return coords

    # Row 2: place along +Z axis
    coords[1] = [0.0, 0.0, zmatrix[1][ZMatrix.FIELD_BOND_LENGTH]]

    if num_atoms < 3:
        return coords

    # Row 3: place in XZ plane
    row = zmatrix[2]
    ia = row[ZMatrix.FIELD_BOND_REF]
    ib = row[ZMatrix.FIELD_ANGLE_REF]
    coords[2] = _place_atom(coords[ia], coords[ib], coords[ib] + np.array([1.0, 0.0, 0.0]),
                            row[ZMatrix.FIELD_BOND_LENGTH], row[ZMatrix.FIELD_ANGLE], 0.0)

    # Rows 4+
    for i in range(3, num_atoms):
        row = zmatrix[i]
        ia = row[ZMatrix.FIELD_BOND_REF]
        ib = row[ZMatrix.FIELD_ANGLE_REF]
        ic = row[ZMatrix.FIELD_DIHEDRAL_REF]
        coords[i] = _place_atom(coords[ia], coords[ib], coords[ic],
                                row[ZMatrix.FIELD_BOND_LENGTH],
                                row[ZMatrix.FIELD_ANGLE],
                                row[ZMatrix.FIELD_DIHEDRAL])

    return coords


def cartesian_to_zmatrix(coords: np.ndarray, zmatrix: ZMatrix) -> ZMatrix:
    """
    Recalculate internal coordinates from Cartesian coordinates while preserving
    the reference atom definitions of a Z-matrix template.

    Parameters
    ----------
    coords : np.ndarray
        Nx3 Cartesian coordinates in Angstroms, in row order
    zmatrix : ZMatrix
        Z-matrix template with reference atoms

    Returns
    -------
    ZMatrix
        Updated Z-matrix
    """
    new_zmatrix = zmatrix.copy()

    for i in range(1, len(new_zmatrix)):
        row = new_zmatrix[i]
        ia = row[ZMatrix.FIELD_BOND_REF]
        row[ZMatrix.FIELD_BOND_LENGTH] = _calc_distance(coords[ia], coords[i])

        if i >= 2:
            ib = row[ZMatrix.FIELD_ANGLE_REF]
            row[ZMatrix.FIELD_ANGLE] = _calc_angle(coords[i], coords[ia], coords[ib])

        if i >= 3:
            ic = row[ZMatrix.FIELD_DIHEDRAL_REF]
            row[ZMatrix.FIELD_DIHEDRAL] = _calc_dihedral(coords[i], coords[ia], coords[ib], coords[ic])

    return new_zmatrix
