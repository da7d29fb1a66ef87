#!/usr/bin/env python3
"""
Numerical Tolerances

This module provides the Tolerance class holding the numerical accuracies used
to compare atomic coordinates throughout the structure perception pipeline:

    - angle tolerance (degrees): linearity, planarity and rotation matching
    - distance tolerance (Angstrom): bond detection and distance comparisons
    - bond scale: factor applied to the sum of covalent radii to obtain the
      longest distance still considered a bond
    - search guards: upper bounds on the combinatorial searches (resonance
      enumeration and symmetry number)

The same Tolerance instance is passed to every component that needs it.
Zero or negative tolerances are not supported.
"""

import math

from . import Elements


# Default configuration values
DEFAULT_ANGLE_TOLERANCE = 5.0  # degrees
DEFAULT_DISTANCE_TOLERANCE = 0.05  # Angstrom
DEFAULT_BOND_SCALE = 1.2
DEFAULT_MAX_RESONANCE_NODES = 200000
DEFAULT_MAX_SYMMETRY_CANDIDATES = 200000


class Tolerance:
    """
    Accuracies used to compare atomic coordinates.

    Attributes
    ----------
    angle : float
        Angle tolerance in degrees
    distance : float
        Distance tolerance in Angstroms
    bond_scale : float
        Multiplier applied to the sum of covalent radii to get the maximum bond length
    max_resonance_nodes : int
        Maximum number of search nodes visited while enumerating resonance structures
    max_symmetry_candidates : int
        Maximum number of candidate superpositions tested by the symmetry search
    """

    def __init__(self, angle: float = DEFAULT_ANGLE_TOLERANCE,
                 distance: float = DEFAULT_DISTANCE_TOLERANCE,
                 bond_scale: float = DEFAULT_BOND_SCALE,
                 max_resonance_nodes: int = DEFAULT_MAX_RESONANCE_NODES,
                 max_symmetry_candidates: int = DEFAULT_MAX_SYMMETRY_CANDIDATES):
        self.angle = angle
        self.distance = distance
        self.bond_scale = bond_scale
        self.max_resonance_nodes = max_resonance_nodes
        self.max_symmetry_candidates = max_symmetry_candidates

    def __repr__(self) -> str:
        return (f"Tolerance(angle={self.angle}, distance={self.distance}, "
                f"bond_scale={self.bond_scale})")

    def are_angles_equal(self, angle1: float, angle2: float) -> bool:
        """Compare two angles given in degrees."""
        return abs(angle1 - angle2) < self.angle

    def are_distances_equal(self, dist1: float, dist2: float) -> bool:
        """Compare two distances given in Angstroms."""
        return abs(dist1 - dist2) < self.distance

    def is_angle_linear(self, angle: float) -> bool:
        """Whether a bond angle (degrees) is within tolerance of 180 degrees."""
        return self.are_angles_equal(angle, 180.0)

    def is_angle_degenerate(self, angle: float) -> bool:
        """Whether a bond angle (degrees) is within tolerance of 0 or 180 degrees."""
        return self.are_angles_equal(angle, 0.0) or self.is_angle_linear(angle)

    def sine(self) -> float:
        """Sine of the angle tolerance."""
        return math.sin(math.radians(self.angle))

    def max_bond_length(self, symbol1: str, symbol2: str) -> float:
        """
        Longest distance for which two atoms are considered bonded.

        Parameters
        ----------
        symbol1, symbol2 : str
            Element symbols

        Returns
        -------
        float
            Maximum bond length in Angstroms (distance tolerance not included)

        Raises
        ------
        UnknownElementError
            If either element has no covalent radius data
        """
        return (Elements.get_covalent_radius(symbol1)
                + Elements.get_covalent_radius(symbol2)) * self.bond_scale
