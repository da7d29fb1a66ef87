#!/usr/bin/env python3
"""
Command-line interface for Cartesian to Z-matrix conversion.

This script reads a molecular geometry, perceives its structure (connectivity,
symmetry, resonance, radical sites, rotational and beta-scission bonds) and
prints a report together with the Z-matrix.

Example usage:
    # After installation: pip install .
    x2zmat -i molecule.xyz -o molecule.zmat

    # As a Python module
    python -m x2zmat -i molecule.xyz -v

    # Van der Waals complex made of two declared fragments (1-based atom indices)
    x2zmat -i complex.xyz --fragment 1 2 3 --fragment 4 5
"""

import argparse
import sys
from typing import Optional

from . import IOTools
from . import __version__
from .Tolerance import (Tolerance, DEFAULT_ANGLE_TOLERANCE, DEFAULT_DISTANCE_TOLERANCE,
                        DEFAULT_BOND_SCALE, DEFAULT_MAX_RESONANCE_NODES,
                        DEFAULT_MAX_SYMMETRY_CANDIDATES)
from .MolecularOrientation import MolecularOrientation
from .PrimaryStructure import PrimaryStructure
from .MolecularStructure import MolecularStructure


# Custom formatter that removes "(default: False)" from boolean flags
class CustomHelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    def _get_help_string(self, action: argparse.Action) -> Optional[str]:
        help_str = super()._get_help_string(action)
        if help_str and "(default: False)" in help_str:
            help_str = help_str.replace(" (default: False)", "")
        return help_str


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='x2zmat',
        description='Structure perception and Z-matrix generation from Cartesian coordinates',
        formatter_class=CustomHelpFormatter,
    )

    required = parser.add_argument_group('Required Arguments')
    required.add_argument('-i', '--input', required=True,
                          help='Input geometry file (.xyz format)')

    io_group = parser.add_argument_group('Input/Output Files')
    io_group.add_argument('-o', '--output',
                          help='Write the Z-matrix to this file')
    io_group.add_argument('--fragment', action='append', nargs='+', type=int,
                          help='Atoms (1-based) of one molecule of a non-bonded complex. '
                               'Repeat the option for every fragment. '
                               'Example: --fragment 1 2 3 --fragment 4 5')

    tol_group = parser.add_argument_group('Tolerances')
    tol_group.add_argument('-a', '--angle-tolerance', type=float,
                           default=DEFAULT_ANGLE_TOLERANCE,
                           help='Angle tolerance (degrees)')
    tol_group.add_argument('-d', '--distance-tolerance', type=float,
                           default=DEFAULT_DISTANCE_TOLERANCE,
                           help='Distance tolerance (Å)')
    tol_group.add_argument('--bond-scale', type=float,
                           default=DEFAULT_BOND_SCALE,
                           help='Factor applied to the sum of covalent radii to get the maximum bond length')
    tol_group.add_argument('--max-resonance-nodes', type=int,
                           default=DEFAULT_MAX_RESONANCE_NODES,
                           help='Maximum number of nodes of the resonance structure search')
    tol_group.add_argument('--max-symmetry-candidates', type=int,
                           default=DEFAULT_MAX_SYMMETRY_CANDIDATES,
                           help='Maximum number of candidate superpositions of the symmetry number search')

    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__}',
                        help='Show version number and exit')
    parser.add_argument('-v', '--verbose', action='store_true',
                        default=False,
                        help='Print verbose progress output')
    args = parser.parse_args(argv)

    if args.angle_tolerance <= 0.0 or args.distance_tolerance <= 0.0:
        parser.error("Tolerances must be positive")
    if args.max_resonance_nodes <= 0 or args.max_symmetry_candidates <= 0:
        parser.error("Search limits must be positive")

    return args


def _format_bond(bond) -> str:
    return f"{bond[0] + 1}-{bond[1] + 1}"


def main(argv=None) -> int:
    """Main execution function."""
    args = parse_arguments(argv)
    verbose = args.verbose

    # Convert from 1-based (user input) to 0-based (internal representation)
    fragments = [[atom - 1 for atom in group] for group in args.fragment] if args.fragment else []

    print("=" * 70)
    print("x2zmat")
    print("=" * 70)
    print(f"\nInput structure: {args.input}")
    if fragments:
        print(f"Fragments: {[[atom + 1 for atom in group] for group in fragments]}")

    try:
        tolerance = Tolerance(angle=args.angle_tolerance,
                              distance=args.distance_tolerance,
                              bond_scale=args.bond_scale,
                              max_resonance_nodes=args.max_resonance_nodes,
                              max_symmetry_candidates=args.max_symmetry_candidates)
        geometry = IOTools.read_xyz_file(args.input)

        if verbose:
            print(f"  Atoms: {len(geometry)}")
            print(f"  {tolerance}")
            print("-" * 70)

        orientation = MolecularOrientation(geometry, tolerance)
        primary = PrimaryStructure(geometry, fragments, tolerance)
        structure = MolecularStructure(primary, verbose=verbose)

        print("\n" + "=" * 70)
        print("RESULTS")
        print("=" * 70)
        print(f"Stoichiometry: {primary.stoicheometry()}")
        if not primary.is_connected():
            print(f"Fragments: {', '.join(primary.fragment_labels())}")
        print(f"Shape: {orientation.molecule_type.value}")
        print(f"Symmetry number: {orientation.sym_num()}")
        print(f"Enantiomer: {'yes' if orientation.is_enantiomer() else 'no'}")
        print(f"Resonance structures: {structure.resonance_count()}")
        radicals = structure.radical_sites()
        print(f"Radical sites: {' '.join(str(atom + 1) for atom in radicals) if radicals else 'none'}")

        rotors = structure.rotation_bonds()
        print(f"Rotational bonds: {len(rotors)}")
        for bond in rotors:
            torsion = structure.torsion_variable(*bond)
            print(f"  {_format_bond(bond):<10s} {torsion or ''}")

        betas = structure.beta_bonds()
        print(f"Beta-scission bonds: {len(betas)}")
        for bond, beta in betas.items():
            ring = " (ring)" if beta.is_ring else ""
            print(f"  {_format_bond(bond):<10s} radical {beta.radical + 1}{ring}")

        print("\nZ-matrix:")
        structure.print(sys.stdout, prefix='  ')

        if args.output:
            IOTools.write_zmatrix_file(structure, args.output)
            print(f"\nZ-matrix saved to: {args.output}")
        print("=" * 70)

        return 0

    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
