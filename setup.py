#!/usr/bin/env python3
"""
Setup script for x2zmat - structure perception and Z-matrix generation.

Installation:
    pip install -e .                    # Development install
    pip install .                       # Regular install

Usage after installation:
    x2zmat -i molecule.xyz
    python -m x2zmat -i molecule.xyz
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding='utf-8') if readme_file.exists() else ""

requirements = [
    'numpy>=1.20.0',
    'scipy>=1.7.0',
    'openmm>=7.7.0',
]

setup(
    name="x2zmat",
    version="1.0.0",
    description="Connectivity, symmetry, resonance and Z-matrix perception from Cartesian coordinates",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Package configuration
    packages=find_packages(include=['x2zmat', 'x2zmat.*']),

    # Dependencies
    install_requires=requirements,
    extras_require={
        'test': ['pytest>=7.0'],
    },

    python_requires='>=3.8',

    # Entry points for command-line tools
    entry_points={
        'console_scripts': [
            'x2zmat=x2zmat.__main__:main',
        ],
    },

    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering :: Chemistry',
        'Programming Language :: Python :: 3',
    ],

    keywords='z-matrix internal-coordinates symmetry-number resonance chemistry',
)
