"""
fdtdsim: Finite-difference time-domain solver for absorption spectra.

This package integrates Maxwell's equations on a 3-D Yee grid with a
perfectly matched absorbing layer and a total-field/scattered-field
plane-wave source, and extracts per-frequency absorption cross-sections
of an embedded body from running Fourier transforms of the fields.
"""

# Import main sub-packages
from . import core
from . import FDTD3D

__all__ = [
    "core",
    "FDTD3D",
]
