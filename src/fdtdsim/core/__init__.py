"""Core utilities for fdtdsim."""

# Import modules themselves (allows: from fdtdsim.core import spectrum)
from . import constants
from . import coordinates
from . import indexbounds
from . import iterators
from . import logger
from . import medium
from . import paramfile
from . import spectrum

__all__ = [
    "constants",
    "coordinates",
    "indexbounds",
    "iterators",
    "logger",
    "medium",
    "paramfile",
    "spectrum",
]
