"""
Physical constants used throughout fdtdsim.

Values are taken from ``scipy.constants`` (CODATA) so that every module
shares one definition.
"""

import numpy as np
from scipy.constants import c as c0
from scipy.constants import e as e0
from scipy.constants import epsilon_0 as eps0
from scipy.constants import h as h_planck
from scipy.constants import mu_0 as mu0

pi = np.pi
twopi = 2.0 * pi
ii = 1j

# Largest stable Courant number of the 3-D Yee scheme (c*dt/dx <= 1/sqrt(3))
COURANT_LIMIT_3D = 1.0 / np.sqrt(3.0)

__all__ = [
    "c0",
    "e0",
    "eps0",
    "h_planck",
    "mu0",
    "pi",
    "twopi",
    "ii",
    "COURANT_LIMIT_3D",
]
