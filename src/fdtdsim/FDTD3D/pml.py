"""
Perfectly Matched Layer (PML) for the 3-D FDTD update.

Implements the auxiliary-differential-equation form of the uniaxial PML:
every D (resp. H) component is updated as

    integral += curl
    field     = decay * field + S * curl_scale * (curl + integral_scale * integral)

where S is the Courant number.  Outside the layer the three factors are
``decay = 1``, ``curl_scale = 1``, ``integral_scale = 0`` and the update
reduces exactly to the lossless Yee update ``field += S * curl``.

Physics reference:
    The loss profile is graded polynomially from zero at the inner edge
    of the layer to its maximum at the outer boundary:

        x_n = scale * (depth / npml)^3

    with ``scale = 0.333`` at the D points and ``scale = 0.25`` with a
    half-cell offset at the H points.  Per axis:

        integral_scale = x_n
        curl_scale     = 1 / (1 + x_n)
        decay          = (1 - x_n) / (1 + x_n)

    For component c the decay and curl factors are the products of the
    profiles of the two axes other than c; the integral factor is the
    profile of axis c itself.
"""

from typing import NamedTuple

import numpy as np
from numba import jit

from ..core.indexbounds import IndexBounds
from ..core.logger import get_logger

log = get_logger(__name__)

# ---------------------------------------------------------------------------
# Module-level PML parameters
# ---------------------------------------------------------------------------
GRADING_ORDER = 3         # polynomial grading order
ELECTRIC_SCALE = 0.333    # loss scale at D points
MAGNETIC_SCALE = 0.25     # loss scale at H points (half-cell offset)


class PmlCoefficients(NamedTuple):
    """Per-cell update factors for one field type (arrays with a trailing component axis)."""
    field_factor: np.ndarray
    curl_factor: np.ndarray
    integral_factor: np.ndarray

    def update(self, field, curl, integral, courant_number):
        """Return ``decay*field + S*curl_scale*(curl + integral_scale*integral)``."""
        return self.field_factor * field + courant_number * self.curl_factor * (
            curl + self.integral_factor * integral
        )


# ---------------------------------------------------------------------------
# Build graded profiles for one axis
# ---------------------------------------------------------------------------
@jit(nopython=True)
def _build_profiles(N, npml, offset, scale, mirror_shift):
    """Build integral, curl and decay profiles for one axis.

    Parameters
    ----------
    N : int
        Number of cells along the axis.
    npml : int
        Layer thickness in cells.
    offset : float
        Depth offset (0 at D points, 0.5 at H points).
    scale : float
        Loss scale of the polynomial grading.
    mirror_shift : int
        Extra inward shift of the upper-side mirror index (0 or 1).

    Returns
    -------
    integral, curl, decay : ndarray (N,)
    """
    integral = np.zeros(N)
    curl = np.ones(N)
    decay = np.ones(N)

    for n in range(npml):
        depth = (npml - n - offset) / npml
        xn = scale * depth ** GRADING_ORDER
        lo = n
        hi = N - 1 - mirror_shift - n
        integral[lo] = xn
        curl[lo] = 1.0 / (1.0 + xn)
        decay[lo] = (1.0 - xn) / (1.0 + xn)
        if hi >= 0:
            integral[hi] = xn
            curl[hi] = 1.0 / (1.0 + xn)
            decay[hi] = (1.0 - xn) / (1.0 + xn)

    return integral, curl, decay


def _outer(a, b, c):
    """3-D product ``a[i] * b[j] * c[k]``."""
    return a[:, None, None] * b[None, :, None] * c[None, None, :]


def _assemble(profiles, shape):
    """Stack per-axis profiles into the three (Nx, Ny, Nz, 3) factor arrays."""
    (gi1, gi2, gi3), (gj1, gj2, gj3), (gk1, gk2, gk3) = profiles
    ones_i, ones_j, ones_k = (np.ones(n) for n in shape)

    decay = np.stack((
        _outer(ones_i, gj3, gk3),
        _outer(gi3, ones_j, gk3),
        _outer(gi3, gj3, ones_k),
    ), axis=-1)
    curl = np.stack((
        _outer(ones_i, gj2, gk2),
        _outer(gi2, ones_j, gk2),
        _outer(gi2, gj2, ones_k),
    ), axis=-1)
    integral = np.stack((
        _outer(gi1, ones_j, ones_k),
        _outer(ones_i, gj1, ones_k),
        _outer(ones_i, ones_j, gk1),
    ), axis=-1)
    return PmlCoefficients(decay, curl, integral)


class PmlBoundary:
    """
    Precomputed PML update factors over the full grid.

    Parameters
    ----------
    length : int
        Layer thickness in cells (0 disables the layer).
    indices : IndexBounds
        Full grid bounds.
    """

    def __init__(self, length, indices: IndexBounds):
        if length < 0:
            raise ValueError(f"PML length must be non-negative, got {length}")
        self.length = int(length)
        self.indices = indices
        shape = tuple(indices.upper)

        electric = [_build_profiles(n, self.length, 0.0, ELECTRIC_SCALE, 0) for n in shape]
        magnetic = [_build_profiles(n, self.length, 0.5, MAGNETIC_SCALE, 1) for n in shape]

        self._electric = _assemble(electric, shape)
        self._magnetic = _assemble(magnetic, shape)
        log.debug("PML of %d cells on grid %s", self.length, shape)

    @staticmethod
    def _block(coefs, index):
        return PmlCoefficients(*(factor[index] for factor in coefs))

    def electric(self, i, j, k):
        """Update factors of the D field at cells ``(i, j, k)``."""
        return self._block(self._electric, (i, j, k))

    def magnetic(self, i, j, k):
        """Update factors of the H field at cells ``(i, j, k)``."""
        return self._block(self._magnetic, (i, j, k))
