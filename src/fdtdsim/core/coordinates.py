"""
Cartesian vector primitives on staggered (Yee) grids.

Vector fields are stored as numpy arrays whose last axis holds the three
Cartesian components (x, y, z).  A single vector is therefore an array of
shape ``(3,)`` and a block of cells an array of shape ``(ni, nj, nk, 3)``.

The two curl operators use the half-cell offsets of the Yee grid:

    CurlBackward  (used for curl H at D points)
        (curl F)_x = dFz/dy - dFy/dz   with  dF/dy = F[j] - F[j-1]

    CurlForward   (used for curl E at H points)
        (curl F)_x = dFz/dy - dFy/dz   with  dF/dy = F[j+1] - F[j]

Both operate on a block of cells addressed by three slices (or ints) and
return the block of curl vectors in grid-spacing units.
"""

import numpy as np

X, Y, Z = 0, 1, 2


def ScalarProduct(a, b):
    """Component-wise bilinear product ``sum_c a_c * b_c`` over the last axis."""
    return np.sum(np.asarray(a) * np.asarray(b), axis=-1)


# ---------------------------------------------------------------------------
# Index shifting (works for ints and slices)
# ---------------------------------------------------------------------------
def shift_index(idx, offset):
    """Shift an int or a unit-step slice by *offset* cells."""
    if isinstance(idx, slice):
        return slice(idx.start + offset, idx.stop + offset)
    return idx + offset


def _diff(F, comp, axis, index, offset):
    """``F[index]_comp - F[index shifted along axis]_comp`` (offset=-1 backward)."""
    shifted = list(index)
    shifted[axis] = shift_index(index[axis], offset)
    here = F[index + (comp,)]
    there = F[tuple(shifted) + (comp,)]
    return here - there if offset < 0 else there - here


def _curl(F, i, j, k, offset):
    index = (i, j, k)
    cx = _diff(F, Z, Y, index, offset) - _diff(F, Y, Z, index, offset)
    cy = _diff(F, X, Z, index, offset) - _diff(F, Z, X, index, offset)
    cz = _diff(F, Y, X, index, offset) - _diff(F, X, Y, index, offset)
    return np.stack((cx, cy, cz), axis=-1)


def CurlBackward(F, i, j, k):
    """Backward-difference curl of the vector field *F* at cells ``(i, j, k)``.

    Parameters
    ----------
    F : ndarray (Nx, Ny, Nz, 3)
        Vector field.
    i, j, k : int or slice
        Cell block; every index minus one must still be inside *F*.

    Returns
    -------
    ndarray
        Curl vectors with shape ``F[i, j, k].shape``.
    """
    return _curl(F, i, j, k, -1)


def CurlForward(F, i, j, k):
    """Forward-difference curl of the vector field *F* at cells ``(i, j, k)``.

    Every index plus one must still be inside *F*.
    """
    return _curl(F, i, j, k, +1)
