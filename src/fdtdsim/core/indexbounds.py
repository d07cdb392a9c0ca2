"""
Bounds descriptor for blocks of grid cells.

An ``IndexBounds`` is a lower corner (inclusive) and an upper corner
(exclusive) on each of the three axes, so ``range(lower[a], upper[a])``
enumerates the cells along axis ``a``.  Sub-regions are carved out by
shifting the corners inward:

>>> full = IndexBounds.from_shape((10, 10, 10))
>>> full.shift_lower(1).shift_upper(1).lengths
(8, 8, 8)
"""

from dataclasses import dataclass
from typing import Tuple

I_AXIS, J_AXIS, K_AXIS = 0, 1, 2


@dataclass(frozen=True)
class IndexBounds:
    """
    Block of cells ``[lower, upper)`` on each axis.

    Attributes
    ----------
    lower : tuple of int
        Inclusive lower corner ``(i, j, k)``.
    upper : tuple of int
        Exclusive upper corner ``(i, j, k)``.
    """
    lower: Tuple[int, int, int]
    upper: Tuple[int, int, int]

    def __post_init__(self):
        if len(self.lower) != 3 or len(self.upper) != 3:
            raise ValueError(
                f"bounds must be three-dimensional, got {self.lower!r}, {self.upper!r}"
            )
        object.__setattr__(self, "lower", tuple(int(v) for v in self.lower))
        object.__setattr__(self, "upper", tuple(int(v) for v in self.upper))

    @classmethod
    def from_shape(cls, shape):
        """Bounds covering a full array of the given ``(Nx, Ny, Nz)`` shape."""
        return cls((0, 0, 0), tuple(shape))

    # -- derived quantities --------------------------------------------------
    @property
    def lengths(self):
        """Number of cells along each axis (never negative)."""
        return tuple(max(0, u - l) for l, u in zip(self.lower, self.upper))

    @property
    def shape(self):
        return self.lengths

    @property
    def size(self):
        ni, nj, nk = self.lengths
        return ni * nj * nk

    def is_empty(self):
        return self.size == 0

    def center(self):
        """Integer centre cell ``(lower + upper) // 2`` on each axis."""
        return tuple((l + u) // 2 for l, u in zip(self.lower, self.upper))

    def slices(self):
        """Tuple of slices selecting the block from a full-grid array."""
        return tuple(slice(l, u) for l, u in zip(self.lower, self.upper))

    def axis_range(self, axis):
        return range(self.lower[axis], self.upper[axis])

    def contains(self, i, j, k):
        return all(l <= v < u for v, l, u in zip((i, j, k), self.lower, self.upper))

    # -- carving sub-regions -------------------------------------------------
    def shift_lower(self, n):
        """Move the lower corner inward by *n* cells on every axis."""
        return IndexBounds(tuple(l + n for l in self.lower), self.upper)

    def shift_upper(self, n):
        """Move the upper corner inward by *n* cells on every axis."""
        return IndexBounds(self.lower, tuple(u - n for u in self.upper))

    def with_axis(self, axis, lower, upper):
        """Copy of the bounds with axis *axis* replaced by ``[lower, upper)``."""
        lo = list(self.lower)
        hi = list(self.upper)
        lo[axis] = lower
        hi[axis] = upper
        return IndexBounds(tuple(lo), tuple(hi))
