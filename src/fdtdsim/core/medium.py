"""
Media and the per-cell medium grid.

The engine only needs three things from the material filling a cell:

    is_body                    whether the cell belongs to the absorbing body
    permittivity(frequency)    complex relative permittivity at a spectral point
    solve(D)                   the constitutive inversion D -> E

``MediumGrid`` stores one small integer per cell that indexes a list of
medium objects, so a million-cell grid filled with two materials holds two
medium objects.  Block operations (``solve``, ``body_mask``) run once per
distinct medium present in the block.
"""

from abc import ABC, abstractmethod

import numpy as np

from .indexbounds import IndexBounds


class Medium(ABC):
    """Constitutive contract of one material."""

    is_body: bool = False

    @abstractmethod
    def permittivity(self, frequency) -> complex:
        """Complex relative permittivity at *frequency* (a ``SpectrumUnit``)."""

    @abstractmethod
    def solve(self, d):
        """Return E for the displacement field block *d* (last axis = components)."""


class Vacuum(Medium):
    """Free space: eps = 1, E = D."""

    is_body = False

    def permittivity(self, frequency):
        return 1.0 + 0.0j

    def solve(self, d):
        return np.array(d, dtype=float, copy=True)

    def __repr__(self):
        return "Vacuum()"


class Dielectric(Medium):
    """
    Non-dispersive dielectric with a constant complex permittivity.

    The time-domain update uses the real part (E = D / Re(eps)); the full
    complex value is reported to the spectral post-processing.

    Parameters
    ----------
    epsilon : complex
        Relative permittivity.  ``Re(epsilon)`` must be positive.
    is_body : bool
        Whether cells of this medium count as the absorbing body.
    """

    def __init__(self, epsilon, is_body=True):
        self.epsilon = complex(epsilon)
        if self.epsilon.real <= 0.0:
            raise ValueError(f"Re(epsilon) must be positive, got {self.epsilon}")
        self.is_body = bool(is_body)

    def permittivity(self, frequency):
        return self.epsilon

    def solve(self, d):
        return np.asarray(d, dtype=float) / self.epsilon.real

    def __repr__(self):
        return f"Dielectric(epsilon={self.epsilon!r}, is_body={self.is_body})"


class MediumGrid:
    """
    Per-cell medium lookup over the full simulation grid.

    Parameters
    ----------
    shape : tuple of int
        Grid shape ``(Nx, Ny, Nz)``.
    background : Medium, optional
        Medium filling every cell initially (default ``Vacuum()``).
    """

    def __init__(self, shape, background=None):
        self.shape = tuple(int(n) for n in shape)
        self.materials = [background if background is not None else Vacuum()]
        self.ids = np.zeros(self.shape, dtype=np.int32)

    def _material_id(self, medium):
        for n, known in enumerate(self.materials):
            if known is medium:
                return n
        self.materials.append(medium)
        return len(self.materials) - 1

    # -- filling -------------------------------------------------------------
    def set_cell(self, i, j, k, medium):
        self.ids[i, j, k] = self._material_id(medium)

    def set_region(self, bounds: IndexBounds, medium):
        self.ids[bounds.slices()] = self._material_id(medium)

    def set_sphere(self, center, radius, medium):
        """Fill every cell whose centre lies within *radius* cells of *center*."""
        ii, jj, kk = np.indices(self.shape)
        ci, cj, ck = center
        inside = (ii - ci) ** 2 + (jj - cj) ** 2 + (kk - ck) ** 2 <= radius ** 2
        self.ids[inside] = self._material_id(medium)

    # -- lookup --------------------------------------------------------------
    def __getitem__(self, index):
        return self.materials[int(self.ids[index])]

    def body_mask(self, index=Ellipsis):
        """Boolean array marking body cells (of the whole grid or of a block)."""
        flags = np.array([m.is_body for m in self.materials], dtype=bool)
        return flags[self.ids[index]]

    def body_count(self):
        return int(np.count_nonzero(self.body_mask()))

    def media_in(self, index):
        """Yield ``(medium, mask)`` for every medium present in the block *index*."""
        ids = self.ids[index]
        for n in np.unique(ids):
            yield self.materials[n], ids == n

    def solve(self, d, index):
        """Apply each cell's constitutive inversion to the block *d* at *index*."""
        e = np.empty_like(d, dtype=float)
        for medium, mask in self.media_in(index):
            e[mask] = medium.solve(d[mask])
        return e
