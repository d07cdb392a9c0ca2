"""
Field store for the 3-D Yee grid.

Holds the electric displacement D, the electric field E, the magnetic
field H, the running curl integrals used by the PML update, and the
running Fourier transforms of E and H.  All vector fields have shape
``(Nx, Ny, Nz, 3)`` so that ``field[i, j, k]`` is the Cartesian vector of
cell ``(i, j, k)``.
"""

import numpy as np

from ..core.indexbounds import IndexBounds
from .fourier import FourierAccumulator


class FDTDField:
    """
    Staggered field arrays of one simulation.

    Parameters
    ----------
    indices : IndexBounds
        Full grid bounds.
    omegas : array_like
        Angular frequencies (rad/s) whose transforms are accumulated.
    time_step : float
        Time step (s); elapsed time of step ``n`` is ``n * time_step``.
    traversal : Traversal
        Strategy used to sweep the grid when accumulating transforms.
    """

    def __init__(self, indices: IndexBounds, omegas, time_step, traversal):
        self.indices = indices
        self.time_step = float(time_step)
        self.traversal = traversal

        shape = tuple(indices.upper) + (3,)
        self.D = np.zeros(shape)
        self.E = np.zeros(shape)
        self.H = np.zeros(shape)
        self.IntegralD = np.zeros(shape)
        self.IntegralH = np.zeros(shape)

        self.FourierE = FourierAccumulator(omegas, shape)
        self.FourierH = FourierAccumulator(omegas, shape)
        self.fourier_steps = 0

    @property
    def shape(self):
        return self.indices.upper

    def do_fourier_field(self, time):
        """Add the current E and H at step *time* to the running transforms.

        Must be called once per step, after E and H of that step are final.
        """
        elapsed = time * self.time_step

        def kernel(si, sj, sk):
            self.FourierE.accumulate(self.E, elapsed, (si, sj, sk))
            self.FourierH.accumulate(self.H, elapsed, (si, sj, sk))

        if self.FourierE.num_frequencies:
            self.traversal.for_each(self.indices, kernel)
        self.fourier_steps += 1
