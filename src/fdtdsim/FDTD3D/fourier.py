"""
Running (streaming) discrete Fourier transform.

Instead of storing the time series of a field and transforming it after
the run, each tracked frequency keeps one complex sum per field value that
is updated once per time step:

    F(omega) += f(t_n) * exp(-i * omega * t_n),     t_n = n * dt

Memory is O(values * frequencies) and independent of the number of steps.
"""

import numpy as np


class FourierAccumulator:
    """
    Complex running sums for a block of real field values.

    Parameters
    ----------
    omegas : array_like
        Angular frequencies (rad/s) to track, in spectrum order.
    shape : tuple of int
        Shape of the field being transformed (e.g. ``(Nx, Ny, Nz, 3)``).

    Attributes
    ----------
    sums : ndarray, complex, shape ``(len(omegas),) + shape``
        Accumulated transform per frequency.
    """

    def __init__(self, omegas, shape):
        self.omegas = np.asarray(omegas, dtype=float).reshape(-1)
        self.shape = tuple(shape)
        self.sums = np.zeros((self.omegas.size,) + self.shape, dtype=np.complex128)

    @property
    def num_frequencies(self):
        return self.omegas.size

    def phases(self, time):
        """``exp(-i * omega * time)`` for every tracked frequency."""
        return np.exp(-1j * self.omegas * time)

    def accumulate(self, values, time, index=()):
        """Add ``values[index] * exp(-i omega time)`` to the sums at *index*.

        Parameters
        ----------
        values : ndarray
            Full field array with shape ``self.shape``.
        time : float
            Elapsed simulation time (s) of *values*.
        index : tuple, optional
            Block of the field to update (tuple of slices/ints over the
            leading axes); the whole field by default.
        """
        if self.omegas.size == 0:
            return
        block = np.asarray(values)[index]
        phase = self.phases(time).reshape((-1,) + (1,) * block.ndim)
        self.sums[(slice(None),) + tuple(index)] += phase * block

    def transform(self, n, index=()):
        """Accumulated transform for frequency number *n* (a view)."""
        return self.sums[(n,) + tuple(index)]

    def reset(self):
        self.sums[...] = 0.0
