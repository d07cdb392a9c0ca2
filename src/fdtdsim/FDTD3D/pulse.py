"""
Incident plane-wave pulse for total-field/scattered-field injection.

The incident wave travels along +j with its electric field along z and
its magnetic field along x.  It is computed on an auxiliary 1-D Yee line
of the same length as the j axis and the same Courant number as the 3-D
grid, so that the line reproduces the 3-D numerical dispersion of a
normally incident plane wave exactly.  The engine adds and subtracts the
line values on the faces of the total-field box.

Line update (normalised units, S = Courant number):

    E[j] += S * (H[j-1] - H[j])         j = 1 .. N-2
    H[j] += S * (E[j] - E[j+1])         j = 0 .. N-2

The waveform is imposed as a hard source at ``SOURCE_INDEX`` and both
ends of the line are terminated with a first-order Mur boundary

    E0(n+1) = E1(n) + (S - 1)/(S + 1) * (E1(n+1) - E0(n))

The pulse keeps its own running Fourier transforms of E and H, which
give the incident spectrum used to normalise results.
"""

import math
from dataclasses import dataclass

import numpy as np
from numba import jit

from ..core.constants import twopi
from ..core.paramfile import read_value, write_value
from .fourier import FourierAccumulator

SOURCE_INDEX = 1


# ---------------------------------------------------------------------------
# Waveform
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class GaussianPulse:
    """
    Gaussian (optionally carrier-modulated) temporal waveform.

        s(n) = amplitude * exp(-((n - delay)/spread)^2 / 2) * cos(2 pi f (n - delay) dt)

    Attributes
    ----------
    amplitude : float
        Peak amplitude (normalised units).
    spread : float
        Gaussian width in time steps.
    delay : float
        Step at which the peak is emitted.
    frequency : float
        Carrier frequency (Hz); 0 gives an unmodulated Gaussian.
    """
    amplitude: float = 1.0
    spread: float = 8.0
    delay: float = 30.0
    frequency: float = 0.0

    def __call__(self, time, time_step):
        """Waveform value at step *time* for a step length *time_step* (s)."""
        shifted = time - self.delay
        value = self.amplitude * math.exp(-0.5 * (shifted / self.spread) ** 2)
        if self.frequency:
            value *= math.cos(twopi * self.frequency * shifted * time_step)
        return value


def readpulseparams_sub(fh):
    """Read a ``GaussianPulse`` from an open file handle.

    Expected file format (one value per line, optional trailing comments)::

        1.0       ! amplitude
        8.0       ! spread (steps)
        30.0      ! delay (steps)
        0.0       ! carrier frequency (Hz)
    """
    return GaussianPulse(
        amplitude=read_value(fh),
        spread=read_value(fh),
        delay=read_value(fh),
        frequency=read_value(fh),
    )


def writepulseparams_sub(fh, waveform):
    """Write a ``GaussianPulse`` to an open file handle."""
    write_value(fh, float(waveform.amplitude), "The pulse amplitude.")
    write_value(fh, float(waveform.spread), "The pulse spread. (steps)")
    write_value(fh, float(waveform.delay), "The step of the pulse peak. (steps)")
    write_value(fh, float(waveform.frequency), "The carrier frequency. (Hz)")


# ---------------------------------------------------------------------------
# 1-D line kernels
# ---------------------------------------------------------------------------
@jit(nopython=True)
def _electric_line_step(e, h, courant, mur, source_index, source_value):
    n = e.shape[0]
    e0_old = e[0]
    e1_old = e[1]
    en_old = e[n - 1]
    en1_old = e[n - 2]

    for j in range(1, n - 1):
        e[j] += courant * (h[j - 1] - h[j])

    e[source_index] = source_value

    e[0] = e1_old + mur * (e[1] - e0_old)
    e[n - 1] = en1_old + mur * (e[n - 2] - en_old)


@jit(nopython=True)
def _magnetic_line_step(e, h, courant):
    for j in range(e.shape[0] - 1):
        h[j] += courant * (e[j] - e[j + 1])


class FDTDPulse:
    """
    Incident field along the propagation (j) axis.

    Parameters
    ----------
    parameters : SimulationParameters
        Supplies the grid, Courant number, time step, waveform and spectrum.

    Attributes
    ----------
    E : ndarray (Ny,)
        z component of the incident electric field.
    H : ndarray (Ny,)
        x component of the incident magnetic field.
    FourierE, FourierH : FourierAccumulator
        Running transforms of ``E`` and ``H``.
    """

    def __init__(self, parameters):
        n = parameters.grid_shape[1]
        if n < 3:
            raise ValueError(f"incident line needs at least 3 cells, got {n}")
        self.courant_number = float(parameters.courant_number)
        self.time_step = float(parameters.time_step)
        self.waveform = parameters.waveform
        self.mur = (self.courant_number - 1.0) / (self.courant_number + 1.0)

        self.E = np.zeros(n)
        self.H = np.zeros(n)

        if parameters.is_spectrum_calculated:
            omegas = parameters.spectrum.omegas()
        else:
            omegas = np.zeros(0)
        self.FourierE = FourierAccumulator(omegas, (n,))
        self.FourierH = FourierAccumulator(omegas, (n,))

    def __len__(self):
        return self.E.size

    def electric_step(self, time):
        """Advance the incident E by one step and impose the waveform at step *time*."""
        _electric_line_step(
            self.E, self.H, self.courant_number, self.mur,
            SOURCE_INDEX, float(self.waveform(time, self.time_step)),
        )

    def magnetic_step(self):
        """Advance the incident H by one step."""
        _magnetic_line_step(self.E, self.H, self.courant_number)

    def do_fourier_pulse(self, time):
        """Add the current incident E and H at step *time* to the running transforms."""
        elapsed = time * self.time_step
        self.FourierE.accumulate(self.E, elapsed)
        self.FourierH.accumulate(self.H, elapsed)
