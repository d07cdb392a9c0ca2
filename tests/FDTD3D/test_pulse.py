"""
Test suite for pulse.py (waveform and incident 1-D line).
"""

import math
from io import StringIO
from types import SimpleNamespace

import numpy as np
import pytest

from fdtdsim.core.spectrum import Spectrum, SpectrumUnit
from fdtdsim.FDTD3D import pulse as pl


def _params(Ny=60, courant=0.5, waveform=None, spectrum=None):
    """Minimal duck-typed parameter set for the incident line."""
    return SimpleNamespace(
        grid_shape=(8, Ny, 8),
        courant_number=courant,
        time_step=1.0e-18,
        waveform=waveform or pl.GaussianPulse(spread=10.0, delay=30.0),
        spectrum=spectrum,
        is_spectrum_calculated=bool(spectrum),
    )


class TestGaussianPulse:

    def test_peak(self):
        wf = pl.GaussianPulse(amplitude=2.0, spread=5.0, delay=20.0)
        assert wf(20, 1e-18) == 2.0

    def test_symmetric_about_delay(self):
        wf = pl.GaussianPulse(spread=5.0, delay=20.0)
        assert np.isclose(wf(15, 1e-18), wf(25, 1e-18))

    def test_one_spread_from_peak(self):
        wf = pl.GaussianPulse(spread=4.0, delay=10.0)
        assert np.isclose(wf(14, 1e-18), math.exp(-0.5))

    def test_carrier_modulation(self):
        dt = 1e-16
        f = 1.0 / (8 * dt)  # eight steps per period
        wf = pl.GaussianPulse(spread=1e6, delay=0.0, frequency=f)
        assert np.isclose(wf(4, dt), -1.0, atol=1e-9)
        assert np.isclose(wf(2, dt), 0.0, atol=1e-9)

    def test_file_round_trip(self):
        wf = pl.GaussianPulse(amplitude=1.5, spread=6.0, delay=18.0, frequency=3.0e14)
        buf = StringIO()
        pl.writepulseparams_sub(buf, wf)
        buf.seek(0)
        assert pl.readpulseparams_sub(buf) == wf

    def test_truncated_file(self):
        with pytest.raises(ValueError):
            pl.readpulseparams_sub(StringIO("1.0\n8.0\n"))


class TestFDTDPulse:

    def test_initial_state(self):
        p = pl.FDTDPulse(_params())
        assert len(p) == 60
        assert np.all(p.E == 0.0) and np.all(p.H == 0.0)
        assert np.isclose(p.mur, (0.5 - 1.0) / (0.5 + 1.0))

    def test_hard_source(self):
        p = pl.FDTDPulse(_params())
        for t in range(31):
            p.electric_step(t)
            p.magnetic_step()
        # the last electric step imposed the waveform peak at the source
        assert p.E[pl.SOURCE_INDEX] == 1.0

    def test_pulse_travels_forward_at_courant_speed(self):
        S = 0.5
        p = pl.FDTDPulse(_params(Ny=120, courant=S))
        steps = 150
        for t in range(steps):
            p.electric_step(t)
            p.magnetic_step()
        peak = int(np.argmax(np.abs(p.E)))
        expected = pl.SOURCE_INDEX + S * (steps - 1 - 30)
        assert abs(peak - expected) <= 3

    def test_line_ends_absorb(self):
        p = pl.FDTDPulse(_params(Ny=60))
        for t in range(400):
            p.electric_step(t)
            p.magnetic_step()
        assert np.max(np.abs(p.E)) < 0.1
        assert np.all(np.isfinite(p.E))

    def test_fourier_tracks_spectrum(self):
        spectrum = Spectrum([SpectrumUnit(500.0), SpectrumUnit(600.0)])
        p = pl.FDTDPulse(_params(spectrum=spectrum))
        assert p.FourierE.sums.shape == (2, 60)
        p.E[:] = 1.0
        p.do_fourier_pulse(0)
        np.testing.assert_allclose(p.FourierE.transform(0), 1.0)

    def test_no_spectrum(self):
        p = pl.FDTDPulse(_params())
        p.do_fourier_pulse(0)
        assert p.FourierE.num_frequencies == 0

    def test_too_short_line(self):
        with pytest.raises(ValueError):
            pl.FDTDPulse(_params(Ny=2))
