# tests/FDTD3D/conftest.py -- shared builders for engine tests
import pytest

from fdtdsim.core.indexbounds import IndexBounds
from fdtdsim.core.medium import MediumGrid
from fdtdsim.core.spectrum import Spectrum, SpectrumUnit
from fdtdsim.FDTD3D.pulse import GaussianPulse
from fdtdsim.FDTD3D.typeparams import SimulationParameters


@pytest.fixture
def make_params():
    """Factory for small vacuum-filled parameter sets."""

    def _make(N=10, num_steps=5, pml_length=0, courant=0.5, cell_size=1.0e-9,
              wavelengths=(500.0,), medium=None, waveform=None):
        shape = (N, N, N) if isinstance(N, int) else tuple(N)
        spectrum = Spectrum(SpectrumUnit(w) for w in wavelengths) if wavelengths else None
        return SimulationParameters(
            indices=IndexBounds.from_shape(shape),
            medium=medium if medium is not None else MediumGrid(shape),
            num_steps=num_steps,
            cell_size=cell_size,
            courant_number=courant,
            pml_length=pml_length,
            spectrum=spectrum,
            waveform=waveform if waveform is not None else GaussianPulse(spread=2.0, delay=4.0),
        )

    return _make
