"""
Simulation parameter structure for FDTD runs.

``SimulationParameters`` is the immutable configuration of one run.  It is
validated on construction, so a malformed configuration raises
``ConfigurationError`` before any field array is allocated or any time
step is taken.

Parameter files use one value per line with an optional trailing comment
(``!`` or ``:``), e.g.::

    40      : Nx
    40      : Ny
    40      : Nz
    0.5     : Courant number
    5.0E-09 : cell size (m)
    8       : PML length (cells)
    500     : number of time steps

The medium grid and the spectrum are not part of the file; they are
passed to the reader.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..core.constants import COURANT_LIMIT_3D, c0
from ..core.indexbounds import IndexBounds
from ..core.logger import get_logger
from ..core.medium import MediumGrid
from ..core.paramfile import read_int, read_value, write_value
from ..core.spectrum import Spectrum
from .pulse import GaussianPulse

log = get_logger(__name__)

# Cells between the PML and the total-field/scattered-field boundary
PULSE_SHIFT = 2


class ConfigurationError(ValueError):
    """Invalid simulation parameters."""


@dataclass(frozen=True)
class SimulationParameters:
    """
    Configuration of one FDTD run.

    Attributes
    ----------
    indices : IndexBounds
        Full grid bounds; the lower corner must be ``(0, 0, 0)``.
    medium : MediumGrid
        Per-cell medium lookup, shaped like ``indices``.
    num_steps : int
        Number of time steps.
    cell_size : float
        Edge length of one cubic cell (m).
    courant_number : float
        ``c0 * dt / dx``; must lie in ``(0, 1/sqrt(3)]``.
    pml_length : int
        Absorbing layer thickness in cells.
    spectrum : Spectrum, optional
        Spectral points at which absorption is extracted.
    waveform : GaussianPulse
        Temporal shape of the incident pulse.
    explicit_time_step : float, optional
        Time step (s); derived from the Courant number when omitted.
    """
    indices: IndexBounds
    medium: MediumGrid
    num_steps: int
    cell_size: float = 1.0e-9
    courant_number: float = 0.5
    pml_length: int = 0
    spectrum: Optional[Spectrum] = None
    waveform: GaussianPulse = field(default_factory=GaussianPulse)
    explicit_time_step: Optional[float] = None

    def __post_init__(self):
        bounds = self.indices
        if not isinstance(bounds, IndexBounds):
            bounds = IndexBounds.from_shape(bounds)
            object.__setattr__(self, "indices", bounds)
        if self.spectrum is not None and not isinstance(self.spectrum, Spectrum):
            object.__setattr__(self, "spectrum", Spectrum(self.spectrum))
        self._validate()

    def _validate(self):
        bounds = self.indices
        if bounds.lower != (0, 0, 0):
            raise ConfigurationError(f"grid must start at (0, 0, 0), got {bounds.lower}")
        if min(bounds.upper) <= 0:
            raise ConfigurationError(f"grid must be non-empty, got shape {bounds.upper}")
        if self.num_steps <= 0:
            raise ConfigurationError(f"number of steps must be positive, got {self.num_steps}")
        if not self.cell_size > 0.0:
            raise ConfigurationError(f"cell size must be positive, got {self.cell_size}")
        if not 0.0 < self.courant_number <= COURANT_LIMIT_3D + 1e-12:
            raise ConfigurationError(
                f"Courant number {self.courant_number} outside the stable range "
                f"(0, {COURANT_LIMIT_3D:.6f}]"
            )
        if self.pml_length < 0:
            raise ConfigurationError(f"PML length must be non-negative, got {self.pml_length}")
        smallest = min(bounds.upper)
        if 2 * self.pml_length > smallest:
            raise ConfigurationError(
                f"PML length {self.pml_length} exceeds half the smallest grid "
                f"dimension ({smallest})"
            )
        if self.pulse_indices().is_empty():
            raise ConfigurationError(
                f"grid {bounds.upper} leaves no room for the scattering region inside "
                f"a PML of {self.pml_length} cells"
            )
        if tuple(self.medium.shape) != tuple(bounds.upper):
            raise ConfigurationError(
                f"medium shape {self.medium.shape} does not match grid {bounds.upper}"
            )
        if self.explicit_time_step is not None and not self.explicit_time_step > 0.0:
            raise ConfigurationError(
                f"time step must be positive, got {self.explicit_time_step}"
            )

    # -- derived quantities ---------------------------------------------------
    @property
    def time_step(self):
        """Time step (s)."""
        if self.explicit_time_step is not None:
            return self.explicit_time_step
        return CourantTimeStep(self.cell_size, self.courant_number)

    @property
    def is_spectrum_calculated(self):
        return bool(self.spectrum)

    @property
    def grid_shape(self):
        return self.indices.upper

    def pulse_indices(self):
        """Bounds whose corners are the total-field/scattered-field faces."""
        shift = self.pml_length + PULSE_SHIFT
        return self.indices.shift_lower(shift).shift_upper(shift)


# ---------------------------------------------------------------------------
# Parameter files
# ---------------------------------------------------------------------------
def readsimparams_sub(fh, medium=None, spectrum=None, waveform=None):
    """Read simulation parameters from an open file handle.

    Expected file format (one value per line, optional trailing comments)::

        40        ! Nx
        40        ! Ny
        40        ! Nz
        0.5       ! Courant number
        5.0e-9    ! cell size (m)
        8         ! PML length
        500       ! number of steps

    Parameters
    ----------
    fh : file-like
        Readable text stream positioned at the first parameter line.
    medium : MediumGrid, optional
        Medium grid; a vacuum grid of the read shape is created when omitted.
    spectrum : Spectrum, optional
        Spectral points of interest.
    waveform : GaussianPulse, optional
        Incident pulse shape.

    Returns
    -------
    SimulationParameters
    """
    shape = (read_int(fh), read_int(fh), read_int(fh))
    courant = read_value(fh)
    cell_size = read_value(fh)
    pml_length = read_int(fh)
    num_steps = read_int(fh)

    if medium is None:
        medium = MediumGrid(shape)
    return SimulationParameters(
        indices=IndexBounds.from_shape(shape),
        medium=medium,
        num_steps=num_steps,
        cell_size=cell_size,
        courant_number=courant,
        pml_length=pml_length,
        spectrum=spectrum,
        waveform=waveform if waveform is not None else GaussianPulse(),
    )


def ReadSimParams(filename, medium=None, spectrum=None, waveform=None):
    """Read simulation parameters from a named file."""
    try:
        with open(filename, "r") as fh:
            return readsimparams_sub(fh, medium, spectrum, waveform)
    except FileNotFoundError:
        log.warning("Cannot find simulation parameter file, %s", filename)
        raise


def writesimparams_sub(fh, params):
    """Write simulation parameters to an open file handle."""
    Nx, Ny, Nz = (int(n) for n in params.grid_shape)
    write_value(fh, Nx, "Number of cells along x.")
    write_value(fh, Ny, "Number of cells along y (propagation axis).")
    write_value(fh, Nz, "Number of cells along z.")
    write_value(fh, float(params.courant_number), "The Courant number c0*dt/dx.")
    write_value(fh, float(params.cell_size), "The cell size. (m)")
    write_value(fh, int(params.pml_length), "The PML thickness. (cells)")
    write_value(fh, int(params.num_steps), "The number of time steps.")


def WriteSimParams(filename, params):
    """Write simulation parameters to a named file."""
    with open(filename, "w") as fh:
        writesimparams_sub(fh, params)


def CourantTimeStep(cell_size, courant_number=0.5):
    """Time step (s) for a given cell size (m) and Courant number."""
    return courant_number * cell_size / c0
