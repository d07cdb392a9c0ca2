"""FDTD3D sub-package: 3-D finite-difference time-domain engine."""

# Import modules themselves (allows: from fdtdsim.FDTD3D import pml)
from . import fourier
from . import pulse
from . import typeparams
from . import fields
from . import pml
from . import extinction
from . import monitors
from . import simulation

from .extinction import SimulationResult
from .simulation import FDTDSimulation, SimulationState, TimeStepEvent
from .typeparams import ConfigurationError, SimulationParameters

__all__ = [
    "fourier",
    "pulse",
    "typeparams",
    "fields",
    "pml",
    "extinction",
    "monitors",
    "simulation",
    "ConfigurationError",
    "FDTDSimulation",
    "SimulationParameters",
    "SimulationResult",
    "SimulationState",
    "TimeStepEvent",
]
