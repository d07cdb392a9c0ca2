"""
3-D FDTD simulation engine.

Drives the leapfrog time loop on a Yee grid and extracts absorption
spectra of the body embedded in the medium grid.

Each time step runs, in this order (every stage is a full sweep of the
grid through the traversal strategy, and the next stage starts only
after the previous sweep has finished):

    1. D update      curl H -> D through the PML factors, incident E step,
                     TF/SF correction of D on the j and k faces
    2. E update      E = medium.solve(D)
    3. H update      curl E -> H through the PML factors, incident H step,
                     TF/SF correction of H on the i and j faces
    4. Fourier       running transforms of E, H and the incident line
    5. Observers     synchronous notification, in step order

Lifecycle:

    UNINITIALIZED -> INITIALIZED -> RUNNING -> COMPLETED

``calculate`` performs the whole lifecycle in one call.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..core.coordinates import CurlBackward, CurlForward, X, Y, Z
from ..core.indexbounds import I_AXIS, J_AXIS, K_AXIS, IndexBounds
from ..core.iterators import SequentialTraversal
from ..core.logger import get_logger
from . import extinction as ext
from .fields import FDTDField
from .pml import PmlBoundary
from .pulse import FDTDPulse

log = get_logger(__name__)


class SimulationState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RUNNING = "running"
    COMPLETED = "completed"


class SimulationStateError(RuntimeError):
    """Operation not allowed in the current lifecycle state."""


@dataclass(frozen=True)
class TimeStepEvent:
    """Snapshot passed to observers after every completed time step.

    Observers must treat ``fields`` and ``pulse`` as read-only.
    """
    parameters: Any
    time: int
    fields: FDTDField
    pulse: FDTDPulse


class FDTDSimulation:
    """
    FDTD engine with PML boundaries and TF/SF plane-wave injection.

    Parameters
    ----------
    iterator : Traversal, optional
        Grid traversal strategy (default ``SequentialTraversal()``).
    """

    def __init__(self, iterator=None):
        self.iterator = iterator if iterator is not None else SequentialTraversal()
        self.fields: Optional[FDTDField] = None
        self.pml: Optional[PmlBoundary] = None
        self.pulse: Optional[FDTDPulse] = None
        self.state = SimulationState.UNINITIALIZED
        self._observers = []
        self._cross_section_area: Optional[int] = None
        self._area_lock = threading.Lock()

    # -- observers -----------------------------------------------------------
    def add_observer(self, callback):
        """Register ``callback(event)`` to run after every time step."""
        self._observers.append(callback)

    def remove_observer(self, callback):
        self._observers.remove(callback)

    def _notify(self, event, on_step):
        for callback in self._observers:
            callback(event)
        if on_step is not None:
            on_step(event)

    # -- lifecycle -----------------------------------------------------------
    def calculate(self, parameters, on_step=None):
        """Run all time steps and return the absorption spectrum.

        Parameters
        ----------
        parameters : SimulationParameters
            Validated run configuration.
        on_step : callable, optional
            Extra observer for this run only.

        Returns
        -------
        dict
            ``{SpectrumUnit: SimulationResult}`` in spectrum order; empty
            when no spectrum was requested.
        """
        self.init_params(parameters)
        log.info(
            "FDTD run: grid %s, %d steps, PML %d, Courant %.3f, %d frequencies",
            parameters.grid_shape, parameters.num_steps, parameters.pml_length,
            parameters.courant_number, len(parameters.spectrum or ()),
        )

        for time in range(parameters.num_steps):
            self.calc_fields(time, parameters)
            log.step("step %d / %d done", time + 1, parameters.num_steps)
            self._notify(
                TimeStepEvent(parameters=parameters, time=time, fields=self.fields, pulse=self.pulse),
                on_step,
            )

        result = self.calc_extinction(parameters)
        self.state = SimulationState.COMPLETED
        log.info("FDTD run finished: %d spectral points", len(result))
        return result

    def init_params(self, parameters):
        """Allocate fields, PML and incident pulse for *parameters*."""
        omegas = parameters.spectrum.omegas() if parameters.is_spectrum_calculated else ()
        self.fields = FDTDField(parameters.indices, omegas, parameters.time_step, self.iterator)
        self.pulse = FDTDPulse(parameters)
        self.pml = PmlBoundary(parameters.pml_length, parameters.indices)
        with self._area_lock:
            self._cross_section_area = None
        self.state = SimulationState.INITIALIZED

    # -- one time step -------------------------------------------------------
    def calc_fields(self, time, parameters):
        """Advance D, E and H by one step and accumulate the transforms."""
        if self.state is SimulationState.UNINITIALIZED:
            raise SimulationStateError("init_params must be called before stepping")
        self.state = SimulationState.RUNNING
        pulse_index = parameters.pulse_indices()

        self._calculate_d_field(parameters, pulse_index, time)

        interior = parameters.indices.shift_lower(1).shift_upper(1)
        fields = self.fields
        medium = parameters.medium

        def solve_e(si, sj, sk):
            index = (si, sj, sk)
            fields.E[index] = medium.solve(fields.D[index], index)

        self.iterator.for_each(interior, solve_e)

        self._calculate_h_field(parameters, pulse_index)

        fields.do_fourier_field(time)
        self.pulse.do_fourier_pulse(time)

    def _calculate_d_field(self, parameters, pulse_index, time):
        fields, pml = self.fields, self.pml
        courant = parameters.courant_number

        def update_d(si, sj, sk):
            index = (si, sj, sk)
            curl_h = CurlBackward(fields.H, si, sj, sk)
            fields.IntegralD[index] += curl_h
            coefs = pml.electric(si, sj, sk)
            fields.D[index] = coefs.update(fields.D[index], curl_h, fields.IntegralD[index], courant)

        self.iterator.for_each(parameters.indices.shift_lower(1), update_d)

        self.pulse.electric_step(time)

        self._add_pulse_to_dy(pulse_index, courant)
        self._add_pulse_to_dz(pulse_index, courant)

    def _calculate_h_field(self, parameters, pulse_index):
        fields, pml = self.fields, self.pml
        courant = parameters.courant_number

        def update_h(si, sj, sk):
            index = (si, sj, sk)
            curl_e = -CurlForward(fields.E, si, sj, sk)
            fields.IntegralH[index] += curl_e
            coefs = pml.magnetic(si, sj, sk)
            fields.H[index] = coefs.update(fields.H[index], curl_e, fields.IntegralH[index], courant)

        self.iterator.for_each(parameters.indices.shift_upper(1), update_h)

        self.pulse.magnetic_step()

        self._add_pulse_to_hx(pulse_index, courant)
        self._add_pulse_to_hy(pulse_index, courant)

    # -- TF/SF injection -----------------------------------------------------
    # Faces of the total-field box are a = lower and b = upper on every axis,
    # both belonging to the box.
    @staticmethod
    def _box(pulse_index):
        return IndexBounds(pulse_index.lower, tuple(u + 1 for u in pulse_index.upper))

    def _add_pulse_to_dy(self, pulse_index, courant):
        a, b = pulse_index.lower[K_AXIS], pulse_index.upper[K_AXIS]
        box = self._box(pulse_index)
        faces = box.with_axis(J_AXIS, box.lower[J_AXIS], box.upper[J_AXIS] - 1)
        D, h_inc = self.fields.D, self.pulse.H

        def kernel(si, sj):
            correction = courant * h_inc[sj]
            D[si, sj, a, Y] -= correction
            D[si, sj, b + 1, Y] += correction

        self.iterator.for_except_k(faces, kernel)

    def _add_pulse_to_dz(self, pulse_index, courant):
        a, b = pulse_index.lower[J_AXIS], pulse_index.upper[J_AXIS]
        D, h_inc = self.fields.D, self.pulse.H
        lower = courant * h_inc[a - 1]
        upper = courant * h_inc[b]

        def kernel(si, sk):
            D[si, a, sk, Z] += lower
            D[si, b, sk, Z] -= upper

        self.iterator.for_except_j(self._box(pulse_index), kernel)

    def _add_pulse_to_hx(self, pulse_index, courant):
        a, b = pulse_index.lower[J_AXIS], pulse_index.upper[J_AXIS]
        H, e_inc = self.fields.H, self.pulse.E
        lower = courant * e_inc[a]
        upper = courant * e_inc[b]

        def kernel(si, sk):
            H[si, a - 1, sk, X] += lower
            H[si, b, sk, X] -= upper

        self.iterator.for_except_j(self._box(pulse_index), kernel)

    def _add_pulse_to_hy(self, pulse_index, courant):
        a, b = pulse_index.lower[I_AXIS], pulse_index.upper[I_AXIS]
        H, e_inc = self.fields.H, self.pulse.E

        def kernel(sj, sk):
            correction = courant * e_inc[sj][:, None]
            H[a - 1, sj, sk, Y] -= correction
            H[b, sj, sk, Y] += correction

        self.iterator.for_except_i(self._box(pulse_index), kernel)

    # -- spectrum ------------------------------------------------------------
    def calc_extinction(self, parameters):
        """Absorption results for every requested frequency.

        Returns an empty dict when no spectrum was requested.
        """
        if not parameters.is_spectrum_calculated:
            return {}
        if self.fields is None:
            raise SimulationStateError("no fields to analyse; run calculate() first")
        return parameters.spectrum.to_simulation_result(
            lambda frequency: self._calculate_extinction(frequency, parameters)
        )

    def _calculate_extinction(self, frequency, parameters):
        n = parameters.spectrum.index(frequency)
        centre_j = parameters.indices.center()[J_AXIS]
        incident = ext.IncidentIntensity(self.pulse, n, centre_j)

        total = ext.ExtinctionSum(
            self.fields, parameters.medium, n, frequency, parameters.indices, self.iterator
        )
        area = self.calculate_area(parameters)
        if area == 0:
            log.warning("no body cells on the centre plane; efficiency at %s is undefined", frequency)

        result = ext.ExtinctionResult(total, frequency, parameters.cell_size, area, incident)
        log.debug("extinction at %s: %r", frequency, result)
        return result

    def calculate_area(self, parameters):
        """Projected body area in cells, computed once per run."""
        with self._area_lock:
            if self._cross_section_area is None:
                self._cross_section_area = ext.CrossSectionArea(
                    parameters.medium, parameters.indices, self.iterator
                )
            return self._cross_section_area
