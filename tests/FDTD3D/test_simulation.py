"""
Test suite for simulation.py (time loop, TF/SF injection, extinction output).
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from fdtdsim.core.constants import twopi
from fdtdsim.core.iterators import ParallelTraversal
from fdtdsim.core.medium import Dielectric, MediumGrid
from fdtdsim.FDTD3D import extinction as ext
from fdtdsim.FDTD3D.extinction import ClausiusMossotti, SimulationResult
from fdtdsim.FDTD3D.monitors import EnergyRecorder, FieldProbe
from fdtdsim.FDTD3D.pulse import GaussianPulse
from fdtdsim.FDTD3D.simulation import (
    FDTDSimulation,
    SimulationState,
    SimulationStateError,
)
from fdtdsim.FDTD3D.typeparams import ConfigurationError


def _single_cell_medium(N=10, eps=2.0 + 1.0j, cell=(5, 5, 5)):
    medium = MediumGrid((N, N, N))
    medium.set_cell(*cell, Dielectric(eps))
    return medium


# ---------------------------------------------------------------------------
# End-to-end runs
# ---------------------------------------------------------------------------

class TestCalculate:

    def test_vacuum_run(self, make_params):
        params = make_params(N=10, num_steps=5)
        sim = FDTDSimulation()
        result = sim.calculate(params)

        assert list(result) == list(params.spectrum)
        entry = result[params.spectrum[0]]
        assert isinstance(entry, SimulationResult)
        assert entry.cross_section == 0.0
        assert entry.efficiency is None
        assert sim.state is SimulationState.COMPLETED

    def test_no_spectrum_gives_empty_result(self, make_params):
        params = make_params(wavelengths=())
        assert FDTDSimulation().calculate(params) == {}

    def test_single_body_cell_matches_formula(self, make_params):
        eps = 2.0 + 1.0j
        params = make_params(
            N=10, num_steps=20, medium=_single_cell_medium(eps=eps),
            waveform=GaussianPulse(spread=2.0, delay=3.0),
        )
        sim = FDTDSimulation()
        result = sim.calculate(params)
        unit = params.spectrum[0]

        e_f = sim.fields.FourierE.transform(0)[5, 5, 5]
        total = (ClausiusMossotti(eps) * np.sum(e_f * e_f)).imag
        k = twopi / 500e-9
        dx = params.cell_size

        entry = result[unit]
        assert sim.calculate_area(params) == 1
        assert entry.cross_section != 0.0
        assert np.isclose(entry.cross_section, total * dx * k * dx ** 2, rtol=1e-10, atol=0)
        assert np.isclose(entry.efficiency, total * dx * k, rtol=1e-10, atol=0)
        assert entry.incident_intensity > 0.0

    def test_results_follow_spectrum_order(self, make_params):
        params = make_params(wavelengths=(700.0, 400.0, 550.0), medium=_single_cell_medium())
        result = FDTDSimulation().calculate(params)
        assert [u.value for u in result] == [700.0, 400.0, 550.0]

    def test_invalid_parameters_rejected_before_run(self, make_params):
        with pytest.raises(ConfigurationError):
            make_params(courant=0.9)

    def test_rerun_resets_state(self, make_params):
        params = make_params(num_steps=8, medium=_single_cell_medium())
        sim = FDTDSimulation()
        first = sim.calculate(params)
        second = sim.calculate(params)
        unit = params.spectrum[0]
        assert first[unit] == second[unit]


# ---------------------------------------------------------------------------
# Total-field / scattered-field injection
# ---------------------------------------------------------------------------

class TestTotalFieldScatteredField:

    def test_no_leakage_in_vacuum(self, make_params):
        params = make_params(
            N=20, num_steps=40, pml_length=2, wavelengths=(),
            waveform=GaussianPulse(spread=3.0, delay=10.0),
        )
        sim = FDTDSimulation()
        sim.calculate(params)

        E = sim.fields.E
        box = params.pulse_indices()
        a, b = box.lower[0], box.upper[0]
        assert (a, b) == (4, 16)

        inside = np.zeros(E.shape[:3], dtype=bool)
        inside[a:b + 1, a:b + 1, a:b + 1] = True

        assert np.max(np.abs(E[inside])) > 1e-3
        assert np.max(np.abs(E[~inside])) < 1e-10

    def test_incident_wave_is_ez(self, make_params):
        params = make_params(
            N=20, num_steps=30, pml_length=2, wavelengths=(),
            waveform=GaussianPulse(spread=3.0, delay=10.0),
        )
        sim = FDTDSimulation()
        sim.calculate(params)
        centre = sim.fields.E[8:13, 4:17, 8:13]
        assert np.max(np.abs(centre[..., 2])) > 1e-3
        assert np.max(np.abs(centre[..., 0])) < 1e-10


# ---------------------------------------------------------------------------
# Observers and lifecycle
# ---------------------------------------------------------------------------

class TestObservers:

    def test_events_in_step_order(self, make_params):
        params = make_params(num_steps=6)
        sim = FDTDSimulation()
        calls = []
        sim.add_observer(lambda event: calls.append(("observer", event.time)))
        sim.calculate(params, on_step=lambda event: calls.append(("on_step", event.time)))

        expected = []
        for t in range(6):
            expected += [("observer", t), ("on_step", t)]
        assert calls == expected

    def test_event_contents(self, make_params):
        params = make_params(num_steps=2)
        sim = FDTDSimulation()
        events = []
        sim.calculate(params, on_step=events.append)
        assert events[-1].parameters is params
        assert events[-1].fields is sim.fields
        assert events[-1].pulse is sim.pulse
        assert sim.state is SimulationState.COMPLETED

    def test_observer_error_propagates(self, make_params):
        params = make_params(num_steps=5)
        sim = FDTDSimulation()

        def failing(event):
            if event.time == 2:
                raise RuntimeError("observer failure")

        sim.add_observer(failing)
        with pytest.raises(RuntimeError, match="observer failure"):
            sim.calculate(params)
        assert sim.state is SimulationState.RUNNING

    def test_remove_observer(self, make_params):
        sim = FDTDSimulation()
        calls = []
        observer = calls.append
        sim.add_observer(observer)
        sim.remove_observer(observer)
        sim.calculate(make_params(num_steps=3))
        assert calls == []

    def test_energy_recorder(self, make_params):
        params = make_params(
            N=20, num_steps=60, pml_length=3, wavelengths=(),
            waveform=GaussianPulse(spread=3.0, delay=10.0),
        )
        recorder = EnergyRecorder()
        FDTDSimulation().calculate(params, on_step=recorder)

        energies = np.array(recorder.energies)
        assert recorder.times == list(range(60))
        assert np.all(np.isfinite(energies))
        assert np.all(energies >= 0.0)
        assert recorder.peak() > 0.0
        assert energies[-1] <= recorder.peak()

    def test_field_probe(self, make_params):
        params = make_params(num_steps=15, wavelengths=(),
                             waveform=GaussianPulse(spread=2.0, delay=3.0))
        probe = FieldProbe((5, 5, 5), component=2, field="E")
        FDTDSimulation().calculate(params, on_step=probe)
        assert len(probe.values) == 15
        assert max(abs(v) for v in probe.values) > 0.0

    def test_field_probe_rejects_unknown_field(self):
        with pytest.raises(ValueError):
            FieldProbe((0, 0, 0), field="B")


class TestLifecycle:

    def test_initial_state(self):
        assert FDTDSimulation().state is SimulationState.UNINITIALIZED

    def test_step_before_init_raises(self, make_params):
        with pytest.raises(SimulationStateError):
            FDTDSimulation().calc_fields(0, make_params())

    def test_manual_stepping_enters_running(self, make_params):
        params = make_params(num_steps=3)
        sim = FDTDSimulation()
        sim.init_params(params)
        assert sim.state is SimulationState.INITIALIZED
        for time in range(params.num_steps):
            sim.calc_fields(time, params)
            assert sim.state is SimulationState.RUNNING

    def test_extinction_before_run_raises(self, make_params):
        with pytest.raises(SimulationStateError):
            FDTDSimulation().calc_extinction(make_params())

    def test_extinction_without_spectrum_before_run(self, make_params):
        assert FDTDSimulation().calc_extinction(make_params(wavelengths=())) == {}

    def test_init_params(self, make_params):
        params = make_params(N=(8, 10, 12), pml_length=1)
        sim = FDTDSimulation()
        sim.init_params(params)
        assert sim.state is SimulationState.INITIALIZED
        assert sim.fields.E.shape == (8, 10, 12, 3)
        assert len(sim.pulse) == 10
        assert sim.pml.length == 1


# ---------------------------------------------------------------------------
# Projected-area cache
# ---------------------------------------------------------------------------

class TestAreaCache:

    @pytest.fixture
    def counted(self, monkeypatch):
        calls = []
        wrapped = ext.CrossSectionArea

        def counting(*args, **kwargs):
            calls.append(1)
            return wrapped(*args, **kwargs)

        monkeypatch.setattr(ext, "CrossSectionArea", counting)
        return calls

    def test_area_computed_once_per_run(self, make_params, counted):
        params = make_params(wavelengths=(400.0, 500.0, 600.0), medium=_single_cell_medium())
        sim = FDTDSimulation()
        sim.calculate(params)
        sim.calc_extinction(params)
        assert len(counted) == 1

        sim.calculate(params)
        assert len(counted) == 2

    def test_concurrent_area_requests(self, make_params, counted):
        params = make_params(medium=_single_cell_medium())
        sim = FDTDSimulation()
        sim.init_params(params)
        with ThreadPoolExecutor(max_workers=4) as pool:
            areas = list(pool.map(lambda _: sim.calculate_area(params), range(8)))
        assert areas == [1] * 8
        assert len(counted) == 1


# ---------------------------------------------------------------------------
# Traversal strategies
# ---------------------------------------------------------------------------

class TestParallelTraversal:

    def test_matches_sequential(self, make_params):
        def params():
            return make_params(
                N=14, num_steps=25, pml_length=2, wavelengths=(450.0, 600.0),
                medium=_single_cell_medium(N=14, cell=(7, 7, 7)),
                waveform=GaussianPulse(spread=3.0, delay=8.0),
            )

        sequential = FDTDSimulation()
        seq_result = sequential.calculate(params())

        with ParallelTraversal(workers=3) as traversal:
            parallel = FDTDSimulation(traversal)
            par_result = parallel.calculate(params())

        np.testing.assert_allclose(parallel.fields.E, sequential.fields.E, rtol=1e-12, atol=1e-15)
        np.testing.assert_allclose(parallel.fields.H, sequential.fields.H, rtol=1e-12, atol=1e-15)
        for (u_seq, r_seq), (u_par, r_par) in zip(seq_result.items(), par_result.items()):
            assert u_seq == u_par
            assert np.isclose(r_par.cross_section, r_seq.cross_section, rtol=1e-10, atol=0)
            assert np.isclose(r_par.efficiency, r_seq.efficiency, rtol=1e-10, atol=0)
