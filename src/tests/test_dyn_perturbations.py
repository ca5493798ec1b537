# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
import pytest
from DynaGridEngine.enumerations import PerturbationStatus, SimulationStatus
from DynaGridEngine.exceptions import SimulationBuildError
from DynaGridEngine.basic_structures import Logger
from DynaGridEngine.Devices import (Line, Bus, Load, BranchTrip, BranchImpedanceChange, ControlReferenceChange,
                                    LoadChange, SourceBusVoltageChange)
from DynaGridEngine.Simulations.Rms.simulation_inputs import SimulationInputs
from DynaGridEngine.Simulations.Rms.perturbation_engine import build_perturbations
from DynaGridEngine.Simulations.Rms.rms_options import RmsOptions
from DynaGridEngine.Simulations.Rms.simulation import Simulation


def test_no_perturbations(omib_system):
    inputs = SimulationInputs(omib_system)
    callbacks, tstops = build_perturbations(omib_system, [], inputs)
    assert len(callbacks) == 0
    assert tstops == [0.0]
    assert not callbacks.any_fired()


def test_stop_times_are_sorted_and_unique(omib_system):
    inputs = SimulationInputs(omib_system)
    line = omib_system.lines[0]
    source = omib_system.sources[0]
    perts = [BranchImpedanceChange(time=2.0, branch=line, multiplier=1.5),
             SourceBusVoltageChange(time=1.0, source=source, signal='V_ref', value=1.01),
             BranchTrip(time=2.0, branch=line)]

    callbacks, tstops = build_perturbations(omib_system, perts, inputs)

    assert tstops == [1.0, 2.0]
    assert len(callbacks) == 3
    assert all(cb.status == PerturbationStatus.Armed for cb in callbacks)


def test_callback_fires_at_its_time(omib_system):
    inputs = SimulationInputs(omib_system)
    logger = Logger()
    pert = BranchTrip(time=0.5, branch=omib_system.lines[0])
    callbacks, _ = build_perturbations(omib_system, [pert], inputs, logger)
    cb = callbacks[0]
    x = np.zeros(inputs.variable_count)

    assert not callbacks.apply(x, 0.4, None)
    assert cb.status == PerturbationStatus.Armed
    assert omib_system.lines[0].active

    assert callbacks.apply(x, 0.5, None)
    assert cb.fired
    assert not omib_system.lines[0].active
    assert callbacks.any_fired()
    assert logger.info_count() == 1

    # the trip is structural: the admittance matrix has been rebuilt
    assert np.allclose(inputs.Ybus.toarray(), 0.0)


def test_unknown_device_fails_the_build(omib_system):
    stranger = Line(bus_from=Bus(name='X', number=7), bus_to=Bus(name='Y', number=8), name='Stranger', x=0.1)
    inputs = SimulationInputs(omib_system)
    with pytest.raises(SimulationBuildError):
        build_perturbations(omib_system, [BranchTrip(time=1.0, branch=stranger)], inputs)


def test_wrong_device_class_fails_the_build(omib_system):
    inputs = SimulationInputs(omib_system)
    gen = omib_system.generators[0]
    pert = LoadChange(time=1.0, load=gen, P=10.0)
    with pytest.raises(SimulationBuildError):
        build_perturbations(omib_system, [pert], inputs)


def test_unknown_signal(omib_system):
    with pytest.raises(SimulationBuildError):
        ControlReferenceChange(time=1.0, device=omib_system.generators[0], signal='Vf', value=1.0)

    with pytest.raises(SimulationBuildError):
        SourceBusVoltageChange(time=1.0, source=omib_system.sources[0], signal='P', value=1.0)


def test_impedance_change_is_idempotent(omib_system):
    line = omib_system.lines[0]
    pert = BranchImpedanceChange(time=1.0, branch=line, multiplier=2.0)
    pert.apply(line)
    pert.apply(line)
    assert np.isclose(line.R, 0.02)
    assert np.isclose(line.X, 0.2)


def test_load_change(isolated_system):
    load = isolated_system.loads[0]
    LoadChange(time=1.0, load=load, P=60.0).apply(load)
    assert load.P == 60.0
    assert load.Q == 10.0


def test_source_voltage_step(omib_system):
    """
    The step is taken exactly at its time, with a pre and a post event point
    """
    source = omib_system.sources[0]
    pert = SourceBusVoltageChange(time=5.0, source=source, signal='V_ref', value=1.05)
    options = RmsOptions(time_step=0.05)
    sim = Simulation(omib_system, tspan=(0.0, 5.5), perturbations=[pert], options=options)

    assert 5.0 in sim.tstops
    assert sim.initialized

    status = sim.run()
    assert status == SimulationStatus.SimulationSuccess

    res = sim.results
    assert res.event_times == [5.0]

    idx = np.where(res.time == 5.0)[0]
    assert len(idx) == 2

    v = res.voltage_module[:, 1]
    assert np.allclose(v[:idx[0] + 1], v[0], atol=1e-8)
    assert abs(v[idx[1]] - v[idx[0]]) > 1e-2
    assert sim.reset


def test_mechanical_power_step(omib_system):
    gen = omib_system.generators[0]
    pert = ControlReferenceChange(time=5.0, device=gen, signal='P_ref', value=0.9)
    options = RmsOptions(time_step=0.05)
    sim = Simulation(omib_system, tspan=(0.0, 5.5), perturbations=[pert], options=options)
    assert sim.run() == SimulationStatus.SimulationSuccess

    res = sim.results
    omega = res.get_state('G1:omega')
    before = res.time <= 5.0
    assert np.allclose(omega[before], 1.0, atol=1e-9)
    assert abs(omega[-1] - 1.0) > 1e-4
    assert omega[-1] < 1.0


def test_branch_trip_isolates_the_generator(omib_builder):
    """
    Tripping the only line of a dynamic line case leaves its current at zero
    """
    system = omib_builder(dynamic_line=True)
    line = system.dynamic_lines[0]
    pert = BranchTrip(time=0.1, branch=line)
    options = RmsOptions(time_step=0.01)
    sim = Simulation(system, tspan=(0.0, 0.2), perturbations=[pert], options=options)
    sim.run()

    res = sim.results
    il = res.get_state(f'{line.name}:Il_R')
    assert not np.isclose(il[0], 0.0)
    after = res.time > 0.1
    assert np.allclose(il[after], il[after][0])
