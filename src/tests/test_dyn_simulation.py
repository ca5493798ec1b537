# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import os
import json
import numpy as np
import pytest
from DynaGridEngine.enumerations import SimulationStatus, DynamicIntegrationMethod
from DynaGridEngine.exceptions import SimulationBuildError, SimulationError
from DynaGridEngine.Devices import DynamicGenerator, Bus, SourceBusVoltageChange
from DynaGridEngine.Simulations import RmsOptions, Simulation, RmsSimulationDriver


def test_omib_initialization(omib_system):
    sim = Simulation(omib_system, tspan=(0.0, 1.0))
    assert sim.initialized
    assert sim.status == SimulationStatus.BuiltOk

    # the stored bus voltages are the power flow solution
    n = sim.inputs.n_bus
    V = sim.x0[:n] + 1j * sim.x0[n:2 * n]
    assert np.allclose(V, [1.02 * np.exp(0.1j), 1.0], atol=1e-6)

    # the input system is not modified
    assert omib_system.sources[0].P == 0.0
    assert sim.system.sources[0].P != 0.0


def test_dynamic_line_initialization(omib_builder):
    sim = Simulation(omib_builder(dynamic_line=True), tspan=(0.0, 1.0))
    assert sim.initialized
    il = sim.x0[sim.inputs.branch_ix_range[0]]
    assert abs(complex(il[0], il[1])) > 0.5


@pytest.mark.parametrize("method", [DynamicIntegrationMethod.Trapezoid, DynamicIntegrationMethod.BackEuler])
def test_equilibrium_is_kept(omib_system, method):
    options = RmsOptions(integration_method=method, time_step=0.01)
    sim = Simulation(omib_system, tspan=(0.0, 1.0), options=options)
    status = sim.run()

    assert status == SimulationStatus.SimulationSuccess
    res = sim.results
    assert res.success
    assert np.isclose(res.time[-1], 1.0)
    assert np.max(np.abs(res.values - sim.x0)) < 1e-8
    assert not sim.reset


def test_inverter_equilibrium(inverter_system):
    options = RmsOptions(time_step=0.005)
    sim = Simulation(inverter_system, tspan=(0.0, 0.1), options=options)
    assert sim.initialized
    assert sim.run() == SimulationStatus.SimulationSuccess
    assert np.max(np.abs(sim.results.values - sim.x0)) < 1e-6


def test_no_initialization(omib_system):
    options = RmsOptions(initialize_simulation=False)
    sim = Simulation(omib_system, tspan=(0.0, 1.0), options=options)
    assert not sim.initialized
    assert np.allclose(sim.x0[:2], 1.0)


def test_initial_guess(omib_system):
    guess = Simulation(omib_system, tspan=(0.0, 0.0)).x0

    options = RmsOptions(initialize_simulation=False, initial_guess=guess)
    sim = Simulation(omib_system, tspan=(0.0, 1.0), options=options)
    assert np.array_equal(sim.x0, guess)


def test_wrong_initial_guess(omib_system):
    options = RmsOptions(initial_guess=np.ones(3))
    sim = Simulation(omib_system, tspan=(0.0, 1.0), options=options)
    assert not sim.initialized
    assert sim.status == SimulationStatus.InitializationFailed
    assert sim.logger.warning_count() > 0


def test_malformed_systems(omib_system):
    orphan = DynamicGenerator(name='Orphan', bus=Bus(name='Nowhere', number=99))
    omib_system.generators.append(orphan)
    with pytest.raises(SimulationBuildError):
        Simulation(omib_system)

    omib_system.generators.remove(orphan)
    omib_system.generators[0].base_power = 0.0
    with pytest.raises(SimulationError):
        Simulation(omib_system)


def test_reset_after_perturbations(omib_system):
    pert = SourceBusVoltageChange(time=0.05, source=omib_system.sources[0], signal='V_ref', value=1.02)
    sim = Simulation(omib_system, tspan=(0.0, 0.1), perturbations=[pert], options=RmsOptions(time_step=0.01))
    assert sim.run() == SimulationStatus.SimulationSuccess
    assert sim.reset

    assert sim.run() == SimulationStatus.SimulationReset
    assert sim.logger.error_count() >= 1
    assert sim.small_signal_analysis() is None


def test_json_snapshots(omib_system, tmp_path):
    options = RmsOptions(system_to_file=True)
    sim = Simulation(omib_system, tspan=(0.0, 0.1), options=options, simulation_folder=str(tmp_path))

    for file_name in ['input_system.json', 'initialized_system.json']:
        path = os.path.join(str(tmp_path), file_name)
        assert os.path.exists(path)
        with open(path, 'r') as f:
            data = json.load(f)
        assert len(data['x0']) == sim.get_variable_count()


def test_results_frame(omib_system):
    sim = Simulation(omib_system, tspan=(0.0, 0.1), options=RmsOptions(time_step=0.02))
    sim.run()
    df = sim.results.to_df()
    assert list(df.columns) == sim.get_state_names()
    assert df.index.name == 'time (s)'
    assert len(df) == sim.results.n_points == 6


def test_driver(omib_system):
    driver = RmsSimulationDriver(omib_system, tspan=(0.0, 0.1), options=RmsOptions(time_step=0.01))
    driver.run()
    assert driver.results.success
    assert driver.logger.error_count() == 0


def test_driver_reports_malformed_systems(omib_system):
    omib_system.generators[0].base_power = -1.0
    driver = RmsSimulationDriver(omib_system, tspan=(0.0, 0.1))
    driver.run()
    assert not driver.results.success
    assert driver.logger.error_count() == 1


def test_results_export(omib_system, tmp_path):
    pert = SourceBusVoltageChange(time=0.05, source=omib_system.sources[0], signal='V_ref', value=1.02)
    sim = Simulation(omib_system, tspan=(0.0, 0.1), perturbations=[pert], options=RmsOptions(time_step=0.01))
    sim.run()

    path = os.path.join(str(tmp_path), 'states.csv')
    sim.results.save_csv(path)
    assert os.path.exists(path)

    ax = sim.results.plot(names=['G1:omega'])
    assert len(ax.get_lines()) >= 2  # the state and the event marker


@pytest.mark.parametrize("b", [0.001, 0.04, 0.2])
def test_voltage_bus_initialization(omib_builder, b):
    """
    The charging of a dynamic line turns its ends into differential voltage buses
    """
    sim = Simulation(omib_builder(dynamic_line=True, b=b), tspan=(0.0, 0.1), options=RmsOptions(time_step=0.01))
    assert len(sim.inputs.voltage_buses) == 2
    assert sim.initialized
    assert sim.status == SimulationStatus.BuiltOk
    assert "The initialization did not converge" not in sim.logger.messages()

    n = sim.inputs.n_bus
    V = sim.x0[:n] + 1j * sim.x0[n:2 * n]
    assert np.allclose(V, [1.02 * np.exp(0.1j), 1.0], atol=1e-6)

    assert sim.run() == SimulationStatus.SimulationSuccess
    assert np.max(np.abs(sim.results.values - sim.x0)) < 1e-6
