# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
from DynaGridEngine.Simulations.Rms.simulation_inputs import SimulationInputs
from DynaGridEngine.Simulations.Rms.system_model import system_model, dae_residual, evaluate
from DynaGridEngine.Simulations.Rms.simulation import Simulation


def test_evaluation_is_deterministic(omib_system):
    sim = Simulation(omib_system, tspan=(0.0, 0.0))
    x = sim.x0.copy()
    x[2 * sim.inputs.n_bus] += 0.01  # move the rotor angle away from equilibrium

    out1 = evaluate(x, sim.inputs)
    out2 = evaluate(x, sim.inputs)
    assert np.array_equal(out1, out2)


def test_initial_state_is_an_equilibrium(omib_system, inverter_system):
    for system in [omib_system, inverter_system]:
        sim = Simulation(system, tspan=(0.0, 0.0))
        assert sim.initialized
        assert np.max(np.abs(evaluate(sim.x0, sim.inputs))) < 1e-8


def test_residual_subtracts_differential_derivatives(omib_system):
    sim = Simulation(omib_system, tspan=(0.0, 0.0))
    inputs = sim.inputs
    nv = inputs.variable_count
    dx = np.linspace(1.0, 2.0, nv)

    f = np.zeros(nv)
    system_model(f, sim.x0, inputs, 0.0)

    res = np.zeros(nv)
    dae_residual(res, dx, sim.x0, inputs, 0.0)

    diff = inputs.differential_vars
    assert np.allclose(res[diff], f[diff] - dx[diff])
    assert np.allclose(res[~diff], f[~diff])


def test_voltage_bus_flags(omib_builder):
    """
    The ends of a dynamic line with charging become differential
    """
    system = omib_builder(dynamic_line=True, b=0.04)
    inputs = SimulationInputs(system)
    n = inputs.n_bus

    assert list(inputs.voltage_buses) == [0, 1]
    assert np.allclose(inputs.voltage_bus_capacitance, [0.02, 0.02])
    assert inputs.differential_vars[:2 * n].all()

    plain = SimulationInputs(omib_builder(dynamic_line=True, b=0.0))
    assert len(plain.voltage_buses) == 0
    assert not plain.differential_vars[:2 * n].any()
    assert plain.differential_vars[2 * n:].all()


def test_tripped_dynamic_line_has_no_dynamics(omib_builder):
    system = omib_builder(dynamic_line=True)
    inputs = SimulationInputs(system)
    line = system.dynamic_lines[0]
    line.line.active = False

    x = np.ones(inputs.variable_count)
    out = evaluate(x, inputs)
    assert np.allclose(out[inputs.branch_ix_range[0]], 0.0)


def test_spawned_inputs_do_not_share_buffers(omib_system):
    sim = Simulation(omib_system, tspan=(0.0, 0.0))
    inputs = sim.inputs
    before = inputs.aux.I_balance.copy()

    other = inputs.spawn()
    assert other.aux is not inputs.aux
    assert other.Ybus is inputs.Ybus

    x = sim.x0.copy()
    x[:inputs.n_bus] *= 1.1
    evaluate(x, other)

    assert np.array_equal(inputs.aux.I_balance, before)


def test_state_names(omib_system):
    inputs = SimulationInputs(omib_system)
    names = inputs.get_state_names()
    assert names == ['Vr_B1', 'Vr_B2', 'Vi_B1', 'Vi_B2', 'G1:delta', 'G1:omega']
    gen = omib_system.generators[0]
    assert inputs.get_state_index(gen, 'omega') == 5


def test_sizes_and_lookups(omib_builder):
    system = omib_builder(dynamic_line=True)
    sim = Simulation(system, tspan=(0.0, 0.0))

    assert sim.inputs.get_bus_count() == 2
    assert sim.problem.n_vars == sim.get_variable_count() == 2 * 2 + 2 + 2

    line = system.dynamic_lines[0]
    copied = sim.system.get_device_by_idtag(line.idtag)
    assert copied is not line
    assert copied.idtag == line.idtag
    assert sim.system.get_device_by_idtag(line.line.idtag).bus_from.name == 'B1'
    assert sim.system.get_device_by_idtag('not an idtag') is None


def test_bus_injections_close_the_network_balance(omib_system):
    sim = Simulation(omib_system, tspan=(0.0, 0.0))
    inputs = sim.inputs
    n = inputs.n_bus
    evaluate(sim.x0, inputs)

    V = sim.x0[:n] + 1j * sim.x0[n:2 * n]
    assert np.allclose(inputs.aux.I_bus, inputs.Ybus @ V, atol=1e-8)
    assert np.abs(inputs.aux.I_bus).max() > 0.1
