# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
from DynaGridEngine.enumerations import ComponentCategory, SimulationStatus
from DynaGridEngine.Devices import (OneDOneQMachine, AVRSimple, TGTypeII, PSSSimple, ControlRefs,
                                    SourceBusVoltageChange)
from DynaGridEngine.Simulations import RmsOptions, Simulation
from DynaGridEngine.Simulations.Rms.system_model import evaluate


def full_generator(system, Kv: float = 10.0, K_omega: float = 1.0):
    """
    Replace the classical generator of the system by the two-axis machine with all its controls
    """
    gen = system.generators[0]
    gen.machine = OneDOneQMachine()
    gen.avr = AVRSimple(Kv=Kv)
    gen.prime_mover = TGTypeII()
    gen.pss = PSSSimple(K_omega=K_omega)
    gen.update_states()
    return system


def record_calls(inputs, calls):
    """
    Make every sub-model append its category to calls when it is evaluated
    """
    for chain in inputs.chains:
        for component, local_ix, port_ix in chain:

            def recorder(*args, component=component, ode=component.ode):
                calls.append(component.category)
                return ode(*args)

            component.ode = recorder


def test_generator_evaluation_order(omib_builder):
    sim = Simulation(full_generator(omib_builder()), tspan=(0.0, 0.0))
    calls = list()
    record_calls(sim.inputs, calls)
    evaluate(sim.x0, sim.inputs)

    assert calls == [ComponentCategory.PrimeMover,
                     ComponentCategory.PSS,
                     ComponentCategory.AVR,
                     ComponentCategory.Machine,
                     ComponentCategory.Shaft]


def test_inverter_evaluation_order(inverter_system):
    sim = Simulation(inverter_system, tspan=(0.0, 0.0))
    calls = list()
    record_calls(sim.inputs, calls)
    evaluate(sim.x0, sim.inputs)

    assert calls == [ComponentCategory.DCSource,
                     ComponentCategory.FrequencyEstimator,
                     ComponentCategory.OuterControl,
                     ComponentCategory.InnerControl,
                     ComponentCategory.Converter,
                     ComponentCategory.Filter]


def test_stabilizer_signal_is_used_in_the_same_evaluation(omib_builder):
    """
    The voltage regulator sees the stabilizer output of the current speed, not the previous one
    """
    sim = Simulation(full_generator(omib_builder(), Kv=10.0, K_omega=10.0), tspan=(0.0, 0.0))
    assert sim.initialized
    gen = sim.system.generators[0]
    inputs = sim.inputs.spawn()
    n = inputs.n_bus

    x = sim.x0.copy()
    x[inputs.get_state_index(gen, 'omega')] += 0.01
    out = evaluate(x, inputs)

    V_ref = gen.ext['control_refs'][ControlRefs.V_REF]
    Vt = abs(complex(x[0], x[n]))
    expected = 10.0 * (V_ref + 10.0 * 0.01 - Vt)
    assert np.isclose(out[inputs.get_state_index(gen, 'Vf')], expected)
    assert abs(expected) > 0.5


def test_full_generator_lifecycle(omib_builder):
    system = full_generator(omib_builder())
    pert = SourceBusVoltageChange(time=0.1, source=system.sources[0], signal='V_ref', value=0.99)
    sim = Simulation(system, tspan=(0.0, 1.0), perturbations=[pert], options=RmsOptions(time_step=0.01))

    assert sim.initialized
    assert np.max(np.abs(evaluate(sim.x0, sim.inputs.spawn()))) < 1e-8

    res = sim.small_signal_analysis()
    assert res.state_names == ['G1:eq_p', 'G1:ed_p', 'G1:delta', 'G1:omega', 'G1:Vf', 'G1:xg']
    assert res.reduced_jacobian.shape == (6, 6)
    assert np.isfinite(res.eigenvalues).all()

    assert sim.run() == SimulationStatus.SimulationSuccess
    before = sim.results.time < 0.1
    for name in ['G1:Vf', 'G1:omega', 'G1:xg']:
        values = sim.results.get_state(name)
        assert np.allclose(values[before], values[0], atol=1e-8)
        assert np.ptp(values) > 1e-6
