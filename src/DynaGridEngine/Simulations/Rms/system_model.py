# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Residual / derivative function of the dynamic simulation
"""
import numpy as np
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.Simulations.Rms.simulation_inputs import SimulationInputs
from DynaGridEngine.Simulations.Rms.network import current_balance
from DynaGridEngine.Simulations.Rms.device_index import CONTROL_REFS


def system_model(output: Vec, x: Vec, inputs: SimulationInputs, t: float) -> None:
    """
    Evaluate the right hand side of the DAE.

    output[:2n]  current balance of every bus (real parts, then imaginary parts),
                 or the voltage derivatives for the voltage buses
    output[2n:]  derivatives of the dynamic injections and then of the dynamic lines

    :param output: output vector (written in place)
    :param x: global state vector
    :param inputs: SimulationInputs (its buffers are modified)
    :param t: time (s), the model is autonomous
    """
    aux = inputs.aux
    n = inputs.n_bus
    aux.reset()

    V_r = x[:n]
    V_i = x[n:2 * n]
    I_r = aux.I_injections_r
    I_i = aux.I_injections_i

    # static injections
    for k, elm in enumerate(inputs.loads):
        if elm.active:
            b = inputs.load_bus_ix[k]
            I = elm.current_injection(V_r[b], V_i[b], inputs.load_V0[k], inputs.Sbase)
            I_r[b] += I.real
            I_i[b] += I.imag

    for k, elm in enumerate(inputs.sources):
        if elm.active:
            b = inputs.source_bus_ix[k]
            I = elm.current_injection(V_r[b], V_i[b])
            I_r[b] += I.real
            I_i[b] += I.imag

    # dynamic injections: the sub-models run in the order given by the device
    for k, elm in enumerate(inputs.dynamic_injections):
        b = inputs.injection_bus_ix[k]
        states = x[inputs.injection_ix_range[k]]
        ode = aux.injection_ode[inputs.injection_ode_range[k]]
        inner_vars = aux.inner_vars_new[k]
        refs = elm.ext[CONTROL_REFS]
        ctx = inputs.contexts[k]

        elm.set_terminal_voltage(inner_vars, V_r[b], V_i[b])

        for component, local_ix, port_ix in inputs.chains[k]:
            ode[local_ix] = component.ode(states[local_ix], states[port_ix], inner_vars, refs, ctx)

        aux.injection_ode[inputs.injection_ode_range[k]] = ode

        I = elm.get_terminal_current(inner_vars) * ctx.to_system_base
        I_r[b] += I.real
        I_i[b] += I.imag

    # dynamic lines
    offset = 0
    for k, elm in enumerate(inputs.dynamic_lines):
        if elm.active:
            f = inputs.branch_f[k]
            t_ = inputs.branch_t[k]
            il = x[inputs.branch_ix_range[k]]
            aux.branches_ode[offset:offset + elm.n_states] = elm.ode(il,
                                                                     complex(V_r[f], V_i[f]),
                                                                     complex(V_r[t_], V_i[t_]),
                                                                     inputs.omega_sys,
                                                                     inputs.Omega_b)
            I_r[f] -= il[0]
            I_i[f] -= il[1]
            I_r[t_] += il[0]
            I_i[t_] += il[1]
        offset += elm.n_states

    # net injection of every bus, dynamic line currents included
    aux.I_bus[:] = I_r + 1j * I_i

    # network
    Y = inputs.Ybus
    current_balance(Y.indptr, Y.indices, Y.data, V_r, V_i, I_r, I_i, aux.I_balance)
    output[:2 * n] = aux.I_balance

    # voltage buses: c/Ωb dV/dt = I_balance - jωcV
    if len(inputs.voltage_buses):
        vb = inputs.voltage_buses
        c = inputs.voltage_bus_capacitance
        w = inputs.omega_sys
        output[vb] = inputs.Omega_b / c * (aux.I_balance[vb] + w * c * V_i[vb])
        output[n + vb] = inputs.Omega_b / c * (aux.I_balance[n + vb] - w * c * V_r[vb])

    ni = inputs.n_inj_states
    output[2 * n:2 * n + ni] = aux.injection_ode
    output[2 * n + ni:] = aux.branches_ode

    aux.commit()


def dae_residual(output: Vec, dx: Vec, x: Vec, inputs: SimulationInputs, t: float) -> None:
    """
    Implicit form of the DAE: F(dx, x, t) = f(x, t) - M dx
    where M is the diagonal mask of the differential variables
    :param output: output vector (written in place)
    :param dx: time derivatives of the states
    :param x: global state vector
    :param inputs: SimulationInputs
    :param t: time (s)
    """
    system_model(output, x, inputs, t)
    output -= np.where(inputs.differential_vars, dx, 0.0)


def evaluate(x: Vec, inputs: SimulationInputs, t: float = 0.0) -> Vec:
    """
    Allocating wrapper of system_model
    :param x: global state vector
    :param inputs: SimulationInputs
    :param t: time (s)
    :return: derivatives / residuals vector
    """
    output = np.zeros(inputs.variable_count)
    system_model(output, x, inputs, t)
    return output
