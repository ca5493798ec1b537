# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Steady state initialization of a dynamic simulation
"""
from typing import Dict, Tuple, Union
import numpy as np
from DynaGridEngine.basic_structures import Vec, Logger
from DynaGridEngine.Utils.NumericalMethods.common import ConvexFunctionResult, ConvexMethodResult
from DynaGridEngine.Utils.NumericalMethods.autodiff import calc_autodiff_jacobian
from DynaGridEngine.Utils.NumericalMethods.newton_raphson import newton_raphson
from DynaGridEngine.Simulations.Rms.simulation_inputs import SimulationInputs
from DynaGridEngine.Simulations.Rms.system_model import evaluate
from DynaGridEngine.Simulations.Rms.device_index import CONTROL_REFS, INNER_VARS


def flat_start(inputs: SimulationInputs) -> Vec:
    """
    State vector with all the bus voltages at 1 p.u. and every other state at zero
    """
    x0 = np.zeros(inputs.variable_count)
    x0[:inputs.n_bus] = 1.0
    return x0


def bus_voltages_from_system(inputs: SimulationInputs, x: Vec) -> None:
    """
    Write the bus voltage phasors of the power system into the state vector
    """
    n = inputs.n_bus
    for bus in inputs.system.buses:
        i = inputs.lookup[bus.number]
        V = bus.voltage
        x[i] = V.real
        x[n + i] = V.imag


def initialize_devices(inputs: SimulationInputs, x: Vec, logger: Logger) -> None:
    """
    Analytical steady state of the dynamic devices for the bus voltages in x.
    The dynamic injections deliver their P and Q set points.
    :param inputs: SimulationInputs
    :param x: state vector with the bus voltages set (modified in place)
    :param logger: Logger
    """
    n = inputs.n_bus

    inner_vars_list = list()
    for k, elm in enumerate(inputs.dynamic_injections):
        b = inputs.injection_bus_ix[k]
        ctx = inputs.contexts[k]
        V = complex(x[b], x[n + b])
        S = complex(elm.P, elm.Q) / inputs.Sbase
        I = np.conj(S / V) / ctx.to_system_base

        inner_vars = np.zeros(elm.n_inner_vars)
        elm.set_terminal_voltage(inner_vars, V.real, V.imag)
        elm.set_terminal_current(inner_vars, I)

        device_states: Dict[str, float] = dict()
        refs = elm.ext[CONTROL_REFS]
        for component in elm.get_initialization_order():
            component.initialize(device_states, inner_vars, refs, ctx)

        for state, i in zip(elm.states, inputs.injection_ix_range[k]):
            if state in device_states:
                x[i] = device_states[state]
            else:
                logger.add_warning("State not initialized", device=elm.name, device_property=state)

        elm.ext[INNER_VARS] = inner_vars
        inner_vars_list.append(inner_vars)

    inputs.set_inner_vars(inner_vars_list)

    for k, elm in enumerate(inputs.dynamic_lines):
        if elm.active:
            f = inputs.branch_f[k]
            t = inputs.branch_t[k]
            I = elm.steady_state_current(complex(x[f], x[n + f]), complex(x[t], x[n + t]), inputs.omega_sys)
            x[inputs.branch_ix_range[k]] = [I.real, I.imag]


def initialize_sources(inputs: SimulationInputs, x: Vec) -> None:
    """
    Place the internal voltage of the sources so that they close the current balance of their buses
    :param inputs: SimulationInputs
    :param x: state vector
    """
    if len(inputs.sources) == 0:
        return

    n = inputs.n_bus
    evaluate(x, inputs)
    mismatch = inputs.aux.I_balance[:n] + 1j * inputs.aux.I_balance[n:]

    # the capacitance of the voltage buses is not part of the admittance matrix
    V = x[:n] + 1j * x[n:2 * n]
    mismatch[inputs.voltage_buses] -= 1j * inputs.omega_sys * inputs.voltage_bus_capacitance * V[inputs.voltage_buses]

    active = [k for k, elm in enumerate(inputs.sources) if elm.active]
    n_per_bus = np.bincount(inputs.source_bus_ix[active], minlength=n)

    for k in active:
        elm = inputs.sources[k]
        b = inputs.source_bus_ix[k]
        I0 = elm.current_injection(V[b].real, V[b].imag)
        elm.set_operating_point(V=V[b], I=I0 - mismatch[b] / n_per_bus[b], Sbase=inputs.Sbase)


def steady_state_residual(x: Vec, inputs: SimulationInputs) -> Vec:
    """
    f(x) with the rows of the voltage buses brought back to currents: c/Ωb dV/dt.
    The model scales those rows by Ωb/c.
    """
    f = evaluate(x, inputs)
    vb = inputs.voltage_buses
    if len(vb):
        scale = inputs.voltage_bus_capacitance / inputs.Omega_b
        f[vb] *= scale
        f[inputs.n_bus + vb] *= scale
    return f


def steady_state_function(x: Vec, calc_jacobian: bool, inputs: SimulationInputs) -> ConvexFunctionResult:
    """
    f(x) = 0 at the steady state
    """
    f = steady_state_residual(x, inputs)
    J = calc_autodiff_jacobian(func=steady_state_residual, x=x, arg=(inputs,), central=True) if calc_jacobian else None
    return ConvexFunctionResult(f=f, J=J)


def initialize_simulation(inputs: SimulationInputs,
                          tol: float = 1e-9,
                          max_iter: int = 30,
                          initial_guess: Union[Vec, None] = None,
                          logger: Union[Logger, None] = None) -> Tuple[Vec, bool, ConvexMethodResult]:
    """
    Find a consistent initial point: analytical initialization of the devices
    from the bus voltages of the system, followed by Newton-Raphson on the whole model.
    When an initial guess is given, Newton-Raphson starts from it directly.
    :param inputs: SimulationInputs
    :param tol: tolerance
    :param max_iter: maximum number of Newton-Raphson iterations
    :param initial_guess: full state vector to start from (optional)
    :param logger: Logger
    :return: initial state, converged?, Newton-Raphson result
    """
    if logger is None:
        logger = Logger()

    if initial_guess is not None:
        if len(initial_guess) != inputs.variable_count:
            logger.add_error("Wrong initial guess size", value=len(initial_guess),
                             expected_value=inputs.variable_count)
            x0 = flat_start(inputs)
            return x0, False, ConvexMethodResult(x=x0, error=np.inf, converged=False, iterations=0,
                                                 elapsed=0.0, error_evolution=np.zeros(0))
        x0 = np.array(initial_guess, dtype=float)
    else:
        x0 = flat_start(inputs)
        bus_voltages_from_system(inputs, x0)
        initialize_devices(inputs, x0, logger)
        initialize_sources(inputs, x0)

    res = newton_raphson(func=steady_state_function,
                         func_args=(inputs,),
                         x0=x0,
                         tol=tol,
                         max_iter=max_iter,
                         logger=logger)

    if not res.converged:
        logger.add_warning("The initialization did not converge", value=res.error, expected_value=tol)

    return res.x, res.converged, res
