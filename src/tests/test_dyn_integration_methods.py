# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
import pytest
from DynaGridEngine.enumerations import SimulationStatus, DynamicIntegrationMethod
from DynaGridEngine.Devices import AVRSimple, ControlReferenceChange
from DynaGridEngine.Simulations import RmsOptions, Simulation
from DynaGridEngine.Simulations.Rms.numerical.integration_methods import BackEuler, Trapezoid


class AlgebraicProblem:
    """
    dx/dt = -x, 0 = g(y) with a user supplied g
    """

    def __init__(self, g):
        self.g = g
        self.differential_vars = np.array([True, False])

    def f(self, x, t):
        return np.array([-x[0], self.g(x[1])])


@pytest.mark.parametrize("method", [DynamicIntegrationMethod.Trapezoid, DynamicIntegrationMethod.BackEuler])
@pytest.mark.parametrize("time_step", [1e-3, 1e-1])
def test_slow_states_move(omib_builder, method, time_step):
    """
    dVf/dt = Kv (V_ref - Vt) is a ramp of 9e-6 per second that both step sizes must follow
    """
    system = omib_builder()
    gen = system.generators[0]
    gen.avr = AVRSimple(Kv=1e-3)
    gen.update_states()

    # the initialization sets V_ref to the terminal voltage, 1.02
    pert = ControlReferenceChange(time=0.0, device=gen, signal='V_ref', value=1.029)
    options = RmsOptions(integration_method=method, time_step=time_step)
    sim = Simulation(system, tspan=(0.0, 2.0), perturbations=[pert], options=options)
    assert sim.initialized
    assert sim.run() == SimulationStatus.SimulationSuccess

    vf = sim.results.get_state('G1:Vf')
    assert np.isclose(vf[-1] - vf[0], 1.8e-5, rtol=1e-3)


def test_algebraic_solution_after_events():
    integrator = BackEuler(tol=1e-10)
    problem = AlgebraicProblem(g=lambda y: y * y - 4.0)

    x, ok = integrator.solve_algebraic(np.array([1.0, 1.0]), 0.0, problem)
    assert ok
    assert np.allclose(x, [1.0, 2.0])


def test_non_finite_algebraic_residual_is_not_consistent():
    integrator = Trapezoid()
    problem = AlgebraicProblem(g=lambda y: np.nan)

    x, ok = integrator.solve_algebraic(np.array([1.0, 1.0]), 0.0, problem)
    assert not ok
