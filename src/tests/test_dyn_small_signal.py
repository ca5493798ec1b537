# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
import pytest
from DynaGridEngine.exceptions import SingularAlgebraicJacobianError
from DynaGridEngine.Devices import Bus
from DynaGridEngine.Simulations import Simulation, SmallSignalDriver, RmsOptions
from DynaGridEngine.Simulations.SmallSignal import reduce_jacobian, determine_stability


def test_omib_is_stable(omib_system):
    sim = Simulation(omib_system, tspan=(0.0, 0.0))
    res = sim.small_signal_analysis()

    assert res.reduced_jacobian.shape == (2, 2)
    assert res.state_names == ['G1:delta', 'G1:omega']
    assert res.stable
    assert np.all(res.eigenvalues.real < 0)

    # electromechanical mode: damped oscillation
    assert np.all(res.frequencies > 0)
    assert np.all(res.damping_ratios > 0)
    assert np.allclose(res.eigenvalues.real, -2.0 / (4.0 * 3.0), atol=1e-4)


def test_undamped_omib_is_marginal(omib_builder):
    sim = Simulation(omib_builder(D=0.0), tspan=(0.0, 0.0))
    res = sim.small_signal_analysis()
    assert np.allclose(res.eigenvalues.real, 0.0, atol=1e-6)
    assert res.stable


def test_isolated_generator(isolated_system):
    """
    Without a reference source the rotor angle is free: there is a zero eigenvalue
    """
    sim = Simulation(isolated_system, tspan=(0.0, 0.0))
    assert sim.initialized
    res = sim.small_signal_analysis()

    real = np.sort(res.eigenvalues.real)
    assert abs(real[-1]) < 1e-6
    assert np.isclose(real[0], -2.0 / (2.0 * 3.0), atol=1e-4)
    assert res.stable
    assert sim.logger.warning_count() > 0


def test_analysis_does_not_touch_the_simulation(omib_system):
    sim = Simulation(omib_system, tspan=(0.0, 0.0))
    balance = sim.inputs.aux.I_balance.copy()
    x0 = sim.x0.copy()

    sim.small_signal_analysis()

    assert np.array_equal(sim.inputs.aux.I_balance, balance)
    assert np.array_equal(sim.x0, x0)


def test_reduce_jacobian():
    fx = np.array([[-1.0]])
    fy = np.array([[1.0]])
    gx = np.array([[1.0]])
    gy = np.array([[2.0]])
    assert np.allclose(reduce_jacobian(fx, fy, gx, gy), [[-1.5]])


def test_singular_algebraic_block():
    fx = -np.eye(2)
    fy = np.ones((2, 2))
    gx = np.ones((2, 2))
    gy = np.zeros((2, 2))
    with pytest.raises(SingularAlgebraicJacobianError):
        reduce_jacobian(fx, fy, gx, gy)


def test_floating_bus_is_singular(omib_system):
    """
    A bus without any connection has an empty algebraic row
    """
    omib_system.add_bus(Bus(name='Floating', number=3))
    sim = Simulation(omib_system, tspan=(0.0, 0.0), options=RmsOptions(initialize_simulation=False))
    with pytest.raises(SingularAlgebraicJacobianError):
        sim.small_signal_analysis()


def test_determine_stability():
    assert determine_stability(np.array([-1.0 + 2j, -1.0 - 2j, 0.0]))
    assert determine_stability(np.array([5e-7 + 0j]), tol=1e-6)
    assert not determine_stability(np.array([-1.0, 1e-3 + 0j]))


def test_modes_frame(omib_system):
    sim = Simulation(omib_system, tspan=(0.0, 0.0))
    res = sim.small_signal_analysis()
    df = res.to_df()
    assert len(df) == 2
    assert set(df['dominant state']) <= {'G1:delta', 'G1:omega'}

    pf = res.get_participation_df()
    assert np.allclose(pf.values.sum(axis=0), 1.0)


def test_small_signal_driver(omib_system):
    driver = SmallSignalDriver(omib_system)
    driver.run()
    assert driver.results is not None
    assert driver.results.stable


def test_eigenvalue_plot(omib_system):
    res = Simulation(omib_system, tspan=(0.0, 0.0)).small_signal_analysis()
    ax = res.plot()
    assert len(ax.collections) == 1
