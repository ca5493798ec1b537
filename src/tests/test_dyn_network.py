# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
import pytest
from DynaGridEngine.Devices import PowerSystem, Bus
from DynaGridEngine.exceptions import SimulationBuildError
from DynaGridEngine.Simulations.Rms.network import get_ybus, current_balance, add_branch_to_ybus


def test_ybus_without_lines():
    """
    A system without lines gives an all zero admittance matrix of the bus count size
    """
    system = PowerSystem()
    system.add_bus(Bus(name='A', number=10))
    system.add_bus(Bus(name='B', number=20))
    system.add_bus(Bus(name='C', number=30))

    Ybus, lookup = get_ybus(system)

    assert Ybus.shape == (3, 3)
    assert Ybus.nnz == 0
    assert lookup == {10: 0, 20: 1, 30: 2}


def test_ybus_pi_model(omib_system):
    Ybus, lookup = get_ybus(omib_system)
    line = omib_system.lines[0]
    yff, yft, ytf, ytt = line.get_primitives()
    f = lookup[line.bus_from.number]
    t = lookup[line.bus_to.number]

    Y = Ybus.toarray()
    assert np.isclose(Y[f, f], yff)
    assert np.isclose(Y[f, t], yft)
    assert np.isclose(Y[t, f], ytf)
    assert np.isclose(Y[t, t], ytt)


def test_dynamic_line_is_taken_out(omib_builder):
    """
    The dynamic line is in the AC lines and it is subtracted afterwards
    """
    system = omib_builder(dynamic_line=True, b=0.02)
    Ybus, _ = get_ybus(system)
    assert np.allclose(Ybus.toarray(), 0.0)


def test_tripped_line_is_not_in_ybus(omib_system):
    omib_system.lines[0].active = False
    Ybus, _ = get_ybus(omib_system)
    assert np.allclose(Ybus.toarray(), 0.0)


def test_add_and_remove_branch(omib_system):
    Ybus, lookup = get_ybus(omib_system)
    line = omib_system.lines[0]
    Y2 = add_branch_to_ybus(Ybus, line, lookup, multiplier=2.0)
    Y3 = add_branch_to_ybus(Y2, line, lookup, multiplier=-2.0)
    assert np.allclose(Y2.toarray(), 3.0 * Ybus.toarray())
    assert np.allclose(Y3.toarray(), Ybus.toarray())


def test_repeated_bus_number():
    system = PowerSystem()
    system.add_bus(Bus(name='A', number=1))
    system.add_bus(Bus(name='B', number=1))
    with pytest.raises(SimulationBuildError):
        get_ybus(system)


def test_current_balance(omib_system):
    """
    The compiled kernel computes I - Ybus V split in real and imaginary parts
    """
    Ybus, _ = get_ybus(omib_system)
    V = np.array([1.02 * np.exp(0.1j), 0.98 + 0.01j])
    I = np.array([0.3 + 0.1j, -0.2j])

    out = np.zeros(4)
    current_balance(Ybus.indptr, Ybus.indices, Ybus.data,
                    V.real.copy(), V.imag.copy(), I.real.copy(), I.imag.copy(), out)

    expected = I - Ybus @ V
    assert np.allclose(out[:2], expected.real)
    assert np.allclose(out[2:], expected.imag)
