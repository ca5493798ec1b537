# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Network admittance model used by the residual evaluator
"""
from typing import Dict, Tuple, List, Union
import numpy as np
import numba as nb
import scipy.sparse as sp
from DynaGridEngine.basic_structures import Vec, CxVec, IntVec, CscMat
from DynaGridEngine.exceptions import SimulationBuildError
from DynaGridEngine.Devices.power_system import PowerSystem
from DynaGridEngine.Devices.Branches.line import Line, DynamicLine


def get_bus_lookup(system: PowerSystem) -> Dict[int, int]:
    """
    Map the bus numbers to their row / column in the admittance matrix
    :param system: PowerSystem
    :return: {bus number: index}
    """
    lookup = dict()
    for i, bus in enumerate(system.buses):
        if bus.number in lookup:
            raise SimulationBuildError(f"Bus number {bus.number} is repeated ({bus.name})")
        lookup[bus.number] = i
    return lookup


def get_bus_index(bus, lookup: Dict[int, int], device_name: str = '') -> int:
    """
    Position of a bus in the admittance matrix
    :param bus: Bus
    :param lookup: {bus number: index}
    :param device_name: name of the device that is connected to the bus (for the error message)
    :return: index
    """
    if bus is None:
        raise SimulationBuildError(f"{device_name} is not connected to any bus")
    idx = lookup.get(bus.number, None)
    if idx is None:
        raise SimulationBuildError(f"{device_name} is connected to the bus {bus.name} ({bus.number}) "
                                   f"that is not part of the system")
    return idx


def compute_connectivity(lines: List[Line], lookup: Dict[int, int], n_bus: int) -> Tuple[CscMat, CscMat]:
    """
    Branch-bus connectivity matrices
    :param lines: list of lines
    :param lookup: {bus number: index}
    :param n_bus: number of buses
    :return: Cf, Ct
    """
    m = len(lines)
    f = np.empty(m, dtype=int)
    t = np.empty(m, dtype=int)
    for k, elm in enumerate(lines):
        f[k] = get_bus_index(elm.bus_from, lookup, elm.name)
        t[k] = get_bus_index(elm.bus_to, lookup, elm.name)

    rows = np.arange(m)
    ones = np.ones(m)
    Cf = sp.csc_matrix((ones, (rows, f)), shape=(m, n_bus))
    Ct = sp.csc_matrix((ones, (rows, t)), shape=(m, n_bus))
    return Cf, Ct


def compute_ybus(lines: List[Line], lookup: Dict[int, int], n_bus: int) -> CscMat:
    """
    Admittance matrix of a set of pi-model branches
    :param lines: list of lines
    :param lookup: {bus number: index}
    :param n_bus: number of buses
    :return: Ybus (CSC)
    """
    if len(lines) == 0:
        return sp.csc_matrix((n_bus, n_bus), dtype=complex)

    Cf, Ct = compute_connectivity(lines, lookup, n_bus)

    R = np.array([elm.R for elm in lines])
    X = np.array([elm.X for elm in lines])
    B = np.array([elm.B for elm in lines])

    ys = 1.0 / (R + 1.0j * X + 1e-20)  # series admittance
    bc2 = 1.0j * B / 2.0  # shunt admittance

    Yff = ys + bc2
    Yft = -ys
    Ytf = -ys
    Ytt = ys + bc2

    # compose the matrices
    Yf = sp.diags(Yff) @ Cf + sp.diags(Yft) @ Ct
    Yt = sp.diags(Ytf) @ Cf + sp.diags(Ytt) @ Ct
    Ybus = Cf.T @ Yf + Ct.T @ Yt

    return sp.csc_matrix(Ybus, dtype=complex)


def add_branch_to_ybus(Ybus: CscMat, branch: Union[Line, DynamicLine], lookup: Dict[int, int],
                       multiplier: float = 1.0) -> CscMat:
    """
    Add the pi model of a branch to an admittance matrix
    :param Ybus: admittance matrix
    :param branch: Line or DynamicLine
    :param lookup: {bus number: index}
    :param multiplier: 1 to add the branch, -1 to remove it
    :return: new admittance matrix (CSC)
    """
    line = branch.line if isinstance(branch, DynamicLine) else branch
    f = get_bus_index(line.bus_from, lookup, line.name)
    t = get_bus_index(line.bus_to, lookup, line.name)
    yff, yft, ytf, ytt = line.get_primitives()

    n = Ybus.shape[0]
    Yb = sp.csc_matrix((np.array([yff, yft, ytf, ytt]) * multiplier,
                        (np.array([f, f, t, t]), np.array([f, t, f, t]))),
                       shape=(n, n), dtype=complex)
    return sp.csc_matrix(Ybus + Yb)


def get_ybus(system: PowerSystem) -> Tuple[CscMat, Dict[int, int]]:
    """
    Admittance matrix used by the residual evaluator.
    All the active AC lines are included and then the dynamic ones are taken out,
    since their currents are states of the simulation.
    :param system: PowerSystem
    :return: Ybus (CSC), {bus number: index}
    """
    lookup = get_bus_lookup(system)
    n_bus = len(system.buses)

    active_lines = [elm for elm in system.lines if elm.active]
    Ybus = compute_ybus(active_lines, lookup, n_bus)

    for elm in system.dynamic_lines:
        if elm.active:
            Ybus = add_branch_to_ybus(Ybus, elm, lookup, multiplier=-1.0)

    Ybus.sum_duplicates()
    Ybus.sort_indices()

    return Ybus, lookup


@nb.njit(cache=True)
def current_balance(Yp: IntVec, Yi: IntVec, Yx: CxVec, Vr: Vec, Vi: Vec, Ir: Vec, Ii: Vec, balance: Vec) -> None:
    """
    balance = [Re(I - Ybus V), Im(I - Ybus V)]
    :param Yp: Ybus CSC column pointers
    :param Yi: Ybus CSC row indices
    :param Yx: Ybus CSC data
    :param Vr: real part of the bus voltages
    :param Vi: imaginary part of the bus voltages
    :param Ir: real part of the injected currents
    :param Ii: imaginary part of the injected currents
    :param balance: output vector of length 2n
    """
    n = len(Vr)
    for i in range(n):
        balance[i] = Ir[i]
        balance[n + i] = Ii[i]

    for j in range(n):
        vr = Vr[j]
        vi = Vi[j]
        for k in range(Yp[j], Yp[j + 1]):
            i = Yi[k]
            g = Yx[k].real
            b = Yx[k].imag
            balance[i] -= g * vr - b * vi
            balance[n + i] -= g * vi + b * vr
