# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Small signal stability: linearization of the dynamic model and eigenvalues of
the Jacobian reduced to the differential states

    Δẋ = fx Δx + fy Δy
     0 = gx Δx + gy Δy    ->    Δẋ = (fx - fy gy^-1 gx) Δx
"""
from typing import Tuple, Union, TYPE_CHECKING
import numpy as np
from DynaGridEngine.basic_structures import Vec, Mat, BoolVec, CxVec
from DynaGridEngine.exceptions import SingularAlgebraicJacobianError
from DynaGridEngine.Utils.NumericalMethods.autodiff import calc_dense_jacobian
from DynaGridEngine.Simulations.Rms.simulation_inputs import SimulationInputs
from DynaGridEngine.Simulations.Rms.system_model import evaluate
from DynaGridEngine.Simulations.SmallSignal.small_signal_results import SmallSignalResults

if TYPE_CHECKING:
    from DynaGridEngine.Simulations.Rms.simulation import Simulation


def get_differential_mask(inputs: SimulationInputs) -> BoolVec:
    """
    Every state but the bus voltages is differential, except the voltages of the voltage buses
    """
    mask = np.ones(inputs.variable_count, dtype=bool)
    mask[:2 * inputs.n_bus] = False
    mask[inputs.voltage_buses] = True
    mask[inputs.n_bus + inputs.voltage_buses] = True
    return mask


def compute_jacobian(inputs: SimulationInputs, x: Vec, t: float = 0.0) -> Mat:
    """
    Jacobian of the model at (x, t) with dx = 0.
    It is evaluated on its own buffers, the ones of the simulation are untouched.
    """
    local_inputs = inputs.spawn()
    return calc_dense_jacobian(func=evaluate, x=np.array(x, dtype=float), arg=(local_inputs, t), central=True)


def split_jacobian(jac: Mat, diff: BoolVec) -> Tuple[Mat, Mat, Mat, Mat]:
    """
    Partition the Jacobian
    :return: fx, fy, gx, gy
    """
    d = np.where(diff)[0]
    a = np.where(~diff)[0]
    fx = jac[np.ix_(d, d)]
    fy = jac[np.ix_(d, a)]
    gx = jac[np.ix_(a, d)]
    gy = jac[np.ix_(a, a)]
    return fx, fy, gx, gy


def reduce_jacobian(fx: Mat, fy: Mat, gx: Mat, gy: Mat) -> Mat:
    """
    Schur complement fx - fy gy^-1 gx
    :raise SingularAlgebraicJacobianError: when gy cannot be inverted
    """
    if gy.shape[0] == 0:
        return fx.copy()

    try:
        with np.errstate(divide='ignore', invalid='ignore'):
            cond = np.linalg.cond(gy)
    except np.linalg.LinAlgError:
        raise SingularAlgebraicJacobianError(rcond=0.0)

    if not np.isfinite(cond) or cond * np.finfo(float).eps > 1.0:
        raise SingularAlgebraicJacobianError(rcond=0.0 if not np.isfinite(cond) else 1.0 / cond)

    try:
        return fx - fy @ np.linalg.solve(gy, gx)
    except np.linalg.LinAlgError:
        raise SingularAlgebraicJacobianError(rcond=1.0 / cond)


def determine_stability(eigenvalues: CxVec, tol: float = 1e-6) -> bool:
    """
    Stable if no eigenvalue has a real part above the tolerance
    """
    return bool(np.all(eigenvalues.real <= tol))


def small_signal_analysis(sim: "Simulation", operating_point: Union[Vec, None] = None) -> SmallSignalResults:
    """
    Small signal analysis of a simulation
    :param sim: Simulation
    :param operating_point: state vector (the initial state if None)
    :return: SmallSignalResults
    """
    inputs = sim.inputs
    x = np.array(sim.x0 if operating_point is None else operating_point, dtype=float)

    jac = compute_jacobian(inputs, x, t=0.0)
    diff = get_differential_mask(inputs)
    fx, fy, gx, gy = split_jacobian(jac, diff)
    reduced = reduce_jacobian(fx, fy, gx, gy)

    eigenvalues, eigenvectors = np.linalg.eig(reduced)
    eigenvalues = eigenvalues.astype(complex)
    stable = determine_stability(eigenvalues, tol=sim.options.stability_tol)

    if len(inputs.sources) == 0:
        sim.logger.add_warning("There is no reference source: only the sign of the eigenvalue real parts "
                               "has been checked",
                               value=", ".join(f"{ev:.4g}" for ev in eigenvalues))

    state_names = [name for name, is_diff in zip(inputs.get_state_names(), diff) if is_diff]

    return SmallSignalResults(reduced_jacobian=reduced,
                              eigenvalues=eigenvalues,
                              eigenvectors=eigenvectors,
                              stable=stable,
                              operating_point=x,
                              state_names=state_names,
                              fx=fx, fy=fy, gx=gx, gy=gy)
