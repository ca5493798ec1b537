# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import time
import numpy as np
from typing import Callable, Any, Union
from scipy.sparse.linalg import spsolve
from DynaGridEngine.basic_structures import Vec, Logger
from DynaGridEngine.Utils.NumericalMethods.common import (ConvexMethodResult, ConvexFunctionResult,
                                                          check_function_and_args)


def newton_raphson(func: Callable[[Vec, bool, Any], ConvexFunctionResult],
                   func_args: Any,
                   x0: Vec,
                   tol: float = 1e-6,
                   max_iter: int = 10,
                   trust: float = 1.0,
                   verbose: int = 0,
                   logger: Union[Logger, None] = None) -> ConvexMethodResult:
    """
    Newton-Raphson with back-tracking line search to solve:

        g(x) = 0

    :param func: function to solve, it may or may not include the Jacobian matrix
                the function must have x: Vec and calc_jacobian: bool as the first arguments
                the function must return an instance of ConvexFunctionResult that contains
                the function vector and optionally the derivative when calc_jacobian=True
    :param func_args: Tuple of static arguments to call the evaluation function
    :param x0: Array of initial solutions
    :param tol: Error tolerance
    :param max_iter: Maximum number of iterations
    :param trust: trust amount in the derivative length correctness
    :param verbose:  Display console information
    :param logger: Logger instance
    :return: ConvexMethodResult
    """
    start = time.time()

    if logger is None:
        logger = Logger()

    if not check_function_and_args(func, func_args, 2):
        raise Exception(f'Invalid function arguments, required {", ".join(func.__code__.co_varnames)}')

    # evaluation of the initial point
    x = x0.copy()
    ret = func(x, True, *func_args)  # compute the Jacobian too
    error = ret.compute_f_error()
    converged = error < tol
    iteration = 0
    error_evolution = np.zeros(max_iter + 1)
    trust0 = trust if trust <= 1.0 else 1.0  # trust radius in NR should not be greater than 1

    error_evolution[iteration] = error

    if verbose > 0:
        print(f'It {iteration}, error {error}, converged {converged}')

    while not converged and iteration < max_iter:

        # compute update step: J x Δx = Δg
        try:
            dx = spsolve(ret.J, ret.f)
        except RuntimeError:
            dx = np.full(len(x), np.nan)

        if np.isnan(dx).any() or np.isinf(dx).any():
            logger.add_error(f"Newton-Raphson's Jacobian is singular @iter {iteration}")
            break

        mu = trust0
        back_track_condition = True
        while back_track_condition and mu > tol:

            x2 = x - mu * dx
            ret2 = func(x2, False, *func_args)  # do not compute the Jacobian
            error2 = ret2.compute_f_error()

            mu *= 0.5  # acceleration_parameter

            back_track_condition = error2 > error

            if not back_track_condition:
                # accept the solution
                x = x2

        if back_track_condition:
            # not even the backtracking was able to correct the solution
            logger.add_warning(f"Newton-Raphson stagnated @iter {iteration}", value=error)
            break

        # update the residual and the Jacobian
        ret = func(x, True, *func_args)

        error = ret.compute_f_error()

        converged = error <= tol

        iteration += 1

        error_evolution[iteration] = error

        if verbose > 0:
            print(f'It {iteration}, error {error}, converged {converged}')

    return ConvexMethodResult(x=x,
                              error=error,
                              converged=converged,
                              iterations=iteration,
                              elapsed=time.time() - start,
                              error_evolution=error_evolution)
