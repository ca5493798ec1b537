# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Callable, Union, Tuple, Any
import numpy as np
from scipy.sparse import csc_matrix
from DynaGridEngine.basic_structures import Vec, Mat


def unpack(ret: Union[Vec, Tuple[Vec, ...]]) -> Vec:
    """
    Unpack the returning vector depending if ret is the vector or a tuple including the vector
    :param ret: Tuple with the vector or vector directly
    :return: Vector
    """
    if isinstance(ret, tuple):
        f0 = ret[0]
    else:
        f0 = ret
    return f0


def perturbation_steps(x: Vec, h: Union[float, None], central: bool) -> Vec:
    """
    Per-variable finite difference step
    :param x: evaluation point
    :param h: fixed step, if None it is scaled with the magnitude of each variable
    :param central: central differences? (changes the optimal relative step)
    :return: vector of steps
    """
    if h is not None:
        return np.full(len(x), h)

    eps = np.finfo(float).eps
    rel = np.cbrt(eps) if central else np.sqrt(eps)
    return rel * np.maximum(1.0, np.abs(x))


def calc_dense_jacobian(func: Callable[[Vec, Any], Union[Vec, Tuple[Vec, Any]]],
                        x: Vec,
                        arg=(),
                        h: Union[float, None] = None,
                        central: bool = True) -> Mat:
    """
    Compute the Jacobian matrix of `func` at `x` using finite differences.

    :param func: function accepting a vector x and args, and returning either a vector or a
                 tuple where the first argument is a vector.
    :param x: Point at which to evaluate the Jacobian (numpy array).
    :param arg: Tuple of arguments to call func aside from x [func(x, *arg)]
    :param h: Fixed step for the finite differences, None to scale it per variable.
    :param central: use central differences (two evaluations per column) instead of forward ones.
    :return: Jacobian as a dense matrix.
    """
    nx = len(x)
    steps = perturbation_steps(x, h, central)

    # copy, the function may reuse its output buffer
    f0 = np.array(unpack(func(x, *arg)), dtype=float)
    n_rows = len(f0)

    jac = np.zeros((n_rows, nx))

    for j in range(nx):
        hj = steps[j]

        x_plus_h = np.array(x, dtype=float)
        x_plus_h[j] += hj
        f_plus_h = np.array(unpack(func(x_plus_h, *arg)), dtype=float)

        if central:
            x_minus_h = np.array(x, dtype=float)
            x_minus_h[j] -= hj
            f_minus_h = np.array(unpack(func(x_minus_h, *arg)), dtype=float)
            jac[:, j] = (f_plus_h - f_minus_h) / (2.0 * hj)
        else:
            jac[:, j] = (f_plus_h - f0) / hj

    return jac


def calc_autodiff_jacobian(func: Callable[[Vec, Any], Union[Vec, Tuple[Vec, Any]]],
                           x: Vec,
                           arg=(),
                           h: Union[float, None] = None,
                           central: bool = False) -> csc_matrix:
    """
    Compute the Jacobian matrix of `func` at `x` using finite differences.

    :param func: function accepting a vector x and args, and returning either a vector or a
                 tuple where the first argument is a vector.
    :param x: Point at which to evaluate the Jacobian (numpy array).
    :param arg: Tuple of arguments to call func aside from x [func(x, *arg)]
    :param h: Fixed step for the finite differences, None to scale it per variable.
    :param central: use central differences
    :return: Jacobian matrix as a CSC matrix.
    """
    return csc_matrix(calc_dense_jacobian(func=func, x=x, arg=arg, h=h, central=central))
