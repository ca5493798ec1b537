# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
from DynaGridEngine.Utils.NumericalMethods.autodiff import calc_dense_jacobian, calc_autodiff_jacobian
from DynaGridEngine.Utils.NumericalMethods.newton_raphson import newton_raphson
from DynaGridEngine.Utils.NumericalMethods.common import ConvexFunctionResult


def fun(x, a):
    return np.array([x[0] ** 2 + x[1] - a, np.sin(x[0]) * x[1]])


def jac(x):
    return np.array([[2 * x[0], 1.0], [np.cos(x[0]) * x[1], np.sin(x[0])]])


def test_dense_jacobian():
    x = np.array([0.3, 1.2])
    assert np.allclose(calc_dense_jacobian(fun, x, arg=(2.0,)), jac(x), atol=1e-6)
    assert np.allclose(calc_dense_jacobian(fun, x, arg=(2.0,), central=False), jac(x), atol=1e-5)


def test_sparse_jacobian():
    x = np.array([0.3, 1.2])
    J = calc_autodiff_jacobian(fun, x, arg=(2.0,), central=True)
    assert J.shape == (2, 2)
    assert np.allclose(J.toarray(), jac(x), atol=1e-6)


def test_newton_raphson():
    """
    Intersection of a circle and a line
    """

    def problem(x, calc_jacobian, r):
        f = np.array([x[0] ** 2 + x[1] ** 2 - r * r, x[0] - x[1]])
        J = calc_autodiff_jacobian(lambda y: np.array([y[0] ** 2 + y[1] ** 2 - r * r, y[0] - y[1]]), x,
                                   central=True) if calc_jacobian else None
        return ConvexFunctionResult(f=f, J=J)

    res = newton_raphson(problem, func_args=(2.0,), x0=np.array([1.0, 0.5]), tol=1e-10, max_iter=20)

    assert res.converged
    assert np.allclose(res.x, [np.sqrt(2.0), np.sqrt(2.0)])
