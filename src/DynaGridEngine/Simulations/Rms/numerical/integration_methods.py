# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Fixed step implicit integrators for semi-explicit DAEs:

    dx/dt = f(x, y, t)
        0 = g(x, y, t)
"""
import time
from dataclasses import dataclass, field
from typing import List, Tuple, Union
import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import splu
from DynaGridEngine.basic_structures import Vec, Mat, BoolVec, Logger
from DynaGridEngine.Utils.NumericalMethods.common import max_abs
from DynaGridEngine.Utils.NumericalMethods.autodiff import calc_dense_jacobian
from DynaGridEngine.Simulations.Rms.problems.rms_problem import RmsProblem


@dataclass
class IntegrationResult:
    """
    Trajectory produced by an integrator
    """
    t: Vec
    x: Mat
    success: bool
    message: str = ''
    n_steps: int = 0
    n_rejected: int = 0
    n_jacobians: int = 0
    elapsed: float = 0.0
    event_times: List[float] = field(default_factory=list)


class ImplicitIntegrator:
    """
    Fixed step implicit integrator solved with a modified Newton method.
    The children define the residual of the differential rows.
    """
    name = 'Implicit'

    def __init__(self,
                 time_step: float = 1e-3,
                 min_step: float = 1e-6,
                 tol: float = 1e-8,
                 max_iter: int = 20,
                 reinitialize_after_events: bool = True,
                 logger: Union[Logger, None] = None):
        """

        :param time_step: nominal step (s)
        :param min_step: smallest step allowed when halving (s)
        :param tol: Newton tolerance
        :param max_iter: maximum Newton iterations per step
        :param reinitialize_after_events: solve the algebraic states after every event
        :param logger: Logger
        """
        self.time_step = time_step
        self.min_step = min_step
        self.tol = tol
        self.max_iter = max_iter
        self.reinitialize_after_events = reinitialize_after_events
        self.logger = logger if logger is not None else Logger()

        # modified Newton: the factorization is kept while it converges
        self._lu = None
        self._lu_h = 0.0
        self.n_jacobians = 0

        # current time, visible to the callbacks
        self.t = 0.0

    def differential_residual(self, x1: Vec, x0: Vec, f1: Vec, f0: Vec, h: float) -> Vec:
        """
        Residual of the differential rows of one step
        """
        raise NotImplementedError()

    def differential_weight(self) -> float:
        """
        Weight of f(x1) in the differential rows
        """
        raise NotImplementedError()

    def step_residual(self, x1: Vec, x0: Vec, f1: Vec, f0: Vec, h: float, diff: BoolVec) -> Vec:
        """
        Residual of one step: differential rows from the method, algebraic rows g(x1)
        """
        return np.where(diff, self.differential_residual(x1, x0, f1, f0, h), f1)

    def update_jacobian(self, x: Vec, t: float, h: float, problem: RmsProblem) -> bool:
        """
        Factorize the Jacobian of the step residual
        :return: success?
        """
        diff = problem.differential_vars
        Jf = calc_dense_jacobian(func=problem.f, x=x, arg=(t,), central=False)
        self.n_jacobians += 1

        c = h * self.differential_weight()
        J = np.where(diff[:, np.newaxis], -c * Jf, Jf)
        idx = np.where(diff)[0]
        J[idx, idx] += 1.0

        try:
            self._lu = splu(sp.csc_matrix(J))
        except RuntimeError:
            self._lu = None
            return False

        self._lu_h = h
        return True

    def newton(self, x0: Vec, f0: Vec, t1: float, h: float, problem: RmsProblem) -> Tuple[Vec, Vec, bool]:
        """
        Solve one step
        :param x0: state at the beginning of the step
        :param f0: f(x0)
        :param t1: time at the end of the step
        :param h: step size
        :param problem: RmsProblem
        :return: x1, f(x1), converged
        """
        diff = problem.differential_vars

        fresh = False
        for attempt in range(2):

            if self._lu is None or self._lu_h != h or attempt > 0:
                if attempt > 0 and fresh:
                    # the Jacobian is already up to date
                    break
                if not self.update_jacobian(x0, t1, h, problem):
                    return x0, f0, False
                fresh = True

            # at least one update per step, converged when the update is below tol
            x1 = x0.copy()
            for it in range(self.max_iter):
                f1 = problem.f(x1, t1)
                r = self.step_residual(x1, x0, f1, f0, h, diff)

                if not np.isfinite(r).all():
                    break

                dx = self._lu.solve(r)
                if not np.isfinite(dx).all():
                    break

                x1 -= dx

                if max_abs(dx) < self.tol:
                    return x1, problem.f(x1, t1), True

        return x0, f0, False

    def solve_algebraic(self, x: Vec, t: float, problem: RmsProblem) -> Tuple[Vec, bool]:
        """
        Solve g(x, y) = 0 for the algebraic states keeping the differential ones
        :param x: state vector
        :param t: time
        :param problem: RmsProblem
        :return: consistent state vector, converged?
        """
        alg = ~problem.differential_vars
        if not alg.any():
            return x, True

        x = x.copy()

        def g(y: Vec) -> Vec:
            x2 = x.copy()
            x2[alg] = y
            return problem.f(x2, t)[alg]

        for it in range(self.max_iter):
            res = g(x[alg])
            if not np.isfinite(res).all():
                return x, False
            if max_abs(res) < self.tol:
                return x, True
            gy = calc_dense_jacobian(func=g, x=x[alg], central=False)
            try:
                x[alg] -= np.linalg.solve(gy, res)
            except np.linalg.LinAlgError:
                return x, False

        res = g(x[alg])
        return x, bool(np.isfinite(res).all() and max_abs(res) < self.tol)

    def solve(self, problem: RmsProblem) -> IntegrationResult:
        """
        Integrate the problem over its time span
        :param problem: RmsProblem
        :return: IntegrationResult
        """
        start = time.time()
        t0, t_end = problem.tspan
        callbacks = problem.callbacks

        # stops inside the interval, the initial instant is handled before stepping
        stops = [ts for ts in problem.tstops if t0 < ts <= t_end]

        self.t = t0
        self._lu = None
        x = problem.x0.copy()

        t_list = [t0]
        x_list = [x.copy()]
        event_times = list()
        n_steps = 0
        n_rejected = 0

        if callbacks.apply(x, self.t, self):
            x = self.after_event(x, problem, t_list, x_list, event_times)

        f = problem.f(x, self.t)
        h = self.time_step
        eps = 1e-12 * max(1.0, abs(t_end))

        while self.t < t_end - eps:

            h_try = min(h, t_end - self.t)
            t1 = self.t + h_try
            hit_stop = False
            if len(stops) and t1 >= stops[0] - eps:
                h_try = stops[0] - self.t
                t1 = stops[0]
                hit_stop = True

            x1, f1, converged = self.newton(x, f, t1, h_try, problem)

            if not converged:
                n_rejected += 1
                h = h_try * 0.5
                self._lu = None
                self.logger.add_debug(self.name, "step rejected at t =", self.t, "new step", h)
                if h < self.min_step:
                    self.logger.add_error("The integration did not converge with the minimum step",
                                          device=self.name, value=h, sim_time=self.t)
                    return IntegrationResult(t=np.array(t_list), x=np.array(x_list), success=False,
                                             message=f"Newton failed at t={self.t}",
                                             n_steps=n_steps, n_rejected=n_rejected,
                                             n_jacobians=self.n_jacobians, elapsed=time.time() - start,
                                             event_times=event_times)
                continue

            self.t = t1
            x = x1
            f = f1
            n_steps += 1
            t_list.append(self.t)
            x_list.append(x.copy())

            if hit_stop:
                stops.pop(0)

            if callbacks.apply(x, self.t, self):
                x = self.after_event(x, problem, t_list, x_list, event_times)
                f = problem.f(x, self.t)

            # recover the nominal step after a reduction
            if h < self.time_step:
                h = min(self.time_step, 2.0 * h)

        return IntegrationResult(t=np.array(t_list), x=np.array(x_list), success=True,
                                 n_steps=n_steps, n_rejected=n_rejected, n_jacobians=self.n_jacobians,
                                 elapsed=time.time() - start, event_times=event_times)

    def after_event(self, x: Vec, problem: RmsProblem, t_list: List[float], x_list: List[Vec],
                    event_times: List[float]) -> Vec:
        """
        Make the algebraic states consistent after an event and store the post event point
        at the same time stamp
        """
        event_times.append(self.t)
        self._lu = None

        if self.reinitialize_after_events:
            x, ok = self.solve_algebraic(x, self.t, problem)
            if not ok:
                self.logger.add_warning("Algebraic states not consistent after the event",
                                        device=self.name, sim_time=self.t)

        t_list.append(self.t)
        x_list.append(x.copy())
        return x


class BackEuler(ImplicitIntegrator):
    """
    Backward Euler: x1 = x0 + h f(x1)
    """
    name = 'BackEuler'

    def differential_residual(self, x1: Vec, x0: Vec, f1: Vec, f0: Vec, h: float) -> Vec:
        return x1 - x0 - h * f1

    def differential_weight(self) -> float:
        return 1.0


class Trapezoid(ImplicitIntegrator):
    """
    Trapezoidal rule: x1 = x0 + h/2 (f(x0) + f(x1))
    """
    name = 'Trapezoid'

    def differential_residual(self, x1: Vec, x0: Vec, f1: Vec, f0: Vec, h: float) -> Vec:
        return x1 - x0 - 0.5 * h * (f1 + f0)

    def differential_weight(self) -> float:
        return 0.5
