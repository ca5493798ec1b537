# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Callable, Tuple, List
import numpy as np
from DynaGridEngine.basic_structures import Vec, BoolVec
from DynaGridEngine.Simulations.Rms.simulation_inputs import SimulationInputs
from DynaGridEngine.Simulations.Rms.perturbation_engine import CallbackSet


class RmsProblem:
    """
    DAE problem in implicit form F(dx, x, t) = 0
    """

    def __init__(self,
                 residual: Callable[[Vec, Vec, Vec, SimulationInputs, float], None],
                 dx0: Vec,
                 x0: Vec,
                 tspan: Tuple[float, float],
                 inputs: SimulationInputs,
                 differential_vars: BoolVec,
                 callbacks: CallbackSet,
                 tstops: List[float]):
        """

        :param residual: residual(output, dx, x, inputs, t)
        :param dx0: initial derivatives
        :param x0: initial state
        :param tspan: (start time, end time) in seconds
        :param inputs: SimulationInputs passed to the residual
        :param differential_vars: boolean flag per state, True for the differential ones
        :param callbacks: CallbackSet
        :param tstops: times where the integrator must stop
        """
        self.residual = residual
        self.dx0 = dx0
        self.x0 = x0
        self.tspan = (float(tspan[0]), float(tspan[1]))
        self.inputs = inputs
        self.differential_vars = differential_vars
        self.callbacks = callbacks
        self.tstops = tstops

        self._buffer = np.zeros(len(x0))
        self._zeros = np.zeros(len(x0))

    @property
    def n_vars(self) -> int:
        return len(self.x0)

    def f(self, x: Vec, t: float) -> Vec:
        """
        Right hand side of the DAE: derivatives of the differential states
        and residuals of the algebraic ones
        :param x: state vector
        :param t: time (s)
        :return: new vector
        """
        self.residual(self._buffer, self._zeros, x, self.inputs, t)
        return self._buffer.copy()

    def F(self, dx: Vec, x: Vec, t: float) -> Vec:
        """
        Implicit residual
        :param dx: derivatives
        :param x: state vector
        :param t: time (s)
        :return: new vector
        """
        self.residual(self._buffer, dx, x, self.inputs, t)
        return self._buffer.copy()
