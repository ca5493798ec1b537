# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Union
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import DynamicIntegrationMethod
from DynaGridEngine.Simulations.options_template import OptionsTemplate


class RmsOptions(OptionsTemplate):
    """
    Dynamic simulation options
    """

    def __init__(self,
                 integration_method: DynamicIntegrationMethod = DynamicIntegrationMethod.Trapezoid,
                 time_step: float = 1e-3,
                 min_step: float = 1e-6,
                 newton_tol: float = 1e-8,
                 newton_max_iter: int = 20,
                 initialize_simulation: bool = True,
                 init_tol: float = 1e-9,
                 init_max_iter: int = 30,
                 initial_guess: Union[Vec, None] = None,
                 reinitialize_after_events: bool = True,
                 system_to_file: bool = False,
                 copy_system: bool = True,
                 stability_tol: float = 1e-6):
        """
        Dynamic simulation options
        :param integration_method: DynamicIntegrationMethod
        :param time_step: integration step (s)
        :param min_step: smallest step allowed when halving on non-convergence (s)
        :param newton_tol: tolerance of the Newton iterations of every step
        :param newton_max_iter: maximum number of Newton iterations per step
        :param initialize_simulation: find a consistent initial point when the simulation is built?
        :param init_tol: tolerance of the initialization
        :param init_max_iter: maximum number of iterations of the initialization
        :param initial_guess: full state vector to start from (flat start if None)
        :param reinitialize_after_events: solve the algebraic states after every event?
        :param system_to_file: write the system to json before and after the initialization
        :param copy_system: simulate a copy of the system instead of the given object
        :param stability_tol: largest real part of an eigenvalue that is still considered stable
        """
        OptionsTemplate.__init__(self, name='RmsOptions')

        self.integration_method = integration_method

        self.time_step = time_step

        self.min_step = min_step

        self.newton_tol = newton_tol

        self.newton_max_iter = newton_max_iter

        self.initialize_simulation = initialize_simulation

        self.init_tol = init_tol

        self.init_max_iter = init_max_iter

        self.initial_guess = initial_guess

        self.reinitialize_after_events = reinitialize_after_events

        self.system_to_file = system_to_file

        self.copy_system = copy_system

        self.stability_tol = stability_tol

        self.register(key="integration_method", tpe=DynamicIntegrationMethod)
        self.register(key="time_step", tpe=float, units='s')
        self.register(key="min_step", tpe=float, units='s')
        self.register(key="newton_tol", tpe=float)
        self.register(key="newton_max_iter", tpe=int)
        self.register(key="initialize_simulation", tpe=bool)
        self.register(key="init_tol", tpe=float)
        self.register(key="init_max_iter", tpe=int)
        self.register(key="reinitialize_after_events", tpe=bool)
        self.register(key="system_to_file", tpe=bool)
        self.register(key="copy_system", tpe=bool)
        self.register(key="stability_tol", tpe=float)
