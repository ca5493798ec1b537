# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Dict
import numpy as np
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import ComponentCategory
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent, ComponentContext
from DynaGridEngine.Devices.Dynamic.inner_vars import GeneratorInnerVars as G


class SingleMass(DynamicComponent):
    """
    Single mass swing equation
    """
    category = ComponentCategory.Shaft

    def __init__(self, name: str = 'SingleMass', H: float = 3.0, D: float = 0.0):
        """

        :param name: name
        :param H: inertia constant (s)
        :param D: damping (p.u.)
        """
        DynamicComponent.__init__(self, name=name, states=['delta', 'omega'], ports=[])

        self.H = H
        self.D = D

        self.register(key='H', units='s', tpe=float, definition='Inertia constant')
        self.register(key='D', units='p.u.', tpe=float, definition='Damping coefficient')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        omega = states[1]
        d_delta = ctx.Omega_b * (omega - ctx.omega_sys)
        d_omega = (inner_vars[G.TAU_M] - inner_vars[G.TAU_E] - self.D * (omega - ctx.omega_sys)) / (2.0 * self.H)
        return np.array([d_delta, d_omega])

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        # delta has been set by the machine
        device_states['omega'] = ctx.omega_sys
        inner_vars[G.TAU_M] = inner_vars[G.TAU_E]
