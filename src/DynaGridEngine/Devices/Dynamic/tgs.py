# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Dict
import numpy as np
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import ComponentCategory
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent, ComponentContext, no_derivatives
from DynaGridEngine.Devices.Dynamic.inner_vars import GeneratorInnerVars as G, ControlRefs as CR


class TGFixed(DynamicComponent):
    """
    Constant mechanical torque
    """
    category = ComponentCategory.PrimeMover

    def __init__(self, name: str = 'TGFixed', efficiency: float = 1.0):
        DynamicComponent.__init__(self, name=name, states=[], ports=[])

        self.efficiency = efficiency

        self.register(key='efficiency', units='p.u.', tpe=float, definition='Turbine efficiency')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        inner_vars[G.TAU_M] = self.efficiency * refs[CR.P_REF]
        return no_derivatives()

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        refs[CR.P_REF] = inner_vars[G.TAU_M] / self.efficiency


class TGTypeII(DynamicComponent):
    """
    Droop governor with one lead-lag block
    """
    category = ComponentCategory.PrimeMover

    def __init__(self, name: str = 'TGTypeII', R: float = 0.05, T1: float = 0.3, T2: float = 0.1):
        """

        :param name: name
        :param R: droop (p.u.)
        :param T1: lead time constant (s)
        :param T2: lag time constant (s)
        """
        DynamicComponent.__init__(self, name=name, states=['xg'], ports=['omega'])

        self.R = R
        self.T1 = T1
        self.T2 = T2

        self.register(key='R', units='p.u.', tpe=float, definition='Droop')
        self.register(key='T1', units='s', tpe=float, definition='Lead time constant')
        self.register(key='T2', units='s', tpe=float, definition='Lag time constant')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        xg = states[0]
        omega = ports[0]
        d_omega = refs[CR.OMEGA_REF] - omega
        inv_r = 1.0 / self.R
        ratio = self.T1 / self.T2

        inner_vars[G.TAU_M] = refs[CR.P_REF] + xg + inv_r * ratio * d_omega

        return np.array([(inv_r * (1.0 - ratio) * d_omega - xg) / self.T2])

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        device_states['xg'] = 0.0
        refs[CR.OMEGA_REF] = device_states[self.ports[0]]
        refs[CR.P_REF] = inner_vars[G.TAU_M]
