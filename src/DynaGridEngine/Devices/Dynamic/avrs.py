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


class AVRFixed(DynamicComponent):
    """
    Constant field voltage, equal to the voltage reference
    """
    category = ComponentCategory.AVR

    def __init__(self, name: str = 'AVRFixed', Vf: float = 1.0):
        DynamicComponent.__init__(self, name=name, states=[], ports=[])

        self.Vf = Vf

        self.register(key='Vf', units='p.u.', tpe=float, definition='Field voltage')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        inner_vars[G.VF] = refs[CR.V_REF]
        return no_derivatives()

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        self.Vf = inner_vars[G.VF]
        refs[CR.V_REF] = self.Vf


class AVRSimple(DynamicComponent):
    """
    Integral voltage regulator: dVf/dt = Kv (V_ref + V_pss - Vt)
    """
    category = ComponentCategory.AVR

    def __init__(self, name: str = 'AVRSimple', Kv: float = 10.0):
        DynamicComponent.__init__(self, name=name, states=['Vf'], ports=[])

        self.Kv = Kv

        self.register(key='Kv', units='1/s', tpe=float, definition='Integral gain')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        Vf = states[0]
        inner_vars[G.VF] = Vf
        return np.array([self.Kv * (refs[CR.V_REF] + inner_vars[G.V_PSS] - inner_vars[G.VT])])

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        device_states['Vf'] = inner_vars[G.VF]
        refs[CR.V_REF] = inner_vars[G.VT] - inner_vars[G.V_PSS]
