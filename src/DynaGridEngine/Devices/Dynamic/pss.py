# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Dict
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import ComponentCategory
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent, ComponentContext, no_derivatives
from DynaGridEngine.Devices.Dynamic.inner_vars import GeneratorInnerVars as G


class PSSFixed(DynamicComponent):
    """
    Constant stabilizer signal
    """
    category = ComponentCategory.PSS

    def __init__(self, name: str = 'PSSFixed', V_pss: float = 0.0):
        DynamicComponent.__init__(self, name=name, states=[], ports=[])

        self.V_pss = V_pss

        self.register(key='V_pss', units='p.u.', tpe=float, definition='Stabilizer signal')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        inner_vars[G.V_PSS] = self.V_pss
        return no_derivatives()

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        inner_vars[G.V_PSS] = self.V_pss


class PSSSimple(DynamicComponent):
    """
    Proportional speed deviation stabilizer
    """
    category = ComponentCategory.PSS

    def __init__(self, name: str = 'PSSSimple', K_omega: float = 1.0):
        DynamicComponent.__init__(self, name=name, states=[], ports=['omega'])

        self.K_omega = K_omega

        self.register(key='K_omega', units='p.u.', tpe=float, definition='Speed deviation gain')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        inner_vars[G.V_PSS] = self.K_omega * (ports[0] - ctx.omega_sys)
        return no_derivatives()

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        inner_vars[G.V_PSS] = self.K_omega * (device_states[self.ports[0]] - ctx.omega_sys)
