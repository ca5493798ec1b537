# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Dict, Tuple
import numpy as np
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import ComponentCategory
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent, ComponentContext, no_derivatives
from DynaGridEngine.Devices.Dynamic.inner_vars import GeneratorInnerVars as G


def ri_to_dq(delta: float, x_r: float, x_i: float) -> Tuple[float, float]:
    """
    Network reference frame to the machine dq frame
    :param delta: rotor angle (rad)
    :param x_r: real part
    :param x_i: imaginary part
    :return: d, q components
    """
    sin_d = np.sin(delta)
    cos_d = np.cos(delta)
    return sin_d * x_r - cos_d * x_i, cos_d * x_r + sin_d * x_i


def dq_to_ri(delta: float, x_d: float, x_q: float) -> Tuple[float, float]:
    """
    Machine dq frame to the network reference frame
    :param delta: rotor angle (rad)
    :param x_d: d component
    :param x_q: q component
    :return: real, imaginary parts
    """
    sin_d = np.sin(delta)
    cos_d = np.cos(delta)
    return sin_d * x_d + cos_d * x_q, -cos_d * x_d + sin_d * x_q


class BaseMachine(DynamicComponent):
    """
    Classical model: constant EMF behind the transient reactance
    """
    category = ComponentCategory.Machine

    def __init__(self, name: str = 'BaseMachine', R: float = 0.0, Xd_p: float = 0.3, eq_p: float = 1.0):
        """

        :param name: name
        :param R: armature resistance (p.u. device base)
        :param Xd_p: d-axis transient reactance (p.u. device base)
        :param eq_p: internal EMF magnitude (p.u.), overwritten at initialization
        """
        DynamicComponent.__init__(self, name=name, states=[], ports=['delta'])

        self.R = R
        self.Xd_p = Xd_p
        self.eq_p = eq_p

        self.register(key='R', units='p.u.', tpe=float, definition='Armature resistance')
        self.register(key='Xd_p', units='p.u.', tpe=float, definition='d-axis transient reactance')
        self.register(key='eq_p', units='p.u.', tpe=float, definition='Internal EMF magnitude')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        delta = ports[0]
        v_d, v_q = ri_to_dq(delta, inner_vars[G.VR_GEN], inner_vars[G.VI_GEN])

        # [R -Xd'; Xd' R] [id; iq] = [-vd; eq' - vq]
        det = self.R * self.R + self.Xd_p * self.Xd_p
        b1 = -v_d
        b2 = self.eq_p - v_q
        i_d = (self.R * b1 + self.Xd_p * b2) / det
        i_q = (-self.Xd_p * b1 + self.R * b2) / det

        inner_vars[G.TAU_E] = (v_q + self.R * i_q) * i_q + (v_d + self.R * i_d) * i_d
        inner_vars[G.PSI_D] = v_q + self.R * i_q
        inner_vars[G.PSI_Q] = -(v_d + self.R * i_d)
        inner_vars[G.IR_GEN], inner_vars[G.II_GEN] = dq_to_ri(delta, i_d, i_q)

        return no_derivatives()

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        V = complex(inner_vars[G.VR_GEN], inner_vars[G.VI_GEN])
        I = complex(inner_vars[G.IR_GEN], inner_vars[G.II_GEN])
        E = V + complex(self.R, self.Xd_p) * I

        delta = np.angle(E)
        self.eq_p = np.abs(E)
        device_states['delta'] = delta

        v_d, v_q = ri_to_dq(delta, V.real, V.imag)
        i_d, i_q = ri_to_dq(delta, I.real, I.imag)
        inner_vars[G.TAU_E] = (v_q + self.R * i_q) * i_q + (v_d + self.R * i_d) * i_d
        inner_vars[G.PSI_D] = v_q + self.R * i_q
        inner_vars[G.PSI_Q] = -(v_d + self.R * i_d)
        inner_vars[G.VF] = self.eq_p


class OneDOneQMachine(DynamicComponent):
    """
    Two-axis model with one transient circuit per axis
    """
    category = ComponentCategory.Machine

    def __init__(self, name: str = 'OneDOneQMachine', R: float = 0.0,
                 Xd: float = 1.3, Xq: float = 1.2, Xd_p: float = 0.3, Xq_p: float = 0.5,
                 Td0_p: float = 7.0, Tq0_p: float = 0.75):
        DynamicComponent.__init__(self, name=name, states=['eq_p', 'ed_p'], ports=['delta'])

        self.R = R
        self.Xd = Xd
        self.Xq = Xq
        self.Xd_p = Xd_p
        self.Xq_p = Xq_p
        self.Td0_p = Td0_p
        self.Tq0_p = Tq0_p

        self.register(key='R', units='p.u.', tpe=float, definition='Armature resistance')
        self.register(key='Xd', units='p.u.', tpe=float, definition='d-axis synchronous reactance')
        self.register(key='Xq', units='p.u.', tpe=float, definition='q-axis synchronous reactance')
        self.register(key='Xd_p', units='p.u.', tpe=float, definition='d-axis transient reactance')
        self.register(key='Xq_p', units='p.u.', tpe=float, definition='q-axis transient reactance')
        self.register(key='Td0_p', units='s', tpe=float, definition='d-axis open circuit time constant')
        self.register(key='Tq0_p', units='s', tpe=float, definition='q-axis open circuit time constant')

    def stator_currents(self, v_d: float, v_q: float, eq_p: float, ed_p: float) -> Tuple[float, float]:
        """
        Solve [R -Xq'; Xd' R] [id; iq] = [-vd + ed'; -vq + eq']
        """
        det = self.R * self.R + self.Xq_p * self.Xd_p
        b1 = -v_d + ed_p
        b2 = -v_q + eq_p
        i_d = (self.R * b1 + self.Xq_p * b2) / det
        i_q = (-self.Xd_p * b1 + self.R * b2) / det
        return i_d, i_q

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        eq_p = states[0]
        ed_p = states[1]
        delta = ports[0]

        v_d, v_q = ri_to_dq(delta, inner_vars[G.VR_GEN], inner_vars[G.VI_GEN])
        i_d, i_q = self.stator_currents(v_d, v_q, eq_p, ed_p)

        d_eq_p = (-eq_p - (self.Xd - self.Xd_p) * i_d + inner_vars[G.VF]) / self.Td0_p
        d_ed_p = (-ed_p + (self.Xq - self.Xq_p) * i_q) / self.Tq0_p

        inner_vars[G.TAU_E] = (v_q + self.R * i_q) * i_q + (v_d + self.R * i_d) * i_d
        inner_vars[G.PSI_D] = v_q + self.R * i_q
        inner_vars[G.PSI_Q] = -(v_d + self.R * i_d)
        inner_vars[G.IR_GEN], inner_vars[G.II_GEN] = dq_to_ri(delta, i_d, i_q)

        return np.array([d_eq_p, d_ed_p])

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        V = complex(inner_vars[G.VR_GEN], inner_vars[G.VI_GEN])
        I = complex(inner_vars[G.IR_GEN], inner_vars[G.II_GEN])

        # the q axis is aligned with the EMF behind Xq
        delta = np.angle(V + complex(self.R, self.Xq) * I)

        v_d, v_q = ri_to_dq(delta, V.real, V.imag)
        i_d, i_q = ri_to_dq(delta, I.real, I.imag)

        ed_p = (self.Xq - self.Xq_p) * i_q
        eq_p = v_q + self.R * i_q + self.Xd_p * i_d

        device_states['delta'] = delta
        device_states['eq_p'] = eq_p
        device_states['ed_p'] = ed_p

        inner_vars[G.VF] = eq_p + (self.Xd - self.Xd_p) * i_d
        inner_vars[G.TAU_E] = (v_q + self.R * i_q) * i_q + (v_d + self.R * i_d) * i_d
        inner_vars[G.PSI_D] = v_q + self.R * i_q
        inner_vars[G.PSI_Q] = -(v_d + self.R * i_d)
