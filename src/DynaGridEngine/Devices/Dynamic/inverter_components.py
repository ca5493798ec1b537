# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Sub-models of a grid forming inverter
"""
from typing import Dict, Tuple
import numpy as np
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import ComponentCategory
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent, ComponentContext, no_derivatives
from DynaGridEngine.Devices.Dynamic.inner_vars import InverterInnerVars as V, ControlRefs as CR


def ri_to_dq(theta: float, x_r: float, x_i: float) -> Tuple[float, float]:
    """
    Rotate a network quantity into a frame at angle theta: (x_r + j x_i) e^{-j theta}
    """
    cos_t = np.cos(theta)
    sin_t = np.sin(theta)
    return x_r * cos_t + x_i * sin_t, -x_r * sin_t + x_i * cos_t


def dq_to_ri(theta: float, x_d: float, x_q: float) -> Tuple[float, float]:
    """
    Rotate a quantity from a frame at angle theta into the network frame: (x_d + j x_q) e^{j theta}
    """
    cos_t = np.cos(theta)
    sin_t = np.sin(theta)
    return x_d * cos_t - x_q * sin_t, x_d * sin_t + x_q * cos_t


class FixedDCSource(DynamicComponent):
    """
    Ideal DC link
    """
    category = ComponentCategory.DCSource

    def __init__(self, name: str = 'FixedDCSource', voltage: float = 1.0):
        DynamicComponent.__init__(self, name=name, states=[], ports=[])

        self.voltage = voltage

        self.register(key='voltage', units='p.u.', tpe=float, definition='DC voltage')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        inner_vars[V.VDC] = self.voltage
        return no_derivatives()

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        inner_vars[V.VDC] = self.voltage


class KauraPLL(DynamicComponent):
    """
    Phase locked loop with low pass filtered dq voltages
    """
    category = ComponentCategory.FrequencyEstimator

    def __init__(self, name: str = 'KauraPLL', w_lp: float = 500.0, kp_pll: float = 0.084, ki_pll: float = 4.69):
        DynamicComponent.__init__(self, name=name,
                                  states=['vd_pll', 'vq_pll', 'epsilon_pll', 'theta_pll'],
                                  ports=['vr_filter', 'vi_filter'])

        self.w_lp = w_lp
        self.kp_pll = kp_pll
        self.ki_pll = ki_pll

        self.register(key='w_lp', units='rad/s', tpe=float, definition='Low pass filter cut-off frequency')
        self.register(key='kp_pll', units='p.u.', tpe=float, definition='Proportional gain')
        self.register(key='ki_pll', units='p.u.', tpe=float, definition='Integral gain')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        vd_pll, vq_pll, epsilon, theta = states
        v_d, v_q = ri_to_dq(theta, ports[0], ports[1])

        angle_error = np.arctan(vq_pll / vd_pll)
        d_omega = self.kp_pll * angle_error + self.ki_pll * epsilon

        inner_vars[V.THETA_PLL] = theta
        inner_vars[V.OMEGA_PLL] = d_omega + ctx.omega_sys

        return np.array([self.w_lp * (v_d - vd_pll),
                         self.w_lp * (v_q - vq_pll),
                         angle_error,
                         ctx.Omega_b * d_omega])

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        v_f = complex(device_states[self.ports[0]], device_states[self.ports[1]])
        device_states['vd_pll'] = np.abs(v_f)
        device_states['vq_pll'] = 0.0
        device_states['epsilon_pll'] = 0.0
        device_states['theta_pll'] = np.angle(v_f)

        inner_vars[V.THETA_PLL] = np.angle(v_f)
        inner_vars[V.OMEGA_PLL] = ctx.omega_sys


class VirtualInertiaQDroop(DynamicComponent):
    """
    Virtual inertia active power control with reactive power droop
    """
    category = ComponentCategory.OuterControl

    def __init__(self, name: str = 'VirtualInertiaQDroop', Ta: float = 2.0, kd: float = 400.0,
                 kw: float = 20.0, kq: float = 0.2, wf: float = 1000.0):
        """

        :param name: name
        :param Ta: virtual inertia constant (s)
        :param kd: damping against the estimated frequency
        :param kw: frequency droop gain
        :param kq: reactive power droop gain
        :param wf: reactive power filter cut-off frequency (rad/s)
        """
        DynamicComponent.__init__(self, name=name,
                                  states=['theta_oc', 'omega_oc', 'q_oc'],
                                  ports=['vr_filter', 'vi_filter', 'ir_filter', 'ii_filter'])

        self.Ta = Ta
        self.kd = kd
        self.kw = kw
        self.kq = kq
        self.wf = wf

        self.register(key='Ta', units='s', tpe=float, definition='Virtual inertia')
        self.register(key='kd', units='p.u.', tpe=float, definition='Damping gain')
        self.register(key='kw', units='p.u.', tpe=float, definition='Frequency droop gain')
        self.register(key='kq', units='p.u.', tpe=float, definition='Reactive power droop gain')
        self.register(key='wf', units='rad/s', tpe=float, definition='Reactive power filter cut-off frequency')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        theta_oc, omega_oc, q_oc = states
        v_r, v_i, i_r, i_i = ports

        p_elec = v_r * i_r + v_i * i_i
        q_elec = v_i * i_r - v_r * i_i
        omega_pll = inner_vars[V.OMEGA_PLL]

        d_omega = (refs[CR.P_REF] - p_elec
                   - self.kd * (omega_oc - omega_pll)
                   - self.kw * (omega_oc - refs[CR.OMEGA_REF])) / self.Ta

        inner_vars[V.THETA_OC] = theta_oc
        inner_vars[V.OMEGA_OC] = omega_oc
        inner_vars[V.V_OC] = refs[CR.V_REF] + self.kq * (refs[CR.Q_REF] - q_oc)

        return np.array([ctx.Omega_b * (omega_oc - ctx.omega_sys),
                         d_omega,
                         self.wf * (q_elec - q_oc)])

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        v_r, v_i, i_r, i_i = [device_states[p] for p in self.ports]
        p_elec = v_r * i_r + v_i * i_i
        q_elec = v_i * i_r - v_r * i_i

        # the inner control has already placed the internal voltage
        device_states['theta_oc'] = inner_vars[V.THETA_OC]
        device_states['omega_oc'] = inner_vars[V.OMEGA_OC]
        device_states['q_oc'] = q_elec

        refs[CR.P_REF] = p_elec
        refs[CR.Q_REF] = q_elec
        refs[CR.V_REF] = inner_vars[V.V_OC]
        refs[CR.OMEGA_REF] = inner_vars[V.OMEGA_OC]


class VoltageModeControl(DynamicComponent):
    """
    Cascaded voltage and current PI control with virtual impedance and active damping.
    The decoupling terms use the filter parameters of the owning inverter.
    """
    category = ComponentCategory.InnerControl

    def __init__(self, name: str = 'VoltageModeControl',
                 kpv: float = 0.59, kiv: float = 736.0, kffv: float = 0.0,
                 rv: float = 0.0, lv: float = 0.2,
                 kpc: float = 1.27, kic: float = 14.3, kffi: float = 0.0,
                 wad: float = 50.0, kad: float = 0.2):
        DynamicComponent.__init__(self, name=name,
                                  states=['xi_d', 'xi_q', 'gamma_d', 'gamma_q', 'phi_d', 'phi_q'],
                                  ports=['vr_filter', 'vi_filter', 'ir_filter', 'ii_filter', 'ir_cnv', 'ii_cnv'])

        self.kpv = kpv
        self.kiv = kiv
        self.kffv = kffv
        self.rv = rv
        self.lv = lv
        self.kpc = kpc
        self.kic = kic
        self.kffi = kffi
        self.wad = wad
        self.kad = kad

        # taken from the filter of the inverter
        self.lf = 0.08
        self.cf = 0.074

        self.register(key='kpv', units='p.u.', tpe=float, definition='Voltage proportional gain')
        self.register(key='kiv', units='p.u.', tpe=float, definition='Voltage integral gain')
        self.register(key='kffv', units='p.u.', tpe=float, definition='Voltage feed forward gain')
        self.register(key='rv', units='p.u.', tpe=float, definition='Virtual resistance')
        self.register(key='lv', units='p.u.', tpe=float, definition='Virtual inductance')
        self.register(key='kpc', units='p.u.', tpe=float, definition='Current proportional gain')
        self.register(key='kic', units='p.u.', tpe=float, definition='Current integral gain')
        self.register(key='kffi', units='p.u.', tpe=float, definition='Current feed forward gain')
        self.register(key='wad', units='rad/s', tpe=float, definition='Active damping filter cut-off frequency')
        self.register(key='kad', units='p.u.', tpe=float, definition='Active damping gain')

    def internal_voltage(self, v_filter: complex, i_filter: complex) -> complex:
        """
        Voltage behind the virtual impedance
        """
        return v_filter + complex(self.rv, self.lv) * i_filter

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        xi_d, xi_q, gamma_d, gamma_q, phi_d, phi_q = states
        theta = inner_vars[V.THETA_OC]
        omega = inner_vars[V.OMEGA_OC]
        V_oc = inner_vars[V.V_OC]

        v_d, v_q = ri_to_dq(theta, ports[0], ports[1])
        if_d, if_q = ri_to_dq(theta, ports[2], ports[3])
        ic_d, ic_q = ri_to_dq(theta, ports[4], ports[5])

        # virtual impedance
        vd_ref = V_oc - self.rv * if_d + omega * self.lv * if_q
        vq_ref = -self.rv * if_q - omega * self.lv * if_d

        # voltage loop
        icd_ref = self.kpv * (vd_ref - v_d) + self.kiv * xi_d - self.cf * omega * v_q + self.kffi * if_d
        icq_ref = self.kpv * (vq_ref - v_q) + self.kiv * xi_q + self.cf * omega * v_d + self.kffi * if_q

        # current loop
        vd_cnv_ref = (self.kpc * (icd_ref - ic_d) + self.kic * gamma_d - omega * self.lf * ic_q
                      + self.kffv * v_d - self.kad * (v_d - phi_d))
        vq_cnv_ref = (self.kpc * (icq_ref - ic_q) + self.kic * gamma_q + omega * self.lf * ic_d
                      + self.kffv * v_q - self.kad * (v_q - phi_q))

        inner_vars[V.MD] = vd_cnv_ref / inner_vars[V.VDC]
        inner_vars[V.MQ] = vq_cnv_ref / inner_vars[V.VDC]

        return np.array([vd_ref - v_d,
                         vq_ref - v_q,
                         icd_ref - ic_d,
                         icq_ref - ic_q,
                         self.wad * (v_d - phi_d),
                         self.wad * (v_q - phi_q)])

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        v_r, v_i, if_r, if_i, ic_r, ic_i = [device_states[p] for p in self.ports]

        E = self.internal_voltage(complex(v_r, v_i), complex(if_r, if_i))
        theta = np.angle(E)
        inner_vars[V.THETA_OC] = theta
        inner_vars[V.OMEGA_OC] = ctx.omega_sys
        inner_vars[V.V_OC] = np.abs(E)

        v_d, v_q = ri_to_dq(theta, v_r, v_i)
        if_d, if_q = ri_to_dq(theta, if_r, if_i)
        ic_d, ic_q = ri_to_dq(theta, ic_r, ic_i)
        vc_d, vc_q = ri_to_dq(theta, inner_vars[V.VR_CNV], inner_vars[V.VI_CNV])

        device_states['xi_d'] = (ic_d + self.cf * v_q - self.kffi * if_d) / self.kiv
        device_states['xi_q'] = (ic_q - self.cf * v_d - self.kffi * if_q) / self.kiv
        device_states['gamma_d'] = (vc_d + self.lf * ic_q - self.kffv * v_d) / self.kic
        device_states['gamma_q'] = (vc_q - self.lf * ic_d - self.kffv * v_q) / self.kic
        device_states['phi_d'] = v_d
        device_states['phi_q'] = v_q

        inner_vars[V.MD] = vc_d / inner_vars[V.VDC]
        inner_vars[V.MQ] = vc_q / inner_vars[V.VDC]


class AverageConverter(DynamicComponent):
    """
    Average model of the converter: the output voltage follows the modulation instantly
    """
    category = ComponentCategory.Converter

    def __init__(self, name: str = 'AverageConverter'):
        DynamicComponent.__init__(self, name=name, states=[], ports=[])

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        vdc = inner_vars[V.VDC]
        inner_vars[V.VR_CNV], inner_vars[V.VI_CNV] = dq_to_ri(inner_vars[V.THETA_OC],
                                                              inner_vars[V.MD] * vdc,
                                                              inner_vars[V.MQ] * vdc)
        return no_derivatives()

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        # the converter voltage was fixed by the filter, and the modulation by the inner control
        pass


class LCLFilter(DynamicComponent):
    """
    LCL output filter in the network reference frame
    """
    category = ComponentCategory.Filter

    def __init__(self, name: str = 'LCLFilter', lf: float = 0.08, rf: float = 0.003, cf: float = 0.074,
                 lg: float = 0.2, rg: float = 0.01):
        DynamicComponent.__init__(self, name=name,
                                  states=['ir_cnv', 'ii_cnv', 'vr_filter', 'vi_filter', 'ir_filter', 'ii_filter'],
                                  ports=[])

        self.lf = lf
        self.rf = rf
        self.cf = cf
        self.lg = lg
        self.rg = rg

        self.register(key='lf', units='p.u.', tpe=float, definition='Converter side inductance')
        self.register(key='rf', units='p.u.', tpe=float, definition='Converter side resistance')
        self.register(key='cf', units='p.u.', tpe=float, definition='Filter capacitance')
        self.register(key='lg', units='p.u.', tpe=float, definition='Grid side inductance')
        self.register(key='rg', units='p.u.', tpe=float, definition='Grid side resistance')

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        ic_r, ic_i, vf_r, vf_i, if_r, if_i = states
        vc_r = inner_vars[V.VR_CNV]
        vc_i = inner_vars[V.VI_CNV]
        vt_r = inner_vars[V.VR_INV]
        vt_i = inner_vars[V.VI_INV]
        w = ctx.omega_sys
        wb = ctx.Omega_b

        inner_vars[V.IR_INV] = if_r
        inner_vars[V.II_INV] = if_i

        return np.array([wb / self.lf * (vc_r - vf_r - self.rf * ic_r + w * self.lf * ic_i),
                         wb / self.lf * (vc_i - vf_i - self.rf * ic_i - w * self.lf * ic_r),
                         wb / self.cf * (ic_r - if_r + w * self.cf * vf_i),
                         wb / self.cf * (ic_i - if_i - w * self.cf * vf_r),
                         wb / self.lg * (vf_r - vt_r - self.rg * if_r + w * self.lg * if_i),
                         wb / self.lg * (vf_i - vt_i - self.rg * if_i - w * self.lg * if_r)])

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        w = ctx.omega_sys
        V_t = complex(inner_vars[V.VR_INV], inner_vars[V.VI_INV])
        i_f = complex(inner_vars[V.IR_INV], inner_vars[V.II_INV])
        v_f = V_t + complex(self.rg, w * self.lg) * i_f
        i_cnv = i_f + 1j * w * self.cf * v_f
        V_cnv = v_f + complex(self.rf, w * self.lf) * i_cnv

        device_states['ir_cnv'] = i_cnv.real
        device_states['ii_cnv'] = i_cnv.imag
        device_states['vr_filter'] = v_f.real
        device_states['vi_filter'] = v_f.imag
        device_states['ir_filter'] = i_f.real
        device_states['ii_filter'] = i_f.imag

        inner_vars[V.VR_CNV] = V_cnv.real
        inner_vars[V.VI_CNV] = V_cnv.imag
