# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Union
import numpy as np
from DynaGridEngine.enumerations import DeviceType
from DynaGridEngine.Devices.Parents.editable_device import EditableDevice
from DynaGridEngine.Devices.bus import Bus


class Source(EditableDevice):
    """
    Ideal voltage source behind a Thevenin impedance (infinite bus)
    """

    def __init__(self, bus: Bus = None, name: str = 'Source', R_th: float = 0.0, X_th: float = 5e-6,
                 V_ref: float = 1.0, theta_ref: float = 0.0, P: float = 0.0, Q: float = 0.0,
                 active: bool = True, idtag: Union[str, None] = None, code: str = ''):
        """

        :param bus: connection bus
        :param name: name of the source
        :param R_th: Thevenin resistance (p.u.)
        :param X_th: Thevenin reactance (p.u.)
        :param V_ref: internal voltage magnitude (p.u.), set at initialization
        :param theta_ref: internal voltage angle (rad), set at initialization
        :param P: active power injected in steady state (MW), set at initialization
        :param Q: reactive power injected in steady state (MVAr), set at initialization
        :param active: is the source connected?
        :param idtag: unique id
        :param code: secondary id
        """
        EditableDevice.__init__(self,
                                name=name,
                                idtag=idtag,
                                code=code,
                                device_type=DeviceType.SourceDevice)

        self.bus = bus

        self.R_th = float(R_th)

        self.X_th = float(X_th)

        self.V_ref = float(V_ref)

        self.theta_ref = float(theta_ref)

        self.P = float(P)

        self.Q = float(Q)

        self.active = bool(active)

        self.register(key='bus', units='', tpe=DeviceType.BusDevice, definition='Connection bus')
        self.register(key='R_th', units='p.u.', tpe=float, definition='Thevenin resistance')
        self.register(key='X_th', units='p.u.', tpe=float, definition='Thevenin reactance')
        self.register(key='V_ref', units='p.u.', tpe=float, definition='Internal voltage magnitude')
        self.register(key='theta_ref', units='rad', tpe=float, definition='Internal voltage angle')
        self.register(key='P', units='MW', tpe=float, definition='Active power')
        self.register(key='Q', units='MVAr', tpe=float, definition='Reactive power')
        self.register(key='active', units='', tpe=bool, definition='Is the source connected?')

    @property
    def impedance(self) -> complex:
        return complex(self.R_th, self.X_th)

    @property
    def internal_voltage(self) -> complex:
        return self.V_ref * np.exp(1j * self.theta_ref)

    def current_injection(self, v_r: float, v_i: float) -> complex:
        """
        Current injected into the bus
        :param v_r: bus voltage, real part
        :param v_i: bus voltage, imaginary part
        :return: current in p.u.
        """
        if not self.active:
            return 0j
        return (self.internal_voltage - complex(v_r, v_i)) / self.impedance

    def set_operating_point(self, V: complex, I: complex, Sbase: float) -> None:
        """
        Place the internal voltage so that the source injects I at the bus voltage V
        :param V: bus voltage (p.u.)
        :param I: injected current (p.u.)
        :param Sbase: system base power (MVA)
        """
        E = V + self.impedance * I
        self.V_ref = float(np.abs(E))
        self.theta_ref = float(np.angle(E))
        S = V * np.conj(I) * Sbase
        self.P = float(S.real)
        self.Q = float(S.imag)
