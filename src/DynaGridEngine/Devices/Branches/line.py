# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Union, List, Tuple
import numpy as np
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import DeviceType
from DynaGridEngine.Devices.Parents.editable_device import EditableDevice
from DynaGridEngine.Devices.bus import Bus


class Line(EditableDevice):
    """
    AC line, pi model
    """

    def __init__(self, bus_from: Bus = None, bus_to: Bus = None, name: str = 'Line',
                 r: float = 1e-20, x: float = 1e-5, b: float = 0.0, active: bool = True,
                 idtag: Union[str, None] = None, code: str = ''):
        """

        :param bus_from: from bus
        :param bus_to: to bus
        :param name: name of the line
        :param r: series resistance (p.u.)
        :param x: series reactance (p.u.)
        :param b: total shunt susceptance (p.u.)
        :param active: is the line in service?
        :param idtag: unique id
        :param code: secondary id
        """
        EditableDevice.__init__(self,
                                name=name,
                                idtag=idtag,
                                code=code,
                                device_type=DeviceType.LineDevice)

        self.bus_from = bus_from

        self.bus_to = bus_to

        self.R = float(r)

        self.X = float(x)

        self.B = float(b)

        self.active = bool(active)

        self.register(key='bus_from', units='', tpe=DeviceType.BusDevice, definition='From bus')
        self.register(key='bus_to', units='', tpe=DeviceType.BusDevice, definition='To bus')
        self.register(key='R', units='p.u.', tpe=float, definition='Series resistance')
        self.register(key='X', units='p.u.', tpe=float, definition='Series reactance')
        self.register(key='B', units='p.u.', tpe=float, definition='Total shunt susceptance')
        self.register(key='active', units='', tpe=bool, definition='Is the line in service?')

    def get_primitives(self) -> Tuple[complex, complex, complex, complex]:
        """
        Primitive admittances of the pi model
        :return: yff, yft, ytf, ytt
        """
        ys = 1.0 / complex(self.R, self.X)
        ysh2 = complex(0.0, self.B / 2.0)
        return ys + ysh2, -ys, -ys, ys + ysh2


class DynamicLine(EditableDevice):
    """
    Line whose series current is a state. It wraps an existing AC line, which stays
    in the static admittance matrix and is later subtracted from it.
    """

    def __init__(self, line: Line, name: Union[str, None] = None, idtag: Union[str, None] = None):
        """

        :param line: the wrapped AC line
        :param name: name (defaults to the line name)
        :param idtag: unique id
        """
        EditableDevice.__init__(self,
                                name=line.name if name is None else name,
                                idtag=idtag,
                                code=line.code,
                                device_type=DeviceType.DynamicLineDevice)

        self.line = line

        self.states: List[str] = ['Il_R', 'Il_I']

        self.register(key='line', units='', tpe=DeviceType.LineDevice, definition='Wrapped AC line')

    @property
    def bus_from(self) -> Bus:
        return self.line.bus_from

    @property
    def bus_to(self) -> Bus:
        return self.line.bus_to

    @property
    def active(self) -> bool:
        return self.line.active

    @property
    def n_states(self) -> int:
        return len(self.states)

    def ode(self, states: Vec, v_from: complex, v_to: complex, omega: float, Omega_b: float) -> Vec:
        """
        (L / Ωb) dI/dt = Vf - Vt - (R + jωL) I
        :param states: [Il_R, Il_I]
        :param v_from: from bus voltage
        :param v_to: to bus voltage
        :param omega: reference frame speed (p.u.)
        :param Omega_b: base angular frequency (rad/s)
        :return: derivatives
        """
        il_r, il_i = states
        R = self.line.R
        L = self.line.X
        return np.array([Omega_b / L * (v_from.real - v_to.real - R * il_r + omega * L * il_i),
                         Omega_b / L * (v_from.imag - v_to.imag - R * il_i - omega * L * il_r)])

    def steady_state_current(self, v_from: complex, v_to: complex, omega: float = 1.0) -> complex:
        """
        Series current for the given terminal voltages
        """
        return (v_from - v_to) / complex(self.line.R, omega * self.line.X)
