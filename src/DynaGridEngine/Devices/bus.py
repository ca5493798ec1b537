# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Union
import numpy as np
from DynaGridEngine.enumerations import DeviceType
from DynaGridEngine.Devices.Parents.editable_device import EditableDevice


class Bus(EditableDevice):
    """
    Network node. The voltage phasor is the solved steady state of the network.
    """

    def __init__(self, name: str = 'Bus', number: int = 0, Vm: float = 1.0, Va: float = 0.0,
                 Vnom: float = 10.0, idtag: Union[str, None] = None, code: str = ''):
        """

        :param name: name of the bus
        :param number: bus number (unique within a system)
        :param Vm: steady state voltage magnitude (p.u.)
        :param Va: steady state voltage angle (rad)
        :param Vnom: nominal voltage (kV)
        :param idtag: unique id
        :param code: secondary id
        """
        EditableDevice.__init__(self,
                                name=name,
                                idtag=idtag,
                                code=code,
                                device_type=DeviceType.BusDevice)

        self.number = int(number)

        self.Vm = float(Vm)

        self.Va = float(Va)

        self.Vnom = float(Vnom)

        self.register(key='number', units='', tpe=int, definition='Bus number')
        self.register(key='Vm', units='p.u.', tpe=float, definition='Steady state voltage magnitude')
        self.register(key='Va', units='rad', tpe=float, definition='Steady state voltage angle')
        self.register(key='Vnom', units='kV', tpe=float, definition='Nominal voltage')

    @property
    def voltage(self) -> complex:
        """
        Complex voltage phasor (p.u.)
        """
        return complex(self.Vm * np.cos(self.Va), self.Vm * np.sin(self.Va))

    @voltage.setter
    def voltage(self, val: complex):
        self.Vm = float(np.abs(val))
        self.Va = float(np.angle(val))
