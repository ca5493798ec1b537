# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Union
import numpy as np
from DynaGridEngine.enumerations import DeviceType, LoadModel
from DynaGridEngine.Devices.Parents.editable_device import EditableDevice
from DynaGridEngine.Devices.bus import Bus


class Load(EditableDevice):
    """
    Static load
    """

    def __init__(self, bus: Bus = None, name: str = 'Load', P: float = 0.0, Q: float = 0.0,
                 model: LoadModel = LoadModel.ConstantImpedance, V0: Union[float, None] = None,
                 active: bool = True, idtag: Union[str, None] = None, code: str = ''):
        """

        :param bus: connection bus
        :param name: name of the load
        :param P: active power consumed at V0 (MW)
        :param Q: reactive power consumed at V0 (MVAr)
        :param model: LoadModel
        :param V0: voltage magnitude at which P and Q are consumed (p.u.), the bus voltage if None
        :param active: is the load connected?
        :param idtag: unique id
        :param code: secondary id
        """
        EditableDevice.__init__(self,
                                name=name,
                                idtag=idtag,
                                code=code,
                                device_type=DeviceType.LoadDevice)

        self.bus = bus

        self.P = float(P)

        self.Q = float(Q)

        self.model = model

        self.V0 = V0

        self.active = bool(active)

        self.register(key='bus', units='', tpe=DeviceType.BusDevice, definition='Connection bus')
        self.register(key='P', units='MW', tpe=float, definition='Active power')
        self.register(key='Q', units='MVAr', tpe=float, definition='Reactive power')
        self.register(key='model', units='', tpe=LoadModel, definition='Load model')
        self.register(key='V0', units='p.u.', tpe=float, definition='Voltage of the nominal consumption')
        self.register(key='active', units='', tpe=bool, definition='Is the load connected?')

    def current_injection(self, v_r: float, v_i: float, V0: float, Sbase: float) -> complex:
        """
        Current injected by the load into its bus (negative of the consumed current)
        :param v_r: bus voltage, real part
        :param v_i: bus voltage, imaginary part
        :param V0: reference voltage magnitude of the load (p.u.)
        :param Sbase: system base power (MVA)
        :return: current in p.u.
        """
        if not self.active:
            return 0j

        p = self.P / Sbase
        q = self.Q / Sbase

        if self.model == LoadModel.ConstantImpedance:
            # I = conj(S) V / V0^2
            return -complex(p * v_r + q * v_i, p * v_i - q * v_r) / (V0 * V0)

        elif self.model == LoadModel.ConstantCurrent:
            vm = np.sqrt(v_r * v_r + v_i * v_i)
            return -complex(p * v_r + q * v_i, p * v_i - q * v_r) / (V0 * vm)

        elif self.model == LoadModel.ConstantPower:
            vm2 = v_r * v_r + v_i * v_i
            return -complex(p * v_r + q * v_i, p * v_i - q * v_r) / vm2

        else:
            raise Exception(f"Unsupported load model {self.model}")
