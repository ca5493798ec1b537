# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Union, List
import numpy as np
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import DeviceType
from DynaGridEngine.Devices.Parents.editable_device import EditableDevice
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent
from DynaGridEngine.Devices.Dynamic.inner_vars import ControlRefs
from DynaGridEngine.Devices.bus import Bus


class DynamicInjection(EditableDevice):
    """
    Injection device composed of an ordered chain of dynamic sub-models.

    The children declare:
        - the evaluation order of the sub-models (get_components)
        - the initialization order of the sub-models (get_initialization_order)
        - the inner variables layout (n_inner_vars and the terminal voltage / current slots)
    """

    n_inner_vars: int = 0

    def __init__(self, bus: Bus, name: str, idtag: Union[str, None], code: str, device_type: DeviceType,
                 base_power: float, P: float, Q: float, V_ref: float, omega_ref: float, P_ref: float,
                 Q_ref: float, active: bool):
        """

        :param bus: connection bus
        :param name: name
        :param idtag: unique id
        :param code: secondary id
        :param device_type: DeviceType
        :param base_power: device base power (MVA)
        :param P: active power injected in steady state (MW)
        :param Q: reactive power injected in steady state (MVAr)
        :param V_ref: voltage reference (p.u.)
        :param omega_ref: speed reference (p.u.)
        :param P_ref: active power reference (p.u. device base)
        :param Q_ref: reactive power reference (p.u. device base)
        :param active: is the device connected?
        """
        EditableDevice.__init__(self, name=name, idtag=idtag, code=code, device_type=device_type)

        self.bus = bus

        self.base_power = float(base_power)

        self.P = float(P)

        self.Q = float(Q)

        self.V_ref = float(V_ref)

        self.omega_ref = float(omega_ref)

        self.P_ref = float(P_ref)

        self.Q_ref = float(Q_ref)

        self.active = bool(active)

        # ordered local state names, filled by the children once the sub-models are set
        self.states: List[str] = list()

        self.register(key='bus', units='', tpe=DeviceType.BusDevice, definition='Connection bus')
        self.register(key='base_power', units='MVA', tpe=float, definition='Device base power')
        self.register(key='P', units='MW', tpe=float, definition='Steady state active power')
        self.register(key='Q', units='MVAr', tpe=float, definition='Steady state reactive power')
        self.register(key='V_ref', units='p.u.', tpe=float, definition='Voltage reference')
        self.register(key='omega_ref', units='p.u.', tpe=float, definition='Speed reference')
        self.register(key='P_ref', units='p.u.', tpe=float, definition='Active power reference')
        self.register(key='Q_ref', units='p.u.', tpe=float, definition='Reactive power reference')
        self.register(key='active', units='', tpe=bool, definition='Is the device connected?')

    def get_components(self) -> List[DynamicComponent]:
        """
        Sub-models in evaluation order
        """
        raise NotImplementedError()

    def get_initialization_order(self) -> List[DynamicComponent]:
        """
        Sub-models in initialization order
        """
        raise NotImplementedError()

    def update_states(self) -> None:
        """
        Rebuild the list of local states from the sub-models
        """
        self.states = [name for component in self.get_components() for name in component.states]

    @property
    def n_states(self) -> int:
        return len(self.states)

    def get_control_references(self) -> Vec:
        """
        Snapshot of the set points [V_ref, ω_ref, P_ref, Q_ref]
        """
        refs = np.zeros(ControlRefs.SIZE)
        refs[ControlRefs.V_REF] = self.V_ref
        refs[ControlRefs.OMEGA_REF] = self.omega_ref
        refs[ControlRefs.P_REF] = self.P_ref
        refs[ControlRefs.Q_REF] = self.Q_ref
        return refs

    def set_terminal_voltage(self, inner_vars: Vec, v_r: float, v_i: float) -> None:
        """
        Write the terminal voltage into the inner variables
        """
        raise NotImplementedError()

    def set_terminal_current(self, inner_vars: Vec, current: complex) -> None:
        """
        Write the terminal current (device base) into the inner variables
        """
        raise NotImplementedError()

    def get_terminal_current(self, inner_vars: Vec) -> complex:
        """
        Read the terminal current (device base) from the inner variables
        """
        raise NotImplementedError()
