# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import List, Dict, Any, Union
import numpy as np
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import DeviceType, ComponentCategory
from DynaGridEngine.Devices.Parents.editable_device import EditableDevice


class ComponentContext:
    """
    Constants of the device that owns a component, shared by all its sub-models.
    Built once per simulation, read-only on the hot path.
    """

    def __init__(self,
                 base_frequency: float,
                 omega_sys: float,
                 device_base_power: float,
                 system_base_power: float):
        """

        :param base_frequency: base angular frequency Ωb (rad/s)
        :param omega_sys: reference frame speed (p.u.)
        :param device_base_power: base power of the device (MVA)
        :param system_base_power: base power of the system (MVA)
        """
        self.Omega_b = base_frequency
        self.omega_sys = omega_sys
        self.device_base_power = device_base_power
        self.system_base_power = system_base_power

    @property
    def to_system_base(self) -> float:
        """
        Multiplier to convert currents from the device base to the system base
        """
        return self.device_base_power / self.system_base_power


class DynamicComponent(EditableDevice):
    """
    Parent of every dynamic sub-model.

    A sub-model declares the names of its own states, the names of the parent
    device states it reads (ports) and its category. The parent device calls
    ``ode`` in a fixed order, passing the slice of its own states, the slice
    of ported states (in port declaration order), the shared inner variables
    vector, and the control references.
    """

    category: ComponentCategory = None

    def __init__(self, name: str, states: List[str], ports: List[str], idtag: Union[str, None] = None):
        """

        :param name: name of the sub-model
        :param states: ordered list of the local state names
        :param ports: ordered list of the parent device states that this sub-model reads
        :param idtag: unique id
        """
        EditableDevice.__init__(self,
                                name=name,
                                idtag=idtag,
                                code='',
                                device_type=DeviceType.DynamicComponentDevice)

        self.states: List[str] = list(states)

        self.ports: List[str] = list(ports)

    @property
    def n_states(self) -> int:
        return len(self.states)

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> Vec:
        """
        Compute the derivatives of the local states.
        Coupling quantities are read from and written to inner_vars.
        :param states: local states of this sub-model
        :param ports: ported states of the parent device (port declaration order)
        :param inner_vars: inner variables of the parent device (read / write)
        :param refs: control references of the parent device [V_ref, ω_ref, P_ref, Q_ref]
        :param ctx: ComponentContext
        :return: derivatives vector (same length as states)
        """
        raise NotImplementedError()

    def initialize(self, device_states: Dict[str, float], inner_vars: Vec, refs: Vec, ctx: ComponentContext) -> None:
        """
        Compute the steady state of this sub-model.
        The sub-model writes its own states into device_states and may read the
        ones already initialized by the sub-models that precede it.
        :param device_states: {state name: value} of the parent device
        :param inner_vars: inner variables of the parent device (read / write)
        :param refs: control references (read / write)
        :param ctx: ComponentContext
        """
        raise NotImplementedError()

    def get_save_data(self) -> Dict[str, Any]:
        data = super().get_save_data()
        data['model'] = self.__class__.__name__
        return data


def no_derivatives() -> Vec:
    """
    Derivatives of a sub-model without states
    """
    return np.zeros(0)
