# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Union, List
import numpy as np
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import DeviceType
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent
from DynaGridEngine.Devices.Injections.dynamic_injection import DynamicInjection
from DynaGridEngine.Devices.Dynamic.inner_vars import GeneratorInnerVars as G
from DynaGridEngine.Devices.Dynamic import BaseMachine, SingleMass, AVRFixed, TGFixed, PSSFixed
from DynaGridEngine.Devices.bus import Bus


class DynamicGenerator(DynamicInjection):
    """
    Synchronous generator: machine, shaft, AVR, prime mover and stabilizer
    """

    n_inner_vars = G.SIZE

    def __init__(self, bus: Bus = None, name: str = 'DynamicGenerator',
                 machine: DynamicComponent = None,
                 shaft: DynamicComponent = None,
                 avr: DynamicComponent = None,
                 prime_mover: DynamicComponent = None,
                 pss: DynamicComponent = None,
                 base_power: float = 100.0, P: float = 0.0, Q: float = 0.0,
                 V_ref: float = 1.0, omega_ref: float = 1.0, P_ref: float = 0.0, Q_ref: float = 0.0,
                 active: bool = True, idtag: Union[str, None] = None, code: str = ''):
        DynamicInjection.__init__(self, bus=bus, name=name, idtag=idtag, code=code,
                                  device_type=DeviceType.DynamicGeneratorDevice,
                                  base_power=base_power, P=P, Q=Q, V_ref=V_ref, omega_ref=omega_ref,
                                  P_ref=P_ref, Q_ref=Q_ref, active=active)

        self.machine = machine if machine is not None else BaseMachine()
        self.shaft = shaft if shaft is not None else SingleMass()
        self.avr = avr if avr is not None else AVRFixed()
        self.prime_mover = prime_mover if prime_mover is not None else TGFixed()
        self.pss = pss if pss is not None else PSSFixed()

        self.register(key='machine', units='', tpe=DeviceType.DynamicComponentDevice, definition='Machine model')
        self.register(key='shaft', units='', tpe=DeviceType.DynamicComponentDevice, definition='Shaft model')
        self.register(key='avr', units='', tpe=DeviceType.DynamicComponentDevice, definition='Voltage regulator')
        self.register(key='prime_mover', units='', tpe=DeviceType.DynamicComponentDevice,
                      definition='Turbine governor')
        self.register(key='pss', units='', tpe=DeviceType.DynamicComponentDevice, definition='Stabilizer')

        self.update_states()

    def get_components(self) -> List[DynamicComponent]:
        # the torque and the field voltage must be known before the machine and the shaft
        return [self.prime_mover, self.pss, self.avr, self.machine, self.shaft]

    def get_initialization_order(self) -> List[DynamicComponent]:
        return [self.machine, self.shaft, self.prime_mover, self.pss, self.avr]

    def update_states(self) -> None:
        # state layout follows the physical hierarchy, not the evaluation order
        self.states = [name
                       for component in [self.machine, self.shaft, self.avr, self.prime_mover, self.pss]
                       for name in component.states]

    def set_terminal_voltage(self, inner_vars: Vec, v_r: float, v_i: float) -> None:
        inner_vars[G.VR_GEN] = v_r
        inner_vars[G.VI_GEN] = v_i
        inner_vars[G.VT] = np.sqrt(v_r * v_r + v_i * v_i)

    def set_terminal_current(self, inner_vars: Vec, current: complex) -> None:
        inner_vars[G.IR_GEN] = current.real
        inner_vars[G.II_GEN] = current.imag

    def get_terminal_current(self, inner_vars: Vec) -> complex:
        return complex(inner_vars[G.IR_GEN], inner_vars[G.II_GEN])
