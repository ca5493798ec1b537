# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Union, List
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import DeviceType
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent
from DynaGridEngine.Devices.Injections.dynamic_injection import DynamicInjection
from DynaGridEngine.Devices.Dynamic.inner_vars import InverterInnerVars as V
from DynaGridEngine.Devices.Dynamic import (FixedDCSource, KauraPLL, VirtualInertiaQDroop, VoltageModeControl,
                                            AverageConverter, LCLFilter)
from DynaGridEngine.Devices.bus import Bus


class DynamicInverter(DynamicInjection):
    """
    Grid forming inverter: DC source, frequency estimator, outer control,
    inner control, converter and output filter
    """

    n_inner_vars = V.SIZE

    def __init__(self, bus: Bus = None, name: str = 'DynamicInverter',
                 dc_source: DynamicComponent = None,
                 freq_estimator: DynamicComponent = None,
                 outer_control: DynamicComponent = None,
                 inner_control: DynamicComponent = None,
                 converter: DynamicComponent = None,
                 filter: DynamicComponent = None,
                 base_power: float = 100.0, P: float = 0.0, Q: float = 0.0,
                 V_ref: float = 1.0, omega_ref: float = 1.0, P_ref: float = 0.0, Q_ref: float = 0.0,
                 active: bool = True, idtag: Union[str, None] = None, code: str = ''):
        DynamicInjection.__init__(self, bus=bus, name=name, idtag=idtag, code=code,
                                  device_type=DeviceType.DynamicInverterDevice,
                                  base_power=base_power, P=P, Q=Q, V_ref=V_ref, omega_ref=omega_ref,
                                  P_ref=P_ref, Q_ref=Q_ref, active=active)

        self.dc_source = dc_source if dc_source is not None else FixedDCSource()
        self.freq_estimator = freq_estimator if freq_estimator is not None else KauraPLL()
        self.outer_control = outer_control if outer_control is not None else VirtualInertiaQDroop()
        self.inner_control = inner_control if inner_control is not None else VoltageModeControl()
        self.converter = converter if converter is not None else AverageConverter()
        self.filter = filter if filter is not None else LCLFilter()

        # the inner control decouples the filter it is actually controlling
        if hasattr(self.inner_control, 'lf') and hasattr(self.filter, 'lf'):
            self.inner_control.lf = self.filter.lf
            self.inner_control.cf = self.filter.cf

        self.register(key='dc_source', units='', tpe=DeviceType.DynamicComponentDevice, definition='DC source')
        self.register(key='freq_estimator', units='', tpe=DeviceType.DynamicComponentDevice,
                      definition='Frequency estimator')
        self.register(key='outer_control', units='', tpe=DeviceType.DynamicComponentDevice,
                      definition='Outer control')
        self.register(key='inner_control', units='', tpe=DeviceType.DynamicComponentDevice,
                      definition='Inner control')
        self.register(key='converter', units='', tpe=DeviceType.DynamicComponentDevice, definition='Converter')
        self.register(key='filter', units='', tpe=DeviceType.DynamicComponentDevice, definition='Output filter')

        self.update_states()

    def get_components(self) -> List[DynamicComponent]:
        return [self.dc_source, self.freq_estimator, self.outer_control,
                self.inner_control, self.converter, self.filter]

    def get_initialization_order(self) -> List[DynamicComponent]:
        # the filter fixes the electrical operating point that the controls must reproduce
        return [self.filter, self.dc_source, self.freq_estimator,
                self.inner_control, self.outer_control, self.converter]

    def set_terminal_voltage(self, inner_vars: Vec, v_r: float, v_i: float) -> None:
        inner_vars[V.VR_INV] = v_r
        inner_vars[V.VI_INV] = v_i

    def set_terminal_current(self, inner_vars: Vec, current: complex) -> None:
        inner_vars[V.IR_INV] = current.real
        inner_vars[V.II_INV] = current.imag

    def get_terminal_current(self, inner_vars: Vec) -> complex:
        return complex(inner_vars[V.IR_INV], inner_vars[V.II_INV])
