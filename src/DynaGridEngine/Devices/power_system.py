# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import copy
from typing import List, Dict, Union, Any
from DynaGridEngine.enumerations import DeviceType
from DynaGridEngine.Devices.Parents.editable_device import EditableDevice
from DynaGridEngine.Devices.bus import Bus
from DynaGridEngine.Devices.Branches.line import Line, DynamicLine
from DynaGridEngine.Devices.Injections.load import Load
from DynaGridEngine.Devices.Injections.source import Source
from DynaGridEngine.Devices.Injections.dynamic_injection import DynamicInjection
from DynaGridEngine.Devices.Injections.dynamic_generator import DynamicGenerator
from DynaGridEngine.Devices.Injections.dynamic_inverter import DynamicInverter


class PowerSystem(EditableDevice):
    """
    Container of the devices of a power system for dynamic studies
    """

    def __init__(self, name: str = 'PowerSystem', Sbase: float = 100.0, fBase: float = 60.0,
                 idtag: Union[str, None] = None):
        """

        :param name: name of the system
        :param Sbase: base power (MVA)
        :param fBase: base frequency (Hz)
        :param idtag: unique id
        """
        EditableDevice.__init__(self, name=name, idtag=idtag, code='', device_type=DeviceType.PowerSystemDevice)

        self.Sbase = float(Sbase)

        self.fBase = float(fBase)

        self.buses: List[Bus] = list()

        self.lines: List[Line] = list()

        self.dynamic_lines: List[DynamicLine] = list()

        self.loads: List[Load] = list()

        self.sources: List[Source] = list()

        self.generators: List[DynamicGenerator] = list()

        self.inverters: List[DynamicInverter] = list()

        self.register(key='Sbase', units='MVA', tpe=float, definition='Base power')
        self.register(key='fBase', units='Hz', tpe=float, definition='Base frequency')

    def add_bus(self, obj: Union[None, Bus] = None) -> Bus:
        """
        Add a bus
        :param obj: Bus object (a new one is created if None)
        :return: the bus
        """
        if obj is None:
            obj = Bus(number=len(self.buses) + 1)
        self.buses.append(obj)
        return obj

    def add_line(self, obj: Line) -> Line:
        """
        Add an AC line
        :param obj: Line instance
        """
        self.lines.append(obj)
        return obj

    def add_dynamic_line(self, obj: Union[DynamicLine, Line]) -> DynamicLine:
        """
        Make a line dynamic. The wrapped line is added to the AC lines if it is not there yet.
        :param obj: DynamicLine or the Line to wrap
        :return: DynamicLine
        """
        if isinstance(obj, Line):
            obj = DynamicLine(line=obj)

        if obj.line not in self.lines:
            self.lines.append(obj.line)

        self.dynamic_lines.append(obj)
        return obj

    def add_load(self, bus: Union[None, Bus] = None, api_obj: Union[None, Load] = None) -> Load:
        """
        Add a load device
        :param bus: connection bus (optional if api_obj already has it)
        :param api_obj: Load device (a new one is created if None)
        :return: Load
        """
        if api_obj is None:
            api_obj = Load()
        if bus is not None:
            api_obj.bus = bus
        self.loads.append(api_obj)
        return api_obj

    def add_source(self, bus: Union[None, Bus] = None, api_obj: Union[None, Source] = None) -> Source:
        """
        Add an ideal source
        :param bus: connection bus (optional if api_obj already has it)
        :param api_obj: Source device (a new one is created if None)
        :return: Source
        """
        if api_obj is None:
            api_obj = Source()
        if bus is not None:
            api_obj.bus = bus
        self.sources.append(api_obj)
        return api_obj

    def add_generator(self, bus: Union[None, Bus] = None,
                      api_obj: Union[None, DynamicGenerator] = None) -> DynamicGenerator:
        """
        Add a dynamic generator
        :param bus: connection bus (optional if api_obj already has it)
        :param api_obj: DynamicGenerator (a classical one is created if None)
        :return: DynamicGenerator
        """
        if api_obj is None:
            api_obj = DynamicGenerator()
        if bus is not None:
            api_obj.bus = bus
        self.generators.append(api_obj)
        return api_obj

    def add_inverter(self, bus: Union[None, Bus] = None,
                     api_obj: Union[None, DynamicInverter] = None) -> DynamicInverter:
        """
        Add a dynamic inverter
        :param bus: connection bus (optional if api_obj already has it)
        :param api_obj: DynamicInverter (a default one is created if None)
        :return: DynamicInverter
        """
        if api_obj is None:
            api_obj = DynamicInverter()
        if bus is not None:
            api_obj.bus = bus
        self.inverters.append(api_obj)
        return api_obj

    def get_static_injections(self) -> List[Union[Load, Source]]:
        """
        Injection devices without states
        """
        return self.loads + self.sources

    def get_dynamic_injections(self) -> List[DynamicInjection]:
        """
        Injection devices with states, generators first
        """
        return self.generators + self.inverters

    def get_elements(self) -> List[EditableDevice]:
        """
        All the devices of the system
        """
        return (self.buses + self.lines + self.dynamic_lines + self.get_static_injections()
                + self.get_dynamic_injections())

    def get_device_by_idtag(self, idtag: str) -> Union[EditableDevice, None]:
        """
        Find any device by its idtag
        """
        return self.get_dict_by_idtag().get(idtag, None)

    def get_dict_by_idtag(self) -> Dict[str, EditableDevice]:
        return {elm.idtag: elm for elm in self.get_elements()}

    def copy(self) -> "PowerSystem":
        """
        Returns a deep (true) copy of this system.
        """
        return copy.deepcopy(self)

    def get_save_data(self) -> Dict[str, Any]:
        data = super().get_save_data()
        data['buses'] = [elm.get_save_data() for elm in self.buses]
        data['lines'] = [elm.get_save_data() for elm in self.lines]
        data['dynamic_lines'] = [elm.get_save_data() for elm in self.dynamic_lines]
        data['loads'] = [elm.get_save_data() for elm in self.loads]
        data['sources'] = [elm.get_save_data() for elm in self.sources]
        data['generators'] = [elm.get_save_data() for elm in self.generators]
        data['inverters'] = [elm.get_save_data() for elm in self.inverters]
        return data
