# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import uuid
from enum import Enum
from typing import List, Dict, Any, Union, Type
from DynaGridEngine.enumerations import DeviceType


def parse_idtag(val: Union[str, None]) -> str:
    """
    idtag setter
    :param val: any string or None
    """
    if val is None:
        return uuid.uuid4().hex  # generate a proper UUIDv4 string
    elif isinstance(val, str):
        if len(val) == 0:
            return uuid.uuid4().hex
        else:
            candidate_val = val.replace('_', '').replace('-', '')
            if len(candidate_val) == 32:
                return candidate_val  # if the string passed can be a UUID, set it
            else:
                return val  # otherwise this is just a plain string
    else:
        return str(val)


class GCProp:
    """
    Registered device property
    """

    def __init__(self,
                 prop_name: str,
                 units: str,
                 tpe: Union[Type, DeviceType],
                 definition: str,
                 editable: bool = True):
        """
        Registered device property
        :param prop_name: name of the attribute
        :param units: units of the property
        :param tpe: data type (int, bool, float, str, an Enum class or a DeviceType for references)
        :param definition: Definition of the property
        :param editable: Is this editable?
        """

        self.name = prop_name

        self.units = units

        self.tpe = tpe

        self.definition = definition

        self.editable = editable

    def __str__(self):
        return self.name

    def __repr__(self):
        return "prop:" + self.name


class EditableDevice:
    """
    This is the main device class from which all inherit
    """

    def __init__(self,
                 name: str,
                 idtag: Union[str, None],
                 code: str,
                 device_type: DeviceType):
        """
        Class to generalize any editable device
        :param name: Asset's name
        :param idtag: unique ID, if not provided it is generated
        :param code: alternative code to identify this object in other databases
        :param device_type: DeviceType instance
        """

        self._idtag = parse_idtag(val=idtag)

        self._name: str = name

        self.code: str = code

        self.device_type: DeviceType = device_type

        self.property_list: List[GCProp] = list()

        self.registered_properties: Dict[str, GCProp] = dict()

        # simulation-side attachments (indices, inner variables, references...)
        self.ext: Dict[str, Any] = dict()

        self.register(key='idtag', units='', tpe=str, definition='Unique ID', editable=False)
        self.register(key='name', units='', tpe=str, definition='Name of the device.')
        self.register(key='code', units='', tpe=str, definition='Secondary ID')

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return self.idtag + '::' + self.name

    def __hash__(self) -> int:
        return hash(self.idtag)

    def __eq__(self, other) -> bool:
        if hasattr(other, 'idtag'):
            return self.idtag == other.idtag
        else:
            return False

    @property
    def idtag(self) -> str:
        """
        idtag getter
        :return: string, hopefully an UUIDv4
        """
        return self._idtag

    @idtag.setter
    def idtag(self, val: Union[str, None]):
        self._idtag = parse_idtag(val)

    @property
    def name(self) -> str:
        """
        Name of the object
        """
        return self._name

    @name.setter
    def name(self, val: str):
        self._name = val

    def register(self,
                 key: str,
                 units: str,
                 tpe: Union[Type, DeviceType],
                 definition: str,
                 editable: bool = True):
        """
        Register property
        The property must exist
        :param key: attribute name
        :param units: string with the declared units
        :param tpe: type of the attribute
        :param definition: Definition of the property
        :param editable: is this editable?
        """
        assert (hasattr(self, key))  # the property must exist, this avoids bugs when registering

        if key in self.registered_properties.keys():
            raise Exception(f"Property {key} already registered!")

        prop = GCProp(prop_name=key,
                      units=units,
                      tpe=tpe,
                      definition=definition,
                      editable=editable)

        self.registered_properties[key] = prop

        self.property_list.append(prop)

    def get_save_data(self) -> Dict[str, Any]:
        """
        Get the registered properties as a dictionary of plain values.
        References to other devices are stored by idtag.
        :return: Dict[property name, value]
        """
        data = dict()
        for name, prop in self.registered_properties.items():
            obj = getattr(self, name)
            if obj is None or isinstance(obj, (str, float, int, bool)):
                data[name] = obj
            elif isinstance(obj, complex):
                data[name] = [obj.real, obj.imag]
            elif isinstance(obj, Enum):
                data[name] = str(obj.value)
            elif hasattr(obj, 'get_save_data') and isinstance(prop.tpe, DeviceType) \
                    and prop.tpe == DeviceType.DynamicComponentDevice:
                # owned sub-models are stored inline
                data[name] = obj.get_save_data()
            elif hasattr(obj, 'idtag'):
                data[name] = obj.idtag
            else:
                data[name] = float(obj) if hasattr(obj, '__float__') else str(obj)
        data['device_type'] = self.device_type.value
        return data
