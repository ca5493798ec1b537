# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Type, Union
from DynaGridEngine.Devices.Parents.editable_device import EditableDevice
from DynaGridEngine.enumerations import DeviceType


class OptionsTemplate(EditableDevice):
    """
    Options template
    """

    def __init__(self, name: str):
        """

        :param name:
        """
        EditableDevice.__init__(self, name=name,
                                idtag=None,
                                code="",
                                device_type=DeviceType.SimulationOptionsDevice)

    def register(self, key: str, tpe: Union[Type, DeviceType], units: str = '', definition: str = '',
                 editable: bool = True):
        """
        Register an option
        :param key: attribute name
        :param tpe: type
        :param units: units
        :param definition: definition
        :param editable: editable?
        """
        EditableDevice.register(self, key=key, units=units, tpe=tpe, definition=definition, editable=editable)
