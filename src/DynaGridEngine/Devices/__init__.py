# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0

from DynaGridEngine.Devices.Parents.editable_device import EditableDevice
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent, ComponentContext
from DynaGridEngine.Devices.bus import Bus
from DynaGridEngine.Devices.Branches import Line, DynamicLine
from DynaGridEngine.Devices.Injections import Load, Source, DynamicInjection, DynamicGenerator, DynamicInverter
from DynaGridEngine.Devices.Dynamic import *
from DynaGridEngine.Devices.power_system import PowerSystem
from DynaGridEngine.Devices.perturbations import (Perturbation, BranchTrip, BranchImpedanceChange,
                                                  ControlReferenceChange, LoadChange, SourceBusVoltageChange)
