# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0

from DynaGridEngine.Devices.Dynamic.inner_vars import GeneratorInnerVars, InverterInnerVars, ControlRefs
from DynaGridEngine.Devices.Dynamic.machines import BaseMachine, OneDOneQMachine
from DynaGridEngine.Devices.Dynamic.shafts import SingleMass
from DynaGridEngine.Devices.Dynamic.avrs import AVRFixed, AVRSimple
from DynaGridEngine.Devices.Dynamic.tgs import TGFixed, TGTypeII
from DynaGridEngine.Devices.Dynamic.pss import PSSFixed, PSSSimple
from DynaGridEngine.Devices.Dynamic.inverter_components import (FixedDCSource, KauraPLL, VirtualInertiaQDroop,
                                                                VoltageModeControl, AverageConverter, LCLFilter)
