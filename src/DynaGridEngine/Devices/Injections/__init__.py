# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0

from DynaGridEngine.Devices.Injections.load import Load
from DynaGridEngine.Devices.Injections.source import Source
from DynaGridEngine.Devices.Injections.dynamic_injection import DynamicInjection
from DynaGridEngine.Devices.Injections.dynamic_generator import DynamicGenerator
from DynaGridEngine.Devices.Injections.dynamic_inverter import DynamicInverter
