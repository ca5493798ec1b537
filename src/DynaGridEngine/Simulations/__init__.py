# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0

from DynaGridEngine.Simulations.driver_template import DriverTemplate
from DynaGridEngine.Simulations.options_template import OptionsTemplate
from DynaGridEngine.Simulations.Rms import *
from DynaGridEngine.Simulations.SmallSignal import *
from DynaGridEngine.Simulations.SmallSignal.small_signal_driver import SmallSignalDriver
