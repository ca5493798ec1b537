# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0

from DynaGridEngine.__version__ import __DynaGridEngine_VERSION__
from DynaGridEngine.enumerations import *
from DynaGridEngine.exceptions import (SimulationError, IndexingError, SimulationBuildError,
                                       SingularAlgebraicJacobianError)
from DynaGridEngine.basic_structures import Logger, LogEntry
from DynaGridEngine.Devices import *
from DynaGridEngine.Simulations import *
from DynaGridEngine.IO import *
