# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0

from DynaGridEngine.Simulations.Rms.rms_options import RmsOptions
from DynaGridEngine.Simulations.Rms.rms_results import RmsResults
from DynaGridEngine.Simulations.Rms.simulation_inputs import SimulationInputs, AuxiliaryArrays
from DynaGridEngine.Simulations.Rms.system_model import system_model, dae_residual
from DynaGridEngine.Simulations.Rms.perturbation_engine import build_perturbations, CallbackSet, DiscreteCallback
from DynaGridEngine.Simulations.Rms.simulation import Simulation
from DynaGridEngine.Simulations.Rms.rms_driver import RmsSimulationDriver
