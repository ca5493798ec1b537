# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Sequence, Tuple, Union
from DynaGridEngine.Devices.power_system import PowerSystem
from DynaGridEngine.Devices.perturbations import Perturbation
from DynaGridEngine.Simulations.driver_template import DriverTemplate
from DynaGridEngine.Simulations.Rms.rms_options import RmsOptions
from DynaGridEngine.Simulations.Rms.rms_results import RmsResults
from DynaGridEngine.Simulations.Rms.simulation import Simulation
from DynaGridEngine.enumerations import SimulationTypes, SimulationStatus
from DynaGridEngine.exceptions import SimulationError


class RmsSimulationDriver(DriverTemplate):
    name = 'RMS simulation'
    tpe = SimulationTypes.Rms_run

    """
    Dynamic simulation driver
    """

    def __init__(self, system: PowerSystem,
                 options: Union[RmsOptions, None] = None,
                 tspan: Tuple[float, float] = (0.0, 1.0),
                 perturbations: Sequence[Perturbation] = (),
                 simulation_folder: Union[str, None] = None):
        """
        RmsSimulationDriver class constructor
        :param system: PowerSystem instance
        :param options: RmsOptions instance (optional)
        :param tspan: (start time, end time) in seconds
        :param perturbations: list of Perturbation
        :param simulation_folder: folder for the json snapshots (optional)
        """
        DriverTemplate.__init__(self, system=system)

        self.options = options if options is not None else RmsOptions()

        self.tspan = tspan

        self.perturbations = list(perturbations)

        self.simulation_folder = simulation_folder

        self.simulation: Union[Simulation, None] = None

        self.results = RmsResults()

    def run(self):
        """
        Build, initialize and integrate the simulation.
        Malformed systems are reported in the logger.
        """
        self.tic()
        self.report_text('Building the simulation...')

        try:
            self.simulation = Simulation(system=self.system,
                                         tspan=self.tspan,
                                         perturbations=self.perturbations,
                                         options=self.options,
                                         simulation_folder=self.simulation_folder,
                                         logger=self.logger)
        except SimulationError as e:
            self.logger.add_error(str(e), device=self.system.name)
            self.results = RmsResults(status=SimulationStatus.SimulationFailed)
            self.toc()
            return

        self.report_progress(10.0)
        self.report_text('Running the time domain simulation...')

        self.simulation.run()
        self.results = self.simulation.results

        self.toc()
        self.report_done()
