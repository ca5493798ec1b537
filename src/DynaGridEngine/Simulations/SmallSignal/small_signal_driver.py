# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Union
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.Devices.power_system import PowerSystem
from DynaGridEngine.Simulations.driver_template import DriverTemplate
from DynaGridEngine.Simulations.Rms.rms_options import RmsOptions
from DynaGridEngine.Simulations.Rms.simulation import Simulation
from DynaGridEngine.Simulations.SmallSignal.small_signal_results import SmallSignalResults
from DynaGridEngine.enumerations import SimulationTypes
from DynaGridEngine.exceptions import SimulationError


class SmallSignalDriver(DriverTemplate):
    name = 'Small signal analysis'
    tpe = SimulationTypes.SmallSignal_run

    def __init__(self, system: PowerSystem,
                 options: Union[RmsOptions, None] = None,
                 operating_point: Union[Vec, None] = None):
        """
        SmallSignalDriver class constructor
        :param system: PowerSystem instance
        :param options: RmsOptions instance (optional)
        :param operating_point: state vector to linearize at (the initialized state if None)
        """
        DriverTemplate.__init__(self, system=system)

        self.options = options if options is not None else RmsOptions()

        self.operating_point = operating_point

        self.simulation: Union[Simulation, None] = None

        self.results: Union[SmallSignalResults, None] = None

    def run(self):
        """
        Build and initialize the simulation, then linearize it
        """
        self.tic()
        self.report_text('Linearizing...')

        try:
            self.simulation = Simulation(system=self.system,
                                         tspan=(0.0, 0.0),
                                         options=self.options,
                                         logger=self.logger)

            self.results = self.simulation.small_signal_analysis(operating_point=self.operating_point)

        except SimulationError as e:
            self.logger.add_error(str(e), device=self.system.name)

        self.toc()
        self.report_done()
