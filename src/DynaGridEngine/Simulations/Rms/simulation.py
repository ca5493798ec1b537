# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import os
from typing import Sequence, Tuple, Union
import numpy as np
from DynaGridEngine.basic_structures import Vec, Logger, StrList
from DynaGridEngine.enumerations import SimulationStatus, DynamicIntegrationMethod
from DynaGridEngine.Devices.power_system import PowerSystem
from DynaGridEngine.Devices.perturbations import Perturbation
from DynaGridEngine.IO.json_io import save_system_json
from DynaGridEngine.Simulations.Rms.rms_options import RmsOptions
from DynaGridEngine.Simulations.Rms.rms_results import RmsResults
from DynaGridEngine.Simulations.Rms.simulation_inputs import SimulationInputs
from DynaGridEngine.Simulations.Rms.system_model import dae_residual
from DynaGridEngine.Simulations.Rms.perturbation_engine import build_perturbations
from DynaGridEngine.Simulations.Rms.initialization import flat_start, initialize_simulation
from DynaGridEngine.Simulations.Rms.problems.rms_problem import RmsProblem
from DynaGridEngine.Simulations.Rms.numerical.integration_methods import (ImplicitIntegrator, Trapezoid,
                                                                          BackEuler)
from DynaGridEngine.Simulations.SmallSignal.small_signal_results import SmallSignalResults


class Simulation:
    """
    Dynamic simulation of a power system.

    The constructor builds everything (indexing, admittances, callbacks and the DAE problem)
    and raises if the system is malformed. Afterwards the simulation is initialized (optional),
    run and / or linearized. Once a perturbation has been applied the simulated system has
    been modified, and the simulation is flagged as reset: it cannot be run or analysed again.
    """

    def __init__(self,
                 system: PowerSystem,
                 tspan: Tuple[float, float] = (0.0, 1.0),
                 perturbations: Sequence[Perturbation] = (),
                 options: Union[RmsOptions, None] = None,
                 simulation_folder: Union[str, None] = None,
                 logger: Union[Logger, None] = None):
        """

        :param system: PowerSystem
        :param tspan: (start time, end time) in seconds
        :param perturbations: list of Perturbation
        :param options: RmsOptions
        :param simulation_folder: folder for the json snapshots
        :param logger: Logger
        """
        self.options = options if options is not None else RmsOptions()

        self.logger = logger if logger is not None else Logger()

        self.system = system.copy() if self.options.copy_system else system

        self.tspan = (float(tspan[0]), float(tspan[1]))

        self.perturbations = list(perturbations)

        self.simulation_folder = simulation_folder

        self.initialized = False

        self.reset = False

        self.results: Union[RmsResults, None] = None

        self.small_signal_results: Union[SmallSignalResults, None] = None

        if self.tspan[1] < self.tspan[0]:
            raise ValueError(f"Wrong time span {self.tspan}")

        self.inputs = SimulationInputs(self.system)

        self.x0 = flat_start(self.inputs)

        self.callbacks, self.tstops = build_perturbations(system=self.system,
                                                          perturbations=self.perturbations,
                                                          inputs=self.inputs,
                                                          logger=self.logger)

        self.problem = self.build_problem()

        self.status = SimulationStatus.BuiltOk

        if self.options.system_to_file:
            self.save_system('input_system.json')

        if self.options.initialize_simulation:
            self.initialize()
        elif self.options.initial_guess is not None:
            self.set_initial_state(np.array(self.options.initial_guess, dtype=float))

    def build_problem(self) -> RmsProblem:
        """
        Assemble the DAE problem with the current initial state
        """
        return RmsProblem(residual=dae_residual,
                          dx0=np.zeros(self.inputs.variable_count),
                          x0=self.x0.copy(),
                          tspan=self.tspan,
                          inputs=self.inputs,
                          differential_vars=self.inputs.differential_vars,
                          callbacks=self.callbacks,
                          tstops=self.tstops)

    def set_initial_state(self, x0: Vec) -> None:
        """
        Replace the initial state of the problem
        """
        if len(x0) != self.inputs.variable_count:
            raise ValueError(f"The initial state has {len(x0)} values, {self.inputs.variable_count} expected")
        self.x0 = x0
        self.problem = self.build_problem()

    def get_variable_count(self) -> int:
        return self.inputs.variable_count

    def get_state_names(self) -> StrList:
        return self.inputs.get_state_names()

    def save_system(self, file_name: str) -> None:
        """
        Write the simulated system to the simulation folder
        """
        folder = self.simulation_folder if self.simulation_folder is not None else os.getcwd()
        os.makedirs(folder, exist_ok=True)
        path = os.path.join(folder, file_name)
        self.logger += save_system_json(self.system, path, extra={'x0': self.x0})

    def initialize(self) -> bool:
        """
        Find a consistent initial state
        :return: success?
        """
        x0, converged, res = initialize_simulation(inputs=self.inputs,
                                                   tol=self.options.init_tol,
                                                   max_iter=self.options.init_max_iter,
                                                   initial_guess=self.options.initial_guess,
                                                   logger=self.logger)
        self.set_initial_state(x0)
        self.initialized = converged

        if converged:
            self.logger.add_info("Simulation initialized", value=res.iterations)
        else:
            self.status = SimulationStatus.InitializationFailed
            self.logger.add_warning("The simulation is not initialized, it will start from the initial guess",
                                    value=res.error)

        if self.options.system_to_file:
            self.save_system('initialized_system.json')

        return converged

    def get_integrator(self) -> ImplicitIntegrator:
        """
        Integrator selected in the options
        """
        kwargs = dict(time_step=self.options.time_step,
                      min_step=self.options.min_step,
                      tol=self.options.newton_tol,
                      max_iter=self.options.newton_max_iter,
                      reinitialize_after_events=self.options.reinitialize_after_events,
                      logger=self.logger)

        if self.options.integration_method == DynamicIntegrationMethod.Trapezoid:
            return Trapezoid(**kwargs)
        elif self.options.integration_method == DynamicIntegrationMethod.BackEuler:
            return BackEuler(**kwargs)
        else:
            raise ValueError(f"integrator not implemented :( {self.options.integration_method}")

    def run(self) -> SimulationStatus:
        """
        Integrate the system over the time span
        :return: SimulationStatus
        """
        if self.reset:
            self.logger.add_error("The simulation has been reset by its perturbations, build a new one")
            return SimulationStatus.SimulationReset

        integrator = self.get_integrator()
        res = integrator.solve(self.problem)

        self.status = SimulationStatus.SimulationSuccess if res.success else SimulationStatus.SimulationFailed

        self.results = RmsResults(time=res.t,
                                  values=res.x,
                                  state_names=self.get_state_names(),
                                  n_bus=self.inputs.n_bus,
                                  status=self.status,
                                  event_times=res.event_times)

        if self.callbacks.any_fired():
            self.reset = True

        self.logger.add_info("Integration finished", device=integrator.name, value=res.n_steps,
                             sim_time=float(res.t[-1]))

        return self.status

    def small_signal_analysis(self, operating_point: Union[Vec, None] = None) -> Union[SmallSignalResults, None]:
        """
        Linearize the system and compute its eigenvalues
        :param operating_point: state vector (the initial state if None)
        :return: SmallSignalResults, None if the simulation has been reset
        """
        # imported here, the analysis module depends on the Rms package
        from DynaGridEngine.Simulations.SmallSignal.small_signal_analysis import small_signal_analysis

        if self.reset:
            self.logger.add_error("The simulation has been reset by its perturbations, build a new one")
            return None

        self.small_signal_results = small_signal_analysis(self, operating_point=operating_point)
        return self.small_signal_results
