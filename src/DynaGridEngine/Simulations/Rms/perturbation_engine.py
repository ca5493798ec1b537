# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Conversion of the scheduled perturbations into discrete callbacks for the integrator
"""
from typing import Callable, List, Tuple, Any, Sequence, Union
from DynaGridEngine.basic_structures import Vec, Logger
from DynaGridEngine.enumerations import PerturbationStatus
from DynaGridEngine.Devices.power_system import PowerSystem
from DynaGridEngine.Devices.perturbations import Perturbation
from DynaGridEngine.Simulations.Rms.simulation_inputs import SimulationInputs


class DiscreteCallback:
    """
    Effect applied by the integrator when its condition holds at the end of a step
    """

    def __init__(self, condition: Callable[[Vec, float, Any], bool],
                 affect: Callable[[Any], None],
                 perturbation: Union[Perturbation, None] = None):
        """

        :param condition: condition(x, t, integrator) -> bool
        :param affect: affect(integrator)
        :param perturbation: perturbation represented by this callback
        """
        self.condition = condition
        self.affect = affect
        self.perturbation = perturbation
        self.status = PerturbationStatus.Scheduled

    def __call__(self, x: Vec, t: float, integrator: Any) -> bool:
        """
        Apply the effect if the condition holds
        :return: was the effect applied?
        """
        if self.condition(x, t, integrator):
            self.affect(integrator)
            self.status = PerturbationStatus.Fired
            return True
        return False

    @property
    def fired(self) -> bool:
        return self.status == PerturbationStatus.Fired


class CallbackSet:
    """
    Collection of discrete callbacks
    """

    def __init__(self, callbacks: Sequence[DiscreteCallback] = ()):
        self.callbacks: List[DiscreteCallback] = list(callbacks)

    def __len__(self) -> int:
        return len(self.callbacks)

    def __iter__(self):
        return iter(self.callbacks)

    def __getitem__(self, item) -> DiscreteCallback:
        return self.callbacks[item]

    def apply(self, x: Vec, t: float, integrator: Any) -> bool:
        """
        Evaluate every callback at the given point
        :return: did any of them fire?
        """
        fired = False
        for callback in self.callbacks:
            fired |= callback(x, t, integrator)
        return fired

    def any_fired(self) -> bool:
        return any(callback.fired for callback in self.callbacks)


def make_callback(system: PowerSystem, perturbation: Perturbation, inputs: SimulationInputs,
                  logger: Union[Logger, None] = None) -> DiscreteCallback:
    """
    Build the callback of one perturbation.
    The affected device is resolved here, so that a wrong reference fails the build.
    :param system: simulated PowerSystem
    :param perturbation: Perturbation
    :param inputs: SimulationInputs of the simulation
    :param logger: Logger to record the events (optional)
    :return: DiscreteCallback
    """
    target = perturbation.get_target(system)
    trigger_time = perturbation.time

    def condition(x: Vec, t: float, integrator: Any) -> bool:
        return t == trigger_time

    def affect(integrator: Any) -> None:
        perturbation.apply(target)
        if perturbation.structural:
            inputs.update_ybus()
        if logger is not None:
            logger.add_info(f"{perturbation.__class__.__name__} applied", device=target.name,
                            sim_time=trigger_time)

    return DiscreteCallback(condition=condition, affect=affect, perturbation=perturbation)


def build_perturbations(system: PowerSystem, perturbations: Sequence[Perturbation],
                        inputs: SimulationInputs,
                        logger: Union[Logger, None] = None) -> Tuple[CallbackSet, List[float]]:
    """
    Build the callbacks and the stop times of a list of perturbations
    :param system: simulated PowerSystem
    :param perturbations: list of Perturbation
    :param inputs: SimulationInputs of the simulation
    :param logger: Logger to record the events (optional)
    :return: CallbackSet, sorted list of times where the integrator must stop
    """
    if len(perturbations) == 0:
        return CallbackSet(), [0.0]

    callbacks = [make_callback(system, pert, inputs, logger) for pert in perturbations]

    tstops = sorted(set(pert.time for pert in perturbations))

    for callback in callbacks:
        callback.status = PerturbationStatus.Armed

    return CallbackSet(callbacks), tstops
