# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0


class SimulationError(Exception):
    """Base class for exceptions in the dynamic simulation modules."""
    pass


class IndexingError(SimulationError):
    """Exception raised when a device state cannot be resolved or is claimed twice."""
    def __init__(self, device_name, state_name, message="State could not be indexed"):
        self.device_name = device_name
        self.state_name = state_name
        self.message = f"{message}: {state_name} in {device_name}"
        super().__init__(self.message)


class SimulationBuildError(SimulationError):
    """Exception raised when the power system cannot be assembled into a simulation."""
    def __init__(self, message="The power system is malformed"):
        self.message = message
        super().__init__(self.message)


class SingularAlgebraicJacobianError(SimulationError):
    """Exception raised when the algebraic block of the Jacobian (gy) cannot be inverted."""
    def __init__(self, rcond=0.0, message="The algebraic Jacobian block is singular"):
        self.rcond = rcond
        self.message = f"{message} (rcond={rcond:.3e})"
        super().__init__(self.message)
