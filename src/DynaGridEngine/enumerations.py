# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0

from enum import Enum


class LogSeverity(Enum):
    """
    Enumeration of logs severities
    """
    Error = 'Error'
    Warning = 'Warning'
    Information = 'Information'

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)


class DeviceType(Enum):
    """
    Device types
    """
    BusDevice = 'Bus'
    LineDevice = 'Line'
    DynamicLineDevice = 'Dynamic line'
    LoadDevice = 'Load'
    SourceDevice = 'Source'
    DynamicGeneratorDevice = 'Dynamic generator'
    DynamicInverterDevice = 'Dynamic inverter'
    DynamicComponentDevice = 'Dynamic component'
    PerturbationDevice = 'Perturbation'
    PowerSystemDevice = 'Power system'
    SimulationOptionsDevice = 'Simulation options'

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)


class ComponentCategory(Enum):
    """
    Closed set of dynamic sub-model categories.
    The generator and inverter evaluation chains are explicit ordered lists of these.
    """
    Machine = 'Machine'
    Shaft = 'Shaft'
    AVR = 'AVR'
    PrimeMover = 'Prime mover'
    PSS = 'PSS'
    DCSource = 'DC source'
    FrequencyEstimator = 'Frequency estimator'
    OuterControl = 'Outer control'
    InnerControl = 'Inner control'
    Converter = 'Converter'
    Filter = 'Filter'

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)


class LoadModel(Enum):
    """
    Static load models (ZIP components)
    """
    ConstantImpedance = 'Constant impedance'
    ConstantCurrent = 'Constant current'
    ConstantPower = 'Constant power'

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)


class DynamicIntegrationMethod(Enum):
    """
    Implicit integration methods for the RMS simulation
    """
    Trapezoid = 'Trapezoid'
    BackEuler = 'Backward Euler'

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)


class SimulationStatus(Enum):
    """
    Outcome of a simulation stage
    """
    BuiltOk = 'Built'
    InitializationFailed = 'Initialization failed'
    SimulationSuccess = 'Success'
    SimulationFailed = 'Failed'
    SimulationReset = 'Reset'
    NotRun = 'Not run'

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)


class PerturbationStatus(Enum):
    """
    Life cycle of a scheduled perturbation
    """
    Scheduled = 'Scheduled'
    Armed = 'Armed'
    Fired = 'Fired'

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)


class SimulationTypes(Enum):
    """
    Enumeration of simulation types
    """
    TemplateDriver = 'Template'
    Rms_run = 'Rms simulation'
    SmallSignal_run = 'Small-signal stability'

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)
