# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Scheduled changes applied to a system during a dynamic simulation.
Each perturbation is a (time, effect) pair; the effects set absolute values so
that applying them twice at the same instant is harmless.
"""
from typing import Union, Any, TYPE_CHECKING
from DynaGridEngine.enumerations import DeviceType
from DynaGridEngine.exceptions import SimulationBuildError
from DynaGridEngine.Devices.Parents.editable_device import EditableDevice
from DynaGridEngine.Devices.Branches.line import Line, DynamicLine
from DynaGridEngine.Devices.Injections.load import Load
from DynaGridEngine.Devices.Injections.source import Source
from DynaGridEngine.Devices.Injections.dynamic_injection import DynamicInjection
from DynaGridEngine.Devices.Dynamic.inner_vars import ControlRefs

if TYPE_CHECKING:
    from DynaGridEngine.Devices.power_system import PowerSystem


class Perturbation(EditableDevice):
    """
    Parent of all the perturbations
    """

    # does the effect change the network admittances?
    structural: bool = False

    # device class that the perturbation acts upon
    target_class: Any = EditableDevice

    def __init__(self, time: float, device: EditableDevice, name: str = 'Perturbation',
                 idtag: Union[str, None] = None):
        """

        :param time: trigger time (s)
        :param device: device to act upon (it is matched by idtag against the simulated system)
        :param name: name
        :param idtag: unique id
        """
        EditableDevice.__init__(self, name=name, idtag=idtag, code='', device_type=DeviceType.PerturbationDevice)

        self.time = float(time)

        self.device_idtag: str = device.idtag

        self.register(key='time', units='s', tpe=float, definition='Trigger time')
        self.register(key='device_idtag', units='', tpe=str, definition='idtag of the affected device')

    def get_target(self, system: "PowerSystem") -> Any:
        """
        Find the affected device in the simulated system
        :param system: PowerSystem
        :return: device
        """
        elm = system.get_device_by_idtag(self.device_idtag)
        if elm is None:
            raise SimulationBuildError(f"{self.__class__.__name__} {self.name}: device {self.device_idtag} "
                                       f"is not part of the system")
        if not isinstance(elm, self.target_class):
            raise SimulationBuildError(f"{self.__class__.__name__} {self.name}: {elm.name} is a "
                                       f"{elm.__class__.__name__}, expected a {self.target_class.__name__}")
        return elm

    def apply(self, target: Any) -> None:
        """
        Apply the effect to the device
        :param target: device returned by get_target
        """
        raise NotImplementedError()


class BranchTrip(Perturbation):
    """
    Disconnect a line
    """
    structural = True
    target_class = Line

    def __init__(self, time: float, branch: Union[Line, DynamicLine], name: str = 'BranchTrip',
                 idtag: Union[str, None] = None):
        if isinstance(branch, DynamicLine):
            branch = branch.line
        Perturbation.__init__(self, time=time, device=branch, name=name, idtag=idtag)

    def apply(self, target: Line) -> None:
        target.active = False


class BranchImpedanceChange(Perturbation):
    """
    Scale the series impedance of a line
    """
    structural = True
    target_class = Line

    def __init__(self, time: float, branch: Union[Line, DynamicLine], multiplier: float,
                 name: str = 'BranchImpedanceChange', idtag: Union[str, None] = None):
        if isinstance(branch, DynamicLine):
            branch = branch.line
        Perturbation.__init__(self, time=time, device=branch, name=name, idtag=idtag)

        self.multiplier = float(multiplier)

        self.register(key='multiplier', units='', tpe=float, definition='Impedance multiplier')

    def apply(self, target: Line) -> None:
        # the impedance before the change is kept on the line itself
        R0, X0 = target.ext.setdefault('impedance_before_' + self.idtag, (target.R, target.X))
        target.R = R0 * self.multiplier
        target.X = X0 * self.multiplier


class ControlReferenceChange(Perturbation):
    """
    Step on one of the control references of a dynamic injection
    """
    target_class = DynamicInjection

    SIGNALS = {'V_ref': ControlRefs.V_REF,
               'omega_ref': ControlRefs.OMEGA_REF,
               'P_ref': ControlRefs.P_REF,
               'Q_ref': ControlRefs.Q_REF}

    def __init__(self, time: float, device: DynamicInjection, signal: str, value: float,
                 name: str = 'ControlReferenceChange', idtag: Union[str, None] = None):
        """

        :param time: trigger time (s)
        :param device: dynamic injection
        :param signal: one of V_ref, omega_ref, P_ref, Q_ref
        :param value: new value of the reference (p.u.)
        :param name: name
        :param idtag: unique id
        """
        Perturbation.__init__(self, time=time, device=device, name=name, idtag=idtag)

        if signal not in self.SIGNALS:
            raise SimulationBuildError(f"Unknown control reference {signal}, "
                                       f"expected one of {', '.join(self.SIGNALS.keys())}")

        self.signal = signal

        self.value = float(value)

        self.register(key='signal', units='', tpe=str, definition='Control reference')
        self.register(key='value', units='p.u.', tpe=float, definition='New value')

    def apply(self, target: DynamicInjection) -> None:
        target.ext['control_refs'][self.SIGNALS[self.signal]] = self.value


class LoadChange(Perturbation):
    """
    Change the consumption of a load
    """
    target_class = Load

    def __init__(self, time: float, load: Load, P: Union[float, None] = None, Q: Union[float, None] = None,
                 name: str = 'LoadChange', idtag: Union[str, None] = None):
        """

        :param time: trigger time (s)
        :param load: Load
        :param P: new active power (MW), unchanged if None
        :param Q: new reactive power (MVAr), unchanged if None
        :param name: name
        :param idtag: unique id
        """
        Perturbation.__init__(self, time=time, device=load, name=name, idtag=idtag)

        self.P = P

        self.Q = Q

        self.register(key='P', units='MW', tpe=float, definition='New active power')
        self.register(key='Q', units='MVAr', tpe=float, definition='New reactive power')

    def apply(self, target: Load) -> None:
        if self.P is not None:
            target.P = float(self.P)
        if self.Q is not None:
            target.Q = float(self.Q)


class SourceBusVoltageChange(Perturbation):
    """
    Change the internal voltage of an ideal source
    """
    target_class = Source

    SIGNALS = ('V_ref', 'theta_ref')

    def __init__(self, time: float, source: Source, signal: str, value: float,
                 name: str = 'SourceBusVoltageChange', idtag: Union[str, None] = None):
        """

        :param time: trigger time (s)
        :param source: Source
        :param signal: V_ref or theta_ref
        :param value: new value (p.u. or rad)
        :param name: name
        :param idtag: unique id
        """
        Perturbation.__init__(self, time=time, device=source, name=name, idtag=idtag)

        if signal not in self.SIGNALS:
            raise SimulationBuildError(f"Unknown source signal {signal}, expected one of {', '.join(self.SIGNALS)}")

        self.signal = signal

        self.value = float(value)

        self.register(key='signal', units='', tpe=str, definition='Source signal')
        self.register(key='value', units='', tpe=float, definition='New value')

    def apply(self, target: Source) -> None:
        setattr(target, self.signal, self.value)
