# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import copy
from typing import Dict, List, Tuple
import numpy as np
from DynaGridEngine.basic_structures import Vec, IntVec, BoolVec, StrList
from DynaGridEngine.exceptions import SimulationBuildError
from DynaGridEngine.Devices.power_system import PowerSystem
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent, ComponentContext
from DynaGridEngine.Devices.Injections.dynamic_injection import DynamicInjection
from DynaGridEngine.Simulations.Rms.network import get_ybus, get_bus_index
from DynaGridEngine.Simulations.Rms.device_index import (make_device_index, add_states_to_global,
                                                         get_local_state_ix, get_input_port_ix,
                                                         INNER_VARS, CONTROL_REFS)

ComponentChain = List[Tuple[DynamicComponent, IntVec, IntVec]]


class AuxiliaryArrays:
    """
    Mutable buffers of one evaluation context.
    They are reset and reused on every call of the evaluator.
    """

    def __init__(self, n_bus: int, n_inj_states: int, n_branch_states: int, inner_vars: List[Vec]):
        """

        :param n_bus: number of buses
        :param n_inj_states: number of states of the dynamic injections
        :param n_branch_states: number of states of the dynamic lines
        :param inner_vars: initial inner variables of every dynamic injection (copied)
        """
        self.n_bus = n_bus

        self.I_injections_r = np.zeros(n_bus)
        self.I_injections_i = np.zeros(n_bus)

        self.injection_ode = np.zeros(n_inj_states)
        self.branches_ode = np.zeros(n_branch_states)

        self.I_bus = np.zeros(n_bus, dtype=complex)
        self.I_balance = np.zeros(2 * n_bus)

        # values of the last completed evaluation, and the ones being computed
        self.inner_vars_prev: List[Vec] = [np.array(iv, dtype=float) for iv in inner_vars]
        self.inner_vars_new: List[Vec] = [np.array(iv, dtype=float) for iv in inner_vars]

    def reset(self) -> None:
        """
        Zero the accumulators and seed the inner variables with the last values
        """
        self.I_injections_r.fill(0.0)
        self.I_injections_i.fill(0.0)
        self.injection_ode.fill(0.0)
        self.branches_ode.fill(0.0)
        for new, prev in zip(self.inner_vars_new, self.inner_vars_prev):
            new[:] = prev

    def commit(self) -> None:
        """
        Keep the inner variables of this evaluation for the next one
        """
        for new, prev in zip(self.inner_vars_new, self.inner_vars_prev):
            prev[:] = new

    def copy(self) -> "AuxiliaryArrays":
        """
        Fresh buffers with the same sizes and the last committed inner variables
        """
        return AuxiliaryArrays(n_bus=self.n_bus,
                               n_inj_states=len(self.injection_ode),
                               n_branch_states=len(self.branches_ode),
                               inner_vars=self.inner_vars_prev)


class SimulationInputs:
    """
    Indexing scheme and parameters of a dynamic simulation.

    The global state vector is laid out as:

        [Vr (n_bus), Vi (n_bus), dynamic injection states, dynamic line states]

    Each device owns a contiguous range of it. The layout is fixed once built.
    """

    def __init__(self, system: PowerSystem, omega_sys: float = 1.0):
        """

        :param system: PowerSystem to simulate (it is referenced, not copied)
        :param omega_sys: speed of the network reference frame (p.u.)
        """
        self.system = system

        self.Sbase = system.Sbase

        self.Omega_b = 2.0 * np.pi * system.fBase

        self.omega_sys = omega_sys

        if len(system.buses) == 0:
            raise SimulationBuildError(f"{system.name} has no buses")

        self.n_bus = len(system.buses)

        self.Ybus, self.lookup = get_ybus(system)

        # static injections ------------------------------------------------------------------------------------------
        self.loads = list(system.loads)
        self.load_bus_ix = np.array([get_bus_index(elm.bus, self.lookup, elm.name) for elm in self.loads],
                                    dtype=int)

        # voltage at which each load consumes its nominal power
        self.load_V0 = np.array([elm.V0 if elm.V0 is not None else elm.bus.Vm for elm in self.loads], dtype=float)

        self.sources = list(system.sources)
        self.source_bus_ix = np.array([get_bus_index(elm.bus, self.lookup, elm.name) for elm in self.sources],
                                      dtype=int)

        # dynamic injections -----------------------------------------------------------------------------------------
        self.global_index: Dict[str, Dict[str, int]] = dict()

        self.dynamic_injections: List[DynamicInjection] = [elm for elm in system.get_dynamic_injections()
                                                           if elm.active]
        self.injection_bus_ix = np.zeros(len(self.dynamic_injections), dtype=int)
        self.injection_ix_range: List[IntVec] = list()
        self.injection_ode_range: List[IntVec] = list()
        self.contexts: List[ComponentContext] = list()
        self.chains: List[ComponentChain] = list()

        offset = 2 * self.n_bus
        for k, elm in enumerate(self.dynamic_injections):
            if elm.base_power <= 0:
                raise SimulationBuildError(f"{elm.name} has a non positive base power")

            self.injection_bus_ix[k] = get_bus_index(elm.bus, self.lookup, elm.name)

            make_device_index(elm)

            ix_range = add_states_to_global(self.global_index, offset, elm)
            self.injection_ix_range.append(ix_range)
            self.injection_ode_range.append(ix_range - 2 * self.n_bus)
            offset += elm.n_states

            self.contexts.append(ComponentContext(base_frequency=self.Omega_b,
                                                  omega_sys=self.omega_sys,
                                                  device_base_power=elm.base_power,
                                                  system_base_power=self.Sbase))

            # resolved once, so that the evaluator does no lookups
            self.chains.append([(component,
                                 get_local_state_ix(elm, type(component)),
                                 get_input_port_ix(elm, type(component)))
                                for component in elm.get_components()])

        self.n_inj_states = offset - 2 * self.n_bus

        # dynamic lines ----------------------------------------------------------------------------------------------
        self.dynamic_lines = list(system.dynamic_lines)
        self.branch_f = np.zeros(len(self.dynamic_lines), dtype=int)
        self.branch_t = np.zeros(len(self.dynamic_lines), dtype=int)
        self.branch_ix_range: List[IntVec] = list()

        for k, elm in enumerate(self.dynamic_lines):
            if elm.line.X <= 0:
                raise SimulationBuildError(f"The dynamic line {elm.name} needs a positive reactance")
            self.branch_f[k] = get_bus_index(elm.bus_from, self.lookup, elm.name)
            self.branch_t[k] = get_bus_index(elm.bus_to, self.lookup, elm.name)
            ix_range = add_states_to_global(self.global_index, offset, elm)
            self.branch_ix_range.append(ix_range)
            offset += elm.n_states

        self.n_branch_states = offset - 2 * self.n_bus - self.n_inj_states

        self.variable_count = offset

        # voltage buses: the shunt capacitance of the dynamic lines is kept at their ends ----------------------------
        capacitance = np.zeros(self.n_bus)
        for f, t, elm in zip(self.branch_f, self.branch_t, self.dynamic_lines):
            if elm.line.B > 0:
                capacitance[f] += elm.line.B / 2.0
                capacitance[t] += elm.line.B / 2.0

        self.voltage_buses: IntVec = np.where(capacitance > 0)[0]
        self.voltage_bus_capacitance: Vec = capacitance[self.voltage_buses]

        # differential / algebraic flags -----------------------------------------------------------------------------
        self.differential_vars: BoolVec = np.ones(self.variable_count, dtype=bool)
        self.differential_vars[:2 * self.n_bus] = False
        self.differential_vars[self.voltage_buses] = True
        self.differential_vars[self.n_bus + self.voltage_buses] = True

        # evaluation buffers
        self.aux = AuxiliaryArrays(n_bus=self.n_bus,
                                   n_inj_states=self.n_inj_states,
                                   n_branch_states=self.n_branch_states,
                                   inner_vars=[elm.ext[INNER_VARS] for elm in self.dynamic_injections])

    @property
    def control_refs(self) -> List[Vec]:
        """
        Control references of every dynamic injection (live, perturbations modify them)
        """
        return [elm.ext[CONTROL_REFS] for elm in self.dynamic_injections]

    def get_variable_count(self) -> int:
        return self.variable_count

    def get_bus_count(self) -> int:
        return self.n_bus

    def get_state_names(self) -> StrList:
        """
        Name of every position of the global state vector
        """
        names = [f'Vr_{bus.name}' for bus in self.system.buses] + [f'Vi_{bus.name}' for bus in self.system.buses]
        for elm in self.dynamic_injections + self.dynamic_lines:
            names += [f'{elm.name}:{state}' for state in elm.states]
        return names

    def get_state_index(self, device, state: str) -> int:
        """
        Global position of a device state
        :param device: DynamicInjection or DynamicLine
        :param state: state name
        :return: position
        """
        return self.global_index[device.idtag][state]

    def update_ybus(self) -> None:
        """
        Rebuild the admittance matrix after a change in the network
        """
        self.Ybus, self.lookup = get_ybus(self.system)

    def set_inner_vars(self, inner_vars: List[Vec]) -> None:
        """
        Set the inner variables that seed the next evaluation
        :param inner_vars: one vector per dynamic injection
        """
        for prev, new, iv in zip(self.aux.inner_vars_prev, self.aux.inner_vars_new, inner_vars):
            prev[:] = iv
            new[:] = iv

    def spawn(self) -> "SimulationInputs":
        """
        Same indexing and parameters with an independent set of evaluation buffers
        """
        other = copy.copy(self)
        other.aux = self.aux.copy()
        return other
