# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import os
from pathlib import Path

os.environ.setdefault("MPLBACKEND", "Agg")

import numpy as np
import pytest
from DynaGridEngine.Devices import (PowerSystem, Bus, Line, Load, Source, DynamicGenerator, DynamicInverter,
                                    SingleMass)

ROOT_PATH = Path(__file__).parent


def build_omib(D: float = 2.0, H: float = 3.0, dynamic_line: bool = False, b: float = 0.0) -> PowerSystem:
    """
    One machine against an infinite bus:

        G1 -- B1 ---- L12 ---- B2 -- infinite source

    The generator set points are the flows that keep the stored bus voltages
    """
    system = PowerSystem(name='OMIB', Sbase=100.0, fBase=60.0)
    bus1 = system.add_bus(Bus(name='B1', number=1, Vm=1.02, Va=0.1))
    bus2 = system.add_bus(Bus(name='B2', number=2, Vm=1.0, Va=0.0))

    line = Line(bus_from=bus1, bus_to=bus2, name='L12', r=0.01, x=0.1, b=b)
    if dynamic_line:
        system.add_dynamic_line(line)
    else:
        system.add_line(line)

    yff, yft, _, _ = line.get_primitives()
    V1 = bus1.voltage
    V2 = bus2.voltage
    S1 = V1 * np.conj(yff * V1 + yft * V2) * system.Sbase

    system.add_generator(bus1, DynamicGenerator(name='G1', shaft=SingleMass(H=H, D=D),
                                                base_power=100.0, P=S1.real, Q=S1.imag))
    system.add_source(bus2, Source(name='Infinite bus'))
    return system


def build_isolated_generator(P: float = 50.0, Q: float = 10.0, D: float = 2.0) -> PowerSystem:
    """
    One generator feeding one load, without any reference source
    """
    system = PowerSystem(name='Isolated', Sbase=100.0, fBase=50.0)
    bus1 = system.add_bus(Bus(name='B1', number=1, Vm=1.0, Va=0.0))
    system.add_generator(bus1, DynamicGenerator(name='G1', shaft=SingleMass(H=3.0, D=D),
                                                base_power=100.0, P=P, Q=Q))
    system.add_load(bus1, Load(name='Load1', P=P, Q=Q))
    return system


def build_inverter_case() -> PowerSystem:
    """
    Grid forming inverter connected to an infinite bus
    """
    system = PowerSystem(name='Inverter', Sbase=100.0, fBase=50.0)
    bus1 = system.add_bus(Bus(name='B1', number=1, Vm=1.0, Va=0.02))
    bus2 = system.add_bus(Bus(name='B2', number=2, Vm=1.0, Va=0.0))
    system.add_line(Line(bus_from=bus1, bus_to=bus2, name='L12', r=0.01, x=0.05))
    system.add_inverter(bus1, DynamicInverter(name='INV1', base_power=50.0, P=20.0, Q=0.0))
    system.add_source(bus2, Source(name='Infinite bus'))
    return system


@pytest.fixture
def root_path():
    return ROOT_PATH


@pytest.fixture
def omib_system() -> PowerSystem:
    return build_omib()


@pytest.fixture
def isolated_system() -> PowerSystem:
    return build_isolated_generator()


@pytest.fixture
def inverter_system() -> PowerSystem:
    return build_inverter_case()


@pytest.fixture
def omib_builder():
    """
    Access to the OMIB builder with custom parameters
    """
    return build_omib
