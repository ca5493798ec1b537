# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import os
import re
import numpy as np
from DynaGridEngine.enumerations import LoadModel, DeviceType
from DynaGridEngine.__version__ import __DynaGridEngine_VERSION__
from DynaGridEngine.Devices import Load, Source, Line, DynamicLine, Bus, BranchTrip
from DynaGridEngine.Simulations import RmsOptions
from DynaGridEngine.IO import save_system_json, load_system_json_data


def test_load_models_at_nominal_voltage():
    """
    Every load model consumes its nominal power at its reference voltage
    """
    V = 0.98 * np.exp(-0.05j)
    for model in [LoadModel.ConstantImpedance, LoadModel.ConstantCurrent, LoadModel.ConstantPower]:
        load = Load(P=30.0, Q=12.0, model=model)
        I = load.current_injection(V.real, V.imag, V0=0.98, Sbase=100.0)
        S = -V * np.conj(I)
        assert np.isclose(S, 0.3 + 0.12j)


def test_load_models_voltage_dependence():
    V = 0.9 + 0j
    S = dict()
    for model in [LoadModel.ConstantImpedance, LoadModel.ConstantCurrent, LoadModel.ConstantPower]:
        load = Load(P=100.0, Q=0.0, model=model)
        S[model] = (-V * np.conj(load.current_injection(V.real, V.imag, V0=1.0, Sbase=100.0))).real

    assert np.isclose(S[LoadModel.ConstantImpedance], 0.81)
    assert np.isclose(S[LoadModel.ConstantCurrent], 0.9)
    assert np.isclose(S[LoadModel.ConstantPower], 1.0)


def test_disconnected_load():
    load = Load(P=30.0, Q=12.0, active=False)
    assert load.current_injection(1.0, 0.0, V0=1.0, Sbase=100.0) == 0j


def test_source_operating_point():
    source = Source(R_th=0.001, X_th=0.01)
    V = 1.01 * np.exp(0.02j)
    I = 0.5 - 0.2j
    source.set_operating_point(V, I, Sbase=100.0)

    assert np.isclose(source.current_injection(V.real, V.imag), I)
    assert np.isclose(complex(source.P, source.Q), V * np.conj(I) * 100.0)


def test_dynamic_line_steady_state():
    line = Line(bus_from=Bus(number=1), bus_to=Bus(number=2), r=0.02, x=0.2, b=0.1)
    dyn = DynamicLine(line)
    assert dyn.name == line.name
    assert dyn.states == ['Il_R', 'Il_I']

    vf = 1.0 + 0.1j
    vt = 0.98 + 0j
    I = dyn.steady_state_current(vf, vt)
    d = dyn.ode(np.array([I.real, I.imag]), vf, vt, 1.0, 2 * np.pi * 50)
    assert np.allclose(d, 0.0)

    line.active = False
    assert not dyn.active


def test_json_snapshot(omib_system, tmp_path):
    path = os.path.join(str(tmp_path), 'omib.json')
    logger = save_system_json(omib_system, path, extra={'x0': np.arange(3.0)})
    assert logger.info_count() == 1

    data = load_system_json_data(path)
    assert data['x0'] == [0.0, 1.0, 2.0]
    assert data['software'] == 'DynaGridEngine'
    assert 'system' in data


def test_every_device_type_is_produced(omib_builder, isolated_system, inverter_system):
    systems = [omib_builder(), omib_builder(dynamic_line=True), isolated_system, inverter_system]
    types = {elm.device_type for system in systems for elm in system.get_elements()}
    types |= {system.device_type for system in systems}

    omib = systems[0]
    types.add(omib.generators[0].machine.device_type)
    types.add(BranchTrip(time=1.0, branch=omib.lines[0]).device_type)
    types.add(RmsOptions().device_type)

    assert types == set(DeviceType)


def test_version_string(root_path):
    with open(os.path.join(str(root_path.parent), 'DynaGridEngine', '__version__.py'), 'r', encoding='utf-8') as f:
        found = re.search(r'__DynaGridEngine_VERSION__ = "([^"]+)"', f.read())

    assert found is not None
    assert found.group(1) == __DynaGridEngine_VERSION__
    assert len(__DynaGridEngine_VERSION__.split('.')) == 3
