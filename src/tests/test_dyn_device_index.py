# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
import pytest
from DynaGridEngine.basic_structures import Vec
from DynaGridEngine.enumerations import ComponentCategory
from DynaGridEngine.exceptions import IndexingError
from DynaGridEngine.Devices import (DynamicGenerator, DynamicInverter, DynamicComponent, OneDOneQMachine,
                                    AVRSimple, TGTypeII, TGFixed, GeneratorInnerVars, InverterInnerVars)
from DynaGridEngine.Devices.Parents.dynamic_component import no_derivatives
from DynaGridEngine.Simulations.Rms.device_index import (make_device_index, index_local_states,
                                                         index_port_mapping, get_local_state_ix,
                                                         get_input_port_ix, add_states_to_global)
from DynaGridEngine.Simulations.Rms.simulation_inputs import SimulationInputs


class SpeedReader(DynamicComponent):
    """
    Stabilizer that declares more ports than the generator has
    """
    category = ComponentCategory.PSS

    def __init__(self):
        DynamicComponent.__init__(self, name='SpeedReader', states=[], ports=['omega', 'not_wired', 'delta'])

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx) -> Vec:
        inner_vars[GeneratorInnerVars.V_PSS] = 0.0
        return no_derivatives()

    def initialize(self, device_states, inner_vars, refs, ctx) -> None:
        inner_vars[GeneratorInnerVars.V_PSS] = 0.0


class SpeedCopy(DynamicComponent):
    """
    Stabilizer that claims the shaft speed as its own state
    """
    category = ComponentCategory.PSS

    def __init__(self):
        DynamicComponent.__init__(self, name='SpeedCopy', states=['omega'], ports=[])

    def ode(self, states: Vec, ports: Vec, inner_vars: Vec, refs: Vec, ctx) -> Vec:
        return np.zeros(1)

    def initialize(self, device_states, inner_vars, refs, ctx) -> None:
        pass


def test_local_states():
    gen = DynamicGenerator(name='G', machine=OneDOneQMachine(), avr=AVRSimple(), prime_mover=TGTypeII())
    assert gen.states == ['eq_p', 'ed_p', 'delta', 'omega', 'Vf', 'xg']

    make_device_index(gen)

    assert list(get_local_state_ix(gen, OneDOneQMachine)) == [0, 1]
    assert list(get_local_state_ix(gen, AVRSimple)) == [4]
    assert list(get_local_state_ix(gen, TGTypeII)) == [5]
    assert list(get_input_port_ix(gen, TGTypeII)) == [3]
    assert list(get_input_port_ix(gen, OneDOneQMachine)) == [2]


def test_port_order_follows_declaration():
    """
    Ports keep the declaration order and the missing ones are skipped
    """
    gen = DynamicGenerator(name='G', pss=SpeedReader())
    assert gen.states == ['delta', 'omega']

    ports = index_port_mapping(gen, gen.pss)

    assert list(ports) == [1, 0]


def test_missing_state_fails():
    gen = DynamicGenerator(name='G')
    gen.states = ['delta']

    with pytest.raises(IndexingError) as e:
        make_device_index(gen)

    assert e.value.state_name == 'omega'
    assert e.value.device_name == 'G'


def test_index_local_states_of_foreign_component():
    gen = DynamicGenerator(name='G')
    with pytest.raises(IndexingError):
        index_local_states(gen, AVRSimple())


def test_duplicated_claim_fails():
    gen = DynamicGenerator(name='G', pss=SpeedCopy())
    assert gen.states == ['delta', 'omega', 'omega']

    with pytest.raises(IndexingError):
        make_device_index(gen)


def test_unregistered_type_is_a_programming_error():
    gen = DynamicGenerator(name='G')
    make_device_index(gen)

    assert list(get_local_state_ix(gen, TGFixed)) == []

    with pytest.raises(AssertionError):
        get_local_state_ix(gen, TGTypeII)

    with pytest.raises(AssertionError):
        get_input_port_ix(gen, TGTypeII)


def test_inner_vars_and_references():
    gen = DynamicGenerator(name='G', V_ref=1.05, omega_ref=1.0, P_ref=0.7, Q_ref=0.1)
    inv = DynamicInverter(name='I')
    make_device_index(gen)
    make_device_index(inv)

    assert len(gen.ext['inner_vars']) == GeneratorInnerVars.SIZE == 11
    assert len(inv.ext['inner_vars']) == InverterInnerVars.SIZE == 14
    assert np.allclose(gen.ext['control_refs'], [1.05, 1.0, 0.7, 0.1])

    # the references are a snapshot
    gen.V_ref = 2.0
    assert gen.ext['control_refs'][0] == 1.05


def test_inverter_states():
    inv = DynamicInverter(name='I')
    assert inv.n_states == 19
    make_device_index(inv)

    claimed = np.concatenate([get_local_state_ix(inv, type(c)) for c in inv.get_components()])
    assert sorted(claimed) == list(range(19))


def test_add_states_to_global():
    gen = DynamicGenerator(name='G')
    index = dict()
    ix = add_states_to_global(index, 4, gen)

    assert list(ix) == [4, 5]
    assert index[gen.idtag] == {'delta': 4, 'omega': 5}

    with pytest.raises(IndexingError):
        add_states_to_global(index, 6, gen)


def test_global_partition(omib_builder, inverter_system):
    """
    The device ranges cover exactly the states after the bus voltages
    """
    for system in [omib_builder(dynamic_line=True), inverter_system]:
        inputs = SimulationInputs(system)
        ranges = inputs.injection_ix_range + inputs.branch_ix_range
        all_ix = np.concatenate(ranges)

        assert len(all_ix) == len(set(all_ix))
        assert sorted(all_ix) == list(range(2 * inputs.n_bus, inputs.get_variable_count()))

        for ix in ranges:
            if len(ix):
                assert list(ix) == list(range(ix[0], ix[0] + len(ix)))


def test_inverter_variable_count(inverter_system):
    inputs = SimulationInputs(inverter_system)
    assert inputs.get_variable_count() == 2 * 2 + 19
