# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Resolution of the sub-model states and ports into integer positions.
This runs once when the simulation is built; the evaluator only uses the resulting arrays.
"""
from typing import Dict, Type, Union
import numpy as np
from DynaGridEngine.basic_structures import IntVec
from DynaGridEngine.exceptions import IndexingError
from DynaGridEngine.Devices.Parents.dynamic_component import DynamicComponent
from DynaGridEngine.Devices.Injections.dynamic_injection import DynamicInjection
from DynaGridEngine.Devices.Branches.line import DynamicLine

LOCAL_STATE_MAPPING = 'LOCAL_STATE_MAPPING'
INPUT_PORT_MAPPING = 'INPUT_PORT_MAPPING'
INNER_VARS = 'inner_vars'
CONTROL_REFS = 'control_refs'


def index_local_states(device: DynamicInjection, component: DynamicComponent) -> IntVec:
    """
    Positions of the component states in the device state list
    :param device: DynamicInjection
    :param component: one of its sub-models
    :return: array of positions, in the order of the component states
    """
    local_ix = np.zeros(component.n_states, dtype=int)
    for i, state in enumerate(component.states):
        try:
            local_ix[i] = device.states.index(state)
        except ValueError:
            raise IndexingError(device.name, state)
    return local_ix


def index_port_mapping(device: DynamicInjection, component: DynamicComponent) -> IntVec:
    """
    Positions of the component ports in the device state list.
    Ports that the device does not have are skipped.
    :param device: DynamicInjection
    :param component: one of its sub-models
    :return: array of positions, in the order of the port declaration
    """
    port_ix = [device.states.index(port) for port in component.ports if port in device.states]
    return np.array(port_ix, dtype=int)


def make_device_index(device: DynamicInjection) -> None:
    """
    Attach the state and port lookup tables, the inner variables
    and the control references to the device
    :param device: DynamicInjection
    """
    local_state_mapping: Dict[Type[DynamicComponent], IntVec] = dict()
    input_port_mapping: Dict[Type[DynamicComponent], IntVec] = dict()
    owner = dict()

    for component in device.get_components():
        tpe = type(component)
        if tpe in local_state_mapping:
            raise IndexingError(device.name, component.name,
                                message="Sub-model type used twice in the same device")

        local_ix = index_local_states(device, component)

        for i, state in zip(local_ix, component.states):
            if i in owner:
                raise IndexingError(device.name, state,
                                    message=f"State already claimed by {owner[i]}")
            owner[i] = component.name

        local_state_mapping[tpe] = local_ix
        input_port_mapping[tpe] = index_port_mapping(device, component)

    device.ext[LOCAL_STATE_MAPPING] = local_state_mapping
    device.ext[INPUT_PORT_MAPPING] = input_port_mapping
    device.ext[INNER_VARS] = np.zeros(device.n_inner_vars)
    device.ext[CONTROL_REFS] = device.get_control_references()


def get_local_state_ix(device: DynamicInjection, tpe: Type[DynamicComponent]) -> IntVec:
    """
    Positions of the states of a sub-model type in the device state list
    """
    mapping = device.ext.get(LOCAL_STATE_MAPPING, dict())
    assert tpe in mapping, f"{tpe.__name__} is not indexed in {device.name}"
    return mapping[tpe]


def get_input_port_ix(device: DynamicInjection, tpe: Type[DynamicComponent]) -> IntVec:
    """
    Positions of the ports of a sub-model type in the device state list
    """
    mapping = device.ext.get(INPUT_PORT_MAPPING, dict())
    assert tpe in mapping, f"{tpe.__name__} is not indexed in {device.name}"
    return mapping[tpe]


def add_states_to_global(global_index: Dict[str, Dict[str, int]], offset: int,
                         device: Union[DynamicInjection, DynamicLine]) -> IntVec:
    """
    Register the device states in the global state vector
    :param global_index: {device idtag: {state name: global position}}, modified in place
    :param offset: first free global position
    :param device: DynamicInjection or DynamicLine
    :return: contiguous range of global positions owned by the device
    """
    if device.idtag in global_index:
        raise IndexingError(device.name, device.idtag, message="Device indexed twice")

    ix_range = np.arange(offset, offset + device.n_states, dtype=int)
    global_index[device.idtag] = {state: int(i) for state, i in zip(device.states, ix_range)}
    return ix_range
