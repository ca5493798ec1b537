# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import json
from typing import Dict, Any, Union
import numpy as np
from DynaGridEngine.__version__ import __DynaGridEngine_VERSION__
from DynaGridEngine.basic_structures import Logger
from DynaGridEngine.Devices.power_system import PowerSystem


class CustomJSONizer(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, np.integer):  # Handle NumPy integers
            return int(obj)
        elif isinstance(obj, np.floating):  # Handle NumPy floats
            return float(obj)
        elif isinstance(obj, np.bool_):  # Handle NumPy boolean
            return bool(obj)
        elif isinstance(obj, (complex, np.complexfloating)):
            return [obj.real, obj.imag]
        elif isinstance(obj, np.ndarray):  # Convert NumPy arrays to lists
            if np.iscomplexobj(obj):
                return np.stack([obj.real, obj.imag], axis=-1).tolist()
            return obj.tolist()
        return super().default(obj)


def save_system_json(system: PowerSystem, file_path: str,
                     extra: Union[Dict[str, Any], None] = None) -> Logger:
    """
    Save a power system snapshot to json
    :param system: PowerSystem
    :param file_path: path of the file to write
    :param extra: additional entries to store (i.e. the initial state vector)
    :return: Logger
    """
    logger = Logger()

    data = {'software': 'DynaGridEngine',
            'version': __DynaGridEngine_VERSION__,
            'system': system.get_save_data()}

    if extra is not None:
        data.update(extra)

    data_str = json.dumps(data, indent=True, cls=CustomJSONizer)

    with open(file_path, "w") as text_file:
        text_file.write(data_str)

    logger.add_info("System saved", device=system.name, value=file_path)

    return logger


def load_system_json_data(file_path: str) -> Dict[str, Any]:
    """
    Read a json snapshot
    :param file_path: path of the file
    :return: dictionary with the stored data
    """
    with open(file_path, "r") as text_file:
        data = json.load(text_file)
    return data
