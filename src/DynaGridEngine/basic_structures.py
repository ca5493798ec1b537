# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0

from typing import List, Any, Union
import datetime
import numpy as np
import numpy.typing as npt
import pandas as pd
from scipy.sparse import csc_matrix
from DynaGridEngine.enumerations import LogSeverity

StrList = List[str]
Vec = npt.NDArray[np.float64]
CxVec = npt.NDArray[np.complex128]
IntVec = npt.NDArray[np.int64]
BoolVec = npt.NDArray[np.bool_]
Mat = npt.NDArray[np.float64]
CxMat = npt.NDArray[np.complex128]
CscMat = csc_matrix


class LogEntry:
    """
    Logger entry
    """

    def __init__(self,
                 time: Union[str, None] = None,
                 msg="",
                 severity: LogSeverity = LogSeverity.Information,
                 device="",
                 value="",
                 expected_value="",
                 device_class="",
                 device_property="",
                 sim_time: Union[float, None] = None):
        """

        :param time: wall clock time stamp (generated if None)
        :param msg: message
        :param severity: LogSeverity
        :param device: device name
        :param value: offending value
        :param expected_value: value that was expected
        :param device_class: device class name
        :param device_property: device property name
        :param sim_time: simulation time at which the entry was produced (if any)
        """
        if time is None:
            self.time = "{date:%H:%M:%S}".format(date=datetime.datetime.now())
        else:
            self.time = time
        self.msg = str(msg)
        self.severity = severity
        self.device = device
        self.device_class = device_class
        self.device_property = device_property
        self.value = value
        self.expected_value = str(expected_value)
        self.sim_time = sim_time

    def to_list(self) -> List[Any]:
        """
        Get list representation of this entry
        :return:
        """
        return [self.time, self.severity.value, self.msg,
                self.device_class, self.device_property, self.device,
                self.value, self.expected_value, self.sim_time]

    def __str__(self):
        return "{0} {1}: {2} {3} {4} {5}".format(self.time,
                                                 self.severity.value,
                                                 self.msg,
                                                 self.device,
                                                 self.value,
                                                 self.expected_value)


class Logger:
    """
    Logger class
    """

    def __init__(self) -> None:

        self.entries: List[LogEntry] = list()

        self.debug_entries: List[str] = list()

    def add_debug(self, *args):
        """
        Add debug entry
        :param args:
        :return:
        """
        self.debug_entries.append(" ".join([str(x) for x in args]))

    def has_logs(self) -> bool:
        """
        Are there any logs?
        :return: True / False
        """
        return len(self.entries) > 0

    def add(self, msg: str, severity: LogSeverity = LogSeverity.Error, device="", value="", expected_value="",
            device_class='', device_property='', sim_time: Union[float, None] = None):
        """
        Add general entry
        :param msg: message
        :param severity: LogSeverity
        :param device: device name
        :param value: value
        :param expected_value: expected value
        :param device_class: class of the device
        :param device_property: property of the device
        :param sim_time: simulation time (optional)
        """
        self.entries.append(LogEntry(msg=str(msg),
                                     severity=severity,
                                     device=str(device),
                                     value=str(value),
                                     expected_value=str(expected_value),
                                     device_class=str(device_class),
                                     device_property=str(device_property),
                                     sim_time=sim_time))

    def add_info(self, msg: str, device="", value="", expected_value="", device_class='', device_property='',
                 sim_time: Union[float, None] = None):
        """
        Add info entry
        """
        self.add(msg=msg, severity=LogSeverity.Information, device=device, value=value,
                 expected_value=expected_value, device_class=device_class, device_property=device_property,
                 sim_time=sim_time)

    def add_warning(self, msg: str, device="", value="", expected_value="", device_class='', device_property='',
                    sim_time: Union[float, None] = None):
        """
        Add warning entry
        """
        self.add(msg=msg, severity=LogSeverity.Warning, device=device, value=value,
                 expected_value=expected_value, device_class=device_class, device_property=device_property,
                 sim_time=sim_time)

    def add_error(self, msg: str, device="", value="", expected_value="", device_class='', device_property='',
                  sim_time: Union[float, None] = None):
        """
        Add error entry
        """
        self.add(msg=msg, severity=LogSeverity.Error, device=device, value=value,
                 expected_value=expected_value, device_class=device_class, device_property=device_property,
                 sim_time=sim_time)

    def to_df(self) -> pd.DataFrame:
        """
        Get DataFrame
        :return: DataFrame
        """
        data = [e.to_list() for e in self.entries]
        df = pd.DataFrame(data=data, columns=['Time', 'Severity', 'Message', 'Class',
                                              'Property', 'Device', 'Value', 'Expected value', 'Simulation time'])
        df.set_index('Time', inplace=True)
        return df

    def to_csv(self, fname):
        """
        Save to CSV
        :param fname: file name
        """
        self.to_df().to_csv(fname)

    def __str__(self):

        val = ''
        for e in self.entries:
            val += str(e) + '\n'
        return val

    def __getitem__(self, key) -> LogEntry:
        return self.entries[key]

    def __iadd__(self, other: "Logger"):
        """
        += implementation
        :param other: another Logger
        :return: self
        """
        if other is not None:
            self.entries += other.entries
            self.debug_entries += other.debug_entries
        return self

    def __len__(self) -> int:
        return len(self.entries)

    def count_type(self, severity: LogSeverity) -> int:
        """
        Count the number of entries of a certain severity
        :param severity: LogSeverity
        :return: number of occurrences
        """
        return sum(1 for entry in self.entries if entry.severity == severity)

    def info_count(self) -> int:
        return self.count_type(LogSeverity.Information)

    def warning_count(self) -> int:
        return self.count_type(LogSeverity.Warning)

    def error_count(self) -> int:
        return self.count_type(LogSeverity.Error)

    def messages(self, severity: Union[LogSeverity, None] = None) -> List[str]:
        """
        Get the list of messages, optionally filtered by severity
        :param severity: LogSeverity or None for all
        :return: list of messages
        """
        return [e.msg for e in self.entries if severity is None or e.severity == severity]
