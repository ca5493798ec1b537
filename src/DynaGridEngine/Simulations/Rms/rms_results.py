# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import List, Union
import numpy as np
import pandas as pd
from matplotlib import pyplot as plt
from DynaGridEngine.basic_structures import Vec, Mat, CxMat, StrList
from DynaGridEngine.enumerations import SimulationStatus


class RmsResults:
    """
    Trajectory of a dynamic simulation
    """

    def __init__(self,
                 time: Union[Vec, None] = None,
                 values: Union[Mat, None] = None,
                 state_names: Union[StrList, None] = None,
                 n_bus: int = 0,
                 status: SimulationStatus = SimulationStatus.NotRun,
                 event_times: Union[List[float], None] = None):
        """

        :param time: time stamps (s), repeated at the events
        :param values: matrix of states (time, state)
        :param state_names: name of every state
        :param n_bus: number of buses (the first 2 n_bus states are the bus voltages)
        :param status: SimulationStatus
        :param event_times: times where perturbations were applied
        """
        self.time: Vec = time if time is not None else np.zeros(0)

        self.values: Mat = values if values is not None else np.zeros((0, 0))

        self.state_names: StrList = state_names if state_names is not None else list()

        self.n_bus = n_bus

        self.status = status

        self.event_times: List[float] = event_times if event_times is not None else list()

    @property
    def n_points(self) -> int:
        return len(self.time)

    @property
    def success(self) -> bool:
        return self.status == SimulationStatus.SimulationSuccess

    def get_state(self, name: str) -> Vec:
        """
        Trajectory of a state
        :param name: state name (bus voltages are Vr_<bus>, Vi_<bus>, device states <device>:<state>)
        :return: vector
        """
        return self.values[:, self.state_names.index(name)]

    @property
    def voltage(self) -> CxMat:
        """
        Complex bus voltages (time, bus)
        """
        n = self.n_bus
        return self.values[:, :n] + 1j * self.values[:, n:2 * n]

    @property
    def voltage_module(self) -> Mat:
        return np.abs(self.voltage)

    def to_df(self) -> pd.DataFrame:
        """
        States as a DataFrame indexed by time
        """
        df = pd.DataFrame(data=self.values, columns=self.state_names)
        df.index = pd.Index(self.time, name='time (s)')
        return df

    def save_csv(self, file_name: str) -> None:
        self.to_df().to_csv(file_name)

    def plot(self, names: Union[StrList, None] = None, ax=None, title: str = 'Dynamic simulation'):
        """
        Plot some states
        :param names: list of state names (all of them if None)
        :param ax: matplotlib axis (a new figure is created if None)
        :param title: plot title
        :return: axis
        """
        if ax is None:
            fig = plt.figure(figsize=(12, 6))
            ax = fig.add_subplot(111)

        df = self.to_df()
        if names is not None:
            df = df[names]

        ax.set_title(title, fontsize=14)
        ax.set_xlabel('time (s)', fontsize=11)
        df.plot(ax=ax, legend=len(df.columns) <= 15)

        for t in self.event_times:
            ax.axvline(t, color='gray', linestyle='--', linewidth=0.8)

        return ax
