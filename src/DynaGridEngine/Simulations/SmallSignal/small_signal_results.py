# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Union
import numpy as np
import pandas as pd
from matplotlib import pyplot as plt
from DynaGridEngine.basic_structures import Vec, Mat, CxVec, CxMat, StrList


class SmallSignalResults:
    """
    Linearization of a dynamic model around an operating point
    """

    def __init__(self,
                 reduced_jacobian: Mat,
                 eigenvalues: CxVec,
                 eigenvectors: CxMat,
                 stable: bool,
                 operating_point: Vec,
                 state_names: StrList,
                 fx: Union[Mat, None] = None,
                 fy: Union[Mat, None] = None,
                 gx: Union[Mat, None] = None,
                 gy: Union[Mat, None] = None):
        """

        :param reduced_jacobian: fx - fy gy^-1 gx
        :param eigenvalues: eigenvalues of the reduced Jacobian
        :param eigenvectors: right eigenvectors (columns)
        :param stable: stability verdict
        :param operating_point: state vector used for the linearization
        :param state_names: names of the differential states (rows of the reduced Jacobian)
        :param fx: differential rows, differential columns
        :param fy: differential rows, algebraic columns
        :param gx: algebraic rows, differential columns
        :param gy: algebraic rows, algebraic columns
        """
        self.reduced_jacobian = reduced_jacobian
        self.eigenvalues = eigenvalues
        self.eigenvectors = eigenvectors
        self.stable = stable
        self.operating_point = operating_point
        self.state_names = state_names
        self.fx = fx
        self.fy = fy
        self.gx = gx
        self.gy = gy

    @property
    def damping_ratios(self) -> Vec:
        """
        ζ = -Re(λ) / |λ|, 1 for the zero eigenvalues
        """
        mag = np.abs(self.eigenvalues)
        zeta = np.ones(len(self.eigenvalues))
        nz = mag > 0
        zeta[nz] = -self.eigenvalues[nz].real / mag[nz]
        return zeta

    @property
    def frequencies(self) -> Vec:
        """
        Oscillation frequencies (Hz)
        """
        return np.abs(self.eigenvalues.imag) / (2.0 * np.pi)

    @property
    def participation_factors(self) -> Mat:
        """
        Participation of every state (rows) in every mode (columns), normalized per mode
        """
        if len(self.eigenvalues) == 0:
            return np.zeros((0, 0))
        W = np.linalg.inv(self.eigenvectors)
        P = np.abs(self.eigenvectors * W.T)
        col_sum = P.sum(axis=0)
        col_sum[col_sum == 0] = 1.0
        return P / col_sum

    def get_participation_df(self) -> pd.DataFrame:
        return pd.DataFrame(data=self.participation_factors,
                            index=self.state_names,
                            columns=[f'mode {i}' for i in range(len(self.eigenvalues))])

    def to_df(self) -> pd.DataFrame:
        """
        Modes summary
        """
        pf = self.participation_factors
        dominant = [self.state_names[i] for i in np.argmax(pf, axis=0)] if pf.size else list()

        return pd.DataFrame(data={'real': self.eigenvalues.real,
                                  'imag': self.eigenvalues.imag,
                                  'frequency (Hz)': self.frequencies,
                                  'damping ratio': self.damping_ratios,
                                  'dominant state': dominant},
                            index=[f'mode {i}' for i in range(len(self.eigenvalues))])

    def plot(self, ax=None, title: str = 'Eigenvalues'):
        """
        Plot the eigenvalues in the complex plane
        :param ax: matplotlib axis (a new figure is created if None)
        :param title: plot title
        :return: axis
        """
        if ax is None:
            fig = plt.figure(figsize=(8, 6))
            ax = fig.add_subplot(111)

        ax.scatter(self.eigenvalues.real, self.eigenvalues.imag, marker='x')
        ax.axvline(0.0, color='gray', linewidth=0.8)
        ax.axhline(0.0, color='gray', linewidth=0.8)
        ax.set_title(title, fontsize=14)
        ax.set_xlabel('Real', fontsize=11)
        ax.set_ylabel('Imaginary', fontsize=11)
        return ax
