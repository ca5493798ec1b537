# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Positions of the inner variables and control references shared by the sub-models of a device
"""


class GeneratorInnerVars:
    """
    Inner variables of a dynamic generator
    """
    TAU_E = 0  # electric torque
    TAU_M = 1  # mechanical torque
    VF = 2  # field voltage
    V_PSS = 3  # stabilizer signal
    VR_GEN = 4  # terminal voltage, real part
    VI_GEN = 5  # terminal voltage, imaginary part
    PSI_D = 6  # d-axis flux
    PSI_Q = 7  # q-axis flux
    IR_GEN = 8  # stator current injected into the network, real part (device base)
    II_GEN = 9  # stator current injected into the network, imaginary part (device base)
    VT = 10  # terminal voltage magnitude

    SIZE = 11


class InverterInnerVars:
    """
    Inner variables of a dynamic inverter
    """
    MD = 0  # d-axis modulation
    MQ = 1  # q-axis modulation
    VDC = 2  # DC link voltage
    VR_INV = 3  # terminal voltage, real part
    VI_INV = 4  # terminal voltage, imaginary part
    VR_CNV = 5  # converter voltage, real part
    VI_CNV = 6  # converter voltage, imaginary part
    THETA_OC = 7  # outer control angle
    OMEGA_OC = 8  # outer control speed
    THETA_PLL = 9  # estimated angle
    OMEGA_PLL = 10  # estimated frequency
    V_OC = 11  # outer control voltage reference
    IR_INV = 12  # filter output current injected into the network, real part (device base)
    II_INV = 13  # filter output current injected into the network, imaginary part (device base)

    SIZE = 14


class ControlRefs:
    """
    Positions in the control references vector
    """
    V_REF = 0
    OMEGA_REF = 1
    P_REF = 2
    Q_REF = 3

    SIZE = 4
