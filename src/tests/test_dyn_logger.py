# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import os
from DynaGridEngine.basic_structures import Logger
from DynaGridEngine.enumerations import LogSeverity


def test_logger_counts_and_merge(tmp_path):
    logger = Logger()
    assert not logger.has_logs()

    logger.add_info("Simulation initialized", value=3)
    logger.add_warning("No reference source", device='Isolated')
    logger.add_error("Bad guess", value=3, expected_value=7, sim_time=0.0)
    logger.add_debug("Trapezoid", "step rejected")

    other = Logger()
    other.add_error("Another error")
    logger += other

    assert logger.has_logs()
    assert len(logger) == 4
    assert logger.info_count() == 1
    assert logger.warning_count() == 1
    assert logger.error_count() == 2
    assert logger.messages(LogSeverity.Error) == ["Bad guess", "Another error"]
    assert logger[2].expected_value == '7'
    assert logger.debug_entries == ["Trapezoid step rejected"]

    df = logger.to_df()
    assert len(df) == 4
    assert 'Simulation time' in df.columns

    path = os.path.join(str(tmp_path), 'logs.csv')
    logger.to_csv(path)
    assert os.path.exists(path)
