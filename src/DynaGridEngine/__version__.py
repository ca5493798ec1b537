# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import datetime
_current_year_ = datetime.datetime.now().year

# do not forget to keep a three-number version!!!
__DynaGridEngine_VERSION__ = "0.3.1"

url = 'https://github.com/SanPen/GridCal'

about_msg = "DynaGridEngine v" + str(__DynaGridEngine_VERSION__) + '\n\n'

about_msg += """
DynaGridEngine is an RMS transient and small-signal stability
engine for power systems written as differential-algebraic equations.\n"""

about_msg += """
This program is free software; you can redistribute it and/or
modify it subject to the terms of the Mozilla Public License, v. 2.0. 
If a copy of the MPL was not distributed with this file, 
You can obtain one at https://mozilla.org/MPL/2.0/.
"""
copyright_msg = 'Copyright (C) 2015-' + str(_current_year_) + ' Santiago Peñate Vera'

about_msg += copyright_msg + '\n'
