# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
A setuptools based setup module.
See:
https://packaging.python.org/guides/distributing-packages-using-setuptools/
https://github.com/pypa/sampleproject
"""

# Always prefer setuptools over distutils
from setuptools import setup, find_packages
import os
import re

here = os.path.abspath(os.path.dirname(__file__))

# the version string is parsed, importing the package needs its dependencies
with open(os.path.join(here, 'src', 'DynaGridEngine', '__version__.py'), 'r', encoding='utf-8') as f:
    __DynaGridEngine_VERSION__ = re.search(r'__DynaGridEngine_VERSION__ = "([^"]+)"', f.read()).group(1)

long_description = """# DynaGridEngine

RMS transient simulation and small-signal stability analysis of power systems
modelled as differential-algebraic equations.

## Installation

pip install DynaGridEngine
"""

description = 'DynaGridEngine is a power systems RMS dynamics and small-signal stability engine'

pkgs_to_exclude = ['docs', 'research', 'tests', 'tutorials']

packages = find_packages(where='src', exclude=pkgs_to_exclude)

# ... so we have to do the filtering ourselves
packages2 = list()
for package in packages:
    elms = package.split('.')
    excluded = False
    for exclude in pkgs_to_exclude:
        if exclude in elms:
            excluded = True

    if not excluded:
        packages2.append(package)

dependencies = ['setuptools>=41.0.1',
                'wheel>=0.37.2',
                "numpy>=1.26",
                "scipy>=1.0.0",
                "pandas>=2.2.3",
                "matplotlib>=2.1.1",
                "numba>=0.60",  # to compile routines natively
                ]

extras_require = {
    'test': ["pytest>=7.2"]
}

setup(
    name='DynaGridEngine',  # Required
    version=__DynaGridEngine_VERSION__,  # Required
    license='MPL2',
    description=description,  # Optional
    long_description=long_description,  # Optional
    long_description_content_type='text/markdown',  # Optional (see note above)
    url='https://github.com/SanPen/GridCal',  # Optional
    author='Santiago Peñate Vera et. Al.',  # Optional
    author_email='santiago@gridcal.org',  # Optional
    classifiers=[
        'License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)',
        'Programming Language :: Python :: 3.8',
    ],
    keywords='power systems dynamics stability',  # Optional
    packages=packages2,  # Required
    package_dir={'': 'src'},
    include_package_data=True,
    python_requires='>=3.9',
    install_requires=dependencies,
    extras_require=extras_require,
)
