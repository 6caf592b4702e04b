#!/usr/bin/env python
#
# Copyright (c) 2022 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
import setuptools

setuptools.setup(
    name='core_handler',
    version='1.0.0',
    description='Userspace core file handler',
    license='Apache-2.0',
    python_requires='>=3.7',
    install_requires=['oslo.config', 'lz4'],
    extras_require={
        'test': ['testtools', 'fixtures', 'mock', 'pytest'],
    },
    packages=['core_handler', 'core_handler.common', 'core_handler.tests'],
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'handle-core = core_handler.__main__:main'
        ],
    }
)
