#!/usr/bin/env python3
# IFREXTRACT: HII/IFR Extraction Framework
# Copyright (c) 2024, IFREXTRACT Contributors
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU General Public License
# as published by the Free Software Foundation; Version 2.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301, USA.

"""
Installs the ifrextract package and the ifrextract_util command line tool
"""

import os
from setuptools import setup, find_packages

HERE = os.path.abspath(os.path.dirname(__file__))


def read_text(*path: str) -> str:
    with open(os.path.join(HERE, *path), encoding='utf-8') as f:
        return f.read()


setup(
    name='ifrextract',
    version=read_text('ifrextract', 'VERSION').strip(),
    description='Extracts HII strings and IFR forms from BIOS/UEFI firmware images as text',
    long_description=read_text('README'),
    long_description_content_type='text/plain',
    author='IFREXTRACT Contributors',
    license='GNU General Public License v2 (GPLv2)',
    platforms=['any'],
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU General Public License v2 (GPLv2)',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: System :: Hardware',
        'Topic :: Software Development :: Disassemblers',
    ],
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={'ifrextract': ['VERSION', 'options/*.ini']},
    install_requires=[],
    python_requires='>=3.8',
    py_modules=['ifrextract_util'],
    entry_points={
        'console_scripts': ['ifrextract_util=ifrextract_util:main'],
    },
)
