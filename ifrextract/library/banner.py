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
#

"""
Start-up banner of ifrextract_util
"""

import platform
import struct
from typing import Sequence, Tuple
from ifrextract.library.logger import logger

TITLE = 'IFREXTRACT: HII String and IFR Form Extraction Utility'
WIDTH = 64


def banner_text(arguments: Sequence[str], version: str) -> str:
    rule = '#' * WIDTH
    lines = [rule, f'##{"":{WIDTH - 4}}##', f'##  {TITLE:{WIDTH - 6}}##', f'##{"":{WIDTH - 4}}##', rule,
             f'[IFREXTRACT] Version  : {version}',
             f'[IFREXTRACT] Arguments: {" ".join(arguments)}']
    return '\n' + '\n'.join(lines)


def properties_text(os_version: Tuple[str, str, str, str]) -> str:
    bits = struct.calcsize('P') * 8
    return (f'[IFREXTRACT] OS      : {" ".join(os_version)}\n'
            f'[IFREXTRACT] Python  : {platform.python_version()} ({bits:d}-bit)\n')


def print_banner(arguments: Sequence[str], version: str) -> None:
    logger().log(banner_text(arguments, version))


def print_banner_properties(os_version: Tuple[str, str, str, str]) -> None:
    logger().log(properties_text(os_version))
