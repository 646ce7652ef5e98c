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
Common bit masks and helpers shared by the HII parsers and the utility
"""

import os
import platform
from typing import AnyStr, Tuple
from ifrextract.library.file import get_package_dir

BIT0 = 0x01
BIT1 = 0x02
BIT7 = 0x80


def bytestostring(mbytes: AnyStr) -> str:
    """Decodes raw ASCII fields (language tags, variable names) without failing on high bytes."""
    if isinstance(mbytes, (bytes, bytearray)):
        return mbytes.decode('latin_1')
    return mbytes


def get_version() -> str:
    try:
        with open(os.path.join(get_package_dir(), 'VERSION')) as version_file:
            return version_file.read().strip()
    except OSError:
        return '0.0.0'


def os_version() -> Tuple[str, str, str, str]:
    uname = platform.uname()
    return uname.system, uname.release, uname.version, uname.machine
