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
Access to the defaults in options/cmd_options.ini

usage:
    >>> Options().get_bool_data('Extract_Config', 'standalone_packages', False)
    >>> Options().get_list_data('Extract_Config', 'modes', ['uefi'])
"""

import configparser
import os
from typing import Any, List
from ifrextract.library.file import get_package_dir
from ifrextract.library.exceptions import OptionsError

OPTIONS_FILE = os.path.join('options', 'cmd_options.ini')

_MISSING = object()


class Options:

    def __init__(self, path: str = '') -> None:
        path = path or os.path.join(get_package_dir(), OPTIONS_FILE)
        if not os.path.isfile(path):
            raise OptionsError(f'Unable to locate configuration options: {path}')
        self.config = configparser.ConfigParser()
        with open(path) as options_file:
            self.config.read_file(options_file)

    def get_section_data(self, section: str, key: str, default: Any = _MISSING) -> str:
        """Returns the raw value; without a default a missing value raises the configparser error."""
        if default is _MISSING:
            return self.config.get(section, key)
        return self.config.get(section, key, fallback=default)

    def get_bool_data(self, section: str, key: str, default: bool = False) -> bool:
        try:
            return self.config.getboolean(section, key, fallback=default)
        except ValueError:
            return default

    def get_list_data(self, section: str, key: str, default: List[Any], separator: str = ',') -> List[Any]:
        items = [item.strip() for item in self.get_section_data(section, key, '').split(separator)]
        return [item for item in items if item] or default
