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
Base class of the ifrextract_util commands

A command parses its own arguments into attributes of itself, one of which
is ``func``, the handler of the selected sub-command. ``ExitCode`` holds
the worst result reported by the handler.
"""

import traceback
from typing import Callable, Sequence

from ifrextract.library.logger import logger


class ExitCode:
    OK = 0
    WARNING = 2
    ERROR = 16
    EXCEPTION = 32


class BaseCommand:

    func: Callable[[], None]

    def __init__(self, argv: Sequence[str]) -> None:
        self.argv = argv
        self.logger = logger()
        self.ExitCode = ExitCode.OK

    def parse_arguments(self) -> None:
        raise NotImplementedError('sub class should overwrite the parse_arguments() method')

    def set_up(self) -> None:
        pass

    def run(self) -> None:
        try:
            self.func()
        except Exception as err:
            self.logger.log_error(f'Command failed: {err}')
            if self.logger.DEBUG:
                traceback.print_exc()
            else:
                self.logger.log_error('Run with the debug option (-d) for further details')
            self.ExitCode = ExitCode.EXCEPTION

    def tear_down(self) -> None:
        pass

    def report(self, code: int) -> None:
        """Raises the exit code to ``code`` unless a worse result is already recorded."""
        self.ExitCode = max(self.ExitCode, code)
