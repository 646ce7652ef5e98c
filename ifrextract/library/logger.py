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
Console and log file output

All output goes through one logging.Logger. Message levels below INFO
(VERBOSE, HAL, DEBUG) are shown only once enabled with set_log_level().
Log files get the same prefixes as the console, without colors.
"""
import logging
import os
import platform
import string
import sys
from enum import Enum
from time import strftime
from typing import Dict, Optional

LOGGER_NAME = 'IFREXTRACT_LOGGER'
LOG_DIR = os.path.join(os.path.dirname(os.path.realpath(__file__)), os.pardir, os.pardir, 'logs')
MESSAGE_FORMAT = '%(prefix)s%(message)s'


class level(Enum):
    DEBUG = 10
    HAL = 12
    VERBOSE = 13
    INFO = 20
    GOOD = 21
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


PREFIXES: Dict[int, str] = {
    level.DEBUG.value: '[*] [DEBUG] ',
    level.HAL.value: '[*] [HAL] ',
    level.VERBOSE.value: '[*] [VERBOSE] ',
    level.GOOD.value: '[+] ',
    level.WARNING.value: 'WARNING: ',
    level.ERROR.value: 'ERROR: ',
}

LEVEL_COLORS: Dict[int, str] = {
    level.DEBUG.value: 'BLUE',
    level.HAL.value: 'GREY',
    level.VERBOSE.value: 'GREY',
    level.GOOD.value: 'GREEN',
    level.WARNING.value: 'YELLOW',
    level.ERROR.value: 'RED',
    level.CRITICAL.value: 'PURPLE',
}


def _console_colors() -> Dict[str, str]:
    # No colors when redirected or when NO_COLOR (https://no-color.org/) is set
    try:
        is_atty = sys.stdout.isatty()
    except AttributeError:
        is_atty = False
    system = platform.system().lower()
    if not is_atty or os.getenv('NO_COLOR') is not None or system not in ('windows', 'linux'):
        return {}
    if system == 'windows':
        os.system('color')
    return {'GREY': '\033[90m', 'RED': '\033[91m', 'GREEN': '\033[92m', 'YELLOW': '\033[93m',
            'BLUE': '\033[94m', 'PURPLE': '\033[95m', 'WHITE': '\033[97m', 'END': '\033[0m'}


class PrefixFilter(logging.Filter):
    """Attaches the level prefix used by both console and file output."""

    def filter(self, record):
        record.prefix = PREFIXES.get(record.levelno, '')
        return True


class PlainFormatter(logging.Formatter):

    def format(self, record):
        record.args = tuple()
        return super().format(record)


class ColorFormatter(logging.Formatter):
    colors = _console_colors()

    def format(self, record):
        color = LEVEL_COLORS.get(record.levelno, 'WHITE')
        if record.args and record.args[0] in self.colors:
            color = record.args[0]
        record.args = tuple()
        text = super().format(record)
        if color in self.colors:
            return f'{self.colors[color]}{text}{self.colors["END"]}'
        return text


class Logger:
    """Class for logging to console and text file."""

    VERBOSE: bool = False
    HAL: bool = False
    DEBUG: bool = False

    LOG_TO_FILE: bool = False
    LOG_FILE_NAME: str = ''

    def __init__(self):
        self.logfile: Optional[logging.FileHandler] = None
        self.LOG_PATH = LOG_DIR
        self.logstream = logging.StreamHandler(sys.stdout)
        self.logstream.setFormatter(ColorFormatter(MESSAGE_FORMAT))
        self.file_formatter = PlainFormatter(MESSAGE_FORMAT)
        for lvl in (level.VERBOSE, level.HAL, level.GOOD):
            logging.addLevelName(lvl.value, lvl.name)
        self.ifrLogger = logging.getLogger(LOGGER_NAME)
        self.ifrLogger.setLevel(level.INFO.value)
        self.ifrLogger.propagate = False
        if not self.ifrLogger.handlers:
            self.ifrLogger.addHandler(self.logstream)
        if not self.ifrLogger.filters:
            self.ifrLogger.addFilter(PrefixFilter(LOGGER_NAME))

    def log(self, text: str, level: level = level.INFO, color: Optional[str] = None) -> None:
        """Sends plain text to logging."""
        self.ifrLogger.log(level.value, text, color)

    def log_verbose(self, text: str) -> None:
        self.log(text, level.VERBOSE)

    def log_hal(self, text: str) -> None:
        """Logs package level parsing details (found/rejected candidates, diagnostics)."""
        self.log(text, level.HAL)

    def log_debug(self, text: str) -> None:
        self.log(text, level.DEBUG)

    def log_error(self, text: str) -> None:
        self.log(text, level.ERROR)

    def log_warning(self, text: str) -> None:
        self.log(text, level.WARNING)

    def log_good(self, text: str) -> None:
        self.log(text, level.GOOD)

    def log_heading(self, text: str) -> None:
        self.log(text, level.INFO, 'BLUE')

    def set_log_level(self, verbose: bool, hal: bool, debug: bool, vverbose: bool) -> None:
        """Enables the requested message levels; -vv enables all of them."""
        self.VERBOSE = self.VERBOSE or verbose or vverbose
        self.HAL = self.HAL or hal or vverbose
        self.DEBUG = self.DEBUG or debug or vverbose
        self.setlevel()

    def setlevel(self) -> None:
        for enabled, lvl in ((self.DEBUG, level.DEBUG), (self.HAL, level.HAL), (self.VERBOSE, level.VERBOSE)):
            if enabled:
                self.ifrLogger.setLevel(lvl.value)
                return
        self.ifrLogger.setLevel(level.INFO.value)

    def create_logs_folder(self) -> bool:
        try:
            os.makedirs(self.LOG_PATH, exist_ok=True)
        except OSError:
            print(f'Unable to create logs folder {self.LOG_PATH}')
            return False
        return True

    def _add_file_handler(self, path: str, mode: str = 'a') -> Optional[logging.FileHandler]:
        try:
            handler = logging.FileHandler(path, mode=mode)
        except OSError:
            print(f'WARNING: Could not open log file: {path}')
            return None
        handler.setFormatter(self.file_formatter)
        self.ifrLogger.addHandler(handler)
        return handler

    def set_autolog_file(self) -> None:
        """Copies the console output to a time stamped file in the logs folder."""
        if self.create_logs_folder():
            self._add_file_handler(os.path.join(self.LOG_PATH, f'{strftime("%a%b%d%y-%H%M%S")}.log'))

    def set_log_file(self, name: str, tologpath: bool = True) -> None:
        """Sends output to ``name`` instead of the console; an empty name restores the console."""
        self.disable()
        if not name or (tologpath and not self.create_logs_folder()):
            self.ifrLogger.addHandler(self.logstream)
            return
        self.LOG_FILE_NAME = os.path.join(self.LOG_PATH, name) if tologpath else name
        self.logfile = self._add_file_handler(self.LOG_FILE_NAME)
        if self.logfile is not None:
            self.LOG_TO_FILE = True
            self.ifrLogger.removeHandler(self.logstream)

    def close(self) -> None:
        """Closes the log file."""
        if self.logfile is None:
            return
        self.ifrLogger.removeHandler(self.logfile)
        self.ifrLogger.removeHandler(self.logstream)
        self.logfile.close()
        self.logfile = None

    def disable(self) -> None:
        """Disables the logging to file and closes the file if any."""
        self.LOG_TO_FILE = False
        self.LOG_FILE_NAME = ''
        self.close()

    def remove_ifr_logger(self) -> None:
        for log_filter in list(self.ifrLogger.filters):
            self.ifrLogger.removeFilter(log_filter)
        for handler in list(self.ifrLogger.handlers):
            self.ifrLogger.removeHandler(handler)


_logger = Logger()


def logger() -> Logger:
    """Returns a Logger instance."""
    return _logger


def dump_buffer_bytes(arr, length=8):
    """Dumps the buffer (bytes, bytearray) as hex bytes followed by the printable characters"""
    output = []
    for start in range(0, len(arr), length):
        chunk = arr[start:start + length]
        hex_part = ''.join(f'{c:02X} ' for c in chunk).ljust(length * 3)
        text = ''.join(chr(c) if chr(c) in string.printable and chr(c) not in string.whitespace else ' ' for c in chunk)
        output.append(f'{hex_part}| {text}')
    return '\n'.join(output)
