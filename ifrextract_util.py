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
#

"""
Command line entry point: ``ifrextract_util [options] <command> [command args]``

Commands are discovered from the modules of ifrextract.utilcmd, each
exporting a ``commands`` dict mapping command names to BaseCommand classes.
"""

import argparse
import importlib
import pkgutil
import sys
from time import time
from typing import Any, Dict, Optional, Sequence

import ifrextract.utilcmd
from ifrextract.command import ExitCode
from ifrextract.library.banner import print_banner, print_banner_properties
from ifrextract.library.defines import get_version, os_version
from ifrextract.library.logger import logger
from ifrextract.library.options import Options


def import_cmds() -> Dict[str, Any]:
    """Collects the ``commands`` tables of all ifrextract.utilcmd modules"""
    commands: Dict[str, Any] = {}
    for module_info in sorted(pkgutil.iter_modules(ifrextract.utilcmd.__path__), key=lambda m: m.name):
        try:
            module = importlib.import_module(f'ifrextract.utilcmd.{module_info.name}')
        except ImportError as msg:
            logger().log_error(f"Exception occurred during import of {module_info.name}: '{msg}'")
            continue
        commands.update(getattr(module, 'commands', {}))
    logger().log_debug(f'[IFREXTRACT] Loaded commands: {sorted(commands)}')
    return commands


def parse_args(argv: Sequence[str]) -> Optional[Dict[str, Any]]:
    """Parses the global options; returns None when only help was requested."""
    show_banner = Options().get_bool_data('Util_Config', 'show_banner', True)
    cmds = import_cmds()
    names = sorted(cmds) + ['help']

    parser = argparse.ArgumentParser(usage='%(prog)s [options] <command>', add_help=False)
    group = parser.add_argument_group('Options')
    group.add_argument('-h', '--help', dest='show_help', action='store_true', help='Show this message and exit')
    group.add_argument('-v', '--verbose', action='store_true', help='Verbose logging')
    group.add_argument('--hal', action='store_true', help='HAL logging (package candidates and diagnostics)')
    group.add_argument('-d', '--debug', action='store_true', help='Debug logging')
    group.add_argument('-vv', '--vverbose', action='store_true', help='Very verbose logging (Verbose + HAL + Debug)')
    group.add_argument('-l', '--log', help='Output to log file')
    group.add_argument('-nb', '--no_banner', dest='_show_banner', action='store_false', default=show_banner,
                       help="Don't display banner information")
    group.add_argument('-nl', dest='_autolog_disable', action='store_true', help="Don't save logs automatically")
    group.add_argument('_cmd', metavar='Command', nargs='?', choices=names, type=str.lower, default='help',
                       help=f"Util command to run: {{{','.join(names)}}}")
    group.add_argument('_cmd_args', metavar='Command Args', nargs=argparse.REMAINDER,
                       help='Additional arguments for the command. All offsets are in hex')
    par = vars(parser.parse_args(argv))

    if par['_cmd'] == 'help' or par['show_help']:
        if par['_show_banner']:
            print_banner(argv, get_version())
        parser.print_help()
        return None
    par['commands'] = cmds
    return par


class IfrExtractUtil:

    def __init__(self, switches: Dict[str, Any], argv: Sequence[str]) -> None:
        self.logger = logger()
        self.__dict__.update(switches)
        self.argv = argv
        self.parse_switches()

    def parse_switches(self) -> None:
        self.logger.set_log_level(self.verbose, self.hal, self.debug, self.vverbose)
        if self.log:
            self.logger.set_log_file(self.log)
        elif not self._autolog_disable:
            self.logger.set_autolog_file()
        if not self._cmd_args:
            self._cmd_args = ['--help']

    def main(self) -> int:
        """Runs the selected command and returns its exit code"""
        if self._show_banner:
            print_banner(self.argv, get_version())
            print_banner_properties(os_version())

        comm = self.commands[self._cmd](self._cmd_args)
        comm.parse_arguments()
        self.logger.log(f"[IFREXTRACT] Executing command '{self._cmd}' with args {self._cmd_args}\n")
        try:
            comm.set_up()
        except Exception as msg:
            self.logger.log_error(str(msg))
            return ExitCode.EXCEPTION

        start = time()
        comm.run()
        self.logger.log(f'[IFREXTRACT] Time elapsed {time() - start:.3f}')
        comm.tear_down()
        return comm.ExitCode


def run(cli_cmd: str = '') -> int:
    return main(cli_cmd.split())


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    par = parse_args(argv)
    if par is None:
        return ExitCode.OK
    return IfrExtractUtil(par, argv).main()


if __name__ == '__main__':
    sys.exit(main())
