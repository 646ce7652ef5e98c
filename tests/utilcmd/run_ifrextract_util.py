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


from unittest.mock import Mock
from typing import Tuple, List
from ifrextract_util import IfrExtractUtil, parse_args
import ifrextract.library.logger


def run_ifrextract_util(ieu: IfrExtractUtil) -> int:
    comm = ieu.commands[ieu._cmd](ieu._cmd_args)
    comm.parse_arguments()
    comm.set_up()
    comm.run()
    comm.tear_down()
    return comm.ExitCode


def setup_run_destroy_util_get_log_output(util_name: str, util_args: str = "", logging_functions_to_capture: List = ['log']) -> Tuple[int, str]:
    ifrextract.library.logger._logger.remove_ifr_logger()
    ifrextract.library.logger._logger = Mock()
    ifrextract.library.logger._logger.VERBOSE = False
    ifrextract.library.logger._logger.DEBUG = False
    ifrextract.library.logger._logger.HAL = False
    arg_str = f" {util_args}" if util_args else ""
    cli_cmds = f"-nb -nl {util_name}{arg_str}".strip().split(' ')
    par = parse_args(cli_cmds)
    ieu = IfrExtractUtil(par, cli_cmds)
    try:
        retval = run_ifrextract_util(ieu)
        logger_calls = []
        for func in logging_functions_to_capture:
            if hasattr(ifrextract.library.logger._logger, func):
                logger_calls += getattr(ifrextract.library.logger._logger, func).mock_calls
    finally:
        ifrextract.library.logger._logger = ifrextract.library.logger.Logger()
    return retval, " ".join([call.args[0] for call in logger_calls])


def setup_run_destroy_util(util_name: str, util_args: str = "") -> int:
    retval, _ = setup_run_destroy_util_get_log_output(util_name, util_args)
    return retval
