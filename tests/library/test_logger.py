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

import unittest
from unittest.mock import patch

from ifrextract.library.logger import Logger, dump_buffer_bytes, level


class TestLogger(unittest.TestCase):

    def test_set_log_level(self):
        log = Logger()
        log.set_log_level(False, True, False, False)
        self.assertTrue(log.HAL)
        self.assertFalse(log.DEBUG)
        self.assertEqual(log.ifrLogger.level, level.HAL.value)
        log.set_log_level(False, False, False, True)
        self.assertTrue(log.VERBOSE and log.HAL and log.DEBUG)
        self.assertEqual(log.ifrLogger.level, level.DEBUG.value)
        log.HAL = log.DEBUG = log.VERBOSE = False
        log.setlevel()

    def test_log_levels(self):
        log = Logger()
        with patch.object(log.ifrLogger, 'log') as mock_log:
            log.log_hal('hal')
            log.log_warning('warning')
            log.log_good('good')
        self.assertEqual([c.args[0] for c in mock_log.mock_calls], [level.HAL.value, level.WARNING.value, level.GOOD.value])

    def test_dump_buffer_bytes(self):
        self.assertEqual(dump_buffer_bytes(b'AB\x00', 4), '41 42 00    | AB ')
        self.assertEqual(dump_buffer_bytes(b'ABCD', 4), '41 42 43 44 | ABCD')


if __name__ == '__main__':
    unittest.main()
