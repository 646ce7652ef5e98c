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
from configparser import NoOptionError

from ifrextract.library.options import Options


class TestOptions(unittest.TestCase):

    def setUp(self):
        self.options = Options()

    def test_extract_defaults(self):
        self.assertFalse(self.options.get_bool_data('Extract_Config', 'standalone_packages', True))
        self.assertFalse(self.options.get_bool_data('Extract_Config', 'verbose_offsets', True))
        self.assertEqual(self.options.get_section_data('Extract_Config', 'output_suffix'), '.ifr.txt')
        self.assertEqual(self.options.get_list_data('Extract_Config', 'modes', []), ['uefi', 'framework'])

    def test_missing_values(self):
        self.assertEqual(self.options.get_section_data('Extract_Config', 'nope', 'x'), 'x')
        self.assertTrue(self.options.get_bool_data('Nope_Config', 'nope', True))
        self.assertEqual(self.options.get_list_data('Extract_Config', 'nope', ['a']), ['a'])
        with self.assertRaises(NoOptionError):
            self.options.get_section_data('Extract_Config', 'nope')


if __name__ == '__main__':
    unittest.main()
