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
To execute: python[3] -m unittest tests.utilcmd.hii_cmd.test_hii_cmd
"""

import io
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from ifrextract.command import ExitCode
from ifrextract_util import main
from tests.hii import hii_builder as hb
from tests.utilcmd.run_ifrextract_util import setup_run_destroy_util, setup_run_destroy_util_get_log_output


class TestHiiUtilcmd(unittest.TestCase):

    def setUp(self) -> None:
        self.tmpdir = tempfile.mkdtemp()
        self.outdir = os.path.join(self.tmpdir, 'out')

    def tearDown(self) -> None:
        shutil.rmtree(self.tmpdir)

    def write_rom(self, content: bytes) -> str:
        rom = os.path.join(self.tmpdir, 'bios.bin')
        with open(rom, 'wb') as f:
            f.write(content)
        return rom

    def uefi_rom(self) -> str:
        return self.write_rom(b'\xFF' * 0x40 + hb.uefi_package_list([hb.main_menu_strings(), hb.main_menu_form()]) + b'\xFF' * 0x40)

    def test_scan(self) -> None:
        rom = self.uefi_rom()
        retval, log = setup_run_destroy_util_get_log_output('hii', f'scan {rom}')
        self.assertEqual(retval, ExitCode.OK)
        self.assertIn('StringPackage', log)
        self.assertIn('FormPackage', log)

    def test_scan_nothing_found(self) -> None:
        rom = self.write_rom(b'\xFF' * 0x1000)
        retval = setup_run_destroy_util('hii', f'scan {rom} --all')
        self.assertEqual(retval, ExitCode.WARNING)

    def test_scan_missing_file(self) -> None:
        retval = setup_run_destroy_util('hii', f'scan {os.path.join(self.tmpdir, "missing.bin")}')
        self.assertEqual(retval, ExitCode.ERROR)

    def test_extract_uefi(self) -> None:
        rom = self.uefi_rom()
        retval = setup_run_destroy_util('hii', f'extract {rom} -o {self.outdir} --uefi')
        self.assertEqual(retval, ExitCode.OK)
        files = os.listdir(self.outdir)
        self.assertEqual(len(files), 1)
        self.assertTrue(files[0].startswith('bios.bin.0.'))
        self.assertTrue(files[0].endswith('.en-US.uefi.ifr.txt'))
        with open(os.path.join(self.outdir, files[0]), encoding='utf-8') as f:
            lines = f.read().splitlines()
        self.assertEqual(lines[0], 'Form: Main Menu [FormId: 0x1]')
        self.assertTrue(lines[1].startswith('  Numeric: CPU Ratio'))

    def test_extract_framework_with_offsets(self) -> None:
        rom = self.write_rom(hb.fw_main_menu_strings() + b'\x00' * 0x10 + hb.fw_main_menu_form())
        retval = setup_run_destroy_util('hii', f'extract {rom} -o {self.outdir} --framework --verbose-offsets')
        self.assertEqual(retval, ExitCode.OK)
        files = os.listdir(self.outdir)
        self.assertEqual(len(files), 1)
        self.assertTrue(files[0].endswith('.eng.framework.ifr.txt'))
        with open(os.path.join(self.outdir, files[0]), encoding='utf-8') as f:
            lines = f.read().splitlines()
        form_offset = len(hb.fw_main_menu_strings()) + 0x10
        self.assertTrue(lines[0].startswith(f'0x{form_offset + 6:08X}: FormSet: Main Menu'))

    def test_help(self) -> None:
        with patch('sys.stdout', new_callable=io.StringIO) as stdout:
            retval = main(['-nb'])
        self.assertEqual(retval, ExitCode.OK)
        self.assertIn('hii', stdout.getvalue())

    def test_extract_nothing_found(self) -> None:
        rom = self.write_rom(b'\x00' * 0x200)
        retval = setup_run_destroy_util('hii', f'extract {rom} -o {self.outdir}')
        self.assertEqual(retval, ExitCode.WARNING)
        self.assertFalse(os.path.exists(self.outdir))


if __name__ == '__main__':
    unittest.main()
