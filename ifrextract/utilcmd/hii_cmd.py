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
The hii command finds HII string and form packages in a firmware image and extracts the IFR forms they describe as text.

>>> ifrextract_util hii scan <rom_file> [--framework|--uefi|--all] [--standalone]
>>> ifrextract_util hii extract <rom_file> [-o <out_dir>] [--framework|--uefi|--all] [--verbose-offsets] [--standalone]

Examples:

>>> ifrextract_util hii scan bios.bin
>>> ifrextract_util hii scan bios.bin --uefi --standalone
>>> ifrextract_util hii extract bios.bin
>>> ifrextract_util hii extract bios.bin -o ifr_out --framework --verbose-offsets
"""

import re
from argparse import ArgumentParser
from typing import List, Optional

from ifrextract.command import BaseCommand, ExitCode
from ifrextract.hii import HiiFormat, extract_ifr, find_framework_packages, find_uefi_packages, match_string_packages
from ifrextract.hii.scanner import ScanResult
from ifrextract.library.file import read_file, write_file, output_file_name, validate_file_exists
from ifrextract.library.logger import dump_buffer_bytes
from ifrextract.library.options import Options

MODES = {
    'framework': HiiFormat.FRAMEWORK,
    'uefi': HiiFormat.UEFI
}
HEADER_DUMP_SIZE = 0x20


class HiiCommand(BaseCommand):

    def parse_arguments(self) -> None:
        options = Options()
        default_standalone = options.get_bool_data('Extract_Config', 'standalone_packages', False)
        default_offsets = options.get_bool_data('Extract_Config', 'verbose_offsets', False)
        default_modes = options.get_list_data('Extract_Config', 'modes', list(MODES))
        self.suffix = options.get_section_data('Extract_Config', 'output_suffix', '.ifr.txt')

        parser = ArgumentParser(prog='ifrextract_util hii', usage=__doc__)
        subparsers = parser.add_subparsers()

        # scan command args
        parser_scan = subparsers.add_parser('scan')
        parser_scan.add_argument('filename', type=str, help='firmware image to scan')
        self._add_common_arguments(parser_scan, default_modes, default_standalone)
        parser_scan.set_defaults(func=self.scan)

        # extract command args
        parser_extract = subparsers.add_parser('extract')
        parser_extract.add_argument('filename', type=str, help='firmware image to extract IFR from')
        parser_extract.add_argument('-o', '--outdir', dest='outdir', type=str, default=None, help='directory for the extracted files')
        parser_extract.add_argument('--verbose-offsets', dest='verbose_offsets', action='store_true', default=default_offsets,
                                    help='prefix each line with the image offset of its opcode')
        self._add_common_arguments(parser_extract, default_modes, default_standalone)
        parser_extract.set_defaults(func=self.extract)

        parser.parse_args(self.argv, namespace=self)

    @staticmethod
    def _add_common_arguments(parser: ArgumentParser, default_modes: List[str], default_standalone: bool) -> None:
        modes = parser.add_mutually_exclusive_group()
        modes.add_argument('--framework', dest='modes', action='store_const', const=['framework'], help='Framework HII packages only')
        modes.add_argument('--uefi', dest='modes', action='store_const', const=['uefi'], help='UEFI HII packages only')
        modes.add_argument('--all', dest='modes', action='store_const', const=list(MODES), help='Framework and UEFI HII packages')
        parser.set_defaults(modes=[m for m in default_modes if m in MODES])
        parser.add_argument('--standalone', dest='standalone', action='store_true', default=default_standalone,
                            help='also report UEFI packages found outside of package lists')

    def _read_image(self) -> Optional[bytes]:
        if not validate_file_exists(self.filename, 'firmware image'):
            self.report(ExitCode.ERROR)
            return None
        return read_file(self.filename)

    def _find(self, mode: str, image: bytes) -> ScanResult:
        if MODES[mode] is HiiFormat.FRAMEWORK:
            return find_framework_packages(image)
        return find_uefi_packages(image, self.standalone)

    def scan(self) -> None:
        image = self._read_image()
        if image is None:
            return
        self.logger.log(f"[IFREXTRACT] Scanning '{self.filename}' for HII packages..")
        total = 0
        for mode in self.modes:
            strings, forms = self._find(mode, image)
            self.logger.log_heading(f'[*] {MODES[mode].value}: {len(strings):d} string package(s), {len(forms):d} form package(s)')
            for candidate in strings + forms:
                self.logger.log(f'    {candidate}')
                if self.logger.VERBOSE:
                    self.logger.log_verbose(dump_buffer_bytes(image[candidate.offset:candidate.offset + HEADER_DUMP_SIZE], 16))
            total += len(strings) + len(forms)
        if not total:
            self.logger.log_warning('No HII packages found')
            self.report(ExitCode.WARNING)

    def extract(self) -> None:
        image = self._read_image()
        if image is None:
            return
        self.logger.log(f"[IFREXTRACT] Extracting IFR from '{self.filename}'..")
        written = 0
        for mode in self.modes:
            strings, forms = self._find(mode, image)
            for form in forms:
                matching = match_string_packages(strings, form)
                if not matching:
                    self.logger.log_verbose(f'[*] No string package covers {form}')
                for string_package in matching:
                    result = extract_ifr(image, form, string_package, self.verbose_offsets)
                    language = re.sub(r'[^\w\-]', '_', string_package.language)
                    base = f'{self.filename}.{written:d}.{form.offset:X}.{string_package.offset:X}.{language}.{mode}'
                    out_name = output_file_name(base, self.outdir, self.suffix)
                    if not write_file(out_name, result.text):
                        self.report(ExitCode.ERROR)
                        continue
                    if result.diagnostics:
                        self.logger.log_warning(f'{len(result.diagnostics):d} diagnostic(s) while extracting form package 0x{form.offset:X}')
                        self.report(ExitCode.WARNING)
                    self.logger.log_good(f"Form package 0x{form.offset:X} with {string_package.language} strings written to '{out_name}'")
                    written += 1
        if not written:
            self.logger.log_warning('No IFR extracted')
            self.report(ExitCode.WARNING)


commands = {'hii': HiiCommand}
