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

from ifrextract.hii.hii_common import HiiFormat, PackageKind, PackageCandidate, Diagnostic, DiagnosticKind, ExtractionResult
from ifrextract.hii.hii_common import OpcodeNode, StringId, StringTable, collect_string_ids
from ifrextract.hii.scanner import find_framework_packages, find_uefi_packages
from ifrextract.hii.hii_strings import parse_string_package
from ifrextract.hii.ifr_decoder import decode_form_package
from ifrextract.hii.formatter import format_ifr
from ifrextract.hii.extract import extract_framework_ifr, extract_uefi_ifr, extract_ifr, match_string_packages

__all__ = [
    'HiiFormat', 'PackageKind', 'PackageCandidate', 'Diagnostic', 'DiagnosticKind', 'ExtractionResult',
    'OpcodeNode', 'StringId', 'StringTable', 'collect_string_ids',
    'find_framework_packages', 'find_uefi_packages',
    'parse_string_package', 'decode_form_package', 'format_ifr',
    'extract_framework_ifr', 'extract_uefi_ifr', 'extract_ifr', 'match_string_packages'
]
