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
Extraction of human readable IFR from a (form package, string package) pair
"""

from typing import List, Optional, Sequence

from ifrextract.hii.cursor import Image
from ifrextract.hii.formatter import format_ifr
from ifrextract.hii.hii_common import ExtractionResult, HiiFormat, PackageCandidate, PackageKind
from ifrextract.hii.hii_strings import parse_string_package
from ifrextract.hii.ifr_decoder import decode_form_package
from ifrextract.library.exceptions import PackageKindError
from ifrextract.library.logger import logger


def _check_pair(form: PackageCandidate, strings: PackageCandidate, fmt: Optional[HiiFormat] = None) -> None:
    if form.kind is not PackageKind.FORMS:
        raise PackageKindError(f'form argument is a {form.kind.value} (0x{form.offset:X})')
    if strings.kind is not PackageKind.STRINGS:
        raise PackageKindError(f'strings argument is a {strings.kind.value} (0x{strings.offset:X})')
    if form.format is not strings.format:
        raise PackageKindError(f'cannot pair a {form.format.value} form package with a {strings.format.value} string package')
    if fmt is not None and form.format is not fmt:
        raise PackageKindError(f'expected {fmt.value} packages, got {form.format.value}')


def match_string_packages(strings: Sequence[PackageCandidate], form: PackageCandidate) -> List[PackageCandidate]:
    """Returns the string packages of the form's format which hold every string id the form uses."""
    return [s for s in strings
            if s.format is form.format and s.kind is PackageKind.STRINGS and s.max_string_id >= form.max_string_id]


def extract_ifr(image: Image, form: PackageCandidate, strings: PackageCandidate, verbose: bool = False) -> ExtractionResult:
    """
    Decodes ``form``, resolves its strings through ``strings`` and renders the result.

    The diagnostics of every stage are collected in order: string package,
    form package, then rendering.
    """
    _check_pair(form, strings)
    table, string_diags = parse_string_package(image, strings)
    roots, form_diags = decode_form_package(image, form)
    result = format_ifr(roots, table, verbose, strings.language or None)
    diagnostics = string_diags + form_diags + result.diagnostics
    for diag in diagnostics:
        logger().log_hal(f'[hii] {diag}')
    logger().log_hal(f'[hii] Extracted form package 0x{form.offset:X} with string package 0x{strings.offset:X} ({strings.language}): '
                     f'{result.text.count(chr(10)):d} line(s), {len(diagnostics):d} diagnostic(s)')
    return ExtractionResult(result.text, diagnostics)


def extract_framework_ifr(image: Image, form: PackageCandidate, strings: PackageCandidate, verbose: bool = False) -> str:
    _check_pair(form, strings, HiiFormat.FRAMEWORK)
    return extract_ifr(image, form, strings, verbose).text


def extract_uefi_ifr(image: Image, form: PackageCandidate, strings: PackageCandidate, verbose: bool = False) -> str:
    _check_pair(form, strings, HiiFormat.UEFI)
    return extract_ifr(image, form, strings, verbose).text
