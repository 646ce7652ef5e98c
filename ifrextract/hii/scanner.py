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
HII package scanner

Finds Framework string/form packs and UEFI HII package lists in a raw image.
Signatures are located with a regex prefilter, every hit is then validated
structurally; hits that fail validation are dropped silently (logged at
debug level).
"""

import re
from typing import List, Tuple

from ifrextract.hii import framework_ifr, uefi_ifr
from ifrextract.hii.cursor import ByteCursor, Image
from ifrextract.hii.hii_common import HiiFormat, PackageCandidate, PackageKind, DiagnosticKind, collect_string_ids
from ifrextract.hii.hii_common import get_package_header, package_type_name
from ifrextract.hii import hii_common as hc
from ifrextract.hii.hii_strings import parse_string_package
from ifrextract.hii.ifr_decoder import decode_form_package
from ifrextract.library.defines import bytestostring
from ifrextract.library.exceptions import HiiError, InvalidHeaderError
from ifrextract.library.logger import logger

ScanResult = Tuple[List[PackageCandidate], List[PackageCandidate]]

# Framework: string pack header with small offsets, Length < 16M
FRAMEWORK_STRING_PACK_RE = re.compile(rb'(?=[\s\S]{3}\x00\x02\x00[\s\S]{2}\x00\x00[\s\S]{2}\x00\x00[\s\S]{2}\x00\x00)')
# Framework: IFR pack header directly followed by a FORM_SET record
FRAMEWORK_FORM_PACK_RE = re.compile(rb'(?=[\s\S]{3}\x00\x03\x00\x0e\x24)')
# UEFI: package list header (Length < 16M) whose first package is a string package or a form package starting with FORM_SET or FORM
UEFI_PACKAGE_LIST_RE = re.compile(rb'(?=[\s\S]{19}\x00[\s\S]{3}(?:\x02[\x01\x0e]|\x04[\x2f-\xff]\x00\x00\x00))')
# UEFI: package headers outside of a package list
UEFI_FORM_PACKAGE_RE = re.compile(rb'(?=[\s\S]{3}\x02\x0e)')
UEFI_STRING_PACKAGE_RE = re.compile(rb'(?=[\s\S]{3}\x04[\x2f-\xff]\x00\x00\x00)')

# Only blocking diagnostics reject a string package during the scan
STRING_REJECT_KINDS = (DiagnosticKind.TRUNCATED, DiagnosticKind.UNKNOWN_BLOCK, DiagnosticKind.OUT_OF_BOUNDS)


def _is_language(text: str) -> bool:
    return len(text) > 0 and all(0x20 < ord(c) < 0x7F for c in text)


def _string_summary(image: Image, candidate: PackageCandidate) -> PackageCandidate:
    table, diags = parse_string_package(image, candidate)
    if any(d.kind in STRING_REJECT_KINDS for d in diags):
        raise InvalidHeaderError(candidate.offset, f'string blocks do not parse: {diags[0]}')
    ids = list(table.strings(candidate.language))
    if not ids:
        raise InvalidHeaderError(candidate.offset, 'string package holds no strings')
    return candidate._replace(used_strings=len(ids), min_string_id=min(ids), max_string_id=max(ids))


def _form_summary(image: Image, candidate: PackageCandidate) -> PackageCandidate:
    roots, _ = decode_form_package(image, candidate)
    ids = collect_string_ids(roots)
    if not ids:
        return candidate
    return candidate._replace(used_strings=len(ids), min_string_id=ids[0], max_string_id=ids[-1])


def _check_records(cur: ByteCursor, start: int, end: int, catalog) -> None:
    """Checks that the opcode records between start and end tile the range exactly."""
    offset = start
    while offset < end:
        _, length, _ = catalog.read_op_header(cur, offset)
        if length < catalog.OP_HEADER_SIZE:
            raise InvalidHeaderError(offset, f'opcode record has invalid length 0x{length:X}')
        offset += length
    if offset != end:
        raise InvalidHeaderError(start, 'opcode records overrun the package')


################################################################################################
#
# Framework packs
#
################################################################################################

def _framework_string_pack(image: Image, cur: ByteCursor, offset: int) -> PackageCandidate:
    length, _, lang_offset, printable_offset, count, _ = cur.read_struct(hc.FRAMEWORK_EFI_HII_STRING_PACK, offset)
    table_end = hc.FRAMEWORK_EFI_HII_STRING_PACK_size + count * 4
    if count == 0 or length < table_end or not cur.fits(offset, length):
        raise InvalidHeaderError(offset, f'string pack length 0x{length:X} does not hold 0x{count:X} pointers')
    for rel in [lang_offset, printable_offset] + [cur.read_u32(offset + hc.FRAMEWORK_EFI_HII_STRING_PACK_size + i * 4) for i in range(count)]:
        if not table_end <= rel < length:
            raise InvalidHeaderError(offset, f'string offset 0x{rel:X} is outside the string data')
    language, _ = cur.read_utf16le_cstring(offset + lang_offset, length - lang_offset)
    if not _is_language(language):
        raise InvalidHeaderError(offset, 'language name is not printable')
    candidate = PackageCandidate(HiiFormat.FRAMEWORK, PackageKind.STRINGS, offset, length, language)
    table, diags = parse_string_package(image, candidate)
    if diags:
        raise InvalidHeaderError(offset, f'string pack does not parse: {diags[0]}')
    ids = list(table.strings(language))
    return candidate._replace(used_strings=len(ids), min_string_id=min(ids), max_string_id=max(ids))


def _framework_form_pack(image: Image, cur: ByteCursor, offset: int) -> PackageCandidate:
    length = cur.read_u32(offset)
    if not cur.fits(offset, length) or length < hc.FRAMEWORK_EFI_HII_PACK_HEADER_size + framework_ifr.FRAMEWORK_EFI_IFR_FORM_SET_size:
        raise InvalidHeaderError(offset, f'IFR pack length 0x{length:X} is invalid')
    _check_records(cur, offset + hc.FRAMEWORK_EFI_HII_PACK_HEADER_size, offset + length, framework_ifr)
    return _form_summary(image, PackageCandidate(HiiFormat.FRAMEWORK, PackageKind.FORMS, offset, length))


def _scan(image: Image, pattern, validate) -> List[PackageCandidate]:
    cur = ByteCursor(image)
    found: List[PackageCandidate] = []
    resume = 0
    for match in pattern.finditer(memoryview(image)):
        offset = match.start()
        if offset < resume:
            continue
        try:
            candidate = validate(image, cur, offset)
        except HiiError as err:
            logger().log_debug(f'[hii] Rejected candidate at 0x{offset:X}: {err}')
            continue
        logger().log_hal(f'[hii] Found {candidate}')
        found.append(candidate)
        resume = offset + candidate.length
    return found


def find_framework_packages(image: Image) -> ScanResult:
    """
    Locates Framework HII string packs and IFR packs.

    Returns (string candidates, form candidates) in increasing offset order.
    """
    strings = _scan(image, FRAMEWORK_STRING_PACK_RE, _framework_string_pack)
    forms = _scan(image, FRAMEWORK_FORM_PACK_RE, _framework_form_pack)
    logger().log_verbose(f'[hii] Framework: {len(strings):d} string pack(s), {len(forms):d} form pack(s)')
    return strings, forms


################################################################################################
#
# UEFI packages
#
################################################################################################

def _uefi_string_package(image: Image, cur: ByteCursor, offset: int) -> PackageCandidate:
    length, package_type = get_package_header(cur.read_u32(offset))
    hdr_size = cur.read_u32(offset + 4)
    info_offset = cur.read_u32(offset + 8)
    if package_type != hc.EFI_HII_PACKAGE_STRINGS or not cur.fits(offset, length):
        raise InvalidHeaderError(offset, f'not a string package (type 0x{package_type:02X}, length 0x{length:X})')
    if hdr_size < hc.EFI_HII_STRING_PACKAGE_HDR_MIN_size or hdr_size > info_offset or info_offset >= length:
        raise InvalidHeaderError(offset, f'string package header size 0x{hdr_size:X} / string info offset 0x{info_offset:X} are invalid')
    raw, _ = cur.read_ascii_cstring(offset + hc.EFI_HII_STRING_PACKAGE_HDR_size, hdr_size - hc.EFI_HII_STRING_PACKAGE_HDR_size)
    language = bytestostring(raw)
    if not _is_language(language):
        raise InvalidHeaderError(offset, 'language name is not printable')
    return _string_summary(image, PackageCandidate(HiiFormat.UEFI, PackageKind.STRINGS, offset, length, language))


def _uefi_form_package(image: Image, cur: ByteCursor, offset: int, require_form_set: bool = True) -> PackageCandidate:
    length, package_type = get_package_header(cur.read_u32(offset))
    if package_type != hc.EFI_HII_PACKAGE_FORMS or not cur.fits(offset, length) or length <= hc.EFI_HII_PACKAGE_HEADER_size:
        raise InvalidHeaderError(offset, f'not a form package (type 0x{package_type:02X}, length 0x{length:X})')
    start = offset + hc.EFI_HII_PACKAGE_HEADER_size
    if require_form_set and cur.read_u8(start) != uefi_ifr.EFI_IFR_FORM_SET_OP:
        raise InvalidHeaderError(offset, 'form package does not start with a form set')
    _check_records(cur, start, offset + length, uefi_ifr)
    return _form_summary(image, PackageCandidate(HiiFormat.UEFI, PackageKind.FORMS, offset, length))


def _uefi_package_list(image: Image, cur: ByteCursor, offset: int) -> ScanResult:
    """Walks a package list; sub-packages that fail validation are skipped."""
    guid = cur.read_guid(offset)
    list_length = cur.read_u32(offset + 16)
    if list_length < hc.EFI_HII_PACKAGE_LIST_HEADER_size + hc.EFI_HII_PACKAGE_HEADER_size or not cur.fits(offset, list_length):
        raise InvalidHeaderError(offset, f'package list length 0x{list_length:X} is invalid')
    list_end = offset + list_length
    packages = []
    pos = offset + hc.EFI_HII_PACKAGE_LIST_HEADER_size
    while True:
        if pos + hc.EFI_HII_PACKAGE_HEADER_size > list_end:
            raise InvalidHeaderError(offset, 'package list has no end package')
        length, package_type = get_package_header(cur.read_u32(pos))
        if package_type not in hc.EFI_HII_PACKAGE_LIST_TYPES:
            raise InvalidHeaderError(pos, f'unknown package type 0x{package_type:02X}')
        if length < hc.EFI_HII_PACKAGE_HEADER_size or pos + length > list_end:
            raise InvalidHeaderError(pos, f'{package_type_name(package_type)} package length 0x{length:X} overruns the package list')
        if package_type == hc.EFI_HII_PACKAGE_END:
            if pos + length != list_end:
                raise InvalidHeaderError(pos, 'end package does not close the package list')
            break
        packages.append((pos, package_type))
        pos += length

    strings: List[PackageCandidate] = []
    forms: List[PackageCandidate] = []
    for pos, package_type in packages:
        try:
            if package_type == hc.EFI_HII_PACKAGE_STRINGS:
                strings.append(_uefi_string_package(image, cur, pos))
            elif package_type == hc.EFI_HII_PACKAGE_FORMS:
                forms.append(_uefi_form_package(image, cur, pos, False))
        except HiiError as err:
            logger().log_hal(f'[hii] Skipping package in list {guid} at 0x{offset:X}: {err}')
    if not strings and not forms:
        raise InvalidHeaderError(offset, 'package list holds no string or form packages')
    logger().log_hal(f'[hii] Package list {guid} at 0x{offset:X}, length 0x{list_length:X}: {len(strings):d} string / {len(forms):d} form package(s)')
    return strings, forms


def find_uefi_packages(image: Image, standalone: bool = False) -> ScanResult:
    """
    Locates UEFI HII string and form packages.

    Packages are taken from validated package lists. With ``standalone``
    set, string and form packages found outside of any package list are
    reported as well. Returns (string candidates, form candidates) in
    increasing offset order.
    """
    cur = ByteCursor(image)
    strings: List[PackageCandidate] = []
    forms: List[PackageCandidate] = []
    claimed: List[Tuple[int, int]] = []
    resume = 0
    for match in UEFI_PACKAGE_LIST_RE.finditer(memoryview(image)):
        offset = match.start()
        if offset < resume:
            continue
        try:
            list_strings, list_forms = _uefi_package_list(image, cur, offset)
        except HiiError as err:
            logger().log_debug(f'[hii] Rejected package list at 0x{offset:X}: {err}')
            continue
        strings.extend(list_strings)
        forms.extend(list_forms)
        resume = offset + cur.read_u32(offset + 16)
        claimed.append((offset, resume))

    if standalone:
        def outside_lists(candidate: PackageCandidate) -> bool:
            return not any(start <= candidate.offset < end for start, end in claimed)
        strings.extend(c for c in _scan(image, UEFI_STRING_PACKAGE_RE, _uefi_string_package) if outside_lists(c))
        forms.extend(c for c in _scan(image, UEFI_FORM_PACKAGE_RE, _uefi_form_package) if outside_lists(c))
        strings.sort(key=lambda c: c.offset)
        forms.sort(key=lambda c: c.offset)

    logger().log_verbose(f'[hii] UEFI: {len(strings):d} string package(s), {len(forms):d} form package(s)')
    return strings, forms
