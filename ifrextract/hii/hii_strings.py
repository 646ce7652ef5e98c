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
HII string package parsing

Framework string packs index a table of pointers, the string id is the
pointer index. UEFI string packages hold a sequence of string information
blocks (SIBT), ids are assigned in block order starting at 1.
"""

from typing import List, Tuple

from ifrextract.hii.cursor import ByteCursor, Image
from ifrextract.hii.hii_common import Diagnostic, DiagnosticKind, HiiFormat, PackageCandidate, PackageKind, StringTable, image_offset
from ifrextract.hii.hii_common import FRAMEWORK_EFI_HII_STRING_PACK, FRAMEWORK_EFI_HII_STRING_PACK_size
from ifrextract.hii.hii_common import EFI_HII_STRING_PACKAGE_HDR_size, SIBT_NAMES
from ifrextract.hii import hii_common as hc
from ifrextract.library.defines import bytestostring
from ifrextract.library.exceptions import OutOfBoundsError, PackageKindError
from ifrextract.library.logger import logger

# SCSU single-byte mode tags, everything else is Latin-1 in the default window
SCSU_TAG_BYTES = frozenset(range(0x01, 0x09)) | frozenset((0x0B, 0x0C)) | frozenset(range(0x0E, 0x20))


def decode_scsu(raw: bytes) -> Tuple[str, bool]:
    """
    Decodes an SCSU string that stays in the initial single-byte window.

    Returns the text and whether tag bytes (window switches) were seen;
    tags are decoded as Latin-1 like any other byte.
    """
    return raw.decode('latin_1'), any(b in SCSU_TAG_BYTES for b in raw)


def _package_end(cur: ByteCursor, candidate: PackageCandidate, diags: List[Diagnostic]) -> int:
    end = candidate.offset + candidate.length
    if end > cur.size:
        diags.append(Diagnostic(image_offset(end, cur.size), DiagnosticKind.TRUNCATED,
                                f'string package at 0x{candidate.offset:X} extends 0x{end - cur.size:X} byte(s) past the end of the image'))
        end = cur.size
    return end


def _parse_framework_strings(cur: ByteCursor, candidate: PackageCandidate, table: StringTable, diags: List[Diagnostic]) -> None:
    base = candidate.offset
    if not cur.fits(base, FRAMEWORK_EFI_HII_STRING_PACK_size):
        diags.append(Diagnostic(base, DiagnosticKind.TRUNCATED, 'string pack header is incomplete'))
        return
    _, _, lang_offset, _, count, _ = cur.read_struct(FRAMEWORK_EFI_HII_STRING_PACK, base)
    language = candidate.language
    if not language:
        try:
            language, _ = cur.read_utf16le_cstring(base + lang_offset)
        except OutOfBoundsError:
            diags.append(Diagnostic(base, DiagnosticKind.OUT_OF_BOUNDS, 'language name is outside the string pack'))
    table.add_language(language)
    for string_id in range(count):
        ptr_offset = base + FRAMEWORK_EFI_HII_STRING_PACK_size + string_id * 4
        if not cur.fits(ptr_offset, 4):
            diags.append(Diagnostic(ptr_offset, DiagnosticKind.TRUNCATED, f'string pointer table ends after {string_id:d} of {count:d} entries'))
            return
        str_offset = base + cur.read_u32(ptr_offset)
        try:
            text, _ = cur.read_utf16le_cstring(str_offset)
        except OutOfBoundsError:
            diags.append(Diagnostic(ptr_offset, DiagnosticKind.OUT_OF_BOUNDS, f'string 0x{string_id:X} does not fit in the string pack'))
            return
        table.add(language, string_id, text)


def _read_scsu(cur: ByteCursor, string_id: int, diags: List[Diagnostic]) -> str:
    offset = cur.position
    text, tagged = decode_scsu(cur.next_ascii_cstring())
    if tagged:
        diags.append(Diagnostic(offset, DiagnosticKind.MALFORMED_PAYLOAD, f'SCSU string 0x{string_id:X} contains window tags, decoded as Latin-1'))
    return text


def _parse_uefi_strings(cur: ByteCursor, candidate: PackageCandidate, table: StringTable, diags: List[Diagnostic]) -> None:
    base = candidate.offset
    hdr_size = cur.read_u32(base + 4)
    info_offset = cur.read_u32(base + 8)
    language = candidate.language
    if not language:
        raw, _ = cur.read_ascii_cstring(base + EFI_HII_STRING_PACKAGE_HDR_size, max(hdr_size - EFI_HII_STRING_PACKAGE_HDR_size, 0))
        language = bytestostring(raw)
    table.add_language(language)

    cur.seek(base + info_offset)
    string_id = 1
    while True:
        offset = cur.position
        block_type = cur.next_u8()
        if block_type == hc.EFI_HII_SIBT_END:
            return
        elif block_type in (hc.EFI_HII_SIBT_STRING_SCSU, hc.EFI_HII_SIBT_STRING_SCSU_FONT):
            if block_type == hc.EFI_HII_SIBT_STRING_SCSU_FONT:
                cur.skip(1)
            table.add(language, string_id, _read_scsu(cur, string_id, diags))
            string_id += 1
        elif block_type in (hc.EFI_HII_SIBT_STRINGS_SCSU, hc.EFI_HII_SIBT_STRINGS_SCSU_FONT):
            if block_type == hc.EFI_HII_SIBT_STRINGS_SCSU_FONT:
                cur.skip(1)
            for _ in range(cur.next_u16()):
                table.add(language, string_id, _read_scsu(cur, string_id, diags))
                string_id += 1
        elif block_type in (hc.EFI_HII_SIBT_STRING_UCS2, hc.EFI_HII_SIBT_STRING_UCS2_FONT):
            if block_type == hc.EFI_HII_SIBT_STRING_UCS2_FONT:
                cur.skip(1)
            table.add(language, string_id, cur.next_utf16le_cstring())
            string_id += 1
        elif block_type in (hc.EFI_HII_SIBT_STRINGS_UCS2, hc.EFI_HII_SIBT_STRINGS_UCS2_FONT):
            if block_type == hc.EFI_HII_SIBT_STRINGS_UCS2_FONT:
                cur.skip(1)
            for _ in range(cur.next_u16()):
                table.add(language, string_id, cur.next_utf16le_cstring())
                string_id += 1
        elif block_type == hc.EFI_HII_SIBT_DUPLICATE:
            text = table.get(cur.next_u16(), language)
            if text is not None:
                table.add(language, string_id, text)
            string_id += 1
        elif block_type == hc.EFI_HII_SIBT_SKIP2:
            string_id += cur.next_u16()
        elif block_type == hc.EFI_HII_SIBT_SKIP1:
            string_id += cur.next_u8()
        elif block_type in (hc.EFI_HII_SIBT_EXT1, hc.EFI_HII_SIBT_EXT2, hc.EFI_HII_SIBT_EXT4):
            # Font and other extended blocks carry no strings, their length covers the whole block
            cur.skip(1)
            length_size = {hc.EFI_HII_SIBT_EXT1: 1, hc.EFI_HII_SIBT_EXT2: 2, hc.EFI_HII_SIBT_EXT4: 4}[block_type]
            length = cur.next_uint(length_size)
            if length < 2 + length_size:
                diags.append(Diagnostic(offset, DiagnosticKind.TRUNCATED, f'{SIBT_NAMES[block_type]} block has invalid length 0x{length:X}'))
                return
            cur.seek(offset + length)
        else:
            diags.append(Diagnostic(offset, DiagnosticKind.UNKNOWN_BLOCK, f'unknown string block type 0x{block_type:02X}, stopping at string 0x{string_id:X}'))
            return


def parse_string_package(image: Image, candidate: PackageCandidate) -> Tuple[StringTable, List[Diagnostic]]:
    """
    Builds the string table of a string package candidate.

    Never raises on malformed content: every problem is reported as a
    diagnostic and the strings decoded so far are kept. Raises
    PackageKindError if ``candidate`` is not a string package.
    """
    if candidate.kind is not PackageKind.STRINGS:
        raise PackageKindError(f'expected a string package, got {candidate.kind.value} at 0x{candidate.offset:X}')
    image_cur = ByteCursor(image)
    diags: List[Diagnostic] = []
    table = StringTable()
    end = _package_end(image_cur, candidate, diags)
    if end <= candidate.offset:
        diags.append(Diagnostic(image_offset(candidate.offset, image_cur.size), DiagnosticKind.OUT_OF_BOUNDS, 'string package starts past the end of the image'))
        return table, diags

    cur = ByteCursor(image, candidate.offset, end)
    try:
        if candidate.format is HiiFormat.FRAMEWORK:
            _parse_framework_strings(cur, candidate, table, diags)
        else:
            _parse_uefi_strings(cur, candidate, table, diags)
    except OutOfBoundsError as err:
        diags.append(Diagnostic(image_offset(err.offset, image_cur.size), DiagnosticKind.TRUNCATED, f'string package at 0x{candidate.offset:X} ends early: {err}'))
    logger().log_hal(f'[hii] String package 0x{candidate.offset:X}: {len(table):d} string(s), {len(diags):d} diagnostic(s)')
    return table, diags
