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
Common HII functionality: package and string block defines, candidates,
diagnostics, decoded opcode nodes and string tables shared by the Framework
and UEFI parsers.
"""

import struct
from collections import namedtuple
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ifrextract.hii.cursor import ByteCursor
from ifrextract.library.exceptions import OutOfBoundsError
from ifrextract.library.defines import BIT7


class HiiFormat(Enum):
    FRAMEWORK = 'Framework'
    UEFI = 'UEFI'


class PackageKind(Enum):
    STRINGS = 'StringPackage'
    FORMS = 'FormPackage'


class DiagnosticKind(Enum):
    OUT_OF_BOUNDS = 'OutOfBounds'
    TRUNCATED = 'Truncated'
    UNBALANCED_SCOPE = 'UnbalancedScope'
    UNKNOWN_OPCODE = 'UnknownOpcode'
    UNKNOWN_BLOCK = 'UnknownBlock'
    UNRESOLVED_STRING_ID = 'UnresolvedStringId'
    MALFORMED_PAYLOAD = 'MalformedPayload'


################################################################################################
#
# Framework HII Defines
#
################################################################################################

# Intel Platform Innovation Framework for EFI HII Specification 0.92
FRAMEWORK_EFI_HII_PACK_HEADER = '<IH'
FRAMEWORK_EFI_HII_PACK_HEADER_size = struct.calcsize(FRAMEWORK_EFI_HII_PACK_HEADER)
# Header, LanguageNameString, PrintableLanguageName, NumStringPointers, Attributes
FRAMEWORK_EFI_HII_STRING_PACK = '<IHIIII'
FRAMEWORK_EFI_HII_STRING_PACK_size = struct.calcsize(FRAMEWORK_EFI_HII_STRING_PACK)

FRAMEWORK_EFI_HII_FONT = 0x0001
FRAMEWORK_EFI_HII_STRING = 0x0002
FRAMEWORK_EFI_HII_IFR = 0x0003
FRAMEWORK_EFI_HII_KEYBOARD = 0x0004
FRAMEWORK_EFI_HII_HANDLES = 0x0005
FRAMEWORK_EFI_HII_VARIABLE = 0x0006
FRAMEWORK_EFI_HII_DEVICE_PATH = 0x0007

# Framework IFR records: UINT8 OpCode, UINT8 Length
FRAMEWORK_EFI_IFR_OP_HEADER_size = 2


################################################################################################
#
# UEFI HII Defines
#
################################################################################################

# UEFI Specification, Human Interface Infrastructure Overview
EFI_HII_PACKAGE_LIST_HEADER = '<16sI'
EFI_HII_PACKAGE_LIST_HEADER_size = struct.calcsize(EFI_HII_PACKAGE_LIST_HEADER)
EFI_HII_PACKAGE_HEADER_size = 4

EFI_HII_PACKAGE_TYPE_ALL = 0x00
EFI_HII_PACKAGE_TYPE_GUID = 0x01
EFI_HII_PACKAGE_FORMS = 0x02
EFI_HII_PACKAGE_STRINGS = 0x04
EFI_HII_PACKAGE_FONTS = 0x05
EFI_HII_PACKAGE_IMAGES = 0x06
EFI_HII_PACKAGE_SIMPLE_FONTS = 0x07
EFI_HII_PACKAGE_DEVICE_PATH = 0x08
EFI_HII_PACKAGE_KEYBOARD_LAYOUT = 0x09
EFI_HII_PACKAGE_ANIMATIONS = 0x0A
EFI_HII_PACKAGE_END = 0xDF
EFI_HII_PACKAGE_TYPE_SYSTEM_BEGIN = 0xE0
EFI_HII_PACKAGE_TYPE_SYSTEM_END = 0xFF

PACKAGE_TYPE_NAMES = {
    EFI_HII_PACKAGE_TYPE_ALL: 'ALL',
    EFI_HII_PACKAGE_TYPE_GUID: 'GUID',
    EFI_HII_PACKAGE_FORMS: 'FORMS',
    EFI_HII_PACKAGE_STRINGS: 'STRINGS',
    EFI_HII_PACKAGE_FONTS: 'FONTS',
    EFI_HII_PACKAGE_IMAGES: 'IMAGES',
    EFI_HII_PACKAGE_SIMPLE_FONTS: 'SIMPLE_FONTS',
    EFI_HII_PACKAGE_DEVICE_PATH: 'DEVICE_PATH',
    EFI_HII_PACKAGE_KEYBOARD_LAYOUT: 'KEYBOARD_LAYOUT',
    EFI_HII_PACKAGE_ANIMATIONS: 'ANIMATIONS',
    EFI_HII_PACKAGE_END: 'END'
}

# Package types allowed inside a package list (TYPE_ALL is a query value only)
EFI_HII_PACKAGE_LIST_TYPES = [t for t in PACKAGE_TYPE_NAMES if t != EFI_HII_PACKAGE_TYPE_ALL] + \
    list(range(EFI_HII_PACKAGE_TYPE_SYSTEM_BEGIN, EFI_HII_PACKAGE_TYPE_SYSTEM_END + 1))


def package_type_name(package_type: int) -> str:
    if EFI_HII_PACKAGE_TYPE_SYSTEM_BEGIN <= package_type <= EFI_HII_PACKAGE_TYPE_SYSTEM_END:
        return f'SYSTEM_{package_type:02X}'
    return PACKAGE_TYPE_NAMES.get(package_type, f'UNKNOWN_{package_type:02X}')


def get_package_header(hdr: int) -> Tuple[int, int]:
    """Splits an EFI_HII_PACKAGE_HEADER dword into (Length, Type)."""
    return (hdr & 0xFFFFFF, (hdr >> 24) & 0xFF)


# Header, HdrSize, StringInfoOffset, LanguageWindow[16], LanguageName, then CHAR8 Language[]
EFI_HII_STRING_PACKAGE_HDR = '<III32sH'
EFI_HII_STRING_PACKAGE_HDR_size = struct.calcsize(EFI_HII_STRING_PACKAGE_HDR)
EFI_HII_STRING_PACKAGE_HDR_MIN_size = EFI_HII_STRING_PACKAGE_HDR_size + 1

#
# String information block types
#
EFI_HII_SIBT_END = 0x00
EFI_HII_SIBT_STRING_SCSU = 0x10
EFI_HII_SIBT_STRING_SCSU_FONT = 0x11
EFI_HII_SIBT_STRINGS_SCSU = 0x12
EFI_HII_SIBT_STRINGS_SCSU_FONT = 0x13
EFI_HII_SIBT_STRING_UCS2 = 0x14
EFI_HII_SIBT_STRING_UCS2_FONT = 0x15
EFI_HII_SIBT_STRINGS_UCS2 = 0x16
EFI_HII_SIBT_STRINGS_UCS2_FONT = 0x17
EFI_HII_SIBT_DUPLICATE = 0x20
EFI_HII_SIBT_SKIP2 = 0x21
EFI_HII_SIBT_SKIP1 = 0x22
EFI_HII_SIBT_EXT1 = 0x30
EFI_HII_SIBT_EXT2 = 0x31
EFI_HII_SIBT_EXT4 = 0x32

SIBT_NAMES = {
    EFI_HII_SIBT_END: 'END',
    EFI_HII_SIBT_STRING_SCSU: 'STRING_SCSU',
    EFI_HII_SIBT_STRING_SCSU_FONT: 'STRING_SCSU_FONT',
    EFI_HII_SIBT_STRINGS_SCSU: 'STRINGS_SCSU',
    EFI_HII_SIBT_STRINGS_SCSU_FONT: 'STRINGS_SCSU_FONT',
    EFI_HII_SIBT_STRING_UCS2: 'STRING_UCS2',
    EFI_HII_SIBT_STRING_UCS2_FONT: 'STRING_UCS2_FONT',
    EFI_HII_SIBT_STRINGS_UCS2: 'STRINGS_UCS2',
    EFI_HII_SIBT_STRINGS_UCS2_FONT: 'STRINGS_UCS2_FONT',
    EFI_HII_SIBT_DUPLICATE: 'DUPLICATE',
    EFI_HII_SIBT_SKIP2: 'SKIP2',
    EFI_HII_SIBT_SKIP1: 'SKIP1',
    EFI_HII_SIBT_EXT1: 'EXT1',
    EFI_HII_SIBT_EXT2: 'EXT2',
    EFI_HII_SIBT_EXT4: 'EXT4'
}

# UEFI IFR records: UINT8 OpCode, UINT8 Length:7, UINT8 Scope:1
EFI_IFR_OP_HEADER_size = 2
EFI_IFR_SCOPE_BIT = BIT7
EFI_IFR_LENGTH_MASK = 0x7F


################################################################################################
#
# Package candidates and diagnostics
#
################################################################################################

class PackageCandidate(namedtuple('PackageCandidate', 'format kind offset length language used_strings min_string_id max_string_id',
                                  defaults=('', 0, 0, 0))):
    """
    A validated string or form package found by a scan.

    ``offset``/``length`` locate the package header and the declared
    package length. For string packages ``used_strings`` is the number of
    entries and ``min_string_id``/``max_string_id`` the id range of the
    table; for form packages they summarise the string ids the forms use.
    """
    __slots__ = ()

    def __str__(self) -> str:
        _s = f'{self.format.value} {self.kind.value} +{self.offset:08X}h, Length {self.length:06X}h'
        if self.kind is PackageKind.STRINGS:
            _s += f', Language {self.language}, Strings {self.used_strings:d}'
        else:
            _s += f', UsedStrings {self.used_strings:d}, MinStringId {self.min_string_id:04X}h, MaxStringId {self.max_string_id:04X}h'
        return _s


class Diagnostic(namedtuple('Diagnostic', 'offset kind message')):
    __slots__ = ()

    def __str__(self) -> str:
        return f'0x{self.offset:X}: [{self.kind.value}] {self.message}'


def image_offset(offset: int, image_size: int) -> int:
    """Clamps a diagnostic offset to the last byte of the image."""
    return max(0, min(offset, image_size - 1))


ExtractionResult = namedtuple('ExtractionResult', 'text diagnostics')


class StringId(int):
    """An IFR field holding a reference into a string table."""

    def __repr__(self) -> str:
        return f'StringId(0x{int(self):X})'


################################################################################################
#
# Decoded IFR opcodes
#
################################################################################################

UNRECOGNIZED = 'Unrecognized'


class OpcodeNode:
    def __init__(self, format: HiiFormat, opcode: int, name: str, source_offset: int, raw_length: int,
                 payload: Optional[Dict[str, Any]] = None, raw: bytes = b'', scope: bool = False) -> None:
        self.format = format
        self.opcode = opcode
        self.name = name
        self.source_offset = source_offset
        self.raw_length = raw_length
        self.payload = payload if payload is not None else {}
        self.raw = raw
        self.scope = scope
        # nodes opened inside this node's scope, in stream order
        self.children: List['OpcodeNode'] = []

    @property
    def recognized(self) -> bool:
        return self.name != UNRECOGNIZED

    def _key(self) -> Tuple:
        return (self.format, self.opcode, self.name, self.source_offset, self.raw_length, self.payload, self.raw, self.scope, self.children)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OpcodeNode):
            return NotImplemented
        return self._key() == other._key()

    def __repr__(self) -> str:
        return f'OpcodeNode({self.name} 0x{self.opcode:02X} +{self.source_offset:X}h, {len(self.children):d} children)'

    def walk(self) -> Iterator['OpcodeNode']:
        """Yields this node and all of its descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def string_ids(self) -> List[StringId]:
        return list(_find_string_ids(self.payload))


def _find_string_ids(value: Any) -> Iterator[StringId]:
    if isinstance(value, StringId):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from _find_string_ids(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _find_string_ids(item)


def walk_nodes(roots: Sequence[OpcodeNode]) -> Iterator[OpcodeNode]:
    for root in roots:
        yield from root.walk()


def collect_string_ids(roots: Sequence[OpcodeNode]) -> List[int]:
    """Returns the sorted, unique string ids referenced by a decoded tree."""
    return sorted({int(sid) for node in walk_nodes(roots) for sid in node.string_ids()})


################################################################################################
#
# IFR payload layouts
#
################################################################################################

# Field types for table driven payload decoding
U8 = 'u8'
U16 = 'u16'
U32 = 'u32'
U64 = 'u64'
SID = 'sid'
GUID = 'guid'

FIELD_SIZES = {U8: 1, U16: 2, U32: 4, U64: 8, SID: 2}


def decode_fields(cur: ByteCursor, fields: Sequence[Tuple[str, str]], payload: Dict[str, Any]) -> None:
    """
    Reads ``fields`` sequentially from ``cur`` into ``payload``.

    Fields already decoded stay in ``payload`` when the payload runs out,
    the OutOfBoundsError propagates to the caller.
    """
    for name, ftype in fields:
        if ftype == GUID:
            payload[name] = cur.next_guid()
        elif ftype == SID:
            payload[name] = StringId(cur.next_u16())
        else:
            payload[name] = cur.next_uint(FIELD_SIZES[ftype])


def decode_optional_fields(cur: ByteCursor, fields: Sequence[Tuple[str, str]], payload: Dict[str, Any]) -> None:
    """Like decode_fields, but stops quietly at the first field that does not fit."""
    for name, ftype in fields:
        size = 16 if ftype == GUID else FIELD_SIZES[ftype]
        if cur.remaining() < size:
            return
        decode_fields(cur, [(name, ftype)], payload)


class IfrOpcodeDef(namedtuple('IfrOpcodeDef', 'name fields decoder', defaults=((), None))):
    """Catalog entry: display name, fixed payload layout and optional decoder for the variable tail."""
    __slots__ = ()

    def decode(self, cur: ByteCursor) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        try:
            decode_fields(cur, self.fields, payload)
            if self.decoder is not None:
                self.decoder(cur, payload)
        except OutOfBoundsError as err:
            raise PayloadError(payload, err)
        return payload


class PayloadError(Exception):
    """Carries the fields decoded before a payload ran short."""

    def __init__(self, payload: Dict[str, Any], err: OutOfBoundsError) -> None:
        super(PayloadError, self).__init__(str(err))
        self.payload = payload


################################################################################################
#
# String tables
#
################################################################################################

class StringTable:
    """String id to text mapping, one table per language, in appearance order."""

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[int, str]] = {}

    def add(self, language: str, string_id: int, text: str) -> None:
        self._tables.setdefault(language, {})[string_id] = text

    def add_language(self, language: str) -> None:
        self._tables.setdefault(language, {})

    @property
    def languages(self) -> List[str]:
        return list(self._tables)

    def default_language(self) -> Optional[str]:
        return next(iter(self._tables), None)

    def get(self, string_id: int, language: Optional[str] = None) -> Optional[str]:
        if language is None:
            language = self.default_language()
        return self._tables.get(language, {}).get(string_id)

    def strings(self, language: Optional[str] = None) -> Dict[int, str]:
        if language is None:
            language = self.default_language()
        return dict(self._tables.get(language, {}))

    def __iter__(self) -> Iterator[Tuple[str, int, str]]:
        for language, table in self._tables.items():
            for string_id, text in table.items():
                yield (language, string_id, text)

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables.values())

    def __contains__(self, key: Tuple[str, int]) -> bool:
        language, string_id = key
        return string_id in self._tables.get(language, {})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StringTable):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f'StringTable({", ".join(f"{lang}: {len(t):d}" for lang, t in self._tables.items())})'
