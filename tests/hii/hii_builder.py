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
Builders for synthetic Framework and UEFI HII packages used by the tests
"""

import struct
import uuid
from typing import Sequence

FORM_SET_GUID = uuid.UUID('A04A27F4-DF00-4D42-B552-39511302113D')
PACKAGE_LIST_GUID = uuid.UUID('0E8C8D4B-4B15-4E2A-9B4C-2E2B1C93E1C8')


################################################################################################
# UEFI
################################################################################################

def uefi_op(opcode: int, payload: bytes = b'', scope: bool = False) -> bytes:
    return struct.pack('<BB', opcode, (2 + len(payload)) | (0x80 if scope else 0)) + payload


def uefi_end() -> bytes:
    return uefi_op(0x29)


def uefi_question(prompt: int, help_: int = 0, question_id: int = 1, varstore_id: int = 1, varstore_info: int = 0, flags: int = 0) -> bytes:
    return struct.pack('<HHHHHB', prompt, help_, question_id, varstore_id, varstore_info, flags)


def uefi_form_set(title: int, help_: int = 0, guid: uuid.UUID = FORM_SET_GUID, class_guids: Sequence[uuid.UUID] = ()) -> bytes:
    payload = guid.bytes_le + struct.pack('<HHB', title, help_, len(class_guids)) + b''.join(g.bytes_le for g in class_guids)
    return uefi_op(0x0E, payload, True)


def uefi_form(form_id: int, title: int) -> bytes:
    return uefi_op(0x01, struct.pack('<HH', form_id, title), True)


def uefi_subtitle(prompt: int, help_: int = 0, flags: int = 0, scope: bool = False) -> bytes:
    return uefi_op(0x02, struct.pack('<HHB', prompt, help_, flags), scope)


def uefi_numeric(prompt: int, help_: int = 0, question_id: int = 1, flags: int = 0x01,
                 minimum: int = 0, maximum: int = 0xFF, step: int = 1, scope: bool = False) -> bytes:
    fmt = {0: 'B', 1: 'H', 2: 'I', 3: 'Q'}[flags & 0x03]
    payload = uefi_question(prompt, help_, question_id) + struct.pack('<B', flags) + struct.pack(f'<3{fmt}', minimum, maximum, step)
    return uefi_op(0x07, payload, scope)


def uefi_one_of(prompt: int, help_: int = 0, question_id: int = 1, flags: int = 0x00) -> bytes:
    fmt = {0: 'B', 1: 'H', 2: 'I', 3: 'Q'}[flags & 0x03]
    payload = uefi_question(prompt, help_, question_id) + struct.pack('<B', flags) + struct.pack(f'<3{fmt}', 0, 0, 0)
    return uefi_op(0x05, payload, True)


def uefi_one_of_option(option: int, value: int, value_type: int = 0, flags: int = 0) -> bytes:
    fmt = {0: 'B', 1: 'H', 2: 'I', 3: 'Q'}[value_type]
    return uefi_op(0x09, struct.pack('<HBB', option, flags, value_type) + struct.pack(f'<{fmt}', value))


def uefi_checkbox(prompt: int, help_: int = 0, question_id: int = 1, flags: int = 0) -> bytes:
    return uefi_op(0x06, uefi_question(prompt, help_, question_id) + struct.pack('<B', flags))


def uefi_suppress_if() -> bytes:
    return uefi_op(0x0A, b'', True)


def uefi_eq_id_val(question_id: int, value: int) -> bytes:
    return uefi_op(0x12, struct.pack('<HH', question_id, value))


def uefi_guid_label(number: int) -> bytes:
    tiano = uuid.UUID('0F0B1735-87A0-4193-B266-538C38AF48CE')
    return uefi_op(0x5F, tiano.bytes_le + struct.pack('<BH', 0x00, number))


def uefi_form_package(ops: bytes) -> bytes:
    return struct.pack('<I', (4 + len(ops)) | (0x02 << 24)) + ops


def sibt_ucs2(text: str) -> bytes:
    return b'\x14' + text.encode('utf-16-le') + b'\x00\x00'


def sibt_scsu(text: bytes) -> bytes:
    return b'\x10' + text + b'\x00'


def sibt_end() -> bytes:
    return b'\x00'


def uefi_string_package_blocks(blocks: bytes, language: str = 'en-US') -> bytes:
    lang = language.encode('ascii') + b'\x00'
    hdr_size = 46 + len(lang)
    body = struct.pack('<II', hdr_size, hdr_size) + b'\x00' * 32 + struct.pack('<H', 1) + lang + blocks
    return struct.pack('<I', (4 + len(body)) | (0x04 << 24)) + body


def uefi_string_package(strings: Sequence[str], language: str = 'en-US') -> bytes:
    """String package with one UCS-2 block per string, ids starting at 1."""
    return uefi_string_package_blocks(b''.join(sibt_ucs2(s) for s in strings) + sibt_end(), language)


def uefi_package_list(packages: Sequence[bytes], guid: uuid.UUID = PACKAGE_LIST_GUID) -> bytes:
    body = b''.join(packages) + struct.pack('<I', 4 | (0xDF << 24))
    return guid.bytes_le + struct.pack('<I', 20 + len(body)) + body


def main_menu_form() -> bytes:
    """Form "Main Menu" (title id 1) holding numeric "CPU Ratio" (prompt id 2)."""
    return uefi_form_package(uefi_form(1, 1) + uefi_numeric(2, 0, 0x10) + uefi_end())


def main_menu_strings() -> bytes:
    return uefi_string_package(['Main Menu', 'CPU Ratio'])


################################################################################################
# Framework
################################################################################################

def fw_op(opcode: int, payload: bytes = b'') -> bytes:
    return struct.pack('<BB', opcode, 2 + len(payload)) + payload


def fw_form_set(title: int, help_: int = 0, guid: uuid.UUID = FORM_SET_GUID, class_: int = 0, subclass: int = 0, nv_data_size: int = 0) -> bytes:
    return fw_op(0x0E, guid.bytes_le + struct.pack('<HHQHHH', title, help_, 0, class_, subclass, nv_data_size))


def fw_end_form_set() -> bytes:
    return fw_op(0x0D)


def fw_form(form_id: int, title: int) -> bytes:
    return fw_op(0x01, struct.pack('<HH', form_id, title))


def fw_end_form() -> bytes:
    return fw_op(0x0B)


def fw_subtitle(subtitle: int) -> bytes:
    return fw_op(0x02, struct.pack('<H', subtitle))


def fw_numeric(question_id: int, prompt: int, help_: int = 0, width: int = 1, flags: int = 0, key: int = 0,
               minimum: int = 0, maximum: int = 0xFF, step: int = 1, default: int = 0) -> bytes:
    return fw_op(0x07, struct.pack('<HBHHBHHHHH', question_id, width, prompt, help_, flags, key, minimum, maximum, step, default))


def fw_one_of(question_id: int, prompt: int, help_: int = 0, width: int = 1) -> bytes:
    return fw_op(0x05, struct.pack('<HBHH', question_id, width, prompt, help_))


def fw_one_of_option(option: int, value: int, flags: int = 0, key: int = 0) -> bytes:
    return fw_op(0x09, struct.pack('<HHBH', option, value, flags, key))


def fw_end_one_of() -> bytes:
    return fw_op(0x10)


def fw_ifr_pack(ops: bytes) -> bytes:
    return struct.pack('<IH', 6 + len(ops), 0x0003) + ops


def fw_string_pack(strings: Sequence[str], language: str = 'eng', printable: str = 'English') -> bytes:
    """String pack whose pointer table holds ``strings`` in order, id = index."""
    encoded = [s.encode('utf-16-le') + b'\x00\x00' for s in [language, printable] + list(strings)]
    table_end = 22 + 4 * len(strings)
    offsets = []
    pos = table_end
    for item in encoded:
        offsets.append(pos)
        pos += len(item)
    header = struct.pack('<IHIIII', pos, 0x0002, offsets[0], offsets[1], len(strings), 0)
    return header + b''.join(struct.pack('<I', o) for o in offsets[2:]) + b''.join(encoded)


def fw_main_menu_form() -> bytes:
    ops = fw_form_set(1) + fw_form(1, 1) + fw_numeric(0x10, 2) + fw_end_form() + fw_end_form_set()
    return fw_ifr_pack(ops)


def fw_main_menu_strings() -> bytes:
    return fw_string_pack(['eng', 'Main Menu', 'CPU Ratio'])
