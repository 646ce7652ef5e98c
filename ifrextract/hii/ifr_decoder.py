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
IFR opcode stream decoding

Walks the opcode records of a form package and rebuilds the scope tree.
Scope-closing records only pop the scope stack, they are not kept as nodes.
"""

from typing import List, Tuple

from ifrextract.hii import framework_ifr, uefi_ifr
from ifrextract.hii.cursor import ByteCursor, Image
from ifrextract.hii.hii_common import Diagnostic, DiagnosticKind, HiiFormat, OpcodeNode, PackageCandidate, PackageKind, PayloadError
from ifrextract.hii.hii_common import UNRECOGNIZED, image_offset
from ifrextract.library.exceptions import PackageKindError
from ifrextract.library.logger import logger

CATALOGS = {
    HiiFormat.FRAMEWORK: framework_ifr,
    HiiFormat.UEFI: uefi_ifr
}


def _decode_node(cur: ByteCursor, catalog, offset: int, opcode: int, length: int, scope: bool, diags: List[Diagnostic]) -> OpcodeNode:
    start = offset + catalog.OP_HEADER_SIZE
    raw = cur.read_bytes(start, length - catalog.OP_HEADER_SIZE)
    definition = catalog.OPCODES.get(opcode)
    if definition is None:
        diags.append(Diagnostic(offset, DiagnosticKind.UNKNOWN_OPCODE, f'unknown {catalog.FORMAT.value} opcode 0x{opcode:02X}, length 0x{length:X}'))
        return OpcodeNode(catalog.FORMAT, opcode, UNRECOGNIZED, offset, length, {'RawData': raw}, raw, scope)
    try:
        payload = definition.decode(cur.sub_cursor(start, length - catalog.OP_HEADER_SIZE))
    except PayloadError as err:
        diags.append(Diagnostic(offset, DiagnosticKind.MALFORMED_PAYLOAD, f'{definition.name} payload is short: {err}'))
        payload = err.payload
    return OpcodeNode(catalog.FORMAT, opcode, definition.name, offset, length, payload, raw, scope)


def decode_form_package(image: Image, candidate: PackageCandidate) -> Tuple[List[OpcodeNode], List[Diagnostic]]:
    """
    Decodes the IFR opcode stream of a form package candidate into a forest.

    Malformed input never raises: the nodes decoded before the problem are
    returned together with diagnostics. A stream cut short (clipped package,
    record running past the package end) yields a TRUNCATED diagnostic, and
    every scope still open at the end of the stream an UNBALANCED_SCOPE one.
    Raises PackageKindError if ``candidate`` is not a form package.
    """
    if candidate.kind is not PackageKind.FORMS:
        raise PackageKindError(f'expected a form package, got {candidate.kind.value} at 0x{candidate.offset:X}')
    catalog = CATALOGS[candidate.format]
    cur = ByteCursor(image)
    diags: List[Diagnostic] = []
    roots: List[OpcodeNode] = []

    start = candidate.offset + catalog.PACKAGE_HEADER_SIZE
    end = candidate.offset + candidate.length
    if end > cur.size:
        diags.append(Diagnostic(image_offset(end, cur.size), DiagnosticKind.TRUNCATED,
                                f'form package at 0x{candidate.offset:X} extends 0x{end - cur.size:X} byte(s) past the end of the image'))
        end = cur.size
    if start > end:
        diags.append(Diagnostic(image_offset(candidate.offset, cur.size), DiagnosticKind.OUT_OF_BOUNDS, 'form package header does not fit in the image'))
        return roots, diags

    stack: List[OpcodeNode] = []
    offset = start
    while offset < end:
        if offset + catalog.OP_HEADER_SIZE > end:
            diags.append(Diagnostic(offset, DiagnosticKind.TRUNCATED, 'opcode header is cut off by the end of the package'))
            break
        opcode, length, scope = catalog.read_op_header(cur, offset)
        if length < catalog.OP_HEADER_SIZE:
            diags.append(Diagnostic(offset, DiagnosticKind.TRUNCATED, f'opcode 0x{opcode:02X} has invalid length 0x{length:X}, stopping'))
            break
        if offset + length > end:
            diags.append(Diagnostic(offset, DiagnosticKind.TRUNCATED, f'opcode 0x{opcode:02X} of length 0x{length:X} runs past the end of the package'))
            break

        if catalog.closes_scope(opcode):
            if stack:
                stack.pop()
            else:
                diags.append(Diagnostic(offset, DiagnosticKind.UNBALANCED_SCOPE, f'scope close opcode 0x{opcode:02X} without an open scope'))
        else:
            node = _decode_node(cur, catalog, offset, opcode, length, scope, diags)
            (stack[-1].children if stack else roots).append(node)
            if catalog.opens_scope(opcode, scope):
                stack.append(node)
        offset += length

    for node in reversed(stack):
        diags.append(Diagnostic(node.source_offset, DiagnosticKind.UNBALANCED_SCOPE, f'{node.name} scope opened at 0x{node.source_offset:X} is never closed'))
    logger().log_hal(f'[hii] Form package 0x{candidate.offset:X}: {len(roots):d} top level opcode(s), {len(diags):d} diagnostic(s)')
    return roots, diags
