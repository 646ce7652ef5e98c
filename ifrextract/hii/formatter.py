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
Textual rendering of decoded IFR trees

Each node becomes one line: ``Name: primary string [Field: value, ...]``
indented by two spaces per scope level. The first string reference of a
node is its primary string, the remaining fields go in brackets.
"""

from typing import Any, List, Optional, Sequence
from uuid import UUID

from ifrextract.hii.hii_common import Diagnostic, DiagnosticKind, ExtractionResult, OpcodeNode, StringId, StringTable, UNRECOGNIZED

INDENT = '  '
UNRESOLVED = '<unresolved 0x{:X}>'
# UEFI reserves id 0 for "no string"; it renders unresolved without a diagnostic
NULL_STRING_ID = 0


class _Renderer:

    def __init__(self, string_table: StringTable, verbose: bool, language: Optional[str]) -> None:
        self.string_table = string_table
        self.verbose = verbose
        self.language = language if language is not None else string_table.default_language()
        self.lines: List[str] = []
        self.diagnostics: List[Diagnostic] = []
        self._node: Optional[OpcodeNode] = None

    def resolve(self, string_id: StringId) -> Optional[str]:
        text = self.string_table.get(string_id, self.language)
        if text is None and string_id != NULL_STRING_ID:
            self.diagnostics.append(Diagnostic(self._node.source_offset, DiagnosticKind.UNRESOLVED_STRING_ID,
                                               f'{self._node.name} references string 0x{int(string_id):X} which is not in the string table'))
        return text

    def value(self, value: Any) -> str:
        if isinstance(value, StringId):
            text = self.resolve(value)
            return UNRESOLVED.format(int(value)) if text is None else f'"{text}"'
        if isinstance(value, int):
            return f'0x{value:X}'
        if isinstance(value, UUID):
            return str(value).upper()
        if isinstance(value, (bytes, bytearray)):
            return ' '.join(f'{b:02X}' for b in value)
        if isinstance(value, dict):
            return '{' + ', '.join(f'{k}: {self.value(v)}' for k, v in value.items()) + '}'
        if isinstance(value, (list, tuple)):
            return '[' + ', '.join(self.value(v) for v in value) + ']'
        return str(value)

    def line(self, node: OpcodeNode) -> str:
        self._node = node
        label = node.name if node.name != UNRECOGNIZED else f'{UNRECOGNIZED} 0x{node.opcode:02X}'
        fields = list(node.payload.items())
        primary = next((name for name, value in fields if isinstance(value, StringId)), None)
        text = label
        if primary is not None:
            resolved = self.resolve(node.payload[primary])
            text += ': ' + (UNRESOLVED.format(int(node.payload[primary])) if resolved is None else resolved)
        rest = [f'{name}: {self.value(value)}' for name, value in fields if name != primary]
        if rest:
            text += ' [' + ', '.join(rest) + ']'
        return text

    def render(self, node: OpcodeNode, depth: int) -> None:
        prefix = f'0x{node.source_offset:08X}: ' if self.verbose else ''
        self.lines.append(prefix + INDENT * depth + self.line(node))
        for child in node.children:
            self.render(child, depth + 1)


def format_ifr(roots: Sequence[OpcodeNode], string_table: StringTable, verbose: bool = False, language: Optional[str] = None) -> ExtractionResult:
    """
    Renders decoded opcode trees to text, resolving string ids through ``string_table``.

    Unresolved ids render as ``<unresolved 0xN>`` and, except the null id 0,
    are reported as UNRESOLVED_STRING_ID diagnostics. A Framework table may
    hold a string under id 0, which then resolves normally. ``verbose`` prefixes each line with
    the source offset of its opcode. Output is deterministic for equal input.
    """
    renderer = _Renderer(string_table, verbose, language)
    for root in roots:
        renderer.render(root, 0)
    text = ''.join(f'{line}\n' for line in renderer.lines)
    return ExtractionResult(text, renderer.diagnostics)
