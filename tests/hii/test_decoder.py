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

import struct
import unittest
import uuid

from ifrextract.hii.hii_common import DiagnosticKind, HiiFormat, PackageCandidate, PackageKind, StringId, collect_string_ids
from ifrextract.hii.ifr_decoder import decode_form_package
from ifrextract.library.exceptions import PackageKindError
from tests.hii import hii_builder as hb


def uefi_form_candidate(package: bytes, offset: int = 0) -> PackageCandidate:
    return PackageCandidate(HiiFormat.UEFI, PackageKind.FORMS, offset, len(package))


def fw_form_candidate(pack: bytes, offset: int = 0) -> PackageCandidate:
    return PackageCandidate(HiiFormat.FRAMEWORK, PackageKind.FORMS, offset, len(pack))


class TestUefiFormDecoder(unittest.TestCase):

    def decode(self, ops: bytes):
        package = hb.uefi_form_package(ops)
        return decode_form_package(package, uefi_form_candidate(package))

    def test_form_with_numeric(self):
        roots, diags = self.decode(hb.uefi_form(1, 1) + hb.uefi_numeric(2, 3, 0x10) + hb.uefi_end())
        self.assertEqual(diags, [])
        self.assertEqual(len(roots), 1)
        form = roots[0]
        self.assertEqual(form.name, 'Form')
        self.assertEqual(form.source_offset, 4)
        self.assertTrue(form.scope)
        self.assertEqual(form.payload, {'FormId': 1, 'Title': StringId(1)})
        self.assertEqual(len(form.children), 1)
        numeric = form.children[0]
        self.assertEqual(numeric.name, 'Numeric')
        self.assertEqual(numeric.payload['Prompt'], 2)
        self.assertIsInstance(numeric.payload['Prompt'], StringId)
        self.assertEqual(numeric.payload['QuestionId'], 0x10)
        self.assertEqual((numeric.payload['MinValue'], numeric.payload['MaxValue'], numeric.payload['Step']), (0, 0xFF, 1))
        self.assertEqual(numeric.children, [])

    def test_numeric_sizes(self):
        for flags, maximum in ((0x00, 0xFF), (0x01, 0xFFFF), (0x02, 0xFFFFFFFF), (0x03, 0xFFFFFFFFFFFFFFFF)):
            roots, diags = self.decode(hb.uefi_numeric(2, flags=flags, maximum=maximum))
            self.assertEqual(diags, [])
            self.assertEqual(roots[0].payload['MaxValue'], maximum)

    def test_nesting(self):
        ops = (hb.uefi_form_set(1) +
               hb.uefi_form(1, 2) +
               hb.uefi_suppress_if() + hb.uefi_eq_id_val(5, 1) + hb.uefi_checkbox(3) + hb.uefi_end() +
               hb.uefi_one_of(4) + hb.uefi_one_of_option(5, 0) + hb.uefi_one_of_option(6, 1) + hb.uefi_end() +
               hb.uefi_end() +
               hb.uefi_end())
        roots, diags = self.decode(ops)
        self.assertEqual(diags, [])
        self.assertEqual([n.name for n in roots], ['FormSet'])
        form = roots[0].children[0]
        self.assertEqual([n.name for n in form.children], ['SuppressIf', 'OneOf'])
        self.assertEqual([n.name for n in form.children[0].children], ['EqIdVal', 'CheckBox'])
        self.assertEqual([n.payload['Option'] for n in form.children[1].children], [5, 6])
        self.assertEqual(collect_string_ids(roots), [0, 1, 2, 3, 4, 5, 6])

    def test_form_set_class_guids(self):
        guid = uuid.UUID('93039971-8545-4B04-B45E-32EB8326040E')
        roots, diags = self.decode(hb.uefi_form_set(1, 2, class_guids=[guid]) + hb.uefi_end())
        self.assertEqual(diags, [])
        self.assertEqual(roots[0].payload['Guid'], hb.FORM_SET_GUID)
        self.assertEqual(roots[0].payload['ClassGuid'], [guid])

    def test_guid_label_extension(self):
        roots, diags = self.decode(hb.uefi_guid_label(0x1234))
        self.assertEqual(diags, [])
        self.assertEqual(roots[0].name, 'Guid')
        self.assertEqual(roots[0].payload['ExtendOpCode'], 'Label')
        self.assertEqual(roots[0].payload['Number'], 0x1234)

    def test_one_of_option_typed_values(self):
        roots, _ = self.decode(hb.uefi_one_of_option(7, 0x1234, value_type=1))
        self.assertEqual(roots[0].payload['Value'], 0x1234)
        string_value = hb.uefi_op(0x09, struct.pack('<HBBH', 7, 0, 0x07, 9))
        roots, _ = self.decode(string_value)
        self.assertEqual(roots[0].payload['Value'], StringId(9))
        self.assertIsInstance(roots[0].payload['Value'], StringId)

    def test_unknown_opcode(self):
        roots, diags = self.decode(hb.uefi_form(1, 1) + hb.uefi_op(0xE0, b'\x01\x02') + hb.uefi_end())
        self.assertEqual([d.kind for d in diags], [DiagnosticKind.UNKNOWN_OPCODE])
        node = roots[0].children[0]
        self.assertFalse(node.recognized)
        self.assertEqual(node.opcode, 0xE0)
        self.assertEqual(node.raw, b'\x01\x02')

    def test_unknown_opcode_with_scope(self):
        roots, diags = self.decode(hb.uefi_op(0xE0, b'', True) + hb.uefi_checkbox(1) + hb.uefi_end())
        self.assertEqual([d.kind for d in diags], [DiagnosticKind.UNKNOWN_OPCODE])
        self.assertEqual([n.name for n in roots[0].children], ['CheckBox'])

    def test_unbalanced_open_scope(self):
        roots, diags = self.decode(hb.uefi_form(1, 1) + hb.uefi_numeric(2))
        self.assertEqual(len(roots[0].children), 1)
        self.assertEqual([d.kind for d in diags], [DiagnosticKind.UNBALANCED_SCOPE])

    def test_one_diagnostic_per_open_scope(self):
        roots, diags = self.decode(hb.uefi_form_set(1) + hb.uefi_form(1, 1) + hb.uefi_suppress_if())
        self.assertEqual([d.kind for d in diags], [DiagnosticKind.UNBALANCED_SCOPE] * 3)

    def test_extra_scope_close(self):
        roots, diags = self.decode(hb.uefi_end() + hb.uefi_form(1, 1) + hb.uefi_end())
        self.assertEqual([n.name for n in roots], ['Form'])
        self.assertEqual([d.kind for d in diags], [DiagnosticKind.UNBALANCED_SCOPE])
        self.assertEqual(diags[0].offset, 4)

    def test_zero_length_record(self):
        roots, diags = self.decode(hb.uefi_checkbox(1) + b'\x06\x00' + hb.uefi_checkbox(2))
        self.assertEqual([n.payload['Prompt'] for n in roots], [1])
        self.assertEqual([d.kind for d in diags], [DiagnosticKind.TRUNCATED])

    def test_short_payload(self):
        roots, diags = self.decode(hb.uefi_op(0x01, b'\x05\x00'))
        self.assertEqual(roots[0].payload, {'FormId': 5})
        self.assertEqual([d.kind for d in diags], [DiagnosticKind.MALFORMED_PAYLOAD])

    def test_truncated_image(self):
        package = hb.main_menu_form()
        roots, diags = decode_form_package(package[:-3], uefi_form_candidate(package))
        self.assertEqual(roots[0].name, 'Form')
        self.assertEqual(roots[0].children, [])
        self.assertIn(DiagnosticKind.TRUNCATED, [d.kind for d in diags])

    def test_truncation_offsets_inside_image(self):
        package = hb.main_menu_form()
        for size in (1, 3, len(package) - 3):
            image = package[:size]
            _, diags = decode_form_package(image, uefi_form_candidate(package))
            self.assertTrue(diags)
            for diag in diags:
                self.assertLess(diag.offset, len(image))
        _, diags = decode_form_package(package, uefi_form_candidate(package, len(package) + 8))
        self.assertEqual([d.kind for d in diags], [DiagnosticKind.TRUNCATED, DiagnosticKind.OUT_OF_BOUNDS])
        self.assertEqual([d.offset for d in diags], [len(package) - 1] * 2)

    def test_offsets_inside_image(self):
        package = hb.main_menu_form()
        image = b'\x00' * 0x100 + package
        roots, _ = decode_form_package(image, uefi_form_candidate(package, 0x100))
        self.assertEqual(roots[0].source_offset, 0x104)
        self.assertEqual(roots[0].children[0].source_offset, 0x104 + 6)
        for node in roots[0].walk():
            self.assertLessEqual(node.source_offset + node.raw_length, len(image))

    def test_deterministic(self):
        package = hb.main_menu_form()
        self.assertEqual(decode_form_package(package, uefi_form_candidate(package)),
                         decode_form_package(package, uefi_form_candidate(package)))

    def test_string_candidate_rejected(self):
        package = hb.main_menu_strings()
        candidate = PackageCandidate(HiiFormat.UEFI, PackageKind.STRINGS, 0, len(package), 'en-US')
        with self.assertRaises(PackageKindError):
            decode_form_package(package, candidate)


class TestFrameworkFormDecoder(unittest.TestCase):

    def test_main_menu(self):
        pack = hb.fw_main_menu_form()
        roots, diags = decode_form_package(pack, fw_form_candidate(pack))
        self.assertEqual(diags, [])
        self.assertEqual([n.name for n in roots], ['FormSet'])
        self.assertEqual(roots[0].source_offset, 6)
        self.assertEqual(roots[0].payload['Guid'], hb.FORM_SET_GUID)
        form = roots[0].children[0]
        self.assertEqual(form.payload, {'FormId': 1, 'Title': StringId(1)})
        self.assertEqual(form.children[0].name, 'Numeric')
        self.assertEqual(form.children[0].payload['Prompt'], 2)

    def test_one_of_scope(self):
        ops = (hb.fw_form_set(1) + hb.fw_form(1, 1) +
               hb.fw_one_of(0x20, 3) + hb.fw_one_of_option(4, 0) + hb.fw_one_of_option(5, 1) + hb.fw_end_one_of() +
               hb.fw_subtitle(6) +
               hb.fw_end_form() + hb.fw_end_form_set())
        pack = hb.fw_ifr_pack(ops)
        roots, diags = decode_form_package(pack, fw_form_candidate(pack))
        self.assertEqual(diags, [])
        form = roots[0].children[0]
        self.assertEqual([n.name for n in form.children], ['OneOf', 'Subtitle'])
        self.assertEqual([n.name for n in form.children[0].children], ['OneOfOption', 'OneOfOption'])

    def test_missing_end_form_set(self):
        ops = hb.fw_form_set(1) + hb.fw_form(1, 1) + hb.fw_end_form()
        pack = hb.fw_ifr_pack(ops)
        roots, diags = decode_form_package(pack, fw_form_candidate(pack))
        self.assertEqual(len(roots[0].children), 1)
        self.assertEqual([d.kind for d in diags], [DiagnosticKind.UNBALANCED_SCOPE])

    def test_unknown_opcode(self):
        pack = hb.fw_ifr_pack(hb.fw_op(0x80, b'\xAA'))
        roots, diags = decode_form_package(pack, fw_form_candidate(pack))
        self.assertEqual(roots[0].name, 'Unrecognized')
        self.assertEqual([d.kind for d in diags], [DiagnosticKind.UNKNOWN_OPCODE])


if __name__ == '__main__':
    unittest.main()
