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
Framework (HII 0.92) IFR opcode catalog
"""

from typing import Any, Dict, Tuple

from ifrextract.hii.cursor import ByteCursor
from ifrextract.hii.hii_common import HiiFormat, IfrOpcodeDef, U8, U16, U64, SID, GUID
from ifrextract.hii.hii_common import FRAMEWORK_EFI_HII_PACK_HEADER_size, FRAMEWORK_EFI_IFR_OP_HEADER_size
from ifrextract.library.defines import bytestostring

FORMAT = HiiFormat.FRAMEWORK
PACKAGE_HEADER_SIZE = FRAMEWORK_EFI_HII_PACK_HEADER_size
OP_HEADER_SIZE = FRAMEWORK_EFI_IFR_OP_HEADER_size

FRAMEWORK_EFI_IFR_FORM_OP = 0x01
FRAMEWORK_EFI_IFR_SUBTITLE_OP = 0x02
FRAMEWORK_EFI_IFR_TEXT_OP = 0x03
FRAMEWORK_EFI_IFR_GRAPHIC_OP = 0x04
FRAMEWORK_EFI_IFR_ONE_OF_OP = 0x05
FRAMEWORK_EFI_IFR_CHECKBOX_OP = 0x06
FRAMEWORK_EFI_IFR_NUMERIC_OP = 0x07
FRAMEWORK_EFI_IFR_PASSWORD_OP = 0x08
FRAMEWORK_EFI_IFR_ONE_OF_OPTION_OP = 0x09
FRAMEWORK_EFI_IFR_SUPPRESS_IF_OP = 0x0A
FRAMEWORK_EFI_IFR_END_FORM_OP = 0x0B
FRAMEWORK_EFI_IFR_HIDDEN_OP = 0x0C
FRAMEWORK_EFI_IFR_END_FORM_SET_OP = 0x0D
FRAMEWORK_EFI_IFR_FORM_SET_OP = 0x0E
FRAMEWORK_EFI_IFR_REF_OP = 0x0F
FRAMEWORK_EFI_IFR_END_ONE_OF_OP = 0x10
FRAMEWORK_EFI_IFR_INCONSISTENT_IF_OP = 0x11
FRAMEWORK_EFI_IFR_EQ_ID_VAL_OP = 0x12
FRAMEWORK_EFI_IFR_EQ_ID_ID_OP = 0x13
FRAMEWORK_EFI_IFR_EQ_ID_LIST_OP = 0x14
FRAMEWORK_EFI_IFR_AND_OP = 0x15
FRAMEWORK_EFI_IFR_OR_OP = 0x16
FRAMEWORK_EFI_IFR_NOT_OP = 0x17
FRAMEWORK_EFI_IFR_END_IF_OP = 0x18
FRAMEWORK_EFI_IFR_GRAYOUT_IF_OP = 0x19
FRAMEWORK_EFI_IFR_DATE_OP = 0x1A
FRAMEWORK_EFI_IFR_TIME_OP = 0x1B
FRAMEWORK_EFI_IFR_STRING_OP = 0x1C
FRAMEWORK_EFI_IFR_LABEL_OP = 0x1D
FRAMEWORK_EFI_IFR_SAVE_DEFAULTS_OP = 0x1E
FRAMEWORK_EFI_IFR_RESTORE_DEFAULTS_OP = 0x1F
FRAMEWORK_EFI_IFR_BANNER_OP = 0x20
FRAMEWORK_EFI_IFR_INVENTORY_OP = 0x21
FRAMEWORK_EFI_IFR_EQ_VAR_VAL_OP = 0x22
FRAMEWORK_EFI_IFR_ORDERED_LIST_OP = 0x23
FRAMEWORK_EFI_IFR_VARSTORE_OP = 0x24
FRAMEWORK_EFI_IFR_VARSTORE_SELECT_OP = 0x25
FRAMEWORK_EFI_IFR_VARSTORE_SELECT_PAIR_OP = 0x26
FRAMEWORK_EFI_IFR_TRUE_OP = 0x27
FRAMEWORK_EFI_IFR_FALSE_OP = 0x28
FRAMEWORK_EFI_IFR_GT_OP = 0x29
FRAMEWORK_EFI_IFR_GE_OP = 0x2A
FRAMEWORK_EFI_IFR_OEM_DEFINED_OP = 0x2B
FRAMEWORK_EFI_IFR_OEM_OP = 0xFE
FRAMEWORK_EFI_IFR_NV_ACCESS_COMMAND = 0xFF

# Form set size is fixed, scanners use it as a signature
FRAMEWORK_EFI_IFR_FORM_SET_size = 0x24

# Scope opening opcode -> opcode which closes it
SCOPE_OPENERS = {
    FRAMEWORK_EFI_IFR_FORM_SET_OP: FRAMEWORK_EFI_IFR_END_FORM_SET_OP,
    FRAMEWORK_EFI_IFR_FORM_OP: FRAMEWORK_EFI_IFR_END_FORM_OP,
    FRAMEWORK_EFI_IFR_ONE_OF_OP: FRAMEWORK_EFI_IFR_END_ONE_OF_OP,
    FRAMEWORK_EFI_IFR_ORDERED_LIST_OP: FRAMEWORK_EFI_IFR_END_ONE_OF_OP,
    FRAMEWORK_EFI_IFR_SUPPRESS_IF_OP: FRAMEWORK_EFI_IFR_END_IF_OP,
    FRAMEWORK_EFI_IFR_GRAYOUT_IF_OP: FRAMEWORK_EFI_IFR_END_IF_OP,
    FRAMEWORK_EFI_IFR_INCONSISTENT_IF_OP: FRAMEWORK_EFI_IFR_END_IF_OP
}
SCOPE_CLOSERS = set(SCOPE_OPENERS.values())


def _decode_eq_id_list(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    payload['ValueList'] = [cur.next_u16() for _ in range(payload['ListLength'])]


def _decode_varstore_name(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    payload['Name'] = bytestostring(cur.next_ascii_cstring())


_QUESTION = (('QuestionId', U16), ('Width', U8), ('Prompt', SID), ('Help', SID))
_NUMERIC = _QUESTION + (('Flags', U8), ('Key', U16), ('Minimum', U16), ('Maximum', U16), ('Step', U16), ('Default', U16))
_DEFAULTS = (('FormId', U16), ('Prompt', SID), ('Help', SID), ('Flags', U8), ('Key', U16))

OPCODES = {
    FRAMEWORK_EFI_IFR_FORM_OP: IfrOpcodeDef('Form', (('FormId', U16), ('Title', SID))),
    FRAMEWORK_EFI_IFR_SUBTITLE_OP: IfrOpcodeDef('Subtitle', (('Subtitle', SID),)),
    FRAMEWORK_EFI_IFR_TEXT_OP: IfrOpcodeDef('Text', (('Help', SID), ('Text', SID), ('TextTwo', SID), ('Flags', U8), ('Key', U16))),
    FRAMEWORK_EFI_IFR_GRAPHIC_OP: IfrOpcodeDef('Graphic'),
    FRAMEWORK_EFI_IFR_ONE_OF_OP: IfrOpcodeDef('OneOf', _QUESTION),
    FRAMEWORK_EFI_IFR_CHECKBOX_OP: IfrOpcodeDef('CheckBox', _QUESTION + (('Flags', U8), ('Key', U16))),
    FRAMEWORK_EFI_IFR_NUMERIC_OP: IfrOpcodeDef('Numeric', _NUMERIC),
    FRAMEWORK_EFI_IFR_PASSWORD_OP: IfrOpcodeDef('Password', _QUESTION + (('Flags', U8), ('Key', U16), ('MinSize', U8), ('MaxSize', U8), ('Encoding', U16))),
    FRAMEWORK_EFI_IFR_ONE_OF_OPTION_OP: IfrOpcodeDef('OneOfOption', (('Option', SID), ('Value', U16), ('Flags', U8), ('Key', U16))),
    FRAMEWORK_EFI_IFR_SUPPRESS_IF_OP: IfrOpcodeDef('SuppressIf', (('Flags', U8),)),
    FRAMEWORK_EFI_IFR_END_FORM_OP: IfrOpcodeDef('EndForm'),
    FRAMEWORK_EFI_IFR_HIDDEN_OP: IfrOpcodeDef('Hidden', (('Value', U16), ('Key', U16))),
    FRAMEWORK_EFI_IFR_END_FORM_SET_OP: IfrOpcodeDef('EndFormSet'),
    FRAMEWORK_EFI_IFR_FORM_SET_OP: IfrOpcodeDef('FormSet', (('Guid', GUID), ('Title', SID), ('Help', SID), ('CallbackHandle', U64),
                                                            ('Class', U16), ('SubClass', U16), ('NvDataSize', U16))),
    FRAMEWORK_EFI_IFR_REF_OP: IfrOpcodeDef('Ref', _DEFAULTS),
    FRAMEWORK_EFI_IFR_END_ONE_OF_OP: IfrOpcodeDef('EndOneOf'),
    FRAMEWORK_EFI_IFR_INCONSISTENT_IF_OP: IfrOpcodeDef('InconsistentIf', (('Popup', SID), ('Flags', U8))),
    FRAMEWORK_EFI_IFR_EQ_ID_VAL_OP: IfrOpcodeDef('EqIdVal', (('QuestionId', U16), ('Width', U8), ('Value', U16))),
    FRAMEWORK_EFI_IFR_EQ_ID_ID_OP: IfrOpcodeDef('EqIdId', (('QuestionId1', U16), ('Width', U8), ('QuestionId2', U16))),
    FRAMEWORK_EFI_IFR_EQ_ID_LIST_OP: IfrOpcodeDef('EqIdList', (('QuestionId', U16), ('Width', U8), ('ListLength', U16)), _decode_eq_id_list),
    FRAMEWORK_EFI_IFR_AND_OP: IfrOpcodeDef('And'),
    FRAMEWORK_EFI_IFR_OR_OP: IfrOpcodeDef('Or'),
    FRAMEWORK_EFI_IFR_NOT_OP: IfrOpcodeDef('Not'),
    FRAMEWORK_EFI_IFR_END_IF_OP: IfrOpcodeDef('EndIf'),
    FRAMEWORK_EFI_IFR_GRAYOUT_IF_OP: IfrOpcodeDef('GrayOutIf', (('Flags', U8),)),
    FRAMEWORK_EFI_IFR_DATE_OP: IfrOpcodeDef('Date', _NUMERIC),
    FRAMEWORK_EFI_IFR_TIME_OP: IfrOpcodeDef('Time', _NUMERIC),
    FRAMEWORK_EFI_IFR_STRING_OP: IfrOpcodeDef('String', _QUESTION + (('Flags', U8), ('Key', U16), ('MinSize', U8), ('MaxSize', U8))),
    FRAMEWORK_EFI_IFR_LABEL_OP: IfrOpcodeDef('Label', (('LabelId', U16),)),
    FRAMEWORK_EFI_IFR_SAVE_DEFAULTS_OP: IfrOpcodeDef('SaveDefaults', _DEFAULTS),
    FRAMEWORK_EFI_IFR_RESTORE_DEFAULTS_OP: IfrOpcodeDef('RestoreDefaults', _DEFAULTS),
    FRAMEWORK_EFI_IFR_BANNER_OP: IfrOpcodeDef('Banner', (('Title', SID), ('LineNumber', U16), ('Alignment', U8))),
    FRAMEWORK_EFI_IFR_INVENTORY_OP: IfrOpcodeDef('Inventory', (('Help', SID), ('Text', SID), ('TextTwo', SID))),
    FRAMEWORK_EFI_IFR_EQ_VAR_VAL_OP: IfrOpcodeDef('EqVarVal', (('VariableId', U16), ('Value', U16))),
    FRAMEWORK_EFI_IFR_ORDERED_LIST_OP: IfrOpcodeDef('OrderedList', (('QuestionId', U16), ('MaxEntries', U8), ('Prompt', SID), ('Help', SID))),
    FRAMEWORK_EFI_IFR_VARSTORE_OP: IfrOpcodeDef('VarStore', (('Guid', GUID), ('VarId', U16), ('Size', U16)), _decode_varstore_name),
    FRAMEWORK_EFI_IFR_VARSTORE_SELECT_OP: IfrOpcodeDef('VarStoreSelect', (('VarId', U16),)),
    FRAMEWORK_EFI_IFR_VARSTORE_SELECT_PAIR_OP: IfrOpcodeDef('VarStoreSelectPair', (('VarId', U16), ('SecondaryVarId', U16))),
    FRAMEWORK_EFI_IFR_TRUE_OP: IfrOpcodeDef('True'),
    FRAMEWORK_EFI_IFR_FALSE_OP: IfrOpcodeDef('False'),
    FRAMEWORK_EFI_IFR_GT_OP: IfrOpcodeDef('Greater'),
    FRAMEWORK_EFI_IFR_GE_OP: IfrOpcodeDef('GreaterEqual'),
    FRAMEWORK_EFI_IFR_OEM_DEFINED_OP: IfrOpcodeDef('OemDefined'),
    FRAMEWORK_EFI_IFR_OEM_OP: IfrOpcodeDef('Oem'),
    FRAMEWORK_EFI_IFR_NV_ACCESS_COMMAND: IfrOpcodeDef('NvAccessCommand')
}


def read_op_header(cur: ByteCursor, offset: int) -> Tuple[int, int, bool]:
    """Returns (opcode, record length, scope bit); Framework records carry no scope bit."""
    return (cur.read_u8(offset), cur.read_u8(offset + 1), False)


def opens_scope(opcode: int, scope: bool) -> bool:
    return opcode in SCOPE_OPENERS


def closes_scope(opcode: int) -> bool:
    return opcode in SCOPE_CLOSERS
