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
UEFI IFR opcode catalog

Layouts follow the UEFI Specification, chapter "HII Configuration Processing
and Browser Protocol", including the EDK2 and Framework compatibility GUIDed
opcodes.
"""

from typing import Any, Dict, Tuple
from uuid import UUID

from ifrextract.hii.cursor import ByteCursor
from ifrextract.hii.hii_common import HiiFormat, IfrOpcodeDef, StringId, U8, U16, U32, U64, SID, GUID
from ifrextract.hii.hii_common import decode_fields, decode_optional_fields
from ifrextract.hii.hii_common import EFI_HII_PACKAGE_HEADER_size, EFI_IFR_OP_HEADER_size, EFI_IFR_SCOPE_BIT, EFI_IFR_LENGTH_MASK
from ifrextract.library.defines import BIT0, BIT1, bytestostring

FORMAT = HiiFormat.UEFI
PACKAGE_HEADER_SIZE = EFI_HII_PACKAGE_HEADER_size
OP_HEADER_SIZE = EFI_IFR_OP_HEADER_size

EFI_IFR_FORM_OP = 0x01
EFI_IFR_SUBTITLE_OP = 0x02
EFI_IFR_TEXT_OP = 0x03
EFI_IFR_IMAGE_OP = 0x04
EFI_IFR_ONE_OF_OP = 0x05
EFI_IFR_CHECKBOX_OP = 0x06
EFI_IFR_NUMERIC_OP = 0x07
EFI_IFR_PASSWORD_OP = 0x08
EFI_IFR_ONE_OF_OPTION_OP = 0x09
EFI_IFR_SUPPRESS_IF_OP = 0x0A
EFI_IFR_LOCKED_OP = 0x0B
EFI_IFR_ACTION_OP = 0x0C
EFI_IFR_RESET_BUTTON_OP = 0x0D
EFI_IFR_FORM_SET_OP = 0x0E
EFI_IFR_REF_OP = 0x0F
EFI_IFR_NO_SUBMIT_IF_OP = 0x10
EFI_IFR_INCONSISTENT_IF_OP = 0x11
EFI_IFR_EQ_ID_VAL_OP = 0x12
EFI_IFR_EQ_ID_ID_OP = 0x13
EFI_IFR_EQ_ID_VAL_LIST_OP = 0x14
EFI_IFR_AND_OP = 0x15
EFI_IFR_OR_OP = 0x16
EFI_IFR_NOT_OP = 0x17
EFI_IFR_RULE_OP = 0x18
EFI_IFR_GRAY_OUT_IF_OP = 0x19
EFI_IFR_DATE_OP = 0x1A
EFI_IFR_TIME_OP = 0x1B
EFI_IFR_STRING_OP = 0x1C
EFI_IFR_REFRESH_OP = 0x1D
EFI_IFR_DISABLE_IF_OP = 0x1E
EFI_IFR_ANIMATION_OP = 0x1F
EFI_IFR_TO_LOWER_OP = 0x20
EFI_IFR_TO_UPPER_OP = 0x21
EFI_IFR_MAP_OP = 0x22
EFI_IFR_ORDERED_LIST_OP = 0x23
EFI_IFR_VARSTORE_OP = 0x24
EFI_IFR_VARSTORE_NAME_VALUE_OP = 0x25
EFI_IFR_VARSTORE_EFI_OP = 0x26
EFI_IFR_VARSTORE_DEVICE_OP = 0x27
EFI_IFR_VERSION_OP = 0x28
EFI_IFR_END_OP = 0x29
EFI_IFR_MATCH_OP = 0x2A
EFI_IFR_GET_OP = 0x2B
EFI_IFR_SET_OP = 0x2C
EFI_IFR_READ_OP = 0x2D
EFI_IFR_WRITE_OP = 0x2E
EFI_IFR_EQUAL_OP = 0x2F
EFI_IFR_NOT_EQUAL_OP = 0x30
EFI_IFR_GREATER_THAN_OP = 0x31
EFI_IFR_GREATER_EQUAL_OP = 0x32
EFI_IFR_LESS_THAN_OP = 0x33
EFI_IFR_LESS_EQUAL_OP = 0x34
EFI_IFR_BITWISE_AND_OP = 0x35
EFI_IFR_BITWISE_OR_OP = 0x36
EFI_IFR_BITWISE_NOT_OP = 0x37
EFI_IFR_SHIFT_LEFT_OP = 0x38
EFI_IFR_SHIFT_RIGHT_OP = 0x39
EFI_IFR_ADD_OP = 0x3A
EFI_IFR_SUBTRACT_OP = 0x3B
EFI_IFR_MULTIPLY_OP = 0x3C
EFI_IFR_DIVIDE_OP = 0x3D
EFI_IFR_MODULO_OP = 0x3E
EFI_IFR_RULE_REF_OP = 0x3F
EFI_IFR_QUESTION_REF1_OP = 0x40
EFI_IFR_QUESTION_REF2_OP = 0x41
EFI_IFR_UINT8_OP = 0x42
EFI_IFR_UINT16_OP = 0x43
EFI_IFR_UINT32_OP = 0x44
EFI_IFR_UINT64_OP = 0x45
EFI_IFR_TRUE_OP = 0x46
EFI_IFR_FALSE_OP = 0x47
EFI_IFR_TO_UINT_OP = 0x48
EFI_IFR_TO_STRING_OP = 0x49
EFI_IFR_TO_BOOLEAN_OP = 0x4A
EFI_IFR_MID_OP = 0x4B
EFI_IFR_FIND_OP = 0x4C
EFI_IFR_TOKEN_OP = 0x4D
EFI_IFR_STRING_REF1_OP = 0x4E
EFI_IFR_STRING_REF2_OP = 0x4F
EFI_IFR_CONDITIONAL_OP = 0x50
EFI_IFR_QUESTION_REF3_OP = 0x51
EFI_IFR_ZERO_OP = 0x52
EFI_IFR_ONE_OP = 0x53
EFI_IFR_ONES_OP = 0x54
EFI_IFR_UNDEFINED_OP = 0x55
EFI_IFR_LENGTH_OP = 0x56
EFI_IFR_DUP_OP = 0x57
EFI_IFR_THIS_OP = 0x58
EFI_IFR_SPAN_OP = 0x59
EFI_IFR_VALUE_OP = 0x5A
EFI_IFR_DEFAULT_OP = 0x5B
EFI_IFR_DEFAULTSTORE_OP = 0x5C
EFI_IFR_FORM_MAP_OP = 0x5D
EFI_IFR_CATENATE_OP = 0x5E
EFI_IFR_GUID_OP = 0x5F
EFI_IFR_SECURITY_OP = 0x60
EFI_IFR_MODAL_TAG_OP = 0x61
EFI_IFR_REFRESH_ID_OP = 0x62
EFI_IFR_WARNING_IF_OP = 0x63
EFI_IFR_MATCH2_OP = 0x64

#
# EFI_IFR_TYPE_VALUE types
#
EFI_IFR_TYPE_NUM_SIZE_8 = 0x00
EFI_IFR_TYPE_NUM_SIZE_16 = 0x01
EFI_IFR_TYPE_NUM_SIZE_32 = 0x02
EFI_IFR_TYPE_NUM_SIZE_64 = 0x03
EFI_IFR_TYPE_BOOLEAN = 0x04
EFI_IFR_TYPE_TIME = 0x05
EFI_IFR_TYPE_DATE = 0x06
EFI_IFR_TYPE_STRING = 0x07
EFI_IFR_TYPE_OTHER = 0x08
EFI_IFR_TYPE_UNDEFINED = 0x09
EFI_IFR_TYPE_ACTION = 0x0A
EFI_IFR_TYPE_BUFFER = 0x0B
EFI_IFR_TYPE_REF = 0x0C

EFI_IFR_NUMERIC_SIZE = BIT0 | BIT1
EFI_IFR_FORM_SET_CLASS_GUID_COUNT = BIT0 | BIT1

# GUIDed opcode owners
EFI_IFR_TIANO_GUID = UUID('0F0B1735-87A0-4193-B266-538C38AF48CE')
EFI_IFR_FRAMEWORK_GUID = UUID('31CA5D1A-D511-4931-B782-AE6B2B178CD7')


def decode_typed_value(cur: ByteCursor, value_type: int, payload: Dict[str, Any], name: str = 'Value') -> None:
    """Decodes an EFI_IFR_TYPE_VALUE of ``value_type`` at the cursor position."""
    if value_type <= EFI_IFR_TYPE_NUM_SIZE_64:
        payload[name] = cur.next_uint(1 << value_type)
    elif value_type == EFI_IFR_TYPE_BOOLEAN:
        payload[name] = cur.next_u8()
    elif value_type == EFI_IFR_TYPE_TIME:
        hour, minute, second = cur.next_u8(), cur.next_u8(), cur.next_u8()
        payload[name] = f'{hour:02d}:{minute:02d}:{second:02d}'
    elif value_type == EFI_IFR_TYPE_DATE:
        year, month, day = cur.next_u16(), cur.next_u8(), cur.next_u8()
        payload[name] = f'{year:04d}/{month:02d}/{day:02d}'
    elif value_type in (EFI_IFR_TYPE_STRING, EFI_IFR_TYPE_ACTION):
        payload[name] = StringId(cur.next_u16())
    elif value_type in (EFI_IFR_TYPE_OTHER, EFI_IFR_TYPE_UNDEFINED):
        return
    elif value_type == EFI_IFR_TYPE_REF:
        ref: Dict[str, Any] = {}
        decode_fields(cur, (('QuestionId', U16), ('FormId', U16), ('FormSetGuid', GUID), ('DevicePath', SID)), ref)
        payload[name] = ref
    else:
        # EFI_IFR_TYPE_BUFFER and anything newer
        payload[name] = cur.next_bytes(cur.remaining())


def _decode_typed_value(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    decode_typed_value(cur, payload['Type'], payload)


def _decode_min_max_step(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    size = 1 << (payload['Flags'] & EFI_IFR_NUMERIC_SIZE)
    for name in ('MinValue', 'MaxValue', 'Step'):
        payload[name] = cur.next_uint(size)


def _decode_form_set(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    # Early UEFI 2.0 form sets end after the help string
    if cur.remaining() == 0:
        return
    payload['Flags'] = cur.next_u8()
    payload['ClassGuid'] = [cur.next_guid() for _ in range(payload['Flags'] & EFI_IFR_FORM_SET_CLASS_GUID_COUNT)]


def _decode_ref(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    decode_optional_fields(cur, (('FormId', U16), ('RefQuestionId', U16), ('FormSetId', GUID), ('DevicePath', SID)), payload)


def _decode_action(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    decode_optional_fields(cur, (('QuestionConfig', SID),), payload)


def _decode_question_ref3(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    decode_optional_fields(cur, (('DevicePath', SID), ('Guid', GUID)), payload)


def _decode_eq_id_val_list(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    payload['ValueList'] = [cur.next_u16() for _ in range(payload['ListLength'])]


def _decode_varstore_name(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    payload['Name'] = bytestostring(cur.next_ascii_cstring())


def _decode_varstore_efi(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    # UEFI 2.1 EFI variable stores stop after the attributes
    if cur.remaining() == 0:
        return
    payload['Size'] = cur.next_u16()
    _decode_varstore_name(cur, payload)


def _decode_form_map(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    methods = []
    while cur.remaining() > 0:
        method: Dict[str, Any] = {}
        decode_fields(cur, (('MethodTitle', SID), ('MethodIdentifier', GUID)), method)
        methods.append(method)
    payload['Methods'] = methods


def _decode_option_key(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    # OptionValue is an EFI_IFR_TYPE_VALUE whose size varies between EDK releases
    payload['OptionValue'] = cur.next_bytes(max(cur.remaining() - 2, 0))
    payload['KeyValue'] = cur.next_u16()


GUID_EXTENSIONS = {
    EFI_IFR_TIANO_GUID: {
        0x00: IfrOpcodeDef('Label', (('Number', U16),)),
        0x01: IfrOpcodeDef('Banner', (('Title', SID), ('LineNumber', U16), ('Alignment', U8))),
        0x02: IfrOpcodeDef('Timeout', (('Timeout', U16),)),
        0x03: IfrOpcodeDef('Class', (('Class', U16),)),
        0x04: IfrOpcodeDef('SubClass', (('SubClass', U16),))
    },
    EFI_IFR_FRAMEWORK_GUID: {
        0x00: IfrOpcodeDef('OptionKey', (('QuestionId', U16),), _decode_option_key),
        0x01: IfrOpcodeDef('VarEqName', (('QuestionId', U16), ('NameId', SID)))
    }
}


def _decode_guid_op(cur: ByteCursor, payload: Dict[str, Any]) -> None:
    extensions = GUID_EXTENSIONS.get(payload['Guid'])
    if extensions is None or cur.remaining() == 0:
        payload['Data'] = cur.next_bytes(cur.remaining())
        return
    extend_op = cur.next_u8()
    definition = extensions.get(extend_op)
    if definition is None:
        payload['ExtendOpCode'] = extend_op
        payload['Data'] = cur.next_bytes(cur.remaining())
        return
    payload['ExtendOpCode'] = definition.name
    decode_fields(cur, definition.fields, payload)
    if definition.decoder is not None:
        definition.decoder(cur, payload)


_STATEMENT = (('Prompt', SID), ('Help', SID))
_QUESTION = _STATEMENT + (('QuestionId', U16), ('VarStoreId', U16), ('VarStoreInfo', U16), ('QuestionFlags', U8))
_VAR_ACCESS = (('VarStoreId', U16), ('VarStoreInfo', U16), ('VarStoreType', U8))

OPCODES = {
    EFI_IFR_FORM_OP: IfrOpcodeDef('Form', (('FormId', U16), ('Title', SID))),
    EFI_IFR_SUBTITLE_OP: IfrOpcodeDef('Subtitle', _STATEMENT + (('Flags', U8),)),
    EFI_IFR_TEXT_OP: IfrOpcodeDef('Text', _STATEMENT + (('TextTwo', SID),)),
    EFI_IFR_IMAGE_OP: IfrOpcodeDef('Image', (('ImageId', U16),)),
    EFI_IFR_ONE_OF_OP: IfrOpcodeDef('OneOf', _QUESTION + (('Flags', U8),), _decode_min_max_step),
    EFI_IFR_CHECKBOX_OP: IfrOpcodeDef('CheckBox', _QUESTION + (('Flags', U8),)),
    EFI_IFR_NUMERIC_OP: IfrOpcodeDef('Numeric', _QUESTION + (('Flags', U8),), _decode_min_max_step),
    EFI_IFR_PASSWORD_OP: IfrOpcodeDef('Password', _QUESTION + (('MinSize', U16), ('MaxSize', U16))),
    EFI_IFR_ONE_OF_OPTION_OP: IfrOpcodeDef('OneOfOption', (('Option', SID), ('Flags', U8), ('Type', U8)), _decode_typed_value),
    EFI_IFR_SUPPRESS_IF_OP: IfrOpcodeDef('SuppressIf'),
    EFI_IFR_LOCKED_OP: IfrOpcodeDef('Locked'),
    EFI_IFR_ACTION_OP: IfrOpcodeDef('Action', _QUESTION, _decode_action),
    EFI_IFR_RESET_BUTTON_OP: IfrOpcodeDef('ResetButton', _STATEMENT + (('DefaultId', U16),)),
    EFI_IFR_FORM_SET_OP: IfrOpcodeDef('FormSet', (('Guid', GUID), ('Title', SID), ('Help', SID)), _decode_form_set),
    EFI_IFR_REF_OP: IfrOpcodeDef('Ref', _QUESTION, _decode_ref),
    EFI_IFR_NO_SUBMIT_IF_OP: IfrOpcodeDef('NoSubmitIf', (('Error', SID),)),
    EFI_IFR_INCONSISTENT_IF_OP: IfrOpcodeDef('InconsistentIf', (('Error', SID),)),
    EFI_IFR_EQ_ID_VAL_OP: IfrOpcodeDef('EqIdVal', (('QuestionId', U16), ('Value', U16))),
    EFI_IFR_EQ_ID_ID_OP: IfrOpcodeDef('EqIdId', (('QuestionId1', U16), ('QuestionId2', U16))),
    EFI_IFR_EQ_ID_VAL_LIST_OP: IfrOpcodeDef('EqIdValList', (('QuestionId', U16), ('ListLength', U16)), _decode_eq_id_val_list),
    EFI_IFR_AND_OP: IfrOpcodeDef('And'),
    EFI_IFR_OR_OP: IfrOpcodeDef('Or'),
    EFI_IFR_NOT_OP: IfrOpcodeDef('Not'),
    EFI_IFR_RULE_OP: IfrOpcodeDef('Rule', (('RuleId', U8),)),
    EFI_IFR_GRAY_OUT_IF_OP: IfrOpcodeDef('GrayOutIf'),
    EFI_IFR_DATE_OP: IfrOpcodeDef('Date', _QUESTION + (('Flags', U8),)),
    EFI_IFR_TIME_OP: IfrOpcodeDef('Time', _QUESTION + (('Flags', U8),)),
    EFI_IFR_STRING_OP: IfrOpcodeDef('String', _QUESTION + (('MinSize', U8), ('MaxSize', U8), ('Flags', U8))),
    EFI_IFR_REFRESH_OP: IfrOpcodeDef('Refresh', (('RefreshInterval', U8),)),
    EFI_IFR_DISABLE_IF_OP: IfrOpcodeDef('DisableIf'),
    EFI_IFR_ANIMATION_OP: IfrOpcodeDef('Animation', (('Id', U16),)),
    EFI_IFR_TO_LOWER_OP: IfrOpcodeDef('ToLower'),
    EFI_IFR_TO_UPPER_OP: IfrOpcodeDef('ToUpper'),
    EFI_IFR_MAP_OP: IfrOpcodeDef('Map'),
    EFI_IFR_ORDERED_LIST_OP: IfrOpcodeDef('OrderedList', _QUESTION + (('MaxContainers', U8), ('Flags', U8))),
    EFI_IFR_VARSTORE_OP: IfrOpcodeDef('VarStore', (('Guid', GUID), ('VarStoreId', U16), ('Size', U16)), _decode_varstore_name),
    EFI_IFR_VARSTORE_NAME_VALUE_OP: IfrOpcodeDef('VarStoreNameValue', (('VarStoreId', U16), ('Guid', GUID))),
    EFI_IFR_VARSTORE_EFI_OP: IfrOpcodeDef('VarStoreEfi', (('VarStoreId', U16), ('Guid', GUID), ('Attributes', U32)), _decode_varstore_efi),
    EFI_IFR_VARSTORE_DEVICE_OP: IfrOpcodeDef('VarStoreDevice', (('DevicePath', SID),)),
    EFI_IFR_VERSION_OP: IfrOpcodeDef('Version'),
    EFI_IFR_END_OP: IfrOpcodeDef('End'),
    EFI_IFR_MATCH_OP: IfrOpcodeDef('Match'),
    EFI_IFR_GET_OP: IfrOpcodeDef('Get', _VAR_ACCESS),
    EFI_IFR_SET_OP: IfrOpcodeDef('Set', _VAR_ACCESS),
    EFI_IFR_READ_OP: IfrOpcodeDef('Read'),
    EFI_IFR_WRITE_OP: IfrOpcodeDef('Write'),
    EFI_IFR_EQUAL_OP: IfrOpcodeDef('Equal'),
    EFI_IFR_NOT_EQUAL_OP: IfrOpcodeDef('NotEqual'),
    EFI_IFR_GREATER_THAN_OP: IfrOpcodeDef('GreaterThan'),
    EFI_IFR_GREATER_EQUAL_OP: IfrOpcodeDef('GreaterEqual'),
    EFI_IFR_LESS_THAN_OP: IfrOpcodeDef('LessThan'),
    EFI_IFR_LESS_EQUAL_OP: IfrOpcodeDef('LessEqual'),
    EFI_IFR_BITWISE_AND_OP: IfrOpcodeDef('BitwiseAnd'),
    EFI_IFR_BITWISE_OR_OP: IfrOpcodeDef('BitwiseOr'),
    EFI_IFR_BITWISE_NOT_OP: IfrOpcodeDef('BitwiseNot'),
    EFI_IFR_SHIFT_LEFT_OP: IfrOpcodeDef('ShiftLeft'),
    EFI_IFR_SHIFT_RIGHT_OP: IfrOpcodeDef('ShiftRight'),
    EFI_IFR_ADD_OP: IfrOpcodeDef('Add'),
    EFI_IFR_SUBTRACT_OP: IfrOpcodeDef('Subtract'),
    EFI_IFR_MULTIPLY_OP: IfrOpcodeDef('Multiply'),
    EFI_IFR_DIVIDE_OP: IfrOpcodeDef('Divide'),
    EFI_IFR_MODULO_OP: IfrOpcodeDef('Modulo'),
    EFI_IFR_RULE_REF_OP: IfrOpcodeDef('RuleRef', (('RuleId', U8),)),
    EFI_IFR_QUESTION_REF1_OP: IfrOpcodeDef('QuestionRef1', (('QuestionId', U16),)),
    EFI_IFR_QUESTION_REF2_OP: IfrOpcodeDef('QuestionRef2'),
    EFI_IFR_UINT8_OP: IfrOpcodeDef('Uint8', (('Value', U8),)),
    EFI_IFR_UINT16_OP: IfrOpcodeDef('Uint16', (('Value', U16),)),
    EFI_IFR_UINT32_OP: IfrOpcodeDef('Uint32', (('Value', U32),)),
    EFI_IFR_UINT64_OP: IfrOpcodeDef('Uint64', (('Value', U64),)),
    EFI_IFR_TRUE_OP: IfrOpcodeDef('True'),
    EFI_IFR_FALSE_OP: IfrOpcodeDef('False'),
    EFI_IFR_TO_UINT_OP: IfrOpcodeDef('ToUint'),
    EFI_IFR_TO_STRING_OP: IfrOpcodeDef('ToString', (('Format', U8),)),
    EFI_IFR_TO_BOOLEAN_OP: IfrOpcodeDef('ToBoolean'),
    EFI_IFR_MID_OP: IfrOpcodeDef('Mid'),
    EFI_IFR_FIND_OP: IfrOpcodeDef('Find', (('Format', U8),)),
    EFI_IFR_TOKEN_OP: IfrOpcodeDef('Token'),
    EFI_IFR_STRING_REF1_OP: IfrOpcodeDef('StringRef1', (('StringId', SID),)),
    EFI_IFR_STRING_REF2_OP: IfrOpcodeDef('StringRef2'),
    EFI_IFR_CONDITIONAL_OP: IfrOpcodeDef('Conditional'),
    EFI_IFR_QUESTION_REF3_OP: IfrOpcodeDef('QuestionRef3', (), _decode_question_ref3),
    EFI_IFR_ZERO_OP: IfrOpcodeDef('Zero'),
    EFI_IFR_ONE_OP: IfrOpcodeDef('One'),
    EFI_IFR_ONES_OP: IfrOpcodeDef('Ones'),
    EFI_IFR_UNDEFINED_OP: IfrOpcodeDef('Undefined'),
    EFI_IFR_LENGTH_OP: IfrOpcodeDef('Length'),
    EFI_IFR_DUP_OP: IfrOpcodeDef('Dup'),
    EFI_IFR_THIS_OP: IfrOpcodeDef('This'),
    EFI_IFR_SPAN_OP: IfrOpcodeDef('Span', (('Flags', U8),)),
    EFI_IFR_VALUE_OP: IfrOpcodeDef('Value'),
    EFI_IFR_DEFAULT_OP: IfrOpcodeDef('Default', (('DefaultId', U16), ('Type', U8)), _decode_typed_value),
    EFI_IFR_DEFAULTSTORE_OP: IfrOpcodeDef('DefaultStore', (('DefaultName', SID), ('DefaultId', U16))),
    EFI_IFR_FORM_MAP_OP: IfrOpcodeDef('FormMap', (('FormId', U16),), _decode_form_map),
    EFI_IFR_CATENATE_OP: IfrOpcodeDef('Catenate'),
    EFI_IFR_GUID_OP: IfrOpcodeDef('Guid', (('Guid', GUID),), _decode_guid_op),
    EFI_IFR_SECURITY_OP: IfrOpcodeDef('Security', (('Permissions', GUID),)),
    EFI_IFR_MODAL_TAG_OP: IfrOpcodeDef('ModalTag'),
    EFI_IFR_REFRESH_ID_OP: IfrOpcodeDef('RefreshId', (('RefreshEventGroupId', GUID),)),
    EFI_IFR_WARNING_IF_OP: IfrOpcodeDef('WarningIf', (('Warning', SID), ('TimeOut', U8))),
    EFI_IFR_MATCH2_OP: IfrOpcodeDef('Match2', (('SyntaxType', GUID),))
}


def read_op_header(cur: ByteCursor, offset: int) -> Tuple[int, int, bool]:
    """Returns (opcode, record length, scope bit)."""
    opcode = cur.read_u8(offset)
    length_scope = cur.read_u8(offset + 1)
    return (opcode, length_scope & EFI_IFR_LENGTH_MASK, bool(length_scope & EFI_IFR_SCOPE_BIT))


def opens_scope(opcode: int, scope: bool) -> bool:
    return scope and opcode != EFI_IFR_END_OP


def closes_scope(opcode: int) -> bool:
    return opcode == EFI_IFR_END_OP
