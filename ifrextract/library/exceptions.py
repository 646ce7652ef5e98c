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


# ================================================
# IFREXTRACT common
# ================================================

class HiiError(RuntimeError):
    pass


class OutOfBoundsError(HiiError):
    """Raised when a read would go past the end of the readable area."""

    def __init__(self, offset: int, length: int, limit: int) -> None:
        super(OutOfBoundsError, self).__init__(f'read of 0x{length:X} byte(s) at offset 0x{offset:X} exceeds limit 0x{limit:X}')
        self.offset = offset
        self.length = length
        self.limit = limit


class InvalidHeaderError(HiiError):
    """Raised when a package candidate fails structural validation."""

    def __init__(self, offset: int, msg: str) -> None:
        super(InvalidHeaderError, self).__init__(f'0x{offset:X}: {msg}')
        self.offset = offset


class PackageKindError(HiiError):
    """Raised when a candidate of the wrong kind or format is passed in."""
    pass


# ================================================
# Cfg
# ================================================
class OptionsError(RuntimeError):
    pass
