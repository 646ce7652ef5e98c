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
Reading firmware images and writing extracted text, with path validation

usage:
    >>> image = read_file('bios.bin')
    >>> write_file(output_file_name('bios.bin.0', 'out', '.ifr.txt'), text)
"""

import os
from typing import Optional, Union
from ifrextract.library.logger import logger


def get_main_dir() -> str:
    return os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))


def get_package_dir() -> str:
    return os.path.join(get_main_dir(), 'ifrextract')


def validate_file_exists(filepath: str, file_type: str = 'file') -> bool:
    """Logs an error and returns False unless ``filepath`` names an existing regular file."""
    if not filepath:
        logger().log_error(f'Empty filepath provided for {file_type}')
    elif not os.path.exists(filepath):
        logger().log_error(f"File not found: {file_type} '{filepath}'")
    elif not os.path.isfile(filepath):
        logger().log_error(f"Path '{filepath}' exists but is not a file")
    else:
        return True
    return False


def validate_directory_path(dirpath: str, create_if_missing: bool = False) -> bool:
    if os.path.isdir(dirpath):
        return True
    if os.path.exists(dirpath):
        logger().log_error(f"Path '{dirpath}' exists but is not a directory")
        return False
    if not create_if_missing:
        logger().log_error(f"Directory not found: '{dirpath}'")
        return False
    try:
        os.makedirs(dirpath, exist_ok=True)
    except OSError as err:
        logger().log_error(f"Failed to create directory '{dirpath}': {err}")
        return False
    return True


def read_file(filename: str, size: int = 0, validate: bool = True) -> bytes:
    """
    Reads a whole file, or its first ``size`` bytes.

    Returns empty bytes (after logging an error) when the file is missing
    or cannot be opened.
    """
    if validate and not validate_file_exists(filename, 'input file'):
        return b''
    try:
        with open(filename, 'rb') as f:
            data = f.read(size) if size else f.read()
    except OSError:
        logger().log_error(f"Unable to open file '{filename:.256}' for read access")
        return b''
    logger().log_debug(f"[file] Read {len(data):d} bytes from '{filename:.256}'")
    return data


def write_file(filename: str, buffer: Union[str, bytes, bytearray], append: bool = False, validate: bool = True) -> bool:
    """
    Writes ``buffer`` to ``filename``: bytes as binary, text as UTF-8.

    With ``validate`` the parent directory is created when missing.
    Returns False (after logging an error) when the file cannot be written.
    """
    dir_path = os.path.dirname(filename)
    if validate and dir_path and not validate_directory_path(dir_path, create_if_missing=True):
        return False
    binary = isinstance(buffer, (bytes, bytearray))
    mode = ('a' if append else 'w') + ('b' if binary else '')
    try:
        with open(filename, mode, encoding=None if binary else 'utf-8') as f:
            f.write(buffer)
    except OSError:
        logger().log_error(f"Unable to open file '{filename:.256}' for write access")
        return False
    logger().log_debug(f"[file] Wrote {len(buffer):d} bytes to '{filename:.256}'")
    return True


def output_file_name(base: str, outdir: Optional[str], suffix: str) -> str:
    """Builds an output path next to ``base`` or inside ``outdir``."""
    name = f'{base}{suffix}'
    if outdir:
        name = os.path.join(outdir, os.path.basename(name))
    return name
