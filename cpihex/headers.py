"""
cpihex.headers - CPI file header structures

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import logging
from dataclasses import dataclass

from .struct import little_endian as le
from .errors import UnsupportedFormat


# CPI format reference:
# https://www.seasip.info/DOS/CPI/cpi.html
# https://www.win.tue.nl/~aeb/linux/kbd/font-formats-3.html

# first byte of the file
SIG_STANDARD = 0xff
SIG_EXTENDED = 0x7f

# format identifiers
ID_MS = b'FONT   '
ID_NT = b'FONT.NT'
ID_DR = b'DRFONT '

# device types
DT_SCREEN = 1
DT_PRINTER = 2

# number of entries in a DRFONT character index table
CIT_SIZE = 256


FILE_HEADER = le.Struct(
    # 0xFF for FONT and FONT.NT, 0x7F for DRFONT
    id0='byte',
    # space-padded "FONT   ", "FONT.NT" or "DRFONT "
    id='7s',
    reserved='8s',
    # number of pointers in this header, 1 in all known files
    pnum='short',
    # pointer type, 1 in all known files
    ptyp='byte',
    # offset of the FontInfoHeader
    fih_offset='long',
)

FONT_INFO_HEADER = le.Struct(
    num_codepages='short',
)

def drdos_ext_header(num_fonts_per_codepage=0):
    """DRFONT extended header, sized for the number of fonts per codepage."""
    return le.Struct(
        num_fonts_per_codepage='byte',
        font_cellsize=le.uint8 * num_fonts_per_codepage,
        # offset of the bitmap table for each font size
        dfd_offset=le.uint32 * num_fonts_per_codepage,
    )

CODEPAGE_ENTRY_HEADER = le.Struct(
    # normally 0x1C, sometimes 0x1A; not relied upon
    cpeh_size='short',
    # next entry; relative to this entry in FONT.NT, to the file elsewhere
    next_cpeh_offset='long',
    # 1 for screen, 2 for printer
    device_type='short',
    # e.g. "EGA     " or "LCD     "
    device_name='8s',
    codepage='uint16',
    reserved='6s',
    cpih_offset='long',
)

CODEPAGE_INFO_HEADER = le.Struct(
    # 1 for FONT, 2 for DRFONT
    version='short',
    num_fonts='short',
    # bytes up to the end of the codepage (FONT) or to the index table (DRFONT)
    size='short',
)

SCREEN_FONT_HEADER = le.Struct(
    height='byte',
    # 8 in all known files
    width='byte',
    # aspect ratios are unused
    yaspect='byte',
    xaspect='byte',
    num_chars='short',
)

CHARACTER_INDEX_TABLE = le.Struct(
    FontIndex=le.int16 * CIT_SIZE,
)


###############################################################################
# layouts

@dataclass(frozen=True)
class _Layout:

    identifier: bytes

    @property
    def relative_links(self):
        """Entry links count from the entry's own start in FONT.NT files."""
        return self.identifier == ID_NT


@dataclass(frozen=True)
class StandardLayout(_Layout):
    """FONT and FONT.NT: bitmaps follow each screen font header."""


@dataclass(frozen=True)
class ExtendedLayout(_Layout):
    """DRFONT: bitmaps shared between codepages, located by index table."""

    cellsizes: tuple
    dfd_offsets: tuple

    @property
    def num_fonts(self):
        return len(self.cellsizes)


###############################################################################
# decoders

def read_file_header(reader):
    """Read the FontFileHeader; fail unless the signature byte is known."""
    start = reader.tell()
    id0 = reader.read_uint8()
    if id0 not in (SIG_STANDARD, SIG_EXTENDED):
        raise UnsupportedFormat(
            f'{reader.name}: Unsupported file type '
            f'(signature byte 0x{id0:02X}).'
        )
    reader.seek(start)
    return reader.read_struct(FILE_HEADER)


def read_extended_header(reader):
    """Read the DRFONT extended header at the current position."""
    start = reader.tell()
    count = reader.read_uint8()
    reader.seek(start)
    return reader.read_struct(drdos_ext_header(count))


def read_layout(reader, file_header):
    """Determine the layout from the file header, reading the DRFONT extension."""
    if file_header.id0 == SIG_EXTENDED:
        ext = read_extended_header(reader)
        return ext, ExtendedLayout(
            identifier=file_header.id,
            cellsizes=tuple(ext.font_cellsize),
            dfd_offsets=tuple(ext.dfd_offset),
        )
    return None, StandardLayout(identifier=file_header.id)


def read_font_info_header(reader):
    return reader.read_struct(FONT_INFO_HEADER)

def read_codepage_entry(reader):
    return reader.read_struct(CODEPAGE_ENTRY_HEADER)

def read_codepage_info(reader):
    return reader.read_struct(CODEPAGE_INFO_HEADER)

def read_screen_font_header(reader):
    return reader.read_struct(SCREEN_FONT_HEADER)

def read_character_index_table(reader):
    """Read the 256-entry DRFONT character index table."""
    cit = reader.read_struct(CHARACTER_INDEX_TABLE)
    logging.debug('Read character index table')
    return tuple(cit.FontIndex)


def dump_header(title, header):
    """Text representation of a header's fields, for debugging output."""
    lines = [f'== {title} ==']
    for field, value in vars(header).items():
        if isinstance(value, bytes):
            value = value.decode('latin-1')
        elif not isinstance(value, int):
            value = ', '.join(str(_v) for _v in value)
        elif field.endswith(('offset', 'size')) or field == 'id0':
            value = f'0x{value:X}'
        lines.append(f'{field}: {value}')
    return '\n'.join(lines) + '\n'
