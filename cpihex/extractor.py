"""
cpihex.extractor - extract bitmap fonts from CPI files

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import sys
import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from pathlib import Path

from .constants import DEFAULT_OUTPUT
from .reader import BinaryReader
from .ranges import RangeSet, MAX_CHAR
from .serializer import TextSerializer, BinarySerializer
from .headers import (
    StandardLayout, ExtendedLayout, DT_PRINTER, CIT_SIZE,
    read_file_header, read_layout, read_font_info_header,
    read_codepage_entry, read_codepage_info, read_screen_font_header,
    read_character_index_table, dump_header,
)


# DRFONT fonts are always 8 pixels wide
_DRFONT_WIDTH = 8
# link values used to mark the last codepage entry
_NULL_LINKS = (0, -1)


@dataclass(frozen=True)
class Options:
    """Extraction settings."""

    # list codepages and fonts, write nothing
    info_only: bool = False
    # print header fields
    debug: bool = False
    # raw binary files instead of C source
    binary_output: bool = False
    # C source file, relative to output_dir
    output_name: str = DEFAULT_OUTPUT
    output_dir: str = '.'
    # 0 for all codepages
    target_codepage: int = 0
    # empty for all characters
    ranges: RangeSet = field(default_factory=RangeSet)


def extract(infile, options=None, console=None):
    """
    Extract fonts from a CPI file.

    infile: path or seekable binary stream
    options: Options; by default, write all fonts to font.h
    console: text stream for progress messages (default: standard output)

    Returns the list of FontBlock records written.
    """
    options = options or Options()
    if isinstance(infile, (str, Path)):
        with open(infile, 'rb') as instream:
            reader = BinaryReader(instream, name=str(infile))
            return FontExtractor(reader, options, console).run()
    return FontExtractor(BinaryReader(infile), options, console).run()


class FontExtractor:
    """Walk the codepage entries of a CPI file and emit selected glyphs."""

    def __init__(self, reader, options, console=None):
        self._reader = reader
        self._options = options
        self._console = console

    def _print(self, *args):
        print(*args, file=self._console or sys.stdout)

    def _dump(self, title, header):
        if self._options.debug:
            self._print(dump_header(title, header))

    def _open_output(self):
        """Output sink for this run, or a null context in info mode."""
        if self._options.info_only:
            return nullcontext()
        if self._options.binary_output:
            return BinarySerializer(self._options.output_dir)
        return TextSerializer(
            Path(self._options.output_dir) / self._options.output_name
        )

    def run(self):
        """Extract all selected codepages; return the emitted blocks."""
        reader = self._reader
        file_header = read_file_header(reader)
        self._dump('FontFileHeader', file_header)
        ext_header, layout = read_layout(reader, file_header)
        if ext_header is not None:
            self._dump('DRDOSExtendedFontFileHeader', ext_header)
        logging.debug(
            'Reading %s file with %s',
            file_header.id.decode('latin-1').strip(), type(layout).__name__
        )
        reader.seek(file_header.fih_offset)
        fih = read_font_info_header(reader)
        self._dump('FontInfoHeader', fih)
        blocks = []
        with self._open_output() as sink:
            for index in range(fih.num_codepages):
                entry_start = reader.tell()
                cpeh = read_codepage_entry(reader)
                if cpeh.device_type == DT_PRINTER:
                    self._print('Printer font, skipping...\n')
                elif (
                        self._options.target_codepage
                        and self._options.target_codepage != cpeh.codepage
                    ):
                    logging.debug('Skipping codepage %d', cpeh.codepage)
                else:
                    blocks.extend(self._extract_codepage(cpeh, layout, sink))
                # the last entry's link is not reliably set
                if index < fih.num_codepages - 1:
                    self._follow_link(entry_start, cpeh, layout)
        return blocks

    def _follow_link(self, entry_start, cpeh, layout):
        """Move to the next codepage entry header."""
        link = cpeh.next_cpeh_offset
        if link in _NULL_LINKS:
            logging.warning(
                'Codepage %d has no link to next entry; '
                'continuing at offset 0x%X.', cpeh.codepage, self._reader.tell()
            )
            return
        if layout.relative_links:
            self._reader.seek(entry_start + link)
        else:
            self._reader.seek(link)

    def _extract_codepage(self, cpeh, layout, sink):
        """Extract the fonts for one screen codepage."""
        reader = self._reader
        self._dump('CodePageEntryHeader', cpeh)
        self._print(f'Code Page: {cpeh.codepage}')
        cpih = read_codepage_info(reader)
        self._dump('CodePageInfoHeader', cpih)
        blocks = []
        for _ in range(cpih.num_fonts):
            sfh = read_screen_font_header(reader)
            self._dump('ScreenFontHeader', sfh)
            self._print(f'{sfh.width}x{sfh.height}\t{sfh.num_chars} characters')
            if isinstance(layout, StandardLayout):
                block = self._extract_standard_font(cpeh.codepage, sfh, sink)
                if block:
                    blocks.append(block)
        self._print()
        if isinstance(layout, ExtendedLayout) and sink is not None:
            blocks.extend(self._extract_extended_fonts(cpeh.codepage, layout, sink))
        return blocks

    def _extract_standard_font(self, codepage, sfh, sink):
        """Read the bitmap block following a FONT screen font header."""
        num_chars = max(0, sfh.num_chars)
        bytesize = num_chars * sfh.height
        if self._options.debug:
            self._print(f'Bitmap length: 0x{bytesize:X}')
        if sink is None:
            self._reader.skip(bytesize)
            return None
        bitmap = self._reader.read(bytesize)
        if not self._options.ranges and num_chars > MAX_CHAR + 1:
            logging.warning(
                'Codepage %d %dx%d font has %d characters; '
                'only the first %d are extracted.',
                codepage, sfh.width, sfh.height, num_chars, MAX_CHAR + 1
            )
        ranges = self._options.ranges or RangeSet.default_for(num_chars)
        missing = [_c for _c in ranges if _c >= num_chars]
        if missing:
            logging.warning(
                'Codepage %d %dx%d font has %d characters; '
                'skipping %d selected characters beyond the end.',
                codepage, sfh.width, sfh.height, num_chars, len(missing)
            )
        glyphs = (
            bitmap[_c*sfh.height : (_c+1)*sfh.height]
            for _c in ranges
            if _c < num_chars
        )
        return sink.write(codepage, sfh.width, sfh.height, glyphs)

    def _extract_extended_fonts(self, codepage, layout, sink):
        """Collect DRFONT glyphs through the character index table."""
        reader = self._reader
        font_index = read_character_index_table(reader)
        ranges = self._options.ranges or RangeSet.default_for(CIT_SIZE)
        blocks = []
        for cellsize, dfd_offset in zip(layout.cellsizes, layout.dfd_offsets):
            glyphs = []
            for char in ranges:
                reader.seek(font_index[char] * cellsize + dfd_offset)
                glyphs.append(reader.read(cellsize))
            blocks.append(sink.write(codepage, _DRFONT_WIDTH, cellsize, glyphs))
        return blocks
