"""
cpihex test suite
font extraction tests
"""

import io
import logging

import cpihex
from cpihex import Options, RangeSet, extract
from cpihex.headers import ID_NT
from .base import (
    BaseTester, build_font_cpi, build_drfont_cpi, parse_c_arrays,
    screen_codepage, printer_codepage, screen_font, counting_bitmap,
)


class TestExtractFont(BaseTester):
    """Test extracting from FONT and FONT.NT files."""

    def _options(self, **kwargs):
        return Options(output_dir=str(self.temp_path), **kwargs)

    def _extract(self, data, **kwargs):
        return extract(io.BytesIO(data), self._options(**kwargs), self.console)

    def _arrays(self, name='font.h'):
        return parse_c_arrays((self.temp_path / name).read_text())

    def test_zero_font(self):
        """All-zero 8x16 font gives a 4096-byte array of zeros."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 16, bytes(16*256)))
        )
        blocks = self._extract(data)
        self.assertEqual(len(blocks), 1)
        arrays = self._arrays()
        self.assertEqual(len(arrays), 1)
        name, size, values = arrays[0]
        self.assertIn('8x16', name)
        self.assertEqual(name, 'CP437_8x16__1bpp')
        self.assertEqual(size, 4096)
        self.assertEqual(values, bytes(4096))

    def test_text_layout(self):
        """One glyph per line, hex bytes, terminated statement."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 2, counting_bitmap(2, 3), 3))
        )
        self._extract(data)
        self.assertEqual(
            (self.temp_path / 'font.h').read_text(),
            'const unsigned char CP437_8x2__1bpp[6] = {\n'
            '0x00,0x00,\n'
            '0x01,0x01,\n'
            '0x02,0x02};\n\n'
        )

    def test_ranges(self):
        """Glyphs come out in range order."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8)))
        )
        blocks = self._extract(data, ranges=RangeSet.parse('10-12,0-1'))
        _, size, values = self._arrays()[0]
        self.assertEqual(size, 40)
        self.assertEqual(values[::8], bytes([10, 11, 12, 0, 1]))
        self.assertEqual(blocks[0].data, values)

    def test_ranges_beyond_font(self):
        """Selected characters beyond the glyph count are skipped."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8, 128), 128))
        )
        with self.assertLogs(level=logging.WARNING):
            self._extract(data, ranges=RangeSet.parse('120-130'))
        _, size, values = self._arrays()[0]
        self.assertEqual(size, 64)
        self.assertEqual(values[::8], bytes(range(120, 128)))

    def test_default_range_capped(self):
        """Glyphs beyond code 255 are dropped with a warning by default."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8, 512), 512))
        )
        with self.assertLogs(level=logging.WARNING):
            blocks = self._extract(data)
        self.assertEqual(len(blocks[0].glyphs), 256)
        self.assertEqual(blocks[0].data, counting_bitmap(8))

    def test_default_range_per_font(self):
        """Each font defaults to its own glyph count."""
        data = build_font_cpi(
            screen_codepage(
                437,
                screen_font(8, 8, counting_bitmap(8, 128), 128),
                screen_font(8, 16, counting_bitmap(16)),
            )
        )
        self._extract(data)
        sizes = [_size for _, _size, _ in self._arrays()]
        self.assertEqual(sizes, [8*128, 16*256])

    def test_multiple_codepages(self):
        """All codepages are appended to one text file."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8))),
            screen_codepage(850, screen_font(8, 14, counting_bitmap(14))),
        )
        self._extract(data)
        names = [_name for _name, _, _ in self._arrays()]
        self.assertEqual(names, ['CP437_8x8__1bpp', 'CP850_8x14__1bpp'])
        console = self.console.getvalue()
        self.assertIn('Code Page: 437\n8x8\t256 characters\n', console)
        self.assertIn('Code Page: 850\n8x14\t256 characters\n', console)

    def test_fontnt_links(self):
        """FONT.NT entries link relative to the entry start."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8))),
            screen_codepage(850, screen_font(8, 16, bytes(4096))),
            screen_codepage(852, screen_font(8, 14, counting_bitmap(14))),
            identifier=ID_NT,
        )
        blocks = self._extract(data)
        self.assertEqual([_b.codepage for _b in blocks], [437, 850, 852])
        self.assertEqual(blocks[2].data, counting_bitmap(14))

    def test_absolute_links(self):
        """FONT entries are followed by absolute offset, not by position."""
        first = screen_codepage(437, screen_font(8, 8, counting_bitmap(8)))
        second = screen_codepage(850, screen_font(8, 8, bytes(2048)))
        data = build_font_cpi(first, second)
        # bury the second entry behind some padding
        split = 23 + 2 + 28 + 6 + 6 + 2048
        padding = b'\xee' * 10
        link_field = 23 + 2 + 2
        data = bytearray(data[:split] + padding + data[split:])
        data[link_field:link_field+4] = (split + len(padding)).to_bytes(4, 'little')
        blocks = self._extract(bytes(data))
        self.assertEqual([_b.codepage for _b in blocks], [437, 850])
        self.assertEqual(blocks[1].data, bytes(2048))

    def test_printer_skipped(self):
        """Printer codepages are skipped by following the link."""
        data = build_font_cpi(
            printer_codepage(437),
            screen_codepage(850, screen_font(8, 8, counting_bitmap(8))),
            printer_codepage(852),
        )
        blocks = self._extract(data)
        self.assertEqual([_b.codepage for _b in blocks], [850])
        self.assertEqual(self.console.getvalue().count('Printer font, skipping...'), 2)
        self.assertEqual(len(self._arrays()), 1)

    def test_printer_only(self):
        """A file of printer codepages produces no arrays."""
        data = build_font_cpi(printer_codepage(437), printer_codepage(850))
        self.assertEqual(self._extract(data), [])
        self.assertFalse((self.temp_path / 'font.h').exists())

    def test_codepage_filter(self):
        """Only the requested codepage is extracted."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8))),
            screen_codepage(850, screen_font(8, 8, bytes(2048))),
            screen_codepage(852, screen_font(8, 8, counting_bitmap(8))),
        )
        blocks = self._extract(data, target_codepage=850)
        self.assertEqual([_b.codepage for _b in blocks], [850])
        self.assertNotIn('Code Page: 437', self.console.getvalue())

    def test_codepage_filter_no_match(self):
        """A codepage that is not in the file gives no output and no error."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8))),
            screen_codepage(850, screen_font(8, 8, bytes(2048))),
        )
        self.assertEqual(self._extract(data, target_codepage=866), [])
        self.assertFalse((self.temp_path / 'font.h').exists())

    def test_info_only(self):
        """Info mode lists fonts and writes nothing."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 16, bytes(4096))),
            screen_codepage(850, screen_font(8, 8, bytes(2048))),
        )
        blocks = self._extract(data, info_only=True)
        self.assertEqual(blocks, [])
        self.assertFalse((self.temp_path / 'font.h').exists())
        console = self.console.getvalue()
        self.assertIn('Code Page: 437\n8x16\t256 characters\n', console)
        self.assertIn('Code Page: 850\n8x8\t256 characters\n', console)

    def test_debug_dump(self):
        """Debug mode dumps headers."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 16, bytes(4096)))
        )
        self._extract(data, debug=True, info_only=True)
        console = self.console.getvalue()
        for title in (
                'FontFileHeader', 'FontInfoHeader', 'CodePageEntryHeader',
                'CodePageInfoHeader', 'ScreenFontHeader',
            ):
            self.assertIn(f'== {title} ==', console)
        self.assertIn('Bitmap length: 0x1000', console)

    def test_binary_matches_text(self):
        """Binary and text output carry the same bytes."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8))),
            screen_codepage(850, screen_font(8, 16, counting_bitmap(16))),
        )
        ranges = RangeSet.parse('65-70,32,48-50')
        self._extract(data, ranges=ranges)
        arrays = self._arrays()
        blocks = self._extract(data, ranges=ranges, binary_output=True)
        self.assertEqual(len(blocks), 2)
        for (name, _, values), block in zip(arrays, blocks):
            path = self.temp_path / f'{name}.bin'
            self.assertEqual(block.destination, str(path))
            self.assertEqual(path.read_bytes(), values)

    def test_from_path(self):
        """Extract from a file on disk."""
        path = self.write_file('test.cpi', build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8)))
        ))
        blocks = extract(path, self._options(output_name='out.h'), self.console)
        self.assertEqual(blocks[0].destination, str(self.temp_path / 'out.h'))
        self.assertEqual(self._arrays('out.h')[0][2], counting_bitmap(8))

    def test_stale_output_removed(self):
        """A run that extracts nothing leaves no output file behind."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8)))
        )
        self._extract(data)
        self.assertTrue((self.temp_path / 'font.h').exists())
        self._extract(data, target_codepage=850)
        self.assertFalse((self.temp_path / 'font.h').exists())

    def test_output_truncated_per_run(self):
        """Each run starts a fresh text file."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8)))
        )
        self._extract(data)
        self._extract(data)
        self.assertEqual(len(self._arrays()), 1)

    def test_unsupported(self):
        """Files with an unknown signature are rejected."""
        with self.assertRaises(cpihex.UnsupportedFormat):
            self._extract(b'MZ' + bytes(100))

    def test_truncated(self):
        """A cut-off bitmap aborts extraction."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8))),
            screen_codepage(850, screen_font(8, 16, counting_bitmap(16))),
        )
        with self.assertRaises(cpihex.TruncatedInput):
            self._extract(data[:-100])
        # the first codepage was written before the failure
        self.assertEqual(len(self._arrays()), 1)

    def test_output_unavailable(self):
        """An output file that can't be created is fatal."""
        data = build_font_cpi(
            screen_codepage(437, screen_font(8, 8, counting_bitmap(8)))
        )
        options = Options(output_dir=str(self.temp_path / 'missing'))
        with self.assertRaises(cpihex.OutputUnavailable):
            extract(io.BytesIO(data), options, self.console)
        options = Options(
            output_dir=str(self.temp_path / 'missing'), binary_output=True
        )
        with self.assertRaises(cpihex.OutputUnavailable):
            extract(io.BytesIO(data), options, self.console)


class TestExtractDRFont(BaseTester):
    """Test extracting from DRFONT files."""

    def _extract(self, data, **kwargs):
        options = Options(output_dir=str(self.temp_path), **kwargs)
        return extract(io.BytesIO(data), options, self.console)

    def test_index_table(self):
        """Glyphs are located through the character index table."""
        index = [1] * 256
        index[65] = 0
        table = bytes(range(16)) + b'\xaa' * 16
        data = build_drfont_cpi([437], [16], [table], index_tables=[index])
        blocks = self._extract(data, ranges=RangeSet.parse('65-65'))
        self.assertEqual(len(blocks), 1)
        self.assertEqual(blocks[0].glyphs, (bytes(range(16)),))
        self.assertEqual(blocks[0].name, 'CP437_8x16__1bpp')
        _, size, values = parse_c_arrays((self.temp_path / 'font.h').read_text())[0]
        self.assertEqual(size, 16)
        self.assertEqual(values, bytes(range(16)))

    def test_default_range(self):
        """All 256 characters of every font size by default."""
        data = build_drfont_cpi(
            [437, 850], [8, 16], [counting_bitmap(8), counting_bitmap(16)]
        )
        blocks = self._extract(data)
        self.assertEqual(
            [_b.name for _b in blocks],
            [
                'CP437_8x8__1bpp', 'CP437_8x16__1bpp',
                'CP850_8x8__1bpp', 'CP850_8x16__1bpp',
            ]
        )
        self.assertEqual(blocks[1].data, counting_bitmap(16))
        arrays = parse_c_arrays((self.temp_path / 'font.h').read_text())
        self.assertEqual([_size for _, _size, _ in arrays], [2048, 4096] * 2)

    def test_shared_bitmaps(self):
        """Codepages index into the same bitmap tables."""
        reverse = tuple(range(255, -1, -1))
        data = build_drfont_cpi(
            [437, 850], [8], [counting_bitmap(8)],
            index_tables=[tuple(range(256)), reverse],
        )
        blocks = self._extract(data, ranges=RangeSet.parse('0-2'))
        self.assertEqual(blocks[0].data[::8], bytes([0, 1, 2]))
        self.assertEqual(blocks[1].data[::8], bytes([255, 254, 253]))

    def test_binary(self):
        """One binary file per codepage and cell size."""
        data = build_drfont_cpi([437], [8, 14], [counting_bitmap(8), counting_bitmap(14)])
        self._extract(data, binary_output=True, ranges=RangeSet.parse('48-57'))
        self.assertEqual(
            (self.temp_path / 'CP437_8x14__1bpp.bin').read_bytes(),
            counting_bitmap(14)[48*14:58*14]
        )
        self.assertEqual(
            (self.temp_path / 'CP437_8x8__1bpp.bin').read_bytes(),
            counting_bitmap(8)[48*8:58*8]
        )

    def test_info_only(self):
        """Info mode does not read the index table or bitmaps."""
        data = build_drfont_cpi([437, 850], [16], [counting_bitmap(16)])
        # bitmaps are not needed to list the fonts
        data = data[:-4096]
        self.assertEqual(self._extract(data, info_only=True), [])
        self.assertEqual(self.console.getvalue().count('8x16\t256 characters'), 2)

    def test_fontnt_links(self):
        """A FONT.NT identifier makes links relative in this layout too."""
        data = build_drfont_cpi(
            [437, 850, 852], [8], [counting_bitmap(8)], identifier=ID_NT
        )
        blocks = self._extract(data, ranges=RangeSet.parse('1'))
        self.assertEqual([_b.codepage for _b in blocks], [437, 850, 852])
        self.assertEqual(blocks[2].data, b'\1' * 8)

    def test_truncated_bitmaps(self):
        """Index pointing beyond the file is truncated input."""
        data = build_drfont_cpi([437], [16], [counting_bitmap(16)])
        with self.assertRaises(cpihex.TruncatedInput):
            self._extract(data[:-16])


class TestSerializer(BaseTester):
    """Test output formatting."""

    def test_empty_array(self):
        """An empty selection still gives a valid definition."""
        self.assertEqual(
            cpihex.serializer.format_c_array('CP437_8x8__1bpp', ()),
            'const unsigned char CP437_8x8__1bpp[0] = {\n};\n\n'
        )

    def test_hex_case(self):
        """Bytes are written as upper-case hex."""
        text = cpihex.serializer.format_c_array('x', (b'\xab\x0f',))
        self.assertEqual(text, 'const unsigned char x[2] = {\n0xAB,0x0F};\n\n')

    def test_binary_names(self):
        """Binary file names encode codepage and cell size."""
        with cpihex.BinarySerializer(self.temp_path) as sink:
            block = sink.write(866, 8, 14, [b'\1' * 14])
        self.assertEqual(block.destination, str(self.temp_path / 'CP866_8x14__1bpp.bin'))
        self.assertEqual(block.data, b'\1' * 14)
