"""
cpihex.serializer - write extracted glyphs as C source or raw binary

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import OutputUnavailable


@dataclass(frozen=True)
class FontBlock:
    """Selected glyphs of one font in one codepage."""

    codepage: int
    width: int
    height: int
    # one bytes object of `height` bytes per selected character
    glyphs: tuple
    destination: str = ''

    @property
    def name(self):
        """Identifier encoding codepage and cell size."""
        return block_name(self.codepage, self.width, self.height)

    @property
    def data(self):
        return b''.join(self.glyphs)


def block_name(codepage, width, height):
    return f'CP{codepage}_{width}x{height}__1bpp'


def binary_filename(codepage, width, height):
    return f'{block_name(codepage, width, height)}.bin'


def format_c_array(name, glyphs):
    """
    Render glyphs as a C array definition.

    Each glyph goes on its own line as comma-separated hex literals;
    the statement is followed by an empty line.
    """
    size = sum(len(_g) for _g in glyphs)
    lines = (
        ','.join(f'0x{_b:02X}' for _b in _glyph)
        for _glyph in glyphs
    )
    return (
        f'const unsigned char {name}[{size}] = {{\n'
        + ',\n'.join(lines)
        + '};\n\n'
    )


def _open(path, mode):
    try:
        return open(path, mode)
    except OSError as e:
        raise OutputUnavailable(
            f'Could not open output file {path}: {e.strerror}'
        ) from e


class TextSerializer:
    """Append C array definitions to a single source file."""

    def __init__(self, path):
        self.path = Path(path)
        self._stream = None

    def __enter__(self):
        # output of an earlier run is removed; the file is created on first write
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise OutputUnavailable(
                f'Could not remove output file {self.path}: {e.strerror}'
            ) from e
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def write(self, codepage, width, height, glyphs):
        """Append one array; return the emitted block."""
        block = FontBlock(
            codepage, width, height, tuple(glyphs), destination=str(self.path)
        )
        logging.debug(
            'Writing %s[%d] to %s', block.name, len(block.data), self.path
        )
        if self._stream is None:
            self._stream = _open(self.path, 'w')
        self._stream.write(format_c_array(block.name, block.glyphs))
        self._stream.flush()
        return block


class BinarySerializer:
    """Write raw glyph bytes to one file per codepage and cell size."""

    def __init__(self, directory='.'):
        self.directory = Path(directory)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        pass

    def write(self, codepage, width, height, glyphs):
        """Create the file for this font; return the emitted block."""
        path = self.directory / binary_filename(codepage, width, height)
        block = FontBlock(
            codepage, width, height, tuple(glyphs), destination=str(path)
        )
        logging.debug('Writing %d bytes to %s', len(block.data), path)
        with _open(path, 'wb') as outfile:
            outfile.write(block.data)
        return block
