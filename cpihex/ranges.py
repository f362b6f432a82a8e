"""
cpihex.ranges - character range selection

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import re
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidRange, InvalidRangeOrder


# character codes addressable in a codepage
MIN_CHAR = 0
MAX_CHAR = 255

# N or N-M, where N may carry a sign
_RANGE_TOKEN = re.compile(r"\s*([+-]?\d+)(?:\s*-\s*([+-]?\d+))?\s*")


def _clamp(value):
    return min(max(value, MIN_CHAR), MAX_CHAR)


@dataclass(frozen=True)
class Range:
    """
    Inclusive range of character codes.

    Both bounds are clamped to 0--255; a range that ends before it starts
    raises InvalidRangeOrder.
    """

    start: int
    end: Optional[int] = None

    def __post_init__(self):
        end = self.start if self.end is None else self.end
        start, end = _clamp(self.start), _clamp(end)
        if end < start:
            raise InvalidRangeOrder(start, end)
        object.__setattr__(self, 'start', start)
        object.__setattr__(self, 'end', end)

    def chars(self):
        """Character codes in ascending order."""
        return range(self.start, self.end+1)

    def __len__(self):
        return self.end - self.start + 1

    def __str__(self):
        if self.start == self.end:
            return str(self.start)
        return f'{self.start}-{self.end}'


class RangeSet:
    """
    Ordered sequence of character ranges.

    Ranges are kept in the order given and never merged, so that
    overlapping ranges select the same characters more than once.
    """

    def __init__(self, ranges=()):
        self._ranges = tuple(ranges)

    @classmethod
    def parse(cls, text):
        """
        Parse comma-separated range tokens like `32-127,10,0-3`.

        Values are clamped to 0--255. Raises InvalidRange for a token that is
        not a number or a pair of numbers, InvalidRangeOrder if a range ends
        before it starts.
        """
        ranges = []
        for token in text.split(','):
            if not token.strip():
                continue
            match = _RANGE_TOKEN.fullmatch(token)
            if not match:
                raise InvalidRange(token)
            start, end = match.groups()
            start = int(start)
            end = start if end is None else int(end)
            ranges.append(Range(start, end))
        return cls(ranges)

    @classmethod
    def default_for(cls, glyph_count):
        """All characters of a font with the given number of glyphs."""
        if glyph_count <= 0:
            return cls()
        return cls((Range(0, glyph_count-1),))

    @property
    def ranges(self):
        return self._ranges

    def __bool__(self):
        return bool(self._ranges)

    def __iter__(self):
        """Character codes in range order, ascending within each range."""
        for _range in self._ranges:
            yield from _range.chars()

    def __len__(self):
        """Total number of selected characters, counting repeats."""
        return sum(len(_r) for _r in self._ranges)

    def __eq__(self, other):
        if isinstance(other, RangeSet):
            return self._ranges == other._ranges
        return NotImplemented

    def __hash__(self):
        return hash(self._ranges)

    def __repr__(self):
        return f'{type(self).__name__}({list(self._ranges)!r})'

    def __str__(self):
        return ','.join(str(_r) for _r in self._ranges)
