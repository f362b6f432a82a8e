"""
cpihex - extract bitmap fonts from DOS codepage information (CPI) files

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import sys as _sys
assert _sys.version_info >= (3, 9)

from .constants import VERSION as __version__, DEFAULT_OUTPUT
from .errors import (
    CPIError, FileFormatError, UnsupportedFormat, TruncatedInput,
    RangeError, InvalidRange, InvalidRangeOrder,
    OutputUnavailable, MissingOptionValue,
)
from .ranges import Range, RangeSet
from .reader import BinaryReader
from .serializer import FontBlock, TextSerializer, BinarySerializer
from .extractor import Options, FontExtractor, extract
