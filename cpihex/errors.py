"""
cpihex.errors - exception types

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""


class CPIError(Exception):
    """Base class for cpihex errors."""


class FileFormatError(CPIError):
    """Incorrect file format."""


class UnsupportedFormat(FileFormatError):
    """Signature byte is not that of a CPI file."""


class TruncatedInput(FileFormatError):
    """Fewer bytes available than a read requires."""


class RangeError(CPIError, ValueError):
    """Malformed character range specification."""


class InvalidRange(RangeError):
    """Range token could not be parsed."""

    def __init__(self, token):
        super().__init__(f"Invalid argument '{token}' after -r")
        self.token = token


class InvalidRangeOrder(RangeError):
    """Range ends before it starts."""

    def __init__(self, start, end):
        super().__init__(
            'Ending range can not be smaller than starting range '
            f'({start}-{end})'
        )
        self.start = start
        self.end = end


class OutputUnavailable(CPIError):
    """Output file could not be created."""


class MissingOptionValue(CPIError):
    """Command-line option given without its value."""
