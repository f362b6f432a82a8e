"""
cpihex.plumbing.args - script argument parser and main frame

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import os
import sys
import logging
import argparse
from contextlib import contextmanager

from ..errors import CPIError, MissingOptionValue


__all__ = ['ArgumentParser', 'wrap_main']


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports problems as exceptions."""

    def error(self, message):
        if 'expected one argument' in message:
            raise MissingOptionValue(f'No value specified: {message}')
        raise CPIError(message)


###############################################################################
# frame for main scripts

@contextmanager
def wrap_main(debug=False):
    """Main script context: set up logging, exit with status 1 on error."""
    if debug:
        loglevel = logging.DEBUG
    else:
        loglevel = logging.WARNING
    logging.basicConfig(level=loglevel, format='%(levelname)s: %(message)s', force=True)
    try:
        yield
    except BrokenPipeError:
        # happens e.g. when piping to `head`
        sys.stdout = os.fdopen(1)
    except (CPIError, OSError) as exc:
        logging.error(exc)
        if debug:
            raise
        sys.exit(1)
