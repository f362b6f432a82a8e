"""
Extract code page fonts from a CPI file as C hex arrays or raw binaries
(c) 2017--2024, licence: https://opensource.org/licenses/MIT
"""

import sys
import logging

import cpihex
from cpihex.plumbing import ArgumentParser, wrap_main


parser = ArgumentParser(
    prog='cpi2hex',
    description=(
        'Extracts code page fonts from a CPI file into a hex byte array.'
    ),
    epilog=(
        'Multiple ranges can be separated by commas, e.g. -r 32-167,57,2-4'
    ),
)
parser.add_argument('infile', nargs='?', default='', help='CPI file to read')
parser.add_argument(
    '-i', dest='info', action='store_true',
    help="list information only, don't output to file"
)
parser.add_argument(
    '-o', dest='outfile', default=None, metavar='NAME',
    help='output file name (font.h by default)'
)
parser.add_argument(
    '-b', dest='binary', action='store_true',
    help='output data as raw binary files (-o will be ignored)'
)
parser.add_argument(
    '-c', dest='codepage', default=0, type=int, metavar='NUMBER',
    help='code page to extract'
)
parser.add_argument(
    '-r', dest='ranges', action='append', default=[], metavar='RANGE',
    help='range of characters to extract'
)
parser.add_argument(
    '-d', dest='debug', action='store_true',
    help='print debug information about file headers'
)


def _attach_range_values(argv):
    """Attach a -r value that starts with a minus sign, like -r -5-300."""
    joined = []
    args = iter(argv)
    for arg in args:
        if arg == '-r':
            value = next(args, None)
            if value is None:
                pass
            elif value[:1] == '-' and value[1:2].isdigit():
                arg = f'-r={value}'
            else:
                joined.append(arg)
                arg = value
        joined.append(arg)
    return joined


def make_options(args):
    """Build extraction settings from parsed arguments."""
    if args.binary and args.outfile:
        logging.warning('Output file name is ignored for binary output.')
    return cpihex.Options(
        info_only=args.info,
        debug=args.debug,
        binary_output=args.binary,
        output_name=args.outfile or cpihex.DEFAULT_OUTPUT,
        target_codepage=args.codepage,
        ranges=cpihex.RangeSet.parse(','.join(args.ranges)),
    )


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        parser.print_help()
        return 0
    debug = '-d' in argv
    with wrap_main(debug):
        args = parser.parse_args(_attach_range_values(argv))
        if not args.infile:
            raise cpihex.CPIError('No input file specified.')
        options = make_options(args)
        cpihex.extract(args.infile, options)
    return 0


if __name__ == '__main__':
    sys.exit(main())
