# MIT License
#
# Copyright (c) 2022 Aaron Gibson
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#
"""cli.py.

Command-line entrypoint: dissect a BSON file into one JSON file per document.
"""
import sys
import logging
import argparse

# Local imports.
import bsondissect.errors as errors
from bsondissect.pipeline import DissectOptions, Dissector, inspect
from bsondissect.scanner import DEFAULT_MAX_DOCUMENT_SIZE
from bsondissect.decoder import DEFAULT_MAX_DEPTH
from bsondissect.sink import DirectorySink
from bsondissect.slicing import parse_slice


logger = logging.getLogger('bsondissect')


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def _slice_type(text):
    try:
        return parse_slice(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def _positive_int(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError('not an integer: {!r}'.format(text))
    if value < 0:
        raise argparse.ArgumentTypeError('must not be negative: {}'.format(
            value))
    return value


def build_parser():
    parser = argparse.ArgumentParser(
        prog='bsondissect',
        description=(
            "Dissect a file of concatenated BSON documents into one JSON "
            "file per document, using a bounded amount of memory."))
    parser.add_argument('input', help="The BSON file to read.")
    parser.add_argument('output', nargs='?', help=(
        "The directory to write '<ordinal>.json' files to (created if "
        "missing)."))
    parser.add_argument('--pretty', action='store_true', help=(
        "Write indented JSON instead of compact JSON."))
    parser.add_argument('-s', '--slice', type=_slice_type, default=None,
                        help=(
        "Only emit the documents in this half-open ordinal range, written "
        "as 'start..end' (either side may be omitted)."))
    parser.add_argument('--max-document-size', type=_positive_int,
                        default=DEFAULT_MAX_DOCUMENT_SIZE, help=(
        "Reject documents larger than this many bytes as corrupt "
        "(default: %(default)s)."))
    parser.add_argument('--max-depth', type=_positive_int,
                        default=DEFAULT_MAX_DEPTH, help=(
        "Maximum nesting depth of documents and arrays "
        "(default: %(default)s)."))
    parser.add_argument('-b', '--prefetch', type=_positive_int, default=0,
                        help=(
        "Read up to this many documents ahead on a separate thread; 0 "
        "processes everything on one thread (default: %(default)s)."))
    parser.add_argument('--inspect', action='store_true', help=(
        "Only list the ordinal, offset and length of every document; do "
        "not decode or write anything."))
    parser.add_argument('-v', '--verbose', action='count', default=1,
                        help="Increase output verbosity.")
    parser.add_argument('-q', '--quiet', action='store_const', const=0,
                        dest='verbose', help="Only report warnings and errors.")
    return parser


def configure_logging(verbosity):
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logging.basicConfig(
        level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')


def run_inspect(args):
    count = 0
    total = 0
    with open(args.input, 'rb') as stm:
        for entry in inspect(stm, max_document_size=args.max_document_size):
            print('{}\t{}\t{}'.format(entry.ordinal, entry.offset,
                                      entry.length))
            count += 1
            total += entry.length
    logger.info('Found %d documents (%d bytes) in %s', count, total,
                args.input)
    return EXIT_OK


def run_dissect(args):
    selector = args.slice
    options = DissectOptions(
        pretty=args.pretty,
        slice_start=selector.start if selector else None,
        slice_end=selector.end if selector else None,
        max_document_size=args.max_document_size,
        max_depth=args.max_depth,
        prefetch=args.prefetch)
    with open(args.input, 'rb') as stm:
        sink = DirectorySink(args.output)
        summary = Dissector(options).run(stm, sink)

    for failure in summary.failures:
        logger.warning('Document %d (offset %d) was not exported: %s',
                       failure.ordinal, failure.offset, failure.error)
    logger.info('Exported %d documents to %s (%d failed)',
                summary.emitted, args.output, summary.failed)
    if summary.interrupted:
        return EXIT_INTERRUPTED
    return EXIT_OK


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.inspect and not args.output:
        parser.error('the output directory is required unless --inspect is '
                     'given')
    configure_logging(args.verbose)

    try:
        if args.inspect:
            return run_inspect(args)
        return run_dissect(args)
    except errors.BSONStreamError as exc:
        logger.error('Aborted at offset %s after document %s: %s',
                     exc.offset, exc.last_ordinal, exc)
        return EXIT_FAILURE
    except OSError as exc:
        logger.error('%s', exc)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning('Interrupted')
        return EXIT_INTERRUPTED


if __name__ == '__main__':
    sys.exit(main())
