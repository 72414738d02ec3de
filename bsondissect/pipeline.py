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
"""pipeline.py.

The scan -> slice -> decode -> encode -> write pipeline.

Only one document's bytes and decoded tree are alive at a time in the
default sequential mode. With ``prefetch`` set, a producer thread runs the
cursor and scanner ahead of the decoder, connected by a queue of at most
``prefetch`` frames, so memory stays bounded by
``(prefetch + 1) * max_document_size`` regardless of the input size.
Decoding, encoding and writing stay on the calling thread, which keeps the
sink calls in ascending ordinal order.
"""
import queue
import logging
import threading
from collections import namedtuple

# Local imports.
import bsondissect.errors as errors
from bsondissect.cursor import ByteCursor, DEFAULT_BUFFER_SIZE
from bsondissect.decoder import BSONDecoder, DEFAULT_MAX_DEPTH
from bsondissect.json_encoder import ExtendedJSONEncoder
from bsondissect.scanner import DocumentScanner, DEFAULT_MAX_DOCUMENT_SIZE
from bsondissect.slicing import SliceSelector


logger = logging.getLogger(__name__)


DEFAULT_PROGRESS_INTERVAL = 10000
"""Number of scanned documents between progress log messages."""


_PUT_TIMEOUT = 0.1


class DissectOptions(object):
    """Settings for one run of the pipeline."""

    def __init__(self, pretty=False, slice_start=None, slice_end=None,
                 max_document_size=DEFAULT_MAX_DOCUMENT_SIZE,
                 max_depth=DEFAULT_MAX_DEPTH, prefetch=0,
                 buffer_size=DEFAULT_BUFFER_SIZE, indent=2,
                 progress_interval=DEFAULT_PROGRESS_INTERVAL):
        if max_document_size < 5:
            raise ValueError('max_document_size must be at least 5')
        if prefetch < 0:
            raise ValueError('prefetch must not be negative')
        self.pretty = pretty
        self.slice_start = slice_start
        self.slice_end = slice_end
        self.max_document_size = max_document_size
        self.max_depth = max_depth
        self.prefetch = prefetch
        self.buffer_size = buffer_size
        self.indent = indent
        self.progress_interval = progress_interval

    def selector(self):
        return SliceSelector(self.slice_start, self.slice_end)


DocumentFailure = namedtuple('DocumentFailure', 'ordinal offset error')
"""A document that was scanned and kept, but could not be decoded."""


IndexEntry = namedtuple('IndexEntry', 'ordinal offset length')
"""Location of one document within the stream."""


class DissectSummary(object):
    """Counters for one run of the pipeline."""

    def __init__(self):
        self.scanned = 0
        self.emitted = 0
        self.skipped = 0
        self.failures = []
        self.last_ordinal = None
        self.bytes_read = 0
        self.interrupted = False

    @property
    def failed(self):
        return len(self.failures)

    def __repr__(self):
        return (
            'DissectSummary(scanned={}, emitted={}, skipped={}, failed={}, '
            'interrupted={})'.format(
                self.scanned, self.emitted, self.skipped, self.failed,
                self.interrupted))


class _SkipAll(object):
    """Selector that skips every document without ending the scan."""

    def should_keep(self, ordinal):
        return False

    def is_exhausted(self, ordinal):
        return False


class Dissector(object):
    """Run the pipeline over a stream, writing documents to a sink.

    The sink is any object with a ``write(ordinal, data)`` method, such as
    ``bsondissect.sink.DirectorySink``.
    """

    def __init__(self, options=None):
        self.options = options or DissectOptions()
        self.decoder = BSONDecoder(max_depth=self.options.max_depth)
        self.encoder = ExtendedJSONEncoder(
            pretty=self.options.pretty, indent=self.options.indent)

    def scanner(self, stm):
        cursor = ByteCursor(stm, buffer_size=self.options.buffer_size)
        return DocumentScanner(
            cursor, self.options.selector(),
            max_document_size=self.options.max_document_size)

    def run(self, stm, sink):
        """Process every frame of 'stm' and return a ``DissectSummary``.

        Stream-level errors (``Truncated``, ``InvalidLength``) abort the run;
        they are re-raised with the last processed ordinal and the partial
        summary attached.
        """
        summary = DissectSummary()
        scanner = self.scanner(stm)
        try:
            if self.options.prefetch > 0:
                self._run_threaded(scanner, sink, summary)
            else:
                self._run_sequential(scanner, sink, summary)
        except errors.BSONStreamError as exc:
            exc.update_with_progress(summary.last_ordinal, summary)
            raise
        logger.info(
            'Scanned %d documents: %d emitted, %d failed, %d skipped',
            summary.scanned, summary.emitted, summary.failed,
            summary.skipped)
        return summary

    def _run_sequential(self, scanner, sink, summary):
        try:
            for result in scanner:
                self._process(result, sink, summary)
        except KeyboardInterrupt:
            logger.warning('Interrupted after document %s',
                           summary.last_ordinal)
            summary.interrupted = True

    def _run_threaded(self, scanner, sink, summary):
        frames = queue.Queue(maxsize=self.options.prefetch)
        stop = threading.Event()
        abandoned = threading.Event()
        producer = threading.Thread(
            target=_produce, args=(scanner, frames, stop, abandoned),
            name='bsondissect-scanner', daemon=True)
        producer.start()
        try:
            try:
                self._consume(frames, sink, summary)
            except KeyboardInterrupt:
                logger.warning(
                    'Interrupted after document %s; draining in-flight '
                    'frames', summary.last_ordinal)
                summary.interrupted = True
                stop.set()
                self._consume(frames, sink, summary)
        finally:
            stop.set()
            abandoned.set()
            producer.join()

    def _consume(self, frames, sink, summary):
        while True:
            item = frames.get()
            if item is _END_OF_STREAM:
                return
            if isinstance(item, BaseException):
                raise item
            self._process(item, sink, summary)

    def _process(self, result, sink, summary):
        summary.scanned += 1
        summary.bytes_read = result.offset + result.length
        interval = self.options.progress_interval
        if interval and summary.scanned % interval == 0:
            logger.info('Scanned %d documents (%d bytes)',
                        summary.scanned, summary.bytes_read)

        if result.skipped:
            summary.skipped += 1
            summary.last_ordinal = result.ordinal
            return

        try:
            value = self.decoder.loads(result.data)
        except errors.BSONDecodeError as exc:
            offset = result.offset + (exc.offset or 0)
            logger.warning('Failed to decode document %d at offset %d: %s',
                           result.ordinal, offset, exc)
            summary.failures.append(
                DocumentFailure(result.ordinal, offset, exc))
            summary.last_ordinal = result.ordinal
            return

        sink.write(result.ordinal, self.encoder.encode(value))
        summary.emitted += 1
        summary.last_ordinal = result.ordinal


_END_OF_STREAM = object()


def _put(frames, item, abandoned):
    """Put 'item' on the queue unless the consumer has gone away."""
    while not abandoned.is_set():
        try:
            frames.put(item, timeout=_PUT_TIMEOUT)
            return True
        except queue.Full:
            continue
    return False


def _produce(scanner, frames, stop, abandoned):
    """Producer thread: scan frames into the queue until done or stopped."""
    final = _END_OF_STREAM
    try:
        for result in scanner:
            if stop.is_set() or not _put(frames, result, abandoned):
                break
    except Exception as exc:
        # Hand the error to the consumer, which re-raises it in the calling
        # thread.
        final = exc
    _put(frames, final, abandoned)


def dissect(stm, sink, options=None):
    """Run the pipeline over 'stm' with the given options."""
    return Dissector(options).run(stm, sink)


def inspect(stm, max_document_size=DEFAULT_MAX_DOCUMENT_SIZE,
            buffer_size=DEFAULT_BUFFER_SIZE):
    """Yield an ``IndexEntry`` for every document in 'stm'.

    No document body is read into memory; every frame takes the skip path.
    """
    cursor = ByteCursor(stm, buffer_size=buffer_size)
    scanner = DocumentScanner(
        cursor, _SkipAll(), max_document_size=max_document_size)
    for result in scanner:
        yield IndexEntry(result.ordinal, result.offset, result.length)
