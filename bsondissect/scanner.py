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
"""scanner.py.

Framing of a stream of concatenated BSON documents.

Each document starts with its own int32 length, so the scanner only ever
needs to look at 4 bytes to know where the next document begins. Documents
outside of the requested slice are skipped through the cursor without being
read into memory.
"""
import logging
from collections import namedtuple

# Local imports.
import bsondissect.codec_util as util
import bsondissect.errors as errors
from bsondissect.cursor import ByteCursor
from bsondissect.slicing import SliceSelector


logger = logging.getLogger(__name__)


DEFAULT_MAX_DOCUMENT_SIZE = 64 * 1024 * 1024
"""Largest document the scanner will buffer before assuming corruption."""


class ScanResult(namedtuple('ScanResult', 'ordinal offset length data')):
    """One frame of the stream.

    'data' holds the complete document bytes (length prefix included) for a
    kept frame, and is None for a skipped one.
    """

    __slots__ = ()

    @property
    def skipped(self):
        return self.data is None


class DocumentScanner(object):
    """Iterate over the frames of a BSON stream.

    The scanner is a one-shot iterator: it reads from the cursor as it goes
    and cannot be restarted.
    """

    def __init__(self, cursor, selector=None,
                 max_document_size=DEFAULT_MAX_DOCUMENT_SIZE):
        if not isinstance(cursor, ByteCursor):
            cursor = ByteCursor(cursor)
        self._cursor = cursor
        self._selector = selector or SliceSelector()
        self._max_document_size = max_document_size
        self._ordinal = 0
        self._done = False

    @property
    def cursor(self):
        return self._cursor

    @property
    def ordinal(self):
        """Ordinal of the next document to be scanned."""
        return self._ordinal

    def __iter__(self):
        return self

    def __next__(self):
        if self._done:
            raise StopIteration
        if self._selector.is_exhausted(self._ordinal):
            logger.debug('Slice exhausted at document %d', self._ordinal)
            self._done = True
            raise StopIteration

        offset = self._cursor.position()
        header = self._cursor.read_exact(
            util.INT32_STRUCT.size, allow_eof=True)
        if not header:
            self._done = True
            raise StopIteration

        length = util.INT32_STRUCT.unpack(header)[0]
        if (length < util.MIN_DOCUMENT_SIZE
                or length > self._max_document_size):
            self._done = True
            raise errors.InvalidLength(
                offset, length, self._max_document_size)

        ordinal = self._ordinal
        self._ordinal += 1
        if self._selector.should_keep(ordinal):
            # The decoder validates the terminator and the inner lengths.
            body = self._cursor.read_exact(length - util.INT32_STRUCT.size)
            return ScanResult(ordinal, offset, length, header + body)
        self._cursor.skip(length - util.INT32_STRUCT.size)
        return ScanResult(ordinal, offset, length, None)
