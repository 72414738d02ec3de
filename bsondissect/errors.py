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
"""errors.py.

Exceptions for the bsondissect module.

There are two families of errors here. Stream errors (``BSONStreamError``)
mean the framing of the input can no longer be trusted, so the run stops.
Decode errors (``BSONDecodeError``) are scoped to a single document; the
scanner already knows where the next frame starts, so the pipeline reports
them and moves on.
"""


class BSONError(Exception):
    """General exception for BSON errors."""


class BSONStreamError(BSONError):
    """Exception raised when the framing of the input stream is broken."""

    def __init__(self, msg, *args, offset=None):
        super(BSONStreamError, self).__init__(msg, *args)
        self._offset = offset
        self.last_ordinal = None
        self.summary = None

    @property
    def offset(self):
        """Absolute byte offset in the stream where the failure occurred."""
        return self._offset

    def update_with_progress(self, last_ordinal, summary=None):
        """Attach how far the run got before this error was raised."""
        self.last_ordinal = last_ordinal
        self.summary = summary

    def __str__(self):
        msg = super(BSONStreamError, self).__str__()
        return u'{} (offset: {})'.format(msg, self.offset)


class Truncated(BSONStreamError):
    """The stream ended in the middle of a frame."""

    def __init__(self, offset, expected, actual):
        msg = 'Expected {} bytes but only {} were available'.format(
            expected, actual)
        super(Truncated, self).__init__(msg, offset=offset)
        self.expected = expected
        self.actual = actual


class InvalidLength(BSONStreamError):
    """A frame declared a length outside of the accepted range."""

    def __init__(self, offset, length, max_length):
        msg = 'Invalid document length {} (accepted: 5 to {})'.format(
            length, max_length)
        super(InvalidLength, self).__init__(msg, offset=offset)
        self.length = length
        self.max_length = max_length


class BSONDecodeError(BSONError):
    """Exception raised while decoding a single document."""

    def __init__(self, msg, *args, offset=None):
        super(BSONDecodeError, self).__init__(msg, *args)
        self._offset = offset

    @property
    def offset(self):
        """Offset relative to the start of the document (could be None)."""
        return self._offset

    def __str__(self):
        msg = super(BSONDecodeError, self).__str__()
        if self._offset is None:
            return msg
        return u'{} (document offset: {})'.format(msg, self._offset)


class OutOfBounds(BSONDecodeError):
    """A value claims to extend past the end of its enclosing document."""


class InvalidUtf8(BSONDecodeError):
    """A string, key or other text field is not valid UTF-8."""


class MaxDepthExceeded(BSONDecodeError):
    """Documents/arrays are nested deeper than the configured limit."""

    def __init__(self, max_depth, offset=None):
        msg = 'Maximum nesting depth of {} exceeded'.format(max_depth)
        super(MaxDepthExceeded, self).__init__(msg, offset=offset)
        self.max_depth = max_depth


class CorruptDocument(BSONDecodeError):
    """The document structure is inconsistent with its declared lengths."""


class InvalidBSONOpcode(BSONDecodeError):
    """Exception denoting an invalid BSON opcode."""

    def __init__(self, opcode, offset=None):
        msg = "Invalid opcode encountered: 0x{:02X}".format(opcode)
        super(InvalidBSONOpcode, self).__init__(msg, offset=offset)
        self.opcode = opcode
