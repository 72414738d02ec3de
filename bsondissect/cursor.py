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
"""cursor.py.

Bounded reader over the input byte stream.

The cursor tracks the absolute offset into the stream so that errors can
name the byte where they happened. Skipping ahead never allocates a buffer
proportional to the number of skipped bytes: seekable streams are seeked,
and anything else (pipes, sockets wrapped as files) is drained through one
fixed-size scratch buffer.
"""
import io

# Local imports.
import bsondissect.errors as errors


DEFAULT_BUFFER_SIZE = 64 * 1024
"""Size of the scratch buffer used to discard bytes on unseekable streams."""


class ByteCursor(object):
    """Read exact byte counts from a stream while tracking the offset."""

    def __init__(self, stm, buffer_size=DEFAULT_BUFFER_SIZE):
        self._stm = stm
        self._buffer_size = buffer_size
        self._scratch = None
        self._size = None
        try:
            self._seekable = stm.seekable()
        except (AttributeError, ValueError):
            self._seekable = False
        if self._seekable:
            self._position = stm.tell()
            # Record the size of the stream so that a skip past the end can
            # be detected; seeking past the end is otherwise not an error.
            self._size = stm.seek(0, io.SEEK_END)
            stm.seek(self._position)
        else:
            self._position = 0

    @property
    def buffer_size(self):
        return self._buffer_size

    @property
    def seekable(self):
        return self._seekable

    def position(self):
        """Return the absolute offset of the next byte to be read."""
        return self._position

    def read_exact(self, n, allow_eof=False):
        """Read exactly 'n' bytes from the stream.

        If 'allow_eof' is set and the stream is already exhausted, return
        b'' instead of raising; any other short read raises ``Truncated``.
        """
        start = self._position
        data = self._stm.read(n)
        if len(data) < n:
            # Raw streams are allowed to return short reads; keep going until
            # they report the end of the stream.
            chunks = [data]
            total = len(data)
            while total < n:
                chunk = self._stm.read(n - total)
                if not chunk:
                    break
                chunks.append(chunk)
                total += len(chunk)
            data = b''.join(chunks)
        self._position += len(data)
        if not data and allow_eof:
            return b''
        if len(data) < n:
            raise errors.Truncated(start, n, len(data))
        return data

    def skip(self, n):
        """Advance the stream by 'n' bytes without keeping them."""
        start = self._position
        if self._seekable:
            available = self._size - start
            if available < n:
                self._stm.seek(0, io.SEEK_END)
                self._position = self._size
                raise errors.Truncated(start, n, max(available, 0))
            self._stm.seek(n, io.SEEK_CUR)
            self._position += n
            return

        if self._scratch is None:
            self._scratch = memoryview(bytearray(self._buffer_size))
        remaining = n
        while remaining > 0:
            count = self._stm.readinto(
                self._scratch[:min(remaining, self._buffer_size)])
            if not count:
                raise errors.Truncated(start, n, n - remaining)
            remaining -= count
            self._position += count
