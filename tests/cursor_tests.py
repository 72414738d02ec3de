# -*- coding: utf-8 -*-
#
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
"""cursor_tests.py.

Unittests for the ByteCursor.
"""
import io
import unittest

from bsondissect import errors
from bsondissect.cursor import ByteCursor


class UnseekableStream(io.RawIOBase):
    """Sequential stream that records the size of every read request."""

    def __init__(self, data, max_chunk=None):
        self._data = data
        self._pos = 0
        self._max_chunk = max_chunk
        self.requests = []

    def readable(self):
        return True

    def readinto(self, buff):
        self.requests.append(len(buff))
        count = min(len(buff), len(self._data) - self._pos)
        if self._max_chunk is not None:
            count = min(count, self._max_chunk)
        buff[:count] = self._data[self._pos:self._pos + count]
        self._pos += count
        return count


class RecordingBytesIO(io.BytesIO):
    """Seekable stream that records the size of every read."""

    def __init__(self, *args, **kwargs):
        super(RecordingBytesIO, self).__init__(*args, **kwargs)
        self.reads = []

    def read(self, size=-1):
        self.reads.append(size)
        return super(RecordingBytesIO, self).read(size)

    def readinto(self, buff):
        self.reads.append(len(buff))
        return super(RecordingBytesIO, self).readinto(buff)


class ByteCursorTests(unittest.TestCase):

    def test_read_exact(self):
        cursor = ByteCursor(io.BytesIO(b'abcdefgh'))
        self.assertEqual(cursor.read_exact(3), b'abc')
        self.assertEqual(cursor.position(), 3)
        self.assertEqual(cursor.read_exact(5), b'defgh')
        self.assertEqual(cursor.position(), 8)

    def test_read_exact_truncated(self):
        cursor = ByteCursor(io.BytesIO(b'abcdef'))
        cursor.read_exact(4)
        with self.assertRaises(errors.Truncated) as ctx:
            cursor.read_exact(4)
        self.assertEqual(ctx.exception.offset, 4)
        self.assertEqual(ctx.exception.expected, 4)
        self.assertEqual(ctx.exception.actual, 2)

    def test_read_exact_allow_eof(self):
        cursor = ByteCursor(io.BytesIO(b'ab'))
        self.assertEqual(cursor.read_exact(2, allow_eof=True), b'ab')
        self.assertEqual(cursor.read_exact(4, allow_eof=True), b'')

    def test_read_exact_allow_eof_partial(self):
        cursor = ByteCursor(io.BytesIO(b'ab'))
        with self.assertRaises(errors.Truncated):
            cursor.read_exact(4, allow_eof=True)

    def test_read_exact_short_reads(self):
        stm = UnseekableStream(b'0123456789', max_chunk=3)
        cursor = ByteCursor(stm)
        self.assertEqual(cursor.read_exact(8), b'01234567')
        self.assertEqual(cursor.position(), 8)

    def test_starts_at_current_position(self):
        stm = io.BytesIO(b'0123456789')
        stm.seek(4)
        cursor = ByteCursor(stm)
        self.assertEqual(cursor.position(), 4)
        self.assertEqual(cursor.read_exact(2), b'45')

    def test_skip_seekable_does_not_read(self):
        stm = RecordingBytesIO(b'x' * 1000 + b'tail')
        cursor = ByteCursor(stm)
        self.assertTrue(cursor.seekable)
        cursor.skip(1000)
        self.assertEqual(stm.reads, [])
        self.assertEqual(cursor.position(), 1000)
        self.assertEqual(cursor.read_exact(4), b'tail')

    def test_skip_seekable_truncated(self):
        cursor = ByteCursor(io.BytesIO(b'x' * 10))
        cursor.read_exact(2)
        with self.assertRaises(errors.Truncated) as ctx:
            cursor.skip(20)
        self.assertEqual(ctx.exception.offset, 2)
        self.assertEqual(ctx.exception.actual, 8)

    def test_skip_unseekable_uses_bounded_buffer(self):
        stm = UnseekableStream(b'x' * 1000 + b'tail')
        cursor = ByteCursor(stm, buffer_size=16)
        self.assertFalse(cursor.seekable)
        cursor.skip(1000)
        self.assertEqual(cursor.position(), 1000)
        self.assertTrue(stm.requests)
        self.assertLessEqual(max(stm.requests), 16)
        self.assertEqual(cursor.read_exact(4), b'tail')

    def test_skip_unseekable_truncated(self):
        stm = UnseekableStream(b'x' * 10)
        cursor = ByteCursor(stm, buffer_size=4)
        with self.assertRaises(errors.Truncated) as ctx:
            cursor.skip(20)
        self.assertEqual(ctx.exception.offset, 0)
        self.assertEqual(ctx.exception.actual, 10)


if __name__ == '__main__':
    unittest.main()
