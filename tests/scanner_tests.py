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
"""scanner_tests.py.

Unittests for framing a stream of concatenated BSON documents.
"""
import io
import struct
import unittest

import bson

from bsondissect import errors
from bsondissect.cursor import ByteCursor
from bsondissect.scanner import DocumentScanner
from bsondissect.slicing import SliceSelector


DOCS = [
    bson.encode({'a': 1}),
    bson.encode({'b': 'x' * 100}),
    bson.encode({'c': [1, 2]}),
]


def _stream(*docs):
    return io.BytesIO(b''.join(docs))


class DocumentScannerTests(unittest.TestCase):

    def test_scan_all(self):
        results = list(DocumentScanner(ByteCursor(_stream(*DOCS))))
        self.assertEqual([r.ordinal for r in results], [0, 1, 2])
        self.assertEqual([r.data for r in results], DOCS)
        self.assertEqual([r.length for r in results],
                         [len(doc) for doc in DOCS])
        self.assertEqual(
            [r.offset for r in results],
            [0, len(DOCS[0]), len(DOCS[0]) + len(DOCS[1])])
        self.assertFalse(any(r.skipped for r in results))

    def test_accepts_a_raw_stream(self):
        results = list(DocumentScanner(_stream(*DOCS)))
        self.assertEqual(len(results), 3)

    def test_empty_stream(self):
        self.assertEqual(list(DocumentScanner(_stream())), [])

    def test_skipped_documents_are_not_buffered(self):
        scanner = DocumentScanner(
            ByteCursor(_stream(*DOCS)), SliceSelector(1, 2))
        results = list(scanner)
        self.assertEqual([r.ordinal for r in results], [0, 1])
        self.assertTrue(results[0].skipped)
        self.assertIsNone(results[0].data)
        self.assertEqual(results[0].length, len(DOCS[0]))
        self.assertEqual(results[1].data, DOCS[1])

    def test_stops_once_slice_is_exhausted(self):
        cursor = ByteCursor(_stream(*DOCS))
        scanner = DocumentScanner(cursor, SliceSelector(0, 1))
        self.assertEqual([r.ordinal for r in scanner], [0])
        # Nothing after the first document was read.
        self.assertEqual(cursor.position(), len(DOCS[0]))

    def test_start_beyond_document_count(self):
        scanner = DocumentScanner(
            ByteCursor(_stream(*DOCS)), SliceSelector(10, None))
        results = list(scanner)
        self.assertEqual(len(results), 3)
        self.assertTrue(all(r.skipped for r in results))

    def test_length_below_minimum(self):
        data = DOCS[0] + struct.pack('<i', 4) + b'\x00' * 8
        scanner = DocumentScanner(ByteCursor(io.BytesIO(data)))
        self.assertEqual(next(scanner).ordinal, 0)
        with self.assertRaises(errors.InvalidLength) as ctx:
            next(scanner)
        self.assertEqual(ctx.exception.offset, len(DOCS[0]))
        self.assertEqual(ctx.exception.length, 4)

    def test_negative_length(self):
        data = struct.pack('<i', -20) + b'\x00' * 16
        with self.assertRaises(errors.InvalidLength):
            list(DocumentScanner(ByteCursor(io.BytesIO(data))))

    def test_length_above_maximum(self):
        scanner = DocumentScanner(
            ByteCursor(_stream(*DOCS)), max_document_size=50)
        self.assertEqual(next(scanner).ordinal, 0)
        with self.assertRaises(errors.InvalidLength) as ctx:
            next(scanner)
        self.assertEqual(ctx.exception.max_length, 50)

    def test_truncated_body(self):
        data = DOCS[0] + DOCS[1][:-10]
        scanner = DocumentScanner(ByteCursor(io.BytesIO(data)))
        next(scanner)
        with self.assertRaises(errors.Truncated) as ctx:
            next(scanner)
        self.assertEqual(ctx.exception.offset, len(DOCS[0]) + 4)

    def test_truncated_skipped_body(self):
        data = DOCS[0] + DOCS[1][:-10]
        scanner = DocumentScanner(
            ByteCursor(io.BytesIO(data)), SliceSelector(5, None))
        next(scanner)
        with self.assertRaises(errors.Truncated):
            next(scanner)

    def test_truncated_length_prefix(self):
        data = DOCS[0] + DOCS[1][:2]
        scanner = DocumentScanner(ByteCursor(io.BytesIO(data)))
        next(scanner)
        with self.assertRaises(errors.Truncated) as ctx:
            next(scanner)
        self.assertEqual(ctx.exception.offset, len(DOCS[0]))
        self.assertEqual(ctx.exception.actual, 2)


if __name__ == '__main__':
    unittest.main()
