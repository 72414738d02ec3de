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
"""slicing_tests.py.

Unittests for selecting documents by ordinal.
"""
import unittest

from bsondissect.slicing import SliceSelector, parse_slice


class SliceSelectorTests(unittest.TestCase):

    def test_unbounded(self):
        selector = SliceSelector()
        self.assertTrue(all(selector.should_keep(i) for i in range(100)))
        self.assertFalse(selector.is_exhausted(10 ** 9))
        self.assertFalse(selector.is_empty)

    def test_half_open_range(self):
        selector = SliceSelector(2, 5)
        kept = [i for i in range(10) if selector.should_keep(i)]
        self.assertEqual(kept, [2, 3, 4])
        self.assertFalse(selector.is_exhausted(4))
        self.assertTrue(selector.is_exhausted(5))

    def test_open_start(self):
        selector = SliceSelector(end=3)
        self.assertEqual([i for i in range(10) if selector.should_keep(i)],
                         [0, 1, 2])

    def test_open_end(self):
        selector = SliceSelector(start=8)
        self.assertEqual([i for i in range(10) if selector.should_keep(i)],
                         [8, 9])
        self.assertFalse(selector.is_exhausted(100))

    def test_empty_selection(self):
        for start, end in [(3, 3), (5, 2)]:
            selector = SliceSelector(start, end)
            self.assertTrue(selector.is_empty)
            self.assertTrue(selector.is_exhausted(0))
            self.assertFalse(any(selector.should_keep(i) for i in range(10)))

    def test_negative_bounds(self):
        with self.assertRaises(ValueError):
            SliceSelector(-1, 2)
        with self.assertRaises(ValueError):
            SliceSelector(0, -2)


class ParseSliceTests(unittest.TestCase):

    def test_parse(self):
        cases = {
            '1..2': (1, 2),
            '[10..20]': (10, 20),
            '5..': (5, None),
            '..7': (None, 7),
            '..': (None, None),
            ' 3 .. 4 ': (3, 4),
            '4..1': (4, 1),
        }
        for text, (start, end) in cases.items():
            selector = parse_slice(text)
            self.assertEqual((selector.start, selector.end), (start, end),
                             text)

    def test_invalid(self):
        for text in ['', '5', '1..2..3', 'a..b', '-1..2', '1...2']:
            with self.assertRaises(ValueError, msg=text):
                parse_slice(text)


if __name__ == '__main__':
    unittest.main()
