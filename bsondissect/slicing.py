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
"""slicing.py.

Selection of the documents to emit by their ordinal.
"""


class SliceSelector(object):
    """Half-open [start, end) range of document ordinals to keep.

    Either bound may be None, meaning unbounded on that side. A range with
    start >= end is valid and simply selects nothing.
    """

    def __init__(self, start=None, end=None):
        if start is not None and start < 0:
            raise ValueError('Slice start must not be negative')
        if end is not None and end < 0:
            raise ValueError('Slice end must not be negative')
        self.start = start
        self.end = end

    @property
    def is_empty(self):
        return (
            self.start is not None and self.end is not None
            and self.start >= self.end)

    def should_keep(self, ordinal):
        if self.start is not None and ordinal < self.start:
            return False
        if self.end is not None and ordinal >= self.end:
            return False
        return True

    def is_exhausted(self, ordinal):
        """Return True when no ordinal >= 'ordinal' can be kept."""
        return self.is_empty or (self.end is not None and ordinal >= self.end)

    def __repr__(self):
        return 'SliceSelector({!r}, {!r})'.format(self.start, self.end)


def _parse_bound(text):
    text = text.strip()
    if not text:
        return None
    try:
        value = int(text)
    except ValueError:
        raise ValueError('Invalid slice bound: {!r}'.format(text)) from None
    if value < 0:
        raise ValueError('Slice bounds must not be negative: {}'.format(value))
    return value


def parse_slice(text):
    """Parse a range expression like 'start..end' into a SliceSelector.

    Either side may be omitted ('10..', '..5', '..') and the expression may
    be wrapped in brackets ('[10..20]').
    """
    expr = text.strip().strip('[]')
    parts = expr.split('..')
    if len(parts) != 2:
        raise ValueError('Invalid slice format: {!r}'.format(text))
    return SliceSelector(_parse_bound(parts[0]), _parse_bound(parts[1]))
