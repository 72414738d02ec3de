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
"""codec_util.py.

Common utilities for BSON decoding and JSON encoding.
"""
import struct


# Define common structures for 'unpacking' bytes here.
BYTE_STRUCT = struct.Struct('B')
"""Struct to unpack a single byte."""


INT32_STRUCT = struct.Struct('<i')
"""Struct to unpack a 32-bit signed integer in little-endian format."""


UINT32_STRUCT = struct.Struct('<I')
"""Struct to unpack a 32-bit unsigned integer in little-endian format."""


INT64_STRUCT = struct.Struct('<q')
"""Struct to unpack a 64-bit signed integer in little-endian format."""


DOUBLE_STRUCT = struct.Struct('<d')
"""Struct to unpack a double (i.e. 64-bit float) in little-endian format."""


TIMESTAMP_STRUCT = struct.Struct('<II')
"""Struct to unpack a BSON timestamp as (increment, seconds)."""


BINARY_HEADER_STRUCT = struct.Struct('<iB')
"""Struct to unpack the (length, subtype) header of a binary value."""


MIN_DOCUMENT_SIZE = 5
"""Size of the empty document: the int32 length plus the null-terminator."""


OBJECT_ID_SIZE = 12
DECIMAL128_SIZE = 16


class DocumentFrame(object):
    """State for one document, array or code-with-scope being decoded.

    ``fpos`` is the offset of the int32 length prefix and ``end`` is one past
    the trailing null-terminator, so ``limit`` (``end - 1``) is where the
    terminator must sit.
    """

    def __init__(self, key, fpos, parent=None, length=None, is_array=False,
                 ext_data=None, scope_of=None):
        self.parent = parent
        self.key = key
        self.fpos = fpos
        self.length = length
        self.end = fpos + length
        self.limit = self.end - 1
        self.is_array = is_array
        self.ext_data = ext_data
        # Set to the decoded code string when this frame is the scope of a
        # code-with-scope value.
        self.scope_of = scope_of
        # End offset of the enclosing code-with-scope value, if any.
        self.ext_end = None
        self.depth = parent.depth + 1 if parent is not None else 0
