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
"""json_encoder.py.

Encoding of decoded BSON values as (extended) JSON text.

Values with a JSON equivalent are written natively. The rest are written as
single-key tagged objects following the MongoDB extended JSON convention, so
that tools such as ``bson.json_util`` can recover the original types:

    ObjectId      {"$oid": "<24 hex chars>"}
    Binary        {"$binary": {"base64": "...", "subType": "<2 hex chars>"}}
    DateTime      {"$date": {"$numberLong": "<millis>"}}
    Regex         {"$regularExpression": {"pattern": "...", "options": "..."}}
    Int64         {"$numberLong": "..."} (only beyond +/- 2**53 - 1)
    float         {"$numberDouble": "NaN"} (only for NaN and infinities)
    Decimal128    {"$numberDecimal": "..."}
    Timestamp     {"$timestamp": {"t": <seconds>, "i": <increment>}}
    MinKey        {"$minKey": 1}
    MaxKey        {"$maxKey": 1}
    DBPointer     {"$dbPointer": {"$ref": "...", "$id": {"$oid": "..."}}}
    Symbol        {"$symbol": "..."}
    Code          {"$code": "..."}
    CodeWithScope {"$code": "...", "$scope": {...}}
    Undefined     {"$undefined": true}

Strings only escape what JSON requires (quote, backslash and control
characters); anything else, including non-ASCII text, is written as UTF-8.
"""
import io
import json
import math
import base64
from collections import deque

# Local imports.
import bsondissect.types as types


MAX_SAFE_INTEGER = 2 ** 53 - 1
"""Largest integer a JSON consumer using doubles can represent exactly."""


def _format_string(val):
    return json.dumps(val, ensure_ascii=False)


def _format_float(val):
    if math.isnan(val):
        return types.Document([('$numberDouble', 'NaN')])
    if math.isinf(val):
        text = 'Infinity' if val > 0 else '-Infinity'
        return types.Document([('$numberDouble', text)])
    return repr(val)


def _oid(oid):
    return types.Document([('$oid', oid.hex())])


def _tagged(val):
    """Return the tagged Document for a value with no JSON equivalent.

    Returns None if 'val' is not one of the tagged types.
    """
    if isinstance(val, types.ObjectId):
        return _oid(val)
    elif isinstance(val, types.DateTime):
        return types.Document([
            ('$date', types.Document([('$numberLong', str(int(val)))]))])
    elif isinstance(val, types.Binary):
        return types.Document([('$binary', types.Document([
            ('base64', base64.b64encode(val.data).decode('ascii')),
            ('subType', '{:02x}'.format(val.subtype)),
        ]))])
    elif isinstance(val, types.Regex):
        return types.Document([('$regularExpression', types.Document([
            ('pattern', val.pattern),
            ('options', val.options),
        ]))])
    elif isinstance(val, types.Decimal128):
        return types.Document([('$numberDecimal', str(val))])
    elif isinstance(val, types.Timestamp):
        return types.Document([('$timestamp', types.Document([
            ('t', val.time),
            ('i', val.inc),
        ]))])
    elif isinstance(val, types.CodeWithScope):
        return types.Document([
            ('$code', str(val.code)), ('$scope', val.scope)])
    elif isinstance(val, types.Code):
        return types.Document([('$code', str(val))])
    elif isinstance(val, types.Symbol):
        return types.Document([('$symbol', str(val))])
    elif isinstance(val, types.DBPointer):
        return types.Document([('$dbPointer', types.Document([
            ('$ref', val.namespace),
            ('$id', _oid(val.oid)),
        ]))])
    elif val is types.MinKey:
        return types.Document([('$minKey', 1)])
    elif val is types.MaxKey:
        return types.Document([('$maxKey', 1)])
    elif val is types.Undefined:
        return types.Document([('$undefined', True)])
    return None


class EncoderFrame(object):

    def __init__(self, is_array, depth, object_iterator):
        self.is_array = is_array
        self.depth = depth
        self.object_iterator = object_iterator
        self.first = True


class ExtendedJSONEncoder(object):
    """Encoder that writes decoded BSON values as JSON text.

    'pretty' selects an indented layout with one member per line; otherwise
    the output has no insignificant whitespace.
    """

    def __init__(self, pretty=False, indent=2):
        self.pretty = pretty
        self.indent = indent
        self._separator = ': ' if pretty else ':'

    def encode(self, obj):
        """Serialize the given value into UTF-8 encoded JSON bytes."""
        with io.StringIO() as stm:
            self.dump(obj, stm)
            return stm.getvalue().encode('utf-8')

    def dump(self, obj, stm):
        """Serialize the given value as JSON text into 'stm'."""
        current_stack = deque()
        self._write_value(obj, current_stack, stm)

        while current_stack:
            frame = current_stack[-1]
            try:
                item = next(frame.object_iterator)
            except StopIteration:
                current_stack.pop()
                self._newline(frame.depth - 1, stm)
                stm.write(']' if frame.is_array else '}')
                continue

            if not frame.first:
                stm.write(',')
            frame.first = False
            self._newline(frame.depth, stm)
            if frame.is_array:
                val = item
            else:
                key, val = item
                stm.write(_format_string(key))
                stm.write(self._separator)
            self._write_value(val, current_stack, stm)

    def _newline(self, depth, stm):
        if self.pretty:
            stm.write('\n')
            stm.write(' ' * (self.indent * depth))

    def _write_value(self, val, current_stack, stm):
        # NOTE: Check against 'bool' BEFORE 'int'; otherwise, bool values
        # would first compare as an int instead.
        if val is None:
            stm.write('null')
            return
        elif isinstance(val, bool):
            stm.write('true' if val else 'false')
            return
        elif isinstance(val, (types.Int32, types.Int64)) or (
                isinstance(val, int) and not isinstance(val, types.DateTime)):
            if abs(val) > MAX_SAFE_INTEGER:
                val = types.Document([('$numberLong', str(int(val)))])
            else:
                stm.write(str(int(val)))
                return
        elif isinstance(val, float):
            val = _format_float(val)
            if isinstance(val, str):
                stm.write(val)
                return
        elif isinstance(val, (types.Code, types.Symbol)):
            val = _tagged(val)
        elif isinstance(val, str):
            stm.write(_format_string(val))
            return
        elif not isinstance(val, (list, tuple)) or isinstance(
                val, (types.Binary, types.Regex, types.Timestamp,
                      types.DBPointer, types.CodeWithScope)):
            tagged = _tagged(val)
            if tagged is None:
                raise TypeError(
                    'Cannot encode object of type: {}'.format(type(val)))
            val = tagged

        # Everything left is a container: a Document or an array.
        is_array = not isinstance(val, types.Document)
        if not val:
            stm.write('[]' if is_array else '{}')
            return
        stm.write('[' if is_array else '{')
        depth = len(current_stack) + 1
        current_stack.append(EncoderFrame(is_array, depth, iter(val)))


def dumps(obj, pretty=False, indent=2):
    """Return the JSON rendering of 'obj' as UTF-8 bytes."""
    return ExtendedJSONEncoder(pretty=pretty, indent=indent).encode(obj)
