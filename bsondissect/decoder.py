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
"""decoder.py.

Decoding utilities for BSON.

This defines the primary ``BSONDecoder`` class that decodes the raw bytes of
one BSON document into a ``Document`` tree.

The traversal is split in two. ``BSONScanner.iterdecode()`` walks the
document and yields one event per element, and ``BSONDecoder.loads()``
consumes those events to build the tree. The parsing stack is managed
externally (i.e. does NOT use recursion), so nesting is limited by the
``max_depth`` setting rather than by the interpreter's recursion limit;
adversarial input that nests too deeply raises ``MaxDepthExceeded``.

Every read is checked against the end of the enclosing document, so a value
that claims to extend past its parent raises ``OutOfBounds`` instead of
silently reading a neighbour's bytes.
"""
from collections import deque

# Local imports.
import bsondissect.codec_util as util
import bsondissect.errors as errors
import bsondissect.types as types


DEFAULT_MAX_DEPTH = 200
"""Default limit on how deeply documents and arrays may nest."""


def _unpack(st, data, position, limit):
    end = position + st.size
    if end > limit:
        raise errors.OutOfBounds(
            'Value of {} bytes extends past the end of the document'.format(
                st.size), offset=position)
    return st.unpack_from(data, position), end


def _decode_utf8(raw, position):
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError as exc:
        raise errors.InvalidUtf8(
            'Invalid UTF-8 data: {}'.format(exc.reason),
            offset=position) from exc


def _parse_64bit_float(data, position, limit):
    (value,), position = _unpack(util.DOUBLE_STRUCT, data, position, limit)
    return value, position


def _parse_int32(data, position, limit):
    (value,), position = _unpack(util.INT32_STRUCT, data, position, limit)
    return types.Int32(value), position


def _parse_int64(data, position, limit):
    (value,), position = _unpack(util.INT64_STRUCT, data, position, limit)
    return types.Int64(value), position


def _parse_ename(data, position, limit):
    """Parse out a C-string (null-terminated string) as UTF-8."""
    index = data.find(b'\x00', position, limit)
    if index < 0:
        raise errors.OutOfBounds(
            'Unterminated C-string', offset=position)
    return _decode_utf8(data[position:index], position), index + 1


def _parse_utf8_string(data, position, limit):
    """Parse out a length-prefixed UTF-8 string."""
    (length,), start = _unpack(util.INT32_STRUCT, data, position, limit)
    end = start + length
    if length < 1 or end > limit:
        raise errors.OutOfBounds(
            'String of length {} extends past the end of the '
            'document'.format(length), offset=position)
    # The last byte _should_ be the null-terminator.
    if data[end - 1] != 0:
        raise errors.CorruptDocument(
            'String is missing its null-terminator', offset=end - 1)
    return _decode_utf8(data[start:end - 1], start), end


def _parse_code(data, position, limit):
    value, position = _parse_utf8_string(data, position, limit)
    return types.Code(value), position


def _parse_symbol(data, position, limit):
    value, position = _parse_utf8_string(data, position, limit)
    return types.Symbol(value), position


def _parse_bool(data, position, limit):
    (value,), end = _unpack(util.BYTE_STRUCT, data, position, limit)
    if value == 0x00:
        return False, end
    elif value == 0x01:
        return True, end
    raise errors.CorruptDocument(
        'Invalid boolean byte: 0x{:02X}'.format(value), offset=position)


def _parse_binary(data, position, limit):
    (length, subtype), start = _unpack(
        util.BINARY_HEADER_STRUCT, data, position, limit)
    end = start + length
    if length < 0 or end > limit:
        raise errors.OutOfBounds(
            'Binary of length {} extends past the end of the '
            'document'.format(length), offset=position)
    if subtype == 0x02:
        # The deprecated 'old binary' subtype repeats the length inside the
        # payload; strip it out.
        (inner,), start = _unpack(util.INT32_STRUCT, data, start, end)
        if inner != length - 4:
            raise errors.CorruptDocument(
                'Old binary lengths do not match: {} != {}'.format(
                    inner, length - 4), offset=position)
    return types.Binary(data[start:end], subtype), end


def _parse_object_id(data, position, limit):
    end = position + util.OBJECT_ID_SIZE
    if end > limit:
        raise errors.OutOfBounds(
            'ObjectId extends past the end of the document', offset=position)
    return types.ObjectId(data[position:end]), end


def _parse_utc_datetime(data, position, limit):
    (utc_ms,), position = _unpack(util.INT64_STRUCT, data, position, limit)
    return types.DateTime(utc_ms), position


def _parse_regex(data, position, limit):
    pattern, position = _parse_ename(data, position, limit)
    options, position = _parse_ename(data, position, limit)
    return types.Regex(pattern, options), position


def _parse_db_pointer(data, position, limit):
    namespace, position = _parse_utf8_string(data, position, limit)
    oid, position = _parse_object_id(data, position, limit)
    return types.DBPointer(namespace, oid), position


def _parse_timestamp(data, position, limit):
    (inc, seconds), position = _unpack(
        util.TIMESTAMP_STRUCT, data, position, limit)
    return types.Timestamp(seconds, inc), position


def _parse_decimal128(data, position, limit):
    end = position + util.DECIMAL128_SIZE
    if end > limit:
        raise errors.OutOfBounds(
            'Decimal128 extends past the end of the document',
            offset=position)
    return types.Decimal128(data[position:end]), end


class DecodeEvents(object):
    """Placeholder class for events when decoding a BSON document."""

    NESTED_DOCUMENT = object()
    """Event that denotes the start of a nested document with the given key.

    NOTE: The end of this nested document is flagged by an 'END_DOCUMENT'
    event.
    """

    NESTED_ARRAY = object()
    """Event that denotes the start of a nested array with the given key.

    NOTE: The end of this nested array is flagged by an 'END_DOCUMENT'
    event.
    """

    NESTED_SCOPE = object()
    """Event that denotes the start of the scope of a code-with-scope value.

    The code string is available as ``frame.scope_of``. The end of the scope
    document is flagged by an 'END_DOCUMENT' event.
    """

    END_DOCUMENT = object()
    """Event that denotes the end of a nested document or array."""


class BSONScanner(object):

    def __init__(self, max_depth=DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth
        # By default, initialize the opcode mapping here. Subclasses can
        # register other handlers using the helper call to:
        # - register_opcode(opcode, callback)
        #
        # The nested types (0x03, 0x04 and 0x0F) are handled directly by
        # 'iterdecode()' since they push a new frame.
        self._opcode_mapping = {
            0x01: _parse_64bit_float,
            0x02: _parse_utf8_string,
            0x05: _parse_binary,
            0x06: lambda data, pos, limit: (types.Undefined, pos),
            0x07: _parse_object_id,
            0x08: _parse_bool,
            0x09: _parse_utc_datetime,
            0x0A: lambda data, pos, limit: (None, pos),
            0x0B: _parse_regex,
            0x0C: _parse_db_pointer,
            0x0D: _parse_code,
            0x0E: _parse_symbol,
            0x10: _parse_int32,
            0x11: _parse_timestamp,
            0x12: _parse_int64,
            0x13: _parse_decimal128,
            0x7F: lambda data, pos, limit: (types.MaxKey, pos),
            0xFF: lambda data, pos, limit: (types.MinKey, pos),
        }

    def register_opcode(self, opcode, callback):
        """Register a custom callback to parse this opcode.

        NOTE: 'callback' is expected to have the signature:
            callback(data, position, limit) -> (result, new_position)
        where 'limit' is the offset of the enclosing document's terminator.
        """
        # Ban '0x00' and the nested types since the scanner handles those
        # itself.
        if opcode in (0x00, 0x03, 0x04, 0x0F):
            raise errors.InvalidBSONOpcode(opcode)
        self._opcode_mapping[opcode] = callback

    def _push_frame(self, data, key, position, parent, is_array=False,
                    scope_of=None):
        if parent.depth + 1 > self.max_depth:
            raise errors.MaxDepthExceeded(self.max_depth, offset=position)
        (length,), _ = _unpack(util.INT32_STRUCT, data, position,
                               parent.limit)
        if length < util.MIN_DOCUMENT_SIZE or position + length > parent.limit:
            raise errors.OutOfBounds(
                'Nested document of length {} extends past the end of its '
                'parent'.format(length), offset=position)
        return util.DocumentFrame(
            key, position, parent=parent, length=length, is_array=is_array,
            scope_of=scope_of)

    def iterdecode(self, data):
        """Iterate over the given BSON document and (incrementally) decode it.

        This returns a generator that yields tuples of the form:
            (frame, key, value)
        where:
         - frame: The current frame as a DocumentFrame. For the NESTED_*
           events, this is the newly opened frame.
         - key: The key pertaining to this value.
         - value: The parsed value or one of the DecodeEvents markers.
        """
        if len(data) < util.MIN_DOCUMENT_SIZE:
            raise errors.CorruptDocument(
                'Document of {} bytes is shorter than the minimum'.format(
                    len(data)), offset=0)
        length = util.INT32_STRUCT.unpack_from(data, 0)[0]
        if length != len(data):
            raise errors.CorruptDocument(
                'Declared length {} does not match the {} bytes '
                'available'.format(length, len(data)), offset=0)
        if data[-1] != 0:
            raise errors.CorruptDocument(
                'Document is missing its null-terminator',
                offset=len(data) - 1)

        # The root key is the empty key.
        root = util.DocumentFrame('', 0, length=length)
        current_stack = deque()
        current_stack.append(root)
        yield root, '', DecodeEvents.NESTED_DOCUMENT

        position = 4
        while current_stack:
            # Peek the current stack frame, which is at the end of the stack.
            frame = current_stack[-1]

            # An 'opcode' of 0x00 at the frame's limit is the end of the
            # current document or array.
            if position >= frame.limit:
                if position > frame.limit or data[position] != 0:
                    raise errors.CorruptDocument(
                        'Document contents overrun the declared length',
                        offset=position)
                current_stack.pop()
                position = frame.end
                # The scope document must end exactly where the
                # code-with-scope value said it would.
                if frame.ext_end is not None and position != frame.ext_end:
                    raise errors.CorruptDocument(
                        'Code with scope length mismatch', offset=frame.fpos)
                yield frame, frame.key, DecodeEvents.END_DOCUMENT
                continue

            # A 'frame' consists of:
            #   <opcode> + <null-terminated key> + <value>
            opcode = data[position]
            if opcode == 0x00:
                raise errors.CorruptDocument(
                    'Unexpected null-terminator before the declared end of '
                    'the document', offset=position)
            element_pos = position
            key, position = _parse_ename(data, position + 1, frame.limit)

            if opcode in (0x03, 0x04):
                is_array = bool(opcode == 0x04)
                new_frame = self._push_frame(
                    data, key, position, frame, is_array=is_array)
                current_stack.append(new_frame)
                position += 4
                if is_array:
                    yield new_frame, key, DecodeEvents.NESTED_ARRAY
                else:
                    yield new_frame, key, DecodeEvents.NESTED_DOCUMENT
                continue

            if opcode == 0x0F:
                # <int32 total length> <string code> <document scope>
                (total,), code_pos = _unpack(
                    util.INT32_STRUCT, data, position, frame.limit)
                ext_end = position + total
                if total < 14 or ext_end > frame.limit:
                    raise errors.OutOfBounds(
                        'Code with scope of length {} extends past the end '
                        'of the document'.format(total), offset=position)
                code, scope_pos = _parse_utf8_string(data, code_pos, ext_end)
                new_frame = self._push_frame(
                    data, key, scope_pos, frame, scope_of=code)
                new_frame.ext_end = ext_end
                current_stack.append(new_frame)
                position = scope_pos + 4
                yield new_frame, key, DecodeEvents.NESTED_SCOPE
                continue

            callback = self._opcode_mapping.get(opcode)
            if not callback:
                raise errors.InvalidBSONOpcode(opcode, offset=element_pos)
            result, position = callback(data, position, frame.limit)
            yield frame, key, result


class BSONDecoder(BSONScanner):
    """Basic BSONDecoder object that decodes one BSON document.

    This decoder builds a ``Document`` (an ordered list of key/value pairs)
    from the events of ``iterdecode()``. See ``bsondissect.types`` for the
    python type each BSON value decodes to.
    """

    def loads(self, data):
        """Decode the full bytes of one BSON document."""
        result = None
        for frame, key, val in self.iterdecode(data):
            if val is DecodeEvents.NESTED_DOCUMENT:
                frame.ext_data = types.Document()
                continue
            elif val is DecodeEvents.NESTED_ARRAY:
                frame.ext_data = []
                continue
            elif val is DecodeEvents.NESTED_SCOPE:
                frame.ext_data = types.Document()
                continue
            elif val is DecodeEvents.END_DOCUMENT:
                if frame.parent is None:
                    result = frame.ext_data
                    continue
                if frame.scope_of is not None:
                    val = types.CodeWithScope(
                        types.Code(frame.scope_of), frame.ext_data)
                else:
                    val = frame.ext_data
                frame = frame.parent
            self._attach(frame, key, val)

        # This should not happen, but might if there is some problem with an
        # unwound frame stack.
        if result is None:
            raise errors.CorruptDocument('Invalid end state!')
        return result

    def _attach(self, frame, key, val):
        if frame.is_array:
            # Check that the 'key' for this array makes sense...
            try:
                index = int(key)
            except ValueError:
                index = -1
            if index != len(frame.ext_data):
                raise errors.CorruptDocument(
                    'Invalid key for array: {}'.format(key))
            frame.ext_data.append(val)
        else:
            frame.ext_data.append((key, val))


_default_decoder = BSONDecoder()


def loads(data, max_depth=DEFAULT_MAX_DEPTH):
    """Decode the bytes of one BSON document into a ``Document``."""
    if max_depth == DEFAULT_MAX_DEPTH:
        return _default_decoder.loads(data)
    return BSONDecoder(max_depth=max_depth).loads(data)
