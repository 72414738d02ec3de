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
"""types.py.

Python types for BSON values that have no direct python equivalent.

Values with a natural python type decode to that type (``float``, ``str``,
``bool``, ``None``, ``list``). Integers decode to the ``Int32``/``Int64``
subclasses of ``int`` so that the JSON encoder can tell them apart, and
documents decode to ``Document``, which keeps key order as well as any
duplicate keys.
"""
import binascii
from collections import namedtuple

from bson.decimal128 import Decimal128 as _BIDDecimal128


class Document(list):
    """Ordered sequence of (key, value) pairs for an embedded document.

    BSON does not require keys to be unique, so this is a list of pairs
    rather than a dict.
    """

    def keys(self):
        return [key for key, _ in self]

    def values(self):
        return [val for _, val in self]

    def items(self):
        return iter(self)

    def get(self, key, default=None):
        """Return the value of the first element with the given key."""
        for item_key, val in self:
            if item_key == key:
                return val
        return default

    def __repr__(self):
        return 'Document({})'.format(list.__repr__(self))


class Int32(int):
    """BSON 32-bit signed integer."""

    def __repr__(self):
        return 'Int32({})'.format(int(self))


class Int64(int):
    """BSON 64-bit signed integer."""

    def __repr__(self):
        return 'Int64({})'.format(int(self))


class DateTime(int):
    """BSON UTC datetime as signed milliseconds since the unix epoch.

    This is kept as an integer since BSON datetimes can be outside of the
    range supported by ``datetime.datetime``.
    """

    def __repr__(self):
        return 'DateTime({})'.format(int(self))


class ObjectId(object):
    """12-byte BSON ObjectId."""

    __slots__ = ('_oid',)

    def __init__(self, oid):
        if isinstance(oid, str):
            oid = binascii.unhexlify(oid)
        oid = bytes(oid)
        if len(oid) != 12:
            raise ValueError('ObjectId must be 12 bytes, got {}'.format(
                len(oid)))
        self._oid = oid

    @property
    def binary(self):
        return self._oid

    def hex(self):
        """Return the 24 lowercase hex characters for this id."""
        return self._oid.hex()

    def __eq__(self, other):
        if isinstance(other, ObjectId):
            return self._oid == other._oid
        return NotImplemented

    def __hash__(self):
        return hash(self._oid)

    def __repr__(self):
        return "ObjectId('{}')".format(self.hex())


class Binary(namedtuple('Binary', 'data subtype')):
    """BSON binary data with its subtype byte."""

    __slots__ = ()


class Regex(namedtuple('Regex', 'pattern options')):
    """BSON regular expression (pattern and option characters)."""

    __slots__ = ()


class Timestamp(namedtuple('Timestamp', 'time inc')):
    """BSON internal timestamp: seconds since the epoch and an increment."""

    __slots__ = ()


class DBPointer(namedtuple('DBPointer', 'namespace oid')):
    """Deprecated BSON DBPointer: a namespace string and an ObjectId."""

    __slots__ = ()


class CodeWithScope(namedtuple('CodeWithScope', 'code scope')):
    """JavaScript code with its scope document."""

    __slots__ = ()


class Code(str):
    """JavaScript code."""

    def __repr__(self):
        return 'Code({})'.format(str.__repr__(self))


class Symbol(str):
    """Deprecated BSON symbol."""

    def __repr__(self):
        return 'Symbol({})'.format(str.__repr__(self))


class Decimal128(object):
    """IEEE 754-2008 128-bit decimal, kept as its 16 raw bytes."""

    __slots__ = ('_bid',)

    def __init__(self, bid):
        bid = bytes(bid)
        if len(bid) != 16:
            raise ValueError('Decimal128 must be 16 bytes, got {}'.format(
                len(bid)))
        self._bid = bid

    @property
    def bid(self):
        return self._bid

    def __str__(self):
        return str(_BIDDecimal128.from_bid(self._bid))

    def __eq__(self, other):
        if isinstance(other, Decimal128):
            return self._bid == other._bid
        return NotImplemented

    def __hash__(self):
        return hash(self._bid)

    def __repr__(self):
        return "Decimal128('{}')".format(self)


class _Marker(object):
    """Value-less BSON type (MinKey, MaxKey, Undefined)."""

    __slots__ = ('_name',)

    def __init__(self, name):
        self._name = name

    def __repr__(self):
        return self._name


MinKey = _Marker('MinKey')
"""Singleton that is decoded for the 'min key' BSON field."""


MaxKey = _Marker('MaxKey')
"""Singleton that is decoded for the 'max key' BSON field."""


Undefined = _Marker('Undefined')
"""Singleton that is decoded for the deprecated 'undefined' BSON field."""
