'''
Values of a bencoded document: byte strings, integers, lists and dictionaries.
'''

from collections import OrderedDict

INT_MIN = -2**63
INT_MAX = 2**63-1
BYTES_TYPES = (bytes, bytearray, memoryview)

def as_key(key):
    '''
    Return dictionary key as bytes.
    '''
    if not isinstance(key, BYTES_TYPES):
        raise TypeError('Dictionary key must be bytes, not \'{}\''.format(type(key).__name__))
    return bytes(key)

def check_value(item):
    '''
    Make sure that containers only hold values.
    '''
    if not isinstance(item, Value):
        raise TypeError('Can\'t store \'{}\' object. Must be Value'.format(type(item).__name__))
    return item

class Value(object):
    '''
    Base class of the four value types.
    Values are compared by type and content and are never changed after
    construction.
    '''
    __slots__ = ()

    def payload(self):
        '''
        Return hashable content used for comparison.
        '''
        raise NotImplementedError

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return type(self) is type(other) and self.payload() == other.payload()

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __hash__(self):
        return hash((type(self).__name__, self.payload()))

class Str(Value):
    '''
    Byte string. Not required to be valid text.
    '''
    __slots__ = ('_data',)

    def __init__(self, data):
        if not isinstance(data, BYTES_TYPES):
            raise TypeError('Str holds bytes, not \'{}\''.format(type(data).__name__))
        self._data = bytes(data)

    @property
    def data(self):
        return self._data

    def payload(self):
        return self._data

    def __len__(self):
        return len(self._data)

    def __repr__(self):
        return 'Str({!r})'.format(self._data)

class Int(Value):
    '''
    Signed 64-bit integer.
    '''
    __slots__ = ('_number',)

    def __init__(self, number):
        if isinstance(number, bool) or not isinstance(number, int):
            raise TypeError('Int holds int, not \'{}\''.format(type(number).__name__))
        if not INT_MIN <= number <= INT_MAX:
            raise OverflowError('{} does not fit into 64 bits'.format(number))
        self._number = number

    @property
    def number(self):
        return self._number

    def payload(self):
        return self._number

    def __repr__(self):
        return 'Int({})'.format(self._number)

class List(Value):
    '''
    Ordered sequence of values.
    '''
    __slots__ = ('_items',)

    def __init__(self, items=()):
        self._items = tuple(check_value(item) for item in items)

    @property
    def items(self):
        return self._items

    def payload(self):
        return self._items

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __repr__(self):
        return 'List({!r})'.format(list(self._items))

class Dict(Value):
    '''
    Mapping from byte strings to values, kept in ascending byte-wise key order.
    Entries may be given as a mapping or as (key, value) pairs; if a key
    repeats, the last pair wins.
    '''
    __slots__ = ('_entries',)

    def __init__(self, entries=()):
        if hasattr(entries, 'items'):
            entries = entries.items()
        result = {}
        for key, val in entries:
            result[as_key(key)] = check_value(val)
        self._entries = OrderedDict(sorted(result.items(), key=lambda entry: entry[0]))

    def payload(self):
        return tuple(self._entries.items())

    def keys(self):
        return self._entries.keys()

    def values(self):
        return self._entries.values()

    def items(self):
        return self._entries.items()

    def get(self, key, default=None):
        return self._entries.get(as_key(key), default)

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __contains__(self, key):
        return isinstance(key, BYTES_TYPES) and bytes(key) in self._entries

    def __getitem__(self, key):
        return self._entries[as_key(key)]

    def __repr__(self):
        return 'Dict({{{}}})'.format(
            ', '.join('{!r}: {!r}'.format(key, val) for key, val in self._entries.items()))
