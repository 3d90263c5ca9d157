'''
Decode bencoded bytes into values.

Every production starts with its own byte, so the decoder looks at one byte,
picks the matching function and never backtracks:

    0-9  byte string   <length>:<bytes>
    i    integer       i[-]<digits>e
    l    list          l<value>*e
    d    dictionary    d(<byte string><value>)*e
'''

import re
import logging
from leetbenc import config
from leetbenc.value import Str, Int, List, Dict, INT_MIN, INT_MAX, BYTES_TYPES
from leetbenc.errors import (
    DecodeError, UnexpectedEof, InvalidTypePrefix, InvalidLengthPrefix,
    TruncatedString, MalformedInteger, MissingTerminator,
    DuplicateKeyPolicyViolation, KeyOrderViolation, DepthExceeded, TrailingData
)

DIGITS = re.compile(rb'[0-9]*')
# 2**63 has 19 digits, so anything longer can't be a 64-bit number.
MAX_DIGITS = 19
END = b'e'

class Decoder(object):
    '''
    State of a single decode call: input, options and the offset of the
    innermost container.
    '''
    def __init__(self, data, max_depth, duplicate_keys, sorted_keys):
        self.data = data
        self.max_depth = max_depth
        self.duplicate_keys = duplicate_keys
        self.sorted_keys = sorted_keys
        self.container = 0
        self.decode_funcs = {
            b'i': self.decode_int,
            b'l': self.decode_list,
            b'd': self.decode_dict
        }
        for digit in b'0123456789':
            self.decode_funcs[bytes([digit])] = self.decode_str

    def decode_value(self, pos, depth):
        '''
        Decode value starting at pos. Return value and position after it.
        '''
        prefix = self.data[pos:pos+1]
        if not prefix:
            raise UnexpectedEof(pos, 'expected a value')
        try:
            func = self.decode_funcs[prefix]
        except KeyError:
            raise InvalidTypePrefix(pos, 'got {!r}'.format(prefix)) from None
        return func(pos, depth)

    def read_bytes(self, pos):
        '''
        Read <length>:<bytes> starting at pos. Return raw bytes and position after them.
        '''
        data = self.data
        digits = DIGITS.match(data, pos).group()
        end = pos+len(digits)
        if not digits:
            if pos >= len(data):
                raise UnexpectedEof(pos, 'expected string length')
            if data[pos:pos+1] == b'-':
                raise InvalidLengthPrefix(pos, 'negative length')
            raise InvalidLengthPrefix(pos, 'got {!r}'.format(data[pos:pos+1]))
        if end >= len(data):
            raise UnexpectedEof(end, 'expected \':\'')
        if data[end:end+1] != b':':
            raise InvalidLengthPrefix(end, 'expected \':\', got {!r}'.format(data[end:end+1]))
        if len(digits) > 1 and digits.startswith(b'0'):
            raise InvalidLengthPrefix(pos, 'leading zero')
        if len(digits) > MAX_DIGITS or int(digits) > INT_MAX:
            raise InvalidLengthPrefix(pos, 'length too big')
        start = end+1
        stop = start+int(digits)
        if stop > len(data):
            raise TruncatedString(start, 'declared {} bytes, {} available'.format(
                int(digits), len(data)-start))
        return data[start:stop], stop

    def decode_str(self, pos, depth):
        string, pos = self.read_bytes(pos)
        return Str(string), pos

    def decode_int(self, pos, depth):
        '''
        Decode i[-]<digits>e. Only the canonical form of a 64-bit number is accepted.
        '''
        data = self.data
        start = pos+1
        negative = data[start:start+1] == b'-'
        if negative:
            start += 1
        digits = DIGITS.match(data, start).group()
        end = start+len(digits)
        if end >= len(data):
            raise UnexpectedEof(end, 'integer is not finished')
        if data[end:end+1] != END:
            raise MalformedInteger(end, 'unexpected byte {!r}'.format(data[end:end+1]))
        if not digits:
            raise MalformedInteger(pos, 'no digits')
        if len(digits) > 1 and digits.startswith(b'0'):
            raise MalformedInteger(pos, 'leading zero')
        if negative and digits == b'0':
            raise MalformedInteger(pos, 'negative zero')
        if len(digits) > MAX_DIGITS:
            raise MalformedInteger(pos, 'does not fit into 64 bits')
        number = -int(digits) if negative else int(digits)
        if not INT_MIN <= number <= INT_MAX:
            raise MalformedInteger(pos, 'does not fit into 64 bits')
        return Int(number), end+1

    def enter(self, pos, depth):
        '''
        Check nesting depth of container starting at pos. Return new depth.
        '''
        depth += 1
        self.container = pos
        if depth > self.max_depth:
            logging.warning('Bencoded data nested deeper than {} at offset {}.'.format(
                self.max_depth, pos))
            raise DepthExceeded(pos, 'limit is {}'.format(self.max_depth))
        return depth

    def decode_list(self, pos, depth):
        depth = self.enter(pos, depth)
        opened = pos
        result = []
        pos += 1
        while True:
            prefix = self.data[pos:pos+1]
            if not prefix:
                raise MissingTerminator(pos, 'list opened at offset {}'.format(opened))
            if prefix == END:
                break
            element, pos = self.decode_value(pos, depth)
            result.append(element)
        return List(result), pos+1

    def decode_dict(self, pos, depth):
        '''
        Decode dictionary. Keys may come in any order unless sorted_keys is set;
        a repeated key either replaces the earlier value or is an error,
        depending on duplicate_keys.
        '''
        depth = self.enter(pos, depth)
        opened = pos
        result = {}
        last_key = None
        pos += 1
        while True:
            prefix = self.data[pos:pos+1]
            if not prefix:
                raise MissingTerminator(pos, 'dictionary opened at offset {}'.format(opened))
            if prefix == END:
                break
            key_pos = pos
            key, pos = self.read_bytes(pos)
            if key in result:
                if self.duplicate_keys == 'error':
                    raise DuplicateKeyPolicyViolation(key_pos, 'key {!r}'.format(key))
                logging.debug('Duplicate key {!r} at offset {} replaces earlier value.'.format(
                    key, key_pos))
            if self.sorted_keys and last_key is not None and key <= last_key:
                raise KeyOrderViolation(key_pos, 'key {!r} after {!r}'.format(key, last_key))
            last_key = key
            result[key], pos = self.decode_value(pos, depth)
        return Dict(result), pos+1

def check_input(data):
    '''
    Return input as bytes.
    '''
    if isinstance(data, bytes):
        return data
    if isinstance(data, BYTES_TYPES):
        return bytes(data)
    raise TypeError('Can\'t decode \'{}\' object. Must be \'bytes\''.format(type(data).__name__))

def make_decoder(data, max_depth, duplicate_keys, sorted_keys):
    '''
    Fill missing options from config and check them.
    '''
    if max_depth is None:
        max_depth = config.MAX_DEPTH
    if duplicate_keys is None:
        duplicate_keys = config.DUPLICATE_KEYS
    if sorted_keys is None:
        sorted_keys = config.SORTED_KEYS
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        raise ValueError('max_depth must be a positive integer, not {!r}'.format(max_depth))
    if duplicate_keys not in config.DUPLICATE_POLICIES:
        raise ValueError('Unknown duplicate key policy {!r}'.format(duplicate_keys))
    return Decoder(data, max_depth, duplicate_keys, bool(sorted_keys))

def decode(data, max_depth=None, duplicate_keys=None, sorted_keys=None):
    '''
    Decode one value from the beginning of data.
    Return the value and the bytes that follow it.
    Raise DecodeError subclass if data is bencoded incorrectly.
    '''
    data = check_input(data)
    decoder = make_decoder(data, max_depth, duplicate_keys, sorted_keys)
    try:
        value, pos = decoder.decode_value(0, 0)
    except RecursionError:
        logging.warning('Recursion limit hit while decoding container at offset {}.'.format(
            decoder.container))
        raise DepthExceeded(decoder.container, 'recursion limit') from None
    except DecodeError as error:
        logging.debug('Rejected bencoded data: {}: {}'.format(type(error).__name__, error))
        raise
    return value, data[pos:]

def decode_exact(data, max_depth=None, duplicate_keys=None, sorted_keys=None):
    '''
    Decode data that must hold exactly one value.
    '''
    data = check_input(data)
    value, rest = decode(data, max_depth, duplicate_keys, sorted_keys)
    if rest:
        error = TrailingData(len(data)-len(rest), '{} bytes left'.format(len(rest)))
        logging.debug('Rejected bencoded data: TrailingData: {}'.format(error))
        raise error
    return value
