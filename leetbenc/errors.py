'''
Errors raised while decoding bencoded data.
'''

class DecodeError(ValueError):
    '''
    Base class for every malformed-input condition.
    Carries the offset of the byte where decoding stopped.
    '''
    description = 'Invalid bencoded data'

    def __init__(self, offset, detail=''):
        self.offset = offset
        self.detail = detail
        message = self.description
        if detail:
            message += ' ('+detail+')'
        super().__init__('{} at offset {}'.format(message, offset))

class UnexpectedEof(DecodeError):
    '''
    Input ended where more data was expected.
    '''
    description = 'Unexpected end of data'

class InvalidTypePrefix(DecodeError):
    '''
    A value was expected but the byte starts none of the four productions.
    '''
    description = 'Unknown value type'

class InvalidLengthPrefix(DecodeError):
    '''
    String length is not a plain non-negative decimal number.
    '''
    description = 'Invalid string length'

class TruncatedString(DecodeError):
    '''
    Declared string length exceeds the remaining bytes.
    '''
    description = 'Truncated string'

class MalformedInteger(DecodeError):
    description = 'Malformed integer'

class MissingTerminator(DecodeError):
    '''
    List or dictionary is not closed with 'e'.
    '''
    description = 'Missing terminator'

class DuplicateKeyPolicyViolation(DecodeError):
    description = 'Duplicate dictionary key'

class KeyOrderViolation(DecodeError):
    description = 'Dictionary keys out of order'

class DepthExceeded(DecodeError):
    '''
    Containers are nested deeper than allowed.
    '''
    description = 'Maximum nesting depth exceeded'

class TrailingData(DecodeError):
    description = 'Trailing data'
