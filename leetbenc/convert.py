'''
Convert between values and plain python objects.
'''

from leetbenc.value import Value, Str, Int, List, Dict
from leetbenc.encoder import encode
from leetbenc.decoder import decode_exact

def str_to_value(string):
    return Str(string.encode('utf-8'))

def dict_to_value(dic):
    '''
    Text keys are stored as their UTF-8 bytes.
    '''
    return Dict((key.encode('utf-8') if isinstance(key, str) else key, to_value(val))
                for key, val in dic.items())

def list_to_value(list_):
    return List(to_value(elem) for elem in list_)

TO_VALUE_FUNCS = {}
TO_VALUE_FUNCS[bytes] = Str
TO_VALUE_FUNCS[bytearray] = Str
TO_VALUE_FUNCS[memoryview] = Str
TO_VALUE_FUNCS[str] = str_to_value
TO_VALUE_FUNCS[int] = Int
TO_VALUE_FUNCS[list] = list_to_value
TO_VALUE_FUNCS[tuple] = list_to_value
TO_VALUE_FUNCS[dict] = dict_to_value

TO_NATIVE_FUNCS = {}
TO_NATIVE_FUNCS[Str] = lambda x: x.data
TO_NATIVE_FUNCS[Int] = lambda x: x.number
TO_NATIVE_FUNCS[List] = lambda x: [to_native(elem) for elem in x]
TO_NATIVE_FUNCS[Dict] = lambda x: dict((key, to_native(val)) for key, val in x.items())

def to_value(obj):
    '''
    Build value from python object.
    bytes and str become Str, int becomes Int, list and tuple become List,
    dict becomes Dict. Values are returned as is.
    '''
    if isinstance(obj, Value):
        return obj
    try:
        func = TO_VALUE_FUNCS[type(obj)]
    except KeyError:
        raise TypeError('Can\'t convert \'{}\' object.'.format(type(obj).__name__)) from None
    return func(obj)

def to_native(value):
    '''
    Turn value into bytes, int, list or dict.
    '''
    try:
        func = TO_NATIVE_FUNCS[type(value)]
    except KeyError:
        raise TypeError('Can\'t convert \'{}\' object. Must be Value'.format(
            type(value).__name__)) from None
    return func(value)

def bencode(obj):
    '''
    Encode python object using bencode.
    '''
    return encode(to_value(obj))

def bdecode(data, **options):
    '''
    Decode bencoded bytes into python objects.
    Keyword arguments are passed to decode_exact.
    '''
    return to_native(decode_exact(data, **options))
