'''
Encode values to canonical bencoded bytes.
'''

from leetbenc.value import Value, Str, Int, List, Dict

def encode_length(data):
    return str(len(data)).encode('ascii')+b':'+data

def encode_str(string, result, stack):
    result.append(encode_length(string.data))

def encode_int(number, result, stack):
    result.append(b'i'+str(number.number).encode('ascii')+b'e')

def encode_list(list_, result, stack):
    '''
    Write list opener and schedule its elements followed by the terminator.
    '''
    result.append(b'l')
    stack.append(b'e')
    stack.extend(reversed(list_.items))

def encode_dict(dic, result, stack):
    '''
    Write dictionary opener and schedule its pairs in ascending key order.
    '''
    result.append(b'd')
    stack.append(b'e')
    for key, val in reversed(list(dic.items())):
        stack.append(val)
        stack.append(encode_length(key))

ENCODE_FUNCS = {}
ENCODE_FUNCS[Str] = encode_str
ENCODE_FUNCS[Int] = encode_int
ENCODE_FUNCS[List] = encode_list
ENCODE_FUNCS[Dict] = encode_dict

def encode(value):
    '''
    Encode value using bencode.
    Containers are walked with an explicit stack, so nesting depth is not
    limited by the interpreter's recursion limit. Bytes on the stack are
    already encoded pieces (keys and terminators).
    '''
    if not isinstance(value, Value):
        raise TypeError('Can\'t encode \'{}\' object. Must be Value'.format(type(value).__name__))
    result = []
    stack = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, bytes):
            result.append(item)
            continue
        try:
            func = ENCODE_FUNCS[type(item)]
        except KeyError:
            raise TypeError('Can\'t encode \'{}\' object.'.format(type(item).__name__)) from None
        func(item, result, stack)
    return b''.join(result)
