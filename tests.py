import os
import unittest
import tempfile
import mock
from leetbenc import config
from leetbenc.value import Str, Int, List, Dict, INT_MIN, INT_MAX
from leetbenc.decoder import decode, decode_exact
from leetbenc.encoder import encode
from leetbenc.convert import to_value, to_native, bencode, bdecode
from leetbenc.errors import (
    DecodeError, UnexpectedEof, InvalidTypePrefix, InvalidLengthPrefix,
    TruncatedString, MalformedInteger, MissingTerminator,
    DuplicateKeyPolicyViolation, KeyOrderViolation, DepthExceeded, TrailingData
)

TORRENT_FRAGMENT = (b'd8:announce39:http://torrent.ubuntu.com:6969/announce13:announce-listll39:'
                    b'http://torrent.ubuntu.com:6969/announceel44:http://ipv6.torrent.ubuntu.com:'
                    b'6969/announceee7:comment29:Ubuntu CD releases.ubuntu.com13:creation datei1445507299ee')

class DefaultConfigTestCase(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.multiple(
            'leetbenc.config', MAX_DEPTH=256, DUPLICATE_KEYS='last', SORTED_KEYS=False)
        patcher.start()
        self.addCleanup(patcher.stop)

class TestValue(unittest.TestCase):
    def test_empty_values_are_distinct(self):
        self.assertNotEqual(Str(b''), List([]))
        self.assertNotEqual(Str(b''), Dict({}))
        self.assertNotEqual(List([]), Dict({}))
        self.assertNotEqual(Int(1), Str(b'1'))
        self.assertNotEqual(Str(b'spam'), b'spam')
        self.assertEqual(Str(b'spam'), Str(bytearray(b'spam')))
        self.assertEqual(List([Int(1), Str(b'a')]), List((Int(1), Str(b'a'))))
        self.assertNotEqual(List([Int(1), Int(2)]), List([Int(2), Int(1)]))

    def test_wrong_types(self):
        self.assertRaises(TypeError, Str, 'text')
        self.assertRaises(TypeError, Str, None)
        self.assertRaises(TypeError, Int, True)
        self.assertRaises(TypeError, Int, 1.5)
        self.assertRaises(TypeError, Int, '1')
        self.assertRaises(TypeError, List, [1, 2])
        self.assertRaises(TypeError, Dict, {'a': Int(1)})
        self.assertRaises(TypeError, Dict, {b'a': 1})

    def test_int_range(self):
        self.assertEqual(Int(INT_MAX).number, 2**63-1)
        self.assertEqual(Int(INT_MIN).number, -2**63)
        self.assertRaises(OverflowError, Int, 2**63)
        self.assertRaises(OverflowError, Int, -2**63-1)

    def test_dict_order(self):
        dic = Dict([(b'b', Int(1)), (b'ab', Int(2)), (b'\xff', Int(3)), (b'B', Int(4)), (b'a', Int(5))])
        self.assertEqual(list(dic.keys()), [b'B', b'a', b'ab', b'b', b'\xff'])
        self.assertEqual(list(dic), [b'B', b'a', b'ab', b'b', b'\xff'])
        self.assertEqual(Dict([(b'a', Int(1)), (b'a', Int(2))]), Dict({b'a': Int(2)}))
        self.assertEqual(Dict({b'b': Int(1), b'a': Int(2)}), Dict({b'a': Int(2), b'b': Int(1)}))

    def test_accessors(self):
        list_ = List([Int(1), Str(b'two')])
        self.assertEqual(len(list_), 2)
        self.assertEqual(list_[1], Str(b'two'))
        self.assertEqual(list(list_), [Int(1), Str(b'two')])
        self.assertEqual(list_.items, (Int(1), Str(b'two')))
        dic = Dict({b'cow': Str(b'moo')})
        self.assertEqual(len(dic), 1)
        self.assertEqual(dic[b'cow'], Str(b'moo'))
        self.assertEqual(dic.get(b'pig'), None)
        self.assertTrue(b'cow' in dic)
        self.assertFalse('cow' in dic)
        self.assertRaises(KeyError, dic.__getitem__, b'pig')
        self.assertRaises(TypeError, dic.__getitem__, 'cow')
        self.assertEqual(len(Str(b'spam')), 4)

    def test_hash(self):
        self.assertEqual(len({Str(b'x'), Str(b'x'), List([]), Dict({}), Str(b'')}), 4)
        self.assertEqual(hash(Dict({b'a': List([Int(1)])})), hash(Dict({b'a': List([Int(1)])})))

    def test_repr(self):
        self.assertEqual(repr(Str(b'x')), "Str(b'x')")
        self.assertEqual(repr(Int(-3)), 'Int(-3)')
        self.assertEqual(repr(List([Str(b'x')])), "List([Str(b'x')])")
        self.assertEqual(repr(Dict({b'a': Int(1), b'b': List([])})), "Dict({b'a': Int(1), b'b': List([])})")

class TestDecoder(DefaultConfigTestCase):
    def test_decode_strings(self):
        self.assertEqual(decode(b'0:'), (Str(b''), b''))
        self.assertEqual(decode(b'4:spam'), (Str(b'spam'), b''))
        self.assertEqual(decode(b'3:\x00\xff\x80'), (Str(b'\x00\xff\x80'), b''))
        self.assertEqual(decode(b'12:Hello, World'), (Str(b'Hello, World'), b''))

    def test_decode_integers(self):
        self.assertEqual(decode(b'i0e'), (Int(0), b''))
        self.assertEqual(decode(b'i-1e'), (Int(-1), b''))
        self.assertEqual(decode(b'i58230596782467402e'), (Int(58230596782467402), b''))
        self.assertEqual(decode(b'i9223372036854775807e'), (Int(INT_MAX), b''))
        self.assertEqual(decode(b'i-9223372036854775808e'), (Int(INT_MIN), b''))

    def test_decode_containers(self):
        self.assertEqual(decode(b'le'), (List([]), b''))
        self.assertEqual(decode(b'de'), (Dict({}), b''))
        self.assertEqual(decode(b'l4:spam4:eggse'), (List([Str(b'spam'), Str(b'eggs')]), b''))
        self.assertEqual(decode(b'd3:cow3:moo4:spam4:eggse'),
                         (Dict({b'cow': Str(b'moo'), b'spam': Str(b'eggs')}), b''))
        self.assertEqual(decode(b'd1:Ali0ei1ee1:B5:Helloe')[0],
                         Dict({b'A': List([Int(0), Int(1)]), b'B': Str(b'Hello')}))
        self.assertEqual(decode(b'lli1eee')[0], List([List([Int(1)])]))
        self.assertEqual(decode(b'l0:ledee')[0], List([Str(b''), List([]), Dict({})]))

    def test_decode_returns_rest(self):
        self.assertEqual(decode(b'i3e4:kakali74ed3:gag1:ge8:umbrellae'),
                         (Int(3), b'4:kakali74ed3:gag1:ge8:umbrellae'))
        self.assertEqual(decode(b'4:spamxyz'), (Str(b'spam'), b'xyz'))

    def test_decode_input_types(self):
        self.assertEqual(decode(bytearray(b'i7e')), (Int(7), b''))
        self.assertEqual(decode(memoryview(b'1:ax')), (Str(b'a'), b'x'))
        self.assertRaises(TypeError, decode, '4:spam')
        self.assertRaises(TypeError, decode, None)
        self.assertRaises(TypeError, decode, [1, 2])

    def test_unsorted_and_duplicate_keys(self):
        dic, _ = decode(b'd4:spam4:eggs3:cow3:mooe')
        self.assertEqual(list(dic.keys()), [b'cow', b'spam'])
        self.assertEqual(decode(b'd1:ai1e1:ai2ee')[0], Dict({b'a': Int(2)}))
        with mock.patch('leetbenc.decoder.logging') as log:
            decode(b'd1:ai1e1:bi3e1:ai2ee')
            self.assertTrue(log.debug.called)
        self.assertRaises(DuplicateKeyPolicyViolation, decode, b'd1:ai1e1:ai2ee', duplicate_keys='error')
        self.assertRaises(KeyOrderViolation, decode, b'd1:bi1e1:ai2ee', sorted_keys=True)
        self.assertRaises(KeyOrderViolation, decode, b'd1:ai1e1:ai2ee', sorted_keys=True)
        self.assertEqual(decode(b'd1:ai1e1:bi2ee', sorted_keys=True)[0],
                         Dict({b'a': Int(1), b'b': Int(2)}))

    def test_config_defaults(self):
        with mock.patch('leetbenc.config.DUPLICATE_KEYS', 'error'):
            self.assertRaises(DuplicateKeyPolicyViolation, decode, b'd1:ai1e1:ai2ee')
        with mock.patch('leetbenc.config.SORTED_KEYS', True):
            self.assertRaises(KeyOrderViolation, decode, b'd1:bi1e1:ai2ee')
        with mock.patch('leetbenc.config.MAX_DEPTH', 2):
            self.assertEqual(decode(b'llee')[0], List([List([])]))
            self.assertRaises(DepthExceeded, decode, b'llleee')

    def test_bad_options(self):
        self.assertRaises(ValueError, decode, b'le', max_depth=0)
        self.assertRaises(ValueError, decode, b'le', max_depth='10')
        self.assertRaises(ValueError, decode, b'le', duplicate_keys='first')

    def test_eof(self):
        for data in (b'', b'i', b'i12', b'i-', b'4', b'42', b'd1:a', b'l1'):
            self.assertRaises(UnexpectedEof, decode, data)

    def test_invalid_type_prefix(self):
        for data in (b'x', b'e', b'-1:a', b'd1:ae', b'l3:fo4:reste', b'li1ex'):
            self.assertRaises(InvalidTypePrefix, decode, data)

    def test_invalid_length_prefix(self):
        for data in (b'04:spam', b'00:', b'4spam', b'd-1:ai1ee', b'di1ei2ee',
                     b'dla3gaae', b'99999999999999999999:a', b'9223372036854775808:a'):
            self.assertRaises(InvalidLengthPrefix, decode, data)

    def test_truncated_string(self):
        for data in (b'5:abc', b'1:', b'l3:den6:jjae', b'9223372036854775807:a'):
            self.assertRaises(TruncatedString, decode, data)

    def test_malformed_integer(self):
        for data in (b'i04e', b'i-0e', b'i00e', b'i-01e', b'ie', b'i-e', b'i+1e', b'i 1e',
                     b'i1.5e', b'i9223372036854775808e', b'i-9223372036854775809e',
                     b'i123456789012345678901234567890e'):
            self.assertRaises(MalformedInteger, decode, data)

    def test_missing_terminator(self):
        for data in (b'l', b'd', b'l4:spam', b'd3:cow3:moo', b'lli1ee', b'l3:den4:jaja'):
            self.assertRaises(MissingTerminator, decode, data)

    def test_error_details(self):
        with self.assertRaises(MalformedInteger) as context:
            decode(b'l4:spami04ee')
        self.assertEqual(context.exception.offset, 7)
        self.assertTrue(str(context.exception).endswith('at offset 7'))
        with self.assertRaises(TruncatedString) as context:
            decode(b'5:abc')
        self.assertEqual(context.exception.offset, 2)
        for error in (UnexpectedEof, InvalidTypePrefix, InvalidLengthPrefix, TruncatedString,
                      MalformedInteger, MissingTerminator, DuplicateKeyPolicyViolation,
                      KeyOrderViolation, DepthExceeded, TrailingData):
            self.assertTrue(issubclass(error, DecodeError))
        self.assertTrue(issubclass(DecodeError, ValueError))

    def test_depth_guard(self):
        self.assertEqual(decode(b'llleee', max_depth=3)[0], List([List([List([])])]))
        self.assertRaises(DepthExceeded, decode, b'lllleeee', max_depth=3)
        self.assertRaises(DepthExceeded, decode, b'd1:ad1:ad1:adeeee', max_depth=3)
        with mock.patch('leetbenc.decoder.logging') as log:
            with self.assertRaises(DepthExceeded) as context:
                decode(b'l'*100000)
            self.assertTrue(log.warning.called)
        self.assertEqual(context.exception.offset, 256)

    def test_recursion_limit(self):
        data = b'l'*100000+b'e'*100000
        with mock.patch('leetbenc.decoder.logging'):
            self.assertRaises(DepthExceeded, decode, data, max_depth=10**6)

    def test_decode_exact(self):
        self.assertEqual(decode_exact(b'4:spam'), Str(b'spam'))
        with self.assertRaises(TrailingData) as context:
            decode_exact(b'i1ei2e')
        self.assertEqual(context.exception.offset, 3)
        self.assertRaises(TrailingData, decode_exact, b'4:spamx')
        self.assertRaises(TruncatedString, decode_exact, b'5:abc')

    def test_torrent_fragment(self):
        result = decode_exact(TORRENT_FRAGMENT)
        self.assertEqual(result[b'announce'], Str(b'http://torrent.ubuntu.com:6969/announce'))
        self.assertEqual(result[b'creation date'], Int(1445507299))
        self.assertEqual(len(result[b'announce-list']), 2)
        self.assertEqual(encode(result), TORRENT_FRAGMENT)

class TestEncoder(unittest.TestCase):
    def test_encode_scalars(self):
        self.assertEqual(encode(Str(b'')), b'0:')
        self.assertEqual(encode(Str(b'spam')), b'4:spam')
        self.assertEqual(encode(Str(b'\x00\xff')), b'2:\x00\xff')
        self.assertEqual(encode(Int(0)), b'i0e')
        self.assertEqual(encode(Int(-1)), b'i-1e')
        self.assertEqual(encode(Int(1000)), b'i1000e')
        self.assertEqual(encode(Int(INT_MIN)), b'i-9223372036854775808e')

    def test_encode_containers(self):
        self.assertEqual(encode(List([])), b'le')
        self.assertEqual(encode(Dict({})), b'de')
        self.assertEqual(encode(List([Int(0), Int(1), Int(2), Int(3)])), b'li0ei1ei2ei3ee')
        self.assertEqual(encode(List([Str(b'Hello,'), Str(b' '), Str(b'World!')])), b'l6:Hello,1: 6:World!e')
        self.assertEqual(encode(Dict({b'dus': Int(10000), b'cow': Int(0)})), b'd3:cowi0e3:dusi10000ee')
        self.assertEqual(encode(Dict({b'b': Int(1), b'ab': Int(2), b'B': Int(3), b'a': Int(4)})),
                         b'd1:Bi3e1:ai4e2:abi2e1:bi1ee')
        self.assertEqual(encode(List([Str(b''), List([]), Dict({b'x': List([Dict({})])})])),
                         b'l0:led1:xldeeee')

    def test_encode_wrong_type(self):
        self.assertRaises(TypeError, encode, b'spam')
        self.assertRaises(TypeError, encode, 5)
        self.assertRaises(TypeError, encode, None)
        self.assertRaises(TypeError, encode, {b'a': Int(1)})

    def test_encode_deep_value(self):
        value = List([])
        for _ in range(10000):
            value = List([value])
        self.assertEqual(encode(value), b'l'*10001+b'e'*10001)

class TestRoundTrip(DefaultConfigTestCase):
    def test_values(self):
        values = [
            Str(b''), Str(b'\x00binary\xff'), Int(0), Int(INT_MAX), Int(INT_MIN),
            List([]), Dict({}), List([Str(b''), List([]), Dict({})]),
            Dict({b'info': Dict({b'name': Str(b'file'), b'length': Int(1178386432),
                                 b'pieces': Str(b'\xaa'*40)}),
                  b'announce-list': List([List([Str(b'udp://a')]), List([])])})
        ]
        for value in values:
            self.assertEqual(decode(encode(value)), (value, b''))

    def test_canonical_bytes(self):
        for data in (b'0:', b'i-42e', b'le', b'de', b'd3:cow3:moo4:spam4:eggse',
                     b'd1:ad1:bl0:i0edeeee', TORRENT_FRAGMENT):
            self.assertEqual(encode(decode_exact(data)), data)

class TestConvert(DefaultConfigTestCase):
    def test_bencode_correct_type(self):
        self.assertEqual(bencode('Hello, World'), b'12:Hello, World')
        self.assertEqual(bencode(('Hello, World', 72, [2, 1])), b'l12:Hello, Worldi72eli2ei1eee')
        self.assertEqual(bencode(58230596782467402), b'i58230596782467402e')
        self.assertEqual(bencode({'foo': 'bar', 'hello': 6, 'test': [2, 3, 1488], 'yo': {'Root': 'Head'}}),
                         b'd3:foo3:bar5:helloi6e4:testli2ei3ei1488ee2:yod4:Root4:Headee')
        self.assertEqual(bencode([1, 2, 3, '19', 'Jonas', {'Foxtrot': 'Uniform', 'Charlie': ['Kilo']}]),
                         b'li1ei2ei3e2:195:Jonasd7:Charliel4:Kiloe7:Foxtrot7:Uniformee')
        self.assertEqual(bencode({b'\xff': bytearray(b'x'), 'a': Int(1)}), b'd1:ai1e1:\xff1:xe')
        self.assertEqual(bencode('привет'), b'12:'+'привет'.encode('utf-8'))

    def test_bencode_wrong_type(self):
        self.assertRaises(TypeError, bencode, None)
        self.assertRaises(TypeError, bencode, {1, 2, 3})
        self.assertRaises(TypeError, bencode, True)
        self.assertRaises(TypeError, bencode, 1.5)
        self.assertRaises(TypeError, bencode, {'lala': 2, 'jones': False})
        self.assertRaises(TypeError, bencode, {1: 2})
        self.assertRaises(OverflowError, bencode, 2**64)

    def test_bdecode(self):
        self.assertEqual(bdecode(b'd3:foo3:bar5:helloi6e4:testli2ei3ei1488ee2:yod4:Root4:Headee'),
                         {b'foo': b'bar', b'hello': 6, b'test': [2, 3, 1488], b'yo': {b'Root': b'Head'}})
        self.assertEqual(bdecode(b'li1ei2ei3ee'), [1, 2, 3])
        self.assertEqual(bdecode(b'0:'), b'')
        self.assertRaises(TrailingData, bdecode, b'i1ei2e')
        self.assertRaises(DuplicateKeyPolicyViolation, bdecode, b'd1:ai1e1:ai2ee', duplicate_keys='error')

    def test_bdecode_incorrect_string(self):
        for data in (b'l3:den6:jjae', b'di666e5:lalal3:keke', b'di666e5:lalal', b'l3:den4:jaja',
                     b'dli666e4:liste5:lalale', b'l3:fo4:reste', b'dla3gaae'):
            self.assertRaises(ValueError, bdecode, data)

    def test_to_value_and_back(self):
        value = Str(b'x')
        self.assertIs(to_value(value), value)
        self.assertEqual(to_value({'a': [1, b'b']}), Dict({b'a': List([Int(1), Str(b'b')])}))
        self.assertEqual(to_native(Dict({b'a': List([Int(1), Str(b'b')])})), {b'a': [1, b'b']})
        self.assertRaises(TypeError, to_native, 5)
        self.assertRaises(TypeError, to_native, b'x')

class TestConfig(unittest.TestCase):
    def write_config(self, folder, text):
        path = os.path.join(folder, 'config.ini')
        with open(path, 'w') as config_file:
            config_file.write(text)
        return path

    def test_shipped_defaults(self):
        self.assertEqual(config.load_config(config.CONFIG_PATHS[:1]), (256, 'last', False))

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as folder:
            path = os.path.join(folder, 'nothing.ini')
            self.assertEqual(config.load_config([path]), (256, 'last', False))

    def test_override(self):
        with tempfile.TemporaryDirectory() as folder:
            path = self.write_config(folder, '[DECODER]\nMaxDepth = 10\nDuplicateKeys = Error\nSortedKeys = yes\n')
            self.assertEqual(config.load_config(config.CONFIG_PATHS[:1]+[path]), (10, 'error', True))
            path = self.write_config(folder, '[DECODER]\nMaxDepth = 32\n')
            self.assertEqual(config.load_config([path]), (32, 'last', False))

    def test_bad_values(self):
        with tempfile.TemporaryDirectory() as folder:
            path = self.write_config(folder, '[DECODER]\nMaxDepth = -5\nDuplicateKeys = first\nSortedKeys = maybe\n')
            with mock.patch('leetbenc.config.logging') as log:
                self.assertEqual(config.load_config([path]), (256, 'last', False))
                self.assertEqual(log.warning.call_count, 3)
            path = self.write_config(folder, '[DECODER]\nMaxDepth = many\n')
            with mock.patch('leetbenc.config.logging') as log:
                self.assertEqual(config.load_config([path])[0], 256)
                self.assertTrue(log.warning.called)

    def test_percent_value(self):
        with tempfile.TemporaryDirectory() as folder:
            path = self.write_config(folder, '[DECODER]\nMaxDepth = 100%\nDuplicateKeys = %(x)s\n')
            with mock.patch('leetbenc.config.logging') as log:
                self.assertEqual(config.load_config([path]), (256, 'last', False))
                self.assertEqual(log.warning.call_count, 2)

    def test_unparsable_file_is_skipped(self):
        with tempfile.TemporaryDirectory() as folder:
            good = os.path.join(folder, 'good.ini')
            with open(good, 'w') as config_file:
                config_file.write('[DECODER]\nMaxDepth = 12\n')
            for text in ('port = 8080\n', '[DECODER]\nMaxDepth = 5\n[DECODER]\nMaxDepth = 6\n',
                         '[DECODER]\nMaxDepth = 5\nthis line has no separator\n'):
                path = self.write_config(folder, text)
                with mock.patch('leetbenc.config.logging') as log:
                    self.assertEqual(config.load_config([good, path]), (12, 'last', False))
                    self.assertEqual(log.warning.call_count, 1)
            path = os.path.join(folder, 'config.ini')
            with open(path, 'wb') as config_file:
                config_file.write(b'[DECODER]\nMaxDepth = \xff\xfe\n')
            with mock.patch('leetbenc.config.logging') as log:
                self.assertEqual(config.load_config([good, path]), (12, 'last', False))
                self.assertTrue(log.warning.called)

if __name__ == '__main__':
    unittest.main()
