#!/usr/bin/env python3
"""
Tests for the KeyFinder extraction driver and the buffer loader
"""

import os
import sys
import math
import tempfile
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from wallet_keyfinder.errors import WalletIOError, KeyFinderError
from wallet_keyfinder.finder import (
    KeyFinder, KeyFound, NoKeyFound, load_buffer, SOURCE_ENTROPY, SOURCE_TAGGED
)

MKEY_WALLET = b'xxmkey' + b'\x00\x05' + b'\x01\x02\x03\x04\x05' + b'yy'
PLAIN_WALLET = b'\x01' * 10 + b'\x01\x02\x03\x04\x05' + b'\x05' * 10


class TestLoadBuffer(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)

    def test_reads_whole_file(self):
        path = os.path.join(self.temp_dir.name, 'wallet.dat')
        with open(path, 'wb') as f:
            f.write(MKEY_WALLET)
        self.assertEqual(load_buffer(path), MKEY_WALLET)

    def test_empty_file(self):
        path = os.path.join(self.temp_dir.name, 'empty.dat')
        open(path, 'wb').close()
        self.assertEqual(load_buffer(path), b'')

    def test_missing_file(self):
        path = os.path.join(self.temp_dir.name, 'missing.dat')
        with self.assertRaises(WalletIOError) as ctx:
            load_buffer(path)
        self.assertEqual(ctx.exception.path, path)
        self.assertIn(path, str(ctx.exception))
        self.assertIsInstance(ctx.exception, OSError)
        self.assertIsInstance(ctx.exception, KeyFinderError)

    def test_directory_is_not_readable(self):
        with self.assertRaises(WalletIOError):
            load_buffer(self.temp_dir.name)


class TestKeyFinder(unittest.TestCase):

    def test_tagged_strategy(self):
        result = KeyFinder('tagged').extract(MKEY_WALLET)
        self.assertIsInstance(result, KeyFound)
        self.assertEqual(result.source, SOURCE_TAGGED)
        self.assertEqual(result.key, b'\x01\x02\x03\x04\x05')
        self.assertEqual(result.offset, 2)
        self.assertAlmostEqual(result.score, math.log2(5), places=12)
        self.assertEqual(len(result.records), 1)

    def test_tagged_strategy_without_records(self):
        result = KeyFinder('tagged').extract(PLAIN_WALLET)
        self.assertIsInstance(result, NoKeyFound)
        self.assertIn('No mkey entries found', result.reason)

    def test_tagged_strategy_zero_length_record(self):
        result = KeyFinder('tagged').extract(b'mkey\x00\x00')
        self.assertIsInstance(result, KeyFound)
        self.assertEqual(result.key, b'')
        self.assertEqual(result.score, 0.0)

    def test_entropy_strategy(self):
        result = KeyFinder('entropy').extract(PLAIN_WALLET)
        self.assertIsInstance(result, KeyFound)
        self.assertEqual(result.source, SOURCE_ENTROPY)
        self.assertEqual(result.offset, 10)
        self.assertEqual(result.key, b'\x01\x02\x03\x04\x05')
        self.assertEqual(result.records, ())

    def test_entropy_strategy_ignores_records(self):
        result = KeyFinder('entropy').extract(MKEY_WALLET)
        self.assertEqual(result.source, SOURCE_ENTROPY)

    def test_entropy_strategy_short_buffer(self):
        result = KeyFinder('entropy').extract(b'\x01\x02')
        self.assertIsInstance(result, NoKeyFound)

    def test_auto_prefers_tagged_records(self):
        result = KeyFinder('auto').extract(MKEY_WALLET)
        self.assertEqual(result.source, SOURCE_TAGGED)

    def test_auto_falls_back_to_entropy(self):
        result = KeyFinder('auto').extract(PLAIN_WALLET)
        self.assertEqual(result.source, SOURCE_ENTROPY)
        self.assertEqual(result.offset, 10)

    def test_auto_short_buffer_without_records(self):
        result = KeyFinder('auto').extract(b'abc')
        self.assertIsInstance(result, NoKeyFound)

    def test_custom_marker_and_window(self):
        buffer = b'..ckey\x00\x04\xDE\xAD\xBE\xEF..'
        result = KeyFinder('tagged', marker=b'ckey', window_len=3).extract(buffer)
        self.assertEqual(result.key, b'\xDE\xAD\xBE')

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            KeyFinder('random')
        with self.assertRaises(ValueError):
            KeyFinder(window_len=0)
        with self.assertRaises(ValueError):
            KeyFinder(marker=b'mk')

    def test_check_structure(self):
        finder = KeyFinder()
        check = finder.check_structure(MKEY_WALLET + b'mkey\x00\x09\x01')
        self.assertEqual(check['size'], len(MKEY_WALLET) + 7)
        self.assertEqual(check['records'], 1)
        self.assertEqual(check['truncated_at'], len(MKEY_WALLET))
        self.assertEqual(finder.truncated_at, len(MKEY_WALLET))


if __name__ == '__main__':
    unittest.main()
