#!/usr/bin/env python3
"""
Unit tests for attribute names, sizes and values.
"""

import errno
import os
import sys
import tempfile
import unittest
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from xattrbench.config import XATTR_SIZE_MAX, BenchConfig
from xattrbench.errors import PhaseError
from xattrbench.values import (
    RandomSource,
    attr_size,
    file_path,
    make_rng,
    parse_pattern_size,
    pattern_value,
    random_value,
    xattr_name,
)


class TestNames(unittest.TestCase):
    """Tests for file paths and attribute names."""

    def test_file_path(self):
        """Test that file paths are <path>/file-<i>."""
        config = BenchConfig(path='/mnt/test')
        self.assertEqual(file_path(config, 1), '/mnt/test/file-1')
        self.assertEqual(file_path(config, 1000), '/mnt/test/file-1000')

    def test_xattr_name(self):
        """Test that attributes live in the user namespace."""
        self.assertEqual(xattr_name(1), 'user.1')
        self.assertEqual(xattr_name(42), 'user.42')


class TestPatternValue(unittest.TestCase):
    """Tests for the deterministic value pattern."""

    def test_pattern_layout(self):
        """Test the size token followed by x filler."""
        self.assertEqual(pattern_value(12), b'size=12 xxxx')

    def test_pattern_exact_token(self):
        """Test a size equal to the token length."""
        self.assertEqual(pattern_value(7), b'size=7 ')

    def test_pattern_truncated_token(self):
        """Test that tiny sizes truncate the token."""
        self.assertEqual(pattern_value(1), b's')
        self.assertEqual(pattern_value(3), b'siz')

    def test_pattern_length(self):
        """Test that the value has exactly the requested length."""
        for size in (1, 16, 32, 4096, XATTR_SIZE_MAX):
            self.assertEqual(len(pattern_value(size)), size)

    def test_parse_size(self):
        """Test recovering the size from a pattern."""
        self.assertEqual(parse_pattern_size(pattern_value(32)), 32)
        self.assertEqual(parse_pattern_size(pattern_value(XATTR_SIZE_MAX)), XATTR_SIZE_MAX)

    def test_parse_size_without_trailing_space(self):
        """Test a value cut right after the digits."""
        self.assertEqual(parse_pattern_size(b'size=6'), 6)

    def test_parse_short_value(self):
        """Test that values too short for the token give None."""
        self.assertIsNone(parse_pattern_size(b'siz'))
        self.assertIsNone(parse_pattern_size(b'size='))

    def test_parse_random_bytes(self):
        """Test that non-pattern data gives None."""
        self.assertIsNone(parse_pattern_size(b'\x00\x01garbage'))


class TestAttrSize(unittest.TestCase):
    """Tests for fixed and randomized attribute sizes."""

    def test_fixed_size(self):
        """Test that the configured size is used as is."""
        config = BenchConfig(size=128, seed=1)
        rng = make_rng(config)
        self.assertEqual({attr_size(config, rng) for _ in range(50)}, {128})

    def test_random_size_range(self):
        """Test that random sizes stay in [16, size)."""
        config = BenchConfig(size=64, random_size=True, seed=7)
        rng = make_rng(config)
        sizes = [attr_size(config, rng) for _ in range(2000)]

        self.assertTrue(all(16 <= s < 64 for s in sizes))
        self.assertIsInstance(sizes[0], int)
        self.assertGreater(len(set(sizes)), 1)

    def test_random_size_smallest_range(self):
        """Test size 17, where only 16 is possible."""
        config = BenchConfig(size=17, random_size=True, seed=3)
        rng = make_rng(config)
        self.assertEqual({attr_size(config, rng) for _ in range(100)}, {16})

    def test_same_seed_same_sizes(self):
        """Test that a seed reproduces the size sequence."""
        config = BenchConfig(size=4096, random_size=True, seed=1234)
        first = make_rng(config)
        second = make_rng(config)
        self.assertEqual(
            [attr_size(config, first) for _ in range(20)],
            [attr_size(config, second) for _ in range(20)],
        )


class TestRandomSource(unittest.TestCase):
    """Tests for reading random bytes."""

    def test_read_requested_length(self):
        """Test that urandom yields the requested byte count."""
        with RandomSource() as source:
            for size in (1, 16, 1000, XATTR_SIZE_MAX):
                self.assertEqual(len(random_value(source, size, '/mnt/test/file-1')), size)

    def test_values_differ(self):
        """Test that two reads are not identical."""
        with RandomSource() as source:
            self.assertNotEqual(source.read(32), source.read(32))

    def test_short_source(self):
        """Test that a source hitting EOF returns fewer bytes."""
        fd, path = tempfile.mkstemp()
        try:
            os.write(fd, b'0123456789')
            os.close(fd)
            with RandomSource(path) as source:
                self.assertEqual(source.read(20), b'0123456789')
        finally:
            os.unlink(path)

    def test_short_random_value(self):
        """Test that a source running dry fails the value with EIO."""
        fd, path = tempfile.mkstemp()
        try:
            os.write(fd, b'0123456789')
            os.close(fd)
            with RandomSource(path) as source:
                with self.assertRaises(PhaseError) as ctx:
                    random_value(source, 20, '/mnt/test/file-1')
        finally:
            os.unlink(path)

        self.assertEqual(ctx.exception.errno, errno.EIO)
        self.assertEqual(ctx.exception.path, '/mnt/test/file-1')

    def test_open_failure(self):
        """Test that a missing device raises PhaseError with ENOENT."""
        with tempfile.TemporaryDirectory() as temp_dir:
            source = RandomSource(os.path.join(temp_dir, 'urandom'))
            with self.assertRaises(PhaseError) as ctx:
                with source:
                    pass

        self.assertEqual(ctx.exception.errno, errno.ENOENT)
        self.assertEqual(ctx.exception.op, 'open')
        self.assertIsNone(source._file)

    def test_closed_after_block(self):
        """Test that the device is closed when the block exits."""
        source = RandomSource()
        with source:
            handle = source._file
        self.assertTrue(handle.closed)
        self.assertIsNone(source._file)


if __name__ == '__main__':
    unittest.main()
