"""
Attribute Value Generation Module

Names, sizes and contents of the attributes written by the benchmark. The
deterministic pattern is ``b"size=<n> "`` followed by ``x`` filler, cut to
``n`` bytes, so a reader can recover ``n`` and rebuild the expected value.

Example:
    >>> from xattrbench.values import pattern_value, parse_pattern_size
    >>> pattern_value(12)
    b'size=12 xxxx'
    >>> parse_pattern_size(b'size=12 xxxx')
    12
"""

import errno
import logging
import re
from typing import Optional

import numpy as np

from xattrbench.config import RANDOM_SIZE_MIN, XATTR_NAMESPACE, BenchConfig
from xattrbench.errors import PhaseError

logger = logging.getLogger(__name__)

FILLER = b'x'
RANDOM_SOURCE_PATH = '/dev/urandom'

_SIZE_TOKEN = re.compile(rb'^size=(\d+)')


def file_path(config: BenchConfig, index: int) -> str:
    """Path of file number ``index`` (1-based)."""
    return f"{config.path}/file-{index}"


def xattr_name(index: int) -> str:
    """Namespaced name of attribute number ``index`` (1-based)."""
    return f"{XATTR_NAMESPACE}{index}"


def make_rng(config: BenchConfig) -> np.random.Generator:
    """Seeded generator used for attribute sizes."""
    return np.random.default_rng(config.seed)


def attr_size(config: BenchConfig, rng: np.random.Generator) -> int:
    """Logical size of the next attribute.

    Returns the configured size, or a value drawn uniformly from
    [16, size) when size randomization is enabled.
    """
    if config.random_size:
        return int(rng.integers(RANDOM_SIZE_MIN, config.size))
    return config.size


def pattern_value(size: int) -> bytes:
    """Deterministic value of ``size`` bytes."""
    prefix = f"size={size} ".encode('ascii')
    if size <= len(prefix):
        return prefix[:size]
    return prefix + FILLER * (size - len(prefix))


def parse_pattern_size(value: bytes) -> Optional[int]:
    """Recover the logical size from a pattern value.

    Returns:
        The size from the leading ``size=<n>`` token, or None when the value
        is too short to hold one.
    """
    match = _SIZE_TOKEN.match(value)
    if match is None:
        return None
    return int(match.group(1))


class RandomSource:
    """Reads random bytes from /dev/urandom.

    The device stays open for the lifetime of the ``with`` block, one block
    per phase. Failing to open it raises PhaseError.

    Example:
        >>> with RandomSource() as source:
        ...     data = source.read(64)
    """

    def __init__(self, path: str = RANDOM_SOURCE_PATH):
        self.path = path
        self._file = None

    def __enter__(self) -> 'RandomSource':
        try:
            self._file = open(self.path, 'rb', buffering=0)
        except OSError as e:
            logger.error(f"Error {e.errno}: open({self.path})")
            raise PhaseError(e.errno, 'open', self.path) from e
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def read(self, nbytes: int) -> bytes:
        """Read up to ``nbytes`` bytes, looping over short reads.

        Stops early only on end of file or a read error, in which case the
        returned buffer is shorter than requested.
        """
        chunks = []
        remaining = nbytes
        while remaining > 0:
            try:
                chunk = self._file.read(remaining)
            except OSError as e:
                logger.debug(f"read({self.path}) failed after {nbytes - remaining} bytes: {e}")
                break
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b''.join(chunks)


def random_value(source: RandomSource, size: int, path: str) -> bytes:
    """Exactly ``size`` random bytes for an attribute of ``path``.

    Raises:
        PhaseError: With EIO if the source ran dry.
    """
    value = source.read(size)
    if len(value) < size:
        logger.error(f"Error {errno.EIO}: get_random_bytes() wanted {size} got {len(value)}")
        raise PhaseError(errno.EIO, 'get_random_bytes', path)
    return value
