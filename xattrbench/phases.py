"""
Benchmark Phases Module

The four timed phases of an xattr benchmark run:

1. create_files: create N empty files named <path>/file-<i>
2. setxattrs: write M attributes user.<j> to each file
3. getxattrs: read every attribute back, optionally verifying it
4. unlink_files: remove the files again

Each phase stops at the first failing operation, prints its elapsed time
and then runs the post phase hook.

Example:
    >>> from xattrbench.phases import create_files, setxattrs
    >>> hook = PhaseHook(config)
    >>> create_files(config, hook)
    >>> setxattrs(config, hook)
"""

import contextlib
import errno
import logging
import os
from dataclasses import dataclass

import xattr

from xattrbench.config import BenchConfig
from xattrbench.errors import PhaseError, VerifyError
from xattrbench.hooks import PhaseHook
from xattrbench.timing import Duration, Stopwatch, format_duration
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

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


@dataclass
class PhaseResult:
    """Outcome of one completed phase."""

    phase: str
    elapsed: Duration
    files: int
    operations: int

    @property
    def ops_per_second(self) -> float:
        seconds = self.elapsed.total_seconds
        return self.operations / seconds if seconds > 0 else 0.0


def _progress(config: BenchConfig, index: int, label: str, path: str) -> None:
    if config.nth and index % config.nth == 0:
        print(f"{label} {path}")


def _report(label: str, elapsed: Duration) -> None:
    print(f"{label} {format_duration(elapsed)} seconds")


def _unlink(path: str) -> None:
    """Remove ``path``; a file that is already gone is not an error."""
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error(f"Error {e.errno}: unlink({path})")
        raise PhaseError(e.errno, 'unlink', path) from e


def create_files(config: BenchConfig, hook: PhaseHook) -> PhaseResult:
    """Create ``config.files`` empty files, replacing any that exist.

    Raises:
        PhaseError: On the first unlink, open or close failure.
        HookError: If the post phase hook fails.
    """
    with Stopwatch() as watch:
        for i in range(1, config.files + 1):
            path = file_path(config, i)
            _progress(config, i, 'create:', path)

            _unlink(path)

            try:
                fd = os.open(path, os.O_CREAT | os.O_WRONLY, FILE_MODE)
            except OSError as e:
                logger.error(f"Error {e.errno}: open({path}, O_CREAT, 0644)")
                raise PhaseError(e.errno, 'open', path) from e

            try:
                os.close(fd)
            except OSError as e:
                logger.error(f"Error {e.errno}: close({fd})")
                raise PhaseError(e.errno, 'close', path) from e

    _report('create:  ', watch.elapsed)
    hook.run('post')
    return PhaseResult('create', watch.elapsed, config.files, config.files)


def setxattrs(config: BenchConfig, hook: PhaseHook) -> PhaseResult:
    """Write ``config.xattrs`` attributes to every file.

    Existing values are overwritten. Symbolic links are not followed.

    Raises:
        PhaseError: If /dev/urandom cannot be opened, random bytes run
            short or setxattr fails.
        HookError: If the post phase hook fails.
    """
    rng = make_rng(config)

    if config.random_value:
        source_cm = RandomSource()
    else:
        source_cm = contextlib.nullcontext()

    with source_cm as source, Stopwatch() as watch:
        for i in range(1, config.files + 1):
            path = file_path(config, i)
            _progress(config, i, 'setxattr:', path)

            for j in range(1, config.xattrs + 1):
                size = attr_size(config, rng)
                name = xattr_name(j)

                if config.random_value:
                    value = random_value(source, size, path)
                else:
                    value = pattern_value(size)

                try:
                    xattr.setxattr(path, name, value, symlink=True)
                except OSError as e:
                    logger.error(f"Error {e.errno}: lsetxattr({path}, {name}, ..., {size})")
                    raise PhaseError(e.errno, 'setxattr', path) from e

    _report('setxattr:', watch.elapsed)
    hook.run('post')
    return PhaseResult('setxattr', watch.elapsed, config.files, config.files * config.xattrs)


def verify_value(config: BenchConfig, path: str, name: str, value: bytes) -> None:
    """Check ``value`` against the pattern it claims to have been written with.

    Raises:
        VerifyError: If the length or any byte differs.
    """
    size = parse_pattern_size(value)
    if size is None:
        # Values shorter than the size token can only come from a fixed size.
        size = config.size

    expected = pattern_value(size)
    if len(value) != size or value[:size] != expected:
        logger.error(
            f"Error {errno.EINVAL}: verify failed\n"
            f"verify: {expected!r}\n"
            f"value:  {value!r}"
        )
        raise VerifyError(path, name, expected, value)


def getxattrs(config: BenchConfig, hook: PhaseHook) -> PhaseResult:
    """Read every attribute back, verifying it when ``config.verify`` is set.

    Raises:
        PhaseError: If getxattr fails.
        VerifyError: On the first mismatching value.
        HookError: If the post phase hook fails.
    """
    with Stopwatch() as watch:
        for i in range(1, config.files + 1):
            path = file_path(config, i)
            _progress(config, i, 'getxattr:', path)

            for j in range(1, config.xattrs + 1):
                name = xattr_name(j)

                try:
                    value = xattr.getxattr(path, name, symlink=True)
                except OSError as e:
                    logger.error(f"Error {e.errno}: lgetxattr({path}, {name}, ...)")
                    raise PhaseError(e.errno, 'getxattr', path) from e

                if config.verify:
                    verify_value(config, path, name, value)

    _report('getxattr:', watch.elapsed)
    hook.run('post')
    return PhaseResult('getxattr', watch.elapsed, config.files, config.files * config.xattrs)


def unlink_files(config: BenchConfig, hook: PhaseHook) -> PhaseResult:
    """Remove the benchmark files; files already gone are skipped.

    Raises:
        PhaseError: On the first unlink failure other than ENOENT.
        HookError: If the post phase hook fails.
    """
    with Stopwatch() as watch:
        for i in range(1, config.files + 1):
            path = file_path(config, i)
            _progress(config, i, 'unlink:', path)
            _unlink(path)

    _report('unlink:  ', watch.elapsed)
    hook.run('post')
    return PhaseResult('unlink', watch.elapsed, config.files, config.files)
