"""
Error Types Module

Every failure in xattrbench is raised as an XattrBenchError carrying the
errno (or child exit status) that the command line tool exits with.

Example:
    >>> from xattrbench.errors import PhaseError
    >>> try:
    ...     raise PhaseError(13, 'open', '/tmp/xattrtest/file-1')
    ... except PhaseError as e:
    ...     print(e.errno)
    13
"""

import errno as errno_codes
import os
from typing import Optional


class XattrBenchError(Exception):
    """Base class for all xattrbench failures.

    Attributes:
        errno: Exit status reported to the shell.
    """

    def __init__(self, message: str, errno: int = 1):
        super().__init__(message)
        self.errno = errno


class ConfigError(XattrBenchError):
    """Raised when command line options conflict or are out of range."""

    def __init__(self, message: str):
        super().__init__(message, errno=1)


class PhaseError(XattrBenchError):
    """Raised when a file or attribute operation fails during a phase.

    Attributes:
        op: Name of the failing operation (unlink, open, setxattr, ...).
        path: File the operation was applied to.
    """

    def __init__(self, errno: int, op: str, path: str, message: Optional[str] = None):
        if message is None:
            message = f"Error {errno}: {op}({path}): {os.strerror(errno)}"
        super().__init__(message, errno=errno)
        self.op = op
        self.path = path


class VerifyError(PhaseError):
    """Raised when a read back attribute does not match the written pattern."""

    def __init__(self, path: str, name: str, expected: bytes, actual: bytes):
        super().__init__(
            errno_codes.EINVAL,
            'verify',
            path,
            f"Error {errno_codes.EINVAL}: verify failed for {path} {name}",
        )
        self.name = name
        self.expected = expected
        self.actual = actual


class HookError(XattrBenchError):
    """Raised when the post phase hook cannot drop caches or the script fails."""
