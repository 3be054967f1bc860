"""
xattrbench - Extended Attribute Benchmark and Correctness Test

Creates N files, sets M extended attributes of S bytes on each, reads them
back with optional verification of a stored pattern, and removes the files.
Every phase is timed and may be followed by a cache sync, a cache drop and
an external script.

Main Components:
    - BenchConfig: Immutable run configuration
    - XattrBenchmark: Runs the phases in order
    - PhaseHook: Sync, drop caches and run a script between phases
    - create_files, setxattrs, getxattrs, unlink_files: The timed phases

Example:
    >>> from xattrbench import BenchConfig, XattrBenchmark
    >>> config = BenchConfig(files=10, xattrs=2, size=32, verify=True)
    >>> XattrBenchmark(config).run()
"""

__version__ = "1.0.0"

from xattrbench.config import BenchConfig, validate_config
from xattrbench.errors import (
    ConfigError,
    HookError,
    PhaseError,
    VerifyError,
    XattrBenchError,
)
from xattrbench.hooks import PhaseHook
from xattrbench.phases import (
    PhaseResult,
    create_files,
    getxattrs,
    setxattrs,
    unlink_files,
)
from xattrbench.benchmark import XattrBenchmark

__all__ = [
    # Classes
    "BenchConfig",
    "XattrBenchmark",
    "PhaseHook",
    "PhaseResult",
    # Phases
    "create_files",
    "setxattrs",
    "getxattrs",
    "unlink_files",
    "validate_config",
    # Errors
    "XattrBenchError",
    "ConfigError",
    "PhaseError",
    "VerifyError",
    "HookError",
    # Metadata
    "__version__",
]
