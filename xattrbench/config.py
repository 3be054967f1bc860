"""
Benchmark Configuration Module

Holds the immutable configuration built from the command line and the
limits it is validated against.

Example:
    >>> from xattrbench.config import BenchConfig, validate_config
    >>> config = validate_config(BenchConfig(files=10, xattrs=2, size=32, verify=True))
    >>> config.files
    10
"""

import time
from dataclasses import asdict, dataclass, field

from xattrbench.errors import ConfigError

# Linux limits from <linux/limits.h>
XATTR_SIZE_MAX = 65536
PATH_MAX = 4096

XATTR_NAMESPACE = 'user.'
RANDOM_SIZE_MIN = 16

DEFAULT_PATH = '/tmp/xattrtest'
DEFAULT_SCRIPT = '/bin/true'


@dataclass(frozen=True)
class BenchConfig:
    """Configuration for one benchmark run.

    Attributes:
        verbose: Verbosity level (number of -v flags).
        verify: Verify attribute contents after reading.
        nth: Print a progress line every nth file (0 = never).
        files: Number of files to create.
        xattrs: Number of attributes per file.
        size: Bytes per attribute (upper bound when random_size is set).
        path: Directory holding the files.
        synccaches: Sync filesystems before each hook.
        dropcaches: Drop page, dentry and inode caches before each hook.
        script: Program run after each phase.
        seed: Seed for the size randomizer.
        random_size: Pick each attribute size uniformly from [16, size).
        random_value: Fill attributes with random bytes.
        keep: Skip the unlink phase.
    """

    verbose: int = 0
    verify: bool = False
    nth: int = 0
    files: int = 1000
    xattrs: int = 1
    size: int = 1
    path: str = DEFAULT_PATH
    synccaches: bool = False
    dropcaches: bool = False
    script: str = DEFAULT_SCRIPT
    seed: int = field(default_factory=lambda: int(time.time()))
    random_size: bool = False
    random_value: bool = False
    keep: bool = False

    def to_dict(self) -> dict:
        """Return the configuration as a plain dict."""
        return asdict(self)


def validate_config(config: BenchConfig) -> BenchConfig:
    """Check option combinations and ranges.

    Args:
        config: Configuration to check.

    Returns:
        The same configuration, for chaining.

    Raises:
        ConfigError: On the first violated constraint.
    """
    if config.verify and config.random_value:
        raise ConfigError("Error: -y and -R are incompatible.")

    if config.size > XATTR_SIZE_MAX:
        raise ConfigError(
            f"Error: the size may not be greater than {XATTR_SIZE_MAX}"
        )

    for name in ('files', 'xattrs', 'size'):
        if getattr(config, name) < 1:
            raise ConfigError(f"Error: --{name} must be a positive integer")

    if config.nth < 0:
        raise ConfigError("Error: --nth may not be negative")

    if config.seed < 0:
        raise ConfigError("Error: --seed may not be negative")

    if config.random_size and config.size <= RANDOM_SIZE_MIN:
        raise ConfigError(
            f"Error: -r requires a size greater than {RANDOM_SIZE_MIN}"
        )

    return config


def format_config(config: BenchConfig) -> str:
    """Render the configuration dump printed with --verbose."""
    rows = [
        ('verbose', config.verbose),
        ('verify', int(config.verify)),
        ('nth', config.nth),
        ('files', config.files),
        ('xattrs', config.xattrs),
        ('size', config.size),
        ('path', config.path),
        ('synccaches', int(config.synccaches)),
        ('dropcaches', int(config.dropcaches)),
        ('script', config.script),
        ('seed', config.seed),
        ('random size', int(config.random_size)),
        ('random value', int(config.random_value)),
        ('keep', int(config.keep)),
    ]
    lines = [f"{name + ':':<18}{value}" for name, value in rows]
    return '\n'.join(lines) + '\n\n'
