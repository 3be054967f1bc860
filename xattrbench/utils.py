"""
Utility Functions Module

This module provides common utility functions used throughout the xattrbench
package, including logging setup, formatting and system information for
reproducible benchmark runs.

Example:
    >>> from xattrbench.utils import format_bytes, setup_logging
    >>> setup_logging('DEBUG')
    >>> format_bytes(16 * 1024 ** 3)
    '16.0 GiB'
"""

import logging
import os
import platform
from pathlib import Path
from typing import Optional, Union

import psutil

DEFAULT_FORMAT = 'xattrbench: %(filename)s:%(lineno)d: %(funcName)s: %(message)s'


def setup_logging(
    level: Union[str, int] = logging.WARNING,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """Configure logging for xattrbench.

    Diagnostics go to standard error so they never mix with the progress
    and timing lines on standard output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file.
        format_string: Optional custom format string.

    Returns:
        Configured root logger.

    Example:
        >>> logger = setup_logging('DEBUG', 'xattrbench.log')
        >>> logger.info("Benchmark started")
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    # Convert string level to int if needed
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # Console handler (stderr)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(format_string))
    root_logger.addHandler(console_handler)

    # File handler (optional)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        root_logger.addHandler(file_handler)

    return root_logger


def format_bytes(size_bytes: int) -> str:
    """Render a byte count in binary units for the system info dump.

    Counts below 1 KiB are printed as whole bytes.

    Example:
        >>> format_bytes(1536)
        '1.5 KiB'
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    size = float(size_bytes)
    for unit in ('KiB', 'MiB', 'GiB'):
        size /= 1024
        if size < 1024:
            break
    return f"{size:.1f} {unit}"


def find_mount(path: Union[str, Path]) -> dict:
    """Find the mounted filesystem holding ``path``.

    Returns:
        Dict with mountpoint, device and fstype ('unknown' if not found).
    """
    target = os.path.realpath(path)
    best = {'mountpoint': 'unknown', 'device': 'unknown', 'fstype': 'unknown'}
    best_len = -1

    for part in psutil.disk_partitions(all=True):
        mountpoint = part.mountpoint
        prefix = mountpoint.rstrip('/') + '/'
        if target == mountpoint or target.startswith(prefix):
            if len(mountpoint) > best_len:
                best_len = len(mountpoint)
                best = {
                    'mountpoint': mountpoint,
                    'device': part.device,
                    'fstype': part.fstype,
                }

    return best


def get_system_info(path: Union[str, Path]) -> dict:
    """Get system information for benchmark reproducibility.

    Args:
        path: Benchmark directory; its filesystem is reported.

    Returns:
        Dict with system details.
    """
    return {
        'os': platform.system(),
        'os_release': platform.release(),
        'python_version': platform.python_version(),
        'cpu_count': psutil.cpu_count(logical=True) or 1,
        'ram_total': psutil.virtual_memory().total,
        'filesystem': find_mount(path),
    }


def format_system_info(info: dict) -> str:
    """Render get_system_info() output for the verbose dump."""
    fs = info['filesystem']
    rows = [
        ('os', f"{info['os']} {info['os_release']}"),
        ('python', info['python_version']),
        ('cpus', info['cpu_count']),
        ('memory', format_bytes(info['ram_total'])),
        ('mountpoint', fs['mountpoint']),
        ('device', fs['device']),
        ('fstype', fs['fstype']),
    ]
    lines = [f"{name + ':':<18}{value}" for name, value in rows]
    return '\n'.join(lines) + '\n\n'
