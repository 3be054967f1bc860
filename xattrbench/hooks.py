"""
Phase Hook Module

Runs between benchmark phases: optionally syncs filesystems, drops the
kernel page, dentry and inode caches, then runs a user supplied script with
the phase label as its only argument.

Dropping caches requires root. Linux exposes the control interface at
/proc/sys/vm/drop_caches; writing "3" frees page cache plus dentries and
inodes.

Example:
    >>> from xattrbench.hooks import PhaseHook
    >>> hook = PhaseHook(config)
    >>> hook.run('post')
"""

import logging
import os
import subprocess

from xattrbench.config import BenchConfig
from xattrbench.errors import HookError

logger = logging.getLogger(__name__)

DROP_CACHES_PATH = '/proc/sys/vm/drop_caches'
DROP_CACHES_VALUE = '3'

# Status reported for a child that was killed or could not be executed,
# matching a child that called _exit(-1).
ABNORMAL_EXIT_STATUS = 255


def drop_caches(path: str = DROP_CACHES_PATH) -> None:
    """Ask the kernel to drop clean caches.

    Raises:
        HookError: If the control file cannot be opened, written or closed.
    """
    try:
        with open(path, 'w') as f:
            f.write(DROP_CACHES_VALUE)
    except OSError as e:
        logger.error(f"Error {e.errno}: write({path}, \"{DROP_CACHES_VALUE}\"): {e.strerror}")
        raise HookError(f"cannot drop caches: {e}", errno=e.errno or 1) from e


def run_process(script: str, *args: str) -> int:
    """Run ``script`` with ``args`` and wait for it to exit.

    Standard output and standard error go to /dev/null.

    Returns:
        The child's exit status, or -1 if it was killed by a signal or
        could not be executed.
    """
    try:
        completed = subprocess.run(
            [script, *args],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        logger.debug(f"exec({script}) failed: {e}")
        return -1

    if completed.returncode < 0:
        logger.debug(f"{script} killed by signal {-completed.returncode}")
        return -1

    return completed.returncode


class PhaseHook:
    """Post phase hook built from the benchmark configuration.

    Attributes:
        config: Benchmark configuration (synccaches, dropcaches, script).
    """

    def __init__(self, config: BenchConfig, drop_caches_path: str = DROP_CACHES_PATH):
        self.config = config
        self.drop_caches_path = drop_caches_path

    def run(self, phase: str = 'post') -> None:
        """Sync, drop caches and run the script, in that order.

        Raises:
            HookError: If dropping caches fails or the script exits non-zero.
        """
        if self.config.synccaches:
            logger.debug("Syncing filesystems")
            os.sync()

        if self.config.dropcaches:
            logger.debug(f"Dropping caches via {self.drop_caches_path}")
            drop_caches(self.drop_caches_path)

        rc = run_process(self.config.script, phase)
        if rc < 0:
            logger.error(f"Error {ABNORMAL_EXIT_STATUS}: {self.config.script} {phase} exited abnormally")
            raise HookError(
                f"hook script {self.config.script} exited abnormally",
                errno=ABNORMAL_EXIT_STATUS,
            )
        if rc != 0:
            logger.error(f"Error {rc}: {self.config.script} {phase} exited with status {rc}")
            raise HookError(f"hook script {self.config.script} exited with status {rc}", errno=rc)
