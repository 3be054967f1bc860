"""
Benchmark Driver Module

Runs the create, setxattr, getxattr and unlink phases in order against one
configuration and collects their timings.

Example:
    >>> from xattrbench.benchmark import XattrBenchmark
    >>> from xattrbench.config import BenchConfig
    >>> benchmark = XattrBenchmark(BenchConfig(files=10, xattrs=2, size=32, verify=True))
    >>> results = benchmark.run()
    >>> print([r.phase for r in results])
    ['create', 'setxattr', 'getxattr', 'unlink']
"""

import logging
from typing import Optional

from xattrbench.config import BenchConfig
from xattrbench.hooks import PhaseHook
from xattrbench.phases import (
    PhaseResult,
    create_files,
    getxattrs,
    setxattrs,
    unlink_files,
)

logger = logging.getLogger(__name__)


class XattrBenchmark:
    """Sequential xattr benchmark.

    Any phase failure propagates out of run() and no later phase executes.
    Files created before the failure are left on disk.

    Attributes:
        config: Validated benchmark configuration.
        hook: Hook run after every phase.
        results: Results of the phases completed so far.
    """

    def __init__(self, config: BenchConfig, hook: Optional[PhaseHook] = None):
        self.config = config
        self.hook = hook if hook is not None else PhaseHook(config)
        self.results: list[PhaseResult] = []

    def phases(self) -> list:
        """Phase functions in execution order."""
        phases = [create_files, setxattrs, getxattrs]
        if not self.config.keep:
            phases.append(unlink_files)
        return phases

    def run(self) -> list[PhaseResult]:
        """Run every phase.

        Returns:
            One PhaseResult per executed phase.

        Raises:
            XattrBenchError: From the first failing phase or hook.
        """
        self.results = []
        logger.info(
            f"Benchmarking {self.config.files} files x {self.config.xattrs} xattrs "
            f"of {self.config.size} bytes in {self.config.path}"
        )

        for phase in self.phases():
            result = phase(self.config, self.hook)
            logger.debug(f"{result.phase}: {result.operations} ops in {result.elapsed.total_seconds:.6f}s")
            self.results.append(result)

        if self.config.keep:
            logger.info(f"Keeping {self.config.files} files in {self.config.path}")

        return self.results

    def summary(self) -> str:
        """Per-phase throughput of the completed phases."""
        lines = []
        for result in self.results:
            lines.append(
                f"{result.phase + ':':<10}{result.operations:>10} ops "
                f"{result.ops_per_second:>14.1f} ops/s"
            )
        return '\n'.join(lines)
