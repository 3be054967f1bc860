"""
Command Line Interface

Creates N files, sets M xattrs of S bytes on each, reads them back
(optionally verifying a stored pattern) and removes the files, timing each
phase.

Usage:
    xattrbench [-hvycdrRk] [-n <nth>] [-f <files>] [-x <xattrs>]
               [-s <bytes>] [-p <path>] [-t <script>] [-e <seed>]

Examples:
    # 10 files with two verified 32 byte xattrs each
    xattrbench -f 10 -x 2 -s 32 -y

    # Cold cache reads, keep the files afterwards
    sudo xattrbench -f 100000 -s 512 -c -d -k
"""

import argparse
import logging
import sys
import time
from typing import Optional, Sequence

from xattrbench import __version__
from xattrbench.benchmark import XattrBenchmark
from xattrbench.config import (
    DEFAULT_PATH,
    DEFAULT_SCRIPT,
    PATH_MAX,
    BenchConfig,
    format_config,
    validate_config,
)
from xattrbench.errors import ConfigError, XattrBenchError
from xattrbench.utils import format_system_info, get_system_info, setup_logging

logger = logging.getLogger(__name__)


def _integer(value: str) -> int:
    """Parse an integer with an optional 0x, 0o or 0b prefix."""
    try:
        return int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='xattrbench',
        description='Extended attribute (xattr) benchmark and correctness test',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Verify pattern:   xattrbench -f 10 -x 2 -s 32 -y
  Random sizes:     xattrbench -f 1000 -x 4 -s 4096 -r -e 42
  Cold caches:      sudo xattrbench -c -d -t ./collect-stats.sh
        """
    )
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase verbosity')
    parser.add_argument('-y', '--verify', action='store_true',
                        help='Verify xattr contents')
    parser.add_argument('-n', '--nth', type=_integer, default=0, metavar='<nth>',
                        help='Print every nth file')
    parser.add_argument('-f', '--files', type=_integer, default=1000, metavar='<files>',
                        help='Set xattrs on N files')
    parser.add_argument('-x', '--xattrs', type=_integer, default=1, metavar='<xattrs>',
                        help='Set N xattrs on each file')
    parser.add_argument('-s', '--size', type=_integer, default=1, metavar='<bytes>',
                        help='Set N bytes per xattr')
    parser.add_argument('-p', '--path', default=DEFAULT_PATH, metavar='<path>',
                        help='Path to files')
    parser.add_argument('-c', '--synccaches', action='store_true',
                        help='Sync caches between phases')
    parser.add_argument('-d', '--dropcaches', action='store_true',
                        help='Drop caches between phases')
    parser.add_argument('-t', '--script', default=DEFAULT_SCRIPT, metavar='<script>',
                        help='Exec script between phases')
    parser.add_argument('-e', '--seed', type=_integer, default=None, metavar='<seed>',
                        help='Random seed value')
    parser.add_argument('-r', '--random', action='store_true',
                        help='Randomly sized xattrs [16-size]')
    parser.add_argument('-R', '--randomvalue', action='store_true',
                        help='Random xattr values')
    parser.add_argument('-k', '--keep', action='store_true',
                        help="Don't unlink files")
    parser.add_argument('--log-file', default=None, metavar='<file>',
                        help='Also write diagnostics to a log file')
    parser.add_argument('--version', action='version',
                        version=f"%(prog)s {__version__}")
    return parser


def config_from_args(args: argparse.Namespace) -> BenchConfig:
    """Build and validate a BenchConfig from parsed arguments.

    Raises:
        ConfigError: If the options conflict or are out of range.
    """
    seed = args.seed if args.seed is not None else int(time.time())

    config = BenchConfig(
        verbose=args.verbose,
        verify=args.verify,
        nth=args.nth,
        files=args.files,
        xattrs=args.xattrs,
        size=args.size,
        path=args.path[:PATH_MAX - 1],
        synccaches=args.synccaches,
        dropcaches=args.dropcaches,
        script=args.script[:PATH_MAX - 1],
        seed=seed,
        random_size=args.random,
        random_value=args.randomvalue,
        keep=args.keep,
    )
    return validate_config(config)


def parse_args(argv: Optional[Sequence[str]] = None) -> BenchConfig:
    """Parse command line arguments into a validated configuration.

    Raises:
        SystemExit: For --help (status 0) or unknown options (status 2).
        ConfigError: If the options conflict or are out of range.
    """
    return config_from_args(build_parser().parse_args(argv))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point.

    Returns:
        0 on success, otherwise the errno or hook exit status of the failure.
    """
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose >= 2 else logging.WARNING, args.log_file)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        logger.error(e)
        return e.errno

    if config.verbose:
        sys.stdout.write(format_config(config))
    if config.verbose >= 2:
        sys.stdout.write(format_system_info(get_system_info(config.path)))

    benchmark = XattrBenchmark(config)
    try:
        benchmark.run()
    except XattrBenchError as e:
        logger.debug(f"Benchmark aborted: {e}")
        return e.errno

    if config.verbose:
        print(benchmark.summary())

    return 0


if __name__ == '__main__':
    sys.exit(main())
