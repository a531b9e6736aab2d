"""Command-line interface for folder dedup."""

import argparse
import os
import sys
from pathlib import Path

from . import __version__
from .merger import dedup_folders, validate_directories
from .models import ConfigError, DigestAlgorithm, FilesystemError, RunOptions


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="folder-dedup",
        description=(
            "Deduplicate all files in the provided directories, while optionally merging\n"
            "them into the first directory. The merge operation renames files (when a path\n"
            "collision occurs)."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Notes:
  * two files are duplicates if they have matching hash sums.
  * dedup is a destructive operation (unless --keep).
  * dedup on a single directory will only perform deduplication, no moves.
  * when a file is unique and --merge is set, it is moved into the first
    directory. If the name is taken, the incoming file gets the next free
    number (if 'foo.txt' exists, the new file will be 'foo-2.txt').
  * enabling --keep and not --merge is a read-only operation.
  * any error will cause dedup to exit.

Examples:
  %(prog)s --verbose ~/Pictures
  %(prog)s --merge --recursive --dryrun ~/Pictures /mnt/backup/photos
        """
    )

    parser.add_argument(
        "directories",
        type=Path,
        nargs="+",
        metavar="DIRECTORY",
        help="Directories to deduplicate; the first one is the merge destination"
    )

    parser.add_argument(
        "--keep", "-k",
        action="store_true",
        help="Keep duplicates (by default, duplicates are deleted)"
    )

    parser.add_argument(
        "--merge", "-m",
        action="store_true",
        help="Move unique files into the first directory"
    )

    parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Search into nested directories"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logs (displays each move and delete)"
    )

    parser.add_argument(
        "--dryrun", "--dry-run", "-d",
        dest="dryrun",
        action="store_true",
        help="Run exactly as configured, except no changes are made"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=os.cpu_count() or 1,
        help="Number of worker threads (default: number of CPUs)"
    )

    parser.add_argument(
        "--hash",
        default=DigestAlgorithm.XXH64.value,
        help=f"Hashing algorithm to use, one of {', '.join(DigestAlgorithm.names())} "
             f"(default: {DigestAlgorithm.XXH64.value})"
    )

    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar while scanning"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser.parse_args(argv)


def validate_args(args: argparse.Namespace) -> RunOptions:
    """Validate command-line arguments and build the run options."""
    try:
        options = RunOptions.from_args(args)
        options.validate()
        validate_directories(args.directories)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)
    return options


def main(argv=None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    options = validate_args(args)
    directories = [d.resolve() for d in args.directories]

    if options.verbose:
        print(f"Destination: {directories[0]}")
        for source in directories[1:]:
            print(f"Source:      {source}")

    try:
        dedup_folders(directories, options)
    except FilesystemError as e:
        summary = e.stats.summary() if e.stats else "no changes"
        print(f"Error: {e} ({summary})", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\nInterrupted!", file=sys.stderr)
        sys.exit(1)
