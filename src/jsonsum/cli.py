#!/usr/bin/env python3
"""
cli.py — Command-line interface for jsonsum

Commands:
  digest      Print the checksum of one or more JSON files
  compare     Check whether two JSON files are structurally equal
  check       Verify a JSON file against an expected checksum
  algorithms  List the available hash algorithms
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .digest import Digest
from .engine import jsonsum
from .errors import JsonsumError
from .hashers import HASHERS, HasherFactory, get_hasher_factory

logger = logging.getLogger(__name__)


def _fail_with_error(err: JsonsumError) -> None:
    """Print a structured error message from a ``JsonsumError`` and exit.

    Args:
        err: Structured jsonsum error.

    Returns:
        None: This function terminates the process.
    """
    context = f" Context: {err.context}." if err.context else ""
    print(
        f"ERROR: {err.code}. {err.message}{context} "
        f"Fix: correct the input document and retry the command."
    )
    sys.exit(1)


def _cli_error(what: str, why: str, fix: str) -> None:
    """Print a teaching-style CLI error and exit.

    Args:
        what: What failed.
        why: Why it failed.
        fix: Recommended remediation.

    Returns:
        None: This function terminates the process.
    """
    print(f"ERROR: {what}. {why}. Fix: {fix}.")
    sys.exit(1)


def _digest_path(path: str, factory: HasherFactory) -> Digest:
    """Checksum a file path, or stdin when ``path`` is ``-``."""
    if path == "-":
        return jsonsum(sys.stdin.buffer, factory)
    try:
        with open(Path(path), "rb") as f:
            return jsonsum(f, factory)
    except OSError as exc:
        _cli_error(
            f"Cannot read '{path}'",
            str(exc.strerror or exc),
            "check the path and file permissions",
        )


def _digest_or_fail(path: str, factory: HasherFactory) -> Digest:
    try:
        return _digest_path(path, factory)
    except JsonsumError as err:
        logger.debug("Checksum of %s failed", path, exc_info=True)
        _fail_with_error(err)


def cmd_digest(args: argparse.Namespace) -> None:
    """Handle ``jsonsum digest``.

    Args:
        args: Parsed CLI arguments with input paths and algorithm.

    Returns:
        None: Prints one ``<checksum>  <path>`` line per input.
    """
    factory = get_hasher_factory(args.algorithm)
    for path in args.paths:
        digest = _digest_or_fail(path, factory)
        if args.uint32:
            try:
                rendered = str(digest.as_uint32())
            except TypeError as exc:
                _cli_error(
                    "Cannot render checksum as uint32",
                    str(exc),
                    "use --algorithm crc32 together with --uint32",
                )
        else:
            rendered = digest.hex()
        print(f"{rendered}  {path}")


def cmd_compare(args: argparse.Namespace) -> None:
    """Handle ``jsonsum compare``.

    Args:
        args: Parsed CLI arguments with two input paths and algorithm.

    Returns:
        None: Prints MATCH and returns, or prints DIFFER and exits 1.
    """
    factory = get_hasher_factory(args.algorithm)
    left = _digest_or_fail(args.left, factory)
    right = _digest_or_fail(args.right, factory)
    logger.debug("%s  %s", left.hex(), args.left)
    logger.debug("%s  %s", right.hex(), args.right)
    if left == right:
        print("MATCH")
        return
    print("DIFFER")
    sys.exit(1)


def cmd_check(args: argparse.Namespace) -> None:
    """Handle ``jsonsum check``.

    Args:
        args: Parsed CLI arguments with input path, expected hex, algorithm.

    Returns:
        None: Prints OK and returns, or prints FAILED and exits 1.
    """
    try:
        expected = Digest.from_hex(args.expected)
    except ValueError:
        _cli_error(
            f"Expected checksum '{args.expected}' is not hex",
            "Checksums are compared byte for byte",
            "pass the value printed by `jsonsum digest`",
        )
    factory = get_hasher_factory(args.algorithm)
    actual = _digest_or_fail(args.path, factory)
    if actual == expected:
        print(f"{args.path}: OK")
        return
    print(f"{args.path}: FAILED (got {actual.hex()})")
    sys.exit(1)


def cmd_algorithms(args: argparse.Namespace) -> None:
    """Handle ``jsonsum algorithms``."""
    for name in sorted(HASHERS):
        print(f"{name:<10} {HASHERS[name]().digest_size * 8} bits")


def _add_algorithm(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-a", "--algorithm", default="sha256", choices=sorted(HASHERS),
        help="Hash algorithm (default: sha256)",
    )


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="jsonsum",
        description="jsonsum: key-order and number-format independent JSON checksums",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_digest = sub.add_parser("digest", help="Print checksums of JSON files")
    p_digest.add_argument("paths", nargs="+", help="JSON files ('-' for stdin)")
    _add_algorithm(p_digest)
    p_digest.add_argument(
        "--uint32", action="store_true",
        help="Print 4-byte checksums as unsigned integers",
    )

    p_compare = sub.add_parser("compare", help="Compare two JSON files structurally")
    p_compare.add_argument("left", help="First JSON file")
    p_compare.add_argument("right", help="Second JSON file")
    _add_algorithm(p_compare)

    p_check = sub.add_parser("check", help="Verify a JSON file against a checksum")
    p_check.add_argument("path", help="JSON file ('-' for stdin)")
    p_check.add_argument("--expected", required=True, help="Expected checksum in hex")
    _add_algorithm(p_check)

    sub.add_parser("algorithms", help="List available hash algorithms")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.command == "digest": cmd_digest(args)
    elif args.command == "compare": cmd_compare(args)
    elif args.command == "check": cmd_check(args)
    elif args.command == "algorithms": cmd_algorithms(args)

if __name__ == "__main__":
    main()
