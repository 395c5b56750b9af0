"""
Command-line entry point.

Usage:
    cipherkat --backend openssl
    cipherkat --backend pycryptodome --transformation AES/CBC/PKCS5Padding --collect-all
    CIPHERKAT_CIPHER_BACKEND=openssl python -m cipherkat
    cipherkat --list-backends

Exit status: 0 all vectors passed, 1 validation failure, 2 setup error.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from cipherkat import LOGGER_NAMESPACE, __version__
from cipherkat.config import CIPHER_BACKEND_ENV, HarnessConfig
from cipherkat.core.exceptions import SetupError, VectorError
from cipherkat.core.registry import BackendFactory
from cipherkat.core.transformation import CipherTransformation
from cipherkat.validator import DualModeValidator, FailurePolicy

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VALIDATION_FAILED = 1
EXIT_SETUP_ERROR = 2


def _transformation(value: str) -> CipherTransformation:
    try:
        return CipherTransformation.from_name(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="cipherkat",
        description="Known-answer validation of a symmetric cipher backend "
        "in buffer and array representations.",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument(
        "--backend",
        default=None,
        help=f"Backend identifier (default: ${CIPHER_BACKEND_ENV})",
    )
    ap.add_argument(
        "--transformation",
        dest="transformations",
        action="append",
        type=_transformation,
        default=None,
        metavar="NAME",
        help="Transformation to validate, repeatable (default: all in the corpus)",
    )
    ap.add_argument(
        "--collect-all",
        action="store_true",
        help="Record every failing vector instead of stopping at the first",
    )
    ap.add_argument(
        "--list-backends",
        action="store_true",
        help="List registered backends and exit",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return ap


def _enable_verbose_logging() -> None:
    pkg_logger = logging.getLogger(LOGGER_NAMESPACE)
    pkg_logger.setLevel(logging.DEBUG)
    for handler in pkg_logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(logging.DEBUG)


def _list_backends(factory: BackendFactory) -> None:
    registry = factory.registry
    for name in registry.list_backends():
        meta = registry.get_metadata(name)
        native = "native" if meta.is_native else "pure"
        print(f"{name:<14} {meta.library:<14} {native:<7} {', '.join(meta.transformations)}")


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.verbose:
        _enable_verbose_logging()

    try:
        factory = BackendFactory()
    except SetupError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_SETUP_ERROR

    if args.list_backends:
        _list_backends(factory)
        return EXIT_OK

    config = HarnessConfig.from_env()
    if args.backend is not None:
        config = config.with_backend(args.backend)

    policy = FailurePolicy.COLLECT_ALL if args.collect_all else FailurePolicy.FAIL_FAST
    validator = DualModeValidator(config, factory=factory, policy=policy)

    try:
        report = validator.run(args.transformations)
    except SetupError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_SETUP_ERROR
    except VectorError as e:
        print(f"[FAIL] {e.transformation} ({config.backend_name}): {e}")
        return EXIT_VALIDATION_FAILED

    for result in report.results:
        print(result.summary())
        for failure in result.failures:
            print(f"    #{failure.vector_index} {failure.label}: {failure.message}")

    print(report.summary().splitlines()[-1])
    return EXIT_OK if report.is_success else EXIT_VALIDATION_FAILED


__all__ = ["main"]
