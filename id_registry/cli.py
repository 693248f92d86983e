"""
Command line tool for the identifier registry.

This tool manages a registry stored in a JSON file:
- register: Register one identifier set
- unregister: Remove identifiers
- check: Test whether an identifier is registered
- codes / types: List registry contents
- generate: Create a unique id with a generator
- clear: Remove everything

Usage:
    id-registry --file ids.json register isbn=0306406152 ean=9780306406157
    id-registry --file ids.json --validator isbn=isbn10 register isbn=0306406153
    id-registry --file ids.json check isbn 0306406152
    id-registry --file ids.json generate invoice --kind auto-increment

Invariants:
    - Rejected registrations and negative checks exit with code 1
    - Usage errors exit with code 2 (argparse)
    - Listing output is sorted so it is stable for scripts

How to change safely:
    - Add new commands, don't modify existing ones
    - Keep output format stable for scripts
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, Optional, Sequence, Tuple

import json_log_formatter

from .config import RegistrySettings, StorageBackend
from .errors import RegistryError
from .generators import GeneratorKind
from .models import IdPair, IdPairSet
from .registry import IdRegistry
from .validators import get_builtin_validator

logger = logging.getLogger(__name__)


def setup_logging(settings: RegistrySettings) -> None:
    """Configure logging based on settings.

    Args:
        settings: Registry settings
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]


def _parse_assignment(text: str) -> Tuple[str, str]:
    id_type, sep, value = text.partition("=")
    if not sep or not id_type or not value:
        raise argparse.ArgumentTypeError(f"expected TYPE=VALUE, got '{text}'")
    return id_type, value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="id-registry",
        description="Manage a registry of globally unique typed identifiers",
    )
    parser.add_argument(
        "--file",
        help="Registry JSON file (default: ID_REGISTRY_STORAGE_PATH or id_registry.json)",
    )
    parser.add_argument(
        "--validator",
        action="append",
        default=[],
        type=_parse_assignment,
        metavar="TYPE=NAME",
        help="Attach a built-in validator (isbn10, isbn13, orcid) to a type",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log output format",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    register = subparsers.add_parser("register", help="Register one identifier set")
    register.add_argument("pairs", nargs="+", type=_parse_assignment, metavar="TYPE=CODE")

    unregister = subparsers.add_parser("unregister", help="Remove identifiers")
    unregister.add_argument("pairs", nargs="+", type=_parse_assignment, metavar="TYPE=CODE")

    check = subparsers.add_parser("check", help="Check whether an identifier is registered")
    check.add_argument("id_type")
    check.add_argument("id_code")

    codes = subparsers.add_parser("codes", help="List registered codes for a type")
    codes.add_argument("id_type")

    subparsers.add_parser("types", help="List types with registered codes")

    generate = subparsers.add_parser("generate", help="Generate and register a unique id")
    generate.add_argument("id_type")
    generate.add_argument(
        "--kind",
        choices=[kind.value for kind in GeneratorKind],
        default=GeneratorKind.AUTO_INCREMENT.value,
    )

    subparsers.add_parser("clear", help="Remove all identifiers and counters")

    return parser


async def _run(args: argparse.Namespace, registry: IdRegistry) -> int:
    for id_type, name in args.validator:
        registry.set_validator(id_type, get_builtin_validator(name))

    if args.command == "register":
        result = await registry.try_register(IdPairSet(args.pairs))
        if result.ok:
            print(f"Registered {len(result.applied)} identifier(s)")
            return 0
        print(
            f"Registration rejected ({result.failure.value}): "
            f"{result.id_type}:{result.id_code}"
        )
        return 1

    elif args.command == "unregister":
        await registry.unregister(IdPairSet(args.pairs))
        print(f"Unregistered {len(args.pairs)} identifier(s)")
        return 0

    elif args.command == "check":
        pair = IdPair(args.id_type, args.id_code)
        if await registry.is_pair_registered(pair):
            print(f"{pair} is registered")
            return 0
        print(f"{pair} is not registered")
        return 1

    elif args.command == "codes":
        for code in sorted(await registry.get_registered_codes(args.id_type)):
            print(code)
        return 0

    elif args.command == "types":
        for id_type in sorted(await registry.get_all_registered_types()):
            print(id_type)
        return 0

    elif args.command == "generate":
        registry.register_generator(args.id_type, args.kind)
        print(await registry.generate_id(args.id_type))
        return 0

    elif args.command == "clear":
        await registry.clear()
        print("Registry cleared")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    overrides: Dict[str, Any] = {"storage_backend": StorageBackend.FILE}
    if args.file:
        overrides["storage_path"] = args.file
    if args.log_format:
        overrides["log_format"] = args.log_format
    settings = RegistrySettings(**overrides)

    setup_logging(settings)
    settings.log_settings()

    for _, name in args.validator:
        try:
            get_builtin_validator(name)
        except ValueError as e:
            parser.error(str(e))

    registry = IdRegistry.from_settings(settings)
    try:
        return asyncio.run(_run(args, registry))
    except RegistryError as e:
        logger.error("Registry operation failed", extra={"code": e.code, "details": e.details})
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
