# SPDX-License-Identifier: MIT
"""Command-line interface for migrating JSONL document exports."""

from __future__ import annotations

import argparse
import asyncio
import signal
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Coroutine

import logfire
from pydantic_core import to_json

from .engine import create_schema
from .io_utils import atomic_write, iter_documents, load_revisions
from .observability import init_logfire
from .runtime.settings import Settings, load_settings

LOG_LEVELS = ["fatal", "error", "warn", "notice", "info", "debug", "trace"]


def _print_version() -> None:
    """Print the installed package version."""
    try:
        pkg_version = version("lazy-schema")
    except PackageNotFoundError:  # pragma: no cover - fallback for source checkouts
        pkg_version = "unknown"
    print(f"lazy-schema {pkg_version}")


async def _cmd_migrate_jsonl(args: argparse.Namespace, settings: Settings) -> int:
    """Migrate every document in ``args.input`` and write them to ``args.output``.

    Returns:
        Number of records written.
    """
    input_path = Path(args.input)
    output_path = Path(args.output)
    with logfire.span(
        "cli.migrate_jsonl",
        attributes={"input": str(input_path), "output": str(output_path)},
    ):
        schema = create_schema(load_revisions(args.revisions), settings=settings)
        documents = list(iter_documents(input_path))
        migrated = await schema(documents)
        atomic_write(
            output_path, (to_json(document).decode("utf-8") for document in migrated)
        )
        logfire.info(
            "Migrated documents",
            count=len(migrated),
            target_version=schema.target_version,
        )
        return len(migrated)


def _add_migrate_jsonl_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "migrate-jsonl",
        help="Migrate a JSONL export to the latest schema version",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--revisions",
        required=True,
        help="Revision chain to apply, as 'package.module:ATTRIBUTE'",
    )
    parser.add_argument("--input", required=True, help="JSONL file to migrate")
    parser.add_argument("--output", required=True, help="File to write the results")
    parser.add_argument("--config", help="Optional YAML settings file")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Minimum log level; overrides LAZY_SCHEMA_LOG_LEVEL",
    )
    parser.set_defaults(func=_cmd_migrate_jsonl)
    return parser


def _build_parser() -> argparse.ArgumentParser:
    """Return an argument parser configured with subcommands."""
    parser = argparse.ArgumentParser(
        description="Lazy, versioned migration of schemaless documents.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print the lazy-schema version and exit.",
    )
    subparsers = parser.add_subparsers(dest="command")
    _add_migrate_jsonl_subparser(subparsers)
    return parser


def _run_async_with_signals(coro: Coroutine[Any, Any, Any]) -> Any:
    """Execute ``coro`` and cancel it on SIGINT or SIGTERM."""

    async def _runner() -> Any:
        loop = asyncio.get_running_loop()
        task = asyncio.create_task(coro)
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, task.cancel)
        try:
            return await task
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)

    return asyncio.run(_runner())


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and dispatch to the requested subcommand."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.version:
        _print_version()
        return
    if args.command is None:
        parser.print_help()
        raise SystemExit(1)
    settings = load_settings(args.config)
    init_logfire(settings.logfire_token, args.log_level or settings.log_level)
    try:
        count = _run_async_with_signals(args.func(args, settings))
    finally:
        logfire.force_flush()
    print(f"Wrote {count} records to {args.output}")


if __name__ == "__main__":
    main()
