from __future__ import annotations

import argparse
import io
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO

from rich.markup import escape
from rich.panel import Panel

from cfpurge.application.services.cleanup_service import CleanupService
from cfpurge.application.services.purge_service import PurgeService
from cfpurge.application.services.verification_service import VerificationService
from cfpurge.cli.context import CLIContext
from cfpurge.core.errors import InputNotFoundError
from cfpurge.domain.models.hostkey import (
    STATUS_CONFIRMED,
    STATUS_NOT_ELIGIBLE,
    STATUS_PURGED,
    STATUS_SIMULATED,
    CleanupStats,
)
from cfpurge.infrastructure.cfkey.runner import CfKeyRunner
from cfpurge.infrastructure.db.repos.host_repo import HostRepo


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError("--limit requires a positive integer argument.") from None
    if value < 1:
        raise argparse.ArgumentTypeError("--limit requires a positive integer argument.")
    return value


def register(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "log_file",
        nargs="?",
        type=Path,
        default=None,
        metavar="LOG_FILE",
        help="Path to the log file. If not provided, reads from stdin.",
    )
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        metavar="N",
        help="Process at most N hostkeys. Default is no limit.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate the removal process without actually running cf-key --remove-keys.",
    )
    parser.add_argument(
        "--cfe-module-protocol",
        type=Path,
        default=None,
        metavar="F",
        help="Write CFEngine module protocol output to file F for affected hostkeys.",
    )
    parser.add_argument(
        "--dsn",
        default=None,
        help="PostgreSQL connection string (default: $CFPURGE_DSN or 'dbname=cfdb').",
    )
    parser.set_defaults(handler=run)


def _service(ctx: CLIContext) -> CleanupService:
    settings = ctx.settings
    host_repo = HostRepo(settings.dsn, settings.pg_connect_timeout_seconds)
    runner = CfKeyRunner(settings.cf_key_bin, settings.cf_key_timeout_seconds)
    return CleanupService(
        verification_service=VerificationService(host_repo, settings.retention_days),
        purge_service=PurgeService(runner),
    )


@contextmanager
def _open_input(log_file: Path | None) -> Iterator[TextIO]:
    if log_file is None or str(log_file) == "-":
        buffer = getattr(sys.stdin, "buffer", None)
        if buffer is None:
            yield sys.stdin
            return
        stream = io.TextIOWrapper(buffer, encoding="utf-8", errors="replace")
        try:
            yield stream
        finally:
            # Leave the process-wide stdin open.
            stream.detach()
        return
    if not log_file.is_file():
        raise InputNotFoundError(f"Log file '{log_file}' not found.")
    with log_file.open("r", encoding="utf-8", errors="replace") as stream:
        yield stream


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    console = ctx.console
    retention_days = ctx.settings.retention_days

    def _on_progress(event: dict[str, object]) -> None:
        kind = event.get("event")
        hostkey = escape(str(event.get("hostkey", "")))

        if kind == "report_staged":
            console.print(
                "CFEngine module protocol output will be staged in temporary file: "
                f"{escape(str(event.get('staging_path', '')))}"
            )
        elif kind == "extracted":
            console.print(f"Extracted hostkey: {hostkey}")
        elif kind == "no_hostkeys":
            console.print("No hostkeys found in the provided input. Exiting.")
        elif kind == "scan_complete":
            console.rule(f"Checking {event.get('total', 0)} unique hostkeys against PostgreSQL")
        elif kind == "limit_reached":
            console.print(f"Limit of {event.get('limit')} hostkeys reached. Stopping processing.")
        elif kind == "hostkey_start":
            console.print(f"Processing hostkey {event.get('index')}/{event.get('total')}: {hostkey}")
        elif kind == "verified":
            status = event.get("status")
            if status == STATUS_CONFIRMED:
                console.print(
                    f"  Hostkey {hostkey} found in PostgreSQL and deleted more than "
                    f"{retention_days} days ago."
                )
            elif status == STATUS_NOT_ELIGIBLE:
                console.print(
                    f"  Hostkey {hostkey} not found in PostgreSQL with deletion older than "
                    f"{retention_days} days, or not deleted."
                )
        elif kind == "purge_done":
            status = event.get("status")
            command = escape(" ".join(str(part) for part in event.get("command") or []))
            output = str(event.get("output") or "")
            if status == STATUS_SIMULATED:
                console.print(f"  (DRY RUN) Would execute: {command}")
            elif status == STATUS_PURGED:
                console.print(f"  [green]Successfully purged[/green] {hostkey} from cf_lastseen.lmdb.")
                if output:
                    console.print(f"    cf-key output: {escape(output)}")
        elif kind == "report_entry":
            console.print("  Added CFEngine module protocol entry to temporary file.")
        elif kind == "report_committed":
            console.rule("Finalizing CFEngine module protocol output")
            console.print(
                "Successfully moved temporary protocol file to: "
                f"{escape(str(event.get('report_path', '')))}"
            )

    with _open_input(args.log_file) as stream:
        service = _service(ctx)
        if args.dry_run:
            console.print("[yellow]Dry run: cf-key will not be executed.[/yellow]")
        stats = service.run(
            stream,
            limit=args.limit,
            dry_run=args.dry_run,
            report_path=args.cfe_module_protocol,
            progress_callback=_on_progress,
        )

    if stats.found:
        console.print(Panel.fit("\n".join(_summary_lines(stats, dry_run=args.dry_run)), title="Cleanup Summary"))
    return 0


def _summary_lines(stats: CleanupStats, *, dry_run: bool) -> list[str]:
    lines = [
        f"Hostkeys found: {stats.found}",
        f"Processed this run: {stats.processed}",
        f"  ├─ Confirmed: {stats.confirmed}",
        f"  ├─ Not eligible: {stats.not_eligible}",
        f"  └─ Query failed: {stats.query_failed}",
    ]
    if dry_run:
        lines.append(f"Simulated removals: {stats.simulated}")
    else:
        lines.append(f"Purged: {stats.purged}")
        lines.append(f"Purge failed: {stats.purge_failed}")
    if stats.limit_reached:
        lines.append(f"Stopped at limit; {stats.found - stats.processed} hostkeys left unprocessed")
    if stats.report_path:
        lines.append(f"Report entries: {stats.report_entries}")
        lines.append(f"Report file: {escape(stats.report_path)}")
    return lines
