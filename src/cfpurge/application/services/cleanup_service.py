from __future__ import annotations

from contextlib import nullcontext
from pathlib import Path
from typing import Callable, Iterable

from cfpurge.application.services.purge_service import PurgeService
from cfpurge.application.services.verification_service import VerificationService
from cfpurge.core.files import StagedFile
from cfpurge.core.hostkeys import iter_hostkeys, unique_hostkeys
from cfpurge.domain.models.hostkey import (
    STATUS_PURGED,
    STATUS_QUERY_FAILED,
    STATUS_SIMULATED,
    CleanupStats,
)
from cfpurge.infrastructure.report.module_protocol import format_entry

ProgressCallback = Callable[[dict[str, object]], None]


class CleanupService:
    """Purge hostkeys reported without connection quality data from cf_lastseen.

    Hostkeys are taken from hub log lines, confirmed against the hub database and then
    removed with cf-key one at a time. A hostkey that cannot be verified or purged is
    reported and skipped; only failures around the report file end the run early.
    """

    def __init__(self, verification_service: VerificationService, purge_service: PurgeService) -> None:
        self.verification_service = verification_service
        self.purge_service = purge_service

    def run(
        self,
        lines: Iterable[str],
        *,
        limit: int | None = None,
        dry_run: bool = False,
        report_path: Path | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> CleanupStats:
        stats = CleanupStats()
        staging = StagedFile(report_path) if report_path is not None else None

        with staging if staging is not None else nullcontext():
            if staging is not None:
                self._emit_progress(
                    progress_callback,
                    {"event": "report_staged", "staging_path": str(staging.path)},
                )

            hostkeys = unique_hostkeys(iter_hostkeys(lines))
            stats.found = len(hostkeys)
            for hostkey in hostkeys:
                self._emit_progress(progress_callback, {"event": "extracted", "hostkey": hostkey})

            if not hostkeys:
                self._emit_progress(progress_callback, {"event": "no_hostkeys"})
                return stats

            self._emit_progress(progress_callback, {"event": "scan_complete", "total": len(hostkeys)})

            for index, hostkey in enumerate(hostkeys, start=1):
                if limit is not None and stats.processed >= limit:
                    stats.limit_reached = True
                    self._emit_progress(progress_callback, {"event": "limit_reached", "limit": limit})
                    break

                self._process_hostkey(
                    hostkey,
                    index=index,
                    total=len(hostkeys),
                    dry_run=dry_run,
                    staging=staging,
                    stats=stats,
                    progress_callback=progress_callback,
                )
                stats.processed += 1

            if staging is not None:
                final_path = staging.commit()
                stats.report_path = str(final_path)
                self._emit_progress(
                    progress_callback,
                    {"event": "report_committed", "report_path": str(final_path)},
                )

        return stats

    def _process_hostkey(
        self,
        hostkey: str,
        *,
        index: int,
        total: int,
        dry_run: bool,
        staging: StagedFile | None,
        stats: CleanupStats,
        progress_callback: ProgressCallback | None,
    ) -> None:
        self._emit_progress(
            progress_callback,
            {"event": "hostkey_start", "index": index, "total": total, "hostkey": hostkey},
        )

        verification = self.verification_service.verify(hostkey)
        self._emit_progress(
            progress_callback,
            {
                "event": "verified",
                "hostkey": hostkey,
                "status": verification.status,
                "detail": verification.detail,
            },
        )
        if verification.status == STATUS_QUERY_FAILED:
            stats.query_failed += 1
            return
        if not verification.confirmed:
            stats.not_eligible += 1
            return
        stats.confirmed += 1

        outcome = self.purge_service.purge(hostkey, dry_run=dry_run)
        if outcome.status == STATUS_PURGED:
            stats.purged += 1
        elif outcome.status == STATUS_SIMULATED:
            stats.simulated += 1
        else:
            stats.purge_failed += 1
        self._emit_progress(
            progress_callback,
            {
                "event": "purge_done",
                "hostkey": hostkey,
                "status": outcome.status,
                "command": list(outcome.command),
                "output": outcome.output,
            },
        )

        if staging is not None and outcome.status in (STATUS_PURGED, STATUS_SIMULATED):
            staging.write_lines(format_entry(hostkey))
            stats.report_entries += 1
            self._emit_progress(progress_callback, {"event": "report_entry", "hostkey": hostkey})

    @staticmethod
    def _emit_progress(
        callback: ProgressCallback | None,
        payload: dict[str, object],
    ) -> None:
        if callback is None:
            return
        callback(payload)
