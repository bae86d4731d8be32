from __future__ import annotations

from dataclasses import dataclass

STATUS_CONFIRMED = "confirmed"
STATUS_NOT_ELIGIBLE = "not_eligible"
STATUS_QUERY_FAILED = "query_failed"

STATUS_PURGED = "purged"
STATUS_PURGE_FAILED = "purge_failed"
STATUS_SIMULATED = "simulated"


@dataclass(slots=True)
class VerificationOutcome:
    hostkey: str
    status: str
    detail: str | None = None

    @property
    def confirmed(self) -> bool:
        return self.status == STATUS_CONFIRMED


@dataclass(slots=True)
class PurgeOutcome:
    hostkey: str
    status: str
    command: list[str]
    output: str = ""


@dataclass(slots=True)
class CleanupStats:
    found: int = 0
    processed: int = 0
    confirmed: int = 0
    not_eligible: int = 0
    query_failed: int = 0
    purged: int = 0
    purge_failed: int = 0
    simulated: int = 0
    report_entries: int = 0
    limit_reached: bool = False
    report_path: str | None = None
