from __future__ import annotations

import logging

from cfpurge.core.config import RETENTION_DAYS
from cfpurge.core.errors import QueryError
from cfpurge.domain.models.hostkey import (
    STATUS_CONFIRMED,
    STATUS_NOT_ELIGIBLE,
    STATUS_QUERY_FAILED,
    VerificationOutcome,
)
from cfpurge.infrastructure.db.repos.host_repo import HostRepo

logger = logging.getLogger(__name__)


class VerificationService:
    def __init__(self, host_repo: HostRepo, retention_days: int = RETENTION_DAYS) -> None:
        self.host_repo = host_repo
        self.retention_days = retention_days

    def verify(self, hostkey: str) -> VerificationOutcome:
        try:
            rows = self.host_repo.find_purgeable(hostkey, retention_days=self.retention_days)
        except QueryError as exc:
            logger.warning("%s. Check the database connection and permissions.", exc)
            return VerificationOutcome(hostkey=hostkey, status=STATUS_QUERY_FAILED, detail=str(exc))

        # Exact match only; a row that merely contains the hostkey does not count.
        if any(row.strip() == hostkey for row in rows):
            return VerificationOutcome(hostkey=hostkey, status=STATUS_CONFIRMED)
        return VerificationOutcome(hostkey=hostkey, status=STATUS_NOT_ELIGIBLE)
