from __future__ import annotations

import logging

from cfpurge.core.errors import PurgeCommandError
from cfpurge.domain.models.hostkey import (
    STATUS_PURGE_FAILED,
    STATUS_PURGED,
    STATUS_SIMULATED,
    PurgeOutcome,
)
from cfpurge.infrastructure.cfkey.runner import CfKeyRunner

logger = logging.getLogger(__name__)


class PurgeService:
    def __init__(self, runner: CfKeyRunner) -> None:
        self.runner = runner

    def purge(self, hostkey: str, *, dry_run: bool) -> PurgeOutcome:
        command = self.runner.removal_command(hostkey)
        if dry_run:
            return PurgeOutcome(hostkey=hostkey, status=STATUS_SIMULATED, command=command)

        try:
            output = self.runner.remove_keys(hostkey)
        except PurgeCommandError as exc:
            if exc.output:
                logger.warning("%s. Output:\n%s", exc, exc.output)
            else:
                logger.warning("%s", exc)
            return PurgeOutcome(
                hostkey=hostkey,
                status=STATUS_PURGE_FAILED,
                command=command,
                output=exc.output,
            )
        return PurgeOutcome(hostkey=hostkey, status=STATUS_PURGED, command=command, output=output)
