from cfpurge.application.services.purge_service import PurgeService
from cfpurge.application.services.verification_service import VerificationService
from cfpurge.core.errors import PurgeCommandError, QueryError

HOSTKEY = "SHA=" + "e" * 64


class StubHostRepo:
    def __init__(self, rows: list[str] | None = None, error: QueryError | None = None) -> None:
        self.rows = rows or []
        self.error = error
        self.calls: list[tuple[str, int]] = []

    def find_purgeable(self, hostkey: str, retention_days: int = 30) -> list[str]:
        self.calls.append((hostkey, retention_days))
        if self.error is not None:
            raise self.error
        return self.rows


class StubRunner:
    def __init__(self, error: PurgeCommandError | None = None) -> None:
        self.error = error
        self.removed: list[str] = []

    def removal_command(self, hostkey: str) -> list[str]:
        return ["cf-key", "--remove-keys", hostkey, "--force"]

    def remove_keys(self, hostkey: str) -> str:
        self.removed.append(hostkey)
        if self.error is not None:
            raise self.error
        return "ok"


def test_verify_confirms_exact_trimmed_match() -> None:
    repo = StubHostRepo(rows=[f" {HOSTKEY} "])
    outcome = VerificationService(repo).verify(HOSTKEY)
    assert outcome.status == "confirmed"
    assert outcome.confirmed is True
    assert repo.calls == [(HOSTKEY, 30)]


def test_verify_rejects_partial_matches() -> None:
    repo = StubHostRepo(rows=[HOSTKEY + "ff", "prefix-" + HOSTKEY])
    outcome = VerificationService(repo).verify(HOSTKEY)
    assert outcome.status == "not_eligible"


def test_verify_reports_not_eligible_for_no_rows() -> None:
    outcome = VerificationService(StubHostRepo(rows=[])).verify(HOSTKEY)
    assert outcome.status == "not_eligible"
    assert outcome.detail is None


def test_verify_reports_query_failure() -> None:
    repo = StubHostRepo(error=QueryError("Error querying PostgreSQL: permission denied"))
    outcome = VerificationService(repo, retention_days=60).verify(HOSTKEY)
    assert outcome.status == "query_failed"
    assert "permission denied" in (outcome.detail or "")
    assert repo.calls == [(HOSTKEY, 60)]


def test_purge_dry_run_never_invokes_cf_key() -> None:
    runner = StubRunner()
    outcome = PurgeService(runner).purge(HOSTKEY, dry_run=True)
    assert outcome.status == "simulated"
    assert outcome.command == ["cf-key", "--remove-keys", HOSTKEY, "--force"]
    assert runner.removed == []


def test_purge_reports_failure_without_raising() -> None:
    runner = StubRunner(error=PurgeCommandError("Error purging", output="db locked"))
    outcome = PurgeService(runner).purge(HOSTKEY, dry_run=False)
    assert outcome.status == "purge_failed"
    assert outcome.output == "db locked"
    assert runner.removed == [HOSTKEY]


def test_purge_success_captures_output() -> None:
    outcome = PurgeService(StubRunner()).purge(HOSTKEY, dry_run=False)
    assert outcome.status == "purged"
    assert outcome.output == "ok"
