from __future__ import annotations

import subprocess

from cfpurge.core.errors import PurgeCommandError


class CfKeyRunner:
    def __init__(self, binary: str = "cf-key", timeout_seconds: float | None = None) -> None:
        self.binary = binary
        self.timeout_seconds = timeout_seconds

    def removal_command(self, hostkey: str) -> list[str]:
        return [self.binary, "--remove-keys", hostkey, "--force"]

    def remove_keys(self, hostkey: str) -> str:
        """Remove ``hostkey`` from cf_lastseen.lmdb and return cf-key's output."""
        cmd = self.removal_command(hostkey)
        try:
            proc = _run(cmd, timeout=self.timeout_seconds)
        except FileNotFoundError as exc:
            raise PurgeCommandError(f"Error purging {hostkey}: {self.binary} not found") from exc
        except subprocess.TimeoutExpired as exc:
            output = exc.output if isinstance(exc.output, str) else ""
            raise PurgeCommandError(
                f"Error purging {hostkey}: {self.binary} timed out after {self.timeout_seconds}s",
                output=output.strip(),
            ) from exc
        except OSError as exc:
            raise PurgeCommandError(f"Error purging {hostkey}: {exc}") from exc

        output = (proc.stdout or "").strip()
        if proc.returncode != 0:
            raise PurgeCommandError(
                f"Error purging {hostkey} with {self.binary} (exit status {proc.returncode})",
                output=output,
            )
        return output


def _run(cmd: list[str], *, timeout: float | None) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        cmd,
        check=False,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        timeout=timeout,
    )
