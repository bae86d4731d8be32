from __future__ import annotations

import argparse
import logging
import signal
import sys
from contextlib import contextmanager
from typing import Iterator, NoReturn

from rich.console import Console

from cfpurge.cli.commands import clean_cmd
from cfpurge.cli.context import CLIContext
from cfpurge.core.config import load_settings
from cfpurge.core.errors import CfPurgeError, UsageError
from cfpurge.core.logging import configure_logging

logger = logging.getLogger(__name__)

_EPILOG = """\
Example:
  cfpurge /var/log/cfengine/hub.log
  journalctl -u cf-hub | cfpurge --limit 10 --dry-run --cfe-module-protocol /tmp/cf_module_output.txt
"""

_TERMINATION_SIGNALS = ("SIGHUP", "SIGTERM", "SIGQUIT")


class _UsageExitParser(argparse.ArgumentParser):
    # Help and argument errors share the usage exit status.
    def exit(self, status: int = 0, message: str | None = None) -> NoReturn:
        super().exit(1, message)


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageExitParser(
        prog="cfpurge",
        description=(
            "Clean CFEngine host entries from cf_lastseen.lmdb based on hub log warnings "
            "and PostgreSQL deletion status."
        ),
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    clean_cmd.register(parser)
    return parser


@contextmanager
def _signals_as_exit() -> Iterator[None]:
    """Turn termination signals into SystemExit so scoped cleanup still runs."""

    def _handler(signum, frame):
        raise SystemExit(128 + signum)

    previous: dict[signal.Signals, object] = {}
    for name in _TERMINATION_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        previous[signum] = signal.signal(signum, _handler)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console(soft_wrap=True)

    try:
        settings = load_settings().with_overrides(dsn=args.dsn)
        ctx = CLIContext(settings=settings, console=console)
        with _signals_as_exit():
            return args.handler(args, ctx)
    except UsageError as exc:
        logger.error(str(exc))
        parser.print_usage(sys.stderr)
        return 1
    except CfPurgeError as exc:
        logger.error(str(exc))
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        return 130
