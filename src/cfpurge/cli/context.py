from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console

from cfpurge.core.config import Settings


@dataclass(slots=True)
class CLIContext:
    settings: Settings
    console: Console
