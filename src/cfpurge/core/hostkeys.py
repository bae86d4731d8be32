from __future__ import annotations

import re
from typing import Iterable, Iterator

HOSTKEY_TAG = "SHA="

_HOSTKEY_RE = re.compile(r"SHA=[a-f0-9]{64}")
_WARNING_RE = re.compile(r"No connection quality information for host '(SHA=[a-f0-9]{64})'")


def is_hostkey(value: str) -> bool:
    return _HOSTKEY_RE.fullmatch(value) is not None


def strip_tag(hostkey: str) -> str:
    """Return the bare hex digest of a hostkey."""
    if hostkey.startswith(HOSTKEY_TAG):
        return hostkey[len(HOSTKEY_TAG):]
    return hostkey


def iter_hostkeys(lines: Iterable[str]) -> Iterator[str]:
    """Yield every hostkey named in a "no connection quality information" warning.

    Lines without the warning are skipped. A line can carry more than one warning,
    in which case each hostkey is yielded in order of appearance.
    """
    for line in lines:
        for match in _WARNING_RE.finditer(line):
            yield match.group(1)


def unique_hostkeys(hostkeys: Iterable[str]) -> list[str]:
    return sorted(set(hostkeys))
