from __future__ import annotations

from cfpurge.core.hostkeys import strip_tag

INVENTORY_META_LINE = "^meta=inventory,attribute_name=Missing connection quality info"
VARIABLE_NAME = "no_quality_info_in_db_deleted"


def format_entry(hostkey: str) -> list[str]:
    """Render the CFEngine module protocol lines recording a purged hostkey."""
    return [
        INVENTORY_META_LINE,
        f"={VARIABLE_NAME}[{strip_tag(hostkey)}]= {hostkey}",
    ]
