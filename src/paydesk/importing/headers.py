"""Header resolution: map spreadsheet header cells onto template columns.

Matching is deterministic and exact after normalization (lower-case, every
non-alphanumeric character removed). For each column the candidates are tried
in priority order: display name, then system label, then key. A near-miss
header is simply unmatched; there is no fuzzy matching.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import BaseModel, Field

from paydesk.models.template import TemplateColumn

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_label(value: Any) -> str:
    if value is None:
        return ""
    return _NON_ALNUM.sub("", str(value).strip().lower())


class HeaderIndex(BaseModel):
    """Column key -> 0-based position in the sheet, plus what did not match."""

    positions: dict[str, int] = Field(default_factory=dict)
    unmatched_columns: list[str] = Field(default_factory=list)
    unused_headers: list[str] = Field(default_factory=list)

    def position_of(self, key: str) -> int | None:
        return self.positions.get(key)

    def is_resolved(self, key: str) -> bool:
        return key in self.positions


def resolve_headers(header_row: list[Any], columns: list[TemplateColumn]) -> HeaderIndex:
    """Build the column index for one sheet. Column order in the file is irrelevant."""
    header_map: dict[str, int] = {}
    for idx, cell in enumerate(header_row):
        normalized = normalize_label(cell)
        if not normalized:
            continue
        # First occurrence wins when two headers normalize identically
        header_map.setdefault(normalized, idx)

    positions: dict[str, int] = {}
    unmatched: list[str] = []
    for column in columns:
        for candidate in (column.display_name, column.system_label, column.key):
            idx = header_map.get(normalize_label(candidate))
            if idx is not None:
                positions[column.key] = idx
                break
        else:
            unmatched.append(column.key)

    claimed = set(positions.values())
    unused = [
        str(cell).strip()
        for idx, cell in enumerate(header_row)
        if idx not in claimed and normalize_label(cell)
    ]

    if unmatched:
        logger.info("Unmatched template columns: %s", ", ".join(unmatched))
    return HeaderIndex(positions=positions, unmatched_columns=unmatched, unused_headers=unused)
