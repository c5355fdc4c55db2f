"""Type aliases used across the Paydesk platform."""

from __future__ import annotations

from typing import Any

Cell = Any  # raw spreadsheet value: str, int, float, date, None
Grid = list[list[Cell]]  # header row first
