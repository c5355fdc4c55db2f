"""Value normalization: raw spreadsheet cells -> canonical typed values.

Every function here is total. Instead of raising or silently defaulting it
returns a ``Normalized`` tagged as a value, empty, or invalid, so the
validator can tell a blank cell from a malformed one.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from paydesk.models.template import ValueType

# Legacy spreadsheet epoch: serial 1 is 1900-01-01 and serial 60 is the
# non-existent 1900-02-29, so serials after 59 are one day too high.
_SERIAL_EPOCH = date(1899, 12, 31)
_FALSE_LEAP_DAY_SERIAL = 59

_DAY_FIRST_FORMATS = ("%d-%m-%Y", "%d/%m/%Y", "%d.%m.%Y", "%d %b %Y", "%d %B %Y", "%d-%b-%Y")

_CURRENCY_PREFIX = re.compile(r"^(rs\.?|inr)", re.IGNORECASE)
_IGNORE_CHARS = re.compile(r"[₹$€£,\s]")
_SERIAL_TEXT = re.compile(r"^\d+(\.\d+)?$")


class NormalizedState(StrEnum):
    VALUE = "value"
    EMPTY = "empty"
    INVALID = "invalid"


class Normalized(BaseModel):
    """Tagged normalization result."""

    state: NormalizedState
    value: Any = None
    raw: Any = None

    model_config = {"frozen": True}

    @classmethod
    def of(cls, value: Any, raw: Any = None) -> Normalized:
        return cls(state=NormalizedState.VALUE, value=value, raw=raw)

    @classmethod
    def empty(cls, raw: Any = None) -> Normalized:
        return cls(state=NormalizedState.EMPTY, raw=raw)

    @classmethod
    def invalid(cls, raw: Any) -> Normalized:
        return cls(state=NormalizedState.INVALID, raw=raw)

    @property
    def is_value(self) -> bool:
        return self.state == NormalizedState.VALUE

    @property
    def is_empty(self) -> bool:
        return self.state == NormalizedState.EMPTY

    @property
    def is_invalid(self) -> bool:
        return self.state == NormalizedState.INVALID


def is_empty_cell(raw: Any) -> bool:
    if raw is None:
        return True
    if isinstance(raw, str):
        return not raw.strip()
    if isinstance(raw, float):
        return math.isnan(raw)
    return False


def normalize_string(raw: Any, *, upper: bool = False) -> Normalized:
    if is_empty_cell(raw):
        return Normalized.empty(raw)
    if isinstance(raw, float) and raw.is_integer():
        # Numeric cells in text columns (phone, aadhaar) come through as floats
        text = str(int(raw))
    else:
        text = str(raw).strip()
    return Normalized.of(text.upper() if upper else text, raw)


def normalize_number(raw: Any) -> Normalized:
    if is_empty_cell(raw):
        return Normalized.empty(raw)
    if isinstance(raw, bool) or isinstance(raw, (date, datetime)):
        return Normalized.invalid(raw)
    if isinstance(raw, Decimal):
        return Normalized.of(raw, raw) if raw.is_finite() else Normalized.invalid(raw)
    if isinstance(raw, int):
        return Normalized.of(Decimal(raw), raw)
    if isinstance(raw, float):
        if math.isinf(raw):
            return Normalized.invalid(raw)
        return Normalized.of(Decimal(str(raw)), raw)

    text = _IGNORE_CHARS.sub("", _CURRENCY_PREFIX.sub("", str(raw).strip()))
    if text.startswith("(") and text.endswith(")"):
        text = f"-{text[1:-1]}"
    elif text.endswith("-") and len(text) > 1:
        # Trailing negative: 123.45- -> -123.45
        text = f"-{text[:-1]}"
    try:
        value = Decimal(text)
    except InvalidOperation:
        return Normalized.invalid(raw)
    if not value.is_finite():
        return Normalized.invalid(raw)
    return Normalized.of(value, raw)


def serial_to_date(serial: float) -> date:
    """Convert a spreadsheet day serial, replicating the 1900 leap-year bug."""
    whole = int(math.floor(serial))
    if whole < 1:
        raise ValueError(f"Serial {serial} precedes the spreadsheet epoch")
    if whole > _FALSE_LEAP_DAY_SERIAL:
        whole -= 1
    return _SERIAL_EPOCH + timedelta(days=whole)


def _parse_date_text(text: str) -> date | None:
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    if _SERIAL_TEXT.match(text):
        return serial_to_date(float(text))
    for fmt in _DAY_FIRST_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def normalize_date(raw: Any) -> Normalized:
    """Return an ISO ``YYYY-MM-DD`` string, or invalid when it cannot be read."""
    if is_empty_cell(raw):
        return Normalized.empty(raw)
    try:
        if isinstance(raw, datetime):
            parsed: date | None = raw.date()
        elif isinstance(raw, date):
            parsed = raw
        elif isinstance(raw, bool):
            parsed = None
        elif isinstance(raw, (int, float, Decimal)):
            parsed = serial_to_date(float(raw))
        else:
            parsed = _parse_date_text(str(raw).strip())
    except (ValueError, OverflowError):
        parsed = None
    if parsed is None:
        return Normalized.invalid(raw)
    return Normalized.of(parsed.isoformat(), raw)


def normalize_enum(raw: Any) -> Normalized:
    # Membership is the validator's job
    return normalize_string(raw)


def normalize_value(raw: Any, value_type: ValueType, *, upper: bool = False) -> Normalized:
    if value_type == ValueType.NUMBER:
        return normalize_number(raw)
    if value_type == ValueType.DATE:
        return normalize_date(raw)
    if value_type == ValueType.ENUM:
        return normalize_enum(raw)
    return normalize_string(raw, upper=upper)
