"""Row validation: per-field rules applied to a normalized row.

All violations of a row are collected; one failing field never hides the
checks of the fields after it.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from pydantic import BaseModel

from paydesk.core.config import ImportConfig
from paydesk.importing.normalizer import Normalized
from paydesk.models.import_result import FieldViolation, ViolationCode
from paydesk.models.template import TemplateColumn, ValueType


class FieldRule(BaseModel):
    """Extra checks attached to a system field key."""

    pattern: Optional[str] = None
    pattern_message: str = "has an invalid format"
    upper_case: bool = False
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None
    max_length: Optional[int] = None
    min_age: bool = False


_PHONE = FieldRule(pattern=r"^\d{10}$", pattern_message="must be 10 digits")
_AMOUNT = FieldRule(min_value=Decimal("0"), max_value=Decimal("10000000"))

FIELD_RULES: dict[str, FieldRule] = {
    "adharNumber": FieldRule(pattern=r"^\d{12}$", pattern_message="must be 12 digits"),
    "panNumber": FieldRule(
        pattern=r"^[A-Z]{5}[0-9]{4}[A-Z]$",
        pattern_message="is not a valid PAN (expected format ABCDE1234F)",
        upper_case=True,
    ),
    "ifscCode": FieldRule(
        pattern=r"^[A-Z]{4}0[A-Z0-9]{6}$",
        pattern_message="is not a valid IFSC code (expected format SBIN0001234)",
        upper_case=True,
    ),
    "contactNumber": _PHONE,
    "emergencyContactNumber": _PHONE,
    "DOB": FieldRule(min_age=True),
    "presentDays": FieldRule(min_value=Decimal("0"), max_value=Decimal("31")),
    "holidays": FieldRule(min_value=Decimal("0"), max_value=Decimal("31")),
    "lopDays": FieldRule(min_value=Decimal("0"), max_value=Decimal("31")),
    "totalFixedDays": FieldRule(min_value=Decimal("1"), max_value=Decimal("31")),
    "otHours": FieldRule(min_value=Decimal("0"), max_value=Decimal("744")),  # 31 x 24
    "fixedStipend": _AMOUNT,
    "transport": _AMOUNT,
    "canteen": _AMOUNT,
    "managementFee": _AMOUNT,
    "insurance": _AMOUNT,
    "dbt": _AMOUNT,
}

_DEFAULT_MIN_NUMBER = Decimal("0")


def rule_for(key: str) -> FieldRule | None:
    return FIELD_RULES.get(key)


def compute_age(born: date, today: date) -> int:
    """Whole years, minus one while this year's birthday has not been reached."""
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def canonical_enum_value(column: TemplateColumn, value: str) -> str:
    """Map a case-insensitive enum match onto the option's own spelling."""
    for option in column.enum_values:
        if option.lower() == value.lower():
            return option
    return value


def _fmt(value: Decimal) -> str:
    return format(value.normalize(), "f")


CrossFieldRule = Callable[[dict[str, Normalized], dict[str, TemplateColumn], int], list[FieldViolation]]


def _emergency_contact_differs(
    values: dict[str, Normalized], columns: dict[str, TemplateColumn], row_number: int
) -> list[FieldViolation]:
    contact = values.get("contactNumber")
    emergency = values.get("emergencyContactNumber")
    if contact is None or emergency is None or not (contact.is_value and emergency.is_value):
        return []
    if contact.value != emergency.value:
        return []
    return [FieldViolation(
        key="emergencyContactNumber",
        code=ViolationCode.FIELD_PATTERN_INVALID,
        message=f"Row {row_number}: Emergency contact cannot be same as contact number",
    )]


CROSS_FIELD_RULES: tuple[CrossFieldRule, ...] = (_emergency_contact_differs,)


class RowValidator:
    """Applies required/type/pattern/range/enum/age checks to one row."""

    def __init__(
        self,
        config: ImportConfig | None = None,
        *,
        today: Callable[[], date] = date.today,
        rules: dict[str, FieldRule] | None = None,
    ) -> None:
        self._config = config or ImportConfig()
        self._today = today
        self._rules = FIELD_RULES if rules is None else rules

    def validate(
        self,
        values: dict[str, Normalized],
        columns: list[TemplateColumn],
        row_number: int,
        unresolved: frozenset[str] = frozenset(),
    ) -> list[FieldViolation]:
        """Return every violation in the row; an empty list means the row is valid.

        ``values`` holds one entry per resolved column. Keys listed in
        ``unresolved`` had no matching header in the sheet.
        """
        violations: list[FieldViolation] = []
        for column in columns:
            if column.key in unresolved:
                if column.required:
                    violations.append(FieldViolation(
                        key=column.key,
                        code=ViolationCode.HEADER_UNRESOLVED,
                        message=f"Row {row_number}: {column.display_name} is required (column not found in file)",
                    ))
                continue
            normalized = values.get(column.key) or Normalized.empty()
            violations.extend(self.validate_field(column, normalized, row_number))

        by_key = {c.key: c for c in columns}
        for cross_rule in CROSS_FIELD_RULES:
            violations.extend(cross_rule(values, by_key, row_number))
        return violations

    def validate_field(self, column: TemplateColumn, normalized: Normalized, row_number: int) -> list[FieldViolation]:
        label = column.display_name

        def violation(code: ViolationCode, text: str) -> FieldViolation:
            return FieldViolation(key=column.key, code=code, message=f"Row {row_number}: {label} {text}")

        if normalized.is_invalid:
            return [violation(ViolationCode.FIELD_TYPE_INVALID, f"must be a valid {column.value_type}")]
        if normalized.is_empty:
            if column.required:
                return [violation(ViolationCode.FIELD_REQUIRED, "is required")]
            return []

        rule = self._rules.get(column.key) or FieldRule()
        value = normalized.value
        found: list[FieldViolation] = []

        if column.value_type in (ValueType.STRING, ValueType.ENUM):
            max_length = rule.max_length or self._config.max_string_length
            if len(value) > max_length:
                found.append(violation(ViolationCode.FIELD_OUT_OF_RANGE, f"must be at most {max_length} characters"))
            if rule.pattern and not re.fullmatch(rule.pattern, value):
                found.append(violation(ViolationCode.FIELD_PATTERN_INVALID, rule.pattern_message))

        if column.value_type == ValueType.ENUM and column.enum_values:
            if value.lower() not in {v.lower() for v in column.enum_values}:
                found.append(violation(
                    ViolationCode.FIELD_PATTERN_INVALID,
                    f"must be one of: {', '.join(column.enum_values)}",
                ))

        if column.value_type == ValueType.NUMBER:
            minimum = rule.min_value if rule.min_value is not None else _DEFAULT_MIN_NUMBER
            if value < minimum:
                found.append(violation(ViolationCode.FIELD_OUT_OF_RANGE, f"must be at least {_fmt(minimum)}"))
            if rule.max_value is not None and value > rule.max_value:
                found.append(violation(ViolationCode.FIELD_OUT_OF_RANGE, f"must be at most {_fmt(rule.max_value)}"))

        if column.value_type == ValueType.DATE and rule.min_age:
            minimum_age = self._config.minimum_age
            if compute_age(date.fromisoformat(value), self._today()) < minimum_age:
                found.append(FieldViolation(
                    key=column.key,
                    code=ViolationCode.FIELD_BELOW_MINIMUM_AGE,
                    message=f"Row {row_number}: Employee must be at least {minimum_age} years old",
                ))
        return found


def validate_row(
    values: dict[str, Normalized],
    columns: list[TemplateColumn],
    row_number: int,
    *,
    today: date | None = None,
    config: ImportConfig | None = None,
) -> list[FieldViolation]:
    """Functional wrapper around RowValidator for one-off checks."""
    validator = RowValidator(config, today=(lambda: today) if today else date.today)
    return validator.validate(values, columns, row_number)
