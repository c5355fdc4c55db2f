"""Column template models: how spreadsheet headers map onto system fields."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

CUSTOM_KEY_PREFIX = "custom_"
CUSTOM_SYSTEM_LABEL = "Custom Field"


class ImportDomain(StrEnum):
    EMPLOYEE = "employee"
    PAYRUN = "payrun"


class ValueType(StrEnum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    ENUM = "enum"


class TemplateColumn(BaseModel):
    """A single configurable column in an import template."""

    key: str  # system field identifier, never renamed
    display_name: str  # header text the user sees in the spreadsheet
    system_label: str  # canonical label, immutable
    required: bool = False
    value_type: ValueType = ValueType.STRING
    enum_values: list[str] = Field(default_factory=list)

    model_config = {"str_strip_whitespace": True}

    @property
    def is_custom(self) -> bool:
        return self.key.startswith(CUSTOM_KEY_PREFIX)

    @property
    def is_protected(self) -> bool:
        """Required system columns cannot be removed from a template."""
        return self.required and not self.is_custom
