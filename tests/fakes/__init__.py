"""Shared test doubles: re-export memory backends."""

from __future__ import annotations

from paydesk.persistence.memory_backend import (
    MemoryBenefitSource,
    MemoryCacheBackend,
    MemoryEmployeeDirectory,
    MemoryPayrunStore,
    MemoryTemplateStore,
)

__all__ = [
    "MemoryBenefitSource",
    "MemoryCacheBackend",
    "MemoryEmployeeDirectory",
    "MemoryPayrunStore",
    "MemoryTemplateStore",
]
