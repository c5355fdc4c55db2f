"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from paydesk.core.protocols import (
    IBenefitSource,
    ICacheBackend,
    IEmployeeDirectory,
    IPayrunStore,
    ITemplateStore,
)

__all__ = ["IBenefitSource", "ICacheBackend", "IEmployeeDirectory", "IPayrunStore", "ITemplateStore"]
