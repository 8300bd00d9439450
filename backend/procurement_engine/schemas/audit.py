"""Pydantic schema for audit records built by the engine."""

from typing import Any

from pydantic import BaseModel, Field


class AuditRecord(BaseModel):
    action: str
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: str
