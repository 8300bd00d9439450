"""Pydantic schema for executive-approval threshold decisions."""

import enum

from pydantic import BaseModel


class ThresholdType(str, enum.Enum):
    WORKS = "works"
    GOODS_SERVICES = "goods_services"
    NONE = "none"


class ThresholdAlert(BaseModel):
    is_required: bool
    message: str
    level: str
    threshold_type: ThresholdType
    amount: float
    threshold: float
