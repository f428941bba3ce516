"""
Target Schemas
Targeting entries attached to programs, events, VENs and resources
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator


class TargetLabel(str, Enum):
    """Well-known target types; private labels are plain strings"""
    POWER_SERVICE_LOCATION = "POWER_SERVICE_LOCATION"
    SERVICE_AREA = "SERVICE_AREA"
    GROUP = "GROUP"
    RESOURCE_NAME = "RESOURCE_NAME"
    VEN_NAME = "VEN_NAME"
    EVENT_NAME = "EVENT_NAME"
    PROGRAM_NAME = "PROGRAM_NAME"


class TargetEntry(BaseModel):
    """A target type with the values it addresses"""
    type: str = Field(..., min_length=1, description="Target type, e.g. GROUP")
    values: List[str] = Field(default_factory=list, description="Target values")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        if isinstance(v, TargetLabel):
            return v.value
        return v
