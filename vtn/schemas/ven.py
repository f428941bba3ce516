"""
VEN Schemas
Request/response models and list filters for VENs
"""

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from vtn.schemas.base import Entity, EntityContent, TargetQuery, validate_name_length
from vtn.schemas.target import TargetLabel


class VenContent(EntityContent):
    """Virtual end node registered with the VTN"""
    name_label = TargetLabel.VEN_NAME.value
    name_field = "ven_name"

    ven_name: str = Field(..., description="User generated identifier, may be VEN identifier provisioned out-of-band")
    attributes: Optional[List[Dict[str, Any]]] = None

    @field_validator("ven_name")
    @classmethod
    def validate_ven_name(cls, v: str) -> str:
        return validate_name_length(v, "ven name")


class Ven(Entity):
    """VEN as stored by the VTN"""
    content: VenContent


class VenQuery(TargetQuery):
    """Filter parameters for listing VENs"""
