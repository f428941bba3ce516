"""
Resource Schemas
Request/response models and list filters for VEN resources
"""

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from vtn.schemas.base import Entity, EntityContent, TargetQuery, validate_name_length
from vtn.schemas.target import TargetLabel


class ResourceContent(EntityContent):
    """A device or group of devices managed by a VEN"""
    name_label = TargetLabel.RESOURCE_NAME.value
    name_field = "resource_name"

    resource_name: str = Field(..., description="User generated identifier, resource may be configured with identifier out-of-band")
    attributes: Optional[List[Dict[str, Any]]] = None

    @field_validator("resource_name")
    @classmethod
    def validate_resource_name(cls, v: str) -> str:
        return validate_name_length(v, "resource name")


class Resource(Entity):
    """Resource as stored by the VTN; owned by exactly one VEN"""
    ven_id: str = Field(..., alias="venID", description="ID of the VEN owning the resource")
    content: ResourceContent


class ResourceQuery(TargetQuery):
    """Filter parameters for listing the resources of a VEN"""
