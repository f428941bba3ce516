"""
Report Schemas
Request/response models and list filters for reports
"""

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from vtn.schemas.base import Entity, EntityContent, ListQuery, validate_name_length


class ReportContent(EntityContent):
    """Report sent by a VEN for an event"""
    program_id: str = Field(..., alias="programID", min_length=1, description="ID of the program the report belongs to")
    event_id: str = Field(..., alias="eventID", min_length=1, description="ID of the event the report belongs to")
    client_name: str = Field(..., description="User generated identifier, e.g. VEN name")
    report_name: Optional[str] = Field(None, description="User defined string for use in debugging or UI")
    payload_descriptors: Optional[List[Dict[str, Any]]] = None
    resources: List[Dict[str, Any]] = Field(default_factory=list, description="Reported resource data")

    @field_validator("client_name")
    @classmethod
    def validate_client_name(cls, v: str) -> str:
        return validate_name_length(v, "client name")


class Report(Entity):
    """Report as stored by the VTN"""
    content: ReportContent


class ReportQuery(ListQuery):
    """Filter parameters for listing reports"""
    program_id: Optional[str] = Field(None, alias="programID", description="Only reports of this program")
    event_id: Optional[str] = Field(None, alias="eventID", description="Only reports of this event")
    client_name: Optional[str] = Field(None, description="Only reports of this client")

    def matches(self, content: ReportContent) -> bool:
        if self.program_id is not None and content.program_id != self.program_id:
            return False
        if self.event_id is not None and content.event_id != self.event_id:
            return False
        if self.client_name is not None and content.client_name != self.client_name:
            return False
        return True
