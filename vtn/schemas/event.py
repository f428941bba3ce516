"""
Event Schemas
Request/response models and list filters for events
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from vtn.schemas.base import Entity, EntityContent, TargetQuery
from vtn.schemas.target import TargetLabel


class EventContent(EntityContent):
    """Event of a program, carrying the intervals VENs act on"""
    name_label = TargetLabel.EVENT_NAME.value
    name_field = "event_name"

    program_id: str = Field(..., alias="programID", min_length=1, description="ID of the program the event belongs to")
    event_name: Optional[str] = Field(None, description="User defined string for use in debugging or UI")
    priority: Optional[int] = Field(None, ge=0, description="Relative priority of event, 0 is highest")
    report_descriptors: Optional[List[Dict[str, Any]]] = None
    payload_descriptors: Optional[List[Dict[str, Any]]] = None
    interval_period: Optional[Dict[str, Any]] = None
    intervals: List[Dict[str, Any]] = Field(default_factory=list, description="Event intervals")


class Event(Entity):
    """Event as stored by the VTN"""
    content: EventContent


class EventQuery(TargetQuery):
    """Filter parameters for listing events"""
    program_id: Optional[str] = Field(None, alias="programID", description="Only events of this program")

    def matches(self, content: EventContent) -> bool:
        if self.program_id is not None and content.program_id != self.program_id:
            return False
        return super().matches(content)
