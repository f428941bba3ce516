"""
Program Schemas
Request/response models and list filters for programs
"""

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from vtn.schemas.base import Entity, EntityContent, TargetQuery, validate_name_length
from vtn.schemas.target import TargetLabel


class ProgramContent(EntityContent):
    """Program specific metadata provided by the VTN to VENs"""
    name_label = TargetLabel.PROGRAM_NAME.value
    name_field = "program_name"

    program_name: str = Field(..., description="Short name to uniquely identify program")
    program_long_name: Optional[str] = Field(None, description="Long name of program for human readability")
    retailer_name: Optional[str] = Field(None, description="Short name of energy retailer providing the program")
    retailer_long_name: Optional[str] = Field(None, description="Long name of energy retailer")
    program_type: Optional[str] = Field(None, description="A program defined categorization")
    country: Optional[str] = Field(None, description="Alpha-2 code per ISO 3166-1")
    principal_subdivision: Optional[str] = Field(None, description="Coding per ISO 3166-2")
    time_zone_offset: Optional[str] = Field(None, description="ISO 8601 duration from UTC")
    interval_period: Optional[Dict[str, Any]] = None
    program_descriptions: Optional[List[Dict[str, Any]]] = None
    binding_events: Optional[bool] = Field(None, description="True if events are fixed once transmitted")
    local_price: Optional[bool] = Field(None, description="True if events have been adapted from a grid event")
    payload_descriptors: Optional[List[Dict[str, Any]]] = None

    @field_validator("program_name")
    @classmethod
    def validate_program_name(cls, v: str) -> str:
        return validate_name_length(v, "program name")


class Program(Entity):
    """Program as stored by the VTN"""
    content: ProgramContent


class ProgramQuery(TargetQuery):
    """Filter parameters for listing programs"""
