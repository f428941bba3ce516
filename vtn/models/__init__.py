"""
SQLAlchemy Models Package
OpenADR VTN Database Models
"""

from vtn.models.credential import CredentialModel
from vtn.models.entities import EventModel, ProgramModel, ReportModel, ResourceModel, VenModel

__all__ = [
    "CredentialModel",
    "EventModel",
    "ProgramModel",
    "ReportModel",
    "ResourceModel",
    "VenModel",
]
