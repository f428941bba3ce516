"""
Storage backends behind the per-entity access interfaces
"""

from vtn.data_source.base import (
    AuthSource,
    DataSource,
    EventCrud,
    ProgramCrud,
    ReportCrud,
    ResourceCrud,
    VenCrud,
)

__all__ = [
    "AuthSource",
    "DataSource",
    "EventCrud",
    "ProgramCrud",
    "ReportCrud",
    "ResourceCrud",
    "VenCrud",
]
