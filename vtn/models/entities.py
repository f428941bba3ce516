"""
Entity Models
Programs, events, reports, VENs and their resources

The full client payload is kept in ``content``; the columns next to it are
copies of the fields the service filters on or enforces constraints for.
"""

from sqlalchemy import Column, ForeignKey, Index, String

from vtn.models.base import BaseModel


class ProgramModel(BaseModel):
    """Demand response program"""
    __tablename__ = "programs"

    program_name = Column(String(128), nullable=False, unique=True)

    def __repr__(self):
        return f"<Program(id='{self.id}', name='{self.program_name}')>"


class EventModel(BaseModel):
    """Event of a program"""
    __tablename__ = "events"

    program_id = Column(String(128), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    event_name = Column(String(128), nullable=True)

    def __repr__(self):
        return f"<Event(id='{self.id}', program_id='{self.program_id}')>"


class ReportModel(BaseModel):
    """Report sent by a VEN for an event"""
    __tablename__ = "reports"

    program_id = Column(String(128), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False)
    event_id = Column(String(128), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    client_name = Column(String(128), nullable=False)

    __table_args__ = (
        Index("ix_report_program_event", "program_id", "event_id"),
        Index("ix_report_client_name", "client_name"),
    )

    def __repr__(self):
        return f"<Report(id='{self.id}', event_id='{self.event_id}', client='{self.client_name}')>"


class VenModel(BaseModel):
    """Virtual end node"""
    __tablename__ = "vens"

    ven_name = Column(String(128), nullable=False, unique=True)

    def __repr__(self):
        return f"<Ven(id='{self.id}', name='{self.ven_name}')>"


class ResourceModel(BaseModel):
    """Resource owned by a VEN"""
    __tablename__ = "resources"

    ven_id = Column(String(128), ForeignKey("vens.id", ondelete="CASCADE"), nullable=False, index=True)
    resource_name = Column(String(128), nullable=False)

    __table_args__ = (
        Index("ix_resource_ven_name", "ven_id", "resource_name"),
    )

    def __repr__(self):
        return f"<Resource(id='{self.id}', ven_id='{self.ven_id}', name='{self.resource_name}')>"
