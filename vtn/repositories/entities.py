"""
Entity Repositories
Database operations for programs, events, reports, VENs and resources
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from vtn.models.entities import EventModel, ProgramModel, ReportModel, ResourceModel, VenModel
from vtn.repositories.base import CRUDBase


class ProgramRepository(CRUDBase[ProgramModel]):
    """Repository for program database operations"""

    async def get_by_name(
        self,
        db: AsyncSession,
        name: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[ProgramModel]:
        """Get program by name (for uniqueness check)"""
        query = select(ProgramModel).where(ProgramModel.program_name == name)
        if exclude_id:
            query = query.where(ProgramModel.id != exclude_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()


class VenRepository(CRUDBase[VenModel]):
    """Repository for VEN database operations"""

    async def get_by_name(
        self,
        db: AsyncSession,
        name: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[VenModel]:
        """Get VEN by name (for uniqueness check)"""
        query = select(VenModel).where(VenModel.ven_name == name)
        if exclude_id:
            query = query.where(VenModel.id != exclude_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()


class ResourceRepository(CRUDBase[ResourceModel]):
    """Repository for resources, always scoped to the owning VEN"""

    async def get_for_ven(
        self,
        db: AsyncSession,
        ven_id: str,
        resource_id: str,
        for_update: bool = False,
    ) -> Optional[ResourceModel]:
        query = select(ResourceModel).where(
            ResourceModel.id == resource_id,
            ResourceModel.ven_id == ven_id,
        )
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()


program_repository = ProgramRepository(ProgramModel)
event_repository = CRUDBase(EventModel)
report_repository = CRUDBase(ReportModel)
ven_repository = VenRepository(VenModel)
resource_repository = ResourceRepository(ResourceModel)
