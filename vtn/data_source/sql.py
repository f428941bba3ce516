"""
SQL storage backend on SQLAlchemy async sessions.

Every operation runs in its own session. Rows targeted by an update or delete
are locked for the rest of the transaction, and cascading deletes happen in
the same transaction as the delete of the parent. Writes going through one
data source are also serialized in process.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, List, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
import structlog

from vtn.core.database import close_database
from vtn.core.errors import Conflict, NotFound
from vtn.core.identity import AuthRole, Identity
from vtn.core.permissions import Action, EntityKind, authorize
from vtn.core.security import hash_secret, verify_secret
from vtn.data_source.base import (
    AuthSource,
    DataSource,
    EventCrud,
    ProgramCrud,
    ReportCrud,
    ResourceCrud,
    VenCrud,
)
from vtn.data_source.common import new_id, paginate, touch, utc_now
from vtn.models.credential import CredentialModel
from vtn.repositories.base import CRUDBase
from vtn.repositories import (
    credential_repository,
    event_repository,
    program_repository,
    report_repository,
    resource_repository,
    ven_repository,
)
from vtn.schemas.auth import Credential, RoleClaim
from vtn.schemas.base import Entity, EntityContent, ListQuery
from vtn.schemas.event import Event, EventContent, EventQuery
from vtn.schemas.program import Program, ProgramContent, ProgramQuery
from vtn.schemas.report import Report, ReportContent, ReportQuery
from vtn.schemas.resource import Resource, ResourceContent, ResourceQuery
from vtn.schemas.ven import Ven, VenContent, VenQuery

logger = structlog.get_logger()

SessionFactory = async_sessionmaker[AsyncSession]


def content_to_json(content: EntityContent, entity_cls: Type[Entity]) -> Dict[str, Any]:
    return entity_cls.strip_server_keys(content.model_dump(mode="json", by_alias=True))


def to_program(row) -> Program:
    return Program(
        id=row.id,
        created_date_time=row.created_date_time,
        modification_date_time=row.modification_date_time,
        content=ProgramContent.model_validate(row.content),
    )


def to_event(row) -> Event:
    return Event(
        id=row.id,
        created_date_time=row.created_date_time,
        modification_date_time=row.modification_date_time,
        content=EventContent.model_validate(row.content),
    )


def to_report(row) -> Report:
    return Report(
        id=row.id,
        created_date_time=row.created_date_time,
        modification_date_time=row.modification_date_time,
        content=ReportContent.model_validate(row.content),
    )


def to_ven(row) -> Ven:
    return Ven(
        id=row.id,
        created_date_time=row.created_date_time,
        modification_date_time=row.modification_date_time,
        content=VenContent.model_validate(row.content),
    )


def to_resource(row) -> Resource:
    return Resource(
        id=row.id,
        ven_id=row.ven_id,
        created_date_time=row.created_date_time,
        modification_date_time=row.modification_date_time,
        content=ResourceContent.model_validate(row.content),
    )


def to_credential(row: CredentialModel) -> Credential:
    return Credential(
        client_id=row.client_id,
        roles=[RoleClaim.model_validate(claim) for claim in row.roles],
        created_date_time=row.created_date_time,
    )


async def list_rows(
    db: AsyncSession,
    repository: CRUDBase,
    query: ListQuery,
    convert: Callable[[Any], Entity],
    filters: Optional[Dict[str, Any]] = None,
) -> List[Entity]:
    """
    Apply column filters in SQL and paginate.

    Target filters look inside the JSON content, so with one present the
    candidates are matched here before the page is cut.
    """
    if getattr(query, "target_type", None) is None:
        rows = await repository.get_multi(db, skip=query.skip, limit=query.limit, filters=filters)
        return [convert(row) for row in rows]

    rows = await repository.get_multi(db, filters=filters)
    matching = [entity for entity in map(convert, rows) if query.matches(entity.content)]
    return paginate(matching, query)


def new_entity_values(content: EntityContent, entity_cls: Type[Entity]) -> Dict[str, Any]:
    now = utc_now()
    return {
        "id": new_id(),
        "created_date_time": now,
        "modification_date_time": now,
        "content": content_to_json(content, entity_cls),
    }


def updated_entity_values(row, content: EntityContent, entity_cls: Type[Entity]) -> Dict[str, Any]:
    return {
        "modification_date_time": touch(row.created_date_time),
        "content": content_to_json(content, entity_cls),
    }


class SqlCrud:
    """Common plumbing of the SQL access interfaces"""

    def __init__(self, session_factory: SessionFactory, write_lock: asyncio.Lock):
        self._session_factory = session_factory
        self._write_lock = write_lock

    @asynccontextmanager
    async def _write_session(self):
        """Session for a write operation; writes of one data source run one at a time"""
        async with self._write_lock:
            async with self._session_factory() as db:
                yield db

    async def _require(self, db: AsyncSession, repository: CRUDBase, id: str, what: str, for_update: bool = False):
        row = await repository.get(db, id, for_update=for_update)
        if row is None:
            raise NotFound(f"{what} {id} not found")
        return row


class SqlProgramCrud(SqlCrud, ProgramCrud):
    async def _check_unique_name(self, db: AsyncSession, name: str, exclude_id: Optional[str] = None) -> None:
        if await program_repository.get_by_name(db, name, exclude_id=exclude_id):
            raise Conflict(f"Program with name '{name}' already exists")

    async def list(self, query: ProgramQuery, identity: Identity) -> List[Program]:
        authorize(identity, EntityKind.PROGRAM, Action.READ)
        async with self._session_factory() as db:
            return await list_rows(db, program_repository, query, to_program)

    async def get(self, program_id: str, identity: Identity) -> Program:
        async with self._session_factory() as db:
            row = await self._require(db, program_repository, program_id, "Program")
            authorize(identity, EntityKind.PROGRAM, Action.READ)
            return to_program(row)

    async def create(self, content: ProgramContent, identity: Identity) -> Program:
        authorize(identity, EntityKind.PROGRAM, Action.CREATE)
        async with self._write_session() as db:
            await self._check_unique_name(db, content.program_name)
            values = new_entity_values(content, Program)
            values["program_name"] = content.program_name
            try:
                row = await program_repository.create(db, obj_in=values)
            except IntegrityError:
                raise Conflict(f"Program with name '{content.program_name}' already exists")

        logger.info("Program created", program_id=row.id, program_name=content.program_name)
        return to_program(row)

    async def update(self, program_id: str, content: ProgramContent, identity: Identity) -> Program:
        async with self._write_session() as db:
            row = await self._require(db, program_repository, program_id, "Program", for_update=True)
            authorize(identity, EntityKind.PROGRAM, Action.UPDATE)
            await self._check_unique_name(db, content.program_name, exclude_id=program_id)
            values = updated_entity_values(row, content, Program)
            values["program_name"] = content.program_name
            try:
                row = await program_repository.update(db, db_obj=row, obj_in=values)
            except IntegrityError:
                raise Conflict(f"Program with name '{content.program_name}' already exists")

        logger.info("Program updated", program_id=program_id)
        return to_program(row)

    async def delete(self, program_id: str, identity: Identity) -> Program:
        async with self._write_session() as db:
            row = await self._require(db, program_repository, program_id, "Program", for_update=True)
            authorize(identity, EntityKind.PROGRAM, Action.DELETE)
            program = to_program(row)
            events = await event_repository.get_multi(db, filters={"program_id": program_id})
            event_ids = [event.id for event in events]
            if event_ids:
                await report_repository.delete_where(db, filters={"event_id": event_ids})
            await report_repository.delete_where(db, filters={"program_id": program_id})
            await event_repository.delete_where(db, filters={"program_id": program_id})
            await program_repository.delete(db, db_obj=row)

        logger.info("Program deleted", program_id=program_id)
        return program


class SqlEventCrud(SqlCrud, EventCrud):
    async def list(self, query: EventQuery, identity: Identity) -> List[Event]:
        authorize(identity, EntityKind.EVENT, Action.READ)
        filters = {}
        if query.program_id is not None:
            filters["program_id"] = query.program_id
        async with self._session_factory() as db:
            return await list_rows(db, event_repository, query, to_event, filters)

    async def get(self, event_id: str, identity: Identity) -> Event:
        async with self._session_factory() as db:
            row = await self._require(db, event_repository, event_id, "Event")
            authorize(identity, EntityKind.EVENT, Action.READ)
            return to_event(row)

    async def create(self, content: EventContent, identity: Identity) -> Event:
        authorize(identity, EntityKind.EVENT, Action.CREATE)
        async with self._write_session() as db:
            await self._require(db, program_repository, content.program_id, "Program")
            values = new_entity_values(content, Event)
            values.update(program_id=content.program_id, event_name=content.event_name)
            row = await event_repository.create(db, obj_in=values)

        logger.info("Event created", event_id=row.id, program_id=content.program_id)
        return to_event(row)

    async def update(self, event_id: str, content: EventContent, identity: Identity) -> Event:
        async with self._write_session() as db:
            row = await self._require(db, event_repository, event_id, "Event", for_update=True)
            authorize(identity, EntityKind.EVENT, Action.UPDATE)
            await self._require(db, program_repository, content.program_id, "Program")
            values = updated_entity_values(row, content, Event)
            values.update(program_id=content.program_id, event_name=content.event_name)
            row = await event_repository.update(db, db_obj=row, obj_in=values)

        logger.info("Event updated", event_id=event_id)
        return to_event(row)

    async def delete(self, event_id: str, identity: Identity) -> Event:
        async with self._write_session() as db:
            row = await self._require(db, event_repository, event_id, "Event", for_update=True)
            authorize(identity, EntityKind.EVENT, Action.DELETE)
            event = to_event(row)
            await report_repository.delete_where(db, filters={"event_id": event_id})
            await event_repository.delete(db, db_obj=row)

        logger.info("Event deleted", event_id=event_id)
        return event


class SqlReportCrud(SqlCrud, ReportCrud):
    async def _check_parents(self, db: AsyncSession, content: ReportContent) -> None:
        await self._require(db, program_repository, content.program_id, "Program")
        await self._require(db, event_repository, content.event_id, "Event")

    async def list(self, query: ReportQuery, identity: Identity) -> List[Report]:
        authorize(identity, EntityKind.REPORT, Action.READ)
        filters = {
            column: value
            for column, value in (
                ("program_id", query.program_id),
                ("event_id", query.event_id),
                ("client_name", query.client_name),
            )
            if value is not None
        }
        async with self._session_factory() as db:
            return await list_rows(db, report_repository, query, to_report, filters)

    async def get(self, report_id: str, identity: Identity) -> Report:
        async with self._session_factory() as db:
            row = await self._require(db, report_repository, report_id, "Report")
            authorize(identity, EntityKind.REPORT, Action.READ)
            return to_report(row)

    async def create(self, content: ReportContent, identity: Identity) -> Report:
        authorize(identity, EntityKind.REPORT, Action.CREATE)
        async with self._write_session() as db:
            await self._check_parents(db, content)
            values = new_entity_values(content, Report)
            values.update(
                program_id=content.program_id,
                event_id=content.event_id,
                client_name=content.client_name,
            )
            row = await report_repository.create(db, obj_in=values)

        logger.info("Report created", report_id=row.id, event_id=content.event_id)
        return to_report(row)

    async def update(self, report_id: str, content: ReportContent, identity: Identity) -> Report:
        async with self._write_session() as db:
            row = await self._require(db, report_repository, report_id, "Report", for_update=True)
            authorize(identity, EntityKind.REPORT, Action.UPDATE)
            await self._check_parents(db, content)
            values = updated_entity_values(row, content, Report)
            values.update(
                program_id=content.program_id,
                event_id=content.event_id,
                client_name=content.client_name,
            )
            row = await report_repository.update(db, db_obj=row, obj_in=values)

        logger.info("Report updated", report_id=report_id)
        return to_report(row)

    async def delete(self, report_id: str, identity: Identity) -> Report:
        async with self._write_session() as db:
            row = await self._require(db, report_repository, report_id, "Report", for_update=True)
            authorize(identity, EntityKind.REPORT, Action.DELETE)
            report = to_report(row)
            await report_repository.delete(db, db_obj=row)

        logger.info("Report deleted", report_id=report_id)
        return report


class SqlVenCrud(SqlCrud, VenCrud):
    async def _check_unique_name(self, db: AsyncSession, name: str, exclude_id: Optional[str] = None) -> None:
        if await ven_repository.get_by_name(db, name, exclude_id=exclude_id):
            raise Conflict(f"VEN with name '{name}' already exists")

    async def list(self, query: VenQuery, identity: Identity) -> List[Ven]:
        filters = {}
        if not (identity.is_ven_manager() or identity.is_business()):
            # VEN users only ever see the VENs they hold
            filters["id"] = sorted(identity.held_ven_ids())
        async with self._session_factory() as db:
            return await list_rows(db, ven_repository, query, to_ven, filters)

    async def get(self, ven_id: str, identity: Identity) -> Ven:
        async with self._session_factory() as db:
            row = await self._require(db, ven_repository, ven_id, "VEN")
            authorize(identity, EntityKind.VEN, Action.READ, ven_id)
            return to_ven(row)

    async def create(self, content: VenContent, identity: Identity) -> Ven:
        authorize(identity, EntityKind.VEN, Action.CREATE)
        async with self._write_session() as db:
            await self._check_unique_name(db, content.ven_name)
            values = new_entity_values(content, Ven)
            values["ven_name"] = content.ven_name
            try:
                row = await ven_repository.create(db, obj_in=values)
            except IntegrityError:
                raise Conflict(f"VEN with name '{content.ven_name}' already exists")

        logger.info("VEN created", ven_id=row.id, ven_name=content.ven_name)
        return to_ven(row)

    async def update(self, ven_id: str, content: VenContent, identity: Identity) -> Ven:
        async with self._write_session() as db:
            row = await self._require(db, ven_repository, ven_id, "VEN", for_update=True)
            authorize(identity, EntityKind.VEN, Action.UPDATE, ven_id)
            await self._check_unique_name(db, content.ven_name, exclude_id=ven_id)
            values = updated_entity_values(row, content, Ven)
            values["ven_name"] = content.ven_name
            try:
                row = await ven_repository.update(db, db_obj=row, obj_in=values)
            except IntegrityError:
                raise Conflict(f"VEN with name '{content.ven_name}' already exists")

        logger.info("VEN updated", ven_id=ven_id)
        return to_ven(row)

    async def delete(self, ven_id: str, identity: Identity) -> Ven:
        async with self._write_session() as db:
            row = await self._require(db, ven_repository, ven_id, "VEN", for_update=True)
            authorize(identity, EntityKind.VEN, Action.DELETE, ven_id)
            ven = to_ven(row)
            await resource_repository.delete_where(db, filters={"ven_id": ven_id})
            await ven_repository.delete(db, db_obj=row)

        logger.info("VEN deleted", ven_id=ven_id)
        return ven


class SqlResourceCrud(SqlCrud, ResourceCrud):
    async def _require_resource(
        self, db: AsyncSession, ven_id: str, resource_id: str, for_update: bool = False
    ):
        row = await resource_repository.get_for_ven(db, ven_id, resource_id, for_update=for_update)
        if row is None:
            raise NotFound(f"Resource {resource_id} not found for VEN {ven_id}")
        return row

    async def list(self, ven_id: str, query: ResourceQuery, identity: Identity) -> List[Resource]:
        authorize(identity, EntityKind.RESOURCE, Action.READ, ven_id)
        async with self._session_factory() as db:
            return await list_rows(db, resource_repository, query, to_resource, {"ven_id": ven_id})

    async def get(self, ven_id: str, resource_id: str, identity: Identity) -> Resource:
        async with self._session_factory() as db:
            row = await self._require_resource(db, ven_id, resource_id)
            authorize(identity, EntityKind.RESOURCE, Action.READ, ven_id)
            return to_resource(row)

    async def create(self, ven_id: str, content: ResourceContent, identity: Identity) -> Resource:
        authorize(identity, EntityKind.RESOURCE, Action.CREATE, ven_id)
        async with self._write_session() as db:
            await self._require(db, ven_repository, ven_id, "VEN")
            values = new_entity_values(content, Resource)
            values.update(ven_id=ven_id, resource_name=content.resource_name)
            row = await resource_repository.create(db, obj_in=values)

        logger.info("Resource created", resource_id=row.id, ven_id=ven_id)
        return to_resource(row)

    async def update(
        self, ven_id: str, resource_id: str, content: ResourceContent, identity: Identity
    ) -> Resource:
        async with self._write_session() as db:
            row = await self._require_resource(db, ven_id, resource_id, for_update=True)
            authorize(identity, EntityKind.RESOURCE, Action.UPDATE, ven_id)
            values = updated_entity_values(row, content, Resource)
            values["resource_name"] = content.resource_name
            row = await resource_repository.update(db, db_obj=row, obj_in=values)

        logger.info("Resource updated", resource_id=resource_id, ven_id=ven_id)
        return to_resource(row)

    async def delete(self, ven_id: str, resource_id: str, identity: Identity) -> Resource:
        async with self._write_session() as db:
            row = await self._require_resource(db, ven_id, resource_id, for_update=True)
            authorize(identity, EntityKind.RESOURCE, Action.DELETE, ven_id)
            resource = to_resource(row)
            await resource_repository.delete(db, db_obj=row)

        logger.info("Resource deleted", resource_id=resource_id, ven_id=ven_id)
        return resource


class SqlAuthSource(SqlCrud, AuthSource):
    async def check_credentials(self, client_id: str, client_secret: str) -> Optional[List[AuthRole]]:
        async with self._session_factory() as db:
            row = await credential_repository.get(db, client_id)
        if row is None or not verify_secret(client_secret, row.secret_hash):
            return None
        return [AuthRole.from_claim(claim) for claim in row.roles]

    async def list_credentials(self, identity: Identity) -> List[Credential]:
        authorize(identity, EntityKind.CREDENTIAL, Action.READ)
        async with self._session_factory() as db:
            rows = await credential_repository.get_multi(db)
            return [to_credential(row) for row in rows]

    async def add_credential(
        self, client_id: str, client_secret: str, roles: List[AuthRole], identity: Identity
    ) -> Credential:
        authorize(identity, EntityKind.CREDENTIAL, Action.CREATE)
        values = {
            "client_id": client_id,
            "secret_hash": hash_secret(client_secret),
            "roles": [role.to_claim() for role in roles],
            "created_date_time": utc_now(),
        }
        async with self._write_session() as db:
            if await credential_repository.get(db, client_id) is not None:
                raise Conflict(f"Credential for client '{client_id}' already exists")
            try:
                row = await credential_repository.create(db, obj_in=values)
            except IntegrityError:
                raise Conflict(f"Credential for client '{client_id}' already exists")

        logger.info("Credential added", client_id=client_id)
        return to_credential(row)

    async def remove_credential(self, client_id: str, identity: Identity) -> Credential:
        async with self._write_session() as db:
            row = await credential_repository.get(db, client_id, for_update=True)
            if row is None:
                raise NotFound(f"Credential for client '{client_id}' not found")
            authorize(identity, EntityKind.CREDENTIAL, Action.DELETE)
            credential = to_credential(row)
            await credential_repository.delete(db, db_obj=row)

        logger.info("Credential removed", client_id=client_id)
        return credential


class SqlDataSource(DataSource):
    """Persistent backend over a SQLAlchemy async engine"""

    def __init__(self, session_factory: SessionFactory, engine: Optional[AsyncEngine] = None):
        self.engine = engine
        write_lock = asyncio.Lock()
        self._programs = SqlProgramCrud(session_factory, write_lock)
        self._events = SqlEventCrud(session_factory, write_lock)
        self._reports = SqlReportCrud(session_factory, write_lock)
        self._vens = SqlVenCrud(session_factory, write_lock)
        self._resources = SqlResourceCrud(session_factory, write_lock)
        self._auth = SqlAuthSource(session_factory, write_lock)

    @property
    def programs(self) -> ProgramCrud:
        return self._programs

    @property
    def events(self) -> EventCrud:
        return self._events

    @property
    def reports(self) -> ReportCrud:
        return self._reports

    @property
    def vens(self) -> VenCrud:
        return self._vens

    @property
    def resources(self) -> ResourceCrud:
        return self._resources

    @property
    def auth(self) -> AuthSource:
        return self._auth

    async def close(self) -> None:
        await close_database(self.engine)
