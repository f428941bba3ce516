"""
In-memory storage backend.

All access interfaces share one store guarded by a re-entrant lock; the lock
is only held in sections that do not await, so a single operation is atomic
with respect to every other operation. Stored entities are copied on the way
in and on the way out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import threading
from typing import Dict, List, Optional, Tuple

import structlog

from vtn.core.errors import Conflict, NotFound
from vtn.core.identity import AuthRole, Identity
from vtn.core.permissions import Action, EntityKind, authorize, is_allowed
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
from vtn.schemas.auth import Credential, RoleClaim
from vtn.schemas.event import Event, EventContent, EventQuery
from vtn.schemas.program import Program, ProgramContent, ProgramQuery
from vtn.schemas.report import Report, ReportContent, ReportQuery
from vtn.schemas.resource import Resource, ResourceContent, ResourceQuery
from vtn.schemas.ven import Ven, VenContent, VenQuery

logger = structlog.get_logger()


@dataclass
class StoredCredential:
    client_id: str
    secret_hash: str
    roles: Tuple[AuthRole, ...]
    created_date_time: datetime

    def to_schema(self) -> Credential:
        return Credential(
            client_id=self.client_id,
            roles=[RoleClaim.from_role(role) for role in self.roles],
            created_date_time=self.created_date_time,
        )


class MemoryStore:
    """Tables of the in-memory backend, keyed by id in creation order"""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.programs: Dict[str, Program] = {}
        self.events: Dict[str, Event] = {}
        self.reports: Dict[str, Report] = {}
        self.vens: Dict[str, Ven] = {}
        self.resources: Dict[str, Resource] = {}
        self.credentials: Dict[str, StoredCredential] = {}

    def require_program(self, program_id: str) -> Program:
        program = self.programs.get(program_id)
        if program is None:
            raise NotFound(f"Program {program_id} not found")
        return program

    def require_event(self, event_id: str) -> Event:
        event = self.events.get(event_id)
        if event is None:
            raise NotFound(f"Event {event_id} not found")
        return event

    def require_report(self, report_id: str) -> Report:
        report = self.reports.get(report_id)
        if report is None:
            raise NotFound(f"Report {report_id} not found")
        return report

    def require_ven(self, ven_id: str) -> Ven:
        ven = self.vens.get(ven_id)
        if ven is None:
            raise NotFound(f"VEN {ven_id} not found")
        return ven

    def require_resource(self, ven_id: str, resource_id: str) -> Resource:
        resource = self.resources.get(resource_id)
        if resource is None or resource.ven_id != ven_id:
            raise NotFound(f"Resource {resource_id} not found for VEN {ven_id}")
        return resource

    def delete_reports(self, predicate) -> None:
        for report_id in [key for key, report in self.reports.items() if predicate(report)]:
            del self.reports[report_id]


class MemoryProgramCrud(ProgramCrud):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _check_unique_name(self, name: str, exclude_id: Optional[str] = None) -> None:
        for program in self._store.programs.values():
            if program.id != exclude_id and program.content.program_name == name:
                raise Conflict(f"Program with name '{name}' already exists")

    async def list(self, query: ProgramQuery, identity: Identity) -> List[Program]:
        authorize(identity, EntityKind.PROGRAM, Action.READ)
        with self._store.lock:
            matching = [p for p in self._store.programs.values() if query.matches(p.content)]
            return [p.model_copy(deep=True) for p in paginate(matching, query)]

    async def get(self, program_id: str, identity: Identity) -> Program:
        with self._store.lock:
            program = self._store.require_program(program_id)
            authorize(identity, EntityKind.PROGRAM, Action.READ)
            return program.model_copy(deep=True)

    async def create(self, content: ProgramContent, identity: Identity) -> Program:
        authorize(identity, EntityKind.PROGRAM, Action.CREATE)
        with self._store.lock:
            self._check_unique_name(content.program_name)
            now = utc_now()
            program = Program(
                id=new_id(),
                created_date_time=now,
                modification_date_time=now,
                content=Program.stored_content(content),
            )
            self._store.programs[program.id] = program

        logger.info("Program created", program_id=program.id, program_name=content.program_name)
        return program.model_copy(deep=True)

    async def update(self, program_id: str, content: ProgramContent, identity: Identity) -> Program:
        with self._store.lock:
            current = self._store.require_program(program_id)
            authorize(identity, EntityKind.PROGRAM, Action.UPDATE)
            self._check_unique_name(content.program_name, exclude_id=program_id)
            program = current.model_copy(update={
                "content": Program.stored_content(content),
                "modification_date_time": touch(current.created_date_time),
            })
            self._store.programs[program_id] = program

        logger.info("Program updated", program_id=program_id)
        return program.model_copy(deep=True)

    async def delete(self, program_id: str, identity: Identity) -> Program:
        with self._store.lock:
            program = self._store.require_program(program_id)
            authorize(identity, EntityKind.PROGRAM, Action.DELETE)
            event_ids = {k for k, e in self._store.events.items() if e.content.program_id == program_id}
            self._store.delete_reports(
                lambda r: r.content.program_id == program_id or r.content.event_id in event_ids
            )
            for event_id in event_ids:
                del self._store.events[event_id]
            del self._store.programs[program_id]

        logger.info("Program deleted", program_id=program_id)
        return program


class MemoryEventCrud(EventCrud):
    def __init__(self, store: MemoryStore):
        self._store = store

    async def list(self, query: EventQuery, identity: Identity) -> List[Event]:
        authorize(identity, EntityKind.EVENT, Action.READ)
        with self._store.lock:
            matching = [e for e in self._store.events.values() if query.matches(e.content)]
            return [e.model_copy(deep=True) for e in paginate(matching, query)]

    async def get(self, event_id: str, identity: Identity) -> Event:
        with self._store.lock:
            event = self._store.require_event(event_id)
            authorize(identity, EntityKind.EVENT, Action.READ)
            return event.model_copy(deep=True)

    async def create(self, content: EventContent, identity: Identity) -> Event:
        authorize(identity, EntityKind.EVENT, Action.CREATE)
        with self._store.lock:
            self._store.require_program(content.program_id)
            now = utc_now()
            event = Event(
                id=new_id(),
                created_date_time=now,
                modification_date_time=now,
                content=Event.stored_content(content),
            )
            self._store.events[event.id] = event

        logger.info("Event created", event_id=event.id, program_id=content.program_id)
        return event.model_copy(deep=True)

    async def update(self, event_id: str, content: EventContent, identity: Identity) -> Event:
        with self._store.lock:
            current = self._store.require_event(event_id)
            authorize(identity, EntityKind.EVENT, Action.UPDATE)
            self._store.require_program(content.program_id)
            event = current.model_copy(update={
                "content": Event.stored_content(content),
                "modification_date_time": touch(current.created_date_time),
            })
            self._store.events[event_id] = event

        logger.info("Event updated", event_id=event_id)
        return event.model_copy(deep=True)

    async def delete(self, event_id: str, identity: Identity) -> Event:
        with self._store.lock:
            event = self._store.require_event(event_id)
            authorize(identity, EntityKind.EVENT, Action.DELETE)
            self._store.delete_reports(lambda r: r.content.event_id == event_id)
            del self._store.events[event_id]

        logger.info("Event deleted", event_id=event_id)
        return event


class MemoryReportCrud(ReportCrud):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _check_parents(self, content: ReportContent) -> None:
        self._store.require_program(content.program_id)
        self._store.require_event(content.event_id)

    async def list(self, query: ReportQuery, identity: Identity) -> List[Report]:
        authorize(identity, EntityKind.REPORT, Action.READ)
        with self._store.lock:
            matching = [r for r in self._store.reports.values() if query.matches(r.content)]
            return [r.model_copy(deep=True) for r in paginate(matching, query)]

    async def get(self, report_id: str, identity: Identity) -> Report:
        with self._store.lock:
            report = self._store.require_report(report_id)
            authorize(identity, EntityKind.REPORT, Action.READ)
            return report.model_copy(deep=True)

    async def create(self, content: ReportContent, identity: Identity) -> Report:
        authorize(identity, EntityKind.REPORT, Action.CREATE)
        with self._store.lock:
            self._check_parents(content)
            now = utc_now()
            report = Report(
                id=new_id(),
                created_date_time=now,
                modification_date_time=now,
                content=Report.stored_content(content),
            )
            self._store.reports[report.id] = report

        logger.info("Report created", report_id=report.id, event_id=content.event_id)
        return report.model_copy(deep=True)

    async def update(self, report_id: str, content: ReportContent, identity: Identity) -> Report:
        with self._store.lock:
            current = self._store.require_report(report_id)
            authorize(identity, EntityKind.REPORT, Action.UPDATE)
            self._check_parents(content)
            report = current.model_copy(update={
                "content": Report.stored_content(content),
                "modification_date_time": touch(current.created_date_time),
            })
            self._store.reports[report_id] = report

        logger.info("Report updated", report_id=report_id)
        return report.model_copy(deep=True)

    async def delete(self, report_id: str, identity: Identity) -> Report:
        with self._store.lock:
            report = self._store.require_report(report_id)
            authorize(identity, EntityKind.REPORT, Action.DELETE)
            del self._store.reports[report_id]

        logger.info("Report deleted", report_id=report_id)
        return report


class MemoryVenCrud(VenCrud):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _check_unique_name(self, name: str, exclude_id: Optional[str] = None) -> None:
        for ven in self._store.vens.values():
            if ven.id != exclude_id and ven.content.ven_name == name:
                raise Conflict(f"VEN with name '{name}' already exists")

    async def list(self, query: VenQuery, identity: Identity) -> List[Ven]:
        # VEN users only ever see the VENs they hold
        with self._store.lock:
            matching = [
                v for v in self._store.vens.values()
                if query.matches(v.content) and self._visible(identity, v.id)
            ]
            return [v.model_copy(deep=True) for v in paginate(matching, query)]

    @staticmethod
    def _visible(identity: Identity, ven_id: str) -> bool:
        return is_allowed(identity, EntityKind.VEN, Action.READ, ven_id)

    async def get(self, ven_id: str, identity: Identity) -> Ven:
        with self._store.lock:
            ven = self._store.require_ven(ven_id)
            authorize(identity, EntityKind.VEN, Action.READ, ven_id)
            return ven.model_copy(deep=True)

    async def create(self, content: VenContent, identity: Identity) -> Ven:
        authorize(identity, EntityKind.VEN, Action.CREATE)
        with self._store.lock:
            self._check_unique_name(content.ven_name)
            now = utc_now()
            ven = Ven(
                id=new_id(),
                created_date_time=now,
                modification_date_time=now,
                content=Ven.stored_content(content),
            )
            self._store.vens[ven.id] = ven

        logger.info("VEN created", ven_id=ven.id, ven_name=content.ven_name)
        return ven.model_copy(deep=True)

    async def update(self, ven_id: str, content: VenContent, identity: Identity) -> Ven:
        with self._store.lock:
            current = self._store.require_ven(ven_id)
            authorize(identity, EntityKind.VEN, Action.UPDATE, ven_id)
            self._check_unique_name(content.ven_name, exclude_id=ven_id)
            ven = current.model_copy(update={
                "content": Ven.stored_content(content),
                "modification_date_time": touch(current.created_date_time),
            })
            self._store.vens[ven_id] = ven

        logger.info("VEN updated", ven_id=ven_id)
        return ven.model_copy(deep=True)

    async def delete(self, ven_id: str, identity: Identity) -> Ven:
        with self._store.lock:
            ven = self._store.require_ven(ven_id)
            authorize(identity, EntityKind.VEN, Action.DELETE, ven_id)
            for resource_id in [k for k, r in self._store.resources.items() if r.ven_id == ven_id]:
                del self._store.resources[resource_id]
            del self._store.vens[ven_id]

        logger.info("VEN deleted", ven_id=ven_id)
        return ven


class MemoryResourceCrud(ResourceCrud):
    def __init__(self, store: MemoryStore):
        self._store = store

    async def list(self, ven_id: str, query: ResourceQuery, identity: Identity) -> List[Resource]:
        authorize(identity, EntityKind.RESOURCE, Action.READ, ven_id)
        with self._store.lock:
            matching = [
                r for r in self._store.resources.values()
                if r.ven_id == ven_id and query.matches(r.content)
            ]
            return [r.model_copy(deep=True) for r in paginate(matching, query)]

    async def get(self, ven_id: str, resource_id: str, identity: Identity) -> Resource:
        with self._store.lock:
            resource = self._store.require_resource(ven_id, resource_id)
            authorize(identity, EntityKind.RESOURCE, Action.READ, ven_id)
            return resource.model_copy(deep=True)

    async def create(self, ven_id: str, content: ResourceContent, identity: Identity) -> Resource:
        authorize(identity, EntityKind.RESOURCE, Action.CREATE, ven_id)
        with self._store.lock:
            self._store.require_ven(ven_id)
            now = utc_now()
            resource = Resource(
                id=new_id(),
                ven_id=ven_id,
                created_date_time=now,
                modification_date_time=now,
                content=Resource.stored_content(content),
            )
            self._store.resources[resource.id] = resource

        logger.info("Resource created", resource_id=resource.id, ven_id=ven_id)
        return resource.model_copy(deep=True)

    async def update(
        self, ven_id: str, resource_id: str, content: ResourceContent, identity: Identity
    ) -> Resource:
        with self._store.lock:
            current = self._store.require_resource(ven_id, resource_id)
            authorize(identity, EntityKind.RESOURCE, Action.UPDATE, ven_id)
            resource = current.model_copy(update={
                "content": Resource.stored_content(content),
                "modification_date_time": touch(current.created_date_time),
            })
            self._store.resources[resource_id] = resource

        logger.info("Resource updated", resource_id=resource_id, ven_id=ven_id)
        return resource.model_copy(deep=True)

    async def delete(self, ven_id: str, resource_id: str, identity: Identity) -> Resource:
        with self._store.lock:
            resource = self._store.require_resource(ven_id, resource_id)
            authorize(identity, EntityKind.RESOURCE, Action.DELETE, ven_id)
            del self._store.resources[resource_id]

        logger.info("Resource deleted", resource_id=resource_id, ven_id=ven_id)
        return resource


class MemoryAuthSource(AuthSource):
    def __init__(self, store: MemoryStore):
        self._store = store

    async def check_credentials(self, client_id: str, client_secret: str) -> Optional[List[AuthRole]]:
        with self._store.lock:
            stored = self._store.credentials.get(client_id)
        if stored is None or not verify_secret(client_secret, stored.secret_hash):
            return None
        return list(stored.roles)

    async def list_credentials(self, identity: Identity) -> List[Credential]:
        authorize(identity, EntityKind.CREDENTIAL, Action.READ)
        with self._store.lock:
            return [stored.to_schema() for stored in self._store.credentials.values()]

    async def add_credential(
        self, client_id: str, client_secret: str, roles: List[AuthRole], identity: Identity
    ) -> Credential:
        authorize(identity, EntityKind.CREDENTIAL, Action.CREATE)
        secret_hash = hash_secret(client_secret)
        with self._store.lock:
            if client_id in self._store.credentials:
                raise Conflict(f"Credential for client '{client_id}' already exists")
            stored = StoredCredential(
                client_id=client_id,
                secret_hash=secret_hash,
                roles=tuple(roles),
                created_date_time=utc_now(),
            )
            self._store.credentials[client_id] = stored

        logger.info("Credential added", client_id=client_id)
        return stored.to_schema()

    async def remove_credential(self, client_id: str, identity: Identity) -> Credential:
        with self._store.lock:
            stored = self._store.credentials.get(client_id)
            if stored is None:
                raise NotFound(f"Credential for client '{client_id}' not found")
            authorize(identity, EntityKind.CREDENTIAL, Action.DELETE)
            del self._store.credentials[client_id]

        logger.info("Credential removed", client_id=client_id)
        return stored.to_schema()


class InMemoryDataSource(DataSource):
    """Volatile backend; state lives as long as the process"""

    def __init__(self) -> None:
        self.store = MemoryStore()
        self._programs = MemoryProgramCrud(self.store)
        self._events = MemoryEventCrud(self.store)
        self._reports = MemoryReportCrud(self.store)
        self._vens = MemoryVenCrud(self.store)
        self._resources = MemoryResourceCrud(self.store)
        self._auth = MemoryAuthSource(self.store)

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
