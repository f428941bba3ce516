"""
Event Endpoints
Event CRUD
"""

from typing import Any, List

from fastapi import APIRouter, Depends, status

from vtn.core.deps import ObjectId, get_identity, get_event_query, get_events
from vtn.core.identity import Identity
from vtn.data_source.base import EventCrud
from vtn.schemas.event import Event, EventContent, EventQuery

router = APIRouter()


@router.get("", response_model=List[Event], response_model_exclude_none=True)
async def list_events(
    query: EventQuery = Depends(get_event_query),
    identity: Identity = Depends(get_identity),
    events: EventCrud = Depends(get_events),
) -> Any:
    """List events, optionally filtered by program and target."""
    return await events.list(query, identity)


@router.post("", response_model=Event, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_event(
    content: EventContent,
    identity: Identity = Depends(get_identity),
    events: EventCrud = Depends(get_events),
) -> Any:
    """Create an event of an existing program."""
    return await events.create(content, identity)


@router.get("/{event_id}", response_model=Event, response_model_exclude_none=True)
async def get_event(
    event_id: ObjectId,
    identity: Identity = Depends(get_identity),
    events: EventCrud = Depends(get_events),
) -> Any:
    return await events.get(event_id, identity)


@router.put("/{event_id}", response_model=Event, response_model_exclude_none=True)
async def update_event(
    event_id: ObjectId,
    content: EventContent,
    identity: Identity = Depends(get_identity),
    events: EventCrud = Depends(get_events),
) -> Any:
    """Replace the content of an event."""
    return await events.update(event_id, content, identity)


@router.delete("/{event_id}", response_model=Event, response_model_exclude_none=True)
async def delete_event(
    event_id: ObjectId,
    identity: Identity = Depends(get_identity),
    events: EventCrud = Depends(get_events),
) -> Any:
    """Delete an event together with its reports."""
    return await events.delete(event_id, identity)
