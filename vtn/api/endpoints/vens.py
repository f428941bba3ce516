"""
VEN Endpoints
VEN CRUD
"""

from typing import Any, List

from fastapi import APIRouter, Depends, status

from vtn.core.deps import ObjectId, get_identity, get_ven_query, get_vens
from vtn.core.identity import Identity
from vtn.data_source.base import VenCrud
from vtn.schemas.ven import Ven, VenContent, VenQuery

router = APIRouter()


@router.get("", response_model=List[Ven], response_model_exclude_none=True)
async def list_vens(
    query: VenQuery = Depends(get_ven_query),
    identity: Identity = Depends(get_identity),
    vens: VenCrud = Depends(get_vens),
) -> Any:
    """List the VENs visible to the caller, optionally filtered by target."""
    return await vens.list(query, identity)


@router.post("", response_model=Ven, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_ven(
    content: VenContent,
    identity: Identity = Depends(get_identity),
    vens: VenCrud = Depends(get_vens),
) -> Any:
    """Register a new VEN."""
    return await vens.create(content, identity)


@router.get("/{ven_id}", response_model=Ven, response_model_exclude_none=True)
async def get_ven(
    ven_id: ObjectId,
    identity: Identity = Depends(get_identity),
    vens: VenCrud = Depends(get_vens),
) -> Any:
    return await vens.get(ven_id, identity)


@router.put("/{ven_id}", response_model=Ven, response_model_exclude_none=True)
async def update_ven(
    ven_id: ObjectId,
    content: VenContent,
    identity: Identity = Depends(get_identity),
    vens: VenCrud = Depends(get_vens),
) -> Any:
    """Replace the content of a VEN."""
    return await vens.update(ven_id, content, identity)


@router.delete("/{ven_id}", response_model=Ven, response_model_exclude_none=True)
async def delete_ven(
    ven_id: ObjectId,
    identity: Identity = Depends(get_identity),
    vens: VenCrud = Depends(get_vens),
) -> Any:
    """Delete a VEN together with its resources."""
    return await vens.delete(ven_id, identity)
