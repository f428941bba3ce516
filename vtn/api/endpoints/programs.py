"""
Program Endpoints
Program CRUD
"""

from typing import Any, List

from fastapi import APIRouter, Depends, status

from vtn.core.deps import ObjectId, get_identity, get_program_query, get_programs
from vtn.core.identity import Identity
from vtn.data_source.base import ProgramCrud
from vtn.schemas.program import Program, ProgramContent, ProgramQuery

router = APIRouter()


@router.get("", response_model=List[Program], response_model_exclude_none=True)
async def list_programs(
    query: ProgramQuery = Depends(get_program_query),
    identity: Identity = Depends(get_identity),
    programs: ProgramCrud = Depends(get_programs),
) -> Any:
    """List programs, optionally filtered by target."""
    return await programs.list(query, identity)


@router.post("", response_model=Program, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_program(
    content: ProgramContent,
    identity: Identity = Depends(get_identity),
    programs: ProgramCrud = Depends(get_programs),
) -> Any:
    """Create a new program."""
    return await programs.create(content, identity)


@router.get("/{program_id}", response_model=Program, response_model_exclude_none=True)
async def get_program(
    program_id: ObjectId,
    identity: Identity = Depends(get_identity),
    programs: ProgramCrud = Depends(get_programs),
) -> Any:
    return await programs.get(program_id, identity)


@router.put("/{program_id}", response_model=Program, response_model_exclude_none=True)
async def update_program(
    program_id: ObjectId,
    content: ProgramContent,
    identity: Identity = Depends(get_identity),
    programs: ProgramCrud = Depends(get_programs),
) -> Any:
    """Replace the content of a program."""
    return await programs.update(program_id, content, identity)


@router.delete("/{program_id}", response_model=Program, response_model_exclude_none=True)
async def delete_program(
    program_id: ObjectId,
    identity: Identity = Depends(get_identity),
    programs: ProgramCrud = Depends(get_programs),
) -> Any:
    """Delete a program together with its events and reports."""
    return await programs.delete(program_id, identity)
