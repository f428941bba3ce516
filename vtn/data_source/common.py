"""
Helpers shared by the storage backends
"""

from datetime import datetime, timezone
from typing import List, Sequence, TypeVar
import uuid

from vtn.schemas.base import ListQuery

T = TypeVar("T")


def new_id() -> str:
    """Server-assigned, URL safe object id"""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def touch(created: datetime) -> datetime:
    """Modification timestamp for an edit; never earlier than creation"""
    return max(utc_now(), created)


def paginate(items: Sequence[T], query: ListQuery) -> List[T]:
    return list(items[query.skip:query.skip + query.limit])
