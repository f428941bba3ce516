"""
Base Model Classes
Common fields and column types for all models
"""

from datetime import timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator

from vtn.core.database import Base
from vtn.data_source.common import new_id, utc_now

# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime that always comes back in UTC"""
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        # SQLite drops the offset
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class TimestampMixin:
    """Mixin for the server-stamped creation and modification times"""
    created_date_time = Column(UTCDateTime, default=utc_now, nullable=False, index=True)
    modification_date_time = Column(UTCDateTime, default=utc_now, nullable=False)


class EntityMixin:
    """
    Mixin for the public id plus an insertion sequence.

    ``seq`` only exists to give listings a stable creation order.
    """
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(128), default=new_id, nullable=False, unique=True, index=True)
    content = Column(JSONType, default=dict, nullable=False)


class BaseModel(Base, EntityMixin, TimestampMixin):
    """Base model with common fields"""
    __abstract__ = True
