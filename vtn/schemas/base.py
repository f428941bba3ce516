"""
Base Pydantic Schemas
Common schemas and base classes for entities, queries and problem responses
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Set, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_serializer,
    model_validator,
)
from pydantic.alias_generators import to_camel

from vtn.core.errors import ValidationFailed
from vtn.schemas.target import TargetEntry

NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 128

# Object ids are URL safe
ID_PATTERN = r"^[a-zA-Z0-9_-]*$"
ID_MAX_LENGTH = 128

# Paging bounds shared by every list operation
DEFAULT_LIMIT = 50
MAX_LIMIT = 50


class BaseSchema(BaseModel):
    """Base schema with common configuration"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )


def validate_name_length(value: str, what: str) -> str:
    """Names must be 1..=128 characters long"""
    length = len(value)
    if not NAME_MIN_LENGTH <= length <= NAME_MAX_LENGTH:
        raise ValueError(
            f"{what} length {length} outside of allowed range "
            f"{NAME_MIN_LENGTH}..={NAME_MAX_LENGTH}"
        )
    return value


class EntityContent(BaseSchema):
    """
    Client-supplied payload of an entity.

    Fields the service does not interpret are kept as-is and returned
    unchanged.
    """
    model_config = ConfigDict(extra="allow", str_strip_whitespace=False)

    # Target label matched against the entity's own name field
    name_label: ClassVar[Optional[str]] = None
    name_field: ClassVar[Optional[str]] = None

    object_type: Optional[str] = None
    targets: Optional[List[TargetEntry]] = None

    def entity_name(self) -> Optional[str]:
        if self.name_field is None:
            return None
        return getattr(self, self.name_field)

    def matches_target(self, target_type: str, target_values: List[str]) -> bool:
        """Check whether the entity is addressed by a target filter"""
        wanted = set(target_values)
        if self.name_label is not None and target_type == self.name_label:
            return self.entity_name() in wanted
        return any(
            entry.type == target_type and wanted.intersection(entry.values)
            for entry in self.targets or []
        )


class Entity(BaseSchema):
    """
    Stored entity: server-assigned id and timestamps plus the content.

    On the wire the content is flattened next to the server fields.
    """
    id: str = Field(..., description="URL safe VTN assigned object ID")
    created_date_time: datetime = Field(..., description="VTN provisioned on object creation")
    modification_date_time: datetime = Field(..., description="VTN provisioned on object modification")
    content: EntityContent

    @classmethod
    def server_keys(cls) -> Set[str]:
        """Field names and wire names of the server-assigned fields"""
        keys = set()
        for name, field in cls.model_fields.items():
            if name != "content":
                keys.update({name, field.alias or name})
        return keys

    @classmethod
    def strip_server_keys(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        server_keys = cls.server_keys()
        return {key: value for key, value in data.items() if key not in server_keys}

    @classmethod
    def stored_content(cls, content: EntityContent) -> EntityContent:
        """Deep copy of the content without client keys shadowing a server field"""
        stored = content.model_copy(deep=True)
        extra = stored.__pydantic_extra__
        if extra:
            for key in cls.server_keys().intersection(extra):
                del extra[key]
        return stored

    @model_validator(mode="before")
    @classmethod
    def nest_content(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "content" in data:
            return data
        server_keys = cls.server_keys()
        nested = {key: value for key, value in data.items() if key in server_keys}
        nested["content"] = {key: value for key, value in data.items() if key not in server_keys}
        return nested

    @model_serializer(mode="wrap")
    def flatten_content(self, handler):
        data = handler(self)
        content = data.pop("content", None) or {}
        # Server fields win over client keys of the same name
        for key, value in content.items():
            data.setdefault(key, value)
        return data


class ListQuery(BaseSchema):
    """Pagination parameters shared by every list operation"""
    model_config = ConfigDict(extra="forbid")

    skip: int = Field(0, ge=0, description="Number of records to skip for pagination")
    limit: int = Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Maximum number of records to return")


class TargetQuery(ListQuery):
    """List parameters with the targetType/targetValues pair"""
    target_type: Optional[str] = Field(None, description="Targeting type, e.g. GROUP")
    target_values: Optional[List[str]] = Field(None, description="Target values, e.g. group names")

    @field_validator("target_type")
    @classmethod
    def validate_target_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v:
            raise ValueError("targetType cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_target_pair(self):
        if (self.target_type is None) != (self.target_values is None):
            raise ValueError(
                "targetType and targetValues query parameter must either both be set "
                "or not set at the same time."
            )
        return self

    def matches(self, content: EntityContent) -> bool:
        if self.target_type is None:
            return True
        return content.matches_target(self.target_type, self.target_values)


QueryType = TypeVar("QueryType", bound=ListQuery)


def format_errors(errors: Sequence[Dict[str, Any]]) -> str:
    """Render pydantic error dicts as a single problem detail string"""
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "__root__")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def format_validation_error(exc: ValidationError) -> str:
    return format_errors(exc.errors())


def parse_query(query_cls: Type[QueryType], params: Dict[str, Any]) -> QueryType:
    """
    Build a validated list query from untrusted parameters.

    Unset parameters (``None``) fall back to their defaults. Any violation
    raises ``ValidationFailed`` so that no storage call is attempted.
    """
    data = {key: value for key, value in params.items() if value is not None}
    try:
        return query_cls.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailed(format_validation_error(exc))


class Problem(BaseModel):
    """RFC 7807 problem details"""
    type: str = Field("about:blank", description="Problem type URI")
    title: Optional[str] = Field(None, description="Short summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Explanation of this occurrence")
    instance: Optional[str] = Field(None, description="URI of this occurrence")
