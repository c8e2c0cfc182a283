"""Shared document helpers.

Every collection stores camelCase field names, a BSON ObjectId under ``_id``
and naive UTC timestamps, which is what pymongo hands back by default. The
``MongoModel`` base maps those documents to snake_case pydantic models."""

import datetime
from typing import Any

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime.datetime:
    """Current time as a naive UTC datetime, the way MongoDB stores it."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime.datetime) -> datetime.datetime:
    """Normalizes an aware datetime to naive UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)


class MongoModel(BaseModel):
    id: ObjectId = Field(default_factory=ObjectId, alias="_id")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
        protected_namespaces=(),
    )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class TimestampMixin(MongoModel):
    created_at: datetime.datetime = Field(default_factory=utcnow)
    updated_at: datetime.datetime = Field(default_factory=utcnow)
