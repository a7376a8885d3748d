"""Pydantic models for version cursors and change list entries."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChangeListVersions(BaseModel):
    """Last fully applied change list version for each tracked entity type.

    Instances are frozen. A new record is produced with ``model_copy`` and
    handed to the version store as the result of an ``old -> new``
    transformation; nothing edits a record in place.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={"example": {"topic_version": 12, "news_resource_version": 340}},
    )

    topic_version: int = Field(default=0, ge=0, description="Cursor for topics")
    news_resource_version: int = Field(default=0, ge=0, description="Cursor for news resources")


class NetworkChangeList(BaseModel):
    """A single change notification for one entity.

    The backend sends camelCase keys (``changeListVersion``, ``isDelete``);
    both spellings are accepted.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {"id": "topic-3", "changeListVersion": 41, "isDelete": False}
        },
    )

    id: str = Field(default=..., min_length=1, description="Id of the changed entity")
    change_list_version: int = Field(
        default=..., description="Version of this change, increasing across the batch"
    )
    is_delete: bool = Field(default=False, description="True if the entity was removed")
