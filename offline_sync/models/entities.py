"""Pydantic models for the synchronized entities."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Topic(BaseModel):
    """A followable topic."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "2",
                "name": "Compose",
                "shortDescription": "UI toolkit",
                "longDescription": "Declarative UI for native apps",
                "url": "https://example.com/topics/compose",
                "imageUrl": "https://example.com/img/compose.svg",
            }
        },
    )

    id: str = Field(default=..., min_length=1, description="Stable topic identifier")
    name: str = Field(default="", description="Display name")
    short_description: str = Field(default="", description="One-line description")
    long_description: str = Field(default="", description="Full description")
    url: str = Field(default="", description="Link to the topic page")
    image_url: str = Field(default="", description="Topic image")


class NewsResource(BaseModel):
    """A news item (article, video, episode) tagged with topic ids."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "125",
                "title": "Navigation in multi-module apps",
                "content": "Structuring navigation across feature modules",
                "url": "https://example.com/news/125",
                "headerImageUrl": "https://example.com/img/125.png",
                "publishDate": "2022-08-04T23:00:00Z",
                "type": "Article",
                "topics": ["2", "5"],
            }
        },
    )

    id: str = Field(default=..., min_length=1, description="Stable news resource identifier")
    title: str = Field(default="", description="Headline")
    content: str = Field(default="", description="Summary text")
    url: str = Field(default="", description="Link to the full resource")
    header_image_url: str | None = Field(default=None, description="Header image")
    publish_date: datetime | None = Field(default=None, description="Publication timestamp")
    type: str = Field(default="", description="Resource kind, e.g. Article or Video")
    topics: list[str] = Field(default_factory=list, description="Ids of tagged topics")
