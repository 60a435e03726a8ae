"""Blog post models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BlogAuthor(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = "Anonymous"
    avatar: str | None = None
    bio: str | None = None


class BlogImage(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: str
    alt: str = ""
    caption: str | None = None


class BlogPost(BaseModel):
    """Blog post as returned to readers; missing fields fall back to empty values."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    slug: str = ""
    title: str = ""
    subtitle: str | None = None
    author: BlogAuthor = Field(default_factory=BlogAuthor)
    publish_date: str = Field(default="", alias="publishDate")
    updated_date: str | None = Field(default=None, alias="updatedDate")
    main_image: BlogImage | None = Field(default=None, alias="mainImage")
    images: list[BlogImage] = Field(default_factory=list)
    summary: str = ""
    content: str = ""
    reading_time: int | None = Field(default=None, alias="readingTime")
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    related_posts: list[str] = Field(default_factory=list, alias="relatedPosts")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BlogPostCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    slug: str | None = None
    subtitle: str | None = None
    author: BlogAuthor = Field(default_factory=BlogAuthor)
    publish_date: str = Field(default="", alias="publishDate")
    main_image: BlogImage | None = Field(default=None, alias="mainImage")
    images: list[BlogImage] = Field(default_factory=list)
    summary: str = ""
    content: str = ""
    reading_time: int | None = Field(default=None, alias="readingTime")
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    related_posts: list[str] = Field(default_factory=list, alias="relatedPosts")


class BlogPostUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    slug: str | None = None
    subtitle: str | None = None
    author: BlogAuthor | None = None
    publish_date: str | None = Field(default=None, alias="publishDate")
    updated_date: str | None = Field(default=None, alias="updatedDate")
    main_image: BlogImage | None = Field(default=None, alias="mainImage")
    images: list[BlogImage] | None = None
    summary: str | None = None
    content: str | None = None
    reading_time: int | None = Field(default=None, alias="readingTime")
    tags: list[str] | None = None
    categories: list[str] | None = None
    related_posts: list[str] | None = Field(default=None, alias="relatedPosts")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class CreatedResponse(BaseModel):
    """Generic id acknowledgement for create/update/delete calls."""

    success: bool = True
    id: str
