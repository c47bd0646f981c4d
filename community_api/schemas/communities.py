"""Schemas for communities and posts.

Input models are loose field bags: required-field checks belong to the store,
so an empty or missing name/title/content reaches it as "" and is rejected there.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class CommunityInput(BaseModel):
    """Fields accepted when creating a community."""

    name: str = ""
    description: str = ""


class Community(BaseModel):
    """A named collection that owns zero or more posts."""

    id: str
    name: str
    description: str = ""


class PostInput(BaseModel):
    """Fields accepted when creating a post."""

    author_id: str = Field(alias="authorId", default="")
    title: str = ""
    content: str = ""

    model_config = {"populate_by_name": True}


class Post(BaseModel):
    """A titled, authored message belonging to exactly one community."""

    id: str
    community_id: str = Field(alias="communityId")
    author_id: str = Field(alias="authorId", default="")
    title: str
    content: str
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}
