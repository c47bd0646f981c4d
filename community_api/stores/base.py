"""Store contract shared by the in-memory and relational backends.

Every backend provides the same six operations with the same error semantics:

- list_communities / create_community / delete_community
- list_posts_by_community / create_post / delete_post

Listing order is creation order for both communities and posts, on every backend.
"""

from datetime import datetime, timezone
from typing import Protocol, runtime_checkable
from uuid import uuid4

from community_api.schemas import Community, CommunityInput, Post, PostInput


class StoreError(Exception):
    """Base class for errors raised by store operations."""


class ValidationError(StoreError):
    """Caller-supplied input failed a precondition (empty required field)."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"{field} is required")


class NotFoundError(StoreError):
    """A referenced entity does not exist."""


class CommunityNotFoundError(NotFoundError):
    def __init__(self, community_id: str) -> None:
        self.community_id = community_id
        super().__init__(f"community not found: {community_id}")


class PostNotFoundError(NotFoundError):
    def __init__(self, community_id: str, post_id: str) -> None:
        self.community_id = community_id
        self.post_id = post_id
        super().__init__(f"post not found: {post_id}")


@runtime_checkable
class Store(Protocol):
    """Persistence contract consumed by the HTTP layer."""

    async def connect(self) -> None:
        """Verify connectivity and make sure the backing schema exists."""
        ...

    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        ...

    async def list_communities(self) -> list[Community]:
        ...

    async def create_community(self, data: CommunityInput) -> Community:
        ...

    async def delete_community(self, community_id: str) -> None:
        ...

    async def list_posts_by_community(self, community_id: str) -> list[Post]:
        ...

    async def create_post(self, community_id: str, data: PostInput) -> Post:
        ...

    async def delete_post(self, community_id: str, post_id: str) -> None:
        ...


def new_id() -> str:
    """Generate an opaque entity identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_community_input(data: CommunityInput) -> None:
    """Raise ValidationError unless the community name is non-empty."""
    if not data.name or not data.name.strip():
        raise ValidationError("name")


def validate_post_input(data: PostInput) -> None:
    """Raise ValidationError unless title and content are non-empty."""
    if not data.title or not data.title.strip():
        raise ValidationError("title")
    if not data.content or not data.content.strip():
        raise ValidationError("content")
