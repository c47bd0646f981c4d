"""Pydantic schemas for API request/response validation."""

from community_api.schemas.common import ErrorDetail, ErrorResponse
from community_api.schemas.communities import (
    Community,
    CommunityInput,
    Post,
    PostInput,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "Community",
    "CommunityInput",
    "Post",
    "PostInput",
]
