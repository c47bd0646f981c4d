"""Community and post endpoints.

GET    /communities                                  - list communities (creation order)
POST   /communities                                  - create a community
DELETE /communities/{community_id}                   - delete a community and its posts
GET    /communities/{community_id}/posts             - list posts (creation order)
POST   /communities/{community_id}/posts             - create a post
DELETE /communities/{community_id}/posts/{post_id}   - delete a post

Routers are thin: store errors are mapped to HTTP responses by the app's exception handlers.
"""

from fastapi import APIRouter, Depends, Path, Request, Response, status

from community_api.schemas import Community, CommunityInput, ErrorResponse, Post, PostInput
from community_api.stores import Store

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Community or post not found"}}
BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Missing required field or malformed body"}}


def get_store(request: Request) -> Store:
    """Store configured for this application."""
    return request.app.state.store


@router.get("", response_model=list[Community])
async def list_communities(store: Store = Depends(get_store)) -> list[Community]:
    return await store.list_communities()


@router.post(
    "",
    response_model=Community,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST,
)
async def create_community(data: CommunityInput, store: Store = Depends(get_store)) -> Community:
    """Create a community. ``name`` is required."""
    return await store.create_community(data)


@router.delete(
    "/{community_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
)
async def delete_community(
    community_id: str = Path(description="Community ID"),
    store: Store = Depends(get_store),
) -> Response:
    """Delete a community together with all of its posts."""
    await store.delete_community(community_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{community_id}/posts", response_model=list[Post], responses=NOT_FOUND)
async def list_posts(
    community_id: str = Path(description="Community ID"),
    store: Store = Depends(get_store),
) -> list[Post]:
    return await store.list_posts_by_community(community_id)


@router.post(
    "/{community_id}/posts",
    response_model=Post,
    status_code=status.HTTP_201_CREATED,
    responses={**BAD_REQUEST, **NOT_FOUND},
)
async def create_post(
    data: PostInput,
    community_id: str = Path(description="Community ID"),
    store: Store = Depends(get_store),
) -> Post:
    """Create a post in a community. ``title`` and ``content`` are required."""
    return await store.create_post(community_id, data)


@router.delete(
    "/{community_id}/posts/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
)
async def delete_post(
    community_id: str = Path(description="Community ID"),
    post_id: str = Path(description="Post ID"),
    store: Store = Depends(get_store),
) -> Response:
    await store.delete_post(community_id, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
