"""In-memory store for single-process deployments and tests.

Data is lost on restart.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from community_api.schemas import Community, CommunityInput, Post, PostInput
from community_api.stores.base import (
    CommunityNotFoundError,
    PostNotFoundError,
    new_id,
    utc_now,
    validate_community_input,
    validate_post_input,
)

logger = logging.getLogger("uvicorn.error")


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Waiting writers block new readers, so a steady stream of reads cannot starve a write.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class InMemoryStore:
    """Thread-safe in-memory store.

    The lock is never held across an await, so every operation is atomic
    from the point of view of other tasks and threads.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._communities: dict[str, Community] = {}
        # dicts keep insertion order, but the explicit list keeps ordering independent of that
        self._community_order: list[str] = []
        self._posts: dict[str, list[Post]] = {}

    async def connect(self) -> None:
        logger.info("In-memory store ready")

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        with self._lock.write():
            self._communities.clear()
            self._community_order.clear()
            self._posts.clear()

    async def list_communities(self) -> list[Community]:
        with self._lock.read():
            return [self._communities[cid].model_copy() for cid in self._community_order]

    async def create_community(self, data: CommunityInput) -> Community:
        validate_community_input(data)

        community = Community(id=new_id(), name=data.name, description=data.description)
        with self._lock.write():
            self._communities[community.id] = community
            self._community_order.append(community.id)
            self._posts[community.id] = []
        return community.model_copy()

    async def delete_community(self, community_id: str) -> None:
        with self._lock.write():
            if community_id not in self._communities:
                raise CommunityNotFoundError(community_id)

            del self._communities[community_id]
            self._posts.pop(community_id, None)
            for i, cid in enumerate(self._community_order):
                if cid == community_id:
                    del self._community_order[i]
                    break

    async def list_posts_by_community(self, community_id: str) -> list[Post]:
        with self._lock.read():
            if community_id not in self._communities:
                raise CommunityNotFoundError(community_id)
            return [post.model_copy() for post in self._posts.get(community_id, [])]

    async def create_post(self, community_id: str, data: PostInput) -> Post:
        validate_post_input(data)

        with self._lock.write():
            if community_id not in self._communities:
                raise CommunityNotFoundError(community_id)

            post = Post(
                id=new_id(),
                community_id=community_id,
                author_id=data.author_id,
                title=data.title,
                content=data.content,
                created_at=utc_now(),
            )
            self._posts.setdefault(community_id, []).append(post)
            return post.model_copy()

    async def delete_post(self, community_id: str, post_id: str) -> None:
        with self._lock.write():
            if community_id not in self._communities:
                raise CommunityNotFoundError(community_id)

            posts = self._posts.get(community_id, [])
            for i, post in enumerate(posts):
                if post.id == post_id:
                    del posts[i]
                    return
            raise PostNotFoundError(community_id, post_id)
