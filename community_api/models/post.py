"""Post model.

Posts reference their community with ON DELETE CASCADE, so deleting a
community removes its posts in the same statement.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from community_api.models.base import Base


class PostRecord(Base):
    """A post row."""

    __tablename__ = "posts"
    __table_args__ = (Index("ix_posts_community_seq", "community_id", "seq"),)

    # Insertion order; created_at can tie
    seq: Mapped[int] = mapped_column(primary_key=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, index=True)
    community_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("communities.id", ondelete="CASCADE"),
    )
    author_id: Mapped[str | None] = mapped_column(Text)
    title: Mapped[str] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Post {self.id} community={self.community_id}>"
