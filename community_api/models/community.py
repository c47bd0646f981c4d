"""Community model.

Rows are written with application-assigned ids so the relational store produces
the same identifiers as the in-memory store. ``seq`` is the surrogate key and
gives the listing order.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from community_api.models.base import Base


class CommunityRecord(Base):
    """A community row."""

    __tablename__ = "communities"

    seq: Mapped[int] = mapped_column(primary_key=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, index=True)
    name: Mapped[str] = mapped_column(Text)
    description: Mapped[str] = mapped_column(Text, default="", server_default="")

    def __repr__(self) -> str:
        return f"<Community {self.id} {self.name!r}>"
