"""SQLAlchemy ORM models.

Models represent database tables:
- communities: Named collections of posts
- posts: Messages owned by a community (cascade on community delete)
- users, community_memberships: Reserved for membership features
"""

from community_api.models.base import Base
from community_api.models.community import CommunityRecord
from community_api.models.post import PostRecord
from community_api.models.user import CommunityMembershipRecord, UserRecord

__all__ = ["Base", "CommunityRecord", "PostRecord", "UserRecord", "CommunityMembershipRecord"]
