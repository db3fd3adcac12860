"""
Family group models for the CulinariaLegacy application.

A family group is a shared recipe book: members join through invite codes
and see the recipes attached to the group.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

ROLE_ADMIN = 'admin'
ROLE_MEMBER = 'member'


@dataclass
class FamilyGroup:
    """Named family recipe book"""
    id: str
    name: str
    created_by: str
    description: str = ""
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class FamilyGroupMember:
    """Membership of one user in one group"""
    id: str
    group_id: str
    user_id: str
    role: str = ROLE_MEMBER
    joined_at: datetime = field(default_factory=datetime.now)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass
class FamilyGroupInvite:
    """
    Shareable invite code for a group.
    An invite without expiry_date never expires; it stays usable by any
    number of people until it expires or an admin revokes it.
    """
    id: str
    group_id: str
    code: str
    created_by: str
    expiry_date: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expiry_date is None:
            return False
        return self.expiry_date < (now or datetime.now())


@dataclass
class FamilyGroupSummary:
    """Group listing row with its member and recipe counts"""
    group: FamilyGroup
    member_count: int = 0
    recipe_count: int = 0
    role: str = ROLE_MEMBER

    @property
    def id(self) -> str:
        return self.group.id

    @property
    def name(self) -> str:
        return self.group.name
