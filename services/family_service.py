"""
Family group service for CulinariaLegacy application.

Handles family recipe books: group creation, invite codes, joining with a
code, membership checks and the per-group member/recipe counts shown on
the family page. Each multi-step operation runs inside one database
transaction so a failure part-way leaves nothing behind.
"""

import random
import string
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Dict, Any

from models import (
    FamilyGroup, FamilyGroupMember, FamilyGroupInvite, FamilyGroupSummary, Recipe,
    ROLE_ADMIN, ROLE_MEMBER
)
from utils.config import get_config
from .auth_service import AuthContext
from .database_service import DatabaseService, get_database_service, parse_timestamp
from .errors import (
    AlreadyExistsError, ExpiredError, InvalidInputError, NotFoundError, UnauthorizedError
)
from .recipe_service import row_to_recipe

logger = logging.getLogger(__name__)

INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_LENGTH = 8


def generate_invite_code(length: int = INVITE_CODE_LENGTH, rng: Optional[random.Random] = None) -> str:
    """Random uppercase alphanumeric code; not meant to be unguessable"""
    chooser = rng or random
    return ''.join(chooser.choices(INVITE_CODE_ALPHABET, k=length))


def normalize_invite_code(code: str) -> str:
    return (code or "").strip().upper()


class FamilyService:
    """
    Service for family groups and their invite/membership workflow.
    """

    def __init__(self, database_service: Optional[DatabaseService] = None,
                 clock: Callable[[], datetime] = datetime.now,
                 invite_expiry_days: Optional[int] = None):
        config = get_config()
        self.db = database_service or get_database_service()
        self.clock = clock
        self.invite_expiry_days = config.invite_expiry_days if invite_expiry_days is None else invite_expiry_days
        if self.invite_expiry_days <= 0:
            raise ValueError(f"invite_expiry_days must be positive, got {self.invite_expiry_days}")

    # Groups

    def create_group(self, ctx: AuthContext, name: str, description: str = "") -> FamilyGroup:
        """Create a group and make its creator the admin"""
        user = ctx.require_user()
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Veuillez saisir un nom pour votre livre de famille")

        now = self.clock()
        with self.db.transaction() as conn:
            group_row = self.db.insert('family_groups', {
                'name': name,
                'description': (description or "").strip(),
                'created_by': user.id,
                'created_at': now,
            }, conn=conn)
            self.db.insert('family_group_members', {
                'group_id': group_row['id'],
                'user_id': user.id,
                'role': ROLE_ADMIN,
                'joined_at': now,
            }, conn=conn)

        logger.info(f"Family group created: {name} ({group_row['id']}) by {user.id}")
        return _row_to_group(group_row)

    def get_group(self, group_id: str, conn=None) -> FamilyGroup:
        row = self.db.select_one('family_groups', {'id': group_id}, conn=conn)
        if not row:
            raise NotFoundError(f"Family group {group_id} not found")
        return _row_to_group(row)

    def list_user_groups(self, ctx: AuthContext, search_term: str = "") -> List[FamilyGroupSummary]:
        """Groups the user belongs to, with member and recipe counts"""
        user = ctx.require_user()
        term = (search_term or "").strip().lower()

        with self.db.transaction() as conn:
            memberships = self.db.select('family_group_members', {'user_id': user.id}, conn=conn)
            roles = {m['group_id']: m['role'] for m in memberships}
            if not roles:
                return []
            group_rows = self.db.select('family_groups', {'id': list(roles)}, order_by='name', conn=conn)

            summaries = []
            for row in group_rows:
                if term and term not in row['name'].lower():
                    continue
                summaries.append(FamilyGroupSummary(
                    group=_row_to_group(row),
                    member_count=self.count_members(row['id'], conn=conn),
                    recipe_count=self.count_recipes(row['id'], conn=conn),
                    role=roles[row['id']]
                ))
        return summaries

    def count_members(self, group_id: str, conn=None) -> int:
        return self.db.count('family_group_members', {'group_id': group_id}, conn=conn)

    def count_recipes(self, group_id: str, conn=None) -> int:
        return self.db.count('recipes', {'family_group_id': group_id}, conn=conn)

    # Membership

    def get_membership(self, group_id: str, user_id: str, conn=None) -> Optional[FamilyGroupMember]:
        row = self.db.select_one('family_group_members',
                                 {'group_id': group_id, 'user_id': user_id}, conn=conn)
        return _row_to_member(row) if row else None

    def get_group_members(self, ctx: AuthContext, group_id: str) -> List[FamilyGroupMember]:
        with self.db.transaction() as conn:
            self._require_member(ctx, group_id, conn=conn)
            rows = self.db.select('family_group_members', {'group_id': group_id},
                                  order_by='joined_at', conn=conn)
        return [_row_to_member(row) for row in rows]

    def get_group_recipes(self, ctx: AuthContext, group_id: str) -> List[Recipe]:
        with self.db.transaction() as conn:
            self._require_member(ctx, group_id, conn=conn)
            rows = self.db.select('recipes', {'family_group_id': group_id}, order_by='title', conn=conn)
        return [row_to_recipe(row) for row in rows]

    def share_recipe_with_group(self, ctx: AuthContext, recipe_id: str, group_id: str) -> Recipe:
        """Attach a recipe the user owns to one of the user's groups"""
        user = ctx.require_user()
        with self.db.transaction() as conn:
            self._require_member(ctx, group_id, conn=conn)
            changed = self.db.update('recipes', {'family_group_id': group_id, 'updated_at': self.clock()},
                                     {'id': recipe_id, 'user_id': user.id}, conn=conn)
            if not changed:
                raise NotFoundError(f"Recipe {recipe_id} not found for user {user.id}")
            row = self.db.select_one('recipes', {'id': recipe_id}, conn=conn)

        logger.info(f"Recipe {recipe_id} shared with group {group_id}")
        return row_to_recipe(row)

    # Invites

    def generate_invite(self, ctx: AuthContext, group_id: str) -> FamilyGroupInvite:
        """
        Create an invite code for a group; admins only.

        The code expires invite_expiry_days after creation. There is no retry
        on a code collision: the unique constraint rejects it and the caller
        gets AlreadyExistsError.
        """
        user = ctx.require_user()
        now = self.clock()
        with self.db.transaction() as conn:
            self.get_group(group_id, conn=conn)
            self._require_admin(ctx, group_id, conn=conn)
            row = self.db.insert('family_group_invites', {
                'group_id': group_id,
                'code': generate_invite_code(),
                'expiry_date': now + timedelta(days=self.invite_expiry_days),
                'created_by': user.id,
                'created_at': now,
            }, conn=conn)

        logger.info(f"Invite generated for group {group_id} by {user.id}")
        return _row_to_invite(row)

    def redeem_invite(self, ctx: AuthContext, code: str) -> FamilyGroupMember:
        """
        Join the group behind an invite code.

        Fails with NotFoundError for an unknown code, ExpiredError once the
        code has expired, and AlreadyExistsError when the user is already a
        member (nothing is written in that case).
        """
        user = ctx.require_user()
        code = normalize_invite_code(code)
        if not code:
            raise InvalidInputError("Veuillez saisir le code d'invitation")

        with self.db.transaction() as conn:
            invite_row = self.db.select_one('family_group_invites', {'code': code}, conn=conn)
            if not invite_row:
                logger.warning(f"Invite redemption failed - unknown code for user {user.id}")
                raise NotFoundError("Le code d'invitation n'existe pas")

            invite = _row_to_invite(invite_row)
            if invite.is_expired(self.clock()):
                logger.warning(f"Invite redemption failed - code expired: {invite.id}")
                raise ExpiredError("Cette invitation a expiré")

            if self.get_membership(invite.group_id, user.id, conn=conn):
                raise AlreadyExistsError("Vous êtes déjà membre de ce groupe familial")

            member_row = self.db.insert('family_group_members', {
                'group_id': invite.group_id,
                'user_id': user.id,
                'role': ROLE_MEMBER,
                'joined_at': self.clock(),
            }, conn=conn)

        logger.info(f"User {user.id} joined group {invite.group_id} with invite {invite.id}")
        return _row_to_member(member_row)

    def list_invites(self, ctx: AuthContext, group_id: str) -> List[FamilyGroupInvite]:
        with self.db.transaction() as conn:
            self._require_admin(ctx, group_id, conn=conn)
            rows = self.db.select('family_group_invites', {'group_id': group_id},
                                  order_by='-created_at', conn=conn)
        return [_row_to_invite(row) for row in rows]

    def revoke_invite(self, ctx: AuthContext, invite_id: str) -> None:
        """Delete an invite so its code can no longer be redeemed"""
        with self.db.transaction() as conn:
            row = self.db.select_one('family_group_invites', {'id': invite_id}, conn=conn)
            if not row:
                raise NotFoundError(f"Invite {invite_id} not found")
            self._require_admin(ctx, row['group_id'], conn=conn)
            self.db.delete('family_group_invites', {'id': invite_id}, conn=conn)
        logger.info(f"Invite {invite_id} revoked")

    # Helper Methods

    def _require_member(self, ctx: AuthContext, group_id: str, conn=None) -> FamilyGroupMember:
        user = ctx.require_user()
        member = self.get_membership(group_id, user.id, conn=conn)
        if member is None:
            raise UnauthorizedError("Vous n'êtes pas membre de ce groupe familial")
        return member

    def _require_admin(self, ctx: AuthContext, group_id: str, conn=None) -> FamilyGroupMember:
        member = self._require_member(ctx, group_id, conn=conn)
        if not member.is_admin:
            raise UnauthorizedError("Seuls les administrateurs du groupe peuvent gérer les invitations")
        return member


def _row_to_group(row: Dict[str, Any]) -> FamilyGroup:
    return FamilyGroup(
        id=row['id'],
        name=row['name'],
        created_by=row['created_by'],
        description=row.get('description') or '',
        created_at=parse_timestamp(row.get('created_at')) or datetime.now()
    )


def _row_to_member(row: Dict[str, Any]) -> FamilyGroupMember:
    return FamilyGroupMember(
        id=row['id'],
        group_id=row['group_id'],
        user_id=row['user_id'],
        role=row.get('role') or ROLE_MEMBER,
        joined_at=parse_timestamp(row.get('joined_at')) or datetime.now()
    )


def _row_to_invite(row: Dict[str, Any]) -> FamilyGroupInvite:
    return FamilyGroupInvite(
        id=row['id'],
        group_id=row['group_id'],
        code=row['code'],
        created_by=row['created_by'],
        expiry_date=parse_timestamp(row.get('expiry_date')),
        created_at=parse_timestamp(row.get('created_at')) or datetime.now()
    )


# Global service instance
_family_service: Optional[FamilyService] = None


def get_family_service(database_service: Optional[DatabaseService] = None) -> FamilyService:
    """Factory function to get family service instance"""
    global _family_service
    if _family_service is None or database_service is not None:
        _family_service = FamilyService(database_service)
    return _family_service
