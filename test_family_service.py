#!/usr/bin/env python3
"""
Test script for family group functionality.
Tests group creation, invite generation, code redemption and group counts.
"""

import sys
from pathlib import Path
from datetime import datetime

import pytest

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from services.database_service import DatabaseService
from services.auth_service import AuthService, AuthContext
from services.family_service import (
    FamilyService, generate_invite_code, normalize_invite_code, INVITE_CODE_ALPHABET, INVITE_CODE_LENGTH
)
from services.recipe_service import RecipeService
from services.errors import (
    AlreadyExistsError, ExpiredError, InvalidInputError, NotFoundError, UnauthorizedError
)
from models import ROLE_ADMIN, ROLE_MEMBER


def create_test_setup():
    """In-memory database with two signed-in users"""
    db = DatabaseService(":memory:")
    auth = AuthService(db)
    alice = AuthContext.signed_in(auth.register_user("alice@test.com", "Password123", "Alice"), auth)
    bob = AuthContext.signed_in(auth.register_user("bob@test.com", "Password123", "Bob"), auth)
    family = FamilyService(db, invite_expiry_days=7)
    return db, family, alice, bob


def test_generated_codes_format():
    """Codes are 8 characters drawn from A-Z0-9"""
    print("Testing invite code format...")

    for _ in range(200):
        code = generate_invite_code(8)
        assert len(code) == 8
        assert all(c in INVITE_CODE_ALPHABET for c in code)

    db, family, alice, bob = create_test_setup()
    group = family.create_group(alice, "Famille Martin")
    invite = family.generate_invite(alice, group.id)
    assert len(invite.code) == 8
    assert set(invite.code) <= set(INVITE_CODE_ALPHABET)
    assert invite.expiry_date is not None and invite.expiry_date > datetime.now()

    assert normalize_invite_code("  ab12cd34 ") == "AB12CD34"

    print("[OK] Invite code format correct")


def test_default_service_generates_eight_character_codes():
    db, family, alice, bob = create_test_setup()
    group = family.create_group(alice, "Famille Martin")

    default_family = FamilyService(db)
    assert len(default_family.generate_invite(alice, group.id).code) == INVITE_CODE_LENGTH == 8

    with pytest.raises(ValueError):
        FamilyService(db, invite_expiry_days=0)


def test_create_group_makes_creator_admin():
    print("Testing group creation...")
    db, family, alice, bob = create_test_setup()

    group = family.create_group(alice, "  Famille Martin  ", "Recettes de mamie")
    assert group.name == "Famille Martin"
    assert group.created_by == alice.user_id

    member = family.get_membership(group.id, alice.user_id)
    assert member is not None
    assert member.role == ROLE_ADMIN
    assert family.count_members(group.id) == 1

    with pytest.raises(InvalidInputError):
        family.create_group(alice, "   ")

    with pytest.raises(UnauthorizedError):
        family.create_group(AuthContext(), "Famille Anonyme")

    print("[OK] Group creation working correctly")


def test_redeem_invite_adds_exactly_one_member():
    print("Testing invite redemption...")
    db, family, alice, bob = create_test_setup()
    group = family.create_group(alice, "Famille Martin")
    invite = family.generate_invite(alice, group.id)

    before = family.count_members(group.id)
    member = family.redeem_invite(bob, f"  {invite.code.lower()} ")
    after = family.count_members(group.id)

    assert after == before + 1
    assert member.group_id == group.id
    assert member.user_id == bob.user_id
    assert member.role == ROLE_MEMBER

    print("[OK] Redemption adds one member")


def test_redeem_as_existing_member_leaves_count_unchanged():
    print("Testing duplicate membership...")
    db, family, alice, bob = create_test_setup()
    group = family.create_group(alice, "Famille Martin")
    invite = family.generate_invite(alice, group.id)
    family.redeem_invite(bob, invite.code)

    before = family.count_members(group.id)
    with pytest.raises(AlreadyExistsError):
        family.redeem_invite(bob, invite.code)
    with pytest.raises(AlreadyExistsError):
        family.redeem_invite(alice, invite.code)
    assert family.count_members(group.id) == before

    print("[OK] Existing members are not added twice")


def test_expired_code_fails_even_for_members():
    print("Testing expired invites...")
    db, family, alice, bob = create_test_setup()
    group = family.create_group(alice, "Famille Martin")

    past = FamilyService(db, clock=lambda: datetime(2020, 1, 1), invite_expiry_days=7)
    invite = past.generate_invite(alice, group.id)
    assert invite.expiry_date == datetime(2020, 1, 8)

    with pytest.raises(ExpiredError):
        family.redeem_invite(bob, invite.code)
    # Expiry is checked before membership
    with pytest.raises(ExpiredError):
        family.redeem_invite(alice, invite.code)

    assert family.count_members(group.id) == 1

    # Still valid the day before expiry
    on_time = FamilyService(db, clock=lambda: datetime(2020, 1, 7))
    on_time.redeem_invite(bob, invite.code)
    assert family.count_members(group.id) == 2

    print("[OK] Expired invites rejected")


def test_unknown_and_blank_codes():
    db, family, alice, bob = create_test_setup()

    with pytest.raises(NotFoundError):
        family.redeem_invite(bob, "ZZZZZZZZ")
    with pytest.raises(InvalidInputError):
        family.redeem_invite(bob, "   ")

    print("[OK] Unknown and blank codes rejected")


def test_only_admins_manage_invites():
    print("Testing invite permissions...")
    db, family, alice, bob = create_test_setup()
    group = family.create_group(alice, "Famille Martin")
    invite = family.generate_invite(alice, group.id)
    family.redeem_invite(bob, invite.code)

    with pytest.raises(UnauthorizedError):
        family.generate_invite(bob, group.id)
    with pytest.raises(UnauthorizedError):
        family.list_invites(bob, group.id)
    with pytest.raises(UnauthorizedError):
        family.revoke_invite(bob, invite.id)
    with pytest.raises(NotFoundError):
        family.generate_invite(alice, "missing-group")

    print("[OK] Invite management restricted to admins")


def test_revoked_invite_cannot_be_redeemed():
    db, family, alice, bob = create_test_setup()
    group = family.create_group(alice, "Famille Martin")
    invite = family.generate_invite(alice, group.id)

    assert [i.id for i in family.list_invites(alice, group.id)] == [invite.id]
    family.revoke_invite(alice, invite.id)
    assert family.list_invites(alice, group.id) == []

    with pytest.raises(NotFoundError):
        family.redeem_invite(bob, invite.code)

    print("[OK] Revoked invites rejected")


def test_list_user_groups_with_counts():
    print("Testing group listing...")
    db, family, alice, bob = create_test_setup()
    recipes = RecipeService(db)

    martin = family.create_group(alice, "Famille Martin")
    family.create_group(alice, "Cousins")
    recipe = recipes.create_recipe(alice, {'title': 'Tarte Tatin'})
    family.share_recipe_with_group(alice, recipe.id, martin.id)
    family.redeem_invite(bob, family.generate_invite(alice, martin.id).code)

    groups = family.list_user_groups(alice)
    assert [g.name for g in groups] == ["Cousins", "Famille Martin"]

    summary = groups[1]
    assert summary.member_count == 2
    assert summary.recipe_count == 1
    assert summary.role == ROLE_ADMIN

    bob_groups = family.list_user_groups(bob)
    assert len(bob_groups) == 1
    assert bob_groups[0].role == ROLE_MEMBER

    assert [g.name for g in family.list_user_groups(alice, "martin")] == ["Famille Martin"]
    assert family.list_user_groups(alice, "inconnue") == []

    print("[OK] Group listing with counts working")


def test_group_recipes_visible_to_members_only():
    db, family, alice, bob = create_test_setup()
    recipes = RecipeService(db)
    group = family.create_group(alice, "Famille Martin")
    recipe = recipes.create_recipe(alice, {'title': 'Pot-au-feu'})

    shared = family.share_recipe_with_group(alice, recipe.id, group.id)
    assert shared.family_group_id == group.id

    with pytest.raises(UnauthorizedError):
        family.get_group_recipes(bob, group.id)

    family.redeem_invite(bob, family.generate_invite(alice, group.id).code)
    assert [r.title for r in family.get_group_recipes(bob, group.id)] == ['Pot-au-feu']
    assert len(family.get_group_members(bob, group.id)) == 2

    # Only the owner can share a recipe
    with pytest.raises(NotFoundError):
        family.share_recipe_with_group(bob, recipe.id, group.id)

    print("[OK] Group recipes restricted to members")


if __name__ == "__main__":
    try:
        test_generated_codes_format()
        test_default_service_generates_eight_character_codes()
        test_create_group_makes_creator_admin()
        test_redeem_invite_adds_exactly_one_member()
        test_redeem_as_existing_member_leaves_count_unchanged()
        test_expired_code_fails_even_for_members()
        test_unknown_and_blank_codes()
        test_only_admins_manage_invites()
        test_revoked_invite_cannot_be_redeemed()
        test_list_user_groups_with_counts()
        test_group_recipes_visible_to_members_only()
        print("\n[SUCCESS] All family service tests passed!")
        sys.exit(0)
    except Exception as e:
        print(f"[ERROR] Family service test failed with error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
