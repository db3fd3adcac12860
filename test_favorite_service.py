#!/usr/bin/env python3
"""
Test script for recipe favorites.
Tests favorite lookup, toggling and the favorites list.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from services.database_service import DatabaseService
from services.auth_service import AuthService, AuthContext
from services.favorite_service import FavoriteService
from services.recipe_service import RecipeService
from services.errors import NotFoundError, UnauthorizedError


def create_test_setup():
    db = DatabaseService(":memory:")
    auth = AuthService(db)
    ctx = AuthContext.signed_in(auth.register_user("fan@test.com", "Password123"), auth)
    recipes = RecipeService(db)
    recipe = recipes.create_recipe(ctx, {'title': 'Mousse au chocolat', 'is_public': True})
    return db, FavoriteService(db), recipes, ctx, recipe


def test_toggle_twice_restores_state():
    print("Testing favorite toggle...")
    db, favorites, recipes, ctx, recipe = create_test_setup()

    assert favorites.is_favorite(ctx, recipe.id) is False
    assert favorites.toggle_favorite(ctx, recipe.id) is True
    assert favorites.is_favorite(ctx, recipe.id) is True
    assert favorites.toggle_favorite(ctx, recipe.id) is False
    assert favorites.is_favorite(ctx, recipe.id) is False
    assert db.count('favorites') == 0

    print("[OK] Two toggles restore the original state")


def test_signed_out_user():
    db, favorites, recipes, ctx, recipe = create_test_setup()
    signed_out = AuthContext()

    assert favorites.is_favorite(signed_out, recipe.id) is False
    with pytest.raises(UnauthorizedError):
        favorites.toggle_favorite(signed_out, recipe.id)

    print("[OK] Signed-out users have no favorites")


def test_list_favorites():
    db, favorites, recipes, ctx, recipe = create_test_setup()
    other = recipes.create_recipe(ctx, {'title': 'Crème brûlée'})
    recipes.create_recipe(ctx, {'title': 'Clafoutis'})

    assert favorites.list_favorites(ctx) == []

    favorites.toggle_favorite(ctx, recipe.id)
    favorites.toggle_favorite(ctx, other.id)
    assert [r.title for r in favorites.list_favorites(ctx)] == ['Crème brûlée', 'Mousse au chocolat']

    print("[OK] Favorites listed")


def test_missing_recipe_and_cascade():
    db, favorites, recipes, ctx, recipe = create_test_setup()

    with pytest.raises(NotFoundError):
        favorites.toggle_favorite(ctx, "missing")

    favorites.toggle_favorite(ctx, recipe.id)
    recipes.delete_recipe(ctx, recipe.id)
    assert db.count('favorites') == 0

    print("[OK] Favorites follow their recipe")


if __name__ == "__main__":
    try:
        test_toggle_twice_restores_state()
        test_signed_out_user()
        test_list_favorites()
        test_missing_recipe_and_cascade()
        print("\n[SUCCESS] All favorite service tests passed!")
        sys.exit(0)
    except Exception as e:
        print(f"[ERROR] Favorite service test failed with error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
