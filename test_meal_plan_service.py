#!/usr/bin/env python3
"""
Test script for the weekly meal planner.
Tests week arithmetic, grid cell lookup and adding/removing planned meals.
"""

import sys
from pathlib import Path
from datetime import date

import pytest

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from services.database_service import DatabaseService
from services.auth_service import AuthService, AuthContext
from services.meal_plan_service import MealPlanService
from services.recipe_service import RecipeService
from services.errors import AlreadyExistsError, InvalidInputError, NotFoundError
from models import MealPlan, WeekPlan, MEAL_TYPES
from models.planning_models import week_start, shift_week, week_dates

# Wednesday
ANCHOR = date(2024, 10, 16)
MONDAY = date(2024, 10, 14)


def create_test_setup():
    db = DatabaseService(":memory:")
    auth = AuthService(db)
    ctx = AuthContext.signed_in(auth.register_user("chef@test.com", "Password123", "Chef"), auth)
    other = AuthContext.signed_in(auth.register_user("other@test.com", "Password123"), auth)
    return db, MealPlanService(db), RecipeService(db), ctx, other


def test_week_arithmetic():
    print("Testing week arithmetic...")

    assert week_start(ANCHOR) == MONDAY
    assert week_start(MONDAY) == MONDAY
    assert week_start(date(2024, 10, 20)) == MONDAY
    assert shift_week(MONDAY, 1) == date(2024, 10, 21)
    assert shift_week(MONDAY, -1) == date(2024, 10, 7)

    days = week_dates(ANCHOR)
    assert len(days) == 7
    assert days[0] == MONDAY and days[-1] == date(2024, 10, 20)

    print("[OK] Weeks start on Monday")


def test_grid_cell_lookup():
    print("Testing grid cell lookup...")
    week = WeekPlan(start=MONDAY)
    assert week.get_meal_plan(MONDAY, 'Déjeuner') is None
    assert week.is_empty()

    plan = MealPlan(id="m1", user_id="u1", date=MONDAY, meal_type='Déjeuner', custom_meal="Soupe")
    week.meal_plans.append(plan)

    assert week.get_meal_plan(MONDAY, 'Déjeuner') is plan
    assert week.get_meal_plan(MONDAY, 'Dîner') is None
    assert week.get_meal_plan(date(2024, 10, 15), 'Déjeuner') is None
    assert plan.get_display_title() == "Soupe"

    print("[OK] Empty cells and filled cells resolved")


def test_add_meal_with_recipe_discards_custom_text():
    print("Testing meal with recipe...")
    db, planner, recipes, ctx, other = create_test_setup()
    recipe = recipes.create_recipe(ctx, {'title': 'Ratatouille'})

    plan = planner.add_meal(ctx, ANCHOR, 'Dîner', recipe_id=recipe.id,
                            custom_meal="ignored", notes="  avec du pain  ")
    assert plan.recipe_id == recipe.id
    assert plan.custom_meal is None
    assert plan.notes == "avec du pain"
    assert plan.recipe_title == 'Ratatouille'
    assert plan.date == ANCHOR

    week = planner.get_week(ctx, ANCHOR)
    assert week.start == MONDAY
    cell = week.get_meal_plan(ANCHOR, 'Dîner')
    assert cell is not None
    assert cell.get_display_title() == 'Ratatouille'

    print("[OK] Recipe meal planned")


def test_get_week_bounds_and_scope():
    db, planner, recipes, ctx, other = create_test_setup()

    planner.add_meal(ctx, MONDAY, 'Petit-déjeuner', custom_meal="Crêpes")
    planner.add_meal(ctx, date(2024, 10, 20), 'Dîner', custom_meal="Pizza")
    planner.add_meal(ctx, date(2024, 10, 21), 'Dîner', custom_meal="Semaine suivante")
    planner.add_meal(ctx, date(2024, 10, 13), 'Dîner', custom_meal="Semaine précédente")
    planner.add_meal(other, ANCHOR, 'Déjeuner', custom_meal="Pas à moi")

    week = planner.get_week(ctx, ANCHOR)
    titles = sorted(p.get_display_title() for p in week.meal_plans)
    assert titles == ["Crêpes", "Pizza"]

    next_week = planner.get_week(ctx, shift_week(ANCHOR, 1))
    assert [p.custom_meal for p in next_week.meal_plans] == ["Semaine suivante"]

    print("[OK] Week query bounded and scoped to the user")


def test_occupied_cell_rejected():
    db, planner, recipes, ctx, other = create_test_setup()
    planner.add_meal(ctx, ANCHOR, 'Déjeuner', custom_meal="Salade")

    with pytest.raises(AlreadyExistsError):
        planner.add_meal(ctx, ANCHOR, 'Déjeuner', custom_meal="Quiche")

    # Another user's cell is independent
    planner.add_meal(other, ANCHOR, 'Déjeuner', custom_meal="Quiche")
    assert len(planner.get_week(ctx, ANCHOR).meal_plans) == 1

    print("[OK] One meal per cell")


def test_add_meal_validation():
    db, planner, recipes, ctx, other = create_test_setup()

    with pytest.raises(InvalidInputError):
        planner.add_meal(ctx, ANCHOR, 'Goûter', custom_meal="Gâteau")
    with pytest.raises(InvalidInputError):
        planner.add_meal(ctx, ANCHOR, 'Dîner', custom_meal="   ")
    with pytest.raises(NotFoundError):
        planner.add_meal(ctx, ANCHOR, 'Dîner', recipe_id="missing")

    assert planner.get_week(ctx, ANCHOR).is_empty()
    assert set(MEAL_TYPES) == {'Petit-déjeuner', 'Déjeuner', 'Dîner'}

    print("[OK] Invalid meals rejected")


def test_delete_meal_scoped_by_owner():
    db, planner, recipes, ctx, other = create_test_setup()
    plan = planner.add_meal(ctx, ANCHOR, 'Déjeuner', custom_meal="Salade")

    with pytest.raises(NotFoundError):
        planner.delete_meal(other, plan.id)

    planner.delete_meal(ctx, plan.id)
    assert planner.get_week(ctx, ANCHOR).is_empty()

    with pytest.raises(NotFoundError):
        planner.delete_meal(ctx, plan.id)

    print("[OK] Meal deletion scoped by owner")


def test_deleted_recipe_keeps_title_in_planned_slot():
    db, planner, recipes, ctx, other = create_test_setup()
    recipe = recipes.create_recipe(ctx, {'title': 'Blanquette'})
    plan = planner.add_meal(ctx, ANCHOR, 'Dîner', recipe_id=recipe.id)

    recipes.delete_recipe(ctx, recipe.id)

    cell = planner.get_week(ctx, ANCHOR).get_meal_plan(ANCHOR, 'Dîner')
    assert cell is not None
    assert cell.recipe_id is None
    assert cell.custom_meal == 'Blanquette'
    assert cell.get_display_title() == 'Blanquette'

    # Exactly one of recipe_id / custom_meal is stored
    row = db.select_one('meal_plans', {'id': plan.id})
    assert (row['recipe_id'] is None) != (row['custom_meal'] is None)

    print("[OK] Recipe deletion turns planned meals into custom meals")


def test_add_meal_rejects_other_users_private_recipe():
    db, planner, recipes, ctx, other = create_test_setup()
    private = recipes.create_recipe(ctx, {'title': 'Secret de famille'})
    public = recipes.create_recipe(ctx, {'title': 'Tarte Tatin', 'is_public': True})

    with pytest.raises(NotFoundError):
        planner.add_meal(other, ANCHOR, 'Dîner', recipe_id=private.id)
    assert planner.get_week(other, ANCHOR).is_empty()

    plan = planner.add_meal(other, ANCHOR, 'Dîner', recipe_id=public.id)
    assert plan.recipe_title == 'Tarte Tatin'

    print("[OK] Only own or public recipes can be planned")


if __name__ == "__main__":
    try:
        test_week_arithmetic()
        test_grid_cell_lookup()
        test_add_meal_with_recipe_discards_custom_text()
        test_get_week_bounds_and_scope()
        test_occupied_cell_rejected()
        test_add_meal_validation()
        test_delete_meal_scoped_by_owner()
        test_deleted_recipe_keeps_title_in_planned_slot()
        test_add_meal_rejects_other_users_private_recipe()
        print("\n[SUCCESS] All meal planner tests passed!")
        sys.exit(0)
    except Exception as e:
        print(f"[ERROR] Meal planner test failed with error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
