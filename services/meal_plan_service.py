"""
Meal planning service for CulinariaLegacy application.

Loads a user's week of planned meals and adds or removes the meal of a
single (date, meal type) cell.
"""

import logging
from datetime import date, datetime
from typing import Optional, Dict, Any

from models import MealPlan, WeekPlan, MEAL_TYPES
from models.planning_models import week_start, format_day
from .auth_service import AuthContext
from .database_service import (
    DatabaseService, get_database_service, parse_date, parse_timestamp, rows_by
)
from .errors import AlreadyExistsError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


class MealPlanService:
    """
    Service for the weekly meal planner.
    A cell holds at most one meal per user; the database enforces it.
    """

    def __init__(self, database_service: Optional[DatabaseService] = None):
        self.db = database_service or get_database_service()

    def get_week(self, ctx: AuthContext, anchor: date) -> WeekPlan:
        """Meal plans of the week containing anchor, with recipe titles"""
        user = ctx.require_user()
        week = WeekPlan(start=week_start(anchor))

        with self.db.transaction() as conn:
            rows = self.db.select(
                'meal_plans', {'user_id': user.id},
                gte={'date': format_day(week.start)},
                lte={'date': format_day(week.end)},
                order_by='date', conn=conn
            )
            recipe_ids = {row['recipe_id'] for row in rows if row['recipe_id']}
            recipes = rows_by(self.db.select('recipes', {'id': list(recipe_ids)}, conn=conn), 'id') \
                if recipe_ids else {}

        for row in rows:
            recipe = recipes.get(row['recipe_id'])
            week.meal_plans.append(_row_to_meal_plan(row, recipe['title'] if recipe else None))
        return week

    def add_meal(self, ctx: AuthContext, day: date, meal_type: str,
                 recipe_id: Optional[str] = None, custom_meal: str = "",
                 notes: str = "") -> MealPlan:
        """
        Plan a meal in an empty cell.

        Either a recipe or a free-text custom meal is required; when a recipe
        is chosen the custom text is dropped.
        """
        user = ctx.require_user()
        if meal_type not in MEAL_TYPES:
            raise InvalidInputError(f"Type de repas invalide: {meal_type}")

        custom_meal = (custom_meal or "").strip()
        if not recipe_id and not custom_meal:
            raise InvalidInputError("Veuillez sélectionner une recette ou saisir un repas personnalisé")

        with self.db.transaction() as conn:
            recipe_title = None
            if recipe_id:
                recipe = self.db.select_one('recipes', {'id': recipe_id}, conn=conn)
                # Other users' private recipes are reported as missing
                if not recipe or (recipe['user_id'] != user.id and not recipe['is_public']):
                    raise NotFoundError(f"Recipe {recipe_id} not found")
                recipe_title = recipe['title']

            day_str = format_day(day)
            if self.db.select_one('meal_plans', {'user_id': user.id, 'date': day_str, 'meal_type': meal_type},
                                  conn=conn):
                raise AlreadyExistsError(f"Un repas est déjà planifié pour ce créneau ({meal_type}, {day_str})")

            row = self.db.insert('meal_plans', {
                'user_id': user.id,
                'date': day_str,
                'meal_type': meal_type,
                'recipe_id': recipe_id or None,
                'custom_meal': None if recipe_id else custom_meal,
                'notes': (notes or "").strip() or None,
                'created_at': datetime.now(),
            }, conn=conn)

        logger.info(f"Meal planned for user {user.id}: {meal_type} {day_str}")
        return _row_to_meal_plan(row, recipe_title)

    def delete_meal(self, ctx: AuthContext, meal_plan_id: str) -> None:
        """Remove a planned meal the user owns"""
        user = ctx.require_user()
        deleted = self.db.delete('meal_plans', {'id': meal_plan_id, 'user_id': user.id})
        if not deleted:
            raise NotFoundError(f"Meal plan {meal_plan_id} not found for user {user.id}")
        logger.info(f"Meal plan deleted: {meal_plan_id}")


def _row_to_meal_plan(row: Dict[str, Any], recipe_title: Optional[str] = None) -> MealPlan:
    return MealPlan(
        id=row['id'],
        user_id=row['user_id'],
        date=parse_date(row['date']),
        meal_type=row['meal_type'],
        recipe_id=row.get('recipe_id'),
        custom_meal=row.get('custom_meal'),
        notes=row.get('notes'),
        recipe_title=recipe_title,
        created_at=parse_timestamp(row.get('created_at')) or datetime.now()
    )


# Global service instance
_meal_plan_service: Optional[MealPlanService] = None


def get_meal_plan_service(database_service: Optional[DatabaseService] = None) -> MealPlanService:
    """Factory function to get meal plan service instance"""
    global _meal_plan_service
    if _meal_plan_service is None or database_service is not None:
        _meal_plan_service = MealPlanService(database_service)
    return _meal_plan_service
