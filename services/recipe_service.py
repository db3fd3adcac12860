"""
Recipe service for CulinariaLegacy application.

Backs the recipe library (the user's own recipes), the explorer (public
recipes shared by the community) and the recipe detail page.
"""

import logging
from datetime import datetime
from typing import List, Optional, Dict, Any

from models import (
    Recipe, RecipeIngredient, RecipeInstruction, DIFFICULTIES, ALL_CATEGORIES
)
from models.recipe_models import parse_ingredients, parse_instructions
from .auth_service import AuthContext
from .database_service import DatabaseService, get_database_service, parse_timestamp
from .errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


class RecipeService:
    """
    Service for creating, reading, replacing and deleting recipes.
    Mutations are always scoped by the owning user id.
    """

    def __init__(self, database_service: Optional[DatabaseService] = None):
        self.db = database_service or get_database_service()

    def create_recipe(self, ctx: AuthContext, recipe_data: Dict[str, Any]) -> Recipe:
        """Create a recipe owned by the current user"""
        user = ctx.require_user()
        values = self._validate_recipe_data(recipe_data)
        now = datetime.now()
        values.update({'user_id': user.id, 'created_at': now, 'updated_at': now})

        row = self.db.insert('recipes', values)
        logger.info(f"Recipe created: {row['title']} ({row['id']})")
        return row_to_recipe(row)

    def get_recipe(self, recipe_id: str) -> Recipe:
        row = self.db.select_one('recipes', {'id': recipe_id})
        if not row:
            raise NotFoundError(f"Recipe {recipe_id} not found")
        return row_to_recipe(row)

    def list_user_recipes(self, ctx: AuthContext, search_term: str = "") -> List[Recipe]:
        """The user's library, optionally filtered on title/description"""
        user = ctx.require_user()
        rows = self.db.select('recipes', {'user_id': user.id}, order_by='title')
        recipes = [row_to_recipe(row) for row in rows]
        return [r for r in recipes if r.matches_search(search_term)]

    def list_public_recipes(self, search_term: str = "", category: Optional[str] = None) -> List[Recipe]:
        """Public recipes for the explorer page"""
        rows = self.db.select('recipes', {'is_public': True}, order_by='-created_at')
        recipes = [row_to_recipe(row) for row in rows]
        return [
            r for r in recipes
            if r.matches_search(search_term) and matches_category(r, category)
        ]

    def list_recipe_titles(self, ctx: AuthContext) -> List[Recipe]:
        """User recipes ordered by title, for recipe pickers"""
        user = ctx.require_user()
        rows = self.db.select('recipes', {'user_id': user.id}, order_by='title')
        return [row_to_recipe(row) for row in rows]

    def replace_recipe(self, ctx: AuthContext, recipe_id: str, recipe_data: Dict[str, Any]) -> Recipe:
        """Replace every editable field of a recipe the user owns"""
        user = ctx.require_user()
        values = self._validate_recipe_data(recipe_data)
        values['updated_at'] = datetime.now()

        with self.db.transaction() as conn:
            changed = self.db.update('recipes', values, {'id': recipe_id, 'user_id': user.id}, conn=conn)
            if not changed:
                raise NotFoundError(f"Recipe {recipe_id} not found for user {user.id}")
            row = self.db.select_one('recipes', {'id': recipe_id}, conn=conn)

        logger.info(f"Recipe replaced: {recipe_id}")
        return row_to_recipe(row)

    def delete_recipe(self, ctx: AuthContext, recipe_id: str) -> None:
        """
        Delete a recipe the user owns.

        Meals planned with the recipe keep their slot: the recipe title
        becomes the custom meal text.
        """
        user = ctx.require_user()
        with self.db.transaction() as conn:
            row = self.db.select_one('recipes', {'id': recipe_id, 'user_id': user.id}, conn=conn)
            if not row:
                raise NotFoundError(f"Recipe {recipe_id} not found for user {user.id}")
            detached = self.db.update('meal_plans', {'recipe_id': None, 'custom_meal': row['title']},
                                      {'recipe_id': recipe_id}, conn=conn)
            self.db.delete('recipes', {'id': recipe_id}, conn=conn)
        logger.info(f"Recipe deleted: {recipe_id} ({detached} planned meals detached)")

    def _validate_recipe_data(self, recipe_data: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize form data into recipe column values"""
        title = str(recipe_data.get('title') or '').strip()
        if not title:
            raise InvalidInputError("Le titre de la recette est requis")

        difficulty = recipe_data.get('difficulty') or 'Facile'
        if difficulty not in DIFFICULTIES:
            raise InvalidInputError(f"Difficulté invalide: {difficulty}")

        ingredients = parse_ingredients([
            i.to_dict() if isinstance(i, RecipeIngredient) else i
            for i in recipe_data.get('ingredients') or []
        ])
        instructions = parse_instructions([
            i.to_dict() if isinstance(i, RecipeInstruction) else i
            for i in recipe_data.get('instructions') or []
        ])

        return {
            'title': title,
            'description': str(recipe_data.get('description') or '').strip(),
            'image_url': str(recipe_data.get('image_url') or '').strip(),
            'prep_time': _non_negative_int(recipe_data.get('prep_time')),
            'cook_time': _non_negative_int(recipe_data.get('cook_time')),
            'servings': _non_negative_int(recipe_data.get('servings')),
            'difficulty': difficulty,
            'category': str(recipe_data.get('category') or '').strip(),
            'is_public': bool(recipe_data.get('is_public', False)),
            'ingredients': [i.to_dict() for i in ingredients],
            'instructions': [i.to_dict() for i in instructions],
        }


def matches_category(recipe: Recipe, category: Optional[str]) -> bool:
    if not category or category == ALL_CATEGORIES:
        return True
    return recipe.category == category


def row_to_recipe(row: Dict[str, Any]) -> Recipe:
    """Convert database row to Recipe object"""
    return Recipe(
        id=row['id'],
        title=row['title'],
        user_id=row['user_id'],
        description=row.get('description') or '',
        image_url=row.get('image_url') or '',
        prep_time=row.get('prep_time') or 0,
        cook_time=row.get('cook_time') or 0,
        servings=row.get('servings') or 0,
        difficulty=row.get('difficulty') or 'Facile',
        category=row.get('category') or '',
        family_group_id=row.get('family_group_id'),
        is_public=bool(row.get('is_public')),
        ingredients=parse_ingredients(row.get('ingredients')),
        instructions=parse_instructions(row.get('instructions')),
        created_at=parse_timestamp(row.get('created_at')) or datetime.now(),
        updated_at=parse_timestamp(row.get('updated_at')) or datetime.now()
    )


def _non_negative_int(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


# Global service instance
_recipe_service: Optional[RecipeService] = None


def get_recipe_service(database_service: Optional[DatabaseService] = None) -> RecipeService:
    """Factory function to get recipe service instance"""
    global _recipe_service
    if _recipe_service is None or database_service is not None:
        _recipe_service = RecipeService(database_service)
    return _recipe_service
