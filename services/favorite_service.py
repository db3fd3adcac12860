"""
Favorites service for CulinariaLegacy application.

A favorite is a per-user bookmark on a recipe.
"""

import logging
from datetime import datetime
from typing import List, Optional

from models import Recipe
from .auth_service import AuthContext
from .database_service import DatabaseService, get_database_service
from .errors import NotFoundError
from .recipe_service import row_to_recipe

logger = logging.getLogger(__name__)


class FavoriteService:
    """Favorite lookup and toggle against the favorites join table"""

    def __init__(self, database_service: Optional[DatabaseService] = None):
        self.db = database_service or get_database_service()

    def is_favorite(self, ctx: AuthContext, recipe_id: str) -> bool:
        if not ctx.is_signed_in:
            return False
        return self.db.select_one('favorites', {'user_id': ctx.user_id, 'recipe_id': recipe_id}) is not None

    def toggle_favorite(self, ctx: AuthContext, recipe_id: str) -> bool:
        """Add or remove the favorite; returns the new state"""
        user = ctx.require_user()
        with self.db.transaction() as conn:
            if not self.db.select_one('recipes', {'id': recipe_id}, conn=conn):
                raise NotFoundError(f"Recipe {recipe_id} not found")

            removed = self.db.delete('favorites', {'user_id': user.id, 'recipe_id': recipe_id}, conn=conn)
            if not removed:
                self.db.insert('favorites', {
                    'user_id': user.id,
                    'recipe_id': recipe_id,
                    'created_at': datetime.now(),
                }, conn=conn)

        state = not removed
        logger.info(f"Favorite {'added' if state else 'removed'}: user {user.id}, recipe {recipe_id}")
        return state

    def list_favorites(self, ctx: AuthContext) -> List[Recipe]:
        user = ctx.require_user()
        with self.db.transaction() as conn:
            favorites = self.db.select('favorites', {'user_id': user.id}, order_by='-created_at', conn=conn)
            if not favorites:
                return []
            rows = self.db.select('recipes', {'id': [f['recipe_id'] for f in favorites]},
                                  order_by='title', conn=conn)
        return [row_to_recipe(row) for row in rows]


# Global service instance
_favorite_service: Optional[FavoriteService] = None


def get_favorite_service(database_service: Optional[DatabaseService] = None) -> FavoriteService:
    """Factory function to get favorite service instance"""
    global _favorite_service
    if _favorite_service is None or database_service is not None:
        _favorite_service = FavoriteService(database_service)
    return _favorite_service
