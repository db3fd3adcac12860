"""
Services package for CulinariaLegacy application.

Contains all business logic services: database access, authentication,
recipes, favorites, family groups with their invite workflow, and the
weekly meal planner.
"""

from .errors import (
    ErrorKind, ServiceError, NotFoundError, ExpiredError, AlreadyExistsError,
    UnauthorizedError, InvalidInputError
)
from .database_service import DatabaseService, get_database_service
from .auth_service import AuthService, AuthContext
from .recipe_service import RecipeService, get_recipe_service
from .favorite_service import FavoriteService, get_favorite_service
from .family_service import FamilyService, get_family_service, generate_invite_code
from .meal_plan_service import MealPlanService, get_meal_plan_service

__all__ = [
    'ErrorKind',
    'ServiceError',
    'NotFoundError',
    'ExpiredError',
    'AlreadyExistsError',
    'UnauthorizedError',
    'InvalidInputError',
    'DatabaseService',
    'get_database_service',
    'AuthService',
    'AuthContext',
    'RecipeService',
    'get_recipe_service',
    'FavoriteService',
    'get_favorite_service',
    'FamilyService',
    'get_family_service',
    'generate_invite_code',
    'MealPlanService',
    'get_meal_plan_service'
]
