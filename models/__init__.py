"""
Data models for CulinariaLegacy application.

This module contains all data model classes including Recipe, User, FamilyGroup and MealPlan.
Models map directly to rows of the database tables.
"""

from .recipe_models import (
    Recipe, RecipeIngredient, RecipeInstruction,
    DIFFICULTIES, RECIPE_CATEGORIES, ALL_CATEGORIES
)
from .user_models import User, UserSession, AuthState
from .family_models import (
    FamilyGroup, FamilyGroupMember, FamilyGroupInvite, FamilyGroupSummary,
    ROLE_ADMIN, ROLE_MEMBER
)
from .planning_models import MealPlan, WeekPlan, MEAL_TYPES

__all__ = [
    'Recipe',
    'RecipeIngredient',
    'RecipeInstruction',
    'DIFFICULTIES',
    'RECIPE_CATEGORIES',
    'ALL_CATEGORIES',
    'User',
    'UserSession',
    'AuthState',
    'FamilyGroup',
    'FamilyGroupMember',
    'FamilyGroupInvite',
    'FamilyGroupSummary',
    'ROLE_ADMIN',
    'ROLE_MEMBER',
    'MealPlan',
    'WeekPlan',
    'MEAL_TYPES'
]
