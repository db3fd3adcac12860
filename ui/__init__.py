"""
UI components for CulinariaLegacy application.

Contains the Streamlit pages (auth, recipe library / explorer / detail,
meal planner, family books), page routing and user notifications.
"""

from .auth import AuthenticationInterface, create_auth_interface
from .recipe_pages import RecipePagesInterface, create_recipe_pages_interface
from .meal_planner import MealPlannerInterface, create_meal_planner_interface, build_week_frame
from .family import FamilyInterface, create_family_interface
from .routes import Route, resolve_route, recipe_path, NAVIGATION
from .notifications import describe_error, notify_error, notify_success, flash, show_flash

__all__ = [
    'AuthenticationInterface',
    'create_auth_interface',
    'RecipePagesInterface',
    'create_recipe_pages_interface',
    'MealPlannerInterface',
    'create_meal_planner_interface',
    'build_week_frame',
    'FamilyInterface',
    'create_family_interface',
    'Route',
    'resolve_route',
    'recipe_path',
    'NAVIGATION',
    'describe_error',
    'notify_error',
    'notify_success',
    'flash',
    'show_flash'
]
