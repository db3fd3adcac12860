"""
Page routing for CulinariaLegacy application.

Streamlit has a single URL per app, so a page path travels in the
``?page=`` query parameter (``?page=/recette/<id>``). resolve_route maps a
path onto the page that renders it.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

HOME = "home"
LIBRARY = "library"
EXPLORER = "explorer"
PLANNER = "planner"
FAMILY = "family"
RECIPE = "recipe"
AUTH = "auth"
NOT_FOUND = "not_found"

# Static paths; /recette/<id> is matched separately
ROUTES = {
    "/": HOME,
    "/bibliotheque": LIBRARY,
    "/explorer": EXPLORER,
    "/planification": PLANNER,
    "/famille": FAMILY,
    "/auth": AUTH,
}

RECIPE_PREFIX = "/recette/"

# Sidebar navigation entries: (label, path)
NAVIGATION = [
    ("🏠 Accueil", "/"),
    ("📚 Ma bibliothèque", "/bibliotheque"),
    ("🔎 Explorer", "/explorer"),
    ("📅 Planification", "/planification"),
    ("👪 Famille", "/famille"),
]


@dataclass
class Route:
    """Resolved page plus the parameters taken from the path"""
    page: str
    params: Dict[str, str] = field(default_factory=dict)
    path: str = "/"


def normalize_path(path: Optional[str]) -> str:
    path = (path or "/").strip()
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def resolve_route(path: Optional[str]) -> Route:
    """Map a path onto a page; unknown paths go to the 404 page"""
    path = normalize_path(path)

    if path in ROUTES:
        return Route(page=ROUTES[path], path=path)

    if path.startswith(RECIPE_PREFIX):
        recipe_id = path[len(RECIPE_PREFIX):]
        if recipe_id and "/" not in recipe_id:
            return Route(page=RECIPE, params={"id": recipe_id}, path=path)

    return Route(page=NOT_FOUND, path=path)


def recipe_path(recipe_id: str) -> str:
    return f"{RECIPE_PREFIX}{recipe_id}"
