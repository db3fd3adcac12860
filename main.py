#!/usr/bin/env python3
"""
CulinariaLegacy - Main Application Entry Point

Family recipe books: a personal recipe library, a public explorer, a
weekly meal planner and family groups joined with invite codes.

Run with: streamlit run main.py
"""

import sys
import streamlit as st
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from services import (
    AuthService, AuthContext, RecipeService, FavoriteService, FamilyService,
    MealPlanService, ServiceError
)
from ui import (
    AuthenticationInterface, RecipePagesInterface,
    create_auth_interface, create_recipe_pages_interface, create_meal_planner_interface, create_family_interface,
    Route, resolve_route, recipe_path, NAVIGATION, notify_error, show_flash
)
from ui import routes
from utils import setup_logging, get_logger, get_config, log_operation

logger = get_logger(__name__)

# Pages that need a signed-in user
PROTECTED_PAGES = {routes.LIBRARY, routes.PLANNER, routes.FAMILY}


def get_database_service_singleton():
    """Get singleton database service instance with automatic type detection"""
    if 'database_service' not in st.session_state:
        from config.database_config import create_database_service, get_database_info

        db_info = get_database_info()
        with log_operation(logger, f"Connecting to {db_info['description']} ({db_info['location']})"):
            st.session_state.database_service = create_database_service()

    return st.session_state.database_service


def get_interfaces():
    """Page interfaces sharing one set of services for this session"""
    if 'interfaces' not in st.session_state:
        db = get_database_service_singleton()
        recipe_service = RecipeService(db)
        favorite_service = FavoriteService(db)
        family_service = FamilyService(db)

        st.session_state.interfaces = {
            'auth': create_auth_interface(AuthService(db)),
            'recipes': create_recipe_pages_interface(recipe_service, favorite_service, family_service),
            'planner': create_meal_planner_interface(MealPlanService(db), recipe_service),
            'family': create_family_interface(family_service),
        }

    return st.session_state.interfaces


def get_current_route() -> Route:
    return resolve_route(st.query_params.get("page", "/"))


def navigate(path: str):
    st.query_params["page"] = path
    st.rerun()


def render_sidebar(auth_ui: AuthenticationInterface, route: Route):
    st.sidebar.title("🍲 CulinariaLegacy")

    for label, path in NAVIGATION:
        button_type = "primary" if route.path == path else "secondary"
        if st.sidebar.button(label, key=f"nav_{path}", use_container_width=True, type=button_type):
            navigate(path)

    st.sidebar.markdown("---")
    auth_ui.render_auth_sidebar()


def render_home_page(ctx: AuthContext, recipe_pages: RecipePagesInterface):
    st.title("🍲 CulinariaLegacy")
    st.subheader("Préservez et partagez l'héritage culinaire de votre famille")

    if not ctx.is_signed_in:
        st.info("Connectez-vous pour créer votre bibliothèque, planifier vos repas et rejoindre votre famille.")
        if st.button("🔑 Se connecter", type="primary"):
            navigate("/auth")
        return

    st.markdown(f"Bonjour **{ctx.user.get_display_name()}** !")

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("📚 Ma bibliothèque", use_container_width=True):
            navigate("/bibliotheque")
    with col2:
        if st.button("📅 Planifier la semaine", use_container_width=True):
            navigate("/planification")
    with col3:
        if st.button("👪 Ma famille", use_container_width=True):
            navigate("/famille")

    st.markdown("### ❤️ Mes favoris")
    try:
        favorites = recipe_pages.favorite_service.list_favorites(ctx)
    except ServiceError as e:
        notify_error(e, "favorites")
        return

    if not favorites:
        st.caption("Aucun favori pour le moment. Ajoutez-en depuis la page d'une recette.")
        return

    for recipe in favorites:
        if st.button(f"📄 {recipe.title}", key=f"home_favorite_{recipe.id}"):
            navigate(recipe_path(recipe.id))


def render_not_found_page(route: Route):
    st.title("404")
    st.markdown(f"La page `{route.path}` n'existe pas.")
    if st.button("🏠 Retour à l'accueil"):
        navigate("/")


def main():
    """Main application entry point"""
    st.set_page_config(
        page_title="CulinariaLegacy",
        page_icon="🍲",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    if 'logging_configured' not in st.session_state:
        setup_logging()
        get_config().ensure_directories()
        st.session_state.logging_configured = True

    interfaces = get_interfaces()
    auth_ui = interfaces['auth']
    ctx = auth_ui.get_context()
    route = get_current_route()

    render_sidebar(auth_ui, route)
    show_flash()

    if route.page in PROTECTED_PAGES:
        auth_ui.require_auth()

    if route.page == routes.HOME:
        render_home_page(ctx, interfaces['recipes'])
    elif route.page == routes.LIBRARY:
        interfaces['recipes'].render_library_page(ctx)
    elif route.page == routes.EXPLORER:
        interfaces['recipes'].render_explorer_page(ctx)
    elif route.page == routes.PLANNER:
        interfaces['planner'].render_planner_page(ctx)
    elif route.page == routes.FAMILY:
        interfaces['family'].render_family_page(ctx)
    elif route.page == routes.RECIPE:
        interfaces['recipes'].render_recipe_page(ctx, route.params['id'])
    elif route.page == routes.AUTH:
        auth_ui.render_auth_page()
    else:
        render_not_found_page(route)


if __name__ == "__main__":
    main()
