"""
Recipe pages for CulinariaLegacy application.

Library (the user's own recipes with a creation form), explorer (public
recipes filtered by search term and category) and the recipe detail page
with favorite toggle, editing, deletion and sharing with a family group.
"""

import streamlit as st
from typing import List, Dict, Optional, Any

from models import Recipe, RecipeIngredient, DIFFICULTIES, RECIPE_CATEGORIES, ALL_CATEGORIES
from services import (
    AuthContext, RecipeService, FavoriteService, FamilyService, ServiceError,
    get_recipe_service, get_favorite_service, get_family_service
)
from utils import get_logger
from .notifications import notify_error, notify_success, flash
from .routes import recipe_path

logger = get_logger(__name__)

INGREDIENT_SEPARATOR = "|"


def parse_ingredient_lines(text: str) -> List[Dict[str, str]]:
    """
    Parse the ingredient text area.

    One ingredient per line, either just a name or ``quantité | unité | nom``.
    """
    ingredients = []
    for line in (text or "").splitlines():
        line = line.strip()
        if not line:
            continue
        parts = [p.strip() for p in line.split(INGREDIENT_SEPARATOR)]
        if len(parts) >= 3:
            ingredients.append({'quantity': parts[0], 'unit': parts[1],
                                'name': INGREDIENT_SEPARATOR.join(parts[2:]).strip()})
        elif len(parts) == 2:
            ingredients.append({'quantity': parts[0], 'unit': '', 'name': parts[1]})
        else:
            ingredients.append({'quantity': '', 'unit': '', 'name': parts[0]})
    return ingredients


def parse_instruction_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def format_ingredient_lines(ingredients: List[RecipeIngredient]) -> str:
    """Inverse of parse_ingredient_lines, used to prefill the edit form"""
    lines = []
    for ingredient in ingredients:
        if ingredient.unit:
            lines.append(f"{ingredient.quantity} | {ingredient.unit} | {ingredient.name}")
        elif ingredient.quantity:
            lines.append(f"{ingredient.quantity} | {ingredient.name}")
        else:
            lines.append(ingredient.name)
    return "\n".join(lines)


def _option_index(options, value) -> int:
    return options.index(value) if value in options else 0


class RecipePagesInterface:
    """
    Recipe library, explorer and detail pages.
    """

    def __init__(self, recipe_service: Optional[RecipeService] = None,
                 favorite_service: Optional[FavoriteService] = None,
                 family_service: Optional[FamilyService] = None):
        self.recipe_service = recipe_service or get_recipe_service()
        self.favorite_service = favorite_service or get_favorite_service()
        self.family_service = family_service or get_family_service()

        # Session state keys
        self.LIBRARY_SEARCH_KEY = "library_search"
        self.EXPLORER_SEARCH_KEY = "explorer_search"
        self.EXPLORER_CATEGORY_KEY = "explorer_category"
        self.CONFIRM_DELETE_KEY = "confirm_delete_recipe"

    # Library

    def render_library_page(self, ctx: AuthContext) -> None:
        """The user's own recipes"""
        st.title("📚 Ma bibliothèque")
        st.markdown("*Toutes vos recettes, au même endroit*")

        tab1, tab2 = st.tabs(["📖 Mes recettes", "➕ Nouvelle recette"])

        with tab1:
            search = st.text_input("🔍 Rechercher", key=self.LIBRARY_SEARCH_KEY,
                                   placeholder="Titre ou description")
            try:
                recipes = self.recipe_service.list_user_recipes(ctx, search)
            except ServiceError as e:
                notify_error(e, "library")
                return

            if not recipes:
                st.info("Aucune recette pour le moment. Ajoutez-en une depuis l'onglet « Nouvelle recette ».")
            else:
                st.caption(f"{len(recipes)} recette(s)")
                self._render_recipe_grid(recipes, key_prefix="library")

        with tab2:
            self._render_recipe_form(ctx)

    def _render_recipe_form(self, ctx: AuthContext, recipe: Optional[Recipe] = None) -> None:
        """Creation form, or the edit form of an existing recipe when one is given"""
        editing = recipe is not None
        form_key = f"edit_recipe_form_{recipe.id}" if editing else "create_recipe_form"
        with st.form(form_key, clear_on_submit=not editing):
            title = st.text_input("Titre *", value=recipe.title if editing else "")
            description = st.text_area("Description", value=recipe.description if editing else "")
            image_url = st.text_input("URL de l'image", value=recipe.image_url if editing else "")

            col1, col2, col3 = st.columns(3)
            with col1:
                prep_time = st.number_input("Préparation (min)", min_value=0,
                                            value=recipe.prep_time if editing else 0, step=5)
            with col2:
                cook_time = st.number_input("Cuisson (min)", min_value=0,
                                            value=recipe.cook_time if editing else 0, step=5)
            with col3:
                servings = st.number_input("Portions", min_value=0,
                                           value=recipe.servings if editing else 4, step=1)

            col1, col2 = st.columns(2)
            with col1:
                difficulty = st.selectbox("Difficulté", DIFFICULTIES,
                                          index=_option_index(DIFFICULTIES, recipe.difficulty if editing else None))
            with col2:
                category = st.selectbox("Catégorie", RECIPE_CATEGORIES,
                                        index=_option_index(RECIPE_CATEGORIES, recipe.category if editing else None))

            ingredients_text = st.text_area(
                "Ingrédients", value=format_ingredient_lines(recipe.ingredients) if editing else "",
                help="Un ingrédient par ligne : « farine » ou « 200 | g | farine »"
            )
            instructions_text = st.text_area(
                "Étapes", value="\n".join(i.text for i in recipe.instructions) if editing else "",
                help="Une étape par ligne"
            )
            is_public = st.checkbox("Rendre publique dans l'explorateur", value=recipe.is_public if editing else False)

            if st.form_submit_button("💾 Enregistrer", type="primary"):
                recipe_data: Dict[str, Any] = {
                    'title': title,
                    'description': description,
                    'image_url': image_url,
                    'prep_time': prep_time,
                    'cook_time': cook_time,
                    'servings': servings,
                    'difficulty': difficulty,
                    'category': category,
                    'is_public': is_public,
                    'ingredients': parse_ingredient_lines(ingredients_text),
                    'instructions': parse_instruction_lines(instructions_text),
                }
                try:
                    if editing:
                        saved = self.recipe_service.replace_recipe(ctx, recipe.id, recipe_data)
                    else:
                        saved = self.recipe_service.create_recipe(ctx, recipe_data)
                except ServiceError as e:
                    notify_error(e, "edit_recipe" if editing else "create_recipe")
                    return
                flash(f"Recette {'mise à jour' if editing else 'enregistrée'} : {saved.title}")
                st.rerun()

    # Explorer

    def render_explorer_page(self, ctx: AuthContext) -> None:
        """Public recipes shared by the community"""
        st.title("🔎 Explorer")
        st.markdown("*Découvrez les recettes partagées par la communauté*")

        col1, col2 = st.columns([3, 1])
        with col1:
            search = st.text_input("🔍 Rechercher", key=self.EXPLORER_SEARCH_KEY,
                                   placeholder="Titre ou description")
        with col2:
            category = st.selectbox("Catégorie", (ALL_CATEGORIES,) + RECIPE_CATEGORIES,
                                    key=self.EXPLORER_CATEGORY_KEY)

        try:
            recipes = self.recipe_service.list_public_recipes(search, category)
        except ServiceError as e:
            notify_error(e, "explorer")
            return

        if not recipes:
            st.info("Aucune recette ne correspond à votre recherche.")
            return

        self._render_recipe_grid(recipes, key_prefix="explorer")

    def _render_recipe_grid(self, recipes: List[Recipe], key_prefix: str, columns: int = 3) -> None:
        cols = st.columns(columns)
        for i, recipe in enumerate(recipes):
            with cols[i % columns]:
                with st.container(border=True):
                    st.image(recipe.get_image_url(), use_container_width=True)
                    st.markdown(f"**{recipe.title}**")
                    st.caption(f"{recipe.get_category()} · {recipe.difficulty} · ⏱️ {recipe.get_total_time()} min")
                    if recipe.description:
                        st.write(recipe.description[:120] + ("…" if len(recipe.description) > 120 else ""))
                    if st.button("Voir la recette", key=f"{key_prefix}_open_{recipe.id}"):
                        st.query_params["page"] = recipe_path(recipe.id)
                        st.rerun()

    # Detail

    def render_recipe_page(self, ctx: AuthContext, recipe_id: str) -> None:
        """Single recipe with its actions"""
        try:
            recipe = self.recipe_service.get_recipe(recipe_id)
        except ServiceError as e:
            notify_error(e, "recipe")
            return

        st.title(recipe.title)
        col1, col2 = st.columns([2, 1])

        with col1:
            st.image(recipe.get_image_url(), use_container_width=True)
            if recipe.description:
                st.markdown(f"*{recipe.description}*")

        with col2:
            st.metric("Préparation", f"{recipe.prep_time} min")
            st.metric("Cuisson", f"{recipe.cook_time} min")
            st.metric("Portions", recipe.servings)
            st.write(f"**Difficulté :** {recipe.difficulty}")
            st.write(f"**Catégorie :** {recipe.get_category()}")
            if ctx.is_signed_in:
                self._render_recipe_actions(ctx, recipe)

        st.markdown("### 🥕 Ingrédients")
        if recipe.ingredients:
            for ingredient in recipe.ingredients:
                st.markdown(f"- {ingredient.get_display_text()}")
        else:
            st.caption("Aucun ingrédient renseigné.")

        st.markdown("### 👩‍🍳 Préparation")
        if recipe.instructions:
            for instruction in recipe.instructions:
                st.markdown(f"{instruction.step}. {instruction.text}")
        else:
            st.caption("Aucune étape renseignée.")

    def _render_recipe_actions(self, ctx: AuthContext, recipe: Recipe) -> None:
        try:
            is_favorite = self.favorite_service.is_favorite(ctx, recipe.id)
        except ServiceError as e:
            notify_error(e, "favorite")
        else:
            label = "💔 Retirer des favoris" if is_favorite else "❤️ Ajouter aux favoris"
            if st.button(label, key=f"favorite_{recipe.id}"):
                try:
                    state = self.favorite_service.toggle_favorite(ctx, recipe.id)
                except ServiceError as e:
                    notify_error(e, "favorite")
                else:
                    flash("Ajoutée aux favoris" if state else "Retirée des favoris")
                    st.rerun()

        if recipe.user_id != ctx.user_id:
            return

        self._render_share_form(ctx, recipe)

        with st.expander("✏️ Modifier la recette"):
            self._render_recipe_form(ctx, recipe)

        confirm_key = f"{self.CONFIRM_DELETE_KEY}_{recipe.id}"
        if st.button("🗑️ Supprimer", key=f"delete_{recipe.id}"):
            if st.session_state.get(confirm_key, False):
                try:
                    self.recipe_service.delete_recipe(ctx, recipe.id)
                except ServiceError as e:
                    notify_error(e, "delete_recipe")
                    return
                st.session_state.pop(confirm_key, None)
                flash(f"Recette supprimée : {recipe.title}")
                st.query_params["page"] = "/bibliotheque"
                st.rerun()
            else:
                st.session_state[confirm_key] = True
                st.warning("Cliquez à nouveau pour confirmer la suppression.")

    def _render_share_form(self, ctx: AuthContext, recipe: Recipe) -> None:
        try:
            groups = self.family_service.list_user_groups(ctx)
        except ServiceError as e:
            notify_error(e, "share")
            return
        if not groups:
            return

        names = {summary.id: summary.name for summary in groups}
        options = list(names)
        current = options.index(recipe.family_group_id) if recipe.family_group_id in names else 0
        group_id = st.selectbox("👪 Partager avec", options, index=current,
                                format_func=lambda gid: names[gid], key=f"share_group_{recipe.id}")
        if st.button("Partager", key=f"share_{recipe.id}"):
            try:
                self.family_service.share_recipe_with_group(ctx, recipe.id, group_id)
            except ServiceError as e:
                notify_error(e, "share")
                return
            notify_success("Recette partagée", names[group_id])


def create_recipe_pages_interface(recipe_service: Optional[RecipeService] = None,
                                  favorite_service: Optional[FavoriteService] = None,
                                  family_service: Optional[FamilyService] = None) -> RecipePagesInterface:
    """Factory function to create recipe pages interface"""
    return RecipePagesInterface(recipe_service, favorite_service, family_service)
