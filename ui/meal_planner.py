"""
Weekly meal planner page for CulinariaLegacy application.

Shows one week (Monday to Sunday) as a grid of meal types by days, with
week navigation and per-cell add/delete.
"""

import streamlit as st
import pandas as pd
from datetime import date, timedelta
from typing import Optional

from models import WeekPlan, MEAL_TYPES
from models.planning_models import week_start, shift_week
from services import (
    AuthContext, MealPlanService, RecipeService, ServiceError,
    get_meal_plan_service, get_recipe_service
)
from utils import get_logger
from .notifications import notify_error, flash

logger = get_logger(__name__)

DAY_NAMES = ('Lundi', 'Mardi', 'Mercredi', 'Jeudi', 'Vendredi', 'Samedi', 'Dimanche')

EMPTY_CELL = ""


def day_label(day: date) -> str:
    return f"{DAY_NAMES[day.weekday()]} {day.strftime('%d/%m')}"


def build_week_frame(week: WeekPlan) -> pd.DataFrame:
    """Meal types as rows, days as columns; empty cells hold an empty string"""
    data = {
        day_label(day): [
            plan.get_display_title() if plan else EMPTY_CELL
            for plan in (week.get_meal_plan(day, meal_type) for meal_type in MEAL_TYPES)
        ]
        for day in week.days
    }
    return pd.DataFrame(data, index=list(MEAL_TYPES))


class MealPlannerInterface:
    """
    Meal planning grid with week navigation.
    """

    def __init__(self, meal_plan_service: Optional[MealPlanService] = None,
                 recipe_service: Optional[RecipeService] = None):
        self.meal_plan_service = meal_plan_service or get_meal_plan_service()
        self.recipe_service = recipe_service or get_recipe_service()

        # Session state keys
        self.ANCHOR_KEY = "planner_week_anchor"

    def get_anchor(self) -> date:
        if self.ANCHOR_KEY not in st.session_state:
            st.session_state[self.ANCHOR_KEY] = week_start(date.today())
        return st.session_state[self.ANCHOR_KEY]

    def render_planner_page(self, ctx: AuthContext) -> None:
        st.title("📅 Planification des repas")

        anchor = self.get_anchor()
        self._render_week_navigation(anchor)

        try:
            week = self.meal_plan_service.get_week(ctx, anchor)
        except ServiceError as e:
            notify_error(e, "planner")
            return

        st.dataframe(build_week_frame(week), use_container_width=True)

        tab1, tab2 = st.tabs(["➕ Ajouter un repas", "🗓️ Repas de la semaine"])
        with tab1:
            self._render_add_meal_form(ctx, week)
        with tab2:
            self._render_week_meals(ctx, week)

    def _render_week_navigation(self, anchor: date) -> None:
        start = week_start(anchor)
        col1, col2, col3 = st.columns([1, 3, 1])
        with col1:
            if st.button("◀ Semaine précédente"):
                st.session_state[self.ANCHOR_KEY] = shift_week(start, -1)
                st.rerun()
        with col2:
            end = shift_week(start, 1) - timedelta(days=1)
            st.markdown(f"#### Semaine du {start.strftime('%d/%m/%Y')} au {end.strftime('%d/%m/%Y')}")
        with col3:
            if st.button("Semaine suivante ▶"):
                st.session_state[self.ANCHOR_KEY] = shift_week(start, 1)
                st.rerun()

    def _render_add_meal_form(self, ctx: AuthContext, week: WeekPlan) -> None:
        try:
            recipes = self.recipe_service.list_recipe_titles(ctx)
        except ServiceError as e:
            notify_error(e, "planner")
            return

        titles = {recipe.id: recipe.title for recipe in recipes}
        recipe_options = [None] + list(titles)

        with st.form("add_meal_form", clear_on_submit=True):
            col1, col2 = st.columns(2)
            with col1:
                day = st.selectbox("Jour", week.days, format_func=day_label)
            with col2:
                meal_type = st.selectbox("Repas", MEAL_TYPES)

            recipe_id = st.selectbox(
                "Recette", recipe_options,
                format_func=lambda rid: titles[rid] if rid else "— Repas personnalisé —"
            )
            custom_meal = st.text_input("Repas personnalisé", placeholder="Ex. : restes de la veille")
            notes = st.text_area("Notes")

            if st.form_submit_button("Ajouter", type="primary"):
                try:
                    plan = self.meal_plan_service.add_meal(ctx, day, meal_type, recipe_id, custom_meal, notes)
                except ServiceError as e:
                    notify_error(e, "add_meal")
                    return
                flash(f"Repas planifié : {plan.get_display_title()} ({meal_type}, {day_label(day)})")
                st.rerun()

    def _render_week_meals(self, ctx: AuthContext, week: WeekPlan) -> None:
        if week.is_empty():
            st.info("Aucun repas planifié cette semaine.")
            return

        for day in week.days:
            plans = [week.get_meal_plan(day, meal_type) for meal_type in MEAL_TYPES]
            plans = [plan for plan in plans if plan]
            if not plans:
                continue
            st.markdown(f"**{day_label(day)}**")
            for plan in plans:
                col1, col2 = st.columns([4, 1])
                with col1:
                    st.write(f"{plan.meal_type} : {plan.get_display_title()}")
                    if plan.notes:
                        st.caption(plan.notes)
                with col2:
                    if st.button("🗑️", key=f"delete_meal_{plan.id}"):
                        try:
                            self.meal_plan_service.delete_meal(ctx, plan.id)
                        except ServiceError as e:
                            notify_error(e, "delete_meal")
                            return
                        st.rerun()


def create_meal_planner_interface(meal_plan_service: Optional[MealPlanService] = None,
                                  recipe_service: Optional[RecipeService] = None) -> MealPlannerInterface:
    """Factory function to create meal planner interface"""
    return MealPlannerInterface(meal_plan_service, recipe_service)
