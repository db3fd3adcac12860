"""
Meal planning models for the CulinariaLegacy application.

A week is seven days starting on Monday, each with three meal slots.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional

MEAL_TYPES = ('Petit-déjeuner', 'Déjeuner', 'Dîner')

DAYS_PER_WEEK = 7

DATE_FORMAT = '%Y-%m-%d'


def week_start(anchor: date) -> date:
    """Monday of the week containing anchor"""
    if isinstance(anchor, datetime):
        anchor = anchor.date()
    return anchor - timedelta(days=anchor.weekday())


def shift_week(anchor: date, weeks: int) -> date:
    """Move the anchor date by whole weeks (negative goes back)"""
    return anchor + timedelta(days=DAYS_PER_WEEK * weeks)


def week_dates(anchor: date) -> List[date]:
    start = week_start(anchor)
    return [start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def format_day(day: date) -> str:
    return day.strftime(DATE_FORMAT)


@dataclass
class MealPlan:
    """Planned meal for one (date, meal_type) cell"""
    id: str
    user_id: str
    date: date
    meal_type: str
    recipe_id: Optional[str] = None
    custom_meal: Optional[str] = None
    notes: Optional[str] = None
    recipe_title: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def get_display_title(self) -> str:
        return self.recipe_title or self.custom_meal or 'Repas planifié'


@dataclass
class WeekPlan:
    """The meal plans of one user for one week"""
    start: date
    meal_plans: List[MealPlan] = field(default_factory=list)

    @property
    def end(self) -> date:
        return self.start + timedelta(days=DAYS_PER_WEEK - 1)

    @property
    def days(self) -> List[date]:
        return [self.start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]

    def get_meal_plan(self, day: date, meal_type: str) -> Optional[MealPlan]:
        """Meal planned in a cell, or None for an empty cell"""
        for plan in self.meal_plans:
            if plan.date == day and plan.meal_type == meal_type:
                return plan
        return None

    def is_empty(self) -> bool:
        return not self.meal_plans
