"""
Recipe-related data models for the CulinariaLegacy application.

All models use dataclasses that map directly to rows of the recipes table.
Ingredients and instructions are stored on the recipe row as JSON lists.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any

DIFFICULTIES = ('Facile', 'Moyen', 'Difficile')

RECIPE_CATEGORIES = ('Plat Principal', 'Dessert', 'Entrée', 'Petit-déjeuner', 'Collation')

ALL_CATEGORIES = 'Tous'

DEFAULT_IMAGE_URL = 'https://images.unsplash.com/photo-1546069901-ba9599a7e63c'


@dataclass
class RecipeIngredient:
    """One line of a recipe's ingredient list"""
    name: str
    quantity: str = ""
    unit: str = ""

    def get_display_text(self) -> str:
        """Format ingredient for display in recipe"""
        parts = [p for p in (self.quantity, self.unit, self.name) if p]
        return " ".join(parts)

    def to_dict(self) -> Dict[str, str]:
        return {'name': self.name, 'quantity': self.quantity, 'unit': self.unit}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecipeIngredient':
        return cls(
            name=str(data.get('name', '')).strip(),
            quantity=str(data.get('quantity', '') or '').strip(),
            unit=str(data.get('unit', '') or '').strip()
        )


@dataclass
class RecipeInstruction:
    """Numbered preparation step"""
    step: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {'step': self.step, 'text': self.text}


@dataclass
class Recipe:
    """
    Recipe model mapping to the recipes table.
    A recipe is owned by one user and may be shared with one family group.
    """
    id: str
    title: str
    user_id: str
    description: str = ""
    image_url: str = ""
    prep_time: int = 0
    cook_time: int = 0
    servings: int = 0
    difficulty: str = "Facile"
    category: str = ""
    family_group_id: Optional[str] = None
    is_public: bool = False
    ingredients: List[RecipeIngredient] = field(default_factory=list)
    instructions: List[RecipeInstruction] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def get_total_time(self) -> int:
        """Total time in minutes"""
        return self.prep_time + self.cook_time

    def get_image_url(self) -> str:
        return self.image_url or DEFAULT_IMAGE_URL

    def get_category(self) -> str:
        return self.category or 'Non catégorisé'

    def matches_search(self, search_term: str) -> bool:
        """Case-insensitive match on title or description"""
        term = (search_term or "").strip().lower()
        if not term:
            return True
        return term in self.title.lower() or term in self.description.lower()


def parse_ingredients(raw: Any) -> List[RecipeIngredient]:
    """Parse the stored ingredient list, tolerating null or invalid JSON"""
    items = _load_json_list(raw)
    ingredients = []
    for item in items:
        if isinstance(item, dict):
            ingredient = RecipeIngredient.from_dict(item)
        elif isinstance(item, str):
            ingredient = RecipeIngredient(name=item.strip())
        else:
            continue
        if ingredient.name:
            ingredients.append(ingredient)
    return ingredients


def parse_instructions(raw: Any) -> List[RecipeInstruction]:
    """Parse stored instructions and renumber them from 1"""
    items = _load_json_list(raw)
    texts = []
    for item in items:
        text = item.get('text', '') if isinstance(item, dict) else item
        if isinstance(text, str) and text.strip():
            texts.append(text.strip())
    return [RecipeInstruction(step=i, text=text) for i, text in enumerate(texts, start=1)]


def _load_json_list(raw: Any) -> list:
    if isinstance(raw, list):
        return raw
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return []
    return data if isinstance(data, list) else []
