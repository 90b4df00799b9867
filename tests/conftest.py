"""
Pytest configuration and shared fixtures.
"""
import pytest
from datetime import date
from typing import List

from meal_planning.models.preferences import UserPreferences
from meal_planning.models.recipe import (
    AccompanimentCategory,
    CourseType,
    Cuisine,
    RecipeForPlanning
)

CUISINES = [
    Cuisine.ITALIAN,
    Cuisine.INDIAN,
    Cuisine.MEXICAN,
    Cuisine.JAPANESE,
    Cuisine.FRENCH,
    Cuisine.THAI,
    Cuisine.MEDITERRANEAN
]


def make_recipe(recipe_id: str, recipe_type: CourseType = CourseType.MAIN_COURSE, **overrides) -> RecipeForPlanning:
    """Create a simple 25 minute recipe, overriding any field."""
    fields = {
        "id": recipe_id,
        "title": recipe_id.replace("-", " ").title(),
        "recipe_type": recipe_type,
        "ingredients_count": 8,
        "instructions_count": 5,
        "prep_time_min": 10,
        "cook_time_min": 15,
        "cuisine": Cuisine.OTHER
    }
    fields.update(overrides)
    return RecipeForPlanning(**fields)


def make_pool(
    mains: int,
    appetizers: int = 0,
    desserts: int = 0,
    accompaniments: int = 0,
    **overrides
) -> List[RecipeForPlanning]:
    """Create a pool of simple recipes with rotating cuisines."""
    recipes = []
    for i in range(mains):
        recipes.append(make_recipe(
            f"main-{i:02d}",
            cuisine=CUISINES[i % len(CUISINES)],
            accepts_accompaniment=i % 3 == 0,
            **overrides
        ))
    for i in range(appetizers):
        recipes.append(make_recipe(
            f"appetizer-{i:02d}", CourseType.APPETIZER,
            cuisine=CUISINES[(i + 2) % len(CUISINES)],
            **overrides
        ))
    for i in range(desserts):
        recipes.append(make_recipe(
            f"dessert-{i:02d}", CourseType.DESSERT,
            cuisine=CUISINES[(i + 4) % len(CUISINES)],
            **overrides
        ))
    categories = list(AccompanimentCategory)
    for i in range(accompaniments):
        recipes.append(make_recipe(
            f"side-{i:02d}", CourseType.ACCOMPANIMENT,
            accompaniment_category=categories[i % len(categories)],
            **overrides
        ))
    return recipes


@pytest.fixture
def recipe_factory():
    """Factory for single recipes."""
    return make_recipe


@pytest.fixture
def balanced_recipes() -> List[RecipeForPlanning]:
    """Enough recipes for five weeks without repeating a main course."""
    return make_pool(mains=40, appetizers=10, desserts=10, accompaniments=4)


@pytest.fixture
def preferences() -> UserPreferences:
    """Default preferences."""
    return UserPreferences()


@pytest.fixture
def monday() -> date:
    """A Monday to start plans on."""
    return date(2025, 10, 27)


@pytest.fixture
def pool_factory():
    """Factory for recipe pools of a given size."""
    return make_pool
