"""
Recipe data models for meal plan generation.

This module provides the immutable recipe record handed to the planning
engine by the surrounding application, along with the enums used to
classify recipes by course, cuisine, accompaniment category and complexity.
"""
from enum import Enum
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CourseType(str, Enum):
    """
    Course categories a recipe can fill.
    """
    APPETIZER = "appetizer"
    MAIN_COURSE = "main_course"
    DESSERT = "dessert"
    ACCOMPANIMENT = "accompaniment"


class Cuisine(str, Enum):
    """
    Cuisine types tracked for variety scoring.
    """
    ITALIAN = "italian"
    INDIAN = "indian"
    MEXICAN = "mexican"
    CHINESE = "chinese"
    JAPANESE = "japanese"
    FRENCH = "french"
    AMERICAN = "american"
    MEDITERRANEAN = "mediterranean"
    THAI = "thai"
    KOREAN = "korean"
    VIETNAMESE = "vietnamese"
    CARIBBEAN = "caribbean"
    OTHER = "other"


class AccompanimentCategory(str, Enum):
    """
    Side dish categories used for main course pairing.
    """
    PASTA = "pasta"
    RICE = "rice"
    FRIES = "fries"
    SALAD = "salad"
    BREAD = "bread"
    VEGETABLE = "vegetable"
    OTHER = "other"


class Complexity(str, Enum):
    """
    Complexity levels derived from a recipe's complexity score.
    """
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


def normalize_tag(tag: str) -> str:
    """Normalize a dietary tag so "Gluten-Free" and "gluten_free" compare equal."""
    return tag.strip().lower().replace("-", "_").replace(" ", "_")


class RecipeForPlanning(BaseModel):
    """
    Recipe data needed by the meal planning engine.

    Supplied by the caller from the user's favorites; the engine never
    mutates it.

    Attributes:
        id: Recipe identifier, also used as the deterministic tie-breaker
        title: Recipe name
        recipe_type: Course category the recipe fills
        ingredients_count: Number of ingredients (complexity input)
        instructions_count: Number of instruction steps (complexity input)
        prep_time_min: Optional preparation time in minutes
        cook_time_min: Optional cooking time in minutes
        advance_prep_hours: Optional hours of advance preparation (marinades etc.)
        complexity: Optional precomputed complexity score
        dietary_tags: Dietary labels the recipe satisfies
        cuisine: Cuisine used for variety scoring
        accepts_accompaniment: Whether a main course takes a side dish
        preferred_accompaniment_categories: Side categories the main course pairs with (empty = any)
        accompaniment_category: Category of the recipe when it is itself an accompaniment
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str
    recipe_type: CourseType
    ingredients_count: int = Field(0, ge=0)
    instructions_count: int = Field(0, ge=0)
    prep_time_min: Optional[int] = Field(None, ge=0)
    cook_time_min: Optional[int] = Field(None, ge=0)
    advance_prep_hours: Optional[int] = Field(None, ge=0)
    complexity: Optional[float] = Field(None, ge=0)
    dietary_tags: FrozenSet[str] = frozenset()
    cuisine: Cuisine = Cuisine.OTHER
    accepts_accompaniment: bool = False
    preferred_accompaniment_categories: FrozenSet[AccompanimentCategory] = frozenset()
    accompaniment_category: Optional[AccompanimentCategory] = None

    @field_validator("dietary_tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value):
        if value is None:
            return frozenset()
        return frozenset(normalize_tag(tag) for tag in value)

    @property
    def total_time_min(self) -> int:
        """Preparation plus cooking time, missing values counted as zero."""
        return (self.prep_time_min or 0) + (self.cook_time_min or 0)

    @property
    def prep_required(self) -> bool:
        """Check if the recipe needs preparation ahead of the meal day."""
        return bool(self.advance_prep_hours)
