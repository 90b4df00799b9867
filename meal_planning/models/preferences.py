"""
User preference model for a meal plan generation run.
"""
from enum import Enum
from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from meal_planning.models.recipe import normalize_tag

# Default preference values
DEFAULT_MAX_PREP_TIME_WEEKNIGHT = 30
DEFAULT_MAX_PREP_TIME_WEEKEND = 90
DEFAULT_CUISINE_VARIETY_WEIGHT = 0.7


class SkillLevel(str, Enum):
    """
    Cooking skill level, limiting which complexity levels may be assigned.
    """
    BEGINNER = "beginner"          # Simple only
    INTERMEDIATE = "intermediate"  # Simple and moderate
    ADVANCED = "advanced"          # Everything


class DietaryMatchMode(str, Enum):
    """
    How dietary restrictions are matched against recipe tags.
    """
    ALL = "all"  # Recipe tags must cover every restriction
    ANY = "any"  # Recipe tags must share at least one restriction


class UserPreferences(BaseModel):
    """
    Preferences that stay fixed for the duration of one generation run.

    Attributes:
        dietary_restrictions: Restriction labels applied as a hard filter
        dietary_match_mode: Whether all or any restriction must match
        max_prep_time_weeknight: Ceiling on total minutes Monday to Friday
        max_prep_time_weekend: Ceiling on total minutes Saturday and Sunday
        skill_level: Highest complexity level the user is comfortable with
        avoid_consecutive_complex: Never place two complex recipes in adjacent slots
        cuisine_variety_weight: 0.0 favours best time fit, 1.0 favours cuisine diversity
    """
    model_config = ConfigDict(frozen=True)

    dietary_restrictions: FrozenSet[str] = frozenset()
    dietary_match_mode: DietaryMatchMode = DietaryMatchMode.ALL
    max_prep_time_weeknight: int = Field(DEFAULT_MAX_PREP_TIME_WEEKNIGHT, ge=0)
    max_prep_time_weekend: int = Field(DEFAULT_MAX_PREP_TIME_WEEKEND, ge=0)
    skill_level: SkillLevel = SkillLevel.ADVANCED
    avoid_consecutive_complex: bool = True
    cuisine_variety_weight: float = Field(DEFAULT_CUISINE_VARIETY_WEIGHT, ge=0.0, le=1.0)

    @field_validator("dietary_restrictions", mode="before")
    @classmethod
    def _normalize_restrictions(cls, value):
        if value is None:
            return frozenset()
        return frozenset(normalize_tag(tag) for tag in value)

    @model_validator(mode="after")
    def _check_ceilings(self) -> "UserPreferences":
        if self.max_prep_time_weeknight == 0 and self.max_prep_time_weekend == 0:
            raise ValueError("At least one of the prep time ceilings must be positive")
        return self

    def ceiling_for(self, is_weekend: bool) -> int:
        """Get the total time ceiling in minutes for a weekday or weekend slot."""
        return self.max_prep_time_weekend if is_weekend else self.max_prep_time_weeknight
