"""
Meal planning engine.

Generates multi-week meal plans from a user's favorite recipes, honoring
dietary restrictions, time ceilings, skill level and recipe rotation.
"""
from .models.meal_plan import MealAssignment, MultiWeekMealPlan, WeekMealPlan, WeekStatus
from .models.preferences import DietaryMatchMode, SkillLevel, UserPreferences
from .models.recipe import AccompanimentCategory, CourseType, Cuisine, RecipeForPlanning
from .models.rotation import RotationState
from .services.exceptions import (
    AlgorithmError,
    InsufficientRecipes,
    InvalidDate,
    InvalidMealType,
    InvalidWeekCount,
    MealPlanningError,
    RecipeAlreadyAssigned,
    RecipeAlreadyUsedInRotation,
    RecipeNotFound,
    RotationStateError
)
from .services.multi_week import MultiWeekOrchestrator
from .services.rotation import load_rotation_state, validate_rotation_state

__all__ = [
    "AccompanimentCategory",
    "AlgorithmError",
    "CourseType",
    "Cuisine",
    "DietaryMatchMode",
    "InsufficientRecipes",
    "InvalidDate",
    "InvalidMealType",
    "InvalidWeekCount",
    "MealAssignment",
    "MealPlanningError",
    "MultiWeekMealPlan",
    "MultiWeekOrchestrator",
    "RecipeAlreadyAssigned",
    "RecipeAlreadyUsedInRotation",
    "RecipeForPlanning",
    "RecipeNotFound",
    "RotationState",
    "RotationStateError",
    "SkillLevel",
    "UserPreferences",
    "WeekMealPlan",
    "WeekStatus",
    "load_rotation_state",
    "validate_rotation_state"
]
