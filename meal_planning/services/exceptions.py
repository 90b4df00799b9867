"""
Service-level exceptions.

This module contains the typed errors the meal planning engine returns to
its caller. Domain errors (insufficient recipes, bad dates, unknown course
types or recipes) are recoverable by the caller; AlgorithmError and
RotationStateError abort the current run.
"""


class MealPlanningError(Exception):
    """Base exception for meal planning errors."""
    pass


class InsufficientRecipes(MealPlanningError):
    """Raised when a required course has too few eligible recipes."""

    def __init__(self, minimum: int, current: int):
        self.minimum = minimum
        self.current = current
        super().__init__(
            f"Insufficient recipes: need at least {minimum} favorite recipes, "
            f"but only have {current}"
        )


class InvalidMealType(MealPlanningError):
    """Raised when a course type string is not recognized."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid meal type: {value}")


class InvalidDate(MealPlanningError):
    """Raised when a date is malformed or is not a valid week start."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid date: {detail}")


class InvalidWeekCount(MealPlanningError):
    """Raised when the requested number of weeks is outside the supported range."""

    def __init__(self, week_count: int, minimum: int, maximum: int):
        self.week_count = week_count
        super().__init__(
            f"Invalid week count: {week_count} (must be between {minimum} and {maximum})"
        )


class RecipeNotFound(MealPlanningError):
    """Raised when a referenced recipe or assignment does not exist."""

    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe not found: {recipe_id}")


class RecipeAlreadyAssigned(MealPlanningError):
    """Raised when a replacement recipe is the one already assigned to the slot."""

    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe already assigned to this slot: {recipe_id}")


class RecipeAlreadyUsedInRotation(MealPlanningError):
    """Raised when a replacement recipe was already used in the current rotation cycle."""

    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe already used in the current rotation cycle: {recipe_id}")


class AlgorithmError(MealPlanningError):
    """Raised when no valid assignment exists for a required slot."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Algorithm failed to generate meal plan: {detail}")


class RotationStateError(MealPlanningError):
    """Raised when a rotation state snapshot is malformed or does not match the recipe pool."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid rotation state: {detail}")
