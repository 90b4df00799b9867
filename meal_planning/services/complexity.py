"""
Recipe complexity calculation.

The complexity score is a pure function of a recipe's ingredient count,
instruction count and advance preparation hours. The formula is pluggable
so alternate weightings can be substituted without touching selection:

    calculator = RecipeComplexityCalculator(formula=lambda ingredients, steps, prep_hours: steps * 5.0)
"""
from typing import Callable, Optional

from meal_planning.models.preferences import SkillLevel
from meal_planning.models.recipe import Complexity, RecipeForPlanning
from meal_planning.services.constants import (
    ADVANCE_PREP_WEIGHT,
    COMPLEX_COMPLEXITY_THRESHOLD,
    INGREDIENTS_WEIGHT,
    INSTRUCTIONS_WEIGHT,
    LONG_ADVANCE_PREP_HOURS,
    LONG_ADVANCE_PREP_MULTIPLIER,
    SHORT_ADVANCE_PREP_MULTIPLIER,
    SIMPLE_COMPLEXITY_LIMIT
)

ComplexityFormula = Callable[[int, int, Optional[int]], float]

# Highest complexity level allowed per skill level
SKILL_LEVEL_LIMITS = {
    SkillLevel.BEGINNER: Complexity.SIMPLE,
    SkillLevel.INTERMEDIATE: Complexity.MODERATE,
    SkillLevel.ADVANCED: Complexity.COMPLEX
}

_LEVEL_RANK = {
    Complexity.SIMPLE: 0,
    Complexity.MODERATE: 1,
    Complexity.COMPLEX: 2
}


def default_complexity_formula(
    ingredients_count: int,
    instructions_count: int,
    advance_prep_hours: Optional[int] = None
) -> float:
    """
    Default complexity score.

    score = ingredients * 0.3 + steps * 0.4 + advance_prep_multiplier * 0.3,
    where the multiplier is 0 without advance prep, 50 under four hours and
    100 from four hours on.

    Example:
        >>> default_complexity_formula(10, 5)
        5.0
        >>> default_complexity_formula(10, 5, 8)
        35.0
    """
    if not advance_prep_hours:
        multiplier = 0.0
    elif advance_prep_hours < LONG_ADVANCE_PREP_HOURS:
        multiplier = SHORT_ADVANCE_PREP_MULTIPLIER
    else:
        multiplier = LONG_ADVANCE_PREP_MULTIPLIER

    return (
        ingredients_count * INGREDIENTS_WEIGHT
        + instructions_count * INSTRUCTIONS_WEIGHT
        + multiplier * ADVANCE_PREP_WEIGHT
    )


def complexity_level(score: float) -> Complexity:
    """Map a complexity score to its level."""
    if score < SIMPLE_COMPLEXITY_LIMIT:
        return Complexity.SIMPLE
    if score <= COMPLEX_COMPLEXITY_THRESHOLD:
        return Complexity.MODERATE
    return Complexity.COMPLEX


class RecipeComplexityCalculator:
    """Calculates recipe complexity scores and levels."""

    def __init__(self, formula: ComplexityFormula = default_complexity_formula):
        """
        Initialize the calculator.

        Args:
            formula: Function of (ingredients_count, instructions_count, advance_prep_hours)
                returning a complexity score
        """
        self.formula = formula

    def score(self, recipe: RecipeForPlanning) -> float:
        """Get the recipe's complexity score, preferring a precomputed value."""
        if recipe.complexity is not None:
            return recipe.complexity
        return self.formula(
            recipe.ingredients_count,
            recipe.instructions_count,
            recipe.advance_prep_hours
        )

    def level(self, recipe: RecipeForPlanning) -> Complexity:
        """Get the recipe's complexity level."""
        return complexity_level(self.score(recipe))

    @staticmethod
    def is_complex(score: Optional[float]) -> bool:
        """Check if a score is above the complex threshold (None is never complex)."""
        return score is not None and score > COMPLEX_COMPLEXITY_THRESHOLD

    @staticmethod
    def allowed_for_skill(level: Complexity, skill_level: SkillLevel) -> bool:
        """Check if a complexity level is within a skill level's limit."""
        return _LEVEL_RANK[level] <= _LEVEL_RANK[SKILL_LEVEL_LIMITS[skill_level]]
