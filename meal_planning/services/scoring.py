"""
Slot scoring for meal plan generation.

Each candidate recipe gets a desirability score for a slot. Hard constraints
reject a candidate outright (score -inf); surviving candidates are scored by
a weighted mix of cuisine novelty and time fit:

    score = w * novelty + (1 - w) * fit
    novelty = 1 / (1 + uses of the recipe's cuisine)
    fit = 1 / (1 + unused minutes / ceiling)

Candidates are ordered by score descending, ties broken by ascending id.
"""
from typing import Iterable, List, Optional, Tuple

from meal_planning.models.meal_plan import DayContext
from meal_planning.models.preferences import SkillLevel, UserPreferences
from meal_planning.models.recipe import RecipeForPlanning
from meal_planning.models.rotation import RotationState
from meal_planning.services.complexity import RecipeComplexityCalculator, complexity_level

REJECTED = float("-inf")

# Hard constraint rejection reasons
OVER_TIME_CEILING = "over_time_ceiling"
USED_IN_CYCLE = "used_in_cycle"
ABOVE_SKILL_LEVEL = "above_skill_level"
CONSECUTIVE_COMPLEX = "consecutive_complex"


class SlotScorer:
    """Scores candidate recipes for a single meal slot."""

    def __init__(self, calculator: Optional[RecipeComplexityCalculator] = None):
        """
        Initialize the scorer.

        Args:
            calculator: Complexity calculator, defaults to the standard formula
        """
        self.calculator = calculator or RecipeComplexityCalculator()

    def rejection_reason(
        self,
        recipe: RecipeForPlanning,
        day_context: DayContext,
        preferences: UserPreferences,
        rotation_state: RotationState,
        check_rotation: bool = True
    ) -> Optional[str]:
        """
        Get the hard constraint a recipe violates for this slot, if any.

        The consecutive complex rule excludes the recipe for this slot only;
        it stays in rotation.
        """
        if recipe.total_time_min > preferences.ceiling_for(day_context.is_weekend):
            return OVER_TIME_CEILING
        if check_rotation and rotation_state.is_used(recipe.recipe_type, recipe.id):
            return USED_IN_CYCLE

        complexity = self.calculator.score(recipe)
        if preferences.skill_level != SkillLevel.ADVANCED and not self.calculator.allowed_for_skill(
            complexity_level(complexity), preferences.skill_level
        ):
            return ABOVE_SKILL_LEVEL
        if (
            preferences.avoid_consecutive_complex
            and self.calculator.is_complex(complexity)
            and self.calculator.is_complex(day_context.preceding_slot_complexity)
        ):
            return CONSECUTIVE_COMPLEX
        return None

    def score(
        self,
        recipe: RecipeForPlanning,
        day_context: DayContext,
        preferences: UserPreferences,
        rotation_state: RotationState,
        check_rotation: bool = True
    ) -> float:
        """
        Score a recipe for a slot.

        Returns:
            REJECTED (-inf) when a hard constraint is violated, otherwise a
            score in (0, 1]
        """
        if self.rejection_reason(recipe, day_context, preferences, rotation_state, check_rotation):
            return REJECTED

        ceiling = preferences.ceiling_for(day_context.is_weekend)
        novelty = 1.0 / (1.0 + rotation_state.cuisine_usage(recipe.cuisine))
        if ceiling > 0:
            fit = 1.0 / (1.0 + (ceiling - recipe.total_time_min) / ceiling)
        else:
            fit = 1.0

        weight = preferences.cuisine_variety_weight
        return weight * novelty + (1.0 - weight) * fit

    def best(
        self,
        candidates: Iterable[RecipeForPlanning],
        day_context: DayContext,
        preferences: UserPreferences,
        rotation_state: RotationState,
        check_rotation: bool = True
    ) -> Optional[RecipeForPlanning]:
        """
        Get the top-scoring candidate in a single pass.

        Ties go to the smallest recipe id. Returns None when every candidate
        is rejected.
        """
        best_recipe = None
        best_score = REJECTED
        for recipe in candidates:
            score = self.score(recipe, day_context, preferences, rotation_state, check_rotation)
            if score == REJECTED:
                continue
            if best_recipe is None or score > best_score or (
                score == best_score and recipe.id < best_recipe.id
            ):
                best_recipe = recipe
                best_score = score
        return best_recipe

    def rank(
        self,
        candidates: Iterable[RecipeForPlanning],
        day_context: DayContext,
        preferences: UserPreferences,
        rotation_state: RotationState,
        check_rotation: bool = True
    ) -> List[Tuple[float, RecipeForPlanning]]:
        """
        Score and order every surviving candidate.

        Returns:
            (score, recipe) pairs, score descending then id ascending
        """
        scored = []
        for recipe in candidates:
            score = self.score(recipe, day_context, preferences, rotation_state, check_rotation)
            if score != REJECTED:
                scored.append((score, recipe))
        scored.sort(key=lambda pair: (-pair[0], pair[1].id))
        return scored

    def rejection_summary(
        self,
        candidates: Iterable[RecipeForPlanning],
        day_context: DayContext,
        preferences: UserPreferences,
        rotation_state: RotationState
    ) -> dict:
        """Count candidates per rejection reason, for error reporting."""
        summary = {}
        for recipe in candidates:
            reason = self.rejection_reason(recipe, day_context, preferences, rotation_state)
            if reason:
                summary[reason] = summary.get(reason, 0) + 1
        return summary
