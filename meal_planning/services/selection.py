"""
Candidate selection for a single meal slot.

The selector resolves the winning recipe (and optional accompaniment) for a
slot, crosses the rotation cycle boundary when a category is exhausted and
records the choice in the rotation state.

Two modes are supported:
    - deterministic (default): the top-scoring candidate, ties by id
    - seeded randomized: a score-weighted draw from random.Random(seed)
"""
import random
from dataclasses import dataclass
from typing import AbstractSet, Optional, Sequence

from meal_planning.models.meal_plan import DayContext
from meal_planning.models.preferences import UserPreferences
from meal_planning.models.recipe import CourseType, RecipeForPlanning
from meal_planning.models.rotation import RotationState
from meal_planning.services.constants import REQUIRED_COURSES
from meal_planning.services.exceptions import AlgorithmError, InsufficientRecipes
from meal_planning.services.recipe_pool import RecipePool
from meal_planning.services.scoring import SlotScorer
from meal_planning.utils.logging import logger


@dataclass(frozen=True)
class Selection:
    """
    Outcome of filling one slot.

    Attributes:
        recipe: The chosen recipe
        accompaniment: Optional side dish paired with a main course
        cycle_reset: True if the category's cycle boundary was crossed to make the choice
    """
    recipe: RecipeForPlanning
    accompaniment: Optional[RecipeForPlanning] = None
    cycle_reset: bool = False


class CandidateSelector:
    """Chooses recipes for slots and keeps the rotation state up to date."""

    def __init__(
        self,
        preferences: UserPreferences,
        scorer: Optional[SlotScorer] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the selector.

        Args:
            preferences: Preferences for the run
            scorer: Slot scorer, defaults to one with the standard complexity formula
            seed: Enables randomized mode with a reproducible generator when set
        """
        self.preferences = preferences
        self.scorer = scorer or SlotScorer()
        self.seed = seed
        self._rng = random.Random(seed) if seed is not None else None

    def select(
        self,
        course_type: CourseType,
        pool: RecipePool,
        day_context: DayContext,
        rotation_state: RotationState,
        excluded_ids: AbstractSet[str] = frozenset()
    ) -> Optional[Selection]:
        """
        Fill one slot.

        Args:
            course_type: Course of the slot
            pool: Eligible recipes for the run
            day_context: Date and preceding complexity of the slot
            rotation_state: Rotation state, updated in place with the choice
            excluded_ids: Recipe ids that must not be chosen (locked elsewhere)

        Returns:
            The selection, or None for an optional course that cannot be filled

        Raises:
            InsufficientRecipes: If a required course has no eligible recipe
            AlgorithmError: If no eligible recipe of a required course passes
                the hard constraints
        """
        required = course_type.value in REQUIRED_COURSES
        candidates = pool.for_course(course_type)
        if excluded_ids:
            candidates = tuple(r for r in candidates if r.id not in excluded_ids)

        if not candidates:
            if required:
                raise InsufficientRecipes(minimum=1, current=0)
            return None

        cycle_reset = False
        used = rotation_state.used_ids(course_type)
        if all(recipe.id in used for recipe in candidates):
            self.reset_cycle(course_type, rotation_state, len(candidates))
            cycle_reset = True

        recipe = self._choose(candidates, day_context, rotation_state)
        if recipe is None:
            summary = self.scorer.rejection_summary(
                candidates, day_context, self.preferences, rotation_state
            )
            if required:
                raise AlgorithmError(
                    f"No {course_type.value} recipe satisfies the constraints for "
                    f"{day_context.date.isoformat()} (rejections: {summary})"
                )
            logger.info("Optional course left empty", extra={
                "course_type": course_type.value,
                "date": day_context.date.isoformat(),
                "rejections": summary
            })
            return None

        return self.assign(recipe, pool, day_context, rotation_state, cycle_reset)

    def assign(
        self,
        recipe: RecipeForPlanning,
        pool: RecipePool,
        day_context: DayContext,
        rotation_state: RotationState,
        cycle_reset: bool = False
    ) -> Selection:
        """
        Record a chosen recipe and pair a main course with an accompaniment.

        Used directly when the caller picks the recipe for a slot.
        """
        complexity = self._record(recipe, rotation_state)
        rotation_state.last_assignment_complexity = complexity

        accompaniment = None
        if recipe.recipe_type == CourseType.MAIN_COURSE and recipe.accepts_accompaniment:
            accompaniment = self._select_accompaniment(recipe, pool, day_context, complexity, rotation_state)

        return Selection(recipe=recipe, accompaniment=accompaniment, cycle_reset=cycle_reset)

    def _select_accompaniment(
        self,
        main_course: RecipeForPlanning,
        pool: RecipePool,
        day_context: DayContext,
        main_complexity: float,
        rotation_state: RotationState
    ) -> Optional[RecipeForPlanning]:
        """
        Pair a main course with a compatible accompaniment.

        Runs the same scoring over accompaniments in the preferred
        categories. Returns None when nothing compatible is eligible.
        """
        candidates = pool.accompaniments_for(main_course)
        if not candidates:
            return None

        check_rotation = True
        used = rotation_state.used_ids(CourseType.ACCOMPANIMENT)
        if all(recipe.id in used for recipe in candidates):
            category = pool.for_course(CourseType.ACCOMPANIMENT)
            if all(recipe.id in used for recipe in category):
                self.reset_cycle(CourseType.ACCOMPANIMENT, rotation_state, len(category))
            else:
                # Only the compatible subset is exhausted: repeat within it.
                check_rotation = False

        side_context = DayContext(
            date=day_context.date,
            is_weekend=day_context.is_weekend,
            preceding_slot_complexity=main_complexity
        )
        accompaniment = self._choose(candidates, side_context, rotation_state, check_rotation)
        if accompaniment is None:
            logger.debug("No accompaniment fits", extra={
                "main_course_id": main_course.id,
                "date": day_context.date.isoformat()
            })
            return None

        self._record(accompaniment, rotation_state)
        return accompaniment

    def _choose(
        self,
        candidates: Sequence[RecipeForPlanning],
        day_context: DayContext,
        rotation_state: RotationState,
        check_rotation: bool = True
    ) -> Optional[RecipeForPlanning]:
        if self._rng is None:
            return self.scorer.best(
                candidates, day_context, self.preferences, rotation_state, check_rotation
            )

        ranked = self.scorer.rank(
            candidates, day_context, self.preferences, rotation_state, check_rotation
        )
        if not ranked:
            return None
        weights = [score for score, _ in ranked]
        if sum(weights) <= 0:
            return ranked[0][1]
        return self._rng.choices([recipe for _, recipe in ranked], weights=weights, k=1)[0]

    def _record(self, recipe: RecipeForPlanning, rotation_state: RotationState) -> float:
        """Mark a chosen recipe as used and count its cuisine; returns its complexity."""
        rotation_state.mark_used(recipe.recipe_type, recipe.id)
        rotation_state.increment_cuisine(recipe.cuisine)
        return self.scorer.calculator.score(recipe)

    @staticmethod
    def reset_cycle(course_type: CourseType, rotation_state: RotationState, pool_size: int) -> None:
        """Start a new rotation cycle for one category."""
        old_cycle = rotation_state.cycle_number
        new_cycle = rotation_state.reset_category(course_type)
        logger.info("Rotation cycle reset", extra={
            "course_type": course_type.value,
            "old_cycle_number": old_cycle,
            "new_cycle_number": new_cycle,
            "pool_size": pool_size
        })
