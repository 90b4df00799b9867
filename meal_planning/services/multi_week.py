"""
Multi-week meal plan orchestration.

Drives the week planner across consecutive weeks with a single rotation
state, so that no main course repeats within a rotation cycle across the
whole run. Also handles regeneration of one or more weeks and single-slot
replacement on an existing plan.

Every entry point works on a copy of the caller's rotation state: a run
either returns a complete plan with its new state or raises, leaving the
caller's state untouched.

Typical usage:
    orchestrator = MultiWeekOrchestrator()
    plan = orchestrator.generate(recipes, preferences, state, week_count=4, start_date="2025-10-27")
    plan = orchestrator.regenerate_week(plan, 2, recipes, preferences)
"""
import math
from datetime import date, timedelta
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence, Set, Union

from meal_planning.models.meal_plan import (
    DayContext,
    MealAssignment,
    MultiWeekMealPlan,
    WeekMealPlan
)
from meal_planning.models.preferences import UserPreferences
from meal_planning.models.recipe import CourseType, RecipeForPlanning
from meal_planning.models.rotation import RotationState
from meal_planning.services.complexity import RecipeComplexityCalculator
from meal_planning.services.constants import DAYS_PER_WEEK, MAX_WEEKS, MIN_WEEKS
from meal_planning.services.exceptions import (
    AlgorithmError,
    InsufficientRecipes,
    InvalidDate,
    InvalidMealType,
    InvalidWeekCount,
    MealPlanningError,
    RecipeAlreadyAssigned,
    RecipeAlreadyUsedInRotation,
    RecipeNotFound
)
from meal_planning.services.recipe_pool import RecipePool
from meal_planning.services.rotation import validate_rotation_state
from meal_planning.services.scoring import SlotScorer
from meal_planning.services.selection import CandidateSelector
from meal_planning.services.utils import (
    is_weekend,
    next_week_start,
    parse_course_type,
    parse_date,
    parse_week_start
)
from meal_planning.services.week_planner import WeekPlanner, build_assignment
from meal_planning.utils.logging import log_exception, logger


def max_weeks_for(main_course_count: int) -> int:
    """
    Get the number of weeks a pool of main courses can fill without repeats.

    Capped between MIN_WEEKS and MAX_WEEKS.

    Example:
        >>> max_weeks_for(15)
        3
    """
    return min(MAX_WEEKS, max(MIN_WEEKS, math.ceil(main_course_count / DAYS_PER_WEEK)))


class MultiWeekOrchestrator:
    """Generates, regenerates and edits multi-week meal plans."""

    def __init__(
        self,
        calculator: Optional[RecipeComplexityCalculator] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            calculator: Complexity calculator, defaults to the standard formula
            seed: Enables seeded randomized selection when set
        """
        self.calculator = calculator or RecipeComplexityCalculator()
        self.seed = seed

    def _selector(self, preferences: UserPreferences) -> CandidateSelector:
        return CandidateSelector(preferences, SlotScorer(self.calculator), self.seed)

    def generate(
        self,
        recipes: Iterable[RecipeForPlanning],
        preferences: UserPreferences,
        rotation_state: Optional[RotationState] = None,
        week_count: Optional[int] = None,
        start_date: Optional[Union[date, str]] = None
    ) -> MultiWeekMealPlan:
        """
        Generate a multi-week meal plan.

        Args:
            recipes: The user's favorite recipes
            preferences: The user's planning preferences
            rotation_state: Rotation state from the previous run, empty if None
            week_count: Number of weeks to plan, defaults to what the main
                course pool can fill
            start_date: Monday of the first week, defaults to next Monday

        Returns:
            MultiWeekMealPlan holding the weeks and the updated rotation state

        Raises:
            InsufficientRecipes: If no main course is eligible
            InvalidWeekCount: If week_count is outside MIN_WEEKS..MAX_WEEKS
            InvalidDate: If start_date is malformed or not a Monday
            RotationStateError: If the rotation state does not match the recipes
            AlgorithmError: If a main course slot cannot be filled
        """
        recipes = list(recipes)
        try:
            state = self._working_state(rotation_state, recipes)
            pool = RecipePool.from_recipes(recipes, preferences)

            main_count = pool.count(CourseType.MAIN_COURSE)
            if main_count == 0:
                raise InsufficientRecipes(minimum=1, current=0)

            if week_count is None:
                week_count = max_weeks_for(main_count)
            elif not MIN_WEEKS <= week_count <= MAX_WEEKS:
                raise InvalidWeekCount(week_count, MIN_WEEKS, MAX_WEEKS)

            first_monday = parse_week_start(start_date) if start_date is not None else next_week_start()

            logger.info("Generating meal plan", extra={
                "start_date": first_monday.isoformat(),
                "week_count": week_count,
                "eligible_recipes": len(pool),
                "main_courses": main_count,
                "cycle_number": state.cycle_number
            })

            planner = WeekPlanner(self._selector(preferences))
            weeks = [
                planner.plan_week(first_monday + timedelta(weeks=offset), pool, state)
                for offset in range(week_count)
            ]
        except MealPlanningError as e:
            self._log_failure("Meal plan generation aborted", e)
            raise

        logger.info("Generated meal plan", extra={
            "week_count": len(weeks),
            "assignments": sum(len(week.meal_assignments) for week in weeks),
            "cycle_number": state.cycle_number
        })
        return MultiWeekMealPlan(weeks=weeks, rotation_state=state)

    def regenerate_week(
        self,
        plan: MultiWeekMealPlan,
        week_index: int,
        recipes: Iterable[RecipeForPlanning],
        preferences: UserPreferences
    ) -> MultiWeekMealPlan:
        """
        Regenerate a single week of an existing plan.

        The week's recipes go back to the rotation pool and the week is
        planned again. Main courses that other weeks hold in the current
        rotation cycle are locked out of it. The other weeks are returned
        unchanged.

        Args:
            plan: The plan to regenerate from
            week_index: Zero-based index of the week to regenerate
            recipes: The user's favorite recipes
            preferences: The user's planning preferences

        Raises:
            ValueError: If week_index is out of range
            RecipeNotFound: If an assigned recipe is no longer in the recipes
            RotationStateError: If the plan's rotation state does not match the recipes
            InsufficientRecipes, AlgorithmError: As for generate
        """
        self._check_week_index(plan, week_index)
        return self._regenerate(plan, [week_index], recipes, preferences)

    def regenerate_from(
        self,
        plan: MultiWeekMealPlan,
        week_index: int,
        recipes: Iterable[RecipeForPlanning],
        preferences: UserPreferences
    ) -> MultiWeekMealPlan:
        """
        Regenerate a week and every week after it.

        Earlier weeks are kept as they are. Their main courses of the current
        rotation cycle stay locked.
        Raises the same errors as regenerate_week.
        """
        self._check_week_index(plan, week_index)
        return self._regenerate(plan, list(range(week_index, len(plan.weeks))), recipes, preferences)

    def replace_meal(
        self,
        plan: MultiWeekMealPlan,
        slot_date: Union[date, str],
        course_type: Union[CourseType, str],
        recipes: Iterable[RecipeForPlanning],
        preferences: UserPreferences,
        new_recipe_id: Optional[str] = None
    ) -> MultiWeekMealPlan:
        """
        Replace the recipe assigned to a single slot.

        The current recipe goes back to the rotation pool and is replaced by
        new_recipe_id, or by the best remaining alternative when no recipe is
        given. A replacement main course never duplicates a main course of
        the same week or one held elsewhere in the current rotation cycle.

        Args:
            plan: The plan to edit
            slot_date: Date of the slot
            course_type: Course of the slot
            recipes: The user's favorite recipes
            preferences: The user's planning preferences
            new_recipe_id: Recipe chosen by the caller for the slot

        Returns:
            A new plan with the slot replaced and the updated rotation state

        Raises:
            InvalidDate: If the date is malformed or outside the plan
            InvalidMealType: If the course type is unknown or new_recipe_id is
                a recipe of another course
            RecipeNotFound: If the slot has no assignment, or new_recipe_id is
                unknown or excluded by the dietary restrictions
            RecipeAlreadyAssigned: If new_recipe_id is already in the slot
            RecipeAlreadyUsedInRotation: If new_recipe_id was already used in
                the current rotation cycle
            AlgorithmError: If no alternative recipe fits the slot
        """
        recipes = list(recipes)
        try:
            slot_date = parse_date(slot_date)
            course_type = parse_course_type(course_type)

            week_index = plan.week_index_for(slot_date)
            if week_index is None:
                raise InvalidDate(f"{slot_date.isoformat()} is not part of the meal plan")
            week = plan.weeks[week_index]

            current = week.assignment_for(slot_date, course_type)
            if current is None:
                raise RecipeNotFound(f"{course_type.value} on {slot_date.isoformat()}")
            if new_recipe_id == current.recipe_id:
                raise RecipeAlreadyAssigned(new_recipe_id)

            state = self._working_state(plan.rotation_state, recipes)
            recipes_by_id = {recipe.id: recipe for recipe in recipes}
            cycle_mains = self._current_cycle_mains(plan, state)
            released = {current.recipe_id} if cycle_mains.get(current.recipe_id) == week_index else set()
            self._release([current], recipes_by_id, state, released)

            excluded: Set[str] = {current.recipe_id}
            if course_type == CourseType.MAIN_COURSE:
                excluded.update(week.main_course_ids())
                excluded.update(cycle_mains)

            position = week.meal_assignments.index(current)
            preceding = week.meal_assignments[position - 1] if position > 0 else None
            context = DayContext(
                date=slot_date,
                is_weekend=is_weekend(slot_date),
                preceding_slot_complexity=self._complexity_of(preceding, recipes_by_id)
            )

            last_complexity = state.last_assignment_complexity
            pool = RecipePool.from_recipes(recipes, preferences)
            selector = self._selector(preferences)
            if new_recipe_id is not None:
                recipe = self._chosen_replacement(new_recipe_id, course_type, pool, state, excluded)
                selection = selector.assign(recipe, pool, context, state)
            else:
                if all(recipe.id in excluded for recipe in pool.for_course(course_type)):
                    raise AlgorithmError(
                        f"No alternative {course_type.value} recipe for {slot_date.isoformat()}"
                    )
                selection = selector.select(course_type, pool, context, state, frozenset(excluded))
                if selection is None:
                    raise AlgorithmError(
                        f"No alternative {course_type.value} recipe for {slot_date.isoformat()}"
                    )
            state.last_assignment_complexity = last_complexity
        except MealPlanningError as e:
            self._log_failure("Meal replacement aborted", e)
            raise

        replacement = build_assignment(selection, course_type, context, self.calculator)
        assignments = list(week.meal_assignments)
        assignments[position] = replacement

        logger.info("Replaced meal", extra={
            "date": slot_date.isoformat(),
            "course_type": course_type.value,
            "old_recipe_id": current.recipe_id,
            "new_recipe_id": replacement.recipe_id
        })

        weeks = list(plan.weeks)
        weeks[week_index] = week.model_copy(update={"meal_assignments": assignments})
        return MultiWeekMealPlan(weeks=weeks, rotation_state=state)

    def _regenerate(
        self,
        plan: MultiWeekMealPlan,
        target_indices: Sequence[int],
        recipes: Iterable[RecipeForPlanning],
        preferences: UserPreferences
    ) -> MultiWeekMealPlan:
        recipes = list(recipes)
        targets = sorted(set(target_indices))
        try:
            state = self._working_state(plan.rotation_state, recipes)
            recipes_by_id = {recipe.id: recipe for recipe in recipes}

            cycle_mains = self._current_cycle_mains(plan, state)
            released = {recipe_id for recipe_id, index in cycle_mains.items() if index in targets}
            for index in targets:
                self._release(plan.weeks[index].meal_assignments, recipes_by_id, state, released)

            # Only main courses of the current cycle still count as used
            locked = {recipe_id for recipe_id, index in cycle_mains.items() if index not in targets}

            logger.info("Regenerating weeks", extra={
                "week_indices": targets,
                "locked_main_courses": len(locked),
                "cycle_number": state.cycle_number
            })

            last_complexity = state.last_assignment_complexity
            pool = RecipePool.from_recipes(recipes, preferences)
            planner = WeekPlanner(self._selector(preferences))
            weeks: List[WeekMealPlan] = list(plan.weeks)
            for index in targets:
                # Locks lapse once the main course cycle is reset
                locked = {recipe_id for recipe_id in locked if state.is_used(CourseType.MAIN_COURSE, recipe_id)}
                previous = weeks[index - 1].meal_assignments if index > 0 else []
                state.last_assignment_complexity = self._complexity_of(
                    previous[-1] if previous else None, recipes_by_id
                )
                weeks[index] = planner.plan_week(
                    plan.weeks[index].start_date,
                    pool,
                    state,
                    locked_main_ids=frozenset(locked),
                    status=plan.weeks[index].status
                )
            if targets[-1] != len(plan.weeks) - 1:
                state.last_assignment_complexity = last_complexity
        except MealPlanningError as e:
            self._log_failure("Meal plan regeneration aborted", e)
            raise

        return MultiWeekMealPlan(weeks=weeks, rotation_state=state)

    @staticmethod
    def _working_state(
        rotation_state: Optional[RotationState],
        recipes: Sequence[RecipeForPlanning]
    ) -> RotationState:
        """Validate the caller's rotation state and get a private copy of it."""
        if rotation_state is None:
            return RotationState()
        validate_rotation_state(rotation_state, recipes)
        return rotation_state.model_copy(deep=True)

    @staticmethod
    def _current_cycle_mains(plan: MultiWeekMealPlan, state: RotationState) -> Dict[str, int]:
        """
        Map the plan's main courses of the current rotation cycle to their week index.

        The current cycle is the longest run of distinct main courses at the
        end of the plan that are all still marked as used. Earlier
        assignments were cleared by a cycle reset, even when the same recipe
        came back later in the plan.
        """
        used = state.used_ids(CourseType.MAIN_COURSE)
        holders: Dict[str, int] = {}
        for index in reversed(range(len(plan.weeks))):
            for assignment in reversed(plan.weeks[index].meal_assignments):
                if assignment.course_type != CourseType.MAIN_COURSE:
                    continue
                if assignment.recipe_id not in used or assignment.recipe_id in holders:
                    return holders
                holders[assignment.recipe_id] = index
        return holders

    @staticmethod
    def _release(
        assignments: Iterable[MealAssignment],
        recipes_by_id: Dict[str, RecipeForPlanning],
        state: RotationState,
        released_main_ids: AbstractSet[str]
    ) -> None:
        """
        Return assigned recipes and their accompaniments to the rotation pool.

        Main courses are only unmarked when listed in released_main_ids, so a
        recipe that an earlier cycle assigned here and a later week picked
        again stays used.
        """
        for assignment in assignments:
            for recipe_id in (assignment.recipe_id, assignment.accompaniment_recipe_id):
                if recipe_id is None:
                    continue
                recipe = recipes_by_id.get(recipe_id)
                if recipe is None:
                    raise RecipeNotFound(recipe_id)
                if recipe.recipe_type == CourseType.MAIN_COURSE:
                    if recipe_id in released_main_ids and state.is_used(recipe.recipe_type, recipe_id):
                        state.unmark_used(recipe.recipe_type, recipe_id)
                # Used ids from an earlier cycle were already cleared by a reset
                elif state.is_used(recipe.recipe_type, recipe_id):
                    state.unmark_used(recipe.recipe_type, recipe_id)
                state.decrement_cuisine(recipe.cuisine)

    @staticmethod
    def _chosen_replacement(
        recipe_id: str,
        course_type: CourseType,
        pool: RecipePool,
        state: RotationState,
        excluded: AbstractSet[str]
    ) -> RecipeForPlanning:
        """Look up and check a replacement recipe picked by the caller."""
        recipe = pool.get(recipe_id)
        if recipe is None:
            raise RecipeNotFound(recipe_id)
        if recipe.recipe_type != course_type:
            raise InvalidMealType(recipe.recipe_type.value)
        if recipe_id in excluded or state.is_used(course_type, recipe_id):
            raise RecipeAlreadyUsedInRotation(recipe_id)
        return recipe

    def _complexity_of(
        self,
        assignment: Optional[MealAssignment],
        recipes_by_id: Dict[str, RecipeForPlanning]
    ) -> Optional[float]:
        if assignment is None:
            return None
        recipe = recipes_by_id.get(assignment.recipe_id)
        if recipe is None:
            raise RecipeNotFound(assignment.recipe_id)
        return self.calculator.score(recipe)

    @staticmethod
    def _check_week_index(plan: MultiWeekMealPlan, week_index: int) -> None:
        if not 0 <= week_index < len(plan.weeks):
            raise ValueError(
                f"Week index {week_index} out of range for a {len(plan.weeks)}-week plan"
            )

    @staticmethod
    def _log_failure(message: str, error: MealPlanningError) -> None:
        log_exception(logger, message, extra={
            "error": str(error),
            "error_type": error.__class__.__name__
        })
