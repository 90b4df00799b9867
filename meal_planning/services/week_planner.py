"""
Single-week meal planning.

Fills the 21 slots of one week (7 days x appetizer, main course, dessert)
in calendar and course order, threading the rotation state from slot to
slot.

Typical usage:
    planner = WeekPlanner(CandidateSelector(preferences))
    week = planner.plan_week(date(2025, 10, 27), pool, rotation_state)
"""
from collections import Counter
from datetime import date
from typing import AbstractSet, FrozenSet, List, Set, Tuple, Union

from meal_planning.models.meal_plan import DayContext, MealAssignment, WeekMealPlan, WeekStatus
from meal_planning.models.recipe import CourseType
from meal_planning.models.rotation import RotationState
from meal_planning.services.complexity import RecipeComplexityCalculator
from meal_planning.services.constants import DAILY_COURSES
from meal_planning.services.exceptions import AlgorithmError
from meal_planning.services.reasoning import generate_reasoning_text
from meal_planning.services.recipe_pool import RecipePool
from meal_planning.services.selection import CandidateSelector, Selection
from meal_planning.services.utils import is_weekend, parse_week_start, week_dates
from meal_planning.utils.logging import logger


def build_assignment(
    selection: Selection,
    course_type: CourseType,
    context: DayContext,
    calculator: RecipeComplexityCalculator
) -> MealAssignment:
    """Turn a slot selection into an immutable assignment with its reasoning."""
    recipe = selection.recipe
    return MealAssignment(
        date=context.date,
        course_type=course_type,
        recipe_id=recipe.id,
        accompaniment_recipe_id=selection.accompaniment.id if selection.accompaniment else None,
        prep_required=recipe.prep_required,
        assignment_reasoning=generate_reasoning_text(recipe, course_type, context, calculator)
    )


class WeekPlanner:
    """Plans one week of meals."""

    def __init__(self, selector: CandidateSelector):
        """Initialize with the selector used for every slot."""
        self.selector = selector

    def plan_week(
        self,
        week_start: Union[date, str],
        pool: RecipePool,
        rotation_state: RotationState,
        locked_main_ids: AbstractSet[str] = frozenset(),
        status: WeekStatus = WeekStatus.IDLE
    ) -> WeekMealPlan:
        """
        Generate the assignments of one week.

        Main courses never repeat within the week while enough distinct
        main courses remain; appetizers and desserts are optional and are
        skipped when none is eligible.

        Args:
            week_start: Monday of the week
            pool: Eligible recipes for the run
            rotation_state: Rotation state, updated in place
            locked_main_ids: Main courses held by other weeks in the current
                rotation cycle, skipped until the main course cycle is reset
            status: Status given to the produced week

        Returns:
            WeekMealPlan with the week's assignments

        Raises:
            InvalidDate: If week_start is not a Monday
            InsufficientRecipes: If no main course is eligible
            AlgorithmError: If a main course slot cannot be filled
        """
        week_start = parse_week_start(week_start)
        main_ids = [recipe.id for recipe in pool.for_course(CourseType.MAIN_COURSE)]
        locked = frozenset(locked_main_ids)

        assignments: List[MealAssignment] = []
        week_main_ids: Set[str] = set()

        for day in week_dates(week_start):
            weekend = is_weekend(day)
            for course_name in DAILY_COURSES:
                course_type = CourseType(course_name)
                context = DayContext(
                    date=day,
                    is_weekend=weekend,
                    preceding_slot_complexity=rotation_state.last_assignment_complexity
                )

                excluded = frozenset()
                if course_type == CourseType.MAIN_COURSE:
                    excluded, locked = self._main_exclusions(main_ids, week_main_ids, locked, rotation_state)

                selection = self.selector.select(course_type, pool, context, rotation_state, excluded)
                if selection is None:
                    continue

                if course_type == CourseType.MAIN_COURSE:
                    week_main_ids.add(selection.recipe.id)
                    if selection.cycle_reset:
                        locked = frozenset()
                assignments.append(build_assignment(
                    selection, course_type, context, self.selector.scorer.calculator
                ))

        self._check_main_uniqueness(week_start, assignments, len(main_ids))

        logger.info("Planned week", extra={
            "week_start": week_start.isoformat(),
            "assignments": len(assignments),
            "cycle_number": rotation_state.cycle_number
        })

        return WeekMealPlan(
            start_date=week_start,
            end_date=week_dates(week_start)[-1],
            meal_assignments=assignments,
            status=status
        )

    def _main_exclusions(
        self,
        main_ids: List[str],
        week_main_ids: Set[str],
        locked: FrozenSet[str],
        rotation_state: RotationState
    ) -> Tuple[FrozenSet[str], FrozenSet[str]]:
        """
        Get the main courses a main course slot must not choose.

        Locked ids only hold within the rotation cycle they were locked in.
        When the locks leave no main course that is new to this week, a new
        cycle is started so the week can keep its main courses distinct.

        Returns:
            The excluded ids and the locks still in force
        """
        fresh = [recipe_id for recipe_id in main_ids if recipe_id not in locked and recipe_id not in week_main_ids]
        if fresh:
            return locked | week_main_ids, locked
        if locked and len(main_ids) > len(week_main_ids):
            self.selector.reset_cycle(CourseType.MAIN_COURSE, rotation_state, len(main_ids))
            return frozenset(week_main_ids), frozenset()
        # Fewer main courses than slots: repeats are unavoidable
        return locked, locked

    @staticmethod
    def _check_main_uniqueness(
        week_start: date,
        assignments: List[MealAssignment],
        main_pool_size: int
    ) -> None:
        """Re-check that no main course repeats while the pool could have avoided it."""
        counts = Counter(
            a.recipe_id for a in assignments if a.course_type == CourseType.MAIN_COURSE
        )
        repeated = sorted(recipe_id for recipe_id, count in counts.items() if count > 1)
        if repeated and len(counts) < min(sum(counts.values()), main_pool_size):
            raise AlgorithmError(
                f"Main course(s) {', '.join(repeated)} repeated in week of "
                f"{week_start.isoformat()} with {main_pool_size} main courses available"
            )
