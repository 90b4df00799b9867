"""
Human-readable reasoning for meal assignments.
"""
from meal_planning.models.meal_plan import DayContext
from meal_planning.models.recipe import Complexity, CourseType, RecipeForPlanning
from meal_planning.services.complexity import RecipeComplexityCalculator
from meal_planning.services.constants import LONG_ADVANCE_PREP_HOURS
from meal_planning.services.utils import day_name


def generate_reasoning_text(
    recipe: RecipeForPlanning,
    course_type: CourseType,
    day_context: DayContext,
    calculator: RecipeComplexityCalculator
) -> str:
    """
    Explain why a recipe was assigned to a slot.

    Checked in priority order: advance prep, weekend complexity, quick
    weeknight meal, then a generic fallback.

    Example:
        >>> generate_reasoning_text(tacos, CourseType.MAIN_COURSE, tuesday, calculator)
        'Assigned to Tuesday: Quick weeknight meal (Simple recipe, 25min total time)'
    """
    day = day_name(day_context.date)
    total_time = recipe.total_time_min

    if recipe.advance_prep_hours:
        hours = recipe.advance_prep_hours
        kind = "marinade" if hours >= LONG_ADVANCE_PREP_HOURS else "advance prep"
        return f"Prep ahead for {day}: Requires {hours}-hour {kind}"

    level = calculator.level(recipe)
    if day_context.is_weekend and level == Complexity.COMPLEX:
        return (
            f"Assigned to {day}: More prep time available "
            f"(Complex recipe, {total_time}min total time)"
        )

    if not day_context.is_weekend and level == Complexity.SIMPLE:
        return (
            f"Assigned to {day}: Quick weeknight meal "
            f"(Simple recipe, {total_time}min total time)"
        )

    course = course_type.value.replace("_", " ")
    return f"Best fit {course} for {day} based on your preferences"
