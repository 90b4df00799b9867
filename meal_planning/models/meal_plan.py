"""
Model definitions for generated meal plans.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from meal_planning.models.recipe import CourseType
from meal_planning.models.rotation import RotationState


@dataclass(frozen=True)
class DayContext:
    """
    Context of the slot being filled, as seen by the scorer.

    Attributes:
        date: Calendar date of the slot
        is_weekend: True on Saturday and Sunday
        preceding_slot_complexity: Complexity score of the previous slot's assignment
    """
    date: date
    is_weekend: bool
    preceding_slot_complexity: Optional[float] = None


class MealAssignment(BaseModel):
    """
    A single recipe assigned to a (date, course type) slot.

    Assignments are never mutated; regeneration and replacement produce
    new ones.
    """
    model_config = ConfigDict(frozen=True)

    date: date
    course_type: CourseType
    recipe_id: str
    accompaniment_recipe_id: Optional[str] = None
    prep_required: bool = False
    assignment_reasoning: Optional[str] = None


class WeekStatus(str, Enum):
    """
    Lifecycle status of a week plan.
    """
    IDLE = "idle"
    ACTIVE = "active"
    ARCHIVED = "archived"


class WeekMealPlan(BaseModel):
    """
    One week (Monday to Sunday) of meal assignments in chronological and course order.
    """
    start_date: date
    end_date: date
    meal_assignments: List[MealAssignment]
    status: WeekStatus = WeekStatus.IDLE

    def main_course_ids(self) -> List[str]:
        """Get main course recipe ids in slot order."""
        return [
            assignment.recipe_id
            for assignment in self.meal_assignments
            if assignment.course_type == CourseType.MAIN_COURSE
        ]

    def assignment_for(self, slot_date: date, course_type: CourseType) -> Optional[MealAssignment]:
        """Find the assignment filling a slot, if any."""
        for assignment in self.meal_assignments:
            if assignment.date == slot_date and assignment.course_type == course_type:
                return assignment
        return None


class MultiWeekMealPlan(BaseModel):
    """
    Result of a multi-week generation run.

    Holds every generated week together with the rotation state after the
    run, which the caller persists for the next generation.
    """
    weeks: List[WeekMealPlan]
    rotation_state: RotationState

    def all_assignments(self) -> List[MealAssignment]:
        """Get every assignment across all weeks in order."""
        return [assignment for week in self.weeks for assignment in week.meal_assignments]

    def main_course_ids(self) -> List[str]:
        """Get every main course id across all weeks in order."""
        return [recipe_id for week in self.weeks for recipe_id in week.main_course_ids()]

    def week_index_for(self, slot_date: date) -> Optional[int]:
        """Get the index of the week containing a date, if any."""
        for index, week in enumerate(self.weeks):
            if week.start_date <= slot_date <= week.end_date:
                return index
        return None
