"""
Rotation state model for recipe non-repetition tracking.

The rotation state records which recipes have been used in the current
rotation cycle, per course category, together with cuisine usage counters
and the complexity of the most recent assignment. It is created once per
user, threaded through every generation run and persisted by the caller
as an opaque JSON snapshot.

Loading and validating stored snapshots is done by
meal_planning.services.rotation.
"""
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field, NonNegativeInt, field_serializer

from meal_planning.models.recipe import CourseType, Cuisine


class RotationState(BaseModel):
    """
    Mutable rotation tracking carried across a multi-week run.

    Attributes:
        cycle_number: Rotation cycle counter, starts at 1 and never decreases
        used_recipe_ids: Recipe ids consumed in the current cycle, per course category
        cuisine_usage_counts: How many assignments each cuisine has received
        last_assignment_complexity: Complexity score of the most recent slot assignment
    """
    cycle_number: int = Field(1, ge=1)
    used_recipe_ids: Dict[CourseType, Set[str]] = Field(default_factory=dict)
    cuisine_usage_counts: Dict[Cuisine, NonNegativeInt] = Field(default_factory=dict)
    last_assignment_complexity: Optional[float] = None

    @field_serializer("used_recipe_ids")
    def _serialize_used_ids(self, value: Dict[CourseType, Set[str]]) -> Dict[str, List[str]]:
        return {
            course.value: sorted(ids)
            for course, ids in sorted(value.items(), key=lambda item: item[0].value)
        }

    @field_serializer("cuisine_usage_counts")
    def _serialize_cuisine_counts(self, value: Dict[Cuisine, int]) -> Dict[str, int]:
        return {
            cuisine.value: count
            for cuisine, count in sorted(value.items(), key=lambda item: item[0].value)
        }

    def used_ids(self, course_type: CourseType) -> Set[str]:
        """Get the ids used in the current cycle for a course category."""
        return self.used_recipe_ids.get(course_type, set())

    def is_used(self, course_type: CourseType, recipe_id: str) -> bool:
        """Check if a recipe has been used in the current cycle."""
        return recipe_id in self.used_recipe_ids.get(course_type, ())

    def mark_used(self, course_type: CourseType, recipe_id: str) -> None:
        """Mark a recipe as used in the current cycle."""
        self.used_recipe_ids.setdefault(course_type, set()).add(recipe_id)

    def unmark_used(self, course_type: CourseType, recipe_id: str) -> None:
        """
        Return a recipe to the rotation pool.

        Used when an assignment is discarded by regeneration or replacement.

        Raises:
            ValueError: If the recipe was not marked as used
        """
        used = self.used_recipe_ids.get(course_type)
        if not used or recipe_id not in used:
            raise ValueError(
                f"Recipe {recipe_id} was not marked as used in cycle {self.cycle_number}"
            )
        used.discard(recipe_id)

    def used_count(self, course_type: Optional[CourseType] = None) -> int:
        """Get the number of recipes used in the current cycle, optionally for one category."""
        if course_type is not None:
            return len(self.used_recipe_ids.get(course_type, ()))
        return sum(len(ids) for ids in self.used_recipe_ids.values())

    def reset_category(self, course_type: CourseType) -> int:
        """
        Cross the cycle boundary for a category.

        Clears the category's used ids and starts a new cycle.

        Returns:
            The new cycle number
        """
        self.used_recipe_ids[course_type] = set()
        self.cycle_number += 1
        return self.cycle_number

    def cuisine_usage(self, cuisine: Cuisine) -> int:
        """Get how many times a cuisine has been assigned (0 if never)."""
        return self.cuisine_usage_counts.get(cuisine, 0)

    def increment_cuisine(self, cuisine: Cuisine) -> None:
        """Count one more assignment for a cuisine."""
        self.cuisine_usage_counts[cuisine] = self.cuisine_usage_counts.get(cuisine, 0) + 1

    def decrement_cuisine(self, cuisine: Cuisine) -> None:
        """Remove one assignment from a cuisine counter, never going below zero."""
        count = self.cuisine_usage_counts.get(cuisine, 0)
        if count > 1:
            self.cuisine_usage_counts[cuisine] = count - 1
        else:
            self.cuisine_usage_counts.pop(cuisine, None)

    def to_json(self) -> str:
        """Serialize to a deterministic JSON string for storage."""
        return self.model_dump_json()
