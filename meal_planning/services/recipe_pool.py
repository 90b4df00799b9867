"""
In-memory recipe pool for a generation run.

The pool holds the dietary-compliant recipes grouped by course category and
sorted by id, so every iteration order inside the engine is reproducible.
"""
from typing import Dict, Iterable, Optional, Tuple

from meal_planning.models.preferences import UserPreferences
from meal_planning.models.recipe import CourseType, RecipeForPlanning
from meal_planning.services.dietary_filter import filter_by_dietary_restrictions
from meal_planning.utils.logging import logger


class RecipePool:
    """Dietary-filtered candidate recipes, indexed by course category."""

    def __init__(self, recipes: Iterable[RecipeForPlanning]):
        """
        Build a pool from already-filtered recipes.

        Duplicate ids keep their first occurrence.
        """
        self._by_id: Dict[str, RecipeForPlanning] = {}
        for recipe in recipes:
            if recipe.id in self._by_id:
                logger.warning("Duplicate recipe id ignored", extra={"recipe_id": recipe.id})
                continue
            self._by_id[recipe.id] = recipe

        self._by_course: Dict[CourseType, Tuple[RecipeForPlanning, ...]] = {
            course_type: tuple(sorted(
                (r for r in self._by_id.values() if r.recipe_type == course_type),
                key=lambda r: r.id
            ))
            for course_type in CourseType
        }

    @classmethod
    def from_recipes(
        cls,
        recipes: Iterable[RecipeForPlanning],
        preferences: UserPreferences
    ) -> "RecipePool":
        """
        Build a pool by applying the user's dietary restrictions.

        Args:
            recipes: Favorite recipes supplied by the caller
            preferences: Preferences holding the restrictions and match mode
        """
        recipes = list(recipes)
        eligible = filter_by_dietary_restrictions(
            recipes,
            preferences.dietary_restrictions,
            preferences.dietary_match_mode
        )
        logger.debug("Applied dietary filter", extra={
            "total_recipes": len(recipes),
            "eligible_recipes": len(eligible),
            "restrictions": sorted(preferences.dietary_restrictions),
            "mode": preferences.dietary_match_mode.value
        })
        return cls(eligible)

    def for_course(self, course_type: CourseType) -> Tuple[RecipeForPlanning, ...]:
        """Get the eligible recipes of a category, sorted by id."""
        return self._by_course[course_type]

    def count(self, course_type: CourseType) -> int:
        """Get the number of eligible recipes in a category."""
        return len(self._by_course[course_type])

    def get(self, recipe_id: str) -> Optional[RecipeForPlanning]:
        """Get an eligible recipe by id."""
        return self._by_id.get(recipe_id)

    def accompaniments_for(self, main_course: RecipeForPlanning) -> Tuple[RecipeForPlanning, ...]:
        """
        Get the accompaniments a main course can be paired with.

        Returns an empty tuple when the main course takes no accompaniment.
        An empty preferred category set accepts any accompaniment; otherwise
        the accompaniment's category must be one of the preferred ones.
        """
        if not main_course.accepts_accompaniment:
            return ()
        accompaniments = self._by_course[CourseType.ACCOMPANIMENT]
        preferred = main_course.preferred_accompaniment_categories
        if not preferred:
            return accompaniments
        return tuple(r for r in accompaniments if r.accompaniment_category in preferred)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, recipe_id: str) -> bool:
        return recipe_id in self._by_id
