"""
Dietary restriction filtering.

Runs before any scoring: recipes that fail the filter are invisible to the
rest of the pipeline for the whole generation run.
"""
from typing import Iterable, List

from meal_planning.models.preferences import DietaryMatchMode
from meal_planning.models.recipe import RecipeForPlanning, normalize_tag


def filter_by_dietary_restrictions(
    recipes: Iterable[RecipeForPlanning],
    restrictions: Iterable[str],
    mode: DietaryMatchMode = DietaryMatchMode.ALL
) -> List[RecipeForPlanning]:
    """
    Keep only recipes compatible with the user's dietary restrictions.

    Args:
        recipes: Candidate recipes, left untouched
        restrictions: Restriction labels (e.g. "vegan", "gluten-free")
        mode: ALL requires every restriction among the recipe's tags,
            ANY requires at least one

    Returns:
        New list of compatible recipes in input order. Every recipe is
        returned when there are no restrictions.

    Example:
        >>> filtered = filter_by_dietary_restrictions(recipes, {"vegan", "gluten_free"})
        >>> all({"vegan", "gluten_free"} <= r.dietary_tags for r in filtered)
        True
    """
    wanted = frozenset(normalize_tag(tag) for tag in restrictions)
    if not wanted:
        return list(recipes)

    if mode == DietaryMatchMode.ANY:
        return [recipe for recipe in recipes if not wanted.isdisjoint(recipe.dietary_tags)]
    return [recipe for recipe in recipes if wanted <= recipe.dietary_tags]
