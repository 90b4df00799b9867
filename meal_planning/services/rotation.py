"""
Loading and validation of stored rotation state snapshots.

Typical usage:
    state = load_rotation_state(stored_json) if stored_json else RotationState()
    validate_rotation_state(state, favorite_recipes)
    ...
    stored_json = state.to_json()
"""
from typing import Iterable

from pydantic import ValidationError

from meal_planning.models.recipe import RecipeForPlanning
from meal_planning.models.rotation import RotationState
from meal_planning.services.exceptions import RotationStateError


def load_rotation_state(data: str) -> RotationState:
    """
    Deserialize a stored snapshot.

    Raises:
        RotationStateError: If the snapshot is malformed
    """
    try:
        return RotationState.model_validate_json(data)
    except ValidationError as e:
        raise RotationStateError(f"Malformed rotation state snapshot: {e.error_count()} error(s)") from e


def validate_rotation_state(state: RotationState, recipes: Iterable[RecipeForPlanning]) -> None:
    """
    Check that a snapshot is consistent with the current recipe pool.

    Args:
        state: Rotation state loaded by the caller
        recipes: All recipes supplied for the run (before dietary filtering)

    Raises:
        RotationStateError: If a used id is unknown or filed under the wrong category
    """
    types_by_id = {recipe.id: recipe.recipe_type for recipe in recipes}
    for course_type, ids in state.used_recipe_ids.items():
        for recipe_id in sorted(ids):
            recipe_type = types_by_id.get(recipe_id)
            if recipe_type is None:
                raise RotationStateError(
                    f"{course_type.value} recipe {recipe_id} is no longer in the recipe pool"
                )
            if recipe_type != course_type:
                raise RotationStateError(
                    f"Recipe {recipe_id} is tracked as {course_type.value} "
                    f"but is a {recipe_type.value}"
                )
