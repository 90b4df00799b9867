"""
Tests for multi-week meal plan generation and regeneration.
"""
import pytest
from datetime import date, timedelta
from unittest.mock import patch

from meal_planning.models.preferences import UserPreferences
from meal_planning.models.recipe import CourseType, Cuisine
from meal_planning.models.rotation import RotationState
from meal_planning.services.exceptions import (
    AlgorithmError,
    InsufficientRecipes,
    InvalidDate,
    InvalidWeekCount,
    RotationStateError
)
from meal_planning.services.multi_week import MultiWeekOrchestrator, max_weeks_for


@pytest.fixture
def orchestrator():
    """Create a deterministic orchestrator."""
    return MultiWeekOrchestrator()


@pytest.fixture
def five_week_plan(orchestrator, balanced_recipes, preferences, monday):
    """A five week plan over the balanced pool."""
    return orchestrator.generate(balanced_recipes, preferences, week_count=5, start_date=monday)


def test_generate_fills_every_slot(orchestrator, balanced_recipes, preferences, monday):
    """Test that each week gets an appetizer, main course and dessert every day."""
    plan = orchestrator.generate(balanced_recipes, preferences, week_count=4, start_date=monday)

    assert len(plan.weeks) == 4
    for offset, week in enumerate(plan.weeks):
        assert week.start_date == monday + timedelta(weeks=offset)
        assert week.end_date == week.start_date + timedelta(days=6)
        assert len(week.meal_assignments) == 21
        courses = [a.course_type for a in week.meal_assignments[:3]]
        assert courses == [CourseType.APPETIZER, CourseType.MAIN_COURSE, CourseType.DESSERT]


def test_main_courses_unique_across_weeks(five_week_plan):
    """Test that no main course repeats while the cycle has unused main courses."""
    mains = five_week_plan.main_course_ids()

    assert len(mains) == 35
    assert len(set(mains)) == 35


def test_dietary_compliance(orchestrator, pool_factory, monday):
    """Test that every assigned recipe carries the required dietary tags."""
    vegan = pool_factory(mains=14, appetizers=7, desserts=7, accompaniments=3, dietary_tags={"vegan"})
    meat = [
        r.model_copy(update={"id": f"meat-{r.id}", "dietary_tags": frozenset()})
        for r in pool_factory(mains=14, appetizers=7, desserts=7)
    ]
    recipes = vegan + meat
    by_id = {recipe.id: recipe for recipe in recipes}
    preferences = UserPreferences(dietary_restrictions={"Vegan"})

    plan = orchestrator.generate(recipes, preferences, week_count=2, start_date=monday)

    for assignment in plan.all_assignments():
        assert "vegan" in by_id[assignment.recipe_id].dietary_tags
        if assignment.accompaniment_recipe_id:
            assert "vegan" in by_id[assignment.accompaniment_recipe_id].dietary_tags


def test_time_compliance(orchestrator, pool_factory, monday):
    """Test that weeknight and weekend ceilings are honored."""
    quick = pool_factory(mains=20, appetizers=5, desserts=5)
    slow = [
        r.model_copy(update={"id": f"slow-{r.id}", "cook_time_min": 50})
        for r in pool_factory(mains=10, appetizers=5, desserts=5)
    ]
    recipes = quick + slow
    by_id = {recipe.id: recipe for recipe in recipes}
    preferences = UserPreferences(max_prep_time_weeknight=30, max_prep_time_weekend=90)

    plan = orchestrator.generate(recipes, preferences, week_count=2, start_date=monday)

    for assignment in plan.all_assignments():
        total = by_id[assignment.recipe_id].total_time_min
        if assignment.date.weekday() >= 5:
            assert total <= 90
        else:
            assert total <= 30


def test_generation_is_deterministic(orchestrator, balanced_recipes, preferences, monday):
    """Test that identical inputs give byte-identical plans."""
    first = orchestrator.generate(balanced_recipes, preferences, week_count=3, start_date=monday)
    second = MultiWeekOrchestrator().generate(
        list(reversed(balanced_recipes)), preferences, week_count=3, start_date=monday
    )

    assert first.model_dump_json() == second.model_dump_json()


def test_seeded_generation_is_reproducible(balanced_recipes, preferences, monday):
    """Test that the randomized mode repeats itself for the same seed."""
    first = MultiWeekOrchestrator(seed=42).generate(
        balanced_recipes, preferences, week_count=2, start_date=monday
    )
    second = MultiWeekOrchestrator(seed=42).generate(
        balanced_recipes, preferences, week_count=2, start_date=monday
    )

    assert first.model_dump_json() == second.model_dump_json()
    assert len(set(first.main_course_ids())) == 14


def test_cycle_reset_with_small_pool(orchestrator, pool_factory, preferences, monday):
    """Test that a pool of 3 main courses crosses the cycle boundary."""
    plan = orchestrator.generate(pool_factory(mains=3), preferences, week_count=1, start_date=monday)

    mains = plan.main_course_ids()
    assert len(mains) == 7
    assert mains[:3] == sorted(set(mains[:3]))
    assert set(mains[3:6]) == set(mains[:3])
    assert plan.rotation_state.cycle_number == 3


def test_insufficient_recipes_without_main_courses(orchestrator, pool_factory, preferences, monday):
    """Test that a pool with no main course aborts the run."""
    recipes = pool_factory(mains=0, appetizers=5, desserts=5)

    with patch('meal_planning.services.multi_week.logger') as mock_logger:
        with pytest.raises(InsufficientRecipes) as exc_info:
            orchestrator.generate(recipes, preferences, week_count=1, start_date=monday)

    assert exc_info.value.minimum == 1
    assert exc_info.value.current == 0
    mock_logger.error.assert_called_once()
    assert mock_logger.error.call_args[1]["extra"]["error_type"] == "InsufficientRecipes"


def test_dietary_filter_can_empty_main_courses(orchestrator, pool_factory, monday):
    """Test that filtering out every main course is reported as insufficient recipes."""
    preferences = UserPreferences(dietary_restrictions={"vegan"})

    with pytest.raises(InsufficientRecipes):
        orchestrator.generate(pool_factory(mains=10), preferences, week_count=1, start_date=monday)


def test_algorithm_error_when_no_main_fits(orchestrator, pool_factory, preferences, monday):
    """Test that main courses all over the ceiling abort the run."""
    recipes = pool_factory(mains=7, cook_time_min=45)

    with pytest.raises(AlgorithmError) as exc_info:
        orchestrator.generate(recipes, preferences, week_count=1, start_date=monday)

    assert "over_time_ceiling" in str(exc_info.value)


@pytest.mark.parametrize("week_count", [0, 6, -1])
def test_invalid_week_count(orchestrator, balanced_recipes, preferences, monday, week_count):
    """Test week counts outside 1..5 are rejected."""
    with pytest.raises(InvalidWeekCount):
        orchestrator.generate(balanced_recipes, preferences, week_count=week_count, start_date=monday)


def test_default_week_count_follows_main_courses(orchestrator, pool_factory, preferences, monday):
    """Test that the week count defaults to what the main course pool can fill."""
    plan = orchestrator.generate(pool_factory(mains=15), preferences, start_date=monday)

    assert len(plan.weeks) == 3
    assert max_weeks_for(15) == 3
    assert max_weeks_for(1) == 1
    assert max_weeks_for(100) == 5


def test_default_start_date_is_next_monday(orchestrator, pool_factory, preferences, monday):
    """Test that plans start next Monday when no start date is given."""
    with patch('meal_planning.services.multi_week.next_week_start', return_value=monday):
        plan = orchestrator.generate(pool_factory(mains=7), preferences, week_count=1)

    assert plan.weeks[0].start_date == monday


@pytest.mark.parametrize("start_date", ["2025-10-28", "2025-13-01", "not a date"])
def test_invalid_start_date(orchestrator, balanced_recipes, preferences, start_date):
    """Test that start dates must be valid Mondays."""
    with pytest.raises(InvalidDate):
        orchestrator.generate(balanced_recipes, preferences, week_count=1, start_date=start_date)


def test_start_date_accepts_iso_string(orchestrator, pool_factory, preferences, monday):
    """Test that an ISO string start date is accepted."""
    plan = orchestrator.generate(pool_factory(mains=7), preferences, week_count=1, start_date="2025-10-27")

    assert plan.weeks[0].start_date == monday


def test_input_rotation_state_is_not_mutated(orchestrator, balanced_recipes, preferences, monday):
    """Test that the caller's rotation state is left untouched."""
    state = RotationState()
    snapshot = state.to_json()

    plan = orchestrator.generate(balanced_recipes, preferences, state, week_count=2, start_date=monday)

    assert state.to_json() == snapshot
    assert plan.rotation_state.used_count(CourseType.MAIN_COURSE) == 14


def test_rotation_continues_across_runs(orchestrator, pool_factory, preferences, monday):
    """Test that a second run avoids main courses used by the first."""
    recipes = pool_factory(mains=14)
    first = orchestrator.generate(recipes, preferences, week_count=1, start_date=monday)

    second = orchestrator.generate(
        recipes, preferences, first.rotation_state,
        week_count=1, start_date=monday + timedelta(weeks=1)
    )

    assert set(first.main_course_ids()).isdisjoint(second.main_course_ids())
    assert second.rotation_state.cycle_number == 1


def test_stale_rotation_state_is_rejected(orchestrator, balanced_recipes, preferences, monday):
    """Test that a state referencing removed recipes fails validation."""
    state = RotationState(used_recipe_ids={CourseType.MAIN_COURSE: {"deleted-recipe"}})

    with pytest.raises(RotationStateError):
        orchestrator.generate(balanced_recipes, preferences, state, week_count=1, start_date=monday)


def test_regeneration_continuity(orchestrator, five_week_plan, balanced_recipes, preferences):
    """Test regenerating week 3 keeps the other weeks and avoids their main courses."""
    regenerated = orchestrator.regenerate_week(five_week_plan, 2, balanced_recipes, preferences)

    for index in (0, 1, 3, 4):
        assert regenerated.weeks[index].model_dump_json() == five_week_plan.weeks[index].model_dump_json()

    locked = {
        recipe_id
        for index in (0, 1, 3, 4)
        for recipe_id in five_week_plan.weeks[index].main_course_ids()
    }
    new_mains = regenerated.weeks[2].main_course_ids()
    assert len(new_mains) == 7
    assert len(set(new_mains)) == 7
    assert locked.isdisjoint(new_mains)


def test_regenerate_week_releases_old_recipes(orchestrator, five_week_plan, balanced_recipes, preferences):
    """Test that main courses dropped by regeneration return to the pool."""
    regenerated = orchestrator.regenerate_week(five_week_plan, 2, balanced_recipes, preferences)

    dropped = set(five_week_plan.weeks[2].main_course_ids()) - set(regenerated.weeks[2].main_course_ids())
    used = regenerated.rotation_state.used_ids(CourseType.MAIN_COURSE)
    assert used == set(regenerated.main_course_ids())
    assert dropped.isdisjoint(used)


def test_regenerate_does_not_mutate_plan(orchestrator, five_week_plan, balanced_recipes, preferences):
    """Test that the original plan and its state are left untouched."""
    snapshot = five_week_plan.model_dump_json()

    orchestrator.regenerate_week(five_week_plan, 0, balanced_recipes, preferences)

    assert five_week_plan.model_dump_json() == snapshot


def test_regenerate_from_keeps_earlier_weeks(orchestrator, five_week_plan, balanced_recipes, preferences):
    """Test regenerating all future weeks from week 4."""
    regenerated = orchestrator.regenerate_from(five_week_plan, 3, balanced_recipes, preferences)

    for index in (0, 1, 2):
        assert regenerated.weeks[index].model_dump_json() == five_week_plan.weeks[index].model_dump_json()

    mains = regenerated.main_course_ids()
    assert len(mains) == 35
    assert len(set(mains)) == 35


@pytest.mark.parametrize("week_index", [-1, 5])
def test_regenerate_week_index_out_of_range(orchestrator, five_week_plan, balanced_recipes, preferences, week_index):
    """Test that week indices outside the plan are rejected."""
    with pytest.raises(ValueError):
        orchestrator.regenerate_week(five_week_plan, week_index, balanced_recipes, preferences)


def test_regenerate_with_removed_recipe(orchestrator, pool_factory, preferences, monday):
    """Test that regenerating after a recipe was removed fails cleanly."""
    recipes = pool_factory(mains=14)
    plan = orchestrator.generate(recipes, preferences, week_count=1, start_date=monday)
    removed = plan.weeks[0].main_course_ids()[0]

    with pytest.raises(RotationStateError):
        orchestrator.regenerate_week(plan, 0, [r for r in recipes if r.id != removed], preferences)


def test_plan_dates_cover_consecutive_weeks(five_week_plan):
    """Test that plan weeks are consecutive Monday to Sunday spans."""
    assert five_week_plan.week_index_for(date(2025, 10, 27)) == 0
    assert five_week_plan.week_index_for(date(2025, 11, 2)) == 0
    assert five_week_plan.week_index_for(date(2025, 11, 3)) == 1
    assert five_week_plan.week_index_for(date(2025, 12, 1)) is None


def long_mains(recipe_factory, count):
    """Weekend-only main courses, each with a cuisine the short pool never uses."""
    cuisines = [Cuisine.CHINESE, Cuisine.AMERICAN, Cuisine.KOREAN, Cuisine.VIETNAMESE, Cuisine.CARIBBEAN, Cuisine.OTHER]
    return [
        recipe_factory(f"slow-roast-{i}", prep_time_min=15, cook_time_min=60, cuisine=cuisines[i])
        for i in range(count)
    ]


def test_long_main_courses_wait_for_weekends(orchestrator, pool_factory, recipe_factory, preferences, monday):
    """Test that weeknight-only gaps never pull used main courses back into the cycle."""
    recipes = pool_factory(mains=10) + long_mains(recipe_factory, 4)

    plan = orchestrator.generate(recipes, preferences, week_count=2, start_date=monday)

    mains = plan.main_course_ids()
    assert len(mains) == 14
    assert len(set(mains)) == 14
    assert plan.rotation_state.cycle_number == 1
    weekend = {a.recipe_id for a in plan.all_assignments() if a.date.weekday() >= 5}
    assert weekend == {f"slow-roast-{i}" for i in range(4)}


def test_unused_main_courses_that_do_not_fit_abort(orchestrator, pool_factory, recipe_factory, preferences, monday):
    """Test that a weeknight with only long unused main courses fails instead of repeating."""
    recipes = pool_factory(mains=8) + long_mains(recipe_factory, 6)

    with pytest.raises(AlgorithmError) as exc_info:
        orchestrator.generate(recipes, preferences, week_count=2, start_date=monday)

    assert "2025-11-06" in str(exc_info.value)
    assert "over_time_ceiling" in str(exc_info.value)


def test_regenerate_week_after_cycle_reset(orchestrator, pool_factory, preferences, monday):
    """Test that main courses of an earlier cycle are not locked out of a regenerated week."""
    recipes = pool_factory(mains=8)
    plan = orchestrator.generate(recipes, preferences, week_count=2, start_date=monday)
    assert plan.rotation_state.cycle_number == 2

    regenerated = orchestrator.regenerate_week(plan, 1, recipes, preferences)

    mains = regenerated.weeks[1].main_course_ids()
    assert len(set(mains)) == 7
    assert regenerated.weeks[0] == plan.weeks[0]
    assert regenerated.rotation_state.cycle_number == 2
    assert regenerated.rotation_state.used_ids(CourseType.MAIN_COURSE) == set(mains)


def test_regenerate_earlier_week_keeps_main_courses_distinct(orchestrator, pool_factory, preferences, monday):
    """Test that a week regenerated against locked main courses starts a new cycle rather than repeat."""
    recipes = pool_factory(mains=8)
    plan = orchestrator.generate(recipes, preferences, week_count=2, start_date=monday)

    regenerated = orchestrator.regenerate_week(plan, 0, recipes, preferences)

    mains = regenerated.weeks[0].main_course_ids()
    assert mains[:2] == ["main-00", "main-07"]
    assert len(set(mains)) == 7
    assert regenerated.weeks[1] == plan.weeks[1]
    assert regenerated.rotation_state.cycle_number == 3
