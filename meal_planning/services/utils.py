"""
Date utilities for meal plan generation.
"""
from datetime import date, timedelta
from typing import List, Optional, Union

from meal_planning.models.recipe import CourseType
from meal_planning.services.constants import DAY_NAMES, DAYS_PER_WEEK
from meal_planning.services.exceptions import InvalidDate, InvalidMealType


def parse_date(value: Union[date, str]) -> date:
    """
    Parse an ISO 8601 calendar date.

    Args:
        value: A date or a YYYY-MM-DD string

    Returns:
        The parsed date

    Raises:
        InvalidDate: If the string is not a valid ISO date
    """
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise InvalidDate(f"{value!r} is not an ISO 8601 date ({e})") from e


def parse_week_start(value: Union[date, str]) -> date:
    """
    Parse a week start date, which must be a Monday.

    Raises:
        InvalidDate: If the date is malformed or not a Monday
    """
    week_start = parse_date(value)
    if week_start.weekday() != 0:
        raise InvalidDate(
            f"Week start date {week_start.isoformat()} must be a Monday "
            f"(found {DAY_NAMES[week_start.weekday()]})"
        )
    return week_start


def parse_course_type(value: Union[CourseType, str]) -> CourseType:
    """
    Parse a course type name.

    Raises:
        InvalidMealType: If the name is not a known course type
    """
    if isinstance(value, CourseType):
        return value
    try:
        return CourseType(str(value).strip().lower())
    except ValueError as e:
        raise InvalidMealType(str(value)) from e


def next_week_start(today: Optional[date] = None) -> date:
    """
    Get the Monday of next week.

    If today is a Monday, next week starts in seven days.

    Example:
        >>> next_week_start(date(2025, 10, 22))  # Wednesday
        datetime.date(2025, 10, 27)
    """
    if today is None:
        today = date.today()
    return today + timedelta(days=DAYS_PER_WEEK - today.weekday())


def week_dates(week_start: date) -> List[date]:
    """Get the seven dates of the week starting at week_start."""
    return [week_start + timedelta(days=offset) for offset in range(DAYS_PER_WEEK)]


def is_weekend(day: date) -> bool:
    """Check if a date falls on Saturday or Sunday."""
    return day.weekday() >= 5


def day_name(day: date) -> str:
    """Get the English weekday name for a date."""
    return DAY_NAMES[day.weekday()]
