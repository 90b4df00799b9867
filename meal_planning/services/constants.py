"""
Constants and tunables for the meal planning engine.
"""
from typing import Dict, Tuple

# Complexity formula weights: score = ingredients * w + steps * w + advance prep multiplier * w
INGREDIENTS_WEIGHT = 0.3
INSTRUCTIONS_WEIGHT = 0.4
ADVANCE_PREP_WEIGHT = 0.3

# Advance prep multiplier: none, short (< 4 hours) and long (>= 4 hours)
SHORT_ADVANCE_PREP_MULTIPLIER = 50.0
LONG_ADVANCE_PREP_MULTIPLIER = 100.0
LONG_ADVANCE_PREP_HOURS = 4

# Complexity levels: simple < 30, moderate <= 60, complex > 60
SIMPLE_COMPLEXITY_LIMIT = 30.0
COMPLEX_COMPLEXITY_THRESHOLD = 60.0

# Multi-week generation
MIN_WEEKS = 1
MAX_WEEKS = 5
DAYS_PER_WEEK = 7

# Course order within a day (main course is the only required course)
DAILY_COURSES: Tuple[str, ...] = ("appetizer", "main_course", "dessert")
REQUIRED_COURSES: Tuple[str, ...] = ("main_course",)

DAY_NAMES: Dict[int, str] = {
    0: "Monday",
    1: "Tuesday",
    2: "Wednesday",
    3: "Thursday",
    4: "Friday",
    5: "Saturday",
    6: "Sunday"
}

# Benchmark budget for scoring and selecting one slot over 100 candidates
SLOT_SELECTION_BUDGET_MS = 10.0
