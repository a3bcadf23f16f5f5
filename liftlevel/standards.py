"""
LiftLevel — Strength Standards

Single source of truth for the exercises that have population strength
norms. Each ladder holds six thresholds (Beginner → World Class) per
gender. Most ladders are multiples of body weight; Pull-Up and Dips are
absolute rep counts.

Names and aliases both resolve to the same config. Names are matched
exactly, the way they are stored in the exercise catalogue.
"""
import math

from liftlevel.config import (
    LEVEL_ORDER,
    LEVEL_COLORS,
    LEVEL_DESCRIPTIONS,
    GENDERS,
)

BASIS_RATIO = "ratio"  # lift / bodyweight
BASIS_REPS = "reps"    # max reps, body weight only

# ═════════════════════════════════════════════════════════════════════
# STANDARDS TABLE
# ═════════════════════════════════════════════════════════════════════

EXERCISES_WITH_STANDARDS = [
    # ── Push ────────────────────────────────────────────────────────
    {
        "name": "Bench Press",
        "aliases": [],
        "group": "Push",
        "basis": BASIS_RATIO,
        "male": [0.5, 0.75, 1.0, 1.5, 1.75, 2.0],
        "female": [0.3, 0.5, 0.65, 0.9, 1.1, 1.25],
    },
    {
        "name": "Incline Bench Press",
        "aliases": [],
        "group": "Push",
        "basis": BASIS_RATIO,
        "male": [0.5, 0.75, 1.0, 1.5, 1.75, 2.0],
        "female": [0.2, 0.4, 0.65, 1.0, 1.4, 1.75],
    },
    {
        "name": "Dumbbell Bench Press",
        "aliases": [],
        "group": "Push",
        "basis": BASIS_RATIO,
        "male": [0.2, 0.35, 0.5, 0.75, 1.0, 1.25],
        "female": [0.1, 0.2, 0.3, 0.5, 0.7, 0.9],
    },
    {
        "name": "Incline Dumbbell Press",
        "aliases": [],
        "group": "Push",
        "basis": BASIS_RATIO,
        "male": [0.25, 0.35, 0.5, 0.65, 0.85, 1.0],
        "female": [0.1, 0.2, 0.3, 0.45, 0.6, 0.75],
    },
    {
        "name": "Overhead Press",
        "aliases": [],
        "group": "Push",
        "basis": BASIS_RATIO,
        "male": [0.35, 0.5, 0.75, 1.0, 1.25, 1.5],
        "female": [0.2, 0.3, 0.45, 0.65, 0.8, 1.0],
    },
    {
        "name": "Dumbbell Shoulder Press",
        "aliases": [],
        "group": "Push",
        "basis": BASIS_RATIO,
        "male": [0.15, 0.25, 0.4, 0.6, 0.75, 0.9],
        "female": [0.1, 0.15, 0.25, 0.35, 0.5, 0.65],
    },
    {
        "name": "Dips",
        "aliases": [],
        "group": "Push",
        "basis": BASIS_REPS,
        "male": [1, 8, 15, 25, 35, 45],
        "female": [1, 5, 10, 15, 20, 30],
    },
    # Added weight as a fraction of bodyweight
    {
        "name": "Weighted Dips",
        "aliases": [],
        "group": "Push",
        "basis": BASIS_RATIO,
        "male": [0.0, 0.15, 0.35, 0.65, 1.0, 1.35],
        "female": [0.0, 0.1, 0.25, 0.45, 0.7, 1.0],
    },
    # ── Pull ────────────────────────────────────────────────────────
    {
        "name": "Bent Over Row",
        "aliases": ["Barbell Row"],
        "group": "Pull",
        "basis": BASIS_RATIO,
        "male": [0.5, 0.75, 1.0, 1.5, 1.75, 2.0],
        "female": [0.3, 0.5, 0.65, 1.0, 1.25, 1.5],
    },
    {
        "name": "Pull-Up",
        "aliases": [],
        "group": "Pull",
        "basis": BASIS_REPS,
        "male": [1, 5, 10, 15, 20, 25],
        "female": [1, 3, 6, 10, 15, 20],
    },
    # Added weight as a fraction of bodyweight
    {
        "name": "Weighted Pull-Ups",
        "aliases": [],
        "group": "Pull",
        "basis": BASIS_RATIO,
        "male": [0.0, 0.1, 0.25, 0.5, 0.75, 1.0],
        "female": [0.0, 0.05, 0.15, 0.35, 0.5, 0.65],
    },
    {
        "name": "Dumbbell Curl",
        "aliases": [],
        "group": "Pull",
        "basis": BASIS_RATIO,
        "male": [0.1, 0.15, 0.3, 0.5, 0.65, 0.8],
        "female": [0.05, 0.1, 0.2, 0.35, 0.45, 0.55],
    },
    {
        "name": "Barbell Curl",
        "aliases": [],
        "group": "Pull",
        "basis": BASIS_RATIO,
        "male": [0.2, 0.4, 0.6, 0.85, 1.15, 1.4],
        "female": [0.1, 0.2, 0.4, 0.6, 0.85, 1.1],
    },
    # ── Lower ───────────────────────────────────────────────────────
    {
        "name": "Squat",
        "aliases": [],
        "group": "Lower",
        "basis": BASIS_RATIO,
        "male": [0.75, 1.0, 1.5, 2.0, 2.5, 2.75],
        "female": [0.5, 0.75, 1.0, 1.5, 1.75, 2.0],
    },
    {
        "name": "Front Squat",
        "aliases": [],
        "group": "Lower",
        "basis": BASIS_RATIO,
        "male": [0.6, 0.85, 1.25, 1.75, 2.0, 2.25],
        "female": [0.4, 0.6, 0.85, 1.25, 1.5, 1.75],
    },
    {
        "name": "Deadlift",
        "aliases": [],
        "group": "Lower",
        "basis": BASIS_RATIO,
        "male": [1.0, 1.25, 1.75, 2.25, 2.75, 3.0],
        "female": [0.5, 0.75, 1.25, 1.75, 2.0, 2.25],
    },
    {
        "name": "Romanian Deadlift",
        "aliases": [],
        "group": "Lower",
        "basis": BASIS_RATIO,
        "male": [0.75, 1.0, 1.5, 2.0, 2.25, 2.5],
        "female": [0.4, 0.6, 1.0, 1.5, 1.75, 2.0],
    },
    {
        "name": "Leg Press",
        "aliases": [],
        "group": "Lower",
        "basis": BASIS_RATIO,
        "male": [1.0, 1.75, 2.75, 4.0, 5.25, 6.5],
        "female": [0.5, 1.25, 2.0, 3.25, 4.5, 5.75],
    },
]


# ═════════════════════════════════════════════════════════════════════
# HELPER FUNCTIONS: derive lookups from EXERCISES_WITH_STANDARDS
# ═════════════════════════════════════════════════════════════════════

def get_exercise_name_map() -> dict:
    """Map every exercise name and alias to its standards config."""
    name_map = {}
    for config in EXERCISES_WITH_STANDARDS:
        name_map[config["name"]] = config
        for alias in config["aliases"]:
            name_map[alias] = config
    return name_map


EXERCISE_NAME_MAP = get_exercise_name_map()


def get_leaderboard_exercises() -> list[str]:
    """Every name (canonical and alias) that supports percentile rankings."""
    names = []
    for config in EXERCISES_WITH_STANDARDS:
        names.append(config["name"])
        names.extend(config["aliases"])
    return names


def get_available_standards() -> list[str]:
    return [config["name"] for config in EXERCISES_WITH_STANDARDS]


def has_strength_standards(exercise_name: str) -> bool:
    """Check if an exercise has strength standards defined."""
    return exercise_name in EXERCISE_NAME_MAP


def get_exercise_group(exercise_name: str) -> str:
    """Push / Pull / Lower classification; "Other" when unknown."""
    config = EXERCISE_NAME_MAP.get(exercise_name)
    return config["group"] if config else "Other"


def get_standards_ladder(exercise_name: str, gender: str) -> list[dict] | None:
    """Full ladder of rungs for display, or None if not defined."""
    config = EXERCISE_NAME_MAP.get(exercise_name)
    if not config or gender not in GENDERS:
        return None
    return [
        {
            "level": level,
            "multiplier": threshold,
            "color": LEVEL_COLORS[level],
            "description": LEVEL_DESCRIPTIONS[level],
        }
        for level, threshold in zip(LEVEL_ORDER, config[gender])
    ]


def clamp_strength_progress(progress: float) -> float:
    if progress is None or not math.isfinite(progress):
        return 0.0
    return max(0.0, min(100.0, progress))


# ═════════════════════════════════════════════════════════════════════
# LOOKUP
# ═════════════════════════════════════════════════════════════════════

def get_strength_standard(
    exercise_name: str,
    gender: str,
    bodyweight: float,
    lift_value: float,
) -> dict | None:
    """
    Classify a lift against the population ladder.

    `lift_value` is the best single-rep-equivalent in kg for ratio ladders
    and the best rep count for rep-based ladders (Pull-Up, Dips).

    Returns {level, progress, standard, next_standard} where progress is
    0-100 toward the next rung, or None when the exercise has no ladder,
    the gender has no norms or the body weight is unusable. A lift below
    the first rung is reported as Beginner with 0% progress.
    """
    ladder = get_standards_ladder(exercise_name, gender)
    if ladder is None:
        return None
    if lift_value is None or not bodyweight or bodyweight <= 0:
        return None

    config = EXERCISE_NAME_MAP[exercise_name]
    if config["basis"] == BASIS_REPS:
        value = float(lift_value)
    else:
        value = lift_value / bodyweight

    level_index = -1
    for i in range(len(ladder) - 1, -1, -1):
        if value >= ladder[i]["multiplier"]:
            level_index = i
            break

    if level_index == -1:
        return {
            "level": ladder[0]["level"],
            "progress": 0.0,
            "standard": ladder[0],
            "next_standard": ladder[1],
        }

    current = ladder[level_index]
    if level_index == len(ladder) - 1:
        return {"level": current["level"], "progress": 100.0, "standard": current, "next_standard": None}

    nxt = ladder[level_index + 1]
    span = nxt["multiplier"] - current["multiplier"]
    progress = (value - current["multiplier"]) / span * 100 if span > 0 else 0.0
    return {
        "level": current["level"],
        "progress": clamp_strength_progress(progress),
        "standard": current,
        "next_standard": nxt,
    }
