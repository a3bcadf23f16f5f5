"""
LiftLevel — Strength Level Aggregator

Turns a user's best lift per exercise into levels:
- per exercise: continuous score = level score (1-6) + progress/100
- per exercise group (Push / Pull / Lower) and per muscle group
- overall: arithmetic mean of exercise scores
- balanced: harmonic mean of the Push / Pull / Lower averages, so one
  lagging region drags the result down harder than a plain mean would

Missing gender, body weight or scorable lifts yield None / empty results,
never a default Beginner.
"""
import math

from liftlevel.config import (
    LEVEL_ORDER,
    LEVEL_SCORES,
    LEVEL_COLORS,
    TOP_SCORE,
    EXERCISE_GROUPS,
    BALANCED_GROUPS,
    DEFAULT_MUSCLE_GROUP,
    IMBALANCE_THRESHOLD,
)
from liftlevel.standards import (
    BASIS_REPS,
    EXERCISE_NAME_MAP,
    get_exercise_group,
    get_strength_standard,
    has_strength_standards,
)


# ═════════════════════════════════════════════════════════════════════
# 1. SCORING
# ═════════════════════════════════════════════════════════════════════

def _lift_value(exercise: dict) -> float | None:
    config = EXERCISE_NAME_MAP.get(exercise.get("exercise_name"))
    if config and config["basis"] == BASIS_REPS:
        return exercise.get("max_reps")
    return exercise.get("max_1rm")


def score_exercise(
    exercise: dict,
    gender: str,
    bodyweight: float,
    lookup=None,
    has_standards=None,
) -> float | None:
    """Continuous score for one lift, or None if it has no usable standard."""
    lookup = lookup or get_strength_standard
    has_standards = has_standards or has_strength_standards

    name = exercise.get("exercise_name")
    if not has_standards(name):
        return None
    info = lookup(name, gender, bodyweight, _lift_value(exercise))
    if not info:
        return None
    base = LEVEL_SCORES.get(info.get("level"))
    if base is None:
        return None
    return base + info["progress"] / 100


def level_from_score(score: float) -> dict:
    """Map a continuous score to {level, next_level, progress}."""
    index = max(0, min(math.floor(score) - 1, len(LEVEL_ORDER) - 1))
    level = LEVEL_ORDER[index]
    next_level = LEVEL_ORDER[index + 1] if index < len(LEVEL_ORDER) - 1 else None
    if score >= TOP_SCORE:
        progress = 100.0
    else:
        progress = (score - math.floor(score)) * 100
    return {"level": level, "next_level": next_level, "progress": progress}


def _summarize(scores: list[float]) -> dict | None:
    if not scores:
        return None
    average = sum(scores) / len(scores)
    return {"average_score": average, **level_from_score(average)}


def harmonic_mean(values: list[float]) -> float | None:
    """n / Σ(1/x). All values must be positive."""
    if not values:
        return None
    return len(values) / sum(1 / v for v in values)


def find_weakest_group(group_averages: dict) -> str | None:
    """Lowest-scoring group, only if it trails the strongest by a full level or more."""
    if not group_averages:
        return None
    weakest = min(group_averages, key=group_averages.get)
    strongest = max(group_averages, key=group_averages.get)
    if group_averages[strongest] - group_averages[weakest] >= IMBALANCE_THRESHOLD:
        return weakest
    return None


# ═════════════════════════════════════════════════════════════════════
# 2. AGGREGATION
# ═════════════════════════════════════════════════════════════════════

def _partition(scored: list[tuple], key_fn, order: list[str] = None) -> dict:
    buckets = {}
    for exercise, score in scored:
        buckets.setdefault(key_fn(exercise), []).append((exercise, score))
    if order:
        buckets = {k: buckets[k] for k in sorted(buckets, key=lambda k: order.index(k) if k in order else len(order))}
    return buckets


def _group_levels(scored: list[tuple]) -> dict:
    groups = {}
    partitioned = _partition(scored, lambda e: get_exercise_group(e.get("exercise_name")), EXERCISE_GROUPS)
    for group, items in partitioned.items():
        summary = _summarize([s for _, s in items if s is not None])
        if summary is None:
            continue
        groups[group] = {
            "group": group,
            "level": summary["level"],
            "next_level": summary["next_level"],
            "progress": summary["progress"],
            "average_score": summary["average_score"],
            "exercises": [e for e, _ in items],
        }
    return groups


def _muscle_group_levels(scored: list[tuple]) -> list[dict]:
    result = []
    partitioned = _partition(scored, lambda e: e.get("muscle_group") or DEFAULT_MUSCLE_GROUP)
    for name, items in partitioned.items():
        summary = _summarize([s for _, s in items if s is not None])
        if summary is None:
            continue
        result.append({
            "name": name,
            "level": summary["level"],
            "progress": summary["progress"],
            "average_score": summary["average_score"],
            "exercises": [e for e, _ in items],
        })
    return sorted(result, key=lambda m: m["average_score"], reverse=True)


def _balanced(groups: dict) -> dict:
    averages = {g: groups[g]["average_score"] for g in BALANCED_GROUPS if g in groups}
    if not averages:
        return {
            "balanced_level": None,
            "balanced_next_level": None,
            "balanced_progress": None,
            "balanced_score": None,
            "weakest_group": None,
        }
    score = harmonic_mean(list(averages.values()))
    mapped = level_from_score(score)
    return {
        "balanced_level": mapped["level"],
        "balanced_next_level": mapped["next_level"],
        "balanced_progress": mapped["progress"],
        "balanced_score": score,
        "weakest_group": find_weakest_group(averages),
    }


def compute_strength_levels(
    profile: dict,
    exercise_data: list[dict],
    lookup=None,
    has_standards=None,
) -> dict:
    """
    Full strength picture for a user.

    profile: {gender, weight_kg}
    exercise_data: [{exercise_id, exercise_name, muscle_group, max_1rm, max_reps, records}]
    lookup / has_standards: override the standards table (same signatures
        as get_strength_standard / has_strength_standards).

    Returns {overall, groups, muscle_groups}:
    - overall: {current_level, next_level, progress, average_score,
      lifts_tracked, balanced_*, weakest_group} or None
    - groups: {group_name: {group, level, next_level, progress, average_score, exercises}}
    - muscle_groups: [{name, level, progress, average_score, exercises}] by score desc
    """
    empty = {"overall": None, "groups": {}, "muscle_groups": []}
    profile = profile or {}
    gender = profile.get("gender")
    bodyweight = profile.get("weight_kg")
    if not gender or not bodyweight or not exercise_data:
        return empty

    scored = [
        (exercise, score_exercise(exercise, gender, bodyweight, lookup, has_standards))
        for exercise in exercise_data
    ]
    scores = [s for _, s in scored if s is not None]
    summary = _summarize(scores)
    if summary is None:
        return empty

    groups = _group_levels(scored)
    overall = {
        "current_level": summary["level"],
        "next_level": summary["next_level"],
        "progress": summary["progress"],
        "average_score": summary["average_score"],
        "lifts_tracked": len(scores),
        **_balanced(groups),
    }
    return {
        "overall": overall,
        "groups": groups,
        "muscle_groups": _muscle_group_levels(scored),
    }


def compute_user_level(profile: dict, exercise_data: list[dict]) -> str | None:
    """Just the overall level (badge next to a username), or None."""
    overall = compute_strength_levels(profile, exercise_data)["overall"]
    return overall["current_level"] if overall else None


def get_level_color(level: str) -> str:
    return LEVEL_COLORS.get(level, "#666")


def get_level_intensity(level: str) -> int:
    """1-6 intensity for body-map highlighting."""
    return LEVEL_SCORES.get(level, 0)
