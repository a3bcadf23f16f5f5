"""
LiftLevel — PR Engine

Decides which sets of a freshly logged session are personal records,
comparing them against the same user's sets for the same exercise from
sessions created strictly before it.

Record kinds, evaluated independently per exercise:
- single-rep-max: heaviest single
- rep-max:        heaviest weight for each rep count in the session
- scheme-max:     best 5x5 total (Σ weight × reps over the top five sets of five)
- weight-max:     most reps at a given weight (opt-in)

No prior value always loses the comparison; equality never wins.
"""
from concurrent.futures import ThreadPoolExecutor

from liftlevel import store
from liftlevel.config import (
    FETCH_WORKERS,
    PR_SINGLE_REP_MAX,
    PR_REP_MAX,
    PR_SCHEME_MAX,
    PR_WEIGHT_MAX,
    DEFAULT_PR_KINDS,
    ALL_PR_KINDS,
    PR_LABELS,
    SCHEME_REPS,
    SCHEME_SETS,
    rep_max_label,
    weight_max_label,
)


# ═════════════════════════════════════════════════════════════════════
# 1. SET HELPERS
# ═════════════════════════════════════════════════════════════════════

def _has_load(s: dict) -> bool:
    weight, reps = s.get("weight"), s.get("reps")
    return weight is not None and weight > 0 and reps is not None and reps > 0


def max_weight_for_reps(sets: list[dict], reps: int) -> float | None:
    """Heaviest weight lifted for exactly `reps` reps."""
    best = None
    for s in sets:
        if _has_load(s) and s["reps"] == reps:
            if best is None or s["weight"] > best:
                best = s["weight"]
    return best


def max_reps_for_weight(sets: list[dict], weight: float) -> int | None:
    """Most reps performed at exactly `weight`."""
    best = None
    for s in sets:
        if _has_load(s) and s["weight"] == weight:
            if best is None or s["reps"] > best:
                best = s["reps"]
    return best


def top_scheme_total(sets: list[dict]) -> tuple[float | None, list[int]]:
    """
    Best 5x5 total: Σ weight × reps over the top five sets of five reps.

    Returns (total, indices of the contributing sets in ascending order),
    or (None, []) when fewer than five sets qualify.
    """
    qualifying = [
        (i, s["weight"] * s["reps"])
        for i, s in enumerate(sets)
        if _has_load(s) and s["reps"] == SCHEME_REPS
    ]
    if len(qualifying) < SCHEME_SETS:
        return None, []
    top = sorted(qualifying, key=lambda item: (-item[1], item[0]))[:SCHEME_SETS]
    total = sum(volume for _, volume in top)
    return total, sorted(i for i, _ in top)


def _is_new_best(current, previous) -> bool:
    return current is not None and (previous is None or current > previous)


def _pr(kind: str, label: str, current, previous, set_indices, future_best=False, **extra) -> dict:
    pr = {
        "kind": kind,
        "label": label,
        "previous": previous,
        "current": current,
        "set_indices": set_indices,
    }
    pr.update(extra)
    if future_best is not False:
        # False = no future data requested
        pr["is_current"] = _is_new_best(current, future_best)
    return pr


# ═════════════════════════════════════════════════════════════════════
# 2. RECORD KINDS
# ═════════════════════════════════════════════════════════════════════

def _future_value(future, fn, *args):
    return False if future is None else fn(future, *args)


def _single_rep_max(current_sets, historic, future) -> list[dict]:
    cur = max_weight_for_reps(current_sets, 1)
    hist = max_weight_for_reps(historic, 1)
    if not _is_new_best(cur, hist):
        return []
    indices = [
        i for i, s in enumerate(current_sets)
        if _has_load(s) and s["reps"] == 1 and s["weight"] == cur
    ]
    return [_pr(
        PR_SINGLE_REP_MAX, PR_LABELS[PR_SINGLE_REP_MAX], cur, hist, indices,
        _future_value(future, max_weight_for_reps, 1),
    )]


def _rep_maxes(current_sets, historic, future) -> list[dict]:
    rep_counts = sorted({s["reps"] for s in current_sets if _has_load(s)})
    prs = []
    for reps in rep_counts:
        cur = max_weight_for_reps(current_sets, reps)
        hist = max_weight_for_reps(historic, reps)
        if not _is_new_best(cur, hist):
            continue
        indices = [
            i for i, s in enumerate(current_sets)
            if _has_load(s) and s["reps"] == reps and s["weight"] == cur
        ]
        prs.append(_pr(
            PR_REP_MAX, rep_max_label(reps), cur, hist, indices,
            _future_value(future, max_weight_for_reps, reps),
            reps=reps,
        ))
    return prs


def _scheme_max(current_sets, historic, future) -> list[dict]:
    cur, indices = top_scheme_total(current_sets)
    if cur is None:
        return []
    hist, _ = top_scheme_total(historic)
    if not _is_new_best(cur, hist):
        return []
    future_best = False if future is None else top_scheme_total(future)[0]
    return [_pr(PR_SCHEME_MAX, PR_LABELS[PR_SCHEME_MAX], cur, hist, indices, future_best)]


def _weight_maxes(current_sets, historic, future) -> list[dict]:
    # weight -> most reps, first-seen order
    best_reps = {}
    for s in current_sets:
        if _has_load(s) and s["reps"] > 1:
            if s["reps"] > best_reps.get(s["weight"], 0):
                best_reps[s["weight"]] = s["reps"]

    prs = []
    for weight, reps in best_reps.items():
        hist = max_reps_for_weight(historic, weight)
        if not _is_new_best(reps, hist):
            continue
        first = next(
            i for i, s in enumerate(current_sets)
            if _has_load(s) and s["weight"] == weight and s["reps"] == reps
        )
        prs.append(_pr(
            PR_WEIGHT_MAX, weight_max_label(weight, reps), reps, hist, [first],
            _future_value(future, max_reps_for_weight, weight),
            weight=weight,
        ))
    return prs


KIND_BUILDERS = {
    PR_SINGLE_REP_MAX: _single_rep_max,
    PR_REP_MAX: _rep_maxes,
    PR_SCHEME_MAX: _scheme_max,
    PR_WEIGHT_MAX: _weight_maxes,
}


def compute_prs_for_exercise(
    current_sets: list[dict],
    historic: list[dict],
    kinds: tuple = DEFAULT_PR_KINDS,
    future: list[dict] = None,
) -> list[dict]:
    """
    PRs set by one exercise's sets against its history.

    When `future` (sets logged after this session) is given, every PR gets
    an `is_current` flag: False once a later session matched or beat it.
    """
    unknown = set(kinds) - set(ALL_PR_KINDS)
    if unknown:
        raise ValueError(f"Unknown PR kinds: {sorted(unknown)}")
    if not current_sets:
        return []

    historic = historic or []
    prs = []
    for kind in ALL_PR_KINDS:
        if kind in kinds:
            prs.extend(KIND_BUILDERS[kind](current_sets, historic, future))
    return prs


# ═════════════════════════════════════════════════════════════════════
# 3. SESSION
# ═════════════════════════════════════════════════════════════════════

def compute_prs_for_session(
    ctx: dict,
    fetch_historic_sets=None,
    fetch_future_sets=None,
    kinds: tuple = DEFAULT_PR_KINDS,
    max_workers: int = FETCH_WORKERS,
) -> dict:
    """
    Compute every PR of a session.

    ctx: {session_id, user_id, created_at, exercises: [{exercise_id, exercise_name, sets}]}
    fetch_historic_sets(user_id, exercise_id, before_iso) -> [{reps, weight}]
        defaults to the store; pass SetCache.fetch_historic_sets to memoize.
    fetch_future_sets(user_id, exercise_id, after_iso) -> [{reps, weight}]
        optional; enables `is_current` on every PR.

    Per-exercise fetches run concurrently (max_workers=1 runs them in
    order). A failing fetch propagates unchanged.

    Returns {total_prs, per_exercise: [{exercise_id, exercise_name, prs}]},
    omitting exercises without PRs.
    """
    fetch_historic = fetch_historic_sets or store.fetch_historic_sets
    user_id = ctx["user_id"]
    created_at = ctx["created_at"]
    exercises = ctx.get("exercises") or []

    def _exercise_prs(exercise: dict) -> list[dict]:
        sets = exercise.get("sets") or []
        if not sets:
            return []
        historic = fetch_historic(user_id, exercise["exercise_id"], created_at)
        future = None
        if fetch_future_sets is not None:
            future = fetch_future_sets(user_id, exercise["exercise_id"], created_at)
        return compute_prs_for_exercise(sets, historic, kinds=kinds, future=future)

    if max_workers and max_workers > 1 and len(exercises) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(exercises))) as pool:
            results = list(pool.map(_exercise_prs, exercises))
    else:
        results = [_exercise_prs(e) for e in exercises]

    per_exercise = [
        {
            "exercise_id": exercise["exercise_id"],
            "exercise_name": exercise.get("exercise_name", ""),
            "prs": prs,
        }
        for exercise, prs in zip(exercises, results)
        if prs
    ]
    return {
        "total_prs": sum(len(e["prs"]) for e in per_exercise),
        "per_exercise": per_exercise,
    }
