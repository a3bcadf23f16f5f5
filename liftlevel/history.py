"""
LiftLevel — Training History (pandas)

Flat set rows → DataFrame → per-exercise best lifts (the aggregator's
input), plus tabular views of PR and strength results for the CLI and
the dashboard.
"""
import numpy as np
import pandas as pd

from liftlevel.config import DEFAULT_MUSCLE_GROUP
from liftlevel.standards import get_exercise_group
from liftlevel.strength import level_from_score, score_exercise

SET_COLUMNS = ["date", "exercise_id", "exercise_name", "muscle_group", "reps", "weight"]


def sets_to_dataframe(rows: list[dict]) -> pd.DataFrame:
    """
    One row per logged set. Adds `has_load` (positive weight and reps)
    and `e1rm` (Epley, 0 when unloaded).
    """
    df = pd.DataFrame(rows, columns=SET_COLUMNS)
    if df.empty:
        return df
    df["date"] = pd.to_datetime(df["date"], utc=True)
    df["reps"] = pd.to_numeric(df["reps"], errors="coerce")
    df["weight"] = pd.to_numeric(df["weight"], errors="coerce")
    df["has_load"] = (df["weight"] > 0) & (df["reps"] > 0)

    # Epley; a single is its own 1RM
    df["e1rm"] = 0.0
    single = df["has_load"] & (df["reps"] == 1)
    multi = df["has_load"] & (df["reps"] > 1)
    df.loc[single, "e1rm"] = df.loc[single, "weight"]
    df.loc[multi, "e1rm"] = (
        df.loc[multi, "weight"] * (1 + df.loc[multi, "reps"] / 30)
    ).round(1)
    return df.sort_values("date", kind="stable").reset_index(drop=True)


def _records(ex_df: pd.DataFrame) -> list[dict]:
    """Best reps at each weight, first date it was reached, heaviest first."""
    loaded = ex_df[ex_df["has_load"]]
    if loaded.empty:
        return []
    best = loaded.sort_values(["weight", "reps", "date"], ascending=[False, False, True])
    best = best.drop_duplicates("weight")
    return [
        {
            "weight": float(row["weight"]),
            "max_reps": int(row["reps"]),
            "date": row["date"].strftime("%Y-%m-%d"),
            "estimated_1rm": float(row["e1rm"]),
        }
        for _, row in best.iterrows()
    ]


def exercise_data_from_sets(df: pd.DataFrame) -> list[dict]:
    """
    Aggregate a set DataFrame into one entry per exercise:
    {exercise_id, exercise_name, muscle_group, max_1rm, max_reps, records},
    sorted by max_1rm descending.
    """
    if df.empty:
        return []

    data = []
    for exercise_id, ex_df in df.groupby("exercise_id", sort=False):
        latest = ex_df.iloc[-1]
        muscle_group = latest["muscle_group"] if pd.notna(latest["muscle_group"]) else None
        reps = ex_df["reps"].dropna()
        data.append({
            "exercise_id": exercise_id,
            "exercise_name": latest["exercise_name"],
            "muscle_group": muscle_group,
            "max_1rm": float(ex_df["e1rm"].max()),
            "max_reps": int(reps.max()) if not reps.empty else None,
            "records": _records(ex_df),
        })
    return sorted(data, key=lambda e: e["max_1rm"], reverse=True)


# ═════════════════════════════════════════════════════════════════════
# TABLES
# ═════════════════════════════════════════════════════════════════════

def pr_table(pr_result: dict) -> pd.DataFrame:
    """Flatten a PR result into one row per record."""
    rows = []
    for ex in pr_result.get("per_exercise", []):
        for pr in ex["prs"]:
            rows.append({
                "exercise": ex["exercise_name"],
                "kind": pr["kind"],
                "label": pr["label"],
                "previous": pr["previous"],
                "current": pr["current"],
                "sets": ",".join(str(i + 1) for i in pr.get("set_indices") or []),
            })
    return pd.DataFrame(rows, columns=["exercise", "kind", "label", "previous", "current", "sets"])


def exercise_levels_table(profile: dict, exercise_data: list[dict]) -> pd.DataFrame:
    """Per-exercise standing; lifts without a standard are left out."""
    gender = (profile or {}).get("gender")
    bodyweight = (profile or {}).get("weight_kg")
    if not gender or not bodyweight:
        return pd.DataFrame()

    rows = []
    for ex in exercise_data:
        score = score_exercise(ex, gender, bodyweight)
        if score is None:
            continue
        rows.append({
            "exercise": ex["exercise_name"],
            "group": get_exercise_group(ex["exercise_name"]),
            "muscle_group": ex.get("muscle_group") or DEFAULT_MUSCLE_GROUP,
            "max_1rm": ex.get("max_1rm"),
            "level": level_from_score(score)["level"],
            "score": round(score, 2),
        })
    if not rows:
        return pd.DataFrame()
    df = pd.DataFrame(rows)
    df["max_1rm"] = df["max_1rm"].fillna(0.0)
    df["bw_ratio"] = np.where(df["max_1rm"] > 0, (df["max_1rm"] / bodyweight).round(2), 0.0)
    return df.sort_values("score", ascending=False).reset_index(drop=True)


def group_levels_table(levels: dict) -> pd.DataFrame:
    """Exercise-group levels as a table, in Push / Pull / Lower order."""
    groups = levels.get("groups") or {}
    rows = [
        {
            "group": g["group"],
            "level": g["level"],
            "progress": round(g["progress"], 1),
            "average_score": round(g["average_score"], 2),
            "lifts": len(g["exercises"]),
        }
        for g in groups.values()
    ]
    return pd.DataFrame(rows, columns=["group", "level", "progress", "average_score", "lifts"])
