"""
LiftLevel — Report
Run manually: python -m liftlevel.report --user <user_id> [--session <session_id>] [--dry-run]

--dry-run uses the bundled demo lifter instead of the store.
"""
import sys
from datetime import datetime

import pandas as pd

from liftlevel import store
from liftlevel.history import sets_to_dataframe, exercise_data_from_sets, pr_table
from liftlevel.pr import compute_prs_for_session
from liftlevel.strength import compute_strength_levels

# ── Demo data ────────────────────────────────────────────────────────
DEMO_USER_ID = "demo-user"
DEMO_PROFILE = {"id": DEMO_USER_ID, "gender": "male", "weight_kg": 80.0}

DEMO_SETS = [
    # date, exercise_id, name, muscle group, reps, weight
    ("2026-09-01T18:00:00+00:00", "ex-bench", "Bench Press", "Chest", 5, 80.0),
    ("2026-09-01T18:00:00+00:00", "ex-bench", "Bench Press", "Chest", 1, 95.0),
    ("2026-09-01T18:00:00+00:00", "ex-ohp", "Overhead Press", "Shoulders", 5, 50.0),
    ("2026-09-03T18:00:00+00:00", "ex-row", "Bent Over Row", "Back", 8, 70.0),
    ("2026-09-03T18:00:00+00:00", "ex-pullup", "Pull-Up", "Back", 12, None),
    ("2026-09-05T18:00:00+00:00", "ex-squat", "Squat", "Quads", 5, 100.0),
    ("2026-09-05T18:00:00+00:00", "ex-dl", "Deadlift", "Hamstrings", 3, 140.0),
]

DEMO_SESSION = {
    "session_id": "demo-session",
    "user_id": DEMO_USER_ID,
    "created_at": "2026-09-08T18:00:00+00:00",
    "exercises": [
        {
            "exercise_id": "ex-bench",
            "exercise_name": "Bench Press",
            "sets": [{"reps": 1, "weight": 100.0}, {"reps": 5, "weight": 82.5}, {"reps": 5, "weight": 80.0}],
        },
        {
            "exercise_id": "ex-squat",
            "exercise_name": "Squat",
            "sets": [{"reps": 5, "weight": w} for w in (100.0, 102.5, 105.0, 102.5, 100.0)],
        },
    ],
}


def demo_rows() -> list[dict]:
    return [
        {"date": d, "exercise_id": eid, "exercise_name": name, "muscle_group": mg, "reps": r, "weight": w}
        for d, eid, name, mg, r, w in DEMO_SETS
    ]


def demo_fetch_historic_sets(user_id: str, exercise_id: str, before_iso: str) -> list[dict]:
    cutoff = datetime.fromisoformat(before_iso)
    return [
        {"reps": r["reps"], "weight": r["weight"]}
        for r in demo_rows()
        if r["exercise_id"] == exercise_id and datetime.fromisoformat(r["date"]) < cutoff
    ]


def _flag_value(argv: list[str], flag: str) -> str | None:
    if flag in argv:
        i = argv.index(flag)
        if i + 1 < len(argv):
            return argv[i + 1]
    return None


# ═════════════════════════════════════════════════════════════════════
# PRINTING
# ═════════════════════════════════════════════════════════════════════

def print_levels(levels: dict):
    overall = levels["overall"]
    if overall is None:
        print("   No strength data (missing gender/body weight or no standard lifts).")
        return
    print(f"   Overall: {overall['current_level']} ({overall['progress']:.0f}% → {overall['next_level'] or '—'})"
          f" · {overall['lifts_tracked']} lifts")
    if overall["balanced_level"]:
        print(f"   Balanced: {overall['balanced_level']} (score {overall['balanced_score']:.2f})")
    if overall["weakest_group"]:
        print(f"   ⚠️  Lagging group: {overall['weakest_group']}")
    for group in levels["groups"].values():
        print(f"   • {group['group']}: {group['level']} ({group['progress']:.0f}%)")


def print_prs(prs: dict):
    if prs["total_prs"] == 0:
        print("   No new PRs.")
        return
    table = pr_table(prs)
    for _, row in table.iterrows():
        prev = f" (prev {row['previous']:g})" if pd.notna(row["previous"]) else ""
        print(f"   🏆 {row['exercise']}: {row['label']} = {row['current']:g}{prev}")


# ═════════════════════════════════════════════════════════════════════
# PIPELINE
# ═════════════════════════════════════════════════════════════════════

def run_report(user_id: str, session_id: str = None, dry_run: bool = False) -> dict:
    """
    1. Load profile and set history
    2. Compute strength levels
    3. If a session is given, compute its PRs
    """
    print("📊 LiftLevel Report — Starting...")
    print(f"   {datetime.now().isoformat()}")

    print("\n📥 Loading history...")
    if dry_run:
        profile, rows = DEMO_PROFILE, demo_rows()
    else:
        profile, rows = store.fetch_profile(user_id), store.fetch_user_sets(user_id)
    exercise_data = exercise_data_from_sets(sets_to_dataframe(rows))
    print(f"   {len(rows)} sets across {len(exercise_data)} exercises")

    print("\n💪 Strength levels:")
    levels = compute_strength_levels(profile, exercise_data)
    print_levels(levels)

    prs = None
    if session_id or dry_run:
        print("\n🏆 Session PRs:")
        if dry_run:
            prs = compute_prs_for_session(DEMO_SESSION, fetch_historic_sets=demo_fetch_historic_sets)
        else:
            ctx = store.fetch_session(session_id)
            if ctx is None:
                print(f"   Session {session_id} not found.")
            else:
                prs = compute_prs_for_session(ctx)
        if prs is not None:
            print_prs(prs)

    return {"levels": levels, "prs": prs}


if __name__ == "__main__":
    dry = "--dry-run" in sys.argv
    user = _flag_value(sys.argv, "--user") or (DEMO_USER_ID if dry else None)
    session = _flag_value(sys.argv, "--session")

    if not user:
        print("Usage: python -m liftlevel.report --user <user_id> [--session <session_id>] [--dry-run]")
        sys.exit(2)

    try:
        run_report(user, session_id=session, dry_run=dry)
    except Exception as e:
        print(f"\n❌ Report FAILED: {e}")
        sys.exit(1)
    print("\nDone.")
