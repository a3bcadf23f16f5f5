"""
LiftLevel — Configuration

Environment-driven settings for the store client plus the constants shared
by the PR engine and the strength aggregator. Weights are always kilograms.
"""
import os

# ── Store (PostgREST / Supabase) ─────────────────────────────────────
SUPABASE_URL = os.environ.get("SUPABASE_URL", "").rstrip("/")
SUPABASE_KEY = os.environ.get("SUPABASE_KEY", "")

FETCH_WORKERS = int(os.environ.get("LIFTLEVEL_FETCH_WORKERS", "4"))
REQUEST_TIMEOUT = float(os.environ.get("LIFTLEVEL_REQUEST_TIMEOUT", "15"))

# ═════════════════════════════════════════════════════════════════════
# STRENGTH LEVELS
# ═════════════════════════════════════════════════════════════════════

LEVEL_ORDER = [
    "Beginner",
    "Novice",
    "Intermediate",
    "Advanced",
    "Elite",
    "World Class",
]

LEVEL_SCORES = {level: i + 1 for i, level in enumerate(LEVEL_ORDER)}

TOP_SCORE = LEVEL_SCORES["World Class"]

LEVEL_COLORS = {
    "Beginner": "#9CA3AF",
    "Novice": "#3B82F6",
    "Intermediate": "#10B981",
    "Advanced": "#8B5CF6",
    "Elite": "#F59E0B",
    "World Class": "#EF4444",
}

LEVEL_DESCRIPTIONS = {
    "Beginner": "Just starting out",
    "Novice": "A few months training",
    "Intermediate": "1-2 years consistent training",
    "Advanced": "2-5 years dedicated training",
    "Elite": "Competitive athlete level",
    "World Class": "World record territory",
}

GENDERS = ("male", "female")

# ── Exercise groups ──────────────────────────────────────────────────
# "Other" collects lifts with no movement classification; it is never
# part of the balanced level.
EXERCISE_GROUPS = ["Push", "Pull", "Lower", "Other"]
BALANCED_GROUPS = ["Push", "Pull", "Lower"]

DEFAULT_MUSCLE_GROUP = "Other"

# Gap between strongest and weakest group (in levels) before flagging
IMBALANCE_THRESHOLD = 1.0

# ═════════════════════════════════════════════════════════════════════
# PERSONAL RECORDS
# ═════════════════════════════════════════════════════════════════════

PR_SINGLE_REP_MAX = "single-rep-max"
PR_REP_MAX = "rep-max"
PR_SCHEME_MAX = "scheme-max"
PR_WEIGHT_MAX = "weight-max"

DEFAULT_PR_KINDS = (PR_SINGLE_REP_MAX, PR_REP_MAX, PR_SCHEME_MAX)
ALL_PR_KINDS = DEFAULT_PR_KINDS + (PR_WEIGHT_MAX,)

# 5x5: best total over five sets of five
SCHEME_REPS = 5
SCHEME_SETS = 5

PR_LABELS = {
    PR_SINGLE_REP_MAX: "1RM",
    PR_SCHEME_MAX: f"Best {SCHEME_SETS}x{SCHEME_REPS} total",
}


def rep_max_label(reps: int) -> str:
    return f"{reps}-rep max"


def weight_max_label(weight: float, reps: int) -> str:
    weight_str = f"{weight:g}"
    return f"{weight_str}kg for {reps} {'rep' if reps == 1 else 'reps'}"

