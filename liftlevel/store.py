"""
LiftLevel — Store Client

Read-only access to the hosted Postgres through its PostgREST endpoint
(workout_sessions → workout_exercises → sets, exercises, profiles).
"""
import threading
import time

import requests

from liftlevel.config import SUPABASE_URL, SUPABASE_KEY, REQUEST_TIMEOUT

BASE_URL = f"{SUPABASE_URL}/rest/v1"
HEADERS = {
    "accept": "application/json",
    "apikey": SUPABASE_KEY,
    "Authorization": f"Bearer {SUPABASE_KEY}",
}

RATE_LIMIT_DELAY = 0.1  # seconds between requests
MAX_RETRIES = 3
RETRY_BACKOFF = 2  # exponential backoff multiplier

SET_SELECT = "created_at,workout_exercises!inner(exercise_id,sets!inner(reps,weight))"


def _get(endpoint: str, params: dict = None) -> list | dict:
    """GET request to the store with retry and rate limiting."""
    time.sleep(RATE_LIMIT_DELAY)
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            r = requests.get(
                f"{BASE_URL}{endpoint}", headers=HEADERS,
                params=params or {}, timeout=REQUEST_TIMEOUT,
            )
            if r.status_code == 429:
                wait = RETRY_BACKOFF ** attempt
                print(f"  ⏳ Store rate limit, retrying in {wait}s (attempt {attempt}/{MAX_RETRIES})")
                time.sleep(wait)
                continue
            r.raise_for_status()
            return r.json()
        except requests.exceptions.Timeout:
            if attempt < MAX_RETRIES:
                print(f"  ⏳ Store timeout, retrying (attempt {attempt}/{MAX_RETRIES})")
                time.sleep(RETRY_BACKOFF ** attempt)
            else:
                raise
        except requests.exceptions.HTTPError:
            if attempt < MAX_RETRIES and r.status_code >= 500:
                print(f"  ⏳ Store {r.status_code}, retrying (attempt {attempt}/{MAX_RETRIES})")
                time.sleep(RETRY_BACKOFF ** attempt)
            else:
                raise
    raise requests.exceptions.RetryError(f"Store request failed after {MAX_RETRIES} attempts")


def _flatten_sets(sessions: list[dict], exercise_id: str) -> list[dict]:
    """Session rows with nested exercises/sets → flat [{reps, weight}]."""
    sets = []
    for session in sessions or []:
        for we in session.get("workout_exercises") or []:
            if we.get("exercise_id") != exercise_id:
                continue
            for s in we.get("sets") or []:
                sets.append({"reps": s.get("reps"), "weight": s.get("weight")})
    return sets


def _query_sets(user_id: str, exercise_id: str, created_filter: str) -> list[dict]:
    data = _get("/workout_sessions", {
        "select": SET_SELECT,
        "user_id": f"eq.{user_id}",
        "workout_exercises.exercise_id": f"eq.{exercise_id}",
        "created_at": created_filter,
    })
    return _flatten_sets(data, exercise_id)


def fetch_historic_sets(user_id: str, exercise_id: str, before_iso: str) -> list[dict]:
    """All sets of this user+exercise from sessions created strictly before `before_iso`."""
    return _query_sets(user_id, exercise_id, f"lt.{before_iso}")


def fetch_future_sets(user_id: str, exercise_id: str, after_iso: str) -> list[dict]:
    """All sets of this user+exercise from sessions created strictly after `after_iso`."""
    return _query_sets(user_id, exercise_id, f"gt.{after_iso}")


def fetch_profile(user_id: str) -> dict | None:
    data = _get("/profiles", {"select": "id,gender,weight_kg", "id": f"eq.{user_id}"})
    return data[0] if data else None


def fetch_session(session_id: str) -> dict | None:
    """
    Load one session as a PR-engine context:
    {session_id, user_id, created_at, exercises: [{exercise_id, exercise_name, sets}]}.
    Exercises follow order_index, sets follow set_number.
    """
    data = _get("/workout_sessions", {
        "select": (
            "id,user_id,created_at,"
            "workout_exercises(exercise_id,order_index,exercises(name),"
            "sets(set_number,reps,weight))"
        ),
        "id": f"eq.{session_id}",
    })
    if not data:
        return None
    row = data[0]

    exercises = []
    ordered = sorted(row.get("workout_exercises") or [], key=lambda we: we.get("order_index") or 0)
    for we in ordered:
        sets = sorted(we.get("sets") or [], key=lambda s: s.get("set_number") or 0)
        exercises.append({
            "exercise_id": we["exercise_id"],
            "exercise_name": (we.get("exercises") or {}).get("name", ""),
            "sets": [{"reps": s.get("reps"), "weight": s.get("weight")} for s in sets],
        })

    return {
        "session_id": row["id"],
        "user_id": row["user_id"],
        "created_at": row["created_at"],
        "exercises": exercises,
    }


def fetch_user_sets(user_id: str) -> list[dict]:
    """
    Every set a user has logged, one row per set:
    {date, exercise_id, exercise_name, muscle_group, reps, weight}.
    """
    data = _get("/workout_sessions", {
        "select": (
            "created_at,workout_exercises!inner(exercise_id,"
            "exercises!inner(name,muscle_group),sets!inner(reps,weight))"
        ),
        "user_id": f"eq.{user_id}",
    })
    rows = []
    for session in data or []:
        for we in session.get("workout_exercises") or []:
            exercise = we.get("exercises") or {}
            for s in we.get("sets") or []:
                rows.append({
                    "date": session["created_at"],
                    "exercise_id": we["exercise_id"],
                    "exercise_name": exercise.get("name", ""),
                    "muscle_group": exercise.get("muscle_group"),
                    "reps": s.get("reps"),
                    "weight": s.get("weight"),
                })
    return rows


# ═════════════════════════════════════════════════════════════════════
# CACHE: explicit, injected by the caller
# ═════════════════════════════════════════════════════════════════════

class SetCache:
    """
    Memoizes historic-set fetches keyed by (user_id, exercise_id, as_of).

    Callers own the instance and must invalidate a (user_id, exercise_id)
    pair whenever a session containing that exercise is written, edited
    or deleted. Pass `cache.fetch_historic_sets` to the PR engine.
    """

    def __init__(self, fetch=None):
        self._fetch = fetch or fetch_historic_sets
        self._entries: dict[tuple, list[dict]] = {}
        self._lock = threading.Lock()

    def fetch_historic_sets(self, user_id: str, exercise_id: str, before_iso: str) -> list[dict]:
        key = (user_id, exercise_id, before_iso)
        with self._lock:
            if key in self._entries:
                return list(self._entries[key])
        sets = self._fetch(user_id, exercise_id, before_iso)
        with self._lock:
            self._entries[key] = list(sets)
        return sets

    def invalidate(self, user_id: str, exercise_id: str = None) -> int:
        """Drop every cut-off cached for the pair (or for the whole user). Returns count dropped."""
        with self._lock:
            stale = [
                k for k in self._entries
                if k[0] == user_id and (exercise_id is None or k[1] == exercise_id)
            ]
            for k in stale:
                del self._entries[k]
        return len(stale)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        return len(self._entries)
