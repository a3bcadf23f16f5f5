"""
Tests for the PR engine against fake history fetchers.
Run: pytest tests/ -v
"""
import pytest


def _make_sets(*pairs):
    """(reps, weight) pairs → set dicts."""
    return [{"reps": r, "weight": w} for r, w in pairs]


def _make_ctx(*exercises, created_at="2026-09-08T18:00:00+00:00"):
    return {
        "session_id": "s-1",
        "user_id": "u-1",
        "created_at": created_at,
        "exercises": [
            {"exercise_id": eid, "exercise_name": name, "sets": sets}
            for eid, name, sets in exercises
        ],
    }


def _by_kind(prs, kind):
    return [p for p in prs if p["kind"] == kind]


# ═══════════════════════════════════════════════════════════════════════
# SINGLE EXERCISE
# ═══════════════════════════════════════════════════════════════════════

class TestSingleRepMax:
    """Heaviest single against the heaviest historic single."""

    def test_beats_history(self):
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((1, 105), (1, 95)), _make_sets((1, 100)))
        [pr] = _by_kind(prs, "single-rep-max")
        assert pr["current"] == 105
        assert pr["previous"] == 100
        assert pr["set_indices"] == [0]
        assert pr["label"] == "1RM"

    def test_equal_is_not_a_pr(self):
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((1, 100)), _make_sets((1, 100)))
        assert prs == []

    def test_no_history_is_a_pr(self):
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((1, 60)), [])
        [pr] = _by_kind(prs, "single-rep-max")
        assert pr["previous"] is None
        assert pr["current"] == 60

    def test_ties_credit_every_set(self):
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((1, 105), (3, 90), (1, 105)), _make_sets((1, 100)))
        [pr] = _by_kind(prs, "single-rep-max")
        assert pr["set_indices"] == [0, 2]

    def test_multi_rep_history_does_not_count(self):
        """A heavy triple is not a single."""
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((1, 100)), _make_sets((3, 120)))
        assert _by_kind(prs, "single-rep-max")[0]["previous"] is None


class TestRepMax:

    def test_one_record_per_rep_count_ascending(self):
        from liftlevel.pr import compute_prs_for_exercise
        current = _make_sets((8, 70), (3, 90), (5, 80))
        prs = _by_kind(compute_prs_for_exercise(current, []), "rep-max")
        assert [p["reps"] for p in prs] == [3, 5, 8]
        assert [p["label"] for p in prs] == ["3-rep max", "5-rep max", "8-rep max"]
        assert [p["set_indices"] for p in prs] == [[1], [2], [0]]

    def test_only_beaten_rep_counts_fire(self):
        from liftlevel.pr import compute_prs_for_exercise
        current = _make_sets((5, 80), (3, 85))
        historic = _make_sets((5, 82.5), (3, 80))
        prs = _by_kind(compute_prs_for_exercise(current, historic), "rep-max")
        assert len(prs) == 1
        assert prs[0]["reps"] == 3
        assert prs[0]["previous"] == 80

    def test_unloaded_and_zero_rep_sets_ignored(self):
        from liftlevel.pr import compute_prs_for_exercise
        current = _make_sets((0, 200), (12, None), (10, 0))
        assert compute_prs_for_exercise(current, []) == []

    def test_missing_reps_ignored(self):
        from liftlevel.pr import compute_prs_for_exercise
        assert compute_prs_for_exercise([{"reps": None, "weight": 100}], []) == []


class TestSchemeMax:
    """Best 5x5 total."""

    def test_five_by_five_without_history(self):
        from liftlevel.pr import compute_prs_for_exercise
        current = _make_sets(*[(5, w) for w in (100, 102, 98, 101, 99)])
        [pr] = _by_kind(compute_prs_for_exercise(current, []), "scheme-max")
        assert pr["current"] == 2500
        assert pr["previous"] is None
        assert pr["set_indices"] == [0, 1, 2, 3, 4]
        assert pr["label"] == "Best 5x5 total"

    def test_top_five_of_six(self):
        from liftlevel.pr import compute_prs_for_exercise
        current = _make_sets((5, 60), *[(5, 100)] * 5)
        [pr] = _by_kind(compute_prs_for_exercise(current, []), "scheme-max")
        assert pr["current"] == 2500
        assert pr["set_indices"] == [1, 2, 3, 4, 5]

    def test_fewer_than_five_sets_never_fires(self):
        from liftlevel.pr import compute_prs_for_exercise
        current = _make_sets(*[(5, 100)] * 4)
        assert _by_kind(compute_prs_for_exercise(current, []), "scheme-max") == []

    def test_beats_historic_total(self):
        from liftlevel.pr import compute_prs_for_exercise
        current = _make_sets(*[(5, 102.5)] * 5)
        historic = _make_sets(*[(5, 100)] * 5)
        [pr] = _by_kind(compute_prs_for_exercise(current, historic), "scheme-max")
        assert pr["previous"] == 2500
        assert pr["current"] == 2562.5

    def test_top_scheme_total_helper(self):
        from liftlevel.pr import top_scheme_total
        assert top_scheme_total(_make_sets((5, 100), (3, 120))) == (None, [])


class TestOptionalKinds:

    def test_weight_max_is_opt_in(self):
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((8, 60)), _make_sets((6, 60)))
        assert _by_kind(prs, "weight-max") == []

    def test_weight_max_counts_reps_at_weight(self):
        from liftlevel.config import ALL_PR_KINDS
        from liftlevel.pr import compute_prs_for_exercise
        current = _make_sets((6, 60), (8, 60))
        prs = compute_prs_for_exercise(current, _make_sets((6, 60)), kinds=ALL_PR_KINDS)
        [pr] = _by_kind(prs, "weight-max")
        assert pr["current"] == 8
        assert pr["previous"] == 6
        assert pr["weight"] == 60
        assert pr["set_indices"] == [1]
        assert pr["label"] == "60kg for 8 reps"

    def test_kind_filter(self):
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((1, 100)), [], kinds=("rep-max",))
        assert [p["kind"] for p in prs] == ["rep-max"]

    def test_unknown_kind_raises(self):
        from liftlevel.pr import compute_prs_for_exercise
        with pytest.raises(ValueError):
            compute_prs_for_exercise(_make_sets((1, 100)), [], kinds=("heaviest-ever",))

    def test_zero_rep_history_is_no_previous(self):
        from liftlevel.config import ALL_PR_KINDS
        from liftlevel.pr import compute_prs_for_exercise, max_reps_for_weight
        historic = _make_sets((0, 60))
        assert max_reps_for_weight(historic, 60) is None
        prs = compute_prs_for_exercise(_make_sets((3, 60)), historic, kinds=ALL_PR_KINDS)
        [pr] = _by_kind(prs, "weight-max")
        assert pr["previous"] is None
        assert pr["current"] == 3


class TestIsCurrent:
    """Whether a later session already matched or beat the record."""

    def test_absent_without_future_sets(self):
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((1, 100)), [])
        assert all("is_current" not in p for p in prs)

    def test_beaten_later(self):
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((1, 100)), [], future=_make_sets((1, 110)))
        assert _by_kind(prs, "single-rep-max")[0]["is_current"] is False

    def test_matched_later(self):
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((1, 100)), [], future=_make_sets((1, 100)))
        assert _by_kind(prs, "single-rep-max")[0]["is_current"] is False

    def test_still_standing(self):
        from liftlevel.pr import compute_prs_for_exercise
        prs = compute_prs_for_exercise(_make_sets((1, 100)), [], future=_make_sets((3, 110)))
        assert _by_kind(prs, "single-rep-max")[0]["is_current"] is True


# ═══════════════════════════════════════════════════════════════════════
# SESSION
# ═══════════════════════════════════════════════════════════════════════

class FakeHistory:
    """In-memory fetcher recording every call."""

    def __init__(self, history=None, fail_on=None):
        self.history = history or {}
        self.fail_on = fail_on
        self.calls = []

    def __call__(self, user_id, exercise_id, before_iso):
        self.calls.append((user_id, exercise_id, before_iso))
        if exercise_id == self.fail_on:
            raise ConnectionError(f"store down for {exercise_id}")
        return list(self.history.get(exercise_id, []))


class TestComputePrsForSession:

    def test_cutoff_is_session_created_at(self):
        from liftlevel.pr import compute_prs_for_session
        fetch = FakeHistory()
        ctx = _make_ctx(("ex-1", "Bench Press", _make_sets((1, 100))))
        compute_prs_for_session(ctx, fetch_historic_sets=fetch, max_workers=1)
        assert fetch.calls == [("u-1", "ex-1", "2026-09-08T18:00:00+00:00")]

    def test_empty_exercise_skipped_and_not_fetched(self):
        from liftlevel.pr import compute_prs_for_session
        fetch = FakeHistory()
        ctx = _make_ctx(
            ("ex-1", "Bench Press", _make_sets((1, 100))),
            ("ex-2", "Squat", []),
        )
        result = compute_prs_for_session(ctx, fetch_historic_sets=fetch, max_workers=1)
        assert [e["exercise_id"] for e in result["per_exercise"]] == ["ex-1"]
        assert [c[1] for c in fetch.calls] == ["ex-1"]

    def test_exercises_without_prs_omitted(self):
        from liftlevel.pr import compute_prs_for_session
        fetch = FakeHistory({"ex-1": _make_sets((1, 120))})
        ctx = _make_ctx(
            ("ex-1", "Bench Press", _make_sets((1, 100))),
            ("ex-2", "Squat", _make_sets((5, 100))),
        )
        result = compute_prs_for_session(ctx, fetch_historic_sets=fetch)
        assert [e["exercise_name"] for e in result["per_exercise"]] == ["Squat"]

    def test_total_is_sum_of_prs(self):
        from liftlevel.pr import compute_prs_for_session
        ctx = _make_ctx(
            ("ex-1", "Bench Press", _make_sets((1, 100), (5, 80))),
            ("ex-2", "Squat", _make_sets(*[(5, 100)] * 5)),
        )
        result = compute_prs_for_session(ctx, fetch_historic_sets=FakeHistory())
        assert result["total_prs"] == sum(len(e["prs"]) for e in result["per_exercise"])
        # bench: 1RM, 1-rep max, 5-rep max; squat: 5-rep max, 5x5
        assert result["total_prs"] == 5

    def test_parallel_matches_sequential(self):
        from liftlevel.pr import compute_prs_for_session
        history = {"ex-1": _make_sets((1, 95)), "ex-3": _make_sets((8, 50))}
        ctx = _make_ctx(
            ("ex-1", "Bench Press", _make_sets((1, 100))),
            ("ex-2", "Squat", _make_sets((3, 140))),
            ("ex-3", "Overhead Press", _make_sets((8, 52.5))),
        )
        seq = compute_prs_for_session(ctx, fetch_historic_sets=FakeHistory(history), max_workers=1)
        par = compute_prs_for_session(ctx, fetch_historic_sets=FakeHistory(history), max_workers=4)
        assert seq == par
        assert [e["exercise_id"] for e in par["per_exercise"]] == ["ex-1", "ex-2", "ex-3"]

    @pytest.mark.parametrize("workers", [1, 4])
    def test_fetch_error_propagates(self, workers):
        from liftlevel.pr import compute_prs_for_session
        ctx = _make_ctx(
            ("ex-1", "Bench Press", _make_sets((1, 100))),
            ("ex-2", "Squat", _make_sets((5, 100))),
        )
        with pytest.raises(ConnectionError, match="ex-2"):
            compute_prs_for_session(ctx, fetch_historic_sets=FakeHistory(fail_on="ex-2"), max_workers=workers)

    def test_future_sets_fetched_after_session(self):
        from liftlevel.pr import compute_prs_for_session
        future = FakeHistory({"ex-1": _make_sets((1, 110))})
        ctx = _make_ctx(("ex-1", "Bench Press", _make_sets((1, 100))))
        result = compute_prs_for_session(ctx, fetch_historic_sets=FakeHistory(), fetch_future_sets=future)
        assert future.calls == [("u-1", "ex-1", "2026-09-08T18:00:00+00:00")]
        assert all(p["is_current"] is False for p in result["per_exercise"][0]["prs"])

    def test_no_exercises(self):
        from liftlevel.pr import compute_prs_for_session
        result = compute_prs_for_session(_make_ctx(), fetch_historic_sets=FakeHistory())
        assert result == {"total_prs": 0, "per_exercise": []}

    def test_cached_fetcher(self):
        from liftlevel.pr import compute_prs_for_session
        from liftlevel.store import SetCache
        fetch = FakeHistory({"ex-1": _make_sets((1, 95))})
        cache = SetCache(fetch=fetch)
        ctx = _make_ctx(("ex-1", "Bench Press", _make_sets((1, 100))))
        first = compute_prs_for_session(ctx, fetch_historic_sets=cache.fetch_historic_sets)
        second = compute_prs_for_session(ctx, fetch_historic_sets=cache.fetch_historic_sets)
        assert first == second
        assert len(fetch.calls) == 1
