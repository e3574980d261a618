"""Tests for learner insights and stats folding."""

from datetime import date, timedelta

from lexis.application.insights import (
    apply_session_stats,
    daily_goal_reached,
    group_insights,
    mastery_distribution,
    today_plan,
)
from lexis.domain.models import LearnerStats, SessionStats

from tests.conftest import NOW, make_item

TODAY = NOW.date()


def test_group_insights_orders_by_priority():
    items = [
        make_item("a1", "A", reps=6, interval=60, next_review_days=60, mastered=True, total=6),
        make_item("a2", "A", reps=6, interval=60, next_review_days=60, mastered=True, total=6),
        make_item("b1", "B"),
        make_item("b2", "B", total=4, wrong=3, next_review_days=-1),
    ]
    insights = group_insights(items, NOW)

    assert [g.group_key for g in insights] == ["B", "A"]
    b, a = insights
    assert (b.total, b.due, b.weak, b.mastered) == (2, 2, 1, 0)
    assert b.priority == 2 * 3 + 1 * 4 + 2
    assert a.progress == 1.0
    assert a.priority == 0


def test_today_plan():
    items = [make_item(f"n{i}", "L") for i in range(20)]
    items += [make_item(f"w{i}", "M", total=5, wrong=4, next_review_days=2) for i in range(12)]

    plan = today_plan(items, daily_goal=20, now=NOW)

    assert plan.due_count == 20
    assert plan.weak_count == 12
    assert plan.suggested_reviews == 25
    assert plan.recommended_group == "L"


def test_today_plan_empty():
    plan = today_plan([], daily_goal=20, now=NOW)
    assert plan.suggested_reviews == 20
    assert plan.recommended_group is None


def test_mastery_distribution():
    items = [make_item("a"), make_item("b", total=1), make_item("c", total=12)]
    assert mastery_distribution(items) == [1, 1, 0, 0, 1]


class TestApplySessionStats:
    def test_first_session(self):
        stats = apply_session_stats(LearnerStats(), SessionStats(3, 2, 1, 35), NOW)
        assert stats.total_reviews == 3
        assert stats.today_reviews == 3
        assert stats.today_date == TODAY
        assert stats.streak == 1
        assert stats.xp == 35

    def test_same_day_keeps_streak(self):
        before = LearnerStats(today_reviews=5, today_date=TODAY, last_study_date=TODAY, streak=4)
        after = apply_session_stats(before, SessionStats(2, 2, 0, 30), NOW)
        assert after.streak == 4
        assert after.today_reviews == 7

    def test_consecutive_day_extends_streak(self):
        yesterday = TODAY - timedelta(days=1)
        before = LearnerStats(today_reviews=9, today_date=yesterday, last_study_date=yesterday,
                              streak=4)
        after = apply_session_stats(before, SessionStats(1, 1, 0, 15), NOW)
        assert after.streak == 5
        assert after.today_reviews == 1

    def test_gap_restarts_streak(self):
        before = LearnerStats(last_study_date=date(2026, 1, 1), streak=30)
        after = apply_session_stats(before, SessionStats(1, 0, 1, 5), NOW)
        assert after.streak == 1

    def test_empty_session_is_noop(self):
        before = LearnerStats(streak=2, xp=100)
        assert apply_session_stats(before, SessionStats(), NOW) is before


def test_daily_goal_reached_only_when_crossing():
    before = LearnerStats(today_reviews=18, today_date=TODAY, daily_goal=20)
    after = apply_session_stats(before, SessionStats(3, 3, 0, 45), NOW)
    assert daily_goal_reached(before, after) is True

    again = apply_session_stats(after, SessionStats(1, 1, 0, 15), NOW)
    assert daily_goal_reached(after, again) is False
