"""Tests for app/utils/pattern_learner.py

- Agrupamento de horários e cálculo de confiança
- Aprendizado por tipo de atividade
- Rotina do dia e próximo evento previsto
"""

from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest

from app.utils.pattern_learner import (
    BabyPatternLearner,
    calculate_confidence,
    calculate_variance,
    cluster_times,
    default_schedule,
    minutes_since_midnight,
)

DAY = date(2024, 3, 10)


def activity(activity_type, hour, minute=0, days_ago=0, duration=None):
    start = datetime.combine(DAY - timedelta(days=days_ago), datetime.min.time()).replace(hour=hour, minute=minute)
    return SimpleNamespace(type=activity_type, start_time=start, duration=duration)


@pytest.fixture
def learner():
    return BabyPatternLearner()


@pytest.fixture
def history():
    """Três dias com mamadas às 7h e 12h e soneca às 9h."""
    items = []
    for days_ago in range(3):
        items.append(activity("feeding", 7, days_ago=days_ago))
        items.append(activity("feeding", 12, days_ago=days_ago))
        items.append(activity("sleep", 9, days_ago=days_ago, duration=3600))
        items.append(activity("diaper", 8, days_ago=days_ago))
    return items


# ─────────────────────────────────────────────────────────────────────────────
# Funções puras
# ─────────────────────────────────────────────────────────────────────────────


class TestClusterTimes:
    def test_example_from_docs(self):
        assert cluster_times([420, 435, 900]) == [427, 900]

    def test_unsorted_input(self):
        assert cluster_times([900, 435, 420]) == [427, 900]

    def test_empty(self):
        assert cluster_times([]) == []

    def test_chain_within_threshold_joins_one_cluster(self):
        # cada vizinho está a 60 min do anterior
        assert cluster_times([0, 60, 120]) == [60]

    def test_gap_above_threshold_splits(self):
        assert cluster_times([0, 61]) == [0, 61]

    def test_cluster_count_never_exceeds_input(self):
        values = [10, 500, 505, 1000, 1300, 1301]
        assert len(cluster_times(values)) <= len(values)


class TestConfidence:
    def test_two_or_fewer_samples_is_half(self):
        assert calculate_confidence([]) == 0.5
        assert calculate_confidence([420]) == 0.5
        assert calculate_confidence([420, 1000]) == 0.5

    def test_identical_times_are_fully_confident(self):
        assert calculate_confidence([420, 420, 420]) == 1.0

    def test_population_variance(self):
        assert calculate_variance([420, 430, 440]) == pytest.approx(200 / 3)

    def test_bounded(self):
        for times in ([0, 700, 1400], [420, 421, 422], [0, 0, 1439, 1439]):
            confidence = calculate_confidence(times)
            assert 0.1 <= confidence <= 1.0

    def test_floor_for_scattered_times(self):
        assert calculate_confidence([0, 720, 1400]) == 0.1

    def test_more_spread_means_less_confidence(self):
        tight = calculate_confidence([420, 425, 430])
        loose = calculate_confidence([420, 440, 460])
        assert loose <= tight


def test_minutes_since_midnight():
    assert minutes_since_midnight(datetime(2024, 1, 1, 7, 15)) == 435


def test_default_schedule():
    schedule = default_schedule(DAY)

    assert [(s.type, s.suggested_time.hour, s.confidence) for s in schedule] == [
        ("feeding", 7, 0.8),
        ("sleep", 9, 0.7),
        ("feeding", 12, 0.8),
    ]
    assert all(s.suggested_time.date() == DAY for s in schedule)


# ─────────────────────────────────────────────────────────────────────────────
# Aprendizado
# ─────────────────────────────────────────────────────────────────────────────


class TestLearnPatterns:
    def test_learns_each_type(self, learner, history):
        pattern = learner.learn_patterns("b1", history)

        assert pattern.feeding_pattern.typical_feeding_times == [420, 720]
        assert pattern.feeding_pattern.confidence == 0.1  # 7h e 12h estão longe da média
        assert pattern.sleep_pattern.typical_sleep_times == [540]
        assert pattern.sleep_pattern.average_duration == 3600
        assert pattern.sleep_pattern.confidence == 1.0
        assert pattern.diaper_pattern.confidence == 0.7
        assert pattern.diaper_pattern.average_interval == pytest.approx(86400)

    def test_missing_types_have_no_pattern(self, learner):
        pattern = learner.learn_patterns("b1", [activity("sleep", 9)])

        assert pattern.feeding_pattern is None
        assert pattern.diaper_pattern is None
        assert pattern.sleep_pattern.confidence == 0.5

    def test_other_types_are_ignored(self, learner):
        pattern = learner.learn_patterns("b1", [activity("bath", 19)])
        assert pattern.sleep_pattern is None and pattern.feeding_pattern is None

    def test_pattern_is_cached_per_baby(self, learner, history):
        learner.learn_patterns("b1", history)

        assert learner.get_pattern("b1") is not None
        assert learner.get_pattern("b2") is None

    def test_activity_change_forgets_pattern(self, learner, history):
        learner.learn_patterns("b1", history)
        learner.on_activity_changed("activity.changed", {"action": "created", "baby_id": "b1"})

        assert learner.get_pattern("b1") is None


class TestSchedule:
    def test_without_pattern_uses_default(self, learner):
        assert learner.generate_daily_schedule("nobody", DAY) == default_schedule(DAY)

    def test_sorted_by_time(self, learner, history):
        learner.learn_patterns("b1", history)
        schedule = learner.generate_daily_schedule("b1", DAY)

        assert [(s.type, s.suggested_time.hour) for s in schedule] == [
            ("feeding", 7),
            ("sleep", 9),
            ("feeding", 12),
        ]


class TestNextPredictedEvent:
    def test_none_without_pattern(self, learner):
        assert learner.get_next_predicted_event("b1", datetime(2024, 3, 10, 8)) is None

    def test_next_event_later_today(self, learner, history):
        learner.learn_patterns("b1", history)
        prediction = learner.get_next_predicted_event("b1", datetime(2024, 3, 11, 8, 0))

        assert prediction.type == "sleep"
        assert prediction.predicted_time == datetime(2024, 3, 11, 9, 0)
        assert prediction.confidence == 1.0

    def test_current_minute_is_excluded(self, learner, history):
        learner.learn_patterns("b1", history)
        prediction = learner.get_next_predicted_event("b1", datetime(2024, 3, 11, 9, 0))

        assert prediction.type == "feeding"
        assert prediction.predicted_time.hour == 12

    def test_no_wraparound_after_last_event(self, learner, history):
        learner.learn_patterns("b1", history)
        assert learner.get_next_predicted_event("b1", datetime(2024, 3, 11, 13, 0)) is None

    def test_tie_prefers_sleep(self, learner):
        learner.learn_patterns("b1", [activity("feeding", 10), activity("sleep", 10)])
        prediction = learner.get_next_predicted_event("b1", datetime(2024, 3, 11, 6, 0))

        assert prediction.type == "sleep"
