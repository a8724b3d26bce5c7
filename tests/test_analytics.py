"""Tests for classification analytics."""

from datetime import date, datetime, timedelta, UTC

import pytest

from coopbook.domain.analytics import (
    AlertPolicy,
    AnalyticsService,
    build_analytics,
    window_days,
)
from coopbook.domain.entities import ClassificationLogEntry, ManualOverrideLogEntry
from coopbook.domain.ledger import ClassificationLedger

NOW = datetime(2025, 1, 31, 12, 0, tzinfo=UTC)
START = date(2025, 1, 2)
END = date(2025, 1, 31)


def accepted(day=END, confidence=90.0, category_id=1, pattern="Payroll Pattern"):
    return ClassificationLogEntry(
        transaction_id=1,
        suggested_category_id=category_id,
        actual_category_id=category_id,
        confidence_score=confidence,
        pattern_matched=pattern,
        is_manual_override=False,
        timestamp=datetime.combine(day, datetime.min.time(), tzinfo=UTC) + timedelta(hours=10),
    )


def overridden(day=END, confidence=70.0, category_id=1, pattern="Payroll Pattern"):
    return ManualOverrideLogEntry(
        transaction_id=2,
        original_category_id=category_id,
        new_category_id=category_id + 1,
        reason="Manual override by user",
        timestamp=datetime.combine(day, datetime.min.time(), tzinfo=UTC) + timedelta(hours=11),
        confidence_score=confidence,
        pattern_matched=pattern,
    )


class TestBuildAnalytics:
    """Tests for the pure aggregation."""

    def test_empty_ledger_gives_zeroed_metrics(self):
        metrics = build_analytics([], [], START, END)

        assert metrics.total_classifications == 0
        assert metrics.accuracy_rate == 0
        assert metrics.override_rate == 0
        assert metrics.avg_confidence_score == 0
        assert metrics.alerts == ()
        assert len(metrics.daily_stats) == 30
        assert all(stat.accuracy_rate == 0 for stat in metrics.daily_stats)
        assert all(bucket.count == 0 for bucket in metrics.confidence_distribution)

    def test_rates_add_up_to_100(self):
        metrics = build_analytics(
            [accepted(), accepted(), accepted()], [overridden()], START, END
        )

        assert metrics.total_classifications == 4
        assert metrics.accurate_classifications == 3
        assert metrics.manual_overrides == 1
        assert metrics.accuracy_rate == 75
        assert metrics.override_rate == 25
        assert metrics.accuracy_rate + metrics.override_rate == 100

    @pytest.mark.parametrize("accepted_count, overridden_count", [(1, 2), (2, 1), (1, 6), (5, 2)])
    def test_uneven_split_still_adds_up_to_100(self, accepted_count, overridden_count):
        metrics = build_analytics(
            [accepted() for _ in range(accepted_count)],
            [overridden() for _ in range(overridden_count)],
            START,
            END,
        )

        assert metrics.accuracy_rate + metrics.override_rate == 100
        assert metrics.accuracy_rate == pytest.approx(100 * accepted_count / (accepted_count + overridden_count))

    def test_average_confidence(self):
        metrics = build_analytics([accepted(confidence=90)], [overridden(confidence=70)], START, END)

        assert metrics.avg_confidence_score == 80

    def test_entries_outside_window_are_ignored(self):
        metrics = build_analytics(
            [accepted(day=date(2025, 1, 1)), accepted(day=START)], [], START, END
        )

        assert metrics.total_classifications == 1

    def test_daily_stats_cover_every_day_oldest_first(self):
        metrics = build_analytics(
            [accepted(day=date(2025, 1, 10))], [overridden(day=date(2025, 1, 10))], START, END
        )

        days = [stat.day for stat in metrics.daily_stats]
        assert days[0] == START
        assert days[-1] == END
        assert days == sorted(days)
        [tenth] = [stat for stat in metrics.daily_stats if stat.day == date(2025, 1, 10)]
        assert tenth.classifications == 2
        assert tenth.accurate == 1
        assert tenth.overrides == 1
        assert tenth.accuracy_rate == 50

    def test_category_accuracy(self):
        metrics = build_analytics(
            [accepted(category_id=1), accepted(category_id=2)],
            [overridden(category_id=1)],
            START,
            END,
            category_names={1: "Payroll", 2: "Operational"},
        )

        rows = {row.category_name: row for row in metrics.category_accuracy}
        assert rows["Payroll"].total_suggestions == 2
        assert rows["Payroll"].accurate_suggestions == 1
        assert rows["Payroll"].accuracy_rate == 50
        assert rows["Operational"].accuracy_rate == 100

    def test_unsuggested_overrides_are_unclassified(self):
        entry = ManualOverrideLogEntry(
            transaction_id=3,
            original_category_id=None,
            new_category_id=5,
            reason="Manual override by user",
            timestamp=NOW,
        )

        metrics = build_analytics([], [entry], START, END)

        assert metrics.category_accuracy[0].category_name == "Unclassified"
        assert metrics.top_patterns == ()

    def test_top_patterns_most_used_first(self):
        metrics = build_analytics(
            [accepted(pattern="Routine"), accepted(pattern="Payroll"), accepted(pattern="Payroll")],
            [overridden(pattern="Payroll")],
            START,
            END,
        )

        assert [p.pattern_name for p in metrics.top_patterns] == ["Payroll", "Routine"]
        payroll = metrics.top_patterns[0]
        assert payroll.usage_count == 3
        assert payroll.accurate_count == 2
        assert payroll.accuracy_rate == pytest.approx(66.6666, rel=1e-3)

    def test_confidence_buckets(self):
        metrics = build_analytics(
            [accepted(confidence=0), accepted(confidence=20), accepted(confidence=100)],
            [overridden(confidence=79.99), overridden(confidence=80)],
            START,
            END,
        )

        counts = {b.label: b.count for b in metrics.confidence_distribution}
        assert counts == {"0-20": 1, "20-40": 1, "40-60": 0, "60-80": 1, "80-100": 2}
        top = metrics.confidence_distribution[-1]
        assert top.accuracy_rate == 50

    def test_alerts_fire_on_low_accuracy(self):
        metrics = build_analytics([accepted()], [overridden()], START, END)

        assert len(metrics.alerts) == 2
        assert "Accuracy rate" in metrics.alerts[0]
        assert "Override rate" in metrics.alerts[1]

    def test_no_alerts_when_healthy(self):
        metrics = build_analytics([accepted()] * 9, [overridden()], START, END)

        assert metrics.accuracy_rate == 90
        assert metrics.alerts == ()

    def test_custom_alert_policy(self):
        policy = AlertPolicy(min_accuracy_rate=95, max_override_rate=5)

        metrics = build_analytics([accepted()] * 9, [overridden()], START, END, alert_policy=policy)

        assert len(metrics.alerts) == 2

    def test_as_dict_uses_dashboard_keys(self):
        data = build_analytics([accepted()], [], START, END).as_dict()

        assert data["totalClassifications"] == 1
        assert data["accuracyRate"] == 100
        assert data["overrideRate"] == 0
        assert len(data["dailyStats"]) == 30
        assert data["confidenceDistribution"][-1] == {"range": "80-100", "count": 1, "accuracy_rate": 100}


@pytest.mark.parametrize(
    "label, days",
    [("7d", 7), ("30d", 30), ("90d", 90), ("last_30_days", 30), ("year", 30), (None, 30)],
)
def test_window_days(label, days):
    assert window_days(label) == days


class TestAnalyticsService:
    """Tests for analytics over the stored ledger."""

    def test_empty_ledger(self, temp_db):
        metrics = AnalyticsService(temp_db, clock=lambda: NOW).get_classification_analytics("30d")

        assert metrics.total_classifications == 0
        assert metrics.accuracy_rate == 0
        assert metrics.override_rate == 0
        assert metrics.end_date == END
        assert metrics.start_date == START

    def test_reads_both_ledger_tables(self, temp_db, payroll_category):
        ledger = ClassificationLedger(temp_db)
        ledger.log_classification(accepted(category_id=payroll_category.id))
        ledger.log_classification(accepted(category_id=payroll_category.id))
        ledger.log_manual_override(overridden(category_id=payroll_category.id))
        service = AnalyticsService(temp_db, clock=lambda: NOW)

        metrics = service.get_classification_analytics("7d")

        assert metrics.total_classifications == 3
        assert metrics.manual_overrides == 1
        assert metrics.category_accuracy[0].category_name == "Payroll"
        assert len(metrics.daily_stats) == 7

    def test_window_excludes_older_entries(self, temp_db):
        ledger = ClassificationLedger(temp_db)
        ledger.log_classification(accepted(day=END - timedelta(days=10)))
        ledger.log_classification(accepted(day=END))
        service = AnalyticsService(temp_db, clock=lambda: NOW)

        assert service.get_classification_analytics("7d").total_classifications == 1
        assert service.get_classification_analytics("30d").total_classifications == 2

    def test_repeated_calls_are_identical(self, temp_db):
        ledger = ClassificationLedger(temp_db)
        ledger.log_classification(accepted())
        ledger.log_manual_override(overridden())
        service = AnalyticsService(temp_db, clock=lambda: NOW)

        assert service.get_classification_analytics("30d") == service.get_classification_analytics("30d")
