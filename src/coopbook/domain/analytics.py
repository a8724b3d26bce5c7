"""Accuracy analytics over the classification ledger."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, UTC
from typing import Callable, Iterable, Mapping, Optional

from coopbook.database.base import Database
from coopbook.domain.entities import (
    CategoryAccuracy,
    ClassificationAnalytics,
    ClassificationLogEntry,
    ConfidenceBucket,
    DailyStat,
    ManualOverrideLogEntry,
    PatternPerformance,
)
from coopbook.domain.ledger import utc_now

TIME_RANGE_DAYS = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "last_30_days": 30,
}
DEFAULT_WINDOW_DAYS = 30

CONFIDENCE_BUCKETS = (
    (0.0, 20.0),
    (20.0, 40.0),
    (40.0, 60.0),
    (60.0, 80.0),
    (80.0, 100.0),
)

UNCLASSIFIED_NAME = "Unclassified"


@dataclass(frozen=True)
class AlertPolicy:
    """Dashboard alert thresholds, in percent."""

    min_accuracy_rate: float = 80.0
    max_override_rate: float = 20.0


DEFAULT_ALERT_POLICY = AlertPolicy()


@dataclass(frozen=True)
class LedgerOutcome:
    """A ledger row reduced to what the metrics need."""

    timestamp: datetime
    suggested_category_id: Optional[int]
    confidence_score: float
    pattern_matched: Optional[str]
    is_override: bool

    @property
    def is_accurate(self) -> bool:
        return not self.is_override


def window_days(time_range: Optional[str]) -> int:
    """Return the number of days a time-range label covers.

    Unknown labels fall back to 30 days.
    """
    if time_range is None:
        return DEFAULT_WINDOW_DAYS
    return TIME_RANGE_DAYS.get(time_range.strip().lower(), DEFAULT_WINDOW_DAYS)


def window_bounds(days: int, today: date) -> tuple[date, date]:
    """Return the first and last calendar day of a window ending ``today``."""
    return today - timedelta(days=days - 1), today


def rate(part: int, whole: int) -> float:
    """Return ``part / whole`` in percent, 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0.0
    return part / whole * 100


def to_outcomes(
    classification_logs: Iterable[ClassificationLogEntry],
    override_logs: Iterable[ManualOverrideLogEntry],
) -> list[LedgerOutcome]:
    """Merge both ledger tables into one list of outcomes."""
    outcomes = [
        LedgerOutcome(
            timestamp=entry.timestamp,
            suggested_category_id=entry.suggested_category_id,
            confidence_score=entry.confidence_score,
            pattern_matched=entry.pattern_matched,
            is_override=entry.is_manual_override,
        )
        for entry in classification_logs
    ]
    outcomes.extend(
        LedgerOutcome(
            timestamp=entry.timestamp,
            suggested_category_id=entry.original_category_id,
            confidence_score=entry.confidence_score,
            pattern_matched=entry.pattern_matched,
            is_override=True,
        )
        for entry in override_logs
    )
    return outcomes


def _utc_day(timestamp: datetime) -> date:
    if timestamp.tzinfo is None:
        return timestamp.date()
    return timestamp.astimezone(UTC).date()


def daily_stats(outcomes: list[LedgerOutcome], start: date, end: date) -> tuple[DailyStat, ...]:
    """One row per calendar day from ``start`` to ``end``, oldest first."""
    counts: dict[date, list[int]] = defaultdict(lambda: [0, 0, 0])
    for outcome in outcomes:
        row = counts[_utc_day(outcome.timestamp)]
        row[0] += 1
        if outcome.is_accurate:
            row[1] += 1
        else:
            row[2] += 1

    stats = []
    day = start
    while day <= end:
        total, accurate, overrides = counts.get(day, (0, 0, 0))
        stats.append(
            DailyStat(
                day=day,
                classifications=total,
                accurate=accurate,
                overrides=overrides,
                accuracy_rate=rate(accurate, total),
            )
        )
        day += timedelta(days=1)
    return tuple(stats)


def category_accuracy(
    outcomes: list[LedgerOutcome], category_names: Mapping[int, str]
) -> tuple[CategoryAccuracy, ...]:
    """Suggestions per suggested category and how many were kept.

    Ordering carries no meaning; rows come sorted by category ID for
    reproducible output.
    """
    totals: dict[Optional[int], list[int]] = defaultdict(lambda: [0, 0])
    for outcome in outcomes:
        row = totals[outcome.suggested_category_id]
        row[0] += 1
        if outcome.is_accurate:
            row[1] += 1

    rows = []
    for category_id in sorted(totals, key=lambda c: (c is None, c or 0)):
        total, accurate = totals[category_id]
        if category_id is None:
            name = UNCLASSIFIED_NAME
        else:
            name = category_names.get(category_id, f"Category {category_id}")
        rows.append(
            CategoryAccuracy(
                category_id=category_id,
                category_name=name,
                total_suggestions=total,
                accurate_suggestions=accurate,
                accuracy_rate=rate(accurate, total),
            )
        )
    return tuple(rows)


def pattern_performance(outcomes: list[LedgerOutcome]) -> tuple[PatternPerformance, ...]:
    """Usage and accuracy per pattern, most used first."""
    usage: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    for outcome in outcomes:
        if outcome.pattern_matched is None:
            continue
        row = usage[outcome.pattern_matched]
        row[0] += 1
        if outcome.is_accurate:
            row[1] += 1

    rows = [
        PatternPerformance(
            pattern_name=name,
            usage_count=used,
            accurate_count=accurate,
            accuracy_rate=rate(accurate, used),
        )
        for name, (used, accurate) in usage.items()
    ]
    rows.sort(key=lambda r: (-r.usage_count, r.pattern_name))
    return tuple(rows)


def _bucket_index(score: float) -> int:
    for index, (lower, upper) in enumerate(CONFIDENCE_BUCKETS):
        if lower <= score < upper:
            return index
    return 0 if score < CONFIDENCE_BUCKETS[0][0] else len(CONFIDENCE_BUCKETS) - 1


def confidence_distribution(outcomes: list[LedgerOutcome]) -> tuple[ConfidenceBucket, ...]:
    """Entries per confidence bucket with the accuracy seen in each.

    Lower bounds are inclusive; the top bucket also holds 100.
    """
    counts = [[0, 0] for _ in CONFIDENCE_BUCKETS]
    for outcome in outcomes:
        row = counts[_bucket_index(outcome.confidence_score)]
        row[0] += 1
        if outcome.is_accurate:
            row[1] += 1

    return tuple(
        ConfidenceBucket(
            label=f"{lower:g}-{upper:g}",
            lower=lower,
            upper=upper,
            count=count,
            accuracy_rate=rate(accurate, count),
        )
        for (lower, upper), (count, accurate) in zip(CONFIDENCE_BUCKETS, counts)
    )


def performance_alerts(
    total: int, accuracy: float, overrides: float, policy: AlertPolicy
) -> tuple[str, ...]:
    """Alerts for the monitoring dashboard. None while the ledger is empty."""
    if total == 0:
        return ()
    alerts = []
    if accuracy < policy.min_accuracy_rate:
        alerts.append(
            f"Accuracy rate {accuracy:.1f}% is below {policy.min_accuracy_rate:g}%"
        )
    if overrides > policy.max_override_rate:
        alerts.append(
            f"Override rate {overrides:.1f}% is above {policy.max_override_rate:g}%"
        )
    return tuple(alerts)


def build_analytics(
    classification_logs: Iterable[ClassificationLogEntry],
    override_logs: Iterable[ManualOverrideLogEntry],
    start: date,
    end: date,
    category_names: Optional[Mapping[int, str]] = None,
    alert_policy: AlertPolicy = DEFAULT_ALERT_POLICY,
) -> ClassificationAnalytics:
    """Reduce ledger rows to window metrics.

    Rows whose UTC day falls outside ``start..end`` are ignored. Every rate
    is 0 when its denominator is 0.
    """
    outcomes = [
        outcome
        for outcome in to_outcomes(classification_logs, override_logs)
        if start <= _utc_day(outcome.timestamp) <= end
    ]

    total = len(outcomes)
    accurate = sum(1 for o in outcomes if o.is_accurate)
    overrides = total - accurate
    accuracy_rate = rate(accurate, total)
    # Complement of the accuracy rate so the pair sums to exactly 100
    override_rate = 100.0 - accuracy_rate if total else 0.0
    avg_confidence = sum(o.confidence_score for o in outcomes) / total if total else 0.0

    return ClassificationAnalytics(
        start_date=start,
        end_date=end,
        total_classifications=total,
        accurate_classifications=accurate,
        accuracy_rate=accuracy_rate,
        manual_overrides=overrides,
        override_rate=override_rate,
        avg_confidence_score=avg_confidence,
        daily_stats=daily_stats(outcomes, start, end),
        category_accuracy=category_accuracy(outcomes, category_names or {}),
        top_patterns=pattern_performance(outcomes),
        confidence_distribution=confidence_distribution(outcomes),
        alerts=performance_alerts(total, accuracy_rate, override_rate, alert_policy),
    )


class AnalyticsService:
    """Service that summarizes the ledger for the monitoring dashboard."""

    def __init__(
        self,
        db: Database,
        alert_policy: AlertPolicy = DEFAULT_ALERT_POLICY,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize analytics service.

        Args:
            db: Database instance
            alert_policy: Dashboard alert thresholds
            clock: Source of "now"; the window ends on its UTC day
        """
        self.db = db
        self.alert_policy = alert_policy
        self.clock = clock

    def get_classification_analytics(self, time_range: Optional[str] = "30d") -> ClassificationAnalytics:
        """Compute metrics for a window such as ``"7d"``, ``"30d"`` or ``"90d"``.

        Raises:
            LedgerError: If the ledger cannot be read
        """
        today = _utc_day(self.clock())
        start, end = window_bounds(window_days(time_range), today)
        since = datetime.combine(start, time.min, tzinfo=UTC)
        until = datetime.combine(end, time.max, tzinfo=UTC)

        classification_logs = self.db.list_classification_logs(since=since, until=until)
        override_logs = self.db.list_manual_override_logs(since=since, until=until)
        category_names = {c.id: c.name for c in self.db.list_categories()}

        return build_analytics(
            classification_logs,
            override_logs,
            start,
            end,
            category_names=category_names,
            alert_policy=self.alert_policy,
        )
