"""Tests for the classification ledger."""

from datetime import datetime, timedelta, UTC

import pytest

from coopbook.domain.entities import (
    ClassificationLogEntry,
    ClassificationResult,
    ManualOverrideLogEntry,
)
from coopbook.domain.errors import LedgerError
from coopbook.domain.ledger import DEFAULT_OVERRIDE_REASON, ClassificationLedger

NOW = datetime(2025, 1, 28, 9, 30, tzinfo=UTC)


def suggestion(category_id=1, confidence=92.5, pattern="Payroll Pattern"):
    return ClassificationResult(
        suggested_category_id=category_id,
        confidence_score=confidence,
        reasoning="Matched pattern",
        pattern_id=1,
        pattern_matched=pattern,
    )


@pytest.fixture
def ledger(temp_db):
    return ClassificationLedger(temp_db, clock=lambda: NOW)


class TestRecordSubmission:
    """Exactly one ledger entry per classified submission."""

    def test_accepted_suggestion_logs_classification_only(self, ledger):
        entry = ledger.record_submission(10, suggestion(category_id=1), final_category_id=1)

        assert isinstance(entry, ClassificationLogEntry)
        assert entry.id is not None
        assert entry.is_manual_override is False
        assert entry.confidence_score == 92.5
        assert entry.pattern_matched == "Payroll Pattern"
        assert len(ledger.list_classification_logs()) == 1
        assert ledger.list_manual_override_logs() == []

    def test_changed_category_logs_override_only(self, ledger):
        entry = ledger.record_submission(
            11, suggestion(category_id=1), final_category_id=2, reason="Bonus, not salary"
        )

        assert isinstance(entry, ManualOverrideLogEntry)
        assert entry.original_category_id == 1
        assert entry.new_category_id == 2
        assert entry.reason == "Bonus, not salary"
        assert entry.confidence_score == 92.5
        assert ledger.list_classification_logs() == []
        assert len(ledger.list_manual_override_logs()) == 1

    def test_override_without_reason_gets_default(self, ledger):
        entry = ledger.record_submission(12, suggestion(), final_category_id=3)

        assert entry.reason == DEFAULT_OVERRIDE_REASON

    def test_no_suggestion_is_logged_as_override(self, ledger):
        nothing = ClassificationResult(
            suggested_category_id=None, confidence_score=0.0, reasoning="no pattern matched"
        )

        entry = ledger.record_submission(13, nothing, final_category_id=4)

        assert isinstance(entry, ManualOverrideLogEntry)
        assert entry.original_category_id is None
        assert entry.confidence_score == 0.0
        assert entry.pattern_matched is None


class TestStorage:
    """Tests for ledger persistence."""

    def test_timestamps_round_trip_as_utc(self, ledger):
        ledger.record_submission(1, suggestion(), final_category_id=1)

        [stored] = ledger.list_classification_logs()

        assert stored.timestamp == NOW
        assert stored.timestamp.tzinfo is not None

    def test_range_query_is_inclusive(self, temp_db):
        for hours in range(3):
            ClassificationLedger(temp_db, clock=lambda h=hours: NOW + timedelta(hours=h)).record_submission(
                hours, suggestion(), final_category_id=1
            )
        ledger = ClassificationLedger(temp_db)

        window = ledger.list_classification_logs(since=NOW, until=NOW + timedelta(hours=1))

        assert sorted(e.transaction_id for e in window) == [0, 1]

    def test_newest_first(self, temp_db):
        for hours in range(3):
            ClassificationLedger(temp_db, clock=lambda h=hours: NOW + timedelta(hours=h)).record_submission(
                hours, suggestion(), final_category_id=2
            )

        entries = ClassificationLedger(temp_db).list_manual_override_logs()

        assert [e.transaction_id for e in entries] == [2, 1, 0]

    def test_duplicate_entries_are_kept(self, ledger):
        ledger.record_submission(5, suggestion(), final_category_id=1)
        ledger.record_submission(5, suggestion(), final_category_id=1)

        assert len(ledger.list_classification_logs()) == 2

    def test_rejected_write_raises_ledger_error_and_writes_nothing(self, ledger):
        bad = ClassificationLogEntry(
            transaction_id=1,
            suggested_category_id=1,
            actual_category_id=1,
            confidence_score=150.0,
            pattern_matched="Payroll Pattern",
            is_manual_override=False,
            timestamp=NOW,
        )

        with pytest.raises(LedgerError, match="transaction 1"):
            ledger.log_classification(bad)

        assert ledger.list_classification_logs() == []
        # The store stays usable after the failed write
        ledger.record_submission(2, suggestion(), final_category_id=1)
        assert len(ledger.list_classification_logs()) == 1
