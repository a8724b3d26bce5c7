"""Append-only log of classification outcomes."""

import logging
from dataclasses import replace
from datetime import datetime, UTC
from typing import Callable, Optional, Union

from coopbook.database.base import Database
from coopbook.domain.entities import (
    ClassificationLogEntry,
    ClassificationResult,
    ManualOverrideLogEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_OVERRIDE_REASON = "Manual override by user"

LedgerEntry = Union[ClassificationLogEntry, ManualOverrideLogEntry]


def utc_now() -> datetime:
    return datetime.now(UTC)


class ClassificationLedger:
    """Writes and reads classification and manual-override log entries.

    Entries are never updated or deleted. Duplicate writes are stored as
    they come; the aggregator counts each row once.
    """

    def __init__(self, db: Database, clock: Callable[[], datetime] = utc_now):
        """Initialize ledger.

        Args:
            db: Database instance
            clock: Source of entry timestamps
        """
        self.db = db
        self.clock = clock

    def log_classification(self, entry: ClassificationLogEntry) -> ClassificationLogEntry:
        """Append a classification entry.

        Raises:
            LedgerError: If the store rejects the write
        """
        entry_id = self.db.add_classification_log(entry)
        return replace(entry, id=entry_id)

    def log_manual_override(self, entry: ManualOverrideLogEntry) -> ManualOverrideLogEntry:
        """Append a manual-override entry.

        Raises:
            LedgerError: If the store rejects the write
        """
        entry_id = self.db.add_manual_override_log(entry)
        return replace(entry, id=entry_id)

    def record_submission(
        self,
        transaction_id: int,
        suggestion: ClassificationResult,
        final_category_id: int,
        reason: Optional[str] = None,
    ) -> LedgerEntry:
        """Log the outcome of a submitted transaction that was classified.

        Exactly one entry is written: a classification entry when the saved
        category is the suggested one, a manual-override entry otherwise
        (including when nothing was suggested).

        Args:
            transaction_id: ID of the saved transaction
            suggestion: Classifier output shown to the user
            final_category_id: Category the transaction was saved with
            reason: Override reason; a default is used when omitted

        Returns:
            The entry written, with its ID

        Raises:
            LedgerError: If the store rejects the write
        """
        timestamp = self.clock()
        if suggestion.has_suggestion and final_category_id == suggestion.suggested_category_id:
            logger.debug("Transaction %s kept suggested category %s", transaction_id, final_category_id)
            return self.log_classification(
                ClassificationLogEntry(
                    transaction_id=transaction_id,
                    suggested_category_id=suggestion.suggested_category_id,
                    actual_category_id=final_category_id,
                    confidence_score=suggestion.confidence_score,
                    pattern_matched=suggestion.pattern_matched,
                    is_manual_override=False,
                    timestamp=timestamp,
                )
            )

        logger.debug(
            "Transaction %s overrode suggestion %s with %s",
            transaction_id,
            suggestion.suggested_category_id,
            final_category_id,
        )
        return self.log_manual_override(
            ManualOverrideLogEntry(
                transaction_id=transaction_id,
                original_category_id=suggestion.suggested_category_id,
                new_category_id=final_category_id,
                reason=reason or DEFAULT_OVERRIDE_REASON,
                timestamp=timestamp,
                confidence_score=suggestion.confidence_score,
                pattern_matched=suggestion.pattern_matched,
            )
        )

    def list_classification_logs(
        self, since: Optional[datetime] = None, until: Optional[datetime] = None
    ) -> list[ClassificationLogEntry]:
        """Read classification entries with ``since <= timestamp <= until``."""
        return self.db.list_classification_logs(since=since, until=until)

    def list_manual_override_logs(
        self, since: Optional[datetime] = None, until: Optional[datetime] = None
    ) -> list[ManualOverrideLogEntry]:
        """Read manual-override entries with ``since <= timestamp <= until``."""
        return self.db.list_manual_override_logs(since=since, until=until)
