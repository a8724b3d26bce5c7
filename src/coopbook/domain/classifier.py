"""Rule-based category suggestion for bank-transfer withdrawals.

A pattern is a candidate when it is active and its amount range contains the
amount; it matches when at least one of its keyword alternatives occurs in
the description (case-insensitive substring). Each match is scored from the
pattern's base confidence:

    score = base + keyword boost - edge penalty, clamped to 0..100

The keyword boost rewards several distinct alternatives hitting the same
description. The edge penalty applies when the amount sits in the outer
``edge_zone`` of the range on either side, growing linearly toward the
bound. More hits never lower a score and an amount nearer the midpoint never
lowers a score.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from coopbook.database.base import Database
from coopbook.domain.entities import (
    ClassificationResult,
    Pattern,
    PatternMatch,
    TransactionDraft,
)
from coopbook.domain.patterns import PatternStore, parse_keywords

logger = logging.getLogger(__name__)

NO_MATCH_REASONING = "no pattern matched"


@dataclass(frozen=True)
class ScoringPolicy:
    """Tunable scoring parameters."""

    keyword_boost: float = 5.0
    max_keyword_boost: float = 10.0
    edge_zone: float = 0.2
    max_edge_penalty: float = 10.0
    auto_apply_threshold: float = 80.0


DEFAULT_SCORING_POLICY = ScoringPolicy()


@dataclass(frozen=True)
class _ScoredPattern:
    pattern: Pattern
    keywords: tuple[str, ...]
    centrality: float
    boost: float
    penalty: float
    score: float


def _coerce_amount(value) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def matched_keywords(pattern: Pattern, description: str) -> tuple[str, ...]:
    """Return the pattern's keyword alternatives found in ``description``."""
    text = description.lower()
    return tuple(k for k in parse_keywords(pattern.description_pattern) if k in text)


def range_centrality(amount: Decimal, pattern: Pattern) -> float:
    """Return how centered ``amount`` is in the pattern's range.

    1.0 at the midpoint, 0.0 on a bound. Open or single-value ranges count
    as fully centered.
    """
    low, high = pattern.amount_range_min, pattern.amount_range_max
    if low is None or high is None or high == low:
        return 1.0
    half_width = (high - low) / 2
    nearest = min(amount - low, high - amount)
    return max(0.0, min(1.0, float(nearest / half_width)))


def score_pattern(
    pattern: Pattern,
    keywords: tuple[str, ...],
    centrality: float,
    policy: ScoringPolicy = DEFAULT_SCORING_POLICY,
) -> tuple[float, float, float]:
    """Return ``(score, boost, penalty)`` for a matching pattern."""
    boost = min(policy.max_keyword_boost, policy.keyword_boost * max(0, len(keywords) - 1))

    penalty = 0.0
    if policy.edge_zone > 0 and centrality < policy.edge_zone:
        penalty = policy.max_edge_penalty * (1 - centrality / policy.edge_zone)

    score = max(0.0, min(100.0, pattern.confidence_score + boost - penalty))
    return round(score, 2), round(boost, 2), round(penalty, 2)


def _format_bound(value: Optional[Decimal]) -> str:
    return "open" if value is None else f"{value:,}"


def _explain(best: _ScoredPattern, amount: Decimal, runner_up_count: int) -> str:
    pattern = best.pattern
    keywords = ", ".join(f"'{k}'" for k in best.keywords)
    parts = [
        f"Matched pattern '{pattern.name}' ({pattern.frequency.value}) on keyword(s) {keywords}",
        (
            f"amount {amount:,} is within {_format_bound(pattern.amount_range_min)}"
            f"-{_format_bound(pattern.amount_range_max)} "
            f"(centrality {best.centrality:.2f})"
        ),
        (
            f"base {pattern.confidence_score} + keyword boost {best.boost:g}"
            f" - edge penalty {best.penalty:g} = {best.score:g}"
        ),
    ]
    if runner_up_count:
        parts.append(f"{runner_up_count} other pattern(s) also matched")
    return "; ".join(parts)


def classify(
    patterns: Union[PatternStore, Iterable[Pattern]],
    draft: TransactionDraft,
    policy: ScoringPolicy = DEFAULT_SCORING_POLICY,
) -> ClassificationResult:
    """Suggest a category for a withdrawal.

    Pure function of the pattern snapshot and the draft. Malformed patterns
    are skipped when the snapshot is built.

    Args:
        patterns: Pattern snapshot, or patterns to build one from
        draft: Transaction being entered
        policy: Scoring parameters

    Returns:
        ClassificationResult; with no match the suggestion is None and the
        confidence is 0
    """
    store = patterns if isinstance(patterns, PatternStore) else PatternStore(patterns)

    amount = _coerce_amount(draft.amount)
    if amount is None:
        return ClassificationResult(
            suggested_category_id=None,
            confidence_score=0.0,
            reasoning=f"{NO_MATCH_REASONING}: amount is missing or invalid",
        )

    description = draft.description or ""
    scored: list[_ScoredPattern] = []
    for pattern in store.candidates_for(amount):
        keywords = matched_keywords(pattern, description)
        if not keywords:
            continue
        centrality = range_centrality(amount, pattern)
        score, boost, penalty = score_pattern(pattern, keywords, centrality, policy)
        scored.append(_ScoredPattern(pattern, keywords, centrality, boost, penalty, score))

    if not scored:
        return ClassificationResult(
            suggested_category_id=None,
            confidence_score=0.0,
            reasoning=NO_MATCH_REASONING,
        )

    # Ties go to the most recently edited pattern, then the newest one.
    scored.sort(
        key=lambda s: (s.score, s.pattern.updated_at, s.pattern.id),
        reverse=True,
    )
    best = scored[0]
    logger.debug(
        "Classified amount %s as category %s via pattern %s (score %s)",
        amount,
        best.pattern.category_id,
        best.pattern.name,
        best.score,
    )

    return ClassificationResult(
        suggested_category_id=best.pattern.category_id,
        confidence_score=best.score,
        reasoning=_explain(best, amount, len(scored) - 1),
        pattern_id=best.pattern.id,
        pattern_matched=best.pattern.name,
        pattern_matches=tuple(
            PatternMatch(
                pattern_id=s.pattern.id,
                pattern_name=s.pattern.name,
                category_id=s.pattern.category_id,
                keywords=s.keywords,
                score=s.score,
            )
            for s in scored
        ),
    )


class ClassificationService:
    """Service that classifies drafts against the stored patterns."""

    def __init__(self, db: Database, policy: ScoringPolicy = DEFAULT_SCORING_POLICY):
        """Initialize classification service.

        Args:
            db: Database instance
            policy: Scoring parameters
        """
        self.db = db
        self.policy = policy

    def load_patterns(self) -> PatternStore:
        """Load a fresh pattern snapshot."""
        return PatternStore.load(self.db)

    def classify(self, draft: TransactionDraft) -> ClassificationResult:
        """Classify a draft against a snapshot taken for this call."""
        return classify(self.load_patterns(), draft, self.policy)
