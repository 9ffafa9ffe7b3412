# ledger_recon/core/criteria.py

"""
Match evaluation for one ledger/statement pair.

Four hard gates, all of which must pass:
- Date:           same day or within the date tolerance (default ±2 days)
- Value:          |value| equal to the cent
- Payment method: case-insensitive, trimmed equality
- Name:           best {name, depositor} similarity >= threshold,
                  skipped when either side is a credit card payment
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from ledger_recon.core.normalizers import normalize_method, normalize_name
from ledger_recon.core.similarity import dice_coefficient
from ledger_recon.models import MatchCriteria, MatchEvaluation, Transaction

DEFAULT_CRITERIA = MatchCriteria()


def evaluate_match(
    ledger: Transaction,
    statement: Transaction,
    criteria: MatchCriteria = DEFAULT_CRITERIA,
) -> MatchEvaluation:
    """
    Check a ledger record against a statement candidate.

    Returns a MatchEvaluation with per-gate scores and the reasons for every
    failed gate.
    """
    failures: list[str] = []

    # ============================================
    # Date
    # ============================================
    days_diff = abs((ledger.date - statement.date).days)
    date_score = _score_date(ledger.date, statement.date, criteria.date_tolerance_days)
    if date_score != 100:
        failures.append(
            f"Date mismatch: {ledger.date.isoformat()} vs {statement.date.isoformat()} "
            f"(Required: within ±{criteria.date_tolerance_days} days, Got: {days_diff} days apart)"
        )

    # ============================================
    # Value
    # ============================================
    value_score = _score_value(ledger.value, statement.value, criteria.value_epsilon)
    if value_score != 100:
        failures.append(
            f"Value mismatch: {ledger.value} vs {statement.value} (Required: exact match)"
        )

    # ============================================
    # Payment method
    # ============================================
    method_score = _score_payment_method(ledger.payment_method, statement.payment_method)
    if method_score != 100:
        failures.append(
            f"Payment method mismatch: {ledger.payment_method} vs {statement.payment_method} "
            f"(Required: exact match)"
        )

    # ============================================
    # Name
    # ============================================
    name_score = _score_name(ledger, statement)
    skip_name = is_credit_card(ledger.payment_method, criteria) or is_credit_card(
        statement.payment_method, criteria
    )
    required = round(criteria.name_similarity_threshold * 100)
    if not skip_name and name_score < required:
        failures.append(f"Name similarity too low: (Required: ≥{required}%, Got: {name_score}%)")

    return MatchEvaluation(
        passed=not failures,
        date_score=date_score,
        value_score=value_score,
        payment_method_score=method_score,
        name_score=name_score,
        name_check_skipped=skip_name,
        date_difference_days=days_diff,
        failures=failures,
    )


def is_credit_card(method: Optional[str], criteria: MatchCriteria = DEFAULT_CRITERIA) -> bool:
    return criteria.credit_card_marker in normalize_method(method)


def name_similarity(ledger: Transaction, statement: Transaction) -> float:
    """Best similarity across every {name, depositor} combination, 0.0 to 1.0."""
    left = [n for n in (ledger.name, ledger.depositor) if n]
    right = [n for n in (statement.name, statement.depositor) if n]

    best = 0.0
    for n1 in left:
        for n2 in right:
            best = max(best, dice_coefficient(normalize_name(n1), normalize_name(n2)))
    return best


def _score_date(d1: date, d2: date, tolerance_days: int) -> int:
    return 100 if abs((d1 - d2).days) <= tolerance_days else 0


def _score_value(v1: Decimal, v2: Decimal, epsilon: float) -> int:
    # Statements carry debits with either sign, compare magnitudes
    return 100 if abs(abs(v1) - abs(v2)) < Decimal(str(epsilon)) else 0


def _score_payment_method(m1: Optional[str], m2: Optional[str]) -> int:
    if not m1 or not m2:
        return 0
    return 100 if normalize_method(m1) == normalize_method(m2) else 0


def _score_name(ledger: Transaction, statement: Transaction) -> int:
    return round(name_similarity(ledger, statement) * 100)
