# ledger_recon/core/matching.py

"""
Match searcher.

Probes the candidate index across the date tolerance window for one ledger
record and picks the statement candidate to pair it with.
"""

from typing import Optional

from ledger_recon.core.criteria import DEFAULT_CRITERIA, evaluate_match
from ledger_recon.core.index import CandidateIndex
from ledger_recon.models import MatchCriteria, MatchEvaluation, SearchOutcome, Transaction

NO_CANDIDATES = "No candidates"
NO_PASSING_CANDIDATE = "No matching statement transaction found with all required criteria"


def find_match(
    ledger: Transaction,
    index: CandidateIndex,
    criteria: MatchCriteria = DEFAULT_CRITERIA,
) -> SearchOutcome:
    """
    Find the statement candidate for one ledger record.

    Candidates are visited day offset by day offset (-2..+2 with the default
    tolerance). With ``first_fit`` the first fully passing candidate wins.
    With ``best_fit`` every candidate in the window is evaluated and the
    passing one with the highest name score wins, then the smallest date
    gap, then encounter order.

    The caller must remove a matched candidate from the index before
    searching for the next ledger record.
    """
    best: Optional[tuple[Transaction, MatchEvaluation]] = None
    closest_miss: Optional[tuple[Transaction, MatchEvaluation]] = None
    seen = 0

    for candidate in index.candidates_for(ledger, criteria.day_offsets):
        if candidate.matched_transaction_id or candidate.id == ledger.id:
            continue
        seen += 1

        evaluation = evaluate_match(ledger, candidate, criteria)

        if evaluation.passed:
            if criteria.selection == "first_fit":
                return SearchOutcome(matched=candidate, evaluation=evaluation, candidates_seen=seen)
            if best is None or _fit_rank(evaluation) > _fit_rank(best[1]):
                best = (candidate, evaluation)
        elif closest_miss is None or _miss_rank(evaluation) > _miss_rank(closest_miss[1]):
            closest_miss = (candidate, evaluation)

    if best is not None:
        return SearchOutcome(matched=best[0], evaluation=best[1], candidates_seen=seen)

    if closest_miss is not None:
        candidate, evaluation = closest_miss
        return SearchOutcome(
            evaluation=evaluation,
            attempted=candidate,
            candidates_seen=seen,
            reason=NO_PASSING_CANDIDATE,
        )

    return SearchOutcome(candidates_seen=0, reason=NO_CANDIDATES)


def _fit_rank(evaluation: MatchEvaluation) -> tuple[int, int]:
    # Strictly greater wins, so ties keep the earlier candidate
    return (evaluation.name_score, -(evaluation.date_difference_days or 0))


def _miss_rank(evaluation: MatchEvaluation) -> tuple[int, int]:
    return (-len(evaluation.failures), evaluation.name_score)
