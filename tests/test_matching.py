# tests/test_matching.py

"""
Tests for the match searcher.
"""

from datetime import date

from ledger_recon.core.index import CandidateIndex
from ledger_recon.core.matching import NO_CANDIDATES, NO_PASSING_CANDIDATE, find_match
from ledger_recon.models import MatchCriteria
from tests.helpers.factories import make_ledger_txn, make_statement_txn

FIRST_FIT = MatchCriteria(selection="first_fit")
BEST_FIT = MatchCriteria(selection="best_fit")


# ============================================
# Basic search
# ============================================

class TestFindMatch:
    """Test probing the index for one ledger record."""

    def test_finds_candidate_within_window(self):
        ledger = make_ledger_txn(txn_date=date(2025, 10, 16))
        statement = make_statement_txn(txn_date=date(2025, 10, 15), id="stm_1")

        outcome = find_match(ledger, CandidateIndex([statement]))

        assert outcome.matched is not None
        assert outcome.matched.id == "stm_1"
        assert outcome.evaluation.passed

    def test_no_candidates(self):
        ledger = make_ledger_txn()
        other = make_statement_txn(value="999.99")

        outcome = find_match(ledger, CandidateIndex([other]))

        assert outcome.matched is None
        assert outcome.reason == NO_CANDIDATES
        assert outcome.candidates_seen == 0

    def test_no_passing_candidate_reports_best_attempt(self):
        ledger = make_ledger_txn(name="John Doe")
        weak = make_statement_txn(id="weak", depositor="Zzz Qqq")
        closer = make_statement_txn(id="closer", depositor="John Smith")

        outcome = find_match(ledger, CandidateIndex([weak, closer]))

        assert outcome.matched is None
        assert outcome.reason == NO_PASSING_CANDIDATE
        assert outcome.attempted.id == "closer"
        assert outcome.candidates_seen == 2
        assert outcome.evaluation.failures

    def test_date_window_excludes_three_days(self):
        ledger = make_ledger_txn(txn_date=date(2025, 10, 16))
        statement = make_statement_txn(txn_date=date(2025, 10, 19))

        outcome = find_match(ledger, CandidateIndex([statement]))

        assert outcome.matched is None
        assert outcome.reason == NO_CANDIDATES

    def test_negative_scenario_six_days(self):
        ledger = make_ledger_txn("199.02", date(2025, 10, 14))
        statement = make_statement_txn("199.02", date(2025, 10, 20))

        assert find_match(ledger, CandidateIndex([statement])).matched is None

    def test_already_matched_candidate_ignored(self):
        ledger = make_ledger_txn()
        statement = make_statement_txn()
        index = CandidateIndex([statement])
        # Simulate a stale object flagged after indexing
        index.lookup(("2025-10-16", 10000, "zelle"))[0].matched_transaction_id = "someone_else"

        assert find_match(ledger, index).matched is None


# ============================================
# Selection policy
# ============================================

class TestSelectionPolicy:
    """First-fit vs best-fit when several candidates pass."""

    def _candidates(self):
        partial = make_statement_txn(id="partial", txn_date=date(2025, 10, 14), depositor="JOHN DOE JR")
        exact = make_statement_txn(id="exact", txn_date=date(2025, 10, 17), depositor="JOHN DOE")
        return [partial, exact]

    def test_first_fit_takes_encounter_order(self):
        ledger = make_ledger_txn(name="John Doe", txn_date=date(2025, 10, 16))

        outcome = find_match(ledger, CandidateIndex(self._candidates()), FIRST_FIT)

        assert outcome.matched.id == "partial"

    def test_best_fit_prefers_higher_name_score(self):
        ledger = make_ledger_txn(name="John Doe", txn_date=date(2025, 10, 16))

        outcome = find_match(ledger, CandidateIndex(self._candidates()), BEST_FIT)

        assert outcome.matched.id == "exact"
        assert outcome.evaluation.name_score == 100

    def test_best_fit_ties_prefer_closer_date(self):
        ledger = make_ledger_txn(name="John Doe", txn_date=date(2025, 10, 16))
        far = make_statement_txn(id="far", txn_date=date(2025, 10, 14))
        near = make_statement_txn(id="near", txn_date=date(2025, 10, 17))

        outcome = find_match(ledger, CandidateIndex([far, near]), BEST_FIT)

        assert outcome.matched.id == "near"

    def test_best_fit_full_tie_keeps_encounter_order(self):
        ledger = make_ledger_txn(name="John Doe")
        first = make_statement_txn(id="first")
        second = make_statement_txn(id="second", car="different tag")

        outcome = find_match(ledger, CandidateIndex([first, second]), BEST_FIT)

        assert outcome.matched.id == "first"

    def test_removed_candidate_not_offered_again(self):
        """A consumed statement cannot be matched to a second ledger record."""
        statement = make_statement_txn(id="only")
        index = CandidateIndex([statement])
        first_ledger = make_ledger_txn(id="led_a")
        second_ledger = make_ledger_txn(id="led_b")

        outcome = find_match(first_ledger, index)
        index.remove(outcome.matched.id)

        assert outcome.matched.id == "only"
        assert find_match(second_ledger, index).matched is None
