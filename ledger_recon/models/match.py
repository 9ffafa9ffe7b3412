# ledger_recon/models/match.py

from typing import Optional, Literal
from pydantic import BaseModel, Field

from ledger_recon.models.transaction import Transaction


# ============================================
# Match Criteria
# ============================================

SelectionPolicy = Literal["best_fit", "first_fit"]


class MatchCriteria(BaseModel):
    """Thresholds for the strict pass/fail match gates."""

    date_tolerance_days: int = Field(default=2, ge=0)
    value_epsilon: float = 0.01
    name_similarity_threshold: float = Field(default=0.5, ge=0, le=1)
    credit_card_marker: str = "credit card"
    selection: SelectionPolicy = "best_fit"

    @property
    def day_offsets(self) -> list[int]:
        return list(range(-self.date_tolerance_days, self.date_tolerance_days + 1))


# ============================================
# Evaluation
# ============================================

class MatchEvaluation(BaseModel):
    """Outcome of checking one ledger/statement pair against every gate."""

    passed: bool
    date_score: int = Field(ge=0, le=100, description="100 when within the date tolerance")
    value_score: int = Field(ge=0, le=100, description="100 when values agree to the cent")
    payment_method_score: int = Field(ge=0, le=100, description="100 when methods are equal")
    name_score: int = Field(ge=0, le=100, description="Best name similarity, in percent")
    name_check_skipped: bool = False
    date_difference_days: Optional[int] = None
    failures: list[str] = Field(default_factory=list, description="Human-readable failed gates")


MatchStatus = Literal["CORRECT", "INCORRECT"]


class MatchDetail(BaseModel):
    """Per-ledger-record diagnostic kept for every record in a run."""

    ledger_transaction: Transaction
    statement_transaction: Optional[Transaction] = None
    evaluation: Optional[MatchEvaluation] = None
    overall_status: MatchStatus
    failures: list[str] = Field(default_factory=list)


class MatchPair(BaseModel):
    """A ledger/statement pair waiting to be committed."""

    ledger_id: str
    statement_id: str


class SearchOutcome(BaseModel):
    """Result of probing the candidate index for one ledger record."""

    matched: Optional[Transaction] = None
    evaluation: Optional[MatchEvaluation] = None
    attempted: Optional[Transaction] = None
    candidates_seen: int = 0
    reason: Optional[str] = None
