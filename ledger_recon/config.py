# ledger_recon/config.py

from datetime import date
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from ledger_recon.models.match import MatchCriteria

# PostgREST max-rows on a default Supabase project. A larger page comes back
# capped, looks like the last page, and the fetch stops early.
POSTGREST_MAX_ROWS = 1000


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Ledger Recon API"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Supabase
    supabase_url: str
    supabase_service_role_key: str
    transactions_table: str = "transactions"
    transaction_tables: list[str] = ["transactions", "kingdom_transactions"]
    import_history_table: str = "import_history"

    # Storage batching
    fetch_page_size: int = Field(default=1000, gt=0, le=POSTGREST_MAX_ROWS)
    commit_batch_size: int = Field(default=50, gt=0)
    insert_batch_size: int = Field(default=500, gt=0)

    # Matching config
    min_transaction_date: Optional[date] = date(2024, 5, 1)
    date_tolerance_days: int = 2
    name_similarity_threshold: float = 0.5
    match_selection: Literal["best_fit", "first_fit"] = "best_fit"
    progress_interval: int = 500

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @model_validator(mode="after")
    def _default_table_is_known(self) -> "Settings":
        if self.transactions_table not in self.transaction_tables:
            raise ValueError(
                f"transactions_table {self.transactions_table!r} is not one of {self.transaction_tables}"
            )
        return self

    def match_criteria(self) -> MatchCriteria:
        """Matching thresholds handed to the engine for one run."""
        return MatchCriteria(
            date_tolerance_days=self.date_tolerance_days,
            name_similarity_threshold=self.name_similarity_threshold,
            selection=self.match_selection,
        )


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
