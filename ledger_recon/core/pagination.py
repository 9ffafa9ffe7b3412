# ledger_recon/core/pagination.py

import logging
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def collect_pages(
    fetch_page: Callable[[int, int], Awaitable[list[T]]],
    page_size: int,
    label: str = "records",
) -> list[T]:
    """
    Call ``fetch_page(offset, limit)`` until a short page confirms the end.

    Storage APIs cap result sizes (Supabase defaults to 1000 rows), so a
    single query silently truncates large tables. ``page_size`` must not
    exceed that cap: a capped page is indistinguishable from the last one.
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    rows: list[T] = []
    offset = 0

    while True:
        page = await fetch_page(offset, page_size)
        rows.extend(page)
        logger.debug("Fetched %d %s (total: %d)", len(page), label, len(rows))

        if len(page) < page_size:
            break
        offset += page_size

    return rows
