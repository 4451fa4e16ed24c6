"""Cursor pagination over GraphQL connections.

``paginate_results`` turns a page-fetch callback into a lazy async sequence
of batches. Pages are requested strictly one after another; the consumer
controls how far iteration goes and can stop it at any time.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Awaitable, Callable, List, Optional, TypeVar

from hashnode_loader.core.data_models import PageResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

PageFetcher = Callable[[Optional[str]], Awaitable[PageResult[T]]]


async def paginate_results(
    fetch_page: PageFetcher[T],
    max_items: Optional[int] = None,
) -> AsyncIterator[List[T]]:
    """Yield successive batches of items until the connection is exhausted.

    Args:
        fetch_page: Coroutine function taking the cursor (None for the first
            page) and returning a ``PageResult``
        max_items: Upper bound on the total number of items yielded; the page
            that crosses it is truncated. None means unbounded.

    Yields:
        Non-empty lists of items, in page order

    Iteration stops on an empty page, when ``has_next_page`` is false, or as
    soon as ``max_items`` items have been yielded. Errors raised by
    ``fetch_page`` propagate to the consumer.
    """
    if max_items is not None and max_items <= 0:
        return

    cursor: Optional[str] = None
    total = 0
    page_number = 0

    while True:
        page = await fetch_page(cursor)
        page_number += 1
        items = list(page.items)
        if not items:
            logger.debug("Page %d is empty, stopping", page_number)
            return

        if max_items is not None and total + len(items) > max_items:
            items = items[: max_items - total]

        yield items
        total += len(items)
        logger.debug("Page %d yielded %d items (%d total)", page_number, len(items), total)

        if not page.page_info.has_next_page:
            return
        if max_items is not None and total >= max_items:
            return
        cursor = page.page_info.end_cursor


async def flatten_paginated_results(batches: AsyncIterator[List[T]]) -> List[T]:
    """Drain a batch sequence into one ordered list."""
    results: List[T] = []
    async for batch in batches:
        results.extend(batch)
    return results
