"""Deduplication utilities for merged result lists.

Items fetched through several paginations (one per tag or per search term)
can overlap. These helpers collapse them by identity, keeping the first
occurrence and the original encounter order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, TypeVar

from hashnode_loader.core.digest import calculate_digest

logger = logging.getLogger(__name__)

T = TypeVar("T")

KeyFunc = Callable[[Any], Optional[Hashable]]


def item_id(item: Dict[str, Any]) -> Optional[Hashable]:
    """Default identity: the item's ``id`` field."""
    return item.get("id")


class FirstSeenDeduplicator:
    """Collapses items sharing an identity, keeping the first one seen."""

    def __init__(self, key: KeyFunc = item_id) -> None:
        """Initialize the deduplicator.

        Args:
            key: Returns the identity of an item. Items whose identity is None
                fall back to their content digest, so that two unrelated items
                without ids are never merged.
        """
        self.key = key
        self.logger = logging.getLogger(self.__class__.__name__)

    def _identity(self, item: Any) -> Hashable:
        identity = self.key(item)
        if identity is None:
            return ("digest", calculate_digest(item))
        return identity

    def deduplicate(self, items: Iterable[T]) -> List[T]:
        """Remove later duplicates while preserving encounter order.

        Args:
            items: Items in encounter order

        Returns:
            First occurrence of each identity, in encounter order
        """
        seen = set()
        unique: List[T] = []
        total = 0
        for item in items:
            total += 1
            identity = self._identity(item)
            if identity in seen:
                continue
            seen.add(identity)
            unique.append(item)

        if total != len(unique):
            self.logger.debug("Deduplicated %d items to %d unique items", total, len(unique))
        return unique


def deduplicate_results(items: Iterable[T], key: KeyFunc = item_id) -> List[T]:
    """Convenience function for first-seen-wins deduplication.

    Args:
        items: Items to deduplicate
        key: Identity function (defaults to the ``id`` field)

    Returns:
        Deduplicated items in encounter order
    """
    return FirstSeenDeduplicator(key=key).deduplicate(items)


def merge_result_lists(*result_lists: Iterable[T], key: KeyFunc = item_id) -> List[T]:
    """Concatenate result lists and remove duplicates.

    Args:
        *result_lists: Lists to merge, earlier lists taking precedence
        key: Identity function

    Returns:
        Merged and deduplicated list
    """
    merged: List[T] = []
    for results in result_lists:
        merged.extend(results)
    return deduplicate_results(merged, key=key)
