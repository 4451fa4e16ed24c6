"""Multi-term search loader.

Each configured term is searched on its own, one after another. Hits from all
terms are merged, collapsed so that a post found by several terms appears
once (the first term that found it wins), ranked by a weighted relevance
score and cut to the configured maximum. A term whose search fails is logged
and skipped; the remaining terms still contribute.
"""

from __future__ import annotations

import functools
import math
from typing import Any, Dict, List, Optional

from hashnode_loader.core.config import SearchLoaderOptions
from hashnode_loader.core.data_models import PageResult, SearchAggregateItem
from hashnode_loader.core.deduplication import deduplicate_results
from hashnode_loader.core.error_recovery import PartialSearchResult, SearchTermError
from hashnode_loader.core.http_client import HashnodeClient, extract_connection
from hashnode_loader.core.pagination import flatten_paginated_results, paginate_results
from hashnode_loader.core.schemas import SearchResultSchema
from hashnode_loader.loaders.base import EPOCH, BaseHashnodeLoader, first_present, parse_datetime

PAGE_SIZE = 20
MAX_RESULTS_PER_TERM = 100

TITLE_MATCH_SCORE = 10
BRIEF_MATCH_SCORE = 5
REACTIONS_PER_POINT = 10
MAX_REACTION_SCORE = 3
VIEWS_PER_POINT = 1000
MAX_VIEWS_SCORE = 2


def calculate_relevance(post: Dict[str, Any], search_term: str) -> float:
    """Score how well ``post`` matches ``search_term``.

    A case-insensitive match in the title adds 10 and in the brief adds 5;
    reactions add one point per 10 (at most 3) and views one point per 1000
    (at most 2). The score is rounded half-up to one decimal.
    """
    term = search_term.lower()
    score = 0.0
    if term in (post.get("title") or "").lower():
        score += TITLE_MATCH_SCORE
    if term in (post.get("brief") or "").lower():
        score += BRIEF_MATCH_SCORE
    score += min((post.get("reactionCount") or 0) / REACTIONS_PER_POINT, MAX_REACTION_SCORE)
    score += min((post.get("views") or 0) / VIEWS_PER_POINT, MAX_VIEWS_SCORE)
    return math.floor(score * 10 + 0.5) / 10


def transform_search_result(item: SearchAggregateItem) -> Dict[str, Any]:
    """Map a scored search hit to the local search result shape."""
    post = item.source_item
    author = post.get("author") or {}
    cover = post.get("coverImage") or {}
    publication = post.get("publication")
    return {
        "id": post.get("id"),
        "title": post.get("title"),
        "brief": post.get("brief") or "",
        "slug": post.get("slug"),
        "url": post.get("url"),
        "search_term": item.search_term,
        "search_relevance": item.relevance_score,
        "published_at": parse_datetime(post.get("publishedAt"), EPOCH),
        "reaction_count": post.get("reactionCount") or 0,
        "views": post.get("views") or 0,
        "author": {
            "id": author.get("id"),
            "name": author.get("name"),
            "username": author.get("username"),
            "profile_picture": author.get("profilePicture") or "",
        },
        "cover_image": {"url": cover["url"]} if cover.get("url") else None,
        "publication": {"title": publication.get("title"), "url": publication.get("url")}
        if publication
        else None,
        "raw": {"cuid": post.get("cuid")},
    }


class SearchLoader(BaseHashnodeLoader):
    """Aggregates search results for several terms into one ranked collection."""

    collection = "search"
    schema = SearchResultSchema

    def __init__(self, options: SearchLoaderOptions, client: Optional[HashnodeClient] = None) -> None:
        super().__init__(options, client=client)
        self.options: SearchLoaderOptions = options
        self.last_report: Optional[PartialSearchResult] = None

    async def _fetch_search_page(self, term: str, cursor: Optional[str]) -> PageResult[SearchAggregateItem]:
        response = await self.fetch_with_retry(
            lambda: self.client.search_posts(term, first=PAGE_SIZE, after=cursor)
        )
        return PageResult.from_connection(
            extract_connection(response, "searchPostsOfPublication"),
            node_mapper=lambda node: SearchAggregateItem(
                source_item=node,
                search_term=term,
                relevance_score=calculate_relevance(node, term),
            ),
        )

    def _per_term_cap(self) -> int:
        max_results = self.options.max_results
        if max_results is None:
            return MAX_RESULTS_PER_TERM
        return min(max_results, MAX_RESULTS_PER_TERM)

    async def fetch_data(self) -> List[SearchAggregateItem]:
        """Search every term, then merge, collapse, rank and truncate.

        Returns:
            At most ``max_results`` hits, highest relevance first. Hits with
            equal scores keep the order in which they were found.
        """
        terms = list(self.options.search_terms)
        report = PartialSearchResult(terms=terms)
        self.last_report = report
        if not terms:
            self.logger.info("No search terms configured")
            report.mark_complete()
            return []

        collected: List[SearchAggregateItem] = []
        cap = self._per_term_cap()
        for term in terms:
            fetch_page = functools.partial(self._fetch_search_page, term)
            try:
                hits = await flatten_paginated_results(paginate_results(fetch_page, cap))
            except Exception as exc:
                self.logger.warning("Search for %r failed, skipping term: %s", term, exc)
                report.add_error(SearchTermError.from_exception(term, exc))
                continue
            self.logger.debug("Search for %r returned %d hits", term, len(hits))
            report.add_completed(term, len(hits))
            collected.extend(hits)

        unique = deduplicate_results(collected, key=lambda hit: hit.source_id)
        unique.sort(key=lambda hit: hit.relevance_score, reverse=True)
        if self.options.max_results is not None:
            unique = unique[: self.options.max_results]

        report.mark_complete()
        if report.terms_failed:
            self.logger.warning(
                "Search completed with %d of %d terms failed",
                len(report.terms_failed),
                len(terms),
            )
        return unique

    def transform_item(self, item: SearchAggregateItem) -> Dict[str, Any]:
        return transform_search_result(item)

    def generate_id(self, item: SearchAggregateItem) -> Optional[str]:
        post = item.source_item
        key = first_present(post.get("slug"), post.get("cuid"), post.get("id"))
        return f"{item.search_term}-{key}" if key else None
