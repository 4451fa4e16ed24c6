"""Asynchronous GraphQL client for the Hashnode public API.

This module wraps the `httpx` asynchronous client. It centralises the
endpoint, headers, timeout and response caching, and normalises every failure
into the ``LoaderError`` taxonomy so callers never see raw ``httpx``
exceptions. It performs no retries itself; retry policy belongs to callers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx

from hashnode_loader import __version__
from hashnode_loader.core import queries
from hashnode_loader.core.cache import DEFAULT_TTL_SECONDS, ResponseCache, make_cache_key
from hashnode_loader.core.config import DEFAULT_ENDPOINT
from hashnode_loader.core.error_recovery import (
    AuthenticationRequiredError,
    GraphQLError,
    HttpError,
    ProtocolError,
    QueryTimeoutError,
    TransportError,
)

DEFAULT_TIMEOUT_MS = 30000


class HashnodeClient:
    """GraphQL client bound to a single Hashnode publication."""

    DEFAULT_USER_AGENT = f"hashnode-loader/{__version__} (+python-httpx)"

    def __init__(
        self,
        publication_host: str,
        token: Optional[str] = None,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        cache: bool = True,
        cache_ttl: int = DEFAULT_TTL_SECONDS,
        response_cache: Optional[ResponseCache] = None,
    ) -> None:
        """Initialize the client.

        Parameters
        ----------
        publication_host : str
            Host of the publication, e.g. ``"blog.example.com"``. Also
            namespaces the response cache keys.
        token : str, optional
            Personal access token, sent as the ``Authorization`` header.
        endpoint : str
            GraphQL endpoint URL.
        timeout_ms : int
            Upper bound for one request, in milliseconds.
        cache : bool
            Whether responses are cached.
        cache_ttl : int
            TTL in seconds for cached responses.
        response_cache : ResponseCache, optional
            Cache instance to use instead of a fresh one.
        """
        if not publication_host:
            raise ValueError("publication_host cannot be empty")
        self.publication_host = publication_host
        self.token = token or None
        self.endpoint = endpoint or DEFAULT_ENDPOINT
        self.timeout_ms = timeout_ms
        self.cache_ttl = cache_ttl
        if cache:
            self.cache: Optional[ResponseCache] = (
                response_cache if response_cache is not None else ResponseCache(default_ttl=cache_ttl)
            )
        else:
            self.cache = None
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logging.getLogger(self.__class__.__name__)
        self._request_count = 0
        self._total_request_time = 0.0

    async def __aenter__(self) -> "HashnodeClient":
        self._client = httpx.AsyncClient(timeout=self.timeout_ms / 1000)
        self.logger.debug("GraphQL client opened for %s (timeout=%dms)", self.publication_host, self.timeout_ms)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            if self._request_count > 0:
                avg_time = self._total_request_time / self._request_count
                self.logger.debug(
                    "GraphQL client closed. Requests: %d, Avg time: %.2fs",
                    self._request_count,
                    avg_time,
                )
        self._client = None

    def _build_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.DEFAULT_USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = self.token
        return headers

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        headers = self._build_headers()
        if self._client is not None:
            return await self._client.post(self.endpoint, json=payload, headers=headers)
        async with httpx.AsyncClient(timeout=self.timeout_ms / 1000) as client:
            return await client.post(self.endpoint, json=payload, headers=headers)

    async def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute one GraphQL query and return its ``data`` object.

        Parameters
        ----------
        query : str
            GraphQL query text.
        variables : dict, optional
            Query variables.

        Returns
        -------
        dict
            The response's ``data`` object, possibly served from cache.

        Raises
        ------
        QueryTimeoutError
            The request exceeded ``timeout_ms``.
        TransportError
            The request could not be sent (``NETWORK_ERROR``).
        HttpError
            The endpoint answered with a non-2xx status.
        GraphQLError
            The response carried top-level errors.
        ProtocolError
            The response had no ``data`` or was not JSON.
        """
        variables = variables or {}
        cache_key = None
        if self.cache is not None:
            cache_key = make_cache_key(self.publication_host, query, variables)
            cached = self.cache.get(cache_key)
            if cached is not None:
                self.logger.debug("Cache hit for %s", cache_key)
                return cached

        payload = {"query": query, "variables": variables}
        start_time = time.time()
        try:
            response = await asyncio.wait_for(self._post(payload), timeout=self.timeout_ms / 1000)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            self.logger.warning("GraphQL request to %s timed out after %dms", self.endpoint, self.timeout_ms)
            raise QueryTimeoutError(self.timeout_ms) from exc
        except httpx.RequestError as exc:
            self.logger.warning("GraphQL request to %s failed: %s", self.endpoint, exc)
            raise TransportError(f"Network error: {exc}") from exc
        finally:
            self._request_count += 1
            self._total_request_time += time.time() - start_time

        if not response.is_success:
            raise HttpError(response.status_code, response.reason_phrase)

        try:
            body = response.json()
        except ValueError as exc:
            raise ProtocolError("Invalid JSON in GraphQL response") from exc
        if not isinstance(body, dict):
            raise ProtocolError("Unexpected GraphQL response shape")

        errors = body.get("errors")
        if errors:
            messages = [
                e.get("message", "Unknown error") if isinstance(e, dict) else str(e) for e in errors
            ]
            raise GraphQLError(messages)

        data = body.get("data")
        if data is None:
            raise ProtocolError("No data returned from GraphQL query")

        if cache_key is not None:
            self.cache.set(cache_key, data, self.cache_ttl)
        return data

    async def get_posts(
        self,
        first: int = 20,
        after: Optional[str] = None,
        include_comments: bool = False,
        include_co_authors: bool = False,
        include_table_of_contents: bool = False,
        include_publication_meta: bool = False,
        max_comments: int = 25,
    ) -> Dict[str, Any]:
        """Fetch one page of the publication's posts."""
        query = queries.build_posts_query(
            include_comments=include_comments,
            max_comments=max_comments,
            include_co_authors=include_co_authors,
            include_table_of_contents=include_table_of_contents,
            include_publication_meta=include_publication_meta,
        )
        return await self.query(query, {"host": self.publication_host, "first": first, "after": after})

    async def get_post(
        self,
        slug: str,
        include_comments: bool = False,
        include_co_authors: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """Fetch a single post by slug, or None when it does not exist."""
        query = queries.build_single_post_query(include_comments, include_co_authors)
        result = await self.query(query, {"host": self.publication_host, "slug": slug})
        return (result.get("publication") or {}).get("post")

    async def get_posts_by_tag(self, tag_slug: str, first: int = 20, after: Optional[str] = None) -> Dict[str, Any]:
        """Fetch one page of the publication's posts carrying ``tag_slug``."""
        return await self.query(
            queries.POSTS_BY_TAG_QUERY,
            {"host": self.publication_host, "tagSlug": tag_slug, "first": first, "after": after},
        )

    async def search_posts(self, term: str, first: int = 20, after: Optional[str] = None) -> Dict[str, Any]:
        """Fetch one page of search results for ``term`` within the publication."""
        return await self.query(
            queries.SEARCH_POSTS_QUERY,
            {
                "first": first,
                "after": after,
                "filter": {"query": term, "publicationId": self.publication_host},
            },
        )

    async def get_publication(self) -> Optional[Dict[str, Any]]:
        """Fetch publication metadata."""
        result = await self.query(queries.PUBLICATION_QUERY, {"host": self.publication_host})
        return result.get("publication")

    async def get_series(self, first: int = 50, after: Optional[str] = None, include_posts: bool = False) -> Dict[str, Any]:
        """Fetch one page of the publication's series."""
        return await self.query(
            queries.build_series_query(include_posts),
            {"host": self.publication_host, "first": first, "after": after},
        )

    def _require_token(self) -> None:
        if not self.token:
            raise AuthenticationRequiredError()

    async def get_drafts(self, first: int = 20, after: Optional[str] = None) -> Dict[str, Any]:
        """Fetch one page of the authenticated user's drafts."""
        self._require_token()
        return await self.query(queries.USER_DRAFTS_QUERY, {"first": first, "after": after})

    async def get_draft(self, draft_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one draft by id, or None when it does not exist."""
        self._require_token()
        result = await self.query(queries.DRAFT_BY_ID_QUERY, {"id": draft_id})
        return result.get("draft")

    def clear_cache(self) -> int:
        """Drop every cached response. Returns the number of entries removed."""
        if self.cache is None:
            return 0
        return self.cache.clear()

    def stats(self) -> Dict[str, Any]:
        """Request and cache statistics."""
        avg_time = self._total_request_time / self._request_count if self._request_count else 0.0
        return {
            "requests": self._request_count,
            "avg_request_time": round(avg_time, 3),
            "cache": self.cache.get_stats() if self.cache is not None else None,
        }


def extract_connection(data: Optional[Dict[str, Any]], *path: str) -> Optional[Dict[str, Any]]:
    """Walk ``path`` through a response ``data`` object, returning None on gaps."""
    current: Any = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current if isinstance(current, dict) else None


