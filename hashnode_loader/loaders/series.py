"""Series loader for a Hashnode publication."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from hashnode_loader.core.config import SeriesLoaderOptions
from hashnode_loader.core.data_models import PageResult
from hashnode_loader.core.http_client import HashnodeClient, extract_connection
from hashnode_loader.core.pagination import flatten_paginated_results, paginate_results
from hashnode_loader.core.schemas import SeriesSchema
from hashnode_loader.loaders.base import EPOCH, BaseHashnodeLoader, first_present, parse_datetime

PAGE_SIZE = 50


def _text(value: Any) -> str:
    """Series descriptions arrive either as a string or as ``{html, text}``."""
    if isinstance(value, dict):
        return value.get("text") or value.get("html") or ""
    return value or ""


def _cover_url(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("url") or None
    return value or None


def _series_post(node: Dict[str, Any]) -> Dict[str, Any]:
    author = node.get("author") or {}
    cover = node.get("coverImage")
    return {
        "id": node.get("id"),
        "title": node.get("title"),
        "slug": node.get("slug"),
        "brief": node.get("brief") or "",
        "published_at": parse_datetime(node.get("publishedAt"), EPOCH),
        "read_time_in_minutes": node.get("readTimeInMinutes") or 0,
        "views": node.get("views") or 0,
        "url": node.get("url"),
        "cover_image": {"url": cover.get("url"), "is_portrait": bool(cover.get("isPortrait"))}
        if cover and cover.get("url")
        else None,
        "author": {
            "name": author.get("name") or "",
            "username": author.get("username") or "",
            "profile_picture": author.get("profilePicture") or "",
        },
    }


def transform_hashnode_series(series: Dict[str, Any]) -> Dict[str, Any]:
    """Map a Hashnode ``Series`` object to the local series shape."""
    description = _text(series.get("description"))
    cover_url = _cover_url(series.get("coverImage"))
    author = series.get("author")
    post_edges = (series.get("posts") or {}).get("edges") or []
    posts = [_series_post(edge["node"]) for edge in post_edges if edge and edge.get("node")]
    created_at = parse_datetime(series.get("createdAt"), EPOCH)

    return {
        "id": series.get("id"),
        "cuid": series.get("cuid"),
        "name": series.get("name"),
        "slug": series.get("slug"),
        "description": description,
        "created_at": created_at,
        "updated_at": parse_datetime(series.get("updatedAt"), created_at),
        "cover_image": {"url": cover_url} if cover_url else None,
        "seo": {"title": series.get("name"), "description": description},
        "author": {
            "id": author.get("id") or "",
            "name": author.get("name") or "",
            "username": author.get("username") or "",
            "profile_picture": author.get("profilePicture") or "",
            "bio": _text(author.get("bio")),
            "followers_count": author.get("followersCount") or 0,
        }
        if author
        else None,
        "posts": posts,
        "posts_count": len(posts),
        "sort_order": (series.get("sortOrder") or "asc").lower(),
    }


class SeriesLoader(BaseHashnodeLoader):
    """Loads the series of a publication, optionally with their posts."""

    collection = "series"
    schema = SeriesSchema

    def __init__(self, options: SeriesLoaderOptions, client: Optional[HashnodeClient] = None) -> None:
        super().__init__(options, client=client)
        self.options: SeriesLoaderOptions = options

    async def _fetch_series_page(self, cursor: Optional[str]) -> PageResult[Dict[str, Any]]:
        response = await self.fetch_with_retry(
            lambda: self.client.get_series(
                first=PAGE_SIZE, after=cursor, include_posts=self.options.include_posts
            )
        )
        return PageResult.from_connection(extract_connection(response, "publication", "seriesList"))

    async def fetch_data(self) -> List[Dict[str, Any]]:
        batches = paginate_results(self._fetch_series_page, self.options.max_series)
        return await flatten_paginated_results(batches)

    def transform_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return transform_hashnode_series(item)

    def generate_id(self, item: Dict[str, Any]) -> Optional[str]:
        return first_present(item.get("slug"), item.get("cuid"), item.get("id"))
