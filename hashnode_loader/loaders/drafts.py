"""Drafts loader.

Drafts belong to the owner of the access token, so this loader refuses to
start without one.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from hashnode_loader.core.config import DraftsLoaderOptions
from hashnode_loader.core.data_models import PageResult
from hashnode_loader.core.digest import simple_hash
from hashnode_loader.core.error_recovery import AuthenticationRequiredError
from hashnode_loader.core.http_client import HashnodeClient, extract_connection
from hashnode_loader.core.pagination import flatten_paginated_results, paginate_results
from hashnode_loader.core.schemas import DraftSchema
from hashnode_loader.loaders.base import EPOCH, BaseHashnodeLoader, first_present, parse_datetime

PAGE_SIZE = 20


def transform_hashnode_draft(draft: Dict[str, Any]) -> Dict[str, Any]:
    """Map a Hashnode ``Draft`` object to the local draft shape."""
    content = draft.get("content") or {}
    author = draft.get("author") or {}
    cover = draft.get("coverImage") or {}
    toc = ((draft.get("features") or {}).get("tableOfContents")) or {}
    updated_at = parse_datetime(draft.get("updatedAt"), EPOCH)

    return {
        "id": draft.get("id") or "",
        "title": draft.get("title") or "Untitled Draft",
        "subtitle": draft.get("subtitle") or None,
        "content": content.get("markdown") or content.get("html") or "",
        "canonical_url": draft.get("canonicalUrl") or None,
        "updated_at": updated_at,
        "created_at": parse_datetime(draft.get("createdAt"), updated_at),
        "author": {
            "id": author.get("id") or "unknown",
            "name": author.get("name") or "Unknown Author",
            "username": author.get("username") or "unknown",
            "profile_picture": author.get("profilePicture") or "",
        },
        "cover_image": {"url": cover["url"]} if cover.get("url") else None,
        "tags": [
            {
                "id": tag.get("id") or None,
                "name": tag.get("name") or "Unknown Tag",
                "slug": tag.get("slug") or "unknown",
            }
            for tag in draft.get("tags") or []
        ],
        "table_of_contents": [
            {
                "id": item.get("id"),
                "level": item.get("level"),
                "parent_id": item.get("parentId") or None,
                "slug": item.get("slug"),
                "title": item.get("title"),
            }
            for item in toc.get("items") or []
        ]
        if toc.get("isEnabled")
        else [],
        "is_draft": True,
        "last_saved": updated_at,
        "raw": {"id": draft.get("id")},
    }


class DraftsLoader(BaseHashnodeLoader):
    """Loads the authenticated user's drafts, or a single draft by id."""

    collection = "drafts"
    schema = DraftSchema

    def __init__(self, options: DraftsLoaderOptions, client: Optional[HashnodeClient] = None) -> None:
        if not options.token and (client is None or not client.token):
            raise AuthenticationRequiredError("Drafts loader requires an access token")
        super().__init__(options, client=client)
        self.options: DraftsLoaderOptions = options

    async def _fetch_drafts_page(self, cursor: Optional[str]) -> PageResult[Dict[str, Any]]:
        response = await self.fetch_with_retry(
            lambda: self.client.get_drafts(first=min(PAGE_SIZE, self.options.max_drafts), after=cursor)
        )
        return PageResult.from_connection(extract_connection(response, "me", "drafts"))

    async def fetch_data(self) -> List[Dict[str, Any]]:
        if self.options.include_draft_by_id:
            draft = await self.fetch_with_retry(lambda: self.client.get_draft(self.options.include_draft_by_id))
            return [draft] if draft else []

        batches = paginate_results(self._fetch_drafts_page, self.options.max_drafts)
        return await flatten_paginated_results(batches)

    def transform_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return transform_hashnode_draft(item)

    def generate_id(self, item: Dict[str, Any]) -> str:
        """``draft-`` plus the id, cuid or slug, else a hash of title and update time."""
        key = first_present(item.get("id"), item.get("cuid"), item.get("slug"))
        if not key:
            key = simple_hash(f"{item.get('title') or ''}-{item.get('updatedAt') or ''}")
        return f"draft-{key}"
