"""Posts loader for a Hashnode publication.

Provides :class:`PostsLoader`, which pages through the publication's posts
(optionally restricted to a set of tags) and maps each Hashnode post to the
local post schema.
"""

from __future__ import annotations

import functools
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from hashnode_loader.core.config import PostsLoaderOptions
from hashnode_loader.core.data_models import PageResult
from hashnode_loader.core.deduplication import deduplicate_results
from hashnode_loader.core.error_recovery import AuthenticationRequiredError
from hashnode_loader.core.http_client import HashnodeClient, extract_connection
from hashnode_loader.core.pagination import flatten_paginated_results, paginate_results
from hashnode_loader.core.schemas import PostSchema
from hashnode_loader.loaders.base import EPOCH, BaseHashnodeLoader, first_present, parse_datetime
from hashnode_loader.utils.content import calculate_reading_time, count_words, extract_text_from_html

PAGE_SIZE = 20


def _author(author: Dict[str, Any]) -> Dict[str, Any]:
    social = author.get("socialMediaLinks") or {}
    bio = author.get("bio") or {}
    return {
        "id": author.get("id"),
        "name": author.get("name"),
        "username": author.get("username"),
        "profile_picture": author.get("profilePicture") or None,
        "bio": first_present(bio.get("text"), bio.get("html")),
        "url": social.get("website") or None,
        "social": {
            "website": social.get("website") or None,
            "github": social.get("github") or None,
            "twitter": social.get("twitter") or None,
            "linkedin": social.get("linkedin") or None,
        },
        "followers_count": author.get("followersCount"),
    }


def _comment(node: Dict[str, Any]) -> Dict[str, Any]:
    content = node.get("content") or {}
    author = node.get("author") or {}
    replies = (node.get("replies") or {}).get("edges") or []
    return {
        "id": node.get("id"),
        "date_added": node.get("dateAdded"),
        "total_reactions": node.get("totalReactions") or 0,
        "content": {"html": content.get("html") or "", "markdown": content.get("markdown") or None},
        "author": {
            "id": author.get("id"),
            "name": author.get("name"),
            "username": author.get("username"),
            "profile_picture": author.get("profilePicture") or None,
        },
        "replies": [_comment(edge["node"]) for edge in replies if edge and edge.get("node")],
    }


def _table_of_contents(post: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    toc = ((post.get("features") or {}).get("tableOfContents")) or {}
    if not toc.get("isEnabled") or not toc.get("items"):
        return None
    return {
        "is_enabled": True,
        "items": [
            {
                "id": item.get("id"),
                "level": item.get("level"),
                "parent_id": item.get("parentId") or None,
                "slug": item.get("slug"),
                "title": item.get("title"),
            }
            for item in toc["items"]
        ],
    }


def transform_hashnode_post(post: Dict[str, Any]) -> Dict[str, Any]:
    """Map a Hashnode ``Post`` object to the local post shape."""
    content = post.get("content") or {}
    html = content.get("html") or ""
    text = extract_text_from_html(html)
    cover = post.get("coverImage")
    series = post.get("series")
    seo = post.get("seo") or {}
    og = post.get("ogMetaData") or {}
    comments = post.get("comments")
    preferences = post.get("preferences") or {}
    publication = post.get("publication")

    return {
        "id": post.get("id"),
        "cuid": post.get("cuid"),
        "title": post.get("title"),
        "subtitle": post.get("subtitle") or "",
        "brief": post.get("brief") or "",
        "slug": post.get("slug"),
        "url": post.get("url"),
        "content": {"html": html, "markdown": content.get("markdown") or None},
        "published_at": parse_datetime(post.get("publishedAt"), EPOCH),
        "updated_at": parse_datetime(post.get("updatedAt")),
        "reading_time": post.get("readTimeInMinutes") or calculate_reading_time(text),
        "word_count": count_words(text),
        "views": post.get("views") or 0,
        "reactions": post.get("reactionCount") or 0,
        "comments": post.get("responseCount") or 0,
        "replies": post.get("replyCount") or 0,
        "is_draft": False,
        "has_latex": bool(post.get("hasLatexInPost")),
        "hashnode_id": post.get("id"),
        "hashnode_url": post.get("url"),
        "author": _author(post.get("author") or {}),
        "co_authors": [
            {
                "id": author.get("id"),
                "name": author.get("name"),
                "username": author.get("username"),
                "profile_picture": author.get("profilePicture") or None,
                "bio": (author.get("bio") or {}).get("html") or None,
            }
            for author in post["coAuthors"]
        ]
        if post.get("coAuthors")
        else None,
        "cover_image": {
            "url": cover.get("url"),
            "attribution": cover.get("attribution") or None,
            "is_portrait": cover.get("isPortrait"),
            "is_attribution_hidden": cover.get("isAttributionHidden"),
        }
        if cover
        else None,
        "tags": [
            {"id": tag.get("id") or None, "name": tag.get("name"), "slug": tag.get("slug")}
            for tag in post.get("tags") or []
        ],
        "series": {"id": series.get("id"), "name": series.get("name"), "slug": series.get("slug")}
        if series
        else None,
        "seo": {
            "title": seo.get("title") or post.get("title"),
            "description": seo.get("description") or post.get("brief") or "",
        },
        "og_meta_data": {"image": og["image"]} if og.get("image") else None,
        "table_of_contents": _table_of_contents(post),
        "comments_data": {
            "total_count": comments.get("totalDocuments") or 0,
            "comments": [
                _comment(edge["node"]) for edge in comments.get("edges") or [] if edge and edge.get("node")
            ],
        }
        if comments
        else None,
        "preferences": {
            "disable_comments": preferences.get("disableComments"),
            "stick_cover_to_bottom": preferences.get("stickCoverToBottom"),
            "pinned_to_blog": preferences.get("pinnedToBlog"),
            "is_delisted": preferences.get("isDelisted"),
        },
        "publication": {
            "id": publication.get("id"),
            "title": publication.get("title"),
            "url": publication.get("url"),
        }
        if publication
        else None,
    }


def _published_sort_key(post: Dict[str, Any]) -> datetime:
    published = parse_datetime(post.get("publishedAt"), EPOCH)
    if not isinstance(published, datetime):
        return EPOCH
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    return published


class PostsLoader(BaseHashnodeLoader):
    """Loads the published posts of a publication."""

    collection = "posts"
    schema = PostSchema

    def __init__(self, options: PostsLoaderOptions, client: Optional[HashnodeClient] = None) -> None:
        super().__init__(options, client=client)
        self.options: PostsLoaderOptions = options

    async def _fetch_posts_page(self, cursor: Optional[str]) -> PageResult[Dict[str, Any]]:
        response = await self.fetch_with_retry(
            lambda: self.client.get_posts(
                first=PAGE_SIZE,
                after=cursor,
                include_comments=self.options.include_comments,
                include_co_authors=self.options.include_co_authors,
                include_table_of_contents=self.options.include_table_of_contents,
                max_comments=self.options.max_comments_per_post,
            )
        )
        return PageResult.from_connection(extract_connection(response, "publication", "posts"))

    async def _fetch_tag_page(self, tag_slug: str, cursor: Optional[str]) -> PageResult[Dict[str, Any]]:
        response = await self.fetch_with_retry(
            lambda: self.client.get_posts_by_tag(tag_slug, first=PAGE_SIZE, after=cursor)
        )
        return PageResult.from_connection(extract_connection(response, "publication", "posts"))

    async def _fetch_drafts_page(self, cursor: Optional[str]) -> PageResult[Dict[str, Any]]:
        response = await self.fetch_with_retry(lambda: self.client.get_drafts(first=PAGE_SIZE, after=cursor))
        return PageResult.from_connection(extract_connection(response, "me", "drafts"))

    async def fetch_data(self) -> List[Dict[str, Any]]:
        max_posts = self.options.max_posts

        if self.options.include_drafts:
            if not self.client.token:
                raise AuthenticationRequiredError()
            return await flatten_paginated_results(paginate_results(self._fetch_drafts_page, max_posts))

        if self.options.filter_by_tags:
            collected: List[Dict[str, Any]] = []
            for tag_slug in self.options.filter_by_tags:
                fetch_page = functools.partial(self._fetch_tag_page, tag_slug)
                posts = await flatten_paginated_results(paginate_results(fetch_page, max_posts))
                self.logger.debug("Tag %s returned %d posts", tag_slug, len(posts))
                collected.extend(posts)

            unique = deduplicate_results(collected)
            unique.sort(key=_published_sort_key, reverse=True)
            return unique[:max_posts] if max_posts else unique

        return await flatten_paginated_results(paginate_results(self._fetch_posts_page, max_posts))

    def transform_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return transform_hashnode_post(item)

    def generate_id(self, item: Dict[str, Any]) -> Optional[str]:
        """Prefer the slug, then the cuid, then the Hashnode id."""
        return first_present(item.get("slug"), item.get("cuid"), item.get("id"))
