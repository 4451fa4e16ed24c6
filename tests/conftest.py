"""Shared fixtures for the hashnode-loader test suite."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

HOST = "blog.example.com"
ENDPOINT = "https://gql.hashnode.com/"


def make_post(index: int = 1, **overrides: Any) -> Dict[str, Any]:
    """A Hashnode ``Post`` node as returned by the API."""
    post = {
        "id": f"id-{index}",
        "cuid": f"cuid-{index}",
        "title": f"Post {index}",
        "subtitle": None,
        "brief": f"Brief of post {index}",
        "slug": f"post-{index}",
        "url": f"https://{HOST}/post-{index}",
        "content": {"html": "<p>Hello <strong>world</strong></p>"},
        "coverImage": None,
        "publishedAt": f"2024-01-{index:02d}T10:00:00.000Z",
        "updatedAt": None,
        "readTimeInMinutes": 3,
        "views": 100,
        "reactionCount": 5,
        "responseCount": 1,
        "replyCount": 0,
        "hasLatexInPost": False,
        "author": {
            "id": "author-1",
            "name": "Ada Writer",
            "username": "ada",
            "profilePicture": "https://cdn.example.com/ada.png",
            "bio": {"html": "<p>Writer</p>", "text": "Writer"},
            "socialMediaLinks": {"website": "https://ada.dev", "github": "ada"},
            "followersCount": 42,
        },
        "tags": [{"id": "t1", "name": "Python", "slug": "python"}],
        "seo": {"title": None, "description": None},
        "ogMetaData": {"image": None},
        "series": None,
        "preferences": {"disableComments": False, "stickCoverToBottom": False},
    }
    post.update(overrides)
    return post


def connection(
    nodes: List[Dict[str, Any]],
    has_next_page: bool = False,
    end_cursor: Optional[str] = None,
) -> Dict[str, Any]:
    """Wrap nodes in a GraphQL connection."""
    return {
        "edges": [{"node": node} for node in nodes],
        "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
    }


def posts_response(nodes, has_next_page=False, end_cursor=None) -> Dict[str, Any]:
    return {"publication": {"id": "pub-1", "title": "Blog", "posts": connection(nodes, has_next_page, end_cursor)}}


def search_response(nodes, has_next_page=False, end_cursor=None) -> Dict[str, Any]:
    return {"searchPostsOfPublication": connection(nodes, has_next_page, end_cursor)}


class RecordingStore:
    """Store that records entries and answers ``set`` from a fixed value."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.entries = []

    def set(self, entry) -> bool:
        self.entries.append(entry)
        return self.answer


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer environment variables out of configuration lookups."""
    for name in (
        "HASHNODE_TOKEN",
        "HASHNODE_PUBLICATION_HOST",
        "HASHNODE_ENDPOINT",
        "HASHNODE_TIMEOUT_MS",
        "CACHE_ENABLED",
        "CACHE_TTL_SECONDS",
        "LOADERS_MAX_POSTS",
        "LOADERS_MAX_RESULTS",
        "LOADERS_MAX_DRAFTS",
        "LOADERS_SEARCH_TERMS",
        "LOADERS_MAX_RETRIES",
        "LOGGING_LEVEL",
        "LOGGING_FILE",
        "LOGGING_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
