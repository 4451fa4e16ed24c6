"""Collection loaders for hashnode-loader.

Each loader fetches one Hashnode collection and feeds it through the shared
item pipeline in :mod:`hashnode_loader.loaders.base`.
"""

from __future__ import annotations

from typing import Dict, Optional, Type

from hashnode_loader.core.config import BaseLoaderOptions
from hashnode_loader.core.http_client import HashnodeClient
from hashnode_loader.loaders.base import BaseHashnodeLoader
from hashnode_loader.loaders.drafts import DraftsLoader
from hashnode_loader.loaders.posts import PostsLoader
from hashnode_loader.loaders.search import SearchLoader
from hashnode_loader.loaders.series import SeriesLoader

LOADERS: Dict[str, Type[BaseHashnodeLoader]] = {
    "posts": PostsLoader,
    "series": SeriesLoader,
    "drafts": DraftsLoader,
    "search": SearchLoader,
}


def create_loader(
    kind: str,
    options: BaseLoaderOptions,
    client: Optional[HashnodeClient] = None,
) -> BaseHashnodeLoader:
    """Instantiate the loader for ``kind``.

    Raises:
        ValueError: If ``kind`` is not a known loader
    """
    try:
        loader_cls = LOADERS[kind]
    except KeyError:
        raise ValueError(f"Unknown loader kind: {kind}. Expected one of: {', '.join(LOADERS)}") from None
    return loader_cls(options, client=client)


__all__ = [
    "BaseHashnodeLoader",
    "DraftsLoader",
    "LOADERS",
    "PostsLoader",
    "SearchLoader",
    "SeriesLoader",
    "create_loader",
]
