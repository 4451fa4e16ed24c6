"""hashnode-loader - Hashnode content loading for static site builds.

Fetches posts, series, drafts and search results from the Hashnode GraphQL
API, maps them onto stable local schemas and hands them to a content store.
"""

__version__ = "0.1.0"
__author__ = "hashnode-loader Contributors"

from hashnode_loader.core.orchestrator import Orchestrator
from hashnode_loader.core.http_client import HashnodeClient
from hashnode_loader.loaders import (
    DraftsLoader,
    PostsLoader,
    SearchLoader,
    SeriesLoader,
    create_loader,
)

__all__ = [
    "Orchestrator",
    "HashnodeClient",
    "DraftsLoader",
    "PostsLoader",
    "SearchLoader",
    "SeriesLoader",
    "create_loader",
    "__version__",
]
