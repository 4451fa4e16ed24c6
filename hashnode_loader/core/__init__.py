"""Core functionality for hashnode-loader.

This package contains the building blocks shared by every loader: data
models, the GraphQL client and its response cache, pagination,
deduplication, the error taxonomy, configuration, logging, content schemas
and the orchestrator.
"""

from .data_models import (  # noqa: F401
    ItemResult,
    LoadSummary,
    LoaderContext,
    LoaderDefinition,
    PageInfo,
    PageResult,
    SearchAggregateItem,
    StoredEntry,
)
from .digest import calculate_digest, simple_hash  # noqa: F401
from .cache import CacheEntry, ResponseCache, make_cache_key  # noqa: F401
from .http_client import HashnodeClient  # noqa: F401
from .pagination import flatten_paginated_results, paginate_results  # noqa: F401
from .deduplication import FirstSeenDeduplicator, deduplicate_results, merge_result_lists  # noqa: F401
from .logging_setup import configure_logging  # noqa: F401
from .config import Config, get_config, ValidationResult  # noqa: F401
from .error_recovery import (  # noqa: F401
    AuthenticationRequiredError,
    ErrorSeverity,
    FetchError,
    GraphQLError,
    HttpError,
    LoaderError,
    PartialSearchResult,
    ProcessError,
    ProtocolError,
    QueryTimeoutError,
    TransportError,
    ValidationError,
    retry_async,
)
from .orchestrator import Orchestrator  # noqa: F401

__all__ = [
    # Models
    "ItemResult",
    "LoadSummary",
    "LoaderContext",
    "LoaderDefinition",
    "PageInfo",
    "PageResult",
    "SearchAggregateItem",
    "StoredEntry",
    # Hashing and caching
    "calculate_digest",
    "simple_hash",
    "CacheEntry",
    "ResponseCache",
    "make_cache_key",
    # Transport
    "HashnodeClient",
    # Pagination and deduplication
    "paginate_results",
    "flatten_paginated_results",
    "FirstSeenDeduplicator",
    "deduplicate_results",
    "merge_result_lists",
    # Config and logging
    "configure_logging",
    "Config",
    "get_config",
    "ValidationResult",
    # Errors
    "AuthenticationRequiredError",
    "ErrorSeverity",
    "FetchError",
    "GraphQLError",
    "HttpError",
    "LoaderError",
    "PartialSearchResult",
    "ProcessError",
    "ProtocolError",
    "QueryTimeoutError",
    "TransportError",
    "ValidationError",
    "retry_async",
    # Orchestration
    "Orchestrator",
]
