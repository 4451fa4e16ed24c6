"""Data models for hashnode-loader.

This module defines the records that flow between the transport, the
pagination engine, the item pipeline and the host content store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    TypeVar,
    Union,
)

if TYPE_CHECKING:
    from hashnode_loader.core.error_recovery import LoaderError

T = TypeVar("T")


@dataclass
class PageInfo:
    """Cursor state of one GraphQL connection page."""

    has_next_page: bool = False
    end_cursor: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PageInfo":
        data = data or {}
        return cls(
            has_next_page=bool(data.get("hasNextPage", False)),
            end_cursor=data.get("endCursor"),
        )


@dataclass
class PageResult(Generic[T]):
    """One page of items together with its cursor state.

    Parameters
    ----------
    items: list
        Items of this page, in server order.
    page_info: PageInfo
        Whether another page exists and the cursor that fetches it.
    """

    items: List[T] = field(default_factory=list)
    page_info: PageInfo = field(default_factory=PageInfo)

    @classmethod
    def from_connection(
        cls,
        connection: Optional[Dict[str, Any]],
        node_mapper: Optional[Callable[[Dict[str, Any]], T]] = None,
    ) -> "PageResult[T]":
        """Build a page from a GraphQL ``{edges: [{node}], pageInfo}`` connection.

        A missing connection yields an empty final page.
        """
        if not connection:
            return cls()
        nodes = [edge.get("node") for edge in connection.get("edges") or [] if edge]
        nodes = [node for node in nodes if node is not None]
        items = [node_mapper(node) for node in nodes] if node_mapper else nodes
        return cls(items=items, page_info=PageInfo.from_dict(connection.get("pageInfo")))


@dataclass
class ItemResult:
    """Outcome of one pipeline step for one item."""

    success: bool
    data: Any = None
    error: Optional["LoaderError"] = None
    cached: bool = False
    item_id: Optional[str] = None

    @classmethod
    def ok(cls, data: Any, item_id: Optional[str] = None) -> "ItemResult":
        return cls(success=True, data=data, item_id=item_id)

    @classmethod
    def fail(cls, error: "LoaderError") -> "ItemResult":
        return cls(success=False, error=error)


@dataclass
class StoredEntry:
    """Record handed to the host content store."""

    id: str
    data: Dict[str, Any]
    digest: str
    rendered: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result: Dict[str, Any] = {"id": self.id, "data": self.data, "digest": self.digest}
        if self.rendered is not None:
            result["rendered"] = self.rendered
        return result


@dataclass
class SearchAggregateItem:
    """A search hit tagged with the term that found it and its relevance."""

    source_item: Dict[str, Any]
    search_term: str
    relevance_score: float = 0.0

    @property
    def source_id(self) -> Optional[str]:
        return self.source_item.get("id")


@dataclass
class LoadSummary:
    """Counts reported at the end of one load cycle."""

    collection: str
    fetched: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    item_errors: List["LoaderError"] = field(default_factory=list)
    fatal_error: Optional["LoaderError"] = None

    @property
    def failed(self) -> bool:
        """True when the top-level fetch failed and nothing was loaded."""
        return self.fatal_error is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "collection": self.collection,
            "fetched": self.fetched,
            "processed": self.processed,
            "skipped": self.skipped,
            "errors": self.errors,
            "item_errors": [e.to_dict() for e in self.item_errors],
            "fatal_error": self.fatal_error.to_dict() if self.fatal_error else None,
        }


ParseDataFn = Callable[[Dict[str, Any]], Union[Dict[str, Any], Awaitable[Dict[str, Any]]]]
DigestFn = Callable[[Dict[str, Any]], str]


@dataclass
class LoaderContext:
    """Collaborators supplied by the host build system for one load cycle.

    Parameters
    ----------
    store: object
        Content store exposing ``set(entry) -> bool``.
    logger: object, optional
        Host logger exposing ``info``, ``warning`` and ``error``. Falls back
        to the loader's own logger.
    parse_data: callable, optional
        Host validation hook receiving ``{"id", "data"}`` and returning the
        data to store. May be a coroutine function.
    generate_digest: callable, optional
        Host digest function preferred over the built-in one.
    """

    store: Any
    logger: Any = None
    parse_data: Optional[ParseDataFn] = None
    generate_digest: Optional[DigestFn] = None


@dataclass
class LoaderDefinition:
    """What a loader hands to the host: a name, a schema accessor and ``load``."""

    name: str
    schema: Callable[[], Dict[str, Any]]
    load: Callable[[LoaderContext], Awaitable[LoadSummary]]
