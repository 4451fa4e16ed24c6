"""Base loader: the item pipeline and the load cycle.

A loader fetches raw Hashnode objects, then runs each one through
transform, validate, identify and digest before handing it to the host
content store. A failing item is counted and skipped; it never aborts the
cycle. Only the top-level fetch can fail a whole cycle.
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel

from hashnode_loader.core.config import BaseLoaderOptions
from hashnode_loader.core.data_models import (
    ItemResult,
    LoadSummary,
    LoaderContext,
    LoaderDefinition,
    StoredEntry,
)
from hashnode_loader.core.digest import calculate_digest
from hashnode_loader.core.error_recovery import (
    FetchError,
    LoaderError,
    ProcessError,
    ValidationError,
    retry_async,
)
from hashnode_loader.core.http_client import HashnodeClient
from hashnode_loader.core.logging_setup import log_performance
from hashnode_loader.core.schemas import schema_json, validate_payload

T = TypeVar("T")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def first_present(*values: Any) -> Optional[Any]:
    """Return the first truthy value, or None."""
    for value in values:
        if value:
            return value
    return None


def parse_datetime(value: Any, default: Optional[datetime] = None) -> Any:
    """Parse an ISO-8601 timestamp from the API.

    Missing values give ``default``. Unparseable strings are returned
    unchanged so that schema validation reports them.
    """
    if not value:
        return default
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


def build_client(options: BaseLoaderOptions) -> HashnodeClient:
    """Create the GraphQL client described by ``options``."""
    return HashnodeClient(
        options.publication_host,
        token=options.token,
        endpoint=options.endpoint,
        timeout_ms=options.timeout_ms,
        cache=options.cache,
        cache_ttl=options.cache_ttl,
    )


class BaseHashnodeLoader(ABC):
    """Common pipeline for every Hashnode collection loader.

    Subclasses set ``collection`` and ``schema`` and implement
    ``fetch_data`` and ``transform_item``; they may override
    ``generate_id``.
    """

    collection: str = ""
    schema: Type[BaseModel]

    def __init__(self, options: BaseLoaderOptions, client: Optional[HashnodeClient] = None) -> None:
        self.options = options
        self.client = client or build_client(options)
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def fetch_data(self) -> List[Any]:
        """Fetch every raw item of the collection."""

    @abstractmethod
    def transform_item(self, item: Any) -> Dict[str, Any]:
        """Map one raw item to the local schema shape."""

    def generate_id(self, item: Any) -> Optional[str]:
        """Stable identity of a raw item: id, then cuid, then slug."""
        return first_present(item.get("id"), item.get("cuid"), item.get("slug"))

    def resolve_id(self, item: Any) -> str:
        """Identity of ``item`` that is always available.

        Falls back to a content hash when ``generate_id`` raises or yields
        nothing.
        """
        try:
            item_id = self.generate_id(item)
        except Exception as exc:
            self.logger.debug("Id generation failed, using content hash: %s", exc)
            item_id = None
        return str(item_id) if item_id else calculate_digest(item)

    def validate_data(self, data: Dict[str, Any]) -> ItemResult:
        try:
            return ItemResult.ok(validate_payload(self.schema, data))
        except ValidationError as exc:
            return ItemResult.fail(exc)

    async def fetch_with_retry(self, func: Callable[[], Awaitable[T]]) -> T:
        """Await one page fetch under the configured retry policy."""
        return await retry_async(func, max_retries=self.options.max_retries)

    async def safe_fetch(self) -> ItemResult:
        """Run ``fetch_data``, turning any failure into a ``FetchError`` result."""
        try:
            items = await self.fetch_data()
        except Exception as exc:
            error = FetchError(
                f"Failed to fetch {self.collection}: {exc}",
                details={"cause": type(exc).__name__, "code": getattr(exc, "code", None)},
            )
            error.__cause__ = exc
            return ItemResult.fail(error)
        return ItemResult.ok(list(items))

    def process_item(self, item: Any) -> ItemResult:
        """Transform, validate and identify a single raw item.

        Returns:
            A successful result whose ``data`` is the validated payload with
            an ``id`` key, or a failed result carrying a ``ProcessError`` or
            ``ValidationError``.
        """
        try:
            transformed = self.transform_item(item)
        except Exception as exc:
            return ItemResult.fail(ProcessError(f"Failed to transform item: {exc}"))

        validation = self.validate_data(transformed)
        if not validation.success:
            return validation

        item_id = self.resolve_id(item)
        payload = dict(validation.data)
        if not payload.get("id"):
            payload["id"] = item_id
        return ItemResult.ok(payload, item_id=item_id)

    def _rendered(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        content = payload.get("content")
        if isinstance(content, dict) and isinstance(content.get("html"), str):
            return {"html": content["html"], "metadata": {}}
        return None

    async def _hand_off(self, item_id: str, payload: Dict[str, Any], context: LoaderContext) -> bool:
        """Digest ``payload`` and pass it to the store. Returns the store's answer."""
        if context.generate_digest is not None:
            digest = context.generate_digest(payload)
        else:
            digest = calculate_digest(payload)

        data = payload
        if context.parse_data is not None:
            try:
                parsed = context.parse_data({"id": item_id, "data": payload})
                if inspect.isawaitable(parsed):
                    parsed = await parsed
            except Exception as exc:
                raise ValidationError(f"Host validation failed for {item_id}: {exc}") from exc
            data = parsed

        entry = StoredEntry(id=item_id, data=data, digest=digest, rendered=self._rendered(payload))
        try:
            return bool(context.store.set(entry))
        except Exception as exc:
            raise ProcessError(f"Failed to store {item_id}: {exc}") from exc

    async def load(self, context: LoaderContext) -> LoadSummary:
        """Run one load cycle into ``context.store``.

        Args:
            context: Host collaborators for this cycle

        Returns:
            Counts of processed, skipped and failed items. A failed
            top-level fetch is reported through ``fatal_error``.

        Raises:
            FetchError: If the fetch failed and ``fail_on_fetch_error`` is set
            LoaderError: If the cycle broke outside per-item processing
        """
        log = context.logger or self.logger
        summary = LoadSummary(collection=self.collection)

        try:
            with log_performance(f"Loading {self.collection}", self.logger):
                log.info(f"Loading {self.collection} from Hashnode...")
                fetched = await self.safe_fetch()
                if not fetched.success:
                    summary.fatal_error = fetched.error
                    log.error(f"Failed to load {self.collection}: {fetched.error}")
                    if self.options.fail_on_fetch_error:
                        raise fetched.error
                    return summary

                items = fetched.data
                summary.fetched = len(items)
                log.info(f"Fetched {len(items)} {self.collection} from Hashnode")

                for raw in items:
                    stored = False
                    result = self.process_item(raw)
                    if result.success:
                        try:
                            stored = await self._hand_off(result.item_id, result.data, context)
                        except LoaderError as exc:
                            result = ItemResult.fail(exc)
                    if not result.success:
                        summary.errors += 1
                        summary.item_errors.append(result.error)
                        log.warning(f"Skipping item due to error: {result.error}")
                    elif stored:
                        summary.processed += 1
                    else:
                        summary.skipped += 1
        except LoaderError:
            raise
        except Exception as exc:
            raise LoaderError(f"Failed to load {self.collection}: {exc}") from exc

        log.info(
            f"{self.collection} loading complete: {summary.processed} processed, "
            f"{summary.skipped} skipped, {summary.errors} errors"
        )
        return summary

    def get_schema(self) -> Dict[str, Any]:
        return schema_json(self.schema)

    def create_loader(self) -> LoaderDefinition:
        """Package this loader for the host build system."""
        return LoaderDefinition(name=f"hashnode-{self.collection}", schema=self.get_schema, load=self.load)

    def get_client(self) -> HashnodeClient:
        return self.client

    def clear_cache(self) -> int:
        return self.client.clear_cache()
