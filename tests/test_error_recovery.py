"""Tests for the error taxonomy and retry helper."""

from unittest.mock import AsyncMock

import pytest

from hashnode_loader.core.error_recovery import (
    ErrorSeverity,
    FetchError,
    GraphQLError,
    HttpError,
    LoaderError,
    PartialSearchResult,
    ProtocolError,
    QueryTimeoutError,
    SearchTermError,
    TransportError,
    ValidationError,
    calculate_backoff,
    is_retryable_error,
    retry_async,
)


class TestErrorTaxonomy:
    """Tests for error codes and retryability."""

    def test_codes(self):
        """Test that each error carries its code."""
        assert LoaderError("x").code == "LOADER_ERROR"
        assert TransportError("x").code == "NETWORK_ERROR"
        assert QueryTimeoutError(100).code == "TIMEOUT"
        assert HttpError(500, "Internal Server Error").code == "HTTP_ERROR"
        assert GraphQLError(["bad"]).code == "GRAPHQL_ERROR"
        assert ProtocolError("x").code == "PROTOCOL_ERROR"
        assert ValidationError("x").code == "VALIDATION_ERROR"
        assert FetchError("x").code == "FETCH_ERROR"

    def test_transport_errors_are_loader_errors(self):
        assert isinstance(HttpError(500), TransportError)
        assert isinstance(QueryTimeoutError(1), LoaderError)

    def test_http_retryability(self):
        """Test that only server errors and rate limiting are retryable."""
        assert HttpError(500).retryable is True
        assert HttpError(503).retryable is True
        assert HttpError(429).retryable is True
        assert HttpError(400).retryable is False
        assert HttpError(404).retryable is False

    def test_graphql_errors_not_retryable(self):
        assert GraphQLError(["x"]).retryable is False

    def test_timeout_retryable(self):
        assert is_retryable_error(QueryTimeoutError(30000)) is True
        assert is_retryable_error(ValueError("x")) is False

    def test_validation_issues(self):
        error = ValidationError("bad", issues=[{"path": "url", "message": "invalid"}])
        assert error.issues == [{"path": "url", "message": "invalid"}]
        assert error.to_dict()["details"]["issues"] == error.issues

    def test_to_dict(self):
        data = HttpError(502, "Bad Gateway").to_dict()
        assert data["code"] == "HTTP_ERROR"
        assert data["message"] == "HTTP 502: Bad Gateway"
        assert data["details"]["status_code"] == 502
        assert data["severity"] == ErrorSeverity.HIGH.value


class TestRetryAsync:
    """Tests for retry_async."""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        func = AsyncMock(return_value="ok")
        sleep = AsyncMock()

        assert await retry_async(func, max_retries=3, sleep=sleep) == "ok"
        assert func.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_retryable_errors(self):
        func = AsyncMock(side_effect=[HttpError(503), QueryTimeoutError(10), "ok"])
        sleep = AsyncMock()

        assert await retry_async(func, max_retries=3, base_delay=1.0, sleep=sleep) == "ok"
        assert func.await_count == 3
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_non_retryable_raised_immediately(self):
        func = AsyncMock(side_effect=GraphQLError(["bad query"]))
        sleep = AsyncMock()

        with pytest.raises(GraphQLError):
            await retry_async(func, max_retries=3, sleep=sleep)
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        func = AsyncMock(side_effect=HttpError(500))
        sleep = AsyncMock()

        with pytest.raises(HttpError):
            await retry_async(func, max_retries=2, sleep=sleep)
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_zero_retries_is_single_attempt(self):
        func = AsyncMock(side_effect=HttpError(500))

        with pytest.raises(HttpError):
            await retry_async(func, max_retries=0, sleep=AsyncMock())
        assert func.await_count == 1

    def test_backoff_capped(self):
        assert calculate_backoff(0, 1.0, 30.0) == 1.0
        assert calculate_backoff(3, 1.0, 30.0) == 8.0
        assert calculate_backoff(10, 1.0, 30.0) == 30.0


class TestPartialSearchResult:
    """Tests for PartialSearchResult."""

    def test_complete(self):
        report = PartialSearchResult(terms=["a", "b"])
        report.add_completed("a", 3)
        report.add_completed("b", 2)
        assert report.is_complete is True
        assert report.result_count == 5
        assert report.success_rate == 1.0

    def test_partial(self):
        report = PartialSearchResult(terms=["a", "b"])
        report.add_completed("a", 3)
        report.add_error(SearchTermError.from_exception("b", HttpError(500, "Internal Server Error")))
        assert report.is_complete is False
        assert report.is_partial is True
        assert report.terms_failed == ["b"]
        assert report.errors[0].code == "HTTP_ERROR"
        assert report.to_dict()["success_rate"] == 0.5
