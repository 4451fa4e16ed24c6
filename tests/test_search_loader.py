"""Tests for the multi-term search aggregator."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import HOST, RecordingStore, make_post, search_response
from hashnode_loader.core.config import SearchLoaderOptions
from hashnode_loader.core.data_models import LoaderContext, SearchAggregateItem
from hashnode_loader.core.error_recovery import HttpError
from hashnode_loader.loaders.search import SearchLoader, calculate_relevance, transform_search_result


def make_loader(responses, **overrides):
    """Build a loader whose client answers ``search_posts`` per term from ``responses``."""
    client = MagicMock()
    client.token = None

    async def search_posts(term, first=20, after=None):
        answer = responses[term]
        if isinstance(answer, Exception):
            raise answer
        return answer

    client.search_posts = AsyncMock(side_effect=search_posts)
    options = SearchLoaderOptions(publication_host=HOST, **overrides)
    return SearchLoader(options, client=client), client


class TestCalculateRelevance:
    """Tests for the relevance score."""

    def test_title_and_brief_match(self):
        post = {"title": "Async Python", "brief": "Python tips", "reactionCount": 0, "views": 0}
        assert calculate_relevance(post, "python") == 15.0

    def test_case_insensitive(self):
        assert calculate_relevance({"title": "PYTHON"}, "Python") == 10.0

    def test_engagement_is_capped(self):
        post = {"title": "", "brief": "", "reactionCount": 500, "views": 90000}
        assert calculate_relevance(post, "rust") == 5.0

    def test_engagement_fractions(self):
        post = {"title": "x", "brief": "y", "reactionCount": 5, "views": 100}
        assert calculate_relevance(post, "rust") == 0.6

    def test_missing_fields(self):
        assert calculate_relevance({}, "anything") == 0.0


class TestFetchData:
    """Tests for SearchLoader.fetch_data."""

    @pytest.mark.asyncio
    async def test_no_terms_makes_no_requests(self):
        loader, client = make_loader({}, search_terms=[])

        assert await loader.fetch_data() == []
        client.search_posts.assert_not_awaited()
        assert loader.last_report.is_complete is True

    @pytest.mark.asyncio
    async def test_first_term_wins_on_duplicates(self):
        """Test that a post found by two terms keeps the first term and its score."""
        shared = make_post(1, title="Python and Rust", brief="", reactionCount=0, views=0)
        only_rust = make_post(2, title="Rust", brief="", reactionCount=0, views=0)
        loader, _ = make_loader(
            {
                "python": search_response([shared]),
                "rust": search_response([shared, only_rust]),
            },
            search_terms=["python", "rust"],
        )

        hits = await loader.fetch_data()

        assert [(hit.source_id, hit.search_term) for hit in hits] == [("id-1", "python"), ("id-2", "rust")]
        assert hits[0].relevance_score == 10.0

    @pytest.mark.asyncio
    async def test_sorted_by_relevance_and_truncated(self):
        """Test that merged hits from all terms are ranked before the final cut."""
        weak = make_post(1, title="Other", brief="mentions python", reactionCount=0, views=0)
        middle = make_post(3, title="Python", brief="", reactionCount=0, views=0)
        strong = make_post(2, title="Rust", brief="rust", reactionCount=0, views=0)
        unrelated = make_post(4, title="x", brief="", reactionCount=0, views=0)
        loader, _ = make_loader(
            {
                "python": search_response([weak, middle]),
                "rust": search_response([strong, unrelated]),
            },
            search_terms=["python", "rust"],
            max_results=2,
        )

        hits = await loader.fetch_data()

        assert [hit.source_id for hit in hits] == ["id-2", "id-3"]
        assert [hit.relevance_score for hit in hits] == [15.0, 10.0]

    @pytest.mark.asyncio
    async def test_max_results_caps_each_term_fetch(self):
        """Test that a term stops paging once it has max_results hits."""
        loader, client = make_loader(
            {"python": search_response([make_post(1), make_post(2)], has_next_page=True, end_cursor="c1")},
            search_terms=["python"],
            max_results=2,
        )

        hits = await loader.fetch_data()

        assert len(hits) == 2
        assert client.search_posts.await_count == 1
        assert client.search_posts.await_args.kwargs["after"] is None

    @pytest.mark.asyncio
    async def test_equal_scores_keep_encounter_order(self):
        first = make_post(1, title="a", brief="", reactionCount=0, views=0)
        second = make_post(2, title="b", brief="", reactionCount=0, views=0)
        third = make_post(3, title="c", brief="", reactionCount=0, views=0)
        loader, _ = make_loader(
            {"x": search_response([first, second]), "y": search_response([third])},
            search_terms=["x", "y"],
        )

        hits = await loader.fetch_data()

        assert [hit.source_id for hit in hits] == ["id-1", "id-2", "id-3"]

    @pytest.mark.asyncio
    async def test_failed_term_is_isolated(self):
        """Test that one failing term does not lose the other terms' results."""
        loader, client = make_loader(
            {
                "python": search_response([make_post(1)]),
                "broken": HttpError(500, "Internal Server Error"),
                "rust": search_response([make_post(2)]),
            },
            search_terms=["python", "broken", "rust"],
        )

        hits = await loader.fetch_data()

        assert {hit.source_id for hit in hits} == {"id-1", "id-2"}
        assert client.search_posts.await_count == 3
        report = loader.last_report
        assert report.terms_completed == ["python", "rust"]
        assert report.terms_failed == ["broken"]
        assert report.errors[0].code == "HTTP_ERROR"
        assert report.is_partial is True

    @pytest.mark.asyncio
    async def test_all_terms_failing_yields_empty(self):
        loader, _ = make_loader({"a": HttpError(500), "b": HttpError(502)}, search_terms=["a", "b"])

        assert await loader.fetch_data() == []
        assert loader.last_report.success_rate == 0.0

    @pytest.mark.asyncio
    async def test_terms_searched_in_order(self):
        loader, client = make_loader(
            {"b": search_response([]), "a": search_response([])},
            search_terms=["b", "a"],
        )

        await loader.fetch_data()

        assert [call.args[0] for call in client.search_posts.await_args_list] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_per_term_pagination(self):
        client = MagicMock()
        client.token = None
        client.search_posts = AsyncMock(
            side_effect=[
                search_response([make_post(1)], has_next_page=True, end_cursor="c1"),
                search_response([make_post(2)]),
            ]
        )
        loader = SearchLoader(SearchLoaderOptions(publication_host=HOST, search_terms=["post"]), client=client)

        hits = await loader.fetch_data()

        assert len(hits) == 2
        assert client.search_posts.await_args_list[1].kwargs["after"] == "c1"


class TestTransform:
    """Tests for transform_search_result and ids."""

    def test_transform(self):
        post = make_post(1, publication={"id": "pub-1", "title": "Blog", "url": f"https://{HOST}"})
        data = transform_search_result(SearchAggregateItem(post, "python", 12.5))

        assert data["search_term"] == "python"
        assert data["search_relevance"] == 12.5
        assert data["reaction_count"] == 5
        assert data["author"]["username"] == "ada"
        assert data["publication"] == {"title": "Blog", "url": f"https://{HOST}"}
        assert data["raw"] == {"cuid": "cuid-1"}
        assert data["cover_image"] is None

    def test_generate_id(self):
        loader, _ = make_loader({})
        hit = SearchAggregateItem(make_post(1), "python", 1.0)
        assert loader.generate_id(hit) == "python-post-1"

    @pytest.mark.asyncio
    async def test_load_stores_ranked_hits(self):
        loader, _ = make_loader(
            {"post": search_response([make_post(1), make_post(2)])},
            search_terms=["post"],
        )
        store = RecordingStore()

        summary = await loader.load(LoaderContext(store=store))

        assert summary.processed == 2
        assert [entry.id for entry in store.entries] == ["post-post-1", "post-post-2"]
        assert store.entries[0].data["search_relevance"] == 15.6
