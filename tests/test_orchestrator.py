"""Tests for the orchestrator."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import HOST
from hashnode_loader.core.config import Config
from hashnode_loader.core.data_models import LoadSummary
from hashnode_loader.core.error_recovery import FetchError
from hashnode_loader.core.orchestrator import Orchestrator
from hashnode_loader.loaders import DraftsLoader, PostsLoader, SearchLoader, SeriesLoader
from hashnode_loader.storage import MemoryDataStore


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = Config(load_env=False)
    config.set("hashnode.publication_host", HOST)
    return config


def fake_loader(summary):
    loader = MagicMock()
    loader.load = AsyncMock(return_value=summary)
    return loader


class TestCreateLoaders:
    """Tests for Orchestrator.create_hashnode_loaders."""

    def test_defaults_to_posts_and_series(self, config):
        loaders = Orchestrator(config, setup_logging=False).create_hashnode_loaders()

        assert list(loaders) == ["posts", "series"]
        assert isinstance(loaders["posts"], PostsLoader)
        assert isinstance(loaders["series"], SeriesLoader)

    def test_missing_host_builds_no_loaders(self, tmp_path, monkeypatch, caplog):
        """Test that an unconfigured host is reported instead of raising."""
        monkeypatch.chdir(tmp_path)
        orchestrator = Orchestrator(Config(load_env=False), setup_logging=False)

        assert orchestrator.create_hashnode_loaders() == {}
        assert "No publication host configured" in caplog.text

    def test_token_and_terms_enable_drafts_and_search(self, config):
        config.set("hashnode.token", "secret")
        config.set("loaders.search_terms", ["python"])

        loaders = Orchestrator(config, setup_logging=False).create_hashnode_loaders()

        assert list(loaders) == ["posts", "series", "drafts", "search"]
        assert isinstance(loaders["drafts"], DraftsLoader)
        assert isinstance(loaders["search"], SearchLoader)
        assert loaders["search"].options.search_terms == ["python"]


class TestLoadAll:
    """Tests for Orchestrator.load_all."""

    @pytest.mark.asyncio
    async def test_runs_each_loader_into_its_own_store(self, config):
        posts = fake_loader(LoadSummary(collection="posts", processed=2))
        series = fake_loader(LoadSummary(collection="series", processed=1))
        orchestrator = Orchestrator(config, setup_logging=False)

        summaries = await orchestrator.load_all(loaders={"posts": posts, "series": series})

        assert list(summaries) == ["posts", "series"]
        assert summaries["posts"].processed == 2
        assert isinstance(orchestrator.stores["posts"], MemoryDataStore)
        assert orchestrator.stores["posts"] is not orchestrator.stores["series"]
        context = posts.load.await_args.args[0]
        assert context.store is orchestrator.stores["posts"]

    @pytest.mark.asyncio
    async def test_failed_collection_does_not_stop_others(self, config, caplog):
        failed = fake_loader(LoadSummary(collection="posts", fatal_error=FetchError("down")))
        series = fake_loader(LoadSummary(collection="series", processed=1))

        summaries = await Orchestrator(config, setup_logging=False).load_all(
            loaders={"posts": failed, "series": series}
        )

        assert summaries["posts"].failed is True
        assert summaries["series"].processed == 1
        assert "Collections failed to load: posts" in caplog.text
