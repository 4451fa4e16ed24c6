"""Central orchestrator for hashnode-loader.

This module defines the ``Orchestrator`` class, which builds the set of
loaders a configuration asks for and runs their load cycles one after
another, each into its own content store. The CLI and scripts use it when no
site builder is driving the loaders.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from hashnode_loader.core.config import Config, get_config
from hashnode_loader.core.data_models import LoadSummary, LoaderContext
from hashnode_loader.core.logging_setup import configure_logging
from hashnode_loader.loaders import BaseHashnodeLoader, create_loader
from hashnode_loader.storage.memory import MemoryDataStore


class Orchestrator:
    """Builds loaders from configuration and runs them."""

    def __init__(self, config: Optional[Config] = None, *, setup_logging: bool = True) -> None:
        self.config = config or get_config()
        if setup_logging:
            log_file = self.config.get("logging.file") or None
            configure_logging(
                log_file=Path(log_file) if log_file else None,
                level=self.config.get("logging.level", "INFO"),
                use_json=str(self.config.get("logging.json", False)).lower() in ("1", "true", "yes"),
            )
        self.logger = logging.getLogger(self.__class__.__name__)
        self.stores: Dict[str, MemoryDataStore] = {}

    def create_hashnode_loaders(self) -> Dict[str, BaseHashnodeLoader]:
        """Instantiate every loader the configuration enables.

        Nothing is loaded without a publication host. Otherwise posts and
        series are always loaded; drafts need a token and search needs at
        least one term.
        """
        loaders: Dict[str, BaseHashnodeLoader] = {}
        if not self.config.get("hashnode.publication_host"):
            self.logger.warning("No publication host configured, no collections will be loaded")
            return loaders

        for kind in ("posts", "series", "drafts", "search"):
            options = self.config.loader_options(kind)
            if kind == "drafts" and not options.token:
                self.logger.info("No token configured, drafts will not be loaded")
                continue
            if kind == "search" and not options.search_terms:
                self.logger.debug("No search terms configured, search will not be loaded")
                continue
            loaders[kind] = create_loader(kind, options)
        return loaders

    async def load_collection(self, loader: BaseHashnodeLoader, store) -> LoadSummary:
        """Run one loader's cycle into ``store``."""
        return await loader.load(LoaderContext(store=store))

    async def load_all(
        self,
        store_factory: Callable[[], MemoryDataStore] = MemoryDataStore,
        loaders: Optional[Dict[str, BaseHashnodeLoader]] = None,
    ) -> Dict[str, LoadSummary]:
        """Run every enabled loader sequentially.

        Parameters
        ----------
        store_factory: callable
            Creates one store per collection.
        loaders: dict, optional
            Loaders to run instead of the configured ones.

        Returns
        -------
        dict
            ``{collection: LoadSummary}`` in run order.
        """
        loaders = loaders if loaders is not None else self.create_hashnode_loaders()
        summaries: Dict[str, LoadSummary] = {}
        for name, loader in loaders.items():
            store = store_factory()
            self.stores[name] = store
            summaries[name] = await self.load_collection(loader, store)

        failed = [name for name, summary in summaries.items() if summary.failed]
        if failed:
            self.logger.warning("Collections failed to load: %s", ", ".join(failed))
        return summaries
