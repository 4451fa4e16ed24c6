"""Storage layer for hashnode-loader.

This package contains the content store contract and an in-memory store used
by the CLI and the test suite.
"""

from hashnode_loader.storage.memory import DataStore, MemoryDataStore

__all__ = ["DataStore", "MemoryDataStore"]
