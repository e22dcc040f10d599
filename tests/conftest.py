"""Shared pytest fixtures."""

import pytest

from fakes import InMemoryDocumentStore, InMemoryListStore


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def list_store() -> InMemoryListStore:
    return InMemoryListStore()
