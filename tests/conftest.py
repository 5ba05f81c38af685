"""Shared pytest fixtures."""

from __future__ import annotations

import logging

import pytest

from couch_docs.helper.HelperConfig import HelperConfig


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=logging.getLogger("couch_docs.tests"))


@pytest.fixture
def couchdb_env(monkeypatch):
    """Minimal environment for a CouchDB database client."""
    monkeypatch.setenv("DATABASE_COUCHDB_BASE_URL", "http://couch.local:5984")
    monkeypatch.setenv("DATABASE_COUCHDB_NAME", "authors")
    monkeypatch.delenv("DATABASE_COUCHDB_USER", raising=False)
    monkeypatch.delenv("DATABASE_COUCHDB_PASSWORD", raising=False)
    monkeypatch.delenv("DATABASE_ENGINE", raising=False)
    monkeypatch.delenv("DATABASE_TIMEOUT", raising=False)


@pytest.fixture
def raw_doc() -> dict:
    return {
        "_id": "book-1",
        "_rev": "1-abc",
        "title": "Dune",
        "year": 1965,
        "authors": ["author-1", "author-2"],
        "meta": {"pages": 412, "isbn": ["978-0441013593"]},
    }
