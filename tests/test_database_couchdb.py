"""Tests for the CouchDB database client, using httpx.MockTransport instead of a server."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from couch_docs.clients.database.DatabaseClientManager import DatabaseClientManager
from couch_docs.clients.database.couchdb.DatabaseCouchDB import DatabaseCouchDB
from couch_docs.documents.Document import Document
from couch_docs.documents.errors import ExtractionError, FetchFailure
from tests.helpers import make_doc, make_query_result, make_row


class RecordingHandler:
    """MockTransport handler that records requests and answers with a fixed response."""

    def __init__(self, status_code: int = 200, body=None, content: bytes | None = None):
        self.status_code = status_code
        self.body = body
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.body)


async def booted_client(helper_config, handler) -> DatabaseCouchDB:
    client = DatabaseCouchDB(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(handler))
    return client


class TestConfiguration:
    def test_reads_settings(self, helper_config, couchdb_env, monkeypatch):
        monkeypatch.setenv("DATABASE_TIMEOUT", "5")
        client = DatabaseCouchDB(helper_config=helper_config)
        assert client.get_engine_name() == "couchdb"
        assert client.get_client_type() == "database"
        assert client.get_database_name() == "authors"
        assert client.timeout == 5

    def test_missing_base_url_raises(self, helper_config, couchdb_env, monkeypatch):
        monkeypatch.delenv("DATABASE_COUCHDB_BASE_URL")
        with pytest.raises(ValueError):
            DatabaseCouchDB(helper_config=helper_config)

    def test_manager_instantiates_couchdb(self, helper_config, couchdb_env):
        manager = DatabaseClientManager(helper_config=helper_config)
        assert isinstance(manager.get_client(), DatabaseCouchDB)

    def test_manager_rejects_unknown_engine(self, helper_config, couchdb_env, monkeypatch):
        monkeypatch.setenv("DATABASE_ENGINE", "mongo")
        with pytest.raises(ValueError):
            DatabaseClientManager(helper_config=helper_config)


class TestGetBulk:
    @pytest.mark.asyncio
    async def test_posts_keys_to_all_docs(self, helper_config, couchdb_env):
        docs = [make_doc("author-1"), make_doc("author-2")]
        handler = RecordingHandler(body=make_query_result(*(make_row(d) for d in docs)))
        client = await booted_client(helper_config, handler)
        try:
            collection = await client.get_bulk(["author-1", "author-2"])
        finally:
            await client.close()

        request = handler.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/authors/_all_docs"
        assert request.url.params["include_docs"] == "true"
        assert json.loads(request.content) == {"keys": ["author-1", "author-2"]}
        assert collection.get_data() == docs

    @pytest.mark.asyncio
    async def test_unknown_keys_are_filtered(self, helper_config, couchdb_env):
        body = make_query_result(make_row(make_doc("author-1")), {"key": "nope", "error": "not_found"})
        client = await booted_client(helper_config, RecordingHandler(body=body))
        try:
            collection = await client.get_bulk(["author-1", "nope"])
        finally:
            await client.close()
        assert collection.get_ids() == ["author-1"]
        assert collection.total_rows == 1

    @pytest.mark.asyncio
    async def test_empty_ids_skip_the_request(self, helper_config, couchdb_env):
        handler = RecordingHandler(body={})
        client = await booted_client(helper_config, handler)
        try:
            collection = await client.get_bulk([])
        finally:
            await client.close()
        assert len(collection) == 0
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_error_status_raises_fetch_failure(self, helper_config, couchdb_env):
        handler = RecordingHandler(status_code=401, body={"error": "unauthorized"})
        client = await booted_client(helper_config, handler)
        try:
            with pytest.raises(FetchFailure) as exc_info:
                await client.get_bulk(["a"])
        finally:
            await client.close()
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_transport_error_raises_fetch_failure(self, helper_config, couchdb_env):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = await booted_client(helper_config, handler)
        try:
            with pytest.raises(FetchFailure):
                await client.get_bulk(["a"])
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_invalid_json_raises_fetch_failure(self, helper_config, couchdb_env):
        client = await booted_client(helper_config, RecordingHandler(content=b"<html>"))
        try:
            with pytest.raises(FetchFailure):
                await client.get_bulk(["a"])
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_malformed_result_raises_extraction_error(self, helper_config, couchdb_env):
        client = await booted_client(helper_config, RecordingHandler(body={"ok": True}))
        try:
            with pytest.raises(ExtractionError):
                await client.get_bulk(["a"])
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_request_before_boot_raises_fetch_failure(self, helper_config, couchdb_env):
        client = DatabaseCouchDB(helper_config=helper_config)
        with pytest.raises(FetchFailure, match="boot"):
            await client.get_bulk(["a"])


class TestGet:
    @pytest.mark.asyncio
    async def test_fetches_single_document(self, helper_config, couchdb_env):
        handler = RecordingHandler(body=make_doc("author-1", name="Frank"))
        client = await booted_client(helper_config, handler)
        try:
            doc = await client.get("author-1")
        finally:
            await client.close()
        assert handler.requests[0].url.path == "/authors/author-1"
        assert doc == Document(make_doc("author-1", name="Frank"))

    @pytest.mark.asyncio
    async def test_missing_document_raises_fetch_failure(self, helper_config, couchdb_env):
        handler = RecordingHandler(status_code=404, body={"error": "not_found", "reason": "missing"})
        client = await booted_client(helper_config, handler)
        try:
            with pytest.raises(FetchFailure) as exc_info:
                await client.get("nope")
        finally:
            await client.close()
        assert exc_info.value.status_code == 404


class TestAuthAndHealth:
    @pytest.mark.asyncio
    async def test_basic_auth_is_sent(self, helper_config, couchdb_env, monkeypatch):
        monkeypatch.setenv("DATABASE_COUCHDB_USER", "admin")
        monkeypatch.setenv("DATABASE_COUCHDB_PASSWORD", "secret")
        handler = RecordingHandler(body={"db_name": "authors"})
        client = await booted_client(helper_config, handler)
        try:
            await client.do_healthcheck()
        finally:
            await client.close()
        request = handler.requests[0]
        assert request.url.path == "/authors"
        assert request.headers["Authorization"] == "Basic " + base64.b64encode(b"admin:secret").decode()

    @pytest.mark.asyncio
    async def test_failed_healthcheck_raises(self, helper_config, couchdb_env):
        client = await booted_client(helper_config, RecordingHandler(status_code=404, body={"error": "not_found"}))
        try:
            with pytest.raises(Exception):
                await client.do_healthcheck()
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_close_resets_client(self, helper_config, couchdb_env):
        client = await booted_client(helper_config, RecordingHandler(body={}))
        assert client.is_booted()
        await client.close()
        assert not client.is_booted()


class TestPopulateThroughClient:
    @pytest.mark.asyncio
    async def test_populate_resolves_references(self, helper_config, couchdb_env):
        authors = [make_doc("author-1", name="Frank"), make_doc("author-2", name="Brian")]
        body = make_query_result(*(make_row(d) for d in authors), {"key": "author-3", "error": "not_found"})
        client = await booted_client(helper_config, RecordingHandler(body=body))
        book = Document(make_doc("book-1", authors=["author-1", "author-2", "author-3"]))
        try:
            await book.populate("authors", client)
        finally:
            await client.close()
        assert book["authors"] == authors

    @pytest.mark.asyncio
    async def test_populate_survives_server_errors(self, helper_config, couchdb_env):
        client = await booted_client(helper_config, RecordingHandler(status_code=500, body={"error": "internal"}))
        book = Document(make_doc("book-1", authors=["author-1"]))
        try:
            await book.populate("authors", client)
        finally:
            await client.close()
        assert book["authors"] == ["author-1"]

    @pytest.mark.asyncio
    async def test_populate_with_unbooted_client_keeps_ids(self, helper_config, couchdb_env):
        client = DatabaseCouchDB(helper_config=helper_config)
        book = Document(make_doc("book-1", authors=["author-1"]))

        result = await book.populate("authors", client)

        assert result is book
        assert book["authors"] == ["author-1"]
