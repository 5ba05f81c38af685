"""Shared test helpers for building store responses."""

from __future__ import annotations


def make_row(doc: dict) -> dict:
    """A row of an ``_all_docs?include_docs=true`` response for the given document."""
    return {"id": doc["_id"], "key": doc["_id"], "value": {"rev": doc["_rev"]}, "doc": doc}


def make_doc(doc_id: str, rev: str = "1-a", **fields) -> dict:
    return {"_id": doc_id, "_rev": rev, **fields}


def make_query_result(*rows: dict, offset: int | None = 0, total_rows: int | None = None) -> dict:
    result: dict = {"rows": list(rows)}
    if offset is not None:
        result["offset"] = offset
    result["total_rows"] = len(rows) if total_rows is None else total_rows
    return result
