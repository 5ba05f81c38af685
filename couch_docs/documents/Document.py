"""Dynamic, JSON-backed document as stored in a CouchDB database."""

import copy
import logging
from typing import TYPE_CHECKING, Any

from couch_docs.documents.errors import ExtractionError, FetchFailure
from couch_docs.documents.json_path import PathSegment, extract, get_path, set_path

if TYPE_CHECKING:
    from couch_docs.clients.database.DatabaseInterface import DatabaseInterface

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = ("_id", "_rev")


class Document:
    """
    Wraps the raw JSON of a stored document and gives typed access to its identity.

    The id and revision are kept as attributes and also stay inside the payload, which is what
    gets serialised. Fields are reachable with ``doc["field"]`` or, for nested values, with
    ``get_path``/``set_path``.

    Not safe for concurrent ``populate`` calls on the same document: each call writes its result
    back into the shared payload, so callers have to serialise them or target disjoint fields.
    """

    def __init__(self, doc: dict):
        """
        Args:
            doc (dict): The decoded JSON object of the document. It is copied, later changes to it do not affect the document.

        Raises:
            ExtractionError: If ``_id`` or ``_rev`` is missing or not a string.
        """
        if not isinstance(doc, dict):
            raise ExtractionError(f"Document must be a JSON object, got {type(doc).__name__}")
        self._id: str = extract(doc, "_id", expected=str)
        self._rev: str = extract(doc, "_rev", expected=str)
        self._doc = copy.deepcopy(doc)

    ##########################################
    ################ IDENTITY ################
    ##########################################

    @property
    def id(self) -> str:
        return self._id

    @property
    def rev(self) -> str:
        return self._rev

    def get_id(self) -> str:
        return self._id

    def get_rev(self) -> str:
        return self._rev

    def set_id(self, id: str) -> None:
        self._id = id
        self._doc["_id"] = id

    def set_rev(self, rev: str) -> None:
        self._rev = rev
        self._doc["_rev"] = rev

    ##########################################
    ################ ACCESS ##################
    ##########################################

    def get_keys(self) -> set[str]:
        """
        Returns:
            set[str]: The top-level field names of the document.
        """
        return set(self._doc.keys())

    def get_data(self) -> dict:
        """
        Returns:
            dict: A deep copy of the raw JSON of the document.
        """
        return copy.deepcopy(self._doc)

    def get_path(self, *segments: PathSegment) -> Any:
        return get_path(self._doc, *segments)

    def set_path(self, segments: tuple | list, value: Any) -> None:
        """
        Writes a (nested) field. Writing ``_id`` or ``_rev`` at the top level also updates the identity.

        Raises:
            ExtractionError: If a top-level ``_id``/``_rev`` is set to a non-string.
        """
        segments = tuple(segments)
        if len(segments) == 1 and segments[0] in IDENTITY_FIELDS:
            if not isinstance(value, str):
                raise ExtractionError(f"Field '{segments[0]}' must be a string", path=segments)
            if segments[0] == "_id":
                self.set_id(value)
            else:
                self.set_rev(value)
            return
        set_path(self._doc, segments, value)

    def __getitem__(self, key: PathSegment) -> Any:
        return self.get_path(key)

    def __setitem__(self, key: PathSegment, value: Any) -> None:
        self.set_path((key,), value)

    def __contains__(self, key: str) -> bool:
        return key in self._doc

    ##########################################
    ################ UPDATES #################
    ##########################################

    def merge(self, payload: dict) -> "Document":
        """
        Applies a partial update. Every top-level key of the payload overwrites (or adds) the
        matching field, except ``_id`` and ``_rev`` which are ignored so the identity never changes.

        Args:
            payload (dict): The fields to write.

        Returns:
            Document: self, for chaining.
        """
        if not isinstance(payload, dict):
            return self
        for key, value in payload.items():
            if key in IDENTITY_FIELDS:
                continue
            self._doc[key] = copy.deepcopy(value)
        return self

    async def populate(self, field: str, database: "DatabaseInterface") -> "Document":
        """
        Replaces a field holding an array of ids from another database with the referenced documents.

        Only one level is resolved. Fetched documents that were not requested are dropped.
        ``_id`` and ``_rev`` cannot be populated, the call is a no-op for them.
        If the bulk fetch fails the field keeps its ids and no error is raised; the failure is logged.

        Args:
            field (str): Name of the field holding the ids.
            database (DatabaseInterface): Client of the database the ids belong to.

        Returns:
            Document: self, for chaining.
        """
        # identity fields are never replaced by referenced documents
        if field in IDENTITY_FIELDS:
            return self

        original = copy.deepcopy(self._doc.get(field))
        if original is None:
            return self

        # non-string ids are kept as empty strings, they simply won't match anything
        ids = [item if isinstance(item, str) else "" for item in original] if isinstance(original, list) else []
        requested = set(ids)

        if not ids:
            self._doc[field] = []
            return self

        try:
            fetched = await database.get_bulk(ids)
        except FetchFailure as e:
            logger.warning("Could not populate field '%s' of document '%s': %s", field, self._id, e)
            return self

        populated = []
        for data in fetched.get_data():
            doc_id = data.get("_id")
            if isinstance(doc_id, str) and doc_id in requested:
                populated.append(data)
            else:
                logger.debug("Dropping unrequested document '%s' while populating '%s'", doc_id, field)
        self._doc[field] = populated
        return self

    ##########################################
    ############# SERIALISATION ##############
    ##########################################

    def to_json(self) -> dict:
        """
        Returns:
            dict: The payload as stored, ``_id``/``_rev`` included only once, inside the payload.
        """
        return copy.deepcopy(self._doc)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self._id == other._id and self._rev == other._rev and self._doc == other._doc

    def __repr__(self) -> str:
        return f"Document(_id={self._id!r}, _rev={self._rev!r})"
