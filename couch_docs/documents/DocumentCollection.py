"""Collections of documents, as returned by queries that involve multiple documents."""

import logging
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, ValidationError, computed_field, field_serializer

from couch_docs.documents.Document import Document
from couch_docs.documents.errors import ExtractionError

logger = logging.getLogger(__name__)

# ids starting with this character belong to design/internal documents
RESERVED_ID_PREFIX = "_"


class _QueryRow(BaseModel):
    """One entry of the ``rows`` array of a view/_all_docs response."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    key: Any = None
    value: Any = None
    doc: dict | None = None
    error: Any = None


class _QueryResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rows: list[_QueryRow]
    offset: NonNegativeInt | None = None
    total_rows: NonNegativeInt | None = None


class DocumentCollectionItem(BaseModel):
    """
    A document together with its id, for quick lookups inside a DocumentCollection.
    The item cannot be reassigned to another document; ``id`` always reflects the current id of ``doc``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    doc: Document

    @computed_field
    @property
    def id(self) -> str:
        return self.doc.get_id()

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentCollectionItem":
        return cls(doc=doc)

    @field_serializer("doc")
    def _serialize_doc(self, doc: Document) -> dict:
        return doc.get_data()


class DocumentCollection(BaseModel):
    """
    Ordered collection of documents with the pagination metadata of the query that produced it.

    ``total_rows`` is the number of rows actually kept, not the count reported by the store,
    since error rows and design documents are filtered out.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    offset: NonNegativeInt | None = None
    rows: list[DocumentCollectionItem] = Field(default_factory=list)
    total_rows: NonNegativeInt = 0
    bookmark: str | None = None

    ##########################################
    ############# CONSTRUCTION ###############
    ##########################################

    @classmethod
    def from_query_result(cls, raw: dict) -> "DocumentCollection":
        """
        Builds a collection from a raw query response (e.g. ``_all_docs?include_docs=true``).

        Rows carrying an ``error`` (such as ``not_found`` for unknown keys), rows of deleted
        documents and design documents are dropped. The order of the remaining rows is kept.

        Args:
            raw (dict): The decoded JSON response.

        Returns:
            DocumentCollection: The filtered collection. ``bookmark`` is not set.

        Raises:
            ExtractionError: If the response has no ``rows`` array or a kept row has no usable document.
        """
        try:
            result = _QueryResult.model_validate(raw)
        except ValidationError as e:
            raise ExtractionError(f"Invalid query result: {e}", path=("rows",)) from e

        items: list[DocumentCollectionItem] = []
        for pos, row in enumerate(result.rows):
            # remove errors
            if row.error is not None:
                logger.debug("Skipping row %d (key %r): %s", pos, row.key, row.error)
                continue

            if row.doc is None:
                if isinstance(row.value, dict) and row.value.get("deleted"):
                    logger.debug("Skipping deleted document '%s'", row.id)
                    continue
                raise ExtractionError(f"Row {pos} carries no document", path=("rows", pos, "doc"))

            # remove _design documents, before their identity is validated
            doc_id = row.doc.get("_id")
            if isinstance(doc_id, str) and doc_id.startswith(RESERVED_ID_PREFIX):
                continue
            items.append(DocumentCollectionItem.from_document(Document(row.doc)))

        return cls(
            offset=result.offset,
            rows=items,
            total_rows=len(items),
            bookmark=None,
        )

    @classmethod
    def from_documents(cls, documents: list[Document], bookmark: str | None = None) -> "DocumentCollection":
        """
        Wraps already filtered documents. No filtering happens here.

        Args:
            documents (list[Document]): The documents, in order.
            bookmark (str | None): Pagination bookmark to carry along.
        """
        rows = [DocumentCollectionItem.from_document(doc) for doc in documents]
        return cls(offset=0, rows=rows, total_rows=len(rows), bookmark=bookmark)

    ##########################################
    ################ ACCESS ##################
    ##########################################

    def get_data(self) -> list[dict]:
        """
        Returns:
            list[dict]: A copy of the raw JSON of every document, in order.
        """
        return [item.doc.get_data() for item in self.rows]

    def get_ids(self) -> list[str]:
        return [item.id for item in self.rows]

    def __getitem__(self, index: int) -> DocumentCollectionItem:
        if index < 0 or index >= len(self.rows):
            raise IndexError(f"Index {index} out of range for collection of {len(self.rows)} rows")
        return self.rows[index]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[DocumentCollectionItem]:  # type: ignore[override]
        return iter(self.rows)
