"""Capability contract shared by every document representation the database clients exchange.

Hierarchy:
  TypedCouchDocument  — abstract contract: id/rev get/set and identity merge.
  RawDocument         — adapter over a raw, decoded JSON value.
  CouchDocumentModel  — pydantic base class for strongly-typed records.
"""

from abc import ABC, abstractmethod
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

from couch_docs.documents.json_path import extract


class TypedCouchDocument(ABC):
    """
    Minimal interface a document must fulfil to be handed to a database client.
    """

    @abstractmethod
    def get_id(self) -> str:
        """
        Returns the document id (``_id``).

        Raises:
            ExtractionError: If the id is missing or not a string.
        """
        pass

    @abstractmethod
    def get_rev(self) -> str:
        """
        Returns the document revision (``_rev``).

        Raises:
            ExtractionError: If the revision is missing or not a string.
        """
        pass

    @abstractmethod
    def set_id(self, id: str) -> None:
        pass

    @abstractmethod
    def set_rev(self, rev: str) -> None:
        pass

    def merge(self, other: Self) -> None:
        """
        Takes over the identity (id and revision) of another document of the same kind.
        The rest of the document is left untouched.

        Args:
            other: The document whose id and revision overwrite this one's.
        """
        self.set_id(other.get_id())
        self.set_rev(other.get_rev())


class RawDocument(TypedCouchDocument):
    """
    TypedCouchDocument over a raw JSON value, as returned by the store.
    """

    def __init__(self, value: Any):
        self.value = value

    @classmethod
    def from_json(cls, value: Any) -> "RawDocument":
        return cls(value)

    def to_json(self) -> Any:
        return self.value

    def get_id(self) -> str:
        return extract(self.value, "_id", expected=str)

    def get_rev(self) -> str:
        return extract(self.value, "_rev", expected=str)

    def set_id(self, id: str) -> None:
        # only objects can carry an id, anything else is left alone
        if isinstance(self.value, dict):
            self.value["_id"] = id

    def set_rev(self, rev: str) -> None:
        if isinstance(self.value, dict):
            self.value["_rev"] = rev

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RawDocument):
            return NotImplemented
        return self.value == other.value

    def __repr__(self) -> str:
        return f"RawDocument({self.value!r})"


class CouchDocumentModel(BaseModel, TypedCouchDocument):
    """
    Base class for strongly-typed documents. Subclass it and declare your own fields:

        class Article(CouchDocumentModel):
            title: str
            tags: list[str] = []

    ``_id`` and ``_rev`` are exposed as ``id`` and ``rev``. A record that was never stored
    has an empty revision, which is left out when serialising.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default="", alias="_id")
    rev: str = Field(default="", alias="_rev")

    @classmethod
    def from_json(cls, value: dict) -> Self:
        return cls.model_validate(value)

    def to_json(self) -> dict:
        data = self.model_dump(by_alias=True, mode="json")
        if not self.rev:
            data.pop("_rev", None)
        return data

    def get_id(self) -> str:
        return self.id

    def get_rev(self) -> str:
        return self.rev

    def set_id(self, id: str) -> None:
        self.id = id

    def set_rev(self, rev: str) -> None:
        self.rev = rev
