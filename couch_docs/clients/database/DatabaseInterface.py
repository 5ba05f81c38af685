from abc import abstractmethod
from urllib.parse import quote

import httpx

from couch_docs.clients.ClientInterface import ClientInterface
from couch_docs.documents.Document import Document
from couch_docs.documents.DocumentCollection import DocumentCollection
from couch_docs.documents.errors import FetchFailure
from couch_docs.helper.HelperConfig import HelperConfig


class DatabaseInterface(ClientInterface):
    """
    Client of a single database of a document store. Documents.populate() uses it to resolve references.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "database"

    @abstractmethod
    def get_database_name(self) -> str:
        """
        Returns the name of the database the client works on.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_bulk(self) -> str:
        """
        Returns the endpoint path for fetching several documents by id in one request.

        Returns:
            str: The endpoint path (e.g. "/mydb/_all_docs")
        """
        pass

    @abstractmethod
    def _get_params_bulk(self) -> dict:
        """
        Returns the query parameters of a bulk request (e.g. {"include_docs": "true"}).
        """
        pass

    @abstractmethod
    def _get_body_bulk(self, ids: list[str]) -> dict:
        """
        Returns the JSON body of a bulk request for the given ids.
        """
        pass

    @abstractmethod
    def _get_endpoint_document(self, document_id: str) -> str:
        """
        Returns the endpoint path of a single document (e.g. "/mydb/{id}").
        The id is passed already percent-encoded.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def get_bulk(self, ids: list[str]) -> DocumentCollection:
        """
        Fetches several documents by id in a single request.

        Unknown ids and design documents are left out of the result, the order of the remaining
        documents follows the order of the ids.

        Args:
            ids (list[str]): The ids to fetch.

        Returns:
            DocumentCollection: The fetched documents.

        Raises:
            FetchFailure: If the client is not booted, the request fails, the backend answers with a non-2xx status or the body is not JSON.
            ExtractionError: If the response is JSON but not a valid query result.
        """
        if not ids:
            return DocumentCollection.from_documents([])

        raw = await self._do_fetch_json(
            method="POST",
            endpoint=self._get_endpoint_bulk(),
            params=self._get_params_bulk(),
            json=self._get_body_bulk(ids),
        )
        collection = DocumentCollection.from_query_result(raw)
        self.logging.debug("Fetched %d of %d requested documents from %s", len(collection), len(ids), self.get_database_name())
        return collection

    async def get(self, document_id: str) -> Document:
        """
        Fetches a single document.

        Args:
            document_id (str): The id of the document.

        Returns:
            Document: The fetched document.

        Raises:
            FetchFailure: If the document does not exist or the request fails.
            ExtractionError: If the answer carries no valid ``_id``/``_rev``.
        """
        raw = await self._do_fetch_json(method="GET", endpoint=self._get_endpoint_document(quote(document_id, safe="")))
        return Document(raw)

    async def _do_fetch_json(self, method: str, endpoint: str, params: dict | None = None, json: dict | None = None):
        """
        Sends a request and decodes its JSON answer, turning every failure into a FetchFailure.
        """
        if not self.is_booted():
            raise FetchFailure(f"{self.get_engine_name()} client is not booted. Call boot() before fetching documents.")

        try:
            resp = await self.do_request(method=method, endpoint=endpoint, params=params, json=json)
        except httpx.HTTPError as e:
            self.logging.error("Request %s %s to %s failed: %s", method, endpoint, self.get_engine_name(), e)
            raise FetchFailure(f"Request {method} {endpoint} failed: {e}") from e

        if resp.status_code >= 300:
            self.logging.error("Request %s %s to %s failed with status %d: %s", method, endpoint, self.get_engine_name(), resp.status_code, resp.text)
            raise FetchFailure(f"Request {method} {endpoint} failed with status {resp.status_code}", status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise FetchFailure(f"Response of {method} {endpoint} is not valid JSON: {e}", status_code=resp.status_code) from e
