import httpx
from urllib.parse import quote

from couch_docs.clients.database.DatabaseInterface import DatabaseInterface
from couch_docs.helper.HelperConfig import HelperConfig
from couch_docs.models.config import EnvConfig


class DatabaseCouchDB(DatabaseInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._db_name = self.get_config_val("NAME", default=None, val_type="string")
        self._user = self.get_config_val("USER", default="", val_type="string")
        self._password = self.get_config_val("PASSWORD", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "CouchDB"

    def get_database_name(self) -> str:
        return self._db_name

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="NAME", val_type="string", default=None),
            EnvConfig(env_key="USER", val_type="string", default=""),
            EnvConfig(env_key="PASSWORD", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth(self) -> httpx.Auth | None:
        if self._user:
            return httpx.BasicAuth(self._user, self._password)
        return None

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_db_path(self) -> str:
        return f"/{quote(self._db_name, safe='')}"

    def _get_endpoint_healthcheck(self) -> str:
        return self._get_db_path()

    def _get_endpoint_bulk(self) -> str:
        return f"{self._get_db_path()}/_all_docs"

    def _get_params_bulk(self) -> dict:
        return {"include_docs": "true"}

    def _get_body_bulk(self, ids: list[str]) -> dict:
        return {"keys": ids}

    def _get_endpoint_document(self, document_id: str) -> str:
        return f"{self._get_db_path()}/{document_id}"
