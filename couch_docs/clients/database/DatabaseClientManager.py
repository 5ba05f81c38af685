from couch_docs.helper.HelperConfig import HelperConfig
from couch_docs.clients.database.DatabaseInterface import DatabaseInterface


class DatabaseClientManager:
    """
    Instantiates the database client of the engine selected in the configuration.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """
        Reads the database engine from the DATABASE_ENGINE setting.

        Returns:
            str: The engine name as used in module names, e.g. "couchdb".
        """
        return self.helper_config.get_string_val("DATABASE_ENGINE", default="couchdb").strip().lower()

    def _initialize_client(self) -> DatabaseInterface:
        """
        Imports couch_docs.clients.database.{engine}.Database{Engine} and instantiates it.

        Raises:
            ValueError: If the engine is not supported.
        """
        engine = self._get_engine_from_env()
        class_names = {"couchdb": "DatabaseCouchDB"}
        class_name = class_names.get(engine)
        if class_name is None:
            raise ValueError(f"Unsupported database engine specified: '{engine}'. Supported: {', '.join(class_names)}")

        module = __import__(
            f"couch_docs.clients.database.{engine}.{class_name}",
            fromlist=[class_name],
        )
        client = getattr(module, class_name)(helper_config=self.helper_config)
        self.logging.debug(f"Instantiated database client for engine: {engine}")
        return client

    def get_client(self) -> DatabaseInterface:
        """
        Returns the instantiated database client.
        """
        return self.client
