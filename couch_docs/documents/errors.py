"""Exceptions raised by the document layer and the database clients."""


class ExtractionError(ValueError):
    """
    Raised when a required JSON member (e.g. ``_id`` or ``_rev``) is missing or has the wrong type.

    Attributes:
        path (tuple): The key/index path that failed to resolve.
    """

    def __init__(self, message: str, path: tuple = ()):
        super().__init__(message)
        self.path = path


class FetchFailure(Exception):
    """
    Raised when a database client cannot fetch the requested documents.

    Attributes:
        status_code (int | None): The HTTP status of the failed response, if there was one.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
