class StorageOperationError(Exception):
    """A storage call failed.

    Carries the operation name, the request path and, when the server
    answered, the HTTP status. Response bodies are never included.
    """

    def __init__(self, message, operation=None, path=None, status=None):
        super().__init__(message)
        self.operation = operation
        self.path = path
        self.status = status


class AuthenticationError(StorageOperationError):
    """The auth service rejected the credentials or gave an unusable answer."""
