class RemoteClassifierError(Exception):
    """Raised when the remote classification service cannot be used."""


class RemoteClassifierNetworkError(RemoteClassifierError):
    """Raised when the service call fails due to network/infrastructure issues."""


class RemoteClassifierResponseError(RemoteClassifierError):
    """Raised when the service answers with an error object or a malformed result."""
