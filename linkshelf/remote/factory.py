from linkshelf.config.settings import Settings
from linkshelf.remote.base import BaseRemoteClassifier
from linkshelf.remote.jsonrpc_client import JsonRpcClassifierClient


class RemoteClassifierFactory:
    """Creates the remote classifier adapter, or None when it is disabled."""

    @classmethod
    def create(cls, settings: Settings) -> BaseRemoteClassifier | None:
        if not settings.remote_classifier_enabled:
            return None
        url = settings.remote_classifier_url.strip()
        if not url:
            raise ValueError(
                "remote_classifier_url is required when remote_classifier_enabled=true"
            )
        client = JsonRpcClassifierClient(
            server_url=url,
            timeout_seconds=settings.remote_classifier_timeout_seconds,
            tool_name=settings.remote_classifier_tool_name,
        )
        client.check_connection()
        return client
