from typing import Any


class VaultLookupError(RuntimeError):
    """Base class for every failure surfaced by a Vault lookup."""


class ConfigurationError(VaultLookupError):
    pass


class AuthenticationError(VaultLookupError):
    pass


class NetworkError(VaultLookupError):
    pass


class ProtocolError(VaultLookupError):
    pass


class RemoteError(VaultLookupError):
    def __init__(self, message: str, status_code: int, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
