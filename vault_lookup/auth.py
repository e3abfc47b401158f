import logging
from pathlib import Path

import httpx

from .errors import AuthenticationError, ConfigurationError, NetworkError
from .models import AuthMethod, TokenFileAuth
from .secrets import is_header_safe

logger = logging.getLogger("vault_lookup.auth")


def read_token_file(path: Path) -> str:
    try:
        token = path.read_bytes().decode("ascii").strip()
    except OSError as exc:
        raise ConfigurationError(f"Unable to read the 'token_file' {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigurationError(f"The 'token_file' is not ASCII text: {path}") from exc
    if not token:
        raise ConfigurationError(f"The 'token_file' is empty: {path}")
    if not is_header_safe(token):
        raise ConfigurationError(f"The 'token_file' holds characters a Vault token cannot contain: {path}")
    return token


def cert_login(client: httpx.Client, mount: str) -> str:
    """Log in through the ``cert`` auth method mounted at ``mount``.

    No credentials go in the request body: Vault identifies the caller by
    the client certificate presented during the TLS handshake.
    """
    url = f"/v1/auth/{mount}/login"
    try:
        resp = client.post(url)
    except httpx.DecodingError as exc:
        raise AuthenticationError(f"Vault login response from {url} could not be decoded: {exc}") from exc
    except httpx.RequestError as exc:
        raise NetworkError(f"Vault certificate login to {url} failed: {exc}") from exc

    if not resp.is_success:
        raise AuthenticationError(f"Vault rejected certificate login to {url} with HTTP {resp.status_code}")

    try:
        payload = resp.json()
    except ValueError as exc:
        raise AuthenticationError(f"Vault login response from {url} is not valid JSON") from exc

    auth = payload.get("auth") if isinstance(payload, dict) else None
    token = auth.get("client_token") if isinstance(auth, dict) else None
    if not isinstance(token, str) or not token or not is_header_safe(token):
        raise AuthenticationError(f"Vault login response from {url} has no auth.client_token")

    logger.debug("auth.login", extra={"mount": mount, "policies": auth.get("policies", [])})
    return token


def authenticate(client: httpx.Client, method: AuthMethod) -> str:
    if isinstance(method, TokenFileAuth):
        return read_token_file(method.path)
    return cert_login(client, method.mount)
