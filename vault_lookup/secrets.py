from typing import Any

import httpx

from .errors import AuthenticationError, ConfigurationError, NetworkError, ProtocolError, RemoteError


def _error_body(resp: httpx.Response) -> Any:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text
    if isinstance(payload, dict) and "errors" in payload:
        return payload["errors"]
    return payload


def is_header_safe(token: str) -> bool:
    return token.isascii() and token.isprintable()


def fetch_secret(client: httpx.Client, path: str, token: str) -> dict[str, Any]:
    if not is_header_safe(token):
        raise ConfigurationError("The Vault token contains characters that cannot be sent in a header")

    headers = {"X-Vault-Token": token}
    try:
        resp = client.get(path, headers=headers)
    except httpx.TimeoutException as exc:
        raise NetworkError(f"Timed out reading Vault secret at {path}") from exc
    except httpx.DecodingError as exc:
        raise ProtocolError(f"Vault response for {path} could not be decoded: {exc}") from exc
    except httpx.RequestError as exc:
        raise NetworkError(f"Unable to reach Vault for {path}: {exc}") from exc

    if resp.status_code in (401, 403):
        raise AuthenticationError(f"Vault denied access to {path} with HTTP {resp.status_code}")
    if not resp.is_success:
        body = _error_body(resp)
        raise RemoteError(f"Vault returned HTTP {resp.status_code} for {path}: {body}", resp.status_code, body)

    try:
        payload = resp.json()
    except ValueError as exc:
        raise ProtocolError(f"Vault response for {path} is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise ProtocolError(f"Vault response for {path} is not a JSON object")
    return payload
