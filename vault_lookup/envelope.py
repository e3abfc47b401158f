from collections.abc import Mapping
from typing import Any, Literal

from .errors import ProtocolError


def _mapping_field(container: Mapping[str, Any], field: str, where: str) -> dict[str, Any]:
    if field not in container:
        raise ProtocolError(f"Vault response is missing '{where}'")
    value = container[field]
    if value is None:
        # KV v2 answers deleted or destroyed versions with a null payload.
        return {}
    if not isinstance(value, Mapping):
        raise ProtocolError(f"Vault response field '{where}' is not an object")
    return dict(value)


def parse_v1(envelope: Mapping[str, Any]) -> dict[str, Any]:
    return _mapping_field(envelope, "data", "data")


def parse_v2(envelope: Mapping[str, Any]) -> dict[str, Any]:
    if "data" in envelope and envelope["data"] is None:
        return {}
    outer = _mapping_field(envelope, "data", "data")
    return _mapping_field(outer, "data", "data.data")


def parse_secret_data(envelope: Mapping[str, Any], version: Literal["v1", "v2"]) -> dict[str, Any]:
    if not isinstance(envelope, Mapping):
        raise ProtocolError("Vault response is not an object")
    if version == "v2":
        return parse_v2(envelope)
    return parse_v1(envelope)
