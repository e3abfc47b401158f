import logging
from collections.abc import Mapping
from typing import Any

import httpx
from opentelemetry import metrics, trace

from .auth import authenticate
from .config import Settings, get_settings
from .context import LookupContext
from .envelope import parse_secret_data
from .errors import VaultLookupError
from .models import validate_options
from .secrets import fetch_secret
from .transport import build_client

logger = logging.getLogger("vault_lookup.lookup")
tracer = trace.get_tracer("vault_lookup")
lookups = metrics.get_meter("vault_lookup").create_counter(
    "vault_lookup.lookups",
    description="Vault KV lookups by outcome",
)


def vault_hash_lookup(
    options: Mapping[str, Any],
    context: LookupContext,
    *,
    settings: Settings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any] | None:
    """Return every key/value pair stored at the Vault KV path ``options["uri"]``.

    Options:
        uri: full URL of the secret, e.g. ``https://vault:8200/v1/secret/app``.
        ca_trust: PEM bundle trusted for the Vault server certificate.
        token_file: file holding a Vault token; takes priority over ``auth_path``.
        auth_path: mount of the ``cert`` auth method, used with the client
            certificate configured in :class:`~vault_lookup.config.Settings`.
        version: ``"v2"`` for a KV v2 mount, anything else reads as v1.
        timeout: per-request timeout in seconds.

    An empty secret calls ``context.not_found()`` and returns ``None``. A
    found secret is handed to ``context.cache_all()`` and returned. Every
    failure raises a :class:`~vault_lookup.errors.VaultLookupError`; nothing
    is retried.
    """
    with tracer.start_as_current_span("vault_lookup") as span:
        try:
            settings = settings or get_settings()
            data = _run(options, context, settings, transport, span)
        except VaultLookupError as exc:
            lookups.add(1, {"outcome": type(exc).__name__})
            raise
        lookups.add(1, {"outcome": "found" if data is not None else "not_found"})
        return data


def _run(options, context, settings, transport, span) -> dict[str, Any] | None:
    parsed = validate_options(options, settings)
    logger.debug("Using Vault uri: %s%s", parsed.base_url, parsed.secret_path)
    span.set_attribute("vault.path", parsed.secret_path)
    span.set_attribute("vault.kv_version", parsed.version)

    with build_client(parsed, settings, transport) as client:
        with tracer.start_as_current_span("vault_lookup.authenticate"):
            token = authenticate(client, parsed.auth_method)
        with tracer.start_as_current_span("vault_lookup.fetch"):
            envelope = fetch_secret(client, parsed.secret_path, token)

    data = parse_secret_data(envelope, parsed.version)
    if not data:
        logger.info("lookup.not_found", extra={"secret_path": parsed.secret_path})
        context.not_found()
        return None

    context.cache_all(data)
    logger.info("lookup.found", extra={"secret_path": parsed.secret_path, "keys": len(data)})
    return data
