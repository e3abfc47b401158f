import logging
import ssl

import httpx

from .config import Settings
from .errors import ConfigurationError
from .models import LookupOptions

logger = logging.getLogger("vault_lookup.transport")


def create_ssl_context(ca_trust: str, settings: Settings) -> ssl.SSLContext:
    try:
        context = ssl.create_default_context(cafile=ca_trust)
    except (OSError, ssl.SSLError) as exc:
        raise ConfigurationError(f"Unable to load CA bundle from {ca_trust}: {exc}") from exc

    if settings.client_cert:
        try:
            context.load_cert_chain(
                certfile=settings.client_cert,
                keyfile=settings.client_key,
                password=settings.client_key_password,
            )
        except (OSError, ssl.SSLError) as exc:
            raise ConfigurationError(f"Unable to load client certificate {settings.client_cert}: {exc}") from exc
    return context


def build_client(
    options: LookupOptions,
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    context = create_ssl_context(str(options.ca_trust), settings)
    logger.debug(
        "transport.build",
        extra={"base_url": options.base_url, "timeout": options.timeout, "client_cert": bool(settings.client_cert)},
    )
    return httpx.Client(
        base_url=options.base_url,
        verify=context,
        timeout=httpx.Timeout(options.timeout),
        transport=transport,
    )
