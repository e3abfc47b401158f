import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import Settings
from .errors import ConfigurationError

logger = logging.getLogger("vault_lookup.options")


class TokenFileAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path


class CertificateAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    mount: str = Field(min_length=1)


AuthMethod = TokenFileAuth | CertificateAuth


class LookupOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    uri: str
    ca_trust: Path
    token_file: Path | None = None
    auth_path: str | None = None
    version: Literal["v1", "v2"] = "v1"
    timeout: float = Field(
        default=5.0,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("timeout", "timeout_seconds"),
    )

    @field_validator("version", mode="before")
    @classmethod
    def _fallback_to_v1(cls, value: Any) -> str:
        # Anything but an exact "v2" reads as a KV v1 mount.
        if value == "v2":
            return "v2"
        if value not in (None, "v1"):
            logger.warning("Unknown KV engine version %r, using v1", value)
        return "v1"

    @property
    def url(self) -> httpx.URL:
        return httpx.URL(self.uri)

    @property
    def base_url(self) -> str:
        url = self.url
        return f"{url.scheme}://{url.netloc.decode('ascii')}"

    @property
    def secret_path(self) -> str:
        # Percent-escapes stay encoded so %2F or %3F inside a key name never
        # turns into a path separator or a query string.
        return self.url.raw_path.decode("ascii").split("?", 1)[0]

    @property
    def auth_method(self) -> AuthMethod:
        if self.token_file is not None:
            return TokenFileAuth(path=self.token_file)
        return CertificateAuth(mount=(self.auth_path or "").strip("/"))


def validate_options(options: Mapping[str, Any], settings: Settings) -> LookupOptions:
    """Check the caller's option mapping and build :class:`LookupOptions`.

    Only local checks happen here: nothing touches the network, so a bad
    configuration always fails before a connection is attempted.
    """
    if not options.get("uri"):
        raise ConfigurationError("The Vault lookup requires the 'uri' option")

    if not options.get("ca_trust"):
        raise ConfigurationError("The Vault lookup requires the 'ca_trust' option")

    if not os.path.isfile(str(options["ca_trust"])):
        raise ConfigurationError(f"The 'ca_trust' file was not found: {options['ca_trust']}")

    token_file = options.get("token_file")
    if token_file is not None and not os.path.isfile(str(token_file)):
        raise ConfigurationError(f"The 'token_file' does not exist: {token_file}")

    if token_file is None and not options.get("auth_path"):
        raise ConfigurationError("The Vault lookup options require either 'token_file' or 'auth_path'")

    try:
        url = httpx.URL(str(options["uri"]))
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"Failed to parse the 'uri' option: {options['uri']}") from exc
    if not url.host:
        raise ConfigurationError(f"Failed to parse a hostname from {options['uri']}")
    if settings.require_https and url.scheme != "https":
        raise ConfigurationError(f"The 'uri' option must use https: {options['uri']}")

    values = dict(options)
    if "timeout" not in values and "timeout_seconds" not in values:
        values["timeout"] = settings.default_timeout
    try:
        parsed = LookupOptions.model_validate(values)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
        raise ConfigurationError(f"Invalid Vault lookup options: {fields}") from exc

    if parsed.token_file is None and not (parsed.auth_path or "").strip("/"):
        raise ConfigurationError(f"The 'auth_path' option does not name an auth mount: {parsed.auth_path!r}")
    return parsed
