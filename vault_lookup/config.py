from dotenv import load_dotenv
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

load_dotenv(".env")


class Settings(BaseSettings):
    client_cert: str | None = None
    client_key: str | None = None
    client_key_password: str | None = None
    default_timeout: float = Field(default=5.0, gt=0, allow_inf_nan=False)
    require_https: bool = True
    otel_enabled: bool = False
    otel_service_name: str = "vault-lookup"
    otel_endpoint: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="VAULT_LOOKUP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


def get_settings() -> Settings:
    try:
        settings = Settings()
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
        raise ConfigurationError(f"Invalid VAULT_LOOKUP_* settings: {fields}") from exc
    if settings.client_key and not settings.client_cert:
        raise ConfigurationError("VAULT_LOOKUP_CLIENT_KEY is set without VAULT_LOOKUP_CLIENT_CERT")
    return settings
