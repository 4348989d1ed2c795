"""OAuth2 configuration settings."""

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..exceptions.auth import ConfigurationError


AUTHORIZATION_URL = "authorizationUrl"
ACCESS_TOKEN_URL = "accessTokenUrl"
CLIENT_ID = "clientId"
CLIENT_SECRET = "clientSecret"
SCOPE = "scope"

REQUIRED_KEYS = (AUTHORIZATION_URL, ACCESS_TOKEN_URL, CLIENT_ID, CLIENT_SECRET)

DEV_SECRET_KEY = "dev-secret-key"


@dataclass(frozen=True)
class ProviderSettings:
    """Endpoints and credentials of a single OAuth2 provider."""

    authorization_url: str
    access_token_url: str
    client_id: str
    client_secret: str
    scope: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"ProviderSettings(authorization_url={self.authorization_url!r}, "
            f"access_token_url={self.access_token_url!r}, client_id={self.client_id!r}, "
            f"client_secret='***', scope={self.scope!r})"
        )

    @classmethod
    def from_env(cls, provider_id: str, prefix: str = "") -> "ProviderSettings":
        """Load provider settings from environment variables.

        For provider ``github`` the variables are:
            GITHUB_AUTHORIZATION_URL, GITHUB_ACCESS_TOKEN_URL,
            GITHUB_CLIENT_ID, GITHUB_CLIENT_SECRET and optionally GITHUB_SCOPE.
        """
        env_prefix = f"{prefix}{provider_id.upper()}_"
        env_mapping = {
            f"{env_prefix}AUTHORIZATION_URL": AUTHORIZATION_URL,
            f"{env_prefix}ACCESS_TOKEN_URL": ACCESS_TOKEN_URL,
            f"{env_prefix}CLIENT_ID": CLIENT_ID,
            f"{env_prefix}CLIENT_SECRET": CLIENT_SECRET,
            f"{env_prefix}SCOPE": SCOPE,
        }

        config_data = {}
        for env_var, config_key in env_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                config_data[provider_key(provider_id, config_key)] = value

        return load_provider_settings(provider_id, config_data)


def provider_key(provider_id: str, key: str, prefix: str = "oauth2") -> str:
    """Build the namespaced configuration key for a provider setting."""
    return f"{prefix}.{provider_id}.{key}"


def load_provider_settings(
    provider_id: str,
    config: Mapping[str, Any],
    prefix: str = "oauth2",
) -> ProviderSettings:
    """Assemble :class:`ProviderSettings` from a key-value configuration source.

    Args:
        provider_id: Provider identifier, used as the key namespace
        config: Any mapping, e.g. a parsed config file or ``os.environ``-like dict
        prefix: Top-level namespace of provider keys

    Returns:
        Validated provider settings

    Raises:
        ConfigurationError: If one or more required keys are missing or empty
    """
    values: Dict[str, Optional[str]] = {}
    missing: List[str] = []

    for key in REQUIRED_KEYS:
        value = config.get(provider_key(provider_id, key, prefix))
        if value is None or str(value).strip() == "":
            missing.append(provider_key(provider_id, key, prefix))
        else:
            values[key] = str(value)

    if missing:
        raise ConfigurationError(
            f"Missing OAuth2 configuration for provider '{provider_id}': {', '.join(missing)}",
            provider=provider_id,
            missing_keys=missing,
        )

    scope = config.get(provider_key(provider_id, SCOPE, prefix))
    return ProviderSettings(
        authorization_url=values[AUTHORIZATION_URL],
        access_token_url=values[ACCESS_TOKEN_URL],
        client_id=values[CLIENT_ID],
        client_secret=values[CLIENT_SECRET],
        scope=str(scope) if scope else None,
    )


class OAuthConfig:
    """Process-wide OAuth2 settings."""

    def __init__(self, **kwargs):
        # Session signing
        self.OAUTH_SECRET_KEY: str = kwargs.get("OAUTH_SECRET_KEY", "")
        self.OAUTH_SESSION_KEY: str = kwargs.get("OAUTH_SESSION_KEY", "sid")

        # Flow settings
        self.OAUTH_SSL_ENABLED: bool = kwargs.get("OAUTH_SSL_ENABLED", False)
        self.OAUTH_STATE_TTL: int = kwargs.get("OAUTH_STATE_TTL", 300)
        self.OAUTH_EXCHANGE_TIMEOUT: float = kwargs.get("OAUTH_EXCHANGE_TIMEOUT", 20.0)
        self.OAUTH_ROUTE_PREFIX: str = kwargs.get("OAUTH_ROUTE_PREFIX", "/authenticate")

        # Environment detection
        self.ENVIRONMENT: str = kwargs.get("ENVIRONMENT", "development")

    @classmethod
    def from_env(cls, prefix: str = "OAUTH_") -> "OAuthConfig":
        """Create configuration from environment variables."""
        env_mapping = {
            f"{prefix}SECRET_KEY": "OAUTH_SECRET_KEY",
            f"{prefix}SESSION_KEY": "OAUTH_SESSION_KEY",
            f"{prefix}SSL_ENABLED": "OAUTH_SSL_ENABLED",
            f"{prefix}STATE_TTL": "OAUTH_STATE_TTL",
            f"{prefix}EXCHANGE_TIMEOUT": "OAUTH_EXCHANGE_TIMEOUT",
            f"{prefix}ROUTE_PREFIX": "OAUTH_ROUTE_PREFIX",
            "ENVIRONMENT": "ENVIRONMENT",
        }

        config_data: Dict[str, Any] = {}
        for env_var, config_key in env_mapping.items():
            value = os.getenv(env_var)
            if value is None:
                continue
            try:
                if config_key == "OAUTH_SSL_ENABLED":
                    config_data[config_key] = value.strip().lower() in ("1", "true", "yes", "on")
                elif config_key == "OAUTH_STATE_TTL":
                    config_data[config_key] = int(value)
                elif config_key == "OAUTH_EXCHANGE_TIMEOUT":
                    config_data[config_key] = float(value)
                else:
                    config_data[config_key] = value
            except ValueError:
                raise ConfigurationError(
                    f"Invalid value for {env_var}: {value!r}", missing_config=env_var
                )

        # Use existing environment variables as fallback
        if not config_data.get("OAUTH_SECRET_KEY"):
            config_data["OAUTH_SECRET_KEY"] = os.getenv("SECRET_KEY", "")

        config = cls(**config_data)
        config.validate()
        return config

    def validate(self):
        """Validate configuration."""
        if not self.OAUTH_SECRET_KEY:
            raise ConfigurationError("OAUTH_SECRET_KEY is required", missing_config="OAUTH_SECRET_KEY")

        if len(self.OAUTH_SECRET_KEY) < 32:
            raise ConfigurationError("OAUTH_SECRET_KEY must be at least 32 characters")

        if self.OAUTH_STATE_TTL <= 0:
            raise ConfigurationError("OAUTH_STATE_TTL must be a positive number of seconds")

        if self.OAUTH_EXCHANGE_TIMEOUT <= 0:
            raise ConfigurationError("OAUTH_EXCHANGE_TIMEOUT must be a positive number of seconds")

        if self.ENVIRONMENT == "production":
            self._validate_production()

    def _validate_production(self):
        """Validate production-specific settings."""
        if self.OAUTH_SECRET_KEY.startswith(DEV_SECRET_KEY):
            raise ConfigurationError("Must use secure SECRET_KEY in production")

        if not self.OAUTH_SSL_ENABLED:
            raise ConfigurationError("OAUTH_SSL_ENABLED must be set in production")
