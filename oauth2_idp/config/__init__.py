"""OAuth2 configuration."""

from .settings import OAuthConfig, ProviderSettings, load_provider_settings, provider_key

__all__ = ["OAuthConfig", "ProviderSettings", "load_provider_settings", "provider_key"]
