"""Centralized settings for Reticule.

Uses pydantic-settings to load from environment variables (prefixed RETICULE_)
with defaults pointing at the Coinbase Pro sandbox.
"""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings

from src.coinbasepro.auth import Credentials


class Settings(BaseSettings):
    """Reticule settings loaded from environment variables."""

    # --- Endpoints ---
    base_url: str = "https://api-public.sandbox.pro.coinbase.com"
    feed_url: str = "wss://ws-feed-public.sandbox.pro.coinbase.com"

    # --- Credentials ---
    key: str = ""
    passphrase: SecretStr = SecretStr("")
    secret: SecretStr = SecretStr("")

    # --- HTTP ---
    user_agent: str = "Python Reticule v0.1"
    request_timeout: float = 30.0

    # --- Feed ---
    feed_buffer_size: int = 1
    feed_overflow: str = "block"  # block, drop_newest, drop_oldest

    # --- Transfers ---
    clear_page_on_empty_transfers: bool = False

    # --- Development mode ---
    development_mode: bool = False
    shape_store_path: str = "store.json"

    model_config = {
        "env_prefix": "RETICULE_",
        "env_file": ".env",
        "extra": "ignore",
    }

    def credentials(self) -> Credentials:
        return Credentials(
            key=self.key,
            passphrase=self.passphrase.get_secret_value(),
            secret=self.secret.get_secret_value(),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
