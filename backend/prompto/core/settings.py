# prompto/core/settings.py
from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized configuration management using Pydantic.
    Reads from .env file and environment variables.
    """
    # --- Credentials ---
    LANGSMITH_API_KEY: Optional[SecretStr] = None  # Fallback when no per-call key is given

    # --- Prompt Hub ---
    LANGSMITH_ENDPOINT: str = "https://api.smith.langchain.com"
    LANGSMITH_WEB_URL: str = ""  # Derived from LANGSMITH_ENDPOINT when empty
    HUB_TIMEOUT_SECONDS: Optional[float] = None  # None = wait indefinitely

    # --- Application Settings ---
    LOG_LEVEL: str = "WARNING"
    LOG_FILE: str = ""

    # --- HTTP / MCP Server ---
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    MCP_PATH: str = "/api/mcp"
    SERVER_NAME: str = "prompto"

    # Pydantic V2 Config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra='ignore'
    )

    @property
    def web_url(self) -> str:
        """Base URL of the hub web UI, used for prompt location links."""
        if self.LANGSMITH_WEB_URL:
            return self.LANGSMITH_WEB_URL.rstrip("/")
        return self.LANGSMITH_ENDPOINT.rstrip("/").replace("://api.", "://", 1)


# Create a singleton instance
try:
    settings = Settings()
except Exception as e:
    print(f"CRITICAL: Error loading configuration. Check your .env file. Error: {e}")
    import sys
    sys.exit(1)
