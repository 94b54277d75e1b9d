"""
Configuration Management

All runtime settings live here and are loaded from environment variables
(or a local .env file) through Pydantic Settings, so a missing or malformed
value fails at startup instead of halfway through a raffle.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional, Union


class Settings(BaseSettings):
    """
    Application Settings

    Pydantic automatically loads from environment variables.
    Variable names match field names (case-insensitive), e.g. PORT -> port.
    """

    service_name: str = "chatraffle"
    log_level: str = "INFO"
    log_categories: Optional[str] = None  # Comma-separated categories (system,chat,connection,raffle). If None, show all logs.
    port: int = 8091
    host: str = "0.0.0.0"
    cors_allowed_origins: str = "*"  # Comma-separated origins, "*" allows any

    # Operator-facing language: "tr" or "en"
    locale: str = "tr"

    # Live source configuration
    live_connect_timeout_seconds: float = 30.0
    # "lenient" keeps the live connection after a mid-stream error,
    # "teardown" drops it and waits for the operator to reconnect
    source_error_policy: str = "lenient"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Allow extra env vars without validation errors

    def cors_origins(self) -> Union[str, List[str]]:
        """Return "*" for any-origin, otherwise the explicit origin list."""
        origins = [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]
        if not origins or "*" in origins:
            return "*"
        return origins


# Loaded once when the module is imported
settings = Settings()
