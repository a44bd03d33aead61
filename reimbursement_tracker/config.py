from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    database_url: str = "sqlite:///./reimbursements.db"

    # Budgeting system endpoint that receives NetCost updates for paid claims.
    # Example: https://script.google.com/macros/s/<deployment>/exec
    budget_api_url: Optional[str] = None
    budget_sync_timeout_seconds: float = 30.0

    # Use the in-process simulated budget sync instead of the HTTP endpoint (local dev)
    budget_sync_simulated: bool = False

    list_default_limit: int = 20

    log_level: str = "INFO"

    # CORS configuration - comma-separated list of allowed origins
    cors_allowed_origins: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def get_cors_origins(self) -> list[str]:
        """Get list of CORS allowed origins, combining defaults with env var.

        - Strips whitespace
        - Removes trailing slashes
        - Deduplicates
        """
        default_origins = [
            "http://localhost:5173",
            "http://localhost:3000",
        ]

        all_origins = list(default_origins)

        if self.cors_allowed_origins:
            for origin in self.cors_allowed_origins.split(","):
                cleaned = origin.strip().rstrip("/")
                if cleaned and cleaned not in all_origins:
                    all_origins.append(cleaned)

        return all_origins


@lru_cache()
def get_settings() -> Settings:
    return Settings()
