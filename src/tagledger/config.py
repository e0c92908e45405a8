"""Configuration settings for the application."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"  # nosec B104
    port: int = 8080

    # HTTP boundary
    cors_origins: str = (
        "http://localhost:5173,http://127.0.0.1:5173,"
        "http://localhost:4173,http://127.0.0.1:4173"
    )
    rate_limit: str = "600/minute"
    max_body_bytes: int = 512 * 1024

    # Ledger behaviour
    quarantine_capacity: int = 200
    default_location_id: str = "LOC-A1"
    disposal_location_id: str = "LOC-TRASH"
    seed_demo_data: bool = True

    # Extra badge tags on top of the seeded ones (comma separated)
    badge_tags: str = ""

    # Values reported by /api/config
    mission_id: str = "HUNCH-TEST-MISSION"
    organization: str = "NASA HUNCH DEMO"

    @property
    def cors_origin_list(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def badge_tag_list(self) -> list[str]:
        """Configured extra badge tags as a list (not yet normalized)."""
        return [tag.strip() for tag in self.badge_tags.split(",") if tag.strip()]

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()


# Global settings instance
settings = Settings()
