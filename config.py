"""Configuration management for URL shortener."""

import re
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator

from shortener.slug import DEFAULT_ALPHABET


class Config(BaseSettings):
    """Application configuration."""

    # Server settings
    port: int = Field(
        ...,
        ge=1,
        le=65535,
        description="Port to listen on (required)"
    )

    bind_host: str = Field(
        default="0.0.0.0",
        description="Interface to bind to"
    )

    workers: int = Field(
        default=1,
        ge=1,
        description="Number of uvicorn worker processes. 1 = single process (async handles many connections); >1 = multi-process."
    )

    url_host: str = Field(
        default="",
        description="Public host used to build short URLs and render the index page"
    )

    # Store settings
    url_db_dsn: str = Field(
        ...,
        description="Store connection string (postgresql://... or memory://)"
    )

    db_create_tables: bool = Field(
        default=False,
        description="Create the url_mappings table on startup"
    )

    db_pool_max_size: int = Field(
        default=10,
        ge=1,
        description="Maximum size of the database connection pool"
    )

    db_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Database connect and per-command timeout"
    )

    # Redis settings (optional)
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for caching redirects"
    )

    cache_ttl_seconds: int = Field(
        default=3600,
        ge=1,
        description="Cache TTL in seconds"
    )

    # Slug allocation settings
    slug_length: int = Field(
        default=8,
        ge=1,
        description="Length of generated slugs"
    )

    slug_alphabet: str = Field(
        default=DEFAULT_ALPHABET,
        description="Characters slugs are drawn from"
    )

    max_allocation_attempts: int = Field(
        default=10,
        ge=1,
        description="Maximum candidates checked per allocation"
    )

    slug_escalate_after: int = Field(
        default=0,
        ge=0,
        description="Grow slug length by one after this many consecutive collisions (0 disables)"
    )

    max_slug_length: int = Field(
        default=16,
        ge=1,
        description="Upper bound for escalated slug length"
    )

    max_insert_retries: int = Field(
        default=3,
        ge=0,
        description="Allocate-and-insert retries after a duplicate key on insert"
    )

    allocation_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Deadline for allocating and storing a new mapping"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @field_validator("slug_alphabet")
    @classmethod
    def validate_slug_alphabet(cls, v: str) -> str:
        """Slugs appear in URL paths, so only unreserved characters are allowed."""
        if not re.fullmatch(r"[A-Za-z0-9_-]+", v):
            raise ValueError("Alphabet may only contain letters, digits, '-' and '_'")
        if len(set(v)) != len(v):
            raise ValueError("Alphabet must not contain duplicate characters")
        if len(v) < 2:
            raise ValueError("Alphabet must contain at least two characters")
        return v

    @field_validator("url_host")
    @classmethod
    def strip_url_host(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def check_slug_lengths(self) -> "Config":
        if self.max_slug_length < self.slug_length:
            raise ValueError("max_slug_length must be >= slug_length")
        return self


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
