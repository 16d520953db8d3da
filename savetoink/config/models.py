"""Configuration models."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("savetoink", description="Database name")
    user: str = Field("savetoink", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")
    connect_timeout: int = Field(10, description="Connection timeout in seconds", ge=1)
    statement_timeout_ms: int = Field(10000, description="Per-statement deadline in milliseconds", ge=0)


class PaginationConfig(BaseModel):
    """Listing page size bounds."""

    default_page_size: int = Field(20, ge=1)
    min_page_size: int = Field(1, ge=1)
    max_page_size: int = Field(20, ge=1)

    @model_validator(mode="after")
    def validate_bounds(self) -> "PaginationConfig":
        """Validate that min <= default <= max."""
        if not self.min_page_size <= self.default_page_size <= self.max_page_size:
            raise ValueError(
                "page sizes must satisfy min_page_size <= default_page_size <= max_page_size"
            )
        return self


class StorageConfig(BaseModel):
    """Article store configuration."""

    backend: str = Field("postgres", description="Store backend (postgres, memory)")
    table_name: str = Field("articles", description="Table holding article records")
    delete_batch_size: int = Field(25, description="Rows removed per bulk-delete chunk", ge=1, le=1000)
    delete_chunk_retries: int = Field(3, description="Attempts per bulk-delete chunk", ge=1, le=10)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)


class EmailConfig(BaseModel):
    """Email delivery configuration."""

    enabled: bool = Field(False, description="Whether articles are emailed after processing")
    provider: str = Field("mailjet", description="Email provider (mailjet)")
    sender_email: Optional[str] = Field(None, description="From address")
    destination_email: Optional[str] = Field(None, description="E-reader inbox address")
    api_key: Optional[str] = Field(None, description="Provider API key (prefer api_key_env)")
    api_key_env: Optional[str] = Field("MAILJET_API_KEY", description="Environment variable for API key")
    api_secret: Optional[str] = Field(None, description="Provider API secret (prefer api_secret_env)")
    api_secret_env: Optional[str] = Field(
        "MAILJET_API_SECRET", description="Environment variable for API secret"
    )
    timeout: float = Field(30.0, description="Send request timeout in seconds", gt=0)


class ExtractorConfig(BaseModel):
    """Content extraction configuration."""

    timeout: float = Field(30.0, description="Fetch timeout in seconds", gt=0)
    user_agent: str = Field("savetoink/1.0 (+e-reader delivery)", description="HTTP User-Agent")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level name")


class ConfigModel(BaseModel):
    """Main configuration model."""

    account: str = Field("savetoink", description="Account used by the CLI")
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
