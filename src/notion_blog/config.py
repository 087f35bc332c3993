"""Application configuration via environment variables."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service configuration loaded from environment variables."""

    model_config = {"env_prefix": ""}

    # Notion
    notion_token: str = Field(description="Notion integration token")
    notion_database_id: str = Field(description="ID of the database holding the posts")
    notion_api_url: str = Field(
        default="https://api.notion.com/v1", description="Notion API base URL"
    )
    notion_version: str = Field(default="2022-06-28", description="Notion-Version header")
    notion_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    # Site
    site_title: str = Field(default="Blog", description="Title used on every page")
    display_timezone: str = Field(
        default="UTC", description="IANA zone used when formatting post timestamps"
    )
    not_found_path: str = Field(
        default="/404", description="Redirect target for unknown or missing posts"
    )
    prerender: bool = Field(
        default=False, description="Generate the listing and every post page on startup"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind host")
    port: int = Field(default=8000, description="Server bind port")
    log_level: str = Field(default="info", description="Log level")

    @field_validator("display_timezone")
    @classmethod
    def _validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"DISPLAY_TIMEZONE is not a known time zone: {v!r}") from exc
        return v

    @field_validator("not_found_path")
    @classmethod
    def _validate_not_found_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("NOT_FOUND_PATH must start with '/'")
        return v
