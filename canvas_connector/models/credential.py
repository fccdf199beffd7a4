"""Canvas credential model."""

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

API_PREFIX = "/api/v1"


class Credential(BaseModel):
    """Bearer token and Canvas base URL, validated once and then immutable."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., description="Canvas instance URL, e.g. https://school.instructure.com")
    token: str = Field(..., min_length=1, repr=False, description="Canvas access token")

    @field_validator("base_url", mode="before")
    @classmethod
    def normalize_base_url(cls, value: object) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Canvas base URL is required")

        url = value.strip()
        if not url.startswith(("http://", "https://")):
            url = "https://" + url

        invalid = ValueError(
            f"Invalid Canvas base URL: {url}. "
            "Please provide a valid URL like https://your-school.instructure.com"
        )
        if any(char.isspace() for char in url):
            raise invalid
        parts = urlsplit(url)
        try:
            parts.port
        except ValueError:
            raise invalid
        if not parts.hostname:
            raise invalid

        return url.rstrip("/")

    @field_validator("token", mode="before")
    @classmethod
    def strip_token(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @property
    def api_url(self) -> str:
        """Root of the REST API all request paths are relative to."""
        return f"{self.base_url}{API_PREFIX}"
