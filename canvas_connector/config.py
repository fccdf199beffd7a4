"""Configuration management for the Canvas connector."""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

BASE_DIR = Path(__file__).parent


@dataclass
class CanvasConfig:
    """Canvas instance and HTTP settings."""

    base_url: str = os.getenv("CANVAS_BASE_URL", "")
    access_token: str = os.getenv("CANVAS_ACCESS_TOKEN", "")
    api_prefix: str = "/api/v1"
    timeout_seconds: float = float(os.getenv("CANVAS_TIMEOUT_SECONDS", "30"))


@dataclass
class RateLimitConfig:
    """Rate limiting configuration."""

    min_interval_seconds: float = float(os.getenv("CANVAS_MIN_INTERVAL_SECONDS", "0.1"))
    max_retries: int = int(os.getenv("CANVAS_MAX_RETRIES", "0"))
    backoff_base_seconds: float = 1.0
    backoff_factor: float = 2.0
    max_backoff_seconds: float = 60.0


@dataclass
class PaginationConfig:
    """Listing endpoint configuration."""

    per_page: int = 100
    max_pages: int = 50  # Safety bound, results beyond it are dropped


@dataclass
class AggregationConfig:
    """Module extraction and rendering configuration."""

    preview_chars: int = 200
    description_preview_chars: int = 200


@dataclass
class ConnectorConfig:
    """Main connector configuration."""

    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[Path] = (
        Path(os.environ["CANVAS_LOG_FILE"]) if os.getenv("CANVAS_LOG_FILE") else None
    )


# Global config instance
config = ConnectorConfig()
