"""
Configuration management for the Rich Results automation.
Handles environment variables, browser settings and timing using Pydantic Settings.
"""
from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

RICH_RESULTS_URL = "https://search.google.com/test/rich-results"


class BrowserConfig(BaseSettings):
    """Browser-specific configuration settings."""
    headless: bool = Field(default=False, description="Run browser in headless mode")
    viewport_width: int = Field(default=1920, ge=100, description="Browser viewport width")
    viewport_height: int = Field(default=1080, ge=100, description="Browser viewport height")
    user_data_dir: Optional[str] = Field(
        default=None,
        description="Persistent Chromium profile directory (None = throwaway profile)"
    )
    locale: str = Field(default="en-US", description="Browser locale")
    type_delay_ms: int = Field(default=100, ge=0, description="Delay between keystrokes in ms")
    mouse_steps: int = Field(default=20, ge=1, description="Intermediate mouse moves before clicking")
    mouse_pause_ms: int = Field(default=200, ge=0, description="Pause before clicking in ms")

    model_config = SettingsConfigDict(
        env_prefix="RICH_RESULTS_BROWSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


class CaptureConfig(BaseSettings):
    """Clip region and output location of the final screenshot."""
    x: int = Field(default=0, ge=0, description="X coordinate of the clip region")
    y: int = Field(default=0, ge=0, description="Y coordinate of the clip region")
    width: int = Field(default=1024, gt=0, description="Width of the clip region")
    height: int = Field(default=768, gt=0, description="Height of the clip region")
    output: str = Field(default="rich-results.png", description="Screenshot file name")
    screenshots_dir: str = Field(default="screenshots", description="Directory for screenshots")
    draw_overlay: bool = Field(default=True, description="Outline the clip region before capturing")
    overlay_settle: float = Field(default=0.5, ge=0, description="Seconds to let the overlay render")

    model_config = SettingsConfigDict(
        env_prefix="RICH_RESULTS_CAPTURE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("output")
    @classmethod
    def validate_output(cls, v: str) -> str:
        """Output must be a bare file name; the directory comes from screenshots_dir."""
        if not v or "/" in v or "\\" in v:
            raise ValueError(f"Invalid output file name: {v!r}")
        return v


class AgentConfig(BaseSettings):
    """Main configuration for a Rich Results run."""

    tool_url: str = Field(default=RICH_RESULTS_URL, description="Rich Results Test page")

    # Retrier
    retries: int = Field(default=3, ge=0, description="Retries for page load and input wait")
    retry_base_delay: float = Field(default=1.0, gt=0, description="Base backoff delay in seconds")

    # State machine
    timeout: float = Field(default=60.0, gt=0, description="Seconds per step and for the whole task")
    max_recovery_attempts: int = Field(
        default=5,
        ge=0,
        description="Dismiss-and-resubmit cycles allowed for the error modal"
    )
    poll_interval: float = Field(default=1.0, gt=0, description="Seconds between completion polls")
    submit_settle: float = Field(default=3.0, ge=0, description="Seconds to wait after submitting")
    recovery_settle: float = Field(default=3.0, ge=0, description="Seconds to wait after a resubmit")
    dismiss_settle: float = Field(default=1.0, ge=0, description="Seconds to let a dismissed modal close")

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )

    # Sub-configurations
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)

    model_config = SettingsConfigDict(
        env_prefix="RICH_RESULTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("tool_url")
    @classmethod
    def validate_tool_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid tool URL: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {', '.join(valid_levels)}")
        return v_upper

    @model_validator(mode="after")
    def check_clip_fits_viewport(self) -> "AgentConfig":
        """Warn when the clip region reaches outside the viewport."""
        right = self.capture.x + self.capture.width
        bottom = self.capture.y + self.capture.height
        if right > self.browser.viewport_width or bottom > self.browser.viewport_height:
            logger.warning(
                f"Clip region ends at ({right}, {bottom}), outside the "
                f"{self.browser.viewport_width}x{self.browser.viewport_height} viewport"
            )
        return self


def load_config(**overrides: Any) -> AgentConfig:
    """
    Load and validate configuration from the environment and ``.env``.

    Keyword overrides take precedence; ``browser`` and ``capture`` accept
    dicts of field overrides for the sub-configurations.
    """
    browser_overrides = overrides.pop("browser", None) or {}
    capture_overrides = overrides.pop("capture", None) or {}
    try:
        return AgentConfig(
            browser=BrowserConfig(**browser_overrides),
            capture=CaptureConfig(**capture_overrides),
            **overrides,
        )
    except ValidationError as e:
        raise ValueError(f"Configuration loading failed: {e}") from e
