"""
Printer configuration.

Connection settings come from the environment (loaded from .env via python-dotenv).
Tunables live in a YAML file loaded with OmegaConf and merged over the defaults
defined by PrinterSettings, so a settings file only needs the keys it changes.

Environment variables:
    PUBLIC_URL                  Public origin of the artboard front end
    STORAGE_URL                 Origin of the asset storage
    CHROME_URL                  WebSocket endpoint of the remote Chromium
    CHROME_TOKEN                Access token appended to CHROME_URL
    CHROME_IGNORE_HTTPS_ERRORS  "true" to accept invalid certificates
    PRINT_EVENTS_FILE           Optional JSON Lines file for pipeline events
    PRINTER_SETTINGS_PATH       Optional YAML file with tunables

Example:
    >>> config = PrinterConfig.from_env(settings_path=Path("config/printer.yaml"))
    >>> config.browser_endpoint
    'ws://chrome:3000?token=...'
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv
from omegaconf import OmegaConf
from omegaconf.errors import ConfigKeyError

from resume_printer.contexts.printing.exceptions import ConfigurationError
from resume_printer.contexts.printing.target import DEFAULT_CONTAINER_HOST

TRUE_VALUES = {"true", "1", "yes", "on"}


@dataclass
class PrinterSettings:
    """
    Tunables for the print and preview pipelines.

    Attributes:
        container_host: Alias that replaces loopback hosts inside the engine's container
        artboard_path: Route of the front end that renders [data-page] containers
        ready_timeout_ms: Ceiling for the first page marker to appear
        navigation_timeout_ms: Ceiling for navigation / network idleness
        connect_timeout_ms: Ceiling for connecting to the remote engine
        settle_delay_ms: Pause before measuring an isolated page's height
        height_buffer_px: Safety margin added to each measured page height
        preview_width: Viewport width for previews (A4 proportioned)
        preview_height: Viewport height for previews
        preview_quality: JPEG quality for previews
        max_attempts: Total attempts per print/preview request
        retry_base_delay_s: First backoff delay before jitter
        retry_max_delay_s: Upper bound for any backoff delay
        merge_web_pages: Merge all pages into one continuous page when no format is given
    """

    container_host: str = DEFAULT_CONTAINER_HOST
    artboard_path: str = "/artboard/preview"
    ready_timeout_ms: int = 15_000
    navigation_timeout_ms: int = 30_000
    connect_timeout_ms: int = 30_000
    settle_delay_ms: int = 100
    height_buffer_px: int = 20
    preview_width: int = 794
    preview_height: int = 1123
    preview_quality: int = 80
    max_attempts: int = 3
    retry_base_delay_s: float = 1.0
    retry_max_delay_s: float = 30.0
    merge_web_pages: bool = True


def load_printer_settings(settings_path: Optional[Path] = None) -> PrinterSettings:
    """
    Load tunables from YAML, merged over the PrinterSettings defaults.

    Args:
        settings_path: YAML file (None returns the defaults)

    Returns:
        PrinterSettings instance

    Raises:
        ConfigurationError: If the file is missing or contains unknown keys / bad types
    """
    if settings_path is None:
        return PrinterSettings()

    settings_path = Path(settings_path)
    if not settings_path.exists():
        raise ConfigurationError(f"Printer settings file not found: {settings_path}")

    schema = OmegaConf.structured(PrinterSettings)
    try:
        merged = OmegaConf.merge(schema, OmegaConf.load(settings_path))
    except (ConfigKeyError, ValueError) as e:
        raise ConfigurationError(f"Invalid printer settings in {settings_path}: {e}") from e

    return OmegaConf.to_object(merged)


def _require_url(name: str, value: str, schemes: tuple) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in schemes or not parsed.netloc:
        raise ConfigurationError(
            f"{name} must be a {'/'.join(schemes)} URL with a host, got: {value!r}"
        )
    return value


@dataclass
class PrinterConfig:
    """
    Everything the printer needs to reach the engine and the front end.

    Validated on construction; a malformed value is fatal at startup.
    """

    public_url: str
    storage_url: str
    chrome_url: str
    chrome_token: str
    ignore_https_errors: bool = False
    events_file: Optional[Path] = None
    settings: PrinterSettings = field(default_factory=PrinterSettings)
    settings_path: Optional[Path] = None

    def __post_init__(self):
        _require_url("PUBLIC_URL", self.public_url, ("http", "https"))
        _require_url("STORAGE_URL", self.storage_url, ("http", "https"))
        _require_url("CHROME_URL", self.chrome_url, ("ws", "wss", "http", "https"))
        if not self.chrome_token:
            raise ConfigurationError("CHROME_TOKEN must not be empty")
        if self.settings.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")

    @property
    def browser_endpoint(self) -> str:
        return f"{self.chrome_url}?token={self.chrome_token}"

    @classmethod
    def from_env(cls, settings_path: Optional[Path] = None) -> "PrinterConfig":
        """
        Build the configuration from environment variables (and .env).

        Args:
            settings_path: YAML tunables (defaults to PRINTER_SETTINGS_PATH if set)

        Raises:
            ConfigurationError: If a required variable is missing or malformed
        """
        load_dotenv()

        required = ["PUBLIC_URL", "STORAGE_URL", "CHROME_URL", "CHROME_TOKEN"]
        missing = [name for name in required if not os.getenv(name)]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {missing}")

        if settings_path is None and os.getenv("PRINTER_SETTINGS_PATH"):
            settings_path = Path(os.getenv("PRINTER_SETTINGS_PATH"))

        events_file = os.getenv("PRINT_EVENTS_FILE")

        return cls(
            public_url=os.getenv("PUBLIC_URL"),
            storage_url=os.getenv("STORAGE_URL"),
            chrome_url=os.getenv("CHROME_URL"),
            chrome_token=os.getenv("CHROME_TOKEN"),
            ignore_https_errors=os.getenv("CHROME_IGNORE_HTTPS_ERRORS", "false").lower()
            in TRUE_VALUES,
            events_file=Path(events_file) if events_file else None,
            settings=load_printer_settings(settings_path),
            settings_path=settings_path,
        )
