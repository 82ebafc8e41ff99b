"""Runtime configuration built once at startup."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

APP_NAME = "imgurup"
CLIENT_ID_FILE = "client_id"
JOURNAL_FILE = "history.log"

DEFAULT_API_ROOT = "https://api.imgur.com/3"
DEFAULT_DELETE_ROOT = "https://imgur.com/delete"
DEFAULT_ALBUM_ROOT = "https://imgur.com/a"
DEFAULT_ALBUM_LAYOUT = "vertical"
DEFAULT_TIMEOUT = 60.0
DEFAULT_SCREENSHOT_COMMAND = "maim --select"


class ConfigError(ValueError):
    """Raised when required configuration is missing or invalid."""


def get_config_directory() -> Path:
    """
    Resolve the configuration directory.

    ``IMGURUP_CONFIG_DIR`` wins, then ``$XDG_CONFIG_HOME/imgurup``,
    then ``~/.config/imgurup``. The directory is not created here.

    Returns:
        Path: Configuration directory
    """
    override = os.getenv("IMGURUP_CONFIG_DIR")
    if override:
        return Path(override).expanduser()

    base = Path(os.getenv("XDG_CONFIG_HOME") or Path.home() / ".config")
    return base / APP_NAME


def read_client_id(config_dir: Path) -> str:
    """Read the Imgur client ID.

    The ``IMGURUP_CLIENT_ID`` environment variable takes precedence over
    the ``client_id`` file in the config directory.

    Args:
        config_dir: Configuration directory

    Returns:
        The client ID with trailing whitespace removed

    Raises:
        ConfigError: If no client ID is configured
    """
    client_id = os.getenv("IMGURUP_CLIENT_ID", "").rstrip()
    if client_id:
        return client_id

    client_id_file = config_dir / CLIENT_ID_FILE
    try:
        client_id = client_id_file.read_text(encoding="utf-8").rstrip()
    except FileNotFoundError:
        client_id = ""
    except OSError as e:
        raise ConfigError(f"Cannot read client ID from {client_id_file}: {e}") from e

    if not client_id:
        raise ConfigError(
            f"No Imgur client ID found. Put it in {client_id_file} "
            + "or set IMGURUP_CLIENT_ID in your environment or .env file."
        )
    return client_id


@dataclass(frozen=True)
class Config:
    """Immutable settings passed to the uploader, journal and processor."""

    client_id: str
    config_dir: Path
    api_root: str = DEFAULT_API_ROOT
    delete_root: str = DEFAULT_DELETE_ROOT
    album_root: str = DEFAULT_ALBUM_ROOT
    album_layout: str = DEFAULT_ALBUM_LAYOUT
    timeout: float = DEFAULT_TIMEOUT
    screenshot_command: tuple[str, ...] = field(
        default_factory=lambda: tuple(shlex.split(DEFAULT_SCREENSHOT_COMMAND))
    )

    @property
    def journal_path(self) -> Path:
        return self.config_dir / JOURNAL_FILE

    @property
    def authorization(self) -> str:
        """Value of the ``Authorization`` header for anonymous API calls."""
        return f"Client-ID {self.client_id}"

    @classmethod
    def from_env(cls) -> Config:
        """Build the configuration from the environment and ``.env`` file.

        Returns:
            Config: Loaded configuration

        Raises:
            ConfigError: If the client ID is missing or a value is invalid
        """
        _ = load_dotenv()

        config_dir = get_config_directory()
        client_id = read_client_id(config_dir)

        timeout_value = os.getenv("IMGURUP_TIMEOUT")
        try:
            timeout = float(timeout_value) if timeout_value else DEFAULT_TIMEOUT
        except ValueError as e:
            raise ConfigError(f"IMGURUP_TIMEOUT must be a number, got {timeout_value!r}") from e

        screenshot_command = tuple(
            shlex.split(os.getenv("IMGURUP_SCREENSHOT_COMMAND") or DEFAULT_SCREENSHOT_COMMAND)
        )
        if not screenshot_command:
            raise ConfigError("IMGURUP_SCREENSHOT_COMMAND must not be empty")

        return cls(
            client_id=client_id,
            config_dir=config_dir,
            api_root=os.getenv("IMGURUP_API_ROOT") or DEFAULT_API_ROOT,
            timeout=timeout,
            screenshot_command=screenshot_command,
        )
