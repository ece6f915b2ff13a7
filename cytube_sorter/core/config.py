"""
Configuration management for cytube-sorter.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - CyTube server base URL and channel name
    - Bot account credentials (username, password)
    - Sorting behavior (enabled at startup, chat command)
    - Directory for log files

Configuration File Location:
    The config.yaml file must be in the current working directory
    when running the application, unless --config is given.

Secrets:
    The password may be left out of config.yaml and provided through
    the CYTUBE_PASSWORD environment variable instead. A .env file in
    the current directory is loaded before the configuration is read.

Example config.yaml:
    cytube:
      server: "https://cytu.be"
      channel: "mychannel"
      timeout: 10

    account:
      username: "sortbot"
      password: "hunter2"  # Optional if CYTUBE_PASSWORD is set

    sort:
      enabled: true
      command: "!sort"

    logging:
      directory: "./logs"
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv

from cytube_sorter.core.exceptions import ConfigError


# Default configuration file name (always in current working directory)
CONFIG_FILENAME = "config.yaml"

# Environment variable consulted when account.password is missing
PASSWORD_ENV_VAR = "CYTUBE_PASSWORD"

DEFAULT_TIMEOUT = 10.0
DEFAULT_SORT_COMMAND = "!sort"
DEFAULT_LOG_DIRECTORY = "logs"


@dataclass(frozen=True)
class CytubeConfig:
    """
    CyTube server configuration.

    Attributes:
        server: Base URL of the CyTube instance, without trailing slash.
                Example: "https://cytu.be"
        channel: Name of the channel whose playlist is sorted.
        timeout: Seconds to wait for the socketconfig lookup and the
                 socket.io handshake.
    """
    server: str
    channel: str
    timeout: float


@dataclass(frozen=True)
class AccountConfig:
    """
    Bot account credentials.

    The account needs permission to move playlist items in the channel,
    otherwise the server silently ignores the move commands.
    """
    username: str
    password: str


@dataclass(frozen=True)
class SortConfig:
    """
    Sorting behavior.

    Attributes:
        enabled: Whether re-sorting is active when the session starts.
        command: Chat message that triggers a manual re-sort.
    """
    enabled: bool
    command: str


@dataclass(frozen=True)
class LoggingConfig:
    """Log file location."""
    directory: Path


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    This is the main configuration object that aggregates all configuration
    sections. It is created by load_config() and should be treated as
    immutable (frozen dataclass).

    Example:
        config = load_config()
        print(f"Sorting {config.cytube.channel} on {config.cytube.server}")
    """
    cytube: CytubeConfig
    account: AccountConfig
    sort: SortConfig
    logging: LoggingConfig


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is not found, has invalid YAML syntax,
                     is missing required fields, or contains invalid values.

    Behavior:
        1. Load .env into the process environment (existing vars win)
        2. Locate config file (explicit path or CWD/config.yaml)
        3. Read and parse YAML content
        4. Validate structure (required sections exist)
        5. Parse each section, applying defaults
        6. Create and return frozen Config object
    """
    load_dotenv()

    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    _validate_config(raw_config)

    return Config(
        cytube=_parse_cytube_config(raw_config["cytube"]),
        account=_parse_account_config(raw_config["account"]),
        sort=_parse_sort_config(raw_config.get("sort")),
        logging=_parse_logging_config(raw_config.get("logging")),
    )


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Check the configuration has all required sections as dictionaries.

    Raises:
        ConfigError: If a section is missing or not a dictionary.
    """
    required_sections = ["cytube", "account"]

    for section in required_sections:
        if section not in raw_config:
            raise ConfigError(
                f"Missing required section: '{section}'",
                details={"missing_section": section}
            )

    for section in ("cytube", "account", "sort", "logging"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _require_string(section: dict[str, Any], key: str, field_name: str) -> str:
    value = section.get(key, "")
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            f"'{field_name}' must be a non-empty string",
            details={"field": field_name}
        )
    return value.strip()


def _parse_cytube_config(cytube_section: dict[str, Any]) -> CytubeConfig:
    """
    Parse and validate the cytube configuration section.

    Raises:
        ConfigError: If server is not an http(s) URL, channel is empty,
                     or timeout is not a positive number.
    """
    server = _require_string(cytube_section, "server", "cytube.server")
    parsed = urlparse(server)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(
            f"'cytube.server' must be an http(s) URL, got: {server}",
            details={"field": "cytube.server", "value": server}
        )

    channel = _require_string(cytube_section, "channel", "cytube.channel")

    timeout = cytube_section.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(
            "'cytube.timeout' must be a positive number",
            details={"field": "cytube.timeout", "value": timeout}
        )

    return CytubeConfig(
        server=server.rstrip("/"),
        channel=channel,
        timeout=float(timeout)
    )


def _parse_account_config(account_section: dict[str, Any]) -> AccountConfig:
    """
    Parse and validate the account configuration section.

    A missing or empty password falls back to the CYTUBE_PASSWORD
    environment variable.

    Raises:
        ConfigError: If username is empty, or no password is available.
    """
    username = _require_string(account_section, "username", "account.username")

    password = account_section.get("password")
    if password is None or password == "":
        password = os.environ.get(PASSWORD_ENV_VAR, "")

    if not isinstance(password, str) or not password:
        raise ConfigError(
            f"'account.password' must be set (or provide {PASSWORD_ENV_VAR})",
            details={"field": "account.password"}
        )

    return AccountConfig(username=username, password=password)


def _parse_sort_config(sort_section: dict[str, Any] | None) -> SortConfig:
    """
    Parse the optional sort section.

    Defaults: enabled=True, command="!sort".
    """
    enabled = True
    command = DEFAULT_SORT_COMMAND

    if sort_section is not None:
        raw_enabled = sort_section.get("enabled")
        if raw_enabled is not None:
            if not isinstance(raw_enabled, bool):
                raise ConfigError(
                    "'sort.enabled' must be true or false",
                    details={"field": "sort.enabled", "value": raw_enabled}
                )
            enabled = raw_enabled

        if sort_section.get("command") is not None:
            command = _require_string(sort_section, "command", "sort.command")

    return SortConfig(enabled=enabled, command=command)


def _parse_logging_config(logging_section: dict[str, Any] | None) -> LoggingConfig:
    """
    Parse the optional logging section.

    Expands ~ and makes the directory absolute. Does NOT create it
    (setup_logging does that).
    """
    directory = DEFAULT_LOG_DIRECTORY

    if logging_section is not None and logging_section.get("directory") is not None:
        directory = _require_string(logging_section, "directory", "logging.directory")

    return LoggingConfig(directory=Path(directory).expanduser().resolve())
