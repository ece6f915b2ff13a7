"""
Core module for cytube-sorter.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with multiple outputs

Usage:
    from cytube_sorter.core import (
        Config, load_config,
        setup_logging, get_logger,
        CytubeSorterError, ConfigError, ReferenceNotFound
    )
"""

from cytube_sorter.core.config import (
    AccountConfig,
    Config,
    CytubeConfig,
    LoggingConfig,
    SortConfig,
    load_config,
)
from cytube_sorter.core.exceptions import (
    ConfigError,
    CytubeSorterError,
    DuplicateItemError,
    FatalRemoteError,
    PlaylistError,
    ProtocolError,
    ReferenceNotFound,
    RemoteConnectionError,
    RemoteError,
    SessionTerminated,
)
from cytube_sorter.core.logger import (
    get_logger,
    log_move_command,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "CytubeConfig",
    "AccountConfig",
    "SortConfig",
    "LoggingConfig",
    "load_config",
    # Exceptions
    "CytubeSorterError",
    "ConfigError",
    "PlaylistError",
    "ReferenceNotFound",
    "DuplicateItemError",
    "RemoteError",
    "FatalRemoteError",
    "RemoteConnectionError",
    "ProtocolError",
    "SessionTerminated",
    # Logger
    "setup_logging",
    "get_logger",
    "log_move_command",
    "shutdown_logging",
]
