"""
cytube-sorter: Keep a CyTube channel playlist fair.

This package connects to a CyTube channel as a bot, mirrors the channel
playlist locally, and reorders it so that users take turns (round-robin
by the user who queued each video), while preserving each user's own
order.

Architecture:
    Server events flow through the following components:

    cytube/: Connection to the server
        - Look up the channel's socket server over HTTP
        - Connect with socket.io, join the channel, log in
        - Parse events into typed notifications

    sync/: Session state machine
        - Reconciler applies notifications to the mirror
        - Decides when a sort pass is needed
        - Sends move commands and playlist requests back

    playlist/: Pure playlist logic
        - QueueMirror: local ordered copy of the playlist
        - round_robin_sort: the fair order
        - generate_moves: moves that turn one order into another
        - EchoSuppressor: recognises the server echoing our own moves

Modules:
    core/       - Configuration, logging, exceptions
    playlist/   - Mirror, fairness ordering, move diff, echo suppression
    sync/       - Notifications and the Reconciler
    cytube/     - socket.io client and wire protocol
    cli.py      - Command-line interface

Usage:
    Command Line:
        cytube-sorter
        cytube-sorter --config mychannel.yaml --verbose

    Python API:
        from cytube_sorter.core import load_config, setup_logging
        from cytube_sorter.cytube import CytubeClient, run_session
        from cytube_sorter.sync import Reconciler

        config = load_config()
        setup_logging(config.logging.directory)
        client = CytubeClient(config.cytube, config.account, config.sort.command)
        reconciler = Reconciler(client, sort_enabled=config.sort.enabled)
        client.connect()
        run_session(client, reconciler)

Dependencies:
    - python-socketio: socket.io client for the CyTube server
    - requests: socket server lookup
    - click / rich-click: CLI framework and colors
    - pyyaml: Configuration file parsing
    - python-dotenv: Password from .env
    - colorama: Console colors
"""

__version__ = "0.1.0"
__author__ = "cytube-sorter"
__license__ = "MIT"

# Convenience imports for common usage
from cytube_sorter.core import (
    Config,
    ConfigError,
    CytubeSorterError,
    FatalRemoteError,
    ReferenceNotFound,
    get_logger,
    load_config,
    setup_logging,
)
from cytube_sorter.playlist import MoveCommand, PlaylistItem, QueueMirror
from cytube_sorter.sync import Reconciler

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "CytubeSorterError",
    "ConfigError",
    "ReferenceNotFound",
    "FatalRemoteError",
    # Models
    "PlaylistItem",
    "MoveCommand",
    "QueueMirror",
    "Reconciler",
]
