"""
Command-line interface for cytube-sorter.

This module implements the CLI using Click, with rich-click for the
help output colors.

Usage:
    # Sort the channel configured in ./config.yaml
    cytube-sorter

    # Use another config file
    cytube-sorter --config ~/bots/mychannel.yaml

    # Mirror the playlist without moving anything
    cytube-sorter --no-sort --verbose

Configuration:
    The CLI requires a config.yaml file (see cytube_sorter.core.config)
    with the server, channel and bot account.

Exit Codes:
    0    Disconnected normally
    1    Configuration error or unexpected error
    2    Could not connect to the server
    3    Fatal server error (bad channel, bad login, ...)
    4    Other cytube-sorter error
    130  Interrupted (Ctrl+C)
"""

import sys
from pathlib import Path
from typing import Optional

import rich_click as click

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100

from cytube_sorter import __version__
from cytube_sorter.core import (
    Config,
    ConfigError,
    CytubeSorterError,
    FatalRemoteError,
    RemoteConnectionError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from cytube_sorter.cytube import CytubeClient, run_session
from cytube_sorter.sync import Reconciler

logger = get_logger(__name__)


@click.command()
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--no-sort",
    is_flag=True,
    help="Start with sorting disabled; only mirror the playlist"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show debug messages on the console"
)
@click.version_option(__version__, "--version", prog_name="cytube-sorter")
def cli(config_path: Optional[Path], no_sort: bool, verbose: bool) -> None:
    """
    cytube-sorter: Keep a CyTube playlist in round-robin order.

    Connects to a channel as a bot, mirrors its playlist, and moves
    videos so that users take turns: one video from each user, in the
    order they first queued, then the next round.

    \b
    CHAT COMMANDS:
        !sort                    # Re-sort the playlist now
    """
    _run_sorter(config_path, sort_enabled=not no_sort, verbose=verbose)


def _run_sorter(config_path: Path | None, sort_enabled: bool, verbose: bool) -> None:
    """
    Load configuration, connect, and run the session until it ends.

    Raises:
        SystemExit: On fatal errors (with appropriate exit code).
    """
    client: CytubeClient | None = None

    try:
        config = load_config(config_path)

        setup_logging(config.logging.directory, verbose=verbose)
        logger.info(f"cytube-sorter {__version__} starting")

        client = _create_client(config)
        reconciler = Reconciler(client, sort_enabled=sort_enabled and config.sort.enabled)
        if not reconciler.sort_enabled:
            logger.info("Sorting disabled; mirroring playlist only")

        client.connect()
        run_session(client, reconciler)

        logger.info("cytube-sorter stopped")

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except RemoteConnectionError as e:
        click.echo(f"Connection error: {e.message}", err=True)
        logger.error(f"Connection error: {e.message}", exc_info=True)
        sys.exit(2)

    except FatalRemoteError as e:
        click.echo(f"Server error: {e.message}", err=True)
        logger.error(f"Fatal server error: {e.message}")
        sys.exit(3)

    except CytubeSorterError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(4)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        if client is not None:
            client.close()
        shutdown_logging()


def _create_client(config: Config) -> CytubeClient:
    return CytubeClient(
        cytube=config.cytube,
        account=config.account,
        sort_command=config.sort.command
    )


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `cytube-sorter` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
