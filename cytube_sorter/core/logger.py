"""
Logging configuration for cytube-sorter.

This module sets up the logging system with multiple outputs:
    - Console: Compact colored output for whoever is watching the bot
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - moves.log: Every move command the bot sent to the server

The logging system follows the principle: everything to screen is also saved
to file, then filtered into specialized files.

Log File Locations:
    All log files are created in the logging directory specified in
    config.yaml, with one set of files per run (timestamped names).

Usage:
    from cytube_sorter.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Connected")
    log_move_command(logger, uid=12, after=9, title="Some Video")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

import colorama
from colorama import Fore, Style


LOG_FULL_FILENAME = "log_full"
LOG_ERRORS_FILENAME = "log_errors"
MOVES_FILENAME = "moves"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Custom formatter that adds colors to console output.

    Colors:
        - DEBUG: Cyan
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bright Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Fore.WHITE)
        colored_levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        return f"{colored_levelname}: {record.getMessage()}"


class MoveCommandHandler(logging.Handler):
    """
    Custom handler that records dispatched move commands in moves.log.

    Each move the reconciler sends to the server is written as one line:

        2024-05-01 20:15:03  move 42 after 17  Some Video Title
        2024-05-01 20:15:03  move 43 to front  Another Video

    The handler looks for specific extra fields in log records:
        - 'move_uid': uid of the item being moved
        - 'move_after': uid it is placed after, or "prepend"
        - 'move_title': media title (optional, for readability)

    Only records containing these fields are written to the file.

    Attributes:
        report_path: Path to the moves log file.
        report_file: Open file handle (set by open()).
    """

    def __init__(self, report_path: Path) -> None:
        """
        Initialize the move command handler.

        Args:
            report_path: Path to the moves log file.
                         File will be created/overwritten.
        """
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """
        Open the report file for writing.

        Called by setup_logging() after handler is created.
        File is opened in write mode (overwrites existing content).
        """
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        """
        Write move info to the report if present in the log record.

        Records without a 'move_uid' attribute are ignored.
        """
        if not hasattr(record, "move_uid"):
            return

        if self.report_file is None:
            return

        try:
            uid = getattr(record, "move_uid")
            after = getattr(record, "move_after", None)
            title = getattr(record, "move_title", "") or ""
            timestamp = datetime.fromtimestamp(record.created).strftime(FILE_DATE_FORMAT)

            if after == "prepend":
                target = "to front"
            else:
                target = f"after {after}"

            self.report_file.write(f"{timestamp}  move {uid} {target}  {title}".rstrip() + "\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """
        Close the report file handle.

        Safe to call multiple times.
        """
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """
    Filter that only allows ERROR and CRITICAL level records.

    Used by the error log file handler to exclude DEBUG, INFO, and WARNING.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path, verbose: bool = False) -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before connecting to the server.

    Args:
        log_dir: Directory where log files will be created.
        verbose: If True, the console shows DEBUG records too.

    Behavior:
        1. Create log_dir if it doesn't exist
        2. Generate timestamp for this run's log files
        3. Configure root logger level to DEBUG
        4. Console handler (stderr, colored), INFO or DEBUG
        5. Full log file handler, DEBUG
        6. Error log file handler, filtered to ERROR+
        7. Move command handler writing moves_{timestamp}.log

    Thread Safety:
        This function is NOT thread-safe. Call it once from the main
        thread before the socket client starts its threads.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    # ANSI colors on Windows consoles
    colorama.just_fix_windows_console()

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_handler = logging.FileHandler(
        log_dir / f"{LOG_FULL_FILENAME}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        log_dir / f"{LOG_ERRORS_FILENAME}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    moves_handler = MoveCommandHandler(log_dir / f"{MOVES_FILENAME}_{timestamp}.log")
    moves_handler.open()
    root_logger.addHandler(moves_handler)

    # socket.io / engine.io are chatty at DEBUG
    logging.getLogger("socketio").setLevel(logging.WARNING)
    logging.getLogger("engineio").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Note:
        Loggers obtained before setup_logging() is called will have no
        handlers and will not produce output.
    """
    return logging.getLogger(name)


def log_move_command(
    logger: logging.Logger,
    uid: int,
    after: int | str,
    title: str | None = None
) -> None:
    """
    Log a move command sent to the server.

    Logs a DEBUG level message and attaches the extra fields that
    MoveCommandHandler uses to write to moves.log.

    Args:
        logger: The logger to use for the message.
        uid: uid of the moved item.
        after: uid it is placed after, or "prepend".
        title: Media title, if known.
    """
    if after == "prepend":
        message = f"Move {uid} to front"
    else:
        message = f"Move {uid} after {after}"
    if title:
        message = f"{message} ({title})"

    logger.debug(
        message,
        extra={
            "move_uid": uid,
            "move_after": after,
            "move_title": title,
        }
    )


def shutdown_logging() -> None:
    """
    Properly shut down the logging system.

    Flushes and closes every handler on the root logger, then removes
    them. Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
