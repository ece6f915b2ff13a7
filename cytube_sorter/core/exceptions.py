"""
Exception classes for cytube-sorter.

This module defines all custom exceptions used throughout the application.
Each exception is designed to provide clear, actionable error messages
and to distinguish between different failure modes.

Exception Hierarchy:
    CytubeSorterError (base)
        ConfigError - Configuration file issues
        PlaylistError - Local playlist mirror issues
            ReferenceNotFound - A uid is missing from the mirror
            DuplicateItemError - A uid would appear twice in the mirror
        RemoteError - Issues reported by or talking to the CyTube server
            FatalRemoteError - Server error that ends the session
            RemoteConnectionError - Socket server lookup / connect failure
            ProtocolError - Malformed payload received from the server
        SessionTerminated - Notification delivered to a dead session
"""


class CytubeSorterError(Exception):
    """
    Base exception for all cytube-sorter errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch all cytube-sorter errors with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., uids, URLs).

    Example:
        try:
            reconciler.handle(notification)
        except CytubeSorterError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Useful for logging and debugging. Common keys include:
                     - 'uid': Playlist item uid involved in the error
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(CytubeSorterError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml not found
        - config.yaml has invalid YAML syntax
        - Required fields missing (server, channel, username)
        - No password in config.yaml and CYTUBE_PASSWORD not set

    Example:
        raise ConfigError(
            "'cytube.channel' must be a non-empty string",
            details={'field': 'cytube.channel'}
        )
    """
    pass


class PlaylistError(CytubeSorterError):
    """
    Raised when an operation on the local playlist mirror cannot be applied.

    Example:
        raise PlaylistError(
            "Target order is not a permutation of the current order",
            details={'missing': [12, 14]}
        )
    """
    pass


class ReferenceNotFound(PlaylistError):
    """
    Raised when a mirror operation references a uid that is not in the mirror.

    This means the local mirror has drifted from the server. It is
    NON-CRITICAL: the reconciler abandons the current pass and asks
    the server for a fresh playlist snapshot instead of repairing
    the mirror incrementally.

    Attributes:
        uid: The uid that could not be found.
    """

    def __init__(self, uid: int, details: dict | None = None) -> None:
        """
        Initialize with the missing uid.

        Args:
            uid: The uid that was referenced but not found.
            details: Optional dictionary with additional context.
        """
        merged = {"uid": uid}
        merged.update(details or {})
        super().__init__(f"No playlist item with uid {uid}", merged)
        self.uid = uid


class DuplicateItemError(PlaylistError):
    """
    Raised when an item would be added to the mirror with a uid it already holds.

    Attributes:
        uid: The duplicated uid.
    """

    def __init__(self, uid: int) -> None:
        super().__init__(f"Playlist already contains uid {uid}", {"uid": uid})
        self.uid = uid


class RemoteError(CytubeSorterError):
    """
    Base class for problems reported by or talking to the CyTube server.
    """
    pass


class FatalRemoteError(RemoteError):
    """
    Raised when the server reports an error the session cannot recover from.

    This is a CRITICAL error. It is never retried: the session is torn
    down and the error propagates to the CLI.

    Common causes:
        - Invalid channel name
        - Invalid login
        - Channel blocks anonymous users
        - Channel could not be loaded

    Example:
        raise FatalRemoteError(
            "Invalid login: wrong password",
            details={'source': 'errorMsg'}
        )
    """
    pass


class RemoteConnectionError(RemoteError):
    """
    Raised when the socket server cannot be located or connected to.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - Server base URL unreachable
        - socketconfig endpoint returned non-JSON or an HTTP error
        - No secure socket server advertised for the channel
        - socket.io handshake failed
    """
    pass


class ProtocolError(RemoteError):
    """
    Raised when a server event payload doesn't have the expected shape.

    Example:
        raise ProtocolError(
            "moveVideo payload missing 'from'",
            details={'event': 'moveVideo', 'payload': payload}
        )
    """
    pass


class SessionTerminated(CytubeSorterError):
    """
    Raised when a notification is delivered to a session that has already ended.
    """
    pass
