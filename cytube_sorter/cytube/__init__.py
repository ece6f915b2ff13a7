"""
CyTube module for cytube-sorter.

    - protocol: Event names and payload parsing into notifications
    - client: CytubeClient (socket.io connection) and run_session()

Usage:
    from cytube_sorter.cytube import CytubeClient, run_session
"""

from cytube_sorter.cytube.client import CytubeClient, get_socket_server, run_session

__all__ = [
    "CytubeClient",
    "get_socket_server",
    "run_session",
]
