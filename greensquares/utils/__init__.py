"""Utility modules for the GreenSquares backend."""

from greensquares.utils.http_client import close_all_clients, get_github_client
from greensquares.utils.logging import LogContext, get_logger, setup_logging

__all__ = [
    # HTTP
    "close_all_clients",
    "get_github_client",
    # Logging
    "get_logger",
    "LogContext",
    "setup_logging",
]
