"""Narrow service adapters used by command handlers."""

from .http import HttpClient, HttpError
from .jar_parser import InvalidServerDirError, ServerFork, ServerInfo, ServerInfoError
from .process import spawn_server
from .server_config import ServerConfig

__all__ = [
    "HttpClient",
    "HttpError",
    "InvalidServerDirError",
    "ServerFork",
    "ServerInfo",
    "ServerInfoError",
    "ServerConfig",
    "spawn_server",
]
