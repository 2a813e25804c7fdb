"""Underhood gateway server."""

from .config import ServerConfig
from .server import create_app, main

__all__ = ["ServerConfig", "create_app", "main"]
