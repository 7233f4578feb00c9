"""Klondike host package: wraps the engine with networking."""

from .server import ClientSession, HostServer

__all__ = ["ClientSession", "HostServer"]
