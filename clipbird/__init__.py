"""Clipboard sharing core: wire packets, certificate storage, history and discovery."""

__version__ = "1.0.0"