"""Animated LED colour modes with JSON storage and a web and websocket interface."""

__version__ = "0.1.6"