"""Offline-first change list synchronization for topics and news resources."""

__version__ = "0.1.0"
