"""Folder relay: polling worker that pushes local folders to a remote store."""

__version__ = "0.3.0"
