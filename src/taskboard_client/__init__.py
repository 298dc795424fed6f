"""Client-side session and task synchronisation layer for the task board."""

from __future__ import annotations

__version__ = "0.1.0"

from .main import TaskboardApp, create_app

__all__ = ["TaskboardApp", "__version__", "create_app"]
