"""Backend collaborator contract and its HTTP implementation."""

from __future__ import annotations

from .client import BackendClient
from .ports import Backend

__all__ = ["Backend", "BackendClient"]
