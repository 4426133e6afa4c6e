"""Bundled backend connectors."""

from __future__ import annotations

from .base import NotImplementedConnector
from .mock import MockConnector

__all__ = [
    "MockConnector",
    "NotImplementedConnector",
]
