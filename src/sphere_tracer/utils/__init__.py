"""Utilities module."""

from .config import Config

__all__ = ["Config"]
