"""Exceptions raised by the sprite core."""
from __future__ import annotations
from typing import Optional


class SpritrError(RuntimeError):
    """Base exception for spritr errors."""
    pass


class DecodeFailure(SpritrError):
    """
    Raised when a layer's encoded image cannot be decoded.

    Attributes:
        layer_name: Name of the offending layer, if known.
    """
    def __init__(self, message: str, layer_name: Optional[str] = None):
        super().__init__(message)
        self.layer_name = layer_name


class ConfigError(SpritrError, ValueError):
    """Raised for out-of-range configuration values (fps, scale, cell size)."""
    pass
