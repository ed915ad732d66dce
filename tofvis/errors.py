"""Exceptions raised by the tofvis pipeline."""
from __future__ import annotations


class PreconditionError(ValueError):
    """Input frame buffer does not match the configured frame geometry."""


class ConfigurationError(ValueError):
    """Pipeline configuration is unusable."""
