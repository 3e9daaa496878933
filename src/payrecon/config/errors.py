"""Errors raised while reading payrecon settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but unusable (bad integer, unknown time zone)."""


class MissingConfigurationError(ConfigurationError):
    """A required setting, such as the bePaid shop credentials, is absent or blank."""
