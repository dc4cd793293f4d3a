"""Errors raised while reading configuration."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A configuration value is present but unusable."""


class MissingConfigurationError(ConfigurationError):
    def __init__(self, names: tuple[str, ...]) -> None:
        self.names = names
        super().__init__(f"Missing configuration for: {', '.join(names)}")
