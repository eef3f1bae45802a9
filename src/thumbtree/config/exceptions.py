"""Exceptions raised by the configuration layer."""


class ConfigError(Exception):
    """Raised when configuration data cannot be read, merged, or validated."""
