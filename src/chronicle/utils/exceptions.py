"""Custom exceptions for chronicle."""


class ChronicleError(Exception):
    """Base exception for all chronicle errors."""

    pass


class ConfigurationError(ChronicleError):
    """Error in configuration or settings."""

    pass


class TrackingError(ChronicleError):
    """Error raised by the change tracking engine."""

    pass
