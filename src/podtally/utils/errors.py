"""Custom exceptions for Podtally."""


class PodtallyError(Exception):
    """Base exception for all Podtally errors."""

    pass


class ConfigError(PodtallyError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class ConfigNotFoundError(ConfigError):
    """Configuration file not found."""

    pass


class ShowError(PodtallyError):
    """Show registry errors."""

    pass


class ShowNotFoundError(ShowError):
    """Show not found in configuration."""

    pass


class DuplicateShowError(ShowError):
    """Show already exists."""

    pass


class FeedError(PodtallyError):
    """Feed retrieval errors."""

    pass


class FeedUnavailableError(FeedError):
    """Feed could not be fetched (transport or HTTP failure)."""

    def __init__(self, message: str, locator: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.locator = locator
        self.status_code = status_code


class FeedParseError(FeedUnavailableError):
    """Feed was fetched but its content could not be parsed at all."""

    pass


class StoreError(PodtallyError):
    """Episode store errors."""

    pass
