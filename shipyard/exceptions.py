"""Custom exceptions for Shipyard."""

from typing import Any


class ShipyardError(Exception):
    """Base exception for all Shipyard errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(ShipyardError):
    """Configuration-related errors."""

    pass


class StartFileError(ConfigurationError):
    """Start file is missing, unreadable or does not match the schema."""

    def __init__(self, path: str, details: str) -> None:
        super().__init__(f"Invalid start file {path}: {details}", path=path, details=details)


class StateFileError(ShipyardError):
    """Run state file could not be read or written."""

    def __init__(self, path: str, details: str) -> None:
        super().__init__(f"State file error ({path}): {details}", path=path, details=details)


class BuiltImageError(ShipyardError):
    """A built-image mapping could not be parsed."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Invalid built image mapping '{value}', expected alias=image-id",
            value=value,
        )
