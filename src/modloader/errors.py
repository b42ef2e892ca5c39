"""Error hierarchy for the modloader package."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
    "LoaderError",
    "ResolutionError",
    "LoadError",
    "ExtractionError",
    "ConfigError",
    "ConfigNotFoundError",
    "InvalidInputError",
    "ErrorCodes",
]


class LoaderError(Exception):
    """Base error for all modloader errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ResolutionError(LoaderError):
    """Raised when file patterns cannot be resolved against a base path."""

    def __init__(self, base_path: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="RESOLUTION_ERROR",
            message=f"Cannot resolve files under '{base_path}': {reason}",
            details={"base_path": base_path, "reason": reason},
            **kwargs,
        )

    @property
    def base_path(self) -> str:
        """The base path the resolution was attempted against."""
        return self.details["base_path"]


class LoadError(LoaderError):
    """Raised when a discovered unit file cannot be loaded."""

    def __init__(self, path: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="LOAD_ERROR",
            message=f"Failed to load unit '{path}': {reason}",
            details={"path": path, "reason": reason},
            **kwargs,
        )

    @property
    def path(self) -> str:
        """The unit file that failed to load."""
        return self.details["path"]


class ExtractionError(LoaderError):
    """Raised when a unit's declared components are malformed."""

    def __init__(self, path: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="EXTRACTION_ERROR",
            message=f"Failed to extract components from '{path}': {reason}",
            details={"path": path, "reason": reason},
            **kwargs,
        )


class ConfigError(LoaderError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="CONFIG_INVALID", message=message, **kwargs)


class ConfigNotFoundError(LoaderError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, config_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_NOT_FOUND",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": config_path},
            **kwargs,
        )


class InvalidInputError(LoaderError):
    """Raised for invalid input."""

    def __init__(self, message: str = "Invalid input", **kwargs: Any) -> None:
        super().__init__(code="GENERAL_INVALID_INPUT", message=message, **kwargs)


class ErrorCodes:
    """All modloader error codes as constants.

    Example:
        if error.code == ErrorCodes.LOAD_ERROR:
            report_broken_unit(error.details["path"])
    """

    RESOLUTION_ERROR = "RESOLUTION_ERROR"
    LOAD_ERROR = "LOAD_ERROR"
    EXTRACTION_ERROR = "EXTRACTION_ERROR"
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    GENERAL_INVALID_INPUT = "GENERAL_INVALID_INPUT"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ErrorCodes is immutable")
