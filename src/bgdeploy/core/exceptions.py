"""Custom exceptions for bgdeploy."""

from typing import Any


class BGDeployError(Exception):
    """Base exception for all bgdeploy errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigError(BGDeployError):
    """Configuration-related errors."""

    pass


class ValidationError(BGDeployError):
    """Input validation errors."""

    pass


class AuthenticationError(BGDeployError):
    """Login to a foundation failed."""

    def __init__(
        self,
        message: str,
        foundation_url: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.foundation_url = foundation_url


class CourierError(BGDeployError):
    """A platform command failed.

    ``output`` holds whatever raw output the command produced before failing.
    """

    def __init__(
        self,
        message: str,
        output: bytes = b"",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.output = output


class PushError(BGDeployError):
    """Pushing an application failed.

    ``logs`` carries platform-side diagnostic logs when they could be fetched.
    """

    def __init__(
        self,
        message: str,
        logs: bytes | None = None,
        step: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.logs = logs
        self.step = step


class RenameConflictError(PushError):
    """The live app could not be renamed even though it exists."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, logs=None, step="rename", details=details)


class DeleteVenerableError(BGDeployError):
    """The venerable app could not be deleted after a successful push."""

    def __init__(
        self,
        message: str,
        venerable_name: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.venerable_name = venerable_name


class ExtractionError(BGDeployError):
    """Artifact extraction errors."""

    pass
