"""
Exception hierarchy for Flamenode.

Configuration and remote-fetch errors abort a run; media download errors are
caught per image by the resolver and only logged.
"""

from typing import Any, Dict, Optional


class FlamenodeError(Exception):
    """Base exception for all Flamenode errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(FlamenodeError):
    """Raised when required remote-connection settings are missing."""

    pass


class RemoteFetchError(FlamenodeError):
    """Raised when a call to the CMS backend fails."""

    def __init__(self, call: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.call = call
        super().__init__(f"[{call}] {message}", details)


class NormalizationError(FlamenodeError):
    """Raised when raw content cannot be turned into well-formed nodes."""

    pass


class MediaDownloadError(FlamenodeError):
    """Raised by the materializer when a remote file cannot be fetched."""

    def __init__(self, url: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.url = url
        super().__init__(f"Failed to download {url}: {message}", details)
