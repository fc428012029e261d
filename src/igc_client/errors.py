"""
Exception taxonomy for the IGC REST client.

Expected conditions (asset not found, empty page, property not applicable)
are reported through ``None`` / ``False`` return values. The exceptions below
are raised for everything else.
"""

from __future__ import annotations

from typing import Any, Optional


class IGCClientError(Exception):
    """Base class for all errors raised by the client."""


class ClientConfigurationError(IGCClientError, ValueError):
    """The client cannot be constructed with the provided settings."""


class TransportError(IGCClientError):
    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code


class AuthenticationError(TransportError):
    """Raised once a freshly forced session has also been rejected."""


class SchemaResolutionError(IGCClientError):
    def __init__(self, message: str, *, type_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.type_name = type_name


class SerializationError(IGCClientError):
    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload
