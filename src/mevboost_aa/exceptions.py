"""Errors raised while resolving, building and settling MEV-Boost user operations."""

from typing import Any


class MEVBoostAAError(Exception):
    """Root of every SDK error; ``details`` carries the offending RPC or call context."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NetworkError(MEVBoostAAError):
    """Raised when the node RPC or bundler endpoint cannot be reached or answers badly."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class BundlerError(NetworkError):
    """Raised when the bundler rejects a request, e.g. an AA2x validation failure."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        endpoint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, endpoint=endpoint, details=details)
        self.code = code


class ValidationError(MEVBoostAAError):
    """Raised when caller input is malformed, such as a bad address or uneven batch arrays."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class AddressResolutionError(MEVBoostAAError):
    """Raised when getSenderAddress does not revert with a sender address."""

    def __init__(
        self,
        message: str,
        init_code: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.init_code = init_code


class MiddlewareError(MEVBoostAAError):
    """Raised when a user operation middleware step fails."""

    def __init__(
        self,
        message: str,
        middleware: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.middleware = middleware
