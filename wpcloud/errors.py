from typing import Optional


class VaultError(Exception):
    """Base class for every failure a vault action can report to the user."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return self.message


class ValidationError(VaultError):
    """Local input rejected; no request was sent."""


class AuthError(VaultError):
    """Credentials or token rejected, or no session available."""


class NetworkError(VaultError):
    """Transport failure or non-success status from a vault endpoint."""


class TransferError(VaultError):
    """Direct storage write failed."""

    def __init__(self, status: Optional[int], body: str) -> None:
        if status is None:
            message = f"Blob upload failed: {body}"
        else:
            message = f"Blob upload failed: HTTP {status} {body}".rstrip()
        super().__init__(message, status=status)
        self.body = body


class PermissionDeniedError(VaultError):
    """Local ownership guard tripped before any request."""


class ParseError(VaultError):
    """Response body is not JSON or lacks the expected shape."""


class StorageError(VaultError):
    """Local session file or preview could not be written."""
