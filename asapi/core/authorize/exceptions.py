"""Authorization-service exceptions and the error envelope."""
from __future__ import annotations
from typing import Optional

# Status code carried by errors that never got an HTTP response
NO_STATUS: Optional[int] = None


class AsapiError(Exception):
    """Base exception for all authorization-service operations."""
    pass


class ErrorResult(AsapiError):
    """Uniform error envelope returned by every client operation.
    
    Operations return ``None`` in place of an ErrorResult on success. A remote
    rejection keeps the HTTP status; local and transport failures leave it at
    ``NO_STATUS``.
    
    Attributes:
        message: Error message (raw response body for remote rejections)
        status_code: HTTP status code or NO_STATUS
    """
    
    def __init__(self, message: str, status_code: Optional[int] = NO_STATUS):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
    
    @property
    def is_remote(self) -> bool:
        """True when the remote service answered with a non-200 status."""
        return self.status_code is not NO_STATUS
    
    def __eq__(self, other):
        if not isinstance(other, ErrorResult):
            return NotImplemented
        return (self.message, self.status_code) == (other.message, other.status_code)
    
    def __hash__(self):
        return hash((self.message, self.status_code))
    
    def __repr__(self) -> str:
        return f"ErrorResult(message={self.message!r}, status_code={self.status_code!r})"


class TransportError(AsapiError):
    """Connection, timeout or DNS failure raised by the HTTP transport."""
    pass


class ConfigurationError(AsapiError):
    """Required configuration value is missing or malformed."""
    pass
