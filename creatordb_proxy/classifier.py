"""
Response classification.

Decides whether an upstream reply is a success or a failure and reduces it
to the proxy's uniform result envelope.
"""

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from creatordb_proxy.errors import (
    ProxyError,
    UpstreamApplicationError,
    UpstreamTransportError,
)

TIMEOUT_STATUS = 504


@dataclass(frozen=True)
class NormalizedResult:
    """
    Uniform outcome of one dispatch.

    On success, payload is the upstream body exactly as decoded. On failure,
    error/status/error_kind describe what went wrong.
    """
    success: bool
    payload: Any = None
    error: Optional[str] = None
    status: Optional[int] = None
    error_kind: Optional[str] = None

    @classmethod
    def ok(cls, payload: Any, status: int = 200) -> "NormalizedResult":
        return cls(success=True, payload=payload, status=status)

    @classmethod
    def from_error(cls, error: ProxyError) -> "NormalizedResult":
        return cls(
            success=False,
            error=error.message,
            status=error.status,
            error_kind=error.kind,
        )

    def to_dict(self) -> Any:
        """Wire form: the upstream body on success, {success, error, status} on failure"""
        if self.success:
            return self.payload
        return {"success": False, "error": self.error, "status": self.status}


def extract_error_message(status: int, body: Any) -> str:
    """errorDescription, then message, then a generic "API Error: <status>"."""
    if isinstance(body, dict):
        for key in ("errorDescription", "message"):
            value = body.get(key)
            if value:
                return str(value)
    return f"API Error: {status}"


def classify(status: int, body: Any) -> NormalizedResult:
    """
    Classify a decoded upstream reply.

    Args:
        status: HTTP status code from upstream
        body: Decoded JSON body

    Returns:
        Failure when status is outside 2xx or body.success is exactly False,
        otherwise a success carrying the body untouched
    """
    flagged_failure = isinstance(body, dict) and body.get("success") is False
    if not 200 <= status < 300 or flagged_failure:
        return NormalizedResult.from_error(
            UpstreamApplicationError(extract_error_message(status, body), status)
        )
    return NormalizedResult.ok(body, status)


def classify_transport_error(error: UpstreamTransportError) -> NormalizedResult:
    """Failure for a call that never produced a usable reply."""
    return NormalizedResult.from_error(error)


def transport_error_from(exc: Exception) -> UpstreamTransportError:
    """
    Wrap a low-level failure as an UpstreamTransportError.

    Timeouts get status 504; everything else (connection errors,
    undecodable bodies) gets 502.
    """
    message = str(exc) or exc.__class__.__name__
    if isinstance(exc, httpx.TimeoutException):
        return UpstreamTransportError(message, TIMEOUT_STATUS)
    return UpstreamTransportError(message)
