"""
Error taxonomy for the CreatorDB proxy.

Every failure the proxy can report is one of these classes. Each carries a
``kind`` tag and an HTTP-style ``status`` so the shells can branch on the
category instead of parsing messages.
"""

from typing import Optional


class ProxyError(Exception):
    """Base class for all proxy errors."""

    kind = "ProxyError"
    status = 500

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        if status is not None:
            self.status = status
        super().__init__(message)


class ConfigurationError(ProxyError):
    """Raised at startup when required configuration is missing or invalid."""

    kind = "ConfigurationError"


class CallerError(ProxyError):
    """The caller's request is unusable. No upstream call is made."""

    kind = "CallerError"
    status = 400


class UnknownOperationError(CallerError):
    kind = "UnknownOperation"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Unknown tool: {operation}")


class MissingParameterError(CallerError):
    kind = "MissingParameter"

    def __init__(self, parameter: str):
        self.parameter = parameter
        super().__init__(f"{parameter} is required")


class InvalidArgumentError(CallerError):
    """Argument present but malformed (bad filter shape, out-of-range page size, ...)."""

    kind = "InvalidArgument"

    def __init__(self, parameter: str, reason: str):
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Invalid {parameter}: {reason}")


class UpstreamTransportError(ProxyError):
    """The upstream call failed before a usable response arrived."""

    kind = "UpstreamTransportError"
    status = 502


class UpstreamApplicationError(ProxyError):
    """Upstream answered with a non-2xx status or ``success: false``."""

    kind = "UpstreamApplicationError"
