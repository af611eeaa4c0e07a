"""
Error taxonomy for Sun Resource

Every stage of the run raises one of these. Nothing is retried: a failure
at any stage stops the run and nothing downstream executes.

- TransportError   - non-200 status, wrong content type, network failure
- DecodeError      - body is not valid JSON
- SchemaError      - JSON does not have the ApiResponse shape
- MissingFieldError - a series lacks one of the 12 canonical months
- ConfigError      - missing API key or invalid coordinates
- RenderError      - chart or artifact could not be written

categorize_error() turns any exception into an (ErrorType, message) pair
for log lines.
"""

import json
from enum import Enum
from typing import Optional, Sequence, Tuple

import httpx


class ErrorType(Enum):
    """Categories of errors for log output."""
    TIMEOUT = "timeout"
    API_ERROR = "api_error"
    PARSE_ERROR = "parse_error"
    SCHEMA_ERROR = "schema_error"
    CONFIG_ERROR = "config_error"
    RENDER_ERROR = "render_error"
    UNKNOWN = "unknown"


class SunResourceError(Exception):
    """Base class for all Sun Resource failures."""


class ConfigError(SunResourceError):
    """Settings are missing or invalid."""


class TransportError(SunResourceError):
    """The HTTP exchange with the upstream API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 content_type: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.content_type = content_type


class DecodeError(SunResourceError):
    """The response body is not valid JSON."""


class SchemaError(SunResourceError):
    """The decoded JSON does not match the expected structure."""


class MissingFieldError(SchemaError):
    """A series is missing one or more canonical month keys."""

    def __init__(self, series: str, missing: Sequence[str]):
        self.series = series
        self.missing = tuple(missing)
        super().__init__(
            f"Series '{series}' is missing monthly values for: {', '.join(self.missing)}"
        )


class RenderError(SunResourceError):
    """The chart or an output artifact could not be produced."""


class PipelineError(SunResourceError):
    """A pipeline stage failed; wraps the stage's own error."""

    def __init__(self, stage: str, cause: Exception):
        self.stage = stage
        self.cause = cause
        super().__init__(f"Stage '{stage}' failed: {cause}")


def categorize_error(exception: Exception) -> Tuple[ErrorType, str]:
    """
    Categorize an exception for logging purposes.

    Returns:
        Tuple of (ErrorType, error_message)
    """
    if isinstance(exception, PipelineError):
        exception = exception.cause

    error_msg = str(exception)[:200]  # Truncate long messages

    if isinstance(exception, httpx.TimeoutException):
        return (ErrorType.TIMEOUT, f"Timeout: {error_msg}")

    elif isinstance(exception, TransportError):
        if isinstance(exception.__cause__, httpx.TimeoutException):
            return (ErrorType.TIMEOUT, f"Timeout: {error_msg}")
        return (ErrorType.API_ERROR, error_msg)

    elif isinstance(exception, httpx.HTTPStatusError):
        status = exception.response.status_code
        return (ErrorType.API_ERROR, f"HTTP {status}")

    elif isinstance(exception, httpx.RequestError):
        return (ErrorType.API_ERROR, f"Request error: {error_msg}")

    elif isinstance(exception, SchemaError):
        return (ErrorType.SCHEMA_ERROR, f"Schema error: {error_msg}")

    elif isinstance(exception, (DecodeError, json.JSONDecodeError)):
        return (ErrorType.PARSE_ERROR, f"Parse error: {error_msg}")

    elif isinstance(exception, ConfigError):
        return (ErrorType.CONFIG_ERROR, f"Config error: {error_msg}")

    elif isinstance(exception, RenderError):
        return (ErrorType.RENDER_ERROR, f"Render error: {error_msg}")

    else:
        return (ErrorType.UNKNOWN, error_msg)
