"""One-line exception details for stage failure messages.

Storage and URL fetch errors are reduced to their HTTP status; exceptions
without text fall back to a caller-supplied description.
"""

from __future__ import annotations

import httpx
from azure.core.exceptions import HttpResponseError


def exception_detail(error: BaseException, fallback: str = "") -> str:
    """Short, non-empty description of an exception.

    Examples:
        >>> exception_detail(ValueError("bad root"))
        'ValueError: bad root'

        >>> exception_detail(OSError(), "the file could not be read")
        'OSError: the file could not be read'
    """
    error_type = type(error).__name__

    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        return f"HTTP {response.status_code} {response.reason_phrase} from {error.request.url}"

    if isinstance(error, HttpResponseError) and error.status_code:
        reason = f" {error.reason}" if error.reason else ""
        error_code = getattr(error, "error_code", None)
        code = f" ({error_code})" if error_code else ""
        return f"HTTP {error.status_code}{reason}{code}"

    if isinstance(error, (TimeoutError, httpx.TimeoutException)):
        return f"{error_type}: request timed out"

    lines = str(error).strip().splitlines()
    if lines:
        return lines[0] if lines[0].startswith(error_type) else f"{error_type}: {lines[0]}"

    return f"{error_type}: {fallback}" if fallback else error_type
