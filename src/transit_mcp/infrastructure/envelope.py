from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    payload: Any


@dataclass(frozen=True)
class ErrorEnvelope:
    """{"error": {"message": str, "code"?: int, "details"?: str}}"""

    message: str
    code: int | None = None
    details: str | None = None


ApiResult = Union[Success, ErrorEnvelope]


def parse_envelope(data: Any) -> ApiResult:
    """Classify a decoded JSON body.

    The error shape is recognised regardless of HTTP status, so a 200 response
    carrying {"error": {"message": ...}} is still a failure.
    """
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            code = error.get("code")
            details = error.get("details")
            return ErrorEnvelope(
                message=error["message"],
                # bool is an int subclass; a true/false code is not a code
                code=code if isinstance(code, int) and not isinstance(code, bool) else None,
                details=details if isinstance(details, str) else None,
            )
    return Success(data)
