from __future__ import annotations

from uuid import uuid4

USER_AGENT = "transit-mcp/0.1.0 (+https://github.com/transit-mcp/transit-mcp)"


def make_headers() -> dict[str, str]:
    """Return the headers sent with every backend request.

    x-correlation-id is freshly generated on every call so backend logs can be
    matched against ours.
    """
    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
        "x-correlation-id": str(uuid4()),
    }
