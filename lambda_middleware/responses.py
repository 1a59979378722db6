"""JSON response helpers."""

from __future__ import annotations

import json
from typing import Any

from .hooks import Response


def format_json_response(
    body: Any,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> Response:
    """Serialize ``body`` as JSON into a :class:`Response`.

    Values ``json`` cannot encode natively are stringified.
    """
    merged = {"Content-Type": "application/json"}
    if headers:
        merged.update(headers)
    return Response(
        status_code=status_code,
        headers=merged,
        body=json.dumps(body, default=str),
    )
