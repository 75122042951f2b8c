from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import requests

from rss_pipeline.config import get_settings


def function_url(name: str) -> str:
    settings = get_settings()
    return f"{settings.functions_base_url.rstrip('/')}/{name.lstrip('/')}"


def auth_headers() -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    key = get_settings().service_role_key
    if key:
        headers["Authorization"] = f"Bearer {key}"
    return headers


def post_function(
    name: str,
    payload: Mapping[str, Any],
    *,
    timeout: Optional[float] = None,
) -> requests.Response:
    """POST a JSON payload to a sibling service and return the raw response."""
    resolved_timeout = timeout or get_settings().function_timeout
    return requests.post(function_url(name), json=dict(payload), headers=auth_headers(), timeout=resolved_timeout)


def get_function(
    name: str,
    params: Optional[Mapping[str, Any]] = None,
    *,
    timeout: Optional[float] = None,
) -> requests.Response:
    resolved_timeout = timeout or get_settings().http_timeout
    return requests.get(function_url(name), params=dict(params or {}), headers=auth_headers(), timeout=resolved_timeout)


__all__ = ["auth_headers", "function_url", "get_function", "post_function"]
