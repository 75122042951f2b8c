from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBasic, HTTPBasicCredentials, HTTPBearer

from rss_pipeline.config import get_settings

_basic_scheme = HTTPBasic(auto_error=False)
_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    """How the current request authenticated: ``anonymous``, ``bearer`` or ``basic``."""

    method: str


def _same(supplied: Optional[str], expected: str) -> bool:
    return secrets.compare_digest(supplied or "", expected)


def require_caller(
    basic: Optional[HTTPBasicCredentials] = Depends(_basic_scheme),
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Caller:
    """Guard the action endpoint when a token or basic credentials are configured.

    With no credentials configured every caller is let through.
    """
    settings = get_settings()
    token = settings.console_api_token or ""
    username = settings.console_basic_username or ""
    password = settings.console_basic_password or ""
    basic_configured = bool(username and password)

    if not token and not basic_configured:
        return Caller("anonymous")
    if token and bearer is not None and _same(bearer.credentials, token):
        return Caller("bearer")
    if basic_configured and basic is not None:
        if _same(basic.username, username) and _same(basic.password, password):
            return Caller("basic")

    headers: Dict[str, str] = {"WWW-Authenticate": "Basic" if basic_configured else "Bearer"}
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated", headers=headers)


__all__ = ["Caller", "require_caller"]
