from __future__ import annotations

from typing import Optional

_COUNTRY_LANGUAGES = {
    "ua": "uk",
    "pl": "pl",
    "in": "hi",
}
DEFAULT_LANGUAGE = "en"


def language_for_country(country_code: Optional[str]) -> str:
    """Content language passed to generation services for a country code."""
    code = (country_code or "").strip().lower()
    return _COUNTRY_LANGUAGES.get(code, DEFAULT_LANGUAGE)


__all__ = ["DEFAULT_LANGUAGE", "language_for_country"]
