"""
Purpose:
- Best-effort suggestions from SearXNG's /autocompleter endpoint.
- Never raises: a slow or broken autocompleter just means no suggestion rows.
"""

from __future__ import annotations
import json
from typing import Any, List
from urllib.parse import quote

from .http import HttpFetcher
from ..core.logger import get_logger

logger = get_logger(__name__)

# Typing has to stay responsive no matter what timeout_ms says
AUTOCOMPLETE_TIMEOUT_CAP_SECS = 2.0


def autocomplete_url(query: str, base_url: str) -> str:
    return f"{base_url}/autocompleter?q={quote(query, safe='')}"


def parse_autocomplete_response(response_data: Any) -> List[str]:
    """
    Expected shape: ["<echoed query>", ["suggestion", ...]].
    Anything else yields [].
    """
    if not response_data:
        return []
    try:
        data = json.loads(response_data)
    except (TypeError, ValueError):
        return []
    if not isinstance(data, list) or len(data) != 2:
        return []
    suggestions = data[1]
    if not isinstance(suggestions, list):
        return []
    return [s for s in suggestions if isinstance(s, str)]


def fetch_autocomplete(
    query: str,
    base_url: str,
    timeout_secs: float,
    fetcher: HttpFetcher,
    cap_secs: float = AUTOCOMPLETE_TIMEOUT_CAP_SECS,
) -> List[str]:
    url = autocomplete_url(query, base_url)
    outcome = fetcher.get_text(url, min(timeout_secs, cap_secs))
    if not outcome.success or not outcome.data.strip():
        logger.debug("autocomplete unavailable for %r (%s)", query, outcome.error or "empty body")
        return []
    return parse_autocomplete_response(outcome.data)
