"""
Purpose:
- The "service" orchestrates raw query -> bangs -> autocomplete -> (full search) -> Alfred items.
- Linear: each guard either returns a finished response or hands over to the next step.
- Only configuration and full-search failures become primary error items; autocomplete and
  favicon problems just mean fewer suggestions / generic icons.
"""

from __future__ import annotations
from typing import Dict, List, Optional

from .autocomplete import fetch_autocomplete
from .bangs import ParsedQuery, parse_bangs, should_show_full_results
from .classify import Classification, ResponseKind, classify_response
from .favicons import FaviconResolver
from .http import HttpFetcher, curl_command
from ..alfred.items import (
    JSON_FORMAT_DOCS_URL,
    build_search_url,
    error_item,
    fallback_item,
    placeholder_item,
    result_to_alfred_item,
    separator_item,
    suggestion_to_alfred_item,
)
from ..alfred.schema import AlfredItem, CacheConfig, ScriptFilterResponse
from ..core.logger import get_logger
from ..core.settings import Settings

logger = get_logger(__name__)


def build_response(
    items: List[AlfredItem],
    cache_seconds: Optional[int] = None,
    enable_cache: bool = True,
) -> ScriptFilterResponse:
    """Attach Alfred's cache directive only when caching is on and seconds > 0."""
    response = ScriptFilterResponse(items=list(items))
    if enable_cache and cache_seconds is not None and cache_seconds > 0:
        response.cache = CacheConfig(seconds=cache_seconds, loosereload=True)
    return response


def _error_items(
    c: Classification,
    parsed: ParsedQuery,
    settings: Settings,
    request_url: str,
) -> List[AlfredItem]:
    base = settings.searxng_url
    browser_url = build_search_url(base, parsed.query, parsed.category, parsed.time_range)
    details: Dict[str, object] = {
        "kind": c.kind.value,
        "query": parsed.query,
        "category": parsed.category,
        "time_range": parsed.time_range,
        "url": request_url,
        "message": c.message or None,
        "reproduce": curl_command(request_url, settings.timeout_secs),
    }
    versions = settings.version_info()

    if c.kind is ResponseKind.NETWORK_ERROR:
        head = error_item("⚠️ Cannot reach SearXNG", "Check your connection", base, details, versions)
    elif c.kind is ResponseKind.EMPTY_RESPONSE:
        head = error_item("⏱️ Empty response", "SearXNG returned no data", browser_url, details, versions)
    elif c.kind is ResponseKind.HTML_NOT_JSON:
        head = error_item(
            "🔒 JSON API not enabled",
            "Enable json format in SearXNG settings.yml",
            JSON_FORMAT_DOCS_URL,
            details,
            versions,
        )
    elif c.kind is ResponseKind.API_ERROR:
        head = error_item("❌ API Error", c.message, base, details, versions)
    else:
        head = error_item("❌ Invalid response", "Check if JSON format is enabled", base, details, versions)

    return [head, fallback_item(parsed.query, base, parsed.category, parsed.time_range)]


def search(
    raw_query: str,
    settings: Settings,
    fetcher: Optional[HttpFetcher] = None,
    resolver: Optional[FaviconResolver] = None,
) -> ScriptFilterResponse:
    base = settings.searxng_url

    # 1) configuration
    if not base:
        return build_response([
            error_item(
                "⚠️ SearXNG URL not configured",
                "Set searxng_url in workflow settings",
                versions=settings.version_info(),
            )
        ])

    # 2) empty input
    if not raw_query or not raw_query.strip():
        return build_response([placeholder_item()])

    # 3) bangs
    parsed = parse_bangs(raw_query)
    if not parsed.query:
        return build_response([placeholder_item(parsed.category, parsed.time_range)])

    own_fetcher = fetcher is None
    fetcher = fetcher or HttpFetcher()
    try:
        if resolver is None:
            resolver = FaviconResolver(
                cache_dir=settings.favicon_dir(),
                base_url=base,
                secret_key=settings.secret_key,
                fetcher=fetcher,
                max_fetches=settings.favicon_max_fetches,
                timeout_secs=settings.favicon_timeout_secs,
            )
        # favicon budget is per search
        resolver.reset()
        return _run(parsed, settings, fetcher, resolver)
    finally:
        if own_fetcher:
            fetcher.close()


def _run(
    parsed: ParsedQuery,
    settings: Settings,
    fetcher: HttpFetcher,
    resolver: FaviconResolver,
) -> ScriptFilterResponse:
    base = settings.searxng_url
    query, category, time_range = parsed.query, parsed.category, parsed.time_range
    enable_cache = settings.enable_result_cache

    # 4) suggestions (best effort)
    suggestions = fetch_autocomplete(
        query, base, settings.timeout_secs, fetcher, cap_secs=settings.autocomplete_timeout_cap_secs
    )[: settings.max_suggestions]
    suggestion_items = [suggestion_to_alfred_item(s, category, time_range) for s in suggestions]

    # 5) short query: suggestions only
    if not should_show_full_results(query):
        items = suggestion_items or [fallback_item(query, base, category, time_range)]
        return build_response(items, settings.suggestion_cache_seconds, enable_cache)

    # 6) full search
    request_url = build_search_url(base, query, category, time_range, json_format=True)
    outcome = fetcher.get_text(request_url, settings.timeout_secs)
    c = classify_response(outcome)
    logger.debug("search %r -> %s", query, c.kind.value)

    if c.kind is ResponseKind.NO_RESULTS:
        browser_url = build_search_url(base, query, category, time_range)
        # 7) no results: still useful if we have suggestions
        if suggestion_items:
            notice = error_item(
                "🔍 No results found",
                "Try one of the suggestions above",
                browser_url,
                versions=settings.version_info(),
            )
            return build_response(suggestion_items + [separator_item(), notice])
        return build_response([
            error_item(
                "🔍 No results found",
                "Try different keywords",
                browser_url,
                versions=settings.version_info(),
            )
        ])

    if not c.ok:
        logger.warning("search for %r failed: %s %s", query, c.kind.value, c.message)
        return build_response(_error_items(c, parsed, settings, request_url))

    # 8) results
    items: List[AlfredItem] = []
    if suggestion_items:
        items.extend(suggestion_items)
        items.append(separator_item())
    for result in c.payload.results:
        if not result.url:
            continue
        items.append(result_to_alfred_item(result, query, base, resolver, category, time_range))
    items.append(fallback_item(query, base, category, time_range))
    return build_response(items, settings.result_cache_seconds, enable_cache)
