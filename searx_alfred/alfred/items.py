"""
Purpose:
- Build Alfred items: search results, autocomplete suggestions, errors, fallback, separators.
- Pure functions; the only side effect (favicon download) sits behind the resolver.
"""

from __future__ import annotations
import re
from typing import Dict, Optional, Union
from urllib.parse import quote, urlencode

from .schema import AlfredItem, Icon, ItemText, Mod
from ..search.bangs import TIME_RANGE_LABELS, filter_summary
from ..search.favicons import FALLBACK_ICON, FaviconResolver
from ..search.schema import SearxResult

SEPARATOR = " · "
SNIPPET_MAX_CHARS = 80
JSON_FORMAT_DOCS_URL = "https://docs.searxng.org/admin/settings/settings_search.html#settings-search"

_DOMAIN_RE = re.compile(r"^https?://(?:www\.)?([^/?#]+)")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def _generic_icon() -> Icon:
    return Icon(path=FALLBACK_ICON)


# --- Text helpers ----------------------------------------------------------

def extract_domain(url: str) -> str:
    """Domain without scheme or leading www.; the raw URL when it is not http(s)."""
    m = _DOMAIN_RE.match(url or "")
    return m.group(1) if m else (url or "")


def alfred_matcher(text: Optional[str]) -> str:
    """Extra match terms: punctuation as spaces, camelCase split, and the original."""
    if not text:
        return ""
    clean = re.sub(r"[-()_.:#/\\;,\[\]]", " ", text)
    camel = re.sub(r"([A-Z])", r" \1", text)
    return " ".join([clean, camel, text])


def truncate(text: Optional[str], max_length: int) -> str:
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def _format_filesize(size: Union[str, int, float, None]) -> str:
    if size is None or size == "":
        return ""
    if isinstance(size, str):
        return size.strip()
    n = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024 or unit == "GB":
            return f"{n:.0f} {unit}" if unit == "B" else f"{n:.1f} {unit}"
        n /= 1024
    return ""


def build_search_url(
    base_url: str,
    query: str,
    category: Optional[str] = None,
    time_range: Optional[str] = None,
    json_format: bool = False,
) -> str:
    params: Dict[str, str] = {"q": query}
    if json_format:
        params["format"] = "json"
    if category:
        params["categories"] = category
    if time_range:
        params["time_range"] = time_range
    # quote (not quote_plus): spaces as %20 like the web UI
    return f"{base_url}/search?" + urlencode(params, quote_via=quote)


# --- Errors / placeholders -------------------------------------------------

def debug_text(
    title: str,
    subtitle: str,
    details: Optional[Dict[str, object]] = None,
    versions: Optional[Dict[str, str]] = None,
) -> str:
    lines = [f"Error: {title}", f"Details: {subtitle}"]
    if details:
        lines.append("Context:")
        lines.extend(f"  {k}: {v}" for k, v in details.items() if v is not None)
    for name, version in (versions or {"Workflow": "unknown", "Alfred": "unknown"}).items():
        lines.append(f"{name}: {version}")
    return "\n".join(lines)


def error_item(
    title: str,
    subtitle: str,
    arg: Optional[str] = None,
    details: Optional[Dict[str, object]] = None,
    versions: Optional[Dict[str, str]] = None,
) -> AlfredItem:
    """
    Actionable only when `arg` is given. Every modifier is disabled so a held key
    can't trigger anything. Copy / Large Type show a debug block for bug reports.
    """
    info = debug_text(title, subtitle, details, versions)
    return AlfredItem(
        title=title,
        subtitle=subtitle,
        arg=arg or None,
        valid=bool(arg),
        mods={key: Mod(valid=False, subtitle="") for key in ("cmd", "alt", "ctrl", "shift")},
        text=ItemText(copy_text=info, largetype=info),
    )


def fallback_item(
    query: str,
    base_url: str,
    category: Optional[str] = None,
    time_range: Optional[str] = None,
) -> AlfredItem:
    summary = filter_summary(category, time_range)
    return AlfredItem(
        title=f'Search "{query}" in browser',
        subtitle=f"Open SearXNG web interface ({summary})" if summary else "Open SearXNG web interface",
        arg=build_search_url(base_url, query, category, time_range),
        icon=_generic_icon(),
    )


def separator_item() -> AlfredItem:
    return AlfredItem(title="──────────", subtitle="", valid=False)


def placeholder_item(category: Optional[str] = None, time_range: Optional[str] = None) -> AlfredItem:
    summary = filter_summary(category, time_range)
    if not summary:
        return AlfredItem(title="Search SearXNG...", subtitle="Type a query to search", valid=False)
    return AlfredItem(
        title=f"Search SearXNG ({summary})...",
        subtitle="Type a query to search with these filters",
        valid=False,
    )


# --- Suggestions / results -------------------------------------------------

def suggestion_to_alfred_item(
    suggestion: str,
    category: Optional[str] = None,
    time_range: Optional[str] = None,
) -> AlfredItem:
    scope = ""
    if category:
        scope += f" {category}"
    if time_range:
        scope += f" ({TIME_RANGE_LABELS.get(time_range, time_range).lower()})"

    variables: Dict[str, str] = {}
    if category:
        variables["category"] = category
    if time_range:
        variables["timeRange"] = time_range

    return AlfredItem(
        title=suggestion,
        subtitle=f"Search{scope} for this suggestion",
        arg=suggestion,
        autocomplete=suggestion,
        valid=True,
        icon=_generic_icon(),
        variables=variables or None,
    )


def _published(result: SearxResult) -> str:
    m = _DATE_RE.match(result.published_date or "")
    return m.group(0) if m else ""


def result_to_alfred_item(
    result: SearxResult,
    query: str,
    base_url: str,
    resolver: Optional[FaviconResolver] = None,
    category: Optional[str] = None,
    time_range: Optional[str] = None,
) -> AlfredItem:
    url = result.url or ""
    domain = extract_domain(url)
    snippet = truncate(result.content or "", SNIPPET_MAX_CHARS)

    parts = [
        domain,
        filter_summary(category, time_range),
        _published(result),
        result.resolution or "",
        _format_filesize(result.filesize),
        snippet,
    ]
    subtitle = SEPARATOR.join(p for p in parts if p)

    # Only real http(s) hosts get a favicon lookup
    if resolver is not None and domain != url:
        icon_path = resolver.get_favicon_path(domain)
    else:
        icon_path = FALLBACK_ICON

    title = result.title or url
    search_url = build_search_url(base_url, query, category, time_range)

    return AlfredItem(
        title=title,
        subtitle=subtitle,
        arg=url,
        icon=Icon(path=icon_path),
        quicklookurl=result.img_src or url,
        match=alfred_matcher(title) + " " + alfred_matcher(snippet),
        mods={
            "alt": Mod(arg=search_url, subtitle="⌥: View in SearXNG"),
        },
        text=ItemText(copy_text=url, largetype=title),
    )
