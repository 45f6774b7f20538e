"""
Purpose:
- Pull SearXNG filter modifiers ("bangs") out of the raw Alfred query.
- Category bangs map to SearXNG `categories`, time bangs to `time_range`.
- Everything else (including unknown bangs like !g) stays in the query text.

Tie-break:
- Each dictionary is walked in declared order and every entry removes all of its
  occurrences. The LAST entry that matched sets the value, regardless of where the
  bangs sit in the string: "!i !n x" and "!n !i x" both resolve to news.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

# Declared order matters (see tie-break above)
CATEGORY_BANGS: Dict[str, str] = {
    "!i": "images",
    "!images": "images",
    "!n": "news",
    "!news": "news",
    "!v": "videos",
    "!videos": "videos",
    "!maps": "maps",
}

# SearXNG time_range values we expose: day, month, year
TIME_RANGE_BANGS: Dict[str, str] = {
    "!d": "day",
    "!m": "month",
    "!y": "year",
}

CATEGORY_LABELS: Dict[str, str] = {
    "images": "Images",
    "news": "News",
    "videos": "Videos",
    "maps": "Maps",
}

TIME_RANGE_LABELS: Dict[str, str] = {
    "day": "Past day",
    "month": "Past month",
    "year": "Past year",
}

# Queries this short only get autocomplete suggestions
FULL_RESULTS_MIN_CHARS = 4


@dataclass(frozen=True)
class ParsedQuery:
    query: str
    category: Optional[str] = None
    time_range: Optional[str] = None

    @property
    def has_filters(self) -> bool:
        return bool(self.category or self.time_range)


def _bang_pattern(bang: str) -> re.Pattern[str]:
    # whole token only: "exciting" must not match !i
    return re.compile(rf"(^|\s){re.escape(bang)}(\s|$)", re.IGNORECASE)


def _compile(table: Dict[str, str]) -> List[Tuple[re.Pattern[str], str]]:
    return [(_bang_pattern(bang), value) for bang, value in table.items()]


_CATEGORY_PATTERNS = _compile(CATEGORY_BANGS)
_TIME_RANGE_PATTERNS = _compile(TIME_RANGE_BANGS)


def _remove_all(text: str, pattern: re.Pattern[str]) -> Tuple[str, bool]:
    """
    Remove every occurrence of one bang. At the start of the string the bang and the
    whitespace after it go; elsewhere it collapses to the single whitespace before it.
    """
    found = False
    while True:
        m = pattern.search(text)
        if not m:
            return text, found
        found = True
        # group 1 is empty only at the start of the string
        text = text[:m.start()] + m.group(1) + text[m.end():]


def _extract(text: str, patterns: List[Tuple[re.Pattern[str], str]]) -> Tuple[str, Optional[str]]:
    value: Optional[str] = None
    for pattern, mapped in patterns:
        text, found = _remove_all(text, pattern)
        if found:
            value = mapped
    return text, value


def parse_bangs(raw: str) -> ParsedQuery:
    text = raw or ""
    text, category = _extract(text, _CATEGORY_PATTERNS)
    text, time_range = _extract(text, _TIME_RANGE_PATTERNS)
    # 3+ spaces become two (not one); kept as-is for compatibility with saved queries
    text = re.sub(r" {3,}", "  ", text).strip()
    return ParsedQuery(query=text, category=category, time_range=time_range)


def should_show_full_results(query: str) -> bool:
    """Full search only once the trimmed query has at least four characters."""
    return len((query or "").strip()) >= FULL_RESULTS_MIN_CHARS


def filter_summary(category: Optional[str], time_range: Optional[str]) -> str:
    """'Images · Past day' style label for the active filters ('' when none)."""
    parts = []
    if category:
        parts.append(CATEGORY_LABELS.get(category, category.title()))
    if time_range:
        parts.append(TIME_RANGE_LABELS.get(time_range, time_range))
    return " · ".join(parts)
