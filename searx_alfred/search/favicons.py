"""
Purpose:
- Resolve a result's domain to a local favicon file for the Alfred icon.
- Icons come from SearXNG's own /favicon_proxy (HMAC-signed with server.secret_key),
  so visited domains are never sent to a third-party icon service.

Rules:
- No secret key -> favicons disabled, always the generic icon.
- Cache hit (<favicon_dir>/<domain>.png) -> no network.
- At most `max_fetches` downloads per search; each with a short timeout.
- Any failure degrades to the generic icon and is never shown to the user.
"""

from __future__ import annotations
import hashlib
import hmac
import re
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlencode

from .http import HttpFetcher
from ..core.logger import get_logger

logger = get_logger(__name__)

FALLBACK_ICON = "icon.png"
MAX_FAVICON_FETCHES_PER_SEARCH = 3
FAVICON_TIMEOUT_SECS = 1.0
# well under NAME_MAX (255) once ".png" is added
MAX_KEY_CHARS = 120

# (secret, message) -> hex digest, possibly with a "LABEL(stdin)= " prefix
Signer = Callable[[str, str], Optional[str]]


def hmac_sha256_hex(secret: str, message: str) -> str:
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def normalize_hmac_output(output: Optional[str]) -> str:
    """
    Strip labels such as 'SHA2-256(stdin)= ' or '(stdin)= ' (everything up to the last
    '= ') and surrounding whitespace, leaving the bare hex digest. None/blank -> ''.
    """
    if not output:
        return ""
    trimmed = output.strip()
    idx = trimmed.rfind("= ")
    if idx != -1:
        trimmed = trimmed[idx + 2:].strip()
    return trimmed


def sanitize_domain(domain: str) -> str:
    """
    Filesystem-safe cache key: keep alphanumerics, '.', '-'; everything else -> '_'.
    Keys longer than MAX_KEY_CHARS keep a prefix plus a short hash of the full domain.
    """
    key = re.sub(r"[^A-Za-z0-9.-]", "_", domain or "")
    if len(key) > MAX_KEY_CHARS:
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:16]
        key = f"{key[:MAX_KEY_CHARS - 17]}-{digest}"
    return key


def favicon_proxy_url(base_url: str, domain: str, digest: str) -> str:
    return f"{base_url}/favicon_proxy?" + urlencode({"authority": domain, "h": digest})


class FaviconResolver:
    """
    One instance per invocation: the fetch counter is the per-search budget.
    """

    def __init__(
        self,
        cache_dir: Path,
        base_url: str,
        secret_key: Optional[str],
        fetcher: Optional[HttpFetcher] = None,
        max_fetches: int = MAX_FAVICON_FETCHES_PER_SEARCH,
        timeout_secs: float = FAVICON_TIMEOUT_SECS,
        signer: Signer = hmac_sha256_hex,
    ):
        self.cache_dir = Path(cache_dir)
        self.base_url = base_url
        self.secret_key = secret_key
        self.fetcher = fetcher
        self.max_fetches = max_fetches
        self.timeout_secs = timeout_secs
        self.signer = signer
        self.fetches = 0

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key) and self.fetcher is not None

    def reset(self) -> None:
        self.fetches = 0

    def cache_path(self, domain: str) -> Path:
        return self.cache_dir / f"{sanitize_domain(domain)}.png"

    def cached(self, domain: str) -> Optional[Path]:
        p = self.cache_path(domain)
        try:
            return p if p.exists() else None
        except OSError as e:
            logger.debug("favicon cache lookup failed for %s: %r", domain, e)
            return None

    def sign(self, domain: str) -> str:
        return normalize_hmac_output(self.signer(self.secret_key or "", domain))

    def get_favicon_path(self, domain: str) -> str:
        if not self.enabled or not domain:
            return FALLBACK_ICON

        hit = self.cached(domain)
        if hit:
            return str(hit)

        if self.fetches >= self.max_fetches:
            return FALLBACK_ICON
        self.fetches += 1

        fetched = self._fetch(domain)
        return str(fetched) if fetched else FALLBACK_ICON

    def _fetch(self, domain: str) -> Optional[Path]:
        digest = self.sign(domain)
        if not digest:
            logger.debug("empty HMAC for %s, skipping favicon", domain)
            return None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.debug("favicon cache dir unavailable: %r", e)
            return None
        dest = self.cache_path(domain)
        url = favicon_proxy_url(self.base_url, domain, digest)
        if self.fetcher.download(url, dest, self.timeout_secs):
            return dest
        return None
