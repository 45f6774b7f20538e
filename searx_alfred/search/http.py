"""
Purpose:
- The one place that talks HTTP (httpx). Everything above it sees FetchOutcome / bool.
- One attempt per request, per-request timeout, no retries.
- shell_escape / curl_command give users a copy-pasteable reproduction of a failed request.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import time
from typing import Callable, Iterator, Optional
import httpx

from ..core.logger import get_logger

logger = get_logger(__name__)

USER_AGENT = "alfred-searxng"


@dataclass
class FetchOutcome:
    success: bool
    data: str = ""
    error: Optional[str] = None
    status_code: Optional[int] = None


def shell_escape(value: str) -> str:
    """Single-quote a string for a POSIX shell (embedded ' becomes '\\'')."""
    return "'" + value.replace("'", "'\\''") + "'"


def curl_command(url: str, timeout_secs: float) -> str:
    # "--" so URLs starting with "-" are not read as options
    return f"curl --silent --location --max-time {timeout_secs:g} -- {shell_escape(url)}"


class DeadlineExceeded(Exception):
    """The whole request (headers + body) took longer than its timeout."""


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("could not remove %s: %r", path, e)


class HttpFetcher:
    """
    Thin wrapper around an httpx.Client so tests can inject httpx.MockTransport.
    Non-2xx bodies are still returned to the caller: SearXNG answers a disabled
    JSON format with an HTML page, and the classifier needs to see it.

    httpx timeouts apply per phase/read, so bodies are streamed and checked against
    an overall deadline (like curl --max-time).
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        user_agent: str = USER_AGENT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._owns_client = client is None
        self.client = client or httpx.Client(
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )
        self.clock = clock

    def _chunks(self, resp: httpx.Response, deadline: float) -> Iterator[bytes]:
        for chunk in resp.iter_bytes():
            if self.clock() > deadline:
                raise DeadlineExceeded(f"exceeded after {len(chunk)}-byte chunk")
            yield chunk

    def get_text(self, url: str, timeout_secs: float) -> FetchOutcome:
        deadline = self.clock() + timeout_secs
        try:
            with self.client.stream("GET", url, timeout=timeout_secs) as resp:
                body = b"".join(self._chunks(resp, deadline))
                encoding = resp.encoding or "utf-8"
                try:
                    "".encode(encoding)
                except LookupError:
                    encoding = "utf-8"
                status = resp.status_code
        except (httpx.HTTPError, DeadlineExceeded) as e:
            logger.debug("GET %s failed: %r", url, e)
            return FetchOutcome(success=False, error=f"network: {e.__class__.__name__}")
        logger.debug("GET %s -> %s (%d bytes)", url, status, len(body))
        return FetchOutcome(success=True, data=body.decode(encoding, errors="replace"), status_code=status)

    def download(self, url: str, dest: Path, timeout_secs: float) -> bool:
        """
        Stream `url` straight into `dest`. Returns True only for a 2xx, non-empty body
        that arrived within `timeout_secs`; any partial or empty file is removed.
        Never raises.
        """
        deadline = self.clock() + timeout_secs
        try:
            with self.client.stream("GET", url, timeout=timeout_secs) as resp:
                if not resp.is_success:
                    logger.debug("download %s -> HTTP %s", url, resp.status_code)
                    _discard(dest)
                    return False
                with dest.open("wb") as fh:
                    for chunk in self._chunks(resp, deadline):
                        fh.write(chunk)
            if dest.stat().st_size > 0:
                return True
        except (httpx.HTTPError, OSError, DeadlineExceeded) as e:
            logger.debug("download %s failed: %r", url, e)
        _discard(dest)
        return False

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
