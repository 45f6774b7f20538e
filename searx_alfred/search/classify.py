"""
Purpose:
- Turn a raw FetchOutcome from the full search request into exactly one ResponseKind.
- The orchestrator maps each non-OK kind to its own error item; only OK carries a payload.
"""

from __future__ import annotations
import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from pydantic import ValidationError

from .http import FetchOutcome
from .schema import SearxResponse


class ResponseKind(str, Enum):
    NETWORK_ERROR = "network-error"
    EMPTY_RESPONSE = "empty-response"
    HTML_NOT_JSON = "html-not-json"
    INVALID_RESPONSE = "invalid-response"
    API_ERROR = "api-error"
    NO_RESULTS = "no-results"
    OK = "ok"


@dataclass
class Classification:
    kind: ResponseKind
    payload: Optional[SearxResponse] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is ResponseKind.OK


def looks_like_html(body: str) -> bool:
    low = (body or "").lower()
    return "<!doctype" in low or "<html" in low


def classify_response(outcome: FetchOutcome) -> Classification:
    if not outcome.success:
        return Classification(ResponseKind.NETWORK_ERROR, message=outcome.error or "network")

    body = outcome.data or ""
    if not body.strip():
        return Classification(ResponseKind.EMPTY_RESPONSE)

    try:
        raw = json.loads(body)
    except ValueError as e:
        if looks_like_html(body):
            return Classification(ResponseKind.HTML_NOT_JSON)
        return Classification(ResponseKind.INVALID_RESPONSE, message=str(e))

    if not isinstance(raw, dict):
        return Classification(ResponseKind.INVALID_RESPONSE, message=f"expected object, got {type(raw).__name__}")

    try:
        payload = SearxResponse.model_validate(raw)
    except ValidationError as e:
        return Classification(ResponseKind.INVALID_RESPONSE, message=f"{e.error_count()} invalid field(s)")

    if payload.error:
        return Classification(ResponseKind.API_ERROR, payload=payload, message=str(payload.error))

    if not payload.results:
        return Classification(ResponseKind.NO_RESULTS, payload=payload)

    return Classification(ResponseKind.OK, payload=payload)
