"""
Purpose:
- Pydantic models for the SearXNG JSON payload (format=json).
- Every field is optional: engines fill in different subsets, and we never assume presence.
"""

from __future__ import annotations
from typing import Any, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearxResult(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: Optional[str] = None
    url: Optional[str] = None
    content: Optional[str] = None
    engine: Optional[str] = None
    category: Optional[str] = None
    published_date: Optional[str] = Field(default=None, alias="publishedDate")
    # images category
    thumbnail: Optional[str] = None
    img_src: Optional[str] = None
    resolution: Optional[str] = None
    filesize: Optional[Union[str, int, float]] = None


class SearxResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: Optional[str] = None
    results: List[SearxResult] = []
    # Some deployments answer {"error": "..."} instead of results
    error: Optional[Any] = None

    @field_validator("results", mode="before")
    @classmethod
    def _null_results(cls, v: Any) -> Any:
        return [] if v is None else v
