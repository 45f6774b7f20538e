"""
Purpose:
- Pydantic models for Alfred's Script Filter JSON so the output shape is explicit.
- Optional fields stay None and are dropped on serialisation (exclude_none).
"""

from __future__ import annotations
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Icon(BaseModel):
    path: str
    type: Optional[str] = None


class Mod(BaseModel):
    valid: Optional[bool] = None
    arg: Optional[str] = None
    subtitle: Optional[str] = None
    variables: Optional[Dict[str, str]] = None


class ItemText(BaseModel):
    # "copy" would shadow BaseModel.copy, hence the alias
    model_config = ConfigDict(populate_by_name=True)

    copy_text: Optional[str] = Field(default=None, alias="copy")
    largetype: Optional[str] = None


class AlfredItem(BaseModel):
    title: str
    subtitle: Optional[str] = None
    arg: Optional[str] = None
    icon: Optional[Icon] = None
    valid: Optional[bool] = None
    autocomplete: Optional[str] = None
    quicklookurl: Optional[str] = None
    match: Optional[str] = None
    variables: Optional[Dict[str, str]] = None
    mods: Optional[Dict[str, Mod]] = None
    text: Optional[ItemText] = None


class CacheConfig(BaseModel):
    seconds: int
    loosereload: bool = True


class ScriptFilterResponse(BaseModel):
    items: List[AlfredItem] = []
    cache: Optional[CacheConfig] = None

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
