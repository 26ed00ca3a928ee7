"""Zotero Web API adapter."""

from __future__ import annotations

from .client import ZoteroAPIError, ZoteroClient
from .schema import ZoteroCreator, ZoteroItem, ZoteroItemData, ZoteroTag
from .translator import parse_item, translate_item

__all__ = [
    "ZoteroAPIError",
    "ZoteroClient",
    "ZoteroCreator",
    "ZoteroItem",
    "ZoteroItemData",
    "ZoteroTag",
    "parse_item",
    "translate_item",
]
