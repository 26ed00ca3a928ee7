"""Pydantic models for the Zotero Web API v3 item payloads."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ZoteroBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ZoteroCreator(ZoteroBaseModel):
    creator_type: str = Field(default="", alias="creatorType")
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    name: str = ""

    @field_validator("creator_type", "first_name", "last_name", "name", mode="before")
    @classmethod
    def _none_to_blank(cls, value: object) -> object:
        return "" if value is None else value


class ZoteroTag(ZoteroBaseModel):
    tag: str
    type: int | None = None


class ZoteroItemData(BaseModel):
    """The ``data`` object of an item.

    Field values differ per item type, so unmodeled keys are kept as extras
    and surface through :meth:`field_values`.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    key: str
    version: int
    item_type: str = Field(alias="itemType")
    creators: list[ZoteroCreator] = Field(default_factory=list["ZoteroCreator"])
    tags: list[ZoteroTag] = Field(default_factory=list["ZoteroTag"])
    date_added: datetime | None = Field(default=None, alias="dateAdded")

    def field_values(self) -> dict[str, object]:
        return dict(self.__pydantic_extra__ or {})


class ZoteroItem(ZoteroBaseModel):
    key: str
    version: int
    data: ZoteroItemData
