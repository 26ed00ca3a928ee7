"""Crossref REST API response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CrossrefBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CrossrefAuthor(CrossrefBaseModel):
    given: str | None = None
    family: str | None = None
    name: str | None = None
    sequence: str | None = None


class CrossrefDate(CrossrefBaseModel):
    date_parts: list[list[int | None]] = Field(
        default_factory=list["list[int | None]"], alias="date-parts"
    )

    @property
    def year(self) -> int | None:
        if not self.date_parts or not self.date_parts[0]:
            return None
        return self.date_parts[0][0]


class CrossrefWork(CrossrefBaseModel):
    doi: str = Field(alias="DOI")
    type: str | None = None
    title: list[str] = Field(default_factory=list["str"])
    author: list[CrossrefAuthor] = Field(default_factory=list["CrossrefAuthor"])
    container_title: list[str] = Field(default_factory=list["str"], alias="container-title")
    volume: str | None = None
    issue: str | None = None
    page: str | None = None
    isbn: list[str] = Field(default_factory=list["str"], alias="ISBN")
    publisher: str | None = None
    abstract: str | None = None
    url: str | None = Field(default=None, alias="URL")
    issued: CrossrefDate | None = None
    published_print: CrossrefDate | None = Field(default=None, alias="published-print")
    published_online: CrossrefDate | None = Field(default=None, alias="published-online")

    @property
    def year(self) -> int | None:
        for date in (self.issued, self.published_print, self.published_online):
            if date is not None and date.year is not None:
                return date.year
        return None


class CrossrefWorkResponse(CrossrefBaseModel):
    status: str
    message: CrossrefWork


class CrossrefSearchMessage(CrossrefBaseModel):
    total_results: int = Field(default=0, alias="total-results")
    items: list[CrossrefWork] = Field(default_factory=list["CrossrefWork"])


class CrossrefSearchResponse(CrossrefBaseModel):
    status: str
    message: CrossrefSearchMessage
