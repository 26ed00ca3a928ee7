"""OpenAlex works API response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OpenAlexBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class OpenAlexAuthor(OpenAlexBaseModel):
    display_name: str | None = None


class OpenAlexAuthorship(OpenAlexBaseModel):
    author: OpenAlexAuthor | None = None


class OpenAlexSource(OpenAlexBaseModel):
    display_name: str | None = None


class OpenAlexLocation(OpenAlexBaseModel):
    source: OpenAlexSource | None = None
    landing_page_url: str | None = None


class OpenAlexBiblio(OpenAlexBaseModel):
    volume: str | None = None
    issue: str | None = None
    first_page: str | None = None
    last_page: str | None = None


class OpenAlexIds(OpenAlexBaseModel):
    doi: str | None = None


class OpenAlexWork(OpenAlexBaseModel):
    id: str | None = None
    title: str | None = None
    doi: str | None = None
    publication_date: str | None = None
    publication_year: int | None = None
    authorships: list[OpenAlexAuthorship] = Field(default_factory=list)
    primary_location: OpenAlexLocation | None = None
    biblio: OpenAlexBiblio | None = None
    ids: OpenAlexIds | None = None
    abstract_inverted_index: dict[str, list[int]] | None = None


class OpenAlexSearchResponse(OpenAlexBaseModel):
    results: list[OpenAlexWork] = Field(default_factory=list)
