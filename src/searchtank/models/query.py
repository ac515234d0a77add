"""Search request and raw response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

Range = tuple[Any, Any]
"""A ``(low, high)`` filter bound pair; ``"*"`` leaves a side open."""


class SearchRequest(BaseModel):
    """A logical search over one or more model types."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    models: list[type] = Field(min_length=1, description="Model types to search; must share one index")
    query: str = Field(default="", description="Free text matched against the __any field")
    conditions: dict[str, Any] = Field(default_factory=dict, description="Field to literal value(s)")
    filter_functions: dict[int, list[Range]] = Field(default_factory=dict, description="Function number to ranges")
    filter_docvars: dict[int, list[Range]] = Field(default_factory=dict, description="Variable number to ranges")
    category_filters: dict[str, Any] | None = Field(default=None, description="Category to allowed value(s)")
    page: int = Field(default=1, ge=1, description="1-based page number")
    per_page: int = Field(default=10, ge=1, description="Results per page")
    extra: dict[str, Any] = Field(default_factory=dict, description="Options passed through to the service")

    @field_validator("query", mode="before")
    @classmethod
    def _join_query(cls, v: Any) -> str:
        """Accept a list of terms, joined with single spaces."""
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return " ".join(str(term) for term in v)
        return str(v)

    @field_validator("models", mode="before")
    @classmethod
    def _unique_models(cls, v: Any) -> list[type]:
        if isinstance(v, type):
            return [v]
        models: list[type] = []
        for model in v:
            if model not in models:
                models.append(model)
        return models

    @property
    def offset(self) -> int:
        return self.per_page * (self.page - 1)


class RawMatch(BaseModel):
    """One entry of the service's ``results`` list."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    docid: str | None = None
    type_name: str | None = Field(default=None, alias="__type")
    record_id: str | None = Field(default=None, alias="__id")

    @field_validator("record_id", mode="before")
    @classmethod
    def _stringify_id(cls, v: Any) -> str | None:
        return None if v is None else str(v)


class RawSearchResponse(BaseModel):
    """Search response as returned by the hosted service."""

    model_config = ConfigDict(extra="allow")

    matches: int = Field(default=0, description="Total number of matching documents")
    results: list[RawMatch] = Field(default_factory=list, description="Matches for the requested page")
    facets: dict[str, dict[str, int]] = Field(default_factory=dict, description="Category to value counts")

    @classmethod
    def parse(cls, raw: dict[str, Any] | None) -> RawSearchResponse:
        """Validate a raw response, treating ``None`` and null keys as empty."""
        data = {k: v for k, v in (raw or {}).items() if v is not None}
        return cls.model_validate(data)
