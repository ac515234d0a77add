"""Document model — The payload pushed to the search service for one record."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Document(BaseModel):
    """A record flattened into index fields plus scoring/filtering extras.

    ``fields`` holds the declared field values as strings together with
    the reserved ``__any``, ``__type`` and ``__id`` keys and, for
    timestamped records, an integer ``timestamp``.
    """

    doc_id: str = Field(description="Service-side document id, '<type> <id>'")
    fields: dict[str, Any] = Field(default_factory=dict, description="Field name to indexed value")
    variables: dict[int, float] | None = Field(default=None, description="Numeric scoring variables")
    categories: dict[str, str] | None = Field(default=None, description="Facet categories")

    def index_options(self) -> dict[str, Any]:
        """Variables and categories, omitting whichever is undeclared."""
        options: dict[str, Any] = {}
        if self.variables is not None:
            options["variables"] = self.variables
        if self.categories is not None:
            options["categories"] = self.categories
        return options

    def to_batch_entry(self) -> dict[str, Any]:
        """Shape used by the bulk ``add_documents`` call."""
        entry = self.index_options()
        entry.update(docid=self.doc_id, fields=self.fields)
        return entry
