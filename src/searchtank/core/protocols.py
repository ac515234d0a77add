"""Capability interfaces for indexable models and the search service.

Models are plain classes. Optional behavior is detected through these
runtime-checkable protocols instead of ad-hoc attribute probing:

  - ``Findable``: bulk lookup by id (required for rehydration)
  - ``Paginatable``: a model-level ``per_page`` default
  - ``Timestamped``: a ``created_at`` value exported as the doc timestamp
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Findable(Protocol):
    """A model type that can load many records by id in one call."""

    @classmethod
    def find(cls, ids: Sequence[Any]) -> Iterable[Any]: ...


@runtime_checkable
class Paginatable(Protocol):
    """A model type with its own page size.

    ``per_page`` may be a plain attribute or a zero-argument class method.
    """

    per_page: Any


@runtime_checkable
class Timestamped(Protocol):
    """A record carrying a creation time (``datetime`` or epoch seconds)."""

    created_at: Any


class SearchIndex(Protocol):
    """One named index on the hosted search service."""

    def exists(self) -> bool: ...

    def running(self) -> bool: ...

    def create_index(self) -> None: ...

    def delete_index(self) -> None: ...

    def search(self, query: str, options: dict[str, Any]) -> dict[str, Any]: ...

    def add_document(
        self,
        docid: str,
        fields: dict[str, Any],
        variables: dict[int, float] | None = None,
        categories: dict[str, str] | None = None,
    ) -> None: ...

    def add_documents(self, documents: list[dict[str, Any]]) -> None: ...

    def delete_document(self, docid: str) -> None: ...

    def add_function(self, number: int, definition: str) -> None: ...


class SearchApi(Protocol):
    """Entry point to the hosted search service."""

    def get_index(self, name: str) -> SearchIndex: ...
