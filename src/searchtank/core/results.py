"""Result rehydration and pagination.

Raw matches only carry ``__type``/``__id`` tags. The rehydrator loads the
real records with one bulk ``find`` per model type and puts them back in
the order the service ranked them.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from typing import Any, overload

from searchtank.core.config import ModelRegistry
from searchtank.core.document import coerce_id, parse_doc_id
from searchtank.core.exceptions import NotConfiguredError
from searchtank.core.protocols import Findable
from searchtank.models.query import RawSearchResponse

logger = logging.getLogger(__name__)


class ResultRehydrator:
    """Turns raw search matches into model records.

    A match whose record no longer exists in its store (deleted since it
    was indexed) yields ``None`` at its position, so page positions and
    counts still line up with what the service returned.
    """

    def __init__(self, registry: ModelRegistry) -> None:
        self.registry = registry

    def rehydrate(self, response: RawSearchResponse) -> list[Any]:
        if not response.results:
            return []

        keys = [parse_doc_id(match) for match in response.results]

        ids_by_type: dict[str, list[int | str]] = {}
        for type_name, record_id in keys:
            ids = ids_by_type.setdefault(type_name, [])
            if record_id not in ids:
                ids.append(record_id)

        loaded: dict[str, dict[int | str, Any]] = {}
        for type_name, ids in ids_by_type.items():
            model = self.registry.resolve(type_name)
            if not isinstance(model, Findable):
                raise NotConfiguredError(f"{model.__name__} has no find() to load search results with")
            loaded[type_name] = {coerce_id(record.id): record for record in model.find(ids)}

        records: list[Any] = []
        for type_name, record_id in keys:
            record = loaded[type_name].get(record_id)
            if record is None:
                logger.warning("Search match %s %s not found in its store", type_name, record_id)
            records.append(record)
        return records


class SearchResults(Sequence):
    """One page of rehydrated records with pagination metadata.

    Attributes:
        page: 1-based page number.
        per_page: Page size used for the search.
        total_count: Total number of matches across all pages.
        facets: Category to value to count, as reported by the service.
        raw: The validated raw response.
    """

    def __init__(
        self,
        records: list[Any],
        page: int,
        per_page: int,
        raw: RawSearchResponse,
    ) -> None:
        self._records = list(records)
        self.page = page
        self.per_page = per_page
        self.raw = raw
        self.facets: dict[str, dict[str, int]] = raw.facets
        guessed = self._guess_total()
        self.total_count = guessed if guessed is not None else raw.matches

    def _guess_total(self) -> int | None:
        # A short page is the last one, unless it is an empty page past the end.
        if len(self._records) < self.per_page and (self.page == 1 or self._records):
            return self.offset + len(self._records)
        return None

    @property
    def offset(self) -> int:
        return self.per_page * (self.page - 1)

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_count / self.per_page))

    @property
    def previous_page(self) -> int | None:
        return self.page - 1 if self.page > 1 else None

    @property
    def next_page(self) -> int | None:
        return self.page + 1 if self.page < self.total_pages else None

    @property
    def out_of_bounds(self) -> bool:
        return self.page > self.total_pages

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> list[Any]: ...

    def __getitem__(self, index: int | slice) -> Any:
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._records)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SearchResults):
            return self._records == other._records
        if isinstance(other, list):
            return self._records == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"SearchResults(page={self.page}, per_page={self.per_page}, "
            f"total_count={self.total_count}, records={self._records!r})"
        )
