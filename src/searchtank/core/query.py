"""Query builder — Translates a ``SearchRequest`` into the service's wire query.

The service receives a single query string plus a flat options map::

    __any:(free text) __type:(Dog OR Cat) location_id:(1)

    {"start": 0, "len": 10, "fetch": "__type,__id",
     "filter_function2": "0:10,20:40", "category_filters": '{"job":"dancer"}'}

Only the ``__type``/``__id`` tags are fetched back; records are always
reloaded from their own store.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from searchtank.core.config import ModelRegistry
from searchtank.core.exceptions import MultiIndexError
from searchtank.models.query import Range, SearchRequest

logger = logging.getLogger(__name__)

FETCH_FIELDS = "__type,__id"


def _flatten(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple, set)):
        items: list[Any] = []
        for item in value:
            items.extend(_flatten(item))
        return items
    return [] if value is None else [value]


def format_ranges(ranges: Iterable[Range]) -> str:
    """Render ``[(0, 10), ("*", 7)]`` as ``"0:10,*:7"``."""
    return ",".join(":".join(str(bound) for bound in pair) for pair in ranges)


class QueryBuilder:
    """Builds search calls for models declared in a ``ModelRegistry``."""

    def __init__(self, registry: ModelRegistry) -> None:
        self.registry = registry

    def index_name_for(self, models: list[type]) -> str:
        """Common index name of ``models``.

        Raises:
            MultiIndexError: If the models live in more than one index.
        """
        names: list[str] = []
        for model in models:
            name = self.registry.config_for(model).index_name
            if name not in names:
                names.append(name)
        if len(names) > 1:
            raise MultiIndexError(names)
        return names[0]

    def build_query(self, request: SearchRequest) -> str:
        type_names = " OR ".join(self.registry.config_for(m).type_name for m in request.models)
        query = f"__any:({request.query}) __type:({type_names})"
        for field, value in request.conditions.items():
            for item in _flatten(value):
                query += f" {field}:({item})"
        return query

    def build_options(self, request: SearchRequest) -> dict[str, Any]:
        options: dict[str, Any] = {"start": request.offset, "len": request.per_page}
        options.update(request.extra)

        for number, ranges in request.filter_functions.items():
            options[f"filter_function{number}"] = format_ranges(ranges)

        for number, ranges in request.filter_docvars.items():
            options[f"filter_docvar{number}"] = format_ranges(ranges)

        if request.category_filters is not None:
            options["category_filters"] = json.dumps(request.category_filters, separators=(",", ":"))

        options["fetch"] = FETCH_FIELDS
        return options

    def build_search(self, request: SearchRequest) -> tuple[str, dict[str, Any]]:
        """Return ``(query_string, options)`` for ``request``.

        Raises:
            MultiIndexError: If the requested models span several indexes.
        """
        self.index_name_for(request.models)
        query = self.build_query(request)
        options = self.build_options(request)
        logger.debug("Built search query %r with options %r", query, options)
        return query, options
