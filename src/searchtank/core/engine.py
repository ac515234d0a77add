"""SearchTank engine — Facade tying models to their hosted search indexes.

The engine wires together:
  1. Document mapping: records → index documents (update/delete/batch)
  2. Query building: search calls → wire query + options
  3. Rehydration: raw matches → ordered model records
  4. Pagination: records + counts + facets → ``SearchResults``

Search and update calls perform no error handling of their own; failures
from the service propagate to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from searchtank.core.config import ModelRegistry
from searchtank.core.document import DocumentMapper
from searchtank.core.protocols import Paginatable, SearchApi, SearchIndex
from searchtank.core.query import QueryBuilder
from searchtank.core.results import ResultRehydrator, SearchResults
from searchtank.models.query import RawSearchResponse, SearchRequest

if TYPE_CHECKING:
    from searchtank.config.settings import Settings

logger = logging.getLogger(__name__)


class SearchTank:
    """Search and indexing entry point for registered models.

    Attributes:
        registry: Declared models and their index configurations.
        api: Client for the hosted search service.
        settings: Application configuration.
        mapper: Record to document mapper.
        query_builder: Search request to wire query translator.
        rehydrator: Raw match to record loader.

    Example:
        >>> tank = SearchTank(registry, ApiClient(settings.service.api_url), settings)
        >>> results = tank.search([Dog, Cat], "fido", conditions={"color": "brown"}, page=2)
        >>> results.total_count, results.facets
    """

    def __init__(self, registry: ModelRegistry, api: SearchApi, settings: Settings) -> None:
        self.registry = registry
        self.api = api
        self.settings = settings
        self.mapper = DocumentMapper(registry)
        self.query_builder = QueryBuilder(registry)
        self.rehydrator = ResultRehydrator(registry)
        self._indexes: dict[str, SearchIndex] = {}

    def get_index(self, index_name: str) -> SearchIndex:
        if index_name not in self._indexes:
            self._indexes[index_name] = self.api.get_index(index_name)
        return self._indexes[index_name]

    def index_for(self, model: type) -> SearchIndex:
        return self.get_index(self.registry.config_for(model).index_name)

    def default_per_page(self, model: type) -> int:
        if isinstance(model, Paginatable):
            value = model.per_page
            if callable(value):
                value = value()
            return int(value)
        return self.settings.search.per_page

    # ── Search ───────────────────────────────────────────────────────────

    def build_request(
        self,
        models: type | Sequence[type],
        query: str | Sequence[str] | None,
        *,
        page: int | None = None,
        per_page: int | None = None,
        conditions: dict[str, Any] | None = None,
        filter_functions: dict[int, Any] | None = None,
        filter_docvars: dict[int, Any] | None = None,
        category_filters: dict[str, Any] | None = None,
        **extra: Any,
    ) -> SearchRequest:
        model_list = [models] if isinstance(models, type) else list(models)
        if not per_page:
            per_page = self.default_per_page(model_list[0]) if model_list else self.settings.search.per_page
        return SearchRequest(
            models=model_list,
            query=query,
            conditions=conditions or {},
            filter_functions=filter_functions or {},
            filter_docvars=filter_docvars or {},
            category_filters=category_filters,
            page=int(page or 1),
            per_page=int(per_page),
            extra=extra,
        )

    def search(self, models: type | Sequence[type], query: str | Sequence[str] | None, **options: Any) -> SearchResults:
        """Search one or more models sharing an index.

        Args:
            models: Model class or classes to search.
            query: Free text, or a list of terms joined with spaces.
            **options: ``page``, ``per_page``, ``conditions``,
                ``filter_functions``, ``filter_docvars``, ``category_filters``
                and any other option passed verbatim to the service.

        Returns:
            The requested page of records, in ranking order.

        Raises:
            MultiIndexError: If the models span more than one index.
        """
        request = self.build_request(models, query, **options)
        query_string, wire_options = self.query_builder.build_search(request)
        index = self.index_for(request.models[0])

        raw = RawSearchResponse.parse(index.search(query_string, wire_options))
        records = self.rehydrator.rehydrate(raw)
        logger.debug("Search %r matched %d documents", query_string, raw.matches)
        return SearchResults(records, page=request.page, per_page=request.per_page, raw=raw)

    def search_model(self, model: type, query: str | Sequence[str] | None, **options: Any) -> SearchResults:
        """Search a single model."""
        return self.search([model], query, **options)

    # ── Indexing ─────────────────────────────────────────────────────────

    def update_document(self, record: Any) -> None:
        """Add or replace ``record``'s document in its index."""
        document = self.mapper.build_document(record)
        self.index_for(type(record)).add_document(document.doc_id, document.fields, **document.index_options())

    def delete_document(self, record: Any) -> None:
        """Remove ``record``'s document from its index."""
        self.index_for(type(record)).delete_document(self.mapper.doc_id(record))

    def batch_update(self, records: Sequence[Any]) -> bool:
        """Push many records in one bulk call.

        All records are sent to the index of the first record's model.

        Returns:
            False when there was nothing to send, True otherwise.
        """
        if not records:
            return False
        entries = [self.mapper.build_document(record).to_batch_entry() for record in records]
        self.index_for(type(records[0])).add_documents(entries)
        return True
