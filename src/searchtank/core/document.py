"""Document mapper — Flattens model records into index documents."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from searchtank.core.config import IndexConfig, ModelRegistry
from searchtank.core.protocols import Timestamped
from searchtank.models.document import Document
from searchtank.models.query import RawMatch

logger = logging.getLogger(__name__)

ANY_SEPARATOR = " . "


def coerce_id(value: Any) -> int | str:
    """Normalize a record id so stored and fetched ids compare equal."""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        return text


def parse_doc_id(match: RawMatch) -> tuple[str, int | str]:
    """Return ``(type_name, record_id)`` for one raw match.

    The separate ``__type``/``__id`` fields are preferred; the combined
    ``"<type> <id>"`` docid fills in whatever they lack.
    """
    type_name = match.type_name
    record_id: Any = match.record_id
    if (type_name is None or record_id is None) and match.docid:
        doc_type, _, doc_record = match.docid.rpartition(" ")
        type_name = type_name or doc_type
        record_id = record_id if record_id is not None else doc_record
    if not type_name or record_id is None:
        raise ValueError(f"Cannot determine type and id of search match: {match.model_dump(by_alias=True)}")
    return type_name, coerce_id(record_id)


def _epoch(value: Any) -> int:
    if isinstance(value, datetime):
        return int(value.timestamp())
    return int(value)


class DocumentMapper:
    """Builds ``Document`` payloads for records of registered models."""

    def __init__(self, registry: ModelRegistry) -> None:
        self.registry = registry

    def _config(self, record: Any) -> IndexConfig:
        return self.registry.config_for(type(record))

    def doc_id(self, record: Any) -> str:
        """Service-side id, unique across all types sharing an index."""
        return f"{self._config(record).type_name} {record.id}"

    def build_fields(self, record: Any) -> dict[str, Any]:
        config = self._config(record)
        data: dict[str, Any] = {}

        if isinstance(record, Timestamped) and record.created_at is not None:
            data["timestamp"] = _epoch(record.created_at)

        for field, extractor in config.fields:
            if extractor is not None:
                value = extractor(record)
            else:
                value = getattr(record, field)
                if callable(value):
                    value = value()
            if isinstance(value, (list, tuple)):
                value = " ".join("" if v is None else str(v) for v in value)
            if value is not None:
                data[field] = str(value)

        data["__any"] = ANY_SEPARATOR.join(sorted(str(v) for v in data.values()))
        data["__type"] = config.type_name
        data["__id"] = record.id
        return data

    def build_index_options(self, record: Any) -> dict[str, Any]:
        """Variables and categories for ``record``; undeclared kinds are omitted."""
        config = self._config(record)
        options: dict[str, Any] = {}

        if config.variable_extractors:
            variables: dict[int, float] = {}
            for extractor in config.variable_extractors:
                variables.update(extractor(record))
            options["variables"] = variables

        if config.category_extractors:
            categories: dict[str, str] = {}
            for extractor in config.category_extractors:
                categories.update(extractor(record))
            options["categories"] = categories

        return options

    def build_document(self, record: Any) -> Document:
        options = self.build_index_options(record)
        return Document(
            doc_id=self.doc_id(record),
            fields=self.build_fields(record),
            variables=options.get("variables"),
            categories=options.get("categories"),
        )
