"""Tests for result rehydration and pagination."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from searchtank.core.config import ModelRegistry
from searchtank.core.exceptions import NotConfiguredError
from searchtank.core.results import ResultRehydrator, SearchResults
from searchtank.models.query import RawSearchResponse


@pytest.fixture
def rehydrator(registry: ModelRegistry) -> ResultRehydrator:
    return ResultRehydrator(registry)


def _raw(*matches: dict, matches_total: int | None = None, **extra: object) -> RawSearchResponse:
    return RawSearchResponse.parse(
        {"matches": len(matches) if matches_total is None else matches_total, "results": list(matches), **extra}
    )


# ── Rehydration ──────────────────────────────────────────────────────────────


class TestRehydrate:
    def test_empty_results_skip_fetch(self, rehydrator: ResultRehydrator, models: SimpleNamespace) -> None:
        assert rehydrator.rehydrate(_raw()) == []
        assert models.Person.find_calls == []

    def test_one_fetch_per_type_in_ranking_order(self, rehydrator: ResultRehydrator, models: SimpleNamespace) -> None:
        first = models.Person.create(id=1, name="a")
        second = models.Person.create(id=2, name="b")

        records = rehydrator.rehydrate(
            _raw(
                {"docid": "Person 1", "__type": "Person", "__id": "1"},
                {"docid": "Person 2", "__type": "Person", "__id": "2"},
            )
        )

        assert models.Person.find_calls == [[1, 2]]
        assert records == [first, second]

    def test_mixed_types_keep_order(self, rehydrator: ResultRehydrator, models: SimpleNamespace) -> None:
        fido = models.Dog.create(id=7, name="fido")
        fluffy = models.Cat.create(id=9, name="fluffy")
        rex = models.Dog.create(id=8, name="rex")

        records = rehydrator.rehydrate(
            _raw(
                {"docid": "Dog 7", "__type": "Dog", "__id": "7"},
                {"docid": "Cat 9", "__type": "Cat", "__id": "9"},
                {"docid": "Dog 8", "__type": "Dog", "__id": "8"},
            )
        )

        assert records == [fido, fluffy, rex]
        assert models.Dog.find_calls == [[7, 8]]
        assert models.Cat.find_calls == [[9]]

    def test_docid_only_matches(self, rehydrator: ResultRehydrator, models: SimpleNamespace) -> None:
        fido = models.Dog.create(id=7, name="fido")
        assert rehydrator.rehydrate(_raw({"docid": "Dog 7"})) == [fido]

    def test_missing_record_is_none_in_place(self, rehydrator: ResultRehydrator, models: SimpleNamespace) -> None:
        kept = models.Person.create(id=2, name="b")
        records = rehydrator.rehydrate(
            _raw(
                {"__type": "Person", "__id": "1"},
                {"__type": "Person", "__id": "2"},
            )
        )
        assert records == [None, kept]

    def test_unknown_type(self, rehydrator: ResultRehydrator) -> None:
        with pytest.raises(NotConfiguredError):
            rehydrator.rehydrate(_raw({"__type": "Ghost", "__id": "1"}))


# ── Pagination ───────────────────────────────────────────────────────────────


class TestSearchResults:
    def test_short_first_page_counts_itself(self) -> None:
        results = SearchResults(["a", "b"], page=1, per_page=10, raw=_raw(matches_total=99))
        assert results.total_count == 2
        assert results.total_pages == 1

    def test_full_page_uses_service_count(self) -> None:
        results = SearchResults(list(range(10)), page=1, per_page=10, raw=_raw(matches_total=35))
        assert results.total_count == 35
        assert results.total_pages == 4
        assert results.next_page == 2
        assert results.previous_page is None

    def test_short_later_page(self) -> None:
        results = SearchResults(["x"], page=3, per_page=10, raw=_raw(matches_total=99))
        assert results.offset == 20
        assert results.total_count == 21

    def test_empty_page_past_end_uses_service_count(self) -> None:
        results = SearchResults([], page=5, per_page=10, raw=_raw(matches_total=12))
        assert results.total_count == 12
        assert results.out_of_bounds

    def test_empty_results(self) -> None:
        results = SearchResults([], page=1, per_page=10, raw=_raw())
        assert results.total_count == 0
        assert list(results) == []
        assert results.facets == {}

    def test_facets_passthrough(self) -> None:
        raw = _raw({"docid": "Person 1"}, facets={"job": {"tiny dancer": 1}})
        results = SearchResults([object()], page=1, per_page=10, raw=raw)
        assert results.facets == {"job": {"tiny dancer": 1}}

    def test_sequence_behavior(self) -> None:
        results = SearchResults(["a", "b", "c"], page=1, per_page=10, raw=_raw())
        assert len(results) == 3
        assert results[1] == "b"
        assert results[-1] == "c"
        assert results[:2] == ["a", "b"]
        assert results == ["a", "b", "c"]

    def test_raw_none_response_is_empty(self) -> None:
        raw = RawSearchResponse.parse(None)
        assert raw.matches == 0
        assert raw.results == []
