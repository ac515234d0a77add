"""Tests for the SearchTank engine facade."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from conftest import FROZEN_EPOCH, FakeModel
from searchtank.core.config import ModelRegistry
from searchtank.core.engine import SearchTank
from searchtank.core.exceptions import MultiIndexError
from searchtank.core.results import SearchResults

PERSON_FIELDS = {
    "__any": f"{FROZEN_EPOCH} . Last Name . Name",
    "__type": "Person",
    "__id": 1,
    "name": "Name",
    "last_name": "Last Name",
    "timestamp": FROZEN_EPOCH,
}
PERSON_VARIABLES = {0: 1.0, 1: 20.0, 2: 300.0}


class TestSearch:
    def test_search_model(self, tank: SearchTank, indexes: dict[str, MagicMock], models: SimpleNamespace) -> None:
        person = models.Person.create(id=1, name="pedro")
        tank.index_for(models.Person).search.return_value = {
            "matches": 1,
            "results": [{"docid": "Person 1", "name": "pedro", "__type": "Person", "__id": "1"}],
            "search_time": 1,
        }

        results = tank.search_model(models.Person, "hey!")

        assert isinstance(results, SearchResults)
        assert list(results) == [person]
        assert results.total_count == 1
        assert results.total_pages == 1
        assert results.per_page == 10
        assert results.page == 1
        indexes["people"].search.assert_called_once_with(
            "__any:(hey!) __type:(Person)", {"start": 0, "len": 10, "fetch": "__type,__id"}
        )

    def test_search_several_models(self, tank: SearchTank, indexes: dict[str, MagicMock], models: SimpleNamespace) -> None:
        fido = models.Dog.create(id=7, name="fido")
        fluffy = models.Cat.create(id=9, name="fluffy")
        tank.index_for(models.Dog).search.return_value = {
            "matches": 2,
            "results": [
                {"docid": "Dog 7", "name": "fido", "__type": "Dog", "__id": "7"},
                {"docid": "Cat 9", "name": "fluffy", "__type": "Cat", "__id": "9"},
            ],
        }

        results = tank.search([models.Dog, models.Cat], "hey!")

        assert list(results) == [fido, fluffy]
        assert results.total_count == 2
        query, _ = indexes["animals"].search.call_args.args
        assert query == "__any:(hey!) __type:(Dog OR Cat)"

    def test_search_passes_options(self, tank: SearchTank, indexes: dict[str, MagicMock], models: SimpleNamespace) -> None:
        tank.search_model(
            models.Person,
            "hey!",
            page=2,
            per_page=20,
            conditions={"location_id": [1, 2]},
            filter_docvars={3: [["*", 7]]},
            category_filters={"type": "Person"},
            fetch_variables="true",
        )

        indexes["people"].search.assert_called_once_with(
            "__any:(hey!) __type:(Person) location_id:(1) location_id:(2)",
            {
                "start": 20,
                "len": 20,
                "filter_docvar3": "*:7",
                "category_filters": '{"type":"Person"}',
                "fetch_variables": "true",
                "fetch": "__type,__id",
            },
        )

    def test_model_per_page_default(self, tank: SearchTank, indexes: dict[str, MagicMock], models: SimpleNamespace) -> None:
        results = tank.search_model(models.Cat, "x")
        assert results.per_page == 5
        assert indexes["animals"].search.call_args.args[1]["len"] == 5

    def test_model_per_page_method(
        self, tank: SearchTank, registry: ModelRegistry, indexes: dict[str, MagicMock]
    ) -> None:
        class Ferret(FakeModel):
            @classmethod
            def per_page(cls) -> int:
                return 25

        registry.declare(Ferret, lambda tank: tank.indexes("name"), index_name="animals")
        for i in range(1, 31):
            Ferret.create(id=i, name=f"ferret {i}")
        tank.index_for(Ferret).search.return_value = {
            "matches": 30,
            "results": [{"docid": f"Ferret {i}", "__type": "Ferret", "__id": str(i)} for i in range(1, 26)],
        }

        results = tank.search_model(Ferret, "ferret")

        assert results.per_page == 25
        assert len(results) == 25
        assert results.total_pages == 2
        assert indexes["animals"].search.call_args.args[1]["len"] == 25

    def test_zero_matches(self, tank: SearchTank, models: SimpleNamespace) -> None:
        results = tank.search_model(models.Person, "nothing")
        assert list(results) == []
        assert results.total_count == 0
        assert models.Person.find_calls == []

    def test_facets(self, tank: SearchTank, models: SimpleNamespace) -> None:
        models.Person.create(id=1)
        tank.index_for(models.Person).search.return_value = {
            "matches": 1,
            "results": [{"docid": "Person 1", "__type": "Person", "__id": "1"}],
            "facets": {"job": {"tiny dancer": 1}},
        }
        assert tank.search_model(models.Person, "hey!").facets == {"job": {"tiny dancer": 1}}

    def test_cross_index_search_fails_before_calling_service(
        self, tank: SearchTank, api: MagicMock, models: SimpleNamespace
    ) -> None:
        with pytest.raises(MultiIndexError, match="people"):
            tank.search([models.Person, models.Dog], "hey!")
        api.get_index.assert_not_called()

    def test_service_errors_propagate(self, tank: SearchTank, models: SimpleNamespace) -> None:
        tank.index_for(models.Person).search.side_effect = RuntimeError("boom")
        with pytest.raises(RuntimeError, match="boom"):
            tank.search_model(models.Person, "hey!")

    def test_index_client_cached(self, tank: SearchTank, api: MagicMock, models: SimpleNamespace) -> None:
        assert tank.index_for(models.Dog) is tank.index_for(models.Cat)
        api.get_index.assert_called_once_with("animals")


class TestIndexing:
    def test_update_document(self, tank: SearchTank, indexes: dict[str, MagicMock], models: SimpleNamespace) -> None:
        tank.update_document(models.Person(name="Name", last_name="Last Name"))
        indexes["people"].add_document.assert_called_once_with(
            "Person 1", PERSON_FIELDS, variables=PERSON_VARIABLES
        )

    def test_batch_update(self, tank: SearchTank, indexes: dict[str, MagicMock], models: SimpleNamespace) -> None:
        assert tank.batch_update([models.Person(name="Name", last_name="Last Name")]) is True
        indexes["people"].add_documents.assert_called_once_with(
            [{"docid": "Person 1", "fields": PERSON_FIELDS, "variables": PERSON_VARIABLES}]
        )

    def test_batch_update_empty(self, tank: SearchTank, api: MagicMock) -> None:
        assert tank.batch_update([]) is False
        api.get_index.assert_not_called()

    def test_delete_document(self, tank: SearchTank, indexes: dict[str, MagicMock], models: SimpleNamespace) -> None:
        tank.delete_document(models.Dog(id=7))
        indexes["animals"].delete_document.assert_called_once_with("Dog 7")
