"""Shared test fixtures and configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog

from searchtank.config.settings import Settings
from searchtank.core.config import ConfigBuilder, ModelRegistry
from searchtank.core.engine import SearchTank

FROZEN_MOMENT = datetime(2024, 1, 1, tzinfo=UTC)
FROZEN_EPOCH = 1704067200


class FakeModel:
    """In-memory stand-in for an ORM model with bulk ``find``.

    ``find`` returns records in reverse id order so tests can tell whether
    result order is restored from the search ranking.
    """

    records: dict[Any, FakeModel]
    find_calls: list[list[Any]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.records = {}
        cls.find_calls = []

    def __init__(self, id: Any = 1, **attrs: Any) -> None:
        self.id = id
        for key, value in attrs.items():
            setattr(self, key, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id})"

    @classmethod
    def create(cls, **attrs: Any) -> FakeModel:
        record = cls(**attrs)
        cls.records[record.id] = record
        return record

    @classmethod
    def find(cls, ids: Sequence[Any]) -> list[FakeModel]:
        cls.find_calls.append(list(ids))
        found = [cls.records[i] for i in ids if i in cls.records]
        return sorted(found, key=lambda r: r.id, reverse=True)

    @classmethod
    def all(cls) -> list[FakeModel]:
        return list(cls.records.values())


def _person_index(tank: ConfigBuilder) -> None:
    tank.indexes("name")
    tank.indexes("last_name")
    tank.variables(lambda person: {0: 1.0, 1: 20.0, 2: 300.0})


def _animal_index(tank: ConfigBuilder) -> None:
    tank.indexes("name")


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo root handler and structlog changes made by ``setup_logging``."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        index={"ready_poll_interval": 0.5, "ready_timeout": 5.0, "batch_size": 2},
    )


@pytest.fixture
def models() -> SimpleNamespace:
    """Fresh model classes per test: Person (timestamped), Dog and Cat."""

    class Person(FakeModel):
        def __init__(self, id: Any = 1, **attrs: Any) -> None:
            attrs.setdefault("created_at", FROZEN_MOMENT)
            super().__init__(id, **attrs)

    class Dog(FakeModel):
        pass

    class Cat(FakeModel):
        per_page = 5

    return SimpleNamespace(Person=Person, Dog=Dog, Cat=Cat)


@pytest.fixture
def registry(settings: Settings, models: SimpleNamespace) -> ModelRegistry:
    registry = ModelRegistry(settings)
    registry.declare(models.Person, _person_index, index_name="people")
    registry.declare(models.Dog, _animal_index, index_name="animals")
    registry.declare(models.Cat, _animal_index, index_name="animals")
    return registry


@pytest.fixture
def indexes() -> dict[str, MagicMock]:
    """Mock indexes by name, created on first ``get_index``."""
    return {}


@pytest.fixture
def api(indexes: dict[str, MagicMock]) -> MagicMock:
    api = MagicMock()

    def get_index(name: str) -> MagicMock:
        if name not in indexes:
            index = MagicMock(name=f"index:{name}")
            index.exists.return_value = True
            index.running.return_value = True
            index.search.return_value = {"matches": 0, "results": []}
            indexes[name] = index
        return indexes[name]

    api.get_index.side_effect = get_index
    return api


@pytest.fixture
def tank(registry: ModelRegistry, api: MagicMock, settings: Settings) -> SearchTank:
    return SearchTank(registry, api, settings)
