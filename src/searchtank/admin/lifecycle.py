"""Index lifecycle — Administrative create/delete/rebuild and bulk reindexing.

Everything here is best-effort: failures are logged and reported through
the boolean return value, never raised, so one broken index does not stop
a rebuild of the others.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Any

from searchtank.core.exceptions import IndexNotReadyError

if TYPE_CHECKING:
    from searchtank.config.settings import Settings
    from searchtank.core.engine import SearchTank

logger = logging.getLogger(__name__)

Scope = Callable[[type], Iterable[Any]]


def _chunks(records: list[Any], size: int) -> Iterator[list[Any]]:
    for start in range(0, len(records), size):
        yield records[start : start + size]


class IndexLifecycle:
    """Create, delete, rebuild and reindex the indexes of registered models.

    Args:
        tank: Engine providing the API client, registry and batch updates.
        settings: Application configuration (poll interval, timeout, batch size).
        sleep: Sleep function used between readiness polls.
        clock: Monotonic clock used for timeouts and progress timing.
    """

    def __init__(
        self,
        tank: SearchTank,
        settings: Settings | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.tank = tank
        self.settings = settings or tank.settings
        self._sleep = sleep
        self._clock = clock

    def get_model_classes(self) -> list[type]:
        return self.tank.registry.get_model_classes()

    def get_available_indexes(self) -> list[str]:
        return self.tank.registry.get_available_indexes()

    def _functions_for(self, index_name: str) -> dict[int, str]:
        functions: dict[int, str] = {}
        for model in self.get_model_classes():
            config = self.tank.registry.config_for(model)
            if config.index_name == index_name:
                functions.update(config.functions)
        return functions

    def index_exists(self, index_name: str) -> bool:
        return self.tank.api.get_index(index_name).exists()

    def wait_until_running(self, index_name: str) -> None:
        """Poll the index until it reports running.

        Raises:
            IndexNotReadyError: If it has not started within ``ready_timeout``.
        """
        index = self.tank.api.get_index(index_name)
        deadline = self._clock() + self.settings.index.ready_timeout
        while not index.running():
            if self._clock() >= deadline:
                raise IndexNotReadyError(
                    f"Index {index_name} not running after {self.settings.index.ready_timeout} seconds"
                )
            self._sleep(self.settings.index.ready_poll_interval)

    def create_index(self, index_name: str) -> bool:
        """Create ``index_name`` if missing, wait for it and define its functions."""
        try:
            index = self.tank.api.get_index(index_name)
            if index.exists():
                return True

            logger.info("Creating %s index", index_name)
            index.create_index()
            logger.info("Waiting for the %s index to be ready", index_name)
            self.wait_until_running(index_name)

            for number, definition in sorted(self._functions_for(index_name).items()):
                index.add_function(number, definition)
            return True
        except Exception:
            logger.exception("There was an error creating the %s index", index_name)
            return False

    def delete_index(self, index_name: str) -> bool:
        """Delete ``index_name``; a missing index is left alone."""
        try:
            index = self.tank.api.get_index(index_name)
            if index.exists():
                logger.info("Deleting %s index", index_name)
                index.delete_index()
            return True
        except Exception:
            logger.exception("There was an error clearing the %s index", index_name)
            return False

    def clear_all_indexes(self) -> bool:
        """Delete and recreate every index used by a registered model."""
        ok = True
        for index_name in self.get_available_indexes():
            ok = self.delete_index(index_name) and ok
            ok = self.create_index(index_name) and ok
        return ok

    def reindex_model(self, model: type, batch_size: int | None = None, scope: Scope | None = None) -> bool:
        """Push every record of ``model`` to its index in bulk batches.

        Args:
            model: Registered model class; records come from ``model.all()``.
            batch_size: Records per bulk call (defaults to settings).
            scope: Optional callable returning the records to index instead.
        """
        try:
            logger.info("Indexing %s model", model.__name__)
            index_name = self.tank.registry.config_for(model).index_name
            if not self.index_exists(index_name) and not self.create_index(index_name):
                return False

            size = batch_size or self.settings.index.batch_size
            records = list(scope(model) if scope else model.all())
            total = len(records)

            started = self._clock()
            done = 0
            for batch in _chunks(records, size):
                self.tank.batch_update(batch)
                done += len(batch)
                logger.info("Indexed %d records   %d/%d", len(batch), done, total)
            logger.info("Indexed %d %s records in %.2f seconds", total, model.__name__, self._clock() - started)
            return True
        except Exception:
            logger.exception("There was an error reindexing the %s model", model.__name__)
            return False

    def reindex_all_models(self, batch_size: int | None = None) -> bool:
        ok = True
        for model in self.get_model_classes():
            ok = self.reindex_model(model, batch_size=batch_size) and ok
        return ok
