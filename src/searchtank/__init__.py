"""SearchTank — Declarative model indexing for hosted full-text search.

Quick start::

    from searchtank import ApiClient, ModelRegistry, SearchTank, Settings

    settings = Settings()
    registry = ModelRegistry(settings)
    registry.declare(Person, lambda tank: tank.indexes("name"), index_name="people")

    tank = SearchTank(registry, ApiClient(settings.service.api_url), settings)
    tank.update_document(person)
    results = tank.search(Person, "ada")
"""

from searchtank.client.client import ApiClient
from searchtank.config.settings import Settings
from searchtank.core.config import ConfigBuilder, IndexConfig, ModelRegistry
from searchtank.core.engine import SearchTank
from searchtank.core.results import SearchResults

__version__ = "0.1.0"

__all__ = [
    "ApiClient",
    "ConfigBuilder",
    "IndexConfig",
    "ModelRegistry",
    "SearchResults",
    "SearchTank",
    "Settings",
    "__version__",
]
