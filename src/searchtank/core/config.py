"""Model configuration — Declarative index definitions and the model registry.

A model becomes indexable by declaring, against a ``ModelRegistry``, which
fields go into the index and which variables/categories accompany each
document::

    registry = ModelRegistry(settings)

    def person_index(tank: ConfigBuilder) -> None:
        tank.indexes("name")
        tank.indexes("last_name")
        tank.indexes("tags", lambda person: [t.name for t in person.tags])
        tank.variables(lambda person: {0: person.latitude, 1: person.longitude})
        tank.categories(lambda person: {"job": person.job})

    registry.declare(Person, person_index, index_name="people")

Declaring the same model again merges into the existing configuration
rather than replacing it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from searchtank.core.exceptions import (
    DuplicateTypeNameError,
    NoBlockGivenError,
    NoIndexNameError,
    NotConfiguredError,
)

if TYPE_CHECKING:
    from searchtank.config.settings import Settings

logger = logging.getLogger(__name__)

Extractor = Callable[[Any], Any]
VariablesExtractor = Callable[[Any], dict[int, float]]
CategoriesExtractor = Callable[[Any], dict[str, str]]


class ConfigBuilder:
    """Collects declarations made inside a configuration block.

    Extractors are ordinary callables receiving the record explicitly.
    """

    def __init__(self) -> None:
        self.fields: list[tuple[str, Extractor | None]] = []
        self.variable_extractors: list[VariablesExtractor] = []
        self.category_extractors: list[CategoriesExtractor] = []
        self.function_definitions: dict[int, str] = {}

    def indexes(self, field: str, extractor: Extractor | None = None) -> ConfigBuilder:
        """Index ``field``, read from the record attribute or computed by ``extractor``."""
        self.fields.append((str(field), extractor))
        return self

    def variables(self, extractor: VariablesExtractor) -> ConfigBuilder:
        self.variable_extractors.append(extractor)
        return self

    def categories(self, extractor: CategoriesExtractor) -> ConfigBuilder:
        self.category_extractors.append(extractor)
        return self

    def functions(self, definitions: dict[int, str]) -> ConfigBuilder:
        """Scoring functions defined on the index when it is created."""
        self.function_definitions.update(definitions)
        return self


class IndexConfig:
    """Index definition owned by exactly one model type.

    Attributes:
        index_name: Name of the remote index holding this model's documents.
        type_name: Value stored in ``__type`` and used in doc ids.
        fields: Ordered ``(field, extractor)`` pairs, unique by field.
        variable_extractors: Callables producing numeric variable maps.
        category_extractors: Callables producing category maps.
        functions: Scoring function number to definition.
    """

    def __init__(self, index_name: str, type_name: str) -> None:
        self.index_name = index_name
        self.type_name = type_name
        self.fields: list[tuple[str, Extractor | None]] = []
        self.variable_extractors: list[VariablesExtractor] = []
        self.category_extractors: list[CategoriesExtractor] = []
        self.functions: dict[int, str] = {}

    def merge(self, builder: ConfigBuilder) -> None:
        """Fold a builder's declarations into this config.

        A field declared again keeps its original position but takes the new
        extractor. Extractor lists are appended; their outputs are merged in
        order at document-build time, so later declarations win per key.
        """
        for field, extractor in builder.fields:
            for pos, (existing, _) in enumerate(self.fields):
                if existing == field:
                    self.fields[pos] = (field, extractor)
                    break
            else:
                self.fields.append((field, extractor))

        self.variable_extractors.extend(builder.variable_extractors)
        self.category_extractors.extend(builder.category_extractors)
        self.functions.update(builder.function_definitions)

    @property
    def field_names(self) -> list[str]:
        return [field for field, _ in self.fields]

    def __repr__(self) -> str:
        return f"IndexConfig(index_name={self.index_name!r}, type_name={self.type_name!r}, fields={self.field_names!r})"


class ModelRegistry:
    """Registry of indexable model types and their index configurations.

    Constructed once at application start and passed to whatever needs to
    resolve models to indexes (the engine, the lifecycle helper, the CLI).

    Example:
        >>> registry = ModelRegistry(settings)
        >>> registry.declare(Person, lambda tank: tank.indexes("name"), index_name="people")
        >>> registry.config_for(Person).index_name
        'people'
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._default_index_name = settings.index.default_name if settings else None
        self._configs: dict[type, IndexConfig] = {}
        self._types: dict[str, type] = {}

    def declare(
        self,
        model: type,
        block: Callable[[ConfigBuilder], Any] | None = None,
        index_name: str | None = None,
        type_name: str | None = None,
    ) -> IndexConfig:
        """Declare (or extend) the index configuration of ``model``.

        Args:
            model: The model class.
            block: Callable receiving a ``ConfigBuilder`` to declare fields,
                variables, categories and functions.
            index_name: Index to store the model in. When omitted the
                previously declared name is kept, falling back to the
                configured default index name.
            type_name: Overrides the ``__type`` tag (defaults to the class name).

        Returns:
            The model's merged configuration.

        Raises:
            NoBlockGivenError: If ``block`` is None.
            NoIndexNameError: If no index name can be determined.
            DuplicateTypeNameError: If another model already owns the type name.
        """
        if block is None:
            raise NoBlockGivenError("Please provide a block")

        existing = self._configs.get(model)
        name = index_name or (existing.index_name if existing else self._default_index_name)
        if not name:
            raise NoIndexNameError("Please provide a name for this index")

        tag = type_name or (existing.type_name if existing else model.__name__)
        owner = self._types.get(tag)
        if owner is not None and owner is not model:
            raise DuplicateTypeNameError(
                f"{model.__module__}.{model.__qualname__} and {owner.__module__}.{owner.__qualname__} "
                f"both use the type name '{tag}'; pass type_name= to tell them apart"
            )

        builder = ConfigBuilder()
        block(builder)

        if existing is None:
            existing = IndexConfig(str(name), type_name or model.__name__)
            self._configs[model] = existing
        else:
            existing.index_name = str(name)
            if type_name:
                self._types.pop(existing.type_name, None)
                existing.type_name = type_name

        existing.merge(builder)
        self._types[existing.type_name] = model
        logger.debug("Declared %s in index %s: %s", model.__name__, existing.index_name, existing.field_names)
        return existing

    def indexable(
        self, index_name: str | None = None, type_name: str | None = None
    ) -> Callable[[type], type]:
        """Class decorator form of :meth:`declare`.

        The decorated class provides its block as a ``tankit(builder)``
        static or class method::

            @registry.indexable("people")
            class Person:
                @staticmethod
                def tankit(tank):
                    tank.indexes("name")
        """

        def decorator(model: type) -> type:
            self.declare(model, getattr(model, "tankit", None), index_name=index_name, type_name=type_name)
            return model

        return decorator

    def config_for(self, model: type) -> IndexConfig:
        """Return the configuration declared for ``model``.

        Raises:
            NotConfiguredError: If the model was never declared.
        """
        try:
            return self._configs[model]
        except KeyError:
            raise NotConfiguredError(
                f"Please configure {model.__name__} with a declaration block before indexing it"
            ) from None

    def resolve(self, type_name: str) -> type:
        """Map a stored ``__type`` tag back to its model class."""
        try:
            return self._types[type_name]
        except KeyError:
            raise NotConfiguredError(
                f"No indexable model registered as '{type_name}'. Known types: {list(self._types)}"
            ) from None

    def is_registered(self, model: type) -> bool:
        return model in self._configs

    def get_model_classes(self) -> list[type]:
        """Every declared model, in first-declaration order."""
        return list(self._configs)

    def get_available_indexes(self) -> list[str]:
        """Distinct index names across declared models, in declaration order."""
        names: list[str] = []
        for config in self._configs.values():
            if config.index_name not in names:
                names.append(config.index_name)
        return names
