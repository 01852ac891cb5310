"""Per-run catalog context.

One context holds the schema registry and slug index for a run and is
passed explicitly to validation and materialization.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.config import CatalogConfig
from core.errors import CatalogConfigError
from registry.schema_registry import SchemaRegistry, SchemaRegistryCache
from registry.slug_index import SlugIndex, rebuild_slug_index


@dataclass(frozen=True)
class CatalogContext:
    """Registry and slug index shared by one run.

    Attributes:
        registry: Loaded controlled vocabularies.
        slug_index: Slug to collection mapping.
        config: Runtime configuration the context was loaded from.
        registry_cache: Cache used to load the registry.
    """

    registry: SchemaRegistry
    slug_index: SlugIndex
    config: CatalogConfig | None = None
    registry_cache: SchemaRegistryCache = field(default_factory=SchemaRegistryCache, compare=False)

    @classmethod
    def load(
        cls,
        config: CatalogConfig,
        registry_cache: SchemaRegistryCache | None = None,
    ) -> "CatalogContext":
        """Load the registry and rebuild the slug index for a run.

        Args:
            config: Runtime configuration.
            registry_cache: Optional shared registry cache.

        Returns:
            Loaded context.

        Raises:
            CatalogSchemaError: If vocabulary files are unusable.
            CatalogSlugConflictError: If any slug is claimed twice.
        """
        cache = registry_cache or SchemaRegistryCache()
        return cls(
            registry=cache.get(config.schema_dir),
            slug_index=rebuild_slug_index(config.data_dir),
            config=config,
            registry_cache=cache,
        )

    def reload(self) -> "CatalogContext":
        """Drop cached vocabularies and load a fresh context.

        Raises:
            CatalogConfigError: If the context was built without a config.
        """
        if self.config is None:
            raise CatalogConfigError(
                "Cannot reload a catalog context built without a config. "
                "Create it with CatalogContext.load(config)."
            )
        self.registry_cache.clear()
        return CatalogContext.load(self.config, self.registry_cache)

    def manufacturer_slugs(self) -> tuple[str, ...]:
        """Return sorted manufacturer slugs from the index."""
        return self.slug_index.slugs_in("manufacturers")
