"""
Builder Description and Constructor Caches

Descriptions (id + option schema + description text) and constructors
(the imported factory) are cached independently, keyed by builder id.
"""

import logging
from typing import Any, Dict

from core.builder_resolver import BuilderResolver
from core.cache import KeyedCache
from core.errors import BuilderNotFound, ParseFailure
from core.interfaces import BuilderFactory, PluginLoader, Workspace
from core.schema_loader import load_json_file
from models.architect_models import BuilderDescription, BuilderPaths


class BuilderDescriptionCache:
    """Loads option schemas and caches BuilderDescription values"""

    def __init__(self, workspace: Workspace, resolver: BuilderResolver, cache: KeyedCache):
        self.workspace = workspace
        self.resolver = resolver
        self.cache = cache
        self.logger = logging.getLogger(__name__)

    async def get(self, builder_id: str, builders_schema: Dict[str, Any]) -> BuilderDescription:
        """
        Get a builder description, resolving the builder on a miss

        Args:
            builder_id: '<package>:<builderName>'
            builders_schema: Schema for builders manifests

        Returns:
            BuilderDescription
        """
        return await self.cache.get_or_compute(
            builder_id,
            lambda: self._describe(builder_id, builders_schema)
        )

    async def _describe(self, builder_id: str, builders_schema: Dict[str, Any]) -> BuilderDescription:
        paths = await self.resolver.resolve(builder_id, builders_schema)
        option_schema = await load_json_file(self.workspace.host, paths.schema_path)
        if not isinstance(option_schema, dict):
            raise ParseFailure(paths.schema_path, "an option schema must be a JSON object")

        return BuilderDescription(
            name=builder_id,
            option_schema=option_schema,
            description=paths.description,
        )


class BuilderConstructorCache:
    """Imports builder implementations and caches their factories"""

    def __init__(self, plugin_loader: PluginLoader, paths_cache: KeyedCache, cache: KeyedCache):
        self.plugin_loader = plugin_loader
        self.paths_cache = paths_cache
        self.cache = cache
        self.logger = logging.getLogger(__name__)

    async def get(self, builder_id: str) -> BuilderFactory:
        """
        Get the factory of a builder whose paths are already resolved

        Args:
            builder_id: '<package>:<builderName>'

        Returns:
            Builder factory

        Raises:
            BuilderNotFound: If the paths were never resolved or the export is missing
        """
        if builder_id in self.cache:
            return self.cache.get(builder_id)

        paths = self.paths_cache.get(builder_id)
        if paths is None:
            raise BuilderNotFound(builder_id, "Resolve the builder description first.")

        return await self.cache.get_or_compute(builder_id, lambda: self._load(builder_id, paths))

    async def _load(self, builder_id: str, paths: BuilderPaths) -> BuilderFactory:
        try:
            return await self.plugin_loader.load_export(paths.implementation)
        except ImportError as e:
            raise BuilderNotFound(builder_id, str(e)) from e
