"""
Builder Resolver

Turns a '<package>:<builderName>' identifier into absolute BuilderPaths:

1. locate the package manifest from the workspace root
2. follow its "builders" pointer to the builders manifest
3. validate the builders manifest and pick the named entry
4. resolve the entry's schema and implementation relative to the manifest
"""

import logging
import os
from typing import Any, Dict, Tuple

from core.cache import KeyedCache
from core.errors import BuilderCannotBeResolved
from core.interfaces import Workspace
from core.package_resolver import PackageResolver
from core.schema_loader import load_json_file
from core.validation import validate
from models.architect_models import BuilderPaths


def split_builder_id(builder_id: str) -> Tuple[str, str]:
    """
    Split a builder identifier into package and builder name

    Args:
        builder_id: Identifier such as 'my-pkg:build'

    Returns:
        Tuple of (package, builder_name)

    Raises:
        BuilderCannotBeResolved: If either half is missing
    """
    package, sep, builder_name = builder_id.rpartition(':')
    if not sep or not package or not builder_name:
        raise BuilderCannotBeResolved(
            builder_id,
            "Builder identifiers have the form '<package>:<builderName>'."
        )
    return package, builder_name


def join_relative(base_dir: str, location: str) -> str:
    """Resolve a manifest-relative location, keeping any '#Export' suffix"""
    path, sep, export = location.partition('#')
    resolved = os.path.normpath(os.path.join(base_dir, path))
    return f"{resolved}#{export}" if sep else resolved


class BuilderResolver:
    """Resolves and caches builder paths"""

    def __init__(
        self,
        workspace: Workspace,
        package_resolver: PackageResolver,
        paths_cache: KeyedCache
    ):
        """
        Initialize builder resolver

        Args:
            workspace: Workspace providing root, host and validation
            package_resolver: Locates package manifests
            paths_cache: Cache of BuilderPaths keyed by builder id
        """
        self.workspace = workspace
        self.package_resolver = package_resolver
        self.paths_cache = paths_cache
        self.logger = logging.getLogger(__name__)

    async def resolve(self, builder_id: str, builders_schema: Dict[str, Any]) -> BuilderPaths:
        """
        Get the paths of a builder, resolving them on first use

        Args:
            builder_id: '<package>:<builderName>'
            builders_schema: Schema for builders manifests

        Returns:
            BuilderPaths with absolute locations

        Raises:
            BuilderCannotBeResolved: If the package or builder entry is missing
            SchemaValidationFailure: If the builders manifest is invalid
            ResourceReadFailure, ParseFailure: If a manifest cannot be loaded
        """
        return await self.paths_cache.get_or_compute(
            builder_id,
            lambda: self._resolve_uncached(builder_id, builders_schema)
        )

    async def _resolve_uncached(self, builder_id: str, builders_schema: Dict[str, Any]) -> BuilderPaths:
        package, builder_name = split_builder_id(builder_id)
        host = self.workspace.host

        package_json_path = self.package_resolver.resolve(package, str(self.workspace.root))
        if package_json_path is None:
            raise BuilderCannotBeResolved(
                builder_id,
                f"Package '{package}' was not found from {self.workspace.root}."
            )

        package_json = await load_json_file(host, package_json_path)
        builders_entry = package_json.get('builders') if isinstance(package_json, dict) else None
        if not isinstance(builders_entry, str) or not builders_entry:
            raise BuilderCannotBeResolved(
                builder_id,
                f"{package_json_path} has no 'builders' path to a builders manifest."
            )

        builders_json_path = join_relative(os.path.dirname(package_json_path), builders_entry)
        builders_json = await load_json_file(host, builders_json_path)
        builders_json = await validate(self.workspace, builders_json, builders_schema, "builders")

        entry = builders_json['builders'].get(builder_name)
        if not entry:
            raise BuilderCannotBeResolved(
                builder_id,
                f"{builders_json_path} declares no builder named '{builder_name}'."
            )

        builders_json_dir = os.path.dirname(builders_json_path)
        paths = BuilderPaths(
            schema_path=join_relative(builders_json_dir, entry['schema']),
            implementation=join_relative(builders_json_dir, entry['class']),
            description=entry.get('description'),
        )
        self.logger.debug(f"Resolved builder '{builder_id}': {paths.implementation}")
        return paths
