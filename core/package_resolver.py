"""
Package Resolver

Locates the manifest of a builder package, the way dependency resolution
usually works: local paths first, then a modules directory in the search base
and each of its ancestors, then installed Python packages.
"""

import importlib.util
import logging
from pathlib import Path
from typing import Iterator, Optional


class PackageResolver:
    """Finds '<package>' manifests starting from a search base"""

    def __init__(self, manifest_name: str = "package.json", modules_dir: str = "node_modules"):
        """
        Initialize package resolver

        Args:
            manifest_name: Manifest file name inside a package directory
            modules_dir: Directory holding installed packages
        """
        self.manifest_name = manifest_name
        self.modules_dir = modules_dir
        self.logger = logging.getLogger(__name__)

    def resolve(self, package: str, basedir: str) -> Optional[str]:
        """
        Resolve a package's manifest path

        Args:
            package: Package name, or a relative/absolute package path
            basedir: Directory the search starts from

        Returns:
            Absolute manifest path, or None if the package cannot be found
        """
        base = Path(basedir).resolve()

        if self._is_path(package):
            manifest = self._manifest_in(base / package)
            if manifest:
                return str(manifest)
            return None

        for directory in self._ancestors(base):
            manifest = self._manifest_in(directory / self.modules_dir / package)
            if manifest:
                self.logger.debug(f"Resolved package '{package}' to {manifest}")
                return str(manifest)

        return self._resolve_installed(package)

    def _resolve_installed(self, package: str) -> Optional[str]:
        """Look for the manifest inside an importable Python package"""
        module_name = package.replace('-', '_')
        try:
            spec = importlib.util.find_spec(module_name)
        except (ImportError, ValueError):
            return None

        if spec is None or not spec.submodule_search_locations:
            return None

        for location in spec.submodule_search_locations:
            manifest = self._manifest_in(Path(location))
            if manifest:
                self.logger.debug(f"Resolved package '{package}' to installed {manifest}")
                return str(manifest)
        return None

    def _manifest_in(self, candidate: Path) -> Optional[Path]:
        if candidate.is_file():
            return candidate.resolve()
        manifest = candidate / self.manifest_name
        if manifest.is_file():
            return manifest.resolve()
        return None

    @staticmethod
    def _is_path(package: str) -> bool:
        return package.startswith(('./', '../', '/')) or Path(package).is_absolute()

    @staticmethod
    def _ancestors(base: Path) -> Iterator[Path]:
        yield base
        yield from base.parents
