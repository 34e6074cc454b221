"""
Plugin Loader

Imports builder implementation modules by location and returns the exported
factory. A location is a file path (with or without '.py'), a package
directory, or a dotted module name, optionally suffixed with '#ExportName'.
"""

import hashlib
import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Optional

from core.interfaces import BuilderFactory


class ModulePluginLoader:
    """Loads builder factories from Python modules"""

    def __init__(self, default_export: str = "default"):
        """
        Initialize plugin loader

        Args:
            default_export: Attribute used when the location names no export
        """
        self.default_export = default_export
        self.logger = logging.getLogger(__name__)

    async def load_export(self, location: str) -> BuilderFactory:
        """
        Import a module and return one of its attributes

        Args:
            location: Module location, optionally '#ExportName'

        Returns:
            The exported factory

        Raises:
            ImportError: If the module cannot be imported or has no such export
        """
        module_location, _, export = location.partition('#')
        export = export or self.default_export

        module = self._import(module_location)
        factory = getattr(module, export, None)
        if factory is None:
            raise ImportError(f"Module {module_location} has no export named '{export}'")
        if not callable(factory):
            raise ImportError(f"Export '{export}' of {module_location} is not callable")

        self.logger.debug(f"Loaded builder export '{export}' from {module_location}")
        return factory

    def _import(self, module_location: str) -> ModuleType:
        path = self._find_source(module_location)
        if path is None:
            if '/' in module_location or '\\' in module_location:
                raise ImportError(f"Builder implementation not found: {module_location}")
            return importlib.import_module(module_location)

        module_name = self._module_name(path)
        if module_name in sys.modules:
            return sys.modules[module_name]

        if path.name == '__init__.py':
            spec = importlib.util.spec_from_file_location(
                module_name, path, submodule_search_locations=[str(path.parent)]
            )
        else:
            spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load builder implementation: {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        return module

    @staticmethod
    def _find_source(module_location: str) -> Optional[Path]:
        path = Path(module_location)
        candidates = [path, path.with_name(path.name + '.py'), path / '__init__.py']
        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()
        return None

    @staticmethod
    def _module_name(path: Path) -> str:
        digest = hashlib.sha1(str(path).encode('utf-8')).hexdigest()[:12]
        stem = path.parent.name if path.name == '__init__.py' else path.stem
        return f"_architect_builder_{stem.replace('-', '_')}_{digest}"
