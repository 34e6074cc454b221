"""
Configuration Loader

Loads the workspace file and turns CLI override strings into option dicts.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from config.settings import settings
from core.errors import ArchitectError
from services.workspace import LocalWorkspace


class ConfigLoadError(ArchitectError):
    """Exception raised when CLI configuration cannot be parsed"""

    code = "CONFIG_LOAD_ERROR"


def load_workspace(workspace_file: Optional[Union[str, Path]] = None) -> LocalWorkspace:
    """
    Load the workspace file

    Args:
        workspace_file: Path to the workspace file (default: settings.workspace_file)

    Returns:
        LocalWorkspace
    """
    return LocalWorkspace.load(Path(workspace_file or settings.workspace_file))


def parse_overrides(overrides: Optional[List[str]]) -> Dict[str, Any]:
    """
    Parse CLI override arguments into an options dict

    Args:
        overrides: Strings in the form "key=value", e.g.
                   ["outputPath=dist-prod", "optimize=true", "budgets.initial=2mb"]
                   Dotted keys build nested values; the merge into target
                   options stays one level deep.

    Returns:
        Override dict

    Raises:
        ConfigLoadError: If an override is malformed
    """
    result: Dict[str, Any] = {}

    for raw in overrides or []:
        key, sep, value = raw.partition('=')
        path = key.strip().split('.')
        if not sep or not all(path):
            raise ConfigLoadError(
                f"Invalid override '{raw}'",
                "Overrides have the form key=value, e.g. outputPath=dist-prod.",
            )

        parent = result
        for part in path[:-1]:
            child = parent.get(part)
            if not isinstance(child, dict):
                child = parent[part] = {}
            parent = child
        parent[path[-1]] = _parse_value(value)

    return result


def _parse_value(value: str) -> Any:
    """Read an override value as a YAML scalar (bool, null, number, list, quoted string)"""
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value.strip()
