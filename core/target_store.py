"""
Target Store

Validated target maps, one per workspace project. Populated once by
load(); lookups never touch the workspace again.
"""

import asyncio
import copy
import logging
from typing import Any, Dict, List, Tuple

from core.errors import ProjectNotFound, TargetNotFound
from core.interfaces import Workspace
from core.validation import validate
from models.architect_models import TargetDeclaration


class TargetStore:
    """Per-project cache of validated target maps"""

    def __init__(self, workspace: Workspace):
        """
        Initialize target store

        Args:
            workspace: Workspace providing projects and raw target maps
        """
        self.workspace = workspace
        self._target_maps: Dict[str, Dict[str, Any]] = {}
        self.logger = logging.getLogger(__name__)

    async def load(self, targets_schema: Dict[str, Any]) -> None:
        """
        Validate and cache the target map of every project

        All projects are validated concurrently. If any of them fails, nothing
        is cached and the first failure is raised.

        Args:
            targets_schema: Schema describing a project's target map

        Raises:
            SchemaValidationFailure: If a project's target map is invalid
        """
        project_names = self.workspace.list_project_names()

        async def load_project(name: str) -> Tuple[str, Dict[str, Any]]:
            raw_target_map = self.workspace.get_project_architect(name)
            target_map = await validate(self.workspace, raw_target_map, targets_schema, "targets")
            return name, target_map

        results = await asyncio.gather(
            *(load_project(name) for name in project_names),
            return_exceptions=True
        )

        for result in results:
            if isinstance(result, BaseException):
                raise result

        for name, target_map in results:
            self._target_maps[name] = target_map

        self.logger.debug(f"Validated target maps for {len(results)} project(s)")

    def list_projects(self) -> List[str]:
        return list(self._target_maps)

    def get_target_map(self, project: str) -> Dict[str, Any]:
        """
        Get a project's validated target map

        Raises:
            ProjectNotFound: If the project was never validated
        """
        if project not in self._target_maps:
            raise ProjectNotFound(project)
        return self._target_maps[project]

    def get_target(self, project: str, target: str) -> TargetDeclaration:
        """
        Get a target declaration as a fresh model

        Args:
            project: Project name
            target: Target name

        Returns:
            TargetDeclaration built from a deep copy of the cached entry

        Raises:
            ProjectNotFound: If the project was never validated
            TargetNotFound: If the project has no such target
        """
        target_map = self.get_target_map(project)
        entry = target_map.get(target)
        if not entry:
            raise TargetNotFound(project, target)
        return TargetDeclaration.model_validate(copy.deepcopy(entry))
