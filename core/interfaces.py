"""
Collaborator Protocols

Interfaces the architect consumes from its surroundings. Using
typing.Protocol lets any object with the right shape plug in, including the
in-memory fakes used by the tests.
"""

from typing import Any, Callable, Dict, List, Protocol

from models.architect_models import BuilderConfiguration, Project


class Host(Protocol):
    """Raw file access"""

    async def read(self, path: str) -> bytes:
        """Read a file, raising if it cannot be read"""
        ...


class Workspace(Protocol):
    """Projects, their target maps and schema validation"""

    root: str
    host: Host

    def list_project_names(self) -> List[str]:
        ...

    def get_project(self, name: str) -> Project:
        """Project metadata; raises for unknown names"""
        ...

    def get_project_architect(self, name: str) -> Dict[str, Any]:
        """The raw, unvalidated target map of a project"""
        ...

    async def validate(self, value: Any, schema: Dict[str, Any]) -> Any:
        """Validate a value, returning it with defaults applied"""
        ...


class Builder(Protocol):
    """A builder instance; run() yields build events"""

    def run(self, config: BuilderConfiguration) -> Any:
        ...


BuilderFactory = Callable[..., Builder]


class PluginLoader(Protocol):
    """Turns an implementation location into a builder factory"""

    async def load_export(self, location: str) -> BuilderFactory:
        ...
