"""Local Workspace

Workspace backed by a workspace file (YAML, or JSON with comments):

    version: 1
    projects:
      app:
        root: apps/app
        projectType: application
        architect:
          build:
            builder: my-pkg:build
            options: {outputPath: dist}
            configurations:
              production: {optimize: true}

Schema validation uses jsonschema; defaults declared by the schema are filled
in on a copy of the validated value.
"""
import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from jsonschema import validators
from jsonschema.exceptions import SchemaError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.errors import ParseFailure, ProjectNotFound, ResourceReadFailure, SchemaValidationFailure
from core.schema_loader import parse_json
from core.validation import schema_identity
from models.architect_models import Project
from services.host import LocalHost

logger = logging.getLogger(__name__)


class WorkspaceProjectConfig(BaseModel):
    """One project entry of the workspace file"""
    model_config = ConfigDict(populate_by_name=True)

    root: str = Field("", description="Project root, relative to the workspace file")
    project_type: str = Field("application", alias="projectType", description="Project type tag")
    architect: Dict[str, Any] = Field(default_factory=dict, description="Raw target map")


class WorkspaceConfig(BaseModel):
    """Workspace file schema"""
    version: int = Field(1, description="Workspace file version")
    projects: Dict[str, WorkspaceProjectConfig] = Field(default_factory=dict)


def _extend_with_default(validator_class):
    """Validator class that fills in 'default' values of declared properties"""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if isinstance(instance, dict):
            for prop, subschema in properties.items():
                if isinstance(subschema, dict) and "default" in subschema:
                    instance.setdefault(prop, copy.deepcopy(subschema["default"]))
        yield from validate_properties(validator, properties, instance, schema)

    return validators.extend(validator_class, {"properties": set_defaults})


def _format_error_path(error) -> str:
    location = ".".join(str(part) for part in error.absolute_path)
    return location or "<root>"


def validate_with_defaults(value: Any, schema: Dict[str, Any]) -> Any:
    """
    Validate a value against a JSON schema

    Args:
        value: Value to validate (left untouched)
        schema: JSON schema

    Returns:
        Deep copy of the value with schema defaults applied

    Raises:
        SchemaValidationFailure: If the schema or the value is invalid
    """
    schema_id = schema_identity(schema, "schema")
    validator_class = validators.validator_for(schema)
    try:
        validator_class.check_schema(schema)
    except SchemaError as e:
        raise SchemaValidationFailure(schema_id, value, [f"invalid schema: {e.message}"]) from e

    instance = copy.deepcopy(value)
    validator = _extend_with_default(validator_class)(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda err: [str(p) for p in err.absolute_path])
    if errors:
        raise SchemaValidationFailure(
            schema_id,
            value,
            [f"{_format_error_path(err)}: {err.message}" for err in errors],
        )
    return instance


class LocalWorkspace:
    """Workspace read from a local workspace file"""

    def __init__(
        self,
        root: Union[str, Path],
        config: WorkspaceConfig,
        host: Optional[LocalHost] = None
    ):
        """
        Initialize workspace

        Args:
            root: Workspace root directory
            config: Parsed workspace file
            host: File host (default: LocalHost rooted at the workspace)
        """
        self.root = str(Path(root).resolve())
        self.config = config
        self.host = host or LocalHost(self.root)

    @classmethod
    def load(cls, workspace_file: Union[str, Path]) -> "LocalWorkspace":
        """
        Load a workspace file

        Args:
            workspace_file: Path to workspace.yaml / workspace.json

        Returns:
            LocalWorkspace rooted at the file's directory

        Raises:
            ResourceReadFailure: If the file cannot be read
            ParseFailure: If the file is not valid YAML/JSON
            SchemaValidationFailure: If the file does not match WorkspaceConfig
        """
        path = Path(workspace_file).resolve()
        try:
            text = path.read_text(encoding='utf-8')
        except OSError as e:
            raise ResourceReadFailure(str(path), e.strerror or str(e)) from e

        if path.suffix.lower() == '.json':
            data = parse_json(text, str(path))
        else:
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise ParseFailure(str(path), str(e)) from e

        if not isinstance(data, dict):
            raise ParseFailure(str(path), "workspace file must contain a mapping")

        try:
            config = WorkspaceConfig(**data)
        except ValidationError as e:
            error_messages = []
            for error in e.errors():
                loc = ".".join(str(x) for x in error['loc'])
                error_messages.append(f"{loc}: {error['msg']}")
            raise SchemaValidationFailure(str(path), data, error_messages) from e

        logger.debug(f"Loaded workspace {path} with {len(config.projects)} project(s)")
        return cls(path.parent, config)

    def list_project_names(self) -> List[str]:
        return list(self.config.projects)

    def get_project(self, name: str) -> Project:
        """
        Get project metadata

        Raises:
            ProjectNotFound: If the workspace has no such project
        """
        entry = self.config.projects.get(name)
        if entry is None:
            raise ProjectNotFound(name)
        return Project(
            name=name,
            root=str((Path(self.root) / entry.root).resolve()),
            project_type=entry.project_type,
        )

    def get_project_architect(self, name: str) -> Dict[str, Any]:
        """
        Get a project's raw target map

        Raises:
            ProjectNotFound: If the workspace has no such project
        """
        entry = self.config.projects.get(name)
        if entry is None:
            raise ProjectNotFound(name)
        return copy.deepcopy(entry.architect)

    async def validate(self, value: Any, schema: Dict[str, Any]) -> Any:
        """Validate a value; see validate_with_defaults()"""
        return validate_with_defaults(value, schema)
