"""
Architect data models

Pydantic models for the values that flow between the workspace, the
architect and the builders.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Project(BaseModel):
    """A workspace project"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Project name")
    root: str = Field(..., description="Absolute project root")
    project_type: str = Field("application", description="Project type tag")


class TargetDeclaration(BaseModel):
    """One validated entry of a project's target map"""
    builder: str = Field(..., description="Builder identifier '<package>:<name>'")
    options: Dict[str, Any] = Field(default_factory=dict, description="Base options")
    configurations: Optional[Dict[str, Dict[str, Any]]] = Field(
        None,
        description="Named partial option overrides"
    )


class TargetSpecifier(BaseModel):
    """A request to run a target"""
    project: str
    target: str
    configuration: Optional[str] = None
    overrides: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def parse(cls, value: str, overrides: Optional[Dict[str, Any]] = None) -> "TargetSpecifier":
        """
        Parse the 'project:target[:configuration]' form

        Args:
            value: Target string
            overrides: Optional option overrides

        Returns:
            TargetSpecifier

        Raises:
            ValueError: If the string has the wrong number of parts
        """
        parts = value.split(':')
        if len(parts) not in (2, 3) or not all(parts):
            raise ValueError(
                f"Invalid target '{value}' (expected project:target[:configuration])"
            )
        return cls(
            project=parts[0],
            target=parts[1],
            configuration=parts[2] if len(parts) == 3 else None,
            overrides=overrides or {},
        )


class BuilderConfiguration(BaseModel):
    """The merged input handed to a builder"""
    root: str
    project_type: str
    builder: str
    options: Dict[str, Any] = Field(default_factory=dict)


class BuilderPaths(BaseModel):
    """Resolved locations for a builder's schema and implementation"""
    model_config = ConfigDict(frozen=True)

    schema_path: str = Field(..., description="Absolute path of the option schema")
    implementation: str = Field(..., description="Absolute path of the implementation, optionally '#Export'")
    description: Optional[str] = None


class BuilderDescription(BaseModel):
    """A builder's identity plus its loaded option schema"""
    model_config = ConfigDict(frozen=True)

    name: str
    option_schema: Dict[str, Any] = Field(default_factory=dict)
    description: Optional[str] = None


class BuildEvent(BaseModel):
    """
    Convenience event type for builder authors.

    The architect forwards events untouched and never requires this type.
    """
    model_config = ConfigDict(extra="allow")

    success: bool

    @field_validator('success', mode='before')
    @classmethod
    def validate_success(cls, v: Any) -> Any:
        """Reject values that only happen to be truthy"""
        if not isinstance(v, bool):
            raise ValueError("success must be a boolean")
        return v


@dataclass
class ExecutionContext:
    """Per-run context handed to a builder constructor"""
    logger: Any
    architect: Any
    host: Any
    workspace: Any
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def assemble(
        cls,
        defaults: Dict[str, Any],
        partial: Optional[Dict[str, Any]] = None
    ) -> "ExecutionContext":
        """
        Overlay caller-supplied keys on the default context

        Args:
            defaults: logger, architect, host and workspace
            partial: Caller keys; these win over the defaults

        Returns:
            ExecutionContext
        """
        merged = {**defaults, **(partial or {})}
        known = {name: merged.pop(name, None) for name in ('logger', 'architect', 'host', 'workspace')}
        return cls(**known, extras=merged)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that are not regular fields
        extras = self.__dict__.get('extras', {})
        if name in extras:
            return extras[name]
        raise AttributeError(name)
