"""
Architect

Resolves targets into builder configurations and drives builder execution.

Pipeline of run():
    ASSEMBLE_CONTEXT -> RESOLVE_DESCRIPTION -> VALIDATE_OPTIONS -> INSTANTIATE -> EXECUTE

A failure before EXECUTE is raised before any event is produced and the
builder is never constructed. Events produced during EXECUTE are forwarded
untouched.
"""

import asyncio
import inspect
import logging
from collections.abc import Mapping
from typing import Any, AsyncIterator, Dict, List, Optional, Union

from pydantic import BaseModel

from config.settings import ArchitectSettings, settings as default_settings
from core.builder_cache import BuilderConstructorCache, BuilderDescriptionCache
from core.builder_resolver import BuilderResolver
from core.cache import KeyedCache
from core.errors import ArchitectNotYetLoaded, ConfigurationNotFound
from core.interfaces import Builder, PluginLoader, Workspace
from core.package_resolver import PackageResolver
from core.plugin_loader import ModulePluginLoader
from core.schema_loader import load_json_file
from core.target_store import TargetStore
from core.validation import schema_identity, validate
from models.architect_models import (
    BuilderConfiguration,
    BuilderDescription,
    ExecutionContext,
    TargetDeclaration,
    TargetSpecifier,
)
from utils.logger import null_logger


class Architect:
    """Build target orchestrator for one workspace"""

    def __init__(
        self,
        workspace: Workspace,
        settings: Optional[ArchitectSettings] = None,
        plugin_loader: Optional[PluginLoader] = None,
        package_resolver: Optional[PackageResolver] = None,
    ):
        """
        Initialize architect

        Args:
            workspace: Workspace providing projects, host and validation
            settings: Settings (default: global settings)
            plugin_loader: Loader for builder implementations
            package_resolver: Locator for builder package manifests
        """
        self.workspace = workspace
        self.settings = settings or default_settings
        self.logger = logging.getLogger(__name__)

        self._targets_schema_path = self.settings.targets_schema_path
        self._builders_schema_path = self.settings.builders_schema_path
        self._targets_schema: Optional[Dict[str, Any]] = None
        self._builders_schema: Optional[Dict[str, Any]] = None

        single_flight = self.settings.single_flight
        self._load_state: KeyedCache = KeyedCache("load", single_flight)
        self._builder_paths: KeyedCache = KeyedCache("builder_paths", single_flight)
        self._builder_descriptions: KeyedCache = KeyedCache("builder_descriptions", single_flight)
        self._builder_constructors: KeyedCache = KeyedCache("builder_constructors", single_flight)

        self._target_store = TargetStore(workspace)
        self._resolver = BuilderResolver(
            workspace,
            package_resolver or PackageResolver(
                self.settings.package_manifest_name,
                self.settings.package_modules_dir,
            ),
            self._builder_paths,
        )
        self._descriptions = BuilderDescriptionCache(
            workspace, self._resolver, self._builder_descriptions
        )
        self._constructors = BuilderConstructorCache(
            plugin_loader or ModulePluginLoader(self.settings.default_export_name),
            self._builder_paths,
            self._builder_constructors,
        )

    # ==================== Loading ====================

    @property
    def loaded(self) -> bool:
        return 'architect' in self._load_state

    async def load_architect(self) -> "Architect":
        """
        Load the architect schemas and validate every project's target map

        Idempotent: once loaded, further calls return immediately without I/O.

        Returns:
            This architect

        Raises:
            SchemaValidationFailure: If a project's target map is invalid
            ResourceReadFailure, ParseFailure: If a schema cannot be loaded
        """
        await self._load_state.get_or_compute('architect', self._load)
        return self

    async def _load(self) -> bool:
        if self._targets_schema is None or self._builders_schema is None:
            targets_schema, builders_schema = await asyncio.gather(
                load_json_file(self.workspace.host, self._targets_schema_path),
                load_json_file(self.workspace.host, self._builders_schema_path),
            )
            self._targets_schema = targets_schema
            self._builders_schema = builders_schema

        await self._target_store.load(self._targets_schema)
        self.logger.debug("Architect loaded")
        return True

    # ==================== Introspection ====================

    def list_projects(self) -> List[str]:
        """Names of the projects whose target maps were validated"""
        return self._target_store.list_projects()

    def list_project_targets(self, project: str) -> List[str]:
        """
        List the targets of a project

        Raises:
            ProjectNotFound: If the project was never validated
        """
        return list(self._target_store.get_target_map(project))

    def get_target(self, project: str, target: str) -> TargetDeclaration:
        """A copy of a target declaration"""
        return self._target_store.get_target(project, target)

    def list_target_configurations(self, project: str, target: str) -> List[str]:
        """Names of the configurations a target declares"""
        return list(self.get_target(project, target).configurations or {})

    # ==================== Configuration ====================

    def get_builder_configuration(
        self,
        target_spec: Union[TargetSpecifier, Dict[str, Any]]
    ) -> BuilderConfiguration:
        """
        Merge a target's options into a builder configuration

        Options are merged shallowly, later sources winning:
        target options, then the named configuration, then the overrides.

        Args:
            target_spec: TargetSpecifier (or an equivalent dict)

        Returns:
            A fresh BuilderConfiguration

        Raises:
            ProjectNotFound: If the project is unknown
            TargetNotFound: If the target is unknown
            ConfigurationNotFound: If the named configuration is missing
        """
        if not isinstance(target_spec, TargetSpecifier):
            target_spec = TargetSpecifier.model_validate(target_spec)

        target = self._target_store.get_target(target_spec.project, target_spec.target)
        project = self.workspace.get_project(target_spec.project)

        configuration: Dict[str, Any] = {}
        if target_spec.configuration:
            if not target.configurations:
                raise ConfigurationNotFound(target_spec.project, target_spec.configuration)
            configuration = target.configurations.get(target_spec.configuration)
            if configuration is None:
                raise ConfigurationNotFound(target_spec.project, target_spec.configuration)

        return BuilderConfiguration(
            root=project.root,
            project_type=project.project_type,
            builder=target.builder,
            options={**target.options, **configuration, **target_spec.overrides},
        )

    # ==================== Builders ====================

    async def get_builder_description(
        self,
        builder_config: Union[BuilderConfiguration, str]
    ) -> BuilderDescription:
        """
        Get the description of a builder, resolving it on first use

        Args:
            builder_config: Builder configuration or builder id

        Returns:
            BuilderDescription

        Raises:
            ArchitectNotYetLoaded: If load_architect() has not completed
            BuilderCannotBeResolved: If the builder cannot be located
            SchemaValidationFailure: If the builders manifest is invalid
        """
        builder_id = builder_config if isinstance(builder_config, str) else builder_config.builder
        if self._builders_schema is None:
            raise ArchitectNotYetLoaded()
        return await self._descriptions.get(builder_id, self._builders_schema)

    async def validate_builder_options(
        self,
        builder_config: BuilderConfiguration,
        builder_description: BuilderDescription
    ) -> BuilderConfiguration:
        """
        Validate options against the builder's schema

        Returns:
            A copy of the configuration carrying the validated options

        Raises:
            SchemaValidationFailure: If the options do not match the schema
        """
        label = schema_identity(
            builder_description.option_schema, f"{builder_description.name} options"
        )
        validated_options = await validate(
            self.workspace,
            builder_config.options,
            builder_description.option_schema,
            label,
        )
        return builder_config.model_copy(update={'options': validated_options})

    async def get_builder(
        self,
        builder_description: BuilderDescription,
        context: ExecutionContext
    ) -> Builder:
        """
        Construct a new builder instance

        Raises:
            BuilderNotFound: If the builder's paths were never resolved
        """
        builder_constructor = await self._constructors.get(builder_description.name)
        return builder_constructor(context)

    # ==================== Execution ====================

    async def run(
        self,
        builder_config: BuilderConfiguration,
        partial_context: Optional[Dict[str, Any]] = None
    ) -> AsyncIterator[Any]:
        """
        Run a builder and yield its events

        Args:
            builder_config: Configuration from get_builder_configuration()
            partial_context: Context keys overriding the defaults

        Yields:
            Build events exactly as the builder produces them
        """
        context = ExecutionContext.assemble(
            {
                'logger': null_logger(),
                'architect': self,
                'host': self.workspace.host,
                'workspace': self.workspace,
            },
            partial_context,
        )

        builder_description = await self.get_builder_description(builder_config)
        builder_config = await self.validate_builder_options(builder_config, builder_description)
        builder = await self.get_builder(builder_description, context)

        self.logger.debug(f"Running builder '{builder_description.name}'")
        events = forward_events(builder.run(builder_config))
        try:
            async for event in events:
                yield event
        finally:
            await events.aclose()


async def forward_events(output: Any) -> AsyncIterator[Any]:
    """
    Normalize a builder's run() output into an async stream

    Accepts an async iterable, a sync iterable, an awaitable resolving to
    either, or a single event. Generator streams, sync or async, are closed
    when the consumer stops early.
    """
    if inspect.isawaitable(output):
        output = await output

    if hasattr(output, '__aiter__'):
        stream = output.__aiter__()
        try:
            async for event in stream:
                yield event
        finally:
            aclose = getattr(stream, 'aclose', None)
            if aclose is not None:
                await aclose()
    elif output is None:
        return
    elif isinstance(output, (str, bytes, Mapping, BaseModel)) or not hasattr(output, '__iter__'):
        yield output
    else:
        iterator = iter(output)
        try:
            for event in iterator:
                yield event
        finally:
            close = getattr(iterator, 'close', None)
            if close is not None:
                close()
