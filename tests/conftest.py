"""
Shared fixtures
"""
import pytest

from config.settings import ArchitectSettings
from core.architect import Architect
from tests.fakes import (
    BUILDERS_SCHEMA,
    TARGETS_SCHEMA,
    FakePackageResolver,
    FakePluginLoader,
    FakeWorkspace,
    MemoryHost,
    RecordingBuilder,
    add_builder_package,
    schema_files,
)


@pytest.fixture
def test_settings():
    """指向内存主机中 schema 的设置"""
    return ArchitectSettings(
        targets_schema_path=TARGETS_SCHEMA,
        builders_schema_path=BUILDERS_SCHEMA,
        single_flight=True,
    )


@pytest.fixture
def app_projects():
    """Sample projects: app with build/test targets, lib with a build target"""
    return {
        "app": {
            "root": "apps/app",
            "projectType": "application",
            "architect": {
                "build": {
                    "builder": "my-pkg:build",
                    "options": {"outputPath": "dist"},
                    "configurations": {"production": {"optimize": True}},
                },
                "test": {
                    "builder": "my-pkg:test",
                    "options": {"watch": False},
                },
            },
        },
        "lib": {
            "root": "libs/lib",
            "projectType": "library",
            "architect": {
                "build": {"builder": "my-pkg:build"},
            },
        },
    }


@pytest.fixture
def host():
    """Memory host seeded with the schemas and the my-pkg builder package"""
    memory_host = MemoryHost(schema_files())
    add_builder_package(
        memory_host,
        "/ws/node_modules/my-pkg",
        {
            "build": {"class": "./build", "schema": "./build-schema.json", "description": "Build a project."},
            "test": {"class": "./test", "schema": "./test-schema.json"},
        },
        {
            "type": "object",
            "properties": {
                "outputPath": {"type": "string"},
                "optimize": {"type": "boolean", "default": False},
                "watch": {"type": "boolean"},
            },
        },
    )
    return memory_host


@pytest.fixture
def workspace(app_projects, host):
    return FakeWorkspace(app_projects, host)


@pytest.fixture
def package_resolver():
    return FakePackageResolver({"my-pkg": "/ws/node_modules/my-pkg/package.json"})


@pytest.fixture
def plugin_loader():
    RecordingBuilder.instances = []
    return FakePluginLoader({
        "/ws/node_modules/my-pkg/build": RecordingBuilder,
        "/ws/node_modules/my-pkg/test": RecordingBuilder,
    })


@pytest.fixture
def architect(workspace, test_settings, plugin_loader, package_resolver):
    return Architect(
        workspace,
        settings=test_settings,
        plugin_loader=plugin_loader,
        package_resolver=package_resolver,
    )
