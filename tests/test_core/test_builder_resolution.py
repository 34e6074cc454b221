"""
Tests for builder id parsing, package resolution and plugin loading
"""
import json

import pytest

from core.builder_resolver import join_relative, split_builder_id
from core.errors import BuilderCannotBeResolved
from core.package_resolver import PackageResolver
from core.plugin_loader import ModulePluginLoader


def test_split_builder_id():
    assert split_builder_id("my-pkg:build") == ("my-pkg", "build")
    assert split_builder_id("@scope/pkg:serve") == ("@scope/pkg", "serve")


@pytest.mark.parametrize("builder_id", ["build", ":build", "my-pkg:"])
def test_split_builder_id_invalid(builder_id):
    with pytest.raises(BuilderCannotBeResolved):
        split_builder_id(builder_id)


def test_join_relative_keeps_export():
    """测试相对路径解析保留#导出名"""
    assert join_relative("/pkg/src", "./builders/build.py#Builder") == "/pkg/src/builders/build.py#Builder"
    assert join_relative("/pkg/src", "../schema.json") == "/pkg/schema.json"


# ==================== PackageResolver ====================

def _make_package(directory, name="my-pkg"):
    package_dir = directory / "node_modules" / name
    package_dir.mkdir(parents=True)
    (package_dir / "package.json").write_text(json.dumps({"name": name, "builders": "./builders.json"}))
    return package_dir / "package.json"


def test_package_resolver_searches_ancestors(tmp_path):
    """测试向上逐级查找包"""
    manifest = _make_package(tmp_path)
    workspace_root = tmp_path / "repo" / "apps"
    workspace_root.mkdir(parents=True)

    resolved = PackageResolver().resolve("my-pkg", str(workspace_root))
    assert resolved == str(manifest.resolve())


def test_package_resolver_prefers_nearest(tmp_path):
    _make_package(tmp_path)
    nearer = _make_package(tmp_path / "repo")

    resolved = PackageResolver().resolve("my-pkg", str(tmp_path / "repo"))
    assert resolved == str(nearer.resolve())


def test_package_resolver_local_path(tmp_path):
    package_dir = tmp_path / "tools" / "local-builders"
    package_dir.mkdir(parents=True)
    (package_dir / "package.json").write_text("{}")

    resolved = PackageResolver().resolve("./tools/local-builders", str(tmp_path))
    assert resolved == str((package_dir / "package.json").resolve())


def test_package_resolver_not_found(tmp_path):
    assert PackageResolver().resolve("definitely-not-a-package-xyz", str(tmp_path)) is None


def test_package_resolver_custom_names(tmp_path):
    package_dir = tmp_path / "builder_packages" / "my-pkg"
    package_dir.mkdir(parents=True)
    (package_dir / "builders-package.json").write_text("{}")

    resolver = PackageResolver(manifest_name="builders-package.json", modules_dir="builder_packages")
    assert resolver.resolve("my-pkg", str(tmp_path)) == str((package_dir / "builders-package.json").resolve())


# ==================== ModulePluginLoader ====================

BUILDER_SOURCE = '''
class CopyBuilder:
    def __init__(self, context):
        self.context = context

    def run(self, config):
        return [{"success": True}]


default = CopyBuilder
Named = CopyBuilder
'''


@pytest.mark.asyncio
async def test_plugin_loader_default_export(tmp_path):
    """测试加载模块的default导出"""
    (tmp_path / "copy_builder.py").write_text(BUILDER_SOURCE)

    factory = await ModulePluginLoader().load_export(str(tmp_path / "copy_builder"))
    assert factory.__name__ == "CopyBuilder"
    assert factory("ctx").run(None) == [{"success": True}]


@pytest.mark.asyncio
async def test_plugin_loader_named_export(tmp_path):
    (tmp_path / "named.py").write_text(BUILDER_SOURCE)
    factory = await ModulePluginLoader().load_export(f"{tmp_path / 'named.py'}#Named")
    assert factory.__name__ == "CopyBuilder"


@pytest.mark.asyncio
async def test_plugin_loader_package_directory(tmp_path):
    package = tmp_path / "pkg_builder"
    package.mkdir()
    (package / "__init__.py").write_text(BUILDER_SOURCE)

    factory = await ModulePluginLoader().load_export(str(package))
    assert factory.__name__ == "CopyBuilder"


@pytest.mark.asyncio
async def test_plugin_loader_missing_export(tmp_path):
    (tmp_path / "no_default.py").write_text("VALUE = 1\n")
    with pytest.raises(ImportError):
        await ModulePluginLoader().load_export(str(tmp_path / "no_default.py"))


@pytest.mark.asyncio
async def test_plugin_loader_missing_module(tmp_path):
    with pytest.raises(ImportError):
        await ModulePluginLoader().load_export(str(tmp_path / "nothing_here.py"))
