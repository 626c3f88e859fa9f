"""Properties every framework generator must satisfy.

Covers, for all seven (platform, framework) pairs:
- Determinism (byte-identical output for the same configuration)
- Path uniqueness and relative POSIX paths
- Manifest file emitted and consistent with the structured manifest
- Feature files present only when the feature is requested
- Declared dependencies cover every import of emitted files (npm, pub, cargo)
- Native manifests (pubspec, Cargo) declare no package the sources never use
"""

from __future__ import annotations

import json

import pytest
import yaml

from appforge.generators import FrameworkGenerator
from appforge.generators.base import LIB_FEATURES, json_content
from appforge.models import Configuration, ConfigurationError, FileKind

from conftest import (
    ALL_FEATURES,
    NATIVE_PAIRS,
    SAMPLE_PAIRS,
    declared_packages,
    imported_packages,
    make_config,
    runtime_dependencies,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(("platform", "framework"), SAMPLE_PAIRS)
class TestGeneratorContract:
    def test_deterministic(self, registry, platform, framework):
        config = make_config(platform, framework, ALL_FEATURES, name="Same App")
        first = registry.generate(config)
        second = registry.generate(config)
        assert first.model_dump() == second.model_dump()

    def test_paths_unique_and_relative(self, registry, platform, framework):
        result = registry.generate(make_config(platform, framework, ALL_FEATURES))
        paths = result.paths
        assert len(paths) == len(set(paths))
        for path in paths:
            assert not path.startswith("/")
            assert ".." not in path.split("/")
            assert "\\" not in path

    def test_manifest_and_readme_files(self, registry, platform, framework):
        result = registry.generate(make_config(platform, framework, ["api"], name="Readme App"))
        generator = registry.get(platform, framework)

        manifest_file = result.get_file(generator.manifest_path)
        assert manifest_file is not None
        if generator.manifest_path.endswith(".json"):
            assert json.loads(manifest_file.content) == result.manifest
            assert manifest_file.content == json_content(result.manifest)
        else:
            assert yaml.safe_load(manifest_file.content) == result.manifest

        readme = result.get_file("README.md")
        assert readme is not None
        assert readme.content == result.readme
        assert "# Readme App" in result.readme

    def test_all_entries_are_files_with_content(self, registry, platform, framework):
        result = registry.generate(make_config(platform, framework))
        for generated in result.files:
            assert generated.kind == FileKind.FILE
            assert generated.content.strip(), generated.path

    def test_no_feature_modules_without_features(self, registry, platform, framework):
        generator: FrameworkGenerator = registry.get(platform, framework)
        result = registry.generate(make_config(platform, framework))
        lib_paths = [p for p in result.paths if p.startswith(generator.lib_dir + "/")]
        assert lib_paths == []

    def test_feature_modules_follow_features(self, registry, platform, framework):
        generator: FrameworkGenerator = registry.get(platform, framework)
        base = set(registry.generate(make_config(platform, framework)).paths)
        for feature in LIB_FEATURES:
            extra = set(registry.generate(make_config(platform, framework, [feature])).paths) - base
            assert any(p.startswith(generator.lib_dir + "/") for p in extra), (feature, extra)

    def test_authentication_adds_auth_module(self, registry, platform, framework):
        base = set(registry.generate(make_config(platform, framework)).paths)
        with_auth = set(registry.generate(make_config(platform, framework, ["authentication"])).paths)
        added = with_auth - base
        assert added
        assert any("auth" in p.lower() for p in added)

    def test_deployment_descriptors(self, registry, platform, framework):
        result = registry.generate(make_config(platform, framework))
        assert result.deployment_descriptors

    def test_declared_dependencies_cover_imports(self, registry, platform, framework):
        result = registry.generate(make_config(platform, framework, ALL_FEATURES))
        assert not imported_packages(result) - declared_packages(result)

    def test_no_secrets_in_output(self, registry, platform, framework):
        from appforge.orchestrator import scan_generated_files

        result = registry.generate(make_config(platform, framework, ALL_FEATURES))
        assert scan_generated_files(result) == []


@pytest.mark.parametrize(("platform", "framework"), NATIVE_PAIRS)
@pytest.mark.parametrize("features", [[], ["api"], ALL_FEATURES], ids=["bare", "api", "all"])
class TestNativeManifests:
    def test_no_unused_runtime_dependencies(self, registry, platform, framework, features):
        result = registry.generate(make_config(platform, framework, features))
        declared = runtime_dependencies(result)
        assert declared
        assert declared <= imported_packages(result), declared - imported_packages(result)


class TestGeneratorGuards:
    def test_generator_rejects_other_framework(self, registry):
        generator = registry.get("web", "react")
        with pytest.raises(ConfigurationError):
            generator.generate(Configuration.from_values("web", "svelte"))

    def test_name_and_description_flow_into_output(self, registry):
        result = registry.generate(
            make_config("web", "react", name="Shop Front", description="Sells things")
        )
        assert result.manifest["name"] == "shop-front"
        assert result.manifest["description"] == "Sells things"
        assert "Shop Front" in result.get_file("index.html").content
