"""Tests for the Android plugin build service."""

from __future__ import annotations

from pathlib import Path

import pytest

from aarkit.builder.naming import get_short_plugin_name
from aarkit.builder.service import AndroidPluginBuildService, built_aar_path
from aarkit.exceptions import (
    ArtifactNotFoundError,
    InvalidUsageError,
    ManifestParseError,
    ToolsError,
)
from aarkit.manifest import parse_manifest
from aarkit.models import BuildConfig, BuildOptions, GlobalConfig, PluginBuildSettings, ToolsConfig


class FakeRunner:
    """Stands in for GradleRunner and drops an archive where Gradle would."""

    def __init__(self, produce: bool = True) -> None:
        self.produce = produce
        self.calls: list[PluginBuildSettings] = []

    def build_plugin(self, settings: PluginBuildSettings) -> None:
        self.calls.append(settings)
        if self.produce:
            aar = built_aar_path(settings.plugin_dir, get_short_plugin_name(settings.plugin_name))
            aar.parent.mkdir(parents=True, exist_ok=True)
            aar.write_bytes(b"PK\x03\x04")


@pytest.fixture
def config(fake_sdk: Path) -> GlobalConfig:
    return GlobalConfig(tools=ToolsConfig(android_home=str(fake_sdk)))


@pytest.fixture
def options(platforms_dir: Path, tmp_path: Path) -> BuildOptions:
    return BuildOptions(
        plugin_name="nativescript-camera",
        platforms_android_dir=platforms_dir,
        aar_output_dir=tmp_path / "dist",
        temp_plugin_dir=tmp_path / "staging",
    )


class TestBuildAar:
    def test_builds_and_copies_archive(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        runner = FakeRunner()
        service = AndroidPluginBuildService(config, runner=runner)

        assert service.build_aar(options) is True
        assert (options.aar_output_dir / "nativescript_camera.aar").read_bytes() == b"PK\x03\x04"

        settings = runner.calls[0]
        assert settings.plugin_dir == options.temp_plugin_dir / "nativescript_camera"
        assert settings.plugin_name == "nativescript-camera"
        assert settings.android_tools_info.compile_sdk_version == 30
        assert settings.android_tools_info.build_tools_version == "30.0.3"

    def test_staged_project_layout(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)

        plugin_dir = options.temp_plugin_dir / "nativescript_camera"
        main = plugin_dir / "src" / "main"
        manifest = parse_manifest((main / "AndroidManifest.xml").read_text())
        assert manifest.attributes["package"] == "org.nativescript.nativescript_camera"
        assert len(manifest.children["uses-permission"]) == 2
        assert (main / "res" / "values" / "strings.xml").is_file()
        assert not (main / "res" / ".DS_Store").exists()

        build_gradle = (plugin_dir / "build.gradle").read_text()
        assert "com.android.library" in build_gradle
        assert build_gradle.rstrip().endswith(
            'implementation "com.android.support:exifinterface:28.0.0"\n}'
        )
        assert "jcenter()" in build_gradle
        assert "productFlavors" not in build_gradle

    def test_declared_package_preserved(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        (options.platforms_android_dir / "AndroidManifest.xml").write_text(
            '<manifest package="com.acme.camera"/>'
        )
        AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)
        manifest_path = (
            options.temp_plugin_dir / "nativescript_camera" / "src" / "main" / "AndroidManifest.xml"
        )
        assert parse_manifest(manifest_path.read_text()).attributes["package"] == "com.acme.camera"

    def test_manifest_read_in_its_declared_encoding(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        (options.platforms_android_dir / "AndroidManifest.xml").write_bytes(
            '<?xml version="1.0" encoding="ISO-8859-1"?>'
            '<application android:label="Café"/>'.encode("iso-8859-1")
        )
        AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)
        manifest_path = (
            options.temp_plugin_dir / "nativescript_camera" / "src" / "main" / "AndroidManifest.xml"
        )
        manifest = parse_manifest(manifest_path.read_bytes())
        assert manifest.children["application"].attributes["android:label"] == "Café"

    def test_package_prefix_from_config(
        self, fake_sdk: Path, options: BuildOptions, quiet_output
    ) -> None:
        config = GlobalConfig(
            tools=ToolsConfig(android_home=str(fake_sdk)),
            build=BuildConfig(package_prefix="com.acme."),
        )
        AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)
        manifest_path = (
            options.temp_plugin_dir / "nativescript_camera" / "src" / "main" / "AndroidManifest.xml"
        )
        package = parse_manifest(manifest_path.read_text()).attributes["package"]
        assert package == "com.acme.nativescript_camera"

    def test_manifest_created_when_only_sources_exist(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        (options.platforms_android_dir / "AndroidManifest.xml").unlink()
        assert AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)
        manifest_path = (
            options.temp_plugin_dir / "nativescript_camera" / "src" / "main" / "AndroidManifest.xml"
        )
        manifest = parse_manifest(manifest_path.read_text())
        assert manifest.attributes["package"] == "org.nativescript.nativescript_camera"
        assert manifest.children == {}

    def test_scoped_plugin_name(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        options = options.model_copy(update={"plugin_name": "@scope/my-plugin"})
        AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)
        assert (options.aar_output_dir / "scope_my_plugin.aar").is_file()

    def test_default_plugin_name(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        options = options.model_copy(update={"plugin_name": None})
        AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)
        assert (options.aar_output_dir / "myPlugin.aar").is_file()

    def test_archive_stays_in_outputs_without_output_dir(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        options = options.model_copy(update={"aar_output_dir": None})
        assert AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)
        plugin_dir = options.temp_plugin_dir / "nativescript_camera"
        assert built_aar_path(plugin_dir, "nativescript_camera").is_file()

    def test_clean_removes_staged_project(
        self, fake_sdk: Path, options: BuildOptions, quiet_output
    ) -> None:
        config = GlobalConfig(
            tools=ToolsConfig(android_home=str(fake_sdk)), build=BuildConfig(clean=True)
        )
        AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)
        assert (options.aar_output_dir / "nativescript_camera.aar").is_file()
        assert not (options.temp_plugin_dir / "nativescript_camera").exists()

    def test_nothing_to_build(self, config: GlobalConfig, tmp_path: Path, quiet_output) -> None:
        empty = tmp_path / "empty" / "platforms" / "android"
        (empty / "libs").mkdir(parents=True)
        (empty / "include.gradle").write_text("dependencies { }")
        runner = FakeRunner()
        options = BuildOptions(
            plugin_name="empty",
            platforms_android_dir=empty,
            temp_plugin_dir=tmp_path / "staging",
        )

        assert AndroidPluginBuildService(config, runner=runner).build_aar(options) is False
        assert runner.calls == []
        assert not (tmp_path / "staging").exists()

    def test_missing_artifact_raises(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        service = AndroidPluginBuildService(config, runner=FakeRunner(produce=False))
        with pytest.raises(ArtifactNotFoundError, match="nativescript_camera-release.aar"):
            service.build_aar(options)

    def test_unusable_sdk_raises_before_gradle(
        self, tmp_path: Path, options: BuildOptions, quiet_output
    ) -> None:
        config = GlobalConfig(tools=ToolsConfig(android_home=str(tmp_path / "no-sdk")))
        runner = FakeRunner()
        with pytest.raises(ToolsError):
            AndroidPluginBuildService(config, runner=runner).build_aar(options)
        assert runner.calls == []

    def test_malformed_manifest_raises(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        (options.platforms_android_dir / "AndroidManifest.xml").write_text("<manifest")
        with pytest.raises(ManifestParseError):
            AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)

    def test_missing_temp_dir_option(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        options = options.model_copy(update={"temp_plugin_dir": None})
        with pytest.raises(InvalidUsageError, match="temporary project"):
            AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)

    def test_missing_platforms_dir_option(
        self, config: GlobalConfig, options: BuildOptions, quiet_output
    ) -> None:
        options = options.model_copy(update={"platforms_android_dir": None})
        with pytest.raises(InvalidUsageError, match="platforms/android"):
            AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(options)

    def test_missing_options_object(self, config: GlobalConfig) -> None:
        with pytest.raises(InvalidUsageError):
            AndroidPluginBuildService(config, runner=FakeRunner()).build_aar(None)


class TestMigrateIncludeGradle:
    def test_product_flavors_removed(self, config: GlobalConfig, platforms_dir: Path) -> None:
        service = AndroidPluginBuildService(config)
        migrated = service.migrate_include_gradle(
            BuildOptions(platforms_android_dir=platforms_dir)
        )
        content = (platforms_dir / "include.gradle").read_text()
        assert migrated is True
        assert "productFlavors" not in content
        assert "dependencies {" in content

    def test_without_product_flavors_file_untouched(
        self, config: GlobalConfig, tmp_path: Path
    ) -> None:
        include_gradle = tmp_path / "include.gradle"
        include_gradle.write_text("dependencies { }")
        service = AndroidPluginBuildService(config)
        assert service.migrate_include_gradle(BuildOptions(platforms_android_dir=tmp_path))
        assert include_gradle.read_text() == "dependencies { }"

    def test_missing_include_gradle(self, config: GlobalConfig, tmp_path: Path) -> None:
        service = AndroidPluginBuildService(config)
        assert service.migrate_include_gradle(BuildOptions(platforms_android_dir=tmp_path)) is False

    def test_missing_platforms_dir_option(self, config: GlobalConfig) -> None:
        with pytest.raises(InvalidUsageError):
            AndroidPluginBuildService(config).migrate_include_gradle(BuildOptions())
