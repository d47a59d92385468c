"""End-to-end CLI tests through Typer's CliRunner."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from aarkit import __version__
from aarkit.app import app, main
from aarkit.builder.naming import get_short_plugin_name
from aarkit.builder.service import built_aar_path
from aarkit.config import get_data_dir, load_global_config
from aarkit.exceptions import ToolsError
from aarkit.models import PluginBuildSettings


class FakeGradleRunner:
    """Replaces GradleRunner; writes the archive Gradle would have built."""

    instances: list[FakeGradleRunner] = []

    def __init__(self, build_config, hook_runner=None) -> None:
        self.build_config = build_config
        self.hook_runner = hook_runner
        FakeGradleRunner.instances.append(self)

    def build_plugin(self, settings: PluginBuildSettings) -> None:
        aar = built_aar_path(settings.plugin_dir, get_short_plugin_name(settings.plugin_name))
        aar.parent.mkdir(parents=True, exist_ok=True)
        aar.write_bytes(b"aar")


class TestRootCommand:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"aarkit {__version__}" in result.output

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "build" in result.output
        assert "manifest" in result.output

    def test_verbose_enables_library_debug_logging(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["--verbose", "--quiet", "config", "show"])
        assert logging.getLogger("aarkit").level == logging.DEBUG
        cli_runner.invoke(app, ["--quiet", "config", "show"])
        assert logging.getLogger("aarkit").level == logging.WARNING


class TestMain:
    def test_library_error_maps_to_exit_code(self, isolated_config: Path) -> None:
        with patch("aarkit.app._setup_signal_handlers"), patch(
            "aarkit.app.app", side_effect=ToolsError("no SDK")
        ):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 3

    def test_unexpected_error_writes_crash_log(self, isolated_config: Path) -> None:
        with patch("aarkit.app._setup_signal_handlers"), patch(
            "aarkit.app.app", side_effect=RuntimeError("boom")
        ):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1
        logs = list((get_data_dir() / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: boom" in logs[0].read_text()


class TestManifestCommands:
    def test_merge_file(self, cli_runner, isolated_config: Path, platforms_dir: Path) -> None:
        result = cli_runner.invoke(
            app,
            ["manifest", "merge", str(platforms_dir / "AndroidManifest.xml"), "-p", "org.acme.cam"],
        )
        assert result.exit_code == 0
        assert 'package="org.acme.cam"' in result.output
        assert "android.permission.CAMERA" in result.output

    def test_merge_without_file_creates_manifest(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["manifest", "merge", "--package", "org.acme.cam"])
        assert result.exit_code == 0
        assert result.output.startswith("<?xml version='1.0' encoding='UTF-8' standalone='yes'?>")
        assert 'package="org.acme.cam"' in result.output

    def test_merge_malformed_exit_code(self, cli_runner, isolated_config: Path) -> None:
        bad = isolated_config / "AndroidManifest.xml"
        bad.write_text("<manifest")
        result = cli_runner.invoke(app, ["manifest", "merge", str(bad), "-p", "org.acme"])
        assert result.exit_code == 7
        assert "Invalid manifest XML" in result.output

    def test_merge_missing_file(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["manifest", "merge", str(isolated_config / "missing.xml"), "-p", "org.acme"]
        )
        assert result.exit_code == 2

    def test_scopes(self, cli_runner, isolated_config: Path, platforms_dir: Path) -> None:
        result = cli_runner.invoke(
            app, ["manifest", "scopes", str(platforms_dir / "include.gradle")]
        )
        assert result.exit_code == 0
        assert result.output.index("repositories {") < result.output.index("dependencies {")
        assert "productFlavors" not in result.output

    def test_scopes_json(self, cli_runner, isolated_config: Path, platforms_dir: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "manifest", "scopes", str(platforms_dir / "include.gradle")]
        )
        assert result.exit_code == 0
        scopes = json.loads(result.stdout)
        assert len(scopes) == 2
        assert scopes[0].startswith("repositories")

    def test_single_scope(self, cli_runner, isolated_config: Path, platforms_dir: Path) -> None:
        result = cli_runner.invoke(
            app,
            ["manifest", "scopes", str(platforms_dir / "include.gradle"), "-s", "productFlavors"],
        )
        assert result.exit_code == 0
        assert result.output.startswith("productFlavors {")

    def test_single_scope_json(
        self, cli_runner, isolated_config: Path, platforms_dir: Path
    ) -> None:
        result = cli_runner.invoke(
            app,
            [
                "--json",
                "manifest",
                "scopes",
                str(platforms_dir / "include.gradle"),
                "--scope",
                "repositories",
            ],
        )
        span = json.loads(result.stdout)
        assert span["scope_name"] == "repositories"
        assert span["text"].startswith("repositories {")

    def test_missing_scope(self, cli_runner, isolated_config: Path) -> None:
        include_gradle = isolated_config / "include.gradle"
        include_gradle.write_text("android { }")
        result = cli_runner.invoke(app, ["manifest", "scopes", str(include_gradle)])
        assert result.exit_code == 1
        assert "No dependencies block" in result.output


class TestBuildCommands:
    def test_build_aar(
        self, cli_runner, isolated_config: Path, platforms_dir: Path, fake_sdk: Path
    ) -> None:
        FakeGradleRunner.instances.clear()
        output_dir = isolated_config / "dist"
        with patch("aarkit.builder.service.GradleRunner", FakeGradleRunner):
            result = cli_runner.invoke(
                app,
                [
                    "build",
                    "aar",
                    "--platforms-dir",
                    str(platforms_dir),
                    "--temp-dir",
                    str(isolated_config / "staging"),
                    "--plugin-name",
                    "nativescript-camera",
                    "--output",
                    str(output_dir),
                    "--android-home",
                    str(fake_sdk),
                    "--gradle",
                    "/opt/gradle/bin/gradle",
                ],
            )
        assert result.exit_code == 0, result.output
        assert (output_dir / "nativescript_camera.aar").read_bytes() == b"aar"
        assert FakeGradleRunner.instances[0].build_config.gradle_command == "/opt/gradle/bin/gradle"
        assert "Built" in result.output

    def test_build_aar_nothing_to_build(
        self, cli_runner, isolated_config: Path, fake_sdk: Path
    ) -> None:
        empty = isolated_config / "platforms" / "android"
        empty.mkdir(parents=True)
        result = cli_runner.invoke(
            app,
            [
                "build",
                "aar",
                "-d",
                str(empty),
                "-t",
                str(isolated_config / "staging"),
                "--android-home",
                str(fake_sdk),
            ],
        )
        assert result.exit_code == 0
        assert "Nothing to build" in result.output

    def test_build_aar_tools_error(
        self, cli_runner, isolated_config: Path, platforms_dir: Path
    ) -> None:
        result = cli_runner.invoke(
            app,
            [
                "build",
                "aar",
                "-d",
                str(platforms_dir),
                "-t",
                str(isolated_config / "staging"),
                "--android-home",
                str(isolated_config / "no-sdk"),
            ],
        )
        assert result.exit_code == 3
        assert "does not exist" in result.output

    def test_build_aar_requires_temp_dir(
        self, cli_runner, isolated_config: Path, platforms_dir: Path
    ) -> None:
        result = cli_runner.invoke(app, ["build", "aar", "-d", str(platforms_dir)])
        assert result.exit_code == 2

    def test_migrate(self, cli_runner, isolated_config: Path, platforms_dir: Path) -> None:
        result = cli_runner.invoke(app, ["build", "migrate", "-d", str(platforms_dir)])
        assert result.exit_code == 0
        assert "productFlavors" not in (platforms_dir / "include.gradle").read_text()

    def test_migrate_without_include_gradle(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["build", "migrate", "-d", str(isolated_config)])
        assert result.exit_code == 0
        assert "No include.gradle" in result.output


class TestConfigCommands:
    def test_show_json(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["build"]["gradle_command"] == "gradle"

    def test_show_includes_project_config(self, cli_runner, isolated_config: Path) -> None:
        (isolated_config / "aarkit.json").write_text('{"build": {"gradle_command": "gw"}}')
        result = cli_runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert json.loads(result.stdout)["build"]["gradle_command"] == "gw"

    def test_set_int(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "tools.compile_sdk_version", "30"])
        assert result.exit_code == 0
        assert load_global_config().tools.compile_sdk_version == 30

    def test_set_string(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["config", "set", "build.gradle_command", "/opt/gradle"])
        assert load_global_config().build.gradle_command == "/opt/gradle"

    def test_set_bool(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["config", "set", "build.clean", "true"])
        assert load_global_config().build.clean is True

    def test_set_list(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["config", "set", "build.ignore", "*.iml, build/"])
        assert load_global_config().build.ignore == ["*.iml", "build/"]

    def test_set_unknown_key(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "build.nope", "x"])
        assert result.exit_code == 2

    def test_set_bad_int(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "build.timeout_seconds", "soon"])
        assert result.exit_code == 2

    def test_reset_force(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["config", "set", "build.clean", "true"])
        result = cli_runner.invoke(app, ["config", "reset", "--force"])
        assert result.exit_code == 0
        assert load_global_config().build.clean is False

    def test_reset_cancelled(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["config", "set", "build.clean", "true"])
        result = cli_runner.invoke(app, ["config", "reset"], input="n\n")
        assert "Cancelled." in result.output
        assert load_global_config().build.clean is True
