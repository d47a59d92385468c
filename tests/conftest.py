"""Shared test fixtures for aarkit.

Provides isolated config environments, a fake Android SDK tree, a sample
plugin ``platforms/android`` directory, output managers, and a CLI runner.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from aarkit.output import OutputFormat, OutputManager, reset_output, set_output

SAMPLE_MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android">
    <uses-permission android:name="android.permission.CAMERA"/>
    <uses-permission android:name="android.permission.INTERNET"/>
    <application android:label="Camera"/>
</manifest>
"""

SAMPLE_INCLUDE_GRADLE = """android {
    productFlavors {
        "nativescript-camera" {
            dimension "nativescript-camera"
        }
    }
}

repositories {
    jcenter()
}

dependencies {
    implementation "com.android.support:exifinterface:28.0.0"
}
"""


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams, the
    cached references go stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration and SDK discovery to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME below tmp_path, clears the
    AARKIT_* and Android SDK environment variables, and changes the
    working directory to tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("aarkit.config._is_xdg_platform", lambda: True)

    for var in [
        "AARKIT_GRADLE",
        "AARKIT_PACKAGE_PREFIX",
        "ANDROID_HOME",
        "ANDROID_SDK_ROOT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Android fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_sdk(tmp_path: Path) -> Path:
    """Create a minimal SDK tree with two platforms and two build-tools versions."""
    sdk = tmp_path / "sdk"
    for name in ["android-28", "android-30"]:
        (sdk / "platforms" / name).mkdir(parents=True)
    for version in ["29.0.2", "30.0.3"]:
        (sdk / "build-tools" / version).mkdir(parents=True)
    return sdk


@pytest.fixture
def platforms_dir(tmp_path: Path) -> Path:
    """Create a plugin ``platforms/android`` directory with typical contents."""
    root = tmp_path / "plugin" / "platforms" / "android"
    (root / "res" / "values").mkdir(parents=True)
    (root / "res" / "values" / "strings.xml").write_text(
        '<resources><string name="app">Camera</string></resources>\n'
    )
    (root / "res" / ".DS_Store").write_text("junk")
    (root / "AndroidManifest.xml").write_text(SAMPLE_MANIFEST)
    (root / "include.gradle").write_text(SAMPLE_INCLUDE_GRADLE)
    return root


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
