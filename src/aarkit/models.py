"""Canonical Pydantic models shared across all aarkit modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory
or in a project-local ``aarkit.json``:
    :class:`ToolsConfig`, :class:`BuildConfig`, :class:`OutputConfig`,
    :class:`PluginsConfig`, and :class:`GlobalConfig`.

**Core value models** -- produced and consumed by the manifest merger and
the scope extractor:
    :class:`ManifestNode` and :class:`ScopeSpan`.

**Build models** -- passed between the build service, the tools resolver
and the Gradle runner:
    :class:`BuildOptions`, :class:`AndroidToolsInfo`, and
    :class:`PluginBuildSettings`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field


# --- Configuration ---


class ToolsConfig(BaseModel):
    """Android SDK settings used to parameterise the Gradle build.

    Every field is optional; unset values are detected from the SDK
    installation by :func:`~aarkit.gradle.tools.resolve_tools_info`.
    """

    android_home: Optional[str] = Field(
        default=None, description="Android SDK root (falls back to ANDROID_HOME)"
    )
    compile_sdk_version: Optional[int] = Field(
        default=None, description="API level passed as -PcompileSdk=android-<N>"
    )
    build_tools_version: Optional[str] = Field(
        default=None, description="Build tools version passed as -PbuildToolsVersion"
    )
    support_repository_version: str = Field(
        default="28.0.0", description="Support library version passed as -PsupportVersion"
    )


class BuildConfig(BaseModel):
    """Settings for staging the library project and running Gradle."""

    gradle_command: str = Field(
        default="gradle",
        description="Gradle executable used when the staged project has no wrapper",
    )
    timeout_seconds: int = Field(default=600, description="Gradle run timeout")
    extra_args: list[str] = Field(
        default_factory=list, description="Extra arguments appended to the Gradle call"
    )
    package_prefix: str = Field(
        default="org.nativescript.",
        description="Prefix for the default manifest package identifier",
    )
    ignore: list[str] = Field(
        default_factory=lambda: [".DS_Store", "Thumbs.db", "*.iml", ".gradle/", "build/"],
        description="gitignore-style patterns skipped when copying source sets",
    )
    clean: bool = Field(
        default=False, description="Remove the staged project after a successful build"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class PluginsConfig(BaseModel):
    """Explicit plugin allow/deny lists stored in :class:`GlobalConfig`."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/aarkit/config.json``.

    Loaded and saved by :func:`~aarkit.config.load_global_config` and
    :func:`~aarkit.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~aarkit.config.resolve_config`
    for the full precedence chain.
    """

    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)


# --- Core values ---


class ManifestNode(BaseModel):
    """One element of an Android manifest tree.

    Attribute and child containers are always present, so callers never
    have to create them before writing. Names are kept in prefixed form
    (``android:name``, ``xmlns:android``) exactly as they appear in the
    markup.

    A child name maps to a single node, or to a list of nodes when the
    element is repeated (``uses-permission`` typically is). Order inside a
    list is document order; order between distinct names carries no
    meaning.

    Example::

        ManifestNode(
            name="manifest",
            attributes={"package": "org.example.camera"},
            children={"uses-permission": [
                ManifestNode(name="uses-permission",
                             attributes={"android:name": "android.permission.CAMERA"}),
            ]},
        )
    """

    name: str
    attributes: dict[str, str] = Field(default_factory=dict)
    children: dict[str, Union[ManifestNode, list[ManifestNode]]] = Field(
        default_factory=dict
    )
    text: Optional[str] = None

    def iter_children(self) -> list[ManifestNode]:
        """Return all direct children, lists flattened, in stored order."""
        result: list[ManifestNode] = []
        for value in self.children.values():
            if isinstance(value, list):
                result.extend(value)
            else:
                result.append(value)
        return result

    def add_child(self, child: ManifestNode) -> None:
        """Append *child*, promoting an existing single entry to a list."""
        existing = self.children.get(child.name)
        if existing is None:
            self.children[child.name] = child
        elif isinstance(existing, list):
            existing.append(child)
        else:
            self.children[child.name] = [existing, child]


class ScopeSpan(BaseModel):
    """A brace-balanced block located in build-script text.

    ``start_offset`` is where the scope name was found and ``end_offset``
    is one past the closing brace, so ``source[start_offset:end_offset]``
    is the block verbatim. ``text`` holds that slice.
    """

    scope_name: str
    start_offset: int
    end_offset: int
    text: str


# --- Build ---


class BuildOptions(BaseModel):
    """Inputs for :meth:`~aarkit.builder.service.AndroidPluginBuildService.build_aar`.

    Attributes:
        plugin_name: Package name of the plugin, e.g. ``nativescript-camera``
            or ``@scope/camera``. Defaults to ``myPlugin`` when omitted.
        platforms_android_dir: The plugin's ``platforms/android`` directory.
        aar_output_dir: Where the finished ``<short-name>.aar`` is copied.
            When omitted the artifact stays in Gradle's outputs directory.
        temp_plugin_dir: Directory in which the library project is staged.
    """

    plugin_name: Optional[str] = None
    platforms_android_dir: Optional[Path] = None
    aar_output_dir: Optional[Path] = None
    temp_plugin_dir: Optional[Path] = None


class AndroidToolsInfo(BaseModel):
    """Resolved Android SDK details handed to the Gradle runner."""

    android_home: Optional[Path] = None
    compile_sdk_version: Optional[int] = None
    build_tools_version: Optional[str] = None
    support_repository_version: str = "28.0.0"


class PluginBuildSettings(BaseModel):
    """Everything the Gradle runner needs to build one staged plugin."""

    plugin_dir: Path
    plugin_name: str
    android_tools_info: AndroidToolsInfo


ManifestNode.model_rebuild()
