"""Derive file-system and package names from a plugin's npm-style name."""

from __future__ import annotations

DEFAULT_PLUGIN_NAME = "myPlugin"


def sanitize_plugin_name(plugin_name: str) -> str:
    """Drop ``@`` and turn ``/`` into ``_`` (``@scope/pkg`` -> ``scope_pkg``)."""
    return plugin_name.replace("@", "").replace("/", "_")


def get_short_plugin_name(plugin_name: str) -> str:
    """Return a name usable as a Gradle project and Java package segment.

    Example::

        >>> get_short_plugin_name("@nativescript/camera-plus")
        'nativescript_camera_plus'
    """
    return sanitize_plugin_name(plugin_name).replace("-", "_")


def default_package_name(short_plugin_name: str, prefix: str = "org.nativescript.") -> str:
    """Return the manifest package used when the plugin does not declare one."""
    return f"{prefix}{short_plugin_name}"
