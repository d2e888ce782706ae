"""
Environment Queries

The requirement checker never inspects process state directly. It asks an
EnvironmentQuery for the running Python and host versions, whether a sibling
plugin is active, whether a Python module is available, and whether a runtime
setting holds an expected value.

RuntimeEnvironment is the default implementation used by the host.
"""

from __future__ import annotations

import importlib.util
import logging
import os
import sys
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from cms_requirements.config import settings

logger = logging.getLogger(__name__)

ActivePlugins = Callable[[], Iterable[str] | Mapping[str, Any]]


@runtime_checkable
class EnvironmentQuery(Protocol):
    """Everything a RequirementChecker needs to know about its host."""

    @property
    def python_version(self) -> str: ...

    @property
    def host_version(self) -> str: ...

    def is_plugin_active(self, plugin_id: str) -> bool: ...

    def is_module_loaded(self, module_name: str) -> bool: ...

    def is_setting_equal(self, name: str, expected: str) -> bool: ...


def _no_plugins() -> list[str]:
    return []


class RuntimeEnvironment:
    """
    Environment backed by the running interpreter and host state.

    Active plugin collections are supplied as callables so they are read at
    query time rather than captured at construction. The network-wide
    collection is consulted only when the host runs in multisite mode; it may
    be a list of plugin ids or a mapping keyed by plugin id.
    """

    def __init__(
        self,
        host_version: str | None = None,
        active_plugins: ActivePlugins = _no_plugins,
        network_active_plugins: ActivePlugins = _no_plugins,
        multisite: bool | None = None,
        settings_source: Mapping[str, Any] | None = None,
    ) -> None:
        self._host_version = host_version
        self._active_plugins = active_plugins
        self._network_active_plugins = network_active_plugins
        self._multisite = settings.multisite if multisite is None else multisite
        self._settings_source = settings_source

    @property
    def python_version(self) -> str:
        return "%d.%d.%d" % sys.version_info[:3]

    @property
    def host_version(self) -> str:
        return self._host_version if self._host_version is not None else settings.app_version

    @property
    def multisite(self) -> bool:
        return self._multisite

    def is_plugin_active(self, plugin_id: str) -> bool:
        """Return True if the plugin is active on this site or network-wide."""
        active = list(self._active_plugins())
        if self._multisite:
            # Mappings iterate over their keys, which are the plugin ids
            active.extend(self._network_active_plugins())
        return plugin_id in active

    def is_module_loaded(self, module_name: str) -> bool:
        """Return True if the module is imported or importable."""
        if module_name in sys.modules:
            return True
        try:
            return importlib.util.find_spec(module_name) is not None
        except Exception as exc:
            # find_spec imports parent packages, which may raise anything
            logger.debug("Module lookup failed for %r: %s", module_name, exc)
            return False

    def is_setting_equal(self, name: str, expected: str) -> bool:
        """Compare the live setting value against ``expected`` as strings."""
        source = self._settings_source if self._settings_source is not None else os.environ
        if name not in source:
            return False
        return str(source[name]) == str(expected)
