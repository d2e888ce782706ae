"""
Plugin Base Classes

PluginMeta: declarative metadata for a plugin (name, version, hooks, requirements).
PluginBase: abstract base class all plugins must subclass.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cms_requirements.config import settings
from cms_requirements.plugins.requirement_checker import RequirementChecker

if TYPE_CHECKING:
    from cms_requirements.plugins.environment import EnvironmentQuery


@dataclass
class PluginMeta:
    """
    Declarative metadata describing a plugin.

    Attributes:
        name:              Machine-readable slug, e.g. "seo", "analytics".
        version:           Version string, e.g. "1.0.0".
        description:       Human-readable description shown in admin UI.
        author:            Plugin author (defaults to "CMS Core Team").
        title:             Display name used in notices (defaults to name).
        text_domain:       Translation catalog for the plugin's notices.
        hooks:             List of hook names this plugin subscribes to.
        requires_python:   Minimum Python version (defaults to the host baseline).
        requires_host:     Minimum host version, or None for no host check.
        requires_plugins:  Sibling plugin id -> display name.
        requires_modules:  Python module name -> display name.
        requires_settings: Runtime setting name -> expected value.
    """

    name: str
    version: str
    description: str
    author: str = "CMS Core Team"
    title: str | None = None
    text_domain: str | None = None
    hooks: list[str] = field(default_factory=list)
    requires_python: str | None = None
    requires_host: str | None = None
    requires_plugins: dict[str, str] = field(default_factory=dict)
    requires_modules: dict[str, str] = field(default_factory=dict)
    requires_settings: dict[str, Any] = field(default_factory=dict)


class PluginBase(ABC):
    """
    Abstract base class for all CMS plugins.

    Subclasses must implement the `meta` property.
    All lifecycle methods have default no-op implementations so subclasses only
    override what they need.
    """

    @property
    @abstractmethod
    def meta(self) -> PluginMeta:
        """Return the plugin's metadata."""
        ...

    def build_requirement_checker(self, environment: EnvironmentQuery | None = None) -> RequirementChecker:
        """
        Build a RequirementChecker from the requirements declared in `meta`.

        Override to add requirements that cannot be expressed declaratively;
        call super() and keep chaining on the returned checker.
        """
        meta = self.meta
        checker = RequirementChecker(
            plugin_file=meta.name,
            plugin_name=lambda: meta.title or meta.name,
            text_domain=meta.text_domain or settings.default_text_domain,
            python_version=meta.requires_python or settings.default_min_python_version,
            host_version=meta.requires_host,
            environment=environment,
        )
        for plugin_id, nice_name in meta.requires_plugins.items():
            checker.add_plugin_require(plugin_id, nice_name)
        for module_name, nice_name in meta.requires_modules.items():
            checker.add_module_require(module_name, nice_name)
        for setting, value in meta.requires_settings.items():
            checker.add_setting_require(setting, value)
        return checker

    async def on_load(self, config: dict[str, Any]) -> None:  # noqa: B027
        """
        Called once at startup, after requirements pass, with the plugin's
        persisted config dict.
        """

    async def on_unload(self) -> None:  # noqa: B027
        """
        Called when the plugin is deactivated at runtime or the app shuts down.

        Override to release resources (e.g. cancel tasks, close connections).
        """

    async def handle_hook(self, hook_name: str, payload: dict[str, Any]) -> Any:
        """
        Receive and process a hook event.

        Called by PluginRegistry.fire_hook() for each hook the plugin
        declared in PluginMeta.hooks.  Default implementation is a no-op.

        Returns:
            Any value (ignored by fire_hook unless needed by caller).
        """
        return None
