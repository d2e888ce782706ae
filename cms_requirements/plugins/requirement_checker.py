"""
Plugin Requirement Checker

RequirementChecker accumulates the requirements a plugin declares (minimum
Python and host versions, sibling plugins, Python modules, runtime settings)
and evaluates them against an EnvironmentQuery on demand.

Evaluation never raises. Every unmet requirement becomes a notice so all
failures are reported together, in a fixed order: Python version, host
version, plugins, modules, settings. Within a category notices follow
registration order.

Typical bootstrap:

    checker = RequirementChecker("seo", "SEO Tools", "seo", "3.10", "1.0.0")
    checker.add_plugin_require("analytics", "Analytics").add_module_require("lxml")
    if not checker.are_requirements_met():
        checker.disable_plugin_render_notice(plugin_registry)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from cms_requirements.config import settings
from cms_requirements.plugins.environment import EnvironmentQuery, RuntimeEnvironment
from cms_requirements.plugins.hooks import HOOK_ADMIN_NOTICES
from cms_requirements.plugins.notices import (
    HOST_VERSION_NOTICE,
    MODULE_NOTICE,
    PLUGIN_NOTICE,
    PYTHON_VERSION_NOTICE,
    SETTING_NOTICE,
    render_notice_html,
    translate,
)
from cms_requirements.plugins.versions import is_version_at_least

if TYPE_CHECKING:
    from cms_requirements.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)

PluginName = str | Callable[[], str]


class RequirementChecker:
    """
    Checks that the host environment satisfies a plugin's requirements.

    Args:
        plugin_file:    Reference the host uses to deactivate the plugin.
        plugin_name:    Display name, or a zero-argument callable resolving it
                        (resolved on first use).
        text_domain:    Translation catalog used for notice wording.
        python_version: Minimum Python version.
        host_version:   Minimum host application version. None skips the check.
        environment:    Environment queries; defaults to RuntimeEnvironment().
        host_name:      Host application name used in notices.
    """

    def __init__(
        self,
        plugin_file: str,
        plugin_name: PluginName,
        text_domain: str,
        python_version: str,
        host_version: str | None = None,
        environment: EnvironmentQuery | None = None,
        host_name: str | None = None,
    ) -> None:
        self._plugin_file = plugin_file
        self._plugin_name = plugin_name
        self._text_domain = text_domain
        self._environment = environment if environment is not None else RuntimeEnvironment()
        self._host_name = host_name or settings.host_name
        self._registry: PluginRegistry | None = None

        self.set_min_python_require(python_version)
        self.set_min_host_require(host_version)

        self._plugin_require: dict[str, str] = {}
        self._module_require: dict[str, str] = {}
        self._setting_require: dict[str, Any] = {}
        self._notices: list[str] = []

    # ── Identity ──────────────────────────────────────────────────────────────

    @property
    def plugin_file(self) -> str:
        return self._plugin_file

    @property
    def plugin_name(self) -> str:
        if callable(self._plugin_name):
            self._plugin_name = self._plugin_name()
        return self._plugin_name

    def get_text_domain(self) -> str:
        return self._text_domain

    @property
    def min_python_version(self) -> str:
        return self._min_python_version

    @property
    def min_host_version(self) -> str | None:
        return self._min_host_version

    # ── Registration ──────────────────────────────────────────────────────────

    def set_min_python_require(self, version: str) -> RequirementChecker:
        self._min_python_version = version
        return self

    def set_min_host_require(self, version: str | None) -> RequirementChecker:
        self._min_host_version = version
        return self

    def add_plugin_require(self, plugin_id: str, nice_name: str | None = None) -> RequirementChecker:
        """Require a sibling plugin to be active. ``nice_name`` is shown in notices."""
        self._plugin_require[plugin_id] = plugin_id if nice_name is None else nice_name
        return self

    def add_module_require(self, module_name: str, nice_name: str | None = None) -> RequirementChecker:
        """Require a Python module to be available. ``nice_name`` is shown in notices."""
        self._module_require[module_name] = module_name if nice_name is None else nice_name
        return self

    def add_setting_require(self, setting: str, value: Any) -> RequirementChecker:
        """Require a runtime setting to equal ``value`` (compared as strings)."""
        self._setting_require[setting] = value
        return self

    # ── Evaluation ────────────────────────────────────────────────────────────

    def are_requirements_met(self) -> bool:
        """Run every check, store the resulting notices and return True if there are none."""
        self._notices = self._prepare_requirement_notices()
        if self._notices:
            logger.info("Plugin %s has %d unmet requirement(s)", self.plugin_name, len(self._notices))
        return len(self._notices) == 0

    def get_notices(self) -> list[str]:
        """Notices from the last call to are_requirements_met()."""
        return list(self._notices)

    def render_notices(self) -> list[str]:
        return [render_notice_html(notice) for notice in self._notices]

    def _prepare_requirement_notices(self) -> list[str]:
        env = self._environment
        notices: list[str] = []
        if not is_version_at_least(env.python_version, self._min_python_version):
            notices.append(self._format(PYTHON_VERSION_NOTICE, version=self._min_python_version))
        if self._min_host_version is not None and not is_version_at_least(
            env.host_version, self._min_host_version
        ):
            notices.append(
                self._format(HOST_VERSION_NOTICE, host=self._host_name, version=self._min_host_version)
            )
        notices.extend(self._plugin_require_notices())
        notices.extend(self._module_require_notices())
        notices.extend(self._setting_require_notices())
        return notices

    def _plugin_require_notices(self) -> list[str]:
        return [
            self._format(PLUGIN_NOTICE, name=nice_name)
            for plugin_id, nice_name in self._plugin_require.items()
            if not self._environment.is_plugin_active(plugin_id)
        ]

    def _module_require_notices(self) -> list[str]:
        return [
            self._format(MODULE_NOTICE, name=nice_name)
            for module_name, nice_name in self._module_require.items()
            if not self._environment.is_module_loaded(module_name)
        ]

    def _setting_require_notices(self) -> list[str]:
        return [
            self._format(SETTING_NOTICE, setting=setting, value=value)
            for setting, value in self._setting_require.items()
            if not self._environment.is_setting_equal(setting, str(value))
        ]

    def _format(self, template: str, **params: Any) -> str:
        return translate(template, self._text_domain).format(plugin=self.plugin_name, **params)

    # ── Host integration ──────────────────────────────────────────────────────

    def disable_plugin_render_notice(self, registry: PluginRegistry) -> None:
        """
        Queue deactivation and notice rendering on the host's admin notices hook.

        Nothing happens until the host fires HOOK_ADMIN_NOTICES.
        """
        self._registry = registry
        registry.add_action(HOOK_ADMIN_NOTICES, self.deactivate_action)
        registry.add_action(HOOK_ADMIN_NOTICES, self.render_notices_action)

    def render_notices_action(self, payload: dict[str, Any] | None = None) -> list[str]:
        """Admin notices callback: return the rendered notices."""
        return self.render_notices()

    def deactivate_action(self, payload: dict[str, Any] | None = None) -> None:
        """Admin notices callback: ask the host to deactivate this plugin."""
        if self._plugin_file and self._registry is not None:
            self._registry.deactivate(self._plugin_file)
