"""
Plugin Registry

PluginRegistry: in-process registry that stores active plugins, the outcome
of their requirement checks, and dispatches hook events to subscribers.

Hooks are fire-and-forget: plugin subscribers are awaited first, then action
callbacks, in registration order. Exceptions are caught, logged, and
execution continues.
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cms_requirements.plugins.loader import load_plugins_config, save_plugins_config

if TYPE_CHECKING:
    from cms_requirements.plugins.base import PluginBase

logger = logging.getLogger(__name__)

Action = Callable[[dict[str, Any]], Any]


@dataclass
class RequirementStatus:
    """Outcome of the last requirement check for one plugin."""

    name: str
    met: bool
    notices: list[str] = field(default_factory=list)


class PluginRegistry:
    """
    In-process registry for CMS plugins.

    Stores registered plugins by name and maintains an index of hook
    subscriptions for efficient dispatch.
    """

    def __init__(self) -> None:
        self._plugins: dict[str, PluginBase] = {}
        self._hook_subscriptions: dict[str, list[PluginBase]] = defaultdict(list)
        self._actions: dict[str, list[Action]] = defaultdict(list)
        self._requirement_status: dict[str, RequirementStatus] = {}
        self._deactivated: list[str] = []
        self._admin_notices: list[str] = []

    # ── Registration ──────────────────────────────────────────────────────────

    def register(self, plugin: PluginBase) -> None:
        """Register a plugin and index its hook subscriptions."""
        self._plugins[plugin.meta.name] = plugin
        for hook in plugin.meta.hooks:
            self._hook_subscriptions[hook].append(plugin)
        logger.info("Plugin registered: %s v%s", plugin.meta.name, plugin.meta.version)

    def add_action(self, hook_name: str, callback: Action) -> None:
        """Subscribe a plain callable to a hook. Coroutine functions are awaited."""
        self._actions[hook_name].append(callback)

    def clear_actions(self, hook_name: str) -> None:
        """Drop every callback subscribed to a hook."""
        self._actions.pop(hook_name, None)

    def deactivate(self, name: str) -> bool:
        """
        Deactivate a plugin: drop it from the registry and persist enabled=False.

        Safe to call for plugins that were never registered (e.g. ones whose
        requirements failed before loading). Returns True if the persisted
        state changed.
        """
        plugin = self._plugins.pop(name, None)
        if plugin is not None:
            for subscribers in self._hook_subscriptions.values():
                if plugin in subscribers:
                    subscribers.remove(plugin)

        all_config = load_plugins_config()
        plugin_config = all_config.get(name, {})
        if plugin_config.get("enabled", True) is False:
            return False
        plugin_config["enabled"] = False
        all_config[name] = plugin_config
        save_plugins_config(all_config)
        if name not in self._deactivated:
            self._deactivated.append(name)
        logger.warning("Plugin deactivated: %s", name)
        return True

    # ── Lookup ────────────────────────────────────────────────────────────────

    def get(self, name: str) -> PluginBase | None:
        """Return the plugin with the given name, or None if not registered."""
        return self._plugins.get(name)

    def all_plugins(self) -> list[PluginBase]:
        """Return all registered plugins in registration order."""
        return list(self._plugins.values())

    def is_registered(self, name: str) -> bool:
        """Return True if a plugin with the given name has been registered."""
        return name in self._plugins

    def deactivated_plugins(self) -> list[str]:
        """Names deactivated through this registry, in order."""
        return list(self._deactivated)

    # ── Requirement status ────────────────────────────────────────────────────

    def record_requirements(self, name: str, met: bool, notices: list[str]) -> None:
        self._requirement_status[name] = RequirementStatus(name=name, met=met, notices=list(notices))

    def requirement_status(self, name: str) -> RequirementStatus | None:
        return self._requirement_status.get(name)

    def all_requirement_statuses(self) -> list[RequirementStatus]:
        return list(self._requirement_status.values())

    def add_admin_notices(self, notices: list[str]) -> None:
        self._admin_notices.extend(notices)

    def admin_notices(self) -> list[str]:
        return list(self._admin_notices)

    # ── Hook dispatch ─────────────────────────────────────────────────────────

    async def fire_hook(self, hook_name: str, payload: dict[str, Any]) -> list[Any]:
        """
        Fire a hook to all subscribing plugins and action callbacks.

        A misbehaving subscriber never prevents others from running.

        Args:
            hook_name: Hook constant from cms_requirements.plugins.hooks.
            payload:   Arbitrary data passed to each subscriber.

        Returns:
            List of return values from each subscriber (None for no-ops).
        """
        results: list[Any] = []
        for plugin in list(self._hook_subscriptions.get(hook_name, [])):
            try:
                result = await plugin.handle_hook(hook_name, payload)
                results.append(result)
            except Exception as exc:
                logger.warning(
                    "Plugin %s hook %s raised: %s",
                    plugin.meta.name,
                    hook_name,
                    exc,
                )
        for callback in list(self._actions.get(hook_name, [])):
            try:
                result = callback(payload)
                if inspect.isawaitable(result):
                    result = await result
                results.append(result)
            except Exception as exc:
                logger.warning("Action %r on hook %s raised: %s", callback, hook_name, exc)
        return results


# ── Global singleton ──────────────────────────────────────────────────────────
# Import this wherever you need to fire hooks or inspect registered plugins.
plugin_registry = PluginRegistry()
