"""
Plugin Loader

Handles reading/writing plugin state from the plugins config file and
initialising plugins at application startup. A plugin is only loaded once its
requirement checker passes; otherwise its notices are recorded and it is
queued for deactivation on the admin notices hook.
"""

from __future__ import annotations

import importlib
import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from cms_requirements.config import settings
from cms_requirements.exceptions import PluginConfigError
from cms_requirements.plugins.environment import RuntimeEnvironment
from cms_requirements.plugins.hooks import HOOK_ADMIN_NOTICES, HOOK_PLUGIN_DEACTIVATED, HOOK_PLUGINS_LOADED

if TYPE_CHECKING:
    from cms_requirements.plugins.base import PluginBase
    from cms_requirements.plugins.environment import EnvironmentQuery
    from cms_requirements.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)

# ── Config file location ──────────────────────────────────────────────────────
_PLUGINS_CONFIG_FILE = Path(settings.plugins_config_file)


# ── Config I/O ────────────────────────────────────────────────────────────────


def load_plugins_config() -> dict[str, dict[str, Any]]:
    """
    Load plugin configuration from disk.

    Returns an empty config (every plugin enabled) if the file does not exist
    or cannot be parsed.
    """
    if _PLUGINS_CONFIG_FILE.exists():
        try:
            return json.loads(_PLUGINS_CONFIG_FILE.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Failed to read plugins config: %s", exc)
    return {}


def save_plugins_config(config: dict[str, dict[str, Any]]) -> None:
    """Persist plugin configuration to disk."""
    try:
        _PLUGINS_CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        _PLUGINS_CONFIG_FILE.write_text(
            json.dumps(config, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
    except OSError as exc:
        raise PluginConfigError(f"Failed to write plugins config: {exc}", path=str(_PLUGINS_CONFIG_FILE)) from exc


def is_plugin_enabled(config: dict[str, dict[str, Any]], name: str) -> bool:
    return config.get(name, {}).get("enabled", True) is not False


def import_plugin_class(path: str) -> type[PluginBase] | None:
    """
    Resolve a "package.module:ClassName" path to a plugin class.

    Returns None (and logs) when the path is malformed or cannot be imported.
    """
    module_path, sep, attr_name = path.partition(":")
    if not sep or not module_path or not attr_name:
        logger.warning("Invalid plugin path %r, expected \"module:Class\"", path)
        return None
    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        logger.warning("Cannot import plugin module %s: %s", module_path, exc)
        return None
    plugin_class = getattr(module, attr_name, None)
    if plugin_class is None:
        logger.warning("Plugin module %s has no attribute %s", module_path, attr_name)
    return plugin_class


def configured_plugin_classes() -> list[type[PluginBase]]:
    """Plugin classes named in settings.plugins, skipping any that fail to import."""
    classes = (import_plugin_class(path) for path in settings.plugins)
    return [cls for cls in classes if cls is not None]


# ── Startup initialisation ────────────────────────────────────────────────────


async def initialize_plugins(
    registry: PluginRegistry,
    plugin_classes: Iterable[type[PluginBase]],
    environment: EnvironmentQuery | None = None,
) -> list[str]:
    """
    Check requirements and load every enabled plugin.

    Plugins whose requirements fail are not loaded; their notices are
    recorded on the registry and the admin notices hook is fired once so the
    queued deactivation and rendering callbacks run.

    Returns:
        Names of the plugins that were loaded.
    """
    config = load_plugins_config()
    plugins = [plugin_class() for plugin_class in plugin_classes]
    enabled = [plugin for plugin in plugins if is_plugin_enabled(config, plugin.meta.name)]
    for plugin in plugins:
        if plugin not in enabled:
            logger.info("Plugin %s is disabled, skipping", plugin.meta.name)

    if environment is None:
        enabled_names = [plugin.meta.name for plugin in enabled]
        environment = RuntimeEnvironment(
            active_plugins=lambda: enabled_names,
            network_active_plugins=lambda: settings.network_active_plugins,
        )

    already_deactivated = len(registry.deactivated_plugins())
    loaded: list[str] = []
    for plugin in enabled:
        name = plugin.meta.name

        checker = plugin.build_requirement_checker(environment)
        met = checker.are_requirements_met()
        registry.record_requirements(name, met, checker.get_notices())
        if not met:
            for notice in checker.get_notices():
                logger.warning("Plugin %s: %s", name, notice)
            checker.disable_plugin_render_notice(registry)
            continue

        await plugin.on_load(config.get(name, {}))
        registry.register(plugin)
        loaded.append(name)

    results = await registry.fire_hook(HOOK_ADMIN_NOTICES, {})
    # Queued checker callbacks belong to this run only
    registry.clear_actions(HOOK_ADMIN_NOTICES)
    for result in results:
        if isinstance(result, list):
            registry.add_admin_notices(result)

    for name in registry.deactivated_plugins()[already_deactivated:]:
        await registry.fire_hook(HOOK_PLUGIN_DEACTIVATED, {"plugin": name})
    await registry.fire_hook(HOOK_PLUGINS_LOADED, {"plugins": loaded})

    logger.info("Plugin initialisation complete: %d plugins loaded", len(loaded))
    return loaded
