"""
Plugin Hook Constants

Centralised list of hook names that plugins and host callbacks can subscribe to.
Hook names follow the `category.action` convention.
"""

from __future__ import annotations

# ── Admin hooks ───────────────────────────────────────────────────────────────
HOOK_ADMIN_NOTICES = "admin.notices"

# ── Plugin lifecycle ──────────────────────────────────────────────────────────
HOOK_PLUGINS_LOADED = "plugins.loaded"
HOOK_PLUGIN_DEACTIVATED = "plugin.deactivated"

# ── Master list ───────────────────────────────────────────────────────────────
ALL_HOOKS: list[str] = [
    HOOK_ADMIN_NOTICES,
    HOOK_PLUGINS_LOADED,
    HOOK_PLUGIN_DEACTIVATED,
]
