"""
Plugin System Tests

All tests avoid a live server. Pure unit tests using fakes and a temp
plugins config file.

Test classes:
    TestPluginMeta      — PluginMeta dataclass + declared requirements
    TestPluginBase      — PluginBase abstract class + checker construction
    TestPluginRegistry  — PluginRegistry, actions, fire_hook, deactivation
    TestPluginLoader    — config I/O, plugin import, requirement-gated startup
    TestPluginHooks     — hook name constants + ALL_HOOKS
"""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
from unittest.mock import patch

import pytest

from utils.mocks import FakeEnvironment, make_plugin

# ══════════════════════════════════════════════════════════════════════════════
# 1. TestPluginMeta
# ══════════════════════════════════════════════════════════════════════════════


class TestPluginMeta:
    def test_pluginmeta_is_dataclass(self):
        from cms_requirements.plugins.base import PluginMeta

        assert dataclasses.is_dataclass(PluginMeta)

    def test_pluginmeta_requirement_fields(self):
        from cms_requirements.plugins.base import PluginMeta

        fields = {f.name for f in dataclasses.fields(PluginMeta)}
        assert {
            "requires_python",
            "requires_host",
            "requires_plugins",
            "requires_modules",
            "requires_settings",
        }.issubset(fields)

    def test_pluginmeta_defaults(self):
        from cms_requirements.plugins.base import PluginMeta

        m = PluginMeta(name="test", version="1.0.0", description="desc")
        assert m.author == "CMS Core Team"
        assert m.requires_python is None
        assert m.requires_host is None
        assert m.requires_plugins == {}

    def test_pluginmeta_mutable_defaults_isolated(self):
        """Each instance gets its own containers, no shared mutable default."""
        from cms_requirements.plugins.base import PluginMeta

        m1 = PluginMeta(name="a", version="1.0.0", description="d")
        m2 = PluginMeta(name="b", version="1.0.0", description="d")
        m1.hooks.append("x")
        m1.requires_modules["lxml"] = "lxml"
        assert "x" not in m2.hooks
        assert m2.requires_modules == {}


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestPluginBase
# ══════════════════════════════════════════════════════════════════════════════


class TestPluginBase:
    def test_pluginbase_is_abstract(self):
        from cms_requirements.plugins.base import PluginBase

        with pytest.raises(TypeError):
            PluginBase()  # type: ignore[abstract]

    def test_lifecycle_methods_are_coroutines(self):
        from cms_requirements.plugins.base import PluginBase

        assert inspect.iscoroutinefunction(PluginBase.on_load)
        assert inspect.iscoroutinefunction(PluginBase.on_unload)
        assert inspect.iscoroutinefunction(PluginBase.handle_hook)

    def test_default_handle_hook_returns_none(self):
        plugin = make_plugin("test")()

        assert asyncio.run(plugin.handle_hook("some.hook", {})) is None

    def test_build_requirement_checker_uses_declared_requirements(self):
        plugin = make_plugin(
            "seo",
            title="SEO Tools",
            requires_python="3.10",
            requires_host="2.0",
            requires_plugins={"analytics": "Analytics"},
            requires_modules={"lxml": "lxml"},
            requires_settings={"SITE_URL": "https://example.com"},
        )()
        env = FakeEnvironment(python_version="3.12.0", host_version="1.5")

        checker = plugin.build_requirement_checker(env)
        assert checker.are_requirements_met() is False
        notices = checker.get_notices()
        assert len(notices) == 4
        assert all("SEO Tools" in n for n in notices)
        assert checker.plugin_file == "seo"

    def test_build_requirement_checker_defaults(self):
        from cms_requirements.config import settings

        plugin = make_plugin("plain")()
        checker = plugin.build_requirement_checker(FakeEnvironment())

        assert checker.min_python_version == settings.default_min_python_version
        assert checker.min_host_version is None
        assert checker.get_text_domain() == settings.default_text_domain
        assert checker.plugin_name == "plain"

    def test_subclass_can_extend_checker(self):
        from cms_requirements.plugins.base import PluginBase, PluginMeta

        class ExtendedPlugin(PluginBase):
            @property
            def meta(self) -> PluginMeta:
                return PluginMeta(name="ext", version="1.0.0", description="d")

            def build_requirement_checker(self, environment=None):
                return super().build_requirement_checker(environment).add_module_require("yaml", "PyYAML")

        checker = ExtendedPlugin().build_requirement_checker(FakeEnvironment())
        assert checker.are_requirements_met() is False
        assert "PyYAML" in checker.get_notices()[0]


# ══════════════════════════════════════════════════════════════════════════════
# 3. TestPluginRegistry
# ══════════════════════════════════════════════════════════════════════════════


class TestPluginRegistry:
    def test_plugin_registry_singleton_importable(self):
        from cms_requirements.plugins.registry import PluginRegistry, plugin_registry

        assert isinstance(plugin_registry, PluginRegistry)

    def test_register_makes_plugin_visible(self):
        from cms_requirements.plugins.registry import PluginRegistry

        reg = PluginRegistry()
        p = make_plugin("foo")()
        reg.register(p)
        assert reg.is_registered("foo")
        assert reg.get("foo") is p
        assert p in reg.all_plugins()

    def test_get_returns_none_for_unknown(self):
        from cms_requirements.plugins.registry import PluginRegistry

        assert PluginRegistry().get("nonexistent") is None

    def test_fire_hook_calls_plugins_then_actions(self):
        from cms_requirements.plugins.base import PluginBase, PluginMeta
        from cms_requirements.plugins.registry import PluginRegistry

        called = []

        class HookPlugin(PluginBase):
            @property
            def meta(self) -> PluginMeta:
                return PluginMeta(name="hp", version="1.0.0", description="d", hooks=["test.hook"])

            async def handle_hook(self, hook_name, payload):
                called.append(("plugin", payload))
                return "plugin"

        def action(payload):
            called.append(("action", payload))
            return "action"

        reg = PluginRegistry()
        reg.add_action("test.hook", action)
        reg.register(HookPlugin())
        results = asyncio.run(reg.fire_hook("test.hook", {"key": "val"}))
        assert called == [("plugin", {"key": "val"}), ("action", {"key": "val"})]
        assert results == ["plugin", "action"]

    def test_async_actions_are_awaited(self):
        from cms_requirements.plugins.registry import PluginRegistry

        async def action(payload):
            return payload["n"] * 2

        reg = PluginRegistry()
        reg.add_action("test.hook", action)
        assert asyncio.run(reg.fire_hook("test.hook", {"n": 21})) == [42]

    def test_fire_hook_swallows_exceptions(self):
        from cms_requirements.plugins.registry import PluginRegistry

        def broken(payload):
            msg = "action exploded"
            raise RuntimeError(msg)

        reg = PluginRegistry()
        reg.add_action("test.hook", broken)
        reg.add_action("test.hook", lambda payload: "ok")
        # Should NOT raise; logs a warning and returns partial results
        assert asyncio.run(reg.fire_hook("test.hook", {})) == ["ok"]

    def test_fire_hook_empty_for_unregistered_hook(self):
        from cms_requirements.plugins.registry import PluginRegistry

        assert asyncio.run(PluginRegistry().fire_hook("no.subscribers", {})) == []

    def test_deactivate_registered_plugin(self):
        from cms_requirements.plugins import loader as loader_module
        from cms_requirements.plugins.registry import PluginRegistry

        reg = PluginRegistry()
        reg.register(make_plugin("foo", hooks=["test.hook"])())

        assert reg.deactivate("foo") is True
        assert not reg.is_registered("foo")
        assert reg.deactivated_plugins() == ["foo"]
        assert loader_module.load_plugins_config() == {"foo": {"enabled": False}}
        assert asyncio.run(reg.fire_hook("test.hook", {})) == []

    def test_deactivate_preserves_other_config(self):
        from cms_requirements.plugins import loader as loader_module
        from cms_requirements.plugins.registry import PluginRegistry

        loader_module.save_plugins_config({"foo": {"enabled": True, "limit": 5}, "bar": {"enabled": True}})
        PluginRegistry().deactivate("foo")

        cfg = loader_module.load_plugins_config()
        assert cfg["foo"] == {"enabled": False, "limit": 5}
        assert cfg["bar"] == {"enabled": True}

    def test_deactivate_twice_is_noop(self):
        from cms_requirements.plugins.registry import PluginRegistry

        reg = PluginRegistry()
        assert reg.deactivate("foo") is True
        assert reg.deactivate("foo") is False
        assert reg.deactivated_plugins() == ["foo"]

    def test_requirement_status_recorded(self):
        from cms_requirements.plugins.registry import PluginRegistry

        reg = PluginRegistry()
        reg.record_requirements("foo", False, ["missing bar"])

        status = reg.requirement_status("foo")
        assert status.met is False
        assert status.notices == ["missing bar"]
        assert reg.requirement_status("other") is None
        assert [s.name for s in reg.all_requirement_statuses()] == ["foo"]


# ══════════════════════════════════════════════════════════════════════════════
# 4. TestPluginLoader
# ══════════════════════════════════════════════════════════════════════════════


class TestPluginLoader:
    def test_load_plugins_config_empty_without_file(self):
        from cms_requirements.plugins import loader as loader_module

        assert loader_module.load_plugins_config() == {}

    def test_save_creates_parent_dirs(self, plugins_config_file):
        from cms_requirements.plugins import loader as loader_module

        loader_module.save_plugins_config({"test": {"enabled": True}})
        assert plugins_config_file.exists()

    def test_load_recovers_from_corrupt_json(self, plugins_config_file):
        """Malformed JSON in config file → returns defaults (no crash)."""
        from cms_requirements.plugins import loader as loader_module

        plugins_config_file.parent.mkdir(parents=True)
        plugins_config_file.write_text("{not valid json", encoding="utf-8")
        assert loader_module.load_plugins_config() == {}

    def test_save_failure_raises_plugin_config_error(self, tmp_path):
        from cms_requirements.exceptions import PluginConfigError
        from cms_requirements.plugins import loader as loader_module

        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        with patch.object(loader_module, "_PLUGINS_CONFIG_FILE", blocker / "plugins_config.json"):
            with pytest.raises(PluginConfigError):
                loader_module.save_plugins_config({})

    def test_is_plugin_enabled_defaults_true(self):
        from cms_requirements.plugins.loader import is_plugin_enabled

        assert is_plugin_enabled({}, "seo") is True
        assert is_plugin_enabled({"seo": {"enabled": False}}, "seo") is False

    def test_import_plugin_class(self):
        from cms_requirements.plugins.loader import import_plugin_class
        from cms_requirements.plugins.registry import PluginRegistry

        assert import_plugin_class("cms_requirements.plugins.registry:PluginRegistry") is PluginRegistry

    @pytest.mark.parametrize(
        "path",
        ["no_colon_here", ":Missing", "module:", "definitely_missing_pkg.mod:Plugin", "json:NoSuchPlugin"],
    )
    def test_import_plugin_class_invalid_paths(self, path):
        from cms_requirements.plugins.loader import import_plugin_class

        assert import_plugin_class(path) is None

    def test_configured_plugin_classes_skips_bad_paths(self):
        from cms_requirements.config import settings
        from cms_requirements.plugins.loader import configured_plugin_classes
        from cms_requirements.plugins.registry import PluginRegistry

        paths = ["cms_requirements.plugins.registry:PluginRegistry", "missing.module:Nope"]
        with patch.object(settings, "plugins", paths):
            assert configured_plugin_classes() == [PluginRegistry]

    def test_initialize_plugins_is_coroutine(self):
        from cms_requirements.plugins.loader import initialize_plugins

        assert inspect.iscoroutinefunction(initialize_plugins)

    def test_initialize_plugins_loads_plugins_that_pass(self):
        from cms_requirements.plugins.loader import initialize_plugins
        from cms_requirements.plugins.registry import PluginRegistry

        good = make_plugin("good", requires_modules={"json": "json"})
        reg = PluginRegistry()
        loaded = asyncio.run(initialize_plugins(reg, [good], FakeEnvironment(modules=["json"])))

        assert loaded == ["good"]
        assert reg.is_registered("good")
        assert good.loaded == [{}]
        assert reg.requirement_status("good").met is True

    def test_initialize_plugins_gates_failing_plugins(self):
        from cms_requirements.plugins import loader as loader_module
        from cms_requirements.plugins.loader import initialize_plugins
        from cms_requirements.plugins.registry import PluginRegistry

        good = make_plugin("good")
        bad = make_plugin("bad", title="Bad Plugin", requires_plugins={"forms": "Forms"})
        reg = PluginRegistry()
        loaded = asyncio.run(initialize_plugins(reg, [good, bad], FakeEnvironment()))

        assert loaded == ["good"]
        assert not reg.is_registered("bad")
        assert bad.loaded == []
        assert reg.deactivated_plugins() == ["bad"]
        assert loader_module.load_plugins_config()["bad"]["enabled"] is False
        status = reg.requirement_status("bad")
        assert status.met is False
        assert "Forms" in status.notices[0]
        notices = reg.admin_notices()
        assert len(notices) == 1
        assert notices[0].startswith('<div class="error">')
        assert "Bad Plugin" in notices[0]

    def test_initialize_plugins_skips_disabled(self):
        from cms_requirements.plugins import loader as loader_module
        from cms_requirements.plugins.loader import initialize_plugins
        from cms_requirements.plugins.registry import PluginRegistry

        loader_module.save_plugins_config({"off": {"enabled": False}})
        off = make_plugin("off")
        reg = PluginRegistry()
        loaded = asyncio.run(initialize_plugins(reg, [off], FakeEnvironment()))

        assert loaded == []
        assert off.loaded == []
        assert reg.requirement_status("off") is None

    def test_initialize_plugins_passes_config_slice(self):
        from cms_requirements.plugins import loader as loader_module
        from cms_requirements.plugins.loader import initialize_plugins
        from cms_requirements.plugins.registry import PluginRegistry

        loader_module.save_plugins_config({"cfg": {"enabled": True, "depth": 3}})
        cfg = make_plugin("cfg")
        asyncio.run(initialize_plugins(PluginRegistry(), [cfg], FakeEnvironment()))

        assert cfg.loaded == [{"enabled": True, "depth": 3}]

    def test_default_environment_sees_sibling_plugins(self):
        """Without an explicit environment, enabled siblings count as active."""
        from cms_requirements.plugins.loader import initialize_plugins
        from cms_requirements.plugins.registry import PluginRegistry

        base = make_plugin("base")
        dependent = make_plugin("dependent", requires_python="3.0", requires_plugins={"base": "Base"})
        reg = PluginRegistry()
        loaded = asyncio.run(initialize_plugins(reg, [dependent, base]))

        assert loaded == ["dependent", "base"]

    def test_lifecycle_hooks_fired(self):
        from cms_requirements.plugins.hooks import HOOK_PLUGIN_DEACTIVATED, HOOK_PLUGINS_LOADED
        from cms_requirements.plugins.loader import initialize_plugins
        from cms_requirements.plugins.registry import PluginRegistry

        seen = []
        reg = PluginRegistry()
        reg.add_action(HOOK_PLUGIN_DEACTIVATED, lambda payload: seen.append(("deactivated", payload)))
        reg.add_action(HOOK_PLUGINS_LOADED, lambda payload: seen.append(("loaded", payload)))

        good = make_plugin("good")
        bad = make_plugin("bad", requires_modules={"nope": "nope"})
        asyncio.run(initialize_plugins(reg, [good, bad], FakeEnvironment()))

        assert seen == [("deactivated", {"plugin": "bad"}), ("loaded", {"plugins": ["good"]})]

    def test_initialize_plugins_twice_does_not_replay_notices(self):
        from cms_requirements.plugins.hooks import HOOK_ADMIN_NOTICES, HOOK_PLUGIN_DEACTIVATED
        from cms_requirements.plugins.loader import initialize_plugins
        from cms_requirements.plugins.registry import PluginRegistry

        deactivated = []
        reg = PluginRegistry()
        reg.add_action(HOOK_PLUGIN_DEACTIVATED, lambda payload: deactivated.append(payload["plugin"]))
        bad = make_plugin("bad", requires_modules={"nope": "nope"})

        asyncio.run(initialize_plugins(reg, [bad], FakeEnvironment()))
        assert len(reg.admin_notices()) == 1

        asyncio.run(initialize_plugins(reg, [bad], FakeEnvironment()))
        assert len(reg.admin_notices()) == 1
        assert asyncio.run(reg.fire_hook(HOOK_ADMIN_NOTICES, {})) == []
        assert deactivated == ["bad"]


# ══════════════════════════════════════════════════════════════════════════════
# 5. TestPluginHooks
# ══════════════════════════════════════════════════════════════════════════════


class TestPluginHooks:
    def test_all_hooks_have_dot_separator(self):
        from cms_requirements.plugins.hooks import ALL_HOOKS

        assert all("." in h for h in ALL_HOOKS)

    def test_no_duplicate_hooks(self):
        from cms_requirements.plugins.hooks import ALL_HOOKS

        assert len(ALL_HOOKS) == len(set(ALL_HOOKS))

    def test_admin_notices_value(self):
        from cms_requirements.plugins.hooks import HOOK_ADMIN_NOTICES

        assert HOOK_ADMIN_NOTICES == "admin.notices"
