"""
CMS Plugin System

Public API for the plugin system:
    PluginMeta          — plugin metadata dataclass, including declared requirements
    PluginBase          — abstract base class for all plugins
    RequirementChecker  — evaluates a plugin's requirements and collects notices
    RuntimeEnvironment  — default environment queries used by the checker
    PluginRegistry      — registry + hook dispatcher
    plugin_registry     — global singleton registry instance
"""

from .base import PluginBase, PluginMeta
from .environment import EnvironmentQuery, RuntimeEnvironment
from .registry import PluginRegistry, RequirementStatus, plugin_registry
from .requirement_checker import RequirementChecker

__all__ = [
    "EnvironmentQuery",
    "PluginBase",
    "PluginMeta",
    "PluginRegistry",
    "RequirementChecker",
    "RequirementStatus",
    "RuntimeEnvironment",
    "plugin_registry",
]
