"""
Custom Exception Classes for the plugin requirements layer

Requirement evaluation itself never raises; every unmet requirement becomes a
notice. These exceptions cover host-side misuse (unknown plugins, broken
plugin config) and map onto consistent JSON error responses.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes included in error responses."""

    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    PLUGIN_NOT_FOUND = "RESOURCE_PLUGIN_NOT_FOUND"
    PLUGIN_CONFIG_INVALID = "PLUGIN_CONFIG_INVALID"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class CMSRequirementsError(Exception):
    """Base exception class for all plugin requirement exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(CMSRequirementsError):
    """Base class for resource not found errors"""

    def __init__(
        self,
        resource_type: str,
        resource_id: Any | None = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
    ):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=error_code,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class PluginNotFoundError(ResourceNotFoundError):
    """Raised when a plugin is not registered with the host"""

    def __init__(self, plugin_name: str | None = None):
        super().__init__(resource_type="Plugin", resource_id=plugin_name, error_code=ErrorCode.PLUGIN_NOT_FOUND)


# ============================================================================
# Plugin State Exceptions
# ============================================================================


class PluginConfigError(CMSRequirementsError):
    """Raised when the persisted plugin configuration cannot be written"""

    def __init__(self, message: str = "Plugin configuration could not be saved", path: str | None = None):
        details = {"path": path} if path else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code=ErrorCode.PLUGIN_CONFIG_INVALID,
            details=details,
        )

