"""
Plugin Requirement Routes

Read-only view of the requirement checks run at startup.

GET  /api/v1/plugins/requirements         → requirement status of every checked plugin
GET  /api/v1/plugins/requirements/{name}  → requirement status of one plugin
GET  /api/v1/plugins/notices              → rendered admin notices

No DB dependency. Status lives on the in-process plugin registry.
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from cms_requirements.exceptions import PluginNotFoundError
from cms_requirements.plugins.registry import RequirementStatus, plugin_registry

router = APIRouter(tags=["Plugins"])


# ── Pydantic schemas ───────────────────────────────────────────────────────────


class RequirementStatusResponse(BaseModel):
    name: str
    met: bool
    active: bool
    notices: list[str]


class AdminNoticesResponse(BaseModel):
    notices: list[str]
    deactivated: list[str]


# ── Helpers ────────────────────────────────────────────────────────────────────


def _build_response(status: RequirementStatus) -> RequirementStatusResponse:
    return RequirementStatusResponse(
        name=status.name,
        met=status.met,
        active=plugin_registry.is_registered(status.name),
        notices=status.notices,
    )


# ── Routes ─────────────────────────────────────────────────────────────────────


@router.get("/requirements", response_model=list[RequirementStatusResponse])
async def list_requirement_statuses() -> list[RequirementStatusResponse]:
    """List the requirement check outcome of every plugin seen at startup."""
    return [_build_response(s) for s in plugin_registry.all_requirement_statuses()]


@router.get("/requirements/{name}", response_model=RequirementStatusResponse)
async def get_requirement_status(name: str) -> RequirementStatusResponse:
    status = plugin_registry.requirement_status(name)
    if status is None:
        raise PluginNotFoundError(name)
    return _build_response(status)


@router.get("/notices", response_model=AdminNoticesResponse)
async def get_admin_notices() -> AdminNoticesResponse:
    """Admin notices produced for plugins that failed their requirements."""
    return AdminNoticesResponse(
        notices=plugin_registry.admin_notices(),
        deactivated=plugin_registry.deactivated_plugins(),
    )
