"""Vendor consolidation REST API endpoints."""

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from package_unifier.bootstrap import BootstrapResolver
from package_unifier.errors import (
    BootstrapError,
    GatewayError,
    SharedStoreMissingError,
    StoreLockedError,
)
from package_unifier.vendor.lifecycle import UnifierLifecycle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vendor", tags=["vendor"])


class ConsolidateRequest(BaseModel):
    """Request body for a consolidation pass."""

    base_dir: str | None = None


class ResolveRequest(BaseModel):
    """Request body for resolving a unit's vendor index."""

    path: str


def _lifecycle(request: Request) -> UnifierLifecycle:
    return request.app.state.lifecycle


@router.get("/plugins")
async def list_plugins(request: Request):
    """List discovered plugins and the dependency tree each carries."""
    lifecycle = _lifecycle(request)
    plugins = lifecycle.engine.discovery.discover()
    return {"plugins": [p.to_dict() for p in plugins]}


@router.post("/consolidate")
def consolidate(request: Request, body: ConsolidateRequest | None = None):
    """Run one consolidation pass. Blocks until every package-manager call returns."""
    lifecycle = _lifecycle(request)
    base_dir = Path(body.base_dir) if body and body.base_dir else None
    if base_dir is not None and not base_dir.is_dir():
        raise HTTPException(status_code=400, detail=f"Path is not a directory: {base_dir}")

    try:
        report = lifecycle.engine.consolidate(base_dir)
    except StoreLockedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SharedStoreMissingError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return report.to_dict()


@router.post("/regenerate-index")
def regenerate_index(request: Request):
    """Regenerate the shared autoload index."""
    lifecycle = _lifecycle(request)
    try:
        lifecycle.engine.regenerate_index()
    except GatewayError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"message": f"Regenerated {lifecycle.settings.shared_index_path}"}


@router.get("/units")
async def list_units(request: Request):
    """Boot state of every unit."""
    lifecycle = _lifecycle(request)
    return {"units": [u.to_dict() for u in lifecycle.registry.get_all()]}


@router.get("/units/{name}")
async def get_unit(name: str, request: Request):
    """Boot state of one unit."""
    unit = _lifecycle(request).registry.get(name)
    if not unit:
        raise HTTPException(status_code=404, detail=f"Unit '{name}' not found")
    return unit.to_dict()


@router.post("/resolve")
async def resolve(body: ResolveRequest, request: Request):
    """Decide which vendor index a unit would load, without recording it."""
    lifecycle = _lifecycle(request)
    unit_root = Path(body.path)
    if not unit_root.is_dir():
        raise HTTPException(status_code=400, detail=f"Path is not a directory: {body.path}")

    try:
        resolution = BootstrapResolver(unit_root, lifecycle.settings.shared_store_root).resolve()
    except BootstrapError as e:
        raise HTTPException(status_code=422, detail={"step": e.step, "message": e.message})
    return resolution.to_dict()
