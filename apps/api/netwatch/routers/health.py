from __future__ import annotations
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlmodel import Session

from ..coordinator import WatchlistCoordinator
from ..deps import get_coordinator
from ..settings import settings

router = APIRouter(tags=["health"])


class Health(BaseModel):
    status: str
    time_utc: str
    checks: dict
    version: str | None = None
    sha: str | None = None


@router.get("/healthz", response_model=Health)
async def healthz(coordinator: WatchlistCoordinator = Depends(get_coordinator)):
    logger = logging.getLogger(__name__)
    checks: dict[str, dict] = {}

    try:
        with Session(coordinator.store.engine) as s:
            s.exec(text("SELECT 1"))
            checks["db"] = {"ok": True}
    except Exception as e:
        checks["db"] = {"ok": False, "error": str(e)}

    # Missing credentials degrade search but the service itself is up
    checks["catalog"] = {"ok": True, "credentials": coordinator.client.settings.has_credentials()}
    checks["app"] = {"ok": True}

    overall = "ok" if all(x.get("ok") for x in checks.values()) else "degraded"
    resp = Health(status=overall, time_utc=datetime.now(timezone.utc).isoformat(), checks=checks, version=settings.app_version, sha=settings.git_sha)
    if resp.status != "ok":
        logger.warning("healthz degraded", extra={"checks": checks})
    return resp


@router.get("/readyz")
async def readyz():
    return {"status": "ok", "version": settings.app_version}
