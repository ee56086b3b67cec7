# ================================
# FILE: incident_edge/routes_ops.py
# ================================
import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from incident_edge.deps import get_store, get_storage

log = logging.getLogger("uvicorn.error").getChild("routes_ops")
router = APIRouter(tags=["ops"])


@router.get("/healthz")
def healthz(store=Depends(get_store), storage=Depends(get_storage)):
    status = {"ok": True, "db": False, "storage": False}
    try:
        store.ping()
        status["db"] = True
    except Exception as e:
        log.warning("[healthz] data store unreachable: %s", e)
    try:
        storage.list_buckets()
        status["storage"] = True
    except Exception as e:
        log.warning("[healthz] storage unreachable: %s", e)
    return JSONResponse(status, headers={"Cache-Control": "no-store"})


@router.get("/ping")
def ping():
    return {"pong": True}
