# =============================
# FILE: incident_edge/routes_auth.py
# =============================
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Form, HTTPException

from incident_edge.deps import get_store, get_hasher
from incident_edge.responses import envelope
from incident_edge.schemas import RegisterRequest, LoginRequest
from incident_edge.security import CredentialHasher, MalformedCredential
from incident_edge.store import DataStoreError, DuplicateKeyError
from incident_edge.utils import require_fields, parse_request

log = logging.getLogger("uvicorn.error").getChild("routes_auth")

router = APIRouter(tags=["auth"])

PUBLIC_USER_FIELDS = ("userid", "name", "email", "role")
LOGIN_FAILED = "Invalid email or password"


def _public(user: dict) -> dict:
    return {k: v for k, v in user.items() if k != "password"}


@router.post("/register")
def register(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    store=Depends(get_store),
    hasher: CredentialHasher = Depends(get_hasher),
):
    fields = require_fields(name=name, email=email, password=password, role=role)
    req = parse_request(RegisterRequest, **fields)

    try:
        existing = store.find_one("users", "email", req.email, columns="userid, email")
    except DataStoreError as e:
        log.error("[register] email lookup failed: %s", e)
        raise HTTPException(status_code=500, detail="Error checking email")
    if existing:
        raise HTTPException(status_code=400, detail="Email already exists")

    try:
        user = store.insert("users", {
            "name": req.name,
            "email": req.email,
            "password": hasher.hash(req.password),
            "role": req.role.value,
        })
    except DuplicateKeyError:
        # lost a race with a concurrent registration of the same email
        raise HTTPException(status_code=400, detail="Email already exists")
    except DataStoreError as e:
        log.error("[register] insert failed: %s", e)
        raise HTTPException(status_code=500, detail="Error registering user")

    log.info("[register] created userid=%s role=%s", user.get("userid"), req.role.value)
    return envelope(200, "User registered successfully", _public(user))


@router.post("/login")
def login(
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    store=Depends(get_store),
    hasher: CredentialHasher = Depends(get_hasher),
):
    fields = require_fields(email=email, password=password)
    req = parse_request(LoginRequest, **fields)

    try:
        user = store.find_one("users", "email", req.email,
                              columns=", ".join(PUBLIC_USER_FIELDS + ("password",)))
    except DataStoreError as e:
        log.error("[login] user lookup failed: %s", e)
        raise HTTPException(status_code=500, detail="Error checking email")
    if not user:
        raise HTTPException(status_code=400, detail=LOGIN_FAILED)

    try:
        ok, new_credential = hasher.verify_and_update(req.password, user["password"])
    except MalformedCredential as e:
        log.error("[login] unreadable credential for userid=%s: %s", user.get("userid"), e)
        raise HTTPException(status_code=500, detail="Internal Server Error")
    if not ok:
        raise HTTPException(status_code=400, detail=LOGIN_FAILED)

    if new_credential:
        try:
            store.update("users", "userid", user["userid"], {"password": new_credential})
            log.info("[login] upgraded credential for userid=%s", user["userid"])
        except DataStoreError as e:
            log.warning("[login] credential upgrade failed for userid=%s: %s", user["userid"], e)

    return envelope(200, "Login successful", _public(user))
