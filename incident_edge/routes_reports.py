# ================================
# FILE: incident_edge/routes_reports.py
# ================================
import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from incident_edge.deps import get_store, get_storage, get_geocoder
from incident_edge.geocoding import GeocodingError
from incident_edge.responses import envelope
from incident_edge.schemas import ReportCreate, StatusUpdate, ReportStatus, STATUS_ROLES
from incident_edge.storage import StorageError
from incident_edge.store import DataStoreError
from incident_edge.utils import normalize, require_fields, parse_request, upload_key

log = logging.getLogger("uvicorn.error").getChild("routes_reports")
router = APIRouter(tags=["reports"])

INITIAL_STATUS = ReportStatus.ON_REVIEW.value


def _append_log(store, reportid: str, userid: str, comments: str, status: str) -> bool:
    """Best-effort audit entry; a failure is logged and reported as False."""
    try:
        store.insert("report_log", {
            "reportid": reportid,
            "userid": userid,
            "comments": comments,
            "status": status,
        })
        return True
    except DataStoreError as e:
        log.warning("[report_log] append failed for reportid=%s: %s", reportid, e)
        return False


def _lookup_user(store, userid: str, columns: str, tag: str) -> dict:
    try:
        user = store.find_one("users", "userid", userid, columns=columns)
    except DataStoreError as e:
        log.error("[%s] user lookup failed: %s", tag, e)
        raise HTTPException(status_code=500, detail="Error checking user")
    if not user:
        raise HTTPException(status_code=400, detail=f"Invalid userid: {userid}")
    return user


@router.post("/uploadData")
def upload_data(
    userid: Optional[str] = Form(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    is_iot: Optional[str] = Form(None),
    iot_id: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    store=Depends(get_store),
    storage=Depends(get_storage),
    geocoder=Depends(get_geocoder),
):
    fields = require_fields(userid=userid, latitude=latitude, longitude=longitude,
                            description=description, is_iot=is_iot)
    req = parse_request(ReportCreate, **fields, iot_id=normalize(iot_id) or None)

    # 1) who is reporting
    user = _lookup_user(store, req.userid, "userid, name", "upload")

    # 2) IoT reports must come from a device the user owns
    device_id = None
    if req.is_iot:
        if not req.iot_id:
            raise HTTPException(status_code=400, detail="Missing iot_id for IoT report")
        try:
            device = store.find_one("iot_devices", "deviceid", req.iot_id, columns="deviceid, userid")
        except DataStoreError as e:
            log.error("[upload] device lookup failed: %s", e)
            raise HTTPException(status_code=500, detail="Error checking IoT device")
        if not device or str(device.get("userid")) != req.userid:
            raise HTTPException(status_code=400,
                                detail=f"Invalid iot_id or iot_id does not belong to userid: {req.userid}")
        device_id = req.iot_id

    data = {
        "userid": req.userid,
        "latitude": req.latitude,
        "longitude": req.longitude,
        "description": req.description,
        "status": INITIAL_STATUS,
        "is_iot": req.is_iot,
        "iot_id": device_id,
    }

    # 3) reverse geocode; no report without a location lookup
    try:
        candidates = geocoder.reverse(req.latitude, req.longitude)
    except GeocodingError as e:
        log.error("[upload] geocoding failed: %s", e)
        raise HTTPException(status_code=500, detail="Error fetching location data")
    if candidates:
        data.update(candidates[0])

    # 4) optional attachment
    image_url = ""
    if file is not None and file.filename:
        key = upload_key(file.filename)
        try:
            path = storage.upload(key, file.file.read(), file.content_type)
            image_url = storage.public_url(path)
        except StorageError as e:
            log.error("[upload] file upload failed: %s", e)
            raise HTTPException(status_code=500, detail="Error uploading file")
    data["imageurl"] = image_url

    # 5) persist
    try:
        report = store.insert("reports", data)
    except DataStoreError as e:
        log.error("[upload] insert failed: %s", e)
        raise HTTPException(status_code=500, detail="Error inserting data into database")

    # 6) audit trail
    _append_log(store, report["reportid"], req.userid,
                f"User {user.get('name')} created a new report at {data.get('city') or 'unknown location'}",
                INITIAL_STATUS)

    log.info("[upload] reportid=%s userid=%s iot=%s image=%s",
             report["reportid"], req.userid, req.is_iot, bool(image_url))
    return envelope(200, "Data uploaded successfully", report)


@router.post("/updateStatus")
def update_status(
    userid: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    reportid: Optional[str] = Form(None),
    store=Depends(get_store),
):
    fields = require_fields(userid=userid, status=status, reportid=reportid)
    req = parse_request(StatusUpdate, **fields)

    user = _lookup_user(store, req.userid, "userid, role", "status")
    role = user.get("role")
    if role not in STATUS_ROLES:
        raise HTTPException(status_code=403, detail="User is not authorized to change the report status.")

    try:
        updated = store.update("reports", "reportid", req.reportid, {"status": req.status.value})
    except DataStoreError as e:
        log.error("[status] update failed for reportid=%s: %s", req.reportid, e)
        raise HTTPException(status_code=500, detail="Error updating report status")
    if not updated:
        raise HTTPException(status_code=400, detail=f"Invalid reportid: {req.reportid}")

    _append_log(store, req.reportid, req.userid,
                f"User {req.userid} ({role}) updated the report status to {req.status.value}",
                req.status.value)

    log.info("[status] reportid=%s -> %s by userid=%s", req.reportid, req.status.value, req.userid)
    return envelope(200, "Report status updated successfully",
                    {"reportid": req.reportid, "status": req.status.value})


@router.get("/getReport")
def get_report(store=Depends(get_store)):
    try:
        reports = store.select("reports")
    except DataStoreError as e:
        log.error("[reports] fetch failed: %s", e)
        raise HTTPException(status_code=500, detail="Error fetching reports from database")
    return envelope(200, "Reports fetched successfully", reports)
