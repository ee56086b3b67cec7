# ================================
# FILE: incident_edge/utils.py
# ================================
import re, time, uuid
from fastapi import HTTPException
from pydantic import ValidationError

_unsafe = re.compile(r'[^0-9A-Za-z._-]+')


def normalize(value) -> str:
    return value.strip() if isinstance(value, str) else ""

def require_fields(**fields) -> dict[str, str]:
    """Trim every form value; the first blank one is a 400."""
    cleaned = {k: normalize(v) for k, v in fields.items()}
    for name, value in cleaned.items():
        if not value:
            raise HTTPException(status_code=400, detail=f"Missing required field: {name}")
    return cleaned

def validation_message(e: ValidationError) -> str:
    err = e.errors()[0]
    if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
        return str(err["ctx"]["error"])
    field = ".".join(str(p) for p in err.get("loc", ())) or "input"
    return f"Invalid {field}: {err.get('input')}"

def parse_request(model, **fields):
    try:
        return model(**fields)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_message(e))

def upload_key(filename: str | None, now: float | None = None) -> str:
    """Object name for an uploaded file: '<epoch-ms>_<random8>_<safe name>'."""
    ms = int((now if now is not None else time.time()) * 1000)
    base = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    safe = _unsafe.sub("_", base).strip("._") or "upload"
    return f"{ms}_{uuid.uuid4().hex[:8]}_{safe}"
