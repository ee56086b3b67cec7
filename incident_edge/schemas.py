# ================================
# FILE: incident_edge/schemas.py
# ================================
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

class ReportStatus(str, Enum):
    SUBMITTED = "Submitted"
    ON_REVIEW = "On-Review"
    DECLINED = "Declined"
    VERIFIED = "Verified"


VALID_ROLES = [r.value for r in Role]
VALID_STATUSES = [s.value for s in ReportStatus]
STATUS_ROLES = {Role.ADMIN.value, Role.SUPER_ADMIN.value}


def lower_email(v: str) -> str:
    # emails are unique case-insensitively
    return v.strip().lower()


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    role: Role

    @field_validator("role", mode="before")
    @classmethod
    def _known_role(cls, v):
        role = str(v).strip().lower()
        if role not in VALID_ROLES:
            raise ValueError(f"Invalid role: {v}. Valid roles are {', '.join(VALID_ROLES)}")
        return role

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v):
        return lower_email(v)

class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v):
        return lower_email(v)

class ReportCreate(BaseModel):
    userid: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    description: str
    is_iot: bool
    iot_id: Optional[str] = None

class StatusUpdate(BaseModel):
    userid: str
    status: ReportStatus
    reportid: str

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, v):
        # statuses are case-sensitive
        if v not in VALID_STATUSES:
            raise ValueError(f"Invalid status: {v}. Valid statuses are {', '.join(VALID_STATUSES)}")
        return v

class Envelope(BaseModel):
    status: int
    message: str
    data: Any = None
