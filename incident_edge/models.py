# ================================
# FILE: incident_edge/models.py
# ================================
import uuid
from sqlalchemy import Column, Integer, String, Text, Boolean, Float, DateTime, ForeignKey, func
from incident_edge.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = 'users'
    userid = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)   # credential, never the plaintext
    role = Column(String, nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

class IotDevice(Base):
    __tablename__ = 'iot_devices'
    deviceid = Column(String(36), primary_key=True, default=_uuid)
    userid = Column(String(36), ForeignKey("users.userid"), nullable=False, index=True)
    name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

class Report(Base):
    __tablename__ = 'reports'
    reportid = Column(String(36), primary_key=True, default=_uuid)
    userid = Column(String(36), ForeignKey("users.userid"), nullable=False, index=True)

    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="On-Review")

    # IoT origin
    is_iot = Column(Boolean, nullable=False, default=False)
    iot_id = Column(String(36), ForeignKey("iot_devices.deviceid"), nullable=True)

    # reverse-geocoded address, first candidate only
    country = Column(String, nullable=True)
    city = Column(String, nullable=True)
    county = Column(String, nullable=True)
    state = Column(String, nullable=True)
    street = Column(String, nullable=True)
    postcode = Column(String, nullable=True)
    village = Column(String, nullable=True)

    imageurl = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

class ReportLog(Base):
    __tablename__ = 'report_log'
    logid = Column(Integer, primary_key=True, autoincrement=True)
    reportid = Column(String(36), ForeignKey("reports.reportid"), nullable=False, index=True)
    userid = Column(String(36), ForeignKey("users.userid"), nullable=False)
    comments = Column(Text, nullable=False)
    status = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


MODELS = {
    "users": User,
    "iot_devices": IotDevice,
    "reports": Report,
    "report_log": ReportLog,
}
