# ================================
# FILE: incident_edge/store.py
# ================================
"""
Data-access clients. Both speak the same small vocabulary over the named
tables (users, reports, iot_devices, report_log):

    find_one(table, column, value, columns="*") -> dict | None
    select(table, filters=None)                  -> list[dict]
    insert(table, row)                           -> dict
    update(table, key, key_value, values)        -> dict | None
    ping()                                       -> None

Any transport, HTTP or database failure is raised as DataStoreError; a
unique-constraint rejection as its subclass DuplicateKeyError.
"""
import logging
from contextlib import contextmanager

import httpx
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from incident_edge.models import MODELS

log = logging.getLogger("uvicorn.error").getChild("store")


class DataStoreError(Exception):
    pass

class DuplicateKeyError(DataStoreError):
    """A unique constraint rejected the write."""


UNIQUE_VIOLATION = "23505"   # postgres SQLSTATE


def _columns(columns: str) -> list[str] | None:
    if not columns or columns.strip() == "*":
        return None
    return [c.strip() for c in columns.split(",") if c.strip()]


def _pg_code(r: httpx.Response) -> str | None:
    try:
        return (r.json() or {}).get("code")
    except (ValueError, AttributeError):
        return None


# -----------------------------
# PostgREST (Supabase REST API)
# -----------------------------
class PostgrestStore:
    def __init__(self, base_url: str, service_key: str, timeout: float = 10.0,
                 transport: httpx.BaseTransport | None = None):
        self.rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self.headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
        }
        self.timeout = timeout
        self.transport = transport

    def _request(self, method: str, table: str, *, params=None, json=None, prefer: str | None = None):
        headers = dict(self.headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                r = client.request(method, f"{self.rest_url}/{table}",
                                   params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise DataStoreError(f"{method} {table} failed: {type(e).__name__}") from e
        if r.status_code == 409 and _pg_code(r) in (None, UNIQUE_VIOLATION):
            raise DuplicateKeyError(f"{method} {table} conflict: body={r.text[:400]}")
        if r.status_code >= 400:
            raise DataStoreError(f"{method} {table} failed: status={r.status_code} body={r.text[:400]}")
        if not r.content:
            return []
        try:
            return r.json()
        except ValueError as e:
            raise DataStoreError(f"{method} {table} returned invalid JSON") from e

    @staticmethod
    def _eq(filters: dict | None) -> dict:
        return {str(k): f"eq.{v}" for k, v in (filters or {}).items()}

    def find_one(self, table: str, column: str, value, columns: str = "*") -> dict | None:
        params = {"select": columns.replace(" ", "") or "*", "limit": "1", **self._eq({column: value})}
        rows = self._request("GET", table, params=params)
        return rows[0] if rows else None

    def select(self, table: str, filters: dict | None = None) -> list[dict]:
        return self._request("GET", table, params={"select": "*", **self._eq(filters)})

    def insert(self, table: str, row: dict) -> dict:
        rows = self._request("POST", table, json=row, prefer="return=representation")
        if not rows:
            raise DataStoreError(f"POST {table} returned no row")
        return rows[0]

    def update(self, table: str, key: str, key_value, values: dict) -> dict | None:
        rows = self._request("PATCH", table, params=self._eq({key: key_value}),
                             json=values, prefer="return=representation")
        return rows[0] if rows else None

    def ping(self) -> None:
        self._request("GET", "users", params={"select": "userid", "limit": "1"})


# -----------------------------
# SQLAlchemy (direct connection)
# -----------------------------
def _as_dict(row, columns: list[str] | None = None) -> dict:
    names = columns or [c.key for c in inspect(row).mapper.column_attrs]
    return {name: getattr(row, name) for name in names}


def _is_unique_violation(e: IntegrityError) -> bool:
    orig = e.orig
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    # sqlite reports it only in the message
    return "UNIQUE constraint failed" in str(orig)


class SqlStore:
    def __init__(self, session_factory):
        self.SessionLocal = session_factory

    @contextmanager
    def _session(self, action: str, table: str):
        db = self.SessionLocal()
        try:
            yield db
        except IntegrityError as e:
            db.rollback()
            if _is_unique_violation(e):
                raise DuplicateKeyError(f"{action} {table} conflict: {e.orig}") from e
            raise DataStoreError(f"{action} {table} failed: IntegrityError: {e}") from e
        except SQLAlchemyError as e:
            db.rollback()
            raise DataStoreError(f"{action} {table} failed: {e.__class__.__name__}: {e}") from e
        finally:
            db.close()

    @staticmethod
    def _model(table: str):
        try:
            return MODELS[table]
        except KeyError:
            raise DataStoreError(f"unknown table '{table}'") from None

    def find_one(self, table: str, column: str, value, columns: str = "*") -> dict | None:
        model = self._model(table)
        with self._session("select", table) as db:
            row = db.query(model).filter(getattr(model, column) == value).first()
            return _as_dict(row, _columns(columns)) if row else None

    def select(self, table: str, filters: dict | None = None) -> list[dict]:
        model = self._model(table)
        with self._session("select", table) as db:
            q = db.query(model)
            for k, v in (filters or {}).items():
                q = q.filter(getattr(model, k) == v)
            return [_as_dict(r) for r in q.all()]

    def insert(self, table: str, row: dict) -> dict:
        model = self._model(table)
        with self._session("insert", table) as db:
            obj = model(**row)
            db.add(obj); db.commit(); db.refresh(obj)
            return _as_dict(obj)

    def update(self, table: str, key: str, key_value, values: dict) -> dict | None:
        model = self._model(table)
        with self._session("update", table) as db:
            obj = db.query(model).filter(getattr(model, key) == key_value).first()
            if obj is None:
                return None
            for k, v in values.items():
                setattr(obj, k, v)
            db.commit(); db.refresh(obj)
            return _as_dict(obj)

    def ping(self) -> None:
        with self._session("ping", "-") as db:
            db.execute(text("select 1"))
