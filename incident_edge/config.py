# =============================
# FILE: incident_edge/config.py
# =============================
import os, logging
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

log = logging.getLogger("uvicorn.error").getChild("config")

# Load .env from repo root (helpful locally)
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(dotenv_path=root_env, override=True)

REQUIRED_VARS = ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "GEOCODE_KEY")

DEFAULT_BUCKET      = "Report_Bucket"
DEFAULT_GEOCODE_URL = "https://api.geoapify.com/v1/geocode/reverse"


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    service_role_key: str
    geocode_key: str
    database_url: str | None = None
    storage_bucket: str = DEFAULT_BUCKET
    geocode_url: str = DEFAULT_GEOCODE_URL
    http_timeout: float = 10.0
    bcrypt_rounds: int = 12
    show_docs: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        The data-store endpoint, its service key and the geocoding key are
        required; a missing one is a deployment error, so this raises instead
        of letting the first request fail.
        """
        missing = [name for name in REQUIRED_VARS if not os.getenv(name)]
        if missing:
            raise RuntimeError(f"Missing required environment variable(s): {', '.join(missing)}")

        settings = cls(
            supabase_url=os.environ["SUPABASE_URL"].rstrip("/"),
            service_role_key=os.environ["SUPABASE_SERVICE_ROLE_KEY"],
            geocode_key=os.environ["GEOCODE_KEY"],
            database_url=os.getenv("DATABASE_URL") or None,
            storage_bucket=os.getenv("STORAGE_BUCKET", DEFAULT_BUCKET),
            geocode_url=os.getenv("GEOCODE_URL", DEFAULT_GEOCODE_URL),
            http_timeout=float(os.getenv("HTTP_TIMEOUT_SECS", "10")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
            show_docs=os.getenv("SHOW_DOCS", "1") == "1",
        )
        # never log the service key itself
        log.info("[config] supabase=%s store=%s bucket=%s",
                 settings.supabase_url,
                 "sql" if settings.database_url else "postgrest",
                 settings.storage_bucket)
        return settings
