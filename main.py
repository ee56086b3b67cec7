# ================================
# FILE: main.py
# ================================
import sys, logging
from pathlib import Path
from dotenv import load_dotenv

root_env = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=root_env, override=True)

logging.basicConfig(stream=sys.stdout, level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(name).setLevel(logging.INFO)

from incident_edge.app import create_app
from incident_edge.config import Settings

app = create_app(Settings.from_env())
