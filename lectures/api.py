# lectures/api.py
from __future__ import annotations

import datetime as dt
import logging
import os
from contextlib import asynccontextmanager

import requests
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lectures.errors import UpstreamUnavailable
from lectures.services.aelf import DEFAULT_ZONE, get_readings

load_dotenv()
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"), format="%(levelname)s: %(message)s")
log = logging.getLogger("lectures.api")

NO_STORE = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
}

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:8501,http://localhost:5173,http://127.0.0.1:5173").split(",")
    if o.strip()
]

# One HTTP session for every upstream call
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.session = requests.Session()
    try:
        yield
    finally:
        app.state.session.close()


# -------- one FastAPI app --------
app = FastAPI(title="Lectures du jour API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)


def error_response(message: str, status: int = 500) -> JSONResponse:
    log.error(message)
    return JSONResponse({"error": True, "message": message}, status_code=status, headers=NO_STORE)


@app.get("/api/health")
def health():
    return {"status": "ok"}


# -------- Readings of the day --------
@app.get("/api/aelf")
def readings(request: Request, date: str | None = None, zone: str | None = None):
    """Normalized readings for one day and zone.

    Every entry of `lectures` has the same shape: a `versions` list plus
    `has_multiple_versions`, `type`, `messe_nom` and `messe_index`. A slot with
    a single reading is a group with one version, not a bare reading, so
    clients read `versions[0]` in both cases.
    """
    zone = (zone or DEFAULT_ZONE).strip().lower()
    if date:
        try:
            day = dt.date.fromisoformat(date)
        except ValueError:
            return error_response(f"Date invalide: {date}", 400)
    else:
        day = dt.date.today()

    log.info("Readings requested for %s (zone: %s)", day.isoformat(), zone)
    try:
        data = get_readings(day, zone, session=getattr(request.app.state, "session", None))
    except UpstreamUnavailable as e:
        return error_response(e.message, 503)
    except Exception as e:
        log.exception("Unexpected failure while building readings")
        return error_response(str(e) or "Erreur inconnue", 500)

    return JSONResponse(data.model_dump(mode="json"), headers=NO_STORE)
