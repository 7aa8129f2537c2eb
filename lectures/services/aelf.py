# lectures/services/aelf.py
from __future__ import annotations

import datetime as dt
import json
import logging
import os
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import requests
from dotenv import load_dotenv

from lectures.errors import UpstreamError, UpstreamUnavailable
from lectures.models import NormalizedResponse
from lectures.tools.shape import build_response

load_dotenv()
log = logging.getLogger("lectures.aelf")

DEFAULT_ENDPOINTS: Tuple[str, ...] = (
    "https://api.aelf.org/v1/messes/{date}/{zone}",
    "https://api.aelf.org/v1/messes/{date}",
    "https://www.aelf.org/api/v1/messes/{date}",
)
ENDPOINTS = tuple(e.strip() for e in os.getenv("AELF_ENDPOINTS", "").split(",") if e.strip()) or DEFAULT_ENDPOINTS
TIMEOUT_MS = int(os.getenv("AELF_TIMEOUT_MS", "5000"))
DEFAULT_ZONE = os.getenv("AELF_ZONE", "france")
CHUNK_SIZE = 1024

ZONES = ("france", "belgique", "canada", "luxembourg", "monaco", "suisse", "afrique", "romain")

HEADERS = {
    "Accept": "application/json",
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/115.0.0.0 Safari/537.36"
    ),
    "Origin": "https://www.aelf.org",
    "Referer": "https://www.aelf.org/",
}


def candidate_urls(day: dt.date | str, zone: str = DEFAULT_ZONE,
                   endpoints: Sequence[str] | None = None) -> List[str]:
    ds = day.isoformat() if isinstance(day, dt.date) else str(day)
    return [e.format(date=ds, zone=zone) for e in (endpoints or ENDPOINTS)]


def _download(http, url: str, timeout_s: float, deadline: float) -> Tuple[int, str, str]:
    """GET `url` and read its body, giving up on the body once `deadline` passes."""
    resp = http.get(url, headers=HEADERS, timeout=timeout_s, stream=True)
    try:
        if not 200 <= resp.status_code < 300:
            return resp.status_code, resp.reason, ""
        chunks = []
        for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
            if time.monotonic() > deadline:
                raise UpstreamError("body still incomplete at deadline")
            chunks.append(chunk)
        return resp.status_code, resp.reason, b"".join(chunks).decode(resp.encoding or "utf-8", errors="replace")
    finally:
        resp.close()


def _in_background(fn, *args) -> Future:
    # daemon thread: a server that keeps trickling bytes must not hold up exit
    fut: Future = Future()

    def run():
        if not fut.set_running_or_notify_cancel():
            return
        try:
            fut.set_result(fn(*args))
        except Exception as e:
            fut.set_exception(e)

    threading.Thread(target=run, name="aelf-http", daemon=True).start()
    return fut


def fetch_json(url: str, *, session=None, timeout_ms: int | None = None) -> Dict[str, Any]:
    """GET one endpoint and return its JSON object, or raise UpstreamError.

    `timeout_ms` bounds the whole attempt, headers and body together.
    requests only bounds each socket read, which a slow server can
    stretch indefinitely by trickling bytes.
    """
    http = session or requests
    timeout_ms = timeout_ms or TIMEOUT_MS
    timeout_s = timeout_ms / 1000
    too_slow = f"Délai dépassé ({timeout_ms} ms)"
    deadline = time.monotonic() + timeout_s
    attempt = _in_background(_download, http, url, timeout_s, deadline)
    try:
        status, reason, text = attempt.result(timeout=timeout_s)
    except (FutureTimeout, requests.Timeout, UpstreamError) as e:
        raise UpstreamError(too_slow) from e
    except requests.RequestException as e:
        raise UpstreamError(f"Erreur réseau: {e}") from e

    if not 200 <= status < 300:
        raise UpstreamError(f"HTTP {status}: {reason}")

    if not text.strip():
        raise UpstreamError("Réponse vide")

    try:
        data = json.loads(text)
    except ValueError as e:
        raise UpstreamError("Réponse invalide: " + text[:100]) from e

    if not isinstance(data, dict) or not data:
        raise UpstreamError("Données vides")
    return data


def fetch_first(
    urls: Sequence[str],
    *,
    session=None,
    timeout_ms: int | None = None,
    transform: Optional[Callable[[Dict[str, Any]], Any]] = None,
):
    """Try each URL in turn and return the first usable result.

    `transform` runs on each parsed payload; a ContentError from it moves on
    to the next URL just like a network failure does. Other exceptions
    propagate.
    """
    attempts: List[Tuple[str, str]] = []
    for url in urls:
        log.info("Trying %s", url)
        try:
            data = fetch_json(url, session=session, timeout_ms=timeout_ms)
            result = transform(data) if transform else data
        except UpstreamError as e:
            log.warning("Failed with %s: %s", url, e)
            attempts.append((url, str(e)))
            continue
        log.info("Success with %s", url)
        return result

    last = attempts[-1][1] if attempts else "erreur inconnue"
    log.error("All %d endpoints failed, last error: %s", len(attempts), last)
    raise UpstreamUnavailable(f"Impossible de récupérer les lectures ({last})", attempts)


def get_readings(
    day: dt.date | str,
    zone: str = DEFAULT_ZONE,
    *,
    session=None,
    endpoints: Sequence[str] | None = None,
    timeout_ms: int | None = None,
) -> NormalizedResponse:
    ds = day.isoformat() if isinstance(day, dt.date) else str(day)
    log.info("Fetching readings for %s (zone: %s)", ds, zone)
    return fetch_first(
        candidate_urls(ds, zone, endpoints),
        session=session,
        timeout_ms=timeout_ms,
        transform=lambda data: build_response(data, ds),
    )
