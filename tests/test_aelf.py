import time

import pytest
import requests

from lectures.errors import UpstreamError, UpstreamUnavailable
from lectures.services.aelf import candidate_urls, fetch_first, fetch_json, get_readings

from conftest import FakeResponse, FakeSession, ok_json, reading

URLS = ["https://a.test/x", "https://b.test/x", "https://c.test/x"]


def test_candidate_urls_fill_date_and_zone():
    urls = candidate_urls("2025-03-30", "belgique")
    assert urls[0] == "https://api.aelf.org/v1/messes/2025-03-30/belgique"
    assert urls[1] == "https://api.aelf.org/v1/messes/2025-03-30"
    assert len(urls) == 3


def test_falls_back_until_a_payload_parses():
    session = FakeSession([
        FakeResponse(500, "boom", "Internal Server Error"),
        FakeResponse(500, "boom", "Internal Server Error"),
        ok_json({"messes": []}),
    ])
    assert fetch_first(URLS, session=session) == {"messes": []}
    assert [url for url, _ in session.calls] == URLS


def test_stops_at_first_success():
    session = FakeSession([ok_json({"a": 1}), ok_json({"b": 2})])
    assert fetch_first(URLS, session=session) == {"a": 1}
    assert len(session.calls) == 1


def test_all_malformed_reports_last_error():
    session = FakeSession([FakeResponse(200, "<html>1"), FakeResponse(200, "<html>2"), FakeResponse(200, "<html>3")])
    with pytest.raises(UpstreamUnavailable) as exc:
        fetch_first(URLS, session=session)
    assert "<html>3" in exc.value.message
    assert exc.value.message.startswith("Impossible de récupérer les lectures")
    assert len(exc.value.attempts) == 3
    assert exc.value.last_error == "Réponse invalide: <html>3"


@pytest.mark.parametrize("outcome, message", [
    (requests.Timeout("slow"), "Délai dépassé (5000 ms)"),
    (requests.ConnectionError("refused"), "Erreur réseau: refused"),
    (FakeResponse(404, "", "Not Found"), "HTTP 404: Not Found"),
    (FakeResponse(200, ""), "Réponse vide"),
    (FakeResponse(200, "   "), "Réponse vide"),
    (FakeResponse(200, "{}"), "Données vides"),
    (FakeResponse(200, "[1, 2]"), "Données vides"),
])
def test_each_failure_kind(outcome, message):
    with pytest.raises(UpstreamError, match=message.replace("(", r"\(").replace(")", r"\)")):
        fetch_json("https://a.test/x", session=FakeSession([outcome]), timeout_ms=5000)


def test_timeout_is_passed_in_seconds():
    session = FakeSession([ok_json({"a": 1})])
    fetch_json("https://a.test/x", session=session, timeout_ms=2500)
    assert session.calls[0][1] == 2.5


def test_get_readings_skips_payloads_without_content():
    good = {"messes": [{"nom": "Messe", "lectures": [reading("lecture_1"), reading("evangile")]}]}
    session = FakeSession([ok_json({"informations": {"date": "2025-03-30"}}), ok_json(good)])
    data = get_readings("2025-03-30", "france", session=session, endpoints=URLS[:2])
    assert list(data.lectures) == ["lecture_1", "evangile"]
    assert data.informations.date == "2025-03-30"


def test_get_readings_content_failure_everywhere():
    session = FakeSession([ok_json({"informations": {}}), ok_json({"messes": []})])
    with pytest.raises(UpstreamUnavailable, match="Aucune lecture disponible"):
        get_readings("2025-03-30", "france", session=session, endpoints=URLS[:2])


@pytest.mark.parametrize("status, reason", [(304, "Not Modified"), (302, "Found")])
def test_non_2xx_is_a_failure_even_with_a_body(status, reason):
    session = FakeSession([FakeResponse(status, '{"messes": []}', reason)])
    with pytest.raises(UpstreamError, match=f"HTTP {status}: {reason}"):
        fetch_json("https://a.test/x", session=session)


def test_timeout_bounds_the_whole_body():
    # 40 bytes, one every 50 ms: each read is quick, the whole body is not
    slow = FakeResponse(200, '{"messes": [], "pad": "xxxxxxxxxxxxxx"}', delay=0.05, chunk_size=1)
    started = time.monotonic()
    with pytest.raises(UpstreamError, match=r"Délai dépassé \(300 ms\)"):
        fetch_json("https://a.test/x", session=FakeSession([slow]), timeout_ms=300)
    assert time.monotonic() - started < 1.5


def test_slow_endpoint_falls_through_to_the_next():
    slow = FakeResponse(200, '{"a": 1, "pad": "xxxxxxxxxxxxxxxxxxxx"}', delay=0.05, chunk_size=1)
    session = FakeSession([slow, ok_json({"b": 2})])
    assert fetch_first(URLS[:2], session=session, timeout_ms=300) == {"b": 2}


def test_response_is_closed_after_reading():
    resp = ok_json({"a": 1})
    fetch_json("https://a.test/x", session=FakeSession([resp]))
    assert resp.closed
