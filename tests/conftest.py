import json
import time

import pytest


class FakeResponse:
    """Streams `text` back in chunks; `delay` seconds pass before each chunk."""

    def __init__(self, status_code=200, text="", reason="OK", delay=0.0, chunk_size=None):
        self.status_code = status_code
        self.text = text
        self.reason = reason
        self.encoding = "utf-8"
        self.delay = delay
        self.chunk_size = chunk_size
        self.closed = False

    def iter_content(self, chunk_size=1):
        body = self.text.encode(self.encoding)
        step = self.chunk_size or chunk_size
        for i in range(0, len(body), step):
            if self.delay:
                time.sleep(self.delay)
            if self.closed:
                return
            yield body[i:i + step]

    def close(self):
        self.closed = True


class FakeSession:
    """Stands in for requests.Session: one scripted outcome per URL, in call order."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, headers=None, timeout=None, stream=False):
        self.calls.append((url, timeout))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        pass


def ok_json(obj):
    return FakeResponse(200, json.dumps(obj))


def reading(type_=None, titre=None, reference=None, **extra):
    r = {"type": type_, "titre": titre, "contenu": f"<p>{titre or type_}</p>", "ref": reference}
    r.update(extra)
    return r


@pytest.fixture
def sunday_mass():
    return {
        "nom": "Messe du jour",
        "lectures": [
            reading("evangile", "Évangile de Jésus Christ selon saint Luc", "Lc 15, 1-32"),
            reading("lecture_1", "Lecture du livre de l'Exode", "Ex 32, 7-11"),
            reading("psaume", "Psaume 50", "Ps 50", refrain_psalmique="Oui, je me lèverai"),
            reading("lecture_2", "Lecture de la première lettre de saint Paul", "1 Tm 1, 12-17"),
            reading("evangile", "Évangile (lecture brève)", "Lc 15, 1-10"),
        ],
    }


@pytest.fixture
def payload(sunday_mass):
    return {
        "informations": {"date": "2025-09-14", "couleur": "rouge", "ligne1": "24e dimanche"},
        "messes": [sunday_mass],
    }
