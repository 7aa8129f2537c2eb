# lectures/tools/classify.py
from __future__ import annotations

import logging
import unicodedata
from typing import Any, Iterable, Mapping, Tuple

from lectures.models import RawReading, ReadingSlot

log = logging.getLogger("lectures.classify")

KNOWN_TYPES = frozenset(slot.value for slot in ReadingSlot)

# Ordered rules: first match wins. Markers are compared after casefolding.
TITLE_RULES: Tuple[Tuple[ReadingSlot, Tuple[str, ...]], ...] = (
    # Gospels are sometimes sent with a generic "lecture" title; check them first.
    (ReadingSlot.EVANGILE, ("évangile", "evangile")),
    # Psalm titles may quote a canticle ("Cantique de Moïse"); the psalm wins.
    (ReadingSlot.PSAUME, ("psaume",)),
    (ReadingSlot.CANTIQUE, ("cantique",)),
    # "Lecture de la lettre de saint Paul" must not fall into the generic lecture rule.
    (ReadingSlot.EPITRE, ("épître", "epitre", "lettre")),
    (ReadingSlot.ALLELUIA, ("alléluia", "alleluia")),
    (ReadingSlot.LECTURE_2, ("deuxième lecture", "2e lecture", "seconde lecture")),
    # Catch-all for any other reading.
    (ReadingSlot.LECTURE_1, ("lecture",)),
)


def _fold(s: str | None) -> str:
    return unicodedata.normalize("NFKC", (s or "")).casefold().strip()


def as_reading(reading: RawReading | Mapping[str, Any]) -> RawReading:
    if isinstance(reading, RawReading):
        return reading
    return RawReading.model_validate(reading)


def explain_classification(reading: RawReading | Mapping[str, Any]) -> Tuple[ReadingSlot, str]:
    """Return the slot and the name of the rule that produced it."""
    reading = as_reading(reading)

    if reading.type in KNOWN_TYPES:
        return ReadingSlot(reading.type), "type"

    haystack = f"{_fold(reading.titre)} {_fold(reading.intro_lue)}"
    for slot, markers in TITLE_RULES:
        for marker in markers:
            if marker in haystack:
                return slot, f"marker:{marker}"

    return ReadingSlot.LECTURE_1, "default"


def classify_reading(
    reading: RawReading | Mapping[str, Any],
    siblings: Iterable[RawReading] | None = None,
) -> ReadingSlot:
    """Map one upstream reading to its canonical slot.

    `siblings` is accepted for callers that have the surrounding readings at
    hand; the rules do not need it.
    """
    reading = as_reading(reading)
    slot, rule = explain_classification(reading)
    if rule != "type":
        log.debug("Classified %r as %s (%s)", reading.titre, slot.value, rule)
    return slot
