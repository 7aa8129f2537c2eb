# lectures/tools/shape.py
from __future__ import annotations

from typing import Any, Dict, List, Mapping

from pydantic import ValidationError

from lectures.errors import ContentError
from lectures.models import LiturgicalInfo, Mass, NormalizedResponse, ReadingGroup, UpstreamPayload
from .normalize import normalize_mass


def build_informations(raw: Mapping[str, Any] | None, day: str) -> LiturgicalInfo:
    """Day metadata with defaults for whatever AELF left out."""
    raw = dict(raw or {})
    return LiturgicalInfo(
        **{
            **raw,
            "date": raw.get("date") or day,
            "jour_liturgique_nom": raw.get("jour_liturgique_nom") or raw.get("nom") or "Jour liturgique",
            "couleur": raw.get("couleur") or "vert",
            "temps_liturgique": raw.get("temps_liturgique") or "ordinaire",
            "semaine": raw.get("semaine") or "",
            "fete": raw.get("fete") or raw.get("ligne2") or "",
        }
    )


def lecture_key(slot: str, messe_index: int, multiple_masses: bool) -> str:
    return f"{slot}_messe{messe_index}" if multiple_masses else slot


def build_response(payload: Mapping[str, Any], day: str) -> NormalizedResponse:
    """Assemble the exposed response from a raw AELF payload.

    Raises ContentError when the payload does not validate or yields neither
    masses nor readings; callers treat that like an upstream failure.
    """
    try:
        parsed = UpstreamPayload.model_validate(payload)
        informations = build_informations(parsed.informations, day)
    except ValidationError as e:
        raise ContentError(f"Réponse inattendue ({e.error_count()} champ(s) invalide(s))") from e

    multiple = len(parsed.messes) > 1
    messes: List[Mass] = []
    lectures: Dict[str, ReadingGroup] = {}

    for i, messe in enumerate(parsed.messes):
        messes.append(Mass.model_validate({**messe.model_dump(), "id": f"messe{i}"}))
        for group in normalize_mass(messe.lectures, messe_index=i, messe_nom=messe.nom):
            lectures[lecture_key(group.type.value, i, multiple)] = group

    if not messes and not lectures:
        raise ContentError("Aucune lecture disponible")

    return NormalizedResponse(
        informations=informations,
        messes=messes,
        lectures=lectures,
    )
