# lectures/tools/normalize.py
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from lectures.models import RawReading, ReadingGroup, ReadingSlot, ReadingVersion
from .classify import as_reading, classify_reading

S = ReadingSlot

# Presentation order of a mass. Repeated slots are emitted only the first time.
CANONICAL_ORDER = (
    S.LECTURE_1, S.PSAUME, S.LECTURE_2, S.PSAUME, S.LECTURE_3, S.CANTIQUE,
    S.LECTURE_4, S.PSAUME, S.LECTURE_5, S.CANTIQUE, S.LECTURE_6, S.PSAUME,
    S.LECTURE_7, S.PSAUME, S.EPITRE, S.ALLELUIA, S.EVANGILE,
)


def _version(raw: RawReading, slot: ReadingSlot, *, messe_nom: str, messe_index: int,
             lecture_index: int, version_index: int) -> ReadingVersion:
    return ReadingVersion(
        type=slot,
        raw_type=raw.type,
        titre=raw.titre or "",
        contenu=raw.contenu or "",
        reference=raw.reference or raw.ref or "",
        ref=raw.ref or raw.reference or "",
        refrain_psalmique=raw.refrain_psalmique or None,
        verset_evangile=raw.verset_evangile or None,
        intro_lue=raw.intro_lue or None,
        ref_refrain=raw.ref_refrain or None,
        ref_verset=raw.ref_verset or None,
        messe_nom=messe_nom,
        messe_index=messe_index,
        lecture_index=lecture_index,
        version_index=version_index,
    )


def order_groups(groups: Mapping[ReadingSlot, ReadingGroup]) -> List[ReadingGroup]:
    """Sort groups by CANONICAL_ORDER; unknown slots follow in first-seen order."""
    pending: Dict[ReadingSlot, ReadingGroup] = dict(groups)
    ordered: List[ReadingGroup] = []
    for slot in CANONICAL_ORDER:
        group = pending.pop(slot, None)
        if group is not None:
            ordered.append(group)
    ordered.extend(pending.values())
    return ordered


def normalize_mass(
    lectures: Sequence[RawReading | Mapping[str, Any]],
    *,
    messe_index: int = 0,
    messe_nom: str | None = None,
) -> List[ReadingGroup]:
    """Turn one mass's reading list into ordered reading groups.

    Readings sharing a slot become versions of the same group (long/short
    gospel, alternative psalms), kept in source order. Nothing is dropped:
    the version counts of the result always add up to len(lectures).
    """
    nom = messe_nom or f"Messe {messe_index + 1}"
    readings = [as_reading(r) for r in lectures or []]

    by_slot: Dict[ReadingSlot, List[ReadingVersion]] = {}
    for i, raw in enumerate(readings):
        slot = classify_reading(raw, readings)
        versions = by_slot.setdefault(slot, [])
        versions.append(
            _version(raw, slot, messe_nom=nom, messe_index=messe_index,
                     lecture_index=i, version_index=len(versions))
        )

    groups = {
        slot: ReadingGroup(type=slot, versions=versions, messe_nom=nom, messe_index=messe_index)
        for slot, versions in by_slot.items()
    }
    return order_groups(groups)
