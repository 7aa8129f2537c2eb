# lectures/tools/labels.py
from __future__ import annotations

import html
import re
from types import MappingProxyType

from lectures.models import ReadingSlot

TYPE_NAMES = MappingProxyType({
    "lecture_1": "1ère Lecture",
    "lecture_2": "2e Lecture",
    "lecture_3": "3e Lecture",
    "lecture_4": "4e Lecture",
    "lecture_5": "5e Lecture",
    "lecture_6": "6e Lecture",
    "lecture_7": "7e Lecture",
    "epitre": "Épître",
    "evangile": "Évangile",
    "psaume": "Psaume",
    "psaume_2": "Psaume",
    "psaume_3": "Psaume",
    "psaume_4": "Psaume",
    "cantique": "Cantique",
    "cantique_2": "Cantique",
    "alleluia": "Alléluia",
    "sequence": "Séquence",
})

TYPE_ICONS = MappingProxyType({
    **{f"lecture_{n}": "📖" for n in range(1, 8)},
    "epitre": "📖",
    "evangile": "✝️",
    "psaume": "🎵",
    "psaume_2": "🎵",
    "psaume_3": "🎵",
    "psaume_4": "🎵",
    "cantique": "🎼",
    "cantique_2": "🎼",
    "alleluia": "🌟",
    "sequence": "🎵",
})

COLOR_HEX = MappingProxyType({
    "vert": "#2e7d32",
    "violet": "#6a1b9a",
    "rouge": "#c62828",
    "blanc": "#b8a44c",
    "rose": "#d81b60",
    "noir": "#212121",
})

# Abbreviations used in AELF references ("Lc 2, 1-14").
BOOK_NAMES = MappingProxyType({
    "Gn": "Genèse", "Ex": "Exode", "Lv": "Lévitique", "Nb": "Nombres", "Dt": "Deutéronome",
    "Jos": "Josué", "Jg": "Juges", "Rt": "Ruth", "1S": "1 Samuel", "2S": "2 Samuel",
    "1R": "1 Rois", "2R": "2 Rois", "1Ch": "1 Chroniques", "2Ch": "2 Chroniques",
    "Esd": "Esdras", "Ne": "Néhémie", "Tb": "Tobit", "Jdt": "Judith", "Est": "Esther",
    "1M": "1 Maccabées", "2M": "2 Maccabées", "Jb": "Job", "Ps": "Psaumes", "Pr": "Proverbes",
    "Qo": "Qohélet", "Ct": "Cantique des Cantiques", "Sg": "Sagesse", "Si": "Siracide",
    "Is": "Isaïe", "Jr": "Jérémie", "Lm": "Lamentations", "Ba": "Baruch", "Ez": "Ézéchiel",
    "Dn": "Daniel", "Os": "Osée", "Jl": "Joël", "Am": "Amos", "Ab": "Abdias",
    "Jon": "Jonas", "Mi": "Michée", "Na": "Nahum", "Ha": "Habacuc", "So": "Sophonie",
    "Ag": "Aggée", "Za": "Zacharie", "Ml": "Malachie",
    "Mt": "Matthieu", "Mc": "Marc", "Lc": "Luc", "Jn": "Jean",
    "Ac": "Actes des Apôtres", "Rm": "Romains", "1Co": "1 Corinthiens", "2Co": "2 Corinthiens",
    "Ga": "Galates", "Ep": "Éphésiens", "Ph": "Philippiens", "Col": "Colossiens",
    "1Th": "1 Thessaloniciens", "2Th": "2 Thessaloniciens", "1Tm": "1 Timothée", "2Tm": "2 Timothée",
    "Tt": "Tite", "Phm": "Philémon", "He": "Hébreux", "Jc": "Jacques", "1P": "1 Pierre",
    "2P": "2 Pierre", "1Jn": "1 Jean", "2Jn": "2 Jean", "3Jn": "3 Jean", "Jd": "Jude",
    "Ap": "Apocalypse",
})

_BOOK_RE = re.compile(r"^\s*(\d?\s?[A-Za-zÀ-ÿ]+)")
_TAG_RE = re.compile(r"<[^>]+>")


def _value(slot: ReadingSlot | str) -> str:
    return slot.value if isinstance(slot, ReadingSlot) else str(slot)


def slot_label(slot: ReadingSlot | str) -> str:
    return TYPE_NAMES.get(_value(slot), "Lecture")


def slot_icon(slot: ReadingSlot | str) -> str:
    return TYPE_ICONS.get(_value(slot), "📄")


def color_hex(couleur: str | None) -> str:
    return COLOR_HEX.get((couleur or "").strip().lower(), COLOR_HEX["vert"])


def book_name(reference: str | None) -> str | None:
    """'1 Co 11, 23-26' -> '1 Corinthiens'; None when the book is unknown."""
    m = _BOOK_RE.match(reference or "")
    if not m:
        return None
    return BOOK_NAMES.get(m.group(1).replace(" ", ""))


def excerpt(text: str | None, width: int | None = 40) -> str:
    """Plain text of an HTML field, cut to `width` characters (None keeps all)."""
    plain = " ".join(html.unescape(_TAG_RE.sub(" ", text or "")).split())
    return plain[:width]
