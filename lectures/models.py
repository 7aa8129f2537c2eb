# lectures/models.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class ReadingSlot(str, Enum):
    """Canonical role of a reading inside one mass."""

    LECTURE_1 = "lecture_1"
    LECTURE_2 = "lecture_2"
    LECTURE_3 = "lecture_3"
    LECTURE_4 = "lecture_4"
    LECTURE_5 = "lecture_5"
    LECTURE_6 = "lecture_6"
    LECTURE_7 = "lecture_7"
    EPITRE = "epitre"
    EVANGILE = "evangile"
    PSAUME = "psaume"
    PSAUME_2 = "psaume_2"
    PSAUME_3 = "psaume_3"
    PSAUME_4 = "psaume_4"
    CANTIQUE = "cantique"
    CANTIQUE_2 = "cantique_2"
    ALLELUIA = "alleluia"
    SEQUENCE = "sequence"


# -------- Upstream records (untrusted) --------
def as_text(v: Any) -> Optional[str]:
    """Scalars become strings; None, lists and objects become None."""
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, (bool, int, float)):
        return str(v)
    return None


class RawReading(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    titre: Optional[str] = None
    contenu: Optional[str] = None
    reference: Optional[str] = None
    ref: Optional[str] = None
    refrain_psalmique: Optional[str] = None
    verset_evangile: Optional[str] = None
    intro_lue: Optional[str] = None
    ref_refrain: Optional[str] = None
    ref_verset: Optional[str] = None

    @field_validator(
        "type", "titre", "contenu", "reference", "ref", "refrain_psalmique",
        "verset_evangile", "intro_lue", "ref_refrain", "ref_verset",
        mode="before",
    )
    @classmethod
    def _text(cls, v):
        return as_text(v)


class RawMass(BaseModel):
    model_config = ConfigDict(extra="allow")

    nom: Optional[str] = None
    lectures: List[RawReading] = Field(default_factory=list)

    @field_validator("nom", mode="before")
    @classmethod
    def _text(cls, v):
        return as_text(v)

    @field_validator("lectures", mode="before")
    @classmethod
    def _null_lectures(cls, v):
        return v or []


class UpstreamPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    informations: Dict[str, Any] = Field(default_factory=dict)
    messes: List[RawMass] = Field(default_factory=list)

    @field_validator("informations", "messes", mode="before")
    @classmethod
    def _null_to_empty(cls, v, info):
        if v is None:
            return {} if info.field_name == "informations" else []
        return v


# -------- Normalized records --------
class LiturgicalInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: str
    jour_liturgique_nom: str = "Jour liturgique"
    couleur: str = "vert"
    temps_liturgique: str = "ordinaire"
    semaine: str = ""
    fete: str = ""

    # numbers are kept as text, e.g. "semaine": 24
    @field_validator("date", "jour_liturgique_nom", "couleur", "temps_liturgique", "semaine", "fete", mode="before")
    @classmethod
    def _scalars(cls, v):
        text = as_text(v)
        return v if text is None else text


class Mass(RawMass):
    id: str


class ReadingVersion(BaseModel):
    type: ReadingSlot
    raw_type: Optional[str] = None
    titre: str = ""
    contenu: str = ""
    reference: str = ""
    ref: str = ""
    refrain_psalmique: Optional[str] = None
    verset_evangile: Optional[str] = None
    intro_lue: Optional[str] = None
    ref_refrain: Optional[str] = None
    ref_verset: Optional[str] = None
    messe_nom: str
    messe_index: int
    lecture_index: int
    version_index: int


class ReadingGroup(BaseModel):
    type: ReadingSlot
    versions: List[ReadingVersion] = Field(min_length=1)
    messe_nom: str
    messe_index: int

    @computed_field
    @property
    def has_multiple_versions(self) -> bool:
        return len(self.versions) > 1

    @property
    def reading(self) -> ReadingVersion:
        return self.versions[0]


class NormalizedResponse(BaseModel):
    informations: LiturgicalInfo
    messes: List[Mass] = Field(default_factory=list)
    lectures: Dict[str, ReadingGroup] = Field(default_factory=dict)

    def groups_for(self, messe_index: int = 0) -> List[ReadingGroup]:
        """Groups of one mass, in presentation order."""
        return [g for g in self.lectures.values() if g.messe_index == messe_index]
