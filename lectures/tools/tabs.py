# lectures/tools/tabs.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Optional

from lectures.models import ReadingGroup, ReadingSlot, ReadingVersion
from .labels import excerpt, slot_icon, slot_label

# Slots whose duplicates are long/short forms rather than alternative texts.
LONG_SHORT_SLOTS = frozenset({
    ReadingSlot.EVANGILE, ReadingSlot.EPITRE,
    *(ReadingSlot(f"lecture_{n}") for n in range(1, 8)),
})


@dataclass
class TabController:
    """Which group, and which version inside it, is on screen.

    Indices point straight into the normalized groups; selecting never
    touches the groups themselves.
    """

    groups: List[ReadingGroup] = field(default_factory=list)
    source_key: Optional[Hashable] = None
    active_group: int = 0
    selected_versions: Dict[int, int] = field(default_factory=dict)

    def load(self, groups: List[ReadingGroup], key: Hashable) -> None:
        if key != self.source_key:
            self.active_group = 0
            self.selected_versions = {}
            self.source_key = key
        self.groups = list(groups)
        # same key reloaded with other groups: keep only indices that still exist
        if not 0 <= self.active_group < len(self.groups):
            self.active_group = 0
        self.selected_versions = {
            gi: vi for gi, vi in self.selected_versions.items()
            if gi < len(self.groups) and vi < len(self.groups[gi].versions)
        }

    def _check_group(self, index: int) -> ReadingGroup:
        if not 0 <= index < len(self.groups):
            raise IndexError(f"no reading group at index {index}")
        return self.groups[index]

    def select_group(self, index: int) -> None:
        self._check_group(index)
        self.active_group = index

    def select_version(self, version_index: int, group_index: int | None = None) -> None:
        gi = self.active_group if group_index is None else group_index
        group = self._check_group(gi)
        if not 0 <= version_index < len(group.versions):
            raise IndexError(f"group {gi} has no version {version_index}")
        self.active_group = gi
        self.selected_versions[gi] = version_index

    def active_version(self, group_index: int | None = None) -> int:
        gi = self.active_group if group_index is None else group_index
        return self.selected_versions.get(gi, 0)

    def current(self) -> ReadingVersion | None:
        if not self.groups:
            return None
        group = self.groups[self.active_group]
        return group.versions[self.active_version()]

    def tab_labels(self) -> List[str]:
        return [f"{slot_icon(g.type)} {slot_label(g.type)}" for g in self.groups]

    def version_labels(self, group_index: int | None = None) -> List[str]:
        gi = self.active_group if group_index is None else group_index
        group = self._check_group(gi)
        if len(group.versions) == 2 and group.type in LONG_SHORT_SLOTS:
            return [
                " · ".join(p for p in (form, v.reference) if p)
                for form, v in zip(("Version longue", "Version brève"), group.versions)
            ]
        return [
            v.titre or v.reference or excerpt(v.contenu) or f"Option {i + 1}"
            for i, v in enumerate(group.versions)
        ]
