"""Sound catalog — names for the alarm sounds a timer can play."""

from __future__ import annotations

from typing import Optional, Sequence

DEFAULT_SOUND_NAME = "Stop Playing"

_SOUND_NAMES = (
    "Radar",
    "Apex",
    "Beacon",
    "Bulletin",
    "By The Seaside",
    "Chimes",
    "Circuit",
    "Constellation",
    "Cosmic",
    "Crystals",
    "Hillside",
    "Illuminate",
    "Night Owl",
    "Opening",
    "Playtime",
    "Presto",
    "Radiate",
    "Reflection",
    "Ripples",
    "Sencha",
    "Signal",
    "Silk",
    "Slow Rise",
    "Stargaze",
    "Summit",
    "Twinkle",
    "Uplift",
    "Waves",
)


class SoundCatalog:
    """Maps sound ids to display names.  Ids are indexes into *names*."""

    def __init__(self, names: Sequence[str] = _SOUND_NAMES) -> None:
        self._names = tuple(names)

    def name_for(self, sound_id: Optional[int]) -> Optional[str]:
        """Return the name for *sound_id*, or ``None`` when absent or unknown."""
        if sound_id is None or not (0 <= sound_id < len(self._names)):
            return None
        return self._names[sound_id]

    def label_for(self, sound_id: Optional[int]) -> str:
        return self.name_for(sound_id) or DEFAULT_SOUND_NAME

    def items(self) -> list[tuple[int, str]]:
        return list(enumerate(self._names))
