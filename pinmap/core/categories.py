# pinmap/core/categories.py
# Two-level classification shared by request validation and the client subtype selector.
from __future__ import annotations
from typing import Dict, List

CATEGORIES: Dict[str, List[str]] = {
    "Hazard": ["Fire", "Flood", "Earthquake", "Chemical Leak", "Landslide", "Storm"],
    "Impact": ["Injury", "Damage", "Power Outage", "Blocked Road"],
    "Resource": ["Shelter", "Medical Aid", "Food/Water", "Rescue Team"],
    "Alert": ["Evacuation", "Missing Person", "Verified Info", "Safety Tip"],
}

MAIN_CATEGORIES: List[str] = list(CATEGORIES)
SUB_TYPES: List[str] = [s for subs in CATEGORIES.values() for s in subs]

DEFAULT_STATUS = "Active"


def sub_types_for(main: str | None) -> List[str]:
    if not main:
        return []
    return list(CATEGORIES.get(main, []))


def belongs_to(main: str, sub: str) -> bool:
    return sub in CATEGORIES.get(main, ())
