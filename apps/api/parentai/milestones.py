"""Developmental milestone catalog."""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel


class MilestoneDefinition(BaseModel):
    key: str
    category: str
    title: str
    description: str


class ChildMilestone(MilestoneDefinition):
    achieved: bool = False
    achieved_date: Optional[date] = None


# key, title, typical age window
_CATALOG = {
    "Physical": [
        ("1", "Holds head up", "2-3 months"),
        ("2", "Rolls over", "4-6 months"),
        ("3", "Sits without support", "6 months"),
        ("4", "Crawls", "8-10 months"),
        ("5", "Walks", "12-15 months"),
    ],
    "Cognitive": [
        ("6", "Recognizes faces", "2-3 months"),
        ("7", "Responds to their name", "6-9 months"),
        ("8", "Understands object permanence", "8-12 months"),
        ("9", "Points at objects", "12-15 months"),
    ],
    "Social": [
        ("10", "Social smile", "2-3 months"),
        ("11", "Laughs out loud", "3-4 months"),
        ("12", "Shows affection", "6-12 months"),
        ("13", "Waves goodbye", "12-15 months"),
    ],
    "Language": [
        ("14", "Coos and babbles", "2-4 months"),
        ("15", 'Says "mama" and "dada"', "6-12 months"),
        ("16", "First words", "12-18 months"),
        ("17", "Two-word phrases", "18-24 months"),
    ],
}

MILESTONES: List[MilestoneDefinition] = [
    MilestoneDefinition(key=key, category=category, title=title, description=description)
    for category, entries in _CATALOG.items()
    for key, title, description in entries
]
MILESTONES_BY_KEY: Dict[str, MilestoneDefinition] = {item.key: item for item in MILESTONES}


def merge_achieved(rows: List[Dict]) -> List[ChildMilestone]:
    """Overlay stored achievement rows on the static catalog."""

    achieved: Dict[str, Dict] = {}
    for row in rows:
        key = row.get("milestone_key")
        if key in MILESTONES_BY_KEY and row.get("achieved", True):
            achieved[key] = row
    merged: List[ChildMilestone] = []
    for item in MILESTONES:
        row = achieved.get(item.key)
        merged.append(
            ChildMilestone(
                **item.model_dump(),
                achieved=row is not None,
                achieved_date=row.get("achieved_date") if row else None,
            )
        )
    return merged
