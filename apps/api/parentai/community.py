"""Community Q&A board content."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CommunityQuestion(BaseModel):
    id: str
    title: str
    content: str
    author: str
    answers: int = 0
    likes: int = 0
    timestamp: str


class AskQuestionPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)


SAMPLE_QUESTIONS: List[CommunityQuestion] = [
    CommunityQuestion(
        id="sample-1",
        title="How to handle separation anxiety in toddlers?",
        content="My 18-month-old has severe separation anxiety and cries whenever I leave the room...",
        author="Sarah M.",
        answers=12,
        likes=45,
        timestamp="2 hours ago",
    ),
    CommunityQuestion(
        id="sample-2",
        title="Best sleep schedule for a 6-month-old",
        content="Trying to establish a consistent sleep routine. What has worked for others?...",
        author="Mike T.",
        answers=8,
        likes=32,
        timestamp="4 hours ago",
    ),
    CommunityQuestion(
        id="sample-3",
        title="Dealing with picky eaters",
        content="My 3-year-old refuses to eat anything except pasta. Any suggestions?...",
        author="Emma L.",
        answers=15,
        likes=58,
        timestamp="6 hours ago",
    ),
    CommunityQuestion(
        id="sample-4",
        title="When should I start potty training?",
        content="Signs to look for and tips that have worked for other parents?...",
        author="John D.",
        answers=20,
        likes=67,
        timestamp="8 hours ago",
    ),
]


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def describe_elapsed(created_at: Optional[str], now: Optional[datetime] = None) -> str:
    if not created_at:
        return "just now"
    ts = created_at.strip()
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(ts)
    except ValueError:
        return "just now"
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = int((now - moment).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return _plural(seconds // 60, "minute")
    if seconds < 86400:
        return _plural(seconds // 3600, "hour")
    return _plural(seconds // 86400, "day")


def question_from_row(row: Dict[str, Any], now: Optional[datetime] = None) -> CommunityQuestion:
    return CommunityQuestion(
        id=str(row["id"]),
        title=row["title"],
        content=row["content"],
        author=row.get("author") or "Anonymous",
        answers=row.get("answers") or 0,
        likes=row.get("likes") or 0,
        timestamp=describe_elapsed(row.get("created_at"), now),
    )
