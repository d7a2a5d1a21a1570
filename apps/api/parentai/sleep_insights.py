"""Sleep-pattern prompts for the parenting assistant."""
from __future__ import annotations

from typing import Sequence

from .schemas import SleepLog

MIN_SESSIONS = 3
NOT_ENOUGH_SESSIONS = "Log at least 3 sleep sessions to get AI insights."
INSIGHTS_UNAVAILABLE = "Unable to generate insights at this time."


def describe_session(log: SleepLog) -> str:
    start = log.sleep_start.strftime("%Y-%m-%d %H:%M")
    duration = log.duration_minutes if log.duration_minutes is not None else "unknown"
    quality = log.sleep_quality or "not rated"
    return f"Start: {start}, Duration: {duration} min, Quality: {quality}"


def build_sleep_prompt(logs: Sequence[SleepLog]) -> str:
    sessions = "; ".join(describe_session(log) for log in logs)
    return (
        f"Sleep logs: {sessions}. Provide insights on sleep patterns, average duration, "
        "quality trends, and recommendations for better sleep."
    )
