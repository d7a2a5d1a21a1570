"""Canned assistant replies used when the AI proxy cannot answer."""
from __future__ import annotations

import random
from typing import Optional

FALLBACK_RESPONSES = [
    "That's a great question! Here are some expert tips on this topic...",
    "Based on child development research, here's what I recommend...",
    "Many parents face this challenge. Let me share some proven strategies...",
    "This is an important concern. Here's what pediatricians suggest...",
]

SERVICE_UNAVAILABLE_NOTE = "(Note: AI service temporarily unavailable. Using fallback responses.)"
SERVICE_UNREACHABLE_NOTE = "(Note: Unable to reach AI service. Please try again later.)"


def fallback_reply(*, use_fallback_hint: bool, rng: Optional[random.Random] = None) -> str:
    chooser = rng or random
    note = SERVICE_UNAVAILABLE_NOTE if use_fallback_hint else SERVICE_UNREACHABLE_NOTE
    return f"{chooser.choice(FALLBACK_RESPONSES)}\n\n{note}"
