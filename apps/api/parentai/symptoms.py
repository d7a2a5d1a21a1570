"""Emergency helper: symptom catalog and rule-based severity triage."""
from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional

from pydantic import BaseModel, Field


class SeverityTier(str, Enum):
    CRITICAL = "critical"
    URGENT = "urgent"
    MONITOR = "monitor"
    INFO = "info"


class Symptom(BaseModel):
    id: str
    name: str
    description: str


class Recommendation(BaseModel):
    severity: SeverityTier
    title: str
    description: str
    action: Optional[str] = None


class SymptomAssessmentRequest(BaseModel):
    symptom_ids: List[str] = Field(default_factory=list)


class SymptomAssessment(Recommendation):
    symptoms: List[Symptom] = Field(default_factory=list)


SYMPTOMS: List[Symptom] = [
    Symptom(id="1", name="High Fever", description="Temperature above 103°F (39.4°C)"),
    Symptom(id="2", name="Difficulty Breathing", description="Labored or fast breathing"),
    Symptom(id="3", name="Severe Rash", description="Widespread rash that won't fade"),
    Symptom(id="4", name="Choking", description="Unable to breathe or cry"),
    Symptom(id="5", name="Unresponsiveness", description="Baby won't wake up or respond"),
    Symptom(id="6", name="Severe Pain", description="Continuous severe crying"),
    Symptom(id="7", name="Dehydration", description="No wet diapers for 8+ hours"),
    Symptom(id="8", name="Seizures", description="Convulsions or unusual jerking"),
]
SYMPTOMS_BY_ID: Dict[str, Symptom] = {symptom.id: symptom for symptom in SYMPTOMS}

SEVERE_SYMPTOM_IDS: FrozenSet[str] = frozenset({"1", "2", "3", "4", "5", "8"})
URGENT_SYMPTOM_COUNT = 3

RECOMMENDATIONS: Dict[SeverityTier, Recommendation] = {
    SeverityTier.INFO: Recommendation(
        severity=SeverityTier.INFO,
        title="Select Symptoms",
        description="Please select the symptoms your child is experiencing",
    ),
    SeverityTier.CRITICAL: Recommendation(
        severity=SeverityTier.CRITICAL,
        title="Call Emergency Services Immediately",
        description=(
            "Based on the symptoms selected, your child needs immediate emergency medical attention."
        ),
        action="Call 911 or your local emergency number",
    ),
    SeverityTier.URGENT: Recommendation(
        severity=SeverityTier.URGENT,
        title="Seek Urgent Care",
        description="Your child should be evaluated by a healthcare professional as soon as possible.",
        action="Contact your pediatrician or visit an urgent care clinic",
    ),
    SeverityTier.MONITOR: Recommendation(
        severity=SeverityTier.MONITOR,
        title="Monitor Your Child",
        description=(
            "Keep a close watch on your child's symptoms and contact your pediatrician if they worsen."
        ),
        action="Schedule a doctor's appointment if symptoms persist",
    ),
}


def unknown_symptom_ids(symptom_ids: Iterable[str]) -> List[str]:
    return sorted({value for value in symptom_ids if value not in SYMPTOMS_BY_ID})


def classify_symptoms(symptom_ids: Iterable[str]) -> SeverityTier:
    """Map a symptom selection to a severity tier.

    Any severe symptom wins outright; otherwise the tier depends only on how
    many distinct symptoms were selected.
    """

    selected = set(symptom_ids)
    if selected & SEVERE_SYMPTOM_IDS:
        return SeverityTier.CRITICAL
    if len(selected) >= URGENT_SYMPTOM_COUNT:
        return SeverityTier.URGENT
    if selected:
        return SeverityTier.MONITOR
    return SeverityTier.INFO


def assess_symptoms(symptom_ids: Iterable[str]) -> SymptomAssessment:
    selected = sorted(set(symptom_ids), key=lambda value: (len(value), value))
    tier = classify_symptoms(selected)
    recommendation = RECOMMENDATIONS[tier]
    return SymptomAssessment(
        **recommendation.model_dump(),
        symptoms=[SYMPTOMS_BY_ID[value] for value in selected if value in SYMPTOMS_BY_ID],
    )
