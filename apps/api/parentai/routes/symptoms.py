from typing import List

from fastapi import APIRouter, HTTPException

from ..symptoms import (
    SYMPTOMS,
    Symptom,
    SymptomAssessment,
    SymptomAssessmentRequest,
    assess_symptoms,
    unknown_symptom_ids,
)

router = APIRouter(prefix="/api/v1", tags=["emergency"])


@router.get("/symptoms", response_model=List[Symptom])
async def list_symptoms() -> List[Symptom]:
    return SYMPTOMS


@router.post("/symptoms/assess", response_model=SymptomAssessment)
async def assess(payload: SymptomAssessmentRequest) -> SymptomAssessment:
    """Triage the selected symptoms. General guidance only, not medical advice."""

    unknown = unknown_symptom_ids(payload.symptom_ids)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown symptom ids: {', '.join(unknown)}")
    return assess_symptoms(payload.symptom_ids)
