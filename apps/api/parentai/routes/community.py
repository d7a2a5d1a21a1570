from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..community import SAMPLE_QUESTIONS, AskQuestionPayload, CommunityQuestion, question_from_row
from ..supabase import UserContext, get_user_context
from ..trackers import select_or_empty

router = APIRouter(prefix="/api/v1/community", tags=["community"])


@router.get("/questions", response_model=List[CommunityQuestion])
async def list_questions(auth: UserContext = Depends(get_user_context)) -> List[CommunityQuestion]:
    rows = await select_or_empty(
        auth.supabase,
        "community_questions",
        {"select": "*", "order": "created_at.desc"},
    )
    return [question_from_row(row) for row in rows] + SAMPLE_QUESTIONS


@router.post("/questions", response_model=CommunityQuestion, status_code=201)
async def ask_question(
    payload: AskQuestionPayload,
    auth: UserContext = Depends(get_user_context),
) -> CommunityQuestion:
    rows = await auth.supabase.insert(
        "community_questions",
        {
            "user_id": auth.user_id,
            "title": payload.title,
            "content": payload.content,
            "author": auth.full_name or "You",
            "answers": 0,
            "likes": 0,
        },
    )
    if not rows:
        raise HTTPException(status_code=502, detail="Supabase insert returned no row (table=community_questions)")
    return question_from_row(rows[0])
