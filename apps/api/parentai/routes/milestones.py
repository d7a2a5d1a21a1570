from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..milestones import MILESTONES, MILESTONES_BY_KEY, ChildMilestone, MilestoneDefinition, merge_achieved
from ..supabase import UserContext, get_user_context, parse_uuid
from ..trackers import select_or_empty

router = APIRouter(prefix="/api/v1", tags=["milestones"])
logger = logging.getLogger(__name__)


def _require_definition(milestone_key: str) -> MilestoneDefinition:
    definition = MILESTONES_BY_KEY.get(milestone_key)
    if definition is None:
        raise HTTPException(status_code=404, detail="Milestone not found")
    return definition


async def _achieved_rows(auth: UserContext, child_id: str) -> list:
    return await select_or_empty(
        auth.supabase,
        "milestones",
        {
            "select": "id,child_id,milestone_key,achieved,achieved_date,created_at",
            "child_id": f"eq.{child_id}",
            "order": "created_at.asc",
        },
    )


@router.get("/milestones", response_model=List[MilestoneDefinition])
async def list_milestone_catalog() -> List[MilestoneDefinition]:
    return MILESTONES


@router.get("/children/{child_id}/milestones", response_model=List[ChildMilestone])
async def list_child_milestones(
    child_id: str,
    auth: UserContext = Depends(get_user_context),
) -> List[ChildMilestone]:
    child_uuid = parse_uuid(child_id, "child_id")
    rows = await _achieved_rows(auth, child_uuid)
    return merge_achieved(rows)


@router.post("/children/{child_id}/milestones/{milestone_key}", response_model=ChildMilestone)
async def mark_milestone_achieved(
    child_id: str,
    milestone_key: str,
    achieved_date: Optional[date] = Query(None, description="Defaults to today"),
    auth: UserContext = Depends(get_user_context),
) -> ChildMilestone:
    child_uuid = parse_uuid(child_id, "child_id")
    definition = _require_definition(milestone_key)
    existing = [row for row in await _achieved_rows(auth, child_uuid) if row.get("milestone_key") == milestone_key]
    if existing:
        return ChildMilestone(
            **definition.model_dump(),
            achieved=True,
            achieved_date=existing[0].get("achieved_date"),
        )
    when = achieved_date or date.today()
    await auth.supabase.insert(
        "milestones",
        {
            "child_id": child_uuid,
            "milestone_key": definition.key,
            "category": definition.category,
            "title": definition.title,
            "description": definition.description,
            "achieved": True,
            "achieved_date": when.isoformat(),
        },
    )
    logger.info(
        "milestone achieved",
        extra={"child_id": child_uuid, "milestone_key": milestone_key},
    )
    return ChildMilestone(**definition.model_dump(), achieved=True, achieved_date=when)


@router.delete(
    "/children/{child_id}/milestones/{milestone_key}",
    status_code=204,
    response_class=Response,
)
async def unmark_milestone(
    child_id: str,
    milestone_key: str,
    auth: UserContext = Depends(get_user_context),
) -> Response:
    child_uuid = parse_uuid(child_id, "child_id")
    _require_definition(milestone_key)
    await auth.supabase.delete(
        "milestones",
        params={"child_id": f"eq.{child_uuid}", "milestone_key": f"eq.{milestone_key}"},
    )
    return Response(status_code=204)
