from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from ..schemas import Child, ChildCreate, DashboardResponse, User
from ..supabase import UserContext, get_user_context, parse_uuid
from ..trackers import select_or_empty

router = APIRouter(prefix="/api/v1", tags=["children"])
logger = logging.getLogger(__name__)

CHILD_COLUMNS = "id,user_id,name,date_of_birth,gender,created_at"


def _pluralize(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def describe_age(date_of_birth: date, today: Optional[date] = None) -> str:
    """Human age label: months under a year, then years plus leftover months."""

    today = today or date.today()
    months = (today.year - date_of_birth.year) * 12 + today.month - date_of_birth.month
    if months < 12:
        return _pluralize(months, "month")
    years, remainder = divmod(months, 12)
    if remainder:
        return f"{_pluralize(years, 'year')}, {_pluralize(remainder, 'month')}"
    return _pluralize(years, "year")


def _child_from_row(row: Dict[str, Any]) -> Child:
    child = Child.model_validate(row)
    child.age_label = describe_age(child.date_of_birth)
    return child


def _user_from_context(auth: UserContext) -> User:
    return User(id=auth.user_id, email=auth.user_email, full_name=auth.full_name)


async def fetch_children(auth: UserContext) -> List[Child]:
    rows = await select_or_empty(
        auth.supabase,
        "children",
        {
            "select": CHILD_COLUMNS,
            "user_id": f"eq.{auth.user_id}",
            "order": "created_at.asc",
        },
    )
    return [_child_from_row(row) for row in rows]


async def require_child(auth: UserContext, child_id: str) -> Child:
    child_uuid = parse_uuid(child_id, "child_id")
    rows = await auth.supabase.select(
        "children",
        params={"select": CHILD_COLUMNS, "id": f"eq.{child_uuid}", "limit": "1"},
    )
    if not rows:
        raise HTTPException(status_code=404, detail="Child not found")
    return _child_from_row(rows[0])


@router.get("/me", response_model=User)
async def current_user(auth: UserContext = Depends(get_user_context)) -> User:
    return _user_from_context(auth)


@router.get("/children", response_model=List[Child])
async def list_children(auth: UserContext = Depends(get_user_context)) -> List[Child]:
    return await fetch_children(auth)


@router.post("/children", response_model=Child, status_code=201)
async def create_child(
    payload: ChildCreate,
    auth: UserContext = Depends(get_user_context),
) -> Child:
    rows = await auth.supabase.insert(
        "children",
        {
            "user_id": auth.user_id,
            "name": payload.name,
            "date_of_birth": payload.date_of_birth.isoformat(),
            "gender": payload.gender,
        },
    )
    if not rows:
        raise HTTPException(status_code=502, detail="Supabase insert returned no row (table=children)")
    logger.info("child created", extra={"user_id": auth.user_id, "child_id": rows[0].get("id")})
    return _child_from_row(rows[0])


@router.get("/children/{child_id}", response_model=Child)
async def get_child(child_id: str, auth: UserContext = Depends(get_user_context)) -> Child:
    return await require_child(auth, child_id)


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(auth: UserContext = Depends(get_user_context)) -> DashboardResponse:
    children = await fetch_children(auth)
    insights = await select_or_empty(
        auth.supabase,
        "daily_insights",
        {
            "select": "*",
            "user_id": f"eq.{auth.user_id}",
            "order": "created_at.desc",
            "limit": "3",
        },
    )
    return DashboardResponse(user=_user_from_context(auth), children=children, insights=insights)
