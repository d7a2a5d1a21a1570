"""Per-child feature logs: feeding, sleep, growth, vaccines, photos, doctor notes.

Every tracker has the same three endpoints, generated from its FeatureTable.
Sleep also gets an insights endpoint backed by the chat proxy.
"""
import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from ..ai_proxy import ProxyError, forward_chat
from ..schemas import SleepInsights
from ..sleep_insights import INSIGHTS_UNAVAILABLE, MIN_SESSIONS, NOT_ENOUGH_SESSIONS, build_sleep_prompt
from ..supabase import UserContext, get_user_context, parse_uuid
from ..trackers import FEATURE_TABLES, SLEEP, FeatureTable, create_record, delete_record, list_records

router = APIRouter(prefix="/api/v1", tags=["logs"])
logger = logging.getLogger(__name__)


def _register(feature: FeatureTable) -> None:
    create_model = feature.create_model
    path = f"/children/{{child_id}}/{feature.slug}"

    async def list_endpoint(
        child_id: str,
        auth: UserContext = Depends(get_user_context),
    ):
        child_uuid = parse_uuid(child_id, "child_id")
        logger.info(
            "child-scoped request",
            extra={"method": "GET", "path": path, "child_id": child_uuid},
        )
        return await list_records(auth.supabase, feature, child_uuid)

    async def create_endpoint(
        child_id: str,
        payload: create_model,
        auth: UserContext = Depends(get_user_context),
    ):
        child_uuid = parse_uuid(child_id, "child_id")
        logger.info(
            "child-scoped request",
            extra={"method": "POST", "path": path, "child_id": child_uuid},
        )
        try:
            return await create_record(auth.supabase, feature, child_uuid, payload)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    async def delete_endpoint(
        child_id: str,
        record_id: str,
        auth: UserContext = Depends(get_user_context),
    ) -> Response:
        child_uuid = parse_uuid(child_id, "child_id")
        record_uuid = parse_uuid(record_id, "record_id")
        await delete_record(auth.supabase, feature, child_uuid, record_uuid)
        return Response(status_code=204)

    name = feature.slug.replace("-", "_")
    router.add_api_route(
        path,
        list_endpoint,
        methods=["GET"],
        response_model=List[feature.row_model],
        name=f"list_{name}",
    )
    router.add_api_route(
        path,
        create_endpoint,
        methods=["POST"],
        response_model=feature.row_model,
        status_code=201,
        name=f"create_{name}",
    )
    router.add_api_route(
        f"{path}/{{record_id}}",
        delete_endpoint,
        methods=["DELETE"],
        status_code=204,
        response_class=Response,
        name=f"delete_{name}",
    )


for _feature in FEATURE_TABLES:
    _register(_feature)


@router.api_route(
    "/children/{child_id}/sleep/insights",
    methods=["GET", "POST"],
    response_model=SleepInsights,
)
async def sleep_insights(
    child_id: str,
    auth: UserContext = Depends(get_user_context),
) -> SleepInsights:
    child_uuid = parse_uuid(child_id, "child_id")
    logs = await list_records(auth.supabase, SLEEP, child_uuid)
    if len(logs) < MIN_SESSIONS:
        return SleepInsights(insights=NOT_ENOUGH_SESSIONS, sessions_analyzed=len(logs))

    try:
        text = await asyncio.to_thread(forward_chat, build_sleep_prompt(logs))
    except ProxyError as exc:
        logger.warning(
            "sleep insights unavailable",
            extra={"child_id": child_uuid, "status": exc.status_code},
        )
        return SleepInsights(insights=INSIGHTS_UNAVAILABLE, sessions_analyzed=len(logs), used_fallback=True)
    except Exception:
        logger.exception("sleep insights failed", extra={"child_id": child_uuid})
        return SleepInsights(insights=INSIGHTS_UNAVAILABLE, sessions_analyzed=len(logs), used_fallback=True)
    return SleepInsights(insights=text, sessions_analyzed=len(logs))
