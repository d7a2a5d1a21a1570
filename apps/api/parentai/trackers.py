"""Feature-log tables and the select/insert/delete helpers shared by every tracker."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

import httpx
from fastapi import HTTPException
from pydantic import BaseModel

from .schemas import (
    DoctorNote,
    DoctorNoteCreate,
    FeedingLog,
    FeedingLogCreate,
    GrowthRecord,
    GrowthRecordCreate,
    LogPayload,
    PhotoEntry,
    PhotoEntryCreate,
    SleepLog,
    SleepLogCreate,
    VaccineRecord,
    VaccineRecordCreate,
)
from .supabase import SupabaseClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureTable:
    """One per-child log table and how its rows are listed."""

    slug: str
    table: str
    order_column: str
    create_model: Type[LogPayload]
    row_model: Type[BaseModel]
    ascending: bool = False
    limit: Optional[int] = None

    def select_params(self, child_id: str) -> Dict[str, Any]:
        direction = "asc" if self.ascending else "desc"
        params: Dict[str, Any] = {
            "select": "*",
            "child_id": f"eq.{child_id}",
            "order": f"{self.order_column}.{direction}",
        }
        if self.limit is not None:
            params["limit"] = str(self.limit)
        return params

    def row_payload(self, child_id: str, payload: LogPayload) -> Dict[str, Any]:
        row = payload.to_row()
        row["child_id"] = child_id
        return row


FEEDING = FeatureTable(
    slug="feeding",
    table="feeding_logs",
    order_column="fed_at",
    create_model=FeedingLogCreate,
    row_model=FeedingLog,
    limit=20,
)
SLEEP = FeatureTable(
    slug="sleep",
    table="sleep_logs",
    order_column="sleep_start",
    create_model=SleepLogCreate,
    row_model=SleepLog,
    limit=10,
)
GROWTH = FeatureTable(
    slug="growth",
    table="growth_records",
    order_column="measurement_date",
    create_model=GrowthRecordCreate,
    row_model=GrowthRecord,
)
VACCINES = FeatureTable(
    slug="vaccines",
    table="vaccine_records",
    order_column="scheduled_date",
    create_model=VaccineRecordCreate,
    row_model=VaccineRecord,
    ascending=True,
)
PHOTOS = FeatureTable(
    slug="photos",
    table="photo_journal",
    order_column="date_taken",
    create_model=PhotoEntryCreate,
    row_model=PhotoEntry,
)
DOCTOR_NOTES = FeatureTable(
    slug="doctor-notes",
    table="pediatrician_notes",
    order_column="visit_date",
    create_model=DoctorNoteCreate,
    row_model=DoctorNote,
)

FEATURE_TABLES: List[FeatureTable] = [FEEDING, SLEEP, GROWTH, VACCINES, PHOTOS, DOCTOR_NOTES]


async def select_or_empty(
    supabase: SupabaseClient,
    table: str,
    params: Dict[str, Any],
) -> List[Dict[str, Any]]:
    """Run a select, degrading to an empty list when the store is unreachable."""

    try:
        return await supabase.select(table, params=params)
    except (HTTPException, httpx.HTTPError) as exc:
        logger.warning(
            "select failed, returning empty list",
            extra={"table": table, "error": str(exc)},
        )
        return []


async def list_records(
    supabase: SupabaseClient,
    feature: FeatureTable,
    child_id: str,
) -> List[BaseModel]:
    rows = await select_or_empty(supabase, feature.table, feature.select_params(child_id))
    records = [feature.row_model.model_validate(row) for row in rows]
    logger.info(
        "feature log query",
        extra={"table": feature.table, "child_id": child_id, "count": len(records)},
    )
    return records


async def create_record(
    supabase: SupabaseClient,
    feature: FeatureTable,
    child_id: str,
    payload: LogPayload,
) -> BaseModel:
    row = feature.row_payload(child_id, payload)
    inserted = await supabase.insert(feature.table, row)
    if not inserted:
        raise HTTPException(status_code=502, detail=f"Supabase insert returned no row (table={feature.table})")
    return feature.row_model.model_validate(inserted[0])


async def delete_record(
    supabase: SupabaseClient,
    feature: FeatureTable,
    child_id: str,
    record_id: str,
) -> None:
    await supabase.delete(
        feature.table,
        params={"id": f"eq.{record_id}", "child_id": f"eq.{child_id}"},
    )
    logger.info(
        "feature log deleted",
        extra={"table": feature.table, "child_id": child_id, "record_id": record_id},
    )
