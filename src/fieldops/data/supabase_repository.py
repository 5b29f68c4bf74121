"""Supabase-backed readers for technicians, location samples and tickets."""

from __future__ import annotations

import logging
from typing import Any, Optional

from supabase import AsyncClient

from ..models.domain import (
    ACTIVE_JOB_STATUSES,
    JobRef,
    LocationSample,
    Priority,
    TechnicianProfile,
)
from ..services.tracking.liveness import as_utc
from ..services.tracking.providers import ChangeCallback

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
LOCATIONS_TABLE = "technician_locations"
TICKETS_TABLE = "tickets"
LOCATION_CHANNEL = "technician_locations_changes"

TICKET_COLUMNS = (
    "id, ticket_number, title, status, priority, scheduled_date, estimated_duration, "
    "customer:customers!tickets_customer_id_fkey(name, address, latitude, longitude)"
)


class DataProviderError(RuntimeError):
    """Raised when the hosted data service cannot serve a dispatch read."""


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def profile_from_row(row: dict[str, Any]) -> TechnicianProfile:
    return TechnicianProfile(
        id=str(row["id"]),
        full_name=(row.get("full_name") or "").strip() or "Unknown",
        email=row.get("email") or "",
        phone=row.get("phone") or None,
    )


def location_from_row(row: dict[str, Any]) -> LocationSample:
    return LocationSample(
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        accuracy_meters=_optional_float(row.get("accuracy")),
        captured_at=as_utc(row["timestamp"]),
    )


def job_from_row(row: dict[str, Any]) -> JobRef:
    customer = row.get("customer") or {}
    scheduled = row.get("scheduled_date")
    return JobRef(
        id=str(row["id"]),
        code=row.get("ticket_number") or "",
        title=row.get("title") or "",
        status=row.get("status") or "",
        priority=Priority.parse(row.get("priority")),
        customer_name=customer.get("name") or "Unknown",
        customer_address=customer.get("address") or None,
        customer_latitude=_optional_float(customer.get("latitude")),
        customer_longitude=_optional_float(customer.get("longitude")),
        scheduled_at=as_utc(scheduled) if scheduled else None,
        estimated_duration_minutes=_optional_int(row.get("estimated_duration")),
    )


class _ChannelSubscription:
    def __init__(self, client: AsyncClient, channel: Any) -> None:
        self._client = client
        self._channel = channel

    async def close(self) -> None:
        await self._client.remove_channel(self._channel)


class SupabaseDispatchRepository:
    """Roster provider, location store and job provider over one Supabase project."""

    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    async def fetch_roster(self) -> list[TechnicianProfile]:
        try:
            response = await (
                self._client.table(PROFILES_TABLE)
                .select("*")
                .eq("role", "technician")
                .eq("is_active", True)
                .execute()
            )
        except Exception as exc:
            raise DataProviderError(f"Failed to load technician roster: {exc}") from exc
        return [profile_from_row(row) for row in (response.data or [])]

    async def fetch_latest_location(self, technician_id: str) -> LocationSample | None:
        try:
            response = await (
                self._client.table(LOCATIONS_TABLE)
                .select("*")
                .eq("technician_id", technician_id)
                .order("timestamp", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise DataProviderError(f"Failed to load location for technician {technician_id}: {exc}") from exc
        rows = response.data or []
        return location_from_row(rows[0]) if rows else None

    async def fetch_active_jobs(self, technician_id: str) -> list[JobRef]:
        try:
            response = await (
                self._client.table(TICKETS_TABLE)
                .select(TICKET_COLUMNS)
                .eq("assigned_to", technician_id)
                .in_("status", list(ACTIVE_JOB_STATUSES))
                .order("scheduled_date")
                .execute()
            )
        except Exception as exc:
            raise DataProviderError(f"Failed to load jobs for technician {technician_id}: {exc}") from exc
        return [job_from_row(row) for row in (response.data or [])]

    async def subscribe(self, callback: ChangeCallback) -> _ChannelSubscription:
        channel = self._client.channel(LOCATION_CHANNEL)
        channel.on_postgres_changes(
            "*",
            schema="public",
            table=LOCATIONS_TABLE,
            callback=callback,
        )
        await channel.subscribe(self._log_subscription_state)
        return _ChannelSubscription(self._client, channel)

    @staticmethod
    def _log_subscription_state(state: Any, error: Exception | None = None) -> None:
        if error is not None:
            logger.warning(f"Realtime subscription to {LOCATIONS_TABLE} failed: {error}")
            return
        logger.info(f"Realtime subscription status for {LOCATIONS_TABLE}: {state}")
