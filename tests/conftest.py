import asyncio
from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from fieldops.models.domain import JobRef, LocationSample, Priority, TechnicianProfile

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeSubscription:
    def __init__(self, source: "FakeDataSource") -> None:
        self.source = source

    async def close(self) -> None:
        self.source.closed_subscriptions += 1


class FakeDataSource:
    """In-memory roster, location store and job provider."""

    def __init__(
        self,
        roster: list[TechnicianProfile] | None = None,
        locations: dict[str, LocationSample] | None = None,
        jobs: dict[str, list[JobRef]] | None = None,
    ) -> None:
        self.roster = list(roster or [])
        self.locations = dict(locations or {})
        self.jobs = dict(jobs or {})
        self.roster_calls = 0
        self.callbacks: list[Callable[[dict[str, Any]], None]] = []
        self.closed_subscriptions = 0
        self.fail_with: Exception | None = None
        self.subscribe_error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.roster_delay = 0.0

    async def fetch_roster(self) -> list[TechnicianProfile]:
        self.roster_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.roster_delay:
            await asyncio.sleep(self.roster_delay)
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.roster)

    async def fetch_latest_location(self, technician_id: str) -> LocationSample | None:
        return self.locations.get(technician_id)

    async def fetch_active_jobs(self, technician_id: str) -> list[JobRef]:
        return list(self.jobs.get(technician_id, []))

    async def subscribe(self, callback) -> FakeSubscription:
        if self.subscribe_error is not None:
            raise self.subscribe_error
        self.callbacks.append(callback)
        return FakeSubscription(self)


def make_profile(tech_id: str, name: str | None = None) -> TechnicianProfile:
    return TechnicianProfile(
        id=tech_id,
        full_name=name or f"Tech {tech_id}",
        email=f"{tech_id}@example.com",
        phone="555-0100",
    )


def make_job(
    job_id: str,
    *,
    status: str = "scheduled",
    priority: Priority = Priority.NORMAL,
    lat: float | None = 30.0,
    lon: float | None = -97.0,
    duration: int | None = None,
) -> JobRef:
    return JobRef(
        id=job_id,
        code=f"TKT-{job_id}",
        title=f"Job {job_id}",
        status=status,
        priority=priority,
        customer_name=f"Customer {job_id}",
        customer_address="1 Main St",
        customer_latitude=lat,
        customer_longitude=lon,
        estimated_duration_minutes=duration,
    )


@pytest.fixture
def data_source() -> FakeDataSource:
    return FakeDataSource(
        roster=[make_profile("t1", "Alice Smith"), make_profile("t2", "Bob Jones")],
        locations={
            "t1": LocationSample(latitude=30.0, longitude=-97.0, captured_at=NOW, accuracy_meters=5.0),
        },
        jobs={
            "t1": [
                make_job("j1", lat=30.05, lon=-97.0),
                make_job("j2", status="completed"),
                make_job("j3", status="in_progress", priority=Priority.HIGH, lat=30.1, lon=-97.1),
            ],
        },
    )
