"""Interfaces of the data sources the synchronizer reads from."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol, Sequence

from ...models.domain import JobRef, LocationSample, TechnicianProfile

ChangeCallback = Callable[[dict[str, Any]], None]


class Subscription(Protocol):
    async def close(self) -> None:
        ...


class RosterProvider(Protocol):
    async def fetch_roster(self) -> Sequence[TechnicianProfile]:
        ...


class LocationStore(Protocol):
    async def fetch_latest_location(self, technician_id: str) -> LocationSample | None:
        ...

    async def subscribe(self, callback: ChangeCallback) -> Subscription:
        """Invoke ``callback`` whenever a location sample is written."""
        ...


class JobProvider(Protocol):
    async def fetch_active_jobs(self, technician_id: str) -> Sequence[JobRef]:
        ...


SnapshotListener = Callable[[tuple], Awaitable[None] | None]
