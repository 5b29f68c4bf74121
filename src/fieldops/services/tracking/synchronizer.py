"""Live technician location synchronization.

The synchronizer keeps an in-memory collection of technician snapshots fresh
using two independent triggers: a realtime change subscription on the
location store and a fixed-interval poll. Both triggers run the same
``refresh`` routine, which fans out per-technician reads concurrently and
swaps the whole collection in one assignment once every read has completed.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ...config import settings
from ...models.domain import (
    ACTIVE_JOB_STATUSES,
    LivenessState,
    TechnicianProfile,
    TechnicianSnapshot,
)
from .liveness import LivenessThresholds, classify_liveness
from .providers import (
    JobProvider,
    LocationStore,
    RosterProvider,
    SnapshotListener,
    Subscription,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TechnicianLocationSynchronizer:
    def __init__(
        self,
        roster: RosterProvider,
        locations: LocationStore,
        jobs: JobProvider,
        *,
        thresholds: LivenessThresholds | None = None,
        clock: Clock | None = None,
        refresh_timeout_seconds: float | None = None,
    ) -> None:
        self._roster = roster
        self._locations = locations
        self._jobs = jobs
        self._thresholds = thresholds or LivenessThresholds.from_settings()
        self._clock = clock or _utcnow
        self.refresh_timeout_seconds = (
            refresh_timeout_seconds
            if refresh_timeout_seconds is not None
            else settings.refresh_timeout_seconds
        )

        self._snapshots: tuple[TechnicianSnapshot, ...] = ()
        self._by_id: dict[str, TechnicianSnapshot] = {}
        self.last_error: Optional[str] = None
        self.last_refreshed_at: Optional[datetime] = None
        self.loading = True

        self._running = False
        self._closed = False
        # Incremented on every start so refreshes begun in an earlier session never commit.
        self._epoch = 0
        self._loop: asyncio.AbstractEventLoop | None = None
        self._poll_task: asyncio.Task | None = None
        self._subscription: Subscription | None = None
        self._pending: set[asyncio.Task] = set()
        self._listeners: list[SnapshotListener] = []

    # ==================== Read side ====================

    @property
    def snapshots(self) -> tuple[TechnicianSnapshot, ...]:
        return self._snapshots

    @property
    def thresholds(self) -> LivenessThresholds:
        return self._thresholds

    @property
    def running(self) -> bool:
        return self._running

    def get(self, technician_id: str) -> TechnicianSnapshot | None:
        return self._by_id.get(technician_id)

    def add_listener(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    # ==================== Lifecycle ====================

    async def start(
        self,
        poll_interval_ms: int | None = None,
        enable_realtime: bool | None = None,
    ) -> None:
        """Run an initial refresh, then keep the collection fresh until ``stop``."""
        if self._running:
            logger.warning("Technician location synchronizer already running")
            return

        interval_ms = poll_interval_ms if poll_interval_ms is not None else settings.poll_interval_ms
        realtime = enable_realtime if enable_realtime is not None else settings.enable_realtime
        if interval_ms <= 0:
            raise ValueError("poll_interval_ms must be positive")

        self._loop = asyncio.get_running_loop()
        self._epoch += 1
        epoch = self._epoch
        self._closed = False
        self._running = True

        await self.refresh()
        if not self._can_commit(epoch):
            logger.info("Technician location sync stopped during startup")
            return

        if realtime:
            await self._subscribe(epoch)
            if not self._can_commit(epoch):
                return

        self._poll_task = asyncio.create_task(self._poll_loop(interval_ms / 1000.0))
        logger.info(
            f"Technician location sync started (poll every {interval_ms} ms, realtime={'on' if realtime else 'off'})"
        )

    async def stop(self) -> None:
        """Release the polling timer and realtime subscription. Safe to call repeatedly."""
        was_running = self._running
        self._running = False
        self._closed = True

        poll_task, self._poll_task = self._poll_task, None
        if poll_task is not None and poll_task is not asyncio.current_task():
            poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await poll_task

        pending = [task for task in self._pending if task is not asyncio.current_task()]
        self._pending.clear()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            try:
                await subscription.close()
            except Exception:
                logger.warning("Failed to close technician location subscription", exc_info=True)

        if was_running:
            logger.info("Technician location sync stopped")

    # ==================== Refresh ====================

    async def refresh(self) -> tuple[TechnicianSnapshot, ...]:
        """Rebuild every technician snapshot and publish them together.

        Failures keep the previous collection visible and are reported through
        ``last_error``. Returns the collection visible after the cycle.
        """
        epoch = self._epoch
        try:
            if self.refresh_timeout_seconds:
                snapshots = await asyncio.wait_for(self._collect(), timeout=self.refresh_timeout_seconds)
            else:
                snapshots = await self._collect()
        except asyncio.TimeoutError:
            logger.warning(f"Technician location refresh timed out after {self.refresh_timeout_seconds}s")
            self._record_failure(epoch, "Timed out loading technician locations")
            return self._snapshots
        except Exception as exc:
            logger.exception(f"Error loading technician locations: {exc}")
            self._record_failure(epoch, str(exc) or "Failed to load technician locations")
            return self._snapshots

        if not self._can_commit(epoch):
            logger.debug("Discarding technician refresh that finished after shutdown")
            return self._snapshots

        self._snapshots = snapshots
        self._by_id = {snapshot.technician_id: snapshot for snapshot in snapshots}
        self.last_error = None
        self.last_refreshed_at = self._clock()
        self.loading = False
        logger.debug(f"Technician locations refreshed ({len(snapshots)} technicians)")

        await self._notify(snapshots)
        return snapshots

    async def _collect(self) -> tuple[TechnicianSnapshot, ...]:
        roster = await self._roster.fetch_roster()
        observed_at = self._clock()
        snapshots = await asyncio.gather(
            *(self._build_snapshot(profile, observed_at) for profile in roster)
        )
        return tuple(snapshots)

    async def _build_snapshot(self, profile: TechnicianProfile, observed_at: datetime) -> TechnicianSnapshot:
        location, jobs = await asyncio.gather(
            self._locations.fetch_latest_location(profile.id),
            self._jobs.fetch_active_jobs(profile.id),
        )
        active_jobs = tuple(job for job in jobs if job.status in ACTIVE_JOB_STATUSES)
        if location is None:
            state = LivenessState.STALE
        else:
            state = classify_liveness(location.captured_at, now=observed_at, thresholds=self._thresholds)
        return TechnicianSnapshot(
            technician_id=profile.id,
            display_name=profile.full_name,
            email=profile.email,
            phone=profile.phone,
            location=location,
            liveness_state=state,
            active_jobs=active_jobs,
            observed_at=observed_at,
        )

    def _can_commit(self, epoch: int) -> bool:
        return not self._closed and epoch == self._epoch

    def _record_failure(self, epoch: int, message: str) -> None:
        if not self._can_commit(epoch):
            return
        self.last_error = message
        self.loading = False

    async def _notify(self, snapshots: tuple[TechnicianSnapshot, ...]) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(snapshots)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Technician snapshot listener failed")

    # ==================== Triggers ====================

    async def _poll_loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            logger.debug("Polling technician locations")
            await self.refresh()

    async def _subscribe(self, epoch: int) -> None:
        try:
            subscription = await self._locations.subscribe(self._on_location_change)
        except Exception as exc:
            logger.warning(f"Realtime subscription failed, relying on polling: {exc}")
            if self._can_commit(epoch):
                self.last_error = f"Realtime subscription failed: {exc}"
            return

        if not self._can_commit(epoch):
            # stop() ran while the channel was opening.
            try:
                await subscription.close()
            except Exception:
                logger.warning("Failed to close technician location subscription", exc_info=True)
            return

        self._subscription = subscription
        logger.info("Subscribed to technician location changes")

    def _on_location_change(self, payload: dict[str, Any]) -> None:
        # Realtime clients may deliver from another thread.
        if self._loop is None or self._closed:
            return
        event = payload.get("eventType", "unknown") if isinstance(payload, dict) else "unknown"
        logger.debug(f"Technician location change received: {event}")
        self._loop.call_soon_threadsafe(self._schedule_refresh)

    def _schedule_refresh(self) -> None:
        if self._closed:
            return
        task = asyncio.create_task(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
