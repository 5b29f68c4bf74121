"""Classification of technician location freshness."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from ...config import settings
from ...models.domain import LivenessState, TechnicianSnapshot


@dataclass(slots=True, frozen=True)
class LivenessThresholds:
    fresh_minutes: int = 5
    degraded_minutes: int = 30

    @classmethod
    def from_settings(cls) -> "LivenessThresholds":
        return cls(
            fresh_minutes=settings.fresh_threshold_minutes,
            degraded_minutes=settings.degraded_threshold_minutes,
        )


def as_utc(value: datetime | str) -> datetime:
    """Normalise a timestamp (or ISO-8601 string) to an aware UTC datetime."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def classify_liveness(
    last_seen_at: datetime | str | None,
    *,
    now: datetime | None = None,
    thresholds: LivenessThresholds | None = None,
) -> LivenessState:
    """Map the age of the last location sample onto a liveness state.

    Age is counted in whole elapsed minutes. A missing timestamp is stale.
    """
    if last_seen_at is None:
        return LivenessState.STALE

    limits = thresholds or LivenessThresholds.from_settings()
    current = as_utc(now) if now is not None else datetime.now(timezone.utc)
    age_minutes = (current - as_utc(last_seen_at)).total_seconds() // 60

    if age_minutes < limits.fresh_minutes:
        return LivenessState.FRESH
    if age_minutes < limits.degraded_minutes:
        return LivenessState.DEGRADED
    return LivenessState.STALE


def snapshot_liveness(
    snapshot: TechnicianSnapshot,
    *,
    now: datetime | None = None,
    thresholds: LivenessThresholds | None = None,
) -> LivenessState:
    """Liveness of a snapshot at ``now`` rather than at refresh time."""
    if snapshot.location is None:
        return LivenessState.STALE
    return classify_liveness(snapshot.location.captured_at, now=now, thresholds=thresholds)
