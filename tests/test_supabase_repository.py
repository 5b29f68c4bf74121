from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from fieldops.data.supabase_repository import (
    LOCATIONS_TABLE,
    DataProviderError,
    SupabaseDispatchRepository,
    job_from_row,
    location_from_row,
    profile_from_row,
)
from fieldops.db import get_supabase_client, reset_supabase_client
from fieldops.db import supabase as supabase_module
from fieldops.models.domain import Priority


class FakeQuery:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.calls = []

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    async def execute(self):
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.rows.get(self.table, []))


class FakeChannel:
    def __init__(self, name):
        self.name = name
        self.handlers = []
        self.subscribed = False

    def on_postgres_changes(self, event, schema=None, table=None, callback=None):
        self.handlers.append((event, schema, table, callback))
        return self

    async def subscribe(self, callback=None):
        self.subscribed = True
        callback("SUBSCRIBED", None)
        return self


class FakeClient:
    def __init__(self, rows=None):
        self.rows = rows or {}
        self.error = None
        self.queries = []
        self.channels = []
        self.removed = []

    def table(self, name):
        query = FakeQuery(self, name)
        self.queries.append(query)
        return query

    def channel(self, name):
        channel = FakeChannel(name)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel):
        self.removed.append(channel)


def test_profile_from_row_defaults_missing_name():
    profile = profile_from_row({"id": 7, "full_name": "  ", "email": None})

    assert profile.id == "7"
    assert profile.full_name == "Unknown"
    assert profile.email == ""
    assert profile.phone is None


def test_location_from_row_parses_timestamp():
    sample = location_from_row(
        {"latitude": "30.1", "longitude": -97.5, "accuracy": 12, "timestamp": "2024-05-01T11:58:00Z"}
    )

    assert sample.latitude == 30.1
    assert sample.accuracy_meters == 12.0
    assert sample.captured_at == datetime(2024, 5, 1, 11, 58, tzinfo=timezone.utc)


def test_job_from_row_reads_customer_join():
    job = job_from_row(
        {
            "id": "tk1",
            "ticket_number": "TKT-0001",
            "title": "Leaking pipe",
            "status": "scheduled",
            "priority": "urgent",
            "scheduled_date": "2024-05-01T14:00:00+00:00",
            "estimated_duration": 90,
            "customer": {"name": "Acme", "address": "1 Main St", "latitude": 30.2, "longitude": -97.7},
        }
    )

    assert job.code == "TKT-0001"
    assert job.priority is Priority.EMERGENCY
    assert job.customer_name == "Acme"
    assert job.is_routable
    assert job.estimated_duration_minutes == 90
    assert job.scheduled_at.hour == 14


def test_job_from_row_without_customer():
    job = job_from_row({"id": "tk2", "status": "in_progress", "priority": None, "customer": None})

    assert job.customer_name == "Unknown"
    assert job.priority is Priority.NORMAL
    assert not job.is_routable
    assert job.scheduled_at is None


@pytest.mark.asyncio
async def test_fetch_roster_filters_active_technicians():
    client = FakeClient({"profiles": [{"id": "t1", "full_name": "Alice", "email": "a@example.com"}]})

    roster = await SupabaseDispatchRepository(client).fetch_roster()

    assert [profile.full_name for profile in roster] == ["Alice"]
    calls = client.queries[0].calls
    assert ("eq", ("role", "technician"), {}) in calls
    assert ("eq", ("is_active", True), {}) in calls


@pytest.mark.asyncio
async def test_fetch_latest_location_reads_newest_sample():
    client = FakeClient(
        {LOCATIONS_TABLE: [{"latitude": 30.0, "longitude": -97.0, "timestamp": "2024-05-01T12:00:00Z"}]}
    )

    sample = await SupabaseDispatchRepository(client).fetch_latest_location("t1")

    assert sample.latitude == 30.0
    calls = client.queries[0].calls
    assert ("order", ("timestamp",), {"desc": True}) in calls
    assert ("limit", (1,), {}) in calls


@pytest.mark.asyncio
async def test_fetch_latest_location_without_samples():
    assert await SupabaseDispatchRepository(FakeClient()).fetch_latest_location("t1") is None


@pytest.mark.asyncio
async def test_fetch_active_jobs_filters_by_status():
    client = FakeClient({"tickets": [{"id": "tk1", "status": "scheduled", "customer": {"name": "Acme"}}]})

    jobs = await SupabaseDispatchRepository(client).fetch_active_jobs("t1")

    assert [job.id for job in jobs] == ["tk1"]
    calls = client.queries[0].calls
    assert ("eq", ("assigned_to", "t1"), {}) in calls
    assert ("in_", ("status", ["scheduled", "in_progress"]), {}) in calls


@pytest.mark.asyncio
async def test_query_failures_are_wrapped():
    client = FakeClient()
    client.error = ConnectionError("connection reset")
    repository = SupabaseDispatchRepository(client)

    with pytest.raises(DataProviderError, match="connection reset"):
        await repository.fetch_roster()
    with pytest.raises(DataProviderError):
        await repository.fetch_active_jobs("t1")


@pytest.mark.asyncio
async def test_subscribe_listens_to_location_table():
    client = FakeClient()
    received = []

    subscription = await SupabaseDispatchRepository(client).subscribe(received.append)

    channel = client.channels[0]
    assert channel.subscribed
    event, schema, table, callback = channel.handlers[0]
    assert (event, schema, table) == ("*", "public", LOCATIONS_TABLE)
    callback({"eventType": "INSERT"})
    assert received == [{"eventType": "INSERT"}]

    await subscription.close()
    assert client.removed == [channel]


@pytest.fixture
def shared_client_reset():
    reset_supabase_client()
    yield
    reset_supabase_client()


@pytest.mark.asyncio
async def test_client_is_none_without_credentials(shared_client_reset, monkeypatch):
    monkeypatch.setattr(supabase_module.settings, "supabase_url", None)
    monkeypatch.setattr(supabase_module.settings, "supabase_key", None)

    assert await get_supabase_client() is None


@pytest.mark.asyncio
async def test_client_is_cached_until_reset(shared_client_reset, monkeypatch):
    created = []

    async def fake_create(url, key):
        client = FakeClient()
        created.append((url, key, client))
        return client

    monkeypatch.setattr(supabase_module.settings, "supabase_url", "https://example.supabase.co")
    monkeypatch.setattr(supabase_module.settings, "supabase_key", "service-key")
    monkeypatch.setattr(supabase_module, "acreate_client", fake_create)

    first = await get_supabase_client()
    assert await get_supabase_client() is first

    reset_supabase_client()
    second = await get_supabase_client()

    assert second is not first
    assert [(url, key) for url, key, _ in created] == [("https://example.supabase.co", "service-key")] * 2


@pytest.mark.asyncio
async def test_client_creation_failure_returns_none(shared_client_reset, monkeypatch):
    async def failing_create(url, key):
        raise ConnectionError("unreachable")

    monkeypatch.setattr(supabase_module.settings, "supabase_url", "https://example.supabase.co")
    monkeypatch.setattr(supabase_module.settings, "supabase_key", "service-key")
    monkeypatch.setattr(supabase_module, "acreate_client", failing_create)

    assert await get_supabase_client() is None
