"""Tests for app/stores/activity_store.py"""

import json
from datetime import date, datetime, timedelta, timezone

import pytest

from app.errors import RecordNotFound, ValidationFailed
from app.schemas.activity_schema import ActivityCreate, ActivityUpdate
from app.stores.activity_store import ActivityStore


@pytest.fixture
def store(db_session, bus):
    return ActivityStore(db_session, bus)


@pytest.fixture
def events(bus):
    received = []
    bus.subscribe("activity.changed", lambda topic, payload: received.append(payload))
    return received


def sleep_payload(baby, start, hours=1, notes=None):
    return ActivityCreate(
        baby_id=baby.id,
        type="sleep",
        start_time=start,
        end_time=start + timedelta(hours=hours),
        details={"kind": "sleep", "quality": "good"},
        notes=notes,
    )


class TestAddActivity:
    def test_feeding_with_amount(self, store, baby, user, feeding_payload):
        start = datetime.now().replace(microsecond=0) - timedelta(hours=1)

        created = store.add_activity(feeding_payload(start), created_by=user.id)
        records = store.load_activities(baby.id)

        assert len(records) == 1
        assert records[0].id == created.id
        assert records[0].type == "feeding"
        assert records[0].details["amount"] == 120
        assert records[0].details["unit"] == "ml"

    def test_reload_is_stable(self, store, db_session, bus, baby, user, feeding_payload):
        store.add_activity(feeding_payload(datetime(2024, 3, 10, 7, 0)), created_by=user.id)

        first = [(a.id, a.start_time) for a in store.load_activities(baby.id)]
        second = [(a.id, a.start_time) for a in ActivityStore(db_session, bus).load_activities(baby.id)]

        assert first == second

    def test_duration_derived_from_end_time(self, store, baby, user):
        created = store.add_activity(sleep_payload(baby, datetime(2024, 3, 10, 9, 0), hours=2), created_by=user.id)
        assert created.duration == 7200

    def test_unknown_baby(self, store, user, feeding_payload):
        payload = feeding_payload(datetime(2024, 3, 10, 7, 0))
        payload.baby_id = "nao-existe"

        with pytest.raises(RecordNotFound):
            store.add_activity(payload, created_by=user.id)

    def test_publishes_created(self, store, baby, user, feeding_payload, events):
        created = store.add_activity(feeding_payload(datetime(2024, 3, 10, 7, 0)), created_by=user.id)
        assert events == [{"action": "created", "activity_id": created.id, "baby_id": baby.id}]

    def test_batch_is_all_or_nothing(self, store, baby, user, feeding_payload, events):
        orphan = feeding_payload(datetime(2024, 3, 10, 8, 0))
        orphan.baby_id = "nao-existe"

        with pytest.raises(RecordNotFound):
            store.add_activities([feeding_payload(datetime(2024, 3, 10, 7, 0)), orphan], created_by=user.id)

        assert store.load_activities(baby.id) == []
        assert events == []

    def test_batch_publishes_each(self, store, baby, user, feeding_payload, events):
        created = store.add_activities(
            [feeding_payload(datetime(2024, 3, 10, 7, 0)), sleep_payload(baby, datetime(2024, 3, 10, 9, 0))],
            created_by=user.id,
        )

        assert [a.type for a in created] == ["feeding", "sleep"]
        assert [e["activity_id"] for e in events] == [a.id for a in created]


class TestQueries:
    @pytest.fixture
    def seeded(self, store, baby, user, feeding_payload):
        store.add_activity(feeding_payload(datetime(2024, 3, 10, 7, 0)), created_by=user.id)
        store.add_activity(feeding_payload(datetime(2024, 3, 10, 12, 0), amount=90), created_by=user.id)
        store.add_activity(
            sleep_payload(baby, datetime(2024, 3, 10, 9, 0), notes="Dormiu no carrinho"), created_by=user.id
        )
        store.add_activity(feeding_payload(datetime(2024, 3, 9, 20, 0)), created_by=user.id)

    def test_newest_first(self, store, baby, seeded):
        starts = [a.start_time for a in store.load_activities(baby.id)]
        assert starts == sorted(starts, reverse=True)

    def test_today_only(self, store, baby, seeded):
        today = store.load_today_activities(baby.id, date(2024, 3, 10))
        assert len(today) == 3

    def test_between_with_type(self, store, baby, seeded):
        found = store.activities_between(
            baby.id, datetime(2024, 3, 10), datetime(2024, 3, 11), activity_type="feeding"
        )
        assert [a.start_time.hour for a in found] == [12, 7]

    def test_last_activity(self, store, baby, seeded):
        last = store.get_last_activity(baby.id, "feeding")
        assert last.details["amount"] == 90

    def test_time_since_last(self, store, baby, seeded):
        elapsed = store.time_since_last_activity(baby.id, "sleep", now=datetime(2024, 3, 10, 10, 30))
        assert elapsed == 90 * 60

    def test_time_since_last_without_records(self, store, baby, seeded):
        assert store.time_since_last_activity(baby.id, "bath") is None

    def test_search_notes(self, store, baby, seeded):
        found = store.search_activities(baby.id, "carrinho")
        assert [a.type for a in found] == ["sleep"]

    def test_search_display_name(self, store, baby, seeded):
        assert len(store.search_activities(baby.id, "mamada")) == 3

    def test_search_by_type_only(self, store, baby, seeded):
        assert len(store.search_activities(baby.id, "", activity_type="sleep")) == 1

    def test_summary(self, store, baby, seeded):
        assert store.activity_summary(baby.id, date(2024, 3, 10)) == {"feeding": 2, "sleep": 1}

    def test_export(self, store, baby, seeded):
        exported = json.loads(store.export_activities(baby.id))

        assert len(exported) == 4
        assert exported[0]["details"]["kind"] == "feeding"


class TestUpdateAndDelete:
    def test_update_notes(self, store, baby, user, feeding_payload, events):
        created = store.add_activity(feeding_payload(datetime(2024, 3, 10, 7, 0)), created_by=user.id)

        updated = store.update_activity(created.id, ActivityUpdate(notes="Arrotou bem"))

        assert updated.notes == "Arrotou bem"
        assert updated.details["amount"] == 120
        assert events[-1]["action"] == "updated"

    def test_details_must_match_type(self, store, user, feeding_payload):
        created = store.add_activity(feeding_payload(datetime(2024, 3, 10, 7, 0)), created_by=user.id)

        with pytest.raises(ValidationFailed):
            store.update_activity(created.id, ActivityUpdate(details={"kind": "sleep"}))

    def test_end_before_existing_start(self, store, user, feeding_payload):
        created = store.add_activity(feeding_payload(datetime(2024, 3, 10, 7, 0)), created_by=user.id)

        with pytest.raises(ValidationFailed):
            store.update_activity(created.id, ActivityUpdate(end_time=datetime(2024, 3, 10, 6, 0)))

    def test_moving_end_recomputes_duration(self, store, baby, user):
        start = datetime(2024, 3, 10, 9, 0)
        created = store.add_activity(sleep_payload(baby, start, hours=1), created_by=user.id)

        updated = store.update_activity(created.id, ActivityUpdate(end_time=start + timedelta(hours=3)))

        assert updated.duration == 3 * 3600

    def test_moving_start_recomputes_duration(self, store, baby, user):
        start = datetime(2024, 3, 10, 9, 0)
        created = store.add_activity(sleep_payload(baby, start, hours=2), created_by=user.id)

        updated = store.update_activity(created.id, ActivityUpdate(start_time=start + timedelta(minutes=30)))

        assert updated.duration == 90 * 60

    def test_explicit_duration_wins(self, store, baby, user):
        start = datetime(2024, 3, 10, 9, 0)
        created = store.add_activity(sleep_payload(baby, start), created_by=user.id)

        updated = store.update_activity(
            created.id, ActivityUpdate(end_time=start + timedelta(hours=3), duration=600)
        )

        assert updated.duration == 600

    def test_clearing_end_time(self, store, baby, user):
        created = store.add_activity(sleep_payload(baby, datetime(2024, 3, 10, 9, 0)), created_by=user.id)

        updated = store.update_activity(created.id, ActivityUpdate(end_time=None))

        assert updated.end_time is None
        assert updated.duration is None

    def test_offset_start_on_record_with_end(self, store, baby, user):
        start = datetime(2024, 3, 10, 9, 0)
        created = store.add_activity(sleep_payload(baby, start, hours=24), created_by=user.id)
        new_start = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)

        updated = store.update_activity(created.id, ActivityUpdate(start_time=new_start))

        assert updated.start_time == new_start.astimezone().replace(tzinfo=None)
        assert updated.duration == (start + timedelta(hours=24) - updated.start_time).total_seconds()

    def test_change_type_with_details(self, store, user, feeding_payload):
        created = store.add_activity(feeding_payload(datetime(2024, 3, 10, 7, 0)), created_by=user.id)

        updated = store.update_activity(
            created.id, ActivityUpdate(type="diaper", details={"kind": "diaper", "diaper_type": "dirty"})
        )

        assert updated.type == "diaper"
        assert updated.details == {"kind": "diaper", "diaper_type": "dirty", "condition": None}

    def test_delete(self, store, baby, user, feeding_payload, events):
        created = store.add_activity(feeding_payload(datetime(2024, 3, 10, 7, 0)), created_by=user.id)

        store.delete_activity(created.id)

        assert store.load_activities(baby.id) == []
        assert events[-1] == {"action": "deleted", "activity_id": created.id, "baby_id": baby.id}

    def test_delete_missing(self, store):
        with pytest.raises(RecordNotFound):
            store.delete_activity("nao-existe")
