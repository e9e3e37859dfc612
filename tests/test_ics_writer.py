"""Tests for ICS output generation and export."""

from datetime import timedelta

import pytest

from conftest import LOCAL_TZ, START_MS, to_ms
from icalsync.exceptions import CalendarError
from icalsync.ingestion.ics_parser import ICSParser
from icalsync.models.event import CalendarEvent
from icalsync.output import ExportService, ICSWriter, generate_uid
from icalsync.storage import MemoryEventStore


def make_event(**overrides) -> CalendarEvent:
    data = {
        "id": "evt1",
        "owner_id": "alice",
        "title": "Review",
        "start_time": to_ms(2024, 1, 15, 10),
        "end_time": to_ms(2024, 1, 15, 11),
        "updated_at": START_MS,
        "created_at": START_MS,
    }
    data.update(overrides)
    return CalendarEvent(**data)


@pytest.fixture
def writer(clock):
    return ICSWriter(uid_domain="example.test", local_tz=LOCAL_TZ, clock=clock)


def test_calendar_envelope(writer):
    text = writer.generate([], "Team")
    lines = text.split("\r\n")

    assert lines[0] == "BEGIN:VCALENDAR"
    assert "END:VCALENDAR" in lines
    assert "VERSION:2.0" in lines
    assert "CALSCALE:GREGORIAN" in lines
    assert "METHOD:PUBLISH" in lines
    assert "X-WR-CALNAME:Team" in lines
    assert "REFRESH-INTERVAL;VALUE=DURATION:PT1H" in lines
    assert "X-PUBLISHED-TTL:PT1H" in lines
    assert any(line.startswith("PRODID:") for line in lines)


def test_refresh_interval_is_configurable(clock):
    writer = ICSWriter(refresh_interval=timedelta(minutes=30), clock=clock)
    assert "REFRESH-INTERVAL;VALUE=DURATION:PT30M" in writer.generate([])


def test_uses_crlf_line_endings(writer):
    text = writer.generate([make_event()])
    assert "\r\n" in text
    assert "\n" not in text.replace("\r\n", "")


def test_timed_event_is_utc(writer):
    text = writer.generate([make_event()])
    assert "DTSTART:20240115T100000Z" in text
    assert "DTEND:20240115T110000Z" in text
    assert "SUMMARY:Review" in text
    assert "STATUS:CONFIRMED" in text
    assert "TRANSP:OPAQUE" in text
    assert "SEQUENCE:0" in text


def test_all_day_event_uses_local_dates(writer):
    event = make_event(
        all_day=True,
        start_time=to_ms(2024, 1, 15, tz=LOCAL_TZ),
        end_time=to_ms(2024, 1, 17, tz=LOCAL_TZ),
    )
    text = writer.generate([event])
    assert "DTSTART;VALUE=DATE:20240115" in text
    assert "DTEND;VALUE=DATE:20240117" in text


def test_uid_prefers_external_uid(writer):
    subscribed = make_event(external_uid="remote-1@feed")
    assert writer.event_uid(subscribed) == "remote-1@feed"


def test_native_uid_is_stable_and_domain_scoped(writer):
    event = make_event()
    uid = writer.event_uid(event)

    assert uid.endswith("@example.test")
    assert uid == generate_uid("evt1", "example.test")
    assert uid != generate_uid("evt2", "example.test")


def test_text_fields_are_escaped(writer):
    event = make_event(title="a,b;c\nd", location="Room 1, East")
    text = writer.generate([event])
    assert "SUMMARY:a\\,b\\;c\\nd" in text
    assert "LOCATION:Room 1\\, East" in text


def test_optional_fields_are_omitted_when_empty(writer):
    text = writer.generate([make_event()])
    assert "DESCRIPTION" not in text
    assert "LOCATION" not in text
    assert "RRULE" not in text


def test_rrule_is_written_verbatim(writer):
    rule = "FREQ=WEEKLY;BYDAY=MO,WE"
    text = writer.generate([make_event(recurrence_rule=rule)])
    assert f"RRULE:{rule}" in text


def test_output_parses_back(writer):
    events = [
        make_event(description="Line one\nLine two", location="HQ; floor 3"),
        make_event(
            id="evt2",
            external_uid="remote@feed",
            title="Offsite",
            all_day=True,
            start_time=to_ms(2024, 2, 1, tz=LOCAL_TZ),
            end_time=to_ms(2024, 2, 2, tz=LOCAL_TZ),
        ),
    ]
    parsed = ICSParser(local_tz=LOCAL_TZ).parse(writer.generate(events))

    assert [p.uid for p in parsed] == [writer.event_uid(e) for e in events]
    first, second = parsed
    assert first.description == "Line one\nLine two"
    assert first.location == "HQ; floor 3"
    assert (first.start_time, first.end_time) == (events[0].start_time, events[0].end_time)
    assert second.all_day is True
    assert (second.start_time, second.end_time) == (events[1].start_time, events[1].end_time)


def test_carriage_returns_round_trip_as_newlines(writer):
    event = make_event(title="a\r\nb", description="one\rtwo")
    assert (event.title, event.description) == ("a\nb", "one\ntwo")

    [parsed] = ICSParser(local_tz=LOCAL_TZ).parse(writer.generate([event]))

    assert parsed.title == event.title
    assert parsed.description == event.description


def test_write_file(writer, tmp_path):
    path = tmp_path / "out.ics"
    writer.write([make_event()], path, "Team")
    content = path.read_bytes().decode("utf-8")
    assert content.startswith("BEGIN:VCALENDAR\r\n")
    assert "SUMMARY:Review" in content


def test_write_failure_raises_calendar_error(writer, tmp_path):
    with pytest.raises(CalendarError):
        writer.write([make_event()], tmp_path / "missing" / "out.ics")


class TestExportService:
    @pytest.fixture
    def store(self):
        store = MemoryEventStore()
        for day in (10, 15, 20):
            store.insert(
                make_event(
                    id=f"evt{day}",
                    title=f"Day {day}",
                    start_time=to_ms(2024, 1, day, 9),
                    end_time=to_ms(2024, 1, day, 10),
                )
            )
        store.insert(make_event(id="other", owner_id="bob", title="Bob's"))
        return store

    def test_exports_only_owner_events(self, store, writer):
        text = ExportService(store, writer, "Mine").export("alice")
        assert "SUMMARY:Day 10" in text
        assert "SUMMARY:Day 20" in text
        assert "Bob" not in text
        assert "X-WR-CALNAME:Mine" in text

    def test_window_bounds_are_inclusive(self, store, writer):
        service = ExportService(store, writer, "Mine")
        selected = service.select(
            "alice", start=to_ms(2024, 1, 15, 9), end=to_ms(2024, 1, 20, 9)
        )
        assert [e.id for e in selected] == ["evt15", "evt20"]

    def test_open_ended_window(self, store, writer):
        service = ExportService(store, writer, "Mine")
        assert [e.id for e in service.select("alice", end=to_ms(2024, 1, 12))] == ["evt10"]
        assert [e.id for e in service.select("alice", start=to_ms(2024, 1, 12))] == [
            "evt15",
            "evt20",
        ]
