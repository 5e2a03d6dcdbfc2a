"""Tests for core/agenda.py

Records follow gcalcli's --tsv agenda shape: date, start, end date, end,
[conference type, link,] title.
"""

from datetime import time

from conftest import DATE_STRING, TODAY

from cronmeetcal.core.agenda import (
    find_join_link,
    find_title,
    parse_agenda,
    parse_event,
    parse_events,
    split_records,
)


class TestParseAgenda:
    def test_extracts_link_title_and_time(self, agenda_row, meeting_title, zoom_link):
        raw = agenda_row("09:00", meeting_title, zoom_link, end="09:30")

        meetings = list(parse_agenda(raw, TODAY))

        assert len(meetings) == 1
        meeting = meetings[0]
        assert meeting.title == meeting_title
        assert meeting.join_link == zoom_link
        assert meeting.start_time == time(9, 0)
        assert meeting.date == TODAY
        assert meeting.is_all_day is False

    def test_skips_records_without_link_and_reports_them(self, agenda_row, zoom_link):
        raw = "\n".join(
            [
                agenda_row("08:00", "Focus time"),
                agenda_row("10:00", "Standup", zoom_link),
                agenda_row("12:00", "Lunch"),
            ]
        )
        skipped = []

        meetings = list(parse_agenda(raw, TODAY, on_skip=skipped.append))

        assert [m.title for m in meetings] == ["Standup"]
        assert len(skipped) == 2
        assert all(s.startswith("Skipping line: ") for s in skipped)
        assert "Focus time" in skipped[0]
        assert "Lunch" in skipped[1]

    def test_title_mentioning_platform_is_not_a_link(self, agenda_row):
        raw = agenda_row("10:00", "Zoom licensing review", end="11:00")
        skipped = []

        assert list(parse_agenda(raw, TODAY, on_skip=skipped.append)) == []
        assert skipped == [f"Skipping line: {raw}"]

    def test_link_must_be_a_url(self):
        assert find_join_link(["video", "zoom.example/j/1", "Zoom sync"]) is None
        assert find_join_link(["Zoom sync", "https://acme.zoom.us/j/1"]) == "https://acme.zoom.us/j/1"

    def test_preserves_input_order(self, agenda_row, zoom_link):
        raw = "\n".join(
            [
                agenda_row("15:00", "Retro", zoom_link),
                agenda_row("09:00", "Standup", zoom_link),
                agenda_row("15:00", "Retro", zoom_link + "1"),
            ]
        )

        titles = [m.title for m in parse_agenda(raw, TODAY)]

        assert titles == ["Retro", "Standup", "Retro"]

    def test_is_lazy_and_restartable(self, agenda_row, zoom_link):
        raw = agenda_row("09:00", "Standup", zoom_link)

        gen = parse_agenda(raw, TODAY)
        assert not isinstance(gen, list)
        assert list(gen) == list(parse_agenda(raw, TODAY))

    def test_blank_agenda_yields_nothing(self):
        skipped = []
        assert list(parse_agenda("", TODAY, on_skip=skipped.append)) == []
        assert list(parse_agenda("\n\n", TODAY, on_skip=skipped.append)) == []
        assert skipped == []

    def test_bad_start_time_is_skipped_not_fatal(self, zoom_link):
        raw = f"{DATE_STRING}\tlater\t{DATE_STRING}\t\tvideo\t{zoom_link}\tSync"
        skipped = []

        assert list(parse_agenda(raw, TODAY, on_skip=skipped.append)) == []
        assert len(skipped) == 1

    def test_all_day_link_event_is_not_scheduled(self, zoom_link):
        raw = f"{DATE_STRING}\t\t{DATE_STRING}\t\tvideo\t{zoom_link}\tAll hands day"
        skipped = []

        assert list(parse_agenda(raw, TODAY, on_skip=skipped.append)) == []
        assert "all-day" in skipped[0]

    def test_accepts_pre_split_records(self, zoom_link):
        records = [[DATE_STRING, "11:15", DATE_STRING, "11:45", "video", zoom_link, "1:1"]]

        meetings = list(parse_agenda(records, TODAY))

        assert meetings[0].title == "1:1"
        assert meetings[0].start_time == time(11, 15)

    def test_custom_link_pattern(self, agenda_row):
        raw = agenda_row("09:00", "Design review", "https://meet.example.com/abc-defg")

        assert list(parse_agenda(raw, TODAY)) == []
        meetings = list(parse_agenda(raw, TODAY, link_pattern="meet.example"))
        assert meetings[0].join_link == "https://meet.example.com/abc-defg"


class TestFindTitle:
    def test_skips_times_markers_urls_and_dates(self):
        fields = [DATE_STRING, "09:00", DATE_STRING, "09:30", "video", "https://zoom.example/x", "Planning"]
        assert find_title(fields, DATE_STRING) == "Planning"

    def test_first_candidate_wins(self):
        fields = [DATE_STRING, "09:00", "Room 4", "Planning"]
        assert find_title(fields, DATE_STRING) == "Room 4"

    def test_skips_other_dates_and_empty_fields(self):
        fields = [DATE_STRING, "23:00", "2025-11-08", "", "Overnight deploy"]
        assert find_title(fields, DATE_STRING) == "Overnight deploy"

    def test_no_candidate_gives_empty_title(self):
        assert find_title([DATE_STRING, "09:00"], DATE_STRING) == ""


class TestParseEvents:
    def test_includes_events_without_links(self, agenda_row, zoom_link):
        raw = "\n".join([agenda_row("08:00", "Focus"), agenda_row("10:00", "Sync", zoom_link)])

        events = parse_events(raw, TODAY)

        assert [(e.title, e.join_link) for e in events] == [("Focus", None), ("Sync", zoom_link)]

    def test_marks_all_day_events(self):
        event = parse_event([DATE_STRING, "", "2025-11-08", "", "Veterans Day"], TODAY)

        assert event.is_all_day is True
        assert event.start_time is None
        assert event.title == "Veterans Day"
        assert event.schedulable is False

    def test_split_records_drops_blank_lines(self):
        assert split_records("a\tb\n\n  \nc\td\n") == [["a", "b"], ["c", "d"]]
