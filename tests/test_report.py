from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from advent.engine import build_participant_stats, generate_month
from advent.excel_io import (
    load_participants_file, load_participants_from_excel, save_month_workbook,
)
from advent.random_source import seeded_random
from advent.report import format_flag_summary, format_output_table, format_participant_summary

from tests.utils import make_participants, record


def _month(n: int = 5, cutoff: int = 12):
    participants = make_participants(n)
    records, flags = generate_month(participants, 2025, 12, cutoff, seeded_random(21), max_attempts=2)
    return participants, records, flags


def test_output_table_lists_every_record() -> None:
    participants, records, flags = _month()
    table = format_output_table(records, participants, flags)
    lines = table.splitlines()
    assert lines[0].startswith("Date")
    # header + rule + records + one blank line between the two weeks
    assert len(lines) == 2 + len(records) + 1
    assert "2025-12-01" in table
    assert "Ivan" in table
    assert "JOKER" in table


def test_participant_summary_has_a_row_each() -> None:
    participants, records, flags = _month()
    summary = format_participant_summary(build_participant_stats(records, participants, flags))
    assert "PARTICIPANT SUMMARY" in summary
    for p in participants:
        assert p["name"] in summary
    assert "GENTILLESSE" in summary


def test_flag_summary_groups_by_type() -> None:
    flags = [
        {"date": "2025-12", "participant": "ivan", "flag_type": "NO_KINDNESS", "message": "Never receives GENTILLESSE"},
        {"date": "2025-12", "participant": "anna", "flag_type": "NO_KINDNESS", "message": "Never receives GENTILLESSE"},
        {"date": "2025-12-02", "participant": "eliot", "flag_type": "REPEAT_PAIR", "message": "Gives to ivan"},
    ]
    text = format_flag_summary(flags)
    assert "NO_KINDNESS (2 occurrences):" in text
    assert "REPEAT_PAIR (1 occurrences):" in text
    assert "  2025-12-02 - eliot: Gives to ivan" in text
    assert "No flags" in format_flag_summary([])


def test_month_workbook_round_trip(tmp_path: Path) -> None:
    participants, records, flags = _month()
    stats = build_participant_stats(records, participants, flags)
    path = tmp_path / "advent.xlsx"
    save_month_workbook(path, records, participants, stats, flags)

    wb = load_workbook(path)
    assert wb.sheetnames == ["Assignments", "Summary", "Flags"]
    ws = wb["Assignments"]
    assert ws.max_row == len(records) + 1
    assert [c.value for c in ws[1]] == ["Date", "Day", "Giver", "Receiver", "Joker"]
    assert ws.cell(row=2, column=1).value == "2025-12-01"
    assert wb["Summary"].max_row == len(participants) + 1
    assert wb["Flags"].max_row == len(flags) + 1


def test_load_participants_from_excel(tmp_path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    ws.title = "Participants"
    ws.append(["Id", "Name", "Email"])
    ws.append(["ivan", "Ivan", "ivan@example.com"])
    ws.append([None, None, None])
    ws.append(["anna", None, None])
    path = tmp_path / "people.xlsx"
    wb.save(path)

    participants = load_participants_file(path)
    assert participants == [
        {"id": "ivan", "name": "Ivan", "email": "ivan@example.com"},
        {"id": "anna", "name": "anna"},
    ]


def test_load_participants_needs_sheet() -> None:
    with pytest.raises(ValueError, match="Participants"):
        load_participants_from_excel(Workbook())


def test_output_table_places_flags_on_the_right_rows() -> None:
    participants = make_participants(3)
    ivan, vincent, nathalie = (p["id"] for p in participants)
    monday, tuesday = date(2025, 12, 1), date(2025, 12, 2)
    records = [
        record(monday, ivan, vincent),
        record(monday, vincent, nathalie),
        record(monday, nathalie, ivan),
        record(tuesday, ivan, vincent),
        record(tuesday, vincent, ivan),
        record(tuesday, nathalie, vincent),
    ]
    flags = [
        {"date": "2025-12-01", "participant": vincent, "flag_type": "NO_WEEKLY_JOKER",
         "message": "No weekly joker in week of 2025-12-01"},
        {"date": "2025-12-02", "participant": ivan, "flag_type": "REPEAT_PAIR",
         "message": "Gives to vincent two working days in a row"},
        {"date": "2025-12", "participant": nathalie, "flag_type": "NO_KINDNESS",
         "message": "Never receives GENTILLESSE"},
    ]
    rows = format_output_table(records, participants, flags).splitlines()[2:]

    # vincent first receives on monday from ivan, not on their own giver row
    assert "NO_WEEKLY_JOKER" in rows[0]
    assert "NO_WEEKLY_JOKER" not in rows[1]
    assert sum("NO_WEEKLY_JOKER" in row for row in rows) == 1
    assert "REPEAT_PAIR" in rows[3]
    assert sum("REPEAT_PAIR" in row for row in rows) == 1
    assert not any("NO_KINDNESS" in row for row in rows)
