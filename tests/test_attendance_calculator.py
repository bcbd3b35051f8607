from datetime import date

import pytest

from school_admin.core.attendance_calculator import (
    calculate_subject_attendance_percentage,
    compute_absent_pct,
    compute_overall_pct,
    format_pct,
    group_attendance_by_subject,
    round2,
)


def _records(present: int, absent: int):
    day = date(2026, 10, 19)
    return [{"status": "Present", "date": day}] * present + [{"status": "Absent", "date": day}] * absent


def test_empty_records_are_zero_present_full_absent() -> None:
    assert compute_overall_pct([]) == 0.0
    assert compute_absent_pct([]) == 100.0


def test_overall_percentage_rounds_half_up() -> None:
    assert compute_overall_pct(_records(2, 1)) == 66.67
    assert compute_overall_pct(_records(1, 2)) == 33.33
    # 1/8 = 12.5 exactly; 1/16 = 6.25
    assert compute_overall_pct(_records(1, 15)) == 6.25
    assert round2(0.125) == 0.13
    assert round2(2.675) == 2.68


def test_absent_is_complement() -> None:
    records = _records(2, 1)
    assert compute_absent_pct(records) == 33.33


def test_records_without_date_or_unknown_status_are_ignored() -> None:
    records = _records(1, 1) + [
        {"status": "Present", "date": None},
        {"status": "Late", "date": date(2026, 10, 20)},
    ]
    assert compute_overall_pct(records) == 50.0


def test_records_without_a_date_key_count() -> None:
    assert compute_overall_pct([{"status": "Present"}, {"status": "Absent"}]) == 50.0


@pytest.mark.parametrize(
    "value, text",
    [(100, "100%"), (100.0, "100%"), (66.666, "66.67%"), (50.0, "50%"), (0, "0%"), (12.5, "12.50%")],
)
def test_format_pct(value, text: str) -> None:
    assert format_pct(value) == text


def test_subject_percentage() -> None:
    assert calculate_subject_attendance_percentage(0, 10) == 0.0
    assert calculate_subject_attendance_percentage(3, 0) == 0.0
    assert calculate_subject_attendance_percentage(7, 9) == 77.78


def test_group_attendance_by_subject() -> None:
    records = [
        {"subject_name": "Maths", "subject_id": "m", "sessions": "2026", "status": "Present", "date": date(2026, 10, 19)},
        {"subject_name": "Maths", "subject_id": "m", "sessions": "2026", "status": "Absent", "date": date(2026, 10, 20)},
        {"subject_name": "Art", "subject_id": "a", "status": "Present", "date": date(2026, 10, 19)},
        {"subject_name": None, "status": "Present", "date": date(2026, 10, 19)},
    ]
    grouped = group_attendance_by_subject(records)

    assert set(grouped) == {"Maths", "Art"}
    assert grouped["Maths"]["present"] == 1
    assert grouped["Maths"]["absent"] == 1
    assert grouped["Maths"]["sessions"] == "2026"
    assert grouped["Maths"]["sub_id"] == "m"
    assert [d["status"] for d in grouped["Maths"]["all_data"]] == ["Present", "Absent"]
    assert grouped["Art"]["sessions"] is None
