"""Attendance percentages shared by the student views and dashboards."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Union

from school_admin.core.enums import AttendanceStatus

_TWO_PLACES = Decimal("0.01")
_STATUSES = {AttendanceStatus.PRESENT.value, AttendanceStatus.ABSENT.value}


def _get(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _status(record: Any) -> str:
    status = _get(record, "status")
    return status.value if isinstance(status, AttendanceStatus) else status


def _has_date(record: Any) -> bool:
    if isinstance(record, Mapping):
        return "date" not in record or bool(record["date"])
    return not hasattr(record, "date") or bool(record.date)


def round2(value: Union[Decimal, float, int]) -> float:
    """Round half-up to two decimals (not banker's rounding)."""
    return float(Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def _percentage(part: int, total: int) -> float:
    return float((Decimal(part) * 100 / Decimal(total)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def valid_records(records: Iterable[Any]) -> List[Any]:
    return [r for r in records if _status(r) in _STATUSES and _has_date(r)]


def compute_overall_pct(records: Iterable[Any]) -> float:
    """Percentage of Present among valid records. An empty list is 0."""
    if not records:
        return 0.0
    valid = valid_records(records)
    if not valid:
        return 0.0
    present = sum(1 for r in valid if _status(r) == AttendanceStatus.PRESENT.value)
    return _percentage(present, len(valid))


def compute_absent_pct(records: Iterable[Any]) -> float:
    """Complement of the overall percentage. An empty list is 100."""
    return round2(Decimal("100") - Decimal(str(compute_overall_pct(records))))


def calculate_subject_attendance_percentage(present_count: int, total_sessions: int) -> float:
    if total_sessions == 0 or present_count == 0:
        return 0.0
    return _percentage(present_count, total_sessions)


def format_pct(value: Union[float, int, Decimal]) -> str:
    """'100%' for a full score, otherwise two decimals with a trailing '.00' dropped."""
    quantized = Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    if quantized == Decimal("100"):
        return "100%"
    text = f"{quantized:.2f}"
    if text.endswith(".00"):
        text = text[:-3]
    return f"{text}%"


def group_attendance_by_subject(records: Iterable[Any]) -> Dict[str, Dict[str, Any]]:
    """Bucket subject attendance by subject name.

    Each record needs ``subject_name``, ``subject_id``, ``status`` and ``date``;
    ``sessions`` is optional. Statuses other than Present/Absent are kept in
    ``all_data`` but not counted.
    """
    grouped: Dict[str, Dict[str, Any]] = {}
    for record in records:
        name = _get(record, "subject_name")
        if name is None:
            continue
        bucket = grouped.setdefault(
            name,
            {
                "present": 0,
                "absent": 0,
                "sessions": _get(record, "sessions"),
                "all_data": [],
                "sub_id": _get(record, "subject_id"),
            },
        )
        status = _status(record)
        if status == AttendanceStatus.PRESENT.value:
            bucket["present"] += 1
        elif status == AttendanceStatus.ABSENT.value:
            bucket["absent"] += 1
        bucket["all_data"].append({"date": _get(record, "date"), "status": status})
    return grouped
