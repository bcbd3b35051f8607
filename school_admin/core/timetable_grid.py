"""
Weekly timetable grid.

A class (or teacher) week is a fixed Monday-Friday x Period 1-8 matrix. Rows
coming from storage are expanded into the grid with ``build_grid`` and folded
back into save entries with ``flatten_grid``. Each cell holds at most one
subject, so two subjects can never share a day/period: the last write wins.

The break is a class-level display setting (``break_after_period``); it is
never stored inside the grid. ``display_columns`` and ``TimetableGrid.rows``
insert the ``BREAK`` marker right after the configured period.
"""

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union
from uuid import UUID

from pydantic import BaseModel

from school_admin.core.enums import Weekday

DAYS: Tuple[str, ...] = tuple(d.value for d in Weekday)
PERIOD_COUNT = 8
PERIODS: Tuple[int, ...] = tuple(range(1, PERIOD_COUNT + 1))
PERIOD_LABELS: Tuple[str, ...] = tuple(f"Period {n}" for n in PERIODS)
BREAK_MARKER = "BREAK"
NO_BREAK = 0


class GridCell(BaseModel):
    free: bool = True
    subject_id: Optional[UUID] = None
    subject: Optional[str] = None
    class_id: Optional[UUID] = None
    class_name: Optional[str] = None

    class Config:
        frozen = True


FREE_CELL = GridCell()


def validate_break_after_period(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"break_after_period must be an integer, got {value!r}")
    if not NO_BREAK <= value <= PERIOD_COUNT:
        raise ValueError(f"break_after_period must be between {NO_BREAK} and {PERIOD_COUNT}")
    return value


def display_columns(break_after_period: int) -> List[str]:
    """Period header labels with the break marker inserted (none for 0)."""
    validate_break_after_period(break_after_period)
    columns: List[str] = []
    for period, label in zip(PERIODS, PERIOD_LABELS):
        columns.append(label)
        if period == break_after_period:
            columns.append(BREAK_MARKER)
    return columns


def _check_position(day: str, period: int) -> None:
    if day not in DAYS:
        raise ValueError(f"Unknown day {day!r}; expected one of {', '.join(DAYS)}")
    if isinstance(period, bool) or not isinstance(period, int) or period not in PERIODS:
        raise ValueError(f"Period must be between 1 and {PERIOD_COUNT}, got {period!r}")


class TimetableGrid:
    """Day -> period -> cell mapping. Every cell always exists; empty ones are ``FREE_CELL``."""

    def __init__(self, break_after_period: int = NO_BREAK) -> None:
        self.break_after_period = break_after_period
        self._cells: Dict[str, Dict[int, GridCell]] = {
            day: {period: FREE_CELL for period in PERIODS} for day in DAYS
        }

    @property
    def break_after_period(self) -> int:
        return self._break_after_period

    @break_after_period.setter
    def break_after_period(self, value: int) -> None:
        self._break_after_period = validate_break_after_period(value)

    def get(self, day: str, period: int) -> GridCell:
        _check_position(day, period)
        return self._cells[day][period]

    def set_cell(
        self,
        day: str,
        period: int,
        subject_id: Optional[UUID],
        subject: Optional[str] = None,
        class_id: Optional[UUID] = None,
        class_name: Optional[str] = None,
    ) -> None:
        _check_position(day, period)
        if subject_id is None and not subject:
            self._cells[day][period] = FREE_CELL
            return
        self._cells[day][period] = GridCell(
            free=False,
            subject_id=subject_id,
            subject=subject,
            class_id=class_id,
            class_name=class_name,
        )

    def clear_cell(self, day: str, period: int) -> None:
        _check_position(day, period)
        self._cells[day][period] = FREE_CELL

    def occupied(self) -> Iterator[Tuple[str, int, GridCell]]:
        for day in DAYS:
            for period in PERIODS:
                cell = self._cells[day][period]
                if not cell.free:
                    yield day, period, cell

    def columns(self) -> List[str]:
        return display_columns(self.break_after_period)

    def rows(self) -> List[Tuple[str, List[Union[GridCell, str]]]]:
        """Display rows, one per day, with ``BREAK_MARKER`` in the break position."""
        result = []
        for day in DAYS:
            row: List[Union[GridCell, str]] = []
            for period in PERIODS:
                row.append(self._cells[day][period])
                if period == self.break_after_period:
                    row.append(BREAK_MARKER)
            result.append((day, row))
        return result


def _read(slot: Any, *names: str) -> Any:
    for name in names:
        if isinstance(slot, Mapping):
            if name in slot:
                return slot[name]
        elif hasattr(slot, name):
            return getattr(slot, name)
    return None


def _as_uuid(value: Any) -> Optional[UUID]:
    if value is None or value == "":
        return None
    if isinstance(value, UUID):
        return value
    if isinstance(value, Mapping):
        value = value.get("_id") or value.get("id")
        if value is None:
            return None
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _subject_name(slot: Any) -> Optional[str]:
    name = _read(slot, "subject_name", "subjectName")
    if name is None:
        # Populated reference: {"_id": ..., "subName": ...}
        ref = _read(slot, "subject")
        if isinstance(ref, Mapping):
            name = ref.get("subName") or ref.get("sub_name")
    return name


def _as_period(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        period = int(value)
    except (TypeError, ValueError):
        return None
    return period if period in PERIODS else None


def resolve_break_after_period(rows: Iterable[Any], default: int = NO_BREAK) -> int:
    """Class-level break setting recovered from slot rows: the first valid value wins."""
    for row in rows:
        value = _read(row, "break_after_period", "breakAfterPeriod")
        if value is None:
            continue
        try:
            return validate_break_after_period(value)
        except ValueError:
            continue
    return validate_break_after_period(default)


def build_grid(slots: Iterable[Any], break_after_period: Optional[int] = None) -> TimetableGrid:
    """Expand flat slot rows (mappings or objects, camelCase or snake_case) into a grid.

    Rows with an unknown day or an out-of-range period are dropped. When
    ``break_after_period`` is None it is recovered from the rows.
    """
    slots = list(slots)
    if break_after_period is None:
        break_after_period = resolve_break_after_period(slots)
    grid = TimetableGrid(break_after_period)
    for slot in slots:
        day = _read(slot, "day")
        period = _as_period(_read(slot, "period_number", "periodNumber"))
        if day not in DAYS or period is None:
            continue
        grid.set_cell(
            day,
            period,
            subject_id=_as_uuid(_read(slot, "subject_id", "subjectId", "subject")),
            subject=_subject_name(slot),
            class_id=_as_uuid(_read(slot, "class_id", "classId")),
            class_name=_read(slot, "class_name", "className"),
        )
    return grid


def flatten_grid(
    grid: TimetableGrid,
    class_id: Union[UUID, str],
    admin_id: Optional[Union[UUID, str]] = None,
) -> List[Dict[str, Any]]:
    """Save entries for every occupied cell that has a subject id. Empty cells emit nothing."""
    entries = []
    for day, period, cell in grid.occupied():
        if cell.subject_id is None:
            continue
        entry: Dict[str, Any] = {
            "classId": str(class_id),
            "day": day,
            "periodNumber": period,
            "subject": str(cell.subject_id),
        }
        if admin_id is not None:
            entry["adminID"] = str(admin_id)
        entries.append(entry)
    return entries
