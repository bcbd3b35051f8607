from datetime import datetime
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient

from school_admin.api.v1.timetables import service as timetable_service


async def _setup(make_class, make_subjects):
    cl = await make_class("Grade 5")
    maths, science, art = await make_subjects(cl["_id"], "Maths", "Science", "Art")
    return cl, maths, science, art


def _entry(day: str, period: int, subject: dict) -> dict:
    return {"day": day, "periodNumber": period, "subject": subject["_id"]}


@pytest.mark.asyncio
async def test_save_and_read_class_timetable(client: AsyncClient, make_class, make_subjects) -> None:
    cl, maths, science, _ = await _setup(make_class, make_subjects)
    admin_id = str(uuid4())

    response = await client.post(
        "/api/v1/timetables",
        json={
            "classId": cl["_id"],
            "adminID": admin_id,
            "breakAfterPeriod": 3,
            "entries": [_entry("Tuesday", 2, science), _entry("Monday", 1, maths)],
        },
    )
    assert response.status_code == 200, response.text
    rows = response.json()
    assert [(r["day"], r["periodNumber"], r["subjectName"]) for r in rows] == [
        ("Monday", 1, "Maths"),
        ("Tuesday", 2, "Science"),
    ]
    assert all(r["breakAfterPeriod"] == 3 for r in rows)
    assert rows[0]["className"] == "Grade 5"
    assert rows[0]["subject"] == maths["_id"]

    cl_view = (await client.get(f"/api/v1/classes/{cl['_id']}")).json()
    assert cl_view["breakAfterPeriod"] == 3


@pytest.mark.asyncio
async def test_save_is_full_replace(client: AsyncClient, make_class, make_subjects) -> None:
    cl, maths, science, art = await _setup(make_class, make_subjects)
    first = [_entry("Monday", 1, maths), _entry("Monday", 2, science), _entry("Friday", 8, art)]
    await client.post("/api/v1/timetables", json={"classId": cl["_id"], "entries": first})

    response = await client.post(
        "/api/v1/timetables",
        json={"classId": cl["_id"], "entries": [_entry("Monday", 1, art)]},
    )
    assert response.status_code == 200
    rows = (await client.get(f"/api/v1/timetables/class/{cl['_id']}")).json()
    assert [(r["day"], r["periodNumber"], r["subjectName"]) for r in rows] == [("Monday", 1, "Art")]


@pytest.mark.asyncio
async def test_save_empty_entries_clears_timetable(client: AsyncClient, make_class, make_subjects) -> None:
    cl, maths, _, _ = await _setup(make_class, make_subjects)
    await client.post("/api/v1/timetables", json={"classId": cl["_id"], "entries": [_entry("Monday", 1, maths)]})

    response = await client.post("/api/v1/timetables", json={"classId": cl["_id"], "entries": []})
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_same_cell_twice_keeps_last_entry(client: AsyncClient, make_class, make_subjects) -> None:
    cl, maths, science, _ = await _setup(make_class, make_subjects)
    response = await client.post(
        "/api/v1/timetables",
        json={"classId": cl["_id"], "entries": [_entry("Wednesday", 4, maths), _entry("Wednesday", 4, science)]},
    )
    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["subjectName"] == "Science"


@pytest.mark.asyncio
async def test_save_rejects_subject_of_other_class(client: AsyncClient, make_class, make_subjects) -> None:
    cl, maths, _, _ = await _setup(make_class, make_subjects)
    other = await make_class("Grade 6")
    (foreign,) = await make_subjects(other["_id"], "Drama")

    response = await client.post(
        "/api/v1/timetables",
        json={"classId": cl["_id"], "entries": [_entry("Monday", 1, maths), _entry("Monday", 2, foreign)]},
    )
    assert response.status_code == 400
    assert (await client.get(f"/api/v1/timetables/class/{cl['_id']}")).json() == []


@pytest.mark.asyncio
async def test_save_rejects_mixed_or_missing_class(client: AsyncClient, make_class, make_subjects) -> None:
    cl, maths, _, _ = await _setup(make_class, make_subjects)
    other = await make_class("Grade 6")

    mixed = [dict(_entry("Monday", 1, maths), classId=cl["_id"]), dict(_entry("Monday", 2, maths), classId=other["_id"])]
    assert (await client.post("/api/v1/timetables", json={"entries": mixed})).status_code == 400
    assert (await client.post("/api/v1/timetables", json={"entries": []})).status_code == 400


@pytest.mark.asyncio
async def test_save_validates_positions(client: AsyncClient, make_class, make_subjects) -> None:
    cl, maths, _, _ = await _setup(make_class, make_subjects)
    for bad in (_entry("Saturday", 1, maths), _entry("Monday", 9, maths)):
        response = await client.post("/api/v1/timetables", json={"classId": cl["_id"], "entries": [bad]})
        assert response.status_code == 422
    response = await client.post(
        "/api/v1/timetables", json={"classId": cl["_id"], "entries": [], "breakAfterPeriod": 9}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_teacher_and_student_timetables(
    client: AsyncClient, make_class, make_subjects, make_teacher, make_student
) -> None:
    cl, maths, science, _ = await _setup(make_class, make_subjects)
    teacher = await make_teacher("Priya Nair")
    student = await make_student("Asha", class_id=cl["_id"])
    loner = await make_student("Ben")
    await client.put("/api/v1/teachers/teach-subject", json={"teacherId": teacher["_id"], "subjectId": maths["_id"]})
    await client.post(
        "/api/v1/timetables",
        json={"classId": cl["_id"], "entries": [_entry("Monday", 1, maths), _entry("Monday", 2, science)]},
    )

    teacher_rows = (await client.get(f"/api/v1/timetables/teacher/{teacher['_id']}")).json()
    assert [(r["day"], r["periodNumber"], r["className"]) for r in teacher_rows] == [("Monday", 1, "Grade 5")]
    assert teacher_rows[0]["teacherName"] == "Priya Nair"

    student_rows = (await client.get(f"/api/v1/timetables/student/{student['_id']}")).json()
    assert len(student_rows) == 2
    assert (await client.get(f"/api/v1/timetables/student/{loner['_id']}")).json() == []


@pytest.mark.asyncio
async def test_update_and_delete_slot(client: AsyncClient, make_class, make_subjects) -> None:
    cl, maths, science, _ = await _setup(make_class, make_subjects)
    rows = (
        await client.post("/api/v1/timetables", json={"classId": cl["_id"], "entries": [_entry("Monday", 1, maths)]})
    ).json()
    slot_id = rows[0]["_id"]

    response = await client.put(f"/api/v1/timetables/{slot_id}", json={"subject": science["_id"]})
    assert response.status_code == 200
    assert response.json()["subjectName"] == "Science"

    assert (await client.delete(f"/api/v1/timetables/{slot_id}")).status_code == 204
    assert (await client.delete(f"/api/v1/timetables/{slot_id}")).status_code == 404


@pytest.mark.asyncio
async def test_deleting_subject_removes_its_slots(client: AsyncClient, make_class, make_subjects) -> None:
    cl, maths, science, _ = await _setup(make_class, make_subjects)
    await client.post(
        "/api/v1/timetables",
        json={"classId": cl["_id"], "entries": [_entry("Monday", 1, maths), _entry("Monday", 2, science)]},
    )
    assert (await client.delete(f"/api/v1/subjects/{maths['_id']}")).status_code == 204

    rows = (await client.get(f"/api/v1/timetables/class/{cl['_id']}")).json()
    assert [r["subjectName"] for r in rows] == ["Science"]


@pytest.mark.asyncio
async def test_class_grid_has_break_column(client: AsyncClient, make_class, make_subjects) -> None:
    cl, maths, _, _ = await _setup(make_class, make_subjects)
    await client.post(
        "/api/v1/timetables",
        json={"classId": cl["_id"], "breakAfterPeriod": 2, "entries": [_entry("Monday", 3, maths)]},
    )

    grid = (await client.get(f"/api/v1/timetables/class/{cl['_id']}/grid")).json()
    assert grid["breakAfterPeriod"] == 2
    assert grid["columns"][2] == "BREAK"
    assert len(grid["columns"]) == 9
    monday = grid["days"][0]
    assert monday["day"] == "Monday"
    kinds = [c["kind"] for c in monday["cells"]]
    assert kinds == ["free", "free", "break", "slot", "free", "free", "free", "free", "free"]
    assert monday["cells"][3]["periodNumber"] == 3
    assert monday["cells"][3]["subjectName"] == "Maths"


@pytest.mark.asyncio
async def test_grid_marks_current_cell(client: AsyncClient, db_session, make_class, make_subjects) -> None:
    cl, maths, _, _ = await _setup(make_class, make_subjects)
    await client.post("/api/v1/timetables", json={"classId": cl["_id"], "entries": [_entry("Monday", 5, maths)]})

    # Monday 2026-10-19, 13:20 is period 5
    now = datetime(2026, 10, 19, 13, 20)
    grid = await timetable_service.get_class_grid(db_session, UUID(cl["_id"]), now=now)

    assert grid.current_day == "Monday"
    assert grid.current_period == 5
    current = [c for d in grid.days for c in d.cells if c.is_current]
    assert len(current) == 1
    assert current[0].subject_name == "Maths"


@pytest.mark.asyncio
async def test_teacher_grid(client: AsyncClient, make_class, make_subjects, make_teacher) -> None:
    cl, maths, _, _ = await _setup(make_class, make_subjects)
    teacher = await make_teacher("Priya Nair")
    await client.put("/api/v1/teachers/teach-subject", json={"teacherId": teacher["_id"], "subjectId": maths["_id"]})
    await client.post("/api/v1/timetables", json={"classId": cl["_id"], "entries": [_entry("Friday", 8, maths)]})

    grid = (await client.get(f"/api/v1/timetables/teacher/{teacher['_id']}/grid")).json()
    friday = grid["days"][-1]
    slots = [c for c in friday["cells"] if c["kind"] == "slot"]
    assert [(c["periodNumber"], c["className"]) for c in slots] == [(8, "Grade 5")]
