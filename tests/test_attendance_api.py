from uuid import uuid4

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_summary_of_student_without_records(client: AsyncClient, make_student) -> None:
    student = await make_student("Asha")
    response = await client.get(f"/api/v1/attendance/student/{student['_id']}/summary")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 0
    assert data["overallPercentage"] == 0.0
    assert data["absentPercentage"] == 100.0
    assert data["display"] == "0%"
    assert data["subjects"] == []


@pytest.mark.asyncio
async def test_record_and_summarize(client: AsyncClient, make_class, make_subjects, make_student) -> None:
    cl = await make_class("Grade 5")
    maths, art = await make_subjects(cl["_id"], "Maths", "Art")
    student = await make_student("Asha", class_id=cl["_id"])

    marks = [
        (maths, "2026-10-19", "Present"),
        (maths, "2026-10-20", "Present"),
        (maths, "2026-10-21", "Absent"),
        (art, "2026-10-19", "Present"),
    ]
    for subject, day, status in marks:
        response = await client.post(
            "/api/v1/attendance",
            json={"studentId": student["_id"], "subjectId": subject["_id"], "date": day, "status": status},
        )
        assert response.status_code == 201, response.text

    records = (await client.get(f"/api/v1/attendance/student/{student['_id']}")).json()
    assert len(records) == 4
    assert records[0]["subjectName"] in {"Maths", "Art"}

    data = (await client.get(f"/api/v1/attendance/student/{student['_id']}/summary")).json()
    assert data["total"] == 4
    assert data["overallPercentage"] == 75.0
    assert data["absentPercentage"] == 25.0
    assert data["display"] == "75%"

    by_name = {s["subjectName"]: s for s in data["subjects"]}
    assert by_name["Maths"]["present"] == 2
    assert by_name["Maths"]["absent"] == 1
    assert by_name["Maths"]["percentage"] == 66.67
    assert by_name["Maths"]["display"] == "66.67%"
    assert by_name["Maths"]["sessions"] == "2026"
    assert by_name["Art"]["display"] == "100%"


@pytest.mark.asyncio
async def test_same_day_record_is_replaced(client: AsyncClient, make_student) -> None:
    student = await make_student("Ravi")
    for status in ("Absent", "Present"):
        await client.post(
            "/api/v1/attendance",
            json={"studentId": student["_id"], "date": "2026-10-19", "status": status},
        )

    records = (await client.get(f"/api/v1/attendance/student/{student['_id']}")).json()
    assert [r["status"] for r in records] == ["Present"]


@pytest.mark.asyncio
async def test_attendance_rejects_subject_outside_class(
    client: AsyncClient, make_class, make_subjects, make_student
) -> None:
    cl = await make_class("Grade 5")
    other = await make_class("Grade 6")
    (drama,) = await make_subjects(other["_id"], "Drama")
    student = await make_student("Meera", class_id=cl["_id"])

    response = await client.post(
        "/api/v1/attendance",
        json={"studentId": student["_id"], "subjectId": drama["_id"], "date": "2026-10-19", "status": "Present"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_attendance_validation(client: AsyncClient, make_student) -> None:
    student = await make_student("Leo")
    response = await client.post(
        "/api/v1/attendance",
        json={"studentId": student["_id"], "date": "2026-10-19", "status": "Late"},
    )
    assert response.status_code == 422

    response = await client.get(f"/api/v1/attendance/student/{uuid4()}/summary")
    assert response.status_code == 404
