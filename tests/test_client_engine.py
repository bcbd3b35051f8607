from uuid import UUID, uuid4

import httpx
import pytest
from httpx import AsyncClient

from school_admin.client.engine import SchoolAdminClient
from school_admin.client.errors import PRECONDITION, SERVER, TRANSPORT, ClientError
from school_admin.client.schemas import StudentView, TeacherView
from school_admin.core.timetable_grid import TimetableGrid


@pytest.fixture()
def engine_client(client: AsyncClient) -> SchoolAdminClient:
    return SchoolAdminClient(client)


def test_student_class_reference_normalized() -> None:
    class_id = uuid4()
    bare = StudentView.model_validate({"_id": str(uuid4()), "name": "Asha", "sclassName": str(class_id)})
    populated = StudentView.model_validate(
        {"_id": str(uuid4()), "name": "Ravi", "sclassName": {"_id": str(class_id), "sclassName": "Grade 5"}}
    )
    unassigned = StudentView.model_validate({"_id": str(uuid4()), "name": "Ben", "sclassName": None})

    assert bare.class_id == populated.class_id == class_id
    assert bare.sclass_name.sclass_name is None
    assert populated.sclass_name.sclass_name == "Grade 5"
    assert unassigned.class_id is None


def test_teacher_view_accepts_bare_class_ids() -> None:
    class_id = uuid4()
    view = TeacherView.model_validate(
        {"_id": str(uuid4()), "name": "Priya", "teachSclass": [str(class_id)], "classTeacherOf": None}
    )
    assert view.teaches_in(class_id)
    assert view.class_teacher_of == []


@pytest.mark.asyncio
async def test_bulk_assign_stops_at_first_failure(
    engine_client: SchoolAdminClient, make_class, make_student
) -> None:
    target = await make_class("Grade 5")
    elsewhere = await make_class("Grade 6")
    first = await make_student("Asha")
    blocked = await make_student("Ravi", class_id=elsewhere["_id"])
    never = await make_student("Ben")

    result = await engine_client.assign_students_to_class(
        target["_id"], [first["_id"], blocked["_id"], never["_id"]]
    )

    assert result.succeeded == [UUID(first["_id"])]
    assert result.failed.item_id == UUID(blocked["_id"])
    assert result.failed.status_code == 409
    assert result.skipped == [UUID(never["_id"])]
    assert not result.ok

    # Earlier calls stay applied; the refetched roster is authoritative
    roster = await engine_client.get_class_students(target["_id"])
    assert [s.id for s in roster] == [UUID(first["_id"])]
    unassigned = await engine_client.get_unassigned_students(target["schoolId"])
    assert [s.id for s in unassigned] == [UUID(never["_id"])]


@pytest.mark.asyncio
async def test_bulk_assign_all_succeed(engine_client: SchoolAdminClient, make_class, make_student) -> None:
    cl = await make_class("Grade 7")
    students = [await make_student(f"Student {i}") for i in range(3)]
    result = await engine_client.assign_students_to_class(cl["_id"], [s["_id"] for s in students])
    assert result.ok
    assert len(result.succeeded) == 3
    assert result.skipped == []


@pytest.mark.asyncio
async def test_server_error_carries_message(engine_client: SchoolAdminClient, make_class) -> None:
    cl = await make_class("Grade 5")
    with pytest.raises(ClientError) as excinfo:
        await engine_client.assign_student_to_class(cl["_id"], uuid4())
    assert excinfo.value.kind == SERVER
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Student not found"


@pytest.mark.asyncio
async def test_preconditions_checked_before_any_request() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test") as http:
        engine = SchoolAdminClient(http)
        with pytest.raises(ClientError) as excinfo:
            await engine.assign_student_to_class("", uuid4())
        assert excinfo.value.kind == PRECONDITION
        with pytest.raises(ClientError):
            await engine.remove_teacher_subjects(uuid4(), [])
        with pytest.raises(ClientError):
            await engine.assign_students_to_class(uuid4(), [uuid4(), "not-an-id"])
        with pytest.raises(ClientError):
            await engine.save_timetable(TimetableGrid(), None)
    assert calls == []


@pytest.mark.asyncio
async def test_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test") as http:
        with pytest.raises(ClientError) as excinfo:
            await SchoolAdminClient(http).get_teacher(uuid4())
    assert excinfo.value.kind == TRANSPORT
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_teacher_operations_round_trip(
    engine_client: SchoolAdminClient, make_class, make_subjects, make_teacher
) -> None:
    cl = await make_class("Grade 8")
    (maths,) = await make_subjects(cl["_id"], "Maths")
    teacher = await make_teacher("Priya Nair")

    view = await engine_client.update_teach_subject(teacher["_id"], maths["_id"])
    assert view.teaches_in(UUID(cl["_id"]))
    view = await engine_client.assign_class_teacher(teacher["_id"], cl["_id"])
    assert [c.id for c in view.class_teacher_of] == [UUID(cl["_id"])]

    view = await engine_client.remove_teacher_from_class(teacher["_id"], cl["_id"])
    assert view.teach_sclass == []
    assert view.teach_subject == []
    assert view.class_teacher_of == []


@pytest.mark.asyncio
async def test_timetable_grid_round_trip(
    engine_client: SchoolAdminClient, make_class, make_subjects, make_teacher
) -> None:
    cl = await make_class("Grade 9")
    maths, art = await make_subjects(cl["_id"], "Maths", "Art")
    teacher = await make_teacher("Omar Khan")
    await engine_client.update_teach_subject(teacher["_id"], art["_id"])

    grid = TimetableGrid(3)
    grid.set_cell("Monday", 1, UUID(maths["_id"]), "Maths")
    grid.set_cell("Thursday", 6, UUID(art["_id"]), "Art")
    admin_id = uuid4()
    await engine_client.save_timetable(grid, cl["_id"], admin_id)

    class_grid = await engine_client.get_class_timetable(cl["_id"])
    assert class_grid.break_after_period == 3
    assert class_grid.get("Monday", 1).subject == "Maths"
    assert class_grid.get("Thursday", 6).subject_id == UUID(art["_id"])
    assert len(list(class_grid.occupied())) == 2

    teacher_grid = await engine_client.get_teacher_timetable(teacher["_id"])
    assert [(d, p) for d, p, _ in teacher_grid.occupied()] == [("Thursday", 6)]
    assert teacher_grid.get("Thursday", 6).class_name == "Grade 9"

    # Clearing a cell and saving again removes it remotely
    class_grid.clear_cell("Monday", 1)
    await engine_client.save_timetable(class_grid, cl["_id"], admin_id)
    refetched = await engine_client.get_class_timetable(cl["_id"])
    assert [(d, p) for d, p, _ in refetched.occupied()] == [("Thursday", 6)]


@pytest.mark.asyncio
async def test_first_save_keeps_class_break(
    engine_client: SchoolAdminClient, client: AsyncClient, make_class, make_subjects
) -> None:
    cl = await make_class("Grade 10")
    (maths,) = await make_subjects(cl["_id"], "Maths")

    grid = await engine_client.get_class_timetable(cl["_id"])
    assert grid.break_after_period == 4

    grid.set_cell("Monday", 1, UUID(maths["_id"]), "Maths")
    await engine_client.save_timetable(grid, cl["_id"])

    stored = (await client.get(f"/api/v1/classes/{cl['_id']}")).json()
    assert stored["breakAfterPeriod"] == 4
