"""Async client for the assignment and timetable operations.

Every method performs one remote mutation (or read) and returns the backend's
answer. Nothing is merged locally: after a mutation, callers re-fetch the
views they show. Bulk operations are sequential loops of independent calls
that stop at the first failure.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union
from uuid import UUID

import httpx

from school_admin.core.timetable_grid import TimetableGrid, build_grid, flatten_grid

from .errors import PRECONDITION, SERVER, TRANSPORT, ClientError
from .schemas import BulkFailure, BulkResult, StudentView, TeacherView

logger = logging.getLogger(__name__)

Id = Union[UUID, str]

API = "/api/v1"


def _require(value: Optional[Id], what: str) -> str:
    if value is None or str(value).strip() == "":
        raise ClientError(f"{what} is required", kind=PRECONDITION)
    return str(value)


def _require_uuid(value: Optional[Id], what: str) -> UUID:
    text = _require(value, what)
    try:
        return UUID(text)
    except ValueError:
        raise ClientError(f"{what} is not a valid id: {text!r}", kind=PRECONDITION)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
        if message:
            return message if isinstance(message, str) else str(message)
    return response.reason_phrase


class SchoolAdminClient:
    """Thin wrapper over an injected ``httpx.AsyncClient`` pointing at the backend."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            response = await self._http.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ClientError(f"Request failed: {exc}", kind=TRANSPORT) from exc
        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning("%s %s -> %d: %s", method, path, response.status_code, message)
            raise ClientError(message, status_code=response.status_code, kind=SERVER)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ----- Students / classes -----

    async def get_student(self, student_id: Id) -> StudentView:
        sid = _require(student_id, "studentId")
        return StudentView.model_validate(await self._request("GET", f"{API}/students/{sid}"))

    async def get_unassigned_students(self, school_id: Id) -> List[StudentView]:
        school = _require(school_id, "schoolId")
        data = await self._request("GET", f"{API}/students/unassigned/{school}")
        return [StudentView.model_validate(s) for s in data]

    async def get_class_students(self, class_id: Id) -> List[StudentView]:
        cid = _require(class_id, "classId")
        data = await self._request("GET", f"{API}/classes/{cid}/students")
        return [StudentView.model_validate(s) for s in data]

    async def assign_student_to_class(self, class_id: Id, student_id: Id) -> StudentView:
        cid = _require(class_id, "classId")
        sid = _require(student_id, "studentId")
        data = await self._request("PUT", f"{API}/classes/{cid}/assign-student/{sid}")
        return StudentView.model_validate(data)

    async def remove_student_from_class(self, class_id: Id, student_id: Id) -> StudentView:
        cid = _require(class_id, "classId")
        sid = _require(student_id, "studentId")
        data = await self._request("PUT", f"{API}/classes/{cid}/remove-student/{sid}")
        return StudentView.model_validate(data)

    async def remove_all_students_from_class(self, class_id: Id) -> Dict[str, Any]:
        cid = _require(class_id, "classId")
        return await self._request("PUT", f"{API}/classes/{cid}/remove-all-students")

    async def assign_students_to_class(self, class_id: Id, student_ids: Sequence[Id]) -> BulkResult:
        """Assign students one call at a time.

        Stops at the first failure: earlier assignments stay in effect and the
        remaining students are reported as skipped.
        """
        cid = _require(class_id, "classId")
        ids = [_require_uuid(s, "studentId") for s in student_ids]
        result = BulkResult()
        for index, sid in enumerate(ids):
            try:
                await self.assign_student_to_class(cid, sid)
            except ClientError as exc:
                result.failed = BulkFailure(item_id=sid, message=exc.message, status_code=exc.status_code)
                result.skipped = ids[index + 1:]
                logger.warning(
                    "Bulk assign to class %s stopped at student %s: %d done, %d skipped",
                    cid, sid, len(result.succeeded), len(result.skipped),
                )
                return result
            result.succeeded.append(sid)
        logger.info("Assigned %d students to class %s", len(result.succeeded), cid)
        return result

    async def delete_all_subjects(self, class_id: Id) -> int:
        cid = _require(class_id, "classId")
        data = await self._request("DELETE", f"{API}/classes/{cid}/subjects")
        return int(data.get("count") or 0)

    # ----- Teachers -----

    async def get_teacher(self, teacher_id: Id) -> TeacherView:
        tid = _require(teacher_id, "teacherId")
        return TeacherView.model_validate(await self._request("GET", f"{API}/teachers/{tid}"))

    async def _teacher_put(self, verb: str, body: Dict[str, Any]) -> TeacherView:
        return TeacherView.model_validate(await self._request("PUT", f"{API}/teachers/{verb}", json=body))

    async def assign_teacher_to_class(self, teacher_id: Id, class_id: Id) -> TeacherView:
        body = {"teacherId": _require(teacher_id, "teacherId"), "classId": _require(class_id, "classId")}
        return await self._teacher_put("assign-class", body)

    async def remove_teacher_from_class(self, teacher_id: Id, class_id: Id) -> TeacherView:
        body = {"teacherId": _require(teacher_id, "teacherId"), "classId": _require(class_id, "classId")}
        return await self._teacher_put("remove-from-class", body)

    async def update_teach_subject(self, teacher_id: Id, subject_id: Id) -> TeacherView:
        body = {"teacherId": _require(teacher_id, "teacherId"), "subjectId": _require(subject_id, "subjectId")}
        return await self._teacher_put("teach-subject", body)

    async def remove_teacher_subjects(self, teacher_id: Id, subject_ids: Iterable[Id]) -> TeacherView:
        tid = _require(teacher_id, "teacherId")
        ids = [_require(s, "subjectId") for s in subject_ids]
        if not ids:
            raise ClientError("At least one subject is required", kind=PRECONDITION)
        return await self._teacher_put("remove-subjects", {"teacherId": tid, "subjectIds": ids})

    async def assign_class_teacher(self, teacher_id: Id, class_id: Id) -> TeacherView:
        body = {"teacherId": _require(teacher_id, "teacherId"), "classId": _require(class_id, "classId")}
        return await self._teacher_put("assign-class-teacher", body)

    async def remove_class_teacher(self, teacher_id: Id, class_id: Id) -> TeacherView:
        body = {"teacherId": _require(teacher_id, "teacherId"), "classId": _require(class_id, "classId")}
        return await self._teacher_put("remove-class-teacher", body)

    # ----- Timetables -----

    async def get_class_timetable(self, class_id: Id) -> TimetableGrid:
        """The class week as a grid. With no slots saved yet, the break comes from the class itself."""
        cid = _require(class_id, "classId")
        rows = await self._request("GET", f"{API}/timetables/class/{cid}")
        if rows:
            return build_grid(rows)
        school_class = await self._request("GET", f"{API}/classes/{cid}")
        return build_grid(rows, school_class["breakAfterPeriod"])

    async def get_teacher_timetable(self, teacher_id: Id) -> TimetableGrid:
        tid = _require(teacher_id, "teacherId")
        return build_grid(await self._request("GET", f"{API}/timetables/teacher/{tid}"))

    async def save_timetable(
        self,
        grid: TimetableGrid,
        class_id: Id,
        admin_id: Optional[Id] = None,
    ) -> List[Dict[str, Any]]:
        """Replace the class timetable with the grid's occupied cells."""
        cid = _require(class_id, "classId")
        body: Dict[str, Any] = {
            "classId": cid,
            "entries": flatten_grid(grid, cid, admin_id),
            "breakAfterPeriod": grid.break_after_period,
        }
        if admin_id is not None:
            body["adminID"] = str(admin_id)
        data = await self._request("POST", f"{API}/timetables", json=body)
        logger.info("Saved timetable for class %s: %d slots", cid, len(body["entries"]))
        return data
