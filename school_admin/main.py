import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from school_admin.api.v1.attendance.router import router as attendance_router
from school_admin.api.v1.classes.router import router as classes_router
from school_admin.api.v1.schools.router import router as schools_router
from school_admin.api.v1.students.router import router as students_router
from school_admin.api.v1.subjects.master_router import router as master_subjects_router
from school_admin.api.v1.subjects.router import router as subjects_router
from school_admin.api.v1.teachers.router import router as teachers_router
from school_admin.api.v1.timetables.router import router as timetables_router
from school_admin.core.config import settings
from school_admin.core.exceptions import ServiceError
from school_admin.core.logging import setup_logging

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


def create_app() -> FastAPI:
    setup_logging(settings.log_level, settings.log_json)
    app = FastAPI(title="School Admin Backend")

    # CORS: allow the admin frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Every failure goes out as {"message": "..."}
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ServiceError, service_error_handler)

    # Routers
    app.include_router(schools_router)
    app.include_router(classes_router)
    app.include_router(students_router)
    app.include_router(subjects_router)
    app.include_router(master_subjects_router)
    app.include_router(teachers_router)
    app.include_router(timetables_router)
    app.include_router(attendance_router)

    return app


app = create_app()
