import os
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, List, Optional

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from school_admin.core import models  # noqa: F401  registers the tables on Base
from school_admin.db.session import Base, get_db
from school_admin.main import create_app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Session for tests that call the service layer directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def app(session_factory: async_sessionmaker) -> FastAPI:
    app = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        # One session per request, like the real dependency
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ----- Data builders (through the API) -----


@pytest.fixture()
async def school(client: AsyncClient) -> Dict[str, Any]:
    response = await client.post("/api/v1/schools", json={"name": "Green Valley High"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture()
def make_class(client: AsyncClient, school: Dict[str, Any]) -> Callable[..., Awaitable[Dict[str, Any]]]:
    async def _make(name: str, school_id: Optional[str] = None) -> Dict[str, Any]:
        response = await client.post(
            "/api/v1/classes",
            json={"schoolId": school_id or school["_id"], "sclassName": name},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture()
def make_student(client: AsyncClient, school: Dict[str, Any]) -> Callable[..., Awaitable[Dict[str, Any]]]:
    async def _make(name: str, class_id: Optional[str] = None, roll_num: Optional[int] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"schoolId": school["_id"], "name": name, "rollNum": roll_num}
        if class_id is not None:
            payload["classId"] = class_id
        response = await client.post("/api/v1/students", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture()
def make_subjects(client: AsyncClient) -> Callable[..., Awaitable[List[Dict[str, Any]]]]:
    async def _make(class_id: str, *names: str) -> List[Dict[str, Any]]:
        subjects = [
            {"subName": name, "subCode": f"{name[:3].upper()}{i}", "sessions": "2026"}
            for i, name in enumerate(names, start=1)
        ]
        response = await client.post("/api/v1/subjects", json={"classId": class_id, "subjects": subjects})
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture()
def make_teacher(client: AsyncClient, school: Dict[str, Any]) -> Callable[..., Awaitable[Dict[str, Any]]]:
    async def _make(name: str, email: Optional[str] = None) -> Dict[str, Any]:
        response = await client.post(
            "/api/v1/teachers",
            json={
                "schoolId": school["_id"],
                "name": name,
                "email": email or f"{name.split()[0].lower()}@school.test",
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make
